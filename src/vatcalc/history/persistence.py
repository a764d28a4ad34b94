"""
History Persistence — коллабораторы хранения истории расчётов

Контракт:
- load() при старте: восстановленный снапшот (список записей, новые первыми)
  или пустой список, если снапшота нет
- save(entries, max_history_size) после каждой мутации HistoryStore: полный
  снапшот и ёмкость владеющего store

Снапшот хранится под фиксированным ключом и тегирован версией схемы:
    {"version": 1, "state": {"history": [...], "max_history_size": 10}}

Повреждённый снапшот, нарушение JSON Schema контракта или неизвестная
версия не роняют приложение: пишется WARNING, история начинается пустой.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

import jsonschema
from pydantic import ValidationError

from vatcalc.core.contracts import validate_history_snapshot
from vatcalc.core.domain.calculation import CalculationResult
from vatcalc.core.domain.snapshot import (
    HISTORY_SCHEMA_VERSION,
    HISTORY_STORAGE_KEY,
    HistorySnapshot,
    HistoryState,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY_SIZE = 10


class HistoryPersistence(Protocol):
    """Persistence-коллаборатор HistoryStore."""

    def load(self) -> List[CalculationResult]:
        ...

    def save(
        self,
        entries: Sequence[CalculationResult],
        max_history_size: int = DEFAULT_MAX_HISTORY_SIZE,
    ) -> None:
        ...


# =============================================================================
# SNAPSHOT (DE)SERIALIZATION
# =============================================================================


def build_snapshot(
    entries: Sequence[CalculationResult],
    max_history_size: int = DEFAULT_MAX_HISTORY_SIZE,
) -> Dict[str, Any]:
    """Сборка JSON-совместимого снапшота истории текущей версии."""
    snapshot = HistorySnapshot(
        version=HISTORY_SCHEMA_VERSION,
        state=HistoryState(history=list(entries), max_history_size=max_history_size),
    )
    return snapshot.model_dump(mode="json")


def _migrate(data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Миграция снапшота к текущей версии схемы.

    Версия 1 — текущая. Прочие версии отбрасываются (None).
    """
    version = data.get("version")
    if version == HISTORY_SCHEMA_VERSION:
        return data
    logger.warning(
        "Discarding history snapshot with unsupported version %r (current %d)",
        version,
        HISTORY_SCHEMA_VERSION,
    )
    return None


def parse_snapshot(data: Any) -> List[CalculationResult]:
    """
    Разбор снапшота: JSON Schema контракт → миграция → Pydantic модели.

    Args:
        data: Сырые данные снапшота (dict из JSON)

    Returns:
        Записи истории (новые первыми); пустой список, если снапшот
        невалиден или версия не поддерживается
    """
    if not isinstance(data, dict):
        logger.warning("Discarding history snapshot: expected object, got %s", type(data).__name__)
        return []

    migrated = _migrate(data)
    if migrated is None:
        return []

    try:
        validate_history_snapshot(migrated)
        snapshot = HistorySnapshot.model_validate(migrated)
    except jsonschema.ValidationError as e:
        logger.warning("Discarding history snapshot violating contract: %s", e.message)
        return []
    except ValidationError as e:
        logger.warning("Discarding history snapshot with invalid entries: %s", e)
        return []

    return list(snapshot.state.history)


# =============================================================================
# IN-MEMORY TRANSPORT
# =============================================================================


class InMemoryHistoryPersistence:
    """
    Хранение снапшота в памяти процесса.

    Транспорт без файла (тесты, встраивание); last_snapshot хранит последний
    сохранённый JSON-совместимый снапшот.
    """

    def __init__(self, snapshot: Optional[Dict[str, Any]] = None):
        self.last_snapshot = snapshot
        self.save_count = 0

    def load(self) -> List[CalculationResult]:
        if self.last_snapshot is None:
            return []
        return parse_snapshot(self.last_snapshot)

    def save(
        self,
        entries: Sequence[CalculationResult],
        max_history_size: int = DEFAULT_MAX_HISTORY_SIZE,
    ) -> None:
        self.last_snapshot = build_snapshot(entries, max_history_size)
        self.save_count += 1


# =============================================================================
# JSON FILE TRANSPORT
# =============================================================================


class JsonFileHistoryPersistence:
    """
    Хранение снапшота в JSON-файле.

    Файл — JSON-объект {storage_key: snapshot}, прочие ключи сохраняются
    без изменений. Запись атомарная: временный файл + os.replace.
    """

    def __init__(self, path: Path | str, storage_key: str = HISTORY_STORAGE_KEY):
        self.path = Path(path)
        self.storage_key = storage_key

    def _read_document(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Cannot read history file %s: %s", self.path, e)
            return {}
        if not isinstance(document, dict):
            logger.warning("History file %s is not a JSON object, ignoring", self.path)
            return {}
        return document

    def load(self) -> List[CalculationResult]:
        document = self._read_document()
        if self.storage_key not in document:
            return []
        entries = parse_snapshot(document[self.storage_key])
        logger.debug("Loaded %d history entries from %s", len(entries), self.path)
        return entries

    def save(
        self,
        entries: Sequence[CalculationResult],
        max_history_size: int = DEFAULT_MAX_HISTORY_SIZE,
    ) -> None:
        """
        Сохранение полного снапшота под storage_key.

        Raises:
            OSError: Если файл не удалось записать
        """
        document = self._read_document()
        document[self.storage_key] = build_snapshot(entries, max_history_size)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.debug("Saved %d history entries to %s", len(entries), self.path)
