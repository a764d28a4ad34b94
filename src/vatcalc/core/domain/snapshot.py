"""
HistorySnapshot — персистентная форма истории расчётов

Версионированный конверт, который передаётся persistence-коллаборатору
при каждой мутации HistoryStore и восстанавливается при старте.
Полная совместимость с JSON Schema (contracts/schema/history_snapshot.json).
"""

from typing import Final, List

from pydantic import BaseModel, Field

from .calculation import CalculationResult

# Текущая версия схемы снапшота (для миграций)
HISTORY_SCHEMA_VERSION: Final[int] = 1

# Фиксированный ключ (namespace) хранения истории
HISTORY_STORAGE_KEY: Final[str] = "vat-calculator-history"


class HistoryState(BaseModel):
    """Содержимое истории: записи (most-recent-first) и ёмкость."""

    history: List[CalculationResult] = Field(
        default_factory=list, description="Записи истории, новые первыми"
    )
    max_history_size: int = Field(..., gt=0, description="Ёмкость истории")

    model_config = {"frozen": True}


class HistorySnapshot(BaseModel):
    """
    Снапшот истории с версией схемы.

    Immutable модель (frozen=True). Формат:
        {"version": 1, "state": {"history": [...], "max_history_size": 10}}
    """

    version: int = Field(HISTORY_SCHEMA_VERSION, ge=0, description="Версия схемы")
    state: HistoryState = Field(..., description="Состояние истории")

    model_config = {"frozen": True}
