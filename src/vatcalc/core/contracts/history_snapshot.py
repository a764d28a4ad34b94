"""
Контракт history_snapshot — JSON Schema персистентного снапшота истории.

Снапшот проверяется по схеме до разбора в Pydantic модели: нарушение
контракта отличается от нарушения доменных инвариантов (excl + vat == incl).
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Final

import jsonschema
from jsonschema import Draft202012Validator

# Схемы поставляются вместе с пакетом
SCHEMA_DIR: Final[Path] = Path(__file__).parent / "schema"
HISTORY_SNAPSHOT_SCHEMA_PATH: Final[Path] = SCHEMA_DIR / "history_snapshot.json"


@lru_cache(maxsize=None)
def load_history_snapshot_schema() -> Dict[str, Any]:
    """
    Загрузка схемы history_snapshot (один раз на процесс).

    Raises:
        ValueError: Если схема сама по себе невалидна (meta-validation)
    """
    with open(HISTORY_SNAPSHOT_SCHEMA_PATH, "r", encoding="utf-8") as f:
        schema = json.load(f)

    try:
        Draft202012Validator.check_schema(schema)
    except jsonschema.SchemaError as e:
        raise ValueError(f"Invalid JSON Schema in {HISTORY_SNAPSHOT_SCHEMA_PATH.name}: {e}") from e

    return schema


@lru_cache(maxsize=None)
def _history_snapshot_validator() -> Draft202012Validator:
    return Draft202012Validator(load_history_snapshot_schema())


def validate_history_snapshot(data: Dict[str, Any]) -> None:
    """
    Проверка снапшота истории по контракту.

    Raises:
        jsonschema.ValidationError: Первое найденное нарушение контракта
    """
    _history_snapshot_validator().validate(data)
