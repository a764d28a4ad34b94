"""
History — ограниченный audit trail расчётов НДС.

- HistoryStore: коллекция записей с вытеснением самых старых
- HistoryPersistence: коллабораторы хранения снапшота (память, JSON-файл)
- CSV экспорт истории
"""

from .export import (
    HISTORY_CSV_HEADERS,
    convert_to_csv,
    default_export_filename,
    export_history_csv,
    history_to_rows,
)
from .persistence import (
    DEFAULT_MAX_HISTORY_SIZE,
    HistoryPersistence,
    InMemoryHistoryPersistence,
    JsonFileHistoryPersistence,
    build_snapshot,
    parse_snapshot,
)
from .store import HistoryConfig, HistoryStore

__all__ = [
    # Store
    "HistoryConfig",
    "HistoryStore",
    # Persistence
    "DEFAULT_MAX_HISTORY_SIZE",
    "HistoryPersistence",
    "InMemoryHistoryPersistence",
    "JsonFileHistoryPersistence",
    "build_snapshot",
    "parse_snapshot",
    # Export
    "HISTORY_CSV_HEADERS",
    "convert_to_csv",
    "default_export_filename",
    "export_history_csv",
    "history_to_rows",
]
