"""
Domain models and value objects.

Contains the calculation result value object and the persisted history snapshot.
"""

from vatcalc.core.domain.calculation import (
    CalculationMode,
    CalculationResult,
    content_key,
)
from vatcalc.core.domain.snapshot import (
    HISTORY_SCHEMA_VERSION,
    HISTORY_STORAGE_KEY,
    HistorySnapshot,
    HistoryState,
)

__all__ = [
    # Calculation model
    "CalculationMode",
    "CalculationResult",
    "content_key",
    # Snapshot model
    "HISTORY_SCHEMA_VERSION",
    "HISTORY_STORAGE_KEY",
    "HistorySnapshot",
    "HistoryState",
]
