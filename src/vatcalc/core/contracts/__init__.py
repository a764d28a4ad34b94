"""
Contract Validation Module

JSON Schema контракт персистентного снапшота истории vatcalc.
"""

from .history_snapshot import load_history_snapshot_schema, validate_history_snapshot

__all__ = [
    "load_history_snapshot_schema",
    "validate_history_snapshot",
]
