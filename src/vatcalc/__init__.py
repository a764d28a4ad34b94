"""
vatcalc — VAT calculator core.

Deterministic add/extract VAT arithmetic, a bounded audit history of recent
calculations and the auto-save state machine deciding when a result is
committed to that history.
"""

__version__ = "1.0.0"
