"""
Core math modules для vatcalc

Денежное округление и численные проверки с гарантией детерминированности.
"""

# Rounding Policy
from vatcalc.core.math.rounding import (
    # Epsilon constants
    EPS_MACHINE,
    EPS_MONEY_COMPARE_ABS,
    MONEY_DECIMALS,
    # Rounding
    round_to_decimal,
    # NaN/Inf checks
    is_valid_float,
    # Comparisons
    is_money_equal,
    is_positive,
    # Validation
    validate_in_range,
    validate_non_negative,
)

__all__ = [
    # Rounding — Constants
    "EPS_MACHINE",
    "EPS_MONEY_COMPARE_ABS",
    "MONEY_DECIMALS",
    # Rounding — Functions
    "round_to_decimal",
    # NaN/Inf checks
    "is_valid_float",
    # Comparisons
    "is_money_equal",
    "is_positive",
    # Validation
    "validate_in_range",
    "validate_non_negative",
]
