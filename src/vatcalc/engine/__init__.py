"""VAT Engine — чистые функции расчёта НДС и валидационный шлюз ввода."""

from .validation import (
    INPUT_PATTERN,
    is_acceptable_input,
    parse_calculation_inputs,
    parse_number,
)
from .vat_engine import (
    VAT_RATE_MAX,
    VAT_RATE_MIN,
    InvalidArgument,
    add_vat,
    calculate_vat,
    extract_vat,
)

__all__ = [
    # Engine
    "VAT_RATE_MAX",
    "VAT_RATE_MIN",
    "InvalidArgument",
    "add_vat",
    "calculate_vat",
    "extract_vat",
    # Validation gate
    "INPUT_PATTERN",
    "is_acceptable_input",
    "parse_calculation_inputs",
    "parse_number",
]
