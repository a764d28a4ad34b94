"""Валидационный шлюз перед VatEngine.

Некорректный или неполный текстовый ввод (пусто, не число, NaN/Inf,
вне диапазона) — не ошибка, а состояние "результата нет": функции
возвращают None и никогда не бросают исключений.
"""

import re
from typing import Final, Optional, Tuple

from vatcalc.core.math.rounding import is_valid_float

from .vat_engine import VAT_RATE_MAX, VAT_RATE_MIN

# Допустимый текст поля ввода: цифры и не более одной десятичной точки
INPUT_PATTERN: Final[re.Pattern] = re.compile(r"^\d*\.?\d*$")


def is_acceptable_input(text: str) -> bool:
    """True если текст можно принять в поле суммы/ставки."""
    return INPUT_PATTERN.fullmatch(text) is not None


def parse_number(text: str) -> Optional[float]:
    """
    Разбор текста в finite float.

    Examples:
        >>> parse_number("12.5")
        12.5
        >>> parse_number("") is None
        True
        >>> parse_number(".") is None
        True
    """
    if text is None or text.strip() == "":
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not is_valid_float(value):
        return None
    return value


def parse_calculation_inputs(amount_text: str, vat_rate_text: str) -> Optional[Tuple[float, float]]:
    """
    Валидация пары (сумма, ставка) перед расчётом.

    Оба поля непустые, разбираются в finite числа, сумма >= 0,
    ставка в [0, 100]. Иначе None.
    """
    amount = parse_number(amount_text)
    vat_rate = parse_number(vat_rate_text)
    if amount is None or vat_rate is None:
        return None
    if amount < 0:
        return None
    if vat_rate < VAT_RATE_MIN or vat_rate > VAT_RATE_MAX:
        return None
    return amount, vat_rate
