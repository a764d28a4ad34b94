"""
VAT Engine — расчёт НДС в двух направлениях

Чистые функции:
- add_vat: цена без НДС → сумма НДС и итог
- extract_vat: итог с НДС → цена без НДС и сумма НДС
- calculate_vat: диспетчер по режиму

Каждая денежная компонента округляется независимо, итог выводится из уже
округлённых компонент. Это гарантирует excl + vat == incl до копейки ценой
теоретически минимальной ошибки округления.
"""

from datetime import datetime, timezone
from typing import Final, Optional

from pydantic import ValidationError

from vatcalc.core.domain.calculation import CalculationMode, CalculationResult
from vatcalc.core.math.rounding import (
    is_valid_float,
    round_to_decimal,
    validate_in_range,
    validate_non_negative,
)

VAT_RATE_MIN: Final[float] = 0.0
VAT_RATE_MAX: Final[float] = 100.0


class InvalidArgument(ValueError):
    """
    Недопустимый аргумент расчёта.

    Единственный тип ошибки движка: отрицательная сумма, ставка вне
    [0, 100], NaN/Inf на входе или переполнение float
    в компонентах результата. Поднимается синхронно, не ретраится.
    """
    pass


def _now_utc_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def _validate_amount(value: float, name: str) -> None:
    try:
        validate_non_negative(value, name)
    except ValueError as e:
        raise InvalidArgument(str(e)) from e


def _validate_rate(vat_rate: float) -> None:
    try:
        validate_in_range(vat_rate, "vat_rate", VAT_RATE_MIN, VAT_RATE_MAX)
    except ValueError as e:
        raise InvalidArgument(str(e)) from e


def _build_result(
    mode: CalculationMode,
    vat_rate: float,
    price_excluding_vat: float,
    vat_amount: float,
    price_including_vat: float,
    ts_utc_ms: Optional[int],
) -> CalculationResult:
    """
    Сборка CalculationResult из округлённых компонент.

    Сумма на границе float (например, 1.7e308 при ставке 100%) даёт inf в
    компонентах; такой расчёт отклоняется как InvalidArgument, а не как
    ошибка модели.
    """
    components = {
        "price_excluding_vat": price_excluding_vat,
        "vat_amount": vat_amount,
        "price_including_vat": price_including_vat,
    }
    for name, value in components.items():
        if not is_valid_float(value):
            raise InvalidArgument(f"{name} is out of float range, got {value}")

    try:
        return CalculationResult(
            mode=mode,
            vat_rate=vat_rate,
            ts_utc_ms=_now_utc_ms() if ts_utc_ms is None else ts_utc_ms,
            **components,
        )
    except ValidationError as e:
        raise InvalidArgument(f"Calculation result rejected: {e}") from e


def add_vat(price: float, vat_rate: float, ts_utc_ms: Optional[int] = None) -> CalculationResult:
    """
    Добавление НДС к цене без НДС (exclusive расчёт).

    Формулы:
        price_excluding_vat = round(price)
        vat_amount = round(price * vat_rate / 100)   # от НЕокруглённой цены
        price_including_vat = round(price_excluding_vat + vat_amount)

    Args:
        price: Цена без НДС (>= 0)
        vat_rate: Ставка НДС в процентах, например 7.5
        ts_utc_ms: Время расчёта (default: текущее время)

    Returns:
        CalculationResult в режиме ADD

    Raises:
        InvalidArgument: price < 0, vat_rate вне [0, 100] или переполнение float

    Examples:
        >>> r = add_vat(99.99, 7.5)
        >>> (r.price_excluding_vat, r.vat_amount, r.price_including_vat)
        (99.99, 7.5, 107.49)
    """
    _validate_amount(price, "price")
    _validate_rate(vat_rate)

    price_excluding_vat = round_to_decimal(price)
    vat_amount = round_to_decimal(price * (vat_rate / 100))
    price_including_vat = round_to_decimal(price_excluding_vat + vat_amount)

    return _build_result(
        CalculationMode.ADD,
        vat_rate,
        price_excluding_vat,
        vat_amount,
        price_including_vat,
        ts_utc_ms,
    )


def extract_vat(total: float, vat_rate: float, ts_utc_ms: Optional[int] = None) -> CalculationResult:
    """
    Выделение НДС из итоговой суммы (inclusive расчёт).

    Формулы:
        price_including_vat = round(total)
        price_excluding_vat = round(total / (1 + vat_rate / 100))
        vat_amount = round(price_including_vat - price_excluding_vat)

    vat_amount — разность округлённых значений, поэтому может отличаться
    до полкопейки от round(total * rate / (100 + rate)).

    Raises:
        InvalidArgument: total < 0, vat_rate вне [0, 100] или переполнение float

    Examples:
        >>> r = extract_vat(12900, 7.5)
        >>> (r.price_excluding_vat, r.vat_amount, r.price_including_vat)
        (12000.0, 900.0, 12900.0)
    """
    _validate_amount(total, "total")
    _validate_rate(vat_rate)

    price_including_vat = round_to_decimal(total)
    price_excluding_vat = round_to_decimal(total / (1 + vat_rate / 100))
    vat_amount = round_to_decimal(price_including_vat - price_excluding_vat)

    return _build_result(
        CalculationMode.EXTRACT,
        vat_rate,
        price_excluding_vat,
        vat_amount,
        price_including_vat,
        ts_utc_ms,
    )


def calculate_vat(
    amount: float,
    vat_rate: float,
    mode: CalculationMode,
    ts_utc_ms: Optional[int] = None,
) -> CalculationResult:
    """Диспетчер расчёта по режиму. Валидация — внутри ветки."""
    if mode == CalculationMode.ADD:
        return add_vat(amount, vat_rate, ts_utc_ms)
    return extract_vat(amount, vat_rate, ts_utc_ms)
