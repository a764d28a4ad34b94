"""
Rounding Policy — детерминированное денежное округление

Модуль обеспечивает численную устойчивость денежных расчётов:
- Округление до N знаков с коррекцией двоичной погрешности float
- NaN/Inf проверки для валидационного шлюза
- Epsilon-сравнения и валидация диапазонов

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. round_to_decimal(0.1 + 0.2, 2) == 0.30 (дрейф float скорректирован)
2. Округление никогда не бросает исключений для finite входа
3. Все операции детерминированы и воспроизводимы
"""

import math
import sys
from typing import Final

# =============================================================================
# EPSILON-ПАРАМЕТРЫ
# =============================================================================

# Машинный epsilon (аналог Number.EPSILON), добавляется перед масштабированием
EPS_MACHINE: Final[float] = sys.float_info.epsilon

# Количество знаков после запятой для денежных сумм
MONEY_DECIMALS: Final[int] = 2

# Абсолютная толерантность для сравнений денежных сумм (меньше полкопейки)
EPS_MONEY_COMPARE_ABS: Final[float] = 1e-9


# =============================================================================
# ОКРУГЛЕНИЕ
# =============================================================================


def round_to_decimal(value: float, places: int = MONEY_DECIMALS) -> float:
    """
    Округление до заданного числа знаков после запятой.

    Алгоритм:
        1. К значению добавляется машинный epsilon (компенсация x.xx49999...)
        2. Значение масштабируется на 10^places
        3. Половина округляется вверх: floor(scaled + 0.5)
        4. Результат масштабируется обратно

    Для положительных значений это round half away from zero. Для
    отрицательных половина уходит к +inf: -10.125 → -10.12.

    Args:
        value: Исходное значение
        places: Количество знаков после запятой (default: 2)

    Returns:
        Округлённое значение. NaN/Inf возвращаются как есть (отсекаются
        выше по потоку в VatEngine).

    Examples:
        >>> round_to_decimal(0.1 + 0.2)
        0.3
        >>> round_to_decimal(10.125)
        10.13
        >>> round_to_decimal(-10.125)
        -10.12
    """
    if not is_valid_float(value):
        return value

    multiplier = 10.0 ** places
    scaled = (value + EPS_MACHINE) * multiplier

    if not is_valid_float(scaled):
        return value

    steps = math.floor(scaled + 0.5)
    return steps / multiplier


# =============================================================================
# NaN/Inf ПРОВЕРКИ
# =============================================================================


def is_valid_float(value: float) -> bool:
    """
    Проверка, является ли float валидным (не NaN, не Inf).

    Returns:
        True если значение валидное (finite), False если NaN или Inf
    """
    return math.isfinite(value)


# =============================================================================
# EPSILON-СРАВНЕНИЯ
# =============================================================================


def is_money_equal(a: float, b: float, tol: float = EPS_MONEY_COMPARE_ABS) -> bool:
    """
    Сравнение двух денежных сумм с точностью до копейки.

    Обе суммы округляются до 2 знаков, затем сравниваются с абсолютной
    толерантностью.

    Examples:
        >>> is_money_equal(0.1 + 0.2, 0.3)
        True
        >>> is_money_equal(1.0, 1.01)
        False
    """
    return abs(round_to_decimal(a) - round_to_decimal(b)) <= tol


def is_positive(value: float, tol: float = 0.0) -> bool:
    """True если value > tol."""
    return value > tol


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_non_negative(value: float, name: str) -> None:
    """
    Валидация, что значение неотрицательное.

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)

    Raises:
        ValueError: Если value < 0 или NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def validate_in_range(
    value: float,
    name: str,
    min_value: float | None = None,
    max_value: float | None = None,
) -> None:
    """
    Валидация, что значение в заданном диапазоне (границы включены).

    Raises:
        ValueError: Если value вне диапазона или NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if min_value is not None and value < min_value:
        raise ValueError(f"{name} must be >= {min_value}, got {value}")

    if max_value is not None and value > max_value:
        raise ValueError(f"{name} must be <= {max_value}, got {value}")
