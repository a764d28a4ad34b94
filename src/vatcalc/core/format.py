"""
Форматирование для отображения: валюта (Naira), проценты, дата/время.

Все функции чистые; временная зона по умолчанию — локальная.
"""

from datetime import datetime, tzinfo
from typing import Final, Optional

CURRENCY_SYMBOL: Final[str] = "₦"


def format_currency(amount: float) -> str:
    """
    Сумма в нигерийских найрах, 2 знака, разделитель тысяч.

    Examples:
        >>> format_currency(1234.56)
        '₦1,234.56'
        >>> format_currency(-5)
        '-₦5.00'
    """
    sign = "-" if amount < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(amount):,.2f}"


def format_percentage(value: float) -> str:
    """7.5 → '7.5%', 10.0 → '10%'."""
    return f"{value:g}%"


def _to_datetime(ts_utc_ms: int, tz: Optional[tzinfo]) -> datetime:
    return datetime.fromtimestamp(ts_utc_ms / 1000, tz=tz)


def format_date_time(ts_utc_ms: int, tz: Optional[tzinfo] = None) -> str:
    """
    Дата и время в 12-часовом формате.

    Examples:
        >>> format_date_time(1768146300000, tz=timezone.utc)
        'Jan 11, 2026, 3:45 PM'
    """
    dt = _to_datetime(ts_utc_ms, tz)
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    return f"{dt:%b} {dt.day}, {dt.year}, {hour}:{dt.minute:02d} {meridiem}"


def format_date(ts_utc_ms: int, tz: Optional[tzinfo] = None) -> str:
    """Короткая дата dd/mm/yyyy."""
    return f"{_to_datetime(ts_utc_ms, tz):%d/%m/%Y}"
