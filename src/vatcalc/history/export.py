"""
CSV экспорт истории расчётов.

Контракт: шесть колонок в фиксированном порядке, строка заголовков первой,
одна строка на запись, строки разделены '\\n'. Поле даты содержит запятые
и поэтому экранируется кавычками (csv, минимальное экранирование).
"""

import csv
import io
import logging
from datetime import date, tzinfo
from pathlib import Path
from typing import Final, List, Optional, Sequence, Tuple

from vatcalc.core.domain.calculation import CalculationResult
from vatcalc.core.format import format_date_time

logger = logging.getLogger(__name__)

HISTORY_CSV_HEADERS: Final[Tuple[str, ...]] = (
    "Date & Time",
    "Mode",
    "VAT Rate (%)",
    "Price Excl. VAT",
    "VAT Amount",
    "Price Incl. VAT",
)


def history_to_rows(
    history: Sequence[CalculationResult],
    tz: Optional[tzinfo] = None,
) -> List[List[str]]:
    """Строки таблицы экспорта (без заголовка), в порядке истории."""
    return [
        [
            format_date_time(item.ts_utc_ms, tz),
            item.mode.label,
            f"{item.vat_rate:.2f}",
            f"{item.price_excluding_vat:.2f}",
            f"{item.vat_amount:.2f}",
            f"{item.price_including_vat:.2f}",
        ]
        for item in history
    ]


def convert_to_csv(history: Sequence[CalculationResult], tz: Optional[tzinfo] = None) -> str:
    """
    Конвертация истории в CSV строку.

    Args:
        history: Записи истории (новые первыми)
        tz: Временная зона отображения (default: локальная)

    Returns:
        CSV: заголовок + строки, без завершающего перевода строки
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(HISTORY_CSV_HEADERS)
    writer.writerows(history_to_rows(history, tz))
    return buffer.getvalue().rstrip("\n")


def default_export_filename(today: Optional[date] = None) -> str:
    """vat-calculations-YYYY-MM-DD.csv"""
    return f"vat-calculations-{(today or date.today()).isoformat()}.csv"


def export_history_csv(
    history: Sequence[CalculationResult],
    path: Optional[Path | str] = None,
    directory: Optional[Path | str] = None,
    tz: Optional[tzinfo] = None,
) -> Optional[Path]:
    """
    Экспорт истории в CSV файл.

    Args:
        history: Записи истории
        path: Путь файла (default: directory / vat-calculations-YYYY-MM-DD.csv)
        directory: Каталог для имени по умолчанию (default: текущий)
        tz: Временная зона отображения

    Returns:
        Путь записанного файла или None, если экспортировать нечего

    Raises:
        OSError: Если файл не удалось записать
    """
    if not history:
        logger.warning("No history to export")
        return None

    if path is None:
        target = Path(directory or ".") / default_export_filename()
    else:
        target = Path(path)

    target.write_text(convert_to_csv(history, tz), encoding="utf-8")
    logger.debug("Exported %d history entries to %s", len(history), target)
    return target
