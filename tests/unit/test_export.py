"""
Тесты для CSV экспорта истории и форматирования отображения

Проверяет:
1. Заголовки и порядок колонок
2. Формат значений (2 знака, подписи режимов)
3. Экранирование даты с запятыми
4. "Нечего экспортировать" для пустой истории
5. Форматирование валюты/процентов/дат
"""

import csv
import io
import logging
from datetime import date, timezone
from pathlib import Path

import pytest

from vatcalc.core.format import format_currency, format_date, format_date_time, format_percentage
from vatcalc.engine import add_vat, extract_vat
from vatcalc.history import (
    HISTORY_CSV_HEADERS,
    convert_to_csv,
    default_export_filename,
    export_history_csv,
    history_to_rows,
)

TS = 1768146300000  # 2026-01-11 15:45 UTC


@pytest.fixture
def history() -> list:
    return [extract_vat(12900, 7.5, TS), add_vat(99.99, 7.5, TS)]


class TestConvertToCsv:
    """Тесты для convert_to_csv"""

    def test_header_first(self, history: list) -> None:
        lines = convert_to_csv(history, tz=timezone.utc).split("\n")
        assert lines[0] == "Date & Time,Mode,VAT Rate (%),Price Excl. VAT,VAT Amount,Price Incl. VAT"

    def test_one_row_per_entry(self, history: list) -> None:
        lines = convert_to_csv(history, tz=timezone.utc).split("\n")
        assert len(lines) == 1 + len(history)

    def test_row_values(self, history: list) -> None:
        rows = list(csv.reader(io.StringIO(convert_to_csv(history, tz=timezone.utc))))
        assert rows[1] == ["Jan 11, 2026, 3:45 PM", "Extract VAT", "7.50", "12000.00", "900.00", "12900.00"]
        assert rows[2] == ["Jan 11, 2026, 3:45 PM", "Add VAT", "7.50", "99.99", "7.50", "107.49"]

    def test_date_column_quoted(self, history: list) -> None:
        lines = convert_to_csv(history, tz=timezone.utc).split("\n")
        assert lines[1].startswith('"Jan 11, 2026, 3:45 PM",')

    def test_six_columns(self, history: list) -> None:
        assert len(HISTORY_CSV_HEADERS) == 6
        for row in history_to_rows(history, tz=timezone.utc):
            assert len(row) == 6

    def test_no_trailing_newline(self, history: list) -> None:
        assert not convert_to_csv(history).endswith("\n")


class TestExportHistoryCsv:
    """Тесты для export_history_csv"""

    def test_empty_history_nothing_to_export(self, tmp_path: Path, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            assert export_history_csv([], directory=tmp_path) is None
        assert "No history to export" in caplog.text
        assert list(tmp_path.iterdir()) == []

    def test_writes_explicit_path(self, tmp_path: Path, history: list) -> None:
        target = tmp_path / "out.csv"
        written = export_history_csv(history, path=target, tz=timezone.utc)

        assert written == target
        assert target.read_text(encoding="utf-8") == convert_to_csv(history, tz=timezone.utc)

    def test_default_filename(self, tmp_path: Path, history: list) -> None:
        written = export_history_csv(history, directory=tmp_path)
        assert written.name.startswith("vat-calculations-")
        assert written.suffix == ".csv"

    def test_default_export_filename(self) -> None:
        assert default_export_filename(date(2026, 1, 11)) == "vat-calculations-2026-01-11.csv"


class TestFormat:
    """Тесты форматирования"""

    def test_currency(self) -> None:
        assert format_currency(1234.56) == "₦1,234.56"
        assert format_currency(0) == "₦0.00"
        assert format_currency(1000000) == "₦1,000,000.00"
        assert format_currency(-5) == "-₦5.00"

    def test_percentage(self) -> None:
        assert format_percentage(7.5) == "7.5%"
        assert format_percentage(10.0) == "10%"

    def test_date_time(self) -> None:
        assert format_date_time(TS, tz=timezone.utc) == "Jan 11, 2026, 3:45 PM"

    def test_date_time_midnight_and_noon(self) -> None:
        midnight = 1768089600000  # 2026-01-11 00:00 UTC
        assert format_date_time(midnight, tz=timezone.utc) == "Jan 11, 2026, 12:00 AM"
        assert format_date_time(midnight + 12 * 3600 * 1000, tz=timezone.utc) == "Jan 11, 2026, 12:00 PM"

    def test_date(self) -> None:
        assert format_date(TS, tz=timezone.utc) == "11/01/2026"
