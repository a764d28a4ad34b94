"""
Тесты для доменных моделей: CalculationResult, CalculationMode, content_key

Проверяет:
1. Создание и валидацию моделей Pydantic
2. Immutability (frozen=True)
3. Аддитивный инвариант на уровне модели
4. ContentKey для дедупликации
5. Сериализацию/десериализацию JSON
"""

import pytest
from pydantic import ValidationError

from vatcalc.core.domain import (
    CalculationMode,
    CalculationResult,
    HistorySnapshot,
    HistoryState,
    content_key,
)
from vatcalc.engine import add_vat, extract_vat

TS = 1768146300000


@pytest.fixture
def valid_result_data() -> dict:
    """Валидные данные CalculationResult"""
    return {
        "mode": "add",
        "vat_rate": 7.5,
        "price_excluding_vat": 100.0,
        "vat_amount": 7.5,
        "price_including_vat": 107.5,
        "ts_utc_ms": TS,
    }


class TestCalculationMode:
    """Тесты для CalculationMode"""

    def test_values(self) -> None:
        assert CalculationMode.ADD.value == "add"
        assert CalculationMode("extract") is CalculationMode.EXTRACT

    def test_labels(self) -> None:
        assert CalculationMode.ADD.label == "Add VAT"
        assert CalculationMode.EXTRACT.label == "Extract VAT"


class TestCalculationResult:
    """Тесты для модели CalculationResult"""

    def test_creation(self, valid_result_data: dict) -> None:
        result = CalculationResult(**valid_result_data)
        assert result.mode == CalculationMode.ADD
        assert result.price_including_vat == 107.5

    def test_immutability(self, valid_result_data: dict) -> None:
        result = CalculationResult(**valid_result_data)
        with pytest.raises(ValidationError):
            result.vat_amount = 1.0

    def test_additive_invariant_enforced(self, valid_result_data: dict) -> None:
        """excl + vat != incl → ValidationError"""
        valid_result_data["price_including_vat"] = 107.51
        with pytest.raises(ValidationError, match="price_including_vat"):
            CalculationResult(**valid_result_data)

    def test_rate_bounds(self, valid_result_data: dict) -> None:
        valid_result_data["vat_rate"] = 100.5
        with pytest.raises(ValidationError):
            CalculationResult(**valid_result_data)

    def test_negative_amount_rejected(self, valid_result_data: dict) -> None:
        valid_result_data["price_excluding_vat"] = -1.0
        valid_result_data["price_including_vat"] = 6.5
        with pytest.raises(ValidationError):
            CalculationResult(**valid_result_data)

    def test_invalid_mode_rejected(self, valid_result_data: dict) -> None:
        valid_result_data["mode"] = "subtract"
        with pytest.raises(ValidationError):
            CalculationResult(**valid_result_data)

    def test_json_round_trip(self, valid_result_data: dict) -> None:
        result = CalculationResult(**valid_result_data)
        restored = CalculationResult.model_validate_json(result.model_dump_json())
        assert restored == result

    def test_json_mode_is_lowercase_string(self, valid_result_data: dict) -> None:
        dumped = CalculationResult(**valid_result_data).model_dump(mode="json")
        assert dumped["mode"] == "add"


class TestContentKey:
    """Тесты для content_key"""

    def test_format(self) -> None:
        assert content_key(add_vat(100, 7.5, TS)) == "100.00-7.5-add-107.50"

    def test_ignores_timestamp(self) -> None:
        assert content_key(add_vat(100, 7.5, TS)) == content_key(add_vat(100, 7.5, TS + 5000))

    def test_mode_distinguishes(self) -> None:
        assert content_key(add_vat(100, 0, TS)) != content_key(extract_vat(100, 0, TS))

    def test_rate_distinguishes(self) -> None:
        assert content_key(add_vat(100, 7.5, TS)) != content_key(add_vat(100, 10, TS))

    def test_amount_distinguishes(self) -> None:
        assert content_key(add_vat(100, 7.5, TS)) != content_key(add_vat(100.01, 7.5, TS))


class TestHistorySnapshot:
    """Тесты для HistorySnapshot"""

    def test_default_version(self) -> None:
        snapshot = HistorySnapshot(state=HistoryState(history=[], max_history_size=10))
        assert snapshot.version == 1

    def test_entries_preserved(self) -> None:
        entries = [add_vat(1, 7.5, TS), extract_vat(2, 7.5, TS)]
        snapshot = HistorySnapshot(state=HistoryState(history=entries, max_history_size=10))
        assert list(snapshot.state.history) == entries

    def test_capacity_positive(self) -> None:
        with pytest.raises(ValidationError):
            HistoryState(history=[], max_history_size=0)
