"""
Тесты для VAT Engine

Проверяет:
1. Расчётные сценарии add/extract
2. Аддитивный инвариант excl + vat == incl
3. Round-trip add → extract
4. InvalidArgument для отрицательных сумм и ставок вне [0, 100]
5. Диспетчер calculate_vat
"""

import pytest

from vatcalc.core.domain import CalculationMode
from vatcalc.core.math.rounding import round_to_decimal
from vatcalc.engine import InvalidArgument, add_vat, calculate_vat, extract_vat

TS = 1768146300000


def assert_additive(result) -> None:
    """excl + vat == incl до копейки"""
    assert round_to_decimal(result.price_excluding_vat + result.vat_amount) == result.price_including_vat


# =============================================================================
# ADD VAT
# =============================================================================


class TestAddVat:
    """Тесты для add_vat"""

    def test_round_price(self) -> None:
        """100 @ 7.5% → 100.00 / 7.50 / 107.50"""
        result = add_vat(100, 7.5, TS)

        assert result.mode == CalculationMode.ADD
        assert result.vat_rate == 7.5
        assert result.price_excluding_vat == 100.0
        assert result.vat_amount == 7.5
        assert result.price_including_vat == 107.5
        assert result.ts_utc_ms == TS

    def test_vat_from_unrounded_price(self) -> None:
        """99.99 @ 7.5% → сырой НДС 7.49925 округляется до 7.50, не 7.49"""
        result = add_vat(99.99, 7.5, TS)

        assert result.price_excluding_vat == 99.99
        assert result.vat_amount == 7.5
        assert result.price_including_vat == 107.49

    def test_tiny_price_zero_vat(self) -> None:
        """0.01 @ 7.5% → НДС 0.00"""
        result = add_vat(0.01, 7.5, TS)

        assert result.vat_amount == 0.0
        assert result.price_including_vat == 0.01

    def test_zero_price(self) -> None:
        result = add_vat(0, 7.5, TS)
        assert result.price_excluding_vat == 0.0
        assert result.vat_amount == 0.0
        assert result.price_including_vat == 0.0

    def test_rate_bounds_accepted(self) -> None:
        """Ставки 0 и 100 допустимы"""
        assert add_vat(50, 0, TS).price_including_vat == 50.0
        assert add_vat(50, 100, TS).price_including_vat == 100.0

    def test_price_with_more_decimals(self) -> None:
        """Цена округляется независимо от НДС"""
        result = add_vat(10.006, 10, TS)
        assert result.price_excluding_vat == 10.01
        assert result.vat_amount == 1.0
        assert result.price_including_vat == 11.01

    def test_timestamp_defaults_to_now(self) -> None:
        result = add_vat(100, 7.5)
        assert result.ts_utc_ms > 1_600_000_000_000

    @pytest.mark.parametrize(
        "price,rate",
        [(0.01, 7.5), (1.0, 7.5), (19.99, 20.0), (33.33, 15.0), (1234.56, 7.5), (999999.99, 21.0)],
    )
    def test_additive_invariant(self, price: float, rate: float) -> None:
        assert_additive(add_vat(price, rate, TS))

    def test_negative_price_rejected(self) -> None:
        with pytest.raises(InvalidArgument, match="price must be non-negative"):
            add_vat(-1, 7.5)

    def test_negative_rate_rejected(self) -> None:
        with pytest.raises(InvalidArgument):
            add_vat(100, -5)

    def test_rate_above_100_rejected(self) -> None:
        with pytest.raises(InvalidArgument):
            add_vat(100, 101)

    def test_nan_rejected(self) -> None:
        with pytest.raises(InvalidArgument):
            add_vat(float("nan"), 7.5)
        with pytest.raises(InvalidArgument):
            add_vat(100, float("inf"))

    def test_invalid_argument_is_value_error(self) -> None:
        """InvalidArgument совместим с ValueError"""
        with pytest.raises(ValueError):
            add_vat(-1, 7.5)

    def test_total_overflow_rejected(self) -> None:
        """excl + vat за пределами float → InvalidArgument, а не ошибка модели"""
        with pytest.raises(InvalidArgument, match="price_including_vat is out of float range"):
            add_vat(1.7e308, 100)

    def test_overflow_rejected_via_dispatch(self) -> None:
        with pytest.raises(InvalidArgument, match="out of float range"):
            calculate_vat(1.7e308, 100, CalculationMode.ADD)


# =============================================================================
# EXTRACT VAT
# =============================================================================


class TestExtractVat:
    """Тесты для extract_vat"""

    def test_whole_total(self) -> None:
        """12900 @ 7.5% → 12000.00 / 900.00"""
        result = extract_vat(12900, 7.5, TS)

        assert result.mode == CalculationMode.EXTRACT
        assert result.price_including_vat == 12900.0
        assert result.price_excluding_vat == 12000.0
        assert result.vat_amount == 900.0

    def test_vat_is_difference_of_rounded_values(self) -> None:
        """НДС = incl - excl после округления"""
        result = extract_vat(10, 7.5, TS)

        assert result.price_including_vat == 10.0
        assert result.price_excluding_vat == 9.3
        assert result.vat_amount == 0.7

    def test_zero_rate(self) -> None:
        result = extract_vat(55.55, 0, TS)
        assert result.price_excluding_vat == 55.55
        assert result.vat_amount == 0.0

    @pytest.mark.parametrize(
        "total,rate",
        [(0.01, 7.5), (1.0, 7.5), (10.0, 7.5), (107.49, 7.5), (99.99, 20.0), (1234.56, 15.0)],
    )
    def test_additive_invariant(self, total: float, rate: float) -> None:
        assert_additive(extract_vat(total, rate, TS))

    def test_vat_never_negative(self) -> None:
        for total in (0.01, 0.02, 0.05, 0.1):
            assert extract_vat(total, 7.5, TS).vat_amount >= 0

    def test_negative_total_rejected(self) -> None:
        with pytest.raises(InvalidArgument, match="total must be non-negative"):
            extract_vat(-1, 7.5)

    def test_rate_out_of_range_rejected(self) -> None:
        with pytest.raises(InvalidArgument):
            extract_vat(100, -0.01)
        with pytest.raises(InvalidArgument):
            extract_vat(100, 100.01)


# =============================================================================
# ROUND-TRIP И ДИСПЕТЧЕР
# =============================================================================


class TestRoundTrip:
    """add_vat → extract_vat воспроизводит цену и НДС"""

    @pytest.mark.parametrize(
        "price,rate",
        [(100.0, 7.5), (200.0, 20.0), (12000.0, 7.5), (50.0, 10.0), (80.0, 25.0)],
    )
    def test_round_trip(self, price: float, rate: float) -> None:
        added = add_vat(price, rate, TS)
        extracted = extract_vat(added.price_including_vat, rate, TS)

        assert extracted.price_excluding_vat == added.price_excluding_vat
        assert extracted.vat_amount == added.vat_amount
        assert extracted.price_including_vat == added.price_including_vat

    def test_worked_example(self) -> None:
        """100 @ 7.5% → 107.50 → 100.00 / 7.50"""
        extracted = extract_vat(add_vat(100, 7.5, TS).price_including_vat, 7.5, TS)
        assert extracted.price_excluding_vat == 100.0
        assert extracted.vat_amount == 7.5


class TestCalculateVat:
    """Тесты для диспетчера calculate_vat"""

    def test_dispatch_add(self) -> None:
        assert calculate_vat(100, 7.5, CalculationMode.ADD, TS) == add_vat(100, 7.5, TS)

    def test_dispatch_extract(self) -> None:
        assert calculate_vat(107.5, 7.5, CalculationMode.EXTRACT, TS) == extract_vat(107.5, 7.5, TS)

    def test_dispatch_propagates_validation(self) -> None:
        with pytest.raises(InvalidArgument):
            calculate_vat(-5, 7.5, CalculationMode.EXTRACT)
