"""
CalculationResult — Модель результата расчёта НДС

Immutable Pydantic модель, представляющая один расчёт (добавление или
выделение НДС). После фиксации в истории тот же объект служит записью
HistoryEntry и никогда не изменяется.

Инвариант: price_excluding_vat + vat_amount == price_including_vat
с точностью до копейки (каждая компонента округлена независимо).
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from vatcalc.core.math.rounding import is_money_equal


# =============================================================================
# ENUMS
# =============================================================================


class CalculationMode(str, Enum):
    """
    Режим расчёта.

    - ADD: известна цена без НДС, итог выводится
    - EXTRACT: известен итог с НДС, цена без НДС выводится
    """

    ADD = "add"
    EXTRACT = "extract"

    @property
    def label(self) -> str:
        """Подпись режима для отображения и экспорта."""
        if self is CalculationMode.ADD:
            return "Add VAT"
        return "Extract VAT"


# =============================================================================
# CALCULATION RESULT MODEL
# =============================================================================


class CalculationResult(BaseModel):
    """
    Результат расчёта НДС.

    Immutable модель (frozen=True). Все денежные поля неотрицательные и
    округлены до 2 знаков движком VatEngine.
    """

    mode: CalculationMode = Field(..., description="Режим расчёта (add/extract)")
    vat_rate: float = Field(..., ge=0, le=100, description="Ставка НДС (%), [0, 100]")

    # Денежные компоненты
    price_excluding_vat: float = Field(..., ge=0, description="Цена без НДС")
    vat_amount: float = Field(..., ge=0, description="Сумма НДС")
    price_including_vat: float = Field(..., ge=0, description="Цена с НДС")

    # Время
    ts_utc_ms: int = Field(..., ge=0, description="Время расчёта (UTC, миллисекунды)")

    model_config = {"frozen": True}  # Immutable

    @model_validator(mode="after")
    def validate_additive_invariant(self) -> "CalculationResult":
        """Проверка excl + vat == incl с точностью до копейки."""
        total = self.price_excluding_vat + self.vat_amount
        if not is_money_equal(total, self.price_including_vat):
            raise ValueError(
                f"price_excluding_vat + vat_amount ({total:.2f}) "
                f"!= price_including_vat ({self.price_including_vat:.2f})"
            )
        return self


# =============================================================================
# CONTENT KEY
# =============================================================================


def content_key(result: CalculationResult) -> str:
    """
    Отпечаток содержимого результата для подавления дублей.

    Строится из (price_excluding_vat, vat_rate, mode, price_including_vat),
    денежные поля фиксируются до 2 знаков. Время расчёта не участвует:
    два расчёта одних и тех же сумм дают один ключ.

    Examples:
        >>> content_key(add_vat(100, 7.5))
        '100.00-7.5-add-107.50'
    """
    return (
        f"{result.price_excluding_vat:.2f}-{result.vat_rate}-"
        f"{result.mode.value}-{result.price_including_vat:.2f}"
    )
