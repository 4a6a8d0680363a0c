"""Income and flat-tax calculation - core business logic for tax figures"""

from dataclasses import dataclass
from typing import Iterable

from taxcalc.domain.currency import CURRENCY_DENOMINATOR
from taxcalc.domain.models import Taxes


@dataclass(frozen=True)
class TaxRates:
    """Flat tax rates applied to income, as fractions (0.05 == 5%)"""

    general: float = 0.05
    military: float = 0.01

    @property
    def combined(self) -> float:
        return self.general + self.military


def calculate_income(incomes: Iterable[float], denominator: int = CURRENCY_DENOMINATOR) -> float:
    """
    Sum raw minor-unit amounts and convert to major units.

    Negative amounts (refunds) are included as-is. An empty sequence yields 0.
    """
    return sum(incomes) / denominator


def calculate_taxes(income: float, rates: TaxRates) -> Taxes:
    """
    Apply both flat rates to one income figure.

    Each component is computed from the income directly, never from another
    rounded component.
    """
    return Taxes(
        general=income * rates.general,
        military=income * rates.military,
        total=income * rates.combined,
    )
