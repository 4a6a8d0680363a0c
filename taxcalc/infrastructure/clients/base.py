"""Capability every bank integration provides to the tax calculator"""

from typing import List, Protocol, runtime_checkable

from taxcalc.domain.models import Period


@runtime_checkable
class BankClient(Protocol):
    """
    A source of taxable income.

    Implementations return income amounts already converted to the home
    currency, in minor units. Failures are raised as DomainException subclasses.
    """

    bank_id: str

    async def get_income_by_period(self, period: Period) -> List[float]: ...
