"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from taxcalc.domain.currency import HOME_CURRENCY


class AccountKind(str, Enum):
    """Monobank account types"""

    FOP = "fop"  # sole proprietor, the only taxable kind
    BLACK = "black"
    WHITE = "white"
    EAID = "eAid"
    MADE_IN_UKRAINE = "madeInUkraine"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> "AccountKind":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


@dataclass
class Account:
    """Bank account from client-info"""

    id: str
    send_id: str
    kind: AccountKind
    currency_code: int
    balance: int
    credit_limit: int
    masked_pan: List[str]
    iban: str
    cashback_type: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Account":
        return cls(
            id=data["id"],
            send_id=data.get("sendId", ""),
            kind=AccountKind.parse(data.get("type", "")),
            currency_code=data["currencyCode"],
            balance=data.get("balance", 0),
            credit_limit=data.get("creditLimit", 0),
            masked_pan=list(data.get("maskedPan", [])),
            iban=data.get("iban", ""),
            cashback_type=data.get("cashbackType"),
        )

    def is_eligible(self, home_currency: int = HOME_CURRENCY) -> bool:
        """Only business accounts held in a foreign currency count as taxable income"""
        return self.kind is AccountKind.FOP and self.currency_code != home_currency


@dataclass
class Transaction:
    """Statement item, amounts in minor units"""

    id: str
    time: int  # epoch seconds
    operation_amount: int  # positive = inflow
    currency_code: int
    description: str = ""
    mcc: int = 0
    original_mcc: int = 0
    amount: int = 0
    commission_rate: int = 0
    cashback_amount: int = 0
    balance: int = 0
    hold: bool = False
    counter_edrpou: Optional[str] = None
    counter_iban: Optional[str] = None
    counter_name: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Transaction":
        return cls(
            id=data["id"],
            time=data["time"],
            operation_amount=data["operationAmount"],
            currency_code=data["currencyCode"],
            description=data.get("description", ""),
            mcc=data.get("mcc", 0),
            original_mcc=data.get("originalMcc", 0),
            amount=data.get("amount", 0),
            commission_rate=data.get("commissionRate", 0),
            cashback_amount=data.get("cashbackAmount", 0),
            balance=data.get("balance", 0),
            hold=data.get("hold", False),
            counter_edrpou=data.get("counterEdrpou"),
            counter_iban=data.get("counterIban"),
            counter_name=data.get("counterName"),
        )

    @property
    def is_income(self) -> bool:
        return self.operation_amount > 0


@dataclass
class CurrencyRate:
    """Directional quote: currency_code_a -> currency_code_b"""

    currency_code_a: int
    currency_code_b: int
    date: int
    rate_buy: Optional[float] = None
    rate_sell: Optional[float] = None
    rate_cross: Optional[float] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "CurrencyRate":
        return cls(
            currency_code_a=data["currencyCodeA"],
            currency_code_b=data["currencyCodeB"],
            date=data.get("date", 0),
            rate_buy=data.get("rateBuy"),
            rate_sell=data.get("rateSell"),
            rate_cross=data.get("rateCross"),
        )


class PeriodUnit(str, Enum):
    MONTHS = "months"
    YEARS = "years"
    WEEKS = "weeks"
    DAYS = "days"


DAYS_PER_UNIT: Dict[PeriodUnit, int] = {
    PeriodUnit.DAYS: 1,
    PeriodUnit.WEEKS: 7,
    PeriodUnit.MONTHS: 30,
    PeriodUnit.YEARS: 12 * 30,
}


@dataclass(frozen=True)
class Period:
    """
    Lookback window used for aggregation.

    Conversions are approximate on purpose (1 month = 30 days); a Period is never
    used for calendar arithmetic.
    """

    value: float
    unit: PeriodUnit = PeriodUnit.MONTHS

    def convert(self, unit: PeriodUnit) -> "Period":
        """Express the same length in another unit using the fixed day ratios"""
        if unit is self.unit:
            return self
        return Period(self.value * DAYS_PER_UNIT[self.unit] / DAYS_PER_UNIT[unit], unit)

    def to_days(self) -> float:
        return self.convert(PeriodUnit.DAYS).value

    def to_seconds(self) -> int:
        return int(self.to_days() * 24 * 60 * 60)

    @property
    def cache_token(self) -> str:
        # Months render as a bare number to stay compatible with existing cache keys
        number = format_number(self.value)
        if self.unit is PeriodUnit.MONTHS:
            return number
        return f"{number}{self.unit.value}"


def format_number(value: float) -> str:
    """Render 3.0 as '3' and 1.5 as '1.5'"""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


@dataclass
class Taxes:
    """Flat taxes owed on an income figure"""

    general: float = 0.0
    military: float = 0.0
    total: float = 0.0

    def __add__(self, other: "Taxes") -> "Taxes":
        return Taxes(
            general=self.general + other.general,
            military=self.military + other.military,
            total=self.total + other.total,
        )


@dataclass
class IncomeAndTaxesResult:
    """Income in home-currency major units and the taxes owed on it"""

    total_income: float = 0.0
    taxes: Taxes = field(default_factory=Taxes)
    failed_banks: Dict[str, str] = field(default_factory=dict)  # bank_id -> error kind

    @property
    def is_complete(self) -> bool:
        return not self.failed_banks

    def merge(self, other: "IncomeAndTaxesResult") -> "IncomeAndTaxesResult":
        return IncomeAndTaxesResult(
            total_income=self.total_income + other.total_income,
            taxes=self.taxes + other.taxes,
            failed_banks={**self.failed_banks, **other.failed_banks},
        )

    def to_cache_payload(self) -> Dict[str, Any]:
        return {
            "totalIncome": self.total_income,
            "taxes": {
                "general": self.taxes.general,
                "military": self.taxes.military,
                "total": self.taxes.total,
            },
        }

    @classmethod
    def from_cache_payload(cls, data: Dict[str, Any]) -> "IncomeAndTaxesResult":
        """
        Rebuild a per-bank result from the cache.

        Older entries were written as {"income": ..., "taxes": {general, military}};
        a missing total is derived from its parts.
        """
        income = data["totalIncome"] if "totalIncome" in data else data["income"]
        raw_taxes = data.get("taxes") or {}
        general = raw_taxes.get("general", 0.0)
        military = raw_taxes.get("military", 0.0)
        total = raw_taxes.get("total")
        if total is None:
            total = general + military
        return cls(
            total_income=income,
            taxes=Taxes(general=general, military=military, total=total),
        )
