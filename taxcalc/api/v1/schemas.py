"""Pydantic schemas for API response validation"""

from pydantic import BaseModel, Field
from typing import Dict

from taxcalc.domain.models import IncomeAndTaxesResult, Period


class TaxesSchema(BaseModel):
    """Flat taxes owed, home-currency major units"""

    general: float
    military: float
    total: float


class IncomeAndTaxesResponse(BaseModel):
    """Response for GET /v1/taxes"""

    period: float
    unit: str
    total_income: float = Field(..., description="Income in home-currency major units")
    taxes: TaxesSchema
    complete: bool = Field(..., description="False when some banks failed and were left out")
    failed_banks: Dict[str, str] = Field(default_factory=dict, description="Bank id -> error kind")

    @classmethod
    def from_result(cls, period: Period, result: IncomeAndTaxesResult) -> "IncomeAndTaxesResponse":
        return cls(
            period=period.value,
            unit=period.unit.value,
            total_income=result.total_income,
            taxes=TaxesSchema(
                general=result.taxes.general,
                military=result.taxes.military,
                total=result.taxes.total,
            ),
            complete=result.is_complete,
            failed_banks=result.failed_banks,
        )


class ErrorResponse(BaseModel):
    """Body of a failed aggregation"""

    error: str
    bank_id: str
    cause: str
