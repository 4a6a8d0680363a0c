"""GET /v1/taxes - income and tax aggregation endpoint"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from taxcalc.api.v1.schemas import ErrorResponse, IncomeAndTaxesResponse
from taxcalc.api.dependencies import get_request_id, get_tax_calculator
from taxcalc.config import settings
from taxcalc.domain.exceptions import AggregationFailedError
from taxcalc.domain.models import Period, PeriodUnit
from taxcalc.infrastructure.observability.logging import log_aggregation
from taxcalc.services.tax_calculator import TaxCalculator

router = APIRouter()


@router.get(
    "/taxes",
    response_model=IncomeAndTaxesResponse,
    responses={503: {"model": ErrorResponse}},
)
async def get_income_and_taxes(
    request: Request,
    period: float | None = Query(None, gt=0, description="Lookback length, defaults to PERIOD_IN_MONTHS"),
    unit: PeriodUnit = Query(PeriodUnit.MONTHS, description="Lookback unit"),
    calculator: TaxCalculator = Depends(get_tax_calculator),
):
    """
    Aggregate foreign-currency FOP income across banks and compute taxes.

    Flow:
    1. Resolve the lookback period
    2. Aggregate income over every bank (cached per bank)
    3. Log the outcome and return totals
    """
    start_time = time.time()
    request_id = get_request_id(request)
    lookback = Period(period if period is not None else settings.period_in_months, unit)

    try:
        result = await calculator.calculate_income_by_period(lookback)

    except AggregationFailedError as e:
        logging.error(f"Aggregation failed: {e}", extra={"request_id": request_id, "bank_id": e.bank_id})
        raise HTTPException(
            status_code=503,
            detail={"error": e.kind.value, "bank_id": e.bank_id, "cause": e.cause_kind.value},
        )

    duration_ms = (time.time() - start_time) * 1000
    log_aggregation(
        request_id,
        lookback.cache_token,
        [bank.bank_id for bank in calculator.bank_clients],
        result.total_income,
        result.taxes.total,
        result.failed_banks,
        duration_ms,
    )

    return IncomeAndTaxesResponse.from_result(lookback, result)
