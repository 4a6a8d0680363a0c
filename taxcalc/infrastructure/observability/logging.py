"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "taxcalc"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_aggregation(
    request_id: str,
    period: str,
    bank_ids: List[str],
    total_income: float,
    total_taxes: float,
    failed_banks: Dict[str, str],
    duration_ms: float,
) -> None:
    """Log structured aggregation outcome for analysis"""
    logging.info(
        "Aggregation completed",
        extra={
            "request_id": request_id,
            "period": period,
            "banks": bank_ids,
            "step": "aggregation_complete",
            "complete": not failed_banks,
            "failed_banks": failed_banks,
            "total_income": total_income,
            "total_taxes": total_taxes,
            "duration_ms": duration_ms,
        },
    )
