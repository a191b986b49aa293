"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime
from typing import Any, Dict

from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.utcnow().isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "loanbook-engine"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_projection(
    request_id: str,
    as_of: str,
    horizon_months: int,
    loan_count: int,
    total_net_cashflow: float,
    collection_rate_net: float,
    duration_ms: float,
) -> None:
    """Log structured cashflow projection outcome"""
    logging.info(
        "Cashflow projection completed",
        extra={
            "request_id": request_id,
            "step": "cashflow_projection",
            "as_of": as_of,
            "horizon_months": horizon_months,
            "loan_count": loan_count,
            "total_net_cashflow": total_net_cashflow,
            "collection_rate_net": collection_rate_net,
            "duration_ms": duration_ms,
        },
    )


def log_book_evaluation(
    request_id: str,
    as_of: str,
    loan_count: int,
    loan_status_counts: Dict[str, int],
    interest_status_counts: Dict[str, int],
    duration_ms: float,
) -> None:
    """Log structured loan-book evaluation outcome"""
    logging.info(
        "Loan book evaluated",
        extra={
            "request_id": request_id,
            "step": "book_evaluation",
            "as_of": as_of,
            "loan_count": loan_count,
            "loan_status_counts": loan_status_counts,
            "interest_status_counts": interest_status_counts,
            "duration_ms": duration_ms,
        },
    )
