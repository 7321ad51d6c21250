"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from banking_service.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


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


def log_transfer(
    request_id: str,
    user_id: str,
    to_account_number: str,
    outcome: str,
    duration_ms: float,
) -> None:
    """Log structured transfer outcome for auditing"""
    logging.info(
        "Transfer completed" if outcome == "completed" else "Transfer rejected",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "transfer_complete",
            "to_account_number": to_account_number,
            "outcome": outcome,
            "duration_ms": duration_ms,
        },
    )


def log_loan_status_change(request_id: str, loan_id: str, status: str, duration_ms: float) -> None:
    """Log structured administrative loan decision"""
    logging.info(
        "Loan status changed",
        extra={
            "request_id": request_id,
            "loan_id": loan_id,
            "step": "loan_status_change",
            "status": status,
            "duration_ms": duration_ms,
        },
    )
