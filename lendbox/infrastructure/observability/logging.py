"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from lendbox.config import settings


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


def log_client_scored(client_id: str, risk_score: float, risk_tier: str) -> None:
    logging.info(
        "Client scored",
        extra={
            "client_id": client_id,
            "step": "risk_scored",
            "risk_score": risk_score,
            "risk_tier": risk_tier,
        },
    )


def log_loan_created(
    loan_id: str,
    client_id: str,
    principal: float,
    installments: int,
    total_payable: float,
) -> None:
    """Log structured loan creation outcome for analysis"""
    logging.info(
        "Loan application created",
        extra={
            "loan_id": loan_id,
            "client_id": client_id,
            "step": "loan_created",
            "principal": principal,
            "installments": installments,
            "total_payable": total_payable,
        },
    )


def log_repayment_recorded(loan_id: str, installment_no: int, amount: float, loan_settled: bool) -> None:
    logging.info(
        "Repayment recorded",
        extra={
            "loan_id": loan_id,
            "installment_no": installment_no,
            "step": "repayment_recorded",
            "amount": amount,
            "loan_settled": loan_settled,
        },
    )
