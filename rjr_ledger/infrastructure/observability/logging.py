"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

# Libraries whose INFO output would drown the ledger events
QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access")


class LedgerJsonFormatter(jsonlogger.JsonFormatter):
    """JSON lines tagged with UTC timestamp, level and service name"""

    def __init__(self, *args: Any, service: str = "rjr-ledger", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.service = service

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service


def setup_logging(level: str = "INFO", service: str = "rjr-ledger") -> None:
    """Send every record to stdout as one JSON object per line"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(LedgerJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", service=service))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_schedule(
    request_id: str,
    installments_number: int,
    remaining: str,
    discrepancy: bool,
) -> None:
    """Log schedule computation outcome"""
    logging.info(
        "Schedule computed",
        extra={
            "request_id": request_id,
            "step": "schedule_complete",
            "installments_number": installments_number,
            "remaining": remaining,
            "discrepancy": discrepancy,
        },
    )


def log_payment(
    request_id: str,
    entry_id: str,
    paid_amount: str,
    status: str,
    duration_ms: float,
) -> None:
    """Log payment registration outcome"""
    logging.info(
        "Payment registered",
        extra={
            "request_id": request_id,
            "entry_id": entry_id,
            "step": "payment_complete",
            "paid_amount": paid_amount,
            "entry_status": status,
            "duration_ms": duration_ms,
        },
    )
