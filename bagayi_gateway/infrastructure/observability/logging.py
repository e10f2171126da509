"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args: Any, service_name: str = "bagayi-gateway", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "bagayi-gateway") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name=service_name,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_transfer(
    request_id: str,
    user_id: str,
    transfer_id: str,
    routing_mode: str,
    status: str,
    duration_ms: float,
) -> None:
    """Log structured transfer outcome for analysis"""
    logging.info(
        "Transfer created",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "transfer_created",
            "transfer_id": transfer_id,
            "routing_mode": routing_mode,
            "transfer_status": status,
            "duration_ms": duration_ms,
        },
    )


def log_rejection(request_id: str, user_id: str, reason: str, message: str) -> None:
    """Log a transfer rejected by routing or request validation"""
    logging.warning(
        "Transfer rejected",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "transfer_rejected",
            "reason": reason,
            "detail": message,
        },
    )
