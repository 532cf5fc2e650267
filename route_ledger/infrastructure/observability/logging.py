"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from route_ledger.config import settings


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


def log_cache_lookup(user_id: str, outcome: str, age_ms: Optional[int] = None) -> None:
    """Log dashboard cache read outcome"""
    logging.info(
        "Dashboard cache lookup",
        extra={
            "user_id": user_id,
            "step": "cache_lookup",
            "outcome": outcome,
            "age_ms": age_ms,
        },
    )


def log_refresh(user_id: str, outcome: str, duration_ms: float) -> None:
    """Log background/forced refresh outcome for analysis"""
    logging.info(
        "Dashboard refresh finished",
        extra={
            "user_id": user_id,
            "step": "refresh",
            "outcome": outcome,
            "duration_ms": duration_ms,
        },
    )
