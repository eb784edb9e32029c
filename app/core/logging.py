"""Logging setup shared by the API process and the Celery worker.

Usage:
    from app.core.logging import setup_logging
    setup_logging("api")  # or "worker"
"""
import json
import logging
import sys
from datetime import datetime, timezone

from app.core.config import settings


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log collectors."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "service": self.service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class ServiceFormatter(logging.Formatter):
    """[service] 2026-01-26 19:45:00 - INFO - message"""

    def __init__(self, service_name: str):
        super().__init__(
            fmt=f"[{service_name}] %(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging(service_name: str, level: str | None = None, use_json: bool | None = None) -> logging.Logger:
    """Configure the root logger once and return the ``app`` logger."""
    if use_json is None:
        use_json = settings.LOG_FORMAT.lower() == "json"
    level_name = (level or settings.LOG_LEVEL).upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter(service_name) if use_json else ServiceFormatter(service_name))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name, logging.INFO))

    # SQL echo is controlled by DEBUG on the engine, keep sqlalchemy quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logging.getLogger("app")
