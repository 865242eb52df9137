import contextvars
import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Per-request context, filled in by CorrelationMiddleware and the auth dependency
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id", default="")
request_user_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_user_id", default="")

EXTRA_FIELDS = (
    "method", "path", "status", "duration_ms", "client_ip",
    "error", "error_type", "service", "operation", "platform",
)


class RequestContextFilter(logging.Filter):
    """Stamp the current correlation id and user id onto every record"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = correlation_id_var.get()
        if not getattr(record, "user_id", None):
            record.user_id = request_user_id_var.get()
        return True


class StructuredFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        for key in ("correlation_id", "user_id"):
            if getattr(record, key, None):
                entry[key] = getattr(record, key)
        entry.update({key: getattr(record, key) for key in EXTRA_FIELDS if hasattr(record, key)})

        if record.levelno >= logging.WARNING:
            entry["source"] = f"{record.filename}:{record.lineno}"
        if record.exc_info and record.exc_info[1]:
            error = record.exc_info[1]
            entry["exception"] = {"type": type(error).__name__, "message": str(error)}

        return json.dumps(entry, default=str)


class SimpleFormatter(logging.Formatter):
    def __init__(self):
        super().__init__(
            "%(asctime)s - %(levelname)s - [%(correlation_id)s] %(message)s",
            datefmt="%H:%M:%S",
        )


def setup_logger(name: str = "credably", level: str = None) -> logging.Logger:
    """
    Configure a credably logger once.

    LOG_FORMAT=json writes JSON lines to stdout; anything else gets the console
    format plus logs/credably.log (disable the file with LOG_FILE=false).
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = level or os.getenv("LOG_LEVEL", "INFO")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.addFilter(RequestContextFilter())

    structured = os.getenv("LOG_FORMAT") == "json"

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(StructuredFormatter() if structured else SimpleFormatter())
    logger.addHandler(console)

    if not structured and os.getenv("LOG_FILE", "true").lower() != "false":
        try:
            Path("logs").mkdir(exist_ok=True)
            file_handler = RotatingFileHandler(
                Path("logs") / "credably.log",
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(StructuredFormatter())
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"Could not setup file logging: {e}")

    return logger


logger = setup_logger()


def get_logger(name: str = None) -> logging.Logger:
    if name:
        return setup_logger(name)
    return logger
