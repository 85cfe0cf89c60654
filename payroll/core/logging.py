# payroll/core/logging.py
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from payroll.core.config import settings

SENSITIVE_KEYS = {
    "password",
    "secret",
    "token",
    "access_token",
    "refresh_token",
    "authorization",
    "hashed_rt",
}

# Attributes every LogRecord carries; anything else came in through `extra=`
_BUILTIN_KEYS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _redact(key: str, value: Any) -> Any:
    if key.lower() in SENSITIVE_KEYS:
        return "***REDACTED***"
    return value


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        k: _redact(k, v)
        for k, v in record.__dict__.items()
        if k not in _BUILTIN_KEYS
    }


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extras = _extras(record)
        if extras:
            payload["extra"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class PrettyFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now().strftime("%H:%M:%S")
        line = f"{ts} [{record.levelname}] {record.name}: {record.getMessage()}"
        extras = _extras(record)
        if extras:
            line += f" extra={extras}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure the root logger once per process; later calls are no-ops."""
    root = logging.getLogger()
    if getattr(root, "_configured_by_payroll", False):
        return

    level_name = (level or settings.LOG_LEVEL).upper()
    log_format = (fmt or settings.LOG_FORMAT).lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if log_format == "json" else PrettyFormatter())

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name, logging.INFO))

    # uvicorn logs go through our handler
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).handlers.clear()
        logging.getLogger(name).propagate = True

    root._configured_by_payroll = True  # type: ignore[attr-defined]
    logging.getLogger(__name__).info(
        "Logging is initialized", extra={"log_level": level_name, "log_format": log_format}
    )
