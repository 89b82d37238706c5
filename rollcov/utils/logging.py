from __future__ import annotations

import json
import logging
import math
import sys
from typing import Any, Dict, Optional


_RESERVED_ATTRS = {
    "args", "msg", "levelname", "levelno", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created",
    "msecs", "relativeCreated", "thread", "threadName", "processName", "process",
    "name", "taskName", "message", "asctime",
}

# Extra fields emitted by rollcov.core.covariance, grouped under "accumulator"
ACCUMULATOR_FIELDS = ("count", "policy", "cross_sum", "sum_x", "sum_y")


def json_safe(value: Any) -> Any:
    """Replace non-finite floats with their names so the record stays strict JSON."""
    if isinstance(value, float) and not math.isfinite(value):
        return "nan" if math.isnan(value) else ("inf" if value > 0 else "-inf")
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    return value


class JsonFormatter(logging.Formatter):
    """One JSON object per record: level, logger, message, time, then context fields."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        accumulator: Dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            if key in ACCUMULATOR_FIELDS:
                accumulator[key] = value
            else:
                payload[key] = value
        if accumulator:
            payload["accumulator"] = accumulator

        return json.dumps(json_safe(payload), ensure_ascii=False, allow_nan=False, default=str)


def setup_logging(level: Optional[str] = None) -> None:
    """Route all records to stdout as JSON.

    Without an explicit level, LOG_LEVEL from the environment / .env is used.
    """
    if level is None:
        from rollcov.config import load_config

        level = load_config().env.LOG_LEVEL
    root = logging.getLogger()
    root.setLevel(level.upper())
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.handlers.clear()
    root.addHandler(handler)
