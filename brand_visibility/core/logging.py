"""Centralized logging configuration.

Services attach project/run context through ``extra=`` so JSON output can be
filtered per project without parsing message text.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from brand_visibility.core.config import settings

# Record attributes copied into JSON output when a caller passes them via extra=
_CONTEXT_FIELDS = ("project_id", "run_id", "query")

_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_QUIET_LOGGERS = ("httpx", "httpcore")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, stamped with the record's own UTC time."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (name, getattr(record, name)) for name in _CONTEXT_FIELDS if getattr(record, name, None) is not None
        )
        if record.exc_info and record.exc_info[1]:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _make_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    formatter = JSONFormatter() if settings.log_json else logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handler.setFormatter(formatter)
    return handler


def setup_logging(level_name: str | None = None) -> None:
    """Route every logger through a single stdout handler.

    ``level_name`` overrides ``settings.log_level`` (used by scripts that want
    verbose output without touching the environment).
    """
    level = logging.getLevelName((level_name or settings.log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.setLevel(level)
    root.addHandler(_make_handler(level))

    # The query generator talks to OpenAI through httpx; keep its request logs quiet
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
