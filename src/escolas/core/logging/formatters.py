# escolas/core/logging/formatters.py
"""
Log formatters.

  - JsonFormatter: one JSON object per line for log collectors. Carries the
    observability fields (service, env, version, request_id) and every
    `extra={...}` key passed at the call site.
  - ColorFormatter: compact ANSI-colored lines for a developer terminal.

builder.py picks one per handler from settings.LOG_FORMAT.
"""

import json
import logging
from typing import Any
from logging import LogRecord

from escolas.utils.logging import get_project_version, DEFAULT_PROJECT_NAME

PROJECT_VERSION = get_project_version()

# LogRecord attributes that are not call-site extras
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime", "request_id"}


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter.

    Args:
        env: environment name written on every record.
        service: logical service name (defaults to the project name).
        datefmt: passed to logging.Formatter, used by formatTime.

    Never raises on odd extras: values that can't be serialized are written as str().
    """

    def __init__(self, *, env: str | None = None, service: str = DEFAULT_PROJECT_NAME,
                 datefmt: str | None = None):
        super().__init__(datefmt=datefmt)
        self.env = env
        self.service = service

    def format(self, record: LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "request_id": getattr(record, "request_id", "-"),
            "service": self.service,
            "env": self.env,
            "version": PROJECT_VERSION,
        }

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_record["stack_info"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key in log_record or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                log_record[key] = value
            except (TypeError, ValueError):
                log_record[key] = str(value)

        return json.dumps(log_record, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """
    TIMESTAMP | LEVEL | LOGGER | REQUEST_ID | MESSAGE, with the level colored.

    Meant for interactive terminals; use JsonFormatter anywhere logs are ingested.
    """

    COLOR_CODES = {
        "DEBUG": "\033[1;36;47m",   # bold cyan on white
        "INFO": "\033[32m",         # green
        "WARNING": "\033[33m",      # yellow
        "ERROR": "\033[31m",        # red
        "CRITICAL": "\033[1;41m",   # bold on red
        "RESET": "\033[0m",
    }

    def __init__(self, fmt: str | None = None, datefmt: str | None = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)

    def format(self, record: LogRecord) -> str:
        color = self.COLOR_CODES.get(record.levelname, "")
        # reset right after the level so the color doesn't bleed into the message
        reset = self.COLOR_CODES["RESET"]
        timestamp = self.formatTime(record, self.datefmt)

        base = (
            f"{timestamp} | {color}{record.levelname:<10}{reset} | "
            f"{record.name:<30} | "
            f"{getattr(record, 'request_id', '-'):<10} | "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            base = base + "\n" + self.formatException(record.exc_info)

        return base
