"""
Logging filters.

RequestIdFilter stamps every LogRecord with the current request id, read from a
ContextVar so it follows the request across awaits. The middleware sets the id
at the start of each request. Records logged outside a request get "-".

RedactFilter masks attributes with sensitive names (password, token, ...) that
were attached through `extra={...}`. Database URLs carry the DB password, so
call sites should log `safe` renderings of them; this filter is the backstop.
"""

import logging
from logging import LogRecord
import contextvars

_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None):
    """Set the request id for the current context; returns a token for reset_request_id()."""
    return _request_id_ctx.set(request_id)


def reset_request_id(token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Guarantees `record.request_id` exists: an explicit extra wins, then the
    contextvar, then "-". Never drops a record.
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    SENSITIVE = {"password", "db_password", "secret", "token", "authorization", "database_url"}
    MASK = "***REDACTED***"

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = self.MASK
        return True
