# escolas/core/logging/builder.py
"""
Logging builder: turn Settings into a dictConfig and apply it, optionally
moving the actual log IO to a background QueueListener.

Knobs (see escolas.config.settings):
 - LOG_LEVEL, LOG_FORMAT ("json" | "text"), ENV
 - LOG_TO_STDOUT / LOG_DIR: console only, or console + rotating files
 - ENABLE_SQL_LOGGING: DEBUG for sqlalchemy.engine (statements may contain data)
 - LOG_USE_QUEUE: producers only enqueue; a QueueListener thread writes
 - LOG_QUEUE_MAX_SIZE: > 0 bounds the queue, 0 leaves it unbounded
 - LOG_QUEUE_BLOCKING: on a full bounded queue, block (True) or drop (False)
 - LOG_QUEUE_DROP_WARNING_THRESHOLD: warn every N dropped records
"""

from __future__ import annotations

from pathlib import Path
import logging
import logging.config
import queue as _queue
import threading
from typing import Optional
from logging.handlers import QueueHandler, QueueListener

from escolas.config.settings import Settings
from escolas.utils.logging import get_project_name

from .formatters import JsonFormatter, ColorFormatter
from .filters import RequestIdFilter, RedactFilter
from .handlers import (
    get_console_handler,
    get_file_handler,
    get_error_file_handler,
    get_error_console_handler,
)

logger = logging.getLogger(__name__)

# Running listener and its queue, so stop_queue_logging() can shut them down
_QUEUE_LISTENER: Optional[QueueListener] = None
_QUEUE: Optional[_queue.Queue] = None

_DROPPED_LOGS_COUNT = 0
_DROPPED_LOGS_LOCK = threading.Lock()
_DROP_WARNING_THRESHOLD = 100


class NonBlockingQueueHandler(QueueHandler):
    """
    QueueHandler that drops the record instead of blocking when a bounded
    queue is full. Drops are counted (see get_queue_stats()) and a warning is
    enqueued every LOG_QUEUE_DROP_WARNING_THRESHOLD drops once there is room.
    """

    def emit(self, record: logging.LogRecord) -> None:
        global _DROPPED_LOGS_COUNT
        try:
            self.queue.put_nowait(self.prepare(record))
        except _queue.Full:
            with _DROPPED_LOGS_LOCK:
                _DROPPED_LOGS_COUNT += 1
                dropped = _DROPPED_LOGS_COUNT
            if _DROP_WARNING_THRESHOLD > 0 and dropped % _DROP_WARNING_THRESHOLD == 0:
                self._warn_dropped(dropped)

    def _warn_dropped(self, dropped: int) -> None:
        warning = logging.LogRecord(
            name=__name__,
            level=logging.WARNING,
            pathname=__file__,
            lineno=0,
            msg="Dropped %d log records because the log queue was full",
            args=(dropped,),
            exc_info=None,
        )
        try:
            self.queue.put_nowait(self.prepare(warning))
        except _queue.Full:
            pass


def get_queue_stats() -> dict:
    with _DROPPED_LOGS_LOCK:
        return {"dropped_logs": _DROPPED_LOGS_COUNT, "queue_present": _QUEUE is not None}


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping:
      - formatters: "standard" (color in text mode) and "json"
      - filters: "request_id", "redact"
      - handlers: console + (file, error_file) when writing to LOG_DIR, else console + error_console
      - loggers: root, uvicorn.error, uvicorn.access, sqlalchemy.engine
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": get_project_name(),
        },
    }

    filters = {
        "request_id": {"()": RequestIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}

    if (not settings.LOG_TO_STDOUT) and settings.LOG_DIR:
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers.keys()),
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            "uvicorn.error": {
                "level": settings.LOG_LEVEL,
                "handlers": list(handlers.keys()),
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": "DEBUG" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    """
    Apply the logging configuration; with LOG_USE_QUEUE, move the configured
    handlers behind a QueueListener.

    Calling it again (e.g. a second app in the same process) stops the previous
    listener first.
    """
    global _QUEUE_LISTENER, _QUEUE, _DROP_WARNING_THRESHOLD

    stop_queue_logging()

    if (not settings.LOG_TO_STDOUT) and settings.LOG_DIR:
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))

    root_logger = logging.getLogger()
    # keeps %(request_id)s safe for handlers added later without the filter
    root_logger.addFilter(RequestIdFilter())

    if not settings.LOG_USE_QUEUE:
        return

    real_handlers = list(root_logger.handlers)
    if not real_handlers:
        return

    # Real handlers must only run in the listener thread
    moved = set(real_handlers)
    for logger_obj in list(logging.Logger.manager.loggerDict.values()):
        if isinstance(logger_obj, logging.Logger):
            for h in list(logger_obj.handlers):
                if h in moved:
                    logger_obj.removeHandler(h)
    for h in list(root_logger.handlers):
        root_logger.removeHandler(h)

    max_size = settings.LOG_QUEUE_MAX_SIZE or 0
    log_queue: _queue.Queue = _queue.Queue(max_size) if max_size > 0 else _queue.Queue()

    if max_size > 0 and not settings.LOG_QUEUE_BLOCKING:
        queue_handler: QueueHandler = NonBlockingQueueHandler(log_queue)
    else:
        queue_handler = QueueHandler(log_queue)

    # Producer-side filters: contextvars and secrets are only available/relevant here
    queue_handler.addFilter(RequestIdFilter())
    queue_handler.addFilter(RedactFilter())

    listener = QueueListener(log_queue, *real_handlers, respect_handler_level=True)
    listener.start()
    root_logger.addHandler(queue_handler)

    _DROP_WARNING_THRESHOLD = settings.LOG_QUEUE_DROP_WARNING_THRESHOLD
    _QUEUE_LISTENER = listener
    _QUEUE = log_queue
    logger.debug("logging.queue_started", extra={"max_size": max_size})


def stop_queue_logging() -> None:
    """Flush and stop the QueueListener, if one is running."""
    global _QUEUE_LISTENER, _QUEUE
    listener = _QUEUE_LISTENER
    if listener is None:
        return

    try:
        listener.stop()
    except RuntimeError:
        logging.getLogger(__name__).exception("Failed to stop QueueListener cleanly")
    finally:
        _QUEUE_LISTENER = None
        _QUEUE = None
