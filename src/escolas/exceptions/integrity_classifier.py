"""
Classify SQLAlchemy IntegrityErrors into constraint-specific labels.

These classes are internal tags: the mapper (mapper.py) turns them into the
app-level errors from base.py. They are never raised to API callers.
"""

import logging
from enum import IntEnum
from typing import Type
from sqlalchemy.exc import IntegrityError
from .base import RepositoryError

logger = logging.getLogger(__name__)


class ConstraintViolationError(RepositoryError):
    """Base for integrity/constraint violations."""
    pass


class UniqueConstraintError(ConstraintViolationError):
    """Unique constraint / duplicate key (primary key included)."""
    pass


class NotNullConstraintError(ConstraintViolationError):
    """NOT NULL violation."""
    pass


class ForeignKeyConstraintError(ConstraintViolationError):
    pass


class CheckConstraintError(ConstraintViolationError):
    pass


class UnknownIntegrityError(ConstraintViolationError):
    pass


# https://dev.mysql.com/doc/mysql-errors/8.0/en/server-error-reference.html
class MySQLErrorCodes(IntEnum):
    DUP_ENTRY = 1062
    BAD_NULL = 1048
    NO_DEFAULT_FOR_FIELD = 1364
    ROW_IS_REFERENCED = 1451
    NO_REFERENCED_ROW = 1452
    CHECK_CONSTRAINT_VIOLATED = 3819


MYSQL_ERRNO_EXCEPTION_MAP = {
    MySQLErrorCodes.DUP_ENTRY: UniqueConstraintError,
    MySQLErrorCodes.BAD_NULL: NotNullConstraintError,
    MySQLErrorCodes.NO_DEFAULT_FOR_FIELD: NotNullConstraintError,
    MySQLErrorCodes.ROW_IS_REFERENCED: ForeignKeyConstraintError,
    MySQLErrorCodes.NO_REFERENCED_ROW: ForeignKeyConstraintError,
    MySQLErrorCodes.CHECK_CONSTRAINT_VIOLATED: CheckConstraintError,
}


def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def _classify_from_mysql_errno(orig) -> Type[ConstraintViolationError] | None:
    """
    PyMySQL (and so aiomysql) errors carry the server errno as args[0].
    """
    args = getattr(orig, "args", None) or ()
    if not args or not isinstance(args[0], int):
        return None

    errno = args[0]
    try:
        exception_class = MYSQL_ERRNO_EXCEPTION_MAP.get(MySQLErrorCodes(errno))
    except ValueError:
        exception_class = None

    if exception_class:
        logger.debug("MySQL integrity diagnostic", extra={"mysql_errno": errno})
        return exception_class

    logger.warning("Unknown MySQL integrity error code encountered", extra={"mysql_errno": errno})
    return UnknownIntegrityError


def _classify_from_generic_message(msg: str) -> Type[ConstraintViolationError]:
    """
    Fallback for drivers without error numbers (SQLite in tests, mostly).
    """
    normalized = (msg or "").lower()

    if _match_any(normalized, ["unique constraint", "unique failed", "unique violation", "duplicate"]):
        return UniqueConstraintError

    if _match_any(normalized, ["not null constraint", "not null", "cannot be null", "null value in column"]):
        return NotNullConstraintError

    if _match_any(normalized, ["foreign key constraint", "foreign key"]):
        return ForeignKeyConstraintError

    if _match_any(normalized, ["check constraint", "check failed"]):
        return CheckConstraintError

    logger.warning("Unknown integrity error message encountered", extra={"message_snippet": (msg or "")[:200]})
    logger.debug("Unknown integrity raw message", extra={"raw": msg})
    return UnknownIntegrityError


def classify_integrity_error(exc: IntegrityError) -> Type[ConstraintViolationError]:
    """
    Classify a SQLAlchemy IntegrityError into a ConstraintViolationError subclass.
    MySQL error numbers win; message heuristics cover every other driver.
    """
    orig = exc.orig

    exception_class = _classify_from_mysql_errno(orig)
    if exception_class is not None:
        return exception_class

    return _classify_from_generic_message(str(orig) if orig is not None else str(exc))
