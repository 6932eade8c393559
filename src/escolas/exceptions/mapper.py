"""
Map SQLAlchemy errors to app-level exceptions.

Two levels:
  - integrity_classifier.py tags *what* failed in the database
    (UniqueConstraintError, NotNullConstraintError, ...);
  - this module turns that tag into the public error (DuplicateError,
    RepositoryError) with the offending column names attached.

Repositories use the `db_error_handler` context manager around every statement
so rollback + mapping lives in one place.
"""
import re
import logging
from contextlib import asynccontextmanager

from sqlalchemy import Table
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .integrity_classifier import (
    classify_integrity_error,
    UniqueConstraintError,
    NotNullConstraintError,
    ForeignKeyConstraintError,
    CheckConstraintError,
)
from .base import DuplicateError, RepositoryError, StorageError

logger = logging.getLogger(__name__)

# -----------------------
# Column extraction helpers
# -----------------------


def _extract_columns_sqlite(msg: str) -> list[str] | None:
    # 'UNIQUE constraint failed: escola.EscolaNome'
    # 'NOT NULL constraint failed: escola.EscolaGUID'
    m = re.search(r'(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>.+)$', msg, flags=re.IGNORECASE)
    if m:
        return [c.split('.')[-1].strip() for c in re.split(r',\s*', m.group("cols"))]
    return None


def _extract_mysql_key(msg: str) -> str | None:
    # "Duplicate entry 'Colegio Azul' for key 'escola.uq_escola_EscolaNome'"
    # "Duplicate entry '...' for key 'PRIMARY'"
    m = re.search(r"for key '(?P<key>[^']+)'", msg, flags=re.IGNORECASE)
    if m:
        return m.group("key").split(".")[-1]
    return None


def _extract_mysql_null_column(msg: str) -> list[str] | None:
    # "Column 'EscolaGUID' cannot be null"
    m = re.search(r"Column '(?P<col>[^']+)' cannot be null", msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]
    return None


def _columns_for_key(key: str, table: Table | None) -> list[str]:
    """
    Resolve a MySQL key name to column names using the table metadata
    (primary key, unique constraints and unique indexes).
    """
    if table is None:
        return [key]

    if key.upper() == "PRIMARY":
        return [c.name for c in table.primary_key.columns]

    for constraint in table.constraints:
        if constraint.name == key:
            return [c.name for c in constraint.columns]

    for index in table.indexes:
        if index.name == key:
            return [c.name for c in index.columns]

    return [key]


def extract_columns_from_integrity(exc: IntegrityError, table: Table | None = None) -> list[str] | None:
    """
    Best-effort extraction of column names from the DB message (SQLite, MySQL).
    """
    orig = exc.orig
    msg = str(orig) if orig is not None else str(exc)

    cols = _extract_columns_sqlite(msg)
    if cols:
        return cols

    key = _extract_mysql_key(msg)
    if key:
        return _columns_for_key(key, table)

    return _extract_mysql_null_column(msg)


# -----------------------
# Mapper
# -----------------------

def raise_mapped_integrity_error(exc: IntegrityError, model_name: str | None = None,
                                 table: Table | None = None) -> None:
    """
    Map a SQLAlchemy IntegrityError to an app-level exception and raise it.
    """
    exc_cls = classify_integrity_error(exc)
    columns = extract_columns_from_integrity(exc, table)

    model_part = model_name or "Record"

    if exc_cls is UniqueConstraintError:
        # expected client-level scenario (409), INFO is enough
        logger.info(
            "mapper.duplicate_detected",
            extra={"model": model_part, "fields": columns},
        )
        if columns:
            raise DuplicateError(
                f"{model_part} already exists for field(s): {', '.join(columns)}", fields=columns
            ) from exc
        raise DuplicateError(f"{model_part} already exists (unique constraint)") from exc

    if exc_cls is NotNullConstraintError:
        logger.info(
            "mapper.not_null_violation",
            extra={"model": model_part, "fields": columns},
        )
        if columns:
            raise RepositoryError(
                f"Missing required field(s): {', '.join(columns)} for {model_part}", fields=columns
            ) from exc
        raise RepositoryError(f"Missing required field for {model_part}") from exc

    if exc_cls is ForeignKeyConstraintError:
        logger.info("mapper.foreign_key_violation", extra={"model": model_part, "fields": columns})
        raise RepositoryError(f"{model_part} foreign key constraint violated", fields=columns) from exc

    if exc_cls is CheckConstraintError:
        raw = str(exc.orig) if exc.orig is not None else str(exc)
        logger.debug("mapper.check_constraint_failure", extra={"model": model_part, "raw": raw})
        raise RepositoryError(f"{model_part} business rule violated (check constraint).") from exc

    raw = str(exc.orig) if exc.orig is not None else str(exc)
    logger.warning("mapper.unknown_integrity_error", extra={"model": model_part})
    logger.debug("mapper.unknown_integrity_raw", extra={"model": model_part, "raw": raw})
    raise RepositoryError(f"{model_part} database integrity error.") from exc


# -----------------------
# Async context manager to DRY error handling in repositories
# -----------------------
@asynccontextmanager
async def db_error_handler(db: AsyncSession, model_name: str | None = None, table: Table | None = None):
    """
    Usage:
        async with db_error_handler(self.db, "Escola", EscolaRecord.__table__):
            ... statements that may raise IntegrityError ...

    Rolls the session back on failure and raises a mapped app-level exception.
    App-level errors raised inside the block pass through untouched.
    """
    try:
        yield
    except RepositoryError:
        raise
    except IntegrityError as exc:
        try:
            await db.rollback()
        except Exception:
            logger.exception("Failed to rollback session after IntegrityError", extra={"model": model_name})
        raise_mapped_integrity_error(exc, model_name, table)
    except Exception as exc:
        try:
            await db.rollback()
        except Exception:
            logger.exception("Failed to rollback session after unexpected error", extra={"model": model_name})

        logger.exception("Unexpected DB error for %s", model_name, extra={"model": model_name})
        raise StorageError(f"Failed to operate on {model_name or 'database'}") from exc
