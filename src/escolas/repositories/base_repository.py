"""
Base repository providing the statement-level operations shared by repositories.

`BaseRepository` works on an ORM model class and an AsyncSession. It only
knows about rows: model-specific repositories (e.g. EscolaRepository) build on
it and translate rows to domain entities.

Every statement runs inside `db_error_handler`, so IntegrityErrors come out as
DuplicateError/RepositoryError and anything unexpected as StorageError, with
the session rolled back.

Repositories never commit on their own; the caller ends the unit of
work with `commit()` once all of its writes succeeded.
"""
from escolas.exceptions.mapper import db_error_handler

import time
from typing import TypeVar, Generic, Type, Any
from sqlalchemy import inspect as sa_inspect, insert, select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute
import logging

from escolas.database.base import Base

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository for a single-table model with a single-column primary key.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
    """

    # Name used in error messages and logs; subclasses set the domain name.
    entity_name: str | None = None

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Args:
            model: the SQLAlchemy model class (not an instance)
            db: the async database session (usually injected via a FastAPI dependency)
        """
        self.model = model
        self.db = db
        self.name = self.entity_name or model.__name__
        self.table = model.__table__
        mapper = sa_inspect(model)
        self.pk = mapper.primary_key[0]
        # attribute name of the primary key column ("guid" for column "EscolaGUID")
        self.pk_attr = mapper.get_property_by_column(self.pk).key

    def _errors(self):
        return db_error_handler(self.db, self.name, self.table)

    # =================================================================================================================
    # Write operations
    # =================================================================================================================

    def _column_values(self, values: dict[str, Any]) -> dict:
        # attribute names -> mapped attributes (column names may differ)
        return {getattr(self.model, key): value for key, value in values.items()}

    async def insert(self, **values: Any) -> Any:
        """
        Insert one row built from `values` (model attribute names).

        A statement is used rather than session.add(), so a stale instance with
        the same key in the identity map can't turn the INSERT into an UPDATE.

        Returns:
            The primary key value of the new row.

        Raises:
            DuplicateError: primary key or unique column already taken
            RepositoryError / StorageError: any other failure
        """
        logger.debug(
            "repo.insert.start",
            extra={"model": self.name, "provided_keys": sorted(values.keys())},
        )
        start = time.perf_counter()

        stmt = insert(self.model).values(self._column_values(values))
        async with self._errors():
            await self.db.execute(stmt)

        entity_id = values.get(self.pk_attr)
        logger.info(
            "repo.insert.success",
            extra={
                "model": self.name,
                "id": entity_id,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity_id

    async def update_by_id(self, entity_id: Any, **values: Any) -> bool:
        """
        Overwrite the given columns of the row matching `entity_id`.

        Unlike a partial-update helper, None values are written as NULL.

        Returns:
            True if a row matched, False otherwise.
        """
        stmt = (
            update(self.model)
            .where(self.pk == entity_id)
            .values(self._column_values(values))
            .execution_options(synchronize_session="fetch")
        )

        async with self._errors():
            result = await self.db.execute(stmt)

        if result.rowcount == 0:
            logger.info("repo.update.no_match", extra={"model": self.name, "id": entity_id})
            return False

        logger.debug("repo.update.success", extra={"model": self.name, "id": entity_id})
        return True

    async def delete_by_id(self, entity_id: Any) -> bool:
        """
        Delete the row matching `entity_id`.

        Returns:
            True if a row was deleted, False if none matched (not an error).
        """
        stmt = (
            delete(self.model)
            .where(self.pk == entity_id)
            .execution_options(synchronize_session="fetch")
        )

        async with self._errors():
            result = await self.db.execute(stmt)

        if result.rowcount > 0:
            logger.debug("repo.delete.success", extra={"model": self.name, "id": entity_id})
            return True

        logger.info("repo.delete.no_match", extra={"model": self.name, "id": entity_id})
        return False

    # =================================================================================================================
    # Read operations
    # =================================================================================================================

    async def get_by_id(self, entity_id: Any) -> ModelType | None:
        """
        Returns:
            The row with this primary key, or None.
        """
        async with self._errors():
            result = await self.db.execute(select(self.model).where(self.pk == entity_id))
            return result.scalar_one_or_none()

    async def find_all_by(self, column: InstrumentedAttribute, value: Any) -> list[ModelType]:
        """
        Equality lookup on one column. `column` must be a mapped attribute of
        the model (never a caller-supplied string); the value is bound as a
        parameter.
        """
        async with self._errors():
            result = await self.db.execute(select(self.model).where(column == value))
            rows = list(result.scalars().all())

        logger.debug(
            "repo.find_all_by",
            extra={"model": self.name, "column": column.key, "count": len(rows)},
        )
        return rows

    async def list_where(self, *criteria: Any) -> list[ModelType]:
        """
        Rows matching every SQL expression in `criteria` (all rows when empty).
        """
        query = select(self.model)
        if criteria:
            query = query.where(*criteria)

        async with self._errors():
            result = await self.db.execute(query)
            rows = list(result.scalars().all())

        logger.debug("repo.list", extra={"model": self.name, "count": len(rows)})
        return rows

    # =================================================================================================================
    # Unit of work
    # =================================================================================================================

    async def commit(self) -> None:
        """Commit the session; integrity failures at commit time are mapped too."""
        async with self._errors():
            await self.db.commit()
