"""
Escola repository: maps `Escola` entities to rows of the `escola` table and back.

Row access goes through `BaseRepository`; this module owns the mapping and
the closed set of columns that can be searched by equality (`EscolaField`).
"""

from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from escolas.domain.escola import Escola, FIELD_ALIASES, MUTABLE_FIELDS
from escolas.exceptions.base import InvalidFieldError
from escolas.models.escola import EscolaRecord
from .base_repository import BaseRepository


class EscolaField(str, Enum):
    """Columns that `find_by_field` may query. The icon is not searchable."""

    GUID = "EscolaGUID"
    NOME = "EscolaNome"
    COR_PRI_ES = "EscolaCorPriEs"
    COR_PRI_CL = "EscolaCorPriCl"
    COR_SEC_ES = "EscolaCorSecEs"
    COR_SEC_CL = "EscolaCorSecCl"

    @property
    def column(self) -> InstrumentedAttribute:
        return _FIELD_COLUMNS[self]

    @classmethod
    def parse(cls, field: "EscolaField | str") -> "EscolaField":
        """
        Accept an enum member or its wire name; anything else raises InvalidFieldError.
        """
        if isinstance(field, cls):
            return field
        try:
            return cls(field)
        except ValueError:
            raise InvalidFieldError(f"Invalid field: {field}", fields=[str(field)]) from None


_FIELD_COLUMNS: dict[EscolaField, InstrumentedAttribute] = {
    EscolaField.GUID: EscolaRecord.guid,
    EscolaField.NOME: EscolaRecord.nome,
    EscolaField.COR_PRI_ES: EscolaRecord.cor_pri_es,
    EscolaField.COR_PRI_CL: EscolaRecord.cor_pri_cl,
    EscolaField.COR_SEC_ES: EscolaRecord.cor_sec_es,
    EscolaField.COR_SEC_CL: EscolaRecord.cor_sec_cl,
}


def record_to_entity(record: EscolaRecord) -> Escola:
    """Materialize a row as a validated entity."""
    return Escola(**{name: getattr(record, name) for name in FIELD_ALIASES})


def entity_to_values(escola: Escola) -> dict:
    """All seven column values of an entity, keyed by model attribute name."""
    return {name: getattr(escola, name) for name in FIELD_ALIASES}


class EscolaRepository(BaseRepository[EscolaRecord]):
    """
    Persistence for `Escola`.

    Writes are sent immediately but not committed; call `commit()` to end the unit of work.
    """

    entity_name = "Escola"

    def __init__(self, db: AsyncSession):
        super().__init__(EscolaRecord, db)

    # =================================================================================================================
    # Write operations
    # =================================================================================================================

    async def create(self, escola: Escola) -> str:
        """
        Insert `escola` with all seven columns.

        Returns:
            The identifier of the new row.

        Raises:
            DuplicateError: identifier or name already stored
        """
        await self.insert(**entity_to_values(escola))
        return escola.guid

    async def update(self, escola: Escola) -> bool:
        """
        Overwrite every mutable column of the row with `escola.guid`.

        Returns:
            Whether a row matched the identifier.
        """
        values = {name: getattr(escola, name) for name in MUTABLE_FIELDS}
        return await self.update_by_id(escola.guid, **values)

    async def delete(self, guid: str) -> bool:
        """Returns True when a row was removed; absence is not an error."""
        return await self.delete_by_id(guid)

    # =================================================================================================================
    # Read operations
    # =================================================================================================================

    async def find_all(self, nome: str | None = None) -> list[Escola]:
        """
        Every school, or those whose name contains `nome`.

        The substring is bound as a LIKE parameter with `%` and `_` escaped;
        case sensitivity follows the column collation. An empty filter lists
        everything.
        """
        if nome:
            records = await self.list_where(EscolaRecord.nome.contains(nome, autoescape=True))
        else:
            records = await self.list_where()
        return [record_to_entity(r) for r in records]

    async def find_by_id(self, guid: str) -> Escola | None:
        record = await self.get_by_id(guid)
        if record is None:
            return None
        return record_to_entity(record)

    async def find_by_field(self, field: EscolaField | str, value) -> list[Escola]:
        """
        Equality lookup on one searchable column.

        Args:
            field: an `EscolaField` member or its wire name (e.g. "EscolaNome")
            value: compared with `=`; bound as a parameter

        Raises:
            InvalidFieldError: `field` is not one of the searchable columns;
                raised before any statement is sent
        """
        column_field = EscolaField.parse(field)
        records = await self.find_all_by(column_field.column, value)
        return [record_to_entity(r) for r in records]
