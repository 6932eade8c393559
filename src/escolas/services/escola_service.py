"""
Escola application service.

Orchestrates the repository for the /escolas use cases:
  - default identifier (uuid4) on create
  - name pre-check on create (the unique index remains the final word)
  - merge-by-key-presence on update
  - base64 <-> bytes for EscolaIcone
  - projection of entities to `EscolaDTO`

Inputs are mappings keyed by wire names (EscolaNome, ...). Each write
operation commits before returning.
"""

import base64
import binascii
import logging
from typing import Any, Mapping
from uuid import uuid4

from escolas.domain.escola import Escola, FIELD_ALIASES, WIRE_TO_FIELD, MUTABLE_FIELDS
from escolas.exceptions.base import DuplicateError, EntityValidationError, NotFoundError
from escolas.repositories.escola_repository import EscolaField, EscolaRepository
from escolas.schemas.escola import EscolaDTO

logger = logging.getLogger(__name__)

ICONE = FIELD_ALIASES["icone"]


def decode_icone(value: Any) -> bytes | None:
    """base64 text -> bytes. None and "" mean no icon."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise EntityValidationError(f"{ICONE} must be a base64 string", fields=[ICONE])
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        raise EntityValidationError(f"{ICONE} is not valid base64", fields=[ICONE]) from None


def encode_icone(value: bytes | None) -> str | None:
    if value is None:
        return None
    return base64.b64encode(value).decode("ascii")


def to_dto(escola: Escola) -> EscolaDTO:
    return EscolaDTO(
        EscolaGUID=escola.guid,
        EscolaNome=escola.nome,
        EscolaCorPriEs=escola.cor_pri_es,
        EscolaCorPriCl=escola.cor_pri_cl,
        EscolaCorSecEs=escola.cor_sec_es,
        EscolaCorSecCl=escola.cor_sec_cl,
        EscolaIcone=encode_icone(escola.icone),
    )


class EscolaService:
    def __init__(self, repository: EscolaRepository):
        self.repository = repository

    async def create_escola(self, raw: Mapping[str, Any]) -> EscolaDTO:
        """
        Build, check and persist a new school.

        Raises:
            EntityValidationError: a field breaks an entity rule or the icon is not base64
            DuplicateError: a school with exactly this name (or identifier) exists
        """
        values = {
            name: raw.get(wire)
            for wire, name in WIRE_TO_FIELD.items()
            if name not in ("guid", "icone")
        }
        values["guid"] = raw.get("EscolaGUID") or str(uuid4())
        values["icone"] = decode_icone(raw.get(ICONE))

        escola = Escola(**values)

        if escola.nome:
            existing = await self.repository.find_by_field(EscolaField.NOME, escola.nome)
            if existing:
                logger.info("escola.create.duplicate_name", extra={"nome": escola.nome})
                raise DuplicateError(
                    f"Escola '{escola.nome}' already exists",
                    fields=[EscolaField.NOME.value],
                )

        await self.repository.create(escola)
        await self.repository.commit()

        logger.info("escola.created", extra={"guid": escola.guid})
        return to_dto(escola)

    async def find_all(self, nome: str | None = None) -> list[EscolaDTO]:
        escolas = await self.repository.find_all(nome)
        return [to_dto(e) for e in escolas]

    async def find_by_id(self, guid: str) -> EscolaDTO:
        escola = await self.repository.find_by_id(guid)
        if escola is None:
            raise NotFoundError(f"Escola {guid} not found", fields=[EscolaField.GUID.value])
        return to_dto(escola)

    async def update_escola(self, guid: str, partial: Mapping[str, Any]) -> EscolaDTO:
        """
        Apply `partial` to the stored school.

        A key present in `partial` overrides the stored value, even when it is
        None; a missing key keeps it. The identifier is never taken from
        `partial`.

        Raises:
            NotFoundError: no school with `guid`
            EntityValidationError: merged values break an entity rule
            DuplicateError: the new name belongs to another school
        """
        current = await self.repository.find_by_id(guid)
        if current is None:
            raise NotFoundError(f"Escola {guid} not found", fields=[EscolaField.GUID.value])

        changes: dict[str, Any] = {}
        for name in MUTABLE_FIELDS:
            wire = FIELD_ALIASES[name]
            if wire not in partial:
                continue
            value = partial[wire]
            changes[name] = decode_icone(value) if name == "icone" else value

        updated = current.with_changes(**changes)

        await self.repository.update(updated)
        await self.repository.commit()

        logger.info(
            "escola.updated",
            extra={"guid": guid, "changed": sorted(FIELD_ALIASES[n] for n in changes)},
        )
        return to_dto(updated)

    async def delete_escola(self, guid: str) -> bool:
        deleted = await self.repository.delete(guid)
        if deleted:
            await self.repository.commit()
            logger.info("escola.deleted", extra={"guid": guid})
        return deleted
