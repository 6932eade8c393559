"""
Escola entity: the in-memory, validated representation of one school record.

The entity is a frozen pydantic model. Every field goes through the rules in
`escolas.validators.escola_validators` when the instance is built, so an
`Escola` that exists is always valid. Changes are made by building a new
instance with `with_changes()`, which re-runs every rule.

Field names are snake_case in Python and keep the wire/column names as
aliases, so both spellings are accepted on construction:

    Escola(guid="...", nome="Colegio Azul")
    Escola(EscolaGUID="...", EscolaNome="Colegio Azul")

Invalid input raises `EntityValidationError` naming the wire field(s).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from escolas.exceptions.base import EntityValidationError
from escolas.validators.escola_validators import (
    normalize_guid,
    normalize_nome,
    normalize_hex_color,
    normalize_icone,
)

# python field name -> wire/column name
FIELD_ALIASES: dict[str, str] = {
    "guid": "EscolaGUID",
    "nome": "EscolaNome",
    "cor_pri_es": "EscolaCorPriEs",
    "cor_pri_cl": "EscolaCorPriCl",
    "cor_sec_es": "EscolaCorSecEs",
    "cor_sec_cl": "EscolaCorSecCl",
    "icone": "EscolaIcone",
}

WIRE_TO_FIELD: dict[str, str] = {wire: name for name, wire in FIELD_ALIASES.items()}

COLOR_FIELDS = ("cor_pri_es", "cor_pri_cl", "cor_sec_es", "cor_sec_cl")

# Every field except the identifier can be replaced by an update.
MUTABLE_FIELDS = ("nome", *COLOR_FIELDS, "icone")


def _error_field(loc: tuple) -> str:
    name = str(loc[0]) if loc else "Escola"
    return FIELD_ALIASES.get(name, name)


def _error_message(error: dict) -> str:
    # ValueErrors from our rules arrive wrapped as "Value error, <message>"
    ctx_error = (error.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    return error.get("msg", "Invalid value")


class Escola(BaseModel):
    """
    A school record.

    Attributes:
        guid: 36-character identifier (immutable, primary key).
        nome: school name, 3-100 characters once trimmed, or None.
        cor_pri_es / cor_pri_cl: primary colors (school / classroom), 6 HEX digits or None.
        cor_sec_es / cor_sec_cl: secondary colors (school / classroom), 6 HEX digits or None.
        icone: raw icon bytes or None.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    guid: str = Field(alias="EscolaGUID")
    nome: str | None = Field(default=None, alias="EscolaNome")
    cor_pri_es: str | None = Field(default=None, alias="EscolaCorPriEs")
    cor_pri_cl: str | None = Field(default=None, alias="EscolaCorPriCl")
    cor_sec_es: str | None = Field(default=None, alias="EscolaCorSecEs")
    cor_sec_cl: str | None = Field(default=None, alias="EscolaCorSecCl")
    icone: bytes | None = Field(default=None, alias="EscolaIcone")

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as exc:
            errors: dict[str, str] = {}
            for error in exc.errors():
                errors.setdefault(_error_field(error.get("loc", ())), _error_message(error))
            message = "; ".join(errors.values()) or "Invalid Escola"
            raise EntityValidationError(message, fields=list(errors), errors=errors) from None

    # --- Validators ---
    @field_validator("guid", mode="before")
    @classmethod
    def validate_guid(cls, value: Any) -> str:
        return normalize_guid(value)

    @field_validator("nome", mode="before")
    @classmethod
    def validate_nome(cls, value: Any) -> str | None:
        return normalize_nome(value)

    @field_validator(*COLOR_FIELDS, mode="before")
    @classmethod
    def validate_color(cls, value: Any, info: ValidationInfo) -> str | None:
        return normalize_hex_color(value, FIELD_ALIASES[info.field_name])

    @field_validator("icone", mode="before")
    @classmethod
    def validate_icone(cls, value: Any) -> bytes | None:
        return normalize_icone(value)

    # --- Controlled mutation ---
    def with_changes(self, **changes: Any) -> "Escola":
        """
        Return a new, re-validated Escola with `changes` applied.

        Keys are python field names (``nome=None``); the identifier cannot change.
        """
        unknown = [k for k in changes if k not in MUTABLE_FIELDS]
        if unknown:
            raise EntityValidationError(
                f"Field(s) cannot be changed: {', '.join(sorted(unknown))}",
                fields=[FIELD_ALIASES.get(k, k) for k in sorted(unknown)],
            )

        values = {name: getattr(self, name) for name in FIELD_ALIASES}
        values.update(changes)
        return Escola(**values)

    def model_copy(self, *, update: dict[str, Any] | None = None, deep: bool = False) -> "Escola":
        # pydantic's copy skips validation; updates go through the field rules
        if update:
            return self.with_changes(**update)
        return super().model_copy(deep=deep)

    def __repr__(self) -> str:
        return f"<Escola(guid={self.guid!r}, nome={self.nome!r})>"
