"""
Wire schemas for the /escolas endpoints.

Request bodies wrap the school object in an `escola` key. Field names are the
wire/column names (EscolaNome, ...). Known fields must be strings when present
and non-null; unknown keys are dropped. Entity rules (lengths, HEX format)
are not repeated here; they run when the service builds the `Escola`.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictStr

T = TypeVar("T")


class EscolaDTO(BaseModel):
    """Wire projection of an Escola; the icon is base64 text."""

    EscolaGUID: str
    EscolaNome: str | None = None
    EscolaCorPriEs: str | None = None
    EscolaCorPriCl: str | None = None
    EscolaCorSecEs: str | None = None
    EscolaCorSecCl: str | None = None
    EscolaIcone: str | None = None


class EscolaUpdateIn(BaseModel):
    """
    Partial update. Only keys the client actually sent reach the service
    (`model_dump(exclude_unset=True)`), so an explicit null clears a field
    while an absent key keeps it. The identifier comes from the path.
    """

    model_config = ConfigDict(extra="ignore")

    EscolaNome: StrictStr | None = None
    EscolaCorPriEs: StrictStr | None = None
    EscolaCorPriCl: StrictStr | None = None
    EscolaCorSecEs: StrictStr | None = None
    EscolaCorSecCl: StrictStr | None = None
    EscolaIcone: StrictStr | None = None


class EscolaCreateIn(EscolaUpdateIn):
    """New school. `EscolaNome` is required and may not be empty."""

    EscolaGUID: StrictStr | None = None
    EscolaNome: StrictStr = Field(min_length=1)


class EscolaCreateRequest(BaseModel):
    escola: EscolaCreateIn


class EscolaUpdateRequest(BaseModel):
    escola: EscolaUpdateIn


# --- Response envelopes ---

class EscolaData(BaseModel):
    escola: EscolaDTO


class EscolaListData(BaseModel):
    escolas: list[EscolaDTO]


class ApiResponse(BaseModel, Generic[T]):
    """{"success": ..., "message": ..., "data": ...} envelope used by every 2xx JSON response."""

    success: bool = True
    message: str
    data: T
