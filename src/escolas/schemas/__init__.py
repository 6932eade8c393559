from .escola import (
    ApiResponse,
    EscolaCreateIn,
    EscolaCreateRequest,
    EscolaData,
    EscolaDTO,
    EscolaListData,
    EscolaUpdateIn,
    EscolaUpdateRequest,
)

__all__ = [
    "ApiResponse",
    "EscolaCreateIn",
    "EscolaCreateRequest",
    "EscolaData",
    "EscolaDTO",
    "EscolaListData",
    "EscolaUpdateIn",
    "EscolaUpdateRequest",
]
