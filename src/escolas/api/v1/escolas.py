"""
/escolas endpoints.

Successful JSON responses use the {"success", "message", "data"} envelope.
Errors raised by the service are turned into {"detail", "code", "fields"}
bodies by the handlers in error_handlers.py. Deleting an unknown school is
answered here with a 404 body instead of an exception.
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from escolas.api.dependencies import get_escola_service
from escolas.exceptions.base import NotFoundError
from escolas.schemas.escola import (
    ApiResponse,
    EscolaCreateRequest,
    EscolaData,
    EscolaDTO,
    EscolaListData,
    EscolaUpdateRequest,
)
from escolas.services.escola_service import EscolaService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/escolas", tags=["escolas"])


@router.post("/", response_model=ApiResponse[EscolaData], status_code=status.HTTP_201_CREATED)
async def create_escola(
    body: EscolaCreateRequest,
    service: EscolaService = Depends(get_escola_service),
):
    escola = await service.create_escola(body.escola.model_dump(exclude_unset=True))
    return ApiResponse[EscolaData](message="Created successfully", data=EscolaData(escola=escola))


@router.get("/", response_model=ApiResponse[EscolaListData])
async def list_escolas(
    nome: str | None = None,
    service: EscolaService = Depends(get_escola_service),
):
    escolas = await service.find_all(nome)
    return ApiResponse[EscolaListData](message="OK", data=EscolaListData(escolas=escolas))


@router.get("/{EscolaGUID}", response_model=ApiResponse[EscolaDTO])
async def get_escola(
    EscolaGUID: str,
    service: EscolaService = Depends(get_escola_service),
):
    escola = await service.find_by_id(EscolaGUID)
    return ApiResponse[EscolaDTO](message="OK", data=escola)


@router.put("/{EscolaGUID}", response_model=ApiResponse[EscolaData])
async def update_escola(
    EscolaGUID: str,
    body: EscolaUpdateRequest,
    service: EscolaService = Depends(get_escola_service),
):
    escola = await service.update_escola(EscolaGUID, body.escola.model_dump(exclude_unset=True))
    return ApiResponse[EscolaData](message="Updated successfully", data=EscolaData(escola=escola))


@router.delete(
    "/{EscolaGUID}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"description": "Escola not found"}},
)
async def delete_escola(
    EscolaGUID: str,
    service: EscolaService = Depends(get_escola_service),
):
    if await service.delete_escola(EscolaGUID):
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    logger.info("escola.delete.not_found", extra={"guid": EscolaGUID})
    error = NotFoundError(f"Escola {EscolaGUID} not found", fields=["EscolaGUID"])
    return JSONResponse(
        status_code=error.http_status(),
        content={"success": False, **error.to_payload()},
    )
