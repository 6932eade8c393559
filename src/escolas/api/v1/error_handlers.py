# escolas/api/v1/error_handlers.py
"""
FastAPI exception handlers that map app-level exceptions to HTTP responses.

The service and repositories raise escolas.exceptions.base.* exceptions; these
handlers only render them, with the body from `.to_payload()` and the status
from `.http_status()`:

    {"detail": "...", "code": "duplicate", "fields": ["EscolaNome"]}

Request bodies that fail schema validation get the same shape with
code "invalid_input".
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from escolas.exceptions.base import (
    RepositoryError,
    DuplicateError,
    EntityValidationError,
    InvalidFieldError,
    NotFoundError,
    StorageError,
)

logger = logging.getLogger(__name__)


# Most specific first; mapping lives in the exception classes.

async def duplicate_error_handler(request: Request, exc: DuplicateError) -> JSONResponse:
    """409 Conflict."""
    logger.info("DuplicateError for %s %s: fields=%s", request.method, request.url.path, exc.fields)
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def entity_validation_handler(request: Request, exc: EntityValidationError) -> JSONResponse:
    """422 for values breaking an entity rule."""
    logger.info("EntityValidationError for %s %s: fields=%s", request.method, request.url.path, exc.fields)
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def invalid_field_handler(request: Request, exc: InvalidFieldError) -> JSONResponse:
    logger.info("InvalidFieldError for %s %s: fields=%s", request.method, request.url.path, exc.fields)
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """404 Not Found."""
    logger.info("NotFoundError for %s %s: fields=%s", request.method, request.url.path, exc.fields)
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """500; the original exception was already logged with its traceback by db_error_handler."""
    logger.warning("StorageError for %s %s: %s", request.method, request.url.path, str(exc))
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    """
    Fallback for other app-level errors -> 400 by default (or code-defined status).
    """
    logger.warning("RepositoryError for %s %s: %s", request.method, request.url.path, str(exc))
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


def _field_from_loc(loc: tuple) -> str:
    # ("body", "escola", "EscolaNome") -> "EscolaNome"; ("query", "nome") -> "nome"
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return parts[-1] if parts else "body"


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 for request bodies/params that don't match the wire schema."""
    errors = exc.errors()
    fields: list[str] = []
    messages: list[str] = []
    for error in errors:
        field = _field_from_loc(tuple(error.get("loc", ())))
        if field not in fields:
            fields.append(field)
            messages.append(f"{field}: {error.get('msg', 'invalid value')}")

    logger.info("RequestValidationError for %s %s: fields=%s", request.method, request.url.path, fields)
    payload = {"detail": "; ".join(messages) or "Invalid request", "code": "invalid_input"}
    if fields:
        payload["fields"] = fields
    return JSONResponse(status_code=422, content=payload)


# Helper to register all handlers on an app (call this from the app factory)
def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DuplicateError, duplicate_error_handler)
    app.add_exception_handler(EntityValidationError, entity_validation_handler)
    app.add_exception_handler(InvalidFieldError, invalid_field_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(RepositoryError, repository_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
