"""
App-level exceptions raised by the entity, repository and service layers.
"""

from typing import Iterable


class RepositoryError(Exception):
    """
    Base exception for entity/repository/service errors.

    - message: human-friendly message (safe to show to clients)
    - fields: optional list of wire field names related to the error (e.g. ['EscolaNome'])
    - constraint: optional DB constraint name (for logs only)
    - error_code: canonical short code (e.g. 'duplicate', 'not_found') used by clients
    """

    # canonical error_code -> HTTP status
    ERROR_CODE_TO_STATUS = {
        "duplicate": 409,
        "invalid_field": 422,
        "not_found": 404,
        "invalid_input": 422,
        "storage_error": 500,
        # anything else: 400
    }

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        base = self.message
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{base} ({'; '.join(parts)})"
        return base

    def to_payload(self) -> dict:
        """
        Return the JSON body sent to clients:
            {"detail": "...", "code": "duplicate", "fields": ["EscolaNome"]}

        `constraint` is never included; it can leak schema details.
        """
        payload = {"detail": self.message}
        if self.error_code:
            payload["code"] = self.error_code
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload

    def http_status(self) -> int:
        if self.error_code:
            return self.ERROR_CODE_TO_STATUS.get(self.error_code, 400)
        return 400


class NotFoundError(RepositoryError):
    def __init__(self, message: str = "Not found", *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="not_found")


class DuplicateError(RepositoryError):
    def __init__(self, message: str, *, fields: Iterable[str] | None = None, constraint: str | None = None):
        super().__init__(message, fields=fields, constraint=constraint, error_code="duplicate")


class InvalidFieldError(RepositoryError):
    """Raised when a caller asks for a column outside the queryable set."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="invalid_field")


class EntityValidationError(RepositoryError):
    """
    Raised when a value violates an entity rule (length, HEX format, type...).

    `errors` keeps one message per offending field, in the order pydantic
    reported them.
    """

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 errors: dict[str, str] | None = None):
        super().__init__(message, fields=fields, error_code="invalid_input")
        self.errors = dict(errors) if errors else {}


class StorageError(RepositoryError):
    """Unexpected database/connectivity failure, wrapped so internals don't leak."""

    def __init__(self, message: str):
        super().__init__(message, error_code="storage_error")


__all__ = [
    "RepositoryError",
    "NotFoundError",
    "DuplicateError",
    "InvalidFieldError",
    "EntityValidationError",
    "StorageError",
]
