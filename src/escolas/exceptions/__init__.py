# escolas/exceptions/
# ├── base.py                    # app-level errors (RepositoryError, DuplicateError, ...)
# ├── integrity_classifier.py    # DB-level constraint classification (MySQL codes, message heuristics)
# └── mapper.py                  # IntegrityError -> app-level error, db_error_handler()

from .base import (
    RepositoryError,
    NotFoundError,
    DuplicateError,
    InvalidFieldError,
    EntityValidationError,
    StorageError,
)

__all__ = [
    "RepositoryError",
    "NotFoundError",
    "DuplicateError",
    "InvalidFieldError",
    "EntityValidationError",
    "StorageError",
]
