"""
All ORM models, importable from one place:

    from escolas.models import EscolaRecord

Importing this package also registers every table on `Base.metadata`.
"""

from .escola import EscolaRecord

__all__ = [
    "EscolaRecord",
]
