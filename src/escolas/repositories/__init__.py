"""
Repository layer.

Usage:
    from escolas.repositories import EscolaRepository, EscolaField
"""

from .base_repository import BaseRepository
from .escola_repository import EscolaRepository, EscolaField

__all__ = [
    "BaseRepository",
    "EscolaRepository",
    "EscolaField",
]
