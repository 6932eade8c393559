from .escola_service import EscolaService

__all__ = ["EscolaService"]
