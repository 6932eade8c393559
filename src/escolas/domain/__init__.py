from .escola import Escola, FIELD_ALIASES, MUTABLE_FIELDS

__all__ = ["Escola", "FIELD_ALIASES", "MUTABLE_FIELDS"]
