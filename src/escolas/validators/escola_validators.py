"""
Field rules for the Escola entity.

Each function takes a raw value and returns the normalized value to store, or
raises ValueError describing the violated rule. They are plain functions so the
entity (domain/escola.py) can wire them into pydantic validators and tests can
exercise each rule on its own.

"Absent" values (None or "") normalize to None for every optional field; that
is a valid state, not a validation failure.
"""

import re
from typing import Any

GUID_LENGTH = 36
NOME_MIN_LENGTH = 3
NOME_MAX_LENGTH = 100

HEX_COLOR_PATTERN = re.compile(r"^[0-9A-Fa-f]{6}$")


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def normalize_guid(value: Any) -> str:
    """
    Validate an identifier: a non-blank string of exactly 36 characters once
    trimmed. The content is not checked against the UUID format.
    """
    if not isinstance(value, str) or value.strip() == "":
        raise ValueError("EscolaGUID must be a non-empty string")

    guid = value.strip()
    if len(guid) != GUID_LENGTH:
        raise ValueError(f"EscolaGUID must be exactly {GUID_LENGTH} characters long")

    return guid


def normalize_nome(value: Any) -> str | None:
    if _is_absent(value):
        return None

    if not isinstance(value, str):
        raise ValueError("EscolaNome must be a string")

    nome = value.strip()
    if len(nome) < NOME_MIN_LENGTH:
        raise ValueError(f"EscolaNome must have at least {NOME_MIN_LENGTH} characters")
    if len(nome) > NOME_MAX_LENGTH:
        raise ValueError(f"EscolaNome must have at most {NOME_MAX_LENGTH} characters")

    return nome


def normalize_hex_color(value: Any, field_name: str) -> str | None:
    """
    Validate a color given as 6 hexadecimal digits (no leading '#').

    Args:
        value: raw value
        field_name: wire name used in the error message (e.g. "EscolaCorPriEs")

    Returns:
        The trimmed hex string, or None when the value is absent.
    """
    if _is_absent(value):
        return None

    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")

    hex_value = value.strip()
    if not HEX_COLOR_PATTERN.match(hex_value):
        raise ValueError(f"{field_name} must be a 6-digit HEX color")

    return hex_value


def normalize_icone(value: Any) -> bytes | None:
    if _is_absent(value):
        return None

    # drivers may hand back bytearray/memoryview for BLOB columns
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)

    if not isinstance(value, bytes):
        raise ValueError("EscolaIcone must be binary data (bytes)")

    return value
