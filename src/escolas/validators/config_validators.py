def upper_stripped(value: str | None) -> str | None:
    """
    Uppercase and strip a raw environment value, keeping None as None.
    """
    if value is None:
        return None
    return value.strip().upper()


def lower_stripped(value: str | None) -> str | None:
    """
    Lowercase and strip a raw environment value, keeping None as None.
    """
    if value is None:
        return None
    return value.strip().lower()


def blank_to_none(value):
    # `TEST_DB_NAME=` in a .env file arrives as "" rather than unset
    if isinstance(value, str) and not value.strip():
        return None
    return value
