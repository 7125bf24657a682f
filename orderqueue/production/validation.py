"""
Input normalization for order requests.
"""
from typing import Optional

from orderqueue.production.errors import OrderValidationError


def normalize_notes(notes: Optional[str]) -> Optional[str]:
    """
    Validate and normalize notes.

    Returns:
        Normalized notes (None if empty, stripped string otherwise)
    """
    if notes is None:
        return None

    cleaned = str(notes).strip()
    return cleaned if cleaned else None


def coerce_int(value, field_name: str, minimum: Optional[int] = None) -> Optional[int]:
    """
    Convert a request value to int, leaving None alone.

    Accepts ints and integer strings ("12"). Floats with a fractional part,
    booleans and other types are rejected.

    Raises:
        OrderValidationError: If the value is not an integer or is below minimum
    """
    if value is None or value == "":
        return None

    if isinstance(value, bool):
        raise OrderValidationError(f"{field_name} must be an integer")

    if isinstance(value, int):
        result = value
    elif isinstance(value, float) and value.is_integer():
        result = int(value)
    elif isinstance(value, str):
        try:
            result = int(value.strip())
        except ValueError:
            raise OrderValidationError(f"{field_name} must be an integer") from None
    else:
        raise OrderValidationError(f"{field_name} must be an integer")

    if minimum is not None and result < minimum:
        raise OrderValidationError(f"{field_name} must be at least {minimum}")

    return result
