"""
ID conversion utilities
"""
from typing import Union, Optional

from leave_portal.utils.exceptions import ValidationError


def to_int_id(id_value: Union[str, int, None]) -> Optional[int]:
    """
    Convert ID to integer.
    Handles both string and integer IDs; returns None when not convertible.
    """
    if id_value is None or isinstance(id_value, bool):
        return None

    if isinstance(id_value, int):
        return id_value if id_value > 0 else None

    if isinstance(id_value, str):
        try:
            value = int(id_value.strip())
        except ValueError:
            return None
        return value if value > 0 else None

    return None


def require_int_id(id_value: Union[str, int, None], label: str = "ID") -> int:
    """Like to_int_id, but raises ValidationError instead of returning None."""
    value = to_int_id(id_value)
    if value is None:
        raise ValidationError(f"Invalid {label}")
    return value
