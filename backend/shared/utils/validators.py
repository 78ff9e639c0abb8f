"""
Input validation helpers shared by the engine services.
"""

import re

from shared.config.constants import Limits

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def validate_quantity(
    quantity: int,
    min_val: int = Limits.MIN_QUANTITY,
    max_val: int = Limits.MAX_QUANTITY,
) -> int:
    """
    Validate quantity is a whole number within acceptable range.

    Raises:
        ValueError: If quantity is not an int or is outside the allowed range
    """
    # bool is an int subclass; True must not order one unit
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValueError(f"Quantity must be an integer, got {quantity!r}")
    if quantity < min_val:
        raise ValueError(f"Minimum quantity is {min_val}")
    if quantity > max_val:
        raise ValueError(f"Maximum quantity is {max_val}")
    return quantity


def normalize_optional_text(value: str | None, max_length: int) -> str | None:
    """
    Trim free text, strip control characters and cap its length.
    Blank input becomes None.
    """
    if value is None:
        return None

    value = _CONTROL_CHARS.sub("", value).strip()
    if not value:
        return None

    return value[:max_length]
