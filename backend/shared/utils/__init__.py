"""
Utilities module: Exceptions, validators, schemas.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    ConflictError,
    RetryableError,
)
from shared.utils.validators import (
    validate_quantity,
    normalize_optional_text,
)
from shared.utils.schemas import ErrorResponse

__all__ = [
    # exceptions
    "AppException",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "RetryableError",
    # validators
    "validate_quantity",
    "normalize_optional_text",
    # schemas
    "ErrorResponse",
]
