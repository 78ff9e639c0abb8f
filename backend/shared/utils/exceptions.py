"""
Centralized exceptions for consistent error handling.

Every exception logs itself with structured context when raised and maps to
an HTTP status, so the same class is used by the engine services and
surfaced unchanged by the routers.

Usage:
    from shared.utils.exceptions import ProductNotFoundError, InsufficientStockError

    raise ProductNotFoundError(product_id)
    raise InsufficientStockError(product_id, requested=3, available=1)
"""

from fastapi import HTTPException, status
from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    # Whether the caller may resubmit the same request unchanged
    retryable: bool = False

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Product", 123)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class ProductNotFoundError(NotFoundError):
    """Referenced product does not exist."""

    def __init__(self, product_id: int | None = None, **log_context: Any):
        super().__init__("Product", product_id, **log_context)


class OrderNotFoundError(NotFoundError):
    """Order does not exist."""

    def __init__(self, order_id: int | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


class TicketNotFoundError(NotFoundError):
    """Queue ticket does not exist."""

    def __init__(self, ticket_id: int | None = None, **log_context: Any):
        super().__init__("Ticket", ticket_id, **log_context)


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Quantity must be positive", field="quantity", value=-1)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class EmptyOrderError(ValidationError):
    """Cart has fewer line items than required."""

    def __init__(self, minimum: int, received: int, **log_context: Any):
        super().__init__(
            f"Order needs at least {minimum} line item(s), got {received}",
            minimum=minimum,
            received=received,
            **log_context,
        )


class InvalidStatusError(ValidationError):
    """Status name is not part of the entity's lifecycle."""

    def __init__(self, entity: str, value: str, allowed: list[str], **log_context: Any):
        allowed_str = ", ".join(allowed)
        super().__init__(
            f"'{value}' is not a valid {entity} status (expected one of: {allowed_str})",
            entity=entity,
            value=value,
            **log_context,
        )


class InvalidTransitionError(ValidationError):
    """Invalid status transition."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        self.from_status = from_status
        self.to_status = to_status
        detail = f"Invalid transition from '{from_status}' to '{to_status}' for {entity}"
        super().__init__(detail, entity=entity, from_status=from_status, to_status=to_status, **log_context)


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("Product is not available")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class ProductInactiveError(ConflictError):
    """Product exists but is not orderable."""

    def __init__(self, product_id: int, **log_context: Any):
        self.product_id = product_id
        super().__init__(
            f"Product {product_id} is not active",
            product_id=product_id,
            **log_context,
        )


class InsufficientStockError(ConflictError):
    """Requested quantity exceeds available stock."""

    def __init__(self, product_id: int, requested: int, available: int, **log_context: Any):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}",
            product_id=product_id,
            requested=requested,
            available=available,
            **log_context,
        )


# =============================================================================
# 503 Retryable Errors
# =============================================================================


class RetryableError(AppException):
    """
    Transient failure surfaced after internal retries were exhausted (503).
    The store is unchanged; the caller may resubmit.
    """

    retryable = True

    def __init__(self, detail: str, retry_after: int = 1, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            log_level="error",
            headers={"Retry-After": str(retry_after)},
            **log_context,
        )


class SequenceConflictError(RetryableError):
    """Ticket number kept colliding with concurrent inserts."""

    def __init__(self, service_day: str, attempts: int, **log_context: Any):
        super().__init__(
            f"Could not assign a ticket number for {service_day} after {attempts} attempts",
            service_day=service_day,
            attempts=attempts,
            **log_context,
        )


class StorageFailureError(RetryableError):
    """Database operation failed; the unit of work was rolled back."""

    def __init__(self, operation: str, **log_context: Any):
        self.operation = operation
        super().__init__(
            f"Storage failure during {operation}. Please try again.",
            operation=operation,
            **log_context,
        )
