"""
Centralized constants for the backend application.
Avoids magic strings and repeated constants.

Usage:
    from shared.config.constants import OrderStatus, TicketStatus, Limits

    if order.status == OrderStatus.PENDING:
        ...
"""

from typing import Final


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """User role constants (users are managed outside this service)."""

    ADMIN: Final[str] = "admin"
    CASHIER: Final[str] = "cashier"

    ALL: Final[list[str]] = [ADMIN, CASHIER]


# =============================================================================
# Entity Status Constants
# =============================================================================


class OrderStatus:
    """Order lifecycle status constants."""

    PENDING: Final[str] = "pending"
    PREPARING: Final[str] = "preparing"
    READY: Final[str] = "ready"
    COMPLETED: Final[str] = "completed"
    CANCELLED: Final[str] = "cancelled"

    ALL: Final[list[str]] = [PENDING, PREPARING, READY, COMPLETED, CANCELLED]
    ACTIVE: Final[list[str]] = [PENDING, PREPARING, READY]
    TERMINAL: Final[list[str]] = [COMPLETED, CANCELLED]


class TicketStatus:
    """Queue ticket status constants."""

    WAITING: Final[str] = "waiting"
    CALLED: Final[str] = "called"
    SERVED: Final[str] = "served"
    CANCELLED: Final[str] = "cancelled"

    ALL: Final[list[str]] = [WAITING, CALLED, SERVED, CANCELLED]
    ACTIVE: Final[list[str]] = [WAITING, CALLED]
    TERMINAL: Final[list[str]] = [SERVED, CANCELLED]


class PaymentMethod:
    """Accepted payment methods."""

    CASH: Final[str] = "cash"
    CARD: Final[str] = "card"
    DIGITAL_WALLET: Final[str] = "digital_wallet"

    ALL: Final[list[str]] = [CASH, CARD, DIGITAL_WALLET]


# =============================================================================
# Status Transitions
# =============================================================================

# Valid order status transitions (from -> [allowed to states])
# Forward moves may skip steps: pending → preparing → ready → completed
ORDER_TRANSITIONS: Final[dict[str, list[str]]] = {
    OrderStatus.PENDING: [
        OrderStatus.PREPARING,
        OrderStatus.READY,
        OrderStatus.COMPLETED,
        OrderStatus.CANCELLED,
    ],
    OrderStatus.PREPARING: [OrderStatus.READY, OrderStatus.COMPLETED, OrderStatus.CANCELLED],
    OrderStatus.READY: [OrderStatus.COMPLETED, OrderStatus.CANCELLED],
    OrderStatus.COMPLETED: [],  # Terminal state
    OrderStatus.CANCELLED: [],  # Terminal state
}

# Valid ticket status transitions
# called -> called re-calls the ticket, called -> waiting undoes a call
TICKET_TRANSITIONS: Final[dict[str, list[str]]] = {
    TicketStatus.WAITING: [TicketStatus.CALLED, TicketStatus.CANCELLED],
    TicketStatus.CALLED: [
        TicketStatus.CALLED,
        TicketStatus.WAITING,
        TicketStatus.SERVED,
        TicketStatus.CANCELLED,
    ],
    TicketStatus.SERVED: [],  # Terminal state
    TicketStatus.CANCELLED: [],  # Terminal state
}


# =============================================================================
# Validation Limits
# =============================================================================


class Limits:
    """Validation limits."""

    # Quantity limits
    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 999

    # Cart limits
    MIN_LINE_ITEMS: Final[int] = 1
    MAX_LINE_ITEMS: Final[int] = 100

    # Price limit (in cents)
    MAX_PRICE_CENTS: Final[int] = 100_000_00  # $100,000

    # String lengths
    MAX_CUSTOMER_NAME_LENGTH: Final[int] = 100
    MAX_NOTE_LENGTH: Final[int] = 500

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 200
    DEFAULT_OFFSET: Final[int] = 0


# =============================================================================
# Validation Functions
# =============================================================================


def validate_payment_method(method: str) -> bool:
    """Validate that a payment method is accepted."""
    return method in PaymentMethod.ALL
