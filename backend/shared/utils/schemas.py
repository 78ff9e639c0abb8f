"""
Pydantic schemas for the order and queue API.

Money is exchanged in integer cents, matching storage.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from shared.config.constants import Limits


# =============================================================================
# Common Types
# =============================================================================

OrderStatus = Literal["pending", "preparing", "ready", "completed", "cancelled"]
TicketStatus = Literal["waiting", "called", "served", "cancelled"]
PaymentMethod = Literal["cash", "card", "digital_wallet"]


class ErrorResponse(BaseModel):
    """Error body returned by every failing endpoint."""

    detail: str


# =============================================================================
# Catalog Schemas
# =============================================================================


class ProductSnapshotOutput(BaseModel):
    """Current price, availability and stock of a product."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price_cents: int
    is_active: bool
    stock_quantity: int


# =============================================================================
# Queue Schemas
# =============================================================================


class IssueTicketRequest(BaseModel):
    """Walk-in customer asking for a queue number."""

    customer_name: str | None = Field(default=None, max_length=Limits.MAX_CUSTOMER_NAME_LENGTH)


class UpdateTicketStatusRequest(BaseModel):
    """Move a ticket to another status."""

    status: TicketStatus


class TicketOutput(BaseModel):
    """A queue ticket."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    sequence_number: int
    customer_name: str | None = None
    status: TicketStatus
    service_day: date
    created_at: datetime
    called_at: datetime | None = None
    served_at: datetime | None = None


# =============================================================================
# Order Schemas
# =============================================================================


class CartLineInput(BaseModel):
    """One product and quantity in a cart."""

    product_id: int
    quantity: int = Field(ge=Limits.MIN_QUANTITY, le=Limits.MAX_QUANTITY)


class PlaceOrderRequest(BaseModel):
    """Cart submitted by a cashier."""

    ticket_id: int | None = None
    payment_method: PaymentMethod
    note: str | None = Field(default=None, max_length=Limits.MAX_NOTE_LENGTH)
    items: list[CartLineInput] = Field(
        min_length=Limits.MIN_LINE_ITEMS,
        max_length=Limits.MAX_LINE_ITEMS,
    )


class UpdateOrderStatusRequest(BaseModel):
    """Move an order to another status."""

    status: OrderStatus


class OrderItemOutput(BaseModel):
    """A line item with its price snapshot."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    quantity: int
    unit_price_cents: int
    line_total_cents: int


class OrderOutput(BaseModel):
    """An order without its line items."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_id: int | None = None
    cashier_id: int
    total_cents: int
    payment_method: PaymentMethod
    status: OrderStatus
    note: str | None = None
    created_at: datetime
    updated_at: datetime


class OrderDetailOutput(OrderOutput):
    """An order with its line items."""

    items: list[OrderItemOutput] = []


class OrderListResponse(BaseModel):
    """Paginated order listing."""

    items: list[OrderOutput]
    limit: int
    offset: int
