"""
Orders router.
Cashier-facing order admission and the order lifecycle.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    ErrorResponse,
    OrderDetailOutput,
    OrderListResponse,
    OrderOutput,
    OrderStatus,
    PlaceOrderRequest,
    UpdateOrderStatusRequest,
)
from rest_api.routers._common import Pagination, current_cashier_id, get_pagination
from rest_api.services.domain import OrderService, ServiceClock, get_service_clock


router = APIRouter(prefix="/api/orders", tags=["orders"])


def get_order_service(
    db: Session = Depends(get_db),
    clock: ServiceClock = Depends(get_service_clock),
) -> OrderService:
    return OrderService(db, clock)


@router.post(
    "",
    response_model=OrderDetailOutput,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
def place_order(
    body: PlaceOrderRequest,
    cashier_id: int = Depends(current_cashier_id),
    service: OrderService = Depends(get_order_service),
) -> OrderDetailOutput:
    """
    Place an order from a cart.

    Stock is checked and decremented in the same transaction that writes the
    order. Repeated products in the cart are merged into one line.
    """
    order = service.place_order(
        cashier_id=cashier_id,
        payment_method=body.payment_method,
        line_items=body.items,
        ticket_id=body.ticket_id,
        note=body.note,
    )
    return OrderDetailOutput.model_validate(order)


@router.get("", response_model=OrderListResponse)
def list_orders(
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    pagination: Pagination = Depends(get_pagination),
    service: OrderService = Depends(get_order_service),
) -> OrderListResponse:
    """Orders, newest first."""
    orders = service.list_orders(
        status=status_filter,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return OrderListResponse(
        items=[OrderOutput.model_validate(o) for o in orders],
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.get("/today", response_model=list[OrderOutput])
def list_orders_today(
    service: OrderService = Depends(get_order_service),
) -> list[OrderOutput]:
    """Orders created during the current service day, oldest first."""
    return [OrderOutput.model_validate(o) for o in service.list_orders_for_day()]


@router.get(
    "/{order_id}",
    response_model=OrderDetailOutput,
    responses={404: {"model": ErrorResponse}},
)
def get_order(
    order_id: int,
    service: OrderService = Depends(get_order_service),
) -> OrderDetailOutput:
    return OrderDetailOutput.model_validate(service.get_order(order_id))


@router.patch(
    "/{order_id}/status",
    response_model=OrderOutput,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_order_status(
    order_id: int,
    body: UpdateOrderStatusRequest,
    service: OrderService = Depends(get_order_service),
) -> OrderOutput:
    """
    Move an order forward (pending → preparing → ready → completed, steps
    may be skipped) or cancel it while it is still open.
    """
    order = service.set_order_status(order_id, body.status)
    return OrderOutput.model_validate(order)
