"""
Tests for the order lifecycle: transitions, updated_at and restock on cancel.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from rest_api.models import Product
from rest_api.services.domain import OrderService, QueueService
from shared.utils.exceptions import (
    InvalidStatusError,
    InvalidTransitionError,
    OrderNotFoundError,
    StorageFailureError,
)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def stock_of(db_session, product_id: int) -> int:
    return db_session.scalar(select(Product.stock_quantity).where(Product.id == product_id))


@pytest.fixture
def placed(db_session, clock, seed_cashier, make_product):
    """Order for a queue ticket: 1 x 12.50 + 2 x 4.25 = 21.00, paid cash."""
    ticket = QueueService(db_session, clock).issue_ticket("Ana")
    burger = make_product("Burger", price_cents=1250, stock_quantity=10)
    fries = make_product("Fries", price_cents=425, stock_quantity=10)

    order = OrderService(db_session, clock).place_order(
        cashier_id=seed_cashier.id,
        payment_method="cash",
        line_items=[
            {"product_id": burger.id, "quantity": 1},
            {"product_id": fries.id, "quantity": 2},
        ],
        ticket_id=ticket.id,
    )
    return order, burger, fries


class TestOrderLifecycle:
    def test_preparing_then_completed(self, db_session, clock, frozen_now, placed):
        order, _, _ = placed
        service = OrderService(db_session, clock)
        assert order.total_cents == 2100

        t1 = frozen_now.advance(minutes=4)
        preparing = service.set_order_status(order.id, "preparing")
        assert preparing.status == "preparing"
        assert as_utc(preparing.updated_at) == t1

        t2 = frozen_now.advance(minutes=6)
        completed = service.set_order_status(order.id, "completed")
        assert completed.status == "completed"
        assert as_utc(completed.updated_at) == t2
        assert completed.total_cents == 2100

    def test_ticket_status_name_is_rejected(self, db_session, clock, placed):
        order, _, _ = placed
        service = OrderService(db_session, clock)

        with pytest.raises(InvalidStatusError) as exc_info:
            service.set_order_status(order.id, "waiting")

        assert exc_info.value.status_code == 400
        assert service.get_order(order.id).status == "pending"

    def test_forward_steps_may_be_skipped(self, db_session, clock, placed):
        order, _, _ = placed

        done = OrderService(db_session, clock).set_order_status(order.id, "completed")

        assert done.status == "completed"

    @pytest.mark.parametrize(
        "path, rejected",
        [
            (["preparing"], "pending"),
            (["ready"], "preparing"),
            (["completed"], "cancelled"),
            (["cancelled"], "pending"),
            (["preparing"], "preparing"),
        ],
    )
    def test_backward_terminal_and_self_moves_are_rejected(
        self, db_session, clock, placed, path, rejected
    ):
        order, _, _ = placed
        service = OrderService(db_session, clock)
        for status in path:
            service.set_order_status(order.id, status)

        with pytest.raises(InvalidTransitionError):
            service.set_order_status(order.id, rejected)

        assert service.get_order(order.id).status == path[-1]

    def test_missing_order(self, db_session, clock):
        with pytest.raises(OrderNotFoundError) as exc_info:
            OrderService(db_session, clock).set_order_status(777, "preparing")

        assert exc_info.value.status_code == 404


class TestRestockOnCancel:
    def test_cancel_keeps_stock_by_default(self, db_session, clock, placed):
        order, burger, fries = placed

        OrderService(db_session, clock, restock_on_cancel=False).set_order_status(order.id, "cancelled")

        assert stock_of(db_session, burger.id) == 9
        assert stock_of(db_session, fries.id) == 8

    def test_cancel_restocks_when_enabled(self, db_session, clock, placed):
        order, burger, fries = placed

        cancelled = OrderService(db_session, clock, restock_on_cancel=True).set_order_status(
            order.id, "cancelled"
        )

        assert cancelled.status == "cancelled"
        assert stock_of(db_session, burger.id) == 10
        assert stock_of(db_session, fries.id) == 10

    def test_completing_never_restocks(self, db_session, clock, placed):
        order, burger, _ = placed

        OrderService(db_session, clock, restock_on_cancel=True).set_order_status(order.id, "completed")

        assert stock_of(db_session, burger.id) == 9


class TestStatusStorageFailure:
    def test_failed_commit_undoes_restock_and_status(
        self, db_session, clock, placed, monkeypatch
    ):
        order, burger, fries = placed

        def failing_commit(db):
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr("rest_api.services.domain.order_service.safe_commit", failing_commit)
        service = OrderService(db_session, clock, restock_on_cancel=True)

        with pytest.raises(StorageFailureError) as exc_info:
            service.set_order_status(order.id, "cancelled")

        assert exc_info.value.status_code == 503
        assert stock_of(db_session, burger.id) == 9
        assert stock_of(db_session, fries.id) == 8
        assert service.get_order(order.id).status == "pending"
