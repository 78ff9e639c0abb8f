"""
Tests for OrderService.place_order: stock admission, totals and atomicity.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from rest_api.models import Order, OrderItem, Product
from rest_api.services.domain import OrderService, QueueService
from shared.infrastructure.retry import RetryConfig
from shared.utils.exceptions import (
    ConflictError,
    EmptyOrderError,
    InsufficientStockError,
    NotFoundError,
    ProductInactiveError,
    ProductNotFoundError,
    RetryableError,
    StorageFailureError,
    TicketNotFoundError,
    ValidationError,
)

NO_WAIT = RetryConfig(max_attempts=3, initial_delay=0, max_delay=0)


@pytest.fixture
def orders(db_session, clock):
    return OrderService(db_session, clock, retry=NO_WAIT)


def count(db_session, model) -> int:
    return db_session.scalar(select(func.count(model.id)))


def stock_of(db_session, product_id: int) -> int:
    return db_session.scalar(select(Product.stock_quantity).where(Product.id == product_id))


def disk_error() -> OperationalError:
    return OperationalError("UPDATE product", {}, Exception("disk I/O error"))


class TestPlaceOrder:
    def test_order_takes_all_stock(self, orders, db_session, seed_cashier, make_product):
        """Stock 5 at 10.00, order 5: total 50.00 and stock 0."""
        product = make_product(price_cents=1000, stock_quantity=5)

        order = orders.place_order(
            cashier_id=seed_cashier.id,
            payment_method="cash",
            line_items=[{"product_id": product.id, "quantity": 5}],
        )

        assert order.id is not None
        assert order.status == "pending"
        assert order.total_cents == 5000
        assert stock_of(db_session, product.id) == 0

    def test_no_stock_left_rejects_next_order(self, orders, db_session, seed_cashier, make_product):
        product = make_product(price_cents=1000, stock_quantity=5)
        orders.place_order(seed_cashier.id, "cash", [{"product_id": product.id, "quantity": 5}])

        with pytest.raises(InsufficientStockError) as exc_info:
            orders.place_order(seed_cashier.id, "cash", [{"product_id": product.id, "quantity": 1}])

        assert exc_info.value.status_code == 409
        assert exc_info.value.available == 0
        assert stock_of(db_session, product.id) == 0
        assert count(db_session, Order) == 1

    def test_line_items_snapshot_prices(self, orders, db_session, seed_cashier, make_product):
        burger = make_product("Burger", price_cents=1250, stock_quantity=10)
        fries = make_product("Fries", price_cents=425, stock_quantity=10)

        order = orders.place_order(
            seed_cashier.id,
            "card",
            [
                {"product_id": burger.id, "quantity": 1},
                {"product_id": fries.id, "quantity": 2},
            ],
        )

        items = {item.product_id: item for item in order.items}
        assert items[burger.id].unit_price_cents == 1250
        assert items[burger.id].line_total_cents == 1250
        assert items[fries.id].unit_price_cents == 425
        assert items[fries.id].line_total_cents == 850
        assert order.total_cents == 2100
        assert stock_of(db_session, burger.id) == 9
        assert stock_of(db_session, fries.id) == 8

    def test_stock_is_decremented_in_product_id_order(
        self, orders, seed_cashier, make_product, monkeypatch
    ):
        first = make_product("Soda", stock_quantity=10)
        second = make_product("Pie", stock_quantity=10)
        real_apply = orders._ledger.apply_decrements
        seen = []

        def recording(decrements):
            decrements = list(decrements)
            seen.extend(d.product_id for d in decrements)
            return real_apply(decrements)

        monkeypatch.setattr(orders._ledger, "apply_decrements", recording)

        orders.place_order(
            seed_cashier.id,
            "cash",
            [
                {"product_id": second.id, "quantity": 1},
                {"product_id": first.id, "quantity": 1},
            ],
        )

        assert seen == [first.id, second.id]

    def test_repeated_product_lines_are_merged(self, orders, db_session, seed_cashier, make_product):
        product = make_product(price_cents=300, stock_quantity=5)

        order = orders.place_order(
            seed_cashier.id,
            "cash",
            [
                {"product_id": product.id, "quantity": 2},
                {"product_id": product.id, "quantity": 3},
            ],
        )

        assert len(order.items) == 1
        assert order.items[0].quantity == 5
        assert order.total_cents == 1500
        assert stock_of(db_session, product.id) == 0

    def test_merged_demand_is_checked_against_stock(self, orders, db_session, seed_cashier, make_product):
        product = make_product(stock_quantity=4)

        with pytest.raises(InsufficientStockError) as exc_info:
            orders.place_order(
                seed_cashier.id,
                "cash",
                [
                    {"product_id": product.id, "quantity": 2},
                    {"product_id": product.id, "quantity": 3},
                ],
            )

        assert exc_info.value.requested == 5
        assert stock_of(db_session, product.id) == 4

    def test_ticket_reference_does_not_touch_ticket(self, orders, db_session, clock, seed_cashier, make_product):
        queue = QueueService(db_session, clock)
        ticket = queue.issue_ticket("Ana")
        product = make_product()

        order = orders.place_order(
            seed_cashier.id,
            "digital_wallet",
            [{"product_id": product.id, "quantity": 1}],
            ticket_id=ticket.id,
        )

        assert order.ticket_id == ticket.id
        assert queue.get_ticket(ticket.id).status == "waiting"

    def test_note_is_normalized(self, orders, seed_cashier, make_product):
        product = make_product()

        order = orders.place_order(
            seed_cashier.id,
            "cash",
            [{"product_id": product.id, "quantity": 1}],
            note="  no onions \x00 ",
        )
        blank = orders.place_order(
            seed_cashier.id,
            "cash",
            [{"product_id": product.id, "quantity": 1}],
            note="   ",
        )

        assert order.note == "no onions"
        assert blank.note is None


class TestPlaceOrderRejections:
    """Every rejection leaves orders, items and stock untouched."""

    def assert_untouched(self, db_session, product, stock):
        assert count(db_session, Order) == 0
        assert count(db_session, OrderItem) == 0
        assert stock_of(db_session, product.id) == stock

    def test_second_line_short_rolls_back_first(self, orders, db_session, seed_cashier, make_product):
        plenty = make_product("Soda", stock_quantity=10)
        scarce = make_product("Pie", stock_quantity=1)

        with pytest.raises(InsufficientStockError):
            orders.place_order(
                seed_cashier.id,
                "cash",
                [
                    {"product_id": plenty.id, "quantity": 3},
                    {"product_id": scarce.id, "quantity": 2},
                ],
            )

        self.assert_untouched(db_session, plenty, 10)
        assert stock_of(db_session, scarce.id) == 1

    def test_unknown_product(self, orders, db_session, seed_cashier, make_product):
        product = make_product(stock_quantity=3)

        with pytest.raises(ProductNotFoundError) as exc_info:
            orders.place_order(
                seed_cashier.id,
                "cash",
                [
                    {"product_id": product.id, "quantity": 1},
                    {"product_id": 9999, "quantity": 1},
                ],
            )

        assert exc_info.value.status_code == 404
        self.assert_untouched(db_session, product, 3)

    def test_inactive_product(self, orders, db_session, seed_cashier, make_product):
        product = make_product(stock_quantity=3, is_active=False)

        with pytest.raises(ProductInactiveError) as exc_info:
            orders.place_order(seed_cashier.id, "cash", [{"product_id": product.id, "quantity": 1}])

        assert exc_info.value.status_code == 409
        self.assert_untouched(db_session, product, 3)

    def test_unknown_ticket(self, orders, db_session, seed_cashier, make_product):
        product = make_product(stock_quantity=3)

        with pytest.raises(TicketNotFoundError):
            orders.place_order(
                seed_cashier.id,
                "cash",
                [{"product_id": product.id, "quantity": 1}],
                ticket_id=4242,
            )

        self.assert_untouched(db_session, product, 3)

    def test_unknown_cashier_is_not_retryable(self, orders, db_session, make_product):
        product = make_product(stock_quantity=3)

        with pytest.raises(NotFoundError) as exc_info:
            orders.place_order(424242, "cash", [{"product_id": product.id, "quantity": 1}])

        assert exc_info.value.status_code == 404
        assert not isinstance(exc_info.value, RetryableError)
        assert "Retry-After" not in (exc_info.value.headers or {})
        self.assert_untouched(db_session, product, 3)

    def test_constraint_violation_is_a_conflict(
        self, orders, db_session, seed_cashier, make_product, monkeypatch
    ):
        product = make_product(stock_quantity=3)
        attempts = []

        def violating(decrements):
            attempts.append(1)
            raise IntegrityError("INSERT INTO order_item", {}, Exception("FOREIGN KEY constraint failed"))

        monkeypatch.setattr(orders._ledger, "apply_decrements", violating)

        with pytest.raises(ConflictError) as exc_info:
            orders.place_order(seed_cashier.id, "cash", [{"product_id": product.id, "quantity": 1}])

        assert exc_info.value.status_code == 409
        assert len(attempts) == 1
        self.assert_untouched(db_session, product, 3)

    def test_empty_cart(self, orders, seed_cashier):
        with pytest.raises(EmptyOrderError) as exc_info:
            orders.place_order(seed_cashier.id, "cash", [])

        assert exc_info.value.status_code == 400

    def test_min_line_items_is_enforced(self, orders, seed_cashier, make_product):
        product = make_product()

        with pytest.raises(EmptyOrderError):
            orders.place_order(
                seed_cashier.id,
                "cash",
                [{"product_id": product.id, "quantity": 1}],
                min_line_items=2,
            )

    @pytest.mark.parametrize("quantity", [0, -1, 1000, 2.5, True, None])
    def test_bad_quantity(self, orders, db_session, seed_cashier, make_product, quantity):
        product = make_product(stock_quantity=3)

        with pytest.raises(ValidationError):
            orders.place_order(seed_cashier.id, "cash", [{"product_id": product.id, "quantity": quantity}])

        self.assert_untouched(db_session, product, 3)

    def test_unknown_payment_method(self, orders, seed_cashier, make_product):
        product = make_product()

        with pytest.raises(ValidationError):
            orders.place_order(seed_cashier.id, "cheque", [{"product_id": product.id, "quantity": 1}])


class TestStorageFailures:
    def test_persistent_storage_failure_rolls_back_everything(
        self, orders, db_session, seed_cashier, make_product, monkeypatch
    ):
        product = make_product(stock_quantity=5)
        attempts = []

        def failing(decrements):
            attempts.append(list(decrements))
            raise disk_error()

        monkeypatch.setattr(orders._ledger, "apply_decrements", failing)

        with pytest.raises(StorageFailureError) as exc_info:
            orders.place_order(seed_cashier.id, "cash", [{"product_id": product.id, "quantity": 2}])

        assert exc_info.value.status_code == 503
        assert len(attempts) == NO_WAIT.max_attempts
        assert count(db_session, Order) == 0
        assert count(db_session, OrderItem) == 0
        assert stock_of(db_session, product.id) == 5

    def test_transient_failure_is_retried_once(
        self, orders, db_session, seed_cashier, make_product, monkeypatch
    ):
        product = make_product(stock_quantity=5)
        real_apply = orders._ledger.apply_decrements
        attempts = []

        def flaky(decrements):
            attempts.append(1)
            if len(attempts) == 1:
                raise disk_error()
            return real_apply(decrements)

        monkeypatch.setattr(orders._ledger, "apply_decrements", flaky)

        order = orders.place_order(seed_cashier.id, "cash", [{"product_id": product.id, "quantity": 2}])

        assert len(attempts) == 2
        assert count(db_session, Order) == 1
        assert count(db_session, OrderItem) == 1
        assert order.total_cents == 2000
        assert stock_of(db_session, product.id) == 3

    def test_validation_errors_are_not_retried(
        self, orders, db_session, seed_cashier, make_product, monkeypatch
    ):
        product = make_product(stock_quantity=1)
        stages = []
        real_stage = orders._builder.stage

        def counting(cart):
            stages.append(1)
            return real_stage(cart)

        monkeypatch.setattr(orders._builder, "stage", counting)

        with pytest.raises(InsufficientStockError):
            orders.place_order(seed_cashier.id, "cash", [{"product_id": product.id, "quantity": 2}])

        assert len(stages) == 1


class TestSnapshotImmutability:
    def test_price_change_does_not_alter_order(self, orders, db_session, seed_cashier, make_product):
        product = make_product(price_cents=500, stock_quantity=10)
        order = orders.place_order(seed_cashier.id, "cash", [{"product_id": product.id, "quantity": 3}])

        product.price_cents = 900
        db_session.commit()

        stored = orders.get_order(order.id)
        assert stored.total_cents == 1500
        assert stored.items[0].unit_price_cents == 500
        assert stored.items[0].line_total_cents == 1500


class TestOrderQueries:
    def test_list_orders_newest_first_with_status_filter(
        self, orders, seed_cashier, make_product, frozen_now
    ):
        product = make_product(stock_quantity=10)
        first = orders.place_order(seed_cashier.id, "cash", [{"product_id": product.id, "quantity": 1}])
        frozen_now.advance(minutes=1)
        second = orders.place_order(seed_cashier.id, "cash", [{"product_id": product.id, "quantity": 1}])
        orders.set_order_status(first.id, "preparing")

        listed = orders.list_orders()
        preparing = orders.list_orders(status="preparing")

        assert [o.id for o in listed] == [second.id, first.id]
        assert [o.id for o in preparing] == [first.id]

    def test_list_orders_pagination(self, orders, seed_cashier, make_product, frozen_now):
        product = make_product(stock_quantity=10)
        placed = []
        for _ in range(3):
            placed.append(orders.place_order(seed_cashier.id, "cash", [{"product_id": product.id, "quantity": 1}]))
            frozen_now.advance(seconds=30)

        page = orders.list_orders(limit=2, offset=1)

        assert [o.id for o in page] == [placed[1].id, placed[0].id]

    def test_list_orders_for_day(self, orders, seed_cashier, make_product, frozen_now):
        product = make_product(stock_quantity=10)
        yesterday = orders.place_order(seed_cashier.id, "cash", [{"product_id": product.id, "quantity": 1}])
        frozen_now.advance(days=1)
        today = orders.place_order(seed_cashier.id, "cash", [{"product_id": product.id, "quantity": 1}])

        assert [o.id for o in orders.list_orders_for_day()] == [today.id]
        assert [o.id for o in orders.list_orders_for_day(yesterday.created_at.date())] == [yesterday.id]

    def test_get_missing_order(self, orders):
        from shared.utils.exceptions import OrderNotFoundError

        with pytest.raises(OrderNotFoundError):
            orders.get_order(12345)
