"""
Order Domain Service.

Order admission and the order lifecycle. Placing an order is one unit of
work: the order row, its line items and every stock decrement commit
together or not at all.
"""

from collections.abc import Iterable
from datetime import date
from typing import Any, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from rest_api.models import Order, OrderItem, User
from rest_api.repositories import (
    CatalogSnapshotReader,
    OrderFilters,
    OrderRepository,
    ProductRepository,
    TicketRepository,
)
from shared.config.constants import Limits, OrderStatus, validate_payment_method
from shared.config.logging import orders_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import is_transient_error, safe_commit
from shared.infrastructure.retry import RetryConfig, run_with_retry
from shared.utils.exceptions import (
    AppException,
    ConflictError,
    NotFoundError,
    OrderNotFoundError,
    StorageFailureError,
    TicketNotFoundError,
    ValidationError,
)
from shared.utils.validators import normalize_optional_text

from .order_builder import CartLine, OrderBuilder
from .service_clock import ServiceClock
from .status_machine import ORDER_STATUS_MACHINE
from .stock_ledger import StockLedger


class OrderService:
    """
    Domain service for orders.

    Usage:
        service = OrderService(db)
        order = service.place_order(
            cashier_id=7,
            payment_method="cash",
            line_items=[{"product_id": 1, "quantity": 2}],
        )
        service.set_order_status(order.id, "preparing")
    """

    def __init__(
        self,
        db: Session,
        clock: ServiceClock | None = None,
        catalog: CatalogSnapshotReader | None = None,
        restock_on_cancel: bool | None = None,
        retry: RetryConfig | None = None,
    ):
        self._db = db
        self._clock = clock or ServiceClock()
        self._builder = OrderBuilder(catalog or ProductRepository(db))
        self._ledger = StockLedger(db)
        self._orders = OrderRepository(db)
        self._tickets = TicketRepository(db)
        self._restock_on_cancel = (
            settings.restock_on_cancel if restock_on_cancel is None else restock_on_cancel
        )
        self._retry = retry or RetryConfig.from_settings(settings.order_max_attempts)

    # =========================================================================
    # Commands
    # =========================================================================

    def place_order(
        self,
        cashier_id: int,
        payment_method: str,
        line_items: Iterable[Any],
        ticket_id: int | None = None,
        note: str | None = None,
        min_line_items: int = Limits.MIN_LINE_ITEMS,
    ) -> Order:
        """
        Validate the cart, price it from locked catalog rows, then write the
        order, its items and the stock decrements in one transaction.

        Transient storage failures are retried, re-reading the catalog each
        time. Validation failures are raised at once.

        Raises:
            EmptyOrderError, ValidationError: malformed cart
            ProductNotFoundError, TicketNotFoundError, NotFoundError: unknown reference
            ProductInactiveError, InsufficientStockError: product not orderable
            StorageFailureError: the store kept failing
        """
        if not validate_payment_method(payment_method):
            raise ValidationError(
                f"Unknown payment method '{payment_method}'",
                payment_method=payment_method,
            )
        cart = self._builder.normalize_cart(line_items, min_line_items)
        note = normalize_optional_text(note, Limits.MAX_NOTE_LENGTH)

        try:
            order = run_with_retry(
                lambda: self._write_order(cashier_id, payment_method, cart, ticket_id, note),
                config=self._retry,
                is_retryable=is_transient_error,
                label="place_order",
            )
        except IntegrityError as exc:
            raise self._reference_error(cashier_id, ticket_id) from exc
        except SQLAlchemyError as exc:
            raise StorageFailureError("place_order", cashier_id=cashier_id) from exc

        logger.info(
            "Order placed",
            order_id=order.id,
            cashier_id=cashier_id,
            ticket_id=ticket_id,
            total_cents=order.total_cents,
            line_count=len(order.items),
        )
        return order

    def _write_order(
        self,
        cashier_id: int,
        payment_method: str,
        cart: list[CartLine],
        ticket_id: int | None,
        note: str | None,
    ) -> Order:
        try:
            if ticket_id is not None and not self._tickets.exists(ticket_id):
                raise TicketNotFoundError(ticket_id)

            staged = self._builder.stage(cart)
            now = self._clock.now()

            order = Order(
                ticket_id=ticket_id,
                cashier_id=cashier_id,
                total_cents=staged.total_cents,
                payment_method=payment_method,
                status=ORDER_STATUS_MACHINE.initial,
                note=note,
                created_at=now,
                updated_at=now,
            )
            order.items = [
                OrderItem(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price_cents=line.unit_price_cents,
                    line_total_cents=line.line_total_cents,
                )
                for line in staged.lines
            ]
            self._db.add(order)
            self._db.flush()

            self._ledger.apply_decrements(staged.decrements)
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise

        return order

    def _reference_error(self, cashier_id: int, ticket_id: int | None) -> AppException:
        # Constraint violations fail the same way on resubmit
        if self._db.get(User, cashier_id) is None:
            return NotFoundError("User", cashier_id)
        if ticket_id is not None and not self._tickets.exists(ticket_id):
            return TicketNotFoundError(ticket_id)
        return ConflictError(
            "Order violates a database constraint",
            cashier_id=cashier_id,
            ticket_id=ticket_id,
        )

    def set_order_status(self, order_id: int, new_status: str) -> Order:
        """
        Move an order along its lifecycle and bump updated_at.

        With restock on cancel enabled, entering ``cancelled`` returns every
        line item's quantity to stock in the same transaction.
        """
        ORDER_STATUS_MACHINE.ensure_known(new_status)

        restored: dict[int, int] = {}
        try:
            order = self._orders.find_by_id(order_id, for_update=True)
            if order is None:
                raise OrderNotFoundError(order_id)

            previous = order.status
            ORDER_STATUS_MACHINE.check(previous, new_status)

            order.status = new_status
            order.updated_at = self._clock.now()
            if new_status == OrderStatus.CANCELLED and self._restock_on_cancel:
                restored = self._ledger.restock(order.items)

            safe_commit(self._db)
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise StorageFailureError("set_order_status", order_id=order_id) from exc
        except Exception:
            self._db.rollback()
            raise

        logger.info(
            "Order status changed",
            order_id=order.id,
            from_status=previous,
            to_status=new_status,
        )
        if restored:
            logger.info("Stock restored on cancel", order_id=order.id, restored=restored)
        return order

    # =========================================================================
    # Queries
    # =========================================================================

    def get_order(self, order_id: int) -> Order:
        """Order with its line items."""
        order = self._orders.find_with_items(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def list_orders(
        self,
        status: str | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = Limits.DEFAULT_OFFSET,
    ) -> Sequence[Order]:
        if status is not None:
            ORDER_STATUS_MACHINE.ensure_known(status)
        return self._orders.find_all(OrderFilters(limit=limit, offset=offset, status=status))

    def list_orders_for_day(self, service_day: date | None = None) -> Sequence[Order]:
        """Orders created during the service day, oldest first."""
        starts_at, ends_at = self._clock.day_bounds(service_day or self._clock.service_day())
        return self._orders.find_created_between(starts_at, ends_at)
