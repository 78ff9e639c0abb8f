"""
Stock Ledger.

Applies stock changes as deltas, never absolute values, so concurrent
restocks by the catalog side are never overwritten. Decrements are guarded:
the UPDATE only matches while enough stock remains.
"""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from rest_api.models import Product
from shared.config.logging import catalog_logger as logger
from shared.utils.exceptions import InsufficientStockError

from .order_builder import StockDecrement


class StockLedger:
    def __init__(self, db: Session):
        self._db = db

    def apply_decrements(self, decrements: Iterable[StockDecrement]) -> None:
        """
        Decrement stock inside the caller's transaction, in the order given.
        ``StagedOrder.decrements`` yields them by ascending product id.

        Raises:
            InsufficientStockError: a concurrent writer took the stock first
        """
        touched = set()
        for decrement in decrements:
            result = self._db.execute(
                update(Product)
                .where(
                    Product.id == decrement.product_id,
                    Product.stock_quantity >= decrement.quantity,
                )
                .values(stock_quantity=Product.stock_quantity - decrement.quantity)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                available = self._db.scalar(
                    select(Product.stock_quantity).where(Product.id == decrement.product_id)
                )
                raise InsufficientStockError(
                    decrement.product_id,
                    requested=decrement.quantity,
                    available=available or 0,
                )

            touched.add(decrement.product_id)
            logger.debug(
                "Stock decremented",
                product_id=decrement.product_id,
                quantity=decrement.quantity,
            )

        self._expire_stock(touched)

    def restock(self, items: Iterable[Any]) -> dict[int, int]:
        """
        Add quantities back, one UPDATE per product.

        ``items`` are anything with ``product_id`` and ``quantity`` (order
        line items). Products that no longer exist are skipped.
        Returns the quantity restored per product.
        """
        totals: dict[int, int] = {}
        for item in items:
            totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity

        restored: dict[int, int] = {}
        for product_id in sorted(totals):
            result = self._db.execute(
                update(Product)
                .where(Product.id == product_id)
                .values(stock_quantity=Product.stock_quantity + totals[product_id])
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                logger.warning("Restock skipped, product missing", product_id=product_id)
                continue
            restored[product_id] = totals[product_id]

        self._expire_stock(restored)
        return restored

    def _expire_stock(self, product_ids: Iterable[int]) -> None:
        # Loaded Product instances still hold the pre-update stock
        ids = set(product_ids)
        if not ids:
            return
        for obj in list(self._db.identity_map.values()):
            if isinstance(obj, Product) and obj.id in ids:
                self._db.expire(obj, ["stock_quantity", "updated_at"])
