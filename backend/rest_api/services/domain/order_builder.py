"""
Order Builder.

Turns a raw cart into validated, merged lines, then stages the order against
row-locked catalog values: per-line price snapshots, the order total and one
stock decrement per product. Staging writes nothing.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from rest_api.repositories import CatalogSnapshotReader
from shared.config.constants import Limits
from shared.utils.exceptions import (
    EmptyOrderError,
    InsufficientStockError,
    ProductInactiveError,
    ProductNotFoundError,
    ValidationError,
)
from shared.utils.validators import validate_quantity


@dataclass(frozen=True)
class CartLine:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class StagedLine:
    """Price snapshot of one cart line."""

    product_id: int
    quantity: int
    unit_price_cents: int
    line_total_cents: int


@dataclass(frozen=True)
class StockDecrement:
    product_id: int
    quantity: int


@dataclass
class StagedOrder:
    lines: list[StagedLine] = field(default_factory=list)
    total_cents: int = 0

    @property
    def decrements(self) -> list[StockDecrement]:
        """One decrement per product, ascending product id."""
        return [
            StockDecrement(line.product_id, line.quantity)
            for line in sorted(self.lines, key=lambda line: line.product_id)
        ]


def _read_line(item: Any) -> tuple[Any, Any]:
    # Accept CartLine, request schemas or plain mappings
    if isinstance(item, Mapping):
        return item.get("product_id"), item.get("quantity")
    return getattr(item, "product_id", None), getattr(item, "quantity", None)


class OrderBuilder:
    def __init__(self, catalog: CatalogSnapshotReader):
        self._catalog = catalog

    @staticmethod
    def normalize_cart(
        line_items: Iterable[Any],
        min_line_items: int = Limits.MIN_LINE_ITEMS,
    ) -> list[CartLine]:
        """
        Validate cart lines and merge repeated products.

        Lines keep the order in which each product first appears; a repeated
        product adds its quantity to the first line.

        Raises:
            EmptyOrderError: fewer than ``min_line_items`` lines
            ValidationError: malformed line, bad quantity or too many lines
        """
        raw_lines = list(line_items or [])
        if len(raw_lines) < min_line_items:
            raise EmptyOrderError(min_line_items, len(raw_lines))
        if len(raw_lines) > Limits.MAX_LINE_ITEMS:
            raise ValidationError(
                f"Order accepts at most {Limits.MAX_LINE_ITEMS} line items",
                received=len(raw_lines),
            )

        merged: dict[int, int] = {}
        for position, item in enumerate(raw_lines):
            product_id, quantity = _read_line(item)
            if isinstance(product_id, bool) or not isinstance(product_id, int):
                raise ValidationError(
                    f"Line {position + 1} has an invalid product id",
                    position=position,
                    product_id=repr(product_id),
                )
            try:
                validate_quantity(quantity)
            except ValueError as exc:
                raise ValidationError(str(exc), position=position, product_id=product_id) from exc
            merged[product_id] = merged.get(product_id, 0) + quantity

        for product_id, quantity in merged.items():
            if quantity > Limits.MAX_QUANTITY:
                raise ValidationError(
                    f"Maximum quantity is {Limits.MAX_QUANTITY} per product",
                    product_id=product_id,
                    quantity=quantity,
                )

        return [CartLine(product_id, quantity) for product_id, quantity in merged.items()]

    def stage(self, cart: list[CartLine]) -> StagedOrder:
        """
        Check every line against locked catalog rows and price the order.
        Must run inside the unit of work that applies the decrements.
        """
        products = self._catalog.get_products_for_update(line.product_id for line in cart)

        staged = StagedOrder()
        for line in cart:
            product = products.get(line.product_id)
            if product is None:
                raise ProductNotFoundError(line.product_id)
            if not product.is_active:
                raise ProductInactiveError(line.product_id)
            if line.quantity > product.stock_quantity:
                raise InsufficientStockError(
                    line.product_id,
                    requested=line.quantity,
                    available=product.stock_quantity,
                )

            line_total = product.price_cents * line.quantity
            staged.lines.append(
                StagedLine(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price_cents=product.price_cents,
                    line_total_cents=line_total,
                )
            )
            staged.total_cents += line_total

        return staged
