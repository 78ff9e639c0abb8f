"""
Catalog Models: Product.

Products are managed by the catalog service; the order engine only reads
them and applies stock deltas.
"""

from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import BigIntPK, Base, TimestampMixin


class Product(TimestampMixin, Base):
    """
    A sellable product with its current price and stock level.
    Inherits: created_at, updated_at from TimestampMixin.
    """

    __tablename__ = "product"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    stock_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        # Stock can never be oversold, whatever the isolation level
        CheckConstraint("stock_quantity >= 0", name="chk_product_stock_non_negative"),
        CheckConstraint("price_cents >= 0", name="chk_product_price_non_negative"),
        # Low-stock lookup (is_active + stock_quantity)
        Index("ix_product_active_stock", "is_active", "stock_quantity"),
    )

    def __repr__(self) -> str:
        return (
            f"<Product(id={self.id}, name='{self.name}', price_cents={self.price_cents}, "
            f"stock={self.stock_quantity}, active={self.is_active})>"
        )
