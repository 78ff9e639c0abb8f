"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BigIntPK, Base


class Order(Base):
    """
    A committed sale placed by a cashier.

    total_cents is the sum of the line totals at creation time and is never
    recomputed. The ticket reference is weak: removing the ticket nulls it.
    """

    __tablename__ = "pos_order"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    ticket_id: Mapped[Optional[int]] = mapped_column(
        BigIntPK, ForeignKey("queue_ticket.id", ondelete="SET NULL"), index=True
    )
    cashier_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("app_user.id"), nullable=False, index=True
    )
    total_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    payment_method: Mapped[str] = mapped_column(Text, nullable=False)  # cash, card, digital_wallet
    status: Mapped[str] = mapped_column(
        Text, default="pending", nullable=False, index=True
    )  # pending, preparing, ready, completed, cancelled
    note: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Relationships
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    __table_args__ = (
        CheckConstraint("total_cents >= 0", name="chk_pos_order_total_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, status='{self.status}', total_cents={self.total_cents}, "
            f"ticket_id={self.ticket_id})>"
        )


class OrderItem(Base):
    """
    A single line of an order.
    Stores the price at the time of order for historical accuracy.
    """

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("pos_order.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("product.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    line_total_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_item_qty_positive"),
        CheckConstraint("unit_price_cents >= 0", name="chk_order_item_price_non_negative"),
        Index("ix_order_item_order", "order_id"),
    )

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="items")
