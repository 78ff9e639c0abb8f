"""
Queue Models: Ticket.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import CheckConstraint, Date, DateTime, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import BigIntPK, Base


class Ticket(Base):
    """
    A walk-in queue ticket.

    Sequence numbers restart at 1 every service day. Tickets are never
    deleted; served and cancelled tickets stay as history.
    """

    __tablename__ = "queue_ticket"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)
    customer_name: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(
        Text, default="waiting", nullable=False
    )  # waiting, called, served, cancelled
    service_day: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    called_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    served_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        # Two concurrent issues on the same day cannot both keep a number
        UniqueConstraint("service_day", "sequence_number", name="uq_queue_ticket_day_number"),
        CheckConstraint("sequence_number > 0", name="chk_queue_ticket_number_positive"),
        # Queue board and "now serving" lookups (service_day + status)
        Index("ix_queue_ticket_day_status", "service_day", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Ticket(id={self.id}, day={self.service_day}, number={self.sequence_number}, "
            f"status='{self.status}')>"
        )
