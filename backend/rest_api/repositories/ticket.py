"""
Ticket Repository - Data access for queue tickets.
"""

from datetime import date
from typing import Sequence

from sqlalchemy import func, select

from rest_api.models import Ticket
from shared.config.constants import TicketStatus
from .base import BaseRepository


class TicketRepository(BaseRepository[Ticket]):
    """Repository for queue tickets, scoped by service day."""

    @property
    def model(self) -> type[Ticket]:
        return Ticket

    def max_sequence_number(self, service_day: date) -> int:
        """Highest number issued for the day, 0 when none."""
        return self._db.scalar(
            select(func.max(Ticket.sequence_number))
            .where(Ticket.service_day == service_day)
        ) or 0

    def find_for_day(self, service_day: date) -> Sequence[Ticket]:
        """All tickets of the day in queue order."""
        return self._db.execute(
            select(Ticket)
            .where(Ticket.service_day == service_day)
            .order_by(Ticket.sequence_number)
        ).scalars().all()

    def find_latest_called(self, service_day: date) -> Ticket | None:
        """The called ticket with the highest number."""
        return self._db.scalar(
            select(Ticket)
            .where(
                Ticket.service_day == service_day,
                Ticket.status == TicketStatus.CALLED,
            )
            .order_by(Ticket.sequence_number.desc())
            .limit(1)
        )

    def find_next_waiting(self, service_day: date) -> Ticket | None:
        """The waiting ticket with the lowest number."""
        return self._db.scalar(
            select(Ticket)
            .where(
                Ticket.service_day == service_day,
                Ticket.status == TicketStatus.WAITING,
            )
            .order_by(Ticket.sequence_number)
            .limit(1)
        )
