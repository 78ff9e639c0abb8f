"""
Queue Domain Service.

Ticket issue, ticket status changes and the read side of the queue board.
"""

from datetime import date
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rest_api.models import Ticket
from rest_api.repositories import TicketRepository
from shared.config.constants import TicketStatus
from shared.config.logging import queue_logger as logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import StorageFailureError, TicketNotFoundError

from .service_clock import ServiceClock
from .status_machine import TICKET_STATUS_MACHINE
from .ticket_sequencer import TicketSequencer


class QueueService:
    """
    Domain service for the walk-in queue.

    Usage:
        service = QueueService(db)
        ticket = service.issue_ticket("Ana")
        service.set_ticket_status(ticket.id, "called")
    """

    def __init__(
        self,
        db: Session,
        clock: ServiceClock | None = None,
        sequencer: TicketSequencer | None = None,
    ):
        self._db = db
        self._clock = clock or ServiceClock()
        self._sequencer = sequencer or TicketSequencer(db, self._clock)
        self._tickets = TicketRepository(db)

    # =========================================================================
    # Commands
    # =========================================================================

    def issue_ticket(
        self,
        customer_name: str | None = None,
        service_day: date | None = None,
    ) -> Ticket:
        return self._sequencer.issue(customer_name, service_day)

    def set_ticket_status(self, ticket_id: int, new_status: str) -> Ticket:
        """
        Move a ticket along its lifecycle.

        Entering ``called`` stamps called_at (a re-call refreshes it) and
        entering ``served`` stamps served_at. Other moves leave both alone.
        """
        TICKET_STATUS_MACHINE.ensure_known(new_status)

        try:
            ticket = self._tickets.find_by_id(ticket_id, for_update=True)
            if ticket is None:
                raise TicketNotFoundError(ticket_id)

            previous = ticket.status
            TICKET_STATUS_MACHINE.check(previous, new_status)

            now = self._clock.now()
            if new_status == TicketStatus.CALLED:
                ticket.called_at = now
            elif new_status == TicketStatus.SERVED:
                ticket.served_at = now
            ticket.status = new_status

            safe_commit(self._db)
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise StorageFailureError("set_ticket_status", ticket_id=ticket_id) from exc
        except Exception:
            self._db.rollback()
            raise

        logger.info(
            "Ticket status changed",
            ticket_id=ticket.id,
            sequence_number=ticket.sequence_number,
            from_status=previous,
            to_status=new_status,
        )
        return ticket

    # =========================================================================
    # Queries
    # =========================================================================

    def get_ticket(self, ticket_id: int) -> Ticket:
        ticket = self._tickets.find_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket

    def list_queue(self, service_day: date | None = None) -> Sequence[Ticket]:
        """Tickets of the service day in number order."""
        return self._tickets.find_for_day(service_day or self._clock.service_day())

    def get_now_serving(self, service_day: date | None = None) -> Ticket | None:
        """
        Ticket to show on the board: the most recently numbered called
        ticket, else the next waiting one, else None.
        """
        day = service_day or self._clock.service_day()
        return self._tickets.find_latest_called(day) or self._tickets.find_next_waiting(day)
