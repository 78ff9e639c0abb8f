"""
Ticket Sequencer.

Issues the next queue number for a service day. The number is computed as
max + 1 and the UNIQUE(service_day, sequence_number) constraint rejects the
loser of a race; the loser rolls back, recomputes and tries again within a
bounded number of attempts.
"""

from datetime import date

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from rest_api.models import Ticket
from rest_api.repositories import TicketRepository
from shared.config.constants import Limits, TicketStatus
from shared.config.logging import queue_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import is_transient_error
from shared.infrastructure.retry import RetryConfig, run_with_retry
from shared.utils.exceptions import SequenceConflictError, StorageFailureError
from shared.utils.validators import normalize_optional_text

from .service_clock import ServiceClock


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, IntegrityError) or is_transient_error(exc)


class TicketSequencer:
    """Mints tickets with contiguous per-day numbers."""

    def __init__(
        self,
        db: Session,
        clock: ServiceClock | None = None,
        retry: RetryConfig | None = None,
    ):
        self._db = db
        self._clock = clock or ServiceClock()
        self._retry = retry or RetryConfig.from_settings(settings.ticket_issue_max_attempts)
        self._tickets = TicketRepository(db)

    def issue(self, customer_name: str | None = None, service_day: date | None = None) -> Ticket:
        """
        Insert a new waiting ticket numbered max + 1 for the service day.

        Raises:
            SequenceConflictError: number collisions outlasted every attempt
            StorageFailureError: the store kept failing
        """
        day = service_day or self._clock.service_day()
        name = normalize_optional_text(customer_name, Limits.MAX_CUSTOMER_NAME_LENGTH)

        try:
            ticket = run_with_retry(
                lambda: self._insert_next(day, name),
                config=self._retry,
                is_retryable=_is_retryable,
                label="issue_ticket",
            )
        except IntegrityError as exc:
            raise SequenceConflictError(
                day.isoformat(), self._retry.max_attempts
            ) from exc
        except SQLAlchemyError as exc:
            raise StorageFailureError("issue_ticket", service_day=day.isoformat()) from exc

        logger.info(
            "Ticket issued",
            ticket_id=ticket.id,
            service_day=day.isoformat(),
            sequence_number=ticket.sequence_number,
        )
        return ticket

    def _insert_next(self, day: date, customer_name: str | None) -> Ticket:
        number = None
        try:
            number = self._tickets.max_sequence_number(day) + 1
            ticket = Ticket(
                sequence_number=number,
                customer_name=customer_name,
                status=TicketStatus.WAITING,
                service_day=day,
                created_at=self._clock.now(),
            )
            self._db.add(ticket)
            self._db.flush()
            self._db.commit()
        except IntegrityError:
            self._db.rollback()
            logger.info(
                "Ticket number taken by a concurrent issue",
                service_day=day.isoformat(),
                sequence_number=number,
            )
            raise
        except Exception:
            self._db.rollback()
            raise
        return ticket
