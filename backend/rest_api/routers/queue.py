"""
Queue router.
Ticket issue and status changes at the counter, plus the queue board reads.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    ErrorResponse,
    IssueTicketRequest,
    TicketOutput,
    UpdateTicketStatusRequest,
)
from rest_api.services.domain import QueueService, ServiceClock, get_service_clock


router = APIRouter(prefix="/api/queue", tags=["queue"])


def get_queue_service(
    db: Session = Depends(get_db),
    clock: ServiceClock = Depends(get_service_clock),
) -> QueueService:
    return QueueService(db, clock)


@router.post(
    "/tickets",
    response_model=TicketOutput,
    status_code=status.HTTP_201_CREATED,
    responses={503: {"model": ErrorResponse}},
)
def issue_ticket(
    body: IssueTicketRequest,
    service: QueueService = Depends(get_queue_service),
) -> TicketOutput:
    """Give a walk-in customer the next number of the current service day."""
    ticket = service.issue_ticket(body.customer_name)
    return TicketOutput.model_validate(ticket)


@router.get("/tickets", response_model=list[TicketOutput])
def list_queue(
    service_day: date | None = Query(default=None, description="Defaults to the current service day"),
    service: QueueService = Depends(get_queue_service),
) -> list[TicketOutput]:
    """Tickets of a service day in number order."""
    return [TicketOutput.model_validate(t) for t in service.list_queue(service_day)]


@router.get("/now-serving", response_model=TicketOutput | None)
def get_now_serving(
    service: QueueService = Depends(get_queue_service),
) -> TicketOutput | None:
    """
    Ticket shown on the board: the latest called ticket, else the next
    waiting one. Null when the queue is empty.
    """
    ticket = service.get_now_serving()
    return TicketOutput.model_validate(ticket) if ticket else None


@router.patch(
    "/tickets/{ticket_id}/status",
    response_model=TicketOutput,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_ticket_status(
    ticket_id: int,
    body: UpdateTicketStatusRequest,
    service: QueueService = Depends(get_queue_service),
) -> TicketOutput:
    """
    Move a ticket: waiting → called → served, or cancelled.
    A called ticket can be called again or sent back to waiting.
    """
    ticket = service.set_ticket_status(ticket_id, body.status)
    return TicketOutput.model_validate(ticket)
