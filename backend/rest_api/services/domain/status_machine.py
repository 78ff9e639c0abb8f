"""
Status machines for orders and queue tickets.

Each machine is a lookup table of allowed moves. The engine services call
``ensure_known`` on the requested name first, then ``check`` against the
entity's current status inside the locked transaction.
"""

from shared.config.constants import (
    ORDER_TRANSITIONS,
    TICKET_TRANSITIONS,
    OrderStatus,
    TicketStatus,
)
from shared.utils.exceptions import InvalidStatusError, InvalidTransitionError


class StatusMachine:
    def __init__(self, entity: str, transitions: dict[str, list[str]], initial: str):
        self.entity = entity
        self._transitions = transitions
        self.initial = initial

    @property
    def statuses(self) -> list[str]:
        return list(self._transitions)

    def is_terminal(self, status: str) -> bool:
        return not self._transitions.get(status)

    def ensure_known(self, status: str) -> str:
        """Return ``status`` unchanged, or raise InvalidStatusError."""
        if status not in self._transitions:
            raise InvalidStatusError(self.entity, status, self.statuses)
        return status

    def can_transition(self, current: str, new: str) -> bool:
        return new in self._transitions.get(current, [])

    def check(self, current: str, new: str) -> None:
        """Raise InvalidTransitionError when ``current -> new`` is not allowed."""
        self.ensure_known(new)
        if not self.can_transition(current, new):
            raise InvalidTransitionError(self.entity, current, new)


ORDER_STATUS_MACHINE = StatusMachine("order", ORDER_TRANSITIONS, OrderStatus.PENDING)
TICKET_STATUS_MACHINE = StatusMachine("ticket", TICKET_TRANSITIONS, TicketStatus.WAITING)
