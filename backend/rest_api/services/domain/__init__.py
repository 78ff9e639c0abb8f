"""
Domain Services - order admission and queue ticketing engine.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access)
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import OrderService, QueueService

    # In router
    order = OrderService(db).place_order(cashier_id, "cash", items)
"""

from .service_clock import ServiceClock, get_service_clock
from .status_machine import StatusMachine, ORDER_STATUS_MACHINE, TICKET_STATUS_MACHINE
from .ticket_sequencer import TicketSequencer
from .order_builder import CartLine, StagedLine, StockDecrement, StagedOrder, OrderBuilder
from .stock_ledger import StockLedger
from .queue_service import QueueService
from .order_service import OrderService

__all__ = [
    # Clock
    "ServiceClock",
    "get_service_clock",
    # Status machines
    "StatusMachine",
    "ORDER_STATUS_MACHINE",
    "TICKET_STATUS_MACHINE",
    # Queue
    "TicketSequencer",
    "QueueService",
    # Orders
    "CartLine",
    "StagedLine",
    "StockDecrement",
    "StagedOrder",
    "OrderBuilder",
    "StockLedger",
    "OrderService",
]
