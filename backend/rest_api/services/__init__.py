"""
Services module for business logic.

- domain/: Application services used by the routers

Usage:
    from rest_api.services import OrderService
    service = OrderService(db)
    order = service.get_order(order_id)
"""

from .domain import (
    ServiceClock,
    get_service_clock,
    QueueService,
    OrderService,
)

__all__ = [
    "ServiceClock",
    "get_service_clock",
    "QueueService",
    "OrderService",
]
