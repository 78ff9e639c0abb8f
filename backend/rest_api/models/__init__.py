"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class, TimestampMixin, BigIntPK
- catalog: Product
- user: User
- queue: Ticket
- order: Order, OrderItem
"""

from .base import Base, TimestampMixin, BigIntPK
from .catalog import Product
from .user import User
from .queue import Ticket
from .order import Order, OrderItem

__all__ = [
    "Base",
    "TimestampMixin",
    "BigIntPK",
    "Product",
    "User",
    "Ticket",
    "Order",
    "OrderItem",
]
