"""
Repository Pattern implementation.
Centralizes data access for the order and queue engine.

Usage:
    from rest_api.repositories import OrderRepository, ProductRepository

    catalog = ProductRepository(db)
    product = catalog.get_product(123)
    order = OrderRepository(db).find_with_items(42)
"""

from .base import BaseRepository, RepositoryFilters
from .catalog import CatalogSnapshotReader, ProductRepository
from .ticket import TicketRepository
from .order import OrderRepository, OrderFilters

__all__ = [
    # Base
    "BaseRepository",
    "RepositoryFilters",
    # Catalog
    "CatalogSnapshotReader",
    "ProductRepository",
    # Ticket
    "TicketRepository",
    # Order
    "OrderRepository",
    "OrderFilters",
]
