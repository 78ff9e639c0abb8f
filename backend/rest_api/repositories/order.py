"""
Order Repository - Data access for orders and their line items.
Eager loading of items prevents N+1 queries.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence
from sqlalchemy.orm import selectinload
from sqlalchemy import Select, select

from rest_api.models import Order
from .base import BaseRepository, RepositoryFilters


@dataclass
class OrderFilters(RepositoryFilters):
    """Filters specific to orders."""

    status: str | None = None


class OrderRepository(BaseRepository[Order]):
    """Repository for Order entities."""

    @property
    def model(self) -> type[Order]:
        return Order

    def _apply_filters(self, query: Select, filters: OrderFilters) -> Select:
        if filters.status:
            query = query.where(Order.status == filters.status)
        return query

    def find_with_items(self, order_id: int) -> Order | None:
        """Order with its line items loaded."""
        return self._db.scalar(
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.id == order_id)
        )

    def find_all(self, filters: OrderFilters | None = None) -> Sequence[Order]:
        """Orders matching filters, newest first."""
        filters = filters or OrderFilters()
        query = self._apply_filters(select(Order), filters)
        query = (
            query.order_by(Order.created_at.desc(), Order.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
        )
        return self._db.execute(query).scalars().all()

    def find_created_between(self, starts_at: datetime, ends_at: datetime) -> Sequence[Order]:
        """Every order created in [starts_at, ends_at), oldest first."""
        return self._db.execute(
            select(Order)
            .where(Order.created_at >= starts_at, Order.created_at < ends_at)
            .order_by(Order.created_at, Order.id)
        ).scalars().all()
