"""
Base Repository implementation.
Provides common data access patterns for engine-owned tables.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TypeVar, Generic
from sqlalchemy.orm import Session
from sqlalchemy import select

from shared.config.constants import Limits


ModelT = TypeVar("ModelT")


@dataclass
class RepositoryFilters:
    """Base filters for repository queries."""

    # Pagination
    limit: int = Limits.DEFAULT_PAGE_SIZE
    offset: int = 0

    def __post_init__(self):
        """Validate and normalize filters."""
        self.limit = min(max(1, self.limit), Limits.MAX_PAGE_SIZE)
        self.offset = max(0, self.offset)


class BaseRepository(ABC, Generic[ModelT]):
    """
    Abstract base repository with common operations.

    Subclasses must implement:
    - model: Return the SQLAlchemy model class
    """

    def __init__(self, db: Session):
        self._db = db

    @property
    @abstractmethod
    def model(self) -> type[ModelT]:
        """Return the SQLAlchemy model class."""
        ...

    def find_by_id(self, entity_id: int, for_update: bool = False) -> ModelT | None:
        """
        Find entity by ID.

        Args:
            entity_id: Entity ID
            for_update: Row-lock the entity until the transaction ends

        Returns:
            Entity or None
        """
        query = select(self.model).where(self.model.id == entity_id)
        if for_update:
            query = query.with_for_update()
        return self._db.scalar(query.execution_options(populate_existing=True))

    def exists(self, entity_id: int) -> bool:
        """Check if entity exists."""
        return self._db.scalar(
            select(self.model.id).where(self.model.id == entity_id)
        ) is not None
