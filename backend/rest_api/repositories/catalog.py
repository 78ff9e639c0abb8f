"""
Catalog Snapshot Reader - read access to product price, availability and stock.

The order engine never caches what it reads here: every call goes to the
database, so each attempt of a unit of work sees the latest committed row.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Product
from shared.config.settings import settings


class CatalogSnapshotReader(ABC):
    """Read-only view of the catalog used by the order engine."""

    @abstractmethod
    def get_product(self, product_id: int) -> Product | None:
        """Return the product with its latest committed price and stock, or None."""
        ...

    @abstractmethod
    def get_products_for_update(self, product_ids: Iterable[int]) -> dict[int, Product]:
        """
        Read and row-lock the given products inside the caller's transaction.
        Missing ids are absent from the result.
        """
        ...


class ProductRepository(CatalogSnapshotReader):
    """SQLAlchemy-backed catalog reader."""

    def __init__(self, db: Session):
        self._db = db

    def get_product(self, product_id: int) -> Product | None:
        # populate_existing refreshes an instance already in the identity map
        return self._db.scalar(
            select(Product)
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )

    def get_products_for_update(self, product_ids: Iterable[int]) -> dict[int, Product]:
        ids = sorted(set(product_ids))
        if not ids:
            return {}

        # Lock in ascending id order so two carts sharing products cannot deadlock
        products = self._db.execute(
            select(Product)
            .where(Product.id.in_(ids))
            .order_by(Product.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars().all()

        return {product.id: product for product in products}

    def list_low_stock(self, threshold: int | None = None) -> Sequence[Product]:
        """Active products whose stock is below the threshold, lowest first."""
        if threshold is None:
            threshold = settings.low_stock_threshold

        return self._db.execute(
            select(Product)
            .where(
                Product.is_active.is_(True),
                Product.stock_quantity < threshold,
            )
            .order_by(Product.stock_quantity, Product.id)
        ).scalars().all()
