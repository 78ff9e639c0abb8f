"""
Catalog router.
Read-only stock lookups for the counter.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import ProductSnapshotOutput
from rest_api.repositories import ProductRepository


router = APIRouter(prefix="/api/catalog", tags=["catalog"])


@router.get("/low-stock", response_model=list[ProductSnapshotOutput])
def list_low_stock(
    threshold: int | None = Query(default=None, ge=1, description="Defaults to LOW_STOCK_THRESHOLD"),
    db: Session = Depends(get_db),
) -> list[ProductSnapshotOutput]:
    """Active products whose stock is below the threshold, lowest first."""
    products = ProductRepository(db).list_low_stock(threshold)
    return [ProductSnapshotOutput.model_validate(p) for p in products]
