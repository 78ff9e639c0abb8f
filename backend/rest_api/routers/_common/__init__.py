"""
Common utilities shared across routers.
"""

from .base import current_cashier_id
from .pagination import Pagination, get_pagination

__all__ = [
    "current_cashier_id",
    "Pagination",
    "get_pagination",
]
