"""
User Model.

Users are created and authenticated elsewhere; orders only reference the
cashier who placed them.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import BigIntPK, Base, TimestampMixin


class User(TimestampMixin, Base):
    """
    A staff member (cashier or admin).
    Inherits: created_at, updated_at from TimestampMixin.
    """

    __tablename__ = "app_user"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    role: Mapped[str] = mapped_column(Text, default="cashier", nullable=False)  # admin, cashier
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
