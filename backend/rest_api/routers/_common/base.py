"""
Request context shared by the routers.

Authentication is handled upstream: a gateway or session service
authenticates the cashier and forwards their id in ``X-Cashier-Id``.
"""

from fastapi import Header

from shared.utils.exceptions import ValidationError


def current_cashier_id(
    x_cashier_id: str | None = Header(default=None, alias="X-Cashier-Id"),
) -> int:
    """
    FastAPI dependency returning the authenticated cashier id.

    Raises:
        ValidationError: header missing or not a positive integer
    """
    if x_cashier_id is None or not x_cashier_id.strip().isdigit():
        raise ValidationError("X-Cashier-Id header must carry the cashier id", header=x_cashier_id)

    cashier_id = int(x_cashier_id.strip())
    if cashier_id < 1:
        raise ValidationError("X-Cashier-Id header must carry the cashier id", header=x_cashier_id)
    return cashier_id
