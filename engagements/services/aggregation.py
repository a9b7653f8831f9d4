"""Derived numeric rollups over service scopes."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from engagements.models import ServiceScope

ZERO = Decimal("0.00")


def contract_total(session: Session, contract_id: int) -> Decimal:
    """Sum ``price * COALESCE(quantity, 1)`` over active, priced scopes of a contract."""
    total = (
        session.query(func.sum(ServiceScope.price * func.coalesce(ServiceScope.quantity, 1)))
        .filter(
            ServiceScope.contract_id == contract_id,
            ServiceScope.is_active.is_(True),
            ServiceScope.price.isnot(None),
        )
        .scalar()
    )
    if total is None:
        return ZERO
    return Decimal(str(total)).quantize(ZERO)
