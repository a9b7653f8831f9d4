"""Pure consistency checks applied before any engagement write.

Every check raises ``ValidationError`` with a message naming the offending
field. None of them touch the database.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any

from engagements.core.config import get_config
from engagements.core.enums import CustomFieldEntityType
from engagements.core.exceptions import ConfigurationError, ValidationError
from engagements.integrations.custom_fields import CustomFieldGateway
from engagements.models.base import as_utc, utcnow

logger = logging.getLogger(__name__)


def resolve_effective(changes: Mapping[str, Any], field: str, existing: Any) -> Any:
    """Return the value ``field`` will hold after ``changes`` is applied.

    A key sent with ``None`` clears the stored value, so it counts as provided.
    """
    return changes[field] if field in changes else existing


def _as_instant(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return as_utc(value)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def validate_proposal_dates(
    submitted_at: datetime | None,
    approved_at: datetime | None,
    valid_until: date | datetime | None,
    now: datetime | None = None,
) -> None:
    """Check the proposal date triple against the effective values.

    ``valid_until`` given as a plain date is read as midnight UTC of that day,
    so a date of today is already not in the future.
    """
    now = as_utc(now) if now is not None else utcnow()
    submitted = as_utc(submitted_at)
    approved = as_utc(approved_at)

    if submitted is not None and approved is not None and approved <= submitted:
        raise ValidationError("Approval date must be after submission date")

    if valid_until is not None and _as_instant(valid_until) <= now:
        raise ValidationError("Valid until date must be in the future")

    if submitted is not None and submitted > now:
        raise ValidationError("Submission date cannot be in the future")


def validate_non_negative(value: Decimal | None, field: str) -> None:
    if value is not None and value < 0:
        raise ValidationError(f"{field} cannot be negative")


def validate_financials(
    value: Decimal | None,
    currency: str | None,
    log: logging.Logger | None = None,
    field: str = "Proposal value",
) -> str | None:
    """Reject negative amounts and return the currency to persist.

    A positive amount without a currency falls back to ``DEFAULT_CURRENCY``.
    """
    validate_non_negative(value, field)
    if value is not None and value > 0 and not currency:
        default_currency = get_config().DEFAULT_CURRENCY
        (log or logger).info(
            "financials.currency_defaulted",
            extra={"event": "financials.currency_defaulted", "currency": default_currency, "value": value},
        )
        return default_currency
    return currency


def validate_date_window(
    start: date | None,
    end: date | None,
    start_field: str = "Start date",
    end_field: str = "End date",
) -> None:
    """Require ``end`` to be strictly after ``start`` when both are known."""
    if start is None or end is None:
        return
    if end <= start:
        raise ValidationError(f"{end_field} must be after {start_field.lower()}")


def merge_custom_fields(existing: Mapping[str, Any] | None, validated: Mapping[str, Any]) -> dict[str, Any]:
    """Shallow merge: incoming keys win, untouched stored keys survive."""
    merged = dict(existing or {})
    merged.update(validated)
    return merged


def validate_custom_fields(
    gateway: CustomFieldGateway | None,
    entity_kind: CustomFieldEntityType,
    payload: Mapping[str, Any] | None,
    existing: Mapping[str, Any] | None = None,
) -> dict[str, Any] | None:
    """Delegate ``payload`` to the custom-field subsystem and merge the result.

    Returns the stored map unchanged when no payload was sent.
    """
    if payload is None:
        return dict(existing) if existing is not None else None
    if gateway is None:
        raise ConfigurationError("Custom field data was supplied but no custom field validator is configured")
    validated = gateway.validate(entity_kind, payload)
    return merge_custom_fields(existing, validated)
