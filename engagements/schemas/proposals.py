"""Proposal request/response schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import BeforeValidator, ConfigDict, Field, StringConstraints

from engagements.core.enums import ProposalStatus, ProposalType
from engagements.schemas.common import CamelModel, ListParams

MAX_PROPOSAL_VALUE = Decimal("999999999999.99")
CURRENCY_PATTERN = r"^[A-Z]{3}$"


def _normalize_currency(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().upper()
    return value


CurrencyCode = Annotated[str, BeforeValidator(_normalize_currency), StringConstraints(pattern=CURRENCY_PATTERN)]


def _calendar_day_or_instant(value: Any) -> Any:
    # "YYYY-MM-DD" stays a calendar day; anything longer parses as an instant.
    if isinstance(value, str) and len(value.strip()) == 10:
        return date.fromisoformat(value.strip())
    return value


DateBound = Annotated[datetime | date, BeforeValidator(_calendar_day_or_instant)]


class ProposalCreate(CamelModel):
    service_scope_id: int = Field(ge=1)
    proposal_type: ProposalType
    document_link: str = Field(min_length=1, max_length=500)
    version: str | None = Field(default=None, min_length=1, max_length=50)
    status: ProposalStatus | None = None
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1, max_length=5000)
    proposal_value: Decimal | None = Field(default=None, ge=0, le=MAX_PROPOSAL_VALUE, decimal_places=2)
    currency: CurrencyCode | None = None
    valid_until_date: date | None = None
    estimated_duration_days: int | None = Field(default=None, ge=1, le=3650)
    submitted_at: datetime | None = None
    approved_at: datetime | None = None
    assignee_user_id: int | None = Field(default=None, ge=1)
    notes: str | None = Field(default=None, min_length=1, max_length=5000)
    custom_field_data: dict[str, Any] | None = None


class ProposalUpdate(CamelModel):
    proposal_type: ProposalType | None = None
    document_link: str | None = Field(default=None, min_length=1, max_length=500)
    version: str | None = Field(default=None, min_length=1, max_length=50)
    status: ProposalStatus | None = None
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1, max_length=5000)
    proposal_value: Decimal | None = Field(default=None, ge=0, le=MAX_PROPOSAL_VALUE, decimal_places=2)
    currency: CurrencyCode | None = None
    valid_until_date: date | None = None
    estimated_duration_days: int | None = Field(default=None, ge=1, le=3650)
    submitted_at: datetime | None = None
    approved_at: datetime | None = None
    assignee_user_id: int | None = Field(default=None, ge=1)
    notes: str | None = Field(default=None, min_length=1, max_length=5000)
    custom_field_data: dict[str, Any] | None = None


class ProposalListParams(ListParams):
    proposal_type: ProposalType | None = None
    status: ProposalStatus | None = None
    assignee_user_id: int | None = Field(default=None, ge=1)
    client_id: int | None = Field(default=None, ge=1)
    service_scope_id: int | None = Field(default=None, ge=1)
    currency: CurrencyCode | None = None
    date_from: DateBound | None = None
    date_to: DateBound | None = None
    submitted_date_from: DateBound | None = None
    submitted_date_to: DateBound | None = None
    sort_by: Literal[
        "createdAt", "updatedAt", "submittedAt", "approvedAt", "proposalValue", "validUntilDate"
    ] = "createdAt"


class ProposalResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    service_scope_id: int
    proposal_type: ProposalType
    document_link: str
    version: str | None = None
    status: ProposalStatus
    title: str | None = None
    description: str | None = None
    proposal_value: Decimal | None = None
    currency: str | None = None
    valid_until_date: date | None = None
    estimated_duration_days: int | None = None
    submitted_at: datetime | None = None
    approved_at: datetime | None = None
    assignee_user_id: int | None = None
    notes: str | None = None
    custom_field_data: dict[str, Any] | None = None
    is_draft: bool
    is_submitted: bool
    is_approved: bool
    is_final: bool
    is_expired: bool
    created_at: datetime
    updated_at: datetime
