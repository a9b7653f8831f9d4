"""Contract request/response schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import ConfigDict, Field

from engagements.core.enums import ContractStatus
from engagements.schemas.common import CamelModel, ListParams

MAX_CONTRACT_VALUE = Decimal("999999999999.99")


class ContractCreate(CamelModel):
    name: str = Field(min_length=3, max_length=255)
    client_id: int = Field(ge=1)
    start_date: date
    end_date: date
    renewal_date: date | None = None
    value: Decimal | None = Field(default=None, ge=0, le=MAX_CONTRACT_VALUE, decimal_places=2)
    status: ContractStatus | None = None
    document_link: str | None = Field(default=None, min_length=1, max_length=500)
    notes: str | None = Field(default=None, min_length=1, max_length=5000)
    previous_contract_id: int | None = Field(default=None, ge=1)
    custom_field_data: dict[str, Any] | None = None


class ContractUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=3, max_length=255)
    client_id: int | None = Field(default=None, ge=1)
    start_date: date | None = None
    end_date: date | None = None
    renewal_date: date | None = None
    value: Decimal | None = Field(default=None, ge=0, le=MAX_CONTRACT_VALUE, decimal_places=2)
    status: ContractStatus | None = None
    document_link: str | None = Field(default=None, min_length=1, max_length=500)
    notes: str | None = Field(default=None, min_length=1, max_length=5000)
    previous_contract_id: int | None = Field(default=None, ge=1)
    custom_field_data: dict[str, Any] | None = None


class ContractListParams(ListParams):
    status: ContractStatus | None = None
    client_id: int | None = Field(default=None, ge=1)
    min_value: Decimal | None = Field(default=None, ge=0)
    max_value: Decimal | None = Field(default=None, ge=0)
    expiring_soon_days: int | None = Field(default=None, ge=1, le=365)
    sort_by: Literal["createdAt", "updatedAt", "name", "startDate", "endDate", "value"] = "createdAt"


class ClientSummary(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_name: str


class ContractResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    client_id: int
    start_date: date
    end_date: date
    renewal_date: date | None = None
    value: Decimal | None = None
    status: ContractStatus
    document_link: str | None = None
    notes: str | None = None
    previous_contract_id: int | None = None
    custom_field_data: dict[str, Any] | None = None
    is_renewal: bool
    duration_in_days: int
    client: ClientSummary | None = None
    created_at: datetime
    updated_at: datetime
