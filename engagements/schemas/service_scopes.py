"""Service scope request/response schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import AliasChoices, ConfigDict, Field

from engagements.core.enums import SAFStatus, SortDirection
from engagements.schemas.common import CamelModel, ListParams


class ServiceScopeCreate(CamelModel):
    service_id: int = Field(ge=1)
    scope_details: dict[str, Any] | None = None
    price: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    quantity: int | None = Field(default=None, ge=1)
    unit: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=2000)
    saf_status: SAFStatus | None = None
    saf_service_start_date: date | None = None
    saf_service_end_date: date | None = None
    saf_document_link: str | None = Field(default=None, min_length=1, max_length=500)
    custom_field_data: dict[str, Any] | None = None


class ServiceScopeUpdate(CamelModel):
    service_id: int | None = Field(default=None, ge=1)
    scope_details: dict[str, Any] | None = None
    price: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    quantity: int | None = Field(default=None, ge=1)
    unit: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=2000)
    is_active: bool | None = None
    saf_status: SAFStatus | None = None
    saf_service_start_date: date | None = None
    saf_service_end_date: date | None = None
    saf_document_link: str | None = Field(default=None, min_length=1, max_length=500)
    custom_field_data: dict[str, Any] | None = None


class ServiceScopeListParams(ListParams):
    limit: int = Field(default=50, ge=1, le=100)
    contract_id: int | None = Field(default=None, ge=1)
    service_id: int | None = Field(default=None, ge=1)
    saf_status: SAFStatus | None = None
    is_active: bool | None = None
    min_price: Decimal | None = Field(default=None, ge=0)
    max_price: Decimal | None = Field(default=None, ge=0)
    sort_by: Literal["createdAt", "updatedAt", "price", "quantity", "safStatus"] = "createdAt"
    sort_direction: SortDirection = Field(
        default=SortDirection.DESC,
        validation_alias=AliasChoices("sortDirection", "sortOrder", "sort_direction"),
    )


class ServiceSummary(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ServiceScopeResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    contract_id: int
    service_id: int
    scope_details: dict[str, Any] | None = None
    price: Decimal | None = None
    quantity: int | None = None
    unit: str | None = None
    notes: str | None = None
    is_active: bool
    saf_status: SAFStatus
    saf_service_start_date: date | None = None
    saf_service_end_date: date | None = None
    saf_document_link: str | None = None
    custom_field_data: dict[str, Any] | None = None
    total_value: Decimal | None = None
    service: ServiceSummary | None = None
    created_at: datetime
    updated_at: datetime
