"""Shared envelopes and list-query parameters."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from engagements.core.enums import SortDirection
from engagements.core.exceptions import EngagementError

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for request/response shapes exchanged in camelCase.

    Python callers may still use the snake_case field names; unknown keys are
    ignored rather than rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class ListParams(CamelModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    search: str | None = Field(default=None, max_length=255)
    sort_by: str = "createdAt"
    sort_direction: SortDirection = Field(
        default=SortDirection.DESC,
        validation_alias=AliasChoices("sortDirection", "sort_direction"),
    )


class ListEnvelope(CamelModel, Generic[T]):
    data: list[T]
    count: int
    page: int
    limit: int
    total_pages: int


class MutationEnvelope(CamelModel, Generic[T]):
    status_code: int
    message: str
    data: T | None = None


class ErrorEnvelope(CamelModel):
    status_code: int
    error: str
    message: str


def error_envelope(exc: EngagementError) -> ErrorEnvelope:
    """Translate a domain error into its user-facing envelope."""
    return ErrorEnvelope(status_code=exc.status_code, error=exc.error, message=exc.message)


def dump_envelope(envelope: BaseModel) -> dict[str, Any]:
    """Serialize an envelope with camelCase keys for the transport layer."""
    return envelope.model_dump(mode="json", by_alias=True)


def mutation_envelope(
    response_model: type[BaseModel], row: Any, message: str, status_code: int = 200
) -> MutationEnvelope:
    """Wrap a created/updated row (or ``None`` for deletes) for the caller."""
    data = response_model.model_validate(row) if row is not None else None
    return MutationEnvelope[response_model](status_code=status_code, message=message, data=data)
