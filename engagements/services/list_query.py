"""One filter/sort/paginate pipeline shared by every list operation.

Each list operation describes itself with a ``ListQuerySpec`` (which params
filter which columns, what the search covers, which sort keys are allowed)
and hands its validated params to ``run_list_query``. Count and data queries
are built from the same filtered base query.
"""

from __future__ import annotations

import enum
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import DateTime, or_
from sqlalchemy.orm import Session

from engagements.core.enums import SortDirection
from engagements.core.exceptions import ValidationError
from engagements.schemas.common import ListEnvelope, ListParams

T = TypeVar("T")


class FilterKind(str, enum.Enum):
    EQUALS = "equals"
    MIN = "min"
    MAX = "max"


@dataclass(frozen=True)
class FilterField:
    """Maps one list param onto a column predicate."""

    param: str
    column: Any
    kind: FilterKind = FilterKind.EQUALS


@dataclass(frozen=True)
class ListQuerySpec:
    model: type
    filters: Sequence[FilterField] = ()
    search_columns: Sequence[Any] = ()
    sort_columns: Mapping[str, Any] = field(default_factory=dict)
    nullable_sort_keys: frozenset[str] = frozenset()
    # Outer joins, each a target or a (target, onclause) pair.
    joins: Sequence[Any] = ()
    load_options: Sequence[Any] = ()


@dataclass
class Page(Generic[T]):
    data: list[T]
    count: int
    page: int
    limit: int
    total_pages: int

    def to_envelope(self, response_model: type[BaseModel]) -> ListEnvelope:
        return ListEnvelope[response_model](
            data=[response_model.model_validate(row) for row in self.data],
            count=self.count,
            page=self.page,
            limit=self.limit,
            total_pages=self.total_pages,
        )


def _is_timestamp(column: Any) -> bool:
    return isinstance(getattr(column, "type", None), DateTime)


def _bound(column: Any, value: Any, kind: FilterKind) -> Any:
    # A bare date against a timestamp column covers that whole day.
    if isinstance(value, date) and not isinstance(value, datetime) and _is_timestamp(column):
        day_edge = time.min if kind == FilterKind.MIN else time.max
        return datetime.combine(value, day_edge, tzinfo=timezone.utc)
    return value


def _predicate(filter_field: FilterField, value: Any) -> Any:
    column = filter_field.column
    if filter_field.kind == FilterKind.MIN:
        return column >= _bound(column, value, FilterKind.MIN)
    if filter_field.kind == FilterKind.MAX:
        return column <= _bound(column, value, FilterKind.MAX)
    return column == value


def build_filtered_query(
    session: Session,
    spec: ListQuerySpec,
    params: ListParams,
    extra_criteria: Iterable[Any] = (),
):
    """Return the base query with joins, filters and search applied."""
    values = params.model_dump()
    query = session.query(spec.model)
    for join in spec.joins:
        query = query.outerjoin(*join) if isinstance(join, tuple) else query.outerjoin(join)

    criteria = list(extra_criteria)
    for filter_field in spec.filters:
        value = values.get(filter_field.param)
        if value is None:
            continue
        criteria.append(_predicate(filter_field, value))

    search = values.get("search")
    if search and spec.search_columns:
        criteria.append(or_(*(column.icontains(search, autoescape=True) for column in spec.search_columns)))

    if criteria:
        query = query.filter(*criteria)
    return query


def _order_clauses(spec: ListQuerySpec, sort_by: str, direction: SortDirection) -> list[Any]:
    column = spec.sort_columns.get(sort_by)
    if column is None:
        allowed = ", ".join(sorted(spec.sort_columns))
        raise ValidationError(f"Cannot sort by '{sort_by}'. Allowed sort keys: {allowed}")

    descending = direction == SortDirection.DESC
    primary = column.desc() if descending else column.asc()
    if sort_by in spec.nullable_sort_keys:
        primary = primary.nulls_last()
    tie_breaker = spec.model.id.desc() if descending else spec.model.id.asc()
    return [primary, tie_breaker]


def run_list_query(
    session: Session,
    spec: ListQuerySpec,
    params: ListParams,
    extra_criteria: Iterable[Any] = (),
) -> Page:
    """Execute one count query and one page query over the same filters."""
    query = build_filtered_query(session, spec, params, extra_criteria)
    order_by = _order_clauses(spec, params.sort_by, params.sort_direction)

    count = query.order_by(None).count()
    data_query = query.order_by(*order_by)
    if spec.load_options:
        data_query = data_query.options(*spec.load_options)
    data = data_query.offset((params.page - 1) * params.limit).limit(params.limit).all()

    return Page(
        data=data,
        count=count,
        page=params.page,
        limit=params.limit,
        total_pages=math.ceil(count / params.limit),
    )
