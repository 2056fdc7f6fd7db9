"""
SConf Backend - Query Shaper
============================

What:  Turns raw list-endpoint query parameters (page, limit, sortBy,
       sortOrder and per-entity filters) into a SQLAlchemy select, a matching
       count select and the pagination block of the response.
Why:   Every list endpoint shares one pagination/filter/sort contract; the
       per-entity differences live in a declarative QuerySpec.
How:   shape_query() validates the parameters and returns an immutable
       ShapedQuery. It performs no I/O; the entity store executes the
       statements it builds.

Parameter rules:
    page      default 1, integer in [1, INT4_MAX]
    limit     default settings.default_page_size, integer >= 1, clamped to
              settings.max_page_size
    sortBy    must be one of the entity's allow-listed fields
    sortOrder asc | desc (case-insensitive)
    filters   absent or empty values impose no constraint

Example:
    shaped = shape_query(SCIENTIST_QUERY, {"page": "2", "limit": "5", "country": "ger"})
    rows = (await db.execute(shaped.statement)).scalars().all()
    total = (await db.execute(shaped.count_statement)).scalar_one()
    shaped.pagination(total)   # Pagination(page=2, limit=5, total=..., pages=...)
"""

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from sqlalchemy import Select, func, or_, select
from sqlalchemy.sql.elements import ColumnElement

from sconf.config import settings
from sconf.exceptions import ValidationError
from sconf.schemas.common import INT4_MAX, Pagination

SORT_ORDERS = ("asc", "desc")

QueryParams = Mapping[str, Optional[str]]


# ══════════════════════════════════════════════════════════════════════════
# Filters
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class TextFilter:
    """
    Case-insensitive substring match of `param` against one or more columns.

    With several columns the matches are OR-ed, which is how the scientist
    `search` parameter covers name, specialization and organization at once.
    LIKE wildcards in the value are escaped and match literally.
    """

    param: str
    columns: Tuple[Any, ...]

    def clause(self, value: str) -> ColumnElement:
        matches = [column.icontains(value, autoescape=True) for column in self.columns]
        return matches[0] if len(matches) == 1 else or_(*matches)


@dataclass(frozen=True)
class ExactFilter:
    """Integer equality on a single column (foreign key filters)."""

    param: str
    column: Any

    def clause(self, value: str) -> ColumnElement:
        try:
            number = int(value)
        except ValueError:
            raise ValidationError(
                message=f"'{self.param}' must be an integer",
                field=self.param,
                context={"value": value},
            )
        if not -INT4_MAX - 1 <= number <= INT4_MAX:
            raise ValidationError(
                message=f"'{self.param}' is out of range",
                field=self.param,
                context={"value": value},
            )
        return self.column == number


Filter = Union[TextFilter, ExactFilter]


@dataclass(frozen=True)
class QuerySpec:
    """
    Per-entity list contract.

    Attributes:
        model:          ORM class being listed
        sort_fields:    external sortBy name → column (the allow-list)
        default_sort:   sortBy used when the parameter is absent
        default_order:  sortOrder used when the parameter is absent
        filters:        filters recognized for this entity
    """

    model: Any
    sort_fields: Mapping[str, Any]
    default_sort: str = "id"
    default_order: str = "asc"
    filters: Sequence[Filter] = field(default_factory=tuple)


# ══════════════════════════════════════════════════════════════════════════
# Shaped Query
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ShapedQuery:
    """Validated list request: predicate, ordering and page window."""

    spec: QuerySpec
    page: int
    limit: int
    sort_by: str
    sort_order: str
    conditions: Tuple[ColumnElement, ...] = ()

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def apply(self, statement: Select) -> Select:
        """
        Adds the filters, ordering and page window to `statement`.

        Used directly for selects that join or eager-load relations; plain
        listings go through `statement`.
        """
        if self.conditions:
            statement = statement.where(*self.conditions)

        descending = self.sort_order == "desc"
        column = self.spec.sort_fields[self.sort_by]
        order_by = [column.desc() if descending else column.asc()]
        # Ties break on id in the same direction, so desc is the exact reverse of asc
        if self.sort_by != "id":
            model_id = self.spec.model.id
            order_by.append(model_id.desc() if descending else model_id.asc())

        return statement.order_by(*order_by).offset(self.offset).limit(self.limit)

    @property
    def statement(self) -> Select:
        return self.apply(select(self.spec.model))

    @property
    def count_statement(self) -> Select:
        statement = select(func.count()).select_from(self.spec.model)
        if self.conditions:
            statement = statement.where(*self.conditions)
        return statement

    def pagination(self, total: int) -> Pagination:
        """Pagination block for `total` matching rows; pages is 0 when nothing matched."""
        return Pagination(
            page=self.page,
            limit=self.limit,
            total=total,
            pages=math.ceil(total / self.limit),
        )


# ══════════════════════════════════════════════════════════════════════════
# Parameter Parsing
# ══════════════════════════════════════════════════════════════════════════


def _param(params: QueryParams, name: str) -> Optional[str]:
    """Returns the stripped parameter value, or None when absent or blank."""
    value = params.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _positive_int(
    params: QueryParams, name: str, default: int, maximum: Optional[int] = None
) -> int:
    raw = _param(params, name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(
            message=f"'{name}' must be an integer",
            field=name,
            context={"value": raw},
        )
    if value < 1:
        raise ValidationError(message=f"'{name}' must be at least 1", field=name)
    if maximum is not None and value > maximum:
        raise ValidationError(
            message=f"'{name}' must be at most {maximum}",
            field=name,
            context={"value": raw},
        )
    return value


def resolve_page(params: QueryParams) -> Tuple[int, int]:
    """
    Parses page and limit with the shared defaults, bounds and clamping.

    Exposed separately for paths that paginate without a QuerySpec
    (the metadata search).
    """
    page = _positive_int(params, "page", 1, maximum=INT4_MAX)
    limit = _positive_int(params, "limit", settings.default_page_size)
    return page, min(limit, settings.max_page_size)


def shape_query(spec: QuerySpec, params: QueryParams) -> ShapedQuery:
    """
    Validates raw query parameters against `spec`.

    Raises:
        ValidationError: malformed or out-of-range page/limit, unknown sortBy,
                         invalid sortOrder, non-integer or out-of-range exact
                         filter value.
    """
    page, limit = resolve_page(params)

    sort_by = _param(params, "sortBy") or spec.default_sort
    if sort_by not in spec.sort_fields:
        allowed = list(spec.sort_fields)
        raise ValidationError(
            message=f"Invalid sortBy '{sort_by}'. Allowed: {', '.join(allowed)}",
            field="sortBy",
            context={"allowed": allowed},
        )

    sort_order = (_param(params, "sortOrder") or spec.default_order).lower()
    if sort_order not in SORT_ORDERS:
        raise ValidationError(
            message="sortOrder must be 'asc' or 'desc'",
            field="sortOrder",
            context={"allowed": list(SORT_ORDERS)},
        )

    conditions = []
    for flt in spec.filters:
        value = _param(params, flt.param)
        if value is not None:
            conditions.append(flt.clause(value))

    return ShapedQuery(
        spec=spec,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        conditions=tuple(conditions),
    )
