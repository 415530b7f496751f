"""
Filtering and pagination over record collections.

Records are always filtered first and windowed second. Two windowing modes
share the same filtered sequence: page/limit offsets for REST and
first/after index cursors for GraphQL, so page ``p`` of size ``L`` holds the
same records as ``first=L, after=(p-1)*L``.
"""

from enum import Enum
import logging
import math
import re
from typing import Any, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..store.records import ACTIONS, NODES, RESOURCE_TEMPLATES, RESPONSES, TRIGGERS, Record

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
DEFAULT_FIRST = 10

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")


class FilterKind(str, Enum):
    """How a filter value is compared with a record field."""

    CONTAINS = "contains"  # case-insensitive substring, strings only
    EQUALS = "equals"  # exact match, strings only
    FLAG = "flag"  # boolean equality, three-state


class FieldFilter(BaseModel):
    """A filterable field of a collection."""

    field: str
    kind: FilterKind

    model_config = ConfigDict(frozen=True)

    def is_active(self, value: Any) -> bool:
        """Whether a criteria value takes part in filtering."""
        if self.kind is FilterKind.FLAG:
            return value is not None
        return bool(value)

    def matches(self, record: Record, value: Any) -> bool:
        actual = record.get(self.field)
        if self.kind is FilterKind.CONTAINS:
            return str(value).lower() in str(actual or "").lower()
        if self.kind is FilterKind.FLAG:
            return isinstance(actual, bool) and actual == bool(value)
        return actual == value


COLLECTION_FILTERS: dict[str, tuple[FieldFilter, ...]] = {
    NODES: (
        FieldFilter(field="name", kind=FilterKind.CONTAINS),
        FieldFilter(field="root", kind=FilterKind.FLAG),
        FieldFilter(field="global", kind=FilterKind.FLAG),
        FieldFilter(field="colour", kind=FilterKind.EQUALS),
    ),
    TRIGGERS: (
        FieldFilter(field="name", kind=FilterKind.CONTAINS),
        FieldFilter(field="resourceTemplateId", kind=FilterKind.EQUALS),
    ),
    ACTIONS: (
        FieldFilter(field="name", kind=FilterKind.CONTAINS),
        FieldFilter(field="resourceTemplateId", kind=FilterKind.EQUALS),
    ),
    RESPONSES: (
        FieldFilter(field="name", kind=FilterKind.CONTAINS),
    ),
    RESOURCE_TEMPLATES: (
        FieldFilter(field="name", kind=FilterKind.CONTAINS),
        FieldFilter(field="integrationId", kind=FilterKind.EQUALS),
        FieldFilter(field="key", kind=FilterKind.EQUALS),
    ),
}


def apply_filters(records: Sequence[Record], collection: str,
                  criteria: Optional[Mapping[str, Any]] = None) -> list[Record]:
    """
    Filter records with the collection's filter fields.

    Active criteria are AND-combined; keys that are not filter fields of the
    collection are ignored. Record order is preserved.

    Args:
        records: Records of the collection in store order
        collection: Collection name selecting the filter fields
        criteria: Filter values keyed by field name

    Returns:
        New list holding the matching records
    """
    if not criteria:
        return list(records)

    active = [
        (field_filter, criteria[field_filter.field])
        for field_filter in COLLECTION_FILTERS.get(collection, ())
        if field_filter.is_active(criteria.get(field_filter.field))
    ]
    if not active:
        return list(records)

    return [
        record for record in records
        if all(field_filter.matches(record, value) for field_filter, value in active)
    ]


def parse_js_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """
    Parse an integer the tolerant way query strings are parsed.

    Leading whitespace, an optional sign and digits are read; anything
    after them is ignored. Values without leading digits yield default.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return default
        return int(value)

    match = _LEADING_INT.match(str(value))
    if not match:
        return default
    return int(match.group(1))


class PageParams(BaseModel):
    """Normalised page/limit parameters."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_page_params(page: Any = None, limit: Any = None) -> PageParams:
    """
    Normalise raw page and limit values.

    ``page`` is at least 1. ``limit`` is clamped to [1, 100]; zero and
    unparseable values fall back to the defaults.
    """
    page_number = max(1, parse_js_int(page) or DEFAULT_PAGE)
    page_size = min(MAX_LIMIT, max(1, parse_js_int(limit) or DEFAULT_LIMIT))
    return PageParams(page=page_number, limit=page_size)


class OffsetPage(BaseModel):
    """One page of records selected by page and limit."""

    items: list[Record] = Field(default_factory=list)
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def to_dict(self) -> dict[str, Any]:
        """REST representation: the records plus pagination metadata."""
        return {
            "data": self.items,
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "totalPages": self.total_pages,
                "hasNext": self.has_next,
                "hasPrev": self.has_prev,
            },
        }


def paginate_offset(records: Sequence[Record], page: Any = None, limit: Any = None) -> OffsetPage:
    """Window an already filtered sequence by page and limit."""
    params = parse_page_params(page, limit)
    window = list(records[params.offset:params.offset + params.limit])
    return OffsetPage(items=window, page=params.page, limit=params.limit, total=len(records))


class CursorEdge(BaseModel):
    """A record with its absolute index as cursor."""

    node: Record
    cursor: str


class CursorPageInfo(BaseModel):
    has_next_page: bool
    has_previous_page: bool
    start_cursor: Optional[str] = None
    end_cursor: Optional[str] = None


class CursorPage(BaseModel):
    """One connection-shaped page of records selected by first and after."""

    edges: list[CursorEdge] = Field(default_factory=list)
    page_info: CursorPageInfo
    total_count: int

    @property
    def nodes(self) -> list[Record]:
        return [edge.node for edge in self.edges]


def paginate_cursor(records: Sequence[Record], first: Optional[int] = DEFAULT_FIRST,
                    after: Optional[str] = None) -> CursorPage:
    """
    Window an already filtered sequence by index cursor.

    Args:
        records: Filtered records
        first: Maximum number of records; None means the default, negative means none
        after: Zero-based start index as decimal text; absent, unparseable
            or negative values start at 0

    Returns:
        CursorPage whose edge cursors are absolute indices
    """
    if first is None:
        first = DEFAULT_FIRST
    first = max(0, first)
    start = max(0, parse_js_int(after, 0)) if after else 0
    end = start + first

    window = list(records[start:end])
    total = len(records)

    edges = [CursorEdge(node=record, cursor=str(start + index)) for index, record in enumerate(window)]
    page_info = CursorPageInfo(
        has_next_page=end < total,
        has_previous_page=start > 0,
        start_cursor=edges[0].cursor if edges else None,
        end_cursor=edges[-1].cursor if edges else None,
    )

    logger.debug(f"Cursor page start={start} first={first} returned {len(edges)} of {total}")
    return CursorPage(edges=edges, page_info=page_info, total_count=total)
