# backend.py - Query Backend Contract
# =============================================================================
# The partitioner and exporter only talk to the search service through this
# small contract: count documents in a range, and read one sorted page of a
# range at a given offset.
# =============================================================================

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

Document = dict[str, Any]


class Hit(dict):
    """
    A document as returned by a sorted query.

    Behaves as the plain document; `sort_values` holds the values the
    backend ordered it by, in the backend's own representation.
    """

    def __init__(self, document: Document, sort_values: list[Any] | None = None):
        super().__init__(document)
        self.sort_values = list(sort_values or [])


class SortOrder(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


@dataclass(frozen=True)
class RangeFilter:
    """
    A range over the ordering field.

    Matches `lower <= field < upper`, or `lower <= field <= upper`
    when include_upper is set.
    """
    field_name: str
    lower: Any
    upper: Any
    include_upper: bool = False

    def contains(self, value: Any) -> bool:
        if value < self.lower:
            return False
        if self.include_upper:
            return value <= self.upper
        return value < self.upper


class SearchBackend(Protocol):
    """Remote collection that can be counted and paged through."""

    # Largest `skip + top` a single query may use
    page_depth_limit: int

    async def count(self, range_filter: RangeFilter | None = None) -> int:
        ...

    async def query(
        self,
        range_filter: RangeFilter | None,
        field_name: str,
        order: SortOrder = SortOrder.ASCENDING,
        skip: int = 0,
        top: int = 1,
    ) -> list[Document]:
        ...

    async def close(self) -> None:
        ...


def get_field_value(document: Document, field_name: str) -> Any:
    """
    Reads a possibly dotted field name from a document.

    Returns None when any part of the path is missing.
    """
    if field_name in document:
        return document[field_name]

    value: Any = document
    for part in field_name.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value
