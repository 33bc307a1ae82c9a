# client.py - Elasticsearch Backend
# =============================================================================
# Implements the count/page contract on top of the async Elasticsearch client.
# Elasticsearch refuses any search where `from + size` exceeds the index's
# max_result_window, which is the page-depth limit partitioning works around.
# =============================================================================

from typing import Any

from elasticsearch import ApiError, AsyncElasticsearch, TransportError
from rich.console import Console

from ..errors import BackendError
from .backend import Document, Hit, RangeFilter, SortOrder
from .config import PAGE_DEPTH_LIMIT, REQUEST_TIMEOUT, SEARCH_API_KEY, SEARCH_ENDPOINT
from .values import ValueType

console = Console()


def create_client(
    endpoint: str = None,
    api_key: str = None,
    request_timeout: float = None
) -> AsyncElasticsearch:
    """
    Creates the async Elasticsearch client.

    Args:
        endpoint: Override for the service URL
        api_key: Override for the API key (encoded form)
        request_timeout: Override for the request timeout in seconds
    """
    url = endpoint or SEARCH_ENDPOINT
    key = api_key or SEARCH_API_KEY
    timeout = request_timeout or REQUEST_TIMEOUT

    if key:
        return AsyncElasticsearch(url, api_key=key, request_timeout=timeout)
    return AsyncElasticsearch(url, request_timeout=timeout)


def build_query(range_filter: RangeFilter | None, value_type: ValueType) -> dict:
    """Renders a range filter as an Elasticsearch query clause."""
    if range_filter is None:
        return {"match_all": {}}

    upper_op = "lte" if range_filter.include_upper else "lt"
    clause = {
        "gte": value_type.to_query(range_filter.lower),
        upper_op: value_type.to_query(range_filter.upper),
    }
    # Overrides the field's mapped format, which may not accept our values
    if value_type.query_format:
        clause["format"] = value_type.query_format
    return {"range": {range_filter.field_name: clause}}


def build_preference(index_name: str, range_filter: RangeFilter | None, value_type: ValueType) -> str:
    """
    Routing preference shared by every page of one range.

    Pinning a range to the same shard copies keeps the order of documents
    with equal sort values identical from page to page.
    """
    if range_filter is None:
        return f"archiver-{index_name}"
    return f"archiver-{index_name}-{value_type.serialize(range_filter.lower)}"


class ElasticsearchBackend:
    """Counts and pages through one index, ordered by one field."""

    def __init__(
        self,
        client: AsyncElasticsearch,
        index_name: str,
        value_type: ValueType,
        page_depth_limit: int = None
    ):
        self.client = client
        self.index_name = index_name
        self.value_type = value_type
        self.page_depth_limit = page_depth_limit or PAGE_DEPTH_LIMIT

    async def count(self, range_filter: RangeFilter | None = None) -> int:
        query = build_query(range_filter, self.value_type)
        try:
            response = await self.client.count(index=self.index_name, query=query)
        except (ApiError, TransportError) as e:
            raise BackendError(f"Count on '{self.index_name}' failed: {e}")
        return int(response["count"])

    async def query(
        self,
        range_filter: RangeFilter | None,
        field_name: str,
        order: SortOrder = SortOrder.ASCENDING,
        skip: int = 0,
        top: int = 1,
    ) -> list[Document]:
        if skip < 0 or top < 1:
            raise ValueError(f"Invalid page request: skip={skip}, top={top}")
        if skip + top > self.page_depth_limit:
            raise ValueError(
                f"Page request skip={skip}, top={top} exceeds the depth limit "
                f"of {self.page_depth_limit}"
            )

        query = build_query(range_filter, self.value_type)
        try:
            response = await self.client.search(
                index=self.index_name,
                query=query,
                sort=[{field_name: {"order": SortOrder(order).value}}],
                from_=skip,
                size=top,
                preference=build_preference(self.index_name, range_filter, self.value_type),
                track_total_hits=False,
            )
        except (ApiError, TransportError) as e:
            raise BackendError(
                f"Query on '{self.index_name}' at offset {skip} failed: {e}"
            )

        return [_hit_to_document(hit) for hit in response["hits"]["hits"]]

    async def close(self) -> None:
        await self.client.close()


def _hit_to_document(hit: dict[str, Any]) -> Hit:
    # Identity first, so an archive can be re-indexed under the same ids
    document = {"_id": hit["_id"]} if "_id" in hit else {}
    document.update(hit.get("_source") or {})
    return Hit(document, hit.get("sort"))
