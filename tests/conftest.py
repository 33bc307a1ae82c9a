"""Shared fixtures: an in-memory backend that follows the SearchBackend contract."""

import asyncio
import bisect
from datetime import datetime, timedelta, timezone

import pytest

from archiver.errors import BackendError
from archiver.export.models import Partition, PartitionFile
from archiver.search.backend import RangeFilter, SortOrder
from archiver.search.fields import FieldInfo
from archiver.search.values import DATE, FLOAT, INTEGER

DAY_ONE = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeBackend:
    """
    Sorted in-memory collection.

    Records every count and page request. `fail_on(range_filter, skip)` may
    return True to make a page request raise BackendError.
    """

    def __init__(self, documents, field_name, page_depth_limit=100_000, delay=0.0):
        self.field_name = field_name
        self.documents = sorted(documents, key=lambda d: d[field_name])
        self.keys = [d[field_name] for d in self.documents]
        self.page_depth_limit = page_depth_limit
        self.delay = delay
        self.fail_on = None

        self.count_calls: list[RangeFilter | None] = []
        self.query_calls: list[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    def _span(self, range_filter):
        if range_filter is None:
            return 0, len(self.keys)
        start = bisect.bisect_left(self.keys, range_filter.lower)
        if range_filter.include_upper:
            end = bisect.bisect_right(self.keys, range_filter.upper)
        else:
            end = bisect.bisect_left(self.keys, range_filter.upper)
        return start, max(start, end)

    async def count(self, range_filter=None):
        self.count_calls.append(range_filter)
        start, end = self._span(range_filter)
        return end - start

    async def query(self, range_filter, field_name, order=SortOrder.ASCENDING, skip=0, top=1):
        if skip + top > self.page_depth_limit:
            raise ValueError("page depth exceeded")
        self.query_calls.append((range_filter, field_name, order, skip, top))

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if self.fail_on is not None and self.fail_on(range_filter, skip):
                raise BackendError(f"injected failure at offset {skip}")

            start, end = self._span(range_filter)
            matching = self.documents[start:end]
            if order == SortOrder.DESCENDING:
                matching = matching[::-1]
            return [dict(d) for d in matching[skip:skip + top]]
        finally:
            self.in_flight -= 1

    async def close(self):
        self.closed = True


def make_int_documents(values, field_name="seq"):
    return [{"id": i, field_name: value} for i, value in enumerate(values)]


def make_date_documents(count, days=9):
    step_ms = days * 24 * 3600 * 1000 // count
    return [
        {"id": i, "ts": DAY_ONE + timedelta(milliseconds=i * step_ms)}
        for i in range(count)
    ]


@pytest.fixture
def int_field():
    return FieldInfo(name="seq", type_name="long", value_type=INTEGER)


@pytest.fixture
def date_field():
    return FieldInfo(name="ts", type_name="date", value_type=DATE)


@pytest.fixture
def float_field():
    return FieldInfo(name="score", type_name="double", value_type=FLOAT)


def make_partition_file(partitions, index_name="articles", field_name="seq", field_type="long"):
    return PartitionFile(
        endpoint="http://127.0.0.1:9200",
        index_name=index_name,
        field_name=field_name,
        field_type=field_type,
        total_document_count=sum(p.document_count for p in partitions),
        partitions=partitions
    )


def five_partitions():
    """Partitions of 20 over the integers 0..99."""
    bounds = [0, 20, 40, 60, 80, 99]
    return [
        Partition(index=i, lower_bound=str(lo), upper_bound=str(hi), document_count=20)
        for i, (lo, hi) in enumerate(zip(bounds, bounds[1:]))
    ]
