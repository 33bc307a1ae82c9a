# partitioner.py - Range Partitioning by Bisection
# =============================================================================
# A paginated query can only reach `page_depth_limit` documents deep, so an
# index is exported as a list of ranges that each hold at most that many
# documents.
#
# ALGORITHM
# ---------
#   1. Count documents in [lower, upper)  ([lower, upper] for the last range)
#   2. count <= limit  -> the range becomes a partition
#   3. otherwise split at mid = midpoint(lower, upper) into
#      [lower, mid) and [mid, upper], and repeat on both halves
#
# Ranges are kept on an explicit stack, left half on top, so they resolve in
# ascending order and can be numbered as they are emitted.
#
# Example (limit 100,000):
#
#   [day 1, day 10]  250,000  -> split at day 5.5
#   [day 1, day 5.5)  140,000 -> split at day 3.25
#   [day 1, day 3.25)  60,000 -> partition 0
#   [day 3.25, day 5.5) 80,000 -> partition 1
#   [day 5.5, day 10]  110,000 -> split ...
# =============================================================================

from typing import Any

from rich.console import Console

from ..errors import UnsplittablePartitionError
from ..search.backend import RangeFilter, SearchBackend
from ..search.fields import FieldInfo
from .models import Partition

console = Console()


class PartitionGenerator:
    """Splits [lower, upper] into partitions that fit under the depth limit."""

    def __init__(
        self,
        backend: SearchBackend,
        field: FieldInfo,
        lower: Any,
        upper: Any,
        page_depth_limit: int | None = None
    ):
        if lower > upper:
            raise ValueError(
                f"Lower bound {field.value_type.serialize(lower)} is greater than "
                f"upper bound {field.value_type.serialize(upper)}"
            )

        limit = page_depth_limit if page_depth_limit is not None else backend.page_depth_limit
        if limit < 1:
            raise ValueError(f"Page depth limit must be at least 1, got {limit}")

        self.backend = backend
        self.field = field
        self.lower = lower
        self.upper = upper
        self.page_depth_limit = limit

        # Count of the whole range, taken by the first query
        self.root_count: int | None = None
        self.count_queries = 0

    async def _count(self, lower: Any, upper: Any, include_upper: bool) -> int:
        self.count_queries += 1
        return await self.backend.count(RangeFilter(
            field_name=self.field.name,
            lower=lower,
            upper=upper,
            include_upper=include_upper
        ))

    @staticmethod
    def _splits(lower: Any, mid: Any, upper: Any, include_upper: bool) -> bool:
        # Both halves must be strictly smaller than the range being split
        if not lower < mid:
            return False
        return mid < upper or (include_upper and mid == upper)

    async def generate(self) -> list[Partition]:
        """
        Runs the bisection and returns partitions in ascending order.

        Raises:
            UnsplittablePartitionError: If a range over the limit cannot be split
        """
        value_type = self.field.value_type
        pending: list[tuple[Any, Any, bool]] = [(self.lower, self.upper, True)]
        resolved: list[tuple[Any, Any, int]] = []

        with console.status("[bold green]Partitioning...") as status:
            while pending:
                lower, upper, include_upper = pending.pop()
                count = await self._count(lower, upper, include_upper)
                if self.root_count is None:
                    self.root_count = count

                if count <= self.page_depth_limit:
                    resolved.append((lower, upper, count))
                    status.update(
                        f"[bold green]Partitioning... {len(resolved)} partitions, "
                        f"{self.count_queries} count queries"
                    )
                    continue

                mid = value_type.midpoint(lower, upper)
                if not self._splits(lower, mid, upper, include_upper):
                    raise UnsplittablePartitionError(
                        value_type.serialize(lower),
                        value_type.serialize(upper),
                        count,
                        self.page_depth_limit
                    )

                pending.append((mid, upper, include_upper))
                pending.append((lower, mid, False))

        partitions = [
            Partition(
                index=i,
                lower_bound=value_type.serialize(lower),
                upper_bound=value_type.serialize(upper),
                document_count=count
            )
            for i, (lower, upper, count) in enumerate(resolved)
        ]

        total = sum(p.document_count for p in partitions)
        if total != self.root_count:
            console.print(
                f"[yellow]⚠ Partition counts add up to {total} but the full range "
                f"counted {self.root_count}; the index changed during partitioning[/yellow]"
            )

        return partitions
