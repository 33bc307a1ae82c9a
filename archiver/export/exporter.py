# exporter.py - Concurrent Export of Partitions to JSON Lines
# =============================================================================
# Each selected partition is read page by page, sorted ascending by the
# ordering field, and written to its own file:
#
#     <export dir>/<index name>-<partition index>-documents.jsonl
#
# A fixed number of workers take partitions from a queue and export them one
# at a time. A failing partition does not stop the others; failures are
# collected and raised together once every partition has finished.
# =============================================================================

import asyncio
import json
import time
from pathlib import Path
from typing import Callable, Iterable, Optional

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

from ..errors import (
    BackendError,
    ConflictingSelectionError,
    ExportFailedError,
    PartitionExportError,
)
from ..search.backend import Document, RangeFilter, SearchBackend, SortOrder
from .models import ExportSummary, Partition, PartitionFile, PartitionResult

console = Console()


def partition_output_name(index_name: str, partition_index: int) -> str:
    return f"{index_name}-{partition_index}-documents.jsonl"


class PartitionExporter:
    """Exports the selected partitions of a plan with bounded concurrency."""

    # Attempts per page request
    MAX_RETRIES = 3
    # Base delay for exponential backoff (seconds)
    BASE_DELAY = 1.0

    def __init__(
        self,
        partition_file: PartitionFile,
        backend: SearchBackend,
        export_directory: str | Path = ".",
        concurrent_partitions: int = 2,
        page_size: int = 1000,
        partitions_to_include: Optional[Iterable[int]] = None,
        partitions_to_exclude: Optional[Iterable[int]] = None,
        max_retries: int = MAX_RETRIES,
        retry_base_delay: float = BASE_DELAY,
        show_progress: bool = True
    ):
        """
        Validates the export settings and resolves the partition selection.

        Args:
            partition_file: Plan produced by partition-index
            backend: Backend for the plan's index
            export_directory: Directory for the JSON Lines files
            concurrent_partitions: Number of partitions exported at once
            page_size: Documents requested per page
            partitions_to_include: Only export these partition indexes
            partitions_to_exclude: Export every partition except these
            max_retries: Attempts per page request before giving up
            retry_base_delay: First backoff delay in seconds
            show_progress: Display a progress bar while exporting

        Raises:
            ConflictingSelectionError: If include and exclude are both given
            InvalidBoundFormatError: If a selected partition has bad bounds
            ValueError: If a numeric setting is out of range
        """
        self.include = list(partitions_to_include or [])
        self.exclude = set(partitions_to_exclude or [])

        if self.include and self.exclude:
            raise ConflictingSelectionError(
                "Only pass either partitions to include or partitions to exclude, not both"
            )
        if concurrent_partitions < 1:
            raise ValueError(f"Concurrent partitions must be at least 1, got {concurrent_partitions}")
        if page_size < 1:
            raise ValueError(f"Page size must be at least 1, got {page_size}")
        if max_retries < 1:
            raise ValueError(f"Max retries must be at least 1, got {max_retries}")

        self.partition_file = partition_file
        self.backend = backend
        self.export_directory = Path(export_directory)
        self.concurrent_partitions = concurrent_partitions
        self.page_size = page_size
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.show_progress = show_progress

        self.partitions = self.select_partitions()
        # Parse every selected range before any remote call
        self._filters: dict[int, RangeFilter] = {
            p.index: partition_file.range_filter(p) for p in self.partitions
        }

    def select_partitions(self) -> list[Partition]:
        """Resolves the include/exclude lists against the plan."""
        partitions = self.partition_file.partitions

        known = {p.index for p in partitions}
        unknown = sorted((set(self.include) | self.exclude) - known)
        if unknown:
            console.print(
                f"[yellow]⚠ Partitions not in {self.partition_file.index_name} plan: "
                f"{', '.join(map(str, unknown))}[/yellow]"
            )

        if self.include:
            wanted = set(self.include)
            return [p for p in partitions if p.index in wanted]
        if self.exclude:
            return [p for p in partitions if p.index not in self.exclude]
        return list(partitions)

    def output_path(self, partition: Partition) -> Path:
        return self.export_directory / partition_output_name(
            self.partition_file.index_name, partition.index
        )

    async def _fetch_page(self, range_filter: RangeFilter, skip: int, top: int) -> list[Document]:
        # The same offset is retried, so pages are still written in order
        for attempt in range(self.max_retries):
            try:
                return await self.backend.query(
                    range_filter,
                    self.partition_file.field_name,
                    order=SortOrder.ASCENDING,
                    skip=skip,
                    top=top
                )
            except BackendError as e:
                if attempt == self.max_retries - 1:
                    raise
                delay = self.retry_base_delay * (2 ** attempt)
                console.print(
                    f"[yellow]Page at offset {skip} failed (attempt {attempt + 1}/{self.max_retries}), "
                    f"retrying in {delay}s: {str(e)[:100]}[/yellow]"
                )
                await asyncio.sleep(delay)

    async def export_partition(
        self,
        partition: Partition,
        on_page: Callable[[int], None] | None = None
    ) -> PartitionResult:
        """
        Pages through one partition and writes its documents to disk.

        The output file is rewritten from scratch on every call.

        Args:
            partition: Partition to export
            on_page: Called with the number of documents in each page

        Returns:
            PartitionResult for the partition
        """
        range_filter = self._filters.get(partition.index)
        if range_filter is None:
            range_filter = self.partition_file.range_filter(partition)

        output_path = self.output_path(partition)
        start = time.time()
        written = 0
        pages = 0
        skip = 0

        with open(output_path, "w", encoding="utf-8") as f:
            while skip < partition.document_count:
                top = min(self.page_size, partition.document_count - skip)
                documents = await self._fetch_page(range_filter, skip, top)
                pages += 1

                for document in documents:
                    f.write(json.dumps(document, ensure_ascii=False, default=str) + "\n")
                written += len(documents)

                if on_page is not None:
                    on_page(len(documents))

                if len(documents) < top:
                    break
                skip += top

        if written != partition.document_count:
            console.print(
                f"[yellow]⚠ Partition {partition.index}: wrote {written} documents, "
                f"expected {partition.document_count}[/yellow]"
            )

        return PartitionResult(
            index=partition.index,
            path=str(output_path),
            documents_written=written,
            expected_documents=partition.document_count,
            pages=pages,
            elapsed_seconds=time.time() - start
        )

    async def export(self) -> ExportSummary:
        """
        Exports every selected partition.

        Returns:
            ExportSummary when all partitions succeed

        Raises:
            ExportFailedError: After all partitions finished, if any failed
        """
        self.export_directory.mkdir(parents=True, exist_ok=True)

        queue: asyncio.Queue[Partition] = asyncio.Queue()
        for partition in self.partitions:
            queue.put_nowait(partition)

        results: list[PartitionResult] = []
        failures: list[PartitionExportError] = []
        start = time.time()

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            console=console,
            disable=not self.show_progress
        ) as progress:
            task = progress.add_task(
                "Exporting documents...",
                total=sum(p.document_count for p in self.partitions)
            )

            def advance(count: int) -> None:
                progress.update(task, advance=count)

            async def worker() -> None:
                while True:
                    try:
                        partition = queue.get_nowait()
                    except asyncio.QueueEmpty:
                        return

                    try:
                        result = await self.export_partition(partition, on_page=advance)
                        results.append(result)
                        console.print(
                            f"    [green]✓ Partition {partition.index}: "
                            f"{result.documents_written} documents[/green]"
                        )
                    except Exception as e:
                        failures.append(PartitionExportError(partition.index, e))
                        console.print(f"    [red]✗ Partition {partition.index} failed: {e}[/red]")
                    finally:
                        queue.task_done()

            workers = [
                asyncio.create_task(worker())
                for _ in range(min(self.concurrent_partitions, max(len(self.partitions), 1)))
            ]
            await asyncio.gather(*workers)

        summary = ExportSummary(
            index_name=self.partition_file.index_name,
            selected_partitions=[p.index for p in self.partitions],
            results=sorted(results, key=lambda r: r.index),
            failed_partitions=sorted(f.index for f in failures),
            elapsed_seconds=time.time() - start
        )

        if failures:
            raise ExportFailedError(failures, summary)
        return summary
