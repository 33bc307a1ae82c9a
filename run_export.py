#!/usr/bin/env python3
# run_export.py - Command Line for Partitioned Index Export
# ============================================================================
# Exporting an index is done in three steps:
# 1. get-bounds:        find the lowest and highest value of the ordering field
# 2. partition-index:   split that range into partitions under the depth limit
#                       and write them to a partition file
# 3. export-partitions: export the partitions in the file to JSON Lines files
#
# Usage:
#   uv run run_export.py get-bounds --index-name articles --field-name published_at
#   uv run run_export.py partition-index --index-name articles --field-name published_at
#   uv run run_export.py export-partitions --partition-path articles-partitions.json
#   uv run run_export.py export-partitions --partition-path articles-partitions.json \
#       --include-partition 0 --include-partition 1
# ============================================================================

import argparse
import asyncio
import sys

from rich.console import Console
from rich.table import Table

from shared_config import (
    Config,
    PartitioningConfig,
    SearchConfig,
    get_config,
    reload_config,
)
from archiver.errors import ArchiverError, ExportFailedError
from archiver.search import (
    ElasticsearchBackend,
    FieldInfo,
    create_client,
    get_field,
)
from archiver.search.config import (
    PAGE_DEPTH_LIMIT,
    REQUEST_TIMEOUT,
    SEARCH_ENDPOINT,
    SEARCH_FIELD_NAME,
    SEARCH_INDEX_NAME,
)
from archiver.export import (
    PartitionExporter,
    PartitionGenerator,
    build_partition_file,
    default_partition_path,
    display_banner,
    display_bounds,
    display_export_failures,
    display_export_summary,
    display_partitions,
    find_lower_bound,
    find_upper_bound,
    load_partition_file,
    save_partition_file,
)

console = Console()


def load_settings(config_path: str = None) -> Config:
    """
    Loads config.yaml, or builds defaults from the environment when none exists.

    An explicitly requested config file must exist.
    """
    if config_path:
        return reload_config(config_path)

    try:
        return get_config()
    except FileNotFoundError:
        return Config(
            search=SearchConfig(
                endpoint=SEARCH_ENDPOINT,
                index_name=SEARCH_INDEX_NAME,
                field_name=SEARCH_FIELD_NAME,
                request_timeout=REQUEST_TIMEOUT
            ),
            partitioning=PartitioningConfig(page_depth_limit=PAGE_DEPTH_LIMIT)
        )


def display_settings(title: str, rows: dict[str, str]) -> None:
    """Displays the settings a command runs with."""
    table = Table(title=title)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for name, value in rows.items():
        table.add_row(name, str(value))

    console.print(table)
    console.print()


def _require(value, option: str):
    if value in (None, ""):
        raise ValueError(f"{option} is required (pass it or set it in config.yaml)")
    return value


async def _connect(args, config: Config) -> tuple[str, str, FieldInfo, ElasticsearchBackend]:
    endpoint = args.endpoint or config.search.endpoint
    index_name = _require(args.index_name or config.search.index_name, "--index-name")
    field_name = _require(args.field_name or config.search.field_name, "--field-name")

    client = create_client(endpoint, args.api_key, config.search.request_timeout)
    try:
        field = await get_field(client, index_name, field_name)
    except BaseException:
        await client.close()
        raise

    console.print(f"[green]✓ Field {field.name} ({field.type_name}) is sortable and filterable[/green]")
    backend = ElasticsearchBackend(
        client,
        index_name,
        field.value_type,
        page_depth_limit=config.partitioning.page_depth_limit
    )
    return endpoint, index_name, field, backend


async def get_bounds(args, config: Config) -> None:
    """Finds and displays the lowest and highest value of the field."""
    _, _, field, backend = await _connect(args, config)
    try:
        lower = await find_lower_bound(field, backend)
        upper = await find_upper_bound(field, backend)
    finally:
        await backend.close()

    display_bounds(
        field.name,
        field.value_type.serialize(lower),
        field.value_type.serialize(upper)
    )


async def partition_index(args, config: Config) -> None:
    """Partitions the index and writes the partition file."""
    if args.page_depth_limit is not None:
        config.partitioning.page_depth_limit = args.page_depth_limit

    endpoint, index_name, field, backend = await _connect(args, config)
    try:
        # Parse user bounds before any count or page query
        lower_text = args.lower_bound
        upper_text = args.upper_bound
        lower = field.value_type.deserialize(lower_text) if lower_text else None
        upper = field.value_type.deserialize(upper_text) if upper_text else None

        if lower is None:
            lower = await find_lower_bound(field, backend)
        if upper is None:
            upper = await find_upper_bound(field, backend)

        display_settings("📋 Partitioning", {
            "Endpoint": endpoint,
            "Index": index_name,
            "Field": f"{field.name} ({field.type_name})",
            "Lower Bound": field.value_type.serialize(lower),
            "Upper Bound": field.value_type.serialize(upper),
            "Page Depth Limit": backend.page_depth_limit,
        })

        generator = PartitionGenerator(backend, field, lower, upper)
        partitions = await generator.generate()
    finally:
        await backend.close()

    partition_file = build_partition_file(endpoint, index_name, field, partitions)
    partition_path = (
        args.partition_path
        or config.partitioning.partition_path
        or default_partition_path(index_name)
    )
    display_partitions(partition_file)
    save_partition_file(partition_file, partition_path)


async def export_partitions(args, config: Config) -> None:
    """Exports partitions listed in a partition file."""
    partition_path = args.partition_path or config.partitioning.partition_path
    if not partition_path and config.search.index_name:
        partition_path = default_partition_path(config.search.index_name)
    partition_path = _require(partition_path, "--partition-path")

    partition_file = load_partition_file(partition_path)
    endpoint = args.endpoint or partition_file.endpoint

    # A plan built with a raised limit may hold larger partitions
    largest = max((p.document_count for p in partition_file.partitions), default=0)

    client = create_client(endpoint, args.api_key, config.search.request_timeout)
    try:
        backend = ElasticsearchBackend(
            client,
            partition_file.index_name,
            partition_file.value_type,
            page_depth_limit=max(config.partitioning.page_depth_limit, largest)
        )
        exporter = PartitionExporter(
            partition_file,
            backend,
            export_directory=args.export_path or config.export.directory,
            concurrent_partitions=args.concurrent_partitions or config.export.concurrent_partitions,
            page_size=args.page_size or config.export.page_size,
            partitions_to_include=args.include_partition or config.export.include_partitions,
            partitions_to_exclude=args.exclude_partition or config.export.exclude_partitions,
            max_retries=config.export.max_retries,
            retry_base_delay=config.export.retry_base_delay
        )

        display_settings("📋 Export", {
            "Endpoint": endpoint,
            "Index": partition_file.index_name,
            "Partitions": f"{len(exporter.partitions)} of {len(partition_file.partitions)}",
            "Export Path": exporter.export_directory,
            "Concurrent Partitions": exporter.concurrent_partitions,
            "Page Size": exporter.page_size,
        })

        summary = await exporter.export()
    finally:
        await client.close()

    display_export_summary(summary)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="index-archiver",
        description="Export data from a search index. Requires a filterable and sortable field."
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to config.yaml file"
    )

    connection = argparse.ArgumentParser(add_help=False)
    connection.add_argument("--endpoint", type=str, help="URL of the search service")
    connection.add_argument(
        "--api-key",
        type=str,
        help="API key for the search service (default: SEARCH_API_KEY)"
    )

    index = argparse.ArgumentParser(add_help=False)
    index.add_argument("--index-name", type=str, help="Name of the index to export data from")
    index.add_argument(
        "--field-name",
        type=str,
        help="Field used to partition the index data. Must be filterable and sortable."
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    bounds_parser = subparsers.add_parser(
        "get-bounds",
        parents=[connection, index],
        help="Find and display the lowest and highest value of the field"
    )
    bounds_parser.set_defaults(handler=get_bounds)

    partition_parser = subparsers.add_parser(
        "partition-index",
        parents=[connection, index],
        help="Partition the index into ranges small enough to page through"
    )
    partition_parser.add_argument(
        "--lower-bound",
        type=str,
        help="Smallest value to partition from (default: lowest value in the index)"
    )
    partition_parser.add_argument(
        "--upper-bound",
        type=str,
        help="Largest value to partition to (default: highest value in the index)"
    )
    partition_parser.add_argument(
        "--partition-path",
        type=str,
        help="Partition file to write (default: <index name>-partitions.json)"
    )
    partition_parser.add_argument(
        "--page-depth-limit",
        type=int,
        help="Maximum documents per partition (default: 10000)"
    )
    partition_parser.set_defaults(handler=partition_index)

    export_parser = subparsers.add_parser(
        "export-partitions",
        parents=[connection],
        help="Export data using a partition file from partition-index"
    )
    export_parser.add_argument(
        "--partition-path",
        type=str,
        help="Partition file written by partition-index"
    )
    export_parser.add_argument(
        "--export-path",
        type=str,
        help="Directory for <index name>-<partition>-documents.jsonl files (default: .)"
    )
    export_parser.add_argument(
        "--concurrent-partitions",
        type=int,
        help="Number of partitions to export concurrently (default: 2)"
    )
    export_parser.add_argument(
        "--page-size",
        type=int,
        help="Page size of export queries (default: 1000)"
    )
    export_parser.add_argument(
        "--include-partition",
        type=int,
        action="append",
        help="Partition index to export, repeatable"
    )
    export_parser.add_argument(
        "--exclude-partition",
        type=int,
        action="append",
        help="Partition index to skip, repeatable"
    )
    export_parser.set_defaults(handler=export_partitions)

    return parser


def main(argv: list[str] = None) -> int:
    """Entry point with CLI argument parsing."""
    parser = create_parser()
    args = parser.parse_args(argv)

    display_banner()

    try:
        config = load_settings(args.config)
        asyncio.run(args.handler(args, config))
    except ExportFailedError as e:
        display_export_failures(e)
        console.print(f"[red]✗ {e}[/red]")
        return 1
    except (ArchiverError, ValueError, FileNotFoundError) as e:
        console.print(f"[red]✗ {e}[/red]")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
