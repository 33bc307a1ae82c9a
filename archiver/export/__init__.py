# export package
from .models import Partition, PartitionFile, PartitionResult, ExportSummary
from .bounds import find_lower_bound, find_upper_bound, find_bounds
from .partitioner import PartitionGenerator
from .exporter import PartitionExporter, partition_output_name
from .partition_file import (
    build_partition_file,
    default_partition_path,
    load_partition_file,
    save_partition_file
)
from .output import (
    display_banner,
    display_bounds,
    display_partitions,
    display_export_summary,
    display_export_failures
)

__all__ = [
    # Models
    "Partition",
    "PartitionFile",
    "PartitionResult",
    "ExportSummary",
    # Core
    "find_lower_bound",
    "find_upper_bound",
    "find_bounds",
    "PartitionGenerator",
    "PartitionExporter",
    "partition_output_name",
    # Partition files
    "build_partition_file",
    "default_partition_path",
    "load_partition_file",
    "save_partition_file",
    # Output
    "display_banner",
    "display_bounds",
    "display_partitions",
    "display_export_summary",
    "display_export_failures"
]
