# partition_file.py - Reading and Writing Partition Plans
# =============================================================================

from pathlib import Path

from pydantic import ValidationError
from rich.console import Console

from ..errors import InvalidPartitionFileError
from ..search.fields import FieldInfo
from .models import Partition, PartitionFile

console = Console()


def default_partition_path(index_name: str) -> Path:
    return Path(f"{index_name}-partitions.json")


def build_partition_file(
    endpoint: str,
    index_name: str,
    field: FieldInfo,
    partitions: list[Partition]
) -> PartitionFile:
    """Wraps generated partitions into a plan with its total count."""
    return PartitionFile(
        endpoint=endpoint,
        index_name=index_name,
        field_name=field.name,
        field_type=field.type_name,
        total_document_count=sum(p.document_count for p in partitions),
        partitions=partitions
    )


def save_partition_file(partition_file: PartitionFile, path: str | Path) -> Path:
    """
    Writes a partition plan as pretty-printed JSON with camelCase keys.

    Args:
        partition_file: Plan to save
        path: Output path (parent directories are created)

    Returns:
        Path to the saved file
    """
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(partition_file.model_dump_json(by_alias=True, indent=2))

    console.print(f"[green]✓ Wrote partitions to:[/green] {output_path}")
    return output_path


def load_partition_file(path: str | Path) -> PartitionFile:
    """
    Reads a partition plan written by save_partition_file.

    Raises:
        InvalidPartitionFileError: If the file is missing or malformed
    """
    input_path = Path(path)
    try:
        with open(input_path, "r", encoding="utf-8") as f:
            return PartitionFile.model_validate_json(f.read())
    except FileNotFoundError:
        raise InvalidPartitionFileError(f"Partition file not found: {input_path}")
    except ValidationError as e:
        raise InvalidPartitionFileError(f"Invalid partition file {input_path}: {e}")
