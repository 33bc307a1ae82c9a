# models.py - Pydantic Models for Partition Plans and Export Results
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from ..search.backend import RangeFilter
from ..search.values import ValueType, get_value_type


class Partition(BaseModel):
    """
    A contiguous range of the ordering field small enough to page through.

    Bounds are kept in canonical text form. The range is
    [lower_bound, upper_bound) except for the last partition of a plan,
    whose upper bound is inclusive.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    index: int = Field(ge=0, description="Position of the partition in the plan (0-based)")
    lower_bound: str = Field(description="Inclusive lower bound")
    upper_bound: str = Field(description="Upper bound, exclusive unless last")
    document_count: int = Field(ge=0, description="Documents in range at generation time")


class PartitionFile(BaseModel):
    """
    Persisted partition plan for one index and ordering field.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    endpoint: str = Field(description="Search service URL the plan was built against")
    index_name: str = Field(description="Name of the partitioned index")
    field_name: str = Field(description="Ordering field used for partitioning")
    field_type: str = Field(default="date", description="Backend type of the ordering field")
    total_document_count: int = Field(ge=0, description="Sum of all partition counts")
    partitions: list[Partition] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_partition_order(self) -> "PartitionFile":
        for position, partition in enumerate(self.partitions):
            if partition.index != position:
                raise ValueError(
                    f"Partition indexes must run 0..{len(self.partitions) - 1} in order, "
                    f"found {partition.index} at position {position}"
                )
        return self

    @property
    def value_type(self) -> ValueType:
        return get_value_type(self.field_type)

    def is_last(self, partition: Partition) -> bool:
        return partition.index == len(self.partitions) - 1

    def range_filter(self, partition: Partition) -> RangeFilter:
        """
        Builds the range filter for a partition, parsing its bounds.

        Raises:
            InvalidBoundFormatError: If a bound does not parse as field_type
        """
        value_type = self.value_type
        return RangeFilter(
            field_name=self.field_name,
            lower=value_type.deserialize(partition.lower_bound),
            upper=value_type.deserialize(partition.upper_bound),
            include_upper=self.is_last(partition)
        )


class PartitionResult(BaseModel):
    """
    Outcome of exporting a single partition.
    """
    index: int
    path: str = Field(description="Output JSON Lines file")
    documents_written: int = 0
    expected_documents: int = 0
    pages: int = 0
    elapsed_seconds: float = 0.0


class ExportSummary(BaseModel):
    """
    Outcome of an export run over the selected partitions.
    """
    index_name: str
    selected_partitions: list[int] = Field(default_factory=list)
    results: list[PartitionResult] = Field(default_factory=list)
    failed_partitions: list[int] = Field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def total_documents(self) -> int:
        return sum(result.documents_written for result in self.results)
