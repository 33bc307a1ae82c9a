# errors.py - Exception Types for the Exporter
# =============================================================================


class ArchiverError(Exception):
    """Base class for every error raised by the archiver."""
    pass


class EmptyCollectionError(ArchiverError):
    """Raised when bound discovery finds no documents."""
    pass


class InvalidBoundFormatError(ArchiverError):
    """Raised when a bound value cannot be parsed for its field type."""

    def __init__(self, value: str, type_name: str, reason: str = ""):
        self.value = value
        self.type_name = type_name
        message = f"Invalid {type_name} bound: {value!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class FieldValidationError(ArchiverError):
    """Raised when the ordering field is missing or lacks a capability."""
    pass


class BackendError(ArchiverError):
    """Raised when a remote count or page request fails."""
    pass


class InvalidPartitionFileError(ArchiverError):
    """Raised when a partition file cannot be read or is malformed."""
    pass


class UnsplittablePartitionError(ArchiverError):
    """
    Raised when a range holds more documents than the depth limit
    but cannot be bisected any further.
    """

    def __init__(self, lower: str, upper: str, count: int, limit: int):
        self.lower = lower
        self.upper = upper
        self.count = count
        self.limit = limit
        super().__init__(
            f"Range [{lower}, {upper}] holds {count} documents, more than the "
            f"limit of {limit}, and cannot be split further"
        )


class ConflictingSelectionError(ArchiverError):
    """Raised when both included and excluded partitions are supplied."""
    pass


class PartitionExportError(ArchiverError):
    """Raised for a single partition that failed to export."""

    def __init__(self, index: int, cause: BaseException):
        self.index = index
        self.cause = cause
        super().__init__(f"Partition {index} failed: {cause}")


class ExportFailedError(ArchiverError):
    """Raised after an export run in which one or more partitions failed."""

    def __init__(self, failures: list[PartitionExportError], summary=None):
        self.failures = sorted(failures, key=lambda failure: failure.index)
        self.summary = summary
        indexes = ", ".join(str(failure.index) for failure in self.failures)
        super().__init__(
            f"{len(self.failures)} partition(s) failed to export: {indexes}"
        )
