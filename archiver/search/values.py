# values.py - Orderable Value Types for Partitioning
# =============================================================================
# Each supported field type knows how to:
#   - serialize a value to canonical text (CLI input, partition files)
#   - parse canonical text back into a value
#   - coerce a raw value read from a document
#   - compute a bisection midpoint between two values
#
# Midpoints round up, so `lower < mid` holds whenever the range contains
# more than one representable value.
# =============================================================================

import math
from datetime import datetime, timedelta, timezone
from typing import Any

from ..errors import FieldValidationError, InvalidBoundFormatError

ONE_MILLISECOND = timedelta(milliseconds=1)
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class ValueType:
    """Base class for an orderable, bisectable field value type."""

    name = "value"
    # Format hint sent with range clauses, if the backend needs one
    query_format: str | None = None

    def serialize(self, value: Any) -> str:
        raise NotImplementedError

    def deserialize(self, text: str) -> Any:
        raise NotImplementedError

    def coerce(self, raw: Any) -> Any:
        raise NotImplementedError

    def midpoint(self, lower: Any, upper: Any) -> Any:
        raise NotImplementedError

    def to_query(self, value: Any) -> Any:
        """Renders a value for use inside a backend range filter."""
        return value


class DateValueType(ValueType):
    """Timezone-aware datetimes at millisecond precision."""

    name = "date"
    query_format = "strict_date_optional_time||epoch_millis"

    def serialize(self, value: datetime) -> str:
        return value.astimezone(timezone.utc).isoformat(timespec="milliseconds")

    def deserialize(self, text: str) -> datetime:
        if not isinstance(text, str) or not text.strip():
            raise InvalidBoundFormatError(str(text), self.name, "empty value")
        try:
            value = datetime.fromisoformat(text.strip())
        except ValueError as e:
            raise InvalidBoundFormatError(text, self.name, str(e))
        return self._as_utc(value)

    def coerce(self, raw: Any) -> datetime:
        if isinstance(raw, datetime):
            return self._as_utc(raw)
        if isinstance(raw, bool):
            raise InvalidBoundFormatError(str(raw), self.name, "not a date")
        if isinstance(raw, (int, float)):
            # Elasticsearch stores dates as epoch milliseconds
            return self._as_utc(EPOCH + timedelta(milliseconds=raw))
        if isinstance(raw, str) and raw.strip().lstrip("-").isdigit():
            return self._as_utc(EPOCH + timedelta(milliseconds=int(raw)))
        return self.deserialize(raw)

    def midpoint(self, lower: datetime, upper: datetime) -> datetime:
        span_ms = (upper - lower) // ONE_MILLISECOND
        return lower + timedelta(milliseconds=-(-span_ms // 2))

    def to_query(self, value: datetime) -> str:
        return self.serialize(value)

    @staticmethod
    def _as_utc(value: datetime) -> datetime:
        # Stored dates have millisecond resolution
        value = value.replace(microsecond=value.microsecond // 1000 * 1000)
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class IntegerValueType(ValueType):
    """Whole numbers (long, integer, short, byte)."""

    name = "integer"

    def serialize(self, value: int) -> str:
        return str(value)

    def deserialize(self, text: str) -> int:
        try:
            return int(str(text).strip())
        except ValueError:
            raise InvalidBoundFormatError(str(text), self.name, "not an integer")

    def coerce(self, raw: Any) -> int:
        if isinstance(raw, bool):
            raise InvalidBoundFormatError(str(raw), self.name, "not an integer")
        if isinstance(raw, int):
            return raw
        if isinstance(raw, float):
            if not raw.is_integer():
                raise InvalidBoundFormatError(str(raw), self.name, "not an integer")
            return int(raw)
        return self.deserialize(raw)

    def midpoint(self, lower: int, upper: int) -> int:
        return lower + (upper - lower + 1) // 2


class FloatValueType(ValueType):
    """Finite floating point numbers (double, float)."""

    name = "float"

    def serialize(self, value: float) -> str:
        return repr(float(value))

    def deserialize(self, text: str) -> float:
        try:
            value = float(str(text).strip())
        except ValueError:
            raise InvalidBoundFormatError(str(text), self.name, "not a number")
        if not math.isfinite(value):
            raise InvalidBoundFormatError(str(text), self.name, "must be finite")
        return value

    def coerce(self, raw: Any) -> float:
        if isinstance(raw, bool):
            raise InvalidBoundFormatError(str(raw), self.name, "not a number")
        if isinstance(raw, (int, float)):
            return self.deserialize(repr(float(raw)))
        return self.deserialize(raw)

    def midpoint(self, lower: float, upper: float) -> float:
        # Halving first keeps the sum finite for ranges as wide as the type
        mid = lower / 2 + upper / 2
        if lower < upper and not lower < mid:
            mid = math.nextafter(lower, math.inf)
        return min(mid, upper)


DATE = DateValueType()
INTEGER = IntegerValueType()
FLOAT = FloatValueType()

# Backend field type -> value type
VALUE_TYPES: dict[str, ValueType] = {
    "date": DATE,
    "long": INTEGER,
    "integer": INTEGER,
    "short": INTEGER,
    "byte": INTEGER,
    "double": FLOAT,
    "float": FLOAT,
}


def get_value_type(field_type: str) -> ValueType:
    """
    Looks up the value type for a backend field type.

    Args:
        field_type: Backend type name (e.g. "date", "long")

    Returns:
        The matching ValueType

    Raises:
        FieldValidationError: If the type cannot be range-partitioned
    """
    value_type = VALUE_TYPES.get(field_type)
    if value_type is None:
        supported = ", ".join(sorted(VALUE_TYPES))
        raise FieldValidationError(
            f"Field type '{field_type}' is not supported, supported types: {supported}"
        )
    return value_type
