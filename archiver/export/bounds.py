# bounds.py - Lowest and Highest Value of the Ordering Field
# =============================================================================

from typing import Any

from ..errors import EmptyCollectionError
from ..search.backend import SearchBackend, SortOrder, get_field_value
from ..search.fields import FieldInfo


async def _find_bound(field: FieldInfo, backend: SearchBackend, order: SortOrder) -> Any:
    documents = await backend.query(None, field.name, order=order, skip=0, top=1)
    if not documents:
        raise EmptyCollectionError("No documents found, cannot determine bounds")

    # The sort value is normalised by the backend (dates as epoch millis,
    # the min or max of a multi-valued field), unlike the stored source
    sort_values = getattr(documents[0], "sort_values", None)
    if sort_values:
        return field.value_type.coerce(sort_values[0])

    raw = get_field_value(documents[0], field.name)
    if raw is None:
        raise EmptyCollectionError(f"Top document has no value for {field.name}")
    # Multi-valued fields sort on their min (asc) or max (desc) value
    if isinstance(raw, list):
        values = [field.value_type.coerce(item) for item in raw if item is not None]
        if not values:
            raise EmptyCollectionError(f"Top document has no value for {field.name}")
        return min(values) if order == SortOrder.ASCENDING else max(values)

    return field.value_type.coerce(raw)


async def find_lower_bound(field: FieldInfo, backend: SearchBackend) -> Any:
    """
    Finds the smallest value of the field with a single ascending query.

    Raises:
        EmptyCollectionError: If the collection has no documents
    """
    return await _find_bound(field, backend, SortOrder.ASCENDING)


async def find_upper_bound(field: FieldInfo, backend: SearchBackend) -> Any:
    """
    Finds the largest value of the field with a single descending query.

    Raises:
        EmptyCollectionError: If the collection has no documents
    """
    return await _find_bound(field, backend, SortOrder.DESCENDING)


async def find_bounds(field: FieldInfo, backend: SearchBackend) -> tuple[Any, Any]:
    """Returns (lower, upper) for the field."""
    lower = await find_lower_bound(field, backend)
    upper = await find_upper_bound(field, backend)
    return lower, upper
