# fields.py - Ordering Field Validation
# =============================================================================

from dataclasses import dataclass

from elasticsearch import ApiError, AsyncElasticsearch, TransportError

from ..errors import BackendError, FieldValidationError
from .values import ValueType, get_value_type


@dataclass(frozen=True)
class FieldInfo:
    """The ordering field and the value type used to bisect it."""
    name: str
    type_name: str
    value_type: ValueType


def check_field_capabilities(index_name: str, field_name: str, field_caps: dict) -> FieldInfo:
    """
    Validates a field_caps response for the ordering field.

    The field must exist with a single type, be searchable (filterable)
    and aggregatable (sortable), and use a type that can be bisected.

    Raises:
        FieldValidationError: If any of these checks fails
    """
    caps_by_type = dict(field_caps.get("fields", {}).get(field_name) or {})
    caps_by_type.pop("unmapped", None)

    if not caps_by_type:
        raise FieldValidationError(f"Could not find {field_name} in {index_name}")
    if len(caps_by_type) > 1:
        types = ", ".join(sorted(caps_by_type))
        raise FieldValidationError(
            f"{field_name} is mapped with conflicting types in {index_name}: {types}"
        )

    type_name, caps = next(iter(caps_by_type.items()))
    if not caps.get("searchable") or not caps.get("aggregatable"):
        raise FieldValidationError(f"{field_name} must be sortable and filterable")

    return FieldInfo(
        name=field_name,
        type_name=type_name,
        value_type=get_value_type(type_name)
    )


async def get_field(client: AsyncElasticsearch, index_name: str, field_name: str) -> FieldInfo:
    """
    Looks up and validates the ordering field of an index.

    Args:
        client: Elasticsearch client
        index_name: Index to inspect
        field_name: Field used to partition the index

    Returns:
        FieldInfo for the field
    """
    try:
        response = await client.field_caps(index=index_name, fields=field_name)
    except (ApiError, TransportError) as e:
        raise BackendError(f"Could not read field capabilities of '{index_name}': {e}")

    return check_field_capabilities(index_name, field_name, getattr(response, "body", response))
