# search package
from .config import SEARCH_ENDPOINT, SEARCH_INDEX_NAME, SEARCH_FIELD_NAME, PAGE_DEPTH_LIMIT
from .backend import Document, Hit, RangeFilter, SearchBackend, SortOrder, get_field_value
from .client import ElasticsearchBackend, create_client, build_preference, build_query
from .fields import FieldInfo, get_field, check_field_capabilities
from .values import ValueType, DATE, INTEGER, FLOAT, VALUE_TYPES, get_value_type

__all__ = [
    "SEARCH_ENDPOINT",
    "SEARCH_INDEX_NAME",
    "SEARCH_FIELD_NAME",
    "PAGE_DEPTH_LIMIT",
    "Document",
    "Hit",
    "RangeFilter",
    "SearchBackend",
    "SortOrder",
    "get_field_value",
    "ElasticsearchBackend",
    "create_client",
    "build_preference",
    "build_query",
    "FieldInfo",
    "get_field",
    "check_field_capabilities",
    "ValueType",
    "DATE",
    "INTEGER",
    "FLOAT",
    "VALUE_TYPES",
    "get_value_type"
]
