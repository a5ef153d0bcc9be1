"""
Query parameter module
"""

from megaplan_api.query.encoder import (
    QueryParams,
    QueryEncoder,
    EncodeMode,
    EncodedQuery,
    ValueKind,
    classify_value,
    to_json,
    query_escape,
    pretty_json,
)
from megaplan_api.query.builders import (
    DateOnly,
    QueryBuildingFunc,
    build_query_params,
    create_entity,
    set_entity_array,
    set_entity_field,
    set_raw_field,
    format_iso8601,
)

__all__ = [
    "QueryParams",
    "QueryEncoder",
    "EncodeMode",
    "EncodedQuery",
    "ValueKind",
    "classify_value",
    "to_json",
    "query_escape",
    "pretty_json",
    "DateOnly",
    "QueryBuildingFunc",
    "build_query_params",
    "create_entity",
    "set_entity_array",
    "set_entity_field",
    "set_raw_field",
    "format_iso8601",
]
