"""
Query Parameter Encoder
Converts typed parameter mappings into their wire representation

Two wire forms are produced:
- URL-encoded form (legacy API, used for both the query string and the
  request body, and fed verbatim into the request signature)
- JSON (current API, used for request bodies and as a single escaped
  query-string blob)
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote_plus, urlencode

from megaplan_api.exceptions import QueryEncodingError


logger = logging.getLogger(__name__)

QueryParams = Dict[str, Any]


class EncodeMode(str, Enum):
    """Wire representation of query parameters"""
    FORM = "form"
    JSON = "json"


class ValueKind(str, Enum):
    """Closed set of value kinds a query parameter can hold"""
    INTEGER = "integer"
    BOOLEAN = "boolean"
    STRING = "string"
    NULL = "null"
    NESTED = "nested"
    UNSUPPORTED = "unsupported"


def classify_value(value: Any) -> ValueKind:
    """
    Classify a parameter value

    bool is checked before int since it is an int subclass.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (dict, list, tuple)):
        return ValueKind.NESTED
    return ValueKind.UNSUPPORTED


@dataclass
class EncodedQuery:
    """Encoded parameters plus the keys that could not be encoded"""
    wire: str
    dropped: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.wire)


class QueryEncoder:
    """
    QueryEncoder class

    Example:
        >>> encoder = QueryEncoder()
        >>> encoder.encode({"Limit": 10, "Folder": "owner"}).wire
        'Folder=owner&Limit=10'
    """

    def encode(
        self, params: Optional[QueryParams], mode: EncodeMode = EncodeMode.FORM
    ) -> EncodedQuery:
        """
        Encode parameters in the requested mode

        Args:
            params: Parameter mapping (None is treated as empty)
            mode: Wire representation

        Returns:
            EncodedQuery with the wire string and any dropped keys

        Raises:
            QueryEncodingError: If a JSON-mode value cannot be serialized
        """
        if mode == EncodeMode.JSON:
            return EncodedQuery(wire=to_json(params or {}))

        pairs, dropped = self.form_pairs(params or {})
        return EncodedQuery(wire=urlencode(pairs), dropped=dropped)

    def form_pairs(self, params: QueryParams) -> Tuple[List[Tuple[str, str]], List[str]]:
        """
        Render parameters as sorted form key/value pairs

        None values are skipped. Values of any other unsupported kind are
        dropped with a warning; the request proceeds without them.
        """
        pairs: List[Tuple[str, str]] = []
        dropped: List[str] = []

        for key in sorted(params):
            value = params[key]
            kind = classify_value(value)

            if kind == ValueKind.NULL:
                continue
            if kind == ValueKind.BOOLEAN:
                pairs.append((key, "true" if value else "false"))
            elif kind == ValueKind.INTEGER:
                pairs.append((key, str(value)))
            elif kind == ValueKind.STRING:
                pairs.append((key, value))
            else:
                logger.warning(
                    f"Dropping query parameter {key!r}: unsupported type "
                    f"{type(value).__name__} for form encoding"
                )
                dropped.append(key)

        return pairs, dropped


def to_json(params: QueryParams) -> str:
    """Serialize parameters as a compact JSON object with sorted keys"""
    try:
        return json.dumps(params, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise QueryEncodingError(f"Query parameters are not JSON serializable: {e}") from e


def query_escape(params: Optional[QueryParams]) -> str:
    """JSON-encode parameters and escape them as a single query-string blob"""
    if not params:
        return ""
    return quote_plus(to_json(params))


def pretty_json(params: QueryParams) -> str:
    """Indented JSON for logging and debugging"""
    try:
        return json.dumps(params, sort_keys=True, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise QueryEncodingError(f"Query parameters are not JSON serializable: {e}") from e
