"""
Entity builders for request payloads

Small composable functions that fill a QueryParams mapping with values in
the shapes the current API expects (typed entities carry a ``contentType``).
"""

from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field

from megaplan_api.query.encoder import QueryParams


# Date format used by the API for DateTime values
ISO8601 = "%Y-%m-%dT%H:%M:%S%z"

TYPE_DATE_ONLY = "DateOnly"
TYPE_DATE_TIME = "DateTime"
TYPE_DATE_INTERVAL = "DateInterval"

QueryBuildingFunc = Callable[[QueryParams], None]


def format_iso8601(value: datetime) -> str:
    """Format datetime as ``2006-01-02T15:04:05-07:00``"""
    if value.tzinfo is None:
        value = value.astimezone()
    raw = value.strftime(ISO8601)
    return f"{raw[:-2]}:{raw[-2:]}"


class DateOnly(BaseModel):
    """Calendar date entity; ``month`` is zero-based"""

    content_type: str = Field(default=TYPE_DATE_ONLY, alias="contentType")
    day: int
    month: int = Field(..., ge=0, le=11)
    year: int

    model_config = {
        "populate_by_name": True,
    }

    @classmethod
    def from_date(cls, value: date) -> "DateOnly":
        return cls(day=value.day, month=value.month - 1, year=value.year)

    def to_date(self) -> date:
        return date(self.year, self.month + 1, self.day)

    def to_params(self) -> QueryParams:
        return self.model_dump(by_alias=True)


def create_entity(content_type: str, value: Any) -> Optional[QueryParams]:
    """
    Create a typed entity

    Args:
        content_type: Entity type name (``DateOnly``, ``DateTime``,
            ``DateInterval`` or any base entity type such as ``Employee``)
        value: Date for date types, seconds or timedelta for intervals,
            identifier for base entities

    Returns:
        Entity mapping, or None when a date type receives a non-date value
    """
    if content_type == TYPE_DATE_ONLY:
        if not isinstance(value, date):
            return None
        return DateOnly.from_date(value).to_params()

    if content_type == TYPE_DATE_TIME:
        if not isinstance(value, datetime):
            return None
        return {"contentType": content_type, "value": format_iso8601(value)}

    if content_type == TYPE_DATE_INTERVAL:
        # Intervals are expressed in seconds
        if isinstance(value, timedelta):
            value = int(value.total_seconds())
        elif isinstance(value, datetime):
            value = value.second
        return {"contentType": content_type, "value": value}

    return {"contentType": content_type, "id": value}


def build_query_params(*builders: QueryBuildingFunc) -> QueryParams:
    """Apply builder functions to a fresh parameter mapping"""
    params: QueryParams = {}
    for builder in builders:
        builder(params)
    return params


def set_raw_field(field: str, value: Any) -> QueryBuildingFunc:
    """Set a plain value (string, number, bool, nested mapping)"""
    def apply(params: QueryParams) -> None:
        params[field] = value
    return apply


def set_entity_field(field: str, content_type: str, value: Any) -> QueryBuildingFunc:
    """Set a field to a typed entity"""
    def apply(params: QueryParams) -> None:
        params[field] = create_entity(content_type, value)
    return apply


def set_entity_array(field: str, *entities: QueryBuildingFunc) -> QueryBuildingFunc:
    """
    Set a field to an array of entities (e.g. a list of auditors)

    Each entity builder must write to the same ``field``; nothing is set
    when no builders are given.
    """
    def apply(params: QueryParams) -> None:
        if not entities:
            return
        items = []
        for entity in entities:
            scratch: QueryParams = {}
            entity(scratch)
            items.append(scratch.get(field))
        params[field] = items
    return apply
