"""Response envelope models"""

from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator, model_validator

from megaplan_api.exceptions import ApiError


T = TypeVar("T")


class Pagination(BaseModel):
    """
    Pagination block of ``meta``

    The server sends either an object with named counters or an empty
    array when the result is not paginated. Null counters and any array
    form decode as zero values.
    """

    count: int = Field(default=0, description="Total number of items")
    limit: int = Field(default=0, description="Page size")
    current_page: int = Field(default=0, alias="currentPage", description="Current page")
    has_more_next: bool = Field(default=False, alias="hasMoreNext", description="Next page exists")
    has_more_prev: bool = Field(default=False, alias="hasMorePrev", description="Previous page exists")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    @model_validator(mode="before")
    @classmethod
    def normalize_shape(cls, value: Any) -> Any:
        """Map the array form to an empty object before field decoding"""
        if value is None or isinstance(value, list):
            return {}
        return value

    @field_validator("count", "limit", "current_page", mode="before")
    @classmethod
    def null_counter(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("has_more_next", "has_more_prev", mode="before")
    @classmethod
    def null_flag(cls, value: Any) -> Any:
        return False if value is None else value

    def has_next(self) -> bool:
        return self.has_more_next

    def has_prev(self) -> bool:
        return self.has_more_prev


def format_value(value: Any) -> str:
    """
    Render a decoded JSON value for error text

    null is ``<nil>``, booleans are ``true``/``false``, arrays are
    ``[a b]`` and objects are ``map[k:v]`` with sorted keys.
    """
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(format_value(item) for item in value) + "]"
    if isinstance(value, dict):
        items = " ".join(f"{key}:{format_value(value[key])}" for key in sorted(value))
        return f"map[{items}]"
    return str(value)


class FieldError(BaseModel):
    """Single entry of ``meta.errors``"""

    field: Any = None
    message: Any = None

    def __str__(self) -> str:
        return f"FIELD: {format_value(self.field)} MESSAGE: {format_value(self.message)}"


class Meta(BaseModel):
    """Response metadata"""

    status: int = 0
    errors: List[FieldError] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("errors", mode="before")
    @classmethod
    def default_errors(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("pagination", mode="before")
    @classmethod
    def default_pagination(cls, value: Any) -> Any:
        return {} if value is None else value

    def error_message(self) -> Optional[str]:
        """One ``FIELD: .. MESSAGE: ..`` line per error, in array order"""
        if not self.errors:
            return None
        return "\n".join(str(error) for error in self.errors)

    def error(self) -> Optional[ApiError]:
        """ApiError describing ``errors``, or None when there are none"""
        message = self.error_message()
        if message is None:
            return None
        return ApiError(message, field_errors=list(self.errors), status_code=self.status or None)


class Envelope(BaseModel, Generic[T]):
    """
    Generic ``{data, meta}`` wrapper of every current API response

    Example:
        >>> envelope = Envelope[dict].model_validate(payload)
        >>> if envelope.has_next():
        ...     ...
    """

    data: Optional[T] = None
    meta: Meta = Field(default_factory=Meta)

    @field_validator("meta", mode="before")
    @classmethod
    def default_meta(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def pagination(self) -> Pagination:
        return self.meta.pagination

    def has_next(self) -> bool:
        """Whether a next page exists"""
        return self.meta.pagination.has_more_next

    def has_prev(self) -> bool:
        """Whether a previous page exists"""
        return self.meta.pagination.has_more_prev

    def error(self) -> Optional[ApiError]:
        err = self.meta.error()
        if err is not None:
            err.envelope = self
        return err


class LegacyStatus(BaseModel):
    """``status`` block of legacy API responses"""

    code: str = ""
    message: Optional[str] = None

    model_config = {
        "extra": "ignore",
    }

    @field_validator("code", mode="before")
    @classmethod
    def default_code(cls, value: Any) -> Any:
        return "" if value is None else value


class LegacyResponse(BaseModel, Generic[T]):
    """``{status, data}`` wrapper of legacy API responses"""

    status: LegacyStatus = Field(default_factory=LegacyStatus)
    data: Optional[T] = None

    @property
    def ok(self) -> bool:
        return self.status.code == "ok"
