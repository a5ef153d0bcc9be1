"""Models module initialization"""

from megaplan_api.models.credentials import BearerCredentials, LegacyCredentials
from megaplan_api.models.envelope import (
    Envelope,
    FieldError,
    format_value,
    LegacyResponse,
    LegacyStatus,
    Meta,
    Pagination,
)

__all__ = [
    "BearerCredentials",
    "LegacyCredentials",
    "Envelope",
    "FieldError",
    "format_value",
    "LegacyResponse",
    "LegacyStatus",
    "Meta",
    "Pagination",
]
