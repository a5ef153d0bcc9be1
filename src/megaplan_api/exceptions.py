"""Exception classes for the Megaplan API SDK"""

from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    import requests


class MegaplanErrorCategory(str, Enum):
    """Megaplan error category codes"""
    VALIDATION = "VAL"
    AUTH = "AUTH"
    NETWORK = "NET"
    DECODE = "DECODE"
    API = "API"
    CONFIG = "CONFIG"
    UNKNOWN = "UNKNOWN"


class MegaplanError(Exception):
    """
    Base exception for Megaplan errors

    All errors in the SDK extend from this class.
    Provides consistent error handling and categorization.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.cause = cause
        self.details = details
        self.timestamp = datetime.now(timezone.utc)
        self.category = self._determine_category(code)

    def _determine_category(self, code: Optional[str]) -> MegaplanErrorCategory:
        """Determine error category from code"""
        if not code:
            return MegaplanErrorCategory.UNKNOWN

        for category in MegaplanErrorCategory:
            if category is not MegaplanErrorCategory.UNKNOWN and code.startswith(category.value):
                return category

        return MegaplanErrorCategory.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary"""
        return {
            "name": self.__class__.__name__,
            "message": str(self),
            "code": self.code,
            "status_code": self.status_code,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }

    def has_code(self, code: str) -> bool:
        """Check if error has a specific code"""
        return self.code == code

    def is_category(self, category: MegaplanErrorCategory) -> bool:
        """Check if error belongs to a category"""
        return self.category == category

    def get_description(self) -> str:
        """Get human-readable error description"""
        parts = [str(self)]

        if self.code:
            parts.insert(0, f"[{self.code}]")

        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")

        return " ".join(parts)


class ValidationError(MegaplanError):
    """Validation error"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code="VALIDATION_ERROR", details=details)
        self.field = field


class QueryEncodingError(ValidationError):
    """Query parameters could not be serialized"""


class ConfigError(MegaplanError):
    """Configuration error"""

    def __init__(
        self,
        message: str,
        code: str = "CONFIG01",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class NetworkError(MegaplanError):
    """
    Network error for HTTP transport layer failures

    Raised as-is to the caller; the SDK never retries.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        network_code: str = "NET10",
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message, code=network_code, status_code=status_code, cause=cause)
        self.network_code = network_code

    @classmethod
    def timeout(
        cls, message: str = "Request timed out", cause: Optional[Exception] = None
    ) -> "NetworkError":
        """Create a timeout error"""
        return cls(message, status_code=408, network_code="NET01", cause=cause)

    @classmethod
    def connection_refused(
        cls, message: str = "Connection refused", cause: Optional[Exception] = None
    ) -> "NetworkError":
        """Create a connection error"""
        return cls(message, network_code="NET02", cause=cause)

    @classmethod
    def ssl_error(
        cls, message: str = "SSL/TLS error", cause: Optional[Exception] = None
    ) -> "NetworkError":
        """Create an SSL error"""
        return cls(message, network_code="NET04", cause=cause)


class DecodeError(MegaplanError):
    """Response body could not be decoded"""

    def __init__(
        self,
        message: str,
        code: str = "DECODE01",
        status_code: Optional[int] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message, code=code, status_code=status_code, cause=cause)


class NonJsonResponseError(DecodeError):
    """
    Response was not application/json

    The message is the response body verbatim (maintenance pages,
    gateway errors and the like).
    """

    def __init__(
        self,
        body: str,
        content_type: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(body, code="DECODE02", status_code=status_code)
        self.body = body
        self.content_type = content_type


class UnknownCompressionError(DecodeError):
    """
    Content-Encoding is not supported

    The original, still compressed, response is attached so the caller
    can apply a decoder of its own.
    """

    def __init__(
        self,
        encoding: str,
        response: Optional["requests.Response"] = None,
    ) -> None:
        super().__init__("unknown compression method", code="DECODE03")
        self.encoding = encoding
        self.response = response


class ApiError(MegaplanError):
    """
    Business-rule rejection reported in ``meta.errors``

    Raised even though the HTTP and JSON layers succeeded.
    """

    def __init__(
        self,
        message: str,
        field_errors: Optional[List[Any]] = None,
        status_code: Optional[int] = None,
        envelope: Optional[Any] = None,
    ) -> None:
        super().__init__(message, code="API01", status_code=status_code)
        self.field_errors = field_errors or []
        self.envelope = envelope


class AuthError(MegaplanError):
    """Credential exchange failed"""

    def __init__(
        self,
        message: str,
        server_message: Optional[str] = None,
        code: str = "AUTH01",
    ) -> None:
        super().__init__(message, code=code, details={"server_message": server_message})
        self.server_message = server_message
