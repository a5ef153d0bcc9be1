"""
Request Builder
Assembles outbound requests for the active authentication strategy
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import requests
from requests.structures import CaseInsensitiveDict

from megaplan_api.client.auth import AuthStrategy
from megaplan_api.exceptions import ConfigError
from megaplan_api.query.encoder import QueryParams


logger = logging.getLogger(__name__)


@dataclass
class SignedRequest:
    """Fully built request: method, absolute URL, headers and body"""
    method: str
    url: str
    headers: CaseInsensitiveDict
    body: Optional[Any] = None

    def to_request(self) -> requests.Request:
        """Convert to a requests.Request ready for session preparation"""
        return requests.Request(
            method=self.method,
            url=self.url,
            headers=dict(self.headers),
            data=self.body,
        )


class RequestBuilder:
    """
    RequestBuilder class

    Example:
        >>> builder = RequestBuilder("https://example.megaplan.ru", BearerTokenStrategy("token"))
        >>> request = builder.build("GET", "/api/v3/task", {"limit": 10})
        >>> request.headers["Authorization"]
        'Bearer token'
    """

    def __init__(
        self,
        base_url: str,
        strategy: AuthStrategy,
        default_headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Create a new RequestBuilder

        Args:
            base_url: Scheme and host of the account, optionally with a path prefix
            strategy: Authentication strategy applied to every request
            default_headers: Headers sent with every request unless overridden

        Raises:
            ConfigError: If base_url is not an absolute HTTP(S) URL
        """
        self._base_url = self._parse_base_url(base_url)
        self._strategy = strategy
        self._default_headers = dict(default_headers or {})

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def strategy(self) -> AuthStrategy:
        return self._strategy

    def url_for(self, path: str) -> str:
        """Absolute URL for an endpoint path"""
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self._base_url}{path}"

    def build(
        self,
        method: str,
        path: str,
        params: Optional[QueryParams] = None,
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        timestamp: Optional[datetime] = None,
    ) -> SignedRequest:
        """
        Build a request

        Args:
            method: HTTP method
            path: Endpoint path relative to the base URL
            params: Query parameters
            body: Request body (bearer scheme; mappings are sent as JSON)
            headers: Extra headers; they override the defaults
            timestamp: Signing time for the legacy scheme (defaults to now)

        Returns:
            SignedRequest
        """
        method = method.upper()
        merged_headers = dict(self._default_headers)
        if headers:
            merged_headers.update(headers)

        parts = self._strategy.prepare(
            method,
            self.url_for(path),
            params=params,
            body=body,
            headers=merged_headers,
            timestamp=timestamp,
        )

        logger.debug(f"Built {self._strategy.scheme.value} request {method} {parts.url}")

        return SignedRequest(
            method=method,
            url=parts.url,
            headers=parts.headers,
            body=parts.body,
        )

    @staticmethod
    def _parse_base_url(base_url: str) -> str:
        """Reject anything that is not an absolute http(s) URL"""
        try:
            parts = urlsplit(base_url)
            parts.port  # raises on a malformed port
        except (ValueError, TypeError, AttributeError) as e:
            raise ConfigError(
                f"Malformed base URL {base_url!r}: {e}",
                code="CONFIG_BASE_URL"
            ) from e

        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ConfigError(
                f"Malformed base URL {base_url!r}: expected http(s)://host",
                code="CONFIG_BASE_URL"
            )

        return base_url.rstrip("/")
