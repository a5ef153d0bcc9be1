"""
HTTP transport layer for the Megaplan API
Owns the requests session, default headers, transport error
normalization and transparent response decompression
"""

import logging
from enum import Enum
from http.cookiejar import DefaultCookiePolicy
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from requests.structures import CaseInsensitiveDict

from megaplan_api.client.request_builder import SignedRequest
from megaplan_api.client.response_decoder import ResponseDecoder
from megaplan_api.config.client_config import ClientConfig
from megaplan_api.exceptions import DecodeError, NetworkError, ValidationError


# Logger for this module
logger = logging.getLogger(__name__)


class HttpMethod(str, Enum):
    """HTTP method types supported"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


# Sensitive fields that should be redacted in logs
SENSITIVE_FIELDS = [
    "authorization",
    "password",
    "secretkey",
    "secret_key",
    "onetimekey",
    "token",
]


def build_default_headers(config: ClientConfig) -> Dict[str, str]:
    """Headers sent with every request, derived from configuration"""
    headers = {"User-Agent": config.user_agent}

    if config.accept_gzip:
        headers["Accept-Encoding"] = "gzip"
    if config.x_user_id:
        headers["X-User-Id"] = str(config.x_user_id)
    if not config.keep_alive:
        headers["Connection"] = "close"

    return headers


class HttpClient:
    """
    HTTP Client for the Megaplan API

    Features:
    - Connection keep-alive via session pooling
    - Default header decoration for every request
    - Transparent gzip decompression of responses
    - Transport errors normalized into NetworkError (never retried)

    Example:
        >>> config = ClientConfig(domain="example.megaplan.ru", token="...")
        >>> with HttpClient(config) as http:
        ...     response = http.send(builder.build("GET", "/api/v3/currentUser"))
    """

    def __init__(
        self,
        config: ClientConfig,
        session: Optional[requests.Session] = None,
        decoder: Optional[ResponseDecoder] = None,
    ) -> None:
        """
        Create a new HTTP client instance

        Args:
            config: Resolved client configuration
            session: Ready-made session to use instead of building one
            decoder: Response decoder used for decompression
        """
        self.config = config
        self.default_headers = build_default_headers(config)
        self._decoder = decoder or ResponseDecoder()
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create requests session with connection pooling"""
        session = requests.Session()

        # Replace the requests defaults so only configured headers go out
        session.headers.clear()
        session.headers.update(self.default_headers)

        adapter = HTTPAdapter(
            pool_connections=self.config.pool_maxsize,
            pool_maxsize=self.config.pool_maxsize,
            max_retries=0,
        )
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.verify = self.config.verify_ssl

        if self.config.proxy:
            session.proxies = {
                "http": self.config.proxy,
                "https": self.config.proxy,
            }

        if not self.config.enable_cookies:
            session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))

        return session

    def _redact_sensitive_data(self, obj: Any) -> Any:
        """Redact sensitive data from object for logging"""
        if obj is None:
            return obj

        if isinstance(obj, str):
            return obj

        if isinstance(obj, list):
            return [self._redact_sensitive_data(item) for item in obj]

        if isinstance(obj, dict):
            redacted = {}
            for key, value in obj.items():
                lower_key = key.lower()
                is_sensitive = any(
                    field in lower_key for field in SENSITIVE_FIELDS
                )

                if is_sensitive:
                    redacted[key] = "[REDACTED]"
                elif isinstance(value, (dict, list)):
                    redacted[key] = self._redact_sensitive_data(value)
                else:
                    redacted[key] = value
            return redacted

        return obj

    def _normalize_error(self, error: requests.exceptions.RequestException) -> NetworkError:
        """Normalize transport errors into NetworkError"""
        if isinstance(error, requests.exceptions.Timeout):
            return NetworkError.timeout(cause=error)

        if isinstance(error, requests.exceptions.SSLError):
            return NetworkError.ssl_error(f"SSL error: {error}", cause=error)

        if isinstance(error, requests.exceptions.ConnectionError):
            return NetworkError.connection_refused(f"Connection error: {error}", cause=error)

        return NetworkError(f"Request error: {error}", cause=error)

    def _timeout_seconds(self, timeout: Optional[int]) -> float:
        """Per-call timeout (milliseconds) or the configured default"""
        if timeout is None:
            return self.config.timeout / 1000.0
        if isinstance(timeout, bool) or timeout <= 0:
            raise ValidationError(
                f"timeout must be a positive number of milliseconds, got {timeout!r}",
                field="timeout"
            )
        return timeout / 1000.0

    def send(self, request: SignedRequest, timeout: Optional[int] = None) -> requests.Response:
        """
        Send a built request

        Args:
            request: Request produced by RequestBuilder
            timeout: Optional timeout in milliseconds

        Returns:
            Response with its body decompressed

        Raises:
            NetworkError: Transport failure
            UnknownCompressionError: Unsupported Content-Encoding
            ValidationError: Explicit timeout is not positive
        """
        return self._execute(request.to_request(), timeout)

    def send_raw(self, request: requests.Request, timeout: Optional[int] = None) -> requests.Response:
        """
        Send a request with default-header decoration only

        No scheme-specific signing is applied. Configured default headers
        are merged under the request's own, whatever session is in use.
        Used for file uploads and the credential exchange. Content-Type
        defaults to application/json unless the request sets one or carries
        files.

        Args:
            request: Unprepared request
            timeout: Optional timeout in milliseconds

        Returns:
            Response with its body decompressed
        """
        headers = CaseInsensitiveDict(self.default_headers)
        headers.update(request.headers or {})
        if not request.files and "Content-Type" not in headers:
            headers["Content-Type"] = "application/json"
        request.headers = headers
        return self._execute(request, timeout)

    def _execute(self, request: requests.Request, timeout: Optional[int]) -> requests.Response:
        """Prepare, send and decompress"""
        timeout_seconds = self._timeout_seconds(timeout)
        prepared = self._session.prepare_request(request)

        logger.debug(
            f"{prepared.method} {prepared.url} "
            f"headers={self._redact_sensitive_data(dict(prepared.headers))}"
        )

        try:
            response = self._session.send(
                prepared,
                stream=True,
                timeout=timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            logger.debug(f"{prepared.method} {prepared.url} failed: {e}")
            raise self._normalize_error(e) from e

        logger.debug(
            f"{prepared.method} {prepared.url} -> {response.status_code} "
            f"({response.headers.get('Content-Type', 'no content type')})"
        )

        try:
            return self._decoder.decompress(response)
        except DecodeError:
            response.close()
            raise

    @property
    def base_url(self) -> str:
        """Get base URL"""
        return self.config.get_base_url()

    @property
    def session(self) -> requests.Session:
        return self._session

    def close(self) -> None:
        """Close the HTTP session"""
        self._session.close()

    def __enter__(self) -> "HttpClient":
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit"""
        self.close()
