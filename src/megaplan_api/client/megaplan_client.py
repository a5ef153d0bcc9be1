"""
Megaplan API clients

- MegaplanClient: current API (v3), bearer token
- LegacyClient: legacy API (v1), HMAC-signed requests
"""

import logging
from typing import Any, BinaryIO, Dict, Optional, Type, Union

import requests

from megaplan_api.client.auth import BearerTokenStrategy, LegacySigningStrategy
from megaplan_api.client.credentials import CredentialExchange
from megaplan_api.client.http_client import HttpClient, HttpMethod
from megaplan_api.client.request_builder import RequestBuilder
from megaplan_api.client.response_decoder import ResponseDecoder
from megaplan_api.config.client_config import AuthScheme, ClientConfig
from megaplan_api.exceptions import AuthError, ConfigError
from megaplan_api.models.credentials import BearerCredentials, LegacyCredentials
from megaplan_api.models.envelope import Envelope, LegacyResponse
from megaplan_api.query.encoder import QueryParams


logger = logging.getLogger(__name__)

UPLOAD_PATH = "/api/file"
CHECK_USER_SIGN_PATH = "/BumsSettingsApiV01/Application/checkUserSign.json"


class MegaplanClient:
    """
    Client for the current Megaplan API

    Query parameters travel as a single JSON blob in the query string,
    bodies as JSON.

    Example:
        >>> config = ClientConfig(domain="example.megaplan.ru", token="...")
        >>> with MegaplanClient(config) as client:
        ...     envelope = client.get("/api/v3/task", {"limit": 50})
        ...     while envelope.has_next():
        ...         ...
    """

    def __init__(
        self,
        config: ClientConfig,
        credentials: Optional[Union[BearerCredentials, str]] = None,
        http_client: Optional[HttpClient] = None,
        decoder: Optional[ResponseDecoder] = None,
    ) -> None:
        """
        Create a new client

        Args:
            config: Resolved client configuration
            credentials: Access token; defaults to ``config.token``
            http_client: Transport to use instead of building one
            decoder: Response decoder

        Raises:
            ConfigError: No token available or malformed domain
        """
        credentials = credentials or config.token
        if not credentials:
            raise ConfigError("token is required for the bearer scheme", code="CONFIG_CREDENTIALS")

        self.config = config
        self._decoder = decoder or ResponseDecoder()
        self._http = http_client or HttpClient(config, decoder=self._decoder)
        self._strategy = BearerTokenStrategy(credentials)
        self._builder = RequestBuilder(
            config.get_base_url(),
            self._strategy,
            default_headers=self._http.default_headers,
        )

    @classmethod
    def from_config(cls, config: ClientConfig) -> "MegaplanClient":
        """Create a client from configuration alone"""
        if config.auth_scheme != AuthScheme.BEARER:
            raise ConfigError(
                f"MegaplanClient requires the bearer scheme, got {config.auth_scheme.value}",
                code="CONFIG_SCHEME"
            )
        return cls(config)

    def set_token(self, token: str) -> None:
        """Set or replace the access token; applies to requests built afterwards"""
        self._strategy.set_token(token)

    def request(
        self,
        method: Union[HttpMethod, str],
        endpoint: str,
        params: Optional[QueryParams] = None,
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
    ) -> requests.Response:
        """
        Perform a request and return the raw (decompressed) response

        Args:
            method: HTTP method
            endpoint: Endpoint path, e.g. ``/api/v3/task``
            params: Query parameters (sent as one JSON blob)
            body: Request body; mappings and lists are JSON-encoded
            headers: Extra headers
            timeout: Optional timeout in milliseconds

        Returns:
            Response; the caller owns closing it
        """
        method_name = method.value if isinstance(method, HttpMethod) else method
        signed = self._builder.build(method_name, endpoint, params=params, body=body, headers=headers)
        return self._http.send(signed, timeout=timeout)

    def call(
        self,
        method: Union[HttpMethod, str],
        endpoint: str,
        params: Optional[QueryParams] = None,
        body: Optional[Any] = None,
        data_type: Type[Any] = Any,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
    ) -> Envelope:
        """
        Perform a request and decode the response envelope

        Raises:
            ApiError: The envelope carries field errors
            DecodeError: The response is not a valid envelope
            NetworkError: Transport failure
        """
        response = self.request(method, endpoint, params=params, body=body, headers=headers, timeout=timeout)
        return self._decoder.decode(response, data_type=data_type)

    def get(
        self,
        endpoint: str,
        params: Optional[QueryParams] = None,
        data_type: Type[Any] = Any,
        timeout: Optional[int] = None,
    ) -> Envelope:
        """Perform GET request"""
        return self.call(HttpMethod.GET, endpoint, params=params, data_type=data_type, timeout=timeout)

    def post(
        self,
        endpoint: str,
        body: Optional[Any] = None,
        params: Optional[QueryParams] = None,
        data_type: Type[Any] = Any,
        timeout: Optional[int] = None,
    ) -> Envelope:
        """Perform POST request"""
        return self.call(HttpMethod.POST, endpoint, params=params, body=body, data_type=data_type, timeout=timeout)

    def put(
        self,
        endpoint: str,
        body: Optional[Any] = None,
        params: Optional[QueryParams] = None,
        data_type: Type[Any] = Any,
        timeout: Optional[int] = None,
    ) -> Envelope:
        """Perform PUT request"""
        return self.call(HttpMethod.PUT, endpoint, params=params, body=body, data_type=data_type, timeout=timeout)

    def patch(
        self,
        endpoint: str,
        body: Optional[Any] = None,
        params: Optional[QueryParams] = None,
        data_type: Type[Any] = Any,
        timeout: Optional[int] = None,
    ) -> Envelope:
        """Perform PATCH request"""
        return self.call(HttpMethod.PATCH, endpoint, params=params, body=body, data_type=data_type, timeout=timeout)

    def delete(
        self,
        endpoint: str,
        params: Optional[QueryParams] = None,
        data_type: Type[Any] = Any,
        timeout: Optional[int] = None,
    ) -> Envelope:
        """Perform DELETE request"""
        return self.call(HttpMethod.DELETE, endpoint, params=params, data_type=data_type, timeout=timeout)

    def upload_file(
        self,
        filename: str,
        fileobj: BinaryIO,
        data_type: Type[Any] = Any,
        timeout: Optional[int] = None,
    ) -> Envelope:
        """
        Upload a file as multipart ``files[]``

        The returned envelope holds the base entity of the stored file.
        """
        request = requests.Request(
            method=HttpMethod.POST.value,
            url=self._builder.url_for(UPLOAD_PATH),
            headers=self._strategy.auth_headers(),
            files={"files[]": (filename, fileobj)},
        )
        response = self._http.send_raw(request, timeout=timeout)
        return self._decoder.decode(response, data_type=data_type)

    @property
    def base_url(self) -> str:
        return self._builder.base_url

    @property
    def http(self) -> HttpClient:
        return self._http

    def close(self) -> None:
        """Close idle connections"""
        self._http.close()

    def __enter__(self) -> "MegaplanClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class LegacyClient:
    """
    Client for the legacy Megaplan API

    Example:
        >>> client = LegacyClient.login(config, "user", "password")
        >>> result = client.call("GET", "/BumsTaskApiV01/Task/list.api", {"Limit": 10})
        >>> result.status.code
        'ok'
    """

    def __init__(
        self,
        config: ClientConfig,
        credentials: Optional[LegacyCredentials] = None,
        http_client: Optional[HttpClient] = None,
        decoder: Optional[ResponseDecoder] = None,
    ) -> None:
        """
        Create a new client

        Args:
            config: Resolved client configuration
            credentials: AccessId/SecretKey; defaults to the values in config
            http_client: Transport to use instead of building one
            decoder: Response decoder

        Raises:
            ConfigError: No credentials available or malformed domain
        """
        if credentials is None:
            if not (config.access_id and config.secret_key):
                raise ConfigError(
                    "access_id and secret_key are required for the legacy scheme",
                    code="CONFIG_CREDENTIALS"
                )
            credentials = LegacyCredentials(access_id=config.access_id, secret_key=config.secret_key)

        self.config = config
        self._decoder = decoder or ResponseDecoder()
        self._http = http_client or HttpClient(config, decoder=self._decoder)
        self._builder = RequestBuilder(
            config.get_base_url(),
            LegacySigningStrategy(credentials),
            default_headers=self._http.default_headers,
        )

    @classmethod
    def login(cls, config: ClientConfig, login: str, password: str) -> "LegacyClient":
        """
        Obtain credentials with login and password, then build a client

        Raises:
            AuthError: Invalid login or password
        """
        http = HttpClient(config)
        credentials = CredentialExchange(http, config.get_base_url()).obtain(login, password)
        return cls(config, credentials, http_client=http)

    def request(
        self,
        method: Union[HttpMethod, str],
        uri: str,
        params: Optional[QueryParams] = None,
        timeout: Optional[int] = None,
    ) -> requests.Response:
        """
        Perform a signed request and return the raw (decompressed) response

        For GET the parameters go into the signed query string; for other
        methods they are sent as a form body.
        """
        method_name = method.value if isinstance(method, HttpMethod) else method
        signed = self._builder.build(method_name, uri, params=params)
        return self._http.send(signed, timeout=timeout)

    def get(self, uri: str, params: Optional[QueryParams] = None, timeout: Optional[int] = None) -> requests.Response:
        """Perform signed GET request"""
        return self.request(HttpMethod.GET, uri, params=params, timeout=timeout)

    def post(self, uri: str, params: Optional[QueryParams] = None, timeout: Optional[int] = None) -> requests.Response:
        """Perform signed POST request"""
        return self.request(HttpMethod.POST, uri, params=params, timeout=timeout)

    def call(
        self,
        method: Union[HttpMethod, str],
        uri: str,
        params: Optional[QueryParams] = None,
        data_type: Type[Any] = Any,
        timeout: Optional[int] = None,
    ) -> LegacyResponse:
        """Perform a signed request and decode the ``{status, data}`` body"""
        response = self.request(method, uri, params=params, timeout=timeout)
        return self._decoder.decode_legacy(response, data_type=data_type)

    def verify_user_sign(self, user_sign: str, timeout: Optional[int] = None) -> Any:
        """
        Verify an embedded-application user signature

        The request is signed with the application UUID and secret instead
        of the user's credentials.

        Returns:
            ``data`` of the verification response

        Raises:
            ConfigError: app_uuid/app_secret are not configured
            AuthError: The signature was rejected
        """
        if not (self.config.app_uuid and self.config.app_secret):
            raise ConfigError(
                "app_uuid and app_secret are required to verify user signatures",
                code="CONFIG_CREDENTIALS"
            )

        app_builder = RequestBuilder(
            self._builder.base_url,
            LegacySigningStrategy(LegacyCredentials(
                access_id=self.config.app_uuid,
                secret_key=self.config.app_secret,
            )),
            default_headers=self._http.default_headers,
        )
        signed = app_builder.build(
            HttpMethod.POST.value,
            CHECK_USER_SIGN_PATH,
            params={"uuid": self.config.app_uuid, "userSign": user_sign},
        )
        result = self._decoder.decode_legacy(self._http.send(signed, timeout=timeout))

        if not result.ok:
            raise AuthError(
                "Invalid user data",
                server_message=result.status.message,
                code="AUTH03",
            )
        return result.data

    @property
    def base_url(self) -> str:
        return self._builder.base_url

    @property
    def http(self) -> HttpClient:
        return self._http

    def close(self) -> None:
        """Close idle connections"""
        self._http.close()

    def __enter__(self) -> "LegacyClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
