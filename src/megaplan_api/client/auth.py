"""
Authentication strategies

A client is bound to exactly one strategy at construction time:
- LegacySigningStrategy: HMAC-signed, timestamp-bound requests (API v1)
- BearerTokenStrategy: static bearer token (API v3)

Each strategy turns (method, url, params, body) into the final URL,
headers and body of a request.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Union

from requests.structures import CaseInsensitiveDict

from megaplan_api.config.client_config import AuthScheme
from megaplan_api.crypto.signature import SIGNED_CONTENT_TYPE, SignatureService
from megaplan_api.exceptions import ValidationError
from megaplan_api.models.credentials import BearerCredentials, LegacyCredentials
from megaplan_api.query.encoder import EncodeMode, QueryEncoder, QueryParams, query_escape, to_json


logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
LEGACY_ACCEPT_ENCODING = "gzip, deflate, br"


@dataclass
class PreparedParts:
    """URL, headers and body produced by a strategy"""
    url: str
    headers: CaseInsensitiveDict
    body: Optional[Any] = None


class AuthStrategy(ABC):
    """Base class for authentication strategies"""

    scheme: AuthScheme

    def __init__(self) -> None:
        self._encoder = QueryEncoder()

    @abstractmethod
    def prepare(
        self,
        method: str,
        url: str,
        params: Optional[QueryParams] = None,
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        timestamp: Optional[datetime] = None,
    ) -> PreparedParts:
        """Produce the final URL, headers and body for a request"""

    @abstractmethod
    def auth_headers(self) -> Dict[str, str]:
        """Headers carrying the credentials, for requests that skip signing"""


class LegacySigningStrategy(AuthStrategy):
    """
    Legacy HMAC signing strategy

    Parameters are form-encoded. For GET they form the query string and are
    part of the signed URL; for any other method they become the request
    body and only the bare path is signed.
    """

    scheme = AuthScheme.LEGACY

    def __init__(self, credentials: LegacyCredentials) -> None:
        super().__init__()
        self._signer = SignatureService(credentials.access_id, credentials.secret_key)

    @property
    def access_id(self) -> str:
        return self._signer.access_id

    def prepare(
        self,
        method: str,
        url: str,
        params: Optional[QueryParams] = None,
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        timestamp: Optional[datetime] = None,
    ) -> PreparedParts:
        encoded = self._encoder.encode(params, EncodeMode.FORM)

        if method == "GET":
            if encoded:
                url = f"{url}?{encoded.wire}"
            data = None
        else:
            data = encoded.wire if encoded else body

        signature = self._signer.sign(method, url, timestamp)

        final_headers = CaseInsensitiveDict(headers or {})
        final_headers.update({
            "Date": signature.date,
            "X-Authorization": signature.header_value,
            "Accept": JSON_CONTENT_TYPE,
            "Content-Type": SIGNED_CONTENT_TYPE,
            "Accept-Encoding": LEGACY_ACCEPT_ENCODING,
        })

        return PreparedParts(url=url, headers=final_headers, body=data)

    def auth_headers(self) -> Dict[str, str]:
        return {}


class BearerTokenStrategy(AuthStrategy):
    """
    Bearer token strategy

    The token may be replaced on a live client; requests built after the
    swap use the new token. Swaps are not synchronized with requests that
    are already in flight.
    """

    scheme = AuthScheme.BEARER

    def __init__(self, credentials: Union[BearerCredentials, str]) -> None:
        super().__init__()
        if isinstance(credentials, str):
            credentials = self._make_credentials(credentials)
        self._credentials = credentials

    @property
    def token(self) -> str:
        return self._credentials.token

    def set_token(self, token: str) -> None:
        """Set or replace the access token"""
        self._credentials = self._make_credentials(token)
        logger.debug("Bearer token replaced")

    def prepare(
        self,
        method: str,
        url: str,
        params: Optional[QueryParams] = None,
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        timestamp: Optional[datetime] = None,
    ) -> PreparedParts:
        # The whole parameter mapping travels as one JSON blob
        query = query_escape(params)
        if query:
            url = f"{url}?{query}"

        final_headers = CaseInsensitiveDict(headers or {})
        final_headers.update(self.auth_headers())
        if "Content-Type" not in final_headers:
            final_headers["Content-Type"] = JSON_CONTENT_TYPE

        return PreparedParts(url=url, headers=final_headers, body=self._encode_body(body))

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._credentials.token}"}

    def _encode_body(self, body: Optional[Any]) -> Optional[Any]:
        """JSON-encode mappings and sequences; pass anything else through"""
        if isinstance(body, (dict, list, tuple)):
            return to_json(body).encode("utf-8")
        return body

    @staticmethod
    def _make_credentials(token: str) -> BearerCredentials:
        if not token or not token.strip():
            raise ValidationError("token cannot be empty", field="token")
        return BearerCredentials(token=token)
