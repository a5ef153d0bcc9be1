"""
HTTP Client module for the Megaplan SDK
"""

from megaplan_api.client.megaplan_client import MegaplanClient, LegacyClient
from megaplan_api.client.http_client import HttpClient, HttpMethod, build_default_headers
from megaplan_api.client.auth import (
    AuthStrategy,
    BearerTokenStrategy,
    LegacySigningStrategy,
)
from megaplan_api.client.request_builder import RequestBuilder, SignedRequest
from megaplan_api.client.response_decoder import ResponseDecoder
from megaplan_api.client.credentials import CredentialExchange, hash_password

__all__ = [
    "MegaplanClient",
    "LegacyClient",
    "HttpClient",
    "HttpMethod",
    "build_default_headers",
    "AuthStrategy",
    "BearerTokenStrategy",
    "LegacySigningStrategy",
    "RequestBuilder",
    "SignedRequest",
    "ResponseDecoder",
    "CredentialExchange",
    "hash_password",
]
