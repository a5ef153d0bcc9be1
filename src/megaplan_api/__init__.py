"""
Megaplan API SDK for Python

Main entry point for the SDK
"""

from megaplan_api.client import MegaplanClient, LegacyClient
from megaplan_api.exceptions import (
    MegaplanError,
    MegaplanErrorCategory,
    ValidationError,
    QueryEncodingError,
    ConfigError,
    NetworkError,
    DecodeError,
    NonJsonResponseError,
    UnknownCompressionError,
    ApiError,
    AuthError,
)

# HTTP Client
from megaplan_api.client import (
    HttpClient,
    HttpMethod,
    AuthStrategy,
    BearerTokenStrategy,
    LegacySigningStrategy,
    RequestBuilder,
    SignedRequest,
    ResponseDecoder,
    CredentialExchange,
)

# Configuration
from megaplan_api.config import (
    ClientConfig,
    AuthScheme,
    ConfigLoader,
    ConfigValidator,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)

# Signing
from megaplan_api.crypto import SignatureService, SignatureResult

# Query parameters
from megaplan_api.query import (
    QueryEncoder,
    EncodeMode,
    EncodedQuery,
    DateOnly,
    build_query_params,
    create_entity,
    set_entity_array,
    set_entity_field,
    set_raw_field,
)

# Models
from megaplan_api.models import (
    BearerCredentials,
    LegacyCredentials,
    Envelope,
    FieldError,
    LegacyResponse,
    Meta,
    Pagination,
)

__version__ = "0.1.0"

__all__ = [
    # Clients
    "MegaplanClient",
    "LegacyClient",
    # HTTP Client
    "HttpClient",
    "HttpMethod",
    "AuthStrategy",
    "BearerTokenStrategy",
    "LegacySigningStrategy",
    "RequestBuilder",
    "SignedRequest",
    "ResponseDecoder",
    "CredentialExchange",
    # Exceptions
    "MegaplanError",
    "MegaplanErrorCategory",
    "ValidationError",
    "QueryEncodingError",
    "ConfigError",
    "NetworkError",
    "DecodeError",
    "NonJsonResponseError",
    "UnknownCompressionError",
    "ApiError",
    "AuthError",
    # Configuration
    "ClientConfig",
    "AuthScheme",
    "ConfigLoader",
    "ConfigValidator",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    # Signing
    "SignatureService",
    "SignatureResult",
    # Query parameters
    "QueryEncoder",
    "EncodeMode",
    "EncodedQuery",
    "DateOnly",
    "build_query_params",
    "create_entity",
    "set_entity_array",
    "set_entity_field",
    "set_raw_field",
    # Models
    "BearerCredentials",
    "LegacyCredentials",
    "Envelope",
    "FieldError",
    "LegacyResponse",
    "Meta",
    "Pagination",
]
