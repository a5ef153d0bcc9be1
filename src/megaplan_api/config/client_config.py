"""
Megaplan Client Configuration Types and Schema
Type-safe configuration objects for the Megaplan SDK
"""

import os
import platform
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator, model_validator


class AuthScheme(str, Enum):
    """Authentication scheme of the target API generation"""
    BEARER = "bearer"
    LEGACY = "legacy"


class ConfigDefaults:
    """Default configuration values"""
    AUTH_SCHEME = AuthScheme.BEARER
    TIMEOUT = 60000
    USER_AGENT = f"Python/{platform.python_version()}"
    ACCEPT_GZIP = False
    VERIFY_SSL = True
    POOL_MAXSIZE = os.cpu_count() or 1
    KEEP_ALIVE = True
    ENABLE_COOKIES = True


# Environment variable mapping
ENV_VAR_MAPPING = {
    "MEGAPLAN_DOMAIN": "domain",
    "MEGAPLAN_AUTH_SCHEME": "auth_scheme",
    "MEGAPLAN_TOKEN": "token",
    "MEGAPLAN_ACCESS_ID": "access_id",
    "MEGAPLAN_SECRET_KEY": "secret_key",
    "MEGAPLAN_APP_UUID": "app_uuid",
    "MEGAPLAN_APP_SECRET": "app_secret",
    "MEGAPLAN_TIMEOUT": "timeout",
    "MEGAPLAN_USER_AGENT": "user_agent",
    "MEGAPLAN_ACCEPT_GZIP": "accept_gzip",
    "MEGAPLAN_X_USER_ID": "x_user_id",
    "MEGAPLAN_VERIFY_SSL": "verify_ssl",
    "MEGAPLAN_PROXY": "proxy",
    "MEGAPLAN_POOL_MAXSIZE": "pool_maxsize",
    "MEGAPLAN_KEEP_ALIVE": "keep_alive",
    "MEGAPLAN_ENABLE_COOKIES": "enable_cookies",
}


class ClientConfig(BaseModel):
    """
    Main client configuration class
    Defines all configuration options for the Megaplan SDK
    """

    # Required - account
    domain: str = Field(
        ...,
        description="Account domain, e.g. 'example.megaplan.ru' or 'https://example.megaplan.ru'",
        min_length=1
    )

    # Authentication
    auth_scheme: AuthScheme = Field(
        default=ConfigDefaults.AUTH_SCHEME,
        description="Authentication scheme: 'bearer' (API v3) or 'legacy' (API v1)"
    )
    token: Optional[str] = Field(
        default=None,
        description="Bearer access token (bearer scheme)"
    )
    access_id: Optional[str] = Field(
        default=None,
        description="AccessId (legacy scheme)"
    )
    secret_key: Optional[str] = Field(
        default=None,
        description="SecretKey (legacy scheme)"
    )
    app_uuid: Optional[str] = Field(
        default=None,
        description="Embedded application UUID (legacy user-sign verification)"
    )
    app_secret: Optional[str] = Field(
        default=None,
        description="Embedded application secret (legacy user-sign verification)"
    )

    # Transport
    timeout: int = Field(
        default=ConfigDefaults.TIMEOUT,
        description="Request timeout in milliseconds",
        ge=1000,
        le=600000
    )
    user_agent: str = Field(
        default=ConfigDefaults.USER_AGENT,
        description="User-Agent header sent with every request"
    )
    accept_gzip: bool = Field(
        default=ConfigDefaults.ACCEPT_GZIP,
        description="Ask the server for gzip-compressed responses"
    )
    x_user_id: Optional[int] = Field(
        default=None,
        description="Perform requests on behalf of this user (X-User-Id header)"
    )
    verify_ssl: bool = Field(
        default=ConfigDefaults.VERIFY_SSL,
        description="Verify TLS certificates"
    )
    proxy: Optional[str] = Field(
        default=None,
        description="Proxy URL; environment proxies are used when unset"
    )
    pool_maxsize: int = Field(
        default=ConfigDefaults.POOL_MAXSIZE,
        description="Maximum pooled connections per host",
        ge=1,
        le=256
    )
    keep_alive: bool = Field(
        default=ConfigDefaults.KEEP_ALIVE,
        description="Reuse connections between requests"
    )
    enable_cookies: bool = Field(
        default=ConfigDefaults.ENABLE_COOKIES,
        description="Keep a cookie jar on the session"
    )

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    @field_validator("domain")
    @classmethod
    def validate_domain(cls, v: str) -> str:
        """Normalize domain to an absolute https URL without trailing slash"""
        if "://" not in v:
            v = f"https://{v}"
        if not v.startswith(("http://", "https://")):
            raise ValueError("domain must be a host name or an HTTP/HTTPS URL")
        try:
            parts = urlsplit(v)
            parts.port  # raises on a malformed port
        except ValueError as e:
            raise ValueError(f"domain is not a valid URL: {e}")
        if not parts.hostname:
            raise ValueError("domain must include a host name")
        return v.rstrip("/")

    @field_validator("x_user_id")
    @classmethod
    def validate_x_user_id(cls, v: Optional[int]) -> Optional[int]:
        """Non-positive user ids mean 'not set'"""
        if v is not None and v <= 0:
            return None
        return v

    @model_validator(mode="after")
    def clear_empty_proxy(self) -> "ClientConfig":
        """Treat an empty proxy string as unset"""
        if self.proxy == "":
            self.proxy = None
        return self

    def has_credentials(self) -> bool:
        """Whether the credentials of the configured scheme are present"""
        if self.auth_scheme == AuthScheme.LEGACY:
            return bool(self.access_id and self.secret_key)
        return bool(self.token)

    def get_base_url(self) -> str:
        """Get the resolved base URL"""
        return self.domain

