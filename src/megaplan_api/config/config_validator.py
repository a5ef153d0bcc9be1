"""
Configuration Validator
Validates client configuration with clear error messages
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from megaplan_api.config.client_config import AuthScheme


@dataclass
class ValidationErrorDetail:
    """Validation error detail"""
    field: str
    message: str
    value: Optional[Any] = None


@dataclass
class ValidationResult:
    """Validation result"""
    valid: bool
    errors: List[ValidationErrorDetail] = field(default_factory=list)


class ConfigValidator:
    """
    ConfigValidator class
    Collects every problem in a configuration dictionary instead of
    stopping at the first one
    """

    def __init__(self) -> None:
        self._errors: List[ValidationErrorDetail] = []

    def validate(self, config: Dict[str, Any], require_credentials: bool = False) -> ValidationResult:
        """
        Validate the entire configuration dictionary

        Args:
            config: Configuration dictionary to validate
            require_credentials: Also require the credentials of the
                configured auth scheme

        Returns:
            ValidationResult with any errors
        """
        self._errors = []

        self._validate_domain(config)
        self._validate_auth_scheme(config)
        self._validate_ranges(config)
        self._validate_proxy(config)

        if require_credentials:
            self._validate_credentials(config)

        return ValidationResult(
            valid=len(self._errors) == 0,
            errors=self._errors.copy()
        )

    def validate_or_raise(self, config: Dict[str, Any], require_credentials: bool = False) -> None:
        """
        Validate and raise if invalid

        Args:
            config: Configuration dictionary to validate
            require_credentials: Also require scheme credentials

        Raises:
            ConfigError: If configuration is invalid
        """
        from megaplan_api.exceptions import ConfigError

        result = self.validate(config, require_credentials=require_credentials)
        if not result.valid:
            error_messages = "; ".join(
                f"{e.field}: {e.message}" for e in result.errors
            )
            raise ConfigError(
                f"Configuration validation failed: {error_messages}",
                code="CONFIG_INVALID",
                details={"errors": [e.field for e in result.errors]},
            )

    def _validate_domain(self, config: Dict[str, Any]) -> None:
        """Validate domain is present and parses as a URL"""
        domain = config.get("domain")
        if domain is None:
            self._errors.append(ValidationErrorDetail(
                field="domain",
                message="domain is required"
            ))
            return

        if not isinstance(domain, str) or domain.strip() == "":
            self._errors.append(ValidationErrorDetail(
                field="domain",
                message="domain cannot be empty",
                value=domain
            ))
            return

        url = domain if "://" in domain else f"https://{domain}"
        if not url.startswith(("http://", "https://")):
            self._errors.append(ValidationErrorDetail(
                field="domain",
                message="domain must be a host name or an HTTP/HTTPS URL",
                value=domain
            ))
            return

        try:
            parts = urlsplit(url)
            hostname = parts.hostname
            parts.port  # raises on a malformed port
        except ValueError:
            hostname = None
        if not hostname:
            self._errors.append(ValidationErrorDetail(
                field="domain",
                message="domain is not a valid URL",
                value=domain
            ))

    def _validate_auth_scheme(self, config: Dict[str, Any]) -> None:
        """Validate auth scheme setting"""
        scheme = config.get("auth_scheme")
        if scheme is not None:
            valid_schemes = [s.value for s in AuthScheme]
            scheme_value = scheme.value if isinstance(scheme, AuthScheme) else scheme
            if scheme_value not in valid_schemes:
                self._errors.append(ValidationErrorDetail(
                    field="auth_scheme",
                    message=f"auth_scheme must be one of: {', '.join(valid_schemes)}",
                    value=scheme
                ))

    def _validate_ranges(self, config: Dict[str, Any]) -> None:
        """Validate numeric ranges"""
        timeout = config.get("timeout")
        if timeout is not None:
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
                self._errors.append(ValidationErrorDetail(
                    field="timeout",
                    message="timeout must be a positive number (milliseconds)",
                    value=timeout
                ))
            elif timeout < 1000:
                self._errors.append(ValidationErrorDetail(
                    field="timeout",
                    message="timeout should be at least 1000ms for reliable operation",
                    value=timeout
                ))
            elif timeout > 600000:
                self._errors.append(ValidationErrorDetail(
                    field="timeout",
                    message="timeout should not exceed 600000ms (10 minutes)",
                    value=timeout
                ))

        pool_maxsize = config.get("pool_maxsize")
        if pool_maxsize is not None:
            if isinstance(pool_maxsize, bool) or not isinstance(pool_maxsize, int) or pool_maxsize < 1:
                self._errors.append(ValidationErrorDetail(
                    field="pool_maxsize",
                    message="pool_maxsize must be a positive integer",
                    value=pool_maxsize
                ))
            elif pool_maxsize > 256:
                self._errors.append(ValidationErrorDetail(
                    field="pool_maxsize",
                    message="pool_maxsize should not exceed 256",
                    value=pool_maxsize
                ))

        x_user_id = config.get("x_user_id")
        if x_user_id is not None and (isinstance(x_user_id, bool) or not isinstance(x_user_id, int)):
            self._errors.append(ValidationErrorDetail(
                field="x_user_id",
                message="x_user_id must be an integer",
                value=x_user_id
            ))

    def _validate_proxy(self, config: Dict[str, Any]) -> None:
        """Validate proxy URL format"""
        proxy = config.get("proxy")
        if proxy is not None and proxy != "":
            if not isinstance(proxy, str) or "://" not in proxy:
                self._errors.append(ValidationErrorDetail(
                    field="proxy",
                    message="proxy must be a URL such as http://host:3128",
                    value=proxy
                ))

    def _validate_credentials(self, config: Dict[str, Any]) -> None:
        """Validate the credentials required by the auth scheme"""
        scheme = config.get("auth_scheme") or AuthScheme.BEARER
        scheme_value = scheme.value if isinstance(scheme, AuthScheme) else scheme

        if scheme_value == AuthScheme.LEGACY.value:
            required_fields = ["access_id", "secret_key"]
        else:
            required_fields = ["token"]

        for field_name in required_fields:
            value = config.get(field_name)
            if value is None:
                self._errors.append(ValidationErrorDetail(
                    field=field_name,
                    message=f"{field_name} is required for the {scheme_value} scheme"
                ))
            elif isinstance(value, str) and value.strip() == "":
                self._errors.append(ValidationErrorDetail(
                    field=field_name,
                    message=f"{field_name} cannot be empty",
                    value="[REDACTED]"
                ))
