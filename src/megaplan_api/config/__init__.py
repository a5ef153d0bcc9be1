"""
Configuration module
"""

from megaplan_api.config.client_config import (
    ClientConfig,
    AuthScheme,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)
from megaplan_api.config.config_loader import ConfigLoader
from megaplan_api.config.config_validator import (
    ConfigValidator,
    ValidationResult,
    ValidationErrorDetail,
)

__all__ = [
    "ClientConfig",
    "AuthScheme",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    "ConfigLoader",
    "ConfigValidator",
    "ValidationResult",
    "ValidationErrorDetail",
]
