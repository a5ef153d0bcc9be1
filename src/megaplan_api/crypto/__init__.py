"""Cryptography module initialization

This module provides request signing for the legacy Megaplan API:
- SignatureService: HMAC-SHA1 request signatures
"""

from megaplan_api.crypto.signature import (
    SignatureService,
    SignatureResult,
    VerificationResult as SignatureVerificationResult,
    SIGNED_CONTENT_TYPE,
    canonical_string,
    format_date,
    strip_scheme,
)

__all__ = [
    "SignatureService",
    "SignatureResult",
    "SignatureVerificationResult",
    "SIGNED_CONTENT_TYPE",
    "canonical_string",
    "format_date",
    "strip_scheme",
]
