"""
Request Signature Service
Handles request signing for the legacy (v1) Megaplan API

Every legacy request carries two headers bound to each other:
- Date: the request timestamp in RFC 2822 form
- X-Authorization: ``<access id>:<signature>``

The signature is an HMAC-SHA1 over a canonical string built from the
method, the timestamp and the request URL without its scheme. The digest
is hex-encoded and the hex string itself is then Base64-encoded; the
server verifies exactly this double encoding.
"""

import base64
import binascii
from dataclasses import dataclass
from datetime import datetime
from email.utils import format_datetime
from typing import Optional, Union
from urllib.parse import urlsplit

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from megaplan_api.exceptions import ValidationError


# Content type that is always part of the canonical string
SIGNED_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass
class SignatureResult:
    """Signature result containing the header value and its inputs"""
    header_value: str
    signature: str
    data_string: str
    date: str
    algorithm: str = "HMAC-SHA1"


@dataclass
class VerificationResult:
    """Signature verification result"""
    valid: bool
    error: Optional[str] = None
    data_string: Optional[str] = None


def format_date(timestamp: Optional[datetime] = None) -> str:
    """
    Format a timestamp as ``Mon, 02 Jan 2006 15:04:05 -0700``

    Naive datetimes are interpreted as local time; None means now.
    """
    if timestamp is None:
        timestamp = datetime.now()
    if timestamp.tzinfo is None:
        timestamp = timestamp.astimezone()
    return format_datetime(timestamp)


def strip_scheme(url: str) -> str:
    """Remove the leading ``<scheme>://`` from a URL"""
    scheme = urlsplit(url).scheme
    prefix = f"{scheme}://"
    if scheme and url.startswith(prefix):
        return url[len(prefix):]
    return url


def canonical_string(method: str, date: str, url: str) -> str:
    """Build the exact string that is hashed for a request"""
    return f"{method.upper()}\n\n{SIGNED_CONTENT_TYPE}\n{date}\n{strip_scheme(url)}"


class SignatureService:
    """
    Signature Service for the legacy Megaplan API

    Example:
        >>> service = SignatureService("access-id", b"secret-key")
        >>> result = service.sign("GET", "https://example.megaplan.ru/BumsTaskApiV01/Task/list.api")
        >>> headers = {"Date": result.date, "X-Authorization": result.header_value}
    """

    def __init__(self, access_id: str, secret_key: Union[str, bytes]) -> None:
        """
        Create a new SignatureService instance

        Args:
            access_id: AccessId from the credential exchange
            secret_key: SecretKey from the credential exchange

        Raises:
            ValidationError: If either credential is empty
        """
        if not access_id:
            raise ValidationError("access_id is required for request signing", field="access_id")
        if not secret_key:
            raise ValidationError("secret_key is required for request signing", field="secret_key")

        self._access_id = access_id
        self._secret_key = secret_key.encode("utf-8") if isinstance(secret_key, str) else secret_key

    @property
    def access_id(self) -> str:
        return self._access_id

    def sign(
        self,
        method: str,
        url: str,
        timestamp: Optional[datetime] = None,
    ) -> SignatureResult:
        """
        Sign a request

        Args:
            method: HTTP method
            url: Absolute request URL, including the query string for GET
            timestamp: Request time (defaults to now)

        Returns:
            Signature result; ``header_value`` goes into X-Authorization
            and ``date`` into the Date header
        """
        date = format_date(timestamp)
        data_string = canonical_string(method, date, url)
        signature = self._sign(data_string)

        return SignatureResult(
            header_value=f"{self._access_id}:{signature}",
            signature=signature,
            data_string=data_string,
            date=date,
        )

    def verify(self, method: str, url: str, date: str, signature: str) -> VerificationResult:
        """
        Verify a signature against the request it claims to sign

        Args:
            method: HTTP method
            url: Absolute request URL
            date: Date header value exactly as sent
            signature: Signature part of the X-Authorization header

        Returns:
            Verification result
        """
        data_string = canonical_string(method, date, url)

        try:
            hex_digest = base64.b64decode(signature, validate=True).decode("ascii")
            digest = bytes.fromhex(hex_digest)
        except (binascii.Error, UnicodeDecodeError, ValueError) as e:
            return VerificationResult(
                valid=False,
                error=f"Malformed signature: {e}",
                data_string=data_string,
            )

        h = hmac.HMAC(self._secret_key, hashes.SHA1())
        h.update(data_string.encode("utf-8"))
        try:
            h.verify(digest)
        except InvalidSignature:
            return VerificationResult(
                valid=False,
                error="Signature does not match",
                data_string=data_string,
            )

        return VerificationResult(valid=True, data_string=data_string)

    def _sign(self, data_string: str) -> str:
        """HMAC-SHA1, hex-encoded, then Base64 of the hex string"""
        h = hmac.HMAC(self._secret_key, hashes.SHA1())
        h.update(data_string.encode("utf-8"))
        hex_digest = h.finalize().hex()
        return base64.b64encode(hex_digest.encode("ascii")).decode("ascii")
