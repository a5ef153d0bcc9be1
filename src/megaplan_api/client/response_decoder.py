"""
Response Decoder
Turns raw HTTP responses into Envelope models

Decoding runs in four steps:
1. Decompression of gzip bodies (other encodings are reported, not decoded)
2. Content-type gate: non-JSON bodies are returned as error text
3. JSON decoding with arbitrary-precision numbers
4. Envelope validation, including pagination normalization and
   surfacing of ``meta.errors``
"""

import gzip
import json
import logging
import zlib
from decimal import Decimal
from typing import Any, Optional, Tuple, Type

import requests
from pydantic import ValidationError as PydanticValidationError

from megaplan_api.exceptions import DecodeError, NonJsonResponseError, UnknownCompressionError
from megaplan_api.models.envelope import Envelope, LegacyResponse


logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
GZIP_ENCODING = "gzip"
DEFAULT_CHARSET = "utf-8"

# Set on a response once its body no longer needs decompression
UNCOMPRESSED_ATTR = "uncompressed"


class ResponseDecoder:
    """
    ResponseDecoder class

    Example:
        >>> decoder = ResponseDecoder()
        >>> envelope = decoder.decode(response, data_type=list)
        >>> for item in envelope.data:
        ...     print(item["id"])
    """

    def decompress(self, response: requests.Response) -> requests.Response:
        """
        Decompress the response body in place

        Idempotent: a response already marked as uncompressed is returned
        unchanged.

        Raises:
            UnknownCompressionError: Content-Encoding is not gzip; the body
                is buffered untouched on the attached response
            DecodeError: The gzip stream is corrupt
        """
        if getattr(response, UNCOMPRESSED_ATTR, False):
            return response

        encoding = response.headers.get("Content-Encoding", "").strip().lower()
        if not encoding:
            return response

        body, already_decoded = self._buffer_wire_body(response)

        if encoding != GZIP_ENCODING:
            logger.warning(f"Unknown Content-Encoding {encoding!r}; body left compressed")
            raise UnknownCompressionError(encoding, response=response)

        if not already_decoded:
            try:
                body = gzip.decompress(body)
            except (OSError, EOFError, zlib.error) as e:
                raise DecodeError(
                    f"Failed to decompress gzip response: {e}",
                    code="DECODE04",
                    status_code=response.status_code,
                    cause=e,
                ) from e
            response._content = body

        del response.headers["Content-Encoding"]
        setattr(response, UNCOMPRESSED_ATTR, True)
        return response

    def decode(
        self,
        response: requests.Response,
        data_type: Type[Any] = Any,
        raise_on_errors: bool = True,
    ) -> Envelope:
        """
        Decode a current API response

        The response is closed on every path.

        Args:
            response: Raw HTTP response
            data_type: Type of ``data`` (a pydantic model, dict, list, ...)
            raise_on_errors: Raise ApiError when ``meta.errors`` is non-empty

        Returns:
            Decoded envelope

        Raises:
            UnknownCompressionError: Unsupported Content-Encoding
            NonJsonResponseError: Body is not JSON; message is the body text
            DecodeError: Malformed JSON or envelope
            ApiError: ``meta.errors`` is non-empty
        """
        try:
            payload = self.read_json(response)
        finally:
            response.close()

        envelope = self._validate(Envelope[data_type], payload, response.status_code)

        if raise_on_errors:
            error = envelope.error()
            if error is not None:
                logger.debug(f"Response carried {len(envelope.meta.errors)} field error(s)")
                raise error

        return envelope

    def decode_legacy(
        self,
        response: requests.Response,
        data_type: Type[Any] = Any,
    ) -> LegacyResponse:
        """Decode a legacy API ``{status, data}`` response"""
        try:
            payload = self.read_json(response)
        finally:
            response.close()

        return self._validate(LegacyResponse[data_type], payload, response.status_code)

    def read_json(self, response: requests.Response) -> Any:
        """
        Decompress, check content type and parse the JSON body

        Floats become Decimal; integers keep full precision.
        """
        self.decompress(response)

        content_type = response.headers.get("Content-Type", "")
        if JSON_CONTENT_TYPE not in content_type:
            raise NonJsonResponseError(
                self._body_text(response),
                content_type=content_type or None,
                status_code=response.status_code,
            )

        try:
            return json.loads(response.content, parse_float=Decimal)
        except ValueError as e:
            raise DecodeError(
                f"Malformed JSON response: {e}",
                status_code=response.status_code,
                cause=e,
            ) from e

    def _validate(self, model: Any, payload: Any, status_code: Optional[int]) -> Any:
        if not isinstance(payload, dict):
            raise DecodeError(
                f"Expected a JSON object, got {type(payload).__name__}",
                status_code=status_code,
            )
        try:
            return model.model_validate(payload)
        except PydanticValidationError as e:
            raise DecodeError(
                f"Unexpected response structure: {e}",
                status_code=status_code,
                cause=e,
            ) from e

    @staticmethod
    def _body_text(response: requests.Response) -> str:
        """
        Body as text for error reporting

        Uses the charset named in Content-Type, otherwise UTF-8. Undecodable
        bytes are replaced rather than guessed at.
        """
        charset = None
        for param in response.headers.get("Content-Type", "").split(";")[1:]:
            key, _, value = param.strip().partition("=")
            if key.strip().lower() == "charset" and value.strip():
                charset = value.strip().strip("\"'")

        content = response.content or b""
        try:
            return content.decode(charset or DEFAULT_CHARSET, errors="replace")
        except LookupError:
            logger.debug(f"Unknown charset {charset!r}; decoding body as {DEFAULT_CHARSET}")
            return content.decode(DEFAULT_CHARSET, errors="replace")

    @staticmethod
    def _buffer_wire_body(response: requests.Response) -> Tuple[bytes, bool]:
        """
        Read the body exactly as it came off the wire

        Returns the bytes and whether the transport had already consumed
        (and therefore content-decoded) the body.
        """
        if response._content is not False:
            return response._content or b"", True

        raw = response.raw
        body = raw.read(decode_content=False) if raw is not None else b""
        response._content = body or b""
        response._content_consumed = True
        return response._content, False
