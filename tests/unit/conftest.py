"""
Shared fixtures for unit tests
"""

import gzip
import io
import json
from typing import Any, Callable, Optional

import pytest
import requests
from requests.structures import CaseInsensitiveDict
from urllib3.response import HTTPResponse

from megaplan_api.config import ClientConfig


def build_response(
    body: bytes = b"",
    content_type: Optional[str] = "application/json",
    content_encoding: Optional[str] = None,
    status: int = 200,
) -> requests.Response:
    """Build a requests.Response backed by a real urllib3 body stream"""
    headers = {}
    if content_type:
        headers["Content-Type"] = content_type
    if content_encoding:
        headers["Content-Encoding"] = content_encoding

    response = requests.Response()
    response.status_code = status
    response.headers = CaseInsensitiveDict(headers)
    response.raw = HTTPResponse(
        body=io.BytesIO(body),
        headers=headers,
        status=status,
        preload_content=False,
    )
    return response


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    return build_response


@pytest.fixture
def json_response() -> Callable[..., requests.Response]:
    """Factory for JSON responses, optionally gzip-compressed"""
    def factory(payload: Any, gzipped: bool = False, status: int = 200) -> requests.Response:
        body = json.dumps(payload).encode("utf-8")
        if gzipped:
            return build_response(gzip.compress(body), content_encoding="gzip", status=status)
        return build_response(body, status=status)
    return factory


@pytest.fixture
def bearer_config() -> ClientConfig:
    return ClientConfig(domain="example.megaplan.ru", token="test-token")


@pytest.fixture
def legacy_config() -> ClientConfig:
    return ClientConfig(
        domain="https://example.megaplan.ru",
        auth_scheme="legacy",
        access_id="access-id",
        secret_key="secret-key",
        app_uuid="app-uuid",
        app_secret="app-secret",
    )
