"""
Credential exchange for the legacy API

Two round trips turn a login and password into an AccessId/SecretKey
pair:
1. createOneTimeKeyAuth: login + MD5(password) -> OneTimeKey
2. authorize: login + MD5(password) + OneTimeKey -> AccessId, SecretKey
"""

import hashlib
import json
import logging
from typing import Any, Dict, Optional

import requests
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from megaplan_api.client.http_client import HttpClient
from megaplan_api.exceptions import AuthError
from megaplan_api.models.credentials import LegacyCredentials
from megaplan_api.models.envelope import LegacyResponse


logger = logging.getLogger(__name__)

ONE_TIME_KEY_PATH = "/BumsCommonApiV01/User/createOneTimeKeyAuth.api"
AUTHORIZE_PATH = "/BumsCommonApiV01/User/authorize.api"


class OneTimeKeyData(BaseModel):
    """``data`` of the one-time key response"""

    one_time_key: str = Field(default="", alias="OneTimeKey")

    model_config = {
        "populate_by_name": True,
    }


class AuthorizeData(BaseModel):
    """``data`` of the authorize response"""

    user_id: Optional[int] = Field(default=None, alias="UserId")
    employee_id: Optional[int] = Field(default=None, alias="EmployeeId")
    contractor_id: Optional[str] = Field(default=None, alias="ContractorId")
    access_id: str = Field(default="", alias="AccessId")
    secret_key: str = Field(default="", alias="SecretKey")

    model_config = {
        "populate_by_name": True,
    }


def hash_password(password: str) -> str:
    """MD5 hex digest of the password, as the login endpoints expect"""
    return hashlib.md5(password.encode("utf-8")).hexdigest()


class CredentialExchange:
    """
    Obtains legacy API credentials

    Example:
        >>> with HttpClient(config) as http:
        ...     credentials = CredentialExchange(http).obtain("user", "password")
    """

    def __init__(self, http_client: HttpClient, base_url: Optional[str] = None) -> None:
        self._http = http_client
        self._base_url = (base_url or http_client.base_url).rstrip("/")

    def obtain(self, login: str, password: str) -> LegacyCredentials:
        """
        Run the full exchange

        Args:
            login: User login
            password: Plain-text password (hashed before sending)

        Returns:
            Legacy credentials

        Raises:
            AuthError: The server did not return a key or secret
            NetworkError: Transport failure
        """
        password_hash = hash_password(password)
        one_time_key = self.request_one_time_key(login, password_hash)
        data = self.authorize(login, password_hash, one_time_key)
        logger.info(f"Obtained API credentials for user {data.user_id}")
        return LegacyCredentials(access_id=data.access_id, secret_key=data.secret_key)

    def request_one_time_key(self, login: str, password_hash: str) -> str:
        """Exchange login and password hash for a one-time key"""
        response = self._post_form(ONE_TIME_KEY_PATH, {
            "Login": login,
            "Password": password_hash,
        })
        parsed = self._parse(response, OneTimeKeyData)

        if parsed is None or not parsed.data or not parsed.data.one_time_key:
            server_message = parsed.status.message if parsed is not None else None
            raise AuthError(
                f"Invalid login or password ({server_message})",
                server_message=server_message,
                code="AUTH01",
            )
        return parsed.data.one_time_key

    def authorize(self, login: str, password_hash: str, one_time_key: str) -> AuthorizeData:
        """Exchange a one-time key for AccessId and SecretKey"""
        response = self._post_form(AUTHORIZE_PATH, {
            "Login": login,
            "Password": password_hash,
            "OneTimeKey": one_time_key,
        })
        parsed = self._parse(response, AuthorizeData)

        if (
            parsed is None
            or not parsed.data
            or not parsed.data.access_id
            or not parsed.data.secret_key
        ):
            server_message = parsed.status.message if parsed is not None else None
            raise AuthError(
                f"Invalid login or password, access token not received ({server_message})",
                server_message=server_message,
                code="AUTH02",
            )
        return parsed.data

    def _post_form(self, path: str, form: Dict[str, str]) -> Dict[str, Any]:
        request = requests.Request(
            method="POST",
            url=f"{self._base_url}{path}",
            headers={
                "Accept": "application/json",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            data=form,
        )
        response = self._http.send_raw(request)
        try:
            payload = json.loads(response.content)
        except ValueError:
            logger.warning(f"Non-JSON answer from {path} (HTTP {response.status_code})")
            payload = {}
        finally:
            response.close()

        return payload if isinstance(payload, dict) else {}

    @staticmethod
    def _parse(payload: Dict[str, Any], data_type: Any) -> Optional[LegacyResponse]:
        try:
            return LegacyResponse[data_type].model_validate(payload)
        except PydanticValidationError:
            return None
