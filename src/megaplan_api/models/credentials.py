"""Credential models"""

from typing import Union

from pydantic import BaseModel, Field, field_validator


class LegacyCredentials(BaseModel):
    """AccessId/SecretKey pair for the legacy API; fixed once created"""

    access_id: str = Field(..., min_length=1, description="AccessId from the credential exchange")
    secret_key: bytes = Field(..., min_length=1, description="SecretKey from the credential exchange")

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
    }

    @field_validator("secret_key", mode="before")
    @classmethod
    def encode_secret(cls, v: Union[str, bytes]) -> bytes:
        if isinstance(v, str):
            return v.encode("utf-8")
        return v

    def __repr__(self) -> str:
        return f"LegacyCredentials(access_id={self.access_id!r}, secret_key=[REDACTED])"


class BearerCredentials(BaseModel):
    """Access token for the current API"""

    token: str = Field(..., min_length=1, description="Bearer access token")

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    def __repr__(self) -> str:
        return "BearerCredentials(token=[REDACTED])"
