"""
User-related request and response schemas.

These Pydantic models define the API contract and provide
automatic validation and documentation.
"""

import re
from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


SRN_PATTERN = re.compile(r"^PES\dUG\d{6}$")
MIN_PASSWORD_LENGTH = 6


class RegisterRequest(BaseModel):
    """Request body for creating an account."""

    name: str = Field(..., description="Display name", examples=["Test User"])
    email: EmailStr = Field(..., description="Unique login email", examples=["test@pesu.edu"])
    password: str = Field(..., description="Plain password, hashed before storage")
    srn: Optional[str] = Field(
        default=None,
        description="Student Registration Number (PESxUGxxxxxx)",
        examples=["PES1UG123456"],
    )

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("password")
    @classmethod
    def long_enough(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        return value

    @field_validator("srn")
    @classmethod
    def valid_srn(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            return None
        if not SRN_PATTERN.match(value):
            raise ValueError("SRN must be in the format PESxUGxxxxxx (e.g., PES1UG123456)")
        return value


class LoginRequest(BaseModel):
    """Request body for logging in."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def strip_email(cls, value: str) -> str:
        return value.strip().lower()


class AuthResponse(BaseModel):
    """Returned by register and login."""

    id: str
    name: str
    email: str
    srn: Optional[str] = None
    token: str = Field(..., description="Bearer token for authenticated calls")


class ProfileResponse(BaseModel):
    """The caller's identity, as carried by their token."""

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
