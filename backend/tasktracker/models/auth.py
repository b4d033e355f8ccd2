"""
Dedicated request models for the login endpoint
(registration lives with the User models).
"""
from typing import Any

from pydantic import field_validator

from .base import CamelModel, check_length
from .user import email_format, trim_lower


class LoginRequest(CamelModel):
    """
    Payload expected by POST /auth/login
    """
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: Any) -> Any:
        return trim_lower(v)

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: str) -> str:
        return email_format(v)

    @field_validator("password")
    @classmethod
    def password_present(cls, v: str) -> str:
        return check_length(v, "Password", min_length=1, empty_msg="Password cannot be empty")
