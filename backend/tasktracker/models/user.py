from datetime import datetime
from typing import Any

from pydantic import field_validator, validate_email
from pydantic_core import PydanticCustomError

from .base import CamelModel, check_length, strip

MAX_PASSWORD_BYTES = 72          # bcrypt ignores everything past this


def trim_lower(v: Any) -> Any:
    return v.strip().lower() if isinstance(v, str) else v


def email_format(v: str) -> str:
    try:
        return validate_email(v)[1]
    except PydanticCustomError:
        raise ValueError("Invalid email format") from None


class RegisterRequest(CamelModel):
    name: str
    email: str
    password: str

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return strip(v)

    @field_validator("name")
    @classmethod
    def name_length(cls, v: str) -> str:
        return check_length(v, "Name", min_length=1, max_length=100,
                            empty_msg="Name cannot be empty")

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
    def password_bounds(cls, v: str) -> str:
        check_length(v, "Password", min_length=8, max_length=72)
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError("Password must be 72 bytes or fewer")
        return v


class UserOut(CamelModel):
    """Public projection – never carries the password digest."""
    id: str
    name: str
    email: str
    created_at: datetime

    @classmethod
    def from_doc(cls, doc: dict) -> "UserOut":
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            email=doc["email"],
            created_at=doc["created_at"],
        )


class AuthPayload(CamelModel):
    user: UserOut
    token: str
