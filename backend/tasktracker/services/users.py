"""
User-centric helpers:
• register_user   – validate, hash, persist, issue a token
• login_user      – timing-equalized credential check, issue a token

Nothing here is rolled back on a later failure: if signing the token
blows up after insert_one() the user exists and can simply log in.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from ..core.errors import AppError, ErrorKind
from ..core.security import (
    DUMMY_DIGEST,
    create_access_token,
    hash_password,
    verify_password,
)
from ..core.validation import validate
from ..models.auth import LoginRequest
from ..models.user import AuthPayload, RegisterRequest, UserOut

log = logging.getLogger(__name__)

# the digest is write-only from the API's point of view
_PUBLIC = {"password_hash": 0}

INVALID_CREDENTIALS = "Invalid email or password"


async def _find_user_by_email(db, email: str, *, with_password: bool = False):
    return await db.users.find_one({"email": email}, None if with_password else _PUBLIC)


def _auth_payload(doc: dict) -> AuthPayload:
    user = UserOut.from_doc(doc)
    return AuthPayload(user=user, token=create_access_token(user.id, user.email))


async def register_user(db, raw: Any) -> AuthPayload:
    """
    Inserts a new user document (409 if the e-mail is already taken).

    The pre-check gives the friendly message; two racing registrations
    still collide on the unique index and surface as DuplicateKeyError.
    """
    data = validate(RegisterRequest, raw)

    if await _find_user_by_email(db, data.email):
        raise AppError("Email already in use", ErrorKind.CONFLICT)

    doc = {
        "name": data.name,
        "email": data.email,
        "password_hash": await hash_password(data.password),
        "created_at": datetime.now(timezone.utc),
    }
    res = await db.users.insert_one(doc)
    doc["_id"] = res.inserted_id
    log.info("Registered user %s", res.inserted_id)

    return _auth_payload(doc)


async def login_user(db, raw: Any) -> AuthPayload:
    """
    Both failure paths (unknown e-mail, wrong password) run exactly one
    bcrypt verify and raise the same 401.
    """
    data = validate(LoginRequest, raw)

    doc = await _find_user_by_email(db, data.email, with_password=True)
    digest = doc["password_hash"] if doc else DUMMY_DIGEST
    matches = await verify_password(data.password, digest)

    if doc is None or not matches:
        raise AppError(INVALID_CREDENTIALS, ErrorKind.UNAUTHORIZED)

    return _auth_payload(doc)
