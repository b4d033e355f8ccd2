"""
security.py – password digests and signed tokens
────────────────────────────────────────────────
bcrypt work is CPU-bound, so hashing/verifying is pushed onto the
threadpool to keep the event loop free for other requests.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from fastapi.concurrency import run_in_threadpool
from jose import jwt
from passlib.context import CryptContext

from .config import get_settings

BCRYPT_ROUNDS = 10
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

_settings = get_settings()

# verified against when the e-mail is unknown so both login failure paths
# pay for one bcrypt compare
DUMMY_DIGEST = pwd_context.hash("timing-equalization-placeholder")


async def hash_password(p: str) -> str:
    return await run_in_threadpool(pwd_context.hash, p)


async def verify_password(p: str, h: str) -> bool:
    return await run_in_threadpool(pwd_context.verify, p, h)


def create_access_token(user_id: str, email: str) -> str:
    now = datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(seconds=_settings.jwt_expires),
    }
    return jwt.encode(claims, _settings.jwt_secret, algorithm=_settings.jwt_algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    """Raises jose.ExpiredSignatureError / jose.JWTError on a bad token."""
    return jwt.decode(token, _settings.jwt_secret, algorithms=[_settings.jwt_algorithm])
