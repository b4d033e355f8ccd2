from typing import Annotated

from bson import ObjectId
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from .errors import AppError, ErrorKind
from .security import decode_token

# auto_error=False: missing / non-bearer headers are reported through AppError
bearer_scheme = HTTPBearer(auto_error=False)


class Identity(BaseModel):
    """Acting user for one request – handed explicitly to the services."""
    user_id: str
    email: str | None = None


async def require_auth(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> Identity:
    token = credentials.credentials.strip() if credentials else ""
    if not token:
        raise AppError("Authorization token missing", ErrorKind.UNAUTHORIZED)

    # signature / expiry failures propagate as jose errors → normalize_error()
    claims = decode_token(token)

    sub = claims.get("sub")
    if not sub or not ObjectId.is_valid(sub):
        raise AppError("Invalid token", ErrorKind.UNAUTHORIZED)

    return Identity(user_id=sub, email=claims.get("email"))


CurrentIdentity = Annotated[Identity, Depends(require_auth)]
