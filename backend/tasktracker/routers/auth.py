# backend/tasktracker/routers/auth.py
#
# Central authentication routes:
#   • POST /auth/register – JSON body → create user + token
#   • POST /auth/login    – JSON body → token
#
# Bodies are handed to services/users.py untouched; validation lives
# there so the service behaves the same whichever surface calls it.

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, status

from ..models.user import AuthPayload
from ..services.database import get_db
from ..services.users import login_user, register_user

router = APIRouter(prefix="/auth", tags=["auth"])


# ───────────────────────────── register ──────────────────────────────
@router.post(
    "/register",
    response_model=AuthPayload,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new user and return a bearer token",
)
async def register(
    db: Annotated[Any, Depends(get_db)],
    payload: Annotated[Any, Body()] = None,
) -> AuthPayload:
    """
    Expects `{name, email, password}`.  409 when the e-mail is taken.
    """
    return await register_user(db, payload)


# ────────────────────────────── login ────────────────────────────────
@router.post(
    "/login",
    response_model=AuthPayload,
    summary="Exchange e-mail + password for a bearer token",
)
async def login(
    db: Annotated[Any, Depends(get_db)],
    payload: Annotated[Any, Body()] = None,
) -> AuthPayload:
    """
    Unknown e-mail and wrong password are indistinguishable: same 401,
    same message, same bcrypt cost.
    """
    return await login_user(db, payload)
