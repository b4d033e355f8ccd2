"""
errors.py – the single failure type every layer raises
──────────────────────────────────────────────────────
Services and dependencies raise `AppError` directly.  Anything else that
bubbles up (driver, token library, pydantic) is translated by
`normalize_error()` at the HTTP boundary – see core/error_handlers.py.
"""
from enum import IntEnum

from bson.errors import InvalidId
from fastapi.exceptions import RequestValidationError
from jose import ExpiredSignatureError, JWTError
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError


class ErrorKind(IntEnum):
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    INTERNAL = 500


class AppError(Exception):
    def __init__(self, message: str, kind: ErrorKind = ErrorKind.INTERNAL):
        super().__init__(message)
        self.message = message
        self.kind = kind

    @property
    def status_code(self) -> int:
        return int(self.kind)

    def __repr__(self) -> str:
        return f"AppError({self.message!r}, {self.kind.name})"


def first_error_message(errors: list[dict]) -> str:
    """
    Human-readable text of the first violated constraint.  Messages from
    our own validators already name the field and pass through as-is;
    pydantic's generic ones get the field's wire name as a prefix.
    """
    if not errors:
        return "Invalid input"
    err = errors[0]
    if err.get("type") == "json_invalid":
        return "Malformed JSON body"
    if err.get("type") == "value_error" and "error" in err.get("ctx", {}):
        return str(err["ctx"]["error"])
    msg = err.get("msg", "Invalid input")
    # request-level locations start with "body"/"query" – not useful to clients
    loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query")]
    return f"{'.'.join(loc)}: {msg}" if loc else msg


def normalize_error(exc: Exception) -> AppError:
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, DuplicateKeyError):
        return AppError("Duplicate field value entered", ErrorKind.CONFLICT)
    if isinstance(exc, InvalidId):
        return AppError("Invalid Id format", ErrorKind.BAD_REQUEST)
    # ExpiredSignatureError subclasses JWTError – order matters
    if isinstance(exc, ExpiredSignatureError):
        return AppError("Token expired", ErrorKind.UNAUTHORIZED)
    if isinstance(exc, JWTError):
        return AppError("Invalid token", ErrorKind.UNAUTHORIZED)
    if isinstance(exc, (ValidationError, RequestValidationError)):
        return AppError(first_error_message(exc.errors()), ErrorKind.BAD_REQUEST)

    return AppError(str(exc) or "Internal Server Error", ErrorKind.INTERNAL)
