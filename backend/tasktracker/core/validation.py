from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import AppError, ErrorKind, first_error_message

M = TypeVar("M", bound=BaseModel)


def validate(model: type[M], raw: Any) -> M:
    """
    Parse *raw* (decoded JSON body / query mapping) into *model*.

    Already-validated instances pass straight through, so calling this
    twice on the same input is harmless.  Failures surface as a 400 with
    the first violated constraint's message.
    """
    if isinstance(raw, model):
        return raw
    try:
        return model.model_validate({} if raw is None else raw)
    except ValidationError as exc:
        raise AppError(first_error_message(exc.errors()), ErrorKind.BAD_REQUEST) from exc
