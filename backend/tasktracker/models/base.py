from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire; unknown keys are ignored."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def strip(v: Any) -> Any:
    return v.strip() if isinstance(v, str) else v


def check_length(v: str | None, label: str, *, min_length: int = 0,
                 max_length: int | None = None, empty_msg: str | None = None) -> str | None:
    """Length bounds with client-facing wording instead of pydantic's defaults."""
    if v is None:
        return v
    if len(v) < min_length:
        raise ValueError(empty_msg or f"{label} must be at least {min_length} characters")
    if max_length is not None and len(v) > max_length:
        raise ValueError(f"{label} must be {max_length} characters or fewer")
    return v
