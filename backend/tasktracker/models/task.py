"""
Task request / response models.

Query strings arrive as plain strings – pydantic's lax mode coerces
"page=2" into an int, so the same models serve bodies and queries.
"""
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator

from .base import CamelModel, check_length, strip

# full date-time only: no bare dates, no epoch numbers
ISO_DATETIME = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?"
)

# wire sort key → stored field
SORT_FIELDS = {"createdAt": "created_at", "dueDate": "due_date", "title": "title"}


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class _TaskFields(CamelModel):
    @field_validator("title", "description", mode="before", check_fields=False)
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return strip(v)

    @field_validator("title", check_fields=False)
    @classmethod
    def title_length(cls, v: str | None) -> str | None:
        return check_length(v, "Title", min_length=1, max_length=200,
                            empty_msg="Title cannot be empty")

    @field_validator("description", check_fields=False)
    @classmethod
    def description_length(cls, v: str | None) -> str | None:
        return check_length(v, "Description", max_length=2000)

    @field_validator("due_date", mode="before", check_fields=False)
    @classmethod
    def iso_string(cls, v: Any) -> Any:
        if v is None:
            return v
        if not isinstance(v, str) or not ISO_DATETIME.fullmatch(v):
            raise ValueError("Invalid ISO 8601 date format")
        return v

    @field_validator("due_date", check_fields=False)
    @classmethod
    def as_utc(cls, v: datetime | None) -> datetime | None:
        if v is None:
            return v
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class TaskCreate(_TaskFields):
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.PENDING
    due_date: datetime | None = None


class TaskUpdate(_TaskFields):
    """Every field optional – only keys present in the body are applied."""
    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    due_date: datetime | None = None

    @model_validator(mode="after")
    def required_not_null(self) -> "TaskUpdate":
        # description / dueDate may be nulled to clear them; these may not
        for name in ("title", "status"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        out = self.model_dump(exclude_unset=True)
        if "status" in out:
            out["status"] = out["status"].value
        return out


class TaskQuery(CamelModel):
    status: TaskStatus | None = None
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    sort_by: Literal["createdAt", "dueDate", "title"] = "createdAt"
    order: Literal["asc", "desc"] = "desc"


class TaskOut(CamelModel):
    id: str
    title: str
    description: str | None = None
    status: TaskStatus
    due_date: datetime | None = None
    user_id: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_doc(cls, doc: dict) -> "TaskOut":
        return cls(
            id=str(doc["_id"]),
            title=doc["title"],
            description=doc.get("description"),
            status=doc["status"],
            due_date=doc.get("due_date"),
            user_id=str(doc["user_id"]),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )


class Pagination(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class TaskPage(CamelModel):
    tasks: list[TaskOut]
    pagination: Pagination
