"""
tasks.py – owner-scoped task CRUD
─────────────────────────────────
Every operation takes the acting user's id explicitly.  Single-task
operations check existence first and ownership second, so a caller
probing someone else's id gets 403 rather than 404 – existence of the
id is confirmed to any authenticated user.
"""
from __future__ import annotations

import asyncio
import math
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING

from ..core.errors import AppError, ErrorKind
from ..core.validation import validate
from ..models.task import (
    SORT_FIELDS,
    Pagination,
    TaskCreate,
    TaskOut,
    TaskPage,
    TaskQuery,
    TaskUpdate,
)


async def _owned_task(db, owner_id: str, task_id: str) -> dict:
    # a malformed id raises bson InvalidId → 400 "Invalid Id format"
    doc = await db.tasks.find_one({"_id": ObjectId(task_id)})
    if doc is None:
        raise AppError("Task not found", ErrorKind.NOT_FOUND)
    if str(doc["user_id"]) != owner_id:
        raise AppError("Forbidden", ErrorKind.FORBIDDEN)
    return doc


async def create_task(db, owner_id: str, raw: Any) -> TaskOut:
    data = validate(TaskCreate, raw)
    now = datetime.now(timezone.utc)
    doc = {
        "title": data.title,
        "description": data.description,
        "status": data.status.value,
        "due_date": data.due_date,
        "user_id": ObjectId(owner_id),
        "created_at": now,
        "updated_at": now,
    }
    res = await db.tasks.insert_one(doc)
    doc["_id"] = res.inserted_id
    return TaskOut.from_doc(doc)


async def list_tasks(db, owner_id: str, raw_query: Any) -> TaskPage:
    """
    Count and page fetch run concurrently; under concurrent writes the
    total and the page may disagree slightly.
    """
    query = validate(TaskQuery, raw_query)

    flt: dict[str, Any] = {"user_id": ObjectId(owner_id)}
    if query.status is not None:
        flt["status"] = query.status.value

    direction = ASCENDING if query.order == "asc" else DESCENDING
    skip = (query.page - 1) * query.limit
    # _id tiebreaker keeps pages disjoint when sort keys collide
    cursor = (
        db.tasks.find(flt)
        .sort([(SORT_FIELDS[query.sort_by], direction), ("_id", direction)])
        .skip(skip)
        .limit(query.limit)
    )

    docs, total = await asyncio.gather(
        cursor.to_list(length=query.limit),
        db.tasks.count_documents(flt),
    )

    return TaskPage(
        tasks=[TaskOut.from_doc(d) for d in docs],
        pagination=Pagination(
            total=total,
            page=query.page,
            limit=query.limit,
            total_pages=math.ceil(total / query.limit),
        ),
    )


async def get_task(db, owner_id: str, task_id: str) -> TaskOut:
    return TaskOut.from_doc(await _owned_task(db, owner_id, task_id))


async def update_task(db, owner_id: str, task_id: str, raw: Any) -> TaskOut:
    data = validate(TaskUpdate, raw)
    doc = await _owned_task(db, owner_id, task_id)

    changes = data.changes()
    if changes:
        changes["updated_at"] = datetime.now(timezone.utc)
        await db.tasks.update_one({"_id": doc["_id"]}, {"$set": changes})
        doc.update(changes)

    return TaskOut.from_doc(doc)


async def delete_task(db, owner_id: str, task_id: str) -> None:
    doc = await _owned_task(db, owner_id, task_id)
    await db.tasks.delete_one({"_id": doc["_id"]})
