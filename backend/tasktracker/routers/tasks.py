from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request, Response, status

from ..core.auth import CurrentIdentity
from ..models.task import TaskOut, TaskPage
from ..services import tasks as svc
from ..services.database import get_db

router = APIRouter(prefix="/tasks", tags=["tasks"])

Db = Annotated[Any, Depends(get_db)]


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create(identity: CurrentIdentity, db: Db,
                 payload: Annotated[Any, Body()] = None) -> TaskOut:
    return await svc.create_task(db, identity.user_id, payload)


@router.get("", response_model=TaskPage)
async def list_(identity: CurrentIdentity, db: Db, request: Request) -> TaskPage:
    """status, page, limit, sortBy, order – all optional."""
    return await svc.list_tasks(db, identity.user_id, dict(request.query_params))


@router.get("/{task_id}", response_model=TaskOut)
async def get_one(task_id: str, identity: CurrentIdentity, db: Db) -> TaskOut:
    return await svc.get_task(db, identity.user_id, task_id)


@router.patch("/{task_id}", response_model=TaskOut)
async def update(task_id: str, identity: CurrentIdentity, db: Db,
                 payload: Annotated[Any, Body()] = None) -> TaskOut:
    return await svc.update_task(db, identity.user_id, task_id, payload)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove(task_id: str, identity: CurrentIdentity, db: Db) -> Response:
    await svc.delete_task(db, identity.user_id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
