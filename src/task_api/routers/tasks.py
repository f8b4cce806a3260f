"""CRUD routes for tasks.

Update and delete do not check that the id exists: a missing id affects no
rows and still answers 204.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Annotated, TypeVar

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from pydantic_core import from_json

from task_api.schemas import Task, TaskCreate, TaskUpdate
from task_api.store import TaskStore


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])

ModelT = TypeVar("ModelT", bound=BaseModel)


def get_store(request: Request) -> TaskStore:
    return request.app.state.store


def json_body(model: type[ModelT]) -> Callable[[Request], Awaitable[ModelT]]:
    """Decode the request body as JSON into ``model`` whatever its content type.

    A JSON ``null`` body counts as an empty object. Decode and shape errors
    are raised as ``RequestValidationError`` located under ``body``.
    """

    async def parse(request: Request) -> ModelT:
        raw = await request.body()
        try:
            data = from_json(raw)
        except ValueError as exc:
            raise RequestValidationError(
                [
                    {
                        "type": "json_invalid",
                        "loc": ("body",),
                        "msg": "JSON decode error",
                        "input": {},
                        "ctx": {"error": str(exc)},
                    }
                ]
            ) from None
        try:
            return model.model_validate({} if data is None else data)
        except ValidationError as exc:
            raise RequestValidationError(
                [
                    {**error, "loc": ("body", *error["loc"])}
                    for error in exc.errors(include_url=False)
                ]
            ) from None

    return parse


StoreDep = Annotated[TaskStore, Depends(get_store)]
TaskCreateBody = Annotated[TaskCreate, Depends(json_body(TaskCreate))]
TaskUpdateBody = Annotated[TaskUpdate, Depends(json_body(TaskUpdate))]


@router.get("", include_in_schema=False)
@router.get("/")
def list_tasks(store: StoreDep) -> list[Task]:
    return store.list_all()


@router.post("", status_code=status.HTTP_201_CREATED, include_in_schema=False)
@router.post("/", status_code=status.HTTP_201_CREATED)
def create_task(payload: TaskCreateBody, store: StoreDep) -> Task:
    # Timestamps are left to the database and not re-fetched.
    task_id = store.create(payload.task, payload.completed)
    logger.info("Created task %d", task_id)
    return Task(id=task_id, task=payload.task, completed=payload.completed)


@router.put("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_task(task_id: int, payload: TaskUpdateBody, store: StoreDep) -> Response:
    store.set_completed(task_id, payload.completed)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: int, store: StoreDep) -> Response:
    store.delete(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
