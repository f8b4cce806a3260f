from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TaskCreate(BaseModel):
    # Missing fields keep their zero value; a wrong JSON type is a decode error.
    model_config = ConfigDict(strict=True, extra="ignore")

    task: str = ""
    completed: bool = False


class TaskUpdate(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    completed: bool = False


class Task(BaseModel):
    id: int
    task: str
    completed: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
