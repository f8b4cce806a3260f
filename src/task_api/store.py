"""Task persistence.

Every operation is a single parameterized statement run in its own short
transaction on a connection checked out from the shared pool.
"""

import logging

from sqlalchemy import Engine, text

from task_api.schemas import Task


logger = logging.getLogger(__name__)

_INSERT_TASK = text("INSERT INTO tasks (task, completed) VALUES (:task, :completed) RETURNING id")
_SELECT_TASKS = text("SELECT id, task, completed, created_at, updated_at FROM tasks ORDER BY id")
_UPDATE_COMPLETED = text("UPDATE tasks SET completed = :completed WHERE id = :id")
_DELETE_TASK = text("DELETE FROM tasks WHERE id = :id")


class TaskStore:
    """Raw-SQL access to the ``tasks`` table.

    Driver failures surface unchanged as ``sqlalchemy.exc.SQLAlchemyError``.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def create(self, task: str, completed: bool) -> int:
        """Insert a row and return the id the database assigned to it."""
        with self._engine.begin() as conn:
            result = conn.execute(_INSERT_TASK, {"task": task, "completed": completed})
            task_id = result.scalar_one()
        return int(task_id)

    def list_all(self) -> list[Task]:
        with self._engine.connect() as conn:
            rows = conn.execute(_SELECT_TASKS).all()
        return [Task.model_validate(row._asdict()) for row in rows]

    def set_completed(self, task_id: int, completed: bool) -> int:
        """Set the completion flag; returns the number of rows touched (0 or 1)."""
        with self._engine.begin() as conn:
            result = conn.execute(_UPDATE_COMPLETED, {"id": task_id, "completed": completed})
            rowcount = result.rowcount
        if rowcount == 0:
            logger.debug("Update matched no task with id %d", task_id)
        return rowcount

    def delete(self, task_id: int) -> int:
        with self._engine.begin() as conn:
            rowcount = conn.execute(_DELETE_TASK, {"id": task_id}).rowcount
        if rowcount == 0:
            logger.debug("Delete matched no task with id %d", task_id)
        return rowcount
