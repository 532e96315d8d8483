from __future__ import annotations

from taskmanager.db_handlers.base import BaseDBHandler
from taskmanager.models.task import Task


class TaskDBHandler(BaseDBHandler[Task]):
    """Read access to tasks; task CRUD is owned elsewhere."""

    def __init__(self):
        super().__init__(Task)
