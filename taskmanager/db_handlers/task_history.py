from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskmanager.db_handlers.base import BaseDBHandler, check_local_db
from taskmanager.models.task import Task
from taskmanager.models.task_history import TaskHistory
from taskmanager.utils.logger import setup_logger

logger = setup_logger("db_handlers.task_history")


class TaskHistoryDBHandler(BaseDBHandler[TaskHistory]):
    """Persistence for the user → history and history → finished task relations."""

    def __init__(self):
        super().__init__(TaskHistory)

    @check_local_db
    async def create_for_user(
        self, user_id: int, *, db: AsyncSession = None
    ) -> TaskHistory:
        """Create the empty history that belongs to a new user."""
        history = await self.create({"user_id": user_id}, db=db)
        await db.refresh(history, attribute_names=["finished_tasks"])
        return history

    @check_local_db
    async def get_by_user_id(
        self, user_id: int, *, db: AsyncSession = None
    ) -> TaskHistory | None:
        return await self.get_by_attributes(
            user_id=user_id,
            options=[selectinload(TaskHistory.finished_tasks)],
            db=db,
        )

    @check_local_db
    async def get_all_histories(self, *, db: AsyncSession = None) -> list[TaskHistory]:
        return await self.get_multi(
            options=[selectinload(TaskHistory.finished_tasks)], db=db
        )

    @check_local_db
    async def add_finished_task(
        self, user_id: int, task_id: int, *, db: AsyncSession = None
    ) -> Task | None:
        """
        Mark a task done and link it to the user's history in one transaction.

        Returns None when either the history or the task does not exist.
        """
        history = await self.get_by_user_id(user_id, db=db)
        task = await db.get(Task, task_id)
        if history is None or task is None:
            return None

        task.done = True
        task.end_date = datetime.now(UTC)
        if task not in history.finished_tasks:
            history.finished_tasks.append(task)
        await db.flush()
        await db.refresh(task)

        logger.debug(f"Task {task_id} added to history of user {user_id}")
        return task

    @check_local_db
    async def delete_by_user_id(self, user_id: int, *, db: AsyncSession = None) -> bool:
        stmt = delete(TaskHistory).where(TaskHistory.user_id == user_id)
        result = await db.execute(stmt)
        return result.rowcount > 0
