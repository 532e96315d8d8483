# Task-history service: role-scoped reads and the "finish a task" transition

from taskmanager.db_handlers import TaskDBHandler, TaskHistoryDBHandler, UserDBHandler
from taskmanager.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
)
from taskmanager.models import Role, Task, TaskHistory
from taskmanager.schemas import Principal
from taskmanager.utils.logger import setup_logger

logger = setup_logger("task_history_service")


class TaskHistoryService:
    def __init__(
        self,
        task_history_handler: TaskHistoryDBHandler,
        user_handler: UserDBHandler,
        task_handler: TaskDBHandler,
    ):
        self.task_history_handler = task_history_handler
        self.user_handler = user_handler
        self.task_handler = task_handler

    async def _get_own_user_id(self, principal: Principal) -> int:
        user = await self.user_handler.get_user_by_username(principal.username)
        if user is None:
            raise NotFoundError(f"No user found with username: {principal.username}.")
        return user.id

    async def get_task_histories(self, principal: Principal) -> list[TaskHistory]:
        """Admins see every history, users only their own."""
        if principal.role == Role.ADMIN:
            return await self.task_history_handler.get_all_histories()
        if principal.role == Role.USER:
            user_id = await self._get_own_user_id(principal)
            history = await self.task_history_handler.get_by_user_id(user_id)
            if history is None:
                raise NotFoundError(f"No task history found for user {user_id}.")
            return [history]
        raise UnauthorizedError()

    async def get_task_history_for_user(
        self, user_id: int, principal: Principal
    ) -> TaskHistory:
        if principal.role == Role.USER:
            if await self._get_own_user_id(principal) != user_id:
                raise UnauthorizedError()
        elif principal.role != Role.ADMIN:
            raise UnauthorizedError()

        history = await self.task_history_handler.get_by_user_id(user_id)
        if history is None:
            raise NotFoundError(f"No task history found for user {user_id}.")
        return history

    async def finish_task(self, task_id: int, principal: Principal) -> Task:
        """
        Mark a task finished and record it in its owner's history.

        Users may only finish their own tasks; admins may finish anyone's.
        """
        if principal.role not in (Role.ADMIN, Role.USER):
            raise UnauthorizedError()

        task = await self.task_handler.get(task_id)
        if task is None:
            raise NotFoundError(f"Task with id {task_id} does not exist.")

        if principal.role != Role.ADMIN:
            if await self._get_own_user_id(principal) != task.owner_id:
                logger.warning(
                    f"User '{principal.username}' tried to finish task {task_id} owned by user {task.owner_id}"
                )
                raise UnauthorizedError()

        if task.done:
            raise ConflictError(f"Task with id {task_id} is already finished.")

        finished = await self.task_history_handler.add_finished_task(
            task.owner_id, task_id
        )
        if finished is None:
            raise NotFoundError(f"No task history found for user {task.owner_id}.")

        logger.info(f"Task {task_id} finished by '{principal.username}'")
        return finished

    async def delete_task_history_from_user(self, user_id: int) -> None:
        deleted = await self.task_history_handler.delete_by_user_id(user_id)
        if not deleted:
            # Users created before histories existed, or a failed signup
            logger.warning(f"User {user_id} had no task history to delete")
