"""Request-scoped service construction.

Handlers open their own sessions, so building services per request is cheap;
tests replace these providers through ``app.dependency_overrides``.
"""

from fastapi import Request

from taskmanager.db_handlers import TaskDBHandler, TaskHistoryDBHandler, UserDBHandler
from taskmanager.services import TaskHistoryService, UserService


def get_task_history_service() -> TaskHistoryService:
    return TaskHistoryService(
        task_history_handler=TaskHistoryDBHandler(),
        user_handler=UserDBHandler(),
        task_handler=TaskDBHandler(),
    )


def get_user_service(request: Request) -> UserService:
    task_history_handler = TaskHistoryDBHandler()
    user_handler = UserDBHandler()
    return UserService(
        user_handler=user_handler,
        task_history_handler=task_history_handler,
        task_history_service=TaskHistoryService(
            task_history_handler=task_history_handler,
            user_handler=user_handler,
            task_handler=TaskDBHandler(),
        ),
        password_hasher=request.app.state.password_hasher,
        token_service=request.app.state.token_service,
    )
