from taskmanager.services.task_history_service import TaskHistoryService
from taskmanager.services.user_service import UserService

__all__ = ["TaskHistoryService", "UserService"]
