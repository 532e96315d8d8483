"""
Database models for the task manager.

Architecture: User → TaskHistory → finished Tasks; User → Tasks.
"""

from taskmanager.models.task import Task
from taskmanager.models.task_history import TaskHistory, task_history_finished_tasks
from taskmanager.models.user import Role, User

__all__ = [
    "User",
    "Role",
    "Task",
    "TaskHistory",
    "task_history_finished_tasks",
]
