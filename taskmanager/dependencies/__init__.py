from taskmanager.dependencies.auth import (
    get_current_principal,
    get_token_service,
    require_roles,
)
from taskmanager.dependencies.services import (
    get_task_history_service,
    get_user_service,
)

__all__ = [
    "get_current_principal",
    "get_token_service",
    "require_roles",
    "get_task_history_service",
    "get_user_service",
]
