"""
Task history API routes.

Exposes each user's record of finished tasks and the transition that marks a
task finished and files it into its owner's history.
"""

from fastapi import APIRouter, Depends

from taskmanager.dependencies import get_current_principal, get_task_history_service
from taskmanager.schemas import Principal, TaskHistoryResponse, TaskResponse
from taskmanager.services import TaskHistoryService

router = APIRouter(prefix="/taskhistory", tags=["Task History"])


@router.get("/", response_model=list[TaskHistoryResponse])
async def get_task_histories(
    principal: Principal = Depends(get_current_principal),
    task_history_service: TaskHistoryService = Depends(get_task_history_service),
):
    histories = await task_history_service.get_task_histories(principal)
    return [TaskHistoryResponse.model_validate(history) for history in histories]


@router.get("/{user_id}", response_model=TaskHistoryResponse)
async def get_task_history_for_user(
    user_id: int,
    principal: Principal = Depends(get_current_principal),
    task_history_service: TaskHistoryService = Depends(get_task_history_service),
):
    history = await task_history_service.get_task_history_for_user(user_id, principal)
    return TaskHistoryResponse.model_validate(history)


@router.put("/finish/{task_id}", response_model=TaskResponse)
async def finish_task(
    task_id: int,
    principal: Principal = Depends(get_current_principal),
    task_history_service: TaskHistoryService = Depends(get_task_history_service),
):
    """Mark a task finished and add it to its owner's history."""
    task = await task_history_service.finish_task(task_id, principal)
    return TaskResponse.model_validate(task)
