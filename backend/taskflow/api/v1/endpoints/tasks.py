"""
Task endpoints

Static paths (/created, /assigned, /overdue, /assign/{id}) are declared before
/{task_id} so they are never captured as an id.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Optional

from taskflow.api.deps import get_task_service
from taskflow.modules.auth.dependencies import get_current_user_id
from taskflow.models.task import TaskPriority, TaskStatus
from taskflow.schemas.task import (
    SortOrder,
    TaskAssignRequest,
    TaskAssignResponse,
    TaskCreate,
    TaskDeleteResponse,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
    TaskView,
)
from taskflow.services.task_service import TaskService


router = APIRouter()


async def _list_view(
    view: TaskView,
    user_id: str,
    tasks: TaskService,
    task_status: Optional[TaskStatus],
    priority: Optional[TaskPriority],
    sort: SortOrder,
) -> TaskListResponse:
    found = await tasks.list_tasks(user_id, view, status=task_status, priority=priority, sort=sort)
    return TaskListResponse(
        tasks=[TaskResponse.from_model(task) for task in found],
        total=len(found)
    )


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service)
):
    task = await tasks.create_task(data, user_id)
    return TaskResponse.from_model(task)


@router.get("", response_model=TaskListResponse)
async def list_my_tasks(
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = Query(None),
    sort: SortOrder = Query(SortOrder.ASC),
    user_id: str = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service)
):
    """Every task the caller created or is assigned to"""
    return await _list_view(TaskView.MINE, user_id, tasks, task_status, priority, sort)


@router.get("/created", response_model=TaskListResponse)
async def list_created_tasks(
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = Query(None),
    sort: SortOrder = Query(SortOrder.ASC),
    user_id: str = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service)
):
    """Tasks the caller created"""
    return await _list_view(TaskView.CREATED, user_id, tasks, task_status, priority, sort)


@router.get("/assigned", response_model=TaskListResponse)
async def list_assigned_tasks(
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = Query(None),
    sort: SortOrder = Query(SortOrder.ASC),
    user_id: str = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service)
):
    """Tasks assigned to the caller by someone else"""
    return await _list_view(TaskView.ASSIGNED, user_id, tasks, task_status, priority, sort)


@router.get("/overdue", response_model=TaskListResponse)
async def list_overdue_tasks(
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = Query(None),
    sort: SortOrder = Query(SortOrder.ASC),
    user_id: str = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service)
):
    """Unfinished tasks past their due date that the caller created or is assigned to"""
    return await _list_view(TaskView.OVERDUE, user_id, tasks, task_status, priority, sort)


@router.patch("/assign/{task_id}", response_model=TaskAssignResponse)
async def assign_task(
    task_id: str,
    body: TaskAssignRequest,
    user_id: str = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service)
):
    task, already_assigned, message = await tasks.assign_task(task_id, body.target_user_id, user_id)
    return TaskAssignResponse(
        message=message,
        already_assigned=already_assigned,
        task=TaskResponse.from_model(task)
    )


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service)
):
    return TaskResponse.from_model(await tasks.get_task(task_id))


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    user_id: str = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service)
):
    task = await tasks.update_task(task_id, user_id, body.changes())
    return TaskResponse.from_model(task)


@router.delete("/{task_id}", response_model=TaskDeleteResponse)
async def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service)
):
    deleted_id = await tasks.delete_task(task_id, user_id)
    return TaskDeleteResponse(message="Task deleted successfully", task_id=deleted_id)
