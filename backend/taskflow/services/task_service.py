"""
Task Lifecycle Engine

Creates, lists, assigns, updates and deletes tasks, enforcing who may do what.
Every mutation is committed before its events are published; event delivery
never changes the outcome of an operation.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.exceptions import (
    AuthorizationError,
    InvalidAssigneeError,
    TaskNotFoundError,
)
from taskflow.core.logging_config import logger
from taskflow.core.types import utcnow
from taskflow.models.task import Task, TaskPriority, TaskStatus
from taskflow.schemas.task import SortOrder, TaskCreate, TaskResponse, TaskView
from taskflow.services import task_filters
from taskflow.services.task_events import (
    NullEventSink,
    TaskAssigned,
    TaskCreated,
    TaskDeleted,
    TaskEventSink,
    TaskFinished,
    TaskUpdated,
)
from taskflow.services.task_store import TaskStore
from taskflow.services.task_updates import AssigneeUpdate, marks_completed, update_for_role
from taskflow.services.user_service import UserService


ALREADY_ASSIGNED_MESSAGE = "User is already assigned to this task"
ASSIGNED_MESSAGE = "Task assigned successfully"


def task_payload(task: Task) -> Dict[str, Any]:
    return TaskResponse.from_model(task).to_payload()


class TaskService:
    """Task operations for one request, bound to its session"""

    def __init__(self, db: AsyncSession, events: Optional[TaskEventSink] = None):
        self.db = db
        self.store = TaskStore(db)
        self.users = UserService(db)
        self.events = events or NullEventSink()

    async def get_task(self, task_id: str) -> Task:
        task = await self.store.get(str(task_id))
        if task is None:
            raise TaskNotFoundError(str(task_id))
        return task

    async def create_task(self, data: TaskCreate, creator_id: str) -> Task:
        task = await self.store.create(
            creator_id=creator_id,
            title=data.title,
            description=data.description,
            status=data.status,
            priority=data.priority,
            due_date=data.due_date,
        )
        logger.log_task_event("created", task.id, creator_id)

        await self.events.publish(TaskCreated(task=task_payload(task)))
        return task

    async def list_tasks(
        self,
        principal_id: str,
        view: TaskView,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        sort: SortOrder = SortOrder.ASC,
    ) -> List[Task]:
        where = [task_filters.view_predicate(view, principal_id, utcnow())]
        where.extend(task_filters.exact_filters(status=status, priority=priority))
        return await self.store.find(where, task_filters.due_date_order(sort))

    async def assign_task(self, task_id: str, target_user_id: str,
                          requester_id: str) -> Tuple[Task, bool, str]:
        """
        Add target_user_id to the task's assignees.

        Returns (task, already_assigned, message). Repeating an assignment is a
        no-op that reports already_assigned=True and sends nothing.
        """
        task = await self.get_task(task_id)
        if not task.is_creator(requester_id):
            raise AuthorizationError("Not authorized: only the task creator can assign this task")

        requester = await self.users.get(requester_id)
        if not await self.users.exists(target_user_id):
            raise InvalidAssigneeError(str(target_user_id))

        added = await self.store.add_assignee(task.id, str(target_user_id))
        task = await self.get_task(task.id)

        if not added:
            return task, True, ALREADY_ASSIGNED_MESSAGE

        requester_name = requester.name if requester else "Someone"
        logger.log_task_event("assigned", task.id, requester_id, assignee_id=str(target_user_id))

        await self.events.publish(TaskAssigned(
            task_id=str(task.id),
            assignee_id=str(target_user_id),
            assigned_by=requester_name,
            message=f"{requester_name} assigned you a task: {task.title}",
        ))
        await self.events.publish(TaskUpdated(task=task_payload(task)))
        return task, False, ASSIGNED_MESSAGE

    async def update_task(self, task_id: str, requester_id: str, fields: Dict[str, Any]) -> Task:
        task = await self.get_task(task_id)
        update = update_for_role(task, requester_id, fields)

        # Re-check the role in the UPDATE itself so a concurrent unassign or
        # delete between the read above and the write cannot slip through.
        if isinstance(update, AssigneeUpdate):
            condition = task_filters.is_assignee(requester_id)
        else:
            condition = task_filters.created_by(requester_id)

        if not await self.store.update(task.id, update.values(), condition):
            if await self.store.get(task.id) is None:
                raise TaskNotFoundError(str(task_id))
            raise AuthorizationError("You are not authorized to update this task")

        task = await self.get_task(task.id)
        logger.log_task_event("updated", task.id, requester_id, fields=sorted(fields))

        await self.events.publish(TaskUpdated(task=task_payload(task)))
        if marks_completed(update):
            await self.events.publish(TaskFinished(
                task_id=str(task.id),
                creator_id=str(task.creator_id),
                message=f'Task "{task.title}" has been marked as completed',
            ))
        return task

    async def delete_task(self, task_id: str, requester_id: str) -> str:
        task = await self.get_task(task_id)
        if not task.is_creator(requester_id):
            raise AuthorizationError("Not authorized: only the task creator can delete this task")

        task_id = str(task.id)
        if not await self.store.delete(task_id):
            raise TaskNotFoundError(task_id)

        logger.log_task_event("deleted", task_id, requester_id)
        await self.events.publish(TaskDeleted(task_id=task_id))
        return task_id
