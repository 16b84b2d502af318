"""
Predicates and ordering for the dashboard views.

Every helper returns a SQLAlchemy expression; the Task Store composes them into
a single SELECT so a view is always one round trip.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import and_, exists, or_, select

from taskflow.models.task import Task, TaskAssignee, TaskPriority, TaskStatus
from taskflow.schemas.task import SortOrder, TaskView


def is_assignee(user_id: str):
    """EXISTS (the user is in the task's assignee set)"""
    return exists(
        select(TaskAssignee.task_id).where(
            and_(TaskAssignee.task_id == Task.id, TaskAssignee.user_id == user_id)
        )
    )


def created_by(user_id: str):
    return Task.creator_id == user_id


def involving(user_id: str):
    """Created by or assigned to the user"""
    return or_(created_by(user_id), is_assignee(user_id))


def assigned_to(user_id: str):
    # A task the user created never shows up as "assigned to me",
    # even when they added themselves to the assignee set.
    return and_(is_assignee(user_id), Task.creator_id != user_id)


def overdue_for(user_id: str, now: datetime):
    return and_(
        involving(user_id),
        Task.due_date.is_not(None),
        Task.due_date < now,
        Task.status != TaskStatus.COMPLETED,
    )


def view_predicate(view: TaskView, user_id: str, now: datetime):
    if view == TaskView.MINE:
        return involving(user_id)
    if view == TaskView.CREATED:
        return created_by(user_id)
    if view == TaskView.ASSIGNED:
        return assigned_to(user_id)
    if view == TaskView.OVERDUE:
        return overdue_for(user_id, now)
    raise ValueError(f"Unknown task view: {view}")


def exact_filters(status: Optional[TaskStatus] = None, priority: Optional[TaskPriority] = None) -> list:
    clauses = []
    if status is not None:
        clauses.append(Task.status == status)
    if priority is not None:
        clauses.append(Task.priority == priority)
    return clauses


def due_date_order(order: SortOrder = SortOrder.ASC) -> list:
    """
    Order by due date. Tasks without a due date sort as if they were due
    infinitely late: last when ascending, first when descending.
    """
    if order == SortOrder.DESC:
        return [Task.due_date.desc().nulls_first(), Task.created_at.desc()]
    return [Task.due_date.asc().nulls_last(), Task.created_at.asc()]
