"""Pydantic schemas for tasks"""
from pydantic import AfterValidator, Field, ConfigDict, StringConstraints, model_validator
from typing import Annotated, Optional, List, Dict, Any
from datetime import datetime
from enum import Enum

from taskflow.core.types import to_naive_utc
from taskflow.models.task import TaskStatus, TaskPriority, TITLE_MAX_LENGTH
from taskflow.schemas.base import CamelModel


class TaskView(str, Enum):
    """Dashboard views over the task collection"""
    MINE = "mine"
    CREATED = "created"
    ASSIGNED = "assigned"
    OVERDUE = "overdue"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _clean_title(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("title must not be empty")
    return value


TitleStr = Annotated[str, StringConstraints(max_length=TITLE_MAX_LENGTH), AfterValidator(_clean_title)]
DueDate = Annotated[datetime, AfterValidator(to_naive_utc)]


# ==================== Requests ====================

class TaskCreate(CamelModel):
    """
    Create a new task.

    `todo` is the older name of `title`; it is read only when `title` is absent.
    """
    title: Optional[TitleStr] = None
    todo: Optional[TitleStr] = Field(None, description="Legacy alias for title")
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[DueDate] = None

    @model_validator(mode="after")
    def resolve_title(self):
        if self.title is None:
            self.title = self.todo
        if self.title is None:
            raise ValueError("title is required")
        self.todo = None
        return self


class TaskUpdate(CamelModel):
    """Partial update; only the fields present in the body are applied"""
    title: Optional[TitleStr] = None
    todo: Optional[TitleStr] = Field(None, description="Legacy alias for title")
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[DueDate] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        for name in ("title", "todo", "status", "priority"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly present in the request, keyed by model attribute"""
        changes = {name: getattr(self, name) for name in self.model_fields_set}
        if "todo" in changes:
            legacy = changes.pop("todo")
            changes.setdefault("title", legacy)
        return changes


class TaskAssignRequest(CamelModel):
    target_user_id: str = Field(..., min_length=1)


# ==================== Responses ====================

class TaskResponse(CamelModel):
    """Full task object, also the payload of TASK_CREATED / TASK_UPDATED"""
    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    creator_id: str
    assigned_to: List[str] = []
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, task) -> "TaskResponse":
        return cls(
            id=str(task.id),
            title=task.title,
            description=task.description,
            status=task.status,
            priority=task.priority,
            due_date=task.due_date,
            creator_id=str(task.creator_id),
            assigned_to=[str(user_id) for user_id in task.assignee_ids],
            created_at=task.created_at,
            updated_at=task.updated_at,
        )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class TaskListResponse(CamelModel):
    tasks: List[TaskResponse]
    total: int


class TaskAssignResponse(CamelModel):
    message: str
    already_assigned: bool = False
    task: TaskResponse


class TaskDeleteResponse(CamelModel):
    message: str
    task_id: str
