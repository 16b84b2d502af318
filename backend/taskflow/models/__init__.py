# Re-export all models for convenient imports
from taskflow.models.user import User
from taskflow.models.task import Task, TaskAssignee, TaskStatus, TaskPriority

__all__ = [
    "User",
    "Task",
    "TaskAssignee",
    "TaskStatus",
    "TaskPriority",
]
