"""
Role-tagged task updates.

An update request is turned into exactly one of two shapes before it reaches
the store, so the field-level rules live here and nowhere else:

- CreatorUpdate: any subset of the editable fields
- AssigneeUpdate: status only
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Union

from taskflow.core.exceptions import AuthorizationError, ValidationError
from taskflow.models.task import Task, TaskStatus


EDITABLE_FIELDS = frozenset({"title", "description", "status", "priority", "due_date"})


@dataclass(frozen=True)
class CreatorUpdate:
    fields: Dict[str, Any] = field(default_factory=dict)

    def values(self) -> Dict[str, Any]:
        return dict(self.fields)


@dataclass(frozen=True)
class AssigneeUpdate:
    status: TaskStatus

    @classmethod
    def from_fields(cls, fields: Dict[str, Any]) -> "AssigneeUpdate":
        # All-or-nothing: one disallowed field rejects the whole request
        if set(fields) != {"status"}:
            raise AuthorizationError("Assignees may only change the status of a task")
        return cls(status=fields["status"])

    def values(self) -> Dict[str, Any]:
        return {"status": self.status}


TaskUpdateCommand = Union[CreatorUpdate, AssigneeUpdate]


def update_for_role(task: Task, requester_id: str, fields: Dict[str, Any]) -> TaskUpdateCommand:
    """Pick the update shape the requester is entitled to, or raise"""
    is_creator = task.is_creator(requester_id)
    if not is_creator and not task.is_assignee(requester_id):
        raise AuthorizationError("You are not authorized to update this task")

    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
    if not fields:
        raise ValidationError("No fields to update")

    if is_creator:
        return CreatorUpdate(fields=dict(fields))
    return AssigneeUpdate.from_fields(fields)


def marks_completed(update: TaskUpdateCommand) -> bool:
    return update.values().get("status") == TaskStatus.COMPLETED
