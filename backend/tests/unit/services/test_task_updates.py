"""
Unit Tests for role-tagged task updates
"""
import pytest

from taskflow.core.exceptions import AuthorizationError, ValidationError
from taskflow.models.task import Task, TaskAssignee, TaskPriority, TaskStatus
from taskflow.services.task_updates import (
    AssigneeUpdate,
    CreatorUpdate,
    marks_completed,
    update_for_role,
)


@pytest.fixture
def task():
    task = Task(id="task-1", creator_id="alice", title="Draft")
    task.assignees = [TaskAssignee(task_id="task-1", user_id="bob")]
    return task


class TestUpdateForRole:

    def test_creator_may_change_anything(self, task):
        fields = {"title": "Final", "priority": TaskPriority.HIGH, "status": TaskStatus.IN_PROGRESS}
        update = update_for_role(task, "alice", fields)

        assert isinstance(update, CreatorUpdate)
        assert update.values() == fields

    def test_assignee_may_change_status(self, task):
        update = update_for_role(task, "bob", {"status": TaskStatus.COMPLETED})

        assert isinstance(update, AssigneeUpdate)
        assert update.values() == {"status": TaskStatus.COMPLETED}

    def test_assignee_with_extra_field_is_rejected_whole(self, task):
        with pytest.raises(AuthorizationError) as exc:
            update_for_role(task, "bob", {"status": TaskStatus.COMPLETED, "title": "Hijacked"})

        assert "may only" in exc.value.message

    def test_assignee_without_status_is_rejected(self, task):
        with pytest.raises(AuthorizationError):
            update_for_role(task, "bob", {"priority": TaskPriority.LOW})

    def test_outsider_is_rejected(self, task):
        with pytest.raises(AuthorizationError) as exc:
            update_for_role(task, "mallory", {"status": TaskStatus.COMPLETED})

        assert "not authorized" in exc.value.message

    def test_empty_update_is_invalid(self, task):
        with pytest.raises(ValidationError):
            update_for_role(task, "alice", {})

    def test_unknown_field_is_invalid(self, task):
        with pytest.raises(ValidationError):
            update_for_role(task, "alice", {"creator_id": "bob"})


def test_marks_completed():
    assert marks_completed(AssigneeUpdate(status=TaskStatus.COMPLETED))
    assert marks_completed(CreatorUpdate(fields={"status": TaskStatus.COMPLETED, "title": "x"}))
    assert not marks_completed(CreatorUpdate(fields={"title": "x"}))
    assert not marks_completed(AssigneeUpdate(status=TaskStatus.IN_PROGRESS))
