"""
Unit Tests for Task Schemas
"""
import pytest
from datetime import datetime
from pydantic import ValidationError

from taskflow.models.task import TaskPriority, TaskStatus
from taskflow.schemas.task import TaskCreate, TaskUpdate, TaskAssignRequest


class TestTaskCreate:

    def test_defaults(self):
        task = TaskCreate(title="Write report")

        assert task.title == "Write report"
        assert task.description is None
        assert task.status == TaskStatus.TODO
        assert task.priority == TaskPriority.MEDIUM
        assert task.due_date is None

    def test_legacy_todo_field_used_when_title_absent(self):
        task = TaskCreate.model_validate({"todo": "Buy milk"})
        assert task.title == "Buy milk"

    def test_title_wins_over_legacy_todo(self):
        task = TaskCreate.model_validate({"title": "New name", "todo": "Old name"})
        assert task.title == "New name"

    def test_missing_title_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate.model_validate({"description": "no title"})

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate(title="   ")

    def test_title_is_stripped(self):
        assert TaskCreate(title="  padded  ").title == "padded"

    def test_over_long_title_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate(title="x" * 201)

    def test_camel_case_wire_names(self):
        task = TaskCreate.model_validate({
            "title": "Ship",
            "status": "In-Progress",
            "priority": "High",
            "dueDate": "2030-01-01T12:00:00Z",
        })

        assert task.status == TaskStatus.IN_PROGRESS
        assert task.priority == TaskPriority.HIGH
        # Stored as naive UTC
        assert task.due_date == datetime(2030, 1, 1, 12, 0, 0)

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate.model_validate({"title": "x", "status": "Done"})


class TestTaskUpdate:

    def test_only_present_fields_are_changes(self):
        update = TaskUpdate.model_validate({"status": "Completed"})
        assert update.changes() == {"status": TaskStatus.COMPLETED}

    def test_explicit_null_description_is_a_change(self):
        update = TaskUpdate.model_validate({"description": None})
        assert update.changes() == {"description": None}

    def test_legacy_todo_maps_to_title(self):
        update = TaskUpdate.model_validate({"todo": "Renamed"})
        assert update.changes() == {"title": "Renamed"}

    def test_null_status_rejected(self):
        with pytest.raises(ValidationError):
            TaskUpdate.model_validate({"status": None})

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            TaskUpdate.model_validate({"creatorId": "someone-else"})

    def test_empty_body_has_no_changes(self):
        assert TaskUpdate.model_validate({}).changes() == {}


def test_assign_request_accepts_camel_and_snake_case():
    assert TaskAssignRequest.model_validate({"targetUserId": "u1"}).target_user_id == "u1"
    assert TaskAssignRequest.model_validate({"target_user_id": "u1"}).target_user_id == "u1"

    with pytest.raises(ValidationError):
        TaskAssignRequest.model_validate({"targetUserId": ""})
