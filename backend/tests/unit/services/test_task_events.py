"""
Unit Tests for TaskNotificationListener
"""
import pytest

from taskflow.services.notification_dispatcher import NotificationEvent
from taskflow.services.task_events import (
    NullEventSink,
    TaskAssigned,
    TaskCreated,
    TaskDeleted,
    TaskFinished,
    TaskNotificationListener,
    TaskUpdated,
    build_listener,
)


class FakeDispatcher:

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    async def notify(self, principal_id, event, payload):
        if self.fail:
            raise RuntimeError("transport down")
        self.calls.append(("notify", principal_id, event, payload))
        return True

    async def broadcast(self, event, payload):
        if self.fail:
            raise RuntimeError("transport down")
        self.calls.append(("broadcast", None, event, payload))
        return 1


@pytest.mark.asyncio
class TestTaskNotificationListener:

    async def test_created_is_broadcast(self):
        dispatcher = FakeDispatcher()
        listener = TaskNotificationListener(dispatcher)

        await listener.publish(TaskCreated(task={"id": "t1"}))

        assert dispatcher.calls == [("broadcast", None, NotificationEvent.TASK_CREATED, {"id": "t1"})]

    async def test_updated_is_broadcast(self):
        dispatcher = FakeDispatcher()
        await TaskNotificationListener(dispatcher).publish(TaskUpdated(task={"id": "t1"}))

        assert dispatcher.calls[0][0] == "broadcast"
        assert dispatcher.calls[0][2] == NotificationEvent.TASK_UPDATED

    async def test_assigned_targets_assignee(self):
        dispatcher = FakeDispatcher()
        await TaskNotificationListener(dispatcher).publish(TaskAssigned(
            task_id="t1", assignee_id="bob", assigned_by="Alice", message="Alice assigned you a task: X"
        ))

        assert dispatcher.calls == [(
            "notify",
            "bob",
            NotificationEvent.TASK_ASSIGNED,
            {"message": "Alice assigned you a task: X", "taskId": "t1", "assignedBy": "Alice"},
        )]

    async def test_finished_targets_creator(self):
        dispatcher = FakeDispatcher()
        await TaskNotificationListener(dispatcher).publish(TaskFinished(
            task_id="t1", creator_id="alice", message="done"
        ))

        assert dispatcher.calls == [
            ("notify", "alice", NotificationEvent.TASK_FINISHED, {"message": "done", "taskId": "t1"})
        ]

    async def test_deleted_carries_only_the_id(self):
        dispatcher = FakeDispatcher()
        await TaskNotificationListener(dispatcher).publish(TaskDeleted(task_id="t1"))

        assert dispatcher.calls == [("broadcast", None, NotificationEvent.TASK_DELETED, {"taskId": "t1"})]

    async def test_dispatch_failure_never_reaches_caller(self):
        listener = TaskNotificationListener(FakeDispatcher(fail=True))

        # Must not raise
        await listener.publish(TaskDeleted(task_id="t1"))
        await listener.publish(TaskFinished(task_id="t1", creator_id="alice", message="done"))


def test_build_listener_without_dispatcher():
    assert isinstance(build_listener(None), NullEventSink)
    assert isinstance(build_listener(FakeDispatcher()), TaskNotificationListener)
