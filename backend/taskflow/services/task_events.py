"""
Domain events emitted by the task engine.

The engine only knows the TaskEventSink protocol. In the running app the sink
is a TaskNotificationListener that turns events into push notifications; tests
plug in a recording sink instead.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Union

from taskflow.core.logging_config import logger


@dataclass(frozen=True)
class TaskCreated:
    task: Dict[str, Any]


@dataclass(frozen=True)
class TaskUpdated:
    task: Dict[str, Any]


@dataclass(frozen=True)
class TaskAssigned:
    task_id: str
    assignee_id: str
    assigned_by: str
    message: str


@dataclass(frozen=True)
class TaskFinished:
    task_id: str
    creator_id: str
    message: str


@dataclass(frozen=True)
class TaskDeleted:
    task_id: str


TaskEvent = Union[TaskCreated, TaskUpdated, TaskAssigned, TaskFinished, TaskDeleted]


class TaskEventSink(Protocol):
    async def publish(self, event: TaskEvent) -> None:
        ...


class NullEventSink:
    """Drops every event"""

    async def publish(self, event: TaskEvent) -> None:
        return None


@dataclass
class RecordingEventSink:
    """Keeps events in memory, in emission order"""

    events: List[TaskEvent] = field(default_factory=list)

    async def publish(self, event: TaskEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type) -> List[TaskEvent]:
        return [event for event in self.events if isinstance(event, event_type)]


class TaskNotificationListener:
    """
    Maps task events onto notification events.

    Delivery is best effort: a failing dispatcher is logged and never reaches
    the caller, whose mutation is already committed.
    """

    def __init__(self, dispatcher):
        self.dispatcher = dispatcher

    async def publish(self, event: TaskEvent) -> None:
        # Imported here to keep the events module free of transport imports
        from taskflow.services.notification_dispatcher import NotificationEvent

        try:
            if isinstance(event, TaskCreated):
                await self.dispatcher.broadcast(NotificationEvent.TASK_CREATED, event.task)
            elif isinstance(event, TaskUpdated):
                await self.dispatcher.broadcast(NotificationEvent.TASK_UPDATED, event.task)
            elif isinstance(event, TaskAssigned):
                await self.dispatcher.notify(
                    event.assignee_id,
                    NotificationEvent.TASK_ASSIGNED,
                    {
                        "message": event.message,
                        "taskId": event.task_id,
                        "assignedBy": event.assigned_by,
                    },
                )
            elif isinstance(event, TaskFinished):
                await self.dispatcher.notify(
                    event.creator_id,
                    NotificationEvent.TASK_FINISHED,
                    {"message": event.message, "taskId": event.task_id},
                )
            elif isinstance(event, TaskDeleted):
                await self.dispatcher.broadcast(
                    NotificationEvent.TASK_DELETED, {"taskId": event.task_id}
                )
        except Exception as e:
            logger.log_error_with_context(e, context=f"notify {type(event).__name__}")


def build_listener(dispatcher: Optional[Any]) -> TaskEventSink:
    if dispatcher is None:
        return NullEventSink()
    return TaskNotificationListener(dispatcher)
