"""
Unit Tests for NotificationDispatcher
"""
import asyncio

import pytest

from taskflow.services.connection_registry import ConnectionRegistry
from taskflow.services.notification_dispatcher import NotificationDispatcher, NotificationEvent


class FakeHub:
    """Records sends; connection ids listed in `broken` raise on write"""

    def __init__(self, connections=(), broken=()):
        self.connections = set(connections)
        self.broken = set(broken)
        self.sent = []
        self.detached = []

    async def send(self, connection_id, event_type, data):
        if connection_id in self.broken:
            raise RuntimeError("socket closed")
        if connection_id not in self.connections:
            return False
        self.sent.append((connection_id, event_type, data))
        return True

    async def detach(self, connection_id):
        self.detached.append(connection_id)
        self.connections.discard(connection_id)


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.mark.asyncio
class TestNotify:

    async def test_delivers_to_resolved_connection(self, registry):
        hub = FakeHub(connections={"conn-a"})
        registry.register("user-1", "conn-a")
        dispatcher = NotificationDispatcher(registry, hub)

        delivered = await dispatcher.notify("user-1", NotificationEvent.TASK_FINISHED, {"taskId": "t1"})

        assert delivered is True
        assert hub.sent == [("conn-a", "TASK_FINISHED", {"taskId": "t1"})]

    async def test_offline_principal_is_skipped(self, registry):
        hub = FakeHub()
        dispatcher = NotificationDispatcher(registry, hub)

        delivered = await dispatcher.notify("user-1", NotificationEvent.TASK_ASSIGNED, {})

        assert delivered is False
        assert hub.sent == []

    async def test_send_failure_is_absorbed_and_connection_dropped(self, registry):
        hub = FakeHub(connections={"conn-a"}, broken={"conn-a"})
        registry.register("user-1", "conn-a")
        dispatcher = NotificationDispatcher(registry, hub)

        delivered = await dispatcher.notify("user-1", NotificationEvent.TASK_ASSIGNED, {})

        assert delivered is False
        assert registry.resolve("user-1") is None
        assert hub.detached == ["conn-a"]

    async def test_registry_entry_without_socket_is_cleaned_up(self, registry):
        hub = FakeHub()
        registry.register("user-1", "conn-gone")
        dispatcher = NotificationDispatcher(registry, hub)

        assert await dispatcher.notify("user-1", NotificationEvent.TASK_UPDATED, {}) is False
        assert registry.resolve("user-1") is None


@pytest.mark.asyncio
class TestBroadcast:

    async def test_reaches_every_registered_principal(self, registry):
        hub = FakeHub(connections={"conn-a", "conn-b", "conn-c"})
        registry.register("user-1", "conn-a")
        registry.register("user-2", "conn-b")
        registry.register("user-3", "conn-c")
        dispatcher = NotificationDispatcher(registry, hub)

        delivered = await dispatcher.broadcast(NotificationEvent.TASK_DELETED, {"taskId": "t1"})

        assert delivered == 3
        assert {conn for conn, _, _ in hub.sent} == {"conn-a", "conn-b", "conn-c"}

    async def test_one_broken_connection_does_not_stop_the_rest(self, registry):
        hub = FakeHub(connections={"conn-a", "conn-b"}, broken={"conn-a"})
        registry.register("user-1", "conn-a")
        registry.register("user-2", "conn-b")
        dispatcher = NotificationDispatcher(registry, hub)

        delivered = await dispatcher.broadcast(NotificationEvent.TASK_CREATED, {"id": "t1"})

        assert delivered == 1
        assert hub.sent == [("conn-b", "TASK_CREATED", {"id": "t1"})]
        assert registry.resolve("user-1") is None

    async def test_no_connections(self, registry):
        dispatcher = NotificationDispatcher(registry, FakeHub())
        assert await dispatcher.broadcast(NotificationEvent.TASK_CREATED, {}) == 0


class GatedHub(FakeHub):
    """conn-a's write blocks until conn-b has been written to"""

    def __init__(self):
        super().__init__(connections={"conn-a", "conn-b"})
        self.b_sent = asyncio.Event()

    async def send(self, connection_id, event_type, data):
        if connection_id == "conn-a":
            await self.b_sent.wait()
        sent = await super().send(connection_id, event_type, data)
        if connection_id == "conn-b":
            self.b_sent.set()
        return sent


@pytest.mark.asyncio
async def test_broadcast_does_not_wait_on_a_slow_connection(registry):
    hub = GatedHub()
    registry.register("user-1", "conn-a")
    registry.register("user-2", "conn-b")
    dispatcher = NotificationDispatcher(registry, hub)

    delivered = await asyncio.wait_for(
        dispatcher.broadcast(NotificationEvent.TASK_UPDATED, {"id": "t1"}), timeout=2
    )

    assert delivered == 2
    assert [conn for conn, _, _ in hub.sent] == ["conn-b", "conn-a"]
