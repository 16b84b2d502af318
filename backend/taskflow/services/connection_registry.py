"""
Connection Registry - principal id -> live connection id.

At most one entry per principal; registering again replaces the previous
connection (last connected wins). All access goes through one lock because
entries are touched both from the event loop and from threadpool workers.

Known limitation: the map lives in process memory, so notifications only reach
clients connected to the same worker.
"""

import threading
from typing import Dict, Optional


class ConnectionRegistry:

    def __init__(self):
        self._connections: Dict[str, str] = {}
        self._lock = threading.Lock()

    def register(self, principal_id: str, connection_id: str) -> Optional[str]:
        """Map principal to connection; returns the connection it replaced, if any"""
        with self._lock:
            previous = self._connections.get(principal_id)
            self._connections[principal_id] = connection_id
        return previous

    def unregister(self, principal_id: str, connection_id: Optional[str] = None) -> bool:
        """
        Remove the principal's entry.

        With connection_id given, the entry is only removed while it still points
        at that connection, so a stale socket closing cannot evict its successor.
        """
        with self._lock:
            current = self._connections.get(principal_id)
            if current is None:
                return False
            if connection_id is not None and current != connection_id:
                return False
            del self._connections[principal_id]
        return True

    def resolve(self, principal_id: str) -> Optional[str]:
        with self._lock:
            return self._connections.get(principal_id)

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._connections)

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __contains__(self, principal_id: str) -> bool:
        return self.resolve(principal_id) is not None
