"""
Connection registry: which Socket.IO connection currently represents each online user.

One registration per user is tracked and the most recent connection wins, so a
user connected from two tabs only receives live events on the newer one.

Two implementations share the same narrow interface:
- ``ConnectionRegistry`` keeps the mapping in process memory (single worker).
- ``RedisConnectionRegistry`` keeps it in Redis so every worker attached to the
  same Socket.IO message queue resolves the same connection id.

The application owns exactly one registry, stored under
``app.extensions["connection_registry"]``; use ``get_connection_registry()``
inside a request or socket handler.
"""

from __future__ import annotations

import logging
from typing import Optional

import redis
from flask import current_app


class ConnectionRegistry:
    def __init__(self) -> None:
        self._connections: dict[int, str] = {}

    def register(self, user_id: int, connection_id: str) -> None:
        """Point ``user_id`` at ``connection_id``, replacing any earlier connection."""
        self._connections[int(user_id)] = connection_id

    def unregister(self, user_id: int, connection_id: Optional[str] = None) -> bool:
        """Drop the registration for ``user_id``.

        When ``connection_id`` is given the entry is only removed if it still
        points at that connection. Returns True when an entry was removed.
        """
        key = int(user_id)
        current = self._connections.get(key)
        if current is None:
            return False
        if connection_id is not None and current != connection_id:
            return False
        del self._connections[key]
        return True

    def lookup(self, user_id: int) -> Optional[str]:
        return self._connections.get(int(user_id))

    def __len__(self) -> int:
        return len(self._connections)


class RedisConnectionRegistry:
    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @staticmethod
    def _key(user_id: int) -> str:
        return f"user:socket:{int(user_id)}"

    def register(self, user_id: int, connection_id: str) -> None:
        # No expiry: entries leave only through unregister or a newer register
        self._client.set(self._key(user_id), connection_id)

    def unregister(self, user_id: int, connection_id: Optional[str] = None) -> bool:
        key = self._key(user_id)
        if connection_id is None:
            return bool(self._client.delete(key))
        # Only evict when the stored connection is the one going away
        with self._client.pipeline() as pipe:
            try:
                pipe.watch(key)
                if pipe.get(key) != connection_id:
                    pipe.unwatch()
                    return False
                pipe.multi()
                pipe.delete(key)
                pipe.execute()
                return True
            except redis.WatchError:
                logging.debug("unregister: registry entry for user %s changed concurrently", user_id)
                return False

    def lookup(self, user_id: int) -> Optional[str]:
        return self._client.get(self._key(user_id))


def get_connection_registry() -> ConnectionRegistry | RedisConnectionRegistry:
    """Return the registry owned by the current application."""
    return current_app.extensions["connection_registry"]


__all__ = ["ConnectionRegistry", "RedisConnectionRegistry", "get_connection_registry"]
