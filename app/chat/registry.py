"""
In-memory connection registry for presence and typing state.

The registry is owned by the realtime gateway (chat.consumers) and mutated
only from the event loop thread, so plain sets are enough. Nothing here is
persisted; a restart starts from empty maps.

State:
    presence: user id -> channel names of that user's open sockets
    typing: conversation id -> user ids currently typing there

A user is online iff they hold at least one connection. All identifiers are
normalized to strings so UUID objects and their text form compare equal.

Usage:
    from chat.registry import connection_registry

    if connection_registry.register(user_id, self.channel_name):
        ...  # first connection, announce user:online

    result = connection_registry.unregister(user_id, self.channel_name)
    if result.went_offline:
        ...  # announce user:offline
    for conversation_id in result.stopped_typing:
        ...  # announce typing:stop
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Unregistration:
    """
    Outcome of removing a connection.

    Attributes:
        went_offline: True iff the removed connection was the user's last
        stopped_typing: Conversations the user was typing in, now cleared
    """

    went_offline: bool = False
    stopped_typing: list[str] = field(default_factory=list)


class ConnectionRegistry:
    """Tracks open connections per user and typing users per conversation."""

    def __init__(self):
        self._presence: dict[str, set[str]] = {}
        self._typing: dict[str, set[str]] = {}

    def register(self, user_id, connection_id) -> bool:
        """
        Record an open connection.

        Returns:
            True if this is the user's first connection (offline -> online)
        """
        connections = self._presence.setdefault(str(user_id), set())
        was_offline = not connections
        connections.add(str(connection_id))
        return was_offline

    def unregister(self, user_id, connection_id) -> Unregistration:
        """
        Forget a connection and purge the user's typing state.

        Typing is cleared on every disconnect, not only the last one: the
        closing socket may have been the one that was typing, and there is
        no per-connection typing record to tell otherwise.
        """
        user_id = str(user_id)
        went_offline = False

        connections = self._presence.get(user_id)
        if connections is not None and str(connection_id) in connections:
            connections.discard(str(connection_id))
            if not connections:
                del self._presence[user_id]
                went_offline = True

        stopped_typing = []
        for conversation_id, typing_users in list(self._typing.items()):
            if user_id in typing_users:
                typing_users.discard(user_id)
                stopped_typing.append(conversation_id)
                if not typing_users:
                    del self._typing[conversation_id]

        return Unregistration(went_offline=went_offline, stopped_typing=stopped_typing)

    def connections_of(self, user_id) -> frozenset[str]:
        """Snapshot of the user's open connections (empty if offline)."""
        return frozenset(self._presence.get(str(user_id), ()))

    def is_online(self, user_id) -> bool:
        return bool(self._presence.get(str(user_id)))

    def online_user_ids(self) -> list[str]:
        """Snapshot of every user with at least one open connection."""
        return [user_id for user_id, conns in self._presence.items() if conns]

    def set_typing(self, conversation_id, user_id) -> bool:
        """
        Mark user as typing in a conversation.

        Returns:
            True if the user was not already marked
        """
        typing_users = self._typing.setdefault(str(conversation_id), set())
        if str(user_id) in typing_users:
            return False
        typing_users.add(str(user_id))
        return True

    def clear_typing(self, conversation_id, user_id) -> bool:
        """
        Remove a typing mark.

        Returns:
            True if the user was marked and the mark was removed
        """
        conversation_id = str(conversation_id)
        typing_users = self._typing.get(conversation_id)
        if not typing_users or str(user_id) not in typing_users:
            return False
        typing_users.discard(str(user_id))
        if not typing_users:
            del self._typing[conversation_id]
        return True

    def typing_in(self, conversation_id) -> frozenset[str]:
        """Snapshot of users typing in a conversation."""
        return frozenset(self._typing.get(str(conversation_id), ()))


# Process-wide registry used by the gateway
connection_registry = ConnectionRegistry()
