"""
Tests for the in-memory connection registry.

The gateway announces presence and typing changes based solely on what
these methods report, so each transition must be reported exactly once.
"""

import uuid

from chat.registry import ConnectionRegistry, Unregistration


class TestPresence:
    """register / unregister / connections_of."""

    def test_first_connection_reports_online(self):
        registry = ConnectionRegistry()

        assert registry.register("u1", "c1") is True
        assert registry.is_online("u1") is True

    def test_second_connection_is_not_a_transition(self):
        registry = ConnectionRegistry()
        registry.register("u1", "c1")

        assert registry.register("u1", "c2") is False
        assert registry.connections_of("u1") == frozenset({"c1", "c2"})

    def test_offline_reported_once_after_last_connection(self):
        """
        Why it matters: user:offline is broadcast on this flag; a user with
        another open device must stay online.
        """
        registry = ConnectionRegistry()
        registry.register("u1", "c1")
        registry.register("u1", "c2")

        first = registry.unregister("u1", "c1")
        assert first.went_offline is False
        assert registry.is_online("u1") is True

        second = registry.unregister("u1", "c2")
        assert second.went_offline is True
        assert registry.is_online("u1") is False

        again = registry.unregister("u1", "c2")
        assert again == Unregistration(went_offline=False, stopped_typing=[])

    def test_unknown_connection_does_not_take_user_offline(self):
        registry = ConnectionRegistry()
        registry.register("u1", "c1")

        result = registry.unregister("u1", "other")

        assert result.went_offline is False
        assert registry.connections_of("u1") == frozenset({"c1"})

    def test_connections_of_is_a_snapshot(self):
        registry = ConnectionRegistry()
        registry.register("u1", "c1")

        snapshot = registry.connections_of("u1")
        registry.register("u1", "c2")

        assert snapshot == frozenset({"c1"})
        assert registry.connections_of("missing") == frozenset()

    def test_online_user_ids(self):
        registry = ConnectionRegistry()
        registry.register("u1", "c1")
        registry.register("u2", "c2")
        registry.unregister("u2", "c2")

        assert registry.online_user_ids() == ["u1"]

    def test_uuid_and_string_ids_are_the_same_user(self):
        registry = ConnectionRegistry()
        user_id = uuid.uuid4()

        registry.register(user_id, "c1")

        assert registry.register(str(user_id), "c2") is False
        assert registry.online_user_ids() == [str(user_id)]


class TestTyping:
    """set_typing / clear_typing / typing_in."""

    def test_clear_reports_change_only_once(self):
        registry = ConnectionRegistry()

        assert registry.set_typing("conv", "u1") is True
        assert registry.clear_typing("conv", "u1") is True
        assert registry.clear_typing("conv", "u1") is False

    def test_set_is_idempotent(self):
        registry = ConnectionRegistry()

        assert registry.set_typing("conv", "u1") is True
        assert registry.set_typing("conv", "u1") is False
        assert registry.typing_in("conv") == frozenset({"u1"})

    def test_clear_without_entry(self):
        registry = ConnectionRegistry()

        assert registry.clear_typing("conv", "u1") is False

    def test_unregister_purges_typing_everywhere(self):
        registry = ConnectionRegistry()
        registry.register("u1", "c1")
        registry.set_typing("conv-a", "u1")
        registry.set_typing("conv-b", "u1")
        registry.set_typing("conv-b", "u2")

        result = registry.unregister("u1", "c1")

        assert sorted(result.stopped_typing) == ["conv-a", "conv-b"]
        assert registry.typing_in("conv-a") == frozenset()
        assert registry.typing_in("conv-b") == frozenset({"u2"})

    def test_unregister_purges_typing_even_when_still_online(self):
        registry = ConnectionRegistry()
        registry.register("u1", "c1")
        registry.register("u1", "c2")
        registry.set_typing("conv", "u1")

        result = registry.unregister("u1", "c1")

        assert result.went_offline is False
        assert result.stopped_typing == ["conv"]
