"""
Tests for the chat service layer.

This module tests the services the realtime gateway delegates to:
- ConversationService: create/get, listing, authorization
- MessageService: paging, send, mark read, delete

Test Organization:
    - Each service method has its own test class
    - Tests use descriptive names following: test_<scenario>_<expected_outcome>

Testing Philosophy:
    Tests focus on observable behavior: returned objects, database state
    and the error codes of raised core.exceptions.
"""

import uuid
from datetime import datetime, timedelta, timezone as dt_timezone

import pytest
from freezegun import freeze_time

from authentication.tests.factories import UserFactory
from chat.models import Conversation, Message, MessageType
from chat.services import ConversationService, MessageService
from chat.tests.factories import ConversationFactory, MessageFactory
from core.exceptions import NotFoundError, PermissionDeniedError

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=dt_timezone.utc)


def send_at(minutes, caller, conversation, content="hi", **kwargs):
    """Send a message with a deterministic timestamp."""
    with freeze_time(BASE_TIME + timedelta(minutes=minutes)):
        return MessageService.send_message(
            caller.id, conversation.id, content=content, **kwargs
        )


# =============================================================================
# ConversationService
# =============================================================================


class TestCreateOrGetConversation:
    """Tests for ConversationService.create_or_get_conversation()."""

    def test_creates_conversation_with_caller_and_participants(self, alice, bob):
        conversation = ConversationService.create_or_get_conversation(
            alice.id, [bob.id]
        )

        assert set(conversation.participants.all()) == {alice, bob}

    def test_same_pair_in_either_order_returns_same_conversation(self, alice, bob):
        """
        Why it matters: two users must always land in the same 1:1
        conversation, whoever starts it.
        """
        first = ConversationService.create_or_get_conversation(alice.id, [bob.id])
        second = ConversationService.create_or_get_conversation(bob.id, [alice.id])
        third = ConversationService.create_or_get_conversation(
            str(alice.id), [str(bob.id)]
        )

        assert first.id == second.id == third.id
        assert Conversation.objects.count() == 1

    def test_duplicates_and_caller_in_list_are_collapsed(self, alice, bob):
        conversation = ConversationService.create_or_get_conversation(
            alice.id, [bob.id, bob.id, alice.id]
        )

        assert conversation.participants.count() == 2

    def test_pair_lookup_ignores_larger_conversations(self, alice, bob, carol):
        """A group containing the pair is not the pair's conversation."""
        group = ConversationService.create_or_get_conversation(
            alice.id, [bob.id, carol.id]
        )

        pair = ConversationService.create_or_get_conversation(alice.id, [bob.id])

        assert pair.id != group.id
        assert pair.participants.count() == 2

    def test_groups_are_never_deduplicated(self, alice, bob, carol):
        first = ConversationService.create_or_get_conversation(
            alice.id, [bob.id, carol.id]
        )
        second = ConversationService.create_or_get_conversation(
            alice.id, [bob.id, carol.id]
        )

        assert first.id != second.id

    def test_unknown_participant_raises_user_not_found(self, alice):
        with pytest.raises(NotFoundError) as exc_info:
            ConversationService.create_or_get_conversation(alice.id, [uuid.uuid4()])

        assert exc_info.value.error_code == "USER_NOT_FOUND"
        assert Conversation.objects.count() == 0

    def test_malformed_participant_id_raises_user_not_found(self, alice):
        with pytest.raises(NotFoundError) as exc_info:
            ConversationService.create_or_get_conversation(alice.id, ["nope"])

        assert exc_info.value.error_code == "USER_NOT_FOUND"


class TestListConversationsFor:
    """Tests for ConversationService.list_conversations_for()."""

    def test_only_callers_conversations_most_recent_first(self, alice, bob, carol):
        with freeze_time(BASE_TIME):
            with_bob = ConversationFactory(participants=[alice, bob])
            with_carol = ConversationFactory(participants=[alice, carol])
            ConversationFactory(participants=[bob, carol])

        send_at(5, alice, with_bob)

        conversations = ConversationService.list_conversations_for(alice.id)

        assert [c.id for c in conversations] == [with_bob.id, with_carol.id]

    def test_latest_message_is_newest_by_created_at(self, alice, bob, conversation):
        send_at(1, alice, conversation, "first")
        newest = send_at(3, bob, conversation, "third")
        send_at(2, alice, conversation, "second")

        (listed,) = ConversationService.list_conversations_for(alice.id)

        assert listed.latest_message.id == newest.id

    def test_latest_message_is_none_without_messages(self, alice, conversation):
        (listed,) = ConversationService.list_conversations_for(alice.id)

        assert listed.latest_message is None


class TestGetConversationDetail:
    """Tests for ConversationService.get_conversation_detail()."""

    def test_participant_gets_conversation(self, alice, bob, conversation):
        detail = ConversationService.get_conversation_detail(bob.id, conversation.id)

        assert detail.id == conversation.id
        assert set(detail.participants.all()) == {alice, bob}

    def test_non_participant_is_forbidden(self, carol, conversation):
        with pytest.raises(PermissionDeniedError) as exc_info:
            ConversationService.get_conversation_detail(carol.id, conversation.id)

        assert exc_info.value.error_code == "NOT_PARTICIPANT"

    @pytest.mark.parametrize("conversation_id", [uuid.uuid4(), "not-a-uuid"])
    def test_missing_conversation_is_not_found_for_anyone(
        self, carol, conversation_id
    ):
        """NotFound wins over Forbidden when the conversation is absent."""
        with pytest.raises(NotFoundError) as exc_info:
            ConversationService.get_conversation_detail(carol.id, conversation_id)

        assert exc_info.value.error_code == "CONVERSATION_NOT_FOUND"


class TestGetOtherParticipant:
    """Tests for ConversationService.get_other_participant()."""

    def test_returns_counterpart(self, alice, bob, conversation):
        other = ConversationService.get_other_participant

        assert other(alice.id, conversation.id) == bob
        assert other(bob.id, conversation.id) == alice

    def test_alone_in_conversation(self, alice):
        solo = ConversationFactory(participants=[alice])

        with pytest.raises(NotFoundError) as exc_info:
            ConversationService.get_other_participant(alice.id, solo.id)

        assert exc_info.value.message == "Other user not found"


class TestConversationIdsFor:
    def test_returns_string_ids_of_memberships(self, alice, bob, carol, conversation):
        other = ConversationFactory(participants=[alice, carol])
        ConversationFactory(participants=[bob, carol])

        ids = ConversationService.conversation_ids_for(alice.id)

        assert sorted(ids) == sorted([str(conversation.id), str(other.id)])


# =============================================================================
# MessageService
# =============================================================================


class TestListMessages:
    """Tests for MessageService.list_messages()."""

    @pytest.fixture
    def history(self, alice, bob, conversation):
        """Seven messages, one minute apart, alternating senders."""
        return [
            send_at(i, alice if i % 2 == 0 else bob, conversation, f"m{i}")
            for i in range(7)
        ]

    def test_first_page_is_most_recent_in_chronological_order(
        self, alice, conversation, history
    ):
        page = MessageService.list_messages(alice.id, conversation.id, limit=3)

        assert [m.content for m in page] == ["m4", "m5", "m6"]

    def test_pages_tile_the_descending_history(self, alice, conversation, history):
        """
        Why it matters: clients scroll back by increasing offset; pages
        must neither overlap nor skip messages.
        """
        pages = [
            MessageService.list_messages(
                alice.id, conversation.id, limit=3, offset=offset
            )
            for offset in (0, 3, 6)
        ]

        descending = [m.content for m in reversed(history)]
        chunks = [descending[i : i + 3] for i in range(0, 7, 3)]
        assert [[m.content for m in reversed(page)] for page in pages] == chunks

    def test_default_limit_is_fifty(self, alice, bob, conversation):
        with freeze_time(BASE_TIME):
            MessageFactory.create_batch(55, conversation=conversation, sender=bob)

        page = MessageService.list_messages(alice.id, conversation.id)

        assert len(page) == 50

    def test_limit_is_capped(self, alice, bob, conversation):
        with freeze_time(BASE_TIME):
            MessageFactory.create_batch(105, conversation=conversation, sender=bob)

        page = MessageService.list_messages(alice.id, conversation.id, limit=500)

        assert len(page) == 100

    def test_non_participant_is_forbidden(self, carol, conversation):
        with pytest.raises(PermissionDeniedError):
            MessageService.list_messages(carol.id, conversation.id)


class TestSendMessage:
    """Tests for MessageService.send_message()."""

    def test_persists_message_from_caller(self, alice, conversation):
        message = MessageService.send_message(alice.id, conversation.id, "Hello")

        assert message.sender == alice
        assert message.content == "Hello"
        assert message.message_type == MessageType.TEXT
        assert message.is_read is False

    def test_moves_last_message_and_bumps_updated_at(self, alice, conversation):
        with freeze_time(BASE_TIME):
            conversation.save()

        message = send_at(30, alice, conversation)

        conversation.refresh_from_db()
        assert conversation.last_message_id == message.id
        assert conversation.updated_at == BASE_TIME + timedelta(minutes=30)

    def test_image_message(self, alice, conversation):
        message = MessageService.send_message(
            alice.id,
            conversation.id,
            message_type=MessageType.IMAGE,
            image_url="uploads/cat.png",
        )

        assert message.is_image_message is True
        assert message.image_url == "uploads/cat.png"

    def test_non_participant_cannot_send(self, carol, conversation):
        with pytest.raises(PermissionDeniedError):
            MessageService.send_message(carol.id, conversation.id, "intrusion")

        assert Message.objects.count() == 0


class TestMarkRead:
    """Tests for MessageService.mark_read()."""

    def test_recipient_marks_read_idempotently(self, alice, bob, conversation):
        message = MessageFactory(conversation=conversation, sender=alice)

        first = MessageService.mark_read(bob.id, message.id)
        second = MessageService.mark_read(bob.id, message.id)

        assert first.is_read is True
        assert second.is_read is True

    def test_sender_reading_own_message_is_a_no_op(self, alice, conversation):
        message = MessageFactory(conversation=conversation, sender=alice)

        result = MessageService.mark_read(alice.id, message.id)

        message.refresh_from_db()
        assert result.is_read is False
        assert message.is_read is False

    def test_non_participant_is_forbidden(self, alice, carol, conversation):
        message = MessageFactory(conversation=conversation, sender=alice)

        with pytest.raises(PermissionDeniedError) as exc_info:
            MessageService.mark_read(carol.id, message.id)

        assert exc_info.value.error_code == "NOT_PARTICIPANT"

    def test_missing_message(self, bob):
        with pytest.raises(NotFoundError) as exc_info:
            MessageService.mark_read(bob.id, uuid.uuid4())

        assert exc_info.value.error_code == "MESSAGE_NOT_FOUND"


class TestDeleteMessage:
    """Tests for MessageService.delete_message()."""

    def test_sender_deletes_permanently(self, alice, conversation):
        message = MessageService.send_message(alice.id, conversation.id, "oops")

        MessageService.delete_message(alice.id, message.id)

        assert not Message.objects.filter(id=message.id).exists()
        conversation.refresh_from_db()
        assert conversation.last_message_id is None

    def test_non_sender_is_forbidden_and_message_survives(
        self, alice, bob, conversation
    ):
        message = MessageFactory(conversation=conversation, sender=alice)

        with pytest.raises(PermissionDeniedError) as exc_info:
            MessageService.delete_message(bob.id, message.id)

        assert exc_info.value.error_code == "NOT_SENDER"
        assert Message.objects.filter(id=message.id).exists()

    def test_missing_message(self, alice):
        with pytest.raises(NotFoundError):
            MessageService.delete_message(alice.id, uuid.uuid4())
