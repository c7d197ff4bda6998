"""
Chat system service layer.

This module provides the business logic for the chat system, encapsulating
all operations on conversations and messages. It has no knowledge of
sockets, rooms or presence; the realtime gateway calls it and fans out the
results.

Services:
    ConversationService: Create/get, list and authorize conversations
    MessageService: Page, send, mark read and delete messages

Design Principles:
    - Services are stateless (use class methods)
    - Every operation takes the caller's user id and authorizes it
    - Domain failures raise core.exceptions (NotFoundError before
      PermissionDeniedError); callers turn them into ServiceResult envelopes
    - Multi-row writes run inside BaseService.atomic()

Usage:
    from chat.services import ConversationService, MessageService

    conversation = ConversationService.create_or_get_conversation(
        caller_id=user.id,
        participant_ids=[other.id],
    )

    message = MessageService.send_message(
        caller_id=user.id,
        conversation_id=conversation.id,
        content="Hello!",
    )
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model

from core.exceptions import NotFoundError, PermissionDeniedError
from core.services import BaseService

from chat.constants import MESSAGE_CONFIG
from chat.models import Conversation, Message, MessageType

if TYPE_CHECKING:
    from authentication.models import User


def _parse_id(value) -> uuid.UUID | None:
    """Coerce an identifier to UUID, None if it is not one."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def _conversation_not_found() -> NotFoundError:
    return NotFoundError("Conversation not found", error_code="CONVERSATION_NOT_FOUND")


def _message_not_found() -> NotFoundError:
    return NotFoundError("Message not found", error_code="MESSAGE_NOT_FOUND")


def _not_participant() -> PermissionDeniedError:
    return PermissionDeniedError(
        "You are not a participant in this conversation",
        error_code="NOT_PARTICIPANT",
    )


class ConversationService(BaseService):
    """
    Service for conversation lifecycle and membership checks.

    Methods:
        create_or_get_conversation: Create, or return the existing pair
        list_conversations_for: User's conversations with their latest message
        get_conversation_detail: Authorized fetch with participants
        get_other_participant: Counterpart's profile for conversation:join
        conversation_ids_for: Ids used to auto-join rooms on connect
    """

    @classmethod
    def create_or_get_conversation(
        cls,
        caller_id,
        participant_ids,
    ) -> Conversation:
        """
        Create a conversation, reusing an existing one for the same pair.

        The participant set is {caller_id} plus participant_ids, with
        duplicates removed. When that set has exactly two users and a
        conversation with exactly those two already exists, it is returned
        instead of creating a second one.

        Args:
            caller_id: User creating the conversation
            participant_ids: Other users to include

        Returns:
            Conversation with participants prefetched

        Raises:
            NotFoundError: USER_NOT_FOUND if any id does not resolve to a user
        """
        ids: list[uuid.UUID] = []
        for raw_id in [caller_id, *participant_ids]:
            parsed = _parse_id(raw_id)
            if parsed is None:
                raise NotFoundError(
                    f"User {raw_id} not found", error_code="USER_NOT_FOUND"
                )
            if parsed not in ids:
                ids.append(parsed)

        User = get_user_model()
        found = set(User.objects.filter(id__in=ids).values_list("id", flat=True))
        missing = [user_id for user_id in ids if user_id not in found]
        if missing:
            raise NotFoundError(
                f"User {missing[0]} not found",
                error_code="USER_NOT_FOUND",
                details={"missing": [str(user_id) for user_id in missing]},
            )

        if len(ids) == 2:
            existing = (
                Conversation.objects.with_exact_participants(ids)
                .prefetch_related("participants")
                .order_by("created_at")
                .first()
            )
            if existing is not None:
                cls.get_logger().debug(
                    f"Reusing conversation {existing.id} for users {ids}"
                )
                return existing

        with cls.atomic():
            conversation = Conversation.objects.create()
            conversation.participants.set(ids)

        cls.get_logger().info(
            f"User {caller_id} created conversation {conversation.id} "
            f"with {len(ids)} participants"
        )

        return Conversation.objects.prefetch_related("participants").get(
            pk=conversation.pk
        )

    @classmethod
    def list_conversations_for(cls, user_id) -> list[Conversation]:
        """
        All conversations of a user, most recently active first.

        Each conversation gets a `latest_message` attribute: the newest of
        its messages by created_at, or None when it has none.
        """
        conversations = list(
            Conversation.objects.for_user(user_id)
            .prefetch_related("participants", "messages__sender")
            .order_by("-updated_at")
        )
        for conversation in conversations:
            messages = list(conversation.messages.all())
            conversation.latest_message = (
                max(messages, key=lambda m: m.created_at) if messages else None
            )
        return conversations

    @classmethod
    def get_conversation_detail(cls, caller_id, conversation_id) -> Conversation:
        """
        Fetch a conversation the caller belongs to.

        Raises:
            NotFoundError: CONVERSATION_NOT_FOUND (checked first)
            PermissionDeniedError: NOT_PARTICIPANT
        """
        parsed = _parse_id(conversation_id)
        if parsed is None:
            raise _conversation_not_found()

        try:
            conversation = Conversation.objects.prefetch_related("participants").get(
                pk=parsed
            )
        except Conversation.DoesNotExist:
            raise _conversation_not_found()

        caller_id = str(caller_id)
        if not any(str(p.id) == caller_id for p in conversation.participants.all()):
            raise _not_participant()

        return conversation

    @classmethod
    def get_other_participant(cls, caller_id, conversation_id) -> User:
        """
        The participant that is not the caller.

        Raises:
            NotFoundError, PermissionDeniedError: as get_conversation_detail
            NotFoundError: USER_NOT_FOUND if the caller is alone in it
        """
        conversation = cls.get_conversation_detail(caller_id, conversation_id)
        for participant in conversation.participants.all():
            if str(participant.id) != str(caller_id):
                return participant
        raise NotFoundError("Other user not found", error_code="USER_NOT_FOUND")

    @classmethod
    def conversation_ids_for(cls, user_id) -> list[str]:
        return [
            str(conversation_id)
            for conversation_id in Conversation.objects.for_user(user_id)
            .order_by()
            .values_list("id", flat=True)
        ]


class MessageService(BaseService):
    """
    Service for message operations.

    Methods:
        list_messages: Page of messages, newest page first, chronological
        send_message: Append a message and move the conversation pointer
        mark_read: Flip is_read for non-senders
        delete_message: Hard delete by the sender
    """

    @classmethod
    def list_messages(
        cls,
        caller_id,
        conversation_id,
        limit: int = MESSAGE_CONFIG.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[Message]:
        """
        Page through a conversation's history.

        Messages are fetched newest-first using limit/offset and then
        reversed, so offset=0 returns the most recent `limit` messages in
        chronological order and increasing offsets walk back in time.

        Raises:
            NotFoundError, PermissionDeniedError: as get_conversation_detail
        """
        conversation = ConversationService.get_conversation_detail(
            caller_id, conversation_id
        )

        limit = max(1, min(int(limit), MESSAGE_CONFIG.MAX_PAGE_SIZE))
        offset = max(0, int(offset))

        page = list(
            Message.objects.in_conversation(conversation.id)
            .select_related("sender")
            .page(limit, offset)
        )
        page.reverse()
        return page

    @classmethod
    def send_message(
        cls,
        caller_id,
        conversation_id,
        content: str = "",
        message_type: str = MessageType.TEXT,
        image_url: str | None = None,
    ) -> Message:
        """
        Append a message to a conversation.

        The message insert, the last_message pointer and the conversation's
        updated_at move together in one transaction.

        Returns:
            Message with sender loaded

        Raises:
            NotFoundError, PermissionDeniedError: as get_conversation_detail
        """
        conversation = ConversationService.get_conversation_detail(
            caller_id, conversation_id
        )

        with cls.atomic():
            message = Message.objects.create(
                conversation=conversation,
                sender_id=_parse_id(caller_id),
                content=content or "",
                message_type=message_type or MessageType.TEXT,
                image_url=image_url or "",
            )

            conversation.last_message = message
            conversation.save(update_fields=["last_message", "updated_at"])

        cls.get_logger().debug(
            f"User {caller_id} sent message {message.id} "
            f"to conversation {conversation.id}"
        )

        return Message.objects.select_related("sender").get(pk=message.pk)

    @classmethod
    def mark_read(cls, caller_id, message_id) -> Message:
        """
        Mark a message read on behalf of the caller.

        Idempotent. A sender reading their own message changes nothing.

        Raises:
            NotFoundError: MESSAGE_NOT_FOUND
            PermissionDeniedError: NOT_PARTICIPANT
        """
        message = cls._get_message(message_id)

        if not message.conversation.has_participant(caller_id):
            raise _not_participant()

        if str(message.sender_id) != str(caller_id) and not message.is_read:
            message.is_read = True
            message.save(update_fields=["is_read", "updated_at"])
            cls.get_logger().debug(f"User {caller_id} read message {message.id}")

        return message

    @classmethod
    def delete_message(cls, caller_id, message_id) -> None:
        """
        Permanently delete a message.

        A conversation pointing at it through last_message is reset to
        null by the foreign key.

        Raises:
            NotFoundError: MESSAGE_NOT_FOUND
            PermissionDeniedError: NOT_SENDER
        """
        message = cls._get_message(message_id)

        if str(message.sender_id) != str(caller_id):
            raise PermissionDeniedError(
                "You can only delete your own messages",
                error_code="NOT_SENDER",
            )

        conversation_id = message.conversation_id
        message.delete()

        cls.get_logger().info(
            f"User {caller_id} deleted message {message_id} "
            f"in conversation {conversation_id}"
        )

    @classmethod
    def _get_message(cls, message_id) -> Message:
        parsed = _parse_id(message_id)
        if parsed is None:
            raise _message_not_found()
        try:
            return Message.objects.select_related("conversation", "sender").get(
                pk=parsed
            )
        except Message.DoesNotExist:
            raise _message_not_found()
