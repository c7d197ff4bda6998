"""
Chat system models.

This module defines the persistent side of the realtime chat:
- Conversations with an unordered participant set
- Messages within a conversation

Models:
    Conversation: Container for messages between participants
    Message: Individual message within a conversation

Design Decisions:
    - A conversation between the same exact pair of users is unique; the
      service layer returns the existing one instead of creating another
    - last_message is a denormalized pointer kept by the service layer in the
      same transaction as the insert; it is cleared if the message is deleted
    - updated_at on Conversation moves on every new message, so ordering by
      it gives a recency-sorted conversation list
    - Messages are immutable except for is_read; deletion is a hard delete
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Count, Q

from core.models import BaseModel, UUIDPrimaryKeyMixin


class MessageType(models.TextChoices):
    """
    Type of message content.

    TEXT: User-authored text message
    IMAGE: Message carrying an image reference in image_url
    """

    TEXT = "text", "Text"
    IMAGE = "image", "Image"


class ConversationQuerySet(models.QuerySet):
    """Membership queries over conversations."""

    def for_user(self, user_id):
        """Conversations the given user participates in."""
        return self.filter(participants__id=user_id).distinct()

    def with_exact_participants(self, user_ids):
        """
        Conversations whose participant set equals user_ids exactly.

        Counts every participant and the ones inside user_ids separately;
        both must equal len(user_ids), so supersets and partial overlaps
        are excluded.
        """
        user_ids = list(user_ids)
        return self.annotate(
            total_participants=Count("participants", distinct=True),
            matched_participants=Count(
                "participants",
                filter=Q(participants__id__in=user_ids),
                distinct=True,
            ),
        ).filter(
            total_participants=len(user_ids),
            matched_participants=len(user_ids),
        )


class MessageQuerySet(models.QuerySet):
    """Ordering and paging over messages."""

    def in_conversation(self, conversation_id):
        return self.filter(conversation_id=conversation_id)

    def newest_first(self):
        return self.order_by("-created_at", "-id")

    def page(self, limit: int, offset: int = 0):
        """
        Slice of the newest-first ordering.

        offset=0 is the most recent `limit` messages.
        """
        return self.newest_first()[offset : offset + limit]


class Conversation(UUIDPrimaryKeyMixin, BaseModel):
    """
    A conversation between two or more users.

    Fields:
        participants: Users belonging to this conversation (unordered set)
        last_message: Most recently sent message (null until the first one)

    Relationships:
        messages: All Message records for this conversation
    """

    participants = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="conversations",
        help_text="Users participating in this conversation",
    )

    last_message = models.ForeignKey(
        "chat.Message",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",  # No reverse accessor needed
        help_text="Most recently sent message (denormalized pointer)",
    )

    objects = ConversationQuerySet.as_manager()

    class Meta:
        db_table = "chat_conversation"
        ordering = ["-updated_at"]
        indexes = [
            # Recency ordering of conversation lists
            models.Index(
                fields=["-updated_at"],
                name="chat_conv_updated_idx",
            ),
        ]

    def __str__(self) -> str:
        """Return human-readable representation."""
        return f"Conversation({self.pk})"

    def has_participant(self, user_id) -> bool:
        """Check whether user_id belongs to this conversation."""
        return self.participants.filter(id=user_id).exists()


class Message(UUIDPrimaryKeyMixin, BaseModel):
    """
    A message within a conversation.

    Read State:
        is_read starts False and flips once a participant other than the
        sender consumes the message. The sender never flips it.

    Fields:
        conversation: Conversation this message belongs to
        sender: User who sent the message
        content: Message text (may be empty for image messages)
        message_type: Type of message (text or image)
        image_url: Media reference for image messages
        is_read: Whether a non-sender participant has read it
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Conversation this message belongs to",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
        help_text="User who sent this message",
    )

    content = models.TextField(
        blank=True,
        default="",
        help_text="Message text",
    )

    message_type = models.CharField(
        max_length=10,
        choices=MessageType.choices,
        default=MessageType.TEXT,
        help_text="Type of message (text or image)",
    )

    image_url = models.CharField(
        max_length=500,
        blank=True,
        default="",
        help_text="Media reference for image messages",
    )

    is_read = models.BooleanField(
        default=False,
        help_text="Whether a participant other than the sender has read it",
    )

    objects = MessageQuerySet.as_manager()

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        indexes = [
            # Messages in a conversation (newest-first paging)
            models.Index(
                fields=["conversation", "-created_at"],
                name="chat_msg_conv_created_idx",
            ),
            # User's messages
            models.Index(
                fields=["sender", "-created_at"],
                name="chat_msg_sender_idx",
            ),
        ]

    def __str__(self) -> str:
        """Return human-readable representation."""
        content_preview = (
            self.content[:50] + "..." if len(self.content) > 50 else self.content
        )
        return f"User {self.sender_id}: {content_preview}"

    @property
    def is_image_message(self) -> bool:
        """Check if this message carries an image."""
        return self.message_type == MessageType.IMAGE
