"""
Serializers for the realtime chat protocol.

This module provides serializers for the chat system:
- Inbound event payloads (validated before any service call)
- Outbound conversation and message payloads (camelCase on the wire)

Serializer Hierarchy:
    ConversationCreateSerializer: conversation:create payload
    ConversationRefSerializer: conversation:join payload
    MessagesQuerySerializer: messages:get payload with paging
    MessageSendSerializer: message:send payload
    MessageRefSerializer: message:read / message:delete payload
    TypingSerializer: typing:start / typing:stop payload

    MessageSerializer: Message with sender profile
    ConversationSerializer: Conversation with participant profiles
    ConversationListSerializer: Adds the latest message for listings

Design Decisions:
    - Read and write serializers are separate for clarity
    - Identifiers are emitted as strings so payloads survive the channel
      layer's msgpack encoding
"""

from __future__ import annotations

from rest_framework import serializers

from authentication.serializers import UserPublicSerializer
from chat.constants import MESSAGE_CONFIG
from chat.models import Conversation, Message, MessageType


# =============================================================================
# Inbound Payloads
# =============================================================================


class ConversationCreateSerializer(serializers.Serializer):
    """Payload of conversation:create."""

    participantIds = serializers.ListField(
        child=serializers.UUIDField(),
        min_length=1,
        help_text="Users to include besides the caller",
    )


class ConversationRefSerializer(serializers.Serializer):
    """Payload naming a single conversation."""

    conversationId = serializers.UUIDField()


class MessagesQuerySerializer(ConversationRefSerializer):
    """Payload of messages:get."""

    limit = serializers.IntegerField(
        min_value=1,
        max_value=MESSAGE_CONFIG.MAX_PAGE_SIZE,
        required=False,
        default=MESSAGE_CONFIG.DEFAULT_PAGE_SIZE,
    )
    offset = serializers.IntegerField(min_value=0, required=False, default=0)


class MessageSendSerializer(ConversationRefSerializer):
    """
    Payload of message:send.

    Text messages need non-blank content; image messages need imageUrl
    and may carry a caption.
    """

    content = serializers.CharField(
        max_length=MESSAGE_CONFIG.MAX_CONTENT_LENGTH,
        required=False,
        allow_blank=True,
        default="",
        trim_whitespace=False,
    )
    type = serializers.ChoiceField(
        choices=MessageType.choices,
        required=False,
        default=MessageType.TEXT,
    )
    imageUrl = serializers.CharField(
        max_length=MESSAGE_CONFIG.MAX_IMAGE_URL_LENGTH,
        required=False,
        allow_blank=True,
        allow_null=True,
        default=None,
    )

    def validate(self, attrs: dict) -> dict:
        """Check content/imageUrl against the message type."""
        if attrs["type"] == MessageType.TEXT and not attrs["content"].strip():
            raise serializers.ValidationError(
                {"content": "Message content cannot be empty"}
            )
        if attrs["type"] == MessageType.IMAGE and not attrs.get("imageUrl"):
            raise serializers.ValidationError(
                {"imageUrl": "Image messages require imageUrl"}
            )
        return attrs


class MessageRefSerializer(serializers.Serializer):
    """Payload naming a single message."""

    messageId = serializers.UUIDField()


class TypingSerializer(ConversationRefSerializer):
    """Payload of typing:start / typing:stop."""

    isTyping = serializers.BooleanField(required=False)


# =============================================================================
# Outbound Payloads
# =============================================================================


class MessageSerializer(serializers.ModelSerializer):
    """
    Message payload for acks and message:new.

    Output:
        {id, conversationId, senderId, sender, content, type, imageUrl,
         isRead, createdAt, updatedAt}
    """

    id = serializers.UUIDField(read_only=True)
    conversationId = serializers.UUIDField(source="conversation_id", read_only=True)
    senderId = serializers.UUIDField(source="sender_id", read_only=True)
    sender = UserPublicSerializer(read_only=True)
    type = serializers.CharField(source="message_type", read_only=True)
    imageUrl = serializers.SerializerMethodField()
    isRead = serializers.BooleanField(source="is_read", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "conversationId",
            "senderId",
            "sender",
            "content",
            "type",
            "imageUrl",
            "isRead",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields

    def get_imageUrl(self, obj: Message) -> str | None:
        return obj.image_url or None


class ConversationSerializer(serializers.ModelSerializer):
    """
    Conversation payload with resolved participants.

    Output:
        {id, participants: [user], lastMessageId, createdAt, updatedAt}
    """

    id = serializers.UUIDField(read_only=True)
    participants = UserPublicSerializer(many=True, read_only=True)
    lastMessageId = serializers.UUIDField(
        source="last_message_id", read_only=True, allow_null=True
    )
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Conversation
        fields = ["id", "participants", "lastMessageId", "createdAt", "updatedAt"]
        read_only_fields = fields


class ConversationListSerializer(ConversationSerializer):
    """
    Conversation payload for conversations:get.

    lastMessage is the newest message attached by
    ConversationService.list_conversations_for (null when empty).
    """

    lastMessage = serializers.SerializerMethodField()

    class Meta(ConversationSerializer.Meta):
        fields = ConversationSerializer.Meta.fields + ["lastMessage"]
        read_only_fields = fields

    def get_lastMessage(self, obj: Conversation) -> dict | None:
        latest = getattr(obj, "latest_message", None)
        if latest is None:
            return None
        return MessageSerializer(latest).data
