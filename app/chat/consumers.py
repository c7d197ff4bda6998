"""
WebSocket consumer for the realtime chat gateway.

A single socket per device carries every conversation the user belongs to.
The consumer binds inbound events to the chat service layer, keeps the
connection registry (presence and typing) current, and fans results out
through channel layer groups.

Consumers:
    ChatConsumer: Handles ws/chat/ connections

Authentication:
    JWTAuthMiddleware attaches the user to self.scope["user"] during the
    handshake. A failed handshake is accepted only to deliver an "error"
    event and is then closed with code 4001. If the user's conversations
    cannot be loaded the socket is closed with 1011 and nothing is registered.

Channel Groups:
    conversation.<conversation_id>: one room per conversation
    presence: every authenticated connection, for user:online/user:offline

Frames:
    client -> server: {"event": "message:send", "data": {...}, "id": 7}
    ack:              {"event": "message:send", "id": 7, "ack": {"success": true, ...}}
    push:             {"event": "message:new", "data": {...}}
"""

from __future__ import annotations

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.core.serializers.json import DjangoJSONEncoder
from django.utils import timezone

from authentication.serializers import UserPublicSerializer
from core.exceptions import (
    AuthenticationError,
    BaseApplicationError,
    PermissionDeniedError,
    ValidationError,
)
from core.services import ServiceResult

from chat.constants import GATEWAY_CONFIG, ChatEvent, room_group_name
from chat.registry import connection_registry
from chat.serializers import (
    ConversationCreateSerializer,
    ConversationListSerializer,
    ConversationRefSerializer,
    ConversationSerializer,
    MessageRefSerializer,
    MessageSendSerializer,
    MessageSerializer,
    MessagesQuerySerializer,
    TypingSerializer,
)
from chat.services import ConversationService, MessageService

logger = logging.getLogger(__name__)


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for real-time chat functionality.

    Handles:
        - Handshake authentication outcome and presence registration
        - Auto-joining one room per conversation of the user
        - Conversation and message events (acked to the caller)
        - Typing indicators and read receipts
        - Cleanup and presence/typing broadcasts on disconnect

    Attributes:
        registry: Process-wide ConnectionRegistry
        user_id: Authenticated user id as a string (None until connected)
        rooms: Conversation ids this connection has joined
    """

    registry = connection_registry

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.user = None
        self.user_id: str | None = None
        self.authenticated = False
        self.rooms: set[str] = set()
        self.handlers = {
            ChatEvent.CONVERSATION_CREATE: self.handle_conversation_create,
            ChatEvent.CONVERSATION_JOIN: self.handle_conversation_join,
            ChatEvent.CONVERSATIONS_GET: self.handle_conversations_get,
            ChatEvent.MESSAGES_GET: self.handle_messages_get,
            ChatEvent.MESSAGE_SEND: self.handle_message_send,
            ChatEvent.MESSAGE_READ: self.handle_message_read,
            ChatEvent.MESSAGE_DELETE: self.handle_message_delete,
            ChatEvent.TYPING_START: self.handle_typing_start,
            ChatEvent.TYPING_STOP: self.handle_typing_stop,
            ChatEvent.USERS_GET_ONLINE: self.handle_users_get_online,
        }

    @classmethod
    async def encode_json(cls, content):
        return json.dumps(content, cls=DjangoJSONEncoder)

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    async def connect(self):
        """
        Handle WebSocket connection.

        On success: register the connection, join the presence group and
        every conversation room, then announce user:online if this is the
        user's first connection.
        """
        subprotocol = (
            GATEWAY_CONFIG.TOKEN_SUBPROTOCOL
            if self.scope.get("token_subprotocol")
            else None
        )
        user = self.scope.get("user")

        if user is None or not user.is_authenticated:
            logger.warning(
                f"Rejected unauthenticated chat connection "
                f"({self.scope.get('auth_error') or 'no user'})"
            )
            await self._refuse(
                subprotocol,
                "Authentication failed",
                GATEWAY_CONFIG.CLOSE_CODE_UNAUTHORIZED,
            )
            return

        self.user = user
        self.user_id = str(user.id)

        # Rooms are loaded before the registry sees this connection
        try:
            conversation_ids = await self._conversation_ids()
        except Exception:
            logger.exception(f"Could not load conversations for user {self.user_id}")
            await self._refuse(
                subprotocol,
                "Internal server error",
                GATEWAY_CONFIG.CLOSE_CODE_SERVER_ERROR,
            )
            return

        await self.accept(subprotocol)

        first_connection = self.registry.register(self.user_id, self.channel_name)
        self.authenticated = True

        await self.channel_layer.group_add(
            GATEWAY_CONFIG.PRESENCE_GROUP, self.channel_name
        )
        for conversation_id in conversation_ids:
            await self._join_room(conversation_id)

        if first_connection:
            await self._broadcast_presence(ChatEvent.USER_ONLINE)

        logger.info(
            f"User {self.user_id} connected on {self.channel_name} "
            f"({len(self.rooms)} rooms)"
        )

    async def disconnect(self, close_code):
        """
        Handle WebSocket disconnection.

        Unregisters the connection, announces user:offline on the last one,
        clears typing indicators and leaves every group.
        """
        if not self.authenticated:
            return
        self.authenticated = False

        result = self.registry.unregister(self.user_id, self.channel_name)

        for conversation_id in self.rooms:
            await self.channel_layer.group_discard(
                room_group_name(conversation_id), self.channel_name
            )
        await self.channel_layer.group_discard(
            GATEWAY_CONFIG.PRESENCE_GROUP, self.channel_name
        )

        if result.went_offline:
            await self._broadcast_presence(ChatEvent.USER_OFFLINE)
        for conversation_id in result.stopped_typing:
            await self._broadcast(
                conversation_id,
                ChatEvent.TYPING_STOP,
                {"conversationId": conversation_id, "userId": self.user_id},
            )

        logger.info(
            f"User {self.user_id} disconnected from {self.channel_name} "
            f"(code={close_code}, offline={result.went_offline})"
        )

    # =========================================================================
    # Inbound frames
    # =========================================================================

    async def receive(self, text_data=None, bytes_data=None, **kwargs):
        """Decode a frame, answering malformed ones instead of crashing."""
        try:
            content = await self.decode_json(text_data) if text_data else None
        except ValueError:
            content = None

        if not isinstance(content, dict):
            await self.send_json(
                {"event": ChatEvent.ERROR, "data": {"message": "Invalid frame"}}
            )
            return

        await self.receive_json(content, **kwargs)

    async def receive_json(self, content, **kwargs):
        """
        Dispatch one inbound event and ack it.

        Expected frame format:
            {"event": "message:send", "data": {...}, "id": <any>}
        """
        event = content.get("event")
        data = content.get("data")
        if data is None:
            data = {}

        handler = self.handlers.get(event)
        if handler is None:
            result = ServiceResult.failure(
                f"Unknown event: {event}", error_code="UNKNOWN_EVENT"
            )
        else:
            result = await self._dispatch(event, handler, data)

        ack = result.to_response() if isinstance(result, ServiceResult) else result
        await self.send_json({"event": event, "id": content.get("id"), "ack": ack})

    async def _dispatch(self, event, handler, data):
        """
        Run a handler, converting failures into a failure envelope.

        Application errors keep their message and code. Anything else is
        logged and reported as a generic internal error.
        """
        try:
            if not self.authenticated:
                raise AuthenticationError("Unauthorized")
            return await handler(data)
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)
        except Exception:
            logger.exception(f"Error handling {event} for user {self.user_id}")
            return ServiceResult.failure(
                "Internal server error", error_code="INTERNAL_ERROR"
            )

    def _validate(self, serializer_class, data) -> dict:
        serializer = serializer_class(data=data)
        if not serializer.is_valid():
            raise ValidationError("Invalid payload", details=serializer.errors)
        return serializer.validated_data

    # =========================================================================
    # Event handlers
    # =========================================================================

    async def handle_conversation_create(self, data):
        """
        Create (or reuse) a conversation and pull participants into its room.

        Every currently connected socket of every participant joins the room
        before conversation:created is broadcast to it.
        """
        payload = self._validate(ConversationCreateSerializer, data)
        conversation = await self._create_conversation(payload["participantIds"])
        conversation_id = conversation["id"]
        group = room_group_name(conversation_id)

        self.rooms.add(conversation_id)
        for participant in conversation["participants"]:
            for channel_name in self.registry.connections_of(participant["id"]):
                await self.channel_layer.group_add(group, channel_name)
                if channel_name != self.channel_name:
                    await self.channel_layer.send(
                        channel_name,
                        {"type": "room.joined", "conversation_id": conversation_id},
                    )

        await self._broadcast(
            conversation_id, ChatEvent.CONVERSATION_CREATED, conversation
        )
        return ServiceResult.success(conversation)

    async def handle_conversation_join(self, data):
        """Join a conversation room and return the other participant's profile."""
        payload = self._validate(ConversationRefSerializer, data)
        conversation_id = str(payload["conversationId"])
        profile = await self._other_participant(conversation_id)

        await self._join_room(conversation_id)
        return {"success": True, "userDetails": profile}

    async def handle_conversations_get(self, data):
        return ServiceResult.success(await self._list_conversations())

    async def handle_messages_get(self, data):
        payload = self._validate(MessagesQuerySerializer, data)
        messages = await self._list_messages(
            payload["conversationId"], payload["limit"], payload["offset"]
        )
        return ServiceResult.success(messages)

    async def handle_message_send(self, data):
        """
        Persist a message and fan it out.

        Clears the sender's typing indicator first, then sends message:new
        to the room except this connection. The sender's other devices
        still receive it.
        """
        payload = self._validate(MessageSendSerializer, data)
        message = await self._send_message(payload)
        conversation_id = message["conversationId"]

        if self.registry.clear_typing(conversation_id, self.user_id):
            await self._broadcast(
                conversation_id,
                ChatEvent.TYPING_STOP,
                {"conversationId": conversation_id, "userId": self.user_id},
            )

        await self._broadcast(
            conversation_id,
            ChatEvent.MESSAGE_NEW,
            message,
            exclude_channel=self.channel_name,
        )
        return ServiceResult.success(message)

    async def handle_message_read(self, data):
        payload = self._validate(MessageRefSerializer, data)
        message_id, conversation_id, sender_id = await self._mark_read(
            payload["messageId"]
        )

        # Reading your own message is not a receipt
        if sender_id == self.user_id:
            return ServiceResult.success()

        await self._broadcast(
            conversation_id,
            ChatEvent.MESSAGE_READ,
            {
                "messageId": message_id,
                "conversationId": conversation_id,
                "readBy": self.user_id,
            },
        )
        return ServiceResult.success()

    async def handle_message_delete(self, data):
        payload = self._validate(MessageRefSerializer, data)
        message_id = str(payload["messageId"])

        await database_sync_to_async(MessageService.delete_message)(
            self.user_id, message_id
        )
        return ServiceResult.success({"messageId": message_id})

    async def handle_typing_start(self, data):
        return await self._relay_typing(data, ChatEvent.TYPING_START)

    async def handle_typing_stop(self, data):
        return await self._relay_typing(data, ChatEvent.TYPING_STOP)

    async def _relay_typing(self, data, event):
        """
        Relay typing:start / typing:stop to the rest of the room.

        Only rooms this connection has joined are accepted. The event name
        decides the direction; isTyping is accepted but not required.
        Starts always relay. A stop relays only if the user was typing.
        """
        payload = self._validate(TypingSerializer, data)
        conversation_id = str(payload["conversationId"])

        if conversation_id not in self.rooms:
            raise PermissionDeniedError(
                "You have not joined this conversation",
                error_code="NOT_PARTICIPANT",
            )

        if event == ChatEvent.TYPING_START:
            self.registry.set_typing(conversation_id, self.user_id)
        elif not self.registry.clear_typing(conversation_id, self.user_id):
            return ServiceResult.success()

        await self._broadcast(
            conversation_id,
            event,
            {"conversationId": conversation_id, "userId": self.user_id},
            exclude_channel=self.channel_name,
        )
        return ServiceResult.success()

    async def handle_users_get_online(self, data):
        return ServiceResult.success(self.registry.online_user_ids())

    # =========================================================================
    # Channel layer events
    # =========================================================================

    async def chat_event(self, event):
        """
        Handle chat.event messages from the channel layer.

        Forwards the payload unless this connection is the one excluded.
        """
        if event.get("exclude_channel") == self.channel_name:
            return

        await self.send_json({"event": event["event"], "data": event["data"]})

    async def room_joined(self, event):
        """Record a room this connection was added to by another consumer."""
        self.rooms.add(event["conversation_id"])

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _refuse(self, subprotocol, message, code):
        """Accept only to deliver an error event, then close."""
        await self.accept(subprotocol)
        await self.send_json({"event": ChatEvent.ERROR, "data": {"message": message}})
        await self.close(code=code)

    async def _join_room(self, conversation_id: str):
        await self.channel_layer.group_add(
            room_group_name(conversation_id), self.channel_name
        )
        self.rooms.add(conversation_id)

    async def _broadcast(self, conversation_id, event, data, exclude_channel=None):
        await self.channel_layer.group_send(
            room_group_name(conversation_id),
            {
                "type": "chat.event",
                "event": event,
                "data": data,
                "exclude_channel": exclude_channel,
            },
        )

    async def _broadcast_presence(self, event):
        await self.channel_layer.group_send(
            GATEWAY_CONFIG.PRESENCE_GROUP,
            {
                "type": "chat.event",
                "event": event,
                "data": {
                    "userId": self.user_id,
                    "timestamp": timezone.now().isoformat(),
                },
                "exclude_channel": None,
            },
        )

    @database_sync_to_async
    def _conversation_ids(self) -> list[str]:
        return ConversationService.conversation_ids_for(self.user_id)

    @database_sync_to_async
    def _create_conversation(self, participant_ids) -> dict:
        conversation = ConversationService.create_or_get_conversation(
            self.user_id, participant_ids
        )
        return ConversationSerializer(conversation).data

    @database_sync_to_async
    def _other_participant(self, conversation_id) -> dict:
        user = ConversationService.get_other_participant(self.user_id, conversation_id)
        return UserPublicSerializer(user).data

    @database_sync_to_async
    def _list_conversations(self) -> list[dict]:
        conversations = ConversationService.list_conversations_for(self.user_id)
        return ConversationListSerializer(conversations, many=True).data

    @database_sync_to_async
    def _list_messages(self, conversation_id, limit, offset) -> list[dict]:
        messages = MessageService.list_messages(
            self.user_id, conversation_id, limit=limit, offset=offset
        )
        return MessageSerializer(messages, many=True).data

    @database_sync_to_async
    def _send_message(self, payload) -> dict:
        message = MessageService.send_message(
            self.user_id,
            payload["conversationId"],
            content=payload["content"],
            message_type=payload["type"],
            image_url=payload.get("imageUrl"),
        )
        return MessageSerializer(message).data

    @database_sync_to_async
    def _mark_read(self, message_id) -> tuple[str, str, str]:
        message = MessageService.mark_read(self.user_id, message_id)
        return str(message.id), str(message.conversation_id), str(message.sender_id)
