"""
Constants and configuration for the realtime chat.

This module centralizes configuration values for:
- Message operations (content limits, paging)
- The WebSocket gateway (close codes, group naming)
- The event vocabulary spoken over the socket

Import example:
    from chat.constants import MESSAGE_CONFIG, GATEWAY_CONFIG, ChatEvent
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    # Content limits
    MAX_CONTENT_LENGTH: Final[int] = 10000  # Characters
    MAX_IMAGE_URL_LENGTH: Final[int] = 500

    # messages:get paging
    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 100


# =============================================================================
# Gateway Configuration
# =============================================================================


class GATEWAY_CONFIG:
    """Configuration for the WebSocket gateway."""

    # Close code sent after a failed handshake authentication
    CLOSE_CODE_UNAUTHORIZED: Final[int] = 4001

    # Close code sent when the handshake cannot load the user's rooms
    CLOSE_CODE_SERVER_ERROR: Final[int] = 1011

    # Subprotocol carrying the token as ["jwt", <token>]
    TOKEN_SUBPROTOCOL: Final[str] = "jwt"

    # Group every authenticated connection joins for presence fan-out
    PRESENCE_GROUP: Final[str] = "presence"

    # Room group prefix; channel layer group names cannot contain ":"
    ROOM_GROUP_PREFIX: Final[str] = "conversation"


def room_group_name(conversation_id) -> str:
    """Channel layer group for a conversation."""
    return f"{GATEWAY_CONFIG.ROOM_GROUP_PREFIX}.{conversation_id}"


# =============================================================================
# Event Vocabulary
# =============================================================================


class ChatEvent:
    """Event names carried in the "event" field of every frame."""

    # Client -> server
    CONVERSATION_CREATE: Final[str] = "conversation:create"
    CONVERSATION_JOIN: Final[str] = "conversation:join"
    CONVERSATIONS_GET: Final[str] = "conversations:get"
    MESSAGES_GET: Final[str] = "messages:get"
    MESSAGE_SEND: Final[str] = "message:send"
    MESSAGE_READ: Final[str] = "message:read"
    MESSAGE_DELETE: Final[str] = "message:delete"
    TYPING_START: Final[str] = "typing:start"
    TYPING_STOP: Final[str] = "typing:stop"
    USERS_GET_ONLINE: Final[str] = "users:getOnline"

    # Server -> client
    CONVERSATION_CREATED: Final[str] = "conversation:created"
    MESSAGE_NEW: Final[str] = "message:new"
    USER_ONLINE: Final[str] = "user:online"
    USER_OFFLINE: Final[str] = "user:offline"
    ERROR: Final[str] = "error"
