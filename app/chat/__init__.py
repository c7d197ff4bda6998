"""
Chat app for real-time messaging.

This app handles:
- Conversations and message history
- WebSocket real-time updates over a single gateway socket
- Presence, typing indicators and read receipts

Related apps:
    - authentication: User model for participants, token verification

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for the gateway.
    See registry.py for in-memory presence and typing state.
    See routing.py for WebSocket URL patterns.

Usage:
    from chat.services import ConversationService, MessageService

    conversation = ConversationService.create_or_get_conversation(
        caller_id=user.id,
        participant_ids=[other_user.id],
    )

    message = MessageService.send_message(
        caller_id=user.id,
        conversation_id=conversation.id,
        content="Hello!",
    )
"""
