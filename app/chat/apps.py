"""
Chat application configuration.

This app provides the realtime chat core with:
- Conversations with an unordered participant set
- Messages with read receipts
- A WebSocket gateway with presence and typing indicators
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"
