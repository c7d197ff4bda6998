"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Conversation management
- Message moderation
"""

from django.contrib import admin

from chat.models import Conversation, Message


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    """Admin interface for Conversation model."""

    list_display = [
        "id",
        "participant_emails",
        "last_message",
        "created_at",
        "updated_at",
    ]
    list_filter = ["created_at"]
    search_fields = ["id", "participants__email"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["last_message"]
    filter_horizontal = ["participants"]
    ordering = ["-updated_at"]

    def get_queryset(self, request):
        return super().get_queryset(request).prefetch_related("participants")

    @admin.display(description="Participants")
    def participant_emails(self, obj: Conversation) -> str:
        return ", ".join(p.email for p in obj.participants.all())


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "conversation",
        "sender",
        "message_type",
        "content_preview",
        "is_read",
        "created_at",
    ]
    list_filter = ["message_type", "is_read", "created_at"]
    search_fields = ["content", "sender__email"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["conversation", "sender"]
    ordering = ["-created_at"]

    @admin.display(description="Content Preview")
    def content_preview(self, obj: Message) -> str:
        """Return truncated content for list display."""
        max_length = 50
        if len(obj.content) > max_length:
            return obj.content[:max_length] + "..."
        return obj.content
