"""
Services package: conversation turns and webhook handling.
"""

from chatrelay.services.base_service import BaseService
from chatrelay.services.conversation_service import ConversationService
from chatrelay.services.webhook_service import WebhookService

__all__ = [
    "BaseService",
    "ConversationService",
    "WebhookService",
]
