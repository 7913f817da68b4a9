"""Conversation persistence for daiy.

Stores conversations and their finalised messages.
"""

from .base import ConversationMemory
from .factory import create_conversation_memory
from .in_memory import InMemoryConversationMemory
from .models import Conversation, MessageRecord

__all__ = [
    "Conversation",
    "ConversationMemory",
    "InMemoryConversationMemory",
    "MessageRecord",
    "create_conversation_memory",
]
