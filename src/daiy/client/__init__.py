"""Receiving side of the chat stream."""

from .http import ChatClient, collect_turn
from .local import LocalChatClient
from .session import ChatSession

__all__ = ["ChatClient", "ChatSession", "LocalChatClient", "collect_turn"]
