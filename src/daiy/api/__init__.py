"""HTTP surface."""

from .app import create_app
from .schemas import ApiKeys, ChatRequest

__all__ = ["ApiKeys", "ChatRequest", "create_app"]
