"""
Models package initialization.
"""

from .base import Base, BaseModel
from .chat import CHAT_TITLE_MAX_LENGTH, Chat
from .message import MESSAGE_TEXT_MAX_LENGTH, Message

__all__ = [
    "Base",
    "BaseModel",
    "Chat",
    "Message",
    "CHAT_TITLE_MAX_LENGTH",
    "MESSAGE_TEXT_MAX_LENGTH",
]
