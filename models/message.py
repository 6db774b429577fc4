"""
Message model: a timestamped text entry belonging to exactly one chat.
"""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import BaseModel

MESSAGE_TEXT_MAX_LENGTH = 5000


class Message(BaseModel):
    """
    Represents a message posted into a chat.
    """

    __tablename__ = "messages"

    chat_id = Column(
        Integer,
        ForeignKey("chats.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    text = Column(String(MESSAGE_TEXT_MAX_LENGTH), nullable=False)

    # Relationships
    chat = relationship("Chat", back_populates="messages", lazy="raise")

    def __repr__(self) -> str:
        return f"Message(id={self.id!r}, chat_id={self.chat_id!r}, text={self.text!r})"
