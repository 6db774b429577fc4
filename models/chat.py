"""
Chat model: a named thread owning zero or more messages.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .base import BaseModel

CHAT_TITLE_MAX_LENGTH = 200


class Chat(BaseModel):
    """
    Represents a chat thread.

    Messages are removed by the database's ``ON DELETE CASCADE`` when the chat
    row is deleted, so the relationship is configured with ``passive_deletes``.
    """

    __tablename__ = "chats"

    title = Column(String(CHAT_TITLE_MAX_LENGTH), nullable=False)

    # Relationships
    messages = relationship(
        "Message",
        back_populates="chat",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"Chat(id={self.id!r}, title={self.title!r})"
