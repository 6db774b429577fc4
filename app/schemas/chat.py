"""Chat schemas for request/response serialization."""

from pydantic import Field

from .base import BaseModelSchema, BaseSchema


class CreateChatRequest(BaseSchema):
    """Schema for creating a chat.

    Length and blank checks are applied by the service after trimming.
    """

    title: str = Field(..., description="Chat title, 1-200 characters after trimming")


class CreateMessageRequest(BaseSchema):
    """Schema for posting a message into a chat."""

    text: str = Field(..., description="Message text, 1-5000 characters after trimming")


class MessageResponse(BaseModelSchema):
    """Schema for message response."""

    chat_id: int
    text: str


class ChatResponse(BaseModelSchema):
    """Schema for chat response."""

    title: str


class ChatDetailResponse(ChatResponse):
    """Schema for chat response with its most recent messages."""

    messages: list[MessageResponse] = Field(
        default_factory=list, description="Messages, most recently updated first"
    )
