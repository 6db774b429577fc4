"""Chat API controller with FastAPI endpoints."""

import logging

from fastapi import APIRouter, Depends, Path, Query, Response, status

from app.core.dependencies import get_chat_service
from app.domains.chat.service import ChatService
from app.schemas.base import ResponseSchema
from app.schemas.chat import (
    ChatDetailResponse,
    ChatResponse,
    CreateChatRequest,
    CreateMessageRequest,
    MessageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chats", tags=["chats"])


@router.post("", response_model=ResponseSchema, status_code=status.HTTP_201_CREATED)
async def create_chat(
    chat_data: CreateChatRequest,
    service: ChatService = Depends(get_chat_service),
):
    """Create a new chat."""

    chat = await service.create_chat(chat_data.title)

    return ResponseSchema(
        status="success",
        message="Chat created successfully",
        data=ChatResponse.model_validate(chat).model_dump(mode="json"),
    )


@router.post(
    "/{chat_id}/messages", response_model=ResponseSchema, status_code=status.HTTP_201_CREATED
)
async def send_message(
    message_data: CreateMessageRequest,
    chat_id: int = Path(..., description="Chat ID"),
    service: ChatService = Depends(get_chat_service),
):
    """Post a message into a chat."""

    message = await service.send_message(chat_id, message_data.text)

    return ResponseSchema(
        status="success",
        message="Message sent successfully",
        data=MessageResponse.model_validate(message).model_dump(mode="json"),
    )


@router.get("/{chat_id}", response_model=ResponseSchema)
async def get_chat(
    chat_id: int = Path(..., description="Chat ID"),
    limit: int = Query(0, description="Maximum number of messages (0 = default of 20, max 100)"),
    service: ChatService = Depends(get_chat_service),
):
    """Get a chat with its most recent messages."""

    chat = await service.get_chat(chat_id, limit)

    return ResponseSchema(
        status="success",
        message="Chat retrieved successfully",
        data=ChatDetailResponse.model_validate(chat).model_dump(mode="json"),
    )


@router.delete("/{chat_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chat(
    chat_id: int = Path(..., description="Chat ID"),
    service: ChatService = Depends(get_chat_service),
):
    """Delete a chat together with all of its messages."""

    await service.delete_chat(chat_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
