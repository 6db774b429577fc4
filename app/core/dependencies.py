# app/core/dependencies.py
"""FastAPI dependencies wiring the chat service to the database."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.logging_config import DatabaseLogger
from app.database import get_session_factory
from app.domains.chat.repository import ChatRepository, SQLAlchemyChatRepository
from app.domains.chat.service import ChatService

database_logger = DatabaseLogger()


def get_chat_repository(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> ChatRepository:
    return SQLAlchemyChatRepository(session_factory, database_logger)


def get_chat_service(
    repository: ChatRepository = Depends(get_chat_repository),
) -> ChatService:
    return ChatService(repository)
