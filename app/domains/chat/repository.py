"""Chat persistence layer.

``ChatRepository`` is the capability the service depends on;
``SQLAlchemyChatRepository`` implements it on top of an async SQLAlchemy
session factory. Each operation opens its own session, so one repository
instance is safe to share between concurrent requests.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.attributes import set_committed_value

from app.core.config import settings
from app.core.logging_config import DatabaseLogger
from app.exceptions.chat import (
    ChatNotFoundError,
    OperationTimeoutError,
    StoreConstraintError,
    StoreError,
)
from models.chat import Chat
from models.message import Message

# Isolation used for the chat + messages read. SQLite transactions are always
# serializable, so it only needs the explicit BEGIN issued by app.database.
SNAPSHOT_ISOLATION = {
    "postgresql": "REPEATABLE READ",
    "mysql": "REPEATABLE READ",
    "sqlite": None,
}


class ChatRepository(ABC):
    """Persistence operations for chats and their messages."""

    @abstractmethod
    async def create(self, chat: Chat) -> Chat:
        """Insert a chat and return it with store-assigned fields populated."""

    @abstractmethod
    async def get(self, chat_id: int, limit: int) -> Chat:
        """Return the chat with up to ``limit`` most recently updated messages.

        Raises:
            ChatNotFoundError: If no chat has this id.
        """

    @abstractmethod
    async def delete(self, chat_id: int) -> int:
        """Delete the chat (and, by cascade, its messages); return rows affected."""

    @abstractmethod
    async def create_message(self, chat_id: int, message: Message) -> Message:
        """Insert a message into an existing chat."""


class SQLAlchemyChatRepository(ChatRepository):
    """Chat repository backed by a relational database through SQLAlchemy."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        db_logger: DatabaseLogger,
        timeout: float | None = None,
    ):
        """Initialize the repository.

        Args:
            session_factory: Factory producing sessions bound to the chat database.
            db_logger: Receives one record per operation.
            timeout: Seconds allowed per operation, defaults to
                ``settings.db_operation_timeout``.
        """
        self.session_factory = session_factory
        self.db_logger = db_logger
        self.timeout = timeout if timeout is not None else settings.db_operation_timeout

    @asynccontextmanager
    async def _tracked(self, operation: str, table: str, details: str) -> AsyncIterator[None]:
        """Time the wrapped block, bound it by the timeout and log the outcome.

        Timeouts become ``OperationTimeoutError``. Cancellation propagates as-is.
        """
        start = time.perf_counter()
        error: BaseException | None = None
        try:
            async with asyncio.timeout(self.timeout):
                yield
        except TimeoutError as e:
            error = OperationTimeoutError(
                f"{operation} on {table} timed out after {self.timeout}s",
                operation=operation,
            )
            raise error from e
        except BaseException as e:
            error = e
            raise
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self.db_logger.log(operation, table, details, duration_ms, error)

    async def create(self, chat: Chat) -> Chat:
        async with self._tracked("create", "chats", f"chat: {chat!r}"):
            async with self.session_factory() as session:
                try:
                    session.add(chat)
                    await session.commit()
                    await session.refresh(chat)
                except IntegrityError as e:
                    await session.rollback()
                    raise StoreConstraintError(
                        f"Failed to create chat: {e.orig}", operation="create"
                    ) from e
                except SQLAlchemyError as e:
                    await session.rollback()
                    raise StoreError(f"Failed to create chat: {e}", operation="create") from e
        return chat

    async def create_message(self, chat_id: int, message: Message) -> Message:
        async with self._tracked(
            "create", "messages", f"chat_id: {chat_id}, message: {message!r}"
        ):
            async with self.session_factory() as session:
                try:
                    session.add(message)
                    await session.commit()
                    await session.refresh(message)
                except IntegrityError as e:
                    await session.rollback()
                    raise StoreConstraintError(
                        f"Failed to create message: {e.orig}",
                        operation="create_message",
                        details={"chat_id": chat_id},
                    ) from e
                except SQLAlchemyError as e:
                    await session.rollback()
                    raise StoreError(
                        f"Failed to create message: {e}",
                        operation="create_message",
                        details={"chat_id": chat_id},
                    ) from e
        return message

    async def get(self, chat_id: int, limit: int) -> Chat:
        async with self._tracked(
            "transaction: get, get", "chats, messages", f"chat_id: {chat_id}, limit: {limit}"
        ):
            async with self.session_factory() as session:
                try:
                    # Commits on normal exit, rolls back on any exception,
                    # including the not-found case below.
                    async with session.begin():
                        await session.connection(
                            execution_options=self._snapshot_options(session)
                        )

                        chat = await session.get(Chat, chat_id)
                        if chat is None:
                            raise ChatNotFoundError(
                                f"Chat {chat_id} not found", details={"chat_id": chat_id}
                            )

                        stmt = (
                            select(Message)
                            .where(Message.chat_id == chat_id)
                            .order_by(Message.updated_at.desc(), Message.id.desc())
                            .limit(limit)
                        )
                        result = await session.execute(stmt)
                        messages = list(result.scalars().all())
                except SQLAlchemyError as e:
                    raise StoreError(
                        f"Failed to get chat: {e}",
                        operation="get",
                        details={"chat_id": chat_id},
                    ) from e

        set_committed_value(chat, "messages", messages)
        return chat

    async def delete(self, chat_id: int) -> int:
        async with self._tracked("delete", "chats", f"chat_id: {chat_id}"):
            async with self.session_factory() as session:
                try:
                    async with session.begin():
                        result = await session.execute(delete(Chat).where(Chat.id == chat_id))
                        deleted = result.rowcount
                except SQLAlchemyError as e:
                    raise StoreError(
                        f"Failed to delete chat: {e}",
                        operation="delete",
                        details={"chat_id": chat_id},
                    ) from e
        return deleted

    @staticmethod
    def _snapshot_options(session: AsyncSession) -> dict:
        dialect = session.bind.dialect.name
        isolation_level = SNAPSHOT_ISOLATION.get(dialect, "REPEATABLE READ")
        options = {} if isolation_level is None else {"isolation_level": isolation_level}
        if dialect == "postgresql":
            options["postgresql_readonly"] = True
        return options
