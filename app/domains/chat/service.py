"""Chat service layer with input validation and business rules."""

import logging

from app.domains.chat.repository import ChatRepository
from app.exceptions.base import ValidationError
from app.exceptions.chat import ChatNotFoundError, OperationTimeoutError, StoreError
from models.chat import CHAT_TITLE_MAX_LENGTH, Chat
from models.message import MESSAGE_TEXT_MAX_LENGTH, Message

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE_LIMIT = 20
MAX_MESSAGE_LIMIT = 100
# Largest id an INTEGER primary key holds on every supported backend
MAX_CHAT_ID = 2**31 - 1


class ChatService:
    """Service class for chat and message operations.

    Every argument is validated before the repository is touched, so a
    rejected request never reaches the database.
    """

    def __init__(self, repository: ChatRepository):
        self.repository = repository

    async def create_chat(self, title: str) -> Chat:
        """Create a chat with a trimmed, non-empty title of at most 200 characters."""
        title = title.strip()
        if not title:
            raise ValidationError("chat title cannot be empty")
        if len(title) > CHAT_TITLE_MAX_LENGTH:
            raise ValidationError(f"chat title cannot exceed {CHAT_TITLE_MAX_LENGTH} characters")

        return await self.repository.create(Chat(title=title))

    async def get_chat(self, chat_id: int, limit: int = 0) -> Chat:
        """Get a chat with its most recently updated messages.

        Args:
            chat_id: Chat identifier, must be positive.
            limit: Maximum number of messages; ``0`` selects the default of 20.

        Raises:
            ValidationError: On an id outside 1..MAX_CHAT_ID or a limit outside 0..100.
            ChatNotFoundError: If the chat does not exist.
            StoreError: If the database read fails.
            OperationTimeoutError: If the read exceeds the store timeout.
        """
        self._validate_chat_id(chat_id)
        limit = self._normalize_limit(limit)

        try:
            return await self.repository.get(chat_id, limit)
        except ChatNotFoundError as e:
            raise ChatNotFoundError(f"Failed to get chat: {e.message}", details=e.details) from e
        except StoreError as e:
            raise StoreError(
                f"Failed to get chat: {e.message}", operation=e.operation, details=e.details
            ) from e
        except OperationTimeoutError as e:
            raise OperationTimeoutError(
                f"Failed to get chat: {e.message}", operation=e.operation, details=e.details
            ) from e

    async def delete_chat(self, chat_id: int) -> None:
        """Delete a chat and, through the database cascade, all of its messages.

        Raises:
            ChatNotFoundError: If no chat was deleted.
        """
        self._validate_chat_id(chat_id)

        deleted = await self.repository.delete(chat_id)
        if not deleted:
            raise ChatNotFoundError(f"Chat {chat_id} not found", details={"chat_id": chat_id})
        logger.info("Deleted chat %s", chat_id)

    async def send_message(self, chat_id: int, text: str) -> Message:
        """Post a message into a chat.

        The chat's existence is left to the foreign key; a dangling ``chat_id``
        surfaces as ``StoreConstraintError`` from the repository.
        """
        self._validate_chat_id(chat_id)

        text = text.strip()
        if not text:
            raise ValidationError("message text cannot be empty")
        if len(text) > MESSAGE_TEXT_MAX_LENGTH:
            raise ValidationError(
                f"message text cannot exceed {MESSAGE_TEXT_MAX_LENGTH} characters"
            )

        message = Message(chat_id=chat_id, text=text)
        return await self.repository.create_message(chat_id, message)

    @staticmethod
    def _validate_chat_id(chat_id: int) -> None:
        if chat_id <= 0:
            raise ValidationError("chat ID must be greater than 0")
        if chat_id > MAX_CHAT_ID:
            raise ValidationError(f"chat ID cannot exceed {MAX_CHAT_ID}")

    @staticmethod
    def _normalize_limit(limit: int) -> int:
        if limit == 0:
            return DEFAULT_MESSAGE_LIMIT
        if limit < 0:
            raise ValidationError("limit cannot be negative")
        if limit > MAX_MESSAGE_LIMIT:
            raise ValidationError(f"limit cannot exceed {MAX_MESSAGE_LIMIT} messages")
        return limit
