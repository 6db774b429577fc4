"""
Unit tests for ChatService.

The repository is replaced by an AsyncMock so these tests cover validation,
normalization and error wrapping without touching a database.
"""

import pytest

from app.domains.chat.service import DEFAULT_MESSAGE_LIMIT, MAX_CHAT_ID, ChatService
from app.exceptions.base import ValidationError
from app.exceptions.chat import (
    ChatNotFoundError,
    OperationTimeoutError,
    StoreConstraintError,
    StoreError,
)
from models import Chat, Message


class TestCreateChat:
    """Test cases for ChatService.create_chat."""

    @pytest.mark.asyncio
    async def test_create_chat_trims_title(self, mock_repository):
        """Test the stored title is the trimmed input."""
        mock_repository.create.side_effect = lambda chat: chat
        service = ChatService(mock_repository)

        chat = await service.create_chat("  Hello  ")

        assert chat.title == "Hello"
        mock_repository.create.assert_awaited_once()
        created = mock_repository.create.await_args.args[0]
        assert isinstance(created, Chat)
        assert created.id is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", ["", "   ", "\t\n "])
    async def test_create_chat_empty_title(self, mock_repository, title):
        """Test blank titles are rejected before the repository is called."""
        service = ChatService(mock_repository)

        with pytest.raises(ValidationError, match="chat title cannot be empty"):
            await service.create_chat(title)

        mock_repository.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_chat_too_long_title(self, mock_repository):
        """Test a 201 character title is rejected."""
        service = ChatService(mock_repository)

        with pytest.raises(ValidationError, match="chat title cannot exceed 200 characters"):
            await service.create_chat("a" * 201)

        mock_repository.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_chat_length_measured_after_trimming(self, mock_repository):
        """Test surrounding whitespace does not count toward the limit."""
        mock_repository.create.side_effect = lambda chat: chat
        service = ChatService(mock_repository)

        chat = await service.create_chat("   " + "a" * 200 + "   ")

        assert chat.title == "a" * 200

    @pytest.mark.asyncio
    async def test_create_chat_propagates_store_error(self, mock_repository):
        """Test repository failures reach the caller unchanged."""
        error = StoreError("Failed to create chat: boom", operation="create")
        mock_repository.create.side_effect = error
        service = ChatService(mock_repository)

        with pytest.raises(StoreError) as exc_info:
            await service.create_chat("Hello")

        assert exc_info.value is error


class TestGetChat:
    """Test cases for ChatService.get_chat."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("chat_id", [0, -1])
    async def test_get_chat_invalid_id(self, mock_repository, chat_id):
        """Test non-positive ids are rejected."""
        service = ChatService(mock_repository)

        with pytest.raises(ValidationError, match="chat ID must be greater than 0"):
            await service.get_chat(chat_id, 20)

        mock_repository.get.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("chat_id", [MAX_CHAT_ID + 1, 99999999999999999999])
    async def test_get_chat_id_out_of_range(self, mock_repository, chat_id):
        """Test ids beyond the integer column range are rejected."""
        service = ChatService(mock_repository)

        with pytest.raises(ValidationError, match="chat ID cannot exceed 2147483647"):
            await service.get_chat(chat_id, 20)

        mock_repository.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_chat_largest_id_reaches_repository(self, mock_repository):
        """Test the largest representable id is still accepted."""
        mock_repository.get.return_value = Chat(id=MAX_CHAT_ID, title="Edge")
        service = ChatService(mock_repository)

        await service.get_chat(MAX_CHAT_ID, 20)

        mock_repository.get.assert_awaited_once_with(MAX_CHAT_ID, 20)

    @pytest.mark.asyncio
    async def test_get_chat_default_limit(self, mock_repository):
        """Test a zero limit is replaced by the default of 20."""
        mock_repository.get.return_value = Chat(id=1, title="Hello")
        service = ChatService(mock_repository)

        await service.get_chat(1, 0)

        mock_repository.get.assert_awaited_once_with(1, DEFAULT_MESSAGE_LIMIT)
        assert DEFAULT_MESSAGE_LIMIT == 20

    @pytest.mark.asyncio
    async def test_get_chat_limit_omitted(self, mock_repository):
        """Test the limit argument defaults to the default limit."""
        mock_repository.get.return_value = Chat(id=1, title="Hello")
        service = ChatService(mock_repository)

        await service.get_chat(1)

        mock_repository.get.assert_awaited_once_with(1, 20)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [1, 50, 100])
    async def test_get_chat_valid_limit_passed_through(self, mock_repository, limit):
        """Test limits within bounds are passed to the repository unchanged."""
        mock_repository.get.return_value = Chat(id=1, title="Hello")
        service = ChatService(mock_repository)

        await service.get_chat(1, limit)

        mock_repository.get.assert_awaited_once_with(1, limit)

    @pytest.mark.asyncio
    async def test_get_chat_negative_limit(self, mock_repository):
        """Test negative limits are rejected."""
        service = ChatService(mock_repository)

        with pytest.raises(ValidationError, match="limit cannot be negative"):
            await service.get_chat(1, -1)

        mock_repository.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_chat_limit_too_large(self, mock_repository):
        """Test limits above 100 are rejected."""
        service = ChatService(mock_repository)

        with pytest.raises(ValidationError, match="limit cannot exceed 100"):
            await service.get_chat(1, 101)

        mock_repository.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_chat_not_found_is_wrapped(self, mock_repository):
        """Test not-found keeps its kind and gains the operation context."""
        cause = ChatNotFoundError("Chat 7 not found", details={"chat_id": 7})
        mock_repository.get.side_effect = cause
        service = ChatService(mock_repository)

        with pytest.raises(ChatNotFoundError) as exc_info:
            await service.get_chat(7, 20)

        assert exc_info.value.message == "Failed to get chat: Chat 7 not found"
        assert exc_info.value.__cause__ is cause
        assert exc_info.value.details == {"chat_id": 7}
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_get_chat_store_error_is_wrapped(self, mock_repository):
        """Test store failures keep their kind and chain the original error."""
        cause = StoreError("Failed to get chat: connection reset", operation="get")
        mock_repository.get.side_effect = cause
        service = ChatService(mock_repository)

        with pytest.raises(StoreError) as exc_info:
            await service.get_chat(7, 20)

        assert exc_info.value.message.startswith("Failed to get chat:")
        assert exc_info.value.__cause__ is cause
        assert exc_info.value.operation == "get"

    @pytest.mark.asyncio
    async def test_get_chat_timeout_is_wrapped(self, mock_repository):
        """Test a timeout keeps its kind and gains the operation context."""
        cause = OperationTimeoutError(
            "transaction: get, get on chats, messages timed out after 30.0s",
            operation="transaction: get, get",
        )
        mock_repository.get.side_effect = cause
        service = ChatService(mock_repository)

        with pytest.raises(OperationTimeoutError) as exc_info:
            await service.get_chat(7, 20)

        assert exc_info.value.message == (
            "Failed to get chat: transaction: get, get on chats, messages timed out after 30.0s"
        )
        assert exc_info.value.__cause__ is cause
        assert exc_info.value.operation == "transaction: get, get"
        assert exc_info.value.status_code == 504
        assert not isinstance(exc_info.value, StoreError)


class TestDeleteChat:
    """Test cases for ChatService.delete_chat."""

    @pytest.mark.asyncio
    async def test_delete_chat_success(self, mock_repository):
        """Test deleting an existing chat."""
        mock_repository.delete.return_value = 1
        service = ChatService(mock_repository)

        result = await service.delete_chat(3)

        assert result is None
        mock_repository.delete.assert_awaited_once_with(3)

    @pytest.mark.asyncio
    async def test_delete_chat_not_found(self, mock_repository):
        """Test deleting a chat that does not exist."""
        mock_repository.delete.return_value = 0
        service = ChatService(mock_repository)

        with pytest.raises(ChatNotFoundError, match="Chat 3 not found"):
            await service.delete_chat(3)

    @pytest.mark.asyncio
    async def test_delete_chat_invalid_id(self, mock_repository):
        """Test a zero id is rejected."""
        service = ChatService(mock_repository)

        with pytest.raises(ValidationError, match="chat ID must be greater than 0"):
            await service.delete_chat(0)

        mock_repository.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_chat_id_out_of_range(self, mock_repository):
        """Test an id beyond the integer column range is rejected."""
        service = ChatService(mock_repository)

        with pytest.raises(ValidationError, match="chat ID cannot exceed"):
            await service.delete_chat(MAX_CHAT_ID + 1)

        mock_repository.delete.assert_not_called()


class TestSendMessage:
    """Test cases for ChatService.send_message."""

    @pytest.mark.asyncio
    async def test_send_message_trims_text(self, mock_repository):
        """Test the message is bound to the chat with trimmed text."""
        mock_repository.create_message.side_effect = lambda chat_id, message: message
        service = ChatService(mock_repository)

        message = await service.send_message(5, "  hi  ")

        assert message.text == "hi"
        assert message.chat_id == 5
        args = mock_repository.create_message.await_args.args
        assert args[0] == 5
        assert isinstance(args[1], Message)

    @pytest.mark.asyncio
    async def test_send_message_zero_chat_id(self, mock_repository):
        """Test a zero chat id is rejected and no store call occurs."""
        service = ChatService(mock_repository)

        with pytest.raises(ValidationError) as exc_info:
            await service.send_message(0, "hi")

        assert exc_info.value.message == "chat ID must be greater than 0"
        mock_repository.create_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_send_message_empty_text(self, mock_repository):
        """Test blank message text is rejected."""
        service = ChatService(mock_repository)

        with pytest.raises(ValidationError, match="message text cannot be empty"):
            await service.send_message(1, "    ")

        mock_repository.create_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_send_message_text_too_long(self, mock_repository):
        """Test text over 5000 characters is rejected."""
        service = ChatService(mock_repository)

        with pytest.raises(ValidationError, match="message text cannot exceed 5000 characters"):
            await service.send_message(1, "x" * 5001)

        mock_repository.create_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_send_message_max_length_accepted(self, mock_repository):
        """Test text of exactly 5000 characters is accepted."""
        mock_repository.create_message.side_effect = lambda chat_id, message: message
        service = ChatService(mock_repository)

        message = await service.send_message(1, "x" * 5000)

        assert len(message.text) == 5000

    @pytest.mark.asyncio
    async def test_send_message_dangling_chat_surfaces_store_error(self, mock_repository):
        """Test a foreign key violation is not turned into a validation error."""
        mock_repository.create_message.side_effect = StoreConstraintError(
            "Failed to create message: FOREIGN KEY constraint failed",
            operation="create_message",
        )
        service = ChatService(mock_repository)

        with pytest.raises(StoreError) as exc_info:
            await service.send_message(999, "hi")

        assert not isinstance(exc_info.value, ValidationError)
        mock_repository.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_send_message_chat_id_out_of_range(self, mock_repository):
        """Test an id beyond the integer column range never reaches the store."""
        service = ChatService(mock_repository)

        with pytest.raises(ValidationError, match="chat ID cannot exceed"):
            await service.send_message(99999999999999999999, "hi")

        mock_repository.create_message.assert_not_called()
