"""Tests for MessageService."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from chatline.core.exceptions import NotFoundError, ValidationError
from chatline.models import ChatType, Media, Message, MessageType
from chatline.services.chat_service import ChatService
from chatline.services.message_service import MessageService

BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def chat(db, alice, bob):
    return await ChatService.create_chat(db, "u1", ["u2"], ChatType.private)


async def _seed_messages(db, chat, sender, count):
    """Insert messages one minute apart; returns them oldest first."""
    messages = []
    for i in range(count):
        created_at = BASE_TIME + timedelta(minutes=i)
        message = Message(
            chat_id=chat.id,
            sender_id=sender.id,
            content=f"message {i}",
            created_at=created_at,
            updated_at=created_at,
        )
        db.add(message)
        messages.append(message)
    await db.flush()
    chat.last_message_id = messages[-1].id
    await db.flush()
    return messages


async def _count(db, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestSendMessage:
    """Tests for MessageService.send_message()."""

    async def test_send_moves_last_message_pointer(self, db, chat, alice):
        before = chat.updated_at

        message = await MessageService.send_message(db, chat.chat_id, "u1", "hi")

        assert message.message_id
        assert message.chat_id == chat.id
        assert message.sender_id == alice.id
        assert message.type == "text"
        assert chat.last_message_id == message.id
        assert chat.updated_at >= before

    async def test_media_message_records_media(self, db, chat):
        message = await MessageService.send_message(
            db,
            chat.chat_id,
            "u2",
            "",
            MessageType.video,
            "https://cdn.example.com/clip.mp4",
        )
        result = await db.execute(select(Media).where(Media.message_id == message.id))
        media = result.scalar_one()
        assert media.url == "https://cdn.example.com/clip.mp4"
        assert media.type == "video"

    async def test_invalid_media_url_inserts_nothing(self, db, chat):
        with pytest.raises(ValidationError):
            await MessageService.send_message(
                db, chat.chat_id, "u1", "pic", MessageType.image, "not-a-url"
            )
        assert await _count(db, Message) == 0
        assert chat.last_message_id is None

    async def test_unknown_sender(self, db, chat):
        with pytest.raises(NotFoundError):
            await MessageService.send_message(db, chat.chat_id, "ghost", "hi")
        assert await _count(db, Message) == 0

    async def test_unknown_chat(self, db, alice):
        with pytest.raises(NotFoundError):
            await MessageService.send_message(db, "no-such-chat", "u1", "hi")


class TestListMessages:
    """Tests for MessageService.list_messages()."""

    @pytest.mark.parametrize(
        "limit, offset",
        [(50, 0), (2, 0), (2, 4), (3, 5), (10, 6), (1, 2)],
    )
    async def test_page_size_and_order(self, db, chat, alice, limit, offset):
        await _seed_messages(db, chat, alice, 6)

        total, page = await MessageService.list_messages(db, chat.chat_id, limit, offset)

        assert total == 6
        assert len(page) == min(limit, max(0, total - offset))
        timestamps = [m.created_at for m in page]
        assert all(a > b for a, b in zip(timestamps, timestamps[1:]))

    async def test_newest_first(self, db, chat, alice):
        await _seed_messages(db, chat, alice, 3)

        _, page = await MessageService.list_messages(db, chat.chat_id)

        assert [m.content for m in page] == ["message 2", "message 1", "message 0"]

    async def test_default_page_size_is_fifty(self, db, chat, alice):
        await _seed_messages(db, chat, alice, 55)
        total, page = await MessageService.list_messages(db, chat.chat_id)
        assert total == 55
        assert len(page) == 50

    async def test_only_messages_of_the_chat(self, db, chat, alice, carol):
        other = await ChatService.create_chat(db, "u3", ["u1"], ChatType.private)
        await MessageService.send_message(db, other.chat_id, "u3", "elsewhere")
        await MessageService.send_message(db, chat.chat_id, "u1", "here")

        total, page = await MessageService.list_messages(db, chat.chat_id)

        assert total == 1
        assert [m.content for m in page] == ["here"]

    async def test_zero_limit_returns_only_total(self, db, chat, alice):
        await _seed_messages(db, chat, alice, 4)

        total, page = await MessageService.list_messages(db, chat.chat_id, 0, 0)

        assert total == 4
        assert page == []

    async def test_limit_above_default_returns_everything(self, db, chat, alice):
        await _seed_messages(db, chat, alice, 230)

        total, page = await MessageService.list_messages(db, chat.chat_id, limit=500)

        assert total == 230
        assert len(page) == 230
        assert page[0].content == "message 229"

    async def test_negative_offset_starts_at_newest(self, db, chat, alice):
        await _seed_messages(db, chat, alice, 3)

        _, page = await MessageService.list_messages(db, chat.chat_id, 2, -5)

        assert [m.content for m in page] == ["message 2", "message 1"]

    async def test_unknown_chat(self, db):
        with pytest.raises(NotFoundError):
            await MessageService.list_messages(db, "no-such-chat")


class TestDeleteMessage:
    """Tests for MessageService.delete_message()."""

    async def test_deleting_last_message_repoints_to_newest_remaining(
        self, db, chat, alice
    ):
        messages = await _seed_messages(db, chat, alice, 3)

        await MessageService.delete_message(db, messages[2].message_id, chat.chat_id)

        assert chat.last_message_id == messages[1].id
        assert await _count(db, Message) == 2

    async def test_deleting_only_message_clears_pointer(self, db, chat):
        message = await MessageService.send_message(db, chat.chat_id, "u1", "hi")

        await MessageService.delete_message(db, message.message_id, chat.chat_id)

        assert chat.last_message_id is None

    async def test_deleting_older_message_keeps_pointer(self, db, chat, alice):
        messages = await _seed_messages(db, chat, alice, 3)

        await MessageService.delete_message(db, messages[0].message_id, chat.chat_id)

        assert chat.last_message_id == messages[2].id

    async def test_media_is_deleted_with_message(self, db, chat):
        message = await MessageService.send_message(
            db, chat.chat_id, "u1", "", MessageType.file, "https://files.example.com/a.pdf"
        )
        await MessageService.delete_message(db, message.message_id, chat.chat_id)
        assert await _count(db, Media) == 0

    async def test_unknown_message(self, db, chat):
        with pytest.raises(NotFoundError):
            await MessageService.delete_message(db, "no-such-message", chat.chat_id)

    async def test_message_from_another_chat(self, db, chat, carol):
        other = await ChatService.create_chat(db, "u3", ["u1"], ChatType.private)
        message = await MessageService.send_message(db, other.chat_id, "u3", "hey")

        with pytest.raises(NotFoundError):
            await MessageService.delete_message(db, message.message_id, chat.chat_id)
        assert await _count(db, Message) == 1


class TestRecentMessagesByUser:
    """Tests for MessageService.get_recent_messages_by_user()."""

    async def test_one_entry_per_chat(self, db, chat, carol):
        quiet = await ChatService.create_chat(db, "u3", ["u1"], ChatType.private)
        await MessageService.send_message(db, chat.chat_id, "u2", "ping")

        recent = await MessageService.get_recent_messages_by_user(db, "u1")

        by_chat = {entry.chat_id: entry.last_message for entry in recent}
        assert set(by_chat) == {chat.chat_id, quiet.chat_id}
        assert by_chat[chat.chat_id].content == "ping"
        assert by_chat[quiet.chat_id] is None

    async def test_unknown_user(self, db):
        with pytest.raises(NotFoundError):
            await MessageService.get_recent_messages_by_user(db, "ghost")
