"""
services/message_service.py
----------------------------
Business logic for the message ledger.

Critical invariant:
  chats.last_message_id always points at the newest message of the chat (or
  is NULL when the chat is empty). Every send and every delete of the newest
  message patches it in the same session, so the message write and the
  pointer write commit together.
"""

from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from chatline.core.config import settings
from chatline.core.exceptions import NotFoundError
from chatline.core.logging import get_logger
from chatline.core.validators import validate_media_url
from chatline.db.base import utcnow
from chatline.models.chat import Chat
from chatline.models.message import Media, Message, MessageType
from chatline.schemas.chat import RecentMessage
from chatline.services.chat_service import ChatService
from chatline.services.user_service import UserService

logger = get_logger(__name__)


class MessageService:
    @staticmethod
    async def send_message(
        db: AsyncSession,
        chat_id: str,
        sender_id: str,
        content: str,
        message_type: MessageType = MessageType.text,
        media_url: Optional[str] = None,
    ) -> Message:
        """
        Append a message to a chat and move the chat's last-message pointer.

        Raises:
            NotFoundError: unknown sender or chat.
            ValidationError: media_url is not a valid URL. Nothing is inserted.
        """
        sender = await UserService.read_user(db, sender_id)
        chat = await ChatService.get_chat(db, chat_id)

        if media_url:
            validate_media_url(media_url)

        now = utcnow()
        message = Message(
            chat_id=chat.id,
            sender_id=sender.id,
            content=content,
            type=message_type.value,
            media_url=media_url or None,
            created_at=now,
            updated_at=now,
        )
        db.add(message)
        await db.flush()

        if message_type != MessageType.text and media_url:
            db.add(Media(message_id=message.id, url=media_url, type=message_type.value))

        chat.last_message_id = message.id
        chat.updated_at = now
        await db.flush()

        logger.info(
            "Message stored",
            message_id=message.message_id,
            chat_id=chat.chat_id,
            sender_id=sender.user_id,
            type=message.type,
        )
        return message

    @staticmethod
    async def list_messages(
        db: AsyncSession,
        chat_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[int, list[Message]]:
        """
        Page through a chat's messages, newest first.

        A missing limit means one default page; a limit of zero or less
        yields an empty page. A negative offset counts from the start.

        Returns:
            (total_count, page_of_messages)
        """
        limit = settings.MESSAGE_PAGE_SIZE if limit is None else max(limit, 0)
        offset = max(offset, 0)

        chat = await ChatService.get_chat(db, chat_id)
        base_filter = Message.chat_id == chat.id

        # Count query
        count_result = await db.execute(
            select(func.count()).select_from(Message).where(base_filter)
        )
        total = count_result.scalar_one()
        if limit == 0:
            return total, []

        # Data query, newest first
        result = await db.execute(
            select(Message)
            .where(base_filter)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .offset(offset)
            .limit(limit)
        )
        messages = list(result.scalars().all())
        return total, messages

    @staticmethod
    async def _newest_message(db: AsyncSession, chat: Chat) -> Message | None:
        result = await db.execute(
            select(Message)
            .where(Message.chat_id == chat.id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def delete_message(db: AsyncSession, message_id: str, chat_id: str) -> None:
        """
        Delete one message (and its media). If it was the chat's last
        message, the pointer moves to the newest remaining message or is
        cleared when the chat is empty.
        """
        result = await db.execute(select(Message).where(Message.message_id == message_id))
        message = result.scalar_one_or_none()
        if message is None:
            raise NotFoundError("Message not found")

        chat = await ChatService.get_chat(db, chat_id)
        if message.chat_id != chat.id:
            raise NotFoundError(f"Message {message_id} not found in chat {chat_id}")

        await db.execute(delete(Media).where(Media.message_id == message.id))
        await db.delete(message)
        await db.flush()

        if chat.last_message_id == message.id:
            newest = await MessageService._newest_message(db, chat)
            chat.last_message_id = newest.id if newest is not None else None
            chat.updated_at = utcnow()
            await db.flush()
            logger.info(
                "Last message pointer moved",
                chat_id=chat.chat_id,
                last_message_id=chat.last_message_id,
            )

        logger.info("Message deleted", message_id=message_id, chat_id=chat_id)

    @staticmethod
    async def get_recent_messages_by_user(
        db: AsyncSession, user_id: str
    ) -> list[RecentMessage]:
        """Last message of every chat the user takes part in."""
        chats = await ChatService.chats_for_user(db, user_id)
        return [
            RecentMessage(
                chat_id=chat.chat_id,
                last_message=await ChatService.last_message_summary(db, chat),
            )
            for chat in chats
        ]
