"""
services/chat_service.py
------------------------
Business logic for the chat registry.

Participant sets:
  The participant set of a new chat is the resolved participants plus the
  sender, de-duplicated in order of first appearance. Two chats hold the same
  participants when their sets are equal regardless of order; lookups use the
  canonical participant_key (sorted internal ids) so both create_chat and
  get_or_create_chat agree.

Private chats:
  Exactly two participants. A partial unique index on participant_key makes
  the database reject a second private chat for the same pair; the losing
  insert is rolled back and the existing chat returned.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from chatline.core.exceptions import NotFoundError, ValidationError
from chatline.core.logging import get_logger
from chatline.db.base import utcnow
from chatline.models.chat import Chat, ChatParticipant, ChatType, make_participant_key
from chatline.models.message import Media, Message, MessageType
from chatline.models.user import User, UserRole
from chatline.schemas.chat import (
    ChatRead,
    ChatSummary,
    LastMessageSummary,
    ParticipantSummary,
)
from chatline.services.user_service import UserService

logger = get_logger(__name__)


class ChatService:
    @staticmethod
    async def get_chat(db: AsyncSession, chat_id: str) -> Chat:
        """
        Resolve a public chat_id.
        Raises NotFoundError if no such chat exists.
        """
        result = await db.execute(select(Chat).where(Chat.chat_id == chat_id))
        chat = result.scalar_one_or_none()
        if chat is None:
            raise NotFoundError(f"Chat with ID {chat_id} not found")
        return chat

    @staticmethod
    async def _resolve_participants(
        db: AsyncSession,
        sender_id: str,
        participant_ids: list[str],
    ) -> tuple[User, list[str]]:
        sender = await UserService.read_user(db, sender_id)
        participants: list[str] = []
        for participant_id in participant_ids:
            user = await UserService.read_user(db, participant_id)
            participants.append(user.id)
        participants.append(sender.id)
        # dict preserves first-appearance order
        return sender, list(dict.fromkeys(participants))

    @staticmethod
    async def _find_by_participants(
        db: AsyncSession,
        chat_type: ChatType,
        key: str,
    ) -> Chat | None:
        result = await db.execute(
            select(Chat)
            .where(Chat.type == chat_type.value, Chat.participant_key == key)
            .order_by(Chat.created_at)
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def create_chat(
        db: AsyncSession,
        sender_id: str,
        participant_ids: list[str],
        chat_type: ChatType,
    ) -> Chat:
        """
        Create a chat between the sender and the given participants.

        Raises:
            NotFoundError: the sender or any participant is unknown.
            ValidationError: a private chat would not have exactly 2 members.

        A private chat that already exists for the same pair is returned
        instead of inserting a duplicate.
        """
        sender, participants = await ChatService._resolve_participants(
            db, sender_id, participant_ids
        )

        if chat_type == ChatType.private and len(participants) != 2:
            raise ValidationError("Private chats must have exactly 2 participants")

        key = make_participant_key(participants)
        if chat_type == ChatType.private:
            existing = await ChatService._find_by_participants(db, chat_type, key)
            if existing is not None:
                logger.info("Private chat reused", chat_id=existing.chat_id)
                return existing

        now = utcnow()
        chat = Chat(
            sender_id=sender.id,
            type=chat_type.value,
            created_at=now,
            updated_at=now,
        )
        chat.set_participants(participants)
        db.add(chat)
        try:
            await db.flush()
        except IntegrityError:
            # A concurrent request created the same private chat first.
            await db.rollback()
            existing = await ChatService._find_by_participants(db, chat_type, key)
            if existing is None:
                raise
            logger.info("Private chat reused after conflict", chat_id=existing.chat_id)
            return existing

        logger.info(
            "Chat created",
            chat_id=chat.chat_id,
            type=chat.type,
            sender_id=sender.user_id,
            participant_count=len(participants),
        )
        return chat

    @staticmethod
    async def get_or_create_chat(
        db: AsyncSession,
        sender_id: str,
        participant_ids: list[str],
        chat_type: ChatType,
    ) -> Chat:
        """
        Return the chat of this type whose participant set equals the
        computed one, creating it when none exists.
        """
        _, participants = await ChatService._resolve_participants(
            db, sender_id, participant_ids
        )
        existing = await ChatService._find_by_participants(
            db, chat_type, make_participant_key(participants)
        )
        if existing is not None:
            logger.debug("Existing chat found", chat_id=existing.chat_id)
            return existing
        return await ChatService.create_chat(db, sender_id, participant_ids, chat_type)

    @staticmethod
    async def _chats_for_user(db: AsyncSession, user: User) -> list[Chat]:
        result = await db.execute(
            select(Chat)
            .join(ChatParticipant, ChatParticipant.chat_id == Chat.id)
            .where(ChatParticipant.user_id == user.id)
            .order_by(Chat.updated_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def last_message_summary(
        db: AsyncSession, chat: Chat
    ) -> Optional[LastMessageSummary]:
        if chat.last_message_id is None:
            return None
        message = await db.get(Message, chat.last_message_id)
        if message is None:
            return None
        return LastMessageSummary(
            content=message.content,
            created_at=message.created_at,
            sender_id=message.sender_id,
        )

    @staticmethod
    async def get_chats(db: AsyncSession, user_id: str) -> list[ChatSummary]:
        """
        List the user's chats, most recently active first, with participant
        summaries and the last message.
        """
        user = await UserService.read_user(db, user_id)
        chats = await ChatService._chats_for_user(db, user)

        summaries = []
        for chat in chats:
            participants = []
            for participant_id in chat.participants:
                participant = await db.get(User, participant_id)
                if participant is None:
                    continue
                participants.append(
                    ParticipantSummary(
                        id=participant.id,
                        user_id=participant.user_id,
                        name=participant.name or None,
                    )
                )
            summaries.append(
                ChatSummary(
                    **ChatRead.model_validate(chat).model_dump(exclude={"participants"}),
                    participants=participants,
                    last_message=await ChatService.last_message_summary(db, chat),
                )
            )
        return summaries

    @staticmethod
    async def chats_for_user(db: AsyncSession, user_id: str) -> list[Chat]:
        user = await UserService.read_user(db, user_id)
        return await ChatService._chats_for_user(db, user)

    @staticmethod
    async def add_user_to_chat(
        db: AsyncSession,
        chat_id: str,
        user_id: str,
        name: str,
        role: UserRole = UserRole.user,
        created_at: Optional[datetime] = None,
    ) -> Chat:
        """
        Get-or-create the user, then add them to the chat if not already a
        participant. Private chats cannot grow beyond two members.
        """
        user = await UserService.get_or_create_member(db, user_id, name, role, created_at)
        chat = await ChatService.get_chat(db, chat_id)

        if user.id in chat.participants:
            return chat
        if chat.type == ChatType.private.value:
            raise ValidationError("Private chats must have exactly 2 participants")

        chat.add_participant(user.id)
        chat.updated_at = utcnow()
        await db.flush()
        logger.info("User added to chat", chat_id=chat.chat_id, user_id=user.user_id)
        return chat

    @staticmethod
    async def delete_chat(db: AsyncSession, chat_id: str) -> None:
        """
        Delete a chat with all of its messages and their media.
        Raises NotFoundError if the chat does not exist.
        """
        chat = await ChatService.get_chat(db, chat_id)

        result = await db.execute(select(Message).where(Message.chat_id == chat.id))
        messages = list(result.scalars().all())

        media_owner_ids = [
            message.id
            for message in messages
            if message.type != MessageType.text.value and message.media_url
        ]
        if media_owner_ids:
            await db.execute(delete(Media).where(Media.message_id.in_(media_owner_ids)))
        await db.execute(delete(Message).where(Message.chat_id == chat.id))
        await db.delete(chat)
        await db.flush()

        logger.info(
            "Chat deleted",
            chat_id=chat_id,
            messages_deleted=len(messages),
            media_deleted=len(media_owner_ids),
        )
