"""
models/chat.py
--------------
Chat registry ORM models.

Participants are kept in an association table with a position column so the
creation order survives a round trip, while equality between chats is set
equality. participant_key holds the sorted internal user ids joined by ","
and backs a partial unique index: at most one private chat per pair.

last_message_id is a denormalised pointer to the newest message of the chat.
It is kept without a foreign key (chats and messages would otherwise
reference each other) and is maintained by MessageService.
"""

import uuid
from enum import Enum as PyEnum
from typing import Iterable, Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chatline.db.base import Base, TimestampMixin


class ChatType(str, PyEnum):
    private = "private"
    group = "group"


def make_participant_key(user_ids: Iterable[str]) -> str:
    return ",".join(sorted(set(user_ids)))


class Chat(Base, TimestampMixin):
    __tablename__ = "chats"
    __table_args__ = (
        Index(
            "uq_chats_private_participants",
            "participant_key",
            unique=True,
            postgresql_where=text("type = 'private'"),
            sqlite_where=text("type = 'private'"),
        ),
        Index("ix_chats_type_participant_key", "type", "participant_key"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    chat_id: Mapped[str] = mapped_column(
        String(36),
        unique=True,
        nullable=False,
        index=True,
        default=lambda: str(uuid.uuid4()),
    )
    sender_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    participant_key: Mapped[str] = mapped_column(Text, nullable=False)
    last_message_id: Mapped[Optional[str]] = mapped_column(
        String(36), nullable=True
    )

    # Relationships
    members: Mapped[list["ChatParticipant"]] = relationship(
        back_populates="chat",
        cascade="all, delete-orphan",
        order_by="ChatParticipant.position",
        lazy="selectin",
    )

    @property
    def participants(self) -> list[str]:
        """Internal user ids in creation order."""
        return [member.user_id for member in self.members]

    def set_participants(self, user_ids: list[str]) -> None:
        self.members = [
            ChatParticipant(user_id=user_id, position=position)
            for position, user_id in enumerate(user_ids)
        ]
        self.participant_key = make_participant_key(user_ids)

    def add_participant(self, user_id: str) -> None:
        self.members.append(
            ChatParticipant(user_id=user_id, position=len(self.members))
        )
        self.participant_key = make_participant_key(self.participants)

    def __repr__(self) -> str:
        return f"<Chat id={self.id} chat_id={self.chat_id} type={self.type}>"


class ChatParticipant(Base):
    __tablename__ = "chat_participants"

    chat_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("chats.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        primary_key=True,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    chat: Mapped["Chat"] = relationship(back_populates="members")

    def __repr__(self) -> str:
        return f"<ChatParticipant chat_id={self.chat_id} user_id={self.user_id}>"
