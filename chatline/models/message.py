"""
models/message.py
-----------------
Message ledger ORM models.

Messages are listed newest-first per chat, served by the composite
(chat_id, created_at) index. Media rows link a non-text message to its
binary asset and go away with the message.
"""

import uuid
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from chatline.db.base import Base, TimestampMixin


class MessageType(str, PyEnum):
    text = "text"
    image = "image"
    video = "video"
    audio = "audio"
    file = "file"


class Message(Base, TimestampMixin):
    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_chat_id_created_at", "chat_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    message_id: Mapped[str] = mapped_column(
        String(36),
        unique=True,
        nullable=False,
        index=True,
        default=lambda: str(uuid.uuid4()),
    )
    chat_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("chats.id", ondelete="CASCADE"), nullable=False
    )
    sender_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=MessageType.text.value
    )
    media_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)

    def __repr__(self) -> str:
        return f"<Message id={self.id} chat_id={self.chat_id} type={self.type}>"


class Media(Base, TimestampMixin):
    __tablename__ = "media"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    message_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("messages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)

    def __repr__(self) -> str:
        return f"<Media id={self.id} message_id={self.message_id}>"
