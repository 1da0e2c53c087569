"""
schemas/chat.py
---------------
Pydantic models for the chat registry.

Naming convention:
  ChatCreate   → inbound request body
  ChatRead     → plain chat record
  ChatSummary  → chat list entry enriched with participants and last message
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from chatline.models.chat import ChatType
from chatline.schemas.base import CamelModel


class ChatCreate(CamelModel):
    sender_id: str = Field(..., min_length=1)
    participant_ids: list[str] = Field(default_factory=list)
    type: ChatType


class ChatRead(CamelModel):
    id: str
    chat_id: str
    sender_id: str
    participants: list[str]
    type: str
    last_message_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ParticipantSummary(CamelModel):
    id: str
    user_id: str
    name: Optional[str] = None


class LastMessageSummary(CamelModel):
    content: str
    created_at: datetime
    sender_id: str


class ChatSummary(ChatRead):
    participants: list[ParticipantSummary]  # type: ignore[assignment]
    last_message: Optional[LastMessageSummary] = None


class RecentMessage(CamelModel):
    chat_id: str
    last_message: Optional[LastMessageSummary] = None
