"""
schemas/message.py
------------------
Pydantic models for the message ledger.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from chatline.models.message import MessageType
from chatline.schemas.base import CamelModel


class MessageCreate(CamelModel):
    sender_id: str = Field(..., min_length=1)
    content: str = Field(
        ...,
        max_length=8000,
        examples=["See you at 6?"],
    )
    type: MessageType = MessageType.text
    media_url: Optional[str] = Field(
        default=None,
        description="Location of the attached asset for non-text messages",
    )


class MessageRead(CamelModel):
    id: str
    message_id: str
    chat_id: str
    sender_id: str
    content: str
    type: str
    media_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MessageListResponse(CamelModel):
    total: int
    items: list[MessageRead]
