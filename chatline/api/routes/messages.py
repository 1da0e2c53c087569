"""
api/routes/messages.py
----------------------
Message ledger endpoints.

POST   /chats/{chatId}/messages              — sendMessage
GET    /chats/{chatId}/messages              — getMessages (newest first, paginated)
DELETE /chats/{chatId}/messages/{messageId}  — deleteMessage
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from chatline.core.config import settings
from chatline.db.session import get_db
from chatline.schemas.base import OperationResult
from chatline.schemas.message import MessageCreate, MessageListResponse, MessageRead
from chatline.services.message_service import MessageService

router = APIRouter(prefix="/chats/{chat_id}/messages", tags=["Messages"])


@router.post(
    "",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message to a chat",
)
async def send_message(
    chat_id: str,
    body: MessageCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageRead:
    """
    Store the message and move the chat's last-message pointer to it.
    A malformed mediaUrl is rejected before anything is written.
    """
    message = await MessageService.send_message(
        db,
        chat_id=chat_id,
        sender_id=body.sender_id,
        content=body.content,
        message_type=body.type,
        media_url=body.media_url,
    )
    return MessageRead.model_validate(message)


@router.get(
    "",
    response_model=MessageListResponse,
    summary="List a chat's messages, newest first",
)
async def get_messages(
    chat_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = Query(
        default=settings.MESSAGE_PAGE_SIZE,
        description="Results per page; 0 returns only the total",
    ),
    offset: int = Query(default=0, description="Pagination offset"),
) -> MessageListResponse:
    total, messages = await MessageService.list_messages(
        db,
        chat_id=chat_id,
        limit=limit,
        offset=offset,
    )
    return MessageListResponse(
        total=total,
        items=[MessageRead.model_validate(m) for m in messages],
    )


@router.delete(
    "/{message_id}",
    response_model=OperationResult,
    summary="Delete a message",
)
async def delete_message(
    chat_id: str,
    message_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> OperationResult:
    await MessageService.delete_message(db, message_id=message_id, chat_id=chat_id)
    return OperationResult(success=True)
