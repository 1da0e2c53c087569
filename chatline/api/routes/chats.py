"""
api/routes/chats.py
-------------------
Chat registry endpoints.

POST   /chats                    — createChat
POST   /chats/get-or-create      — getOrCreateChat
DELETE /chats/{chatId}           — deleteChat (cascades messages and media)
POST   /chats/{chatId}/members   — addUserWithChat
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from chatline.db.session import get_db
from chatline.schemas.base import OperationResult
from chatline.schemas.chat import ChatCreate, ChatRead
from chatline.schemas.user import ChatMemberAdd, ChatMemberAdded
from chatline.services.chat_service import ChatService

router = APIRouter(prefix="/chats", tags=["Chats"])


@router.post(
    "",
    response_model=ChatRead,
    summary="Create a chat (private chats are reused for the same pair)",
)
async def create_chat(
    body: ChatCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ChatRead:
    chat = await ChatService.create_chat(
        db,
        sender_id=body.sender_id,
        participant_ids=body.participant_ids,
        chat_type=body.type,
    )
    return ChatRead.model_validate(chat)


@router.post(
    "/get-or-create",
    response_model=ChatRead,
    summary="Return the chat with exactly these participants, creating it if needed",
)
async def get_or_create_chat(
    body: ChatCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ChatRead:
    chat = await ChatService.get_or_create_chat(
        db,
        sender_id=body.sender_id,
        participant_ids=body.participant_ids,
        chat_type=body.type,
    )
    return ChatRead.model_validate(chat)


@router.delete(
    "/{chat_id}",
    response_model=OperationResult,
    summary="Delete a chat with its messages and media",
)
async def delete_chat(
    chat_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> OperationResult:
    await ChatService.delete_chat(db, chat_id)
    return OperationResult(
        success=True,
        message="Chat and associated data deleted successfully",
    )


@router.post(
    "/{chat_id}/members",
    response_model=ChatMemberAdded,
    summary="Add a user (created on the fly if unknown) to a chat",
)
async def add_user_with_chat(
    chat_id: str,
    body: ChatMemberAdd,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ChatMemberAdded:
    await ChatService.add_user_to_chat(
        db,
        chat_id=chat_id,
        user_id=body.user_id,
        name=body.name,
        role=body.role,
        created_at=body.created_at,
    )
    return ChatMemberAdded(user_id=body.user_id, chat_id=chat_id)
