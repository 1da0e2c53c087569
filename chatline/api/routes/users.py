"""
api/routes/users.py
-------------------
User directory endpoints.

POST  /users                         — createUser (idempotent)
GET   /users/search                  — searchUsers
GET   /users/{userId}                — readUser
PATCH /users/{userId}/profile        — updateProfileDetails
GET   /users/{userId}/chats          — getChats
GET   /users/{userId}/recent-messages — getRecentMessagesByUser
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from chatline.db.session import get_db
from chatline.schemas.chat import ChatSummary, RecentMessage
from chatline.schemas.user import UserCreate, UserProfileUpdate, UserRead
from chatline.services.chat_service import ChatService
from chatline.services.message_service import MessageService
from chatline.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "",
    response_model=UserRead,
    summary="Create a user, or return the existing one for this userId",
)
async def create_user(
    body: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserRead:
    user = await UserService.create_user(db, body)
    return UserRead.model_validate(user)


@router.get(
    "/search",
    response_model=list[UserRead],
    summary="Search users by name or email",
)
async def search_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    search_term: str = Query(default="", alias="searchTerm"),
    user_id: str = Query(..., alias="userId", description="Caller, excluded from results"),
) -> list[UserRead]:
    users = await UserService.search_users(db, search_term, user_id)
    return [UserRead.model_validate(u) for u in users]


@router.get(
    "/{user_id}",
    response_model=UserRead,
    summary="Read a user by external userId",
)
async def read_user(
    user_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserRead:
    user = await UserService.read_user(db, user_id)
    return UserRead.model_validate(user)


@router.patch(
    "/{user_id}/profile",
    response_model=UserRead,
    summary="Update name and/or profile details",
)
async def update_profile_details(
    user_id: str,
    body: UserProfileUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserRead:
    user = await UserService.update_profile_details(db, user_id, body)
    return UserRead.model_validate(user)


@router.get(
    "/{user_id}/chats",
    response_model=list[ChatSummary],
    summary="List the user's chats with participants and last message",
)
async def get_chats(
    user_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[ChatSummary]:
    return await ChatService.get_chats(db, user_id)


@router.get(
    "/{user_id}/recent-messages",
    response_model=list[RecentMessage],
    summary="Last message of every chat the user is in",
)
async def get_recent_messages_by_user(
    user_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[RecentMessage]:
    return await MessageService.get_recent_messages_by_user(db, user_id)
