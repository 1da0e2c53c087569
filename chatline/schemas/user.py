"""
schemas/user.py
---------------
Pydantic models for the user directory.

Email format is checked in UserService (so direct service callers get the
same ValidationError as HTTP callers); here it is a plain string.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from chatline.models.user import UserRole
from chatline.schemas.base import CamelModel


class ProfileDetails(CamelModel):
    email: Optional[str] = None
    picture: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None


class UserCreate(CamelModel):
    user_id: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.user
    name: str = Field(..., max_length=255)
    created_at: Optional[datetime] = Field(
        default=None,
        description="Creation time; epoch milliseconds are accepted",
    )
    profile_details: Optional[ProfileDetails] = None


class UserProfileUpdate(CamelModel):
    name: Optional[str] = Field(default=None, max_length=255)
    profile_details: Optional[ProfileDetails] = None


class ChatMemberAdd(CamelModel):
    """Body of POST /chats/{chatId}/members."""

    user_id: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., max_length=255)
    role: UserRole = UserRole.user
    created_at: Optional[datetime] = None


class ChatMemberAdded(CamelModel):
    success: bool = True
    user_id: str
    chat_id: str


class UserRead(CamelModel):
    id: str
    user_id: str
    name: str
    role: str
    created_at: datetime
    profile_details: Optional[ProfileDetails] = None
