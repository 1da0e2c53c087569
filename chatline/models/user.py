"""
models/user.py
--------------
User directory ORM model.

user_id is the external identity handed out by the identity provider; id is
the internal key that chats and messages reference. Profile details are
stored as flat nullable columns so they can be searched with plain SQL.
"""

import uuid
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Float, String
from sqlalchemy.orm import Mapped, mapped_column

from chatline.db.base import Base, TimestampMixin

PROFILE_FIELDS = ("email", "picture", "height", "weight")


class UserRole(str, PyEnum):
    admin = "admin"
    user = "user"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.user.value
    )

    # Profile details
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    picture: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    height: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    @property
    def profile_details(self) -> Optional[dict]:
        details = {
            field: getattr(self, field)
            for field in PROFILE_FIELDS
            if getattr(self, field) is not None
        }
        return details or None

    def set_profile_details(self, details: Optional[dict]) -> None:
        """Replace all profile fields; missing keys are cleared."""
        details = details or {}
        for field in PROFILE_FIELDS:
            setattr(self, field, details.get(field))

    def __repr__(self) -> str:
        return f"<User id={self.id} user_id={self.user_id} role={self.role}>"
