"""
services/user_service.py
------------------------
Business logic for the user directory: creation on first sign-in, lookup,
search, and profile edits.

Users are addressed by their external user_id everywhere in the API; the
internal id only appears in enriched read results.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from chatline.core.config import settings
from chatline.core.exceptions import NotFoundError, ValidationError
from chatline.core.logging import get_logger
from chatline.core.validators import validate_email
from chatline.models.user import User, UserRole
from chatline.schemas.user import ProfileDetails, UserCreate, UserProfileUpdate

logger = get_logger(__name__)


def _prepare_profile_details(details: ProfileDetails) -> dict:
    """Keep only the supplied fields, validating the email if present."""
    prepared = details.model_dump(exclude_none=True)
    if "email" in prepared:
        validate_email(prepared["email"])
    return prepared


class UserService:
    @staticmethod
    async def get_user(db: AsyncSession, user_id: str) -> User | None:
        result = await db.execute(select(User).where(User.user_id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def read_user(db: AsyncSession, user_id: str) -> User:
        """
        Resolve an external user_id.
        Raises NotFoundError if no such user exists.
        """
        user = await UserService.get_user(db, user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user

    @staticmethod
    async def create_user(db: AsyncSession, data: UserCreate) -> User:
        """
        Idempotent creation: an existing user_id returns the stored record
        unchanged and nothing is inserted.
        Raises ValidationError on a malformed profile email.
        """
        existing = await UserService.get_user(db, data.user_id)
        if existing is not None:
            logger.debug("User already exists", user_id=data.user_id)
            return existing

        details = (
            _prepare_profile_details(data.profile_details)
            if data.profile_details is not None
            else None
        )
        user = User(
            user_id=data.user_id,
            name=data.name,
            role=data.role.value,
        )
        if data.created_at is not None:
            user.created_at = data.created_at
        user.set_profile_details(details)
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race against a concurrent first sign-in.
            await db.rollback()
            logger.info("Concurrent user creation", user_id=data.user_id)
            return await UserService.read_user(db, data.user_id)

        logger.info("User created", id=user.id, user_id=user.user_id, role=user.role)
        return user

    @staticmethod
    async def search_users(
        db: AsyncSession,
        search_term: str,
        exclude_user_id: str,
        limit: Optional[int] = None,
    ) -> list[User]:
        """
        Case-insensitive substring search on name or email, excluding the
        caller. An empty term returns no results.
        """
        if not search_term:
            return []

        result = await db.execute(
            select(User)
            .where(
                User.user_id != exclude_user_id,
                or_(
                    User.name.icontains(search_term, autoescape=True),
                    User.email.icontains(search_term, autoescape=True),
                ),
            )
            .limit(limit or settings.SEARCH_RESULT_LIMIT)
        )
        return list(result.scalars().all())

    @staticmethod
    async def update_profile_details(
        db: AsyncSession,
        user_id: str,
        data: UserProfileUpdate,
    ) -> User:
        """
        Partial update of name and/or profile details.

        A supplied profileDetails object replaces the stored details with
        exactly the fields it carries.
        """
        user = await UserService.read_user(db, user_id)

        if not data.name and data.profile_details is None:
            raise ValidationError("No update data provided")

        details = (
            _prepare_profile_details(data.profile_details)
            if data.profile_details is not None
            else None
        )
        if data.name:
            user.name = data.name
        if details is not None:
            user.set_profile_details(details)
        await db.flush()

        logger.info(
            "User profile updated",
            user_id=user.user_id,
            name_changed=bool(data.name),
            profile_fields=sorted(details) if details is not None else None,
        )
        return user

    @staticmethod
    async def get_or_create_member(
        db: AsyncSession,
        user_id: str,
        name: str,
        role: UserRole,
        created_at: Optional[datetime] = None,
    ) -> User:
        """Resolve a user for chat membership, creating a bare profile if needed."""
        return await UserService.create_user(
            db,
            UserCreate(user_id=user_id, name=name, role=role, created_at=created_at),
        )
