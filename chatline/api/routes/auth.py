"""
api/routes/auth.py
------------------
Sign-in endpoints.

POST /sign-in  — First sign-in creates the user from the identity token's
                 claims; later sign-ins return the stored user unchanged.
GET  /me       — Return the signed-in user's profile.
"""

from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from chatline.db.session import get_db
from chatline.dependencies import get_current_user, get_identity
from chatline.models.user import User, UserRole
from chatline.schemas.user import ProfileDetails, UserCreate, UserRead
from chatline.services.user_service import UserService

router = APIRouter(tags=["Authentication"])


@router.post(
    "/sign-in",
    response_model=UserRead,
    summary="Sign in with an identity token",
)
async def sign_in(
    claims: Annotated[Dict[str, Any], Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserRead:
    """
    Initialise the user record for the identity in the Bearer token.
    The token's sub claim becomes the userId; name, email and picture
    seed the profile on first sign-in only.
    """
    user = await UserService.create_user(
        db,
        UserCreate(
            user_id=claims["sub"],
            role=UserRole.user,
            name=claims.get("name") or "",
            profile_details=ProfileDetails(
                email=claims.get("email"),
                picture=claims.get("picture"),
            ),
        ),
    )
    return UserRead.model_validate(user)


@router.get(
    "/me",
    response_model=UserRead,
    summary="Get the currently signed-in user",
)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserRead:
    return UserRead.model_validate(current_user)
