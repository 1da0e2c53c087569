"""
dependencies.py
---------------
FastAPI dependency injection functions for identity verification.

Flow:
  1. HTTPBearer extracts the identity token from the Authorization header.
  2. get_identity validates and parses the JWT (no DB round-trip).
  3. get_current_user loads the User whose external user_id is the token's
     sub claim; /sign-in must have been called once before.
"""

from typing import Annotated, Any, Dict

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from chatline.core.logging import get_logger
from chatline.core.security import decode_identity_token
from chatline.db.session import get_db
from chatline.models.user import User
from chatline.services.user_service import UserService

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_identity(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> Dict[str, Any]:
    """Decode the identity token. Raises 401 if it is missing or invalid."""
    if credentials is None:
        raise _CREDENTIALS_EXCEPTION
    try:
        claims = decode_identity_token(credentials.credentials)
    except JWTError as exc:
        logger.warning("Identity token decode failed", error=str(exc))
        raise _CREDENTIALS_EXCEPTION
    if not claims.get("sub"):
        raise _CREDENTIALS_EXCEPTION
    return claims


async def get_current_user(
    claims: Annotated[Dict[str, Any], Depends(get_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Load the signed-in user. Raises 401 if the identity is valid but the
    user was never created.
    """
    user = await UserService.get_user(db, claims["sub"])
    if user is None:
        logger.warning("User from valid token not found in DB", user_id=claims["sub"])
        raise _CREDENTIALS_EXCEPTION
    return user
