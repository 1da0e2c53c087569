"""
core/security.py
----------------
Identity token utilities.

Users are authenticated by an external identity provider; the backend only
verifies the signed token it hands to the mobile client. The token carries:
  - sub:     the external userId (the key of the user directory)
  - name:    display name used on first sign-in
  - email / picture: optional profile details
Tokens are signed with HS256 using the shared SECRET_KEY.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt

from chatline.core.config import settings


def create_identity_token(
    user_id: str,
    name: str,
    email: Optional[str] = None,
    picture: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Mint an identity token.

    Used by local tooling and tests to stand in for the identity provider.

    Args:
        user_id: External user identity (stored in 'sub' claim).
        name: Display name.
        email: Optional email claim.
        picture: Optional avatar URL claim.
        expires_delta: Optional custom expiry; defaults to settings value.

    Returns:
        Signed JWT string.
    """
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta or timedelta(minutes=settings.IDENTITY_TOKEN_EXPIRE_MINUTES)
    )
    payload: Dict[str, Any] = {
        "sub": user_id,
        "name": name,
        "exp": expire,
        "iat": now,
    }
    if email is not None:
        payload["email"] = email
    if picture is not None:
        payload["picture"] = picture
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_identity_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate an identity token.

    Raises:
        JWTError: If the token is invalid, expired, or tampered with.

    Returns:
        Raw payload dict.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
