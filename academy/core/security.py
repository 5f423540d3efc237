"""
Security Utilities

JWT verification for access tokens issued by the auth provider.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from academy.core.config import settings


def create_access_token(subject: str | Any, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Tokens are normally minted by the auth provider; this is used by
    local tooling and tests that need a token the service will accept.

    Args:
        subject: The subject of the token (the profile ID).
        expires_delta: Optional custom expiration time.

    Returns:
        str: Encoded JWT token.
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))

    to_encode = {
        "sub": str(subject),
        "exp": expire,
        "iat": datetime.now(timezone.utc),
    }

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


def decode_access_token(token: str) -> dict | None:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token string to decode.

    Returns:
        dict: Decoded token payload if valid, None otherwise.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_aud": False},
        )
        return payload
    except JWTError:
        return None
