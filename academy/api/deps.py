"""
API Dependencies

Reusable dependencies for API routes: backend selection, authentication
and role checks.
"""

import uuid
from typing import Annotated, AsyncGenerator, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from academy.backends.base import Backend
from academy.backends.rest import RestBackend
from academy.backends.sql import SqlBackend
from academy.core.config import settings
from academy.core.database import get_session_maker
from academy.core.http_client import get_http_client
from academy.core.security import decode_access_token
from academy.models.enums import UserRole
from academy.schemas.records import ProfileRecord


# Tokens come from the auth provider; tokenUrl only feeds the OpenAPI docs
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/v1/token")


async def get_backend(
    token: Annotated[str, Depends(oauth2_scheme)],
) -> AsyncGenerator[Backend, None]:
    """
    Dependency that provides the backend gateway for this request.

    In REST mode the caller's token is forwarded so row-level security
    applies; in SQL mode a session is opened for the request.
    """
    if settings.uses_rest_backend:
        yield RestBackend(
            client=get_http_client(),
            base_url=settings.SUPABASE_URL,
            api_key=settings.SUPABASE_ANON_KEY,
            access_token=token,
        )
        return

    session_maker = get_session_maker()
    async with session_maker() as session:
        yield SqlBackend(session)


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    backend: Annotated[Backend, Depends(get_backend)],
) -> ProfileRecord:
    """
    Dependency to get the current authenticated user's profile.

    This dependency:
    1. Decodes and validates the bearer token
    2. Reads the profile whose id is the token subject
    3. Raises 401 if the token is invalid or no profile exists

    Returns:
        ProfileRecord: The authenticated user's profile.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    user_id_str: str | None = payload.get("sub")
    if user_id_str is None:
        raise credentials_exception

    try:
        user_id = uuid.UUID(user_id_str)
    except ValueError:
        raise credentials_exception

    profile = await backend.get_profile(user_id)
    if profile is None:
        raise credentials_exception

    return profile


def require_role(*roles: UserRole) -> Callable:
    """
    Build a dependency that only lets the given roles through.

    Usage:
        @router.get("/admin/things")
        async def list_things(admin: Annotated[ProfileRecord, Depends(require_role(UserRole.ADMIN))]):
            ...
    """
    async def dependency(
        current_user: Annotated[ProfileRecord, Depends(get_current_user)],
    ) -> ProfileRecord:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied",
            )
        return current_user

    return dependency


CurrentUser = Annotated[ProfileRecord, Depends(get_current_user)]
CurrentStudent = Annotated[ProfileRecord, Depends(require_role(UserRole.STUDENT))]
CurrentAdmin = Annotated[ProfileRecord, Depends(require_role(UserRole.ADMIN))]
BackendDep = Annotated[Backend, Depends(get_backend)]
