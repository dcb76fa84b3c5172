"""Authorization dependencies for scout and admin API endpoints."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from scoutcrm.schemas.auth import AuthUser
from scoutcrm.services.auth_service import (
    SESSION_COOKIE_NAME,
    get_user_for_session_token,
)
from scoutcrm.utils.db_async import get_session

ROLES = ("admin", "scout")


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> AuthUser:
    """Resolve the signed-in user from the session cookie (or raise 401)."""
    raw_token = request.cookies.get(SESSION_COOKIE_NAME)
    if not raw_token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = await get_user_for_session_token(db, raw_token=raw_token)
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


async def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """Allow only admins through (raises 403 for scouts)."""
    if user.role != "admin":
        raise HTTPException(status_code=403, detail="Forbidden")
    return user


async def get_current_user_id(user: AuthUser = Depends(get_current_user)) -> int:
    """Id of the signed-in user; a user row without an id is not a session."""
    if user.id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user.id
