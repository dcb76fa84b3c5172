"""Login, logout and current-user routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from scoutcrm.config import settings
from scoutcrm.models.scouts import UserRead
from scoutcrm.schemas.auth import AuthUser
from scoutcrm.services.auth_service import (
    REMEMBER_ME_TTL,
    SESSION_COOKIE_NAME,
    authenticate_user,
    issue_session,
    revoke_session,
)
from scoutcrm.services.authz import get_current_user
from scoutcrm.utils.db_async import get_session

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=UserRead)
async def login(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    remember: str | None = Form(default=None),
    db: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """Check credentials and set an httpOnly session cookie on success."""
    user = await authenticate_user(db, email=email, password=password)
    if user is None or user.id is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    remember_me = remember is not None and remember not in {"0", "", "false", "False"}
    raw_token, _session = await issue_session(
        db,
        user_id=user.id,
        remember_me=remember_me,
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )

    response = JSONResponse(
        UserRead.model_validate(user, from_attributes=True).model_dump(mode="json")
    )
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=raw_token,
        httponly=True,
        samesite="lax",
        secure=not settings.is_dev,
        path="/",
        max_age=int(REMEMBER_ME_TTL.total_seconds()) if remember_me else None,
    )
    return response


@router.post("/logout")
async def logout(
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """Revoke the current session and clear the cookie."""
    raw_token = request.cookies.get(SESSION_COOKIE_NAME)
    if raw_token:
        await revoke_session(db, raw_token=raw_token)

    response = JSONResponse({"ok": True})
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return response


@router.get("/me", response_model=UserRead)
async def me(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    return user
