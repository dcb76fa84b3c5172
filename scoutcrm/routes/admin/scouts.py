"""Admin scout management routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from scoutcrm.models.scouts import (
    ScoutCreate,
    ScoutListItem,
    SetRoleRequest,
    ToggleActiveRequest,
    UserRead,
)
from scoutcrm.schemas.auth import AuthUser
from scoutcrm.services import scout_admin_service
from scoutcrm.utils.db_async import get_session

router = APIRouter(prefix="/scouts", tags=["admin-scouts"])


def _as_http_error(exc: ValueError) -> HTTPException:
    if str(exc) == "scout_not_found":
        return HTTPException(status_code=404, detail="Scout not found")
    if str(exc) == "email_taken":
        return HTTPException(status_code=409, detail="A user with this email already exists")
    return HTTPException(status_code=400, detail=str(exc))


def _read(user: AuthUser) -> UserRead:
    return UserRead.model_validate(user, from_attributes=True)


@router.get("", response_model=list[ScoutListItem])
async def list_scouts(
    q: str | None = Query(default=None),
    role: str | None = Query(default=None),
    db: AsyncSession = Depends(get_session),
) -> list[ScoutListItem]:
    """List users with how many players each one follows."""
    rows = await scout_admin_service.list_scouts(db, q=q, role=role)
    return [
        ScoutListItem(**_read(row.user).model_dump(), follow_count=row.follow_count)
        for row in rows
    ]


@router.post("", response_model=UserRead, status_code=201)
async def create_scout(
    body: ScoutCreate,
    db: AsyncSession = Depends(get_session),
) -> UserRead:
    try:
        user = await scout_admin_service.create_scout(
            db,
            email=body.email,
            password=body.password,
            role=body.role,
            full_name=body.full_name,
            country=body.country,
            agency=body.agency,
        )
    except ValueError as exc:
        raise _as_http_error(exc) from exc
    return _read(user)


@router.post("/set-role", response_model=UserRead)
async def set_role(
    body: SetRoleRequest,
    db: AsyncSession = Depends(get_session),
) -> UserRead:
    try:
        user = await scout_admin_service.set_role(db, body.scout_id, body.role)
    except ValueError as exc:
        raise _as_http_error(exc) from exc
    return _read(user)


@router.post("/toggle-active", response_model=UserRead)
async def toggle_active(
    body: ToggleActiveRequest,
    db: AsyncSession = Depends(get_session),
) -> UserRead:
    """Activate or deactivate an account; deactivation ends its sessions."""
    try:
        user = await scout_admin_service.set_active(db, body.scout_id, body.is_active)
    except ValueError as exc:
        raise _as_http_error(exc) from exc
    return _read(user)
