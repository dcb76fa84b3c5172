"""Admin management of scout accounts.

Handles listing with shortlist counts, account creation, role changes and
activation toggles.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scoutcrm.schemas.auth import AuthUser
from scoutcrm.schemas.player_follows import PlayerFollow
from scoutcrm.services.auth_service import (
    hash_password,
    normalize_email,
    revoke_user_sessions,
)
from scoutcrm.services.authz import ROLES


@dataclass
class ScoutRow:
    """A user plus the number of players on their shortlist."""

    user: AuthUser
    follow_count: int


def _clean_str(val: str | None) -> str | None:
    """Clean optional string field, returning None for empty strings."""
    if val and val.strip():
        return val.strip()
    return None


async def list_scouts(
    db: AsyncSession,
    q: str | None = None,
    role: str | None = None,
) -> list[ScoutRow]:
    """List users with their follow counts, newest first.

    Args:
        db: Async database session
        q: Matches email, full name or agency (case-insensitive)
        role: Restrict to "admin" or "scout"

    Returns:
        ScoutRow entries; users following nobody have ``follow_count`` 0.
    """
    follow_count = func.count(PlayerFollow.player_id)  # type: ignore[arg-type]
    query = (
        select(AuthUser, follow_count)
        .outerjoin(PlayerFollow, PlayerFollow.scout_id == AuthUser.id)  # type: ignore[arg-type]
        .group_by(AuthUser.id)  # type: ignore[arg-type]
        .order_by(AuthUser.created_at.desc())  # type: ignore[attr-defined]
    )

    if q and q.strip():
        term = f"%{q.strip()}%"
        query = query.where(
            or_(
                AuthUser.email.ilike(term),  # type: ignore[attr-defined]
                AuthUser.full_name.ilike(term),  # type: ignore[union-attr]
                AuthUser.agency.ilike(term),  # type: ignore[union-attr]
            )
        )
    if role:
        query = query.where(AuthUser.role == role)  # type: ignore[arg-type]

    result = await db.execute(query)
    return [ScoutRow(user=user, follow_count=int(count)) for user, count in result.all()]


async def create_scout(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    role: str = "scout",
    full_name: str | None = None,
    country: str | None = None,
    agency: str | None = None,
) -> AuthUser:
    """Create an active account.

    Raises:
        ValueError: invalid email, short password, unknown role, or
            "email_taken".
    """
    email = normalize_email(email)
    if "@" not in email:
        raise ValueError("A valid email is required")
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters")
    if role not in ROLES:
        raise ValueError(f"Invalid role: {role}")

    user = AuthUser(
        email=email,
        role=role,
        password_hash=hash_password(password),
        full_name=_clean_str(full_name),
        country=_clean_str(country),
        agency=_clean_str(agency),
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValueError("email_taken") from None
    await db.refresh(user)
    return user


async def _get_user(db: AsyncSession, user_id: int) -> AuthUser:
    user = await db.get(AuthUser, user_id)
    if user is None:
        raise ValueError("scout_not_found")
    return user


async def set_role(db: AsyncSession, user_id: int, role: str) -> AuthUser:
    """Change a user's role.

    Raises:
        ValueError: unknown role or "scout_not_found".
    """
    if role not in ROLES:
        raise ValueError(f"Invalid role: {role}")

    user = await _get_user(db, user_id)
    user.role = role
    user.updated_at = datetime.utcnow()
    await db.commit()
    await db.refresh(user)
    return user


async def set_active(db: AsyncSession, user_id: int, is_active: bool) -> AuthUser:
    """Activate or deactivate a user; deactivation revokes open sessions.

    Raises:
        ValueError: "scout_not_found".
    """
    user = await _get_user(db, user_id)
    now = datetime.utcnow()
    user.is_active = is_active
    user.updated_at = now

    if not is_active:
        await revoke_user_sessions(db, user_id)

    await db.commit()
    await db.refresh(user)
    return user
