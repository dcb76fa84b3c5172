"""Request/response models for auth and scout management."""

from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel


class UserRead(SQLModel):
    """Public view of an account (never includes the password hash)."""

    id: int
    email: str
    role: str
    is_active: bool
    full_name: Optional[str] = None
    country: Optional[str] = None
    agency: Optional[str] = None
    created_at: datetime
    last_login_at: Optional[datetime] = None


class ScoutListItem(UserRead):
    follow_count: int = 0


class ScoutCreate(SQLModel):
    email: str
    password: str
    role: str = "scout"
    full_name: Optional[str] = None
    country: Optional[str] = None
    agency: Optional[str] = None


class SetRoleRequest(SQLModel):
    scout_id: int
    role: str


class ToggleActiveRequest(SQLModel):
    scout_id: int
    is_active: bool
