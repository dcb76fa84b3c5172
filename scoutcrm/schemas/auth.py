"""Auth tables for scouts and admins.

Users sign in with email and password; the browser holds an opaque session
token whose HMAC is stored in ``auth_sessions``.
"""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field, SQLModel


class AuthUser(SQLModel, table=True):  # type: ignore[call-arg]
    """Scout or admin account."""

    __tablename__ = "auth_users"

    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True)
    role: str = Field(default="scout", index=True)  # "admin" | "scout"
    is_active: bool = Field(default=True, index=True)
    password_hash: str

    full_name: str | None = Field(default=None)
    country: str | None = Field(default=None)
    agency: str | None = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    last_login_at: datetime | None = Field(default=None)


class AuthSession(SQLModel, table=True):  # type: ignore[call-arg]
    """Server-side session (cookie token is hashed)."""

    __tablename__ = "auth_sessions"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="auth_users.id", index=True)
    token_hash: str = Field(unique=True, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    last_seen_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    expires_at: datetime = Field(index=True)
    revoked_at: datetime | None = Field(default=None, index=True)

    ip: str | None = Field(default=None)
    user_agent: str | None = Field(default=None)
    remember_me: bool = Field(default=False)
