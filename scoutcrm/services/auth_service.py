"""Login sessions and password hashing for scouts and admins.

Passwords are stored as ``pbkdf2_sha256$<iterations>$<salt>$<digest>`` so the
work factor can be raised without invalidating existing hashes. The browser
holds an opaque random token; only its HMAC (keyed by ``SECRET_KEY``) is
stored, so rotating the key signs everyone out.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import os
import secrets
from datetime import datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from scoutcrm.config import settings
from scoutcrm.schemas.auth import AuthSession, AuthUser

SESSION_COOKIE_NAME = "scoutcrm_session"

SESSION_TTL = timedelta(days=1)
REMEMBER_ME_TTL = timedelta(days=30)
IDLE_TIMEOUT = timedelta(days=1)
LAST_SEEN_UPDATE_THROTTLE = timedelta(minutes=5)

PASSWORD_ALGORITHM = "pbkdf2_sha256"
PASSWORD_ITERATIONS = 210_000
_SALT_BYTES = 16


def normalize_email(email: str) -> str:
    return email.strip().casefold()


def _unpadded_b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _from_unpadded_b64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _pbkdf2(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


# Verified against when the email is unknown, so both paths cost one pbkdf2 run
_UNKNOWN_USER_HASH = (
    f"{PASSWORD_ALGORITHM}${PASSWORD_ITERATIONS}$"
    f"{_unpadded_b64(bytes(_SALT_BYTES))}${_unpadded_b64(bytes(32))}"
)


def hash_password(password: str, *, iterations: int = PASSWORD_ITERATIONS) -> str:
    salt = os.urandom(_SALT_BYTES)
    digest = _pbkdf2(password, salt, iterations)
    return f"{PASSWORD_ALGORITHM}${iterations}${_unpadded_b64(salt)}${_unpadded_b64(digest)}"


def verify_password(password: str, encoded_hash: str) -> bool:
    """Check a password against a stored hash; malformed hashes never verify."""
    parts = encoded_hash.split("$")
    if len(parts) != 4 or parts[0] != PASSWORD_ALGORITHM:
        return False
    try:
        iterations = int(parts[1])
        salt = _from_unpadded_b64(parts[2])
        expected = _from_unpadded_b64(parts[3])
    except ValueError:
        return False
    if iterations <= 0:
        return False
    return hmac.compare_digest(_pbkdf2(password, salt, iterations), expected)


def hash_session_token(token: str) -> str:
    key = settings.secret_key.encode("utf-8")
    return hmac.new(key, token.encode("utf-8"), hashlib.sha256).hexdigest()


def generate_session_token() -> str:
    return secrets.token_urlsafe(32)


async def authenticate_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
) -> AuthUser | None:
    """Return the active user for these credentials and stamp ``last_login_at``.

    Unknown emails, inactive accounts and wrong passwords all return None.
    """
    async with db.begin():
        user = await db.scalar(
            select(AuthUser).where(
                AuthUser.email == normalize_email(email),  # type: ignore[arg-type]
                AuthUser.is_active.is_(True),  # type: ignore[attr-defined]
            )
        )
        if user is None:
            verify_password(password, _UNKNOWN_USER_HASH)
            return None
        if not verify_password(password, user.password_hash):
            return None
        user.last_login_at = datetime.utcnow()
    return user


async def issue_session(
    db: AsyncSession,
    *,
    user_id: int,
    remember_me: bool,
    ip: str | None,
    user_agent: str | None,
) -> tuple[str, AuthSession]:
    """Persist a new session and return ``(raw_token, session)``.

    The raw token goes into the cookie and is not stored anywhere.
    """
    now = datetime.utcnow()
    raw_token = generate_session_token()
    session = AuthSession(
        user_id=user_id,
        token_hash=hash_session_token(raw_token),
        created_at=now,
        last_seen_at=now,
        expires_at=now + (REMEMBER_ME_TTL if remember_me else SESSION_TTL),
        ip=ip,
        user_agent=user_agent,
        remember_me=remember_me,
    )
    async with db.begin():
        db.add(session)
    return raw_token, session


def _open_sessions():
    return update(AuthSession).where(
        AuthSession.revoked_at.is_(None)  # type: ignore[union-attr]
    )


async def revoke_session(db: AsyncSession, *, raw_token: str) -> None:
    """Revoke one session; revoking an unknown or revoked token is a no-op."""
    async with db.begin():
        await db.execute(
            _open_sessions()
            .where(AuthSession.token_hash == hash_session_token(raw_token))  # type: ignore[arg-type]
            .values(revoked_at=datetime.utcnow())
        )


async def revoke_user_sessions(db: AsyncSession, user_id: int) -> None:
    """Revoke every open session of a user inside the caller's transaction."""
    await db.execute(
        _open_sessions()
        .where(AuthSession.user_id == user_id)  # type: ignore[arg-type]
        .values(revoked_at=datetime.utcnow())
    )


async def get_user_for_session_token(
    db: AsyncSession,
    *,
    raw_token: str,
) -> AuthUser | None:
    """Resolve a cookie token to its active user.

    The session must be unrevoked, unexpired and used within ``IDLE_TIMEOUT``.
    ``last_seen_at`` is refreshed at most once per
    ``LAST_SEEN_UPDATE_THROTTLE``.
    """
    now = datetime.utcnow()
    async with db.begin():
        row = (
            await db.execute(
                select(AuthSession, AuthUser)
                .join(AuthUser, AuthUser.id == AuthSession.user_id)  # type: ignore[arg-type]
                .where(
                    AuthSession.token_hash == hash_session_token(raw_token),  # type: ignore[arg-type]
                    AuthSession.revoked_at.is_(None),  # type: ignore[union-attr]
                    AuthSession.expires_at > now,  # type: ignore[operator,arg-type]
                    AuthUser.is_active.is_(True),  # type: ignore[attr-defined]
                )
            )
        ).one_or_none()
        if row is None:
            return None

        session, user = row
        idle_for = now - session.last_seen_at
        if idle_for > IDLE_TIMEOUT:
            return None
        if idle_for > LAST_SEEN_UPDATE_THROTTLE:
            session.last_seen_at = now
    return user
