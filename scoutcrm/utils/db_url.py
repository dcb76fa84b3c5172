"""Database URL helpers shared by the app engine and Alembic."""

import ssl
from typing import Any, Dict, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from sqlalchemy.engine import make_url


def normalize_db_url(url: str) -> str:
    """Select the asyncpg driver for bare ``postgres://``/``postgresql://`` URLs.

    URLs that already name a driver (``postgresql+psycopg://``) are left alone.
    """
    try:
        u = make_url(url)
    except Exception:
        for prefix in ("postgresql://", "postgres://"):
            if url.startswith(prefix):
                return "postgresql+asyncpg://" + url.split("://", 1)[1]
        return url

    driver = (u.drivername or "").lower()
    if "+" not in driver and driver in ("postgres", "postgresql"):
        u = u.set(drivername="postgresql+asyncpg")
    return u.render_as_string(hide_password=False)


def prepare_asyncpg_connection(url: str) -> Tuple[str, Dict[str, Any]]:
    """Strip libpq-only query args and derive asyncpg connect kwargs.

    Hosted Postgres providers hand out URLs with ``sslmode`` and
    ``channel_binding``; asyncpg rejects both as URL parameters.
    """
    split = urlsplit(normalize_db_url(url))
    sslmode = None
    kept = []
    for key, value in parse_qsl(split.query, keep_blank_values=True):
        if key == "sslmode":
            sslmode = value.lower()
        elif key != "channel_binding":
            kept.append((key, value))

    cleaned_url = urlunsplit(split._replace(query=urlencode(kept, doseq=True))).rstrip("?")

    connect_args: Dict[str, Any] = {}
    if sslmode == "disable":
        connect_args["ssl"] = False
    elif sslmode in {"require", "verify-ca"}:
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        if sslmode == "require":
            ctx.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ctx
    elif sslmode and sslmode not in {"allow", "prefer"}:
        # verify-full and unknown values get the secure default
        connect_args["ssl"] = ssl.create_default_context()

    return cleaned_url, connect_args


def describe_database_url(url: str) -> str:
    """Return a password-free description of the DB URL for logging."""
    try:
        u = make_url(url)
    except Exception:
        return "<unparseable database URL>"
    port = f":{u.port}" if u.port else ""
    return f"{u.drivername}://{u.username or '?'}@{u.host or '?'}{port}/{u.database or '?'}"
