"""Async SQLAlchemy engine and session helpers."""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from scoutcrm.config import settings
from scoutcrm.utils.db_url import prepare_asyncpg_connection

DATABASE_URL, CONNECT_ARGS = prepare_asyncpg_connection(settings.database_url)

engine = create_async_engine(
    DATABASE_URL,
    echo=settings.sql_echo,
    pool_pre_ping=True,
    connect_args=CONNECT_ARGS,
)
SessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session."""
    async with SessionLocal() as session:
        yield session


async def init_db():
    """Create all tables (dev convenience; production uses Alembic)."""
    # Import locally so metadata is populated without circular imports
    from scoutcrm.schemas import (  # noqa: F401
        auth,
        external_profiles,
        player_follows,
        players,
        tm_players_cache,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def dispose_engine() -> None:
    """Dispose of the async engine and its connection pool."""
    await engine.dispose()
