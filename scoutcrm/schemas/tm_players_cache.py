from typing import Any
from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class TmPlayerCache(SQLModel, table=True):  # type: ignore[call-arg]
    """Last fetched external profile and market value, keyed by external id.

    Overwritten on every successful sync; never expired.
    """

    __tablename__ = "tm_players_cache"

    transfermarkt_player_id: str = Field(primary_key=True)
    profile: Any = Field(default=None, sa_column=Column(JSON, nullable=True))
    market_value: Any = Field(default=None, sa_column=Column(JSON, nullable=True))
    cached_at: datetime = Field(default_factory=datetime.utcnow)
