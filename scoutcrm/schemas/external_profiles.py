from typing import Any, Optional
from datetime import datetime
import uuid

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class ExternalProfile(SQLModel, table=True):  # type: ignore[call-arg]
    """Append-only audit copy of a raw external payload."""

    __tablename__ = "external_profiles"

    id: Optional[int] = Field(default=None, primary_key=True)
    player_id: uuid.UUID = Field(foreign_key="players.id", index=True)

    source: str = Field(default="transfermarkt", description="Source system key")
    external_id: Optional[str] = Field(default=None, index=True)
    profile_url: Optional[str] = Field(default=None)
    raw: Any = Field(default=None, sa_column=Column(JSON, nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)
