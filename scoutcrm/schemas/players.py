"""Canonical player records."""

import uuid
from datetime import date, datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class SyncStatus(str, Enum):
    """Outcome of the last reconciliation attempt against the external service."""

    IDLE = "idle"
    OK = "ok"
    NOT_FOUND = "not_found"
    ERROR = "error"


class Player(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__ = "players"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    full_name: str = Field(index=True)
    date_of_birth: Optional[date] = Field(default=None)

    main_position: Optional[str] = Field(default=None, index=True)
    alt_positions: Optional[str] = Field(default=None, description="Comma-separated codes")
    dominant_foot: Optional[str] = Field(default=None)
    height_cm: Optional[int] = Field(default=None)
    weight_kg: Optional[int] = Field(default=None)
    country_of_birth: Optional[str] = Field(default=None, index=True)

    current_club_name: Optional[str] = Field(default=None, index=True)
    current_club_country: Optional[str] = Field(default=None)
    contract_until: Optional[str] = Field(default=None)
    agency: Optional[str] = Field(default=None)

    opinion: Optional[str] = Field(default=None, description="Free-text scout opinion")
    image_url: Optional[str] = Field(default=None)

    # Link to the external player-data service
    transfermarkt_player_id: Optional[str] = Field(default=None, unique=True, index=True)
    transfermarkt_url: Optional[str] = Field(default=None)

    # Sync bookkeeping
    tm_sync_status: SyncStatus = Field(default=SyncStatus.IDLE, index=True)
    tm_sync_error: Optional[str] = Field(default=None)
    last_synced_at: Optional[datetime] = Field(default=None)

    created_by: Optional[int] = Field(default=None, foreign_key="auth_users.id")
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
