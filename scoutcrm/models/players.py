"""Request/response models for player endpoints."""

import uuid
from datetime import date, datetime
from typing import Optional

from sqlmodel import SQLModel

from scoutcrm.schemas.players import SyncStatus


class PlayerRead(SQLModel):
    """Response model for a stored player."""

    id: uuid.UUID
    full_name: str
    date_of_birth: Optional[date] = None

    main_position: Optional[str] = None
    alt_positions: Optional[str] = None
    dominant_foot: Optional[str] = None
    height_cm: Optional[int] = None
    weight_kg: Optional[int] = None
    country_of_birth: Optional[str] = None

    current_club_name: Optional[str] = None
    current_club_country: Optional[str] = None
    contract_until: Optional[str] = None
    agency: Optional[str] = None

    opinion: Optional[str] = None
    image_url: Optional[str] = None

    transfermarkt_player_id: Optional[str] = None
    transfermarkt_url: Optional[str] = None
    tm_sync_status: SyncStatus = SyncStatus.IDLE
    tm_sync_error: Optional[str] = None
    last_synced_at: Optional[datetime] = None

    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class PlayerListResponse(SQLModel):
    """Response model for the paginated player list."""

    items: list[PlayerRead]
    total: int
    limit: int
    offset: int


class PlayerWrite(SQLModel):
    """Request body for create/update; unknown keys are ignored.

    Dates arrive as ISO strings and are validated by the service layer.
    """

    full_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    main_position: Optional[str] = None
    alt_positions: Optional[str] = None
    dominant_foot: Optional[str] = None
    height_cm: Optional[int] = None
    weight_kg: Optional[int] = None
    country_of_birth: Optional[str] = None
    current_club_name: Optional[str] = None
    current_club_country: Optional[str] = None
    contract_until: Optional[str] = None
    agency: Optional[str] = None
    opinion: Optional[str] = None
    image_url: Optional[str] = None
    transfermarkt_url: Optional[str] = None
