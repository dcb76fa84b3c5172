"""Request/response models for sync and import endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from scoutcrm.models.players import PlayerRead


class SyncResponse(BaseModel):
    """Single-player sync result."""

    ok: bool = True
    matched: bool
    player: Optional[PlayerRead] = None


class TriggeredSyncResponse(BaseModel):
    """Single-player sync triggered from the batch endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    matched: int
    updated: int
    not_found: int = Field(alias="notFound")
    player: Optional[PlayerRead] = None


class SyncErrorEntry(BaseModel):
    id: str
    msg: str


class BatchSyncResponse(BaseModel):
    """Counters for a batch run."""

    model_config = ConfigDict(populate_by_name=True)

    scope: str
    scanned: int
    matched: int
    updated: int
    not_found: int = Field(alias="notFound")
    errors: list[SyncErrorEntry] = []


class ImportRequest(BaseModel):
    q: Optional[str] = None
    tm_id: Optional[str] = None
    page: int = Field(default=1, ge=1)


class ImportResponse(BaseModel):
    imported: int
    matched: int
    player: Optional[PlayerRead] = None
