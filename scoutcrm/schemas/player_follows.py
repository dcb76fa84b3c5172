from datetime import datetime
import uuid

from sqlmodel import Field, SQLModel


class PlayerFollow(SQLModel, table=True):  # type: ignore[call-arg]
    """A scout's shortlist entry for a player."""

    __tablename__ = "players_scouts"

    player_id: uuid.UUID = Field(foreign_key="players.id", primary_key=True)
    scout_id: int = Field(foreign_key="auth_users.id", primary_key=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
