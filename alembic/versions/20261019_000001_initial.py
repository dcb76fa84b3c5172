"""Initial schema: accounts, players, shortlists, external snapshots and cache.

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19 00:00:01
"""

from alembic import op  # type: ignore[attr-defined]
import sqlalchemy as sa

revision = "20261019_000001"
down_revision = None
branch_labels = None
depends_on = None

# SQLAlchemy stores Enum member names, not values
sync_status_enum = sa.Enum("IDLE", "OK", "NOT_FOUND", "ERROR", name="syncstatus")


def upgrade() -> None:
    op.create_table(
        "auth_users",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="scout"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("country", sa.String(), nullable=True),
        sa.Column("agency", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_auth_users_email", "auth_users", ["email"], unique=True)
    op.create_index("ix_auth_users_role", "auth_users", ["role"])
    op.create_index("ix_auth_users_is_active", "auth_users", ["is_active"])
    op.create_index("ix_auth_users_created_at", "auth_users", ["created_at"])

    op.create_table(
        "auth_sessions",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("auth_users.id"), nullable=False),
        sa.Column("token_hash", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("revoked_at", sa.DateTime(), nullable=True),
        sa.Column("ip", sa.String(), nullable=True),
        sa.Column("user_agent", sa.String(), nullable=True),
        sa.Column("remember_me", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_auth_sessions_user_id", "auth_sessions", ["user_id"])
    op.create_index("ix_auth_sessions_token_hash", "auth_sessions", ["token_hash"], unique=True)
    op.create_index("ix_auth_sessions_last_seen_at", "auth_sessions", ["last_seen_at"])
    op.create_index("ix_auth_sessions_expires_at", "auth_sessions", ["expires_at"])
    op.create_index("ix_auth_sessions_revoked_at", "auth_sessions", ["revoked_at"])

    op.create_table(
        "players",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("main_position", sa.String(), nullable=True),
        sa.Column("alt_positions", sa.String(), nullable=True),
        sa.Column("dominant_foot", sa.String(), nullable=True),
        sa.Column("height_cm", sa.Integer(), nullable=True),
        sa.Column("weight_kg", sa.Integer(), nullable=True),
        sa.Column("country_of_birth", sa.String(), nullable=True),
        sa.Column("current_club_name", sa.String(), nullable=True),
        sa.Column("current_club_country", sa.String(), nullable=True),
        sa.Column("contract_until", sa.String(), nullable=True),
        sa.Column("agency", sa.String(), nullable=True),
        sa.Column("opinion", sa.String(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("transfermarkt_player_id", sa.String(), nullable=True),
        sa.Column("transfermarkt_url", sa.String(), nullable=True),
        sa.Column("tm_sync_status", sync_status_enum, nullable=False, server_default="IDLE"),
        sa.Column("tm_sync_error", sa.String(), nullable=True),
        sa.Column("last_synced_at", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("auth_users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_players_full_name", "players", ["full_name"])
    op.create_index("ix_players_main_position", "players", ["main_position"])
    op.create_index("ix_players_country_of_birth", "players", ["country_of_birth"])
    op.create_index("ix_players_current_club_name", "players", ["current_club_name"])
    op.create_index(
        "ix_players_transfermarkt_player_id",
        "players",
        ["transfermarkt_player_id"],
        unique=True,
    )
    op.create_index("ix_players_tm_sync_status", "players", ["tm_sync_status"])
    op.create_index("ix_players_created_at", "players", ["created_at"])

    op.create_table(
        "players_scouts",
        sa.Column("player_id", sa.Uuid(), sa.ForeignKey("players.id"), primary_key=True),
        sa.Column("scout_id", sa.Integer(), sa.ForeignKey("auth_users.id"), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "external_profiles",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("player_id", sa.Uuid(), sa.ForeignKey("players.id"), nullable=False),
        sa.Column("source", sa.String(), nullable=False),
        sa.Column("external_id", sa.String(), nullable=True),
        sa.Column("profile_url", sa.String(), nullable=True),
        sa.Column("raw", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_external_profiles_player_id", "external_profiles", ["player_id"])
    op.create_index("ix_external_profiles_external_id", "external_profiles", ["external_id"])

    op.create_table(
        "tm_players_cache",
        sa.Column("transfermarkt_player_id", sa.String(), primary_key=True, nullable=False),
        sa.Column("profile", sa.JSON(), nullable=True),
        sa.Column("market_value", sa.JSON(), nullable=True),
        sa.Column("cached_at", sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("tm_players_cache")
    op.drop_table("external_profiles")
    op.drop_table("players_scouts")
    op.drop_table("players")
    op.drop_table("auth_sessions")
    op.drop_table("auth_users")
    sync_status_enum.drop(op.get_bind(), checkfirst=True)
