"""add tournaments, players and game results ledger

Revision ID: 8a3f1c6d2e90
Revises:
Create Date: 2026-03-02 00:00:00.000000

"""

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM

from alembic import op

# revision identifiers, used by Alembic.
revision: str | None = "8a3f1c6d2e90"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None

tournament_status_enum = ENUM(
    "UPCOMING",
    "ACTIVE",
    "COMPLETED",
    "CANCELLED",
    name="tournament_status",
    create_type=False,
)


def upgrade() -> None:
    tournament_status_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "tournaments",
        sa.Column("id", sa.BigInteger(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", tournament_status_enum, server_default="UPCOMING", nullable=False),
        sa.Column("total_days", sa.Integer(), server_default="1", nullable=False),
        sa.Column("games_per_day", sa.Integer(), server_default="6", nullable=False),
        sa.Column("lobby_size", sa.Integer(), server_default="8", nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_tournaments_id"), "tournaments", ["id"], unique=False)
    op.create_index(op.f("ix_tournaments_name"), "tournaments", ["name"], unique=False)
    op.create_index(op.f("ix_tournaments_status"), "tournaments", ["status"], unique=False)

    op.create_table(
        "players",
        sa.Column("id", sa.BigInteger(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_players_id"), "players", ["id"], unique=False)
    op.create_index(op.f("ix_players_name"), "players", ["name"], unique=False)

    op.create_table(
        "tournament_participants",
        sa.Column("id", sa.BigInteger(), nullable=False),
        sa.Column("tournament_id", sa.BigInteger(), nullable=False),
        sa.Column("player_id", sa.BigInteger(), nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["player_id"], ["players.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tournament_id", "player_id"),
    )
    op.create_index(
        op.f("ix_tournament_participants_tournament_id"),
        "tournament_participants",
        ["tournament_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_tournament_participants_player_id"),
        "tournament_participants",
        ["player_id"],
        unique=False,
    )

    op.create_table(
        "game_results",
        sa.Column("id", sa.BigInteger(), nullable=False),
        sa.Column("tournament_id", sa.BigInteger(), nullable=False),
        sa.Column("player_id", sa.BigInteger(), nullable=False),
        sa.Column("day_number", sa.Integer(), nullable=False),
        sa.Column("game_number", sa.Integer(), nullable=False),
        sa.Column("placement", sa.Integer(), nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["player_id"], ["players.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tournament_id", "player_id", "day_number", "game_number"),
        sa.UniqueConstraint("tournament_id", "day_number", "game_number", "placement"),
    )
    op.create_index(op.f("ix_game_results_id"), "game_results", ["id"], unique=False)
    op.create_index(
        op.f("ix_game_results_tournament_id"), "game_results", ["tournament_id"], unique=False
    )
    op.create_index(op.f("ix_game_results_player_id"), "game_results", ["player_id"], unique=False)


def downgrade() -> None:
    op.drop_table("game_results")
    op.drop_table("tournament_participants")
    op.drop_table("players")
    op.drop_table("tournaments")
    tournament_status_enum.drop(op.get_bind(), checkfirst=True)
