"""add standings snapshot tables and ledger revision

Revision ID: c47e2b9a1d53
Revises: 8a3f1c6d2e90
Create Date: 2026-03-09 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str | None = "c47e2b9a1d53"
down_revision: str | None = "8a3f1c6d2e90"
branch_labels: str | None = None
depends_on: str | None = None


def upgrade() -> None:
    op.add_column(
        "tournaments",
        sa.Column("ledger_revision", sa.BigInteger(), server_default="0", nullable=False),
    )

    op.create_table(
        "tournament_standings",
        sa.Column("id", sa.BigInteger(), nullable=False),
        sa.Column("tournament_id", sa.BigInteger(), nullable=False),
        sa.Column("player_id", sa.BigInteger(), nullable=False),
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.Column("total_points", sa.Integer(), nullable=False),
        sa.Column("games_played", sa.Integer(), nullable=False),
        sa.Column("placement_counts", sa.JSON(), nullable=False),
        sa.Column("top_four_count", sa.Integer(), nullable=False),
        sa.Column("top_four_plus_firsts", sa.Integer(), nullable=False),
        sa.Column("recent_placements", sa.JSON(), nullable=False),
        sa.Column("end_of_day_placement", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["player_id"], ["players.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tournament_id", "player_id"),
        sa.UniqueConstraint("tournament_id", "rank"),
    )
    op.create_index(
        op.f("ix_tournament_standings_id"), "tournament_standings", ["id"], unique=False
    )
    op.create_index(
        op.f("ix_tournament_standings_tournament_id"),
        "tournament_standings",
        ["tournament_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_tournament_standings_player_id"),
        "tournament_standings",
        ["player_id"],
        unique=False,
    )

    op.create_table(
        "tournament_standings_state",
        sa.Column("tournament_id", sa.BigInteger(), nullable=False),
        sa.Column("ledger_revision", sa.BigInteger(), nullable=False),
        sa.Column("last_recalculated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("tournament_id"),
    )


def downgrade() -> None:
    op.drop_table("tournament_standings_state")
    op.drop_table("tournament_standings")
    op.drop_column("tournaments", "ledger_revision")
