from sqlalchemy import Column, ForeignKey, Integer, String, Table, UniqueConstraint, func
from sqlalchemy.orm import declarative_base  # type: ignore[attr-defined]
from sqlalchemy.sql.sqltypes import JSON, BigInteger, DateTime, Enum

Base = declarative_base()
metadata = Base.metadata
DateTimeTZ = DateTime(timezone=True)

tournaments = Table(
    "tournaments",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("name", String, nullable=False, index=True),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    Column("start_time", DateTimeTZ, nullable=False),
    Column(
        "status",
        Enum(
            "UPCOMING",
            "ACTIVE",
            "COMPLETED",
            "CANCELLED",
            name="tournament_status",
        ),
        nullable=False,
        server_default="UPCOMING",
        index=True,
    ),
    Column("total_days", Integer, nullable=False, server_default="1"),
    Column("games_per_day", Integer, nullable=False, server_default="6"),
    Column("lobby_size", Integer, nullable=False, server_default="8"),
    Column("ledger_revision", BigInteger, nullable=False, server_default="0"),
)

players = Table(
    "players",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("name", String, nullable=False, index=True),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
)

tournament_participants = Table(
    "tournament_participants",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("tournament_id", BigInteger, ForeignKey("tournaments.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("player_id", BigInteger, ForeignKey("players.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    UniqueConstraint("tournament_id", "player_id"),
)

game_results = Table(
    "game_results",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("tournament_id", BigInteger, ForeignKey("tournaments.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("player_id", BigInteger, ForeignKey("players.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("day_number", Integer, nullable=False),
    Column("game_number", Integer, nullable=False),
    Column("placement", Integer, nullable=False),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    UniqueConstraint("tournament_id", "player_id", "day_number", "game_number"),
    UniqueConstraint("tournament_id", "day_number", "game_number", "placement"),
)

tournament_standings = Table(
    "tournament_standings",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("tournament_id", BigInteger, ForeignKey("tournaments.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("player_id", BigInteger, ForeignKey("players.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("rank", Integer, nullable=False),
    Column("total_points", Integer, nullable=False),
    Column("games_played", Integer, nullable=False),
    Column("placement_counts", JSON, nullable=False),
    Column("top_four_count", Integer, nullable=False),
    Column("top_four_plus_firsts", Integer, nullable=False),
    Column("recent_placements", JSON, nullable=False),
    Column("end_of_day_placement", Integer, nullable=False),
    UniqueConstraint("tournament_id", "player_id"),
    UniqueConstraint("tournament_id", "rank"),
)

tournament_standings_state = Table(
    "tournament_standings_state",
    metadata,
    Column("tournament_id", BigInteger, ForeignKey("tournaments.id", ondelete="CASCADE"), primary_key=True),
    Column("ledger_revision", BigInteger, nullable=False),
    Column("last_recalculated", DateTimeTZ, nullable=False),
    Column("updated", DateTimeTZ, nullable=False, server_default=func.now()),
)
