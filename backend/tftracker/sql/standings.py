import json

from heliclockter import datetime_utc

from tftracker.database import database
from tftracker.models.standings import RankedStanding, RankedStandingView
from tftracker.utils.errors import ConcurrencyConflict
from tftracker.utils.id_types import PlayerId, TournamentId

_STANDINGS_SNAPSHOT_LOCK_SCOPE = 71_002

_STANDING_COLUMNS = """
    ts.player_id,
    p.name AS player_name,
    ts.rank,
    ts.total_points,
    ts.games_played,
    ts.placement_counts,
    ts.top_four_count,
    ts.top_four_plus_firsts,
    ts.recent_placements,
    ts.end_of_day_placement
"""


async def get_standings(
    tournament_id: TournamentId, *, limit: int | None = None
) -> list[RankedStandingView]:
    limit_filter = "LIMIT :limit" if limit is not None else ""
    values: dict[str, int] = {"tournament_id": tournament_id}
    if limit is not None:
        values["limit"] = limit

    rows = await database.fetch_all(
        f"""
        SELECT {_STANDING_COLUMNS}
        FROM tournament_standings ts
        JOIN players p ON p.id = ts.player_id
        WHERE ts.tournament_id = :tournament_id
        ORDER BY ts.rank
        {limit_filter}
        """,
        values=values,
    )
    return [RankedStandingView.model_validate(dict(row._mapping)) for row in rows]


async def get_standing_for_player(
    tournament_id: TournamentId, player_id: PlayerId
) -> RankedStandingView | None:
    row = await database.fetch_one(
        f"""
        SELECT {_STANDING_COLUMNS}
        FROM tournament_standings ts
        JOIN players p ON p.id = ts.player_id
        WHERE ts.tournament_id = :tournament_id
          AND ts.player_id = :player_id
        """,
        values={"tournament_id": tournament_id, "player_id": player_id},
    )
    return RankedStandingView.model_validate(dict(row._mapping)) if row is not None else None


async def get_snapshot_revision(tournament_id: TournamentId) -> int | None:
    revision = await database.fetch_val(
        """
        SELECT ledger_revision
        FROM tournament_standings_state
        WHERE tournament_id = :tournament_id
        """,
        values={"tournament_id": tournament_id},
    )
    return int(revision) if revision is not None else None


async def sql_replace_standings_snapshot(
    tournament_id: TournamentId,
    standings: list[RankedStanding],
    ledger_revision: int,
) -> datetime_utc:
    """
    Replace the standings of a tournament with a freshly computed snapshot.

    Raises ConcurrencyConflict, leaving the stored snapshot untouched, when a snapshot computed
    from a newer ledger revision has already been written.
    """
    async with database.transaction():
        await database.execute(
            "SELECT pg_advisory_xact_lock(:lock_scope, :lock_key)",
            values={"lock_scope": _STANDINGS_SNAPSHOT_LOCK_SCOPE, "lock_key": int(tournament_id)},
        )

        stored_revision = await get_snapshot_revision(tournament_id)
        if stored_revision is not None and stored_revision > ledger_revision:
            raise ConcurrencyConflict(int(tournament_id), ledger_revision, stored_revision)

        await database.execute(
            "DELETE FROM tournament_standings WHERE tournament_id = :tournament_id",
            values={"tournament_id": tournament_id},
        )
        for standing in standings:
            await database.execute(
                """
                INSERT INTO tournament_standings (
                    tournament_id,
                    player_id,
                    rank,
                    total_points,
                    games_played,
                    placement_counts,
                    top_four_count,
                    top_four_plus_firsts,
                    recent_placements,
                    end_of_day_placement
                )
                VALUES (
                    :tournament_id,
                    :player_id,
                    :rank,
                    :total_points,
                    :games_played,
                    :placement_counts,
                    :top_four_count,
                    :top_four_plus_firsts,
                    :recent_placements,
                    :end_of_day_placement
                )
                """,
                values={
                    **standing.model_dump(),
                    "tournament_id": tournament_id,
                    "placement_counts": json.dumps(standing.placement_counts),
                    "recent_placements": json.dumps(standing.recent_placements),
                },
            )

        recalculated_at = datetime_utc.now()
        await database.execute(
            """
            INSERT INTO tournament_standings_state (
                tournament_id, ledger_revision, last_recalculated, updated
            )
            VALUES (:tournament_id, :ledger_revision, :last_recalculated, :updated)
            ON CONFLICT (tournament_id)
            DO UPDATE
            SET
                ledger_revision = EXCLUDED.ledger_revision,
                last_recalculated = EXCLUDED.last_recalculated,
                updated = EXCLUDED.updated
            """,
            values={
                "tournament_id": tournament_id,
                "ledger_revision": ledger_revision,
                "last_recalculated": recalculated_at,
                "updated": recalculated_at,
            },
        )

    return recalculated_at
