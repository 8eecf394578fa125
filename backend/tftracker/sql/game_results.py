from typing import Any

import asyncpg

from tftracker.database import database
from tftracker.models.db.game_result import (
    GameResult,
    GameResultWithPlayer,
    LedgerSnapshot,
    PlacementFact,
)
from tftracker.models.game_results import (
    DaySummaryView,
    GameResultFilter,
    GameSummaryItem,
    TournamentProgressView,
)
from tftracker.utils.errors import NotFoundError, ValidationError
from tftracker.utils.id_types import GameResultId, TournamentId
from tftracker.utils.types import assert_some

_FACT_COLUMNS = """
    gr.id,
    gr.tournament_id,
    gr.player_id,
    gr.day_number,
    gr.game_number,
    gr.placement,
    gr.created AS recorded_at
"""


async def _bump_ledger_revision(tournament_id: TournamentId) -> int:
    revision = await database.fetch_val(
        """
        UPDATE tournaments
        SET ledger_revision = ledger_revision + 1
        WHERE id = :tournament_id
        RETURNING ledger_revision
        """,
        values={"tournament_id": tournament_id},
    )
    if revision is None:
        raise NotFoundError(f"Tournament {tournament_id} not found")
    return int(revision)


async def sql_get_ledger_snapshot(tournament_id: TournamentId) -> LedgerSnapshot:
    """
    Load every placement fact of a tournament together with the ledger revision they belong to.
    """
    async with database.transaction(isolation="repeatable_read"):
        revision = await database.fetch_val(
            "SELECT ledger_revision FROM tournaments WHERE id = :tournament_id",
            values={"tournament_id": tournament_id},
        )
        if revision is None:
            raise NotFoundError(f"Tournament {tournament_id} not found")

        rows = await database.fetch_all(
            f"""
            SELECT {_FACT_COLUMNS}
            FROM game_results gr
            WHERE gr.tournament_id = :tournament_id
            ORDER BY gr.player_id, gr.day_number, gr.game_number
            """,
            values={"tournament_id": tournament_id},
        )

    return LedgerSnapshot(
        tournament_id=tournament_id,
        ledger_revision=int(revision),
        facts=[PlacementFact.model_validate(dict(row._mapping)) for row in rows],
    )


async def get_game_results(
    tournament_id: TournamentId, filter_: GameResultFilter | None = None
) -> list[GameResultWithPlayer]:
    query = f"""
        SELECT {_FACT_COLUMNS}, p.name AS player_name
        FROM game_results gr
        JOIN players p ON p.id = gr.player_id
        WHERE gr.tournament_id = :tournament_id
        """
    params: dict[str, Any] = {"tournament_id": tournament_id}

    if filter_ is not None and filter_.day_number is not None:
        query += " AND gr.day_number = :day_number"
        params["day_number"] = filter_.day_number

    if filter_ is not None and filter_.game_number is not None:
        query += " AND gr.game_number = :game_number"
        params["game_number"] = filter_.game_number

    if filter_ is not None and filter_.player_id is not None:
        query += " AND gr.player_id = :player_id"
        params["player_id"] = filter_.player_id

    query += " ORDER BY gr.day_number, gr.game_number, gr.placement"
    result = await database.fetch_all(query=query, values=params)
    return [GameResultWithPlayer.model_validate(dict(row._mapping)) for row in result]


async def get_game_result_by_id(
    tournament_id: TournamentId, game_result_id: GameResultId
) -> GameResult | None:
    result = await database.fetch_one(
        f"""
        SELECT {_FACT_COLUMNS}
        FROM game_results gr
        WHERE gr.id = :game_result_id
          AND gr.tournament_id = :tournament_id
        """,
        values={"game_result_id": game_result_id, "tournament_id": tournament_id},
    )
    return GameResult.model_validate(dict(result._mapping)) if result is not None else None


async def game_has_results(tournament_id: TournamentId, day_number: int, game_number: int) -> bool:
    count = await database.fetch_val(
        """
        SELECT COUNT(*)
        FROM game_results
        WHERE tournament_id = :tournament_id
          AND day_number = :day_number
          AND game_number = :game_number
        """,
        values={
            "tournament_id": tournament_id,
            "day_number": day_number,
            "game_number": game_number,
        },
    )
    return int(count or 0) > 0


async def get_taken_placements(
    tournament_id: TournamentId,
    day_number: int,
    game_number: int,
    *,
    excluding_result_id: GameResultId | None = None,
) -> set[int]:
    rows = await database.fetch_all(
        """
        SELECT placement
        FROM game_results
        WHERE tournament_id = :tournament_id
          AND day_number = :day_number
          AND game_number = :game_number
          AND id != COALESCE(:excluding_result_id, -1)
        """,
        values={
            "tournament_id": tournament_id,
            "day_number": day_number,
            "game_number": game_number,
            "excluding_result_id": excluding_result_id,
        },
    )
    return {int(row._mapping["placement"]) for row in rows}


async def sql_insert_game_results(
    tournament_id: TournamentId, facts: list[PlacementFact]
) -> list[GameResultId]:
    """
    Append the facts of one game to the ledger in a single transaction.
    """
    inserted_ids: list[GameResultId] = []
    try:
        async with database.transaction():
            for fact in facts:
                new_id = await database.fetch_val(
                    """
                    INSERT INTO game_results (
                        tournament_id,
                        player_id,
                        day_number,
                        game_number,
                        placement,
                        created
                    )
                    VALUES (
                        :tournament_id,
                        :player_id,
                        :day_number,
                        :game_number,
                        :placement,
                        :recorded_at
                    )
                    RETURNING id
                    """,
                    values={**fact.model_dump(), "tournament_id": tournament_id},
                )
                inserted_ids.append(GameResultId(assert_some(new_id)))

            await _bump_ledger_revision(tournament_id)
    except asyncpg.UniqueViolationError as exc:
        raise ValidationError(
            "A result for this player, day and game is already recorded. "
            "Use the update endpoint to modify it."
        ) from exc

    return inserted_ids


async def sql_update_game_result_placement(
    tournament_id: TournamentId, game_result_id: GameResultId, placement: int
) -> None:
    try:
        async with database.transaction():
            await database.execute(
                """
                UPDATE game_results
                SET placement = :placement
                WHERE id = :game_result_id
                  AND tournament_id = :tournament_id
                """,
                values={
                    "placement": placement,
                    "game_result_id": game_result_id,
                    "tournament_id": tournament_id,
                },
            )
            await _bump_ledger_revision(tournament_id)
    except asyncpg.UniqueViolationError as exc:
        raise ValidationError(
            f"Placement {placement} is already taken by another player in this game"
        ) from exc


async def sql_delete_game_result(tournament_id: TournamentId, game_result_id: GameResultId) -> None:
    async with database.transaction():
        await database.execute(
            """
            DELETE FROM game_results
            WHERE id = :game_result_id
              AND tournament_id = :tournament_id
            """,
            values={"game_result_id": game_result_id, "tournament_id": tournament_id},
        )
        await _bump_ledger_revision(tournament_id)


async def get_game_summary_by_day(tournament_id: TournamentId) -> list[DaySummaryView]:
    rows = await database.fetch_all(
        """
        SELECT
            day_number,
            game_number,
            COUNT(*) AS players_count,
            MIN(created) AS first_result_time,
            MAX(created) AS last_result_time
        FROM game_results
        WHERE tournament_id = :tournament_id
        GROUP BY day_number, game_number
        ORDER BY day_number, game_number
        """,
        values={"tournament_id": tournament_id},
    )

    days: dict[int, DaySummaryView] = {}
    for row in rows:
        game = GameSummaryItem.model_validate(dict(row._mapping))
        days.setdefault(game.day_number, DaySummaryView(day_number=game.day_number))
        days[game.day_number].games.append(game)

    return list(days.values())


async def get_tournament_progress(tournament_id: TournamentId) -> TournamentProgressView:
    row = await database.fetch_one(
        """
        SELECT
            COUNT(DISTINCT (day_number, game_number)) AS games_completed,
            COUNT(DISTINCT day_number) AS days_with_games,
            COUNT(*) AS total_results,
            COUNT(DISTINCT player_id) AS active_players
        FROM game_results
        WHERE tournament_id = :tournament_id
        """,
        values={"tournament_id": tournament_id},
    )
    return TournamentProgressView.model_validate(dict(assert_some(row)._mapping))
