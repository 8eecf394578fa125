from heliclockter import datetime_utc

from tftracker.database import database
from tftracker.models.db.player import (
    Player,
    PlayerBody,
    PlayerInsertable,
    TournamentParticipant,
    TournamentParticipantWithPlayer,
)
from tftracker.models.players import PlayerSummary, PlayerTournamentHistoryItem
from tftracker.utils.id_types import PlayerId, TournamentId
from tftracker.utils.pagination import PaginationPlayers, PaginationTournamentHistory


async def get_players(pagination: PaginationPlayers) -> list[PlayerSummary]:
    query = f"""
        SELECT
            p.*,
            COUNT(DISTINCT tp.tournament_id) AS tournaments_played,
            COUNT(DISTINCT tp.tournament_id) FILTER (
                WHERE t.status = 'COMPLETED'
            ) AS tournaments_completed
        FROM players p
        LEFT JOIN tournament_participants tp ON tp.player_id = p.id
        LEFT JOIN tournaments t ON t.id = tp.tournament_id
        GROUP BY p.id
        ORDER BY p.{pagination.sort_by} {pagination.sort_direction}, p.id
        LIMIT :limit
        OFFSET :offset
    """
    result = await database.fetch_all(
        query=query, values={"limit": pagination.limit, "offset": pagination.offset}
    )
    return [PlayerSummary.model_validate(dict(row._mapping)) for row in result]


async def get_player_count() -> int:
    count = await database.fetch_val("SELECT count(*) FROM players")
    return int(count)


async def get_player_by_id(player_id: PlayerId) -> Player | None:
    query = """
        SELECT *
        FROM players
        WHERE id = :player_id
    """
    result = await database.fetch_one(query=query, values={"player_id": player_id})
    return Player.model_validate(dict(result._mapping)) if result is not None else None


async def get_players_by_names(names: list[str]) -> list[Player]:
    query = """
        SELECT *
        FROM players
        WHERE lower(name) = ANY(:names)
        ORDER BY id
    """
    result = await database.fetch_all(
        query=query, values={"names": [name.lower() for name in names]}
    )
    return [Player.model_validate(dict(row._mapping)) for row in result]


async def get_all_players_in_tournament(tournament_id: TournamentId) -> list[Player]:
    query = """
        SELECT p.*
        FROM players p
        JOIN tournament_participants tp ON tp.player_id = p.id
        WHERE tp.tournament_id = :tournament_id
        ORDER BY p.name
    """
    result = await database.fetch_all(query=query, values={"tournament_id": tournament_id})
    return [Player.model_validate(dict(row._mapping)) for row in result]


async def get_participant_ids(tournament_id: TournamentId) -> set[PlayerId]:
    query = """
        SELECT player_id
        FROM tournament_participants
        WHERE tournament_id = :tournament_id
    """
    result = await database.fetch_all(query=query, values={"tournament_id": tournament_id})
    return {PlayerId(int(row._mapping["player_id"])) for row in result}


async def get_participants(tournament_id: TournamentId) -> list[TournamentParticipantWithPlayer]:
    query = """
        SELECT tp.*, p.name AS player_name
        FROM tournament_participants tp
        JOIN players p ON p.id = tp.player_id
        WHERE tp.tournament_id = :tournament_id
        ORDER BY p.name
    """
    result = await database.fetch_all(query=query, values={"tournament_id": tournament_id})
    return [TournamentParticipantWithPlayer.model_validate(dict(row._mapping)) for row in result]


async def get_participant(
    tournament_id: TournamentId, player_id: PlayerId
) -> TournamentParticipant | None:
    query = """
        SELECT *
        FROM tournament_participants
        WHERE tournament_id = :tournament_id
        AND player_id = :player_id
    """
    result = await database.fetch_one(
        query=query, values={"tournament_id": tournament_id, "player_id": player_id}
    )
    return TournamentParticipant.model_validate(dict(result._mapping)) if result else None


async def player_has_results(tournament_id: TournamentId, player_id: PlayerId) -> bool:
    query = """
        SELECT EXISTS (
            SELECT 1
            FROM game_results
            WHERE tournament_id = :tournament_id
            AND player_id = :player_id
        )
    """
    return bool(
        await database.fetch_val(
            query=query, values={"tournament_id": tournament_id, "player_id": player_id}
        )
    )


async def get_player_tournament_history(
    player_id: PlayerId, pagination: PaginationTournamentHistory | None = None
) -> list[PlayerTournamentHistoryItem]:
    limit_filter = "LIMIT :limit OFFSET :offset" if pagination is not None else ""
    query = f"""
        SELECT
            t.id AS tournament_id,
            t.name AS tournament_name,
            t.status,
            t.start_time,
            tp.created AS registered_at,
            ts.rank,
            ts.total_points,
            ts.games_played,
            ts.placement_counts,
            ts.top_four_count
        FROM tournament_participants tp
        JOIN tournaments t ON t.id = tp.tournament_id
        LEFT JOIN tournament_standings ts
            ON ts.tournament_id = tp.tournament_id
            AND ts.player_id = tp.player_id
        WHERE tp.player_id = :player_id
        ORDER BY t.start_time DESC, t.id DESC
        {limit_filter}
    """
    values: dict[str, int] = {"player_id": player_id}
    if pagination is not None:
        values |= {"limit": pagination.limit, "offset": pagination.offset}

    result = await database.fetch_all(query=query, values=values)
    return [PlayerTournamentHistoryItem.model_validate(dict(row._mapping)) for row in result]


async def get_player_tournament_count(player_id: PlayerId) -> int:
    query = """
        SELECT count(*)
        FROM tournament_participants
        WHERE player_id = :player_id
    """
    count = await database.fetch_val(query=query, values={"player_id": player_id})
    return int(count)


async def insert_player(player_body: PlayerBody) -> PlayerId:
    query = """
        INSERT INTO players (name, created)
        VALUES (:name, :created)
        RETURNING id
    """
    new_id = await database.fetch_val(
        query=query,
        values=PlayerInsertable(
            **player_body.model_dump(), created=datetime_utc.now()
        ).model_dump(),
    )
    return PlayerId(new_id)


async def sql_register_participant(tournament_id: TournamentId, player_id: PlayerId) -> None:
    query = """
        INSERT INTO tournament_participants (tournament_id, player_id, created)
        VALUES (:tournament_id, :player_id, :created)
        ON CONFLICT (tournament_id, player_id) DO NOTHING
    """
    await database.execute(
        query=query,
        values={
            "tournament_id": tournament_id,
            "player_id": player_id,
            "created": datetime_utc.now(),
        },
    )


async def sql_unregister_participant(tournament_id: TournamentId, player_id: PlayerId) -> None:
    query = """
        DELETE FROM tournament_participants
        WHERE tournament_id = :tournament_id
        AND player_id = :player_id
    """
    await database.execute(
        query=query, values={"tournament_id": tournament_id, "player_id": player_id}
    )
