from heliclockter import datetime_utc

from tftracker.database import database
from tftracker.models.db.tournament import (
    Tournament,
    TournamentBody,
    TournamentInsertable,
    TournamentStatus,
)
from tftracker.utils.id_types import TournamentId


async def sql_get_tournament(tournament_id: TournamentId) -> Tournament | None:
    query = """
        SELECT *
        FROM tournaments
        WHERE id = :tournament_id
        """
    result = await database.fetch_one(query=query, values={"tournament_id": tournament_id})
    return Tournament.model_validate(dict(result._mapping)) if result is not None else None


async def sql_create_tournament(tournament: TournamentBody) -> TournamentId:
    query = """
        INSERT INTO tournaments (
            name,
            created,
            start_time,
            status,
            total_days,
            games_per_day,
            lobby_size
        )
        VALUES (
            :name,
            :created,
            :start_time,
            :status,
            :total_days,
            :games_per_day,
            :lobby_size
        )
        RETURNING id
        """
    insertable = TournamentInsertable(**tournament.model_dump(), created=datetime_utc.now())
    new_id = await database.fetch_val(
        query=query,
        values={**insertable.model_dump(), "status": insertable.status.value},
    )
    return TournamentId(new_id)


async def sql_update_tournament_status(
    tournament_id: TournamentId, status: TournamentStatus
) -> None:
    query = """
        UPDATE tournaments
        SET status = CAST(:status AS tournament_status)
        WHERE tournaments.id = :tournament_id
        """
    await database.execute(
        query=query, values={"tournament_id": tournament_id, "status": status.value}
    )


async def sql_get_tournaments(status: TournamentStatus | None = None) -> list[Tournament]:
    status_filter = (
        "WHERE status = CAST(:status AS tournament_status)" if status is not None else ""
    )
    query = f"""
        SELECT *
        FROM tournaments
        {status_filter}
        ORDER BY start_time DESC, id DESC
        """
    result = await database.fetch_all(
        query=query, values={"status": status.value} if status is not None else {}
    )
    return [Tournament.model_validate(dict(row._mapping)) for row in result]
