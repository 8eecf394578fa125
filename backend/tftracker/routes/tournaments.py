from fastapi import APIRouter, Depends, Query
from starlette import status

from tftracker.config import config
from tftracker.models.db.player import (
    TournamentParticipantBody,
    TournamentParticipantWithPlayer,
)
from tftracker.models.db.tournament import (
    Tournament,
    TournamentBody,
    TournamentStatus,
    TournamentStatusBody,
)
from tftracker.routes.models import (
    ParticipantsResponse,
    SingleParticipantResponse,
    SingleTournamentResponse,
    SuccessResponse,
    TournamentsResponse,
)
from tftracker.routes.util import tournament_dependency
from tftracker.sql.players import (
    get_participant,
    get_participants,
    get_player_by_id,
    player_has_results,
    sql_register_participant,
    sql_unregister_participant,
)
from tftracker.sql.tournaments import (
    sql_create_tournament,
    sql_get_tournament,
    sql_get_tournaments,
    sql_update_tournament_status,
)
from tftracker.utils.errors import NotFoundError, ValidationError
from tftracker.utils.id_types import PlayerId
from tftracker.utils.types import assert_some

router = APIRouter(prefix=config.api_prefix)


@router.get("/tournaments", response_model=TournamentsResponse)
async def get_tournaments(
    tournament_status: TournamentStatus | None = Query(default=None, alias="status"),
) -> TournamentsResponse:
    return TournamentsResponse(data=await sql_get_tournaments(tournament_status))


@router.get("/tournaments/{tournament_id}", response_model=SingleTournamentResponse)
async def get_tournament(
    tournament: Tournament = Depends(tournament_dependency),
) -> SingleTournamentResponse:
    return SingleTournamentResponse(data=tournament)


@router.post(
    "/tournaments",
    response_model=SingleTournamentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_tournament(tournament_body: TournamentBody) -> SingleTournamentResponse:
    tournament_id = await sql_create_tournament(tournament_body)
    return SingleTournamentResponse(data=assert_some(await sql_get_tournament(tournament_id)))


@router.put("/tournaments/{tournament_id}/status", response_model=SingleTournamentResponse)
async def update_tournament_status(
    body: TournamentStatusBody,
    tournament: Tournament = Depends(tournament_dependency),
) -> SingleTournamentResponse:
    await sql_update_tournament_status(tournament.id, body.status)
    return SingleTournamentResponse(data=assert_some(await sql_get_tournament(tournament.id)))


@router.get("/tournaments/{tournament_id}/participants", response_model=ParticipantsResponse)
async def get_tournament_participants(
    tournament: Tournament = Depends(tournament_dependency),
) -> ParticipantsResponse:
    return ParticipantsResponse(data=await get_participants(tournament.id))


@router.post(
    "/tournaments/{tournament_id}/participants",
    response_model=SingleParticipantResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_participant(
    body: TournamentParticipantBody,
    tournament: Tournament = Depends(tournament_dependency),
) -> SingleParticipantResponse:
    if not tournament.status.accepts_results:
        raise ValidationError(
            f"Cannot register players for a tournament with status {tournament.status.value}"
        )

    player = await get_player_by_id(body.player_id)
    if player is None:
        raise NotFoundError(f"Player {body.player_id} not found")

    await sql_register_participant(tournament.id, player.id)
    participant = assert_some(await get_participant(tournament.id, player.id))
    return SingleParticipantResponse(
        data=TournamentParticipantWithPlayer(**participant.model_dump(), player_name=player.name)
    )


@router.delete(
    "/tournaments/{tournament_id}/participants/{player_id}",
    response_model=SuccessResponse,
)
async def unregister_participant(
    player_id: PlayerId,
    tournament: Tournament = Depends(tournament_dependency),
) -> SuccessResponse:
    if not tournament.status.accepts_results:
        raise ValidationError(
            f"Cannot unregister players from a tournament with status {tournament.status.value}"
        )

    if await get_participant(tournament.id, player_id) is None:
        raise NotFoundError(f"Player {player_id} is not registered for this tournament")

    if await player_has_results(tournament.id, player_id):
        raise ValidationError(
            "Cannot unregister a player with recorded game results, delete the results first"
        )

    await sql_unregister_participant(tournament.id, player_id)
    return SuccessResponse()
