from fastapi import APIRouter, Depends
from starlette import status

from tftracker.config import config
from tftracker.logic.players import (
    build_player_statistics,
    create_players_in_bulk,
    get_recent_completed_tournaments,
)
from tftracker.models.db.player import Player, PlayerBody, PlayerMultiBody
from tftracker.models.players import (
    PaginatedPlayers,
    PaginatedTournamentHistory,
    PlayerStatisticsView,
)
from tftracker.routes.models import (
    BulkPlayerCreationResponse,
    PlayersResponse,
    PlayerStatisticsResponse,
    PlayerTournamentHistoryResponse,
    SinglePlayerResponse,
)
from tftracker.routes.util import player_dependency
from tftracker.sql.players import (
    get_player_by_id,
    get_player_count,
    get_player_tournament_count,
    get_player_tournament_history,
    get_players,
    get_players_by_names,
    insert_player,
)
from tftracker.utils.errors import ValidationError
from tftracker.utils.pagination import PaginationPlayers, PaginationTournamentHistory
from tftracker.utils.types import assert_some

router = APIRouter(prefix=config.api_prefix)


@router.get("/players", response_model=PlayersResponse)
async def get_players_list(pagination: PaginationPlayers = Depends()) -> PlayersResponse:
    return PlayersResponse(
        data=PaginatedPlayers(
            players=await get_players(pagination),
            count=await get_player_count(),
        )
    )


@router.get("/players/{player_id}", response_model=SinglePlayerResponse)
async def get_player(player: Player = Depends(player_dependency)) -> SinglePlayerResponse:
    return SinglePlayerResponse(data=player)


@router.post(
    "/players",
    response_model=SinglePlayerResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_player(player_body: PlayerBody) -> SinglePlayerResponse:
    if len(await get_players_by_names([player_body.name])) > 0:
        raise ValidationError(f"Player with name {player_body.name} already exists")

    player_id = await insert_player(player_body)
    return SinglePlayerResponse(data=assert_some(await get_player_by_id(player_id)))


@router.post("/players/bulk", response_model=BulkPlayerCreationResponse)
async def create_multiple_players(player_body: PlayerMultiBody) -> BulkPlayerCreationResponse:
    return BulkPlayerCreationResponse(data=await create_players_in_bulk(player_body.players))


@router.get("/players/{player_id}/tournaments", response_model=PlayerTournamentHistoryResponse)
async def get_player_tournaments(
    pagination: PaginationTournamentHistory = Depends(),
    player: Player = Depends(player_dependency),
) -> PlayerTournamentHistoryResponse:
    return PlayerTournamentHistoryResponse(
        data=PaginatedTournamentHistory(
            tournaments=await get_player_tournament_history(player.id, pagination),
            count=await get_player_tournament_count(player.id),
        )
    )


@router.get("/players/{player_id}/statistics", response_model=PlayerStatisticsResponse)
async def get_player_statistics(
    player: Player = Depends(player_dependency),
) -> PlayerStatisticsResponse:
    history = await get_player_tournament_history(player.id)
    return PlayerStatisticsResponse(
        data=PlayerStatisticsView(
            player=player,
            overview=build_player_statistics(history),
            recent_tournaments=get_recent_completed_tournaments(history),
        )
    )
