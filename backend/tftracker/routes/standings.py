from fastapi import APIRouter, Depends, HTTPException, Query
from heliclockter import datetime_utc
from starlette import status

from tftracker.config import config
from tftracker.logic.standings.recalculation import recalculate_tournament_standings
from tftracker.models.db.tournament import Tournament
from tftracker.models.standings import StandingsRecalculateView
from tftracker.routes.models import (
    SingleStandingResponse,
    StandingsRecalculateResponse,
    StandingsResponse,
)
from tftracker.routes.util import tournament_dependency
from tftracker.sql.standings import (
    get_snapshot_revision,
    get_standing_for_player,
    get_standings,
)
from tftracker.utils.errors import NotFoundError
from tftracker.utils.id_types import PlayerId

router = APIRouter(prefix=config.api_prefix)


@router.get(
    "/tournaments/{tournament_id}/standings",
    response_model=StandingsResponse,
)
async def get_tournament_standings(
    limit: int | None = Query(default=None, ge=1),
    tournament: Tournament = Depends(tournament_dependency),
) -> StandingsResponse:
    if await get_snapshot_revision(tournament.id) is None:
        raise NotFoundError(
            f"Standings of tournament {tournament.id} have not been calculated yet"
        )

    standings = await get_standings(tournament.id, limit=limit)
    if len(standings) < 1:
        raise NotFoundError(f"Tournament {tournament.id} has no recorded game results")
    return StandingsResponse(data=standings)


@router.get(
    "/tournaments/{tournament_id}/standings/{player_id}",
    response_model=SingleStandingResponse,
)
async def get_player_standing(
    player_id: PlayerId,
    tournament: Tournament = Depends(tournament_dependency),
) -> SingleStandingResponse:
    standing = await get_standing_for_player(tournament.id, player_id)
    if standing is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Player has no standing in this tournament")
    return SingleStandingResponse(data=standing)


@router.post(
    "/tournaments/{tournament_id}/standings/recalculate",
    response_model=StandingsRecalculateResponse,
)
async def post_recalculate_standings(
    tournament: Tournament = Depends(tournament_dependency),
) -> StandingsRecalculateResponse:
    recalculation = await recalculate_tournament_standings(tournament.id)
    return StandingsRecalculateResponse(
        data=StandingsRecalculateView(
            recalculated_at=datetime_utc.now(),
            ledger_revision=recalculation.ledger_revision,
            players_ranked=len(recalculation.standings),
            snapshot_written=recalculation.snapshot_written,
            duration_ms=recalculation.duration_ms,
        )
    )
