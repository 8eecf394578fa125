from fastapi import APIRouter, Depends, Query
from starlette import status

from tftracker.config import config
from tftracker.logic.game_results.submission import (
    build_game_result_view,
    delete_game_result,
    submit_game_results,
    submit_game_results_in_bulk,
    update_game_result_placement,
)
from tftracker.logic.game_results.validation import (
    collect_game_submission_errors,
    find_game_submission_warnings,
)
from tftracker.models.db.tournament import Tournament
from tftracker.models.game_results import (
    GameBulkSubmissionBody,
    GameResultFilter,
    GameResultUpdateBody,
    GameSubmissionBody,
    GameValidationView,
    TournamentGameSummaryView,
)
from tftracker.routes.models import (
    BulkSubmissionResponse,
    GameResultDeletionResponse,
    GameResultsResponse,
    GameResultUpdateResponse,
    GameSubmissionResponse,
    GameValidationResponse,
    TournamentGameSummaryResponse,
)
from tftracker.routes.util import tournament_dependency
from tftracker.sql.game_results import (
    get_game_results,
    get_game_summary_by_day,
    get_tournament_progress,
)
from tftracker.utils.id_types import GameResultId, PlayerId

router = APIRouter(prefix=config.api_prefix)


@router.get(
    "/tournaments/{tournament_id}/game_results",
    response_model=GameResultsResponse,
)
async def get_results(
    day: int | None = Query(default=None, ge=1),
    game: int | None = Query(default=None, ge=1),
    player_id: PlayerId | None = None,
    tournament: Tournament = Depends(tournament_dependency),
) -> GameResultsResponse:
    results = await get_game_results(
        tournament.id,
        GameResultFilter(day_number=day, game_number=game, player_id=player_id),
    )
    return GameResultsResponse(
        data=[build_game_result_view(result, tournament) for result in results]
    )


@router.get(
    "/tournaments/{tournament_id}/game_results/summary",
    response_model=TournamentGameSummaryResponse,
)
async def get_game_summary(
    tournament: Tournament = Depends(tournament_dependency),
) -> TournamentGameSummaryResponse:
    return TournamentGameSummaryResponse(
        data=TournamentGameSummaryView(
            tournament=tournament,
            progress=await get_tournament_progress(tournament.id),
            days=await get_game_summary_by_day(tournament.id),
        )
    )


@router.post(
    "/tournaments/{tournament_id}/game_results",
    response_model=GameSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_game_results(
    body: GameSubmissionBody,
    tournament: Tournament = Depends(tournament_dependency),
) -> GameSubmissionResponse:
    return GameSubmissionResponse(data=await submit_game_results(tournament, body))


@router.post(
    "/tournaments/{tournament_id}/game_results/bulk",
    response_model=BulkSubmissionResponse,
)
async def post_game_results_bulk(
    body: GameBulkSubmissionBody,
    tournament: Tournament = Depends(tournament_dependency),
) -> BulkSubmissionResponse:
    return BulkSubmissionResponse(data=await submit_game_results_in_bulk(tournament, body))


@router.post(
    "/tournaments/{tournament_id}/game_results/validate",
    response_model=GameValidationResponse,
)
async def post_validate_game_results(
    body: GameSubmissionBody,
    tournament: Tournament = Depends(tournament_dependency),
) -> GameValidationResponse:
    errors = await collect_game_submission_errors(tournament, body)
    return GameValidationResponse(
        data=GameValidationView(
            valid=len(errors) == 0,
            errors=errors,
            warnings=find_game_submission_warnings(tournament, body),
        )
    )


@router.put(
    "/tournaments/{tournament_id}/game_results/{game_result_id}",
    response_model=GameResultUpdateResponse,
)
async def put_game_result(
    game_result_id: GameResultId,
    body: GameResultUpdateBody,
    tournament: Tournament = Depends(tournament_dependency),
) -> GameResultUpdateResponse:
    return GameResultUpdateResponse(
        data=await update_game_result_placement(tournament, game_result_id, body.placement)
    )


@router.delete(
    "/tournaments/{tournament_id}/game_results/{game_result_id}",
    response_model=GameResultDeletionResponse,
)
async def delete_result(
    game_result_id: GameResultId,
    tournament: Tournament = Depends(tournament_dependency),
) -> GameResultDeletionResponse:
    return GameResultDeletionResponse(data=await delete_game_result(tournament, game_result_id))
