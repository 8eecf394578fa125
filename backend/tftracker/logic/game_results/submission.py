from heliclockter import datetime_utc

from tftracker.logic.game_results.validation import (
    validate_game_submission,
    validate_placement_update,
)
from tftracker.logic.standings.points import points_for_placement
from tftracker.logic.standings.recalculation import recalculate_tournament_standings
from tftracker.models.db.game_result import GameResultWithPlayer, PlacementFact
from tftracker.models.db.tournament import Tournament, TournamentStatus
from tftracker.models.game_results import (
    BulkSubmissionFailure,
    BulkSubmissionSuccess,
    BulkSubmissionView,
    GameBulkSubmissionBody,
    GameResultDeletionView,
    GameResultFilter,
    GameResultUpdateView,
    GameResultView,
    GameSubmissionBody,
    GameSubmissionView,
)
from tftracker.sql.game_results import (
    get_game_result_by_id,
    get_game_results,
    sql_delete_game_result,
    sql_insert_game_results,
    sql_update_game_result_placement,
)
from tftracker.utils.errors import FactCommitError, NotFoundError, ValidationError
from tftracker.utils.id_types import GameResultId, TournamentId
from tftracker.utils.logging import logger
from tftracker.utils.storage import TRANSIENT_STORAGE_ERRORS, with_storage_retry


def build_placement_facts(
    tournament_id: TournamentId, body: GameSubmissionBody, recorded_at: datetime_utc
) -> list[PlacementFact]:
    return [
        PlacementFact(
            tournament_id=tournament_id,
            player_id=result.player_id,
            day_number=body.day_number,
            game_number=body.game_number,
            placement=result.placement,
            recorded_at=recorded_at,
        )
        for result in body.results
    ]


def build_game_result_view(result: GameResultWithPlayer, tournament: Tournament) -> GameResultView:
    return GameResultView(
        **result.model_dump(),
        points=points_for_placement(result.placement, tournament.lobby_size),
    )


async def recalculate_after_ledger_change(tournament_id: TournamentId) -> bool:
    """
    Recalculate standings after the ledger changed. The change itself is already committed, so
    when storage stays unavailable the previous snapshot remains visible and False is returned.
    """
    try:
        await recalculate_tournament_standings(tournament_id)
    except TRANSIENT_STORAGE_ERRORS:
        logger.exception(
            "Standings of tournament %s could not be recalculated, keeping previous snapshot",
            int(tournament_id),
        )
        return False
    return True


async def submit_game_results(
    tournament: Tournament, body: GameSubmissionBody
) -> GameSubmissionView:
    await validate_game_submission(tournament, body)

    facts = build_placement_facts(tournament.id, body, datetime_utc.now())
    try:
        await with_storage_retry(
            lambda: sql_insert_game_results(tournament.id, facts),
            f"committing {body.describe()} of tournament {tournament.id}",
        )
    except TRANSIENT_STORAGE_ERRORS as exc:
        raise FactCommitError(facts) from exc

    standings_recalculated = await recalculate_after_ledger_change(tournament.id)
    results = await get_game_results(
        tournament.id,
        GameResultFilter(day_number=body.day_number, game_number=body.game_number),
    )
    return GameSubmissionView(
        tournament_id=tournament.id,
        day_number=body.day_number,
        game_number=body.game_number,
        results=[build_game_result_view(result, tournament) for result in results],
        standings_recalculated=standings_recalculated,
    )


async def submit_game_results_in_bulk(
    tournament: Tournament, body: GameBulkSubmissionBody
) -> BulkSubmissionView:
    view = BulkSubmissionView(total=len(body.games))

    for index, game in enumerate(body.games):
        try:
            data = await submit_game_results(tournament, game)
        except ValidationError as exc:
            view.errors.append(
                BulkSubmissionFailure(
                    index=index,
                    game=game.describe(),
                    error="Validation failed",
                    details=exc.details,
                )
            )
            continue
        except FactCommitError as exc:
            view.errors.append(
                BulkSubmissionFailure(
                    index=index, game=game.describe(), error=str(exc), details=exc.describe_facts()
                )
            )
            continue

        view.successes.append(BulkSubmissionSuccess(index=index, game=game.describe(), data=data))

    view.successful = len(view.successes)
    view.failed = len(view.errors)
    return view


async def update_game_result_placement(
    tournament: Tournament, game_result_id: GameResultId, placement: int
) -> GameResultUpdateView:
    game_result = await get_game_result_by_id(tournament.id, game_result_id)
    if game_result is None:
        raise NotFoundError("Game result not found")

    await validate_placement_update(tournament, game_result, placement)
    try:
        await with_storage_retry(
            lambda: sql_update_game_result_placement(tournament.id, game_result_id, placement),
            f"updating game result {game_result_id} of tournament {tournament.id}",
        )
    except TRANSIENT_STORAGE_ERRORS as exc:
        raise FactCommitError([game_result.model_copy(update={"placement": placement})]) from exc

    standings_recalculated = await recalculate_after_ledger_change(tournament.id)

    updated = await get_game_results(
        tournament.id,
        GameResultFilter(
            day_number=game_result.day_number,
            game_number=game_result.game_number,
            player_id=game_result.player_id,
        ),
    )
    if len(updated) < 1:
        raise NotFoundError("Game result not found")
    return GameResultUpdateView(
        result=build_game_result_view(updated[0], tournament),
        standings_recalculated=standings_recalculated,
    )


async def delete_game_result(
    tournament: Tournament, game_result_id: GameResultId
) -> GameResultDeletionView:
    game_result = await get_game_result_by_id(tournament.id, game_result_id)
    if game_result is None:
        raise NotFoundError("Game result not found")

    if tournament.status is TournamentStatus.COMPLETED:
        raise ValidationError("Cannot delete results from completed tournament")

    try:
        await with_storage_retry(
            lambda: sql_delete_game_result(tournament.id, game_result_id),
            f"deleting game result {game_result_id} of tournament {tournament.id}",
        )
    except TRANSIENT_STORAGE_ERRORS as exc:
        raise FactCommitError([game_result]) from exc

    return GameResultDeletionView(
        game_result_id=game_result_id,
        standings_recalculated=await recalculate_after_ledger_change(tournament.id),
    )
