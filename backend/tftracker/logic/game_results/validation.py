from tftracker.models.db.game_result import GameResult
from tftracker.models.db.tournament import Tournament, TournamentStatus
from tftracker.models.game_results import GameSubmissionBody
from tftracker.sql.game_results import game_has_results, get_taken_placements
from tftracker.sql.players import get_participant_ids
from tftracker.utils.errors import ValidationError
from tftracker.utils.id_types import PlayerId


def find_game_submission_errors(
    tournament: Tournament,
    body: GameSubmissionBody,
    participant_ids: set[PlayerId],
) -> list[str]:
    """
    Check that a submitted game is complete and consistent: every seat of the lobby has exactly
    one registered player and the placements form a permutation of 1..lobby size.
    """
    errors: list[str] = []
    lobby_size = tournament.lobby_size

    if not tournament.status.accepts_results:
        errors.append(f"Tournament is {tournament.status.value.lower()} and accepts no results")

    if body.day_number > tournament.total_days:
        errors.append(
            f"Day {body.day_number} exceeds tournament total days ({tournament.total_days})"
        )

    if len(body.results) != lobby_size:
        errors.append(f"Each game must have exactly {lobby_size} player results")

    seen_placements: set[int] = set()
    seen_player_ids: set[PlayerId] = set()
    for index, result in enumerate(body.results, start=1):
        if not 1 <= result.placement <= lobby_size:
            errors.append(f"Result {index}: Placement must be between 1 and {lobby_size}")
            continue

        if result.placement in seen_placements:
            errors.append(f"Result {index}: Placement {result.placement} already assigned")
            continue
        seen_placements.add(result.placement)

        if result.player_id in seen_player_ids:
            errors.append(f"Result {index}: Player ID {result.player_id} already has a result")
            continue
        seen_player_ids.add(result.player_id)

        if result.player_id not in participant_ids:
            errors.append(
                f"Result {index}: Player ID {result.player_id} "
                "is not registered for this tournament"
            )

    return errors


def find_game_submission_warnings(tournament: Tournament, body: GameSubmissionBody) -> list[str]:
    warnings: list[str] = []
    if body.game_number > tournament.games_per_day:
        warnings.append(
            f"Game {body.game_number} exceeds typical games per day ({tournament.games_per_day})"
        )
    return warnings


def find_placement_update_errors(
    tournament: Tournament,
    game_result: GameResult,
    new_placement: int,
    taken_placements: set[int],
) -> list[str]:
    errors: list[str] = []
    if tournament.status is TournamentStatus.COMPLETED:
        errors.append("Cannot modify results of completed tournament")

    if not 1 <= new_placement <= tournament.lobby_size:
        errors.append(f"Placement must be between 1 and {tournament.lobby_size}")
    elif new_placement in taken_placements:
        errors.append(
            f"Placement {new_placement} is already taken by another player in day "
            f"{game_result.day_number}, game {game_result.game_number}"
        )

    return errors


async def collect_game_submission_errors(
    tournament: Tournament, body: GameSubmissionBody
) -> list[str]:
    participant_ids = await get_participant_ids(tournament.id)
    errors = find_game_submission_errors(tournament, body, participant_ids)

    if await game_has_results(tournament.id, body.day_number, body.game_number):
        errors.append(
            "Results for this game already exist. Use the update endpoint to modify them."
        )

    return errors


async def validate_game_submission(tournament: Tournament, body: GameSubmissionBody) -> None:
    errors = await collect_game_submission_errors(tournament, body)
    if len(errors) > 0:
        raise ValidationError(errors)


async def validate_placement_update(
    tournament: Tournament, game_result: GameResult, new_placement: int
) -> None:
    taken_placements = await get_taken_placements(
        tournament.id,
        game_result.day_number,
        game_result.game_number,
        excluding_result_id=game_result.id,
    )
    errors = find_placement_update_errors(tournament, game_result, new_placement, taken_placements)
    if len(errors) > 0:
        raise ValidationError(errors)
