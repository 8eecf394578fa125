import pytest

from tftracker.config import config
from tftracker.logic.game_results import submission
from tftracker.models.db.game_result import GameResult, GameResultWithPlayer, PlacementFact
from tftracker.models.db.tournament import Tournament, TournamentStatus
from tftracker.models.game_results import (
    GameBulkSubmissionBody,
    GamePlacementEntry,
    GameResultFilter,
    GameSubmissionBody,
)
from tftracker.models.standings import StandingsRecalculation
from tftracker.utils.dummy_records import DUMMY_MOCK_TIME, DUMMY_TOURNAMENT
from tftracker.utils.errors import FactCommitError, NotFoundError, ValidationError
from tftracker.utils.id_types import GameResultId, PlayerId, TournamentId


def build_body(game_number: int = 1) -> GameSubmissionBody:
    return GameSubmissionBody(
        day_number=1,
        game_number=game_number,
        results=[
            GamePlacementEntry(player_id=PlayerId(player_id), placement=player_id)
            for player_id in range(1, 9)
        ],
    )


class FakeLedger:
    def __init__(self) -> None:
        self.results: list[GameResultWithPlayer] = []
        self.recalculations = 0
        self.insert_failures = 0
        self.change_failures = 0
        self.recalculation_error: Exception | None = None
        self.invalid_games: set[int] = set()

    async def validate_game_submission(
        self, tournament: Tournament, body: GameSubmissionBody
    ) -> None:
        if body.game_number in self.invalid_games:
            raise ValidationError("Results for this game already exist.")

    async def insert_game_results(
        self, tournament_id: TournamentId, facts: list[PlacementFact]
    ) -> list[GameResultId]:
        if self.insert_failures > 0:
            self.insert_failures -= 1
            raise ConnectionError("connection refused")

        inserted_ids = []
        for fact in facts:
            result_id = GameResultId(len(self.results) + 1)
            self.results.append(
                GameResultWithPlayer(
                    **fact.model_dump(), id=result_id, player_name=f"Player {fact.player_id}"
                )
            )
            inserted_ids.append(result_id)
        return inserted_ids

    async def get_game_results(
        self, tournament_id: TournamentId, filter_: GameResultFilter
    ) -> list[GameResultWithPlayer]:
        return [
            result
            for result in self.results
            if filter_.day_number in (None, result.day_number)
            and filter_.game_number in (None, result.game_number)
            and filter_.player_id in (None, result.player_id)
        ]

    async def get_game_result_by_id(
        self, tournament_id: TournamentId, game_result_id: GameResultId
    ) -> GameResult | None:
        for result in self.results:
            if result.id == game_result_id:
                return GameResult.model_validate(result.model_dump())
        return None

    async def update_placement(
        self, tournament_id: TournamentId, game_result_id: GameResultId, placement: int
    ) -> None:
        self._fail_change_if_requested()
        self.results = [
            result.model_copy(update={"placement": placement})
            if result.id == game_result_id
            else result
            for result in self.results
        ]

    async def validate_placement_update(
        self, tournament: Tournament, game_result: GameResult, new_placement: int
    ) -> None:
        return None

    async def delete_game_result(
        self, tournament_id: TournamentId, game_result_id: GameResultId
    ) -> None:
        self._fail_change_if_requested()
        self.results = [result for result in self.results if result.id != game_result_id]

    def _fail_change_if_requested(self) -> None:
        if self.change_failures > 0:
            self.change_failures -= 1
            raise ConnectionError("connection refused")

    async def recalculate(self, tournament_id: TournamentId) -> StandingsRecalculation:
        self.recalculations += 1
        if self.recalculation_error is not None:
            raise self.recalculation_error
        return StandingsRecalculation(tournament_id=tournament_id, ledger_revision=1)


@pytest.fixture
def ledger(monkeypatch: pytest.MonkeyPatch) -> FakeLedger:
    fake = FakeLedger()
    monkeypatch.setattr(config, "recalc_retry_base_delay_seconds", 0)
    monkeypatch.setattr(config, "recalc_retry_attempts", 2)
    monkeypatch.setattr(submission, "validate_game_submission", fake.validate_game_submission)
    monkeypatch.setattr(submission, "validate_placement_update", fake.validate_placement_update)
    monkeypatch.setattr(submission, "sql_insert_game_results", fake.insert_game_results)
    monkeypatch.setattr(submission, "get_game_results", fake.get_game_results)
    monkeypatch.setattr(submission, "get_game_result_by_id", fake.get_game_result_by_id)
    monkeypatch.setattr(submission, "sql_update_game_result_placement", fake.update_placement)
    monkeypatch.setattr(submission, "sql_delete_game_result", fake.delete_game_result)
    monkeypatch.setattr(submission, "recalculate_tournament_standings", fake.recalculate)
    return fake


@pytest.mark.asyncio
async def test_submit_game_results_commits_and_recalculates(ledger: FakeLedger) -> None:
    view = await submission.submit_game_results(DUMMY_TOURNAMENT, build_body())

    assert view.standings_recalculated is True
    assert ledger.recalculations == 1
    assert [(result.player_id, result.placement, result.points) for result in view.results] == [
        (PlayerId(player_id), player_id, 9 - player_id) for player_id in range(1, 9)
    ]
    assert all(result.recorded_at >= DUMMY_MOCK_TIME for result in view.results)


@pytest.mark.asyncio
async def test_rejected_submission_commits_nothing(ledger: FakeLedger) -> None:
    ledger.invalid_games = {1}

    with pytest.raises(ValidationError):
        await submission.submit_game_results(DUMMY_TOURNAMENT, build_body())

    assert ledger.results == []
    assert ledger.recalculations == 0


@pytest.mark.asyncio
async def test_transient_insert_failure_is_retried(ledger: FakeLedger) -> None:
    ledger.insert_failures = 1

    view = await submission.submit_game_results(DUMMY_TOURNAMENT, build_body())

    assert len(view.results) == 8


@pytest.mark.asyncio
async def test_failed_commit_reports_the_facts(ledger: FakeLedger) -> None:
    ledger.insert_failures = 5

    with pytest.raises(FactCommitError) as exc_info:
        await submission.submit_game_results(DUMMY_TOURNAMENT, build_body())

    assert len(exc_info.value.facts) == 8
    assert exc_info.value.describe_facts()[0] == "player 1: day 1, game 1, placement 1"
    assert ledger.recalculations == 0


@pytest.mark.asyncio
async def test_committed_facts_survive_failed_recalculation(ledger: FakeLedger) -> None:
    ledger.recalculation_error = ConnectionError("connection reset")

    view = await submission.submit_game_results(DUMMY_TOURNAMENT, build_body())

    assert view.standings_recalculated is False
    assert len(ledger.results) == 8


@pytest.mark.asyncio
async def test_bulk_submission_reports_each_game(ledger: FakeLedger) -> None:
    ledger.invalid_games = {2}
    body = GameBulkSubmissionBody(games=[build_body(1), build_body(2), build_body(3)])

    view = await submission.submit_game_results_in_bulk(DUMMY_TOURNAMENT, body)

    assert (view.total, view.successful, view.failed) == (3, 2, 1)
    assert [success.index for success in view.successes] == [0, 2]
    assert view.errors[0].index == 1
    assert view.errors[0].game == "Day 1, Game 2"
    assert view.errors[0].details == ["Results for this game already exist."]
    assert ledger.recalculations == 2


@pytest.mark.asyncio
async def test_update_placement_returns_updated_result(ledger: FakeLedger) -> None:
    await submission.submit_game_results(DUMMY_TOURNAMENT, build_body())

    view = await submission.update_game_result_placement(DUMMY_TOURNAMENT, GameResultId(1), 5)

    assert view.result.placement == 5
    assert view.result.points == 4
    assert view.standings_recalculated is True
    assert ledger.recalculations == 2


@pytest.mark.asyncio
async def test_update_of_unknown_result_raises_not_found(ledger: FakeLedger) -> None:
    with pytest.raises(NotFoundError):
        await submission.update_game_result_placement(DUMMY_TOURNAMENT, GameResultId(99), 1)


@pytest.mark.asyncio
async def test_delete_result_recalculates(ledger: FakeLedger) -> None:
    await submission.submit_game_results(DUMMY_TOURNAMENT, build_body())

    view = await submission.delete_game_result(DUMMY_TOURNAMENT, GameResultId(3))

    assert view.game_result_id == GameResultId(3)
    assert view.standings_recalculated is True
    assert GameResultId(3) not in {result.id for result in ledger.results}
    assert ledger.recalculations == 2


@pytest.mark.asyncio
async def test_results_of_completed_tournament_cannot_be_deleted(ledger: FakeLedger) -> None:
    await submission.submit_game_results(DUMMY_TOURNAMENT, build_body())
    completed = DUMMY_TOURNAMENT.model_copy(update={"status": TournamentStatus.COMPLETED})

    with pytest.raises(ValidationError):
        await submission.delete_game_result(completed, GameResultId(1))

    assert len(ledger.results) == 8


@pytest.mark.asyncio
async def test_failed_correction_reports_the_corrected_fact(ledger: FakeLedger) -> None:
    await submission.submit_game_results(DUMMY_TOURNAMENT, build_body())
    ledger.change_failures = 5

    with pytest.raises(FactCommitError) as exc_info:
        await submission.update_game_result_placement(DUMMY_TOURNAMENT, GameResultId(2), 6)

    assert exc_info.value.describe_facts() == ["player 2: day 1, game 1, placement 6"]
    assert [result.placement for result in ledger.results if result.id == 2] == [2]
    assert ledger.recalculations == 1


@pytest.mark.asyncio
async def test_failed_deletion_reports_the_fact(ledger: FakeLedger) -> None:
    await submission.submit_game_results(DUMMY_TOURNAMENT, build_body())
    ledger.change_failures = 5

    with pytest.raises(FactCommitError) as exc_info:
        await submission.delete_game_result(DUMMY_TOURNAMENT, GameResultId(4))

    assert exc_info.value.describe_facts() == ["player 4: day 1, game 1, placement 4"]
    assert len(ledger.results) == 8


@pytest.mark.asyncio
async def test_correction_and_deletion_report_failed_recalculation(ledger: FakeLedger) -> None:
    await submission.submit_game_results(DUMMY_TOURNAMENT, build_body())
    ledger.recalculation_error = ConnectionError("connection reset")

    updated = await submission.update_game_result_placement(DUMMY_TOURNAMENT, GameResultId(1), 5)
    deleted = await submission.delete_game_result(DUMMY_TOURNAMENT, GameResultId(2))

    assert updated.result.placement == 5
    assert updated.standings_recalculated is False
    assert deleted.standings_recalculated is False
    assert GameResultId(2) not in {result.id for result in ledger.results}
