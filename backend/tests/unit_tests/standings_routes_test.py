import json

import pytest
from starlette.exceptions import HTTPException
from starlette.requests import Request

from tftracker.app import (
    fact_commit_error_handler,
    not_found_error_handler,
    validation_error_handler,
)
from tftracker.logic.standings.recalculation import compute_standings
from tftracker.models.game_results import GamePlacementEntry, GameSubmissionBody
from tftracker.models.standings import RankedStandingView, StandingsRecalculation
from tftracker.routes import game_results as game_results_routes
from tftracker.routes import standings as standings_routes
from tftracker.routes import util as routes_util
from tftracker.utils.dummy_records import DUMMY_TOURNAMENT, dummy_game, dummy_placement_fact
from tftracker.utils.errors import FactCommitError, NotFoundError, ValidationError
from tftracker.utils.id_types import PlayerId, TournamentId

_REQUEST = Request(scope={"type": "http"})


def _standing_views() -> list[RankedStandingView]:
    return [
        RankedStandingView(**standing.model_dump(), player_name=f"Player {standing.player_id}")
        for standing in compute_standings(dummy_game([2, 1, 3, 4, 5, 6, 7, 8]))
    ]


@pytest.mark.asyncio
async def test_post_recalculate_standings_reports_result(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = {"recalculate": 0}

    async def fake_recalculate(tournament_id: TournamentId) -> StandingsRecalculation:
        calls["recalculate"] += 1
        return StandingsRecalculation(
            tournament_id=tournament_id,
            ledger_revision=7,
            standings=compute_standings(dummy_game([1, 2, 3, 4, 5, 6, 7, 8])),
            duration_ms=12,
        )

    monkeypatch.setattr(standings_routes, "recalculate_tournament_standings", fake_recalculate)

    response = await standings_routes.post_recalculate_standings(DUMMY_TOURNAMENT)

    assert response.data.success is True
    assert response.data.ledger_revision == 7
    assert response.data.players_ranked == 8
    assert response.data.duration_ms == 12
    assert calls["recalculate"] == 1


@pytest.mark.asyncio
async def test_get_tournament_standings_passes_limit(monkeypatch: pytest.MonkeyPatch) -> None:
    limits: list[int | None] = []

    async def fake_get_standings(
        _: TournamentId, *, limit: int | None = None
    ) -> list[RankedStandingView]:
        limits.append(limit)
        return _standing_views()[:limit]

    async def fake_get_snapshot_revision(_: TournamentId) -> int | None:
        return 3

    monkeypatch.setattr(standings_routes, "get_snapshot_revision", fake_get_snapshot_revision)
    monkeypatch.setattr(standings_routes, "get_standings", fake_get_standings)

    response = await standings_routes.get_tournament_standings(3, DUMMY_TOURNAMENT)

    assert limits == [3]
    assert [standing.player_id for standing in response.data] == [2, 1, 3]
    assert [standing.rank for standing in response.data] == [1, 2, 3]


@pytest.mark.asyncio
async def test_get_tournament_standings_before_first_calculation_is_not_found(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls = {"get_standings": 0}

    async def fake_get_snapshot_revision(_: TournamentId) -> int | None:
        return None

    async def fake_get_standings(
        _: TournamentId, *, limit: int | None = None
    ) -> list[RankedStandingView]:
        calls["get_standings"] += 1
        return []

    monkeypatch.setattr(standings_routes, "get_snapshot_revision", fake_get_snapshot_revision)
    monkeypatch.setattr(standings_routes, "get_standings", fake_get_standings)

    with pytest.raises(NotFoundError, match="have not been calculated yet"):
        await standings_routes.get_tournament_standings(None, DUMMY_TOURNAMENT)

    assert calls["get_standings"] == 0


@pytest.mark.asyncio
async def test_get_tournament_standings_of_empty_snapshot_is_not_found(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def fake_get_snapshot_revision(_: TournamentId) -> int | None:
        return 0

    async def fake_get_standings(
        _: TournamentId, *, limit: int | None = None
    ) -> list[RankedStandingView]:
        return []

    monkeypatch.setattr(standings_routes, "get_snapshot_revision", fake_get_snapshot_revision)
    monkeypatch.setattr(standings_routes, "get_standings", fake_get_standings)

    with pytest.raises(NotFoundError, match="has no recorded game results") as exc_info:
        await standings_routes.get_tournament_standings(None, DUMMY_TOURNAMENT)

    response = await not_found_error_handler(_REQUEST, exc_info.value)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_player_standing_without_games_is_not_found(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def fake_get_standing_for_player(
        _: TournamentId, player_id: PlayerId
    ) -> RankedStandingView | None:
        return next((view for view in _standing_views() if view.player_id == player_id), None)

    monkeypatch.setattr(
        standings_routes, "get_standing_for_player", fake_get_standing_for_player
    )

    response = await standings_routes.get_player_standing(PlayerId(1), DUMMY_TOURNAMENT)
    assert response.data.rank == 2

    with pytest.raises(HTTPException) as exc_info:
        await standings_routes.get_player_standing(PlayerId(42), DUMMY_TOURNAMENT)

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_unknown_tournament_is_not_found(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_sql_get_tournament(_: TournamentId) -> None:
        return None

    monkeypatch.setattr(routes_util, "sql_get_tournament", fake_sql_get_tournament)

    with pytest.raises(HTTPException) as exc_info:
        await routes_util.tournament_dependency(TournamentId(404))

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_validate_endpoint_reports_errors_and_warnings(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def fake_collect_errors(*_: object) -> list[str]:
        return ["Each game must have exactly 8 player results"]

    monkeypatch.setattr(game_results_routes, "collect_game_submission_errors", fake_collect_errors)
    body = GameSubmissionBody(
        day_number=1,
        game_number=9,
        results=[GamePlacementEntry(player_id=PlayerId(1), placement=1)],
    )

    response = await game_results_routes.post_validate_game_results(body, DUMMY_TOURNAMENT)

    assert response.data.valid is False
    assert response.data.errors == ["Each game must have exactly 8 player results"]
    assert response.data.warnings == ["Game 9 exceeds typical games per day (6)"]


@pytest.mark.asyncio
async def test_error_handlers_map_to_status_codes() -> None:
    validation = await validation_error_handler(_REQUEST, ValidationError(["bad placement"]))
    assert validation.status_code == 400
    assert json.loads(validation.body) == {
        "detail": "Validation failed",
        "errors": ["bad placement"],
    }

    not_found = await not_found_error_handler(_REQUEST, NotFoundError("Game result not found"))
    assert not_found.status_code == 404

    commit_error = FactCommitError([dummy_placement_fact(3, 2, game_number=4)])
    unavailable = await fact_commit_error_handler(_REQUEST, commit_error)
    assert unavailable.status_code == 503
    assert json.loads(unavailable.body)["facts"] == ["player 3: day 1, game 4, placement 2"]
