import asyncio

import pytest
from heliclockter import datetime_utc

from tftracker.config import config
from tftracker.logic.standings import recalculation
from tftracker.models.db.game_result import LedgerSnapshot, PlacementFact
from tftracker.models.db.tournament import Tournament
from tftracker.models.standings import RankedStanding
from tftracker.utils.dummy_records import (
    DUMMY_MOCK_TIME,
    DUMMY_TOURNAMENT,
    dummy_game,
    dummy_placement_fact,
)
from tftracker.utils.errors import ConcurrencyConflict, NotFoundError, ValidationError
from tftracker.utils.id_types import TournamentId


class FakeStandingsStorage:
    def __init__(
        self,
        *,
        tournament: Tournament | None = DUMMY_TOURNAMENT,
        facts: list[PlacementFact] | None = None,
        ledger_revision: int = 4,
    ) -> None:
        self.tournament = tournament
        self.facts = facts or []
        self.ledger_revision = ledger_revision
        self.stored_revision: int | None = None
        self.writes: list[tuple[list[RankedStanding], int]] = []
        self.ledger_failures = 0

    async def get_tournament(self, tournament_id: TournamentId) -> Tournament | None:
        return self.tournament

    async def get_ledger_snapshot(self, tournament_id: TournamentId) -> LedgerSnapshot:
        if self.ledger_failures > 0:
            self.ledger_failures -= 1
            raise ConnectionError("connection reset by peer")
        return LedgerSnapshot(
            tournament_id=tournament_id, ledger_revision=self.ledger_revision, facts=self.facts
        )

    async def replace_standings_snapshot(
        self, tournament_id: TournamentId, standings: list[RankedStanding], ledger_revision: int
    ) -> datetime_utc:
        if self.stored_revision is not None and self.stored_revision > ledger_revision:
            raise ConcurrencyConflict(int(tournament_id), ledger_revision, self.stored_revision)
        self.stored_revision = ledger_revision
        self.writes.append((standings, ledger_revision))
        return DUMMY_MOCK_TIME

    def install(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(recalculation, "sql_get_tournament", self.get_tournament)
        monkeypatch.setattr(recalculation, "sql_get_ledger_snapshot", self.get_ledger_snapshot)
        monkeypatch.setattr(
            recalculation, "sql_replace_standings_snapshot", self.replace_standings_snapshot
        )


@pytest.fixture(autouse=True)
def no_retry_delay(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "recalc_retry_base_delay_seconds", 0)
    monkeypatch.setattr(config, "recalc_retry_attempts", 3)


@pytest.mark.asyncio
async def test_recalculation_writes_ranked_snapshot(monkeypatch: pytest.MonkeyPatch) -> None:
    storage = FakeStandingsStorage(
        facts=dummy_game([3, 1, 2, 4, 5, 6, 7, 8], game_number=1)
        + dummy_game([1, 3, 2, 4, 5, 6, 7, 8], game_number=2),
        ledger_revision=2,
    )
    storage.install(monkeypatch)

    result = await recalculation.recalculate_tournament_standings(DUMMY_TOURNAMENT.id)

    assert result.snapshot_written is True
    assert result.ledger_revision == 2
    assert len(storage.writes) == 1
    written, revision = storage.writes[0]
    assert revision == 2
    assert written == result.standings
    # Both leaders have 15 points with a 1st and a 2nd; player 1 won the latest game.
    assert [standing.player_id for standing in written[:3]] == [1, 3, 2]
    assert [standing.rank for standing in written] == list(range(1, 9))


@pytest.mark.asyncio
async def test_recalculation_of_empty_ledger_clears_previous_snapshot(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    # The last result of the tournament was deleted after revision 2 had been ranked.
    storage = FakeStandingsStorage(facts=[], ledger_revision=3)
    storage.stored_revision = 2
    storage.install(monkeypatch)

    result = await recalculation.recalculate_tournament_standings(DUMMY_TOURNAMENT.id)

    assert result.standings == []
    assert storage.writes == [([], 3)]


@pytest.mark.asyncio
async def test_unknown_tournament_raises_not_found(monkeypatch: pytest.MonkeyPatch) -> None:
    storage = FakeStandingsStorage(tournament=None)
    storage.install(monkeypatch)

    with pytest.raises(NotFoundError):
        await recalculation.recalculate_tournament_standings(TournamentId(404))

    assert storage.writes == []
    assert TournamentId(404) not in recalculation._recalculation_locks


@pytest.mark.asyncio
async def test_transient_ledger_failure_is_retried(monkeypatch: pytest.MonkeyPatch) -> None:
    storage = FakeStandingsStorage(facts=dummy_game([1, 2, 3, 4, 5, 6, 7, 8]))
    storage.ledger_failures = 2
    storage.install(monkeypatch)

    result = await recalculation.recalculate_tournament_standings(DUMMY_TOURNAMENT.id)

    assert result.snapshot_written is True
    assert len(storage.writes) == 1


@pytest.mark.asyncio
async def test_persistent_ledger_failure_writes_nothing(monkeypatch: pytest.MonkeyPatch) -> None:
    storage = FakeStandingsStorage(facts=dummy_game([1, 2, 3, 4, 5, 6, 7, 8]))
    storage.ledger_failures = 10
    storage.install(monkeypatch)

    with pytest.raises(ConnectionError):
        await recalculation.recalculate_tournament_standings(DUMMY_TOURNAMENT.id)

    assert storage.writes == []


@pytest.mark.asyncio
async def test_malformed_ledger_writes_nothing(monkeypatch: pytest.MonkeyPatch) -> None:
    storage = FakeStandingsStorage(
        facts=[dummy_placement_fact(1, 1), dummy_placement_fact(1, 2)],
    )
    storage.install(monkeypatch)

    with pytest.raises(ValidationError):
        await recalculation.recalculate_tournament_standings(DUMMY_TOURNAMENT.id)

    assert storage.writes == []


@pytest.mark.asyncio
async def test_stale_snapshot_is_discarded(monkeypatch: pytest.MonkeyPatch) -> None:
    storage = FakeStandingsStorage(facts=dummy_game([1, 2, 3, 4, 5, 6, 7, 8]), ledger_revision=3)
    storage.stored_revision = 5
    storage.install(monkeypatch)

    result = await recalculation.recalculate_tournament_standings(DUMMY_TOURNAMENT.id)

    assert result.snapshot_written is False
    assert storage.writes == []
    assert storage.stored_revision == 5


@pytest.mark.asyncio
async def test_recalculation_is_idempotent(monkeypatch: pytest.MonkeyPatch) -> None:
    storage = FakeStandingsStorage(
        facts=dummy_game([5, 6, 7, 8, 1, 2, 3, 4])
        + dummy_game([8, 7, 6, 5, 4, 3, 2, 1], game_number=2)
    )
    storage.install(monkeypatch)

    first = await recalculation.recalculate_tournament_standings(DUMMY_TOURNAMENT.id)
    second = await recalculation.recalculate_tournament_standings(DUMMY_TOURNAMENT.id)

    assert first.standings == second.standings
    assert storage.writes[0] == storage.writes[1]


@pytest.mark.asyncio
async def test_concurrent_recalculations_of_one_tournament_run_in_turn(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    storage = FakeStandingsStorage(facts=dummy_game([1, 2, 3, 4, 5, 6, 7, 8]))
    active = {"current": 0, "max": 0}
    load_ledger = storage.get_ledger_snapshot

    async def slow_ledger_snapshot(tournament_id: TournamentId) -> LedgerSnapshot:
        active["current"] += 1
        active["max"] = max(active["max"], active["current"])
        await asyncio.sleep(0.01)
        active["current"] -= 1
        return await load_ledger(tournament_id)

    storage.install(monkeypatch)
    monkeypatch.setattr(recalculation, "sql_get_ledger_snapshot", slow_ledger_snapshot)

    results = await asyncio.gather(
        *(recalculation.recalculate_tournament_standings(DUMMY_TOURNAMENT.id) for _ in range(3))
    )

    assert active["max"] == 1
    assert len(storage.writes) == 3
    assert all(result.standings == results[0].standings for result in results)
    assert DUMMY_TOURNAMENT.id not in recalculation._recalculation_locks


@pytest.mark.asyncio
async def test_slow_recalculation_is_logged(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    storage = FakeStandingsStorage(facts=dummy_game([1, 2, 3, 4, 5, 6, 7, 8]))
    storage.install(monkeypatch)
    monkeypatch.setattr(config, "recalc_warn_ms", 0)

    with caplog.at_level("WARNING", logger="tftracker"):
        await recalculation.recalculate_tournament_standings(DUMMY_TOURNAMENT.id)

    assert "recalculation was slow" in caplog.text


@pytest.mark.asyncio
async def test_recalculation_lock_is_shared_while_in_use_and_dropped_afterwards() -> None:
    tournament_id = TournamentId(31)

    async def wait_for_lock() -> None:
        async with recalculation.recalculation_lock(tournament_id):
            pass

    async with recalculation.recalculation_lock(tournament_id):
        held = recalculation._recalculation_locks[tournament_id]
        waiter = asyncio.create_task(wait_for_lock())
        await asyncio.sleep(0)

        assert recalculation._recalculation_locks[tournament_id] is held
        assert held.users == 2
        assert not waiter.done()

    await waiter

    assert tournament_id not in recalculation._recalculation_locks
