import asyncio
import time
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

from tftracker.config import config
from tftracker.logic.standings.aggregation import aggregate_placement_facts
from tftracker.logic.standings.ranks import assign_ranks
from tftracker.logic.standings.tiebreak import sort_by_tiebreakers
from tftracker.models.db.game_result import PlacementFact
from tftracker.models.standings import RankedStanding, StandingsRecalculation
from tftracker.sql.game_results import sql_get_ledger_snapshot
from tftracker.sql.standings import sql_replace_standings_snapshot
from tftracker.sql.tournaments import sql_get_tournament
from tftracker.utils.errors import ConcurrencyConflict, NotFoundError
from tftracker.utils.id_types import TournamentId
from tftracker.utils.logging import logger
from tftracker.utils.storage import with_storage_retry


class _TournamentLock:
    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


_recalculation_locks: dict[TournamentId, _TournamentLock] = {}


@asynccontextmanager
async def recalculation_lock(tournament_id: TournamentId) -> AsyncIterator[None]:
    """
    Serialize recalculations of one tournament within this process.

    The lock is dropped again once no coroutine holds or awaits it.
    """
    tournament_lock = _recalculation_locks.get(tournament_id)
    if tournament_lock is None:
        tournament_lock = _recalculation_locks[tournament_id] = _TournamentLock()

    tournament_lock.users += 1
    try:
        async with tournament_lock.lock:
            yield
    finally:
        tournament_lock.users -= 1
        if tournament_lock.users == 0:
            del _recalculation_locks[tournament_id]


def compute_standings(
    facts: Iterable[PlacementFact], max_placement: int | None = None
) -> list[RankedStanding]:
    aggregates = aggregate_placement_facts(facts, max_placement)
    return assign_ranks(sort_by_tiebreakers(aggregates.values()))


async def recalculate_tournament_standings(tournament_id: TournamentId) -> StandingsRecalculation:
    """
    Recompute the standings of a tournament from its full ledger and persist them.

    Recalculations of the same tournament run one at a time in this process. Across processes,
    a snapshot computed from an older ledger revision than the stored one is discarded. Nothing
    is written when loading or computing fails, so readers keep seeing the previous snapshot.
    """
    started_at = time.monotonic()

    async with recalculation_lock(tournament_id):
        tournament = await with_storage_retry(
            lambda: sql_get_tournament(tournament_id),
            f"loading tournament {tournament_id}",
        )
        if tournament is None:
            raise NotFoundError(f"Tournament {tournament_id} not found")

        ledger = await with_storage_retry(
            lambda: sql_get_ledger_snapshot(tournament_id),
            f"loading placement facts of tournament {tournament_id}",
        )
        standings = compute_standings(ledger.facts, tournament.lobby_size)

        snapshot_written = True
        try:
            # Once the snapshot write starts it runs to completion even if the caller goes away.
            await asyncio.shield(
                with_storage_retry(
                    lambda: sql_replace_standings_snapshot(
                        tournament_id, standings, ledger.ledger_revision
                    ),
                    f"writing standings snapshot of tournament {tournament_id}",
                )
            )
        except ConcurrencyConflict as exc:
            snapshot_written = False
            logger.warning("Discarding stale standings snapshot: %s", exc)

    duration_ms = int((time.monotonic() - started_at) * 1000)
    if duration_ms >= config.recalc_warn_ms:
        logger.warning(
            "Standings recalculation was slow: tournament_id=%s duration_ms=%s",
            int(tournament_id),
            duration_ms,
        )

    return StandingsRecalculation(
        tournament_id=tournament_id,
        ledger_revision=ledger.ledger_revision,
        standings=standings,
        snapshot_written=snapshot_written,
        duration_ms=duration_ms,
    )
