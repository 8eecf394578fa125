from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tftracker.models.db.game_result import PlacementFact


class TftTrackerError(Exception):
    pass


class ValidationError(TftTrackerError):
    """
    Raised when placement facts are malformed or logically inconsistent.

    Submission rejects input with this error before anything reaches the ledger, so the
    standings engine only sees it when handed adversarial input directly.
    """

    def __init__(self, details: str | Sequence[str]) -> None:
        self.details = [details] if isinstance(details, str) else list(details)
        super().__init__("; ".join(self.details))


class NotFoundError(TftTrackerError):
    pass


class ConcurrencyConflict(TftTrackerError):
    def __init__(self, tournament_id: int, attempted_revision: int, stored_revision: int) -> None:
        self.tournament_id = tournament_id
        self.attempted_revision = attempted_revision
        self.stored_revision = stored_revision
        super().__init__(
            f"Standings snapshot for tournament {tournament_id} at revision {attempted_revision} "
            f"is older than stored revision {stored_revision}"
        )


class FactCommitError(TftTrackerError):
    def __init__(self, facts: "Sequence[PlacementFact]") -> None:
        self.facts = list(facts)
        super().__init__(f"Failed to commit {len(self.facts)} placement fact(s)")

    def describe_facts(self) -> list[str]:
        return [
            f"player {fact.player_id}: day {fact.day_number}, game {fact.game_number}, "
            f"placement {fact.placement}"
            for fact in self.facts
        ]
