from heliclockter import datetime_utc
from pydantic import ConfigDict, Field

from tftracker.models.db.shared import BaseModelORM
from tftracker.utils.id_types import GameResultId, PlayerId, TournamentId

FactKey = tuple[TournamentId, PlayerId, int, int]


class PlacementFact(BaseModelORM):
    """
    One player's finishing position in one game of a tournament.

    `recorded_at` only matters for the recent-game tiebreakers.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    tournament_id: TournamentId
    player_id: PlayerId
    day_number: int = Field(ge=1)
    game_number: int = Field(ge=1)
    placement: int = Field(ge=1)
    recorded_at: datetime_utc

    @property
    def key(self) -> FactKey:
        return self.tournament_id, self.player_id, self.day_number, self.game_number


class GameResult(PlacementFact):
    id: GameResultId


class GameResultWithPlayer(GameResult):
    player_name: str


class LedgerSnapshot(BaseModelORM):
    tournament_id: TournamentId
    ledger_revision: int
    facts: list[PlacementFact]
