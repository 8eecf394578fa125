import json

from heliclockter import datetime_utc
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from tftracker.utils.id_types import PlayerId, TournamentId


class PlayerAggregate(BaseModel):
    """
    Per-player statistics derived from every placement fact of one tournament.

    `placement_counts[0]` holds the number of 1st places, `placement_counts[1]` the 2nd places
    and so on up to the lobby size. `recent_placements` always has a fixed depth, most recent
    game first; slots without a game hold a sentinel that is worse than any real placement.
    """

    model_config = ConfigDict(frozen=True)

    player_id: PlayerId
    total_points: int = 0
    games_played: int = 0
    placement_counts: list[int]
    top_four_count: int = 0
    top_four_plus_firsts: int = 0
    recent_placements: list[int]
    end_of_day_placement: int

    @field_validator("placement_counts", "recent_placements", mode="before")
    @classmethod
    def parse_json_list(cls, value: object) -> object:
        if isinstance(value, str):
            return json.loads(value)
        return value


class RankedStanding(PlayerAggregate):
    rank: int = Field(ge=1)


class RankedStandingView(RankedStanding):
    player_name: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def first_places(self) -> int:
        return self.placement_counts[0] if len(self.placement_counts) > 0 else 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def average_placement(self) -> float | None:
        if self.games_played == 0:
            return None
        placement_sum = sum(
            placement * count for placement, count in enumerate(self.placement_counts, start=1)
        )
        return round(placement_sum / self.games_played, 2)


class StandingsRecalculation(BaseModel):
    tournament_id: TournamentId
    ledger_revision: int
    standings: list[RankedStanding] = Field(default_factory=list)
    snapshot_written: bool = True
    duration_ms: int = 0


class StandingsRecalculateView(BaseModel):
    success: bool = True
    recalculated_at: datetime_utc
    ledger_revision: int
    players_ranked: int = 0
    snapshot_written: bool = True
    duration_ms: int = 0
