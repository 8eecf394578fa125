import json

from heliclockter import datetime_utc
from pydantic import BaseModel, field_validator

from tftracker.models.db.player import Player
from tftracker.models.db.tournament import TournamentStatus
from tftracker.utils.id_types import PlayerId, TournamentId


class PlayerSummary(Player):
    tournaments_played: int = 0
    tournaments_completed: int = 0


class PaginatedPlayers(BaseModel):
    count: int
    players: list[PlayerSummary]


class PlayerTournamentHistoryItem(BaseModel):
    """
    One tournament a player registered for, joined with the player's standing in it.

    The standing columns are `None` until the player has a row in the standings snapshot.
    """

    tournament_id: TournamentId
    tournament_name: str
    status: TournamentStatus
    start_time: datetime_utc
    registered_at: datetime_utc
    rank: int | None = None
    total_points: int | None = None
    games_played: int | None = None
    placement_counts: list[int] | None = None
    top_four_count: int | None = None

    @field_validator("placement_counts", mode="before")
    @classmethod
    def parse_json_list(cls, value: object) -> object:
        if isinstance(value, str):
            return json.loads(value)
        return value

    @property
    def first_places(self) -> int:
        if self.placement_counts is None or len(self.placement_counts) < 1:
            return 0
        return self.placement_counts[0]


class PaginatedTournamentHistory(BaseModel):
    count: int
    tournaments: list[PlayerTournamentHistoryItem]


class PlayerStatisticsOverview(BaseModel):
    total_tournaments: int = 0
    completed_tournaments: int = 0
    lifetime_points: int = 0
    total_games: int = 0
    total_first_places: int = 0
    total_top_fours: int = 0
    top_four_rate: float | None = None
    win_rate: float | None = None
    best_tournament_finish: int | None = None
    highest_tournament_score: int | None = None
    avg_tournament_points: float | None = None
    avg_points_per_game: float | None = None


class PlayerStatisticsView(BaseModel):
    player: Player
    overview: PlayerStatisticsOverview
    recent_tournaments: list[PlayerTournamentHistoryItem]


class PlayerCreationSuccess(BaseModel):
    index: int
    id: PlayerId
    name: str


class PlayerCreationDuplicate(BaseModel):
    index: int
    name: str
    existing_id: PlayerId


class BulkPlayerCreationView(BaseModel):
    total: int
    created: list[PlayerCreationSuccess]
    duplicates: list[PlayerCreationDuplicate]
