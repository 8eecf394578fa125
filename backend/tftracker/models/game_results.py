from heliclockter import datetime_utc
from pydantic import BaseModel, Field

from tftracker.models.db.tournament import Tournament
from tftracker.utils.id_types import GameResultId, PlayerId, TournamentId


class GamePlacementEntry(BaseModel):
    player_id: PlayerId
    placement: int


class GameSubmissionBody(BaseModel):
    day_number: int = Field(ge=1)
    game_number: int = Field(ge=1)
    results: list[GamePlacementEntry] = Field(default_factory=list)

    def describe(self) -> str:
        return f"Day {self.day_number}, Game {self.game_number}"


class GameBulkSubmissionBody(BaseModel):
    games: list[GameSubmissionBody] = Field(min_length=1)


class GameResultUpdateBody(BaseModel):
    placement: int


class GameResultFilter(BaseModel):
    day_number: int | None = None
    game_number: int | None = None
    player_id: PlayerId | None = None


class GameResultView(BaseModel):
    id: GameResultId
    tournament_id: TournamentId
    player_id: PlayerId
    player_name: str
    day_number: int
    game_number: int
    placement: int
    points: int
    recorded_at: datetime_utc


class GameResultUpdateView(BaseModel):
    result: GameResultView
    standings_recalculated: bool = True


class GameResultDeletionView(BaseModel):
    success: bool = True
    game_result_id: GameResultId
    standings_recalculated: bool = True


class GameSubmissionView(BaseModel):
    tournament_id: TournamentId
    day_number: int
    game_number: int
    results: list[GameResultView] = Field(default_factory=list)
    standings_recalculated: bool = True


class BulkSubmissionSuccess(BaseModel):
    index: int
    game: str
    data: GameSubmissionView


class BulkSubmissionFailure(BaseModel):
    index: int
    game: str
    error: str
    details: list[str] = Field(default_factory=list)


class BulkSubmissionView(BaseModel):
    successes: list[BulkSubmissionSuccess] = Field(default_factory=list)
    errors: list[BulkSubmissionFailure] = Field(default_factory=list)
    total: int = 0
    successful: int = 0
    failed: int = 0


class GameValidationView(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class GameSummaryItem(BaseModel):
    day_number: int
    game_number: int
    players_count: int
    first_result_time: datetime_utc
    last_result_time: datetime_utc


class DaySummaryView(BaseModel):
    day_number: int
    games: list[GameSummaryItem] = Field(default_factory=list)


class TournamentProgressView(BaseModel):
    games_completed: int = 0
    days_with_games: int = 0
    total_results: int = 0
    active_players: int = 0


class TournamentGameSummaryView(BaseModel):
    tournament: Tournament
    progress: TournamentProgressView
    days: list[DaySummaryView] = Field(default_factory=list)
