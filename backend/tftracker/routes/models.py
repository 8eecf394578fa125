from typing import Generic, TypeVar

from pydantic import BaseModel

from tftracker.models.game_results import (
    BulkSubmissionView,
    GameResultDeletionView,
    GameResultUpdateView,
    GameResultView,
    GameSubmissionView,
    GameValidationView,
    TournamentGameSummaryView,
)
from tftracker.models.db.player import Player, TournamentParticipantWithPlayer
from tftracker.models.db.tournament import Tournament
from tftracker.models.players import (
    BulkPlayerCreationView,
    PaginatedPlayers,
    PaginatedTournamentHistory,
    PlayerStatisticsView,
)
from tftracker.models.standings import RankedStandingView, StandingsRecalculateView


class SuccessResponse(BaseModel):
    success: bool = True


DataT = TypeVar("DataT")


class DataResponse(BaseModel, Generic[DataT]):
    data: DataT


class GameResultsResponse(DataResponse[list[GameResultView]]):
    pass


class GameResultUpdateResponse(DataResponse[GameResultUpdateView]):
    pass


class GameResultDeletionResponse(DataResponse[GameResultDeletionView]):
    pass


class GameSubmissionResponse(DataResponse[GameSubmissionView]):
    pass


class BulkSubmissionResponse(DataResponse[BulkSubmissionView]):
    pass


class GameValidationResponse(DataResponse[GameValidationView]):
    pass


class TournamentGameSummaryResponse(DataResponse[TournamentGameSummaryView]):
    pass


class StandingsResponse(DataResponse[list[RankedStandingView]]):
    pass


class SingleStandingResponse(DataResponse[RankedStandingView]):
    pass


class StandingsRecalculateResponse(DataResponse[StandingsRecalculateView]):
    pass


class PlayersResponse(DataResponse[PaginatedPlayers]):
    pass


class SinglePlayerResponse(DataResponse[Player]):
    pass


class BulkPlayerCreationResponse(DataResponse[BulkPlayerCreationView]):
    pass


class PlayerTournamentHistoryResponse(DataResponse[PaginatedTournamentHistory]):
    pass


class PlayerStatisticsResponse(DataResponse[PlayerStatisticsView]):
    pass


class TournamentsResponse(DataResponse[list[Tournament]]):
    pass


class SingleTournamentResponse(DataResponse[Tournament]):
    pass


class ParticipantsResponse(DataResponse[list[TournamentParticipantWithPlayer]]):
    pass


class SingleParticipantResponse(DataResponse[TournamentParticipantWithPlayer]):
    pass
