from enum import auto

from heliclockter import datetime_utc
from pydantic import Field

from tftracker.config import config
from tftracker.models.db.shared import BaseModelORM
from tftracker.utils.id_types import TournamentId
from tftracker.utils.types import EnumAutoStr


class TournamentStatus(EnumAutoStr):
    UPCOMING = auto()
    ACTIVE = auto()
    COMPLETED = auto()
    CANCELLED = auto()

    @property
    def accepts_results(self) -> bool:
        return self in (TournamentStatus.UPCOMING, TournamentStatus.ACTIVE)


class TournamentBody(BaseModelORM):
    name: str = Field(min_length=3, max_length=100)
    start_time: datetime_utc
    total_days: int = Field(default=1, ge=1, le=7)
    games_per_day: int = Field(default=6, ge=1, le=10)
    lobby_size: int = Field(default_factory=lambda: config.default_lobby_size, ge=2)


class TournamentInsertable(TournamentBody):
    created: datetime_utc
    status: TournamentStatus = TournamentStatus.UPCOMING


class Tournament(TournamentInsertable):
    id: TournamentId
    ledger_revision: int = 0


class TournamentStatusBody(BaseModelORM):
    status: TournamentStatus
