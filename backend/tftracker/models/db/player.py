from heliclockter import datetime_utc
from pydantic import Field

from tftracker.models.db.shared import BaseModelORM
from tftracker.utils.id_types import PlayerId, TournamentId, TournamentParticipantId


class PlayerBody(BaseModelORM):
    name: str = Field(min_length=2, max_length=50)


class PlayerMultiBody(BaseModelORM):
    players: list[PlayerBody] = Field(min_length=1, max_length=100)


class PlayerInsertable(PlayerBody):
    created: datetime_utc


class Player(PlayerInsertable):
    id: PlayerId


class TournamentParticipantBody(BaseModelORM):
    player_id: PlayerId


class TournamentParticipant(BaseModelORM):
    id: TournamentParticipantId
    tournament_id: TournamentId
    player_id: PlayerId
    created: datetime_utc


class TournamentParticipantWithPlayer(TournamentParticipant):
    player_name: str
