from typing import NewType

TournamentId = NewType("TournamentId", int)
PlayerId = NewType("PlayerId", int)
TournamentParticipantId = NewType("TournamentParticipantId", int)
GameResultId = NewType("GameResultId", int)
