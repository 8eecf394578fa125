"""Model registration module used by alembic autogeneration."""

from tftracker.models.db.game_result import GameResult  # noqa: F401
from tftracker.models.db.player import Player, TournamentParticipant  # noqa: F401
from tftracker.models.db.tournament import Tournament  # noqa: F401
