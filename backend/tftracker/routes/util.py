from fastapi import HTTPException
from starlette import status

from tftracker.models.db.player import Player
from tftracker.models.db.tournament import Tournament
from tftracker.sql.players import get_player_by_id
from tftracker.sql.tournaments import sql_get_tournament
from tftracker.utils.id_types import PlayerId, TournamentId


async def tournament_dependency(tournament_id: TournamentId) -> Tournament:
    tournament = await sql_get_tournament(tournament_id)
    if tournament is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Tournament not found")
    return tournament


async def player_dependency(player_id: PlayerId) -> Player:
    player = await get_player_by_id(player_id)
    if player is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Player not found")
    return player
