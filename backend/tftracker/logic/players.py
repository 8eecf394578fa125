from tftracker.database import database
from tftracker.models.db.player import PlayerBody
from tftracker.models.db.tournament import TournamentStatus
from tftracker.models.players import (
    BulkPlayerCreationView,
    PlayerCreationDuplicate,
    PlayerCreationSuccess,
    PlayerStatisticsOverview,
    PlayerTournamentHistoryItem,
)
from tftracker.sql.players import get_players_by_names, insert_player
from tftracker.utils.logging import logger

RECENT_TOURNAMENTS_LIMIT = 10


def _percentage(part: int, total: int) -> float | None:
    if total < 1:
        return None
    return round(part * 100 / total, 2)


def _mean(values: list[float]) -> float | None:
    if len(values) < 1:
        return None
    return round(sum(values) / len(values), 2)


def build_player_statistics(
    history: list[PlayerTournamentHistoryItem],
) -> PlayerStatisticsOverview:
    """
    Summarize a player's whole tournament history.

    Every registration counts towards `total_tournaments`. Point and placement totals only
    include tournaments where the player has a standing, rates are percentages of all games
    played and are `None` for a player without games.
    """
    ranked = [item for item in history if item.total_points is not None]
    total_games = sum(item.games_played or 0 for item in ranked)
    total_first_places = sum(item.first_places for item in ranked)
    total_top_fours = sum(item.top_four_count or 0 for item in ranked)

    return PlayerStatisticsOverview(
        total_tournaments=len(history),
        completed_tournaments=sum(
            1 for item in history if item.status is TournamentStatus.COMPLETED
        ),
        lifetime_points=sum(item.total_points or 0 for item in ranked),
        total_games=total_games,
        total_first_places=total_first_places,
        total_top_fours=total_top_fours,
        top_four_rate=_percentage(total_top_fours, total_games),
        win_rate=_percentage(total_first_places, total_games),
        best_tournament_finish=min(
            (item.rank for item in ranked if item.rank is not None), default=None
        ),
        highest_tournament_score=max((item.total_points or 0 for item in ranked), default=None),
        avg_tournament_points=_mean([float(item.total_points or 0) for item in ranked]),
        avg_points_per_game=_mean(
            [
                (item.total_points or 0) / item.games_played
                for item in ranked
                if item.games_played
            ]
        ),
    )


def get_recent_completed_tournaments(
    history: list[PlayerTournamentHistoryItem],
) -> list[PlayerTournamentHistoryItem]:
    completed = [item for item in history if item.status is TournamentStatus.COMPLETED]
    completed.sort(key=lambda item: item.start_time, reverse=True)
    return completed[:RECENT_TOURNAMENTS_LIMIT]



async def create_players_in_bulk(player_bodies: list[PlayerBody]) -> BulkPlayerCreationView:
    """
    Create players in one transaction, skipping names that are already taken.

    Names compare case-insensitively, against existing players as well as against earlier
    entries of the same request.
    """
    existing_ids_by_name = {
        player.name.lower(): player.id
        for player in await get_players_by_names([body.name for body in player_bodies])
    }
    created: list[PlayerCreationSuccess] = []
    duplicates: list[PlayerCreationDuplicate] = []

    async with database.transaction():
        for index, player_body in enumerate(player_bodies):
            existing_id = existing_ids_by_name.get(player_body.name.lower())
            if existing_id is not None:
                duplicates.append(
                    PlayerCreationDuplicate(
                        index=index, name=player_body.name, existing_id=existing_id
                    )
                )
                continue

            player_id = await insert_player(player_body)
            existing_ids_by_name[player_body.name.lower()] = player_id
            created.append(PlayerCreationSuccess(index=index, id=player_id, name=player_body.name))

    logger.info("Bulk player creation: %s created, %s duplicates", len(created), len(duplicates))
    return BulkPlayerCreationView(total=len(player_bodies), created=created, duplicates=duplicates)
