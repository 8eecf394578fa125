#!/usr/bin/env python3
import argparse
import asyncio
import random

from heliclockter import datetime_utc

from tftracker.database import database
from tftracker.logic.game_results.submission import submit_game_results
from tftracker.models.db.player import PlayerBody
from tftracker.models.db.tournament import TournamentBody, TournamentStatus
from tftracker.models.game_results import GamePlacementEntry, GameSubmissionBody
from tftracker.sql.players import (
    get_all_players_in_tournament,
    insert_player,
    sql_register_participant,
)
from tftracker.sql.standings import get_standings
from tftracker.sql.tournaments import (
    sql_create_tournament,
    sql_get_tournament,
    sql_update_tournament_status,
)
from tftracker.utils.id_types import TournamentId
from tftracker.utils.types import assert_some

PLAYER_NAMES = [
    "Dishsoap",
    "Setsuko",
    "Milala",
    "Wasian",
    "Robinsongz",
    "Souless",
    "Kiyoon",
    "Huanmie",
    "Deis",
    "Title",
    "Zixing",
    "Marcus",
    "Nagrom",
    "Emerald",
    "Spencer",
    "Lie",
]


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed a TFT tournament with random games.")
    parser.add_argument("--name", default="Sample Tacticians Cup")
    parser.add_argument("--days", type=int, default=2)
    parser.add_argument("--games-per-day", type=int, default=4)
    parser.add_argument("--lobby-size", type=int, default=8)
    parser.add_argument("--seed", type=int, default=None)
    return parser.parse_args()


async def seed_tournament(args: argparse.Namespace) -> TournamentId:
    rng = random.Random(args.seed)
    tournament_id = await sql_create_tournament(
        TournamentBody(
            name=args.name,
            start_time=datetime_utc.now(),
            total_days=args.days,
            games_per_day=args.games_per_day,
            lobby_size=args.lobby_size,
        )
    )
    await sql_update_tournament_status(tournament_id, TournamentStatus.ACTIVE)

    for name in PLAYER_NAMES[: args.lobby_size]:
        player_id = await insert_player(PlayerBody(name=name))
        await sql_register_participant(tournament_id, player_id)

    player_ids = [player.id for player in await get_all_players_in_tournament(tournament_id)]

    tournament = assert_some(await sql_get_tournament(tournament_id))
    for day_number in range(1, args.days + 1):
        for game_number in range(1, args.games_per_day + 1):
            finishing_order = rng.sample(player_ids, k=len(player_ids))
            await submit_game_results(
                tournament,
                GameSubmissionBody(
                    day_number=day_number,
                    game_number=game_number,
                    results=[
                        GamePlacementEntry(player_id=player_id, placement=placement)
                        for placement, player_id in enumerate(finishing_order, start=1)
                    ],
                ),
            )

    return tournament_id


async def main() -> None:
    args = parse_args()
    await database.connect()
    try:
        tournament_id = await seed_tournament(args)
        for standing in await get_standings(tournament_id):
            print(
                f"{standing.rank:>2}. {standing.player_name:<12} "
                f"{standing.total_points:>3} pts  placements={standing.placement_counts}"
            )
    finally:
        await database.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
