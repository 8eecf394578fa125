from zoneinfo import ZoneInfo

from heliclockter import datetime_utc, timedelta

from tftracker.models.db.game_result import PlacementFact
from tftracker.models.db.player import Player
from tftracker.models.db.tournament import Tournament, TournamentStatus
from tftracker.utils.id_types import PlayerId, TournamentId

DUMMY_MOCK_TIME = datetime_utc(2025, 6, 14, 18, 0, 0, tzinfo=ZoneInfo("UTC"))

DUMMY_TOURNAMENT = Tournament(
    id=TournamentId(1),
    name="Tacticians Cup",
    created=DUMMY_MOCK_TIME,
    start_time=DUMMY_MOCK_TIME,
    status=TournamentStatus.ACTIVE,
    total_days=2,
    games_per_day=6,
    lobby_size=8,
)

DUMMY_PLAYER = Player(id=PlayerId(1), name="Soju", created=DUMMY_MOCK_TIME)


def dummy_placement_fact(
    player_id: int,
    placement: int,
    *,
    day_number: int = 1,
    game_number: int = 1,
    minutes_after_start: int = 0,
    tournament_id: TournamentId = DUMMY_TOURNAMENT.id,
) -> PlacementFact:
    return PlacementFact(
        tournament_id=tournament_id,
        player_id=PlayerId(player_id),
        day_number=day_number,
        game_number=game_number,
        placement=placement,
        recorded_at=datetime_utc.from_datetime(
            DUMMY_MOCK_TIME + timedelta(minutes=minutes_after_start)
        ),
    )


def dummy_game(
    player_ids_in_finishing_order: list[int],
    *,
    day_number: int = 1,
    game_number: int = 1,
    minutes_after_start: int | None = None,
) -> list[PlacementFact]:
    """Facts for one complete lobby; the first player listed finished 1st."""
    minutes = minutes_after_start
    if minutes is None:
        minutes = day_number * 100 + game_number

    return [
        dummy_placement_fact(
            player_id,
            placement,
            day_number=day_number,
            game_number=game_number,
            minutes_after_start=minutes,
        )
        for placement, player_id in enumerate(player_ids_in_finishing_order, start=1)
    ]
