from tftracker.config import config

TOP_FOUR_CUTOFF = 4


def points_for_placement(placement: int, max_placement: int | None = None) -> int:
    """
    Tournament points for a finishing position: 1st earns `max_placement` points, last earns 1.
    """
    lobby_size = config.default_lobby_size if max_placement is None else max_placement
    return (lobby_size + 1) - placement


def missing_placement_sentinel(max_placement: int) -> int:
    return max_placement + 1
