from collections.abc import Iterable

from tftracker.models.standings import PlayerAggregate

TiebreakKey = tuple[int, int, tuple[int, ...], tuple[int, ...]]


def tiebreak_key(aggregate: PlayerAggregate) -> TiebreakKey:
    """
    Sort key implementing the TFT tiebreakers, smaller sorts first:

    1. Total tournament points, higher is better.
    2. Top 4 finishes plus 1st places (1st places count twice), higher is better.
    3. Number of finishes in each position from 1st to last, higher is better.
    4. Placement in the most recent games, most recent first, lower is better.
    """
    return (
        -aggregate.total_points,
        -aggregate.top_four_plus_firsts,
        tuple(-count for count in aggregate.placement_counts),
        tuple(aggregate.recent_placements),
    )


def compare_standings(a: PlayerAggregate, b: PlayerAggregate) -> int:
    key_a = tiebreak_key(a)
    key_b = tiebreak_key(b)
    return (key_a > key_b) - (key_a < key_b)


def sort_by_tiebreakers(aggregates: Iterable[PlayerAggregate]) -> list[PlayerAggregate]:
    # sorted() is stable, players tied on every criterion keep their input order.
    return sorted(aggregates, key=tiebreak_key)
