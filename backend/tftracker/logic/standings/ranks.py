from collections.abc import Sequence

from tftracker.models.standings import PlayerAggregate, RankedStanding


def assign_ranks(sorted_aggregates: Sequence[PlayerAggregate]) -> list[RankedStanding]:
    """
    Give every player its 1-based position in the sorted sequence as rank.

    Ranks are never shared: the tiebreakers plus stable ordering leave no two players equal.
    """
    return [
        RankedStanding(**aggregate.model_dump(), rank=position)
        for position, aggregate in enumerate(sorted_aggregates, start=1)
    ]
