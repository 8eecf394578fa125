from collections import defaultdict
from collections.abc import Iterable

from tftracker.config import config
from tftracker.logic.standings.points import (
    TOP_FOUR_CUTOFF,
    missing_placement_sentinel,
    points_for_placement,
)
from tftracker.models.db.game_result import FactKey, PlacementFact
from tftracker.models.standings import PlayerAggregate
from tftracker.utils.errors import ValidationError
from tftracker.utils.id_types import PlayerId, TournamentId


def check_placement_facts(facts: list[PlacementFact], max_placement: int) -> None:
    """
    Reject fact sets the aggregation cannot make sense of.

    Submission already validates every game before it reaches the ledger, this only guards the
    engine against facts that bypassed it.
    """
    errors: list[str] = []
    tournament_ids: set[TournamentId] = set()
    seen_keys: set[FactKey] = set()

    for fact in facts:
        tournament_ids.add(fact.tournament_id)
        if not isinstance(fact.placement, int) or not 1 <= fact.placement <= max_placement:
            errors.append(
                f"Player {fact.player_id}: placement {fact.placement} on day {fact.day_number}, "
                f"game {fact.game_number} must be between 1 and {max_placement}"
            )
        if fact.key in seen_keys:
            errors.append(
                f"Player {fact.player_id} has more than one result for day {fact.day_number}, "
                f"game {fact.game_number}"
            )
        seen_keys.add(fact.key)

    if len(tournament_ids) > 1:
        errors.append("Placement facts span more than one tournament")

    if len(errors) > 0:
        raise ValidationError(errors)


def most_recent_first(facts: list[PlacementFact]) -> list[PlacementFact]:
    # Results of one submission share a timestamp, fall back on the schedule position.
    return sorted(
        facts,
        key=lambda fact: (fact.recorded_at, fact.day_number, fact.game_number),
        reverse=True,
    )


def get_end_of_day_placement(facts: list[PlacementFact], max_placement: int) -> int:
    if len(facts) < 1:
        return missing_placement_sentinel(max_placement)

    last_day = max(fact.day_number for fact in facts)
    last_game_of_day = max(
        (fact for fact in facts if fact.day_number == last_day),
        key=lambda fact: fact.game_number,
    )
    return last_game_of_day.placement


def build_player_aggregate(
    player_id: PlayerId,
    facts: list[PlacementFact],
    max_placement: int,
    recent_depth: int | None = None,
) -> PlayerAggregate:
    depth = config.recent_placements_depth if recent_depth is None else recent_depth
    placement_counts = [0] * max_placement
    total_points = 0
    top_four_count = 0

    for fact in facts:
        total_points += points_for_placement(fact.placement, max_placement)
        placement_counts[fact.placement - 1] += 1
        if fact.placement <= TOP_FOUR_CUTOFF:
            top_four_count += 1

    recent_placements = [fact.placement for fact in most_recent_first(facts)[:depth]]
    recent_placements += [missing_placement_sentinel(max_placement)] * (
        depth - len(recent_placements)
    )

    return PlayerAggregate(
        player_id=player_id,
        total_points=total_points,
        games_played=len(facts),
        placement_counts=placement_counts,
        top_four_count=top_four_count,
        top_four_plus_firsts=top_four_count + placement_counts[0],
        recent_placements=recent_placements,
        end_of_day_placement=get_end_of_day_placement(facts, max_placement),
    )


def aggregate_placement_facts(
    facts: Iterable[PlacementFact],
    max_placement: int | None = None,
) -> dict[PlayerId, PlayerAggregate]:
    """
    Turn all placement facts of one tournament into one aggregate per player.

    The input may come in any order. Players appear in the result in the order of their first
    fact in the input, which is the order residual ties keep after sorting.
    """
    lobby_size = config.default_lobby_size if max_placement is None else max_placement
    facts = list(facts)
    check_placement_facts(facts, lobby_size)

    facts_by_player: dict[PlayerId, list[PlacementFact]] = defaultdict(list)
    for fact in facts:
        facts_by_player[fact.player_id].append(fact)

    return {
        player_id: build_player_aggregate(player_id, player_facts, lobby_size)
        for player_id, player_facts in facts_by_player.items()
    }
