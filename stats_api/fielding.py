# stats_api/fielding.py
from __future__ import annotations

from typing import Iterable

from stats_api.contributions import partition_contributions
from stats_api.models import FieldingAggregate, FieldingContribution, MatchHistoryEntry

THREE_CATCHES = 3


def apply_fielding(agg: FieldingAggregate, c: FieldingContribution, entry: MatchHistoryEntry) -> None:
    if c.action == "catch":
        agg.catches += c.count
        if c.count >= THREE_CATCHES:
            agg.milestones.append({
                "type": "three-catches",
                "catches": c.count,
                "match_id": entry.match_id,
                "date": entry.match_date,
                "teams": entry.teams_label,
            })
    elif c.action == "run-out":
        agg.run_outs += c.count
    elif c.action == "stumping":
        agg.stumpings += c.count


def fold_fielding(entries: Iterable[MatchHistoryEntry]) -> FieldingAggregate:
    """
    Sums explicit fielding contributions.

    Catches inferred from dismissal text arrive here as ordinary fielding
    contributions (see cross_references.build_player_histories); names that
    could not be attributed never reach the player's history.
    """
    agg = FieldingAggregate()
    for entry in entries:
        for c in partition_contributions(entry).fielding:
            apply_fielding(agg, c, entry)
    return agg
