# stats_api/batting.py
from __future__ import annotations

from typing import Iterable

from stats_api.contributions import partition_contributions
from stats_api.models import (
    BattingAggregate,
    BattingCareerBest,
    BattingContribution,
    MatchHistoryEntry,
)

CENTURY_RUNS = 100
FIFTY_RUNS = 50


def apply_batting(agg: BattingAggregate, c: BattingContribution, entry: MatchHistoryEntry) -> None:
    """
    Folds one batting innings into the aggregate (in place).

    Milestones do not depend on dismissal: an unbeaten 100 is still a century.
    """
    agg.innings += 1
    agg.total_runs += c.runs
    agg.total_balls += c.balls
    agg.total_fours += c.fours
    agg.total_sixes += c.sixes

    if c.runs > agg.highest_score:
        agg.highest_score = c.runs
        agg.career_best = BattingCareerBest(
            score=c.runs,
            balls=c.balls,
            fours=c.fours,
            sixes=c.sixes,
            match_id=entry.match_id,
            date=entry.match_date,
        )

    not_out = c.how_out.type == "NotOut"
    if not_out:
        agg.not_outs += 1
    elif c.runs == 0:
        agg.ducks += 1

    if c.runs >= CENTURY_RUNS:
        agg.centuries += 1
        milestone = "century"
    elif c.runs >= FIFTY_RUNS:
        agg.fifties += 1
        milestone = "fifty"
    else:
        return

    agg.milestones.append({
        "type": milestone,
        "score": c.runs,
        "not_out": not_out,
        "match_id": entry.match_id,
        "date": entry.match_date,
        "teams": entry.teams_label,
    })


def fold_batting(entries: Iterable[MatchHistoryEntry]) -> BattingAggregate:
    agg = BattingAggregate()
    for entry in entries:
        for c in partition_contributions(entry).batting:
            apply_batting(agg, c, entry)
    return agg
