# stats_api/bowling.py
from __future__ import annotations

from typing import Iterable, Optional

from stats_api.config import STATS_OVERS_MODE
from stats_api.contributions import partition_contributions
from stats_api.models import (
    BowlingAggregate,
    BowlingCareerBest,
    BowlingContribution,
    BowlingFigures,
    MatchHistoryEntry,
)
from stats_api.overs_math import (
    BALLS_PER_OVER,
    balls_to_overs_float,
    balls_to_overs_notation,
    legacy_overs_value,
    overs_to_balls,
)

# A "hat-trick" here is any innings haul of 3+ wickets: scorecards carry no ball-by-ball order
HAT_TRICK_WICKETS = 3
FIVE_WICKET_HAUL = 5


def is_better_figure(a: BowlingFigures, b: BowlingFigures) -> bool:
    """More wickets wins; equal wickets -> fewer runs wins."""
    if a.wickets > b.wickets:
        return True
    if a.wickets < b.wickets:
        return False
    return a.runs < b.runs


def apply_bowling(agg: BowlingAggregate, c: BowlingContribution, entry: MatchHistoryEntry) -> None:
    agg.innings += 1
    agg.total_balls += overs_to_balls(c.overs)
    agg.legacy_overs_sum += legacy_overs_value(c.overs)
    agg.total_maidens += c.maidens
    agg.total_runs += c.runs
    agg.total_wickets += c.wickets

    figures = BowlingFigures(wickets=c.wickets, runs=c.runs)
    # First spell always sets the baseline so a 0/30 career still has a best
    if agg.innings == 1 or is_better_figure(figures, agg.best_figures):
        agg.best_figures = figures
        agg.career_best = BowlingCareerBest(
            wickets=c.wickets,
            runs=c.runs,
            overs=c.overs,
            match_id=entry.match_id,
            date=entry.match_date,
        )

    haul = {
        "wickets": c.wickets,
        "runs": c.runs,
        "overs": c.overs,
        "match_id": entry.match_id,
        "date": entry.match_date,
        "teams": entry.teams_label,
    }
    if c.wickets >= HAT_TRICK_WICKETS:
        agg.hat_tricks += 1
        agg.milestones.append({"type": "hat-trick", **haul})
    if c.wickets >= FIVE_WICKET_HAUL:
        agg.five_wicket_hauls += 1
        agg.milestones.append({"type": "five-wicket-haul", **haul})


def fold_bowling(entries: Iterable[MatchHistoryEntry], overs_mode: Optional[str] = None) -> BowlingAggregate:
    agg = BowlingAggregate(overs_mode=overs_mode or STATS_OVERS_MODE)
    for entry in entries:
        for c in partition_contributions(entry).bowling:
            apply_bowling(agg, c, entry)
    return agg


# -----------------------------
# Overs views (depend on overs_mode)
# -----------------------------
def total_overs(agg: BowlingAggregate) -> float:
    """Overs as reported: notation (9.2) in balls mode, raw float sum (8.8) in legacy mode."""
    if agg.overs_mode == "legacy_decimal":
        return round(agg.legacy_overs_sum, 2)
    return balls_to_overs_notation(agg.total_balls)


def overs_for_rates(agg: BowlingAggregate) -> float:
    """Divisor for economy: true overs (balls / 6), or the legacy float sum."""
    if agg.overs_mode == "legacy_decimal":
        return agg.legacy_overs_sum
    return balls_to_overs_float(agg.total_balls)


def balls_bowled(agg: BowlingAggregate) -> float:
    if agg.overs_mode == "legacy_decimal":
        return agg.legacy_overs_sum * BALLS_PER_OVER
    return float(agg.total_balls)
