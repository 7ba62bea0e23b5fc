# stats_api/player_stats.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from stats_api.batting import apply_batting
from stats_api.bowling import apply_bowling, total_overs
from stats_api.config import STATS_OVERS_MODE
from stats_api.contributions import parse_match_history, partition_contributions
from stats_api.fielding import apply_fielding
from stats_api.models import (
    BattingAggregate,
    BowlingAggregate,
    FieldingAggregate,
    RejectedContribution,
)
from stats_api.rates import compute_rates
from stats_api.timeline import chronological


@dataclass
class PlayerAggregate:
    """
    Career aggregate of one player.

    Always rebuilt from the full match history (fold_player_history);
    nothing here is updated incrementally.
    """
    total_matches: int = 0
    batting_matches: int = 0
    bowling_matches: int = 0
    batting: BattingAggregate = field(default_factory=BattingAggregate)
    bowling: BowlingAggregate = field(default_factory=BowlingAggregate)
    fielding: FieldingAggregate = field(default_factory=FieldingAggregate)
    rejected: List[RejectedContribution] = field(default_factory=list)

    def summary(self) -> Dict[str, int]:
        return {
            "total_matches": self.total_matches,
            "total_runs": self.batting.total_runs,
            "total_wickets": self.bowling.total_wickets,
            "total_catches": self.fielding.catches,
            "total_innings": self.batting.innings + self.bowling.innings,
            "total_batting_innings": self.batting_matches,
            "total_bowling_innings": self.bowling_matches,
        }

    def to_document(self) -> Dict[str, Any]:
        """Shape persisted on the player document (rates rounded to 2 dp)."""
        rates = compute_rates(self.batting, self.bowling)
        bat = self.batting
        bowl = self.bowling

        return {
            "summary_stats": self.summary(),
            "batting_stats": {
                "innings": bat.innings,
                "total_runs": bat.total_runs,
                "total_balls": bat.total_balls,
                "total_fours": bat.total_fours,
                "total_sixes": bat.total_sixes,
                "highest_score": bat.highest_score,
                "not_outs": bat.not_outs,
                "ducks": bat.ducks,
                "fifties": bat.fifties,
                "centuries": bat.centuries,
                **rates["batting"],
            },
            "bowling_stats": {
                "innings": bowl.innings,
                "total_overs": total_overs(bowl),
                "total_balls": bowl.total_balls,
                "overs_mode": bowl.overs_mode,
                "total_maidens": bowl.total_maidens,
                "total_runs": bowl.total_runs,
                "total_wickets": bowl.total_wickets,
                "best_figures": asdict(bowl.best_figures),
                "hat_tricks": bowl.hat_tricks,
                "five_wicket_hauls": bowl.five_wicket_hauls,
                **rates["bowling"],
            },
            "fielding_stats": {
                "catches": self.fielding.catches,
                "run_outs": self.fielding.run_outs,
                "stumpings": self.fielding.stumpings,
            },
            "milestones": {
                "batting": list(bat.milestones),
                "bowling": list(bowl.milestones),
                "fielding": list(self.fielding.milestones),
            },
            "career_bests": {
                "batting": asdict(bat.career_best),
                "bowling": asdict(bowl.career_best),
            },
        }


def fold_player_history(history: Iterable[Any], overs_mode: Optional[str] = None) -> PlayerAggregate:
    """
    Pure fold: match history (raw dicts or MatchHistoryEntry) -> PlayerAggregate.

    - Bad contributions are rejected individually and listed on the result.
    - The input is never mutated; running twice on the same input gives the same output.
    - Totals do not depend on contribution order inside a match; milestone
      lists are chronological (stable for undated matches).
    """
    entries, rejected = parse_match_history(history)
    entries = chronological(entries, lambda e: e.match_date)

    agg = PlayerAggregate(
        bowling=BowlingAggregate(overs_mode=overs_mode or STATS_OVERS_MODE),
        rejected=rejected,
    )
    agg.total_matches = len(entries)

    for entry in entries:
        parts = partition_contributions(entry)

        for c in parts.batting:
            apply_batting(agg.batting, c, entry)
        for c in parts.bowling:
            apply_bowling(agg.bowling, c, entry)
        for c in parts.fielding:
            apply_fielding(agg.fielding, c, entry)

        if parts.batting:
            agg.batting_matches += 1
        if parts.bowling:
            agg.bowling_matches += 1

    return agg


def player_stats_document(history: Iterable[Any], overs_mode: Optional[str] = None) -> Dict[str, Any]:
    """Convenience for callers that only need the persisted shape."""
    return fold_player_history(history, overs_mode=overs_mode).to_document()
