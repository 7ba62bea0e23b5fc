from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Literal, Optional, Tuple, Union


# -----------------------------
# Dismissal semantics
# -----------------------------
DismissalType = Literal[
    "NotOut",
    "Caught",
    "Bowled",
    "RunOut",
    "LBW",
    "CaughtAndBowled",
    "Stumped",
    "RetiredHurt",
    "RetiredOut",
    "Unknown",
]

ContributionType = Literal["batting", "bowling", "fielding"]
FieldingAction = Literal["catch", "run-out", "stumping"]


@dataclass(frozen=True)
class HowOut:
    out: bool
    type: DismissalType
    fielder: Optional[str] = None
    bowler: Optional[str] = None

    # Only kept for "Unknown" so the raw text can be reviewed later
    original_status: Optional[str] = None

    def to_dict(self) -> dict:
        out = {
            "out": self.out,
            "type": self.type,
            "fielder": self.fielder,
            "bowler": self.bowler,
        }
        if self.original_status is not None:
            out["original_status"] = self.original_status
        return out


# -----------------------------
# Contributions (one per innings of one match)
# -----------------------------
@dataclass(frozen=True)
class BattingContribution:
    runs: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0
    how_out: HowOut = HowOut(out=False, type="NotOut")
    dismissal_text: Optional[str] = None
    innings_number: Optional[int] = None
    type: ContributionType = "batting"


@dataclass(frozen=True)
class BowlingContribution:
    # Overs in cricket notation ("4.3" = 4 overs + 3 balls), kept as given
    overs: str = "0"
    maidens: int = 0
    runs: int = 0
    wickets: int = 0
    innings_number: Optional[int] = None
    type: ContributionType = "bowling"


@dataclass(frozen=True)
class FieldingContribution:
    action: FieldingAction = "catch"
    count: int = 1
    innings_number: Optional[int] = None
    type: ContributionType = "fielding"


Contribution = Union[BattingContribution, BowlingContribution, FieldingContribution]


@dataclass(frozen=True)
class RejectedContribution:
    """A contribution dropped at the boundary; the rest of the fold continues."""
    match_id: Optional[str]
    index: int
    reason: str
    raw: dict


# -----------------------------
# Match history
# -----------------------------
@dataclass(frozen=True)
class MatchHistoryEntry:
    match_id: Optional[str] = None
    match_date: Any = None
    team1: Optional[str] = None
    team2: Optional[str] = None
    venue: Optional[str] = None
    result: Optional[str] = None
    contributions: Tuple[Contribution, ...] = ()

    @property
    def teams_label(self) -> str:
        return f"{self.team1 or 'Team 1'} vs {self.team2 or 'Team 2'}"


@dataclass(frozen=True)
class TeamMatchRecord:
    """One match as seen from the team aggregation: who played, who won."""
    match_id: Optional[str] = None
    date: Any = None
    team1_id: Optional[str] = None
    team2_id: Optional[str] = None
    team1_name: Optional[str] = None
    team2_name: Optional[str] = None
    winner: Optional[str] = None
    venue: Optional[str] = None
    status: Optional[str] = None


# -----------------------------
# Aggregates
# -----------------------------
@dataclass
class BattingCareerBest:
    score: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0
    match_id: Optional[str] = None
    date: Any = None


@dataclass
class BattingAggregate:
    innings: int = 0
    total_runs: int = 0
    total_balls: int = 0
    total_fours: int = 0
    total_sixes: int = 0
    highest_score: int = 0
    not_outs: int = 0
    ducks: int = 0
    fifties: int = 0
    centuries: int = 0
    career_best: BattingCareerBest = field(default_factory=BattingCareerBest)
    milestones: List[dict] = field(default_factory=list)

    @property
    def dismissals(self) -> int:
        return self.innings - self.not_outs


@dataclass
class BowlingFigures:
    wickets: int = 0
    runs: int = 0


@dataclass
class BowlingCareerBest:
    wickets: int = 0
    runs: int = 0
    overs: str = "0"
    match_id: Optional[str] = None
    date: Any = None


@dataclass
class BowlingAggregate:
    innings: int = 0
    overs_mode: str = "balls"

    # "balls" mode: exact balls; "legacy_decimal" mode: float sum of the stored overs
    total_balls: int = 0
    legacy_overs_sum: float = 0.0

    total_maidens: int = 0
    total_runs: int = 0
    total_wickets: int = 0
    best_figures: BowlingFigures = field(default_factory=BowlingFigures)
    career_best: BowlingCareerBest = field(default_factory=BowlingCareerBest)
    hat_tricks: int = 0
    five_wicket_hauls: int = 0
    milestones: List[dict] = field(default_factory=list)


@dataclass
class FieldingAggregate:
    catches: int = 0
    run_outs: int = 0
    stumpings: int = 0
    milestones: List[dict] = field(default_factory=list)


@dataclass
class Streak:
    type: Literal["win", "loss", "none"] = "none"
    count: int = 0
