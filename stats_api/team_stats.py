# stats_api/team_stats.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Literal, Optional

from stats_api.config import TEAM_FORM_LIMIT, TEAM_HISTORY_LIMIT, TEAM_RECENT_MATCHES_LIMIT
from stats_api.models import Streak, TeamMatchRecord
from stats_api.rates import RATE_DIGITS, win_percentage
from stats_api.timeline import chronological

TeamResult = Literal["win", "loss", "draw"]

# Winner values that mean nobody won
_NO_WINNER = {"", "draw", "drawn", "tie", "tied", "no result", "nr", "abandoned"}


@dataclass
class TeamAggregate:
    team_id: str
    team_name: Optional[str] = None
    total_matches: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    win_percentage: float = 0.0
    current_streak: Streak = field(default_factory=Streak)
    longest_win_streak: int = 0
    longest_loss_streak: int = 0
    recent_matches: List[dict] = field(default_factory=list)
    form: List[str] = field(default_factory=list)
    match_history: List[dict] = field(default_factory=list)

    def to_document(self) -> Dict[str, Any]:
        return {
            "statistics": {
                "total_matches": self.total_matches,
                "wins": self.wins,
                "losses": self.losses,
                "draws": self.draws,
                "win_percentage": self.win_percentage,
                "current_streak": {"type": self.current_streak.type, "count": self.current_streak.count},
                "longest_win_streak": self.longest_win_streak,
                "longest_loss_streak": self.longest_loss_streak,
                "recent_matches": list(self.recent_matches),
                "form": list(self.form),
            },
            "match_history": list(self.match_history),
        }


# -----------------------------
# Parsing match documents
# -----------------------------
def _side(raw: dict, slot: str) -> dict:
    side = (raw.get("teams") or {}).get(slot) or raw.get(slot) or {}
    if isinstance(side, str):
        return {"name": side}
    return side if isinstance(side, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _date_value(value: Any) -> Any:
    # timestamps / datetimes are kept as-is for timeline.parse_date
    if isinstance(value, (dict, datetime)):
        return value
    return _as_str(value)


def _winner(raw: dict) -> Optional[str]:
    result = raw.get("result")
    winner = None
    if isinstance(result, dict):
        winner = result.get("winnerId") or result.get("winner")
    if winner is None:
        winner = raw.get("winnerId") or raw.get("winner")
    if isinstance(winner, dict):
        winner = winner.get("id") or winner.get("name")
    return _as_str(winner)


def parse_team_match(raw: Any) -> TeamMatchRecord:
    if isinstance(raw, TeamMatchRecord):
        return raw
    if not isinstance(raw, dict):
        raw = {}

    side1 = _side(raw, "team1")
    side2 = _side(raw, "team2")

    return TeamMatchRecord(
        match_id=_as_str(raw.get("id") or raw.get("matchId") or raw.get("match_id")),
        date=_date_value(raw.get("scheduledDate") or raw.get("date") or raw.get("matchDate")),
        team1_id=_as_str(raw.get("team1Id") or raw.get("team1_id") or side1.get("id")),
        team2_id=_as_str(raw.get("team2Id") or raw.get("team2_id") or side2.get("id")),
        team1_name=_as_str(side1.get("name")),
        team2_name=_as_str(side2.get("name")),
        winner=_winner(raw),
        venue=_as_str(raw.get("venue")),
        status=_as_str(raw.get("status")),
    )


def _same(a: Optional[str], b: Optional[str]) -> bool:
    return a is not None and b is not None and a.strip().lower() == b.strip().lower()


def involves_team(m: TeamMatchRecord, team_id: str, team_name: Optional[str] = None) -> bool:
    if team_id in (m.team1_id, m.team2_id):
        return True
    return bool(team_name) and (_same(m.team1_name, team_name) or _same(m.team2_name, team_name))


def is_completed(m: TeamMatchRecord) -> bool:
    # Documents without a status are history entries, already completed
    return m.status is None or m.status.lower() == "completed"


def result_for(m: TeamMatchRecord, team_id: str, team_name: Optional[str] = None) -> TeamResult:
    if m.winner is None or m.winner.lower() in _NO_WINNER:
        return "draw"
    if m.winner == team_id or _same(m.winner, team_name):
        return "win"
    return "loss"


def _opponent(m: TeamMatchRecord, team_id: str, team_name: Optional[str]) -> Optional[str]:
    if m.team1_id == team_id or (m.team1_id is None and _same(m.team1_name, team_name)):
        return m.team2_name or m.team2_id
    return m.team1_name or m.team1_id


# -----------------------------
# Fold
# -----------------------------
def apply_team_result(agg: TeamAggregate, result: TeamResult) -> None:
    """Counts + streaks for one match. Order matters: call oldest match first."""
    agg.total_matches += 1

    if result == "win":
        agg.wins += 1
        if agg.current_streak.type == "win":
            agg.current_streak.count += 1
        else:
            agg.current_streak = Streak(type="win", count=1)
        agg.longest_win_streak = max(agg.longest_win_streak, agg.current_streak.count)
    elif result == "loss":
        agg.losses += 1
        if agg.current_streak.type == "loss":
            agg.current_streak.count += 1
        else:
            agg.current_streak = Streak(type="loss", count=1)
        agg.longest_loss_streak = max(agg.longest_loss_streak, agg.current_streak.count)
    else:
        agg.draws += 1
        agg.current_streak = Streak(type="none", count=0)

    agg.win_percentage = round(win_percentage(agg.wins, agg.total_matches), RATE_DIGITS)


def fold_team_history(
    team_id: Any,
    matches: Iterable[Any],
    team_name: Optional[str] = None,
    *,
    recent_limit: int = TEAM_RECENT_MATCHES_LIMIT,
    form_limit: int = TEAM_FORM_LIMIT,
    history_limit: int = TEAM_HISTORY_LIMIT,
) -> TeamAggregate:
    """
    Team record from its matches.

    - only completed matches involving the team are counted
    - processed strictly oldest -> newest (streaks depend on order)
    - recent_matches / form are newest first; match_history is oldest first
    """
    tid = str(team_id)
    agg = TeamAggregate(team_id=tid, team_name=team_name)

    records = [parse_team_match(m) for m in matches or []]
    records = [m for m in records if is_completed(m) and involves_team(m, tid, team_name)]

    for m in chronological(records, lambda r: r.date):
        result = result_for(m, tid, team_name)
        apply_team_result(agg, result)

        summary = {
            "match_id": m.match_id,
            "date": m.date,
            "opponent": _opponent(m, tid, team_name),
            "result": result,
            "winner": m.winner,
            "venue": m.venue,
        }
        agg.recent_matches.insert(0, summary)
        del agg.recent_matches[recent_limit:]
        agg.match_history.append(dict(summary))

    agg.form = [r["result"] for r in agg.recent_matches[:form_limit]]
    agg.match_history = agg.match_history[-history_limit:]
    return agg
