# stats_api/cross_references.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from stats_api.config import STATS_AMBIGUOUS_POLICY, STATS_OVERS_MODE
from stats_api.dismissal import classify_dismissal, how_out_from_dict
from stats_api.overs_math import balls_to_overs_float, legacy_overs_value, overs_to_balls
from stats_api.rates import RATE_DIGITS, batting_strike_rate, economy_rate
from stats_api.references import (
    Ambiguous,
    Resolved,
    attribution_to_dict,
    normalize_roster,
    resolve_name,
)
from stats_api.timeline import chronological

logger = logging.getLogger(__name__)

# dismissal tag -> (fielding action, which name gets the credit)
_FIELDING_CREDIT = {
    "Caught": ("catch", "fielder"),
    "CaughtAndBowled": ("catch", "bowler"),
    "RunOut": ("run-out", "fielder"),
    "Stumped": ("stumping", "fielder"),
}


@dataclass
class CrossReferenceResult:
    # player_id -> match-history documents (chronological)
    histories: Dict[str, List[dict]] = field(default_factory=dict)
    # fielder names that were not credited (or credited by guess) and need a human look
    review: List[dict] = field(default_factory=list)


def _team_ref(match: dict, slot: str) -> Dict[str, str]:
    team = (match.get("teams") or {}).get(slot) or match.get(slot) or {}
    if isinstance(team, str):
        team = {"name": team}
    name = team.get("name")
    if not name:
        return {"name": "Team 1" if slot == "team1" else "Team 2", "short_name": "T1" if slot == "team1" else "T2"}
    short = team.get("shortName") or team.get("short_name") or str(name)[:3].upper()
    return {"name": str(name), "short_name": str(short)}


def _match_entry(match: dict) -> dict:
    return {
        "match_id": str(match.get("id") or match.get("matchId") or ""),
        "match_date": match.get("scheduledDate") or match.get("date"),
        "team1": _team_ref(match, "team1"),
        "team2": _team_ref(match, "team2"),
        "venue": match.get("venue"),
        "result": match.get("result"),
        "contributions": [],
    }


def _how_out_for(batsman: dict):
    structured = batsman.get("statusParsed") or batsman.get("howOut") or batsman.get("how_out")
    how_out = how_out_from_dict(structured) if structured else None
    if how_out is None:
        how_out = classify_dismissal(batsman.get("status") or batsman.get("dismissal"))
    return how_out


def _num(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _innings_strike_rate(batsman: dict) -> float:
    return round(batting_strike_rate(_num(batsman.get("runs")), _num(batsman.get("balls"))), RATE_DIGITS)


def _innings_economy(bowler: dict, overs_mode: str) -> float:
    overs = bowler.get("overs") or 0
    if overs_mode == "legacy_decimal":
        true_overs = legacy_overs_value(overs)
    else:
        try:
            true_overs = balls_to_overs_float(overs_to_balls(overs))
        except ValueError:
            # bad overs are rejected later, when the history is folded
            true_overs = 0.0
    return round(economy_rate(_num(bowler.get("runs")), true_overs), RATE_DIGITS)


class _HistoryBuilder:
    def __init__(self, known_ids: set) -> None:
        self.known_ids = known_ids
        self.histories: Dict[str, List[dict]] = {}
        self._index: Dict[tuple, dict] = {}

    def entry_for(self, player_id: str, match: dict, match_key: str) -> Optional[dict]:
        if player_id not in self.known_ids:
            return None
        key = (player_id, match_key)
        entry = self._index.get(key)
        if entry is None:
            entry = _match_entry(match)
            self._index[key] = entry
            self.histories.setdefault(player_id, []).append(entry)
        return entry

    def add_fielding(self, player_id: str, match: dict, match_key: str, action: str, innings_number: Any) -> None:
        entry = self.entry_for(player_id, match, match_key)
        if entry is None:
            return
        for c in entry["contributions"]:
            if c["type"] == "fielding" and c["action"] == action:
                c["count"] += 1
                return
        entry["contributions"].append({
            "type": "fielding",
            "inningNumber": innings_number,
            "action": action,
            "count": 1,
        })


def build_player_histories(
    matches: List[dict],
    roster: Any,
    ambiguous_policy: Optional[str] = None,
    overs_mode: Optional[str] = None,
) -> CrossReferenceResult:
    """
    Rebuild every player's match history from match scorecards.

    matches: match documents with innings[].batsmen[] and innings[].bowlers[]
             (each row carrying playerId); processed oldest first.
    roster:  known players ({id: name} or [{"id", "name"}]); rows for unknown
             ids are skipped.

    Fielding credit is inferred from dismissal text and attributed by name.
    Unresolved names are never credited. Ambiguous names are credited to the
    first roster candidate only when ambiguous_policy == "first"; either way
    they are listed in `review`.
    """
    policy = (ambiguous_policy or STATS_AMBIGUOUS_POLICY).lower()
    mode = overs_mode or STATS_OVERS_MODE
    players = normalize_roster(roster)
    builder = _HistoryBuilder({pid for pid, _ in players})
    result = CrossReferenceResult()

    ordered = chronological(matches or [], lambda m: m.get("scheduledDate") or m.get("date"))
    for position, match in enumerate(ordered):
        match_id = str(match.get("id") or match.get("matchId") or "")
        # id-less documents must not collapse into one history entry
        match_key = match_id or f"#{position}"

        for inning in match.get("innings") or []:
            innings_number = inning.get("inningNumber", inning.get("innings_number"))

            for batsman in inning.get("batsmen") or []:
                pid = batsman.get("playerId")
                if pid is not None:
                    entry = builder.entry_for(str(pid), match, match_key)
                    if entry is not None:
                        how_out = _how_out_for(batsman)
                        entry["contributions"].append({
                            "type": "batting",
                            "inningNumber": innings_number,
                            "runs": batsman.get("runs") or 0,
                            "balls": batsman.get("balls") or 0,
                            "fours": batsman.get("fours") or 0,
                            "sixes": batsman.get("sixes") or 0,
                            "dismissal": batsman.get("status") or "not out",
                            "strikeRate": _innings_strike_rate(batsman),
                            "howOut": how_out.to_dict(),
                        })
                    else:
                        logger.debug("Batsman %s in match %s not in roster", pid, match_id)

                _credit_fielder(builder, result, match, match_key, innings_number, _how_out_for(batsman), players, policy)

            for bowler in inning.get("bowlers") or []:
                pid = bowler.get("playerId")
                if pid is None:
                    continue
                entry = builder.entry_for(str(pid), match, match_key)
                if entry is None:
                    logger.debug("Bowler %s in match %s not in roster", pid, match_id)
                    continue
                entry["contributions"].append({
                    "type": "bowling",
                    "inningNumber": innings_number,
                    "overs": bowler.get("overs") or 0,
                    "maidens": bowler.get("maidens") or 0,
                    "runs": bowler.get("runs") or 0,
                    "wickets": bowler.get("wickets") or 0,
                    "economy": _innings_economy(bowler, mode),
                })

    result.histories = builder.histories
    if result.review:
        logger.warning("%d fielder name(s) need review", len(result.review))
    return result


def _credit_fielder(builder, result, match, match_key, innings_number, how_out, players, policy) -> None:
    credit = _FIELDING_CREDIT.get(how_out.type)
    if credit is None:
        return

    action, who = credit
    raw_name = how_out.fielder if who == "fielder" else how_out.bowler
    if not raw_name:
        return

    attribution = resolve_name(raw_name, players)
    if isinstance(attribution, Resolved):
        builder.add_fielding(attribution.player_id, match, match_key, action, innings_number)
        return

    item = {
        "match_id": str(match.get("id") or match.get("matchId") or ""),
        "innings_number": innings_number,
        "action": action,
        **attribution_to_dict(attribution),
        "credited_to": None,
    }
    if isinstance(attribution, Ambiguous) and policy == "first":
        item["credited_to"] = attribution.candidate_ids[0]
        builder.add_fielding(attribution.candidate_ids[0], match, match_key, action, innings_number)

    result.review.append(item)
