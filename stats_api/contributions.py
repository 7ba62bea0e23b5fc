# stats_api/contributions.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from stats_api.dismissal import classify_dismissal, how_out_from_dict
from stats_api.models import (
    BattingContribution,
    BowlingContribution,
    Contribution,
    FieldingContribution,
    MatchHistoryEntry,
    RejectedContribution,
)
from stats_api.overs_math import overs_to_balls

logger = logging.getLogger(__name__)

MAX_WICKETS_PER_INNINGS = 10

_FIELDING_ACTIONS = {
    "catch": "catch",
    "catches": "catch",
    "run out": "run-out",
    "run-out": "run-out",
    "runout": "run-out",
    "run_out": "run-out",
    "stumping": "stumping",
    "stumpings": "stumping",
}


class ContributionError(ValueError):
    """Raised when a single contribution is inconsistent (negative count, bad overs, ...)."""
    pass


@dataclass
class ContributionsByType:
    batting: List[BattingContribution] = field(default_factory=list)
    bowling: List[BowlingContribution] = field(default_factory=list)
    fielding: List[FieldingContribution] = field(default_factory=list)


def _pick(raw: dict, *keys: str) -> Any:
    for k in keys:
        if k in raw and raw[k] is not None:
            return raw[k]
    return None


def _count(raw: dict, *keys: str, default: int = 0) -> int:
    """
    Missing / blank -> default. Numeric strings are accepted.
    Negative, fractional or non-numeric -> ContributionError.
    """
    value = _pick(raw, *keys)
    if value is None:
        return default

    sx = str(value).strip()
    if not sx or sx.lower() == "nan":
        return default

    try:
        f = float(sx)
    except ValueError as e:
        raise ContributionError(f"{keys[0]} is not a number: {value!r}") from e

    if f < 0:
        raise ContributionError(f"{keys[0]} cannot be negative: {value!r}")
    if not f.is_integer():
        raise ContributionError(f"{keys[0]} must be a whole number: {value!r}")
    return int(f)


def _optional_int(raw: dict, *keys: str) -> Optional[int]:
    value = _pick(raw, *keys)
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _parse_batting(raw: dict) -> BattingContribution:
    runs = _count(raw, "runs")
    balls = _count(raw, "balls", "balls_faced", "ballsFaced")
    fours = _count(raw, "fours")
    sixes = _count(raw, "sixes")

    dismissal_text = _pick(raw, "dismissal", "status")
    # Older documents store the parsed variant under "dismissal" itself
    structured = _pick(raw, "how_out", "howOut", "statusParsed")
    if isinstance(dismissal_text, dict):
        structured = structured or dismissal_text
        dismissal_text = None

    how_out = how_out_from_dict(structured) if structured else None
    if how_out is None:
        how_out = classify_dismissal(dismissal_text)

    return BattingContribution(
        runs=runs,
        balls=balls,
        fours=fours,
        sixes=sixes,
        how_out=how_out,
        dismissal_text=None if dismissal_text is None else str(dismissal_text),
        innings_number=_optional_int(raw, "inningNumber", "innings_number"),
    )


def _parse_bowling(raw: dict) -> BowlingContribution:
    overs_raw = _pick(raw, "overs")
    overs = "0" if overs_raw is None or str(overs_raw).strip() == "" else str(overs_raw).strip()
    try:
        overs_to_balls(overs)
    except ValueError as e:
        raise ContributionError(str(e)) from e

    wickets = _count(raw, "wickets")
    if wickets > MAX_WICKETS_PER_INNINGS:
        raise ContributionError(f"wickets cannot exceed {MAX_WICKETS_PER_INNINGS}: {wickets}")

    return BowlingContribution(
        overs=overs,
        maidens=_count(raw, "maidens"),
        runs=_count(raw, "runs", "runs_conceded", "runsConceded"),
        wickets=wickets,
        innings_number=_optional_int(raw, "inningNumber", "innings_number"),
    )


def _parse_fielding(raw: dict) -> FieldingContribution:
    action_raw = str(_pick(raw, "action") or "").strip().lower()
    action = _FIELDING_ACTIONS.get(action_raw)
    if action is None:
        raise ContributionError(f"Unknown fielding action: {action_raw!r}")

    count = _count(raw, "count", default=1)
    if count < 1:
        raise ContributionError("fielding count must be at least 1")

    return FieldingContribution(
        action=action,
        count=count,
        innings_number=_optional_int(raw, "inningNumber", "innings_number"),
    )


def parse_contribution(raw: Any) -> Contribution:
    """One raw contribution dict (camelCase or snake_case) -> typed contribution."""
    if isinstance(raw, (BattingContribution, BowlingContribution, FieldingContribution)):
        return raw
    if not isinstance(raw, dict):
        raise ContributionError(f"Contribution must be an object, got {type(raw).__name__}")

    kind = str(raw.get("type") or "").strip().lower()
    if kind == "batting":
        return _parse_batting(raw)
    if kind == "bowling":
        return _parse_bowling(raw)
    if kind == "fielding":
        return _parse_fielding(raw)
    raise ContributionError(f"Unknown contribution type: {kind!r}")


def _team_label(value: Any) -> Optional[str]:
    # team fields are either a plain name or {"name": ..., "shortName": ...}
    if value is None:
        return None
    if isinstance(value, dict):
        label = value.get("shortName") or value.get("short_name") or value.get("name")
        return str(label) if label else None
    return str(value)


def _result_label(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, dict):
        label = value.get("text") or value.get("description") or value.get("winner")
        return str(label) if label else None
    return str(value)


def parse_match_entry(raw: Any) -> Tuple[MatchHistoryEntry, List[RejectedContribution]]:
    """
    Raw match-history document -> MatchHistoryEntry.

    Bad contributions are rejected one by one (and returned) instead of
    failing the whole entry. Missing optional fields default to None / empty.
    """
    if isinstance(raw, MatchHistoryEntry):
        return raw, []
    if not isinstance(raw, dict):
        raw = {}

    match_id = _pick(raw, "matchId", "match_id", "id")
    match_id = None if match_id is None else str(match_id)

    contributions: List[Contribution] = []
    rejected: List[RejectedContribution] = []

    for idx, item in enumerate(raw.get("contributions") or []):
        try:
            contributions.append(parse_contribution(item))
        except ContributionError as e:
            logger.warning("Rejected contribution %d of match %s: %s", idx, match_id, e)
            rejected.append(
                RejectedContribution(
                    match_id=match_id,
                    index=idx,
                    reason=str(e),
                    raw=item if isinstance(item, dict) else {"value": item},
                )
            )

    date = _pick(raw, "matchDate", "match_date", "date", "scheduledDate")

    entry = MatchHistoryEntry(
        match_id=match_id,
        match_date=date,
        team1=_team_label(raw.get("team1")),
        team2=_team_label(raw.get("team2")),
        venue=None if raw.get("venue") is None else str(raw.get("venue")),
        result=_result_label(raw.get("result")),
        contributions=tuple(contributions),
    )
    return entry, rejected


def parse_match_history(raw_history: Any) -> Tuple[List[MatchHistoryEntry], List[RejectedContribution]]:
    entries: List[MatchHistoryEntry] = []
    rejected: List[RejectedContribution] = []
    for raw in raw_history or []:
        entry, bad = parse_match_entry(raw)
        entries.append(entry)
        rejected.extend(bad)
    return entries, rejected


def partition_contributions(entry: MatchHistoryEntry) -> ContributionsByType:
    out = ContributionsByType()
    for c in entry.contributions:
        if isinstance(c, BattingContribution):
            out.batting.append(c)
        elif isinstance(c, BowlingContribution):
            out.bowling.append(c)
        elif isinstance(c, FieldingContribution):
            out.fielding.append(c)
    return out
