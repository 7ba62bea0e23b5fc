# stats_api/references.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

# Roster names carry tags like "MS Dhoni (c)(wk)"; scorecards do not
_BRACKETS_RE = re.compile(r"\s*\([^)]*\)\s*")


@dataclass(frozen=True)
class Resolved:
    player_id: str
    kind: str = "resolved"


@dataclass(frozen=True)
class Unresolved:
    raw_name: str
    kind: str = "unresolved"


@dataclass(frozen=True)
class Ambiguous:
    raw_name: str
    candidate_ids: Tuple[str, ...]
    kind: str = "ambiguous"


Attribution = Union[Resolved, Unresolved, Ambiguous]


def base_name(name: Optional[str]) -> str:
    if not name:
        return ""
    cleaned = _BRACKETS_RE.sub(" ", str(name))
    return re.sub(r"\s+", " ", cleaned).strip().lower()


def normalize_roster(roster: Any) -> List[Tuple[str, str]]:
    """
    Accepts {player_id: name}, [{"id": ..., "name": ...}], or [(id, name)].
    Returns [(player_id, base_name)] in the given order.
    """
    out: List[Tuple[str, str]] = []
    if roster is None:
        return out

    if isinstance(roster, dict):
        items: Iterable[Any] = roster.items()
    else:
        items = roster

    for item in items:
        if isinstance(item, dict):
            pid = item.get("id") or item.get("playerId") or item.get("player_id")
            name = item.get("name") or item.get("playerName")
        else:
            pid, name = item
        if pid is None:
            continue
        out.append((str(pid), base_name(name)))
    return out


def resolve_name(raw_name: Optional[str], roster: Any) -> Attribution:
    """
    Match a scorecard name against the roster by substring containment
    (either direction), the same rule the importer always used.

    - exactly one candidate, or one exact name match -> Resolved
    - several candidates                              -> Ambiguous (roster order kept)
    - none                                            -> Unresolved
    """
    wanted = base_name(raw_name)
    if not wanted:
        return Unresolved(raw_name=str(raw_name or ""))

    entries = normalize_roster(roster)

    candidates: List[str] = []
    exact: List[str] = []
    for pid, name in entries:
        if not name:
            continue
        if name == wanted:
            exact.append(pid)
        if wanted in name or name in wanted:
            candidates.append(pid)

    if len(exact) == 1:
        return Resolved(player_id=exact[0])
    if len(candidates) == 1:
        return Resolved(player_id=candidates[0])
    if candidates:
        return Ambiguous(raw_name=str(raw_name), candidate_ids=tuple(candidates))
    return Unresolved(raw_name=str(raw_name))


def attribution_to_dict(a: Attribution) -> Dict[str, Any]:
    if isinstance(a, Resolved):
        return {"kind": a.kind, "player_id": a.player_id}
    if isinstance(a, Ambiguous):
        return {"kind": a.kind, "raw_name": a.raw_name, "candidate_ids": list(a.candidate_ids)}
    return {"kind": a.kind, "raw_name": a.raw_name}
