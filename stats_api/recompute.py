# stats_api/recompute.py
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from stats_api.config import RECOMPUTE_MAX_WORKERS
from stats_api.cross_references import build_player_histories
from stats_api.player_stats import fold_player_history
from stats_api.store import MATCHES, PLAYERS, TEAMS, DocumentStore, StoreError
from stats_api.team_stats import fold_team_history

logger = logging.getLogger(__name__)

# Persisted player fields produced by the fold
PLAYER_STAT_FIELDS = (
    "summary_stats",
    "batting_stats",
    "bowling_stats",
    "fielding_stats",
    "milestones",
    "career_bests",
)


@dataclass
class RecomputeReport:
    processed: int = 0
    updated: int = 0
    skipped: List[str] = field(default_factory=list)
    rejected_contributions: int = 0
    review: List[dict] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "updated": self.updated,
            "skipped": list(self.skipped),
            "rejected_contributions": self.rejected_contributions,
            "review": list(self.review),
        }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _history_of(doc: dict) -> List[Any]:
    return doc.get("match_history") or doc.get("matchHistory") or []


# -----------------------------
# Players
# -----------------------------
def recompute_player(store: DocumentStore, player_id: str, overs_mode: Optional[str] = None) -> Optional[dict]:
    """
    Re-fold one player's stored match history and overwrite the stats fields.
    Returns the written stats, or None when the player has no history.
    """
    doc = store.get(PLAYERS, player_id)
    if doc is None:
        raise StoreError(f"{PLAYERS}/{player_id} not found")

    history = _history_of(doc)
    if not history:
        logger.info("Player %s has no match history - skipping", player_id)
        return None

    agg = fold_player_history(history, overs_mode=overs_mode)
    stats = agg.to_document()
    store.update(PLAYERS, player_id, {**stats, "updated_at": _now()})

    if agg.rejected:
        logger.warning("Player %s: %d contribution(s) rejected", player_id, len(agg.rejected))
    logger.debug("Updated player %s: %s", player_id, stats["summary_stats"])
    return {**stats, "rejected": [asdict(r) for r in agg.rejected]}


def recompute_all_players(
    store: DocumentStore,
    max_workers: Optional[int] = None,
    overs_mode: Optional[str] = None,
) -> RecomputeReport:
    """
    Recompute every player. Players are independent, so they can be folded on
    a thread pool; nothing is shared between them.
    """
    workers = max_workers or RECOMPUTE_MAX_WORKERS
    player_ids = [pid for pid, _ in store.list(PLAYERS)]
    report = RecomputeReport(processed=len(player_ids))

    def one(pid: str) -> Optional[dict]:
        return recompute_player(store, pid, overs_mode=overs_mode)

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(one, player_ids))
    else:
        results = [one(pid) for pid in player_ids]

    for pid, stats in zip(player_ids, results):
        if stats is None:
            report.skipped.append(pid)
            continue
        report.updated += 1
        report.rejected_contributions += len(stats["rejected"])

    logger.info(
        "Player stats recomputed: processed=%d updated=%d skipped=%d",
        report.processed, report.updated, len(report.skipped),
    )
    return report


def rebuild_player_histories(
    store: DocumentStore,
    ambiguous_policy: Optional[str] = None,
    max_workers: Optional[int] = None,
    overs_mode: Optional[str] = None,
) -> RecomputeReport:
    """
    Rebuild every player's match history from the stored match scorecards,
    then recompute their stats. Fielder names that could not be attributed
    come back in report.review.
    """
    roster = [{"id": pid, "name": doc.get("name")} for pid, doc in store.list(PLAYERS)]
    matches = [{"id": mid, **doc} for mid, doc in store.list(MATCHES)]

    xref = build_player_histories(matches, roster, ambiguous_policy=ambiguous_policy, overs_mode=overs_mode)

    with store.batch() as b:
        for pid, history in xref.histories.items():
            b.update(PLAYERS, pid, {"match_history": history})

    report = recompute_all_players(store, max_workers=max_workers, overs_mode=overs_mode)
    report.review = xref.review
    return report


# -----------------------------
# Verification
# -----------------------------
def _diff(stored: Any, fresh: Any, path: str, out: List[dict]) -> None:
    if isinstance(fresh, dict) and isinstance(stored, dict):
        for key, value in fresh.items():
            _diff(stored.get(key), value, f"{path}.{key}" if path else key, out)
        return
    if isinstance(fresh, float) or isinstance(stored, float):
        try:
            if abs(float(stored) - float(fresh)) < 0.01:
                return
        except (TypeError, ValueError):
            pass
    if stored != fresh:
        out.append({"field": path, "stored": stored, "calculated": fresh})


def verify_player(store: DocumentStore, player_id: str, overs_mode: Optional[str] = None) -> Dict[str, Any]:
    """Compare the stored stats with a fresh fold of the stored history."""
    doc = store.get(PLAYERS, player_id)
    if doc is None:
        raise StoreError(f"{PLAYERS}/{player_id} not found")

    history = _history_of(doc)
    fresh = fold_player_history(history, overs_mode=overs_mode).to_document()

    discrepancies: List[dict] = []
    for name in PLAYER_STAT_FIELDS:
        if name == "milestones":
            continue
        _diff(doc.get(name), fresh[name], name, discrepancies)

    return {
        "player_id": player_id,
        "has_history": bool(history),
        "consistent": not discrepancies,
        "discrepancies": discrepancies,
    }


# -----------------------------
# Teams
# -----------------------------
def recompute_team(store: DocumentStore, team_id: str, matches: Optional[List[dict]] = None) -> dict:
    doc = store.get(TEAMS, team_id)
    if doc is None:
        raise StoreError(f"{TEAMS}/{team_id} not found")

    if matches is None:
        matches = [{"id": mid, **m} for mid, m in store.list(MATCHES)]

    agg = fold_team_history(team_id, matches, team_name=doc.get("name"))
    out = agg.to_document()
    store.update(TEAMS, team_id, {**out, "updated_at": _now()})
    return out


def recompute_all_teams(store: DocumentStore) -> RecomputeReport:
    """Reset-and-replay of every team's record from the completed matches."""
    matches = [{"id": mid, **m} for mid, m in store.list(MATCHES)]
    teams = store.list(TEAMS)
    report = RecomputeReport(processed=len(teams))

    with store.batch() as b:
        for team_id, doc in teams:
            agg = fold_team_history(team_id, matches, team_name=doc.get("name"))
            if agg.total_matches == 0:
                report.skipped.append(team_id)
            else:
                report.updated += 1
            b.update(TEAMS, team_id, {**agg.to_document(), "updated_at": _now()})

    logger.info("Team stats recomputed for %d teams from %d matches", len(teams), len(matches))
    return report
