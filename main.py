# main.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from stats_api.cache import get as cache_get, set as cache_set, make_key as cache_key
from stats_api.cache import invalidate as cache_invalidate, invalidate_namespace

from stats_api.config import (
    configure_logging,
    validate_config,
    STATS_CACHE_TTL_SECONDS,
)

from stats_api.dismissal import classify_dismissal
from stats_api.player_stats import fold_player_history
from stats_api.team_stats import fold_team_history
from stats_api.store import PLAYERS, TEAMS, StoreError, get_store
from stats_api.recompute import (
    rebuild_player_histories,
    recompute_all_players,
    recompute_all_teams,
    recompute_player,
    recompute_team,
    verify_player,
)

OversMode = Literal["balls", "legacy_decimal"]
AmbiguousPolicy = Literal["review", "first"]

# -----------------------
# App
# -----------------------
app = FastAPI(
    title="Cricket Career Stats API",
    version="0.1.0",
    description="Recomputes player and team career statistics from stored match history",
)


@app.on_event("startup")
def on_startup():
    configure_logging()
    validate_config()


@app.get("/health")
def health_check():
    return {"status": "ok", "time": datetime.utcnow().isoformat() + "Z"}


# -----------------------
# Helpers
# -----------------------
def _load(collection: str, doc_id: str) -> Dict[str, Any]:
    doc = get_store().get(collection, doc_id)
    if doc is None:
        raise HTTPException(status_code=404, detail=f"Unknown {collection[:-1]}: {doc_id}")
    return doc


def _stored_player_stats(doc: Dict[str, Any]) -> Dict[str, Any]:
    keys = ("summary_stats", "batting_stats", "bowling_stats", "fielding_stats", "milestones", "career_bests")
    return {k: doc.get(k) for k in keys}


# -----------------------
# Dismissal parsing
# -----------------------
class DismissalRequest(BaseModel):
    statuses: List[str] = Field(..., description='e.g. ["c Sharma b Kumar", "not out"]')


@app.post("/api/dismissal/parse")
def parse_dismissals(req: DismissalRequest):
    return {
        "count": len(req.statuses),
        "parsed": [{"status": s, "how_out": classify_dismissal(s).to_dict()} for s in req.statuses],
    }


# -----------------------
# Stateless aggregation (caller supplies the history)
# -----------------------
class PlayerStatsRequest(BaseModel):
    match_history: List[Dict[str, Any]] = Field(default_factory=list)
    overs_mode: Optional[OversMode] = Field(None, description="balls (default) or legacy_decimal")


@app.post("/api/stats/player")
def player_stats(req: PlayerStatsRequest):
    agg = fold_player_history(req.match_history, overs_mode=req.overs_mode)
    return {
        "matches": len(req.match_history),
        "stats": agg.to_document(),
        "rejected": [
            {"match_id": r.match_id, "index": r.index, "reason": r.reason}
            for r in agg.rejected
        ],
    }


class TeamStatsRequest(BaseModel):
    team_id: str = Field(..., description="Identifier compared against each match's winner")
    team_name: Optional[str] = Field(None, description="Also accepted as a winner match")
    matches: List[Dict[str, Any]] = Field(default_factory=list)


@app.post("/api/stats/team")
def team_stats(req: TeamStatsRequest):
    team_id = req.team_id.strip()
    if not team_id:
        raise HTTPException(status_code=400, detail="team_id must be non-empty")

    agg = fold_team_history(team_id, req.matches, team_name=req.team_name)
    return {"team_id": team_id, **agg.to_document()}


# -----------------------
# Stored entities (cache-first reads)
# -----------------------
@app.get("/api/players/{player_id}/stats")
def get_player_stats(player_id: str, fresh: bool = False):
    key = cache_key("player-stats", player_id)
    if not fresh:
        cached = cache_get(key)
        if cached is not None:
            return {"source": "cache", "player_id": player_id, "stats": cached}

    doc = _load(PLAYERS, player_id)
    if fresh:
        history = doc.get("match_history") or doc.get("matchHistory") or []
        stats = fold_player_history(history).to_document()
        source = "computed"
    else:
        stats = _stored_player_stats(doc)
        source = "store"

    # only stored stats are cached; fresh folds are not persisted
    if not fresh:
        cache_set(key, stats, ttl_seconds=STATS_CACHE_TTL_SECONDS)
    return {"source": source, "player_id": player_id, "stats": stats}


@app.get("/api/teams/{team_id}/stats")
def get_team_stats(team_id: str):
    key = cache_key("team-stats", team_id)
    cached = cache_get(key)
    if cached is not None:
        return {"source": "cache", "team_id": team_id, **cached}

    doc = _load(TEAMS, team_id)
    out = {"statistics": doc.get("statistics"), "match_history": doc.get("match_history") or []}
    cache_set(key, out, ttl_seconds=STATS_CACHE_TTL_SECONDS)
    return {"source": "store", "team_id": team_id, **out}


@app.get("/api/players/{player_id}/verify")
def verify_player_stats(player_id: str, overs_mode: Optional[OversMode] = None):
    try:
        return verify_player(get_store(), player_id, overs_mode=overs_mode)
    except StoreError:
        raise HTTPException(status_code=404, detail=f"Unknown player: {player_id}")


# -----------------------
# Recompute jobs
# -----------------------
@app.post("/api/players/{player_id}/recompute")
def recompute_one_player(player_id: str, overs_mode: Optional[OversMode] = None):
    try:
        stats = recompute_player(get_store(), player_id, overs_mode=overs_mode)
    except StoreError:
        raise HTTPException(status_code=404, detail=f"Unknown player: {player_id}")

    cache_invalidate(cache_key("player-stats", player_id))
    if stats is None:
        return {"player_id": player_id, "updated": False, "reason": "no match history"}
    return {"player_id": player_id, "updated": True, "stats": stats}


class RecomputePlayersRequest(BaseModel):
    rebuild_history: bool = Field(False, description="Rebuild match history from stored scorecards first")
    ambiguous_policy: Optional[AmbiguousPolicy] = Field(None, description="review (default) or first")
    max_workers: Optional[int] = Field(None, ge=1, le=32)
    overs_mode: Optional[OversMode] = None


@app.post("/api/recompute/players")
def recompute_players(req: RecomputePlayersRequest):
    store = get_store()
    try:
        if req.rebuild_history:
            report = rebuild_player_histories(
                store,
                ambiguous_policy=req.ambiguous_policy,
                max_workers=req.max_workers,
                overs_mode=req.overs_mode,
            )
        else:
            report = recompute_all_players(store, max_workers=req.max_workers, overs_mode=req.overs_mode)
    except StoreError as e:
        raise HTTPException(status_code=409, detail=str(e))

    invalidate_namespace("player-stats")
    return report.to_dict()


@app.post("/api/teams/{team_id}/recompute")
def recompute_one_team(team_id: str):
    try:
        out = recompute_team(get_store(), team_id)
    except StoreError:
        raise HTTPException(status_code=404, detail=f"Unknown team: {team_id}")

    cache_invalidate(cache_key("team-stats", team_id))
    return {"team_id": team_id, **out}


@app.post("/api/recompute/teams")
def recompute_teams():
    report = recompute_all_teams(get_store())
    invalidate_namespace("team-stats")
    return report.to_dict()
