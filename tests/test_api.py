import pytest
from fastapi.testclient import TestClient

import main
from stats_api import cache
from stats_api.store import MATCHES, PLAYERS, TEAMS, MemoryStore, set_store

HISTORY = [
    {"matchId": "A", "matchDate": "2024-04-01", "contributions": [
        {"type": "batting", "runs": 45, "balls": 32, "dismissal": "c Sharma b Kumar"},
        {"type": "bowling", "overs": 4, "maidens": 0, "runs": 25, "wickets": 2},
    ]},
    {"matchId": "B", "matchDate": "2024-04-08", "contributions": [
        {"type": "batting", "runs": 102, "balls": 80, "dismissal": "not out"},
    ]},
]


@pytest.fixture
def store():
    s = MemoryStore()
    s.set(PLAYERS, "p1", {"name": "Rohit Sharma", "match_history": HISTORY})
    s.set(TEAMS, "t1", {"name": "Mumbai"})
    s.set(MATCHES, "m1", {"team1Id": "t1", "team2Id": "t2", "status": "completed", "result": {"winnerId": "t1"}})
    set_store(s)
    cache.clear()
    yield s
    set_store(None)
    cache.clear()


@pytest.fixture
def client(store):
    with TestClient(main.app) as c:
        yield c


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_parse_dismissals(client):
    r = client.post("/api/dismissal/parse", json={"statuses": ["b Kumar", "xyz garbled"]})
    body = r.json()
    assert r.status_code == 200
    assert body["count"] == 2
    assert body["parsed"][0]["how_out"]["type"] == "Bowled"
    assert body["parsed"][1]["how_out"]["original_status"] == "xyz garbled"


def test_player_stats_from_body(client):
    history = HISTORY + [{"matchId": "C", "contributions": [{"type": "batting", "runs": -1}]}]
    r = client.post("/api/stats/player", json={"match_history": history})
    body = r.json()
    assert r.status_code == 200
    assert body["stats"]["batting_stats"]["total_runs"] == 147
    assert body["stats"]["batting_stats"]["average"] == 147
    assert body["rejected"][0]["match_id"] == "C"


def test_player_stats_rejects_unknown_overs_mode(client):
    r = client.post("/api/stats/player", json={"match_history": [], "overs_mode": "furlongs"})
    assert r.status_code == 422


def test_team_stats_from_body(client):
    matches = [
        {"id": "1", "date": "2024-04-01", "team1Id": "t1", "team2Id": "t2", "winner": "t1"},
        {"id": "2", "date": "2024-04-02", "team1Id": "t1", "team2Id": "t2", "winner": "t2"},
    ]
    r = client.post("/api/stats/team", json={"team_id": "t1", "matches": matches})
    stats = r.json()["statistics"]
    assert stats["wins"] == 1
    assert stats["losses"] == 1
    assert stats["current_streak"] == {"type": "loss", "count": 1}

    assert client.post("/api/stats/team", json={"team_id": "  ", "matches": []}).status_code == 400


def test_recompute_then_read_player(client, store):
    r = client.post("/api/players/p1/recompute")
    assert r.status_code == 200
    assert r.json()["updated"] is True

    r = client.get("/api/players/p1/stats")
    assert r.json()["source"] == "store"
    assert r.json()["stats"]["batting_stats"]["centuries"] == 1

    assert client.get("/api/players/p1/stats").json()["source"] == "cache"
    assert client.get("/api/players/p1/verify").json()["consistent"] is True


def test_fresh_player_stats_skip_cache(client):
    r = client.get("/api/players/p1/stats", params={"fresh": True})
    assert r.json()["source"] == "computed"
    assert r.json()["stats"]["summary_stats"]["total_runs"] == 147


def test_unknown_ids_are_404(client):
    assert client.get("/api/players/ghost/stats").status_code == 404
    assert client.get("/api/players/ghost/verify").status_code == 404
    assert client.post("/api/players/ghost/recompute").status_code == 404
    assert client.get("/api/teams/ghost/stats").status_code == 404
    assert client.post("/api/teams/ghost/recompute").status_code == 404


def test_recompute_all(client, store):
    r = client.post("/api/recompute/players", json={})
    assert r.status_code == 200
    assert r.json()["updated"] == 1

    r = client.post("/api/recompute/teams")
    assert r.json()["updated"] == 1

    r = client.get("/api/teams/t1/stats")
    assert r.json()["statistics"]["wins"] == 1


def test_team_recompute_invalidates_cache(client, store):
    assert client.get("/api/teams/t1/stats").json()["statistics"] is None

    client.post("/api/teams/t1/recompute")
    body = client.get("/api/teams/t1/stats").json()
    assert body["source"] == "store"
    assert body["statistics"]["total_matches"] == 1


def test_fresh_read_does_not_fill_the_cache(client, store):
    client.post("/api/players/p1/recompute")
    store.update(PLAYERS, "p1", {"match_history": HISTORY[:1]})

    fresh = client.get("/api/players/p1/stats", params={"fresh": True}).json()
    assert fresh["stats"]["summary_stats"]["total_runs"] == 45

    plain = client.get("/api/players/p1/stats").json()
    assert plain["source"] == "store"
    assert plain["stats"]["summary_stats"]["total_runs"] == 147


def test_rebuild_keeps_requested_overs_mode(client, store):
    store.set(PLAYERS, "bowler", {"name": "Jasprit Bumrah"})
    for i in (1, 2):
        store.set(MATCHES, f"s{i}", {
            "scheduledDate": f"2024-04-0{i}",
            "innings": [{"inningNumber": 1, "batsmen": [], "bowlers": [
                {"playerId": "bowler", "overs": "4.4", "runs": 30, "wickets": 1},
            ]}],
        })

    r = client.post("/api/recompute/players", json={
        "rebuild_history": True,
        "overs_mode": "legacy_decimal",
        "max_workers": 2,
    })
    assert r.status_code == 200

    bowling = store.get(PLAYERS, "bowler")["bowling_stats"]
    assert bowling["overs_mode"] == "legacy_decimal"
    assert bowling["total_overs"] == 8.8
