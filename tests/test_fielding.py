from stats_api.contributions import parse_match_history
from stats_api.fielding import fold_fielding


def test_counts_by_action():
    entries, _ = parse_match_history([
        {"matchId": "m1", "contributions": [
            {"type": "fielding", "action": "catch", "count": 2},
            {"type": "fielding", "action": "run-out"},
        ]},
        {"matchId": "m2", "contributions": [
            {"type": "fielding", "action": "stumping"},
            {"type": "fielding", "action": "catch"},
            {"type": "batting", "runs": 10},
        ]},
    ])
    agg = fold_fielding(entries)
    assert agg.catches == 3
    assert agg.run_outs == 1
    assert agg.stumpings == 1
    assert agg.milestones == []


def test_three_catches_milestone():
    entries, _ = parse_match_history([
        {"matchId": "m1", "contributions": [{"type": "fielding", "action": "catch", "count": 3}]},
    ])
    agg = fold_fielding(entries)
    assert agg.catches == 3
    assert agg.milestones[0]["type"] == "three-catches"
    assert agg.milestones[0]["match_id"] == "m1"


def test_no_fielding_contributions():
    entries, _ = parse_match_history([{"matchId": "m1"}])
    agg = fold_fielding(entries)
    assert (agg.catches, agg.run_outs, agg.stumpings) == (0, 0, 0)
