from stats_api.batting import fold_batting
from stats_api.contributions import parse_match_history


def _history(*innings):
    raw = [
        {"matchId": f"m{i}", "matchDate": f"2024-04-{i + 1:02d}", "contributions": [{"type": "batting", **c}]}
        for i, c in enumerate(innings)
    ]
    entries, _ = parse_match_history(raw)
    return entries


def test_totals_and_highest_score():
    agg = fold_batting(_history(
        {"runs": 45, "balls": 32, "fours": 4, "sixes": 1, "dismissal": "c Sharma b Kumar"},
        {"runs": 12, "balls": 10, "dismissal": "b Kumar"},
        {"runs": 70, "balls": 50, "sixes": 3, "dismissal": "not out"},
    ))
    assert agg.innings == 3
    assert agg.total_runs == 127
    assert agg.total_balls == 92
    assert agg.total_fours == 4
    assert agg.total_sixes == 4
    assert agg.highest_score == 70
    assert agg.career_best.score == 70
    assert agg.career_best.match_id == "m2"
    assert agg.not_outs == 1
    assert agg.dismissals == 2


def test_unbeaten_hundred_is_a_century():
    agg = fold_batting(_history({"runs": 102, "balls": 80, "dismissal": "not out"}))
    assert agg.centuries == 1
    assert agg.fifties == 0
    assert agg.milestones[0]["type"] == "century"
    assert agg.milestones[0]["not_out"] is True


def test_fifty_and_century_are_exclusive():
    agg = fold_batting(_history(
        {"runs": 50, "dismissal": "b X"},
        {"runs": 99, "dismissal": "b X"},
        {"runs": 100, "dismissal": "b X"},
    ))
    assert agg.fifties == 2
    assert agg.centuries == 1
    assert [m["type"] for m in agg.milestones] == ["fifty", "fifty", "century"]


def test_ducks_need_a_dismissal():
    agg = fold_batting(_history(
        {"runs": 0, "dismissal": "b Kumar"},
        {"runs": 0, "dismissal": "not out"},
        {"runs": 0},
    ))
    assert agg.ducks == 1
    assert agg.not_outs == 2


def test_equal_score_keeps_first_career_best():
    agg = fold_batting(_history(
        {"runs": 60, "balls": 40, "dismissal": "b X"},
        {"runs": 60, "balls": 30, "dismissal": "b X"},
    ))
    assert agg.career_best.match_id == "m0"
    assert agg.career_best.balls == 40


def test_no_batting_means_empty_aggregate():
    agg = fold_batting([])
    assert agg.innings == 0
    assert agg.highest_score == 0
    assert agg.career_best.match_id is None
