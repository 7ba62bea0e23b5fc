from stats_api.team_stats import fold_team_history, parse_team_match, result_for


def _m(match_id, date, winner, team1="t1", team2="t2", status="completed"):
    return {
        "id": match_id,
        "scheduledDate": date,
        "team1Id": team1,
        "team2Id": team2,
        "teams": {"team1": {"name": team1.upper()}, "team2": {"name": team2.upper()}},
        "result": {"winnerId": winner} if winner is not None else None,
        "status": status,
    }


def _results(agg):
    return [m["result"] for m in agg.match_history]


def test_wins_losses_and_streaks():
    matches = [
        _m("1", "2024-04-01", "t1"),
        _m("2", "2024-04-02", "t1"),
        _m("3", "2024-04-03", "t2"),
        _m("4", "2024-04-04", "t1"),
        _m("5", "2024-04-05", "t1"),
        _m("6", "2024-04-06", "t1"),
    ]
    agg = fold_team_history("t1", matches)

    assert agg.total_matches == 6
    assert agg.wins == 5
    assert agg.losses == 1
    assert agg.win_percentage == 83.33
    assert (agg.current_streak.type, agg.current_streak.count) == ("win", 3)
    assert agg.longest_win_streak == 3
    assert agg.longest_loss_streak == 1


def test_streak_follows_dates_not_input_order():
    matches = [
        _m("3", "2024-04-03", "t2"),
        _m("1", "2024-04-01", "t1"),
        _m("2", "2024-04-02", "t1"),
    ]
    agg = fold_team_history("t1", matches)
    assert (agg.current_streak.type, agg.current_streak.count) == ("loss", 1)
    assert agg.longest_win_streak == 2
    assert [m["match_id"] for m in agg.match_history] == ["1", "2", "3"]


def test_draw_resets_streak():
    matches = [
        _m("1", "2024-04-01", "t1"),
        _m("2", "2024-04-02", "t1"),
        _m("3", "2024-04-03", "tie"),
    ]
    agg = fold_team_history("t1", matches)
    assert agg.draws == 1
    assert (agg.current_streak.type, agg.current_streak.count) == ("none", 0)
    assert agg.longest_win_streak == 2
    assert agg.form == ["draw", "win", "win"]


def test_only_completed_matches_for_the_team():
    matches = [
        _m("1", "2024-04-01", "t1"),
        _m("2", "2024-04-02", None, status="scheduled"),
        _m("3", "2024-04-03", "t3", team1="t3", team2="t4"),
    ]
    agg = fold_team_history("t1", matches)
    assert agg.total_matches == 1
    assert _results(agg) == ["win"]


def test_recent_matches_and_form_are_capped_newest_first():
    matches = [_m(str(i), f"2024-04-{i:02d}", "t1" if i % 2 else "t2") for i in range(1, 16)]
    agg = fold_team_history("t1", matches)

    assert len(agg.recent_matches) == 10
    assert agg.recent_matches[0]["match_id"] == "15"
    assert agg.recent_matches[-1]["match_id"] == "6"
    assert agg.form == ["win", "loss", "win", "loss", "win"]
    assert len(agg.match_history) == 15
    assert agg.recent_matches[0]["opponent"] == "T2"


def test_history_cap_keeps_latest():
    matches = [_m(str(i), f"2024-04-{i:02d}", "t1") for i in range(1, 8)]
    agg = fold_team_history("t1", matches, recent_limit=3, form_limit=2, history_limit=4)
    assert [m["match_id"] for m in agg.recent_matches] == ["7", "6", "5"]
    assert agg.form == ["win", "win"]
    assert [m["match_id"] for m in agg.match_history] == ["4", "5", "6", "7"]


def test_winner_by_name_and_nested_shapes():
    raw = {
        "id": "x",
        "team1": {"id": "t1", "name": "Mumbai"},
        "team2": {"id": "t2", "name": "Chennai"},
        "winner": {"name": "Mumbai"},
    }
    record = parse_team_match(raw)
    assert record.team1_id == "t1"
    assert record.winner == "Mumbai"
    assert result_for(record, "t1", team_name="mumbai") == "win"
    assert result_for(record, "t2", team_name="Chennai") == "loss"


def test_no_matches():
    agg = fold_team_history("t1", [])
    doc = agg.to_document()
    assert doc["statistics"]["total_matches"] == 0
    assert doc["statistics"]["win_percentage"] == 0.0
    assert doc["statistics"]["current_streak"] == {"type": "none", "count": 0}
    assert doc["match_history"] == []
