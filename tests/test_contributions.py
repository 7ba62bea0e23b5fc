import pytest

from stats_api.contributions import (
    ContributionError,
    parse_contribution,
    parse_match_entry,
    parse_match_history,
    partition_contributions,
)
from stats_api.models import BattingContribution, BowlingContribution, FieldingContribution


def test_missing_numeric_fields_default_to_zero():
    c = parse_contribution({"type": "batting"})
    assert isinstance(c, BattingContribution)
    assert (c.runs, c.balls, c.fours, c.sixes) == (0, 0, 0, 0)
    assert c.how_out.type == "NotOut"


def test_numeric_strings_are_accepted():
    c = parse_contribution({"type": "batting", "runs": "45", "balls": "32", "dismissal": "b Kumar"})
    assert c.runs == 45
    assert c.balls == 32
    assert c.how_out.type == "Bowled"


def test_structured_how_out_wins_over_text():
    c = parse_contribution({
        "type": "batting",
        "runs": 10,
        "dismissal": "something odd",
        "howOut": {"out": True, "type": "Stumped", "fielder": "Dhoni", "bowler": "Jadeja"},
    })
    assert c.how_out.type == "Stumped"
    assert c.how_out.fielder == "Dhoni"


def test_parsed_dismissal_stored_under_dismissal_key():
    c = parse_contribution({"type": "batting", "dismissal": {"out": False, "type": "Not Out"}})
    assert c.how_out.type == "NotOut"
    assert c.dismissal_text is None


@pytest.mark.parametrize(
    "raw",
    [
        {"type": "batting", "runs": -1},
        {"type": "batting", "runs": "-0.5"},
        {"type": "batting", "runs": 2.7},
        {"type": "bowling", "overs": "-0.3"},
        {"type": "bowling", "overs": "4.-0"},
        {"type": "fielding", "action": "catch", "count": 1.5},
        {"type": "batting", "balls": "many"},
        {"type": "bowling", "overs": "4.7"},
        {"type": "bowling", "overs": "4", "wickets": 11},
        {"type": "fielding", "action": "dropped"},
        {"type": "fielding", "action": "catch", "count": 0},
        {"type": "keeping"},
        "not a dict",
    ],
)
def test_inconsistent_contributions_raise(raw):
    with pytest.raises(ContributionError):
        parse_contribution(raw)


def test_bowling_and_fielding_aliases():
    bowl = parse_contribution({"type": "Bowling", "overs": 4, "runsConceded": 25, "wickets": 2})
    assert isinstance(bowl, BowlingContribution)
    assert bowl.overs == "4"
    assert bowl.runs == 25

    field = parse_contribution({"type": "fielding", "action": "Run Out"})
    assert isinstance(field, FieldingContribution)
    assert field.action == "run-out"
    assert field.count == 1


def test_bad_contribution_is_rejected_and_rest_kept():
    raw = {
        "matchId": "m1",
        "contributions": [
            {"type": "batting", "runs": 30},
            {"type": "bowling", "runs": -5},
            {"type": "fielding", "action": "catch", "count": 2},
        ],
    }
    entry, rejected = parse_match_entry(raw)

    assert entry.match_id == "m1"
    assert len(entry.contributions) == 2
    assert len(rejected) == 1
    assert rejected[0].index == 1
    assert rejected[0].match_id == "m1"
    assert "negative" in rejected[0].reason


def test_entry_defaults_and_team_labels():
    entry, _ = parse_match_entry({
        "team1": {"name": "Mumbai", "shortName": "MI"},
        "team2": "Chennai",
    })
    assert entry.match_id is None
    assert entry.contributions == ()
    assert entry.teams_label == "MI vs Chennai"

    entry, _ = parse_match_entry(None)
    assert entry.teams_label == "Team 1 vs Team 2"


def test_partition_and_history():
    entries, rejected = parse_match_history([
        {"matchId": "a", "contributions": [{"type": "batting"}, {"type": "bowling", "overs": "1"}]},
        {"matchId": "b", "contributions": [{"type": "fielding", "action": "stumping"}]},
    ])
    assert rejected == []
    parts = partition_contributions(entries[0])
    assert len(parts.batting) == 1
    assert len(parts.bowling) == 1
    assert parts.fielding == []
    assert partition_contributions(entries[1]).fielding[0].action == "stumping"


def test_input_is_not_mutated():
    raw = {"matchId": "m1", "contributions": [{"type": "batting", "runs": "12"}]}
    parse_match_entry(raw)
    assert raw == {"matchId": "m1", "contributions": [{"type": "batting", "runs": "12"}]}


def test_whole_number_floats_are_accepted():
    c = parse_contribution({"type": "batting", "runs": 12.0, "balls": "9.0"})
    assert (c.runs, c.balls) == (12, 9)


def test_negative_overs_never_reach_the_fold():
    entries, rejected = parse_match_history([
        {"matchId": "m1", "contributions": [
            {"type": "bowling", "overs": "-0.3", "runs": 4},
            {"type": "batting", "runs": "-0.5"},
        ]},
    ])
    assert entries[0].contributions == ()
    assert [r.index for r in rejected] == [0, 1]
