import pytest

from stats_api.models import BattingAggregate, BowlingAggregate
from stats_api.rates import (
    batting_average,
    batting_strike_rate,
    bowling_average,
    bowling_strike_rate,
    compute_rates,
    economy_rate,
    win_percentage,
)


def test_batting_average():
    assert batting_average(147, 2, 1) == 147
    assert batting_average(90, 3, 0) == 30
    # never dismissed -> runs
    assert batting_average(55, 2, 2) == 55
    assert batting_average(0, 0, 0) == 0.0


@pytest.mark.parametrize(
    "fn, args",
    [
        (batting_strike_rate, (50, 0)),
        (bowling_average, (30, 0)),
        (economy_rate, (30, 0)),
        (bowling_strike_rate, (24, 0)),
        (win_percentage, (0, 0)),
    ],
)
def test_zero_denominators_give_zero(fn, args):
    assert fn(*args) == 0.0


def test_formulas():
    assert batting_strike_rate(45, 30) == 150.0
    assert bowling_average(25, 2) == 12.5
    assert economy_rate(27, 4.5) == 6.0
    assert bowling_strike_rate(24, 2) == 12.0
    assert win_percentage(3, 4) == 75.0


def test_compute_rates_rounds_to_two_places():
    bat = BattingAggregate(innings=3, total_runs=100, total_balls=70, not_outs=0)
    bowl = BowlingAggregate(total_balls=27, total_runs=31, total_wickets=3)

    rates = compute_rates(bat, bowl)
    assert rates["batting"] == {"average": 33.33, "strike_rate": 142.86}
    assert rates["bowling"] == {"average": 10.33, "economy": 6.89, "strike_rate": 9.0}


def test_empty_aggregates():
    rates = compute_rates(BattingAggregate(), BowlingAggregate())
    assert rates["batting"] == {"average": 0.0, "strike_rate": 0.0}
    assert rates["bowling"] == {"average": 0.0, "economy": 0.0, "strike_rate": 0.0}
