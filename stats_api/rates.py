# stats_api/rates.py
from __future__ import annotations

from typing import Dict

from stats_api.bowling import balls_bowled, overs_for_rates
from stats_api.models import BattingAggregate, BowlingAggregate

RATE_DIGITS = 2


def _ratio(numerator: float, denominator: float, scale: float = 1.0) -> float:
    if denominator <= 0:
        return 0.0
    return (numerator / denominator) * scale


def batting_average(runs: int, innings: int, not_outs: int) -> float:
    """
    runs / dismissals.
    Never dismissed -> the runs themselves (0 if no runs).
    """
    dismissals = innings - not_outs
    if dismissals <= 0:
        return float(runs) if runs > 0 else 0.0
    return runs / dismissals


def batting_strike_rate(runs: int, balls: int) -> float:
    return _ratio(runs, balls, 100.0)


def bowling_average(runs_conceded: int, wickets: int) -> float:
    return _ratio(runs_conceded, wickets)


def economy_rate(runs_conceded: int, overs: float) -> float:
    return _ratio(runs_conceded, overs)


def bowling_strike_rate(balls: float, wickets: int) -> float:
    return _ratio(balls, wickets)


def win_percentage(wins: int, total_matches: int) -> float:
    return _ratio(wins, total_matches, 100.0)


def batting_rates(agg: BattingAggregate) -> Dict[str, float]:
    return {
        "average": round(batting_average(agg.total_runs, agg.innings, agg.not_outs), RATE_DIGITS),
        "strike_rate": round(batting_strike_rate(agg.total_runs, agg.total_balls), RATE_DIGITS),
    }


def bowling_rates(agg: BowlingAggregate) -> Dict[str, float]:
    return {
        "average": round(bowling_average(agg.total_runs, agg.total_wickets), RATE_DIGITS),
        "economy": round(economy_rate(agg.total_runs, overs_for_rates(agg)), RATE_DIGITS),
        "strike_rate": round(bowling_strike_rate(balls_bowled(agg), agg.total_wickets), RATE_DIGITS),
    }


def compute_rates(batting: BattingAggregate, bowling: BowlingAggregate) -> Dict[str, Dict[str, float]]:
    """Derived rates for a player; recomputed every time, never stored as source of truth."""
    return {
        "batting": batting_rates(batting),
        "bowling": bowling_rates(bowling),
    }
