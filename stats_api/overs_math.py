# stats_api/overs_math.py
from __future__ import annotations

from typing import Iterable, Union

BALLS_PER_OVER = 6
OversLike = Union[str, int, float]


def overs_to_balls(overs: OversLike) -> int:
    """
    Scorecard overs -> balls bowled.

    "4.3" is 4 overs and 3 balls (27), never 4.3 true overs. Accepts "4",
    "4.0", "4." and ints; floats work but strings are safer ("3.1" vs 3.0999).
    Raises ValueError for negatives, text, or a ball part outside 0..5.
    """
    if overs is None:
        raise ValueError("Overs cannot be None")

    s = str(overs).strip()
    whole, _, part = s.partition(".")
    try:
        completed = int(whole) if whole else 0
        balls = int(part) if part.strip() else 0
    except ValueError as e:
        raise ValueError(f"Invalid overs: {overs!r}") from e

    if not s or "-" in s:
        raise ValueError(f"Invalid overs: {overs!r}")
    if not 0 <= balls < BALLS_PER_OVER:
        raise ValueError(f"Invalid overs: {overs!r} (balls part must be 0-5)")

    return completed * BALLS_PER_OVER + balls


def balls_to_overs_notation(balls: int) -> float:
    """27 balls -> 4.3 (cricket notation, NOT a true decimal)."""
    if balls <= 0:
        return 0.0
    whole, rest = divmod(int(balls), BALLS_PER_OVER)
    return float(f"{whole}.{rest}")


def balls_to_overs_float(balls: int) -> float:
    if balls <= 0:
        return 0.0
    return balls / float(BALLS_PER_OVER)


def legacy_overs_value(overs: OversLike) -> float:
    """
    What the old update scripts added per spell: parseFloat(overs) || 0.
    "4.4" -> 4.4 (not 4 + 4/6).
    """
    try:
        return float(str(overs).strip())
    except (TypeError, ValueError):
        return 0.0


def add_overs(spells: Iterable[OversLike]) -> float:
    """
    Correct base-6 sum of several spells, returned in overs notation.
    add_overs(["4.4", "4.4"]) -> 9.2
    """
    return balls_to_overs_notation(sum(overs_to_balls(s) for s in spells))
