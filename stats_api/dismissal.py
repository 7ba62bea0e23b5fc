# stats_api/dismissal.py
from __future__ import annotations

import re
from typing import Optional

from stats_api.models import HowOut

NOT_OUT = HowOut(out=False, type="NotOut")

# " b " separator between fielder/keeper and bowler
_BOWLER_SEP_RE = re.compile(r"\s+b\s+", re.IGNORECASE)
_RUN_OUT_RE = re.compile(r"run\s+out\s*(?:\(([^)]*)\))?\s*(.*)$", re.IGNORECASE)
_LBW_RE = re.compile(r"lbw\s+b\s+(.+)", re.IGNORECASE)
_CAUGHT_AND_BOWLED_RE = re.compile(r"c\s*&\s*b\s+(.+)", re.IGNORECASE)


def _clean(name: Optional[str]) -> Optional[str]:
    if name is None:
        return None
    name = re.sub(r"\s+", " ", str(name)).strip()
    return name or None


def classify_dismissal(status_text: Optional[str]) -> HowOut:
    """
    Turn a scorecard "how out" string into a HowOut.

    First rule that matches wins (case-insensitive):
      not out -> c X b Y -> c X -> b Y -> run out (X) -> lbw b Y
      -> c&b Y -> st X b Y -> retired hurt/out -> Unknown

    Never raises. Missing status is treated as "not out" (batter never dismissed).
    """
    if status_text is None:
        return NOT_OUT

    raw = str(status_text)
    text = re.sub(r"\s+", " ", raw).strip()
    lower = text.lower()

    if not text or "not out" in lower:
        return NOT_OUT

    if lower.startswith("c ") and not _CAUGHT_AND_BOWLED_RE.match(text):
        parts = _BOWLER_SEP_RE.split(text[2:], maxsplit=1)
        if len(parts) == 2:
            return HowOut(out=True, type="Caught", fielder=_clean(parts[0]), bowler=_clean(parts[1]))
        return HowOut(out=True, type="Caught", fielder=_clean(text[2:]), bowler=None)

    if lower.startswith("b "):
        return HowOut(out=True, type="Bowled", fielder=None, bowler=_clean(text[2:]))

    if "run out" in lower:
        m = _RUN_OUT_RE.search(text)
        fielder = None
        if m:
            fielder = _clean(m.group(1)) or _clean(m.group(2))
        return HowOut(out=True, type="RunOut", fielder=fielder, bowler=None)

    if lower.startswith("lbw"):
        m = _LBW_RE.search(text)
        return HowOut(out=True, type="LBW", fielder=None, bowler=_clean(m.group(1)) if m else None)

    if "c&b" in lower.replace(" ", ""):
        m = _CAUGHT_AND_BOWLED_RE.search(text)
        return HowOut(
            out=True,
            type="CaughtAndBowled",
            fielder=None,  # bowler is also the catcher
            bowler=_clean(m.group(1)) if m else None,
        )

    if lower.startswith("st "):
        parts = _BOWLER_SEP_RE.split(text[3:], maxsplit=1)
        if len(parts) == 2:
            return HowOut(out=True, type="Stumped", fielder=_clean(parts[0]), bowler=_clean(parts[1]))

    if "retired" in lower:
        kind = "RetiredHurt" if "hurt" in lower else "RetiredOut"
        return HowOut(out=True, type=kind, fielder=None, bowler=None)

    return HowOut(out=True, type="Unknown", fielder=None, bowler=None, original_status=raw)


def how_out_from_dict(data: dict) -> Optional[HowOut]:
    """
    Rebuild a HowOut from an already-parsed document field
    (e.g. {"out": true, "type": "Caught", "fielder": "...", "bowler": "..."}).

    Accepts both the tag names used here ("CaughtAndBowled") and the spaced
    labels older documents carry ("Caught and Bowled", "Run Out").
    Returns None if the dict cannot be understood, so the caller can fall back
    to parsing the free-text dismissal.
    """
    if not isinstance(data, dict):
        return None

    raw_type = str(data.get("type") or "").strip()
    if not raw_type:
        return None

    key = re.sub(r"[^a-z]", "", raw_type.lower())
    tag = _TYPE_KEYS.get(key)
    if tag is None:
        return None

    out = tag != "NotOut"
    return HowOut(
        out=out,
        type=tag,
        fielder=_clean(data.get("fielder")),
        bowler=_clean(data.get("bowler")),
        original_status=(data.get("original_status") or data.get("originalStatus")) if tag == "Unknown" else None,
    )


_TYPE_KEYS = {
    "notout": "NotOut",
    "caught": "Caught",
    "bowled": "Bowled",
    "runout": "RunOut",
    "lbw": "LBW",
    "caughtandbowled": "CaughtAndBowled",
    "candb": "CaughtAndBowled",
    "stumped": "Stumped",
    "retiredhurt": "RetiredHurt",
    "retiredout": "RetiredOut",
    "unknown": "Unknown",
}
