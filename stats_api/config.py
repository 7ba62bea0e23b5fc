# stats_api/config.py
from __future__ import annotations

import logging
import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _get_env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


# -------------------------
# Aggregation behaviour
# -------------------------
# "balls"          -> accumulate overs as balls (true base-6), report 9.2 for 4.4 + 4.4
# "legacy_decimal" -> float-sum of the stored overs (4.4 + 4.4 = 8.8), matches old documents
STATS_OVERS_MODE: str = _get_env("STATS_OVERS_MODE", "balls").lower()

# How to treat a fielder name that matches more than one roster entry
# "review" -> do not credit, flag it; "first" -> credit first roster match, still flag it
STATS_AMBIGUOUS_POLICY: str = _get_env("STATS_AMBIGUOUS_POLICY", "review").lower()

TEAM_RECENT_MATCHES_LIMIT: int = _get_env_int("TEAM_RECENT_MATCHES_LIMIT", 10)
TEAM_FORM_LIMIT: int = _get_env_int("TEAM_FORM_LIMIT", 5)
TEAM_HISTORY_LIMIT: int = _get_env_int("TEAM_HISTORY_LIMIT", 50)


# -------------------------
# Document store + serving
# -------------------------
# "firestore" (default) or "memory" (nothing persisted; tests / local runs)
STATS_STORE_BACKEND: str = _get_env("STATS_STORE_BACKEND", "firestore").lower()

# Service account JSON; empty -> application default credentials
FIREBASE_CREDENTIALS_PATH: str = _get_env("FIREBASE_CREDENTIALS_PATH")

STATS_CACHE_TTL_SECONDS: int = _get_env_int("STATS_CACHE_TTL_SECONDS", 300)
RECOMPUTE_MAX_WORKERS: int = _get_env_int("RECOMPUTE_MAX_WORKERS", 1)

STATS_DEBUG: bool = _get_env("STATS_DEBUG", "0") == "1"

OVERS_MODES = {"balls", "legacy_decimal"}
STORE_BACKENDS = {"firestore", "memory"}
AMBIGUOUS_POLICIES = {"review", "first"}


def configure_logging() -> None:
    level = logging.DEBUG if STATS_DEBUG else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("stats_api").setLevel(level)


def validate_config() -> None:
    if STATS_OVERS_MODE not in OVERS_MODES:
        raise RuntimeError(f"STATS_OVERS_MODE must be one of {sorted(OVERS_MODES)}")

    if STATS_AMBIGUOUS_POLICY not in AMBIGUOUS_POLICIES:
        raise RuntimeError(f"STATS_AMBIGUOUS_POLICY must be one of {sorted(AMBIGUOUS_POLICIES)}")

    # List caps
    for name, value in (
        ("TEAM_RECENT_MATCHES_LIMIT", TEAM_RECENT_MATCHES_LIMIT),
        ("TEAM_FORM_LIMIT", TEAM_FORM_LIMIT),
        ("TEAM_HISTORY_LIMIT", TEAM_HISTORY_LIMIT),
    ):
        if value <= 0:
            raise RuntimeError(f"{name} must be positive")

    if TEAM_FORM_LIMIT > TEAM_RECENT_MATCHES_LIMIT:
        raise RuntimeError("TEAM_FORM_LIMIT cannot exceed TEAM_RECENT_MATCHES_LIMIT")

    # TTL validation
    if STATS_CACHE_TTL_SECONDS <= 0:
        raise RuntimeError("STATS_CACHE_TTL_SECONDS must be positive")

    if RECOMPUTE_MAX_WORKERS <= 0:
        raise RuntimeError("RECOMPUTE_MAX_WORKERS must be positive")

    if STATS_STORE_BACKEND not in STORE_BACKENDS:
        raise RuntimeError(f"STATS_STORE_BACKEND must be one of {sorted(STORE_BACKENDS)}")

    if FIREBASE_CREDENTIALS_PATH and not os.path.isfile(FIREBASE_CREDENTIALS_PATH):
        raise RuntimeError(f"FIREBASE_CREDENTIALS_PATH does not exist: {FIREBASE_CREDENTIALS_PATH}")
