# stats_api/cache.py
from __future__ import annotations

import threading
import time
from typing import Any, Dict, Optional, Tuple

# Computed aggregates served over HTTP, per process.
# "namespace:id" -> (expires_at_epoch, value)
_cache: Dict[str, Tuple[float, Any]] = {}
_lock = threading.Lock()


def make_key(namespace: str, key: str) -> str:
    """("player-stats", "p42") -> "player-stats:p42"; blank parts are a ValueError."""
    parts = [str(namespace).strip(), str(key).strip()]
    if not all(parts):
        raise ValueError(f"Cache key parts must be non-empty: {parts!r}")
    return ":".join(parts)


def get(key: str) -> Optional[Any]:
    now = time.time()
    with _lock:
        expires_at, value = _cache.get(key, (0.0, None))
        if expires_at < now:
            _cache.pop(key, None)
            return None
        return value


def set(key: str, value: Any, ttl_seconds: int = 60) -> None:
    # ttl <= 0 means "do not cache"
    if ttl_seconds > 0:
        with _lock:
            _cache[key] = (time.time() + ttl_seconds, value)


def invalidate(key: str) -> None:
    with _lock:
        _cache.pop(key, None)


def invalidate_namespace(namespace: str) -> int:
    """Drop every key under namespace; returns how many were dropped."""
    prefix = f"{namespace.strip()}:"
    with _lock:
        keys = [k for k in _cache if k.startswith(prefix)]
        for k in keys:
            del _cache[k]
    return len(keys)


def clear() -> None:
    with _lock:
        _cache.clear()
