from __future__ import annotations

import hashlib
import json
import time
from typing import Any

from .config import DEFAULT_CATALOG_CONFIG

# key -> {"value", "version", "created_at"}
_responses: dict[str, dict[str, Any]] = {}
_hits: int = 0
_misses: int = 0


def _make_key(endpoint: str, version: int, params: dict) -> str:
    normalized = json.dumps(
        {"endpoint": endpoint, "version": version, "params": params},
        sort_keys=True,
        default=str,
    )
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


def cache_get(
    endpoint: str,
    version: int,
    params: dict,
    ttl: float = DEFAULT_CATALOG_CONFIG.cache_ttl,
) -> Any | None:
    """Return the cached response for this snapshot version, or ``None``."""
    global _hits, _misses
    key = _make_key(endpoint, version, params)
    entry = _responses.get(key)
    if entry and entry["version"] == version and time.time() - entry["created_at"] < ttl:
        _hits += 1
        return entry["value"]
    if entry:
        del _responses[key]
    _misses += 1
    return None


def cache_set(endpoint: str, version: int, params: dict, value: Any) -> None:
    key = _make_key(endpoint, version, params)
    _responses[key] = {"value": value, "version": version, "created_at": time.time()}


def get_cache_stats() -> dict:
    total = _hits + _misses
    return {
        "size": len(_responses),
        "hits": _hits,
        "misses": _misses,
        "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
    }


def clear_cache() -> None:
    """Drop all cached responses. Hit/miss counters are kept."""
    _responses.clear()


def reset_cache_stats() -> None:
    global _hits, _misses
    _responses.clear()
    _hits = 0
    _misses = 0
