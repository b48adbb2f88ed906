from __future__ import annotations

import logging

from .cache import clear_cache
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .ingest import run_ingestion
from .models import Snapshot

logger = logging.getLogger(__name__)

_snapshot: Snapshot | None = None
_version: int = 0


def get_snapshot(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> Snapshot:
    """Return the current catalog snapshot, loading it on first call."""
    global _snapshot
    if _snapshot is None:
        set_snapshot(run_ingestion(config))
    return _snapshot


def get_snapshot_version() -> int:
    return _version


def set_snapshot(snapshot: Snapshot) -> int:
    """Swap in a new snapshot, bump the version and drop cached responses."""
    global _snapshot, _version
    _snapshot = snapshot
    _version += 1
    clear_cache()
    logger.info("Snapshot replaced, now at version %d", _version)
    return _version


def reload_snapshot(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> int:
    return set_snapshot(run_ingestion(config))


def reset_snapshot() -> None:
    global _snapshot
    _snapshot = None
    clear_cache()
