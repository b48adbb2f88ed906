from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_DEFAULT_SNAPSHOT = Path(__file__).resolve().parent.parent / "data" / "sample_menu.json"


@dataclass(frozen=True)
class CatalogConfig:
    """
    Configuration for the catalog snapshot source.
    """

    snapshot_path: Path = Path(os.getenv("MENU_SNAPSHOT_PATH", str(_DEFAULT_SNAPSHOT)))
    default_outlet_id: str | None = os.getenv("MENU_DEFAULT_OUTLET_ID") or None
    default_channel: str | None = os.getenv("MENU_DEFAULT_CHANNEL") or None
    cache_ttl: float = float(os.getenv("MENU_CACHE_TTL", "300"))


DEFAULT_CATALOG_CONFIG = CatalogConfig()
