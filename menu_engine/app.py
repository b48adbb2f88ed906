from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Query

from .analytics.models import MenuStatistics, ValidationReport
from .analytics.statistics import compute_statistics
from .analytics.validator import validate_menu
from .catalog.availability import select_available
from .catalog.cache import cache_get, cache_set, get_cache_stats
from .catalog.config import DEFAULT_CATALOG_CONFIG
from .catalog.data_store import get_snapshot, get_snapshot_version, reload_snapshot
from .catalog.ingest import SnapshotLoadError
from .catalog.models import Channel, MenuFilter, Product, Snapshot
from .menu.config import DEFAULT_MENU_CONFIG
from .menu.hierarchy import CategoryNode, HierarchyReport, build_hierarchy, validate_hierarchy
from .menu.models import MenuView, SearchRequest, SearchResult
from .menu.organizer import organize
from .menu.query import (
    CategoryNotFoundError,
    get_featured_products,
    get_products_by_category,
    query_menu,
    search_menu,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Menu Query API", version="1.0.0")


def _scoped_snapshot(outlet_id: str | None, channel: Channel | None) -> Snapshot:
    try:
        snapshot = get_snapshot()
    except SnapshotLoadError as exc:
        logger.error("Catalog snapshot unavailable: %s", exc)
        raise HTTPException(status_code=503, detail="Catalog snapshot unavailable") from exc

    outlet_id = outlet_id or DEFAULT_CATALOG_CONFIG.default_outlet_id
    channel = channel or DEFAULT_CATALOG_CONFIG.default_channel
    if outlet_id and channel:
        return select_available(snapshot, outlet_id, channel)
    return snapshot


def _scope_params(outlet_id: str | None, channel: Channel | None) -> dict:
    return {"outlet_id": outlet_id, "channel": channel.value if channel else None}


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    snapshot = _scoped_snapshot(None, None)
    return {
        "categories": [{"id": c.id, "name": c.name} for c in snapshot.categories],
        "tags": [{"id": t.id, "name": t.name} for t in snapshot.tags],
        "snapshot_version": get_snapshot_version(),
    }


# ── Menu endpoints ───────────────────────────────────────────────────────


@app.post("/menu/query", response_model=MenuView)
def menu_query(
    body: MenuFilter,
    outlet_id: str | None = None,
    channel: Channel | None = None,
) -> MenuView:
    snapshot = _scoped_snapshot(outlet_id, channel)
    params = {"filter": body.model_dump(mode="json"), **_scope_params(outlet_id, channel)}

    cached = cache_get("menu_query", get_snapshot_version(), params)
    if cached is not None:
        return cached

    view = query_menu(snapshot, body)
    if view.sort_fallback:
        logger.info("Menu query kept catalog order: %s", view.sort_fallback)
    cache_set("menu_query", get_snapshot_version(), params, view)
    return view


@app.post("/menu/search", response_model=SearchResult)
def menu_search(
    body: SearchRequest,
    outlet_id: str | None = None,
    channel: Channel | None = None,
) -> SearchResult:
    snapshot = _scoped_snapshot(outlet_id, channel)
    return search_menu(
        snapshot,
        body.search_term,
        limit=body.limit,
        category_id=body.category_id,
        tag_filter=body.tag_filter,
        sort_by=body.sort_by,
    )


@app.get("/menu/featured", response_model=list[Product])
def menu_featured(
    limit: int = Query(default=DEFAULT_MENU_CONFIG.featured_limit, ge=1, le=50),
    outlet_id: str | None = None,
    channel: Channel | None = None,
) -> list[Product]:
    return get_featured_products(_scoped_snapshot(outlet_id, channel), limit=limit)


@app.get("/menu/categories/{category_id}/products", response_model=list[Product])
def menu_category_products(
    category_id: str,
    limit: int | None = Query(default=None, ge=1, le=200),
    outlet_id: str | None = None,
    channel: Channel | None = None,
) -> list[Product]:
    snapshot = _scoped_snapshot(outlet_id, channel)
    try:
        return get_products_by_category(snapshot, category_id, limit=limit)
    except CategoryNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.get("/menu/statistics", response_model=MenuStatistics)
def menu_statistics(
    outlet_id: str | None = None,
    channel: Channel | None = None,
) -> MenuStatistics:
    snapshot = _scoped_snapshot(outlet_id, channel)
    params = _scope_params(outlet_id, channel)

    cached = cache_get("menu_statistics", get_snapshot_version(), params)
    if cached is not None:
        return cached

    stats = compute_statistics(organize(snapshot.categories, snapshot.products))
    cache_set("menu_statistics", get_snapshot_version(), params, stats)
    return stats


@app.get("/menu/validate", response_model=ValidationReport)
def menu_validate(
    outlet_id: str | None = None,
    channel: Channel | None = None,
) -> ValidationReport:
    snapshot = _scoped_snapshot(outlet_id, channel)
    return validate_menu(organize(snapshot.categories, snapshot.products))


# ── Category structure ───────────────────────────────────────────────────


@app.get("/categories/hierarchy", response_model=list[CategoryNode])
def categories_hierarchy(
    max_depth: int | None = Query(default=None, ge=1),
    outlet_id: str | None = None,
    channel: Channel | None = None,
) -> list[CategoryNode]:
    snapshot = _scoped_snapshot(outlet_id, channel)
    menu = organize(snapshot.categories, snapshot.products)
    return build_hierarchy(snapshot.categories, menu, max_depth=max_depth)


@app.get("/categories/validate", response_model=HierarchyReport)
def categories_validate(
    outlet_id: str | None = None,
    channel: Channel | None = None,
) -> HierarchyReport:
    return validate_hierarchy(_scoped_snapshot(outlet_id, channel).categories)


# ── Snapshot & cache ─────────────────────────────────────────────────────


@app.post("/snapshot/reload")
def snapshot_reload() -> dict:
    try:
        version = reload_snapshot()
    except SnapshotLoadError as exc:
        logger.error("Snapshot reload failed: %s", exc)
        raise HTTPException(status_code=503, detail="Catalog snapshot unavailable") from exc
    return {"status": "reloaded", "snapshot_version": version}


@app.get("/cache/stats")
def cache_stats() -> dict:
    return get_cache_stats()
