from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from menu_engine.app import app
from menu_engine.catalog.cache import get_cache_stats, reset_cache_stats
from menu_engine.catalog.data_store import reset_snapshot
from menu_engine.catalog.ingest import SnapshotLoadError

client = TestClient(app)


@pytest.fixture(autouse=True)
def _fresh_state():
    reset_snapshot()
    reset_cache_stats()
    yield
    reset_snapshot()


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_metadata():
    body = client.get("/metadata").json()
    assert len(body["categories"]) == 4
    assert [t["id"] for t in body["tags"]] == ["tag-veg", "tag-spicy", "tag-italian", "tag-new"]
    assert body["snapshot_version"] >= 1


# ── Menu query ───────────────────────────────────────────────────────────


def test_query_whole_menu():
    resp = client.post("/menu/query", json={})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_products"] == 5
    assert body["total_categories"] == 4
    assert [p["id"] for p in body["uncategorized"]] == ["p-garlic-bread"]


def test_query_scoped_to_outlet_and_channel():
    resp = client.post("/menu/query?outlet_id=point-1&channel=PICKUP", json={})
    body = resp.json()
    assert [c["category"]["id"] for c in body["categories"]] == ["cat-pizza", "cat-desserts"]
    assert [p["id"] for p in body["uncategorized"]] == ["p-garlic-bread"]


def test_query_reports_sort_fallback():
    body = client.post("/menu/query", json={"sort_by": "category_priority"}).json()
    assert body["sort_fallback"] == "missing_anchor_category"


def test_query_rejects_unknown_sort():
    resp = client.post("/menu/query", json={"sort_by": "rating"})
    assert resp.status_code == 422


def test_query_rejects_unknown_channel():
    resp = client.post("/menu/query?channel=DINE_IN", json={})
    assert resp.status_code == 422


def test_query_cache_hit_on_repeat():
    payload = {"search_term": "pizza", "sort_by": "price"}
    first = client.post("/menu/query", json=payload)
    second = client.post("/menu/query", json=payload)
    assert first.json() == second.json()

    stats = get_cache_stats()
    assert stats["misses"] == 1
    assert stats["hits"] == 1


# ── Search & convenience endpoints ───────────────────────────────────────


def test_search():
    resp = client.post("/menu/search", json={"search_term": "pizza", "limit": 2})
    assert resp.status_code == 200
    body = resp.json()
    assert [r["type"] for r in body["results"]] == ["product", "product"]
    assert body["category_count"] == 1


def test_search_requires_term():
    resp = client.post("/menu/search", json={"search_term": ""})
    assert resp.status_code == 422


def test_search_term_capped_at_request_boundary():
    resp = client.post("/menu/search", json={"search_term": "x" * 201})
    assert resp.status_code == 422


def test_featured():
    resp = client.get("/menu/featured?limit=2")
    assert [p["id"] for p in resp.json()] == ["p-margherita", "p-diavola"]


def test_category_products():
    resp = client.get("/menu/categories/cat-drinks/products")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == ["p-lemonade", "p-water"]


def test_unknown_category_is_404():
    resp = client.get("/menu/categories/cat-archived/products")
    assert resp.status_code == 404
    assert "cat-archived" in resp.json()["detail"]


# ── Analytics ────────────────────────────────────────────────────────────


def test_statistics():
    body = client.get("/menu/statistics").json()
    assert body["total_products"] == 5
    assert body["uncategorized_products"] == 1
    assert body["empty_categories"] == 1


def test_validate_menu():
    body = client.get("/menu/validate").json()
    assert body["is_valid"] is False
    assert body["issues"] == [
        "1 categories have no products",
        "1 products are not categorized",
        "1 products are missing price information",
        "1 products are missing images",
    ]


# ── Category structure ───────────────────────────────────────────────────


def test_hierarchy():
    roots = client.get("/categories/hierarchy").json()
    assert [n["id"] for n in roots] == ["cat-pizza", "cat-drinks", "cat-desserts"]
    drinks = roots[1]
    assert drinks["product_count"] == 2
    assert [c["id"] for c in drinks["children"]] == ["cat-lemonades"]


def test_hierarchy_depth_limit():
    roots = client.get("/categories/hierarchy?max_depth=1").json()
    assert all(n["children"] == [] for n in roots)


def test_validate_categories():
    body = client.get("/categories/validate").json()
    assert body["is_valid"] is True
    assert body["max_depth"] == 2


# ── Snapshot lifecycle ───────────────────────────────────────────────────


def test_reload_bumps_version():
    before = client.get("/metadata").json()["snapshot_version"]
    resp = client.post("/snapshot/reload")
    assert resp.status_code == 200
    assert resp.json() == {"status": "reloaded", "snapshot_version": before + 1}


def test_unavailable_snapshot_is_503():
    with patch("menu_engine.app.get_snapshot", side_effect=SnapshotLoadError("boom")):
        resp = client.post("/menu/query", json={})
    assert resp.status_code == 503


def test_failed_reload_is_503():
    with patch("menu_engine.app.reload_snapshot", side_effect=SnapshotLoadError("boom")):
        resp = client.post("/snapshot/reload")
    assert resp.status_code == 503


def test_cache_stats_endpoint():
    client.post("/menu/query", json={})
    client.post("/menu/query", json={})
    body = client.get("/cache/stats").json()
    assert body["hits"] == 1
    assert body["hit_rate"] == 50.0
