from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import (
    AvailabilityBind,
    Category,
    CategoryBind,
    Nutrition,
    Product,
    ProductImage,
    Snapshot,
    Tag,
    TagBind,
)

logger = logging.getLogger(__name__)


class SnapshotLoadError(RuntimeError):
    """Raised when a snapshot file cannot be read or parsed."""


def _first_present(raw: dict[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _resolve_price(
    raw: dict[str, Any],
    outlet_id: str | None = None,
    channel: str | None = None,
) -> int | None:
    """
    Pick the price for the requested outlet and channel.

    Precedence: an explicit ``pricePoint`` on the record, then an outlet
    price for the channel, then the channel's common price, then the base
    price of ``priceSettings``, then a bare ``price`` field.
    """
    explicit = _as_int(raw.get("pricePoint"))
    if explicit is not None:
        return explicit

    settings = raw.get("priceSettings") or {}
    if settings:
        for order_type in settings.get("priceOrderTypes") or []:
            if channel is None or order_type.get("orderType") != channel:
                continue
            if outlet_id is not None:
                for point in order_type.get("pricePoints") or []:
                    if point.get("pointId") == outlet_id:
                        price = _as_int(point.get("price"))
                        if price is not None:
                            return price
            common = _as_int(order_type.get("priceCommon"))
            if common is not None:
                return common
        base = _as_int(settings.get("price"))
        if base is not None:
            return base

    return _as_int(raw.get("price"))


def _availability(raw: dict[str, Any]) -> list[AvailabilityBind]:
    binds = _first_present(raw, ["pointBinds", "availabilityBinds"]) or []
    return [
        AvailabilityBind(
            outlet_id=str(_first_present(b, ["pointId", "outletId"])),
            channel=_first_present(b, ["orderType", "channel"]),
        )
        for b in binds
    ]


def _category_binds(raw: dict[str, Any]) -> list[CategoryBind]:
    out: list[CategoryBind] = []
    seen: set[str] = set()
    for bind in raw.get("categoryBinds") or []:
        category_id = str(bind["categoryId"])
        if category_id in seen:
            logger.warning(
                "Product %s binds category %s more than once, keeping the first bind",
                raw.get("id"),
                category_id,
            )
            continue
        seen.add(category_id)
        out.append(CategoryBind(category_id=category_id, priority=_as_int(bind.get("priority")) or 0))
    return out


def _tag_binds(raw: dict[str, Any]) -> list[TagBind]:
    # tagBinds carry priorities; plain tags only carry ids
    if raw.get("tagBinds"):
        return [
            TagBind(tag_id=str(b["tagId"]), priority=_as_int(b.get("priority")) or 0)
            for b in raw["tagBinds"]
        ]
    return [TagBind(tag_id=str(t["id"])) for t in raw.get("tags") or []]


def normalize_product(
    raw: dict[str, Any],
    outlet_id: str | None = None,
    channel: str | None = None,
) -> Product:
    nutrition = Nutrition(
        calories=_as_int(raw.get("calories")),
        protein=_as_int(_first_present(raw, ["protein", "proteins"])),
        fat=_as_int(_first_present(raw, ["fats", "fat"])),
        carbohydrates=_as_int(_first_present(raw, ["carbohydrates", "carbs"])),
    )
    images = [
        ProductImage(
            url=img["url"],
            file_id=img.get("fileId"),
            priority=_as_int(img.get("priority")) or 0,
        )
        for img in raw.get("images") or []
        if img.get("url")
    ]
    return Product(
        id=str(raw["id"]),
        name=raw["name"],
        slug=raw.get("slug") or "",
        description=raw.get("description") or None,
        is_active=bool(raw.get("isActive", True)),
        price=_resolve_price(raw, outlet_id, channel),
        priority=_as_int(raw.get("priority")),
        nutrition=nutrition,
        tags=_tag_binds(raw),
        category_binds=_category_binds(raw),
        availability_binds=_availability(raw),
        images=images,
    )


def normalize_category(raw: dict[str, Any]) -> Category:
    parent = raw.get("parentId")
    return Category(
        id=str(raw["id"]),
        name=raw["name"],
        slug=raw.get("slug") or "",
        priority=_as_int(raw.get("priority")) or 0,
        is_active=bool(raw.get("isActive", True)),
        parent_id=str(parent) if parent is not None else None,
        image_url=raw.get("imageUrl"),
        availability_binds=_availability(raw),
    )


def _collect_tags(payload: dict[str, Any]) -> list[Tag]:
    tags: dict[str, Tag] = {}
    embedded = [t for p in payload.get("products") or [] for t in p.get("tags") or []]
    for raw in list(payload.get("tags") or []) + embedded:
        tag_id = str(raw.get("id", ""))
        if tag_id and raw.get("name") and tag_id not in tags:
            tags[tag_id] = Tag(id=tag_id, name=raw["name"])
    return list(tags.values())


def _normalize_all(kind: str, records: list[dict[str, Any]], normalize) -> list:
    out = []
    for raw in records:
        try:
            out.append(normalize(raw))
        except (KeyError, TypeError, ValidationError):
            logger.warning("Skipping malformed %s record %r", kind, raw.get("id"), exc_info=True)
    return out


def build_snapshot(
    payload: dict[str, Any],
    outlet_id: str | None = None,
    channel: str | None = None,
) -> Snapshot:
    """
    Normalize a raw catalog export into a typed snapshot.

    Malformed records are skipped with a warning; the rest of the
    snapshot still loads.
    """
    categories = _normalize_all("category", payload.get("categories") or [], normalize_category)
    products = _normalize_all(
        "product",
        payload.get("products") or [],
        lambda raw: normalize_product(raw, outlet_id, channel),
    )
    return Snapshot(categories=categories, products=products, tags=_collect_tags(payload))


def load_snapshot(
    path: Path,
    outlet_id: str | None = None,
    channel: str | None = None,
) -> Snapshot:
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise SnapshotLoadError(f"Snapshot file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise SnapshotLoadError(f"Snapshot file is not valid JSON: {path}") from exc

    if not isinstance(payload, dict):
        raise SnapshotLoadError(f"Snapshot root must be an object: {path}")
    return build_snapshot(payload, outlet_id, channel)


def run_ingestion(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> Snapshot:
    """Load the configured snapshot file, pricing it for the default outlet and channel."""
    snapshot = load_snapshot(config.snapshot_path, config.default_outlet_id, config.default_channel)
    logger.info(
        "Loaded snapshot from %s: %d categories, %d products, %d tags",
        config.snapshot_path,
        len(snapshot.categories),
        len(snapshot.products),
        len(snapshot.tags),
    )
    return snapshot


if __name__ == "__main__":
    snap = run_ingestion()
    print(
        f"Ingestion complete: {len(snap.categories)} categories, "
        f"{len(snap.products)} products, {len(snap.tags)} tags"
    )
