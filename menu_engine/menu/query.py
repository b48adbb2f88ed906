from __future__ import annotations

import logging

from ..catalog.models import (
    MenuFilter,
    OrganizedCategory,
    OrganizedMenu,
    Product,
    Snapshot,
    SortBy,
    SortOrder,
)
from .config import DEFAULT_MENU_CONFIG
from .filters import apply_filters, normalize_term
from .models import MenuView, SearchHit, SearchResult, SearchSortBy, TagFilter
from .organizer import organize
from .relevance import score_category, score_product
from .sorting import collation_key, sort_products

logger = logging.getLogger(__name__)


class CategoryNotFoundError(LookupError):
    """Raised when a category id is not part of the snapshot."""

    def __init__(self, category_id: str) -> None:
        super().__init__(f"Category not found: {category_id}")
        self.category_id = category_id


def _sort_view(menu: OrganizedMenu, menu_filter: MenuFilter) -> tuple[OrganizedMenu, str | None]:
    fallback: str | None = None
    organized: list[OrganizedCategory] = []

    for oc in menu.organized:
        # Each bucket anchors category sorting on itself unless told otherwise
        result = sort_products(
            oc.products,
            menu_filter.sort_by,
            menu_filter.sort_order,
            anchor_category_id=menu_filter.sort_by_category_id or oc.category.id,
        )
        organized.append(OrganizedCategory(category=oc.category, products=result.products))
        fallback = fallback or result.fallback

    uncategorized = menu.uncategorized
    if uncategorized:
        result = sort_products(
            uncategorized,
            menu_filter.sort_by,
            menu_filter.sort_order,
            anchor_category_id=menu_filter.sort_by_category_id,
        )
        uncategorized = result.products
        fallback = fallback or result.fallback

    return OrganizedMenu(organized=organized, uncategorized=uncategorized), fallback


def query_menu(snapshot: Snapshot, menu_filter: MenuFilter | None = None) -> MenuView:
    """Organize, filter and sort a snapshot in one pass."""
    menu_filter = menu_filter or MenuFilter()

    menu = organize(snapshot.categories, snapshot.products)
    menu = apply_filters(menu, menu_filter, snapshot.tag_index())

    fallback = None
    if menu_filter.sort_by is not None:
        menu, fallback = _sort_view(menu, menu_filter)

    return MenuView(
        categories=menu.organized,
        uncategorized=menu.uncategorized,
        total_products=len(menu.all_products()),
        total_categories=len(menu.organized),
        sort_fallback=fallback,
        applied_filter=menu_filter,
    )


def _flatten(view: MenuView) -> list[Product]:
    return OrganizedMenu(organized=view.categories, uncategorized=view.uncategorized).all_products()


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def _order_hits(hits: list[SearchHit], sort_by: SearchSortBy) -> list[SearchHit]:
    if sort_by == SearchSortBy.name:
        return sorted(hits, key=lambda h: collation_key(h.name))
    if sort_by == SearchSortBy.price:
        return sorted(hits, key=lambda h: (h.product.price or 0) if h.product else 0)
    return sorted(hits, key=lambda h: -h.relevance_score)


def search_menu(
    snapshot: Snapshot,
    search_term: str,
    limit: int | None = None,
    category_id: str | None = None,
    tag_filter: TagFilter | None = None,
    sort_by: SearchSortBy | str = SearchSortBy.relevance,
) -> SearchResult:
    """
    Rank products and categories for a search term.

    Candidates are the filtered menu for the term (plus any category and
    tag constraints). Each is scored; zero scores are dropped. Relevance
    ties keep products ahead of categories, each in snapshot order.
    """
    term = normalize_term(search_term)
    menu_filter = MenuFilter(
        search_term=search_term,
        category_id=category_id,
        **(tag_filter.model_dump() if tag_filter else {}),
    )
    view = query_menu(snapshot, menu_filter)
    tags = snapshot.tag_index()

    product_hits = []
    for product in _flatten(view):
        score = score_product(product, term, tags)
        if score > 0:
            product_hits.append(
                SearchHit(type="product", id=product.id, name=product.name, relevance_score=score, product=product)
            )

    category_hits = []
    for oc in view.categories:
        score = score_category(oc.category, term)
        if score > 0:
            category_hits.append(
                SearchHit(
                    type="category",
                    id=oc.category.id,
                    name=oc.category.name,
                    relevance_score=score,
                    category=oc.category,
                )
            )

    hits = _order_hits(product_hits + category_hits, SearchSortBy(sort_by))
    if limit:
        hits = hits[:limit]

    return SearchResult(
        results=hits,
        total_results=len(hits),
        search_term=search_term,
        product_count=len(product_hits),
        category_count=len(category_hits),
    )


# ---------------------------------------------------------------------------
# Convenience queries
# ---------------------------------------------------------------------------


def get_featured_products(snapshot: Snapshot, limit: int = DEFAULT_MENU_CONFIG.featured_limit) -> list[Product]:
    active = [p for p in snapshot.products if p.is_active]
    return sort_products(active, SortBy.popularity).products[:limit]


def get_products_by_category(
    snapshot: Snapshot,
    category_id: str,
    menu_filter: MenuFilter | None = None,
    limit: int | None = None,
) -> list[Product]:
    if not any(c.id == category_id for c in snapshot.categories):
        raise CategoryNotFoundError(category_id)

    scoped = (menu_filter or MenuFilter()).model_copy(update={"category_id": category_id, "category_ids": []})
    view = query_menu(snapshot, scoped)
    products = view.categories[0].products if view.categories else []
    return products[:limit] if limit else products


def get_products_by_tags(
    snapshot: Snapshot,
    tag_filter: TagFilter,
    category_id: str | None = None,
    sort_by: SortBy | None = None,
    sort_order: SortOrder = SortOrder.asc,
    limit: int | None = None,
) -> list[Product]:
    menu_filter = MenuFilter(category_id=category_id, **tag_filter.model_dump())
    products = _flatten(query_menu(snapshot, menu_filter))

    result = sort_products(products, sort_by, sort_order, anchor_category_id=category_id)
    if result.fallback:
        logger.info("Tag query kept catalog order: %s", result.fallback)
    return result.products[:limit] if limit else result.products
