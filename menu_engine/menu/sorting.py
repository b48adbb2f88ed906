from __future__ import annotations

import logging
import unicodedata
from typing import Any, Callable, Sequence

from ..catalog.models import Product, SortBy, SortOrder
from .models import SortResult

logger = logging.getLogger(__name__)

MISSING_ANCHOR = "missing_anchor_category"


def collation_key(text: str) -> str:
    """Case-insensitive, accent-aware key independent of the process locale."""
    return unicodedata.normalize("NFKD", text).casefold()


def _name_key(product: Product) -> str:
    return collation_key(product.name)


def _price_key(product: Product) -> int:
    return product.price or 0


def _popularity_key(product: Product) -> int:
    # Higher priority first in ascending order
    return -(product.priority or 0)


def _anchor_key(anchor_category_id: str, descending: bool) -> Callable[[Product], Any]:
    def key(product: Product) -> tuple[int, int]:
        priority = product.category_priority(anchor_category_id)
        # Products without a bind to the anchor always go last
        if priority is None:
            return (1, 0)
        return (0, -priority if descending else priority)

    return key


_KEYS: dict[SortBy, Callable[[Product], Any]] = {
    SortBy.name: _name_key,
    SortBy.price: _price_key,
    SortBy.popularity: _popularity_key,
    SortBy.priority: _popularity_key,
}


def sort_products(
    products: Sequence[Product],
    sort_by: SortBy | str | None,
    sort_order: SortOrder | str = SortOrder.asc,
    anchor_category_id: str | None = None,
) -> SortResult:
    """
    Stable sort of a product list.

    Equal keys keep input order in both directions. Category-priority
    strategies need ``anchor_category_id``; without it the input order is
    returned and ``fallback`` explains why.
    """
    sort_order = SortOrder(sort_order or SortOrder.asc)
    items = list(products)

    if sort_by is None:
        return SortResult(products=items, sort_by=None, sort_order=sort_order)

    sort_by = SortBy(sort_by)
    descending = sort_order == SortOrder.desc

    if sort_by in (SortBy.category, SortBy.category_priority):
        if not anchor_category_id:
            logger.warning(
                "Sort by %s requested without an anchor category, keeping input order",
                sort_by.value,
            )
            return SortResult(
                products=items,
                sort_by=sort_by,
                sort_order=sort_order,
                fallback=MISSING_ANCHOR,
            )
        ordered = sorted(items, key=_anchor_key(anchor_category_id, descending))
        return SortResult(products=ordered, sort_by=sort_by, sort_order=sort_order)

    # sorted(reverse=True) keeps equal elements in input order
    ordered = sorted(items, key=_KEYS[sort_by], reverse=descending)
    return SortResult(products=ordered, sort_by=sort_by, sort_order=sort_order)
