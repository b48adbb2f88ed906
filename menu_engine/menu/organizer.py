from __future__ import annotations

from collections import defaultdict
from typing import Sequence

from ..catalog.models import Category, OrganizedCategory, OrganizedMenu, Product


def organize(categories: Sequence[Category], products: Sequence[Product]) -> OrganizedMenu:
    """
    Join products to categories through their category binds.

    Each category keeps its bound products in product input order. Products
    with no binds at all go to ``uncategorized``. Products bound only to
    categories outside ``categories`` land in neither bucket.
    """
    by_category: dict[str, list[Product]] = defaultdict(list)
    uncategorized: list[Product] = []

    for product in products:
        if not product.category_binds:
            uncategorized.append(product)
            continue
        seen: set[str] = set()
        for bind in product.category_binds:
            if bind.category_id in seen:
                continue
            seen.add(bind.category_id)
            by_category[bind.category_id].append(product)

    organized = [
        OrganizedCategory(category=category, products=list(by_category.get(category.id, [])))
        for category in categories
    ]
    return OrganizedMenu(organized=organized, uncategorized=uncategorized)
