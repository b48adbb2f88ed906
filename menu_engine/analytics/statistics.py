from __future__ import annotations

from collections import Counter
from typing import Sequence

import numpy as np
import pandas as pd

from ..catalog.models import OrganizedMenu, Product
from .models import (
    CategoryDistribution,
    MenuStatistics,
    NutritionAverages,
    PriceDistribution,
    TagStatistics,
    TagUsage,
)

NUTRIENTS = ["calories", "protein", "fat", "carbohydrates"]
_TOP_TAGS = 10


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with exact halves going up: 2.5 -> 3, 0.125 -> 0.13 at two digits."""
    scale = 10**digits
    return float(np.floor(value * scale + 0.5) / scale)


def _product_frame(products: Sequence[Product]) -> pd.DataFrame:
    rows = [
        {
            "id": p.id,
            "is_active": p.is_active,
            "price": p.price,
            **p.nutrition.model_dump(),
        }
        for p in products
    ]
    df = pd.DataFrame(rows, columns=["id", "is_active", "price", *NUTRIENTS])
    for col in ["price", *NUTRIENTS]:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def _positive_prices(products: Sequence[Product]) -> np.ndarray:
    return np.array([p.price for p in products if p.price is not None and p.price > 0], dtype=float)


def price_distribution(products: Sequence[Product]) -> PriceDistribution | None:
    prices = _positive_prices(products)
    if prices.size == 0:
        return None
    return PriceDistribution(
        min=int(prices.min()),
        max=int(prices.max()),
        mean=round_half_up(float(prices.mean()), 2),
        median=round_half_up(float(np.median(prices)), 2),
        count=int(prices.size),
    )


def average_price(products: Sequence[Product]) -> float | None:
    prices = _positive_prices(products)
    if prices.size == 0:
        return None
    return round_half_up(float(prices.mean()), 2)


def _tag_statistics(products: Sequence[Product]) -> TagStatistics:
    usage: Counter[str] = Counter()
    for p in products:
        for bind in p.tags:
            usage[bind.tag_id] += 1

    total = sum(usage.values())
    return TagStatistics(
        total_unique_tags=len(usage),
        average_tags_per_product=round_half_up(total / len(products), 2) if products else 0.0,
        most_used=[TagUsage(tag_id=t, count=c) for t, c in usage.most_common(_TOP_TAGS)],
    )


def _nutrition_averages(df: pd.DataFrame) -> NutritionAverages | None:
    if df.empty:
        return None
    with_info = df.loc[df[NUTRIENTS].notna().any(axis=1), NUTRIENTS].fillna(0)
    if with_info.empty:
        return None
    means = with_info.mean()
    return NutritionAverages(
        products_with_nutrition_info=len(with_info),
        average_calories=int(round_half_up(means["calories"])),
        average_protein=int(round_half_up(means["protein"])),
        average_fat=int(round_half_up(means["fat"])),
        average_carbohydrates=int(round_half_up(means["carbohydrates"])),
    )


def compute_statistics(menu: OrganizedMenu) -> MenuStatistics:
    """
    Aggregate a (possibly filtered) organized view.

    A product bound to several categories is counted once in the product
    totals and once per category in the distribution.
    """
    products = menu.all_products()
    df = _product_frame(products)

    active = int(df["is_active"].astype(bool).sum()) if not df.empty else 0
    non_empty = [oc for oc in menu.organized if oc.products]
    per_category = (
        round_half_up(sum(len(oc.products) for oc in non_empty) / len(non_empty), 2) if non_empty else 0.0
    )

    distribution = [
        CategoryDistribution(
            category_id=oc.category.id,
            category_name=oc.category.name,
            product_count=len(oc.products),
            active_product_count=sum(1 for p in oc.products if p.is_active),
            average_price=average_price(oc.products),
        )
        for oc in menu.organized
    ]

    return MenuStatistics(
        total_products=len(products),
        active_products=active,
        inactive_products=len(products) - active,
        total_categories=len(menu.organized),
        categories_with_products=len(non_empty),
        empty_categories=len(menu.organized) - len(non_empty),
        uncategorized_products=len(menu.uncategorized),
        average_products_per_category=per_category,
        price=price_distribution(products),
        tags=_tag_statistics(products),
        nutrition=_nutrition_averages(df),
        category_distribution=distribution,
    )
