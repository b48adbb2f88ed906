from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping

from ..catalog.models import (
    Category,
    MenuFilter,
    OrganizedCategory,
    OrganizedMenu,
    PriceRange,
    Product,
    Tag,
)

ProductPredicate = Callable[[Product], bool]
CategoryPredicate = Callable[[Category], bool]


def normalize_term(term: str | None) -> str:
    return (term or "").strip().lower()


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def _slug_forms(slug: str) -> tuple[str, str]:
    lowered = slug.lower()
    return lowered, lowered.replace("-", " ")


def tag_names(product: Product, tags: Mapping[str, Tag] | None) -> list[str]:
    if not tags:
        return []
    return [tags[b.tag_id].name.lower() for b in product.tags if b.tag_id in tags]


def matches_search_term(
    product: Product,
    term: str,
    tags: Mapping[str, Tag] | None = None,
) -> bool:
    """Substring match of an already normalized term on name, slug, description or tag names."""
    if not term:
        return True
    if term in product.name.lower():
        return True
    if any(term in form for form in _slug_forms(product.slug)):
        return True
    if product.description and term in product.description.lower():
        return True
    return any(term in name for name in tag_names(product, tags))


def matches_tag_sets(product: Product, menu_filter: MenuFilter) -> bool:
    present = product.tag_ids

    for any_of in (menu_filter.tag_ids, menu_filter.tags_id_any):
        if any_of and present.isdisjoint(any_of):
            return False
    if menu_filter.tags_id_all and not present.issuperset(menu_filter.tags_id_all):
        return False
    if menu_filter.tags_id_not_all and present.issuperset(menu_filter.tags_id_not_all):
        return False
    if menu_filter.tags_id_not_any and not present.isdisjoint(menu_filter.tags_id_not_any):
        return False
    return True


def _is_inverted(price_range: PriceRange) -> bool:
    return price_range.min is not None and price_range.max is not None and price_range.min > price_range.max


def matches_price_range(product: Product, price_range: PriceRange | None) -> bool:
    if price_range is None:
        return True
    # An inverted range matches nothing, priced or not
    if _is_inverted(price_range):
        return False
    # Unpriced products carry nothing to compare, so they pass
    if product.price is None:
        return True
    if price_range.min is not None and product.price < price_range.min:
        return False
    if price_range.max is not None and product.price > price_range.max:
        return False
    return True


def _has_tag_constraint(f: MenuFilter) -> bool:
    return bool(f.tag_ids or f.tags_id_all or f.tags_id_any or f.tags_id_not_all or f.tags_id_not_any)


def _has_category_scope(f: MenuFilter) -> bool:
    return bool(f.category_id or f.category_ids)


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FilterStage:
    """
    One filter dimension.

    ``applies`` decides whether the dimension is present in the filter.
    A stage narrows products, categories, or both.
    """

    name: str
    applies: Callable[[MenuFilter], bool]
    product_predicate: Callable[[MenuFilter, Mapping[str, Tag] | None], ProductPredicate] | None = None
    category_predicate: Callable[[MenuFilter], CategoryPredicate] | None = None
    clears_uncategorized: bool = False


def _search_predicate(f: MenuFilter, tags: Mapping[str, Tag] | None) -> ProductPredicate:
    term = normalize_term(f.search_term)
    return lambda p: matches_search_term(p, term, tags)


def _category_scope_predicate(f: MenuFilter) -> CategoryPredicate:
    wanted = set(f.category_ids)

    def keep(category: Category) -> bool:
        if f.category_id and category.id != f.category_id:
            return False
        if wanted and category.id not in wanted:
            return False
        return True

    return keep


# Reference order: search, category scope, tag sets, price range.
STAGES: list[FilterStage] = [
    FilterStage(
        name="search",
        applies=lambda f: bool(normalize_term(f.search_term)),
        product_predicate=_search_predicate,
    ),
    FilterStage(
        name="category_scope",
        applies=_has_category_scope,
        category_predicate=_category_scope_predicate,
        clears_uncategorized=True,
    ),
    FilterStage(
        name="tag_sets",
        applies=_has_tag_constraint,
        product_predicate=lambda f, _tags: (lambda p: matches_tag_sets(p, f)),
    ),
    FilterStage(
        name="price_range",
        applies=lambda f: f.price_range is not None,
        product_predicate=lambda f, _tags: (lambda p: matches_price_range(p, f.price_range)),
    ),
]


def active_stages(menu_filter: MenuFilter | None) -> list[FilterStage]:
    if menu_filter is None:
        return []
    return [stage for stage in STAGES if stage.applies(menu_filter)]


def _apply_stage(
    menu: OrganizedMenu,
    stage: FilterStage,
    menu_filter: MenuFilter,
    tags: Mapping[str, Tag] | None,
) -> OrganizedMenu:
    organized = list(menu.organized)
    uncategorized = list(menu.uncategorized)

    if stage.category_predicate is not None:
        keep_category = stage.category_predicate(menu_filter)
        organized = [oc for oc in organized if keep_category(oc.category)]

    if stage.product_predicate is not None:
        keep_product = stage.product_predicate(menu_filter, tags)
        organized = [
            OrganizedCategory(
                category=oc.category,
                products=[p for p in oc.products if keep_product(p)],
            )
            for oc in organized
        ]
        uncategorized = [p for p in uncategorized if keep_product(p)]

    if stage.clears_uncategorized:
        uncategorized = []

    return OrganizedMenu(organized=organized, uncategorized=uncategorized)


def apply_filters(
    menu: OrganizedMenu,
    menu_filter: MenuFilter | None,
    tags: Mapping[str, Tag] | None = None,
) -> OrganizedMenu:
    """
    Narrow an organized view by every dimension present in ``menu_filter``.

    Dimensions combine by AND. When a search term is present, categories
    left without products are dropped once every stage has run, so the
    result does not depend on stage order.
    """
    stages = active_stages(menu_filter)
    result = OrganizedMenu(organized=list(menu.organized), uncategorized=list(menu.uncategorized))
    for stage in stages:
        result = _apply_stage(result, stage, menu_filter, tags)

    if any(stage.name == "search" for stage in stages):
        result = OrganizedMenu(
            organized=[oc for oc in result.organized if oc.products],
            uncategorized=result.uncategorized,
        )
    return result
