from __future__ import annotations

from menu_engine.analytics.statistics import compute_statistics, price_distribution, round_half_up
from menu_engine.catalog.models import (
    Category,
    CategoryBind,
    MenuFilter,
    Nutrition,
    PriceRange,
    Product,
    TagBind,
)
from menu_engine.menu.filters import apply_filters
from menu_engine.menu.organizer import organize


def _product(pid, categories=(), price=None, active=True, tags=(), nutrition=None):
    return Product(
        id=pid,
        name=pid,
        price=price,
        is_active=active,
        tags=[TagBind(tag_id=t) for t in tags],
        category_binds=[CategoryBind(category_id=c) for c in categories],
        nutrition=nutrition or Nutrition(),
    )


def _menu():
    cats = [
        Category(id="pizza", name="Pizza"),
        Category(id="drinks", name="Drinks"),
        Category(id="desserts", name="Desserts"),
    ]
    prods = [
        _product("m", ["pizza"], 500, tags=["A", "C"], nutrition=Nutrition(calories=800, protein=30)),
        _product("d", ["pizza"], 700, active=False, tags=["B", "C"]),
        _product("l", ["pizza", "drinks"], 300, tags=["C"]),
        _product("w", ["drinks"], None),
        _product("b", [], 0, tags=["A"], nutrition=Nutrition(fat=10)),
    ]
    return organize(cats, prods)


def test_empty_menu():
    stats = compute_statistics(organize([], []))
    assert stats.total_products == 0
    assert stats.total_categories == 0
    assert stats.average_products_per_category == 0.0
    assert stats.price is None
    assert stats.nutrition is None
    assert stats.tags.total_unique_tags == 0
    assert stats.tags.average_tags_per_product == 0.0


def test_counts():
    stats = compute_statistics(_menu())
    assert stats.total_products == 5
    assert stats.active_products == 4
    assert stats.inactive_products == 1
    assert stats.total_categories == 3
    assert stats.categories_with_products == 2
    assert stats.empty_categories == 1
    assert stats.uncategorized_products == 1


def test_products_per_category_ignores_empty_categories():
    # pizza holds 3, drinks holds 2 (the lemonade counts in both)
    assert compute_statistics(_menu()).average_products_per_category == 2.5


def test_price_distribution_ignores_missing_and_zero():
    price = compute_statistics(_menu()).price
    assert price.min == 300
    assert price.max == 700
    assert price.mean == 500.0
    assert price.median == 500.0
    assert price.count == 3


def test_price_distribution_none_without_prices():
    assert price_distribution([_product("x"), _product("y", price=0)]) is None


def test_tag_statistics():
    tags = compute_statistics(_menu()).tags
    assert tags.total_unique_tags == 3
    assert tags.average_tags_per_product == 1.2
    assert [(t.tag_id, t.count) for t in tags.most_used] == [("C", 3), ("A", 2), ("B", 1)]


def test_top_tags_capped_at_ten():
    prods = [_product(f"p{i}", tags=[f"t{i}"]) for i in range(15)]
    assert len(compute_statistics(organize([], prods)).tags.most_used) == 10


def test_nutrition_averages_over_products_with_info():
    nutrition = compute_statistics(_menu()).nutrition
    assert nutrition.products_with_nutrition_info == 2
    assert nutrition.average_calories == 400
    assert nutrition.average_protein == 15
    assert nutrition.average_fat == 5
    assert nutrition.average_carbohydrates == 0


def test_category_distribution():
    dist = {d.category_id: d for d in compute_statistics(_menu()).category_distribution}
    assert dist["pizza"].product_count == 3
    assert dist["pizza"].active_product_count == 2
    assert dist["pizza"].average_price == 500.0
    assert dist["drinks"].average_price == 300.0
    assert dist["desserts"].product_count == 0
    assert dist["desserts"].average_price is None


def test_statistics_do_not_touch_menu():
    menu = _menu()
    before = menu.model_dump()
    compute_statistics(menu)
    assert menu.model_dump() == before


def test_filtered_view_matches_view_of_survivors():
    menu = _menu()
    filtered = apply_filters(menu, MenuFilter(tags_id_any=["C"], price_range=PriceRange(max=600)))
    survivors = filtered.all_products()
    assert [p.id for p in survivors] == ["m", "l"]

    rebuilt = organize([oc.category for oc in menu.organized], survivors)
    assert compute_statistics(filtered) == compute_statistics(rebuilt)


def test_repeated_calls_agree():
    menu = _menu()
    assert compute_statistics(menu) == compute_statistics(menu)


def test_halves_round_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(0.125, 2) == 0.13


def test_nutrition_half_average_rounds_up():
    prods = [
        _product("a", nutrition=Nutrition(calories=2, protein=1)),
        _product("b", nutrition=Nutrition(calories=3, protein=0)),
    ]
    nutrition = compute_statistics(organize([], prods)).nutrition
    assert nutrition.average_calories == 3
    assert nutrition.average_protein == 1
