from __future__ import annotations

from menu_engine.analytics.validator import validate_menu
from menu_engine.catalog.models import Category, CategoryBind, Product, ProductImage
from menu_engine.menu.organizer import organize

IMAGE = ProductImage(url="https://cdn.example.com/x.jpg")


def _product(pid, category=None, price=100, images=(IMAGE,)):
    return Product(
        id=pid,
        name=pid,
        price=price,
        images=list(images),
        category_binds=[CategoryBind(category_id=category)] if category else [],
    )


def test_healthy_menu_is_valid():
    menu = organize([Category(id="pizza", name="Pizza")], [_product("p", "pizza")])
    report = validate_menu(menu)
    assert report.is_valid
    assert report.issues == []
    assert report.recommendations == []


def test_empty_menu_is_valid():
    assert validate_menu(organize([], [])).is_valid


def test_all_findings_in_order():
    cats = [Category(id="pizza", name="Pizza"), Category(id="desserts", name="Desserts")]
    prods = [
        _product("p", "pizza", price=None),
        _product("loose", price=None, images=()),
        _product("bare", "pizza", images=()),
    ]
    report = validate_menu(organize(cats, prods))

    assert not report.is_valid
    assert report.issues == [
        "1 categories have no products",
        "1 products are not categorized",
        "2 products are missing price information",
        "2 products are missing images",
    ]
    assert report.recommendations == [
        "Consider removing empty categories or adding products to them",
        "Assign uncategorized products to appropriate categories",
        "Add pricing information to all products",
        "Add high-quality images to improve product presentation",
    ]


def test_zero_price_is_not_missing():
    menu = organize([Category(id="c", name="C")], [_product("free", "c", price=0)])
    assert validate_menu(menu).is_valid


def test_product_in_two_categories_counted_once():
    cats = [Category(id="a", name="A"), Category(id="b", name="B")]
    p = Product(
        id="p",
        name="p",
        category_binds=[CategoryBind(category_id="a"), CategoryBind(category_id="b")],
        images=[IMAGE],
    )
    assert validate_menu(organize(cats, [p])).issues == ["1 products are missing price information"]
