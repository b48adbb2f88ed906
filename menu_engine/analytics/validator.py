from __future__ import annotations

from typing import Callable

from ..catalog.models import OrganizedMenu
from .models import ValidationReport

# code -> (count over the view, issue message, recommendation)
_CHECKS: list[tuple[str, Callable[[OrganizedMenu], int], str, str]] = [
    (
        "empty_categories",
        lambda m: sum(1 for oc in m.organized if not oc.products),
        "{n} categories have no products",
        "Consider removing empty categories or adding products to them",
    ),
    (
        "uncategorized_products",
        lambda m: len(m.uncategorized),
        "{n} products are not categorized",
        "Assign uncategorized products to appropriate categories",
    ),
    (
        "missing_price",
        lambda m: sum(1 for p in m.all_products() if p.price is None),
        "{n} products are missing price information",
        "Add pricing information to all products",
    ),
    (
        "missing_images",
        lambda m: sum(1 for p in m.all_products() if not p.images),
        "{n} products are missing images",
        "Add high-quality images to improve product presentation",
    ),
]


def validate_menu(menu: OrganizedMenu) -> ValidationReport:
    """Run the structural health checks; every finding carries exactly one recommendation."""
    issues: list[str] = []
    recommendations: list[str] = []
    for _code, count, message, recommendation in _CHECKS:
        n = count(menu)
        if n > 0:
            issues.append(message.format(n=n))
            recommendations.append(recommendation)

    return ValidationReport(
        is_valid=not issues,
        issues=issues,
        recommendations=recommendations,
    )
