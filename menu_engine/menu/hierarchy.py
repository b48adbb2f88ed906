from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel, Field

from ..catalog.models import Category, OrganizedMenu
from .config import DEFAULT_MENU_CONFIG


class CategoryNode(BaseModel):
    id: str
    name: str
    slug: str
    priority: int
    is_active: bool
    level: int
    product_count: int = 0
    children: list[CategoryNode] = Field(default_factory=list)


class HierarchyReport(BaseModel):
    is_valid: bool
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    total_categories: int = 0
    root_categories: int = 0
    max_depth: int = 0
    orphaned_count: int = 0


def _product_counts(menu: OrganizedMenu | None) -> dict[str, int]:
    if menu is None:
        return {}
    return {oc.category.id: len(oc.products) for oc in menu.organized}


def build_hierarchy(
    categories: Sequence[Category],
    menu: OrganizedMenu | None = None,
    max_depth: int | None = None,
) -> list[CategoryNode]:
    """
    Nest categories under their parents.

    Roots are categories without a parent. Siblings are ordered by
    priority, ties by input order. Self-parented categories and orphans
    never appear. Cycles are cut by tracking visited ids.
    """
    counts = _product_counts(menu)
    children: dict[str | None, list[Category]] = {}
    for category in categories:
        children.setdefault(category.parent_id, []).append(category)

    def build(parent_id: str | None, level: int, visited: frozenset[str]) -> list[CategoryNode]:
        if max_depth is not None and level >= max_depth:
            return []
        siblings = sorted(children.get(parent_id, []), key=lambda c: c.priority)
        return [
            CategoryNode(
                id=c.id,
                name=c.name,
                slug=c.slug,
                priority=c.priority,
                is_active=c.is_active,
                level=level,
                product_count=counts.get(c.id, 0),
                children=build(c.id, level + 1, visited | {c.id}),
            )
            for c in siblings
            if c.id not in visited and c.id != parent_id
        ]

    return build(None, 0, frozenset())


def hierarchy_depth(nodes: Sequence[CategoryNode]) -> int:
    if not nodes:
        return 0
    return max(1 + hierarchy_depth(n.children) for n in nodes)


_RECOMMENDATIONS = {
    "circular": "Fix circular references by updating parent category assignments",
    "orphaned": "Assign orphaned categories to valid parent categories or make them root categories",
    "too_deep": "Consider flattening the category structure to improve navigation",
}


def validate_hierarchy(
    categories: Sequence[Category],
    max_levels: int = DEFAULT_MENU_CONFIG.max_hierarchy_depth,
) -> HierarchyReport:
    ids = {c.id for c in categories}
    self_parented = [c for c in categories if c.parent_id == c.id]
    orphaned = [c for c in categories if c.parent_id and c.parent_id not in ids]

    roots = build_hierarchy(categories)
    depth = hierarchy_depth(roots)

    findings: list[tuple[str, str]] = []
    if self_parented:
        findings.append(
            ("circular", f"Found {len(self_parented)} circular references in category hierarchy")
        )
    if orphaned:
        findings.append(("orphaned", f"Found {len(orphaned)} orphaned categories"))
    if depth > max_levels:
        findings.append(("too_deep", f"Category hierarchy is too deep ({depth} levels)"))

    return HierarchyReport(
        is_valid=not findings,
        issues=[message for _, message in findings],
        recommendations=[_RECOMMENDATIONS[code] for code, _ in findings],
        total_categories=len(categories),
        root_categories=len(roots),
        max_depth=depth,
        orphaned_count=len(orphaned),
    )
