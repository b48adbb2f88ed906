from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScoringConfig:
    """
    Point table for search relevance. Points add up across rules.
    """

    name_exact: int = 100
    name_prefix: int = 80
    name_contains: int = 60
    slug_exact: int = 90
    slug_contains: int = 50
    description_contains: int = 30
    tag_exact: int = 70
    tag_contains: int = 40
    active_boost: int = 10
    nutrition_match: int = 20

    category_exact: int = 90
    category_prefix: int = 70
    category_contains: int = 50

    # nutrient -> keywords looked up as substrings of the search term
    nutrition_keywords: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: {
            "calories": ("calor", "kcal", "калори"),
            "protein": ("protein", "белок", "белк"),
            "fat": ("fat", "жир"),
            "carbohydrates": ("carb", "углевод"),
        }
    )


@dataclass(frozen=True)
class MenuConfig:
    featured_limit: int = 6
    max_hierarchy_depth: int = 5


DEFAULT_SCORING_CONFIG = ScoringConfig()
DEFAULT_MENU_CONFIG = MenuConfig()
