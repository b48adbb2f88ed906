from __future__ import annotations

from typing import Mapping

from ..catalog.models import Category, Product, Tag
from .config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .filters import normalize_term, tag_names


def _text_score(product: Product, term: str, tags: Mapping[str, Tag] | None, cfg: ScoringConfig) -> int:
    score = 0

    name = product.name.lower()
    if name == term:
        score += cfg.name_exact
    elif name.startswith(term):
        score += cfg.name_prefix
    elif term in name:
        score += cfg.name_contains

    slug = product.slug.lower()
    slug_words = slug.replace("-", " ")
    if term in (slug, slug_words):
        score += cfg.slug_exact
    elif term in slug or term in slug_words:
        score += cfg.slug_contains

    if product.description and term in product.description.lower():
        score += cfg.description_contains

    names = tag_names(product, tags)
    if any(n == term for n in names):
        score += cfg.tag_exact
    elif any(term in n for n in names):
        score += cfg.tag_contains

    return score


def _nutrition_score(product: Product, term: str, cfg: ScoringConfig) -> int:
    populated = product.nutrition.populated()
    score = 0
    for nutrient, keywords in cfg.nutrition_keywords.items():
        if nutrient in populated and any(k in term for k in keywords):
            score += cfg.nutrition_match
    return score


def score_product(
    product: Product,
    term: str,
    tags: Mapping[str, Tag] | None = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> int:
    """
    Additive relevance of ``product`` for a search term.

    The term is normalized here, so raw user input is accepted. The active
    boost only applies to a product that already matched, so a score of 0
    always means "no match".
    """
    term = normalize_term(term)
    if not term:
        return 0

    score = _text_score(product, term, tags, config) + _nutrition_score(product, term, config)
    if score and product.is_active:
        score += config.active_boost
    return score


def score_category(
    category: Category,
    term: str,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> int:
    term = normalize_term(term)
    if not term:
        return 0

    name = category.name.lower()
    if name == term:
        return config.category_exact
    if name.startswith(term):
        return config.category_prefix
    if term in name:
        return config.category_contains
    return 0
