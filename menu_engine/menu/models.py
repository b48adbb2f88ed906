from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from ..catalog.models import (
    Category,
    MenuFilter,
    OrganizedCategory,
    Product,
    SortBy,
    SortOrder,
)


class SortResult(BaseModel):
    products: list[Product] = Field(default_factory=list)
    sort_by: SortBy | None = None
    sort_order: SortOrder = SortOrder.asc
    fallback: str | None = Field(
        default=None, description="Why the requested strategy could not be applied"
    )


class MenuView(BaseModel):
    categories: list[OrganizedCategory] = Field(default_factory=list)
    uncategorized: list[Product] = Field(default_factory=list)
    total_products: int = 0
    total_categories: int = 0
    sort_fallback: str | None = None
    applied_filter: MenuFilter | None = None


class TagFilter(BaseModel):
    tags_id_all: list[str] = Field(default_factory=list)
    tags_id_any: list[str] = Field(default_factory=list)
    tags_id_not_all: list[str] = Field(default_factory=list)
    tags_id_not_any: list[str] = Field(default_factory=list)


class SearchSortBy(str, Enum):
    relevance = "relevance"
    name = "name"
    price = "price"


class SearchRequest(BaseModel):
    search_term: str = Field(..., min_length=1, max_length=200)
    limit: int | None = Field(default=None, ge=1, le=200)
    category_id: str | None = None
    tag_filter: TagFilter | None = None
    sort_by: SearchSortBy = SearchSortBy.relevance


class SearchHit(BaseModel):
    type: Literal["product", "category"]
    id: str
    name: str
    relevance_score: int
    product: Product | None = None
    category: Category | None = None


class SearchResult(BaseModel):
    results: list[SearchHit] = Field(default_factory=list)
    total_results: int = 0
    search_term: str
    product_count: int = 0
    category_count: int = 0
