from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class Channel(str, Enum):
    delivery = "DELIVERY"
    pickup = "PICKUP"


class SortBy(str, Enum):
    name = "name"
    price = "price"
    popularity = "popularity"
    priority = "priority"
    category = "category"
    category_priority = "category_priority"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


# ── Binds ────────────────────────────────────────────────────────────────


class CategoryBind(_Record):
    category_id: str
    priority: int = 0


class TagBind(_Record):
    tag_id: str
    priority: int = 0


class AvailabilityBind(_Record):
    outlet_id: str
    channel: Channel


# ── Catalog records ──────────────────────────────────────────────────────


class Nutrition(_Record):
    calories: int | None = None
    protein: int | None = None
    fat: int | None = None
    carbohydrates: int | None = None

    def populated(self) -> dict[str, int]:
        """Return only the nutrients that carry a value."""
        return {k: v for k, v in self.model_dump().items() if v is not None}


class ProductImage(_Record):
    url: str
    file_id: str | None = None
    priority: int = 0


class Tag(_Record):
    id: str
    name: str


class Product(_Record):
    id: str
    name: str
    slug: str = ""
    description: str | None = None
    is_active: bool = True
    price: int | None = Field(
        default=None, description="Minor currency units; None when not priced for the context"
    )
    priority: int | None = None
    nutrition: Nutrition = Field(default_factory=Nutrition)
    tags: list[TagBind] = Field(default_factory=list)
    category_binds: list[CategoryBind] = Field(default_factory=list)
    availability_binds: list[AvailabilityBind] = Field(default_factory=list)
    images: list[ProductImage] = Field(default_factory=list)

    @property
    def tag_ids(self) -> set[str]:
        return {t.tag_id for t in self.tags}

    def category_priority(self, category_id: str) -> int | None:
        for bind in self.category_binds:
            if bind.category_id == category_id:
                return bind.priority
        return None


class Category(_Record):
    id: str
    name: str
    slug: str = ""
    priority: int = 0
    is_active: bool = True
    parent_id: str | None = None
    image_url: str | None = None
    availability_binds: list[AvailabilityBind] = Field(default_factory=list)


class Snapshot(_Record):
    categories: list[Category] = Field(default_factory=list)
    products: list[Product] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)

    def tag_index(self) -> dict[str, Tag]:
        return {t.id: t for t in self.tags}


# ── Derived views ────────────────────────────────────────────────────────


class OrganizedCategory(_Record):
    category: Category
    products: list[Product] = Field(default_factory=list)


class OrganizedMenu(_Record):
    organized: list[OrganizedCategory] = Field(default_factory=list)
    uncategorized: list[Product] = Field(default_factory=list)

    def all_products(self) -> list[Product]:
        """Distinct products of the view, first occurrence order."""
        seen: set[str] = set()
        out: list[Product] = []
        for product in [p for oc in self.organized for p in oc.products] + self.uncategorized:
            if product.id not in seen:
                seen.add(product.id)
                out.append(product)
        return out


# ── Request value objects ────────────────────────────────────────────────


class PriceRange(_Record):
    min: int | None = None
    max: int | None = None


class MenuFilter(_Record):
    search_term: str | None = None
    category_id: str | None = None
    category_ids: list[str] = Field(default_factory=list)
    tag_ids: list[str] = Field(
        default_factory=list, description="Legacy alias evaluated with ANY semantics"
    )
    tags_id_all: list[str] = Field(default_factory=list)
    tags_id_any: list[str] = Field(default_factory=list)
    tags_id_not_all: list[str] = Field(default_factory=list)
    tags_id_not_any: list[str] = Field(default_factory=list)
    price_range: PriceRange | None = None
    sort_by: SortBy | None = None
    sort_order: SortOrder = SortOrder.asc
    sort_by_category_id: str | None = Field(
        default=None, description="Anchor category for category-priority sorting"
    )
