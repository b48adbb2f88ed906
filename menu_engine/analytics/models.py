from __future__ import annotations

from pydantic import BaseModel, Field


class PriceDistribution(BaseModel):
    min: int
    max: int
    mean: float
    median: float
    count: int


class TagUsage(BaseModel):
    tag_id: str
    count: int


class TagStatistics(BaseModel):
    total_unique_tags: int = 0
    average_tags_per_product: float = 0.0
    most_used: list[TagUsage] = Field(default_factory=list)


class NutritionAverages(BaseModel):
    products_with_nutrition_info: int
    average_calories: int
    average_protein: int
    average_fat: int
    average_carbohydrates: int


class CategoryDistribution(BaseModel):
    category_id: str
    category_name: str
    product_count: int
    active_product_count: int
    average_price: float | None = None


class MenuStatistics(BaseModel):
    total_products: int = 0
    active_products: int = 0
    inactive_products: int = 0
    total_categories: int = 0
    categories_with_products: int = 0
    empty_categories: int = 0
    uncategorized_products: int = 0
    average_products_per_category: float = 0.0
    price: PriceDistribution | None = None
    tags: TagStatistics = Field(default_factory=TagStatistics)
    nutrition: NutritionAverages | None = None
    category_distribution: list[CategoryDistribution] = Field(default_factory=list)


class ValidationReport(BaseModel):
    is_valid: bool
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
