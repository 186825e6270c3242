"""
Packing list schemas.

Raw* models describe what the recommendation source (LLM) returns.
The resolved models are what the API sends back, with an Amazon
affiliate link attached to every product recommendation.

Wire format is camelCase (affiliateLink, startDate, ...); attributes
are snake_case. Both spellings are accepted on input.
"""

from datetime import date
from typing import Optional

from pydantic import ConfigDict, Field, model_validator

from models.base import BaseSchema


class PackingSchema(BaseSchema):
    """Base for packing list models: immutable, alias-aware."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
    )


# ===================
# RECOMMENDATION SOURCE OUTPUT
# ===================

class RawRecommendation(PackingSchema):
    """Unresolved product suggestion."""

    name: str = Field(..., min_length=1)
    description: str = ""
    product_key: Optional[str] = Field(
        None,
        alias="productKey",
        description="Optional key into the static product catalog"
    )


class RawPackingItem(PackingSchema):
    name: str = Field(..., min_length=1)
    description: str = ""
    recommendations: list[RawRecommendation] = Field(default_factory=list)


class RawCategory(PackingSchema):
    name: str = Field(..., min_length=1)
    items: list[RawPackingItem] = Field(default_factory=list)


class RawPackingList(PackingSchema):
    categories: list[RawCategory] = Field(default_factory=list)

    @property
    def recommendation_count(self) -> int:
        return sum(
            len(item.recommendations)
            for category in self.categories
            for item in category.items
        )


# ===================
# ENRICHED OUTPUT
# ===================

class ResolvedRecommendation(PackingSchema):
    """Product suggestion with a purchase link attached."""

    name: str
    description: str = ""
    affiliate_link: str = Field(..., alias="affiliateLink", min_length=1)


class PackingItem(PackingSchema):
    name: str
    description: str = ""
    recommendations: list[ResolvedRecommendation] = Field(default_factory=list)


class Category(PackingSchema):
    name: str
    items: list[PackingItem] = Field(default_factory=list)


class PackingList(PackingSchema):
    categories: list[Category] = Field(default_factory=list)

    @property
    def recommendation_count(self) -> int:
        return sum(
            len(item.recommendations)
            for category in self.categories
            for item in category.items
        )


# ===================
# REQUEST
# ===================

class TripRequest(PackingSchema):
    """Trip parameters submitted by the traveler."""

    location: str = Field(..., min_length=1, max_length=200)
    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")
    activities: Optional[str] = Field(None, max_length=1000)
    gender: Optional[str] = Field(None, max_length=50)
    price_range: Optional[str] = Field(None, alias="priceRange", max_length=50)

    @model_validator(mode="after")
    def check_date_range(self) -> "TripRequest":
        if self.end_date < self.start_date:
            raise ValueError("endDate must be on or after startDate")
        return self

    @property
    def duration_days(self) -> int:
        """Trip length in days, counting both ends."""
        return (self.end_date - self.start_date).days + 1
