"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.enrichment import EnrichmentConfig, EnrichmentStats
from models.packing import (
    RawRecommendation,
    RawPackingItem,
    RawCategory,
    RawPackingList,
    ResolvedRecommendation,
    PackingItem,
    Category,
    PackingList,
    TripRequest,
)

__all__ = [
    # Base
    "BaseSchema",

    # Enrichment
    "EnrichmentConfig",
    "EnrichmentStats",

    # Packing lists
    "RawRecommendation",
    "RawPackingItem",
    "RawCategory",
    "RawPackingList",
    "ResolvedRecommendation",
    "PackingItem",
    "Category",
    "PackingList",
    "TripRequest",
]
