"""
Static product catalog.

Hand-picked products with known ASINs. The LLM may tag a
recommendation with a productKey; a hit here skips the live
Amazon search for that recommendation.
"""

from dataclasses import dataclass
from typing import Optional
import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    """Known Amazon product."""
    asin: str
    name: str
    description: str


# Keys are lowercase
PRODUCT_CATALOG: dict[str, CatalogEntry] = {
    # Clothing
    "uniqlo ultra light down jacket": CatalogEntry(
        asin="B07XBN5DXN",
        name="Ultra Light Down Jacket",
        description="Lightweight, packable down jacket perfect for layering",
    ),
    "columbia fleece jacket": CatalogEntry(
        asin="B009P5JSGO",
        name="Columbia Men's Steens Mountain Full Zip Fleece Jacket",
        description="Warm and comfortable fleece jacket for cool weather",
    ),

    # Travel gear
    "anker powercore": CatalogEntry(
        asin="B07S829LBX",
        name="Anker PowerCore 10000 Portable Charger",
        description="Ultra-compact 10000mAh power bank with PowerIQ technology",
    ),
    "travel adapter": CatalogEntry(
        asin="B07T66GG68",
        name="EPICKA Universal Travel Adapter",
        description="All-in-one international power adapter with USB ports",
    ),

    # Comfort
    "hydro flask": CatalogEntry(
        asin="B083GB6VGC",
        name="Hydro Flask Water Bottle with Flex Cap",
        description="Vacuum insulated stainless steel water bottle, keeps drinks cold for 24 hours",
    ),
    "neck pillow": CatalogEntry(
        asin="B07KRFQMS7",
        name="BCOZZY Chin Supporting Travel Pillow",
        description="Ergonomic neck pillow with chin support for comfortable travel",
    ),
}


class CatalogService:
    """Lookup of catalog entries by product key."""

    def __init__(self, entries: Optional[dict[str, CatalogEntry]] = None):
        source = PRODUCT_CATALOG if entries is None else entries
        self._entries = {self.normalize_key(k): v for k, v in source.items()}

    @staticmethod
    def normalize_key(key: Optional[str]) -> str:
        """Lowercase and collapse whitespace."""
        if not key:
            return ""
        return " ".join(key.lower().split())

    def lookup(self, product_key: Optional[str]) -> Optional[CatalogEntry]:
        """
        Find a catalog entry for a product key.

        Args:
            product_key: Key supplied by the recommendation source (any case)

        Returns:
            CatalogEntry, or None for a missing/unknown key
        """
        key = self.normalize_key(product_key)
        if not key:
            return None

        entry = self._entries.get(key)
        if entry:
            logger.debug("catalog_hit", product_key=key, asin=entry.asin)
        return entry

    def keys(self) -> list[str]:
        """All catalog keys, used to hint the recommendation source."""
        return sorted(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


# Singleton instance
_catalog_service: Optional[CatalogService] = None


def get_catalog_service() -> CatalogService:
    """Get or create CatalogService instance."""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = CatalogService()
    return _catalog_service
