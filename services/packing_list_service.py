"""
Packing list service — generate, validate, enrich.

Upstream failures (LLM error, unparseable response) propagate as
AppError subclasses; no partial list is ever returned. Failures during
enrichment are absorbed per recommendation by EnrichmentService.
"""

from typing import Optional
import structlog

from exceptions import PackingListParseError
from models.packing import PackingList, RawPackingList, TripRequest
from parsers.packing_list_parser import parse_packing_list
from services.catalog_service import CatalogService, get_catalog_service
from services.enrichment_service import EnrichmentService
from services.recommendation_source_service import (
    RecommendationSourceService,
    get_recommendation_source_service,
)

logger = structlog.get_logger(__name__)


class PackingListService:
    """Request-level orchestration for packing lists."""

    def __init__(
        self,
        source: Optional[RecommendationSourceService] = None,
        enrichment: Optional[EnrichmentService] = None,
        catalog: Optional[CatalogService] = None,
    ):
        self.source = source or get_recommendation_source_service()
        self.catalog = catalog if catalog is not None else get_catalog_service()
        self.enrichment = enrichment or EnrichmentService(catalog=self.catalog)

    async def generate(self, trip: TripRequest) -> PackingList:
        """
        Generate an enriched packing list for a trip.

        Raises:
            RecommendationSourceError: LLM call failed
            PackingListParseError: LLM output is not a valid packing list
        """
        catalog_keys = self.catalog.keys() if self.enrichment.config.use_catalog else None
        text = await self.source.generate(trip, catalog_keys)

        result = parse_packing_list(text)
        if not result.success:
            raise PackingListParseError(result.errors_to_dicts())

        return await self.enrich(result.packing_list)

    async def enrich(self, packing_list: RawPackingList) -> PackingList:
        """Attach affiliate links to an already generated packing list."""
        enriched, stats = await self.enrichment.enrich_with_stats(packing_list)
        logger.info(
            "packing_list_ready",
            categories=len(enriched.categories),
            recommendations=stats.total,
            resolved=stats.resolved,
            fallbacks=stats.fallbacks
        )
        return enriched


def get_packing_list_service() -> PackingListService:
    """Create a PackingListService configured from settings."""
    return PackingListService()
