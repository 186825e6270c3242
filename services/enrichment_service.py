"""
Enrichment service — attach Amazon affiliate links to a packing list.

For each recommendation:
    1. Catalog shortcut (productKey with a known ASIN)
    2. Live Amazon search for the ASIN
    3. Search-link fallback when neither finds one

Items are enriched concurrently; each item's recommendations go through
the batch scheduler, and a per-run semaphore caps outbound lookups at
batch_size in flight. A recommendation is never dropped: any failure
degrades it to a search link.
"""

import asyncio
from typing import Awaitable, Callable, Optional
import httpx
import structlog

from config import settings
from models.enrichment import EnrichmentConfig, EnrichmentStats
from models.packing import (
    Category,
    PackingItem,
    PackingList,
    RawPackingItem,
    RawPackingList,
    RawRecommendation,
    ResolvedRecommendation,
)
from services.affiliate_link_service import build_affiliate_link, build_search_link
from services.batch_scheduler import run_batched
from services.catalog_service import CatalogService, get_catalog_service
from services.product_resolver_service import ProductResolver

logger = structlog.get_logger(__name__)


class EnrichmentService:
    """
    Enrichment pipeline.

    Holds configuration only; every call to enrich() gets its own HTTP
    client, semaphore and stats, so concurrent requests don't share state.
    """

    def __init__(
        self,
        config: Optional[EnrichmentConfig] = None,
        catalog: Optional[CatalogService] = None,
        resolver: Optional[ProductResolver] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            config: Pipeline tunables (defaults from settings)
            catalog: Static catalog (defaults to the built-in one)
            resolver: ASIN resolver; when None, one is created per run
            sleep: Sleep used between batches (injectable for tests)
        """
        self.config = config if config is not None else settings.enrichment_config()
        self.catalog = catalog if catalog is not None else get_catalog_service()
        self.resolver = resolver
        self.sleep = sleep

    async def enrich(self, packing_list: RawPackingList) -> PackingList:
        """
        Attach an affiliate link to every recommendation.

        Returns a new list with the same categories, items and
        recommendations, in the same order. The input is not modified.
        """
        enriched, _ = await self.enrich_with_stats(packing_list)
        return enriched

    async def enrich_with_stats(
        self,
        packing_list: RawPackingList
    ) -> tuple[PackingList, EnrichmentStats]:
        """Same as enrich(), also returning how each link was resolved."""
        stats = EnrichmentStats()

        logger.info(
            "enrichment_started",
            categories=len(packing_list.categories),
            recommendations=packing_list.recommendation_count,
            batch_size=self.config.batch_size
        )

        if self.resolver is not None or not self.config.live_lookup:
            categories = await self._enrich_categories(packing_list, self.resolver, stats)
        else:
            async with httpx.AsyncClient() as client:
                resolver = ProductResolver(
                    client,
                    timeout_seconds=self.config.lookup_timeout_seconds
                )
                categories = await self._enrich_categories(packing_list, resolver, stats)

        logger.info(
            "enrichment_complete",
            total=stats.total,
            catalog_hits=stats.catalog_hits,
            lookup_hits=stats.lookup_hits,
            fallbacks=stats.fallbacks,
            errors=stats.errors
        )

        return PackingList(categories=categories), stats

    async def _enrich_categories(
        self,
        packing_list: RawPackingList,
        resolver: Optional[ProductResolver],
        stats: EnrichmentStats
    ) -> list[Category]:
        semaphore = asyncio.Semaphore(self.config.batch_size)

        async def work(rec: RawRecommendation) -> ResolvedRecommendation:
            return await self._resolve_recommendation(rec, resolver, semaphore, stats)

        async def enrich_item(item: RawPackingItem) -> PackingItem:
            recommendations = await run_batched(
                item.recommendations,
                work,
                batch_size=self.config.batch_size,
                inter_batch_delay_ms=self.config.inter_batch_delay_ms,
                sleep=self.sleep,
            )
            return PackingItem(
                name=item.name,
                description=item.description,
                recommendations=recommendations,
            )

        # One task per item across all categories, results in input order
        flat_items = [
            item
            for category in packing_list.categories
            for item in category.items
        ]
        enriched_items = iter(await asyncio.gather(*(enrich_item(i) for i in flat_items)))

        return [
            Category(
                name=category.name,
                items=[next(enriched_items) for _ in category.items],
            )
            for category in packing_list.categories
        ]

    async def _resolve_recommendation(
        self,
        rec: RawRecommendation,
        resolver: Optional[ProductResolver],
        semaphore: asyncio.Semaphore,
        stats: EnrichmentStats
    ) -> ResolvedRecommendation:
        """Resolve one recommendation. Never raises."""
        stats.total += 1
        tag = self.config.partner_tag

        try:
            asin = None

            if self.config.use_catalog:
                entry = self.catalog.lookup(rec.product_key)
                if entry:
                    asin = entry.asin
                    stats.catalog_hits += 1

            if asin is None and self.config.live_lookup and resolver is not None:
                async with semaphore:
                    asin = await resolver.resolve(rec.name)
                if asin:
                    stats.lookup_hits += 1

            if asin is None:
                stats.fallbacks += 1

            link = build_affiliate_link(asin, rec.name, tag)

        except Exception as e:
            logger.error(
                "recommendation_enrichment_failed",
                product=rec.name[:80],
                error=str(e),
                error_type=type(e).__name__
            )
            stats.errors += 1
            link = build_search_link(rec.name, tag)

        return ResolvedRecommendation(
            name=rec.name,
            description=rec.description,
            affiliate_link=link,
        )
