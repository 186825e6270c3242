"""
Business logic services.

Each service handles one stage of building a packing list.
"""

from services.affiliate_link_service import build_affiliate_link, is_affiliate_link
from services.batch_scheduler import run_batched
from services.catalog_service import CatalogService, CatalogEntry, get_catalog_service
from services.product_resolver_service import ProductResolver, extract_asin
from services.enrichment_service import EnrichmentService
from services.recommendation_source_service import (
    RecommendationSourceService,
    get_recommendation_source_service,
)
from services.packing_list_service import PackingListService, get_packing_list_service

__all__ = [
    "build_affiliate_link",
    "is_affiliate_link",
    "run_batched",
    "CatalogService",
    "CatalogEntry",
    "get_catalog_service",
    "ProductResolver",
    "extract_asin",
    "EnrichmentService",
    "RecommendationSourceService",
    "get_recommendation_source_service",
    "PackingListService",
    "get_packing_list_service",
]
