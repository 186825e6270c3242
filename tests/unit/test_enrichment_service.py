"""
Unit tests for EnrichmentService.

Run: pytest tests/unit/test_enrichment_service.py -v
"""

import asyncio

import httpx

from models.enrichment import EnrichmentConfig
from models.packing import RawCategory, RawPackingItem, RawPackingList, RawRecommendation
from services.affiliate_link_service import is_affiliate_link
from services.catalog_service import CatalogService
from services.enrichment_service import EnrichmentService
from services.product_resolver_service import ProductResolver
from tests.factories import PackingListFactory, RecommendationFactory
from tests.fakes import PARTNER_TAG, StubResolver, mock_http_client


def single_item_list(*recommendations: RawRecommendation) -> RawPackingList:
    return RawPackingList(categories=[
        RawCategory(name="Gear", items=[
            RawPackingItem(name="Item", description="", recommendations=list(recommendations))
        ])
    ])


def all_recommendations(packing_list):
    return [
        rec
        for category in packing_list.categories
        for item in category.items
        for rec in item.recommendations
    ]


class TestEnrichmentScenarios:
    """End-to-end scenarios through the real resolver with stubbed HTTP."""

    def test_anker_resolves_to_product_link(self, enrichment_config, empty_catalog, recording_sleep):
        """Lookup page with a first-ranked result gives a /dp/ link."""
        html = '<div data-asin="B07S829LBX" class="s-result-item" data-index="1"></div>'
        client = mock_http_client(lambda request: httpx.Response(200, text=html))
        service = EnrichmentService(
            config=enrichment_config,
            catalog=empty_catalog,
            resolver=ProductResolver(client),
            sleep=recording_sleep
        )
        rec = RawRecommendation(name="Anker PowerCore 10000mAh", description="Power bank")

        result = asyncio.run(service.enrich(single_item_list(rec)))

        link = result.categories[0].items[0].recommendations[0].affiliate_link
        assert link == f"https://www.amazon.com/dp/B07S829LBX/ref=nosim?tag={PARTNER_TAG}"

    def test_timeout_falls_back_to_search_link(self, empty_catalog, recording_sleep):
        """A lookup that times out still gets a search link."""
        async def slow_handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return httpx.Response(200, text='<div data-asin="B07S829LBX" data-index="1">')

        config = EnrichmentConfig(lookup_timeout_ms=50, partner_tag=PARTNER_TAG)
        resolver = ProductResolver(
            mock_http_client(slow_handler),
            timeout_seconds=config.lookup_timeout_seconds
        )
        service = EnrichmentService(
            config=config,
            catalog=empty_catalog,
            resolver=resolver,
            sleep=recording_sleep
        )
        rec = RawRecommendation(name="Obscure Brand Tent", description="Tent")

        result = asyncio.run(service.enrich(single_item_list(rec)))

        link = result.categories[0].items[0].recommendations[0].affiliate_link
        assert link == f"https://www.amazon.com/s?k=Obscure%20Brand%20Tent&tag={PARTNER_TAG}"

    def test_shape_is_preserved(self, enrichment_config, empty_catalog, recording_sleep):
        """2 categories (items with 1 and 2 recs) + 1 category (item with 3 recs) -> 6 recs."""
        packing_list = PackingListFactory.create(shape=[[1, 2], [3]])
        service = EnrichmentService(
            config=enrichment_config,
            catalog=empty_catalog,
            resolver=StubResolver(),
            sleep=recording_sleep
        )

        result = asyncio.run(service.enrich(packing_list))

        assert len(result.categories) == 2
        assert [len(c.items) for c in result.categories] == [2, 1]
        assert [
            len(item.recommendations)
            for c in result.categories
            for item in c.items
        ] == [1, 2, 3]
        assert result.recommendation_count == 6


class TestEnrichmentServiceEnrich:
    """Tests for EnrichmentService.enrich()"""

    def test_names_descriptions_and_order_preserved(self, enrichment_config, empty_catalog, recording_sleep):
        recs = RecommendationFactory.create_batch(7)
        resolver = StubResolver(asins={recs[2].name: "B000000002"}, delay=0.001)
        service = EnrichmentService(
            config=enrichment_config,
            catalog=empty_catalog,
            resolver=resolver,
            sleep=recording_sleep
        )

        result = asyncio.run(service.enrich(single_item_list(*recs)))

        out = all_recommendations(result)
        assert [r.name for r in out] == [r.name for r in recs]
        assert [r.description for r in out] == [r.description for r in recs]
        assert all(is_affiliate_link(r.affiliate_link) for r in out)
        assert out[2].affiliate_link == f"https://www.amazon.com/dp/B000000002/ref=nosim?tag={PARTNER_TAG}"

    def test_item_and_category_fields_copied(self, enrichment_config, empty_catalog, recording_sleep):
        packing_list = PackingListFactory.create(shape=[[2]])
        service = EnrichmentService(
            config=enrichment_config,
            catalog=empty_catalog,
            resolver=StubResolver(),
            sleep=recording_sleep
        )

        result = asyncio.run(service.enrich(packing_list))

        assert result.categories[0].name == packing_list.categories[0].name
        assert result.categories[0].items[0].name == packing_list.categories[0].items[0].name
        assert result.categories[0].items[0].description == packing_list.categories[0].items[0].description

    def test_input_is_not_mutated(self, enrichment_config, empty_catalog, recording_sleep):
        packing_list = PackingListFactory.create(shape=[[2, 1]])
        before = packing_list.model_dump()
        service = EnrichmentService(
            config=enrichment_config,
            catalog=empty_catalog,
            resolver=StubResolver(),
            sleep=recording_sleep
        )

        asyncio.run(service.enrich(packing_list))

        assert packing_list.model_dump() == before

    def test_catalog_hit_skips_lookup(self, enrichment_config, recording_sleep):
        """A productKey in the catalog uses its ASIN without searching."""
        resolver = StubResolver(asins={"Anker PowerCore 10000mAh": "B000000009"})
        service = EnrichmentService(
            config=enrichment_config,
            catalog=CatalogService(),
            resolver=resolver,
            sleep=recording_sleep
        )
        rec = RawRecommendation(name="Anker PowerCore 10000mAh", productKey="Anker PowerCore")

        result, stats = asyncio.run(service.enrich_with_stats(single_item_list(rec)))

        out = all_recommendations(result)[0]
        assert out.affiliate_link == f"https://www.amazon.com/dp/B07S829LBX/ref=nosim?tag={PARTNER_TAG}"
        assert out.name == "Anker PowerCore 10000mAh"
        assert resolver.calls == []
        assert stats.catalog_hits == 1

    def test_catalog_disabled_uses_lookup(self, recording_sleep):
        config = EnrichmentConfig(partner_tag=PARTNER_TAG, use_catalog=False)
        resolver = StubResolver(asins={"Anker PowerCore 10000mAh": "B000000009"})
        service = EnrichmentService(
            config=config,
            catalog=CatalogService(),
            resolver=resolver,
            sleep=recording_sleep
        )
        rec = RawRecommendation(name="Anker PowerCore 10000mAh", productKey="anker powercore")

        result = asyncio.run(service.enrich(single_item_list(rec)))

        assert "B000000009" in all_recommendations(result)[0].affiliate_link
        assert resolver.calls == ["Anker PowerCore 10000mAh"]

    def test_live_lookup_disabled_gives_search_links(self, empty_catalog, recording_sleep):
        config = EnrichmentConfig(partner_tag=PARTNER_TAG, live_lookup=False)
        service = EnrichmentService(config=config, catalog=empty_catalog, sleep=recording_sleep)
        rec = RawRecommendation(name="Rain Jacket")

        result, stats = asyncio.run(service.enrich_with_stats(single_item_list(rec)))

        assert all_recommendations(result)[0].affiliate_link == (
            f"https://www.amazon.com/s?k=Rain%20Jacket&tag={PARTNER_TAG}"
        )
        assert stats.fallbacks == 1

    def test_resolver_exception_falls_back(self, enrichment_config, empty_catalog, recording_sleep):
        """An exception inside work degrades that one recommendation only."""
        recs = RecommendationFactory.create_batch(3)
        resolver = StubResolver(
            asins={recs[0].name: "B000000001", recs[2].name: "B000000003"},
            errors={recs[1].name}
        )
        service = EnrichmentService(
            config=enrichment_config,
            catalog=empty_catalog,
            resolver=resolver,
            sleep=recording_sleep
        )

        result, stats = asyncio.run(service.enrich_with_stats(single_item_list(*recs)))

        out = all_recommendations(result)
        assert "/dp/B000000001/" in out[0].affiliate_link
        assert out[1].affiliate_link.startswith("https://www.amazon.com/s?k=")
        assert "/dp/B000000003/" in out[2].affiliate_link
        assert stats.errors == 1
        assert stats.lookup_hits == 2

    def test_global_lookup_bound_across_items(self, enrichment_config, empty_catalog, recording_sleep):
        """Items run concurrently but at most batch_size lookups overlap."""
        packing_list = PackingListFactory.create(shape=[[3, 3], [3, 3]])
        resolver = StubResolver(delay=0.005)
        service = EnrichmentService(
            config=enrichment_config,
            catalog=empty_catalog,
            resolver=resolver,
            sleep=recording_sleep
        )

        asyncio.run(service.enrich(packing_list))

        assert len(resolver.calls) == 12
        assert resolver.max_in_flight <= 3

    def test_inter_batch_delay_per_item(self, enrichment_config, empty_catalog, recording_sleep):
        """An item with 7 recommendations pauses twice (3 + 3 + 1)."""
        packing_list = PackingListFactory.create(shape=[[7]])
        service = EnrichmentService(
            config=enrichment_config,
            catalog=empty_catalog,
            resolver=StubResolver(),
            sleep=recording_sleep
        )

        asyncio.run(service.enrich(packing_list))

        assert recording_sleep.calls == [0.5, 0.5]

    def test_stats_counts(self, enrichment_config, recording_sleep):
        recs = [
            RawRecommendation(name="Hydro Flask 32oz", productKey="hydro flask"),
            RawRecommendation(name="Found Product"),
            RawRecommendation(name="Missing Product"),
        ]
        service = EnrichmentService(
            config=enrichment_config,
            catalog=CatalogService(),
            resolver=StubResolver(asins={"Found Product": "B000000010"}),
            sleep=recording_sleep
        )

        _, stats = asyncio.run(service.enrich_with_stats(single_item_list(*recs)))

        assert stats.total == 3
        assert stats.catalog_hits == 1
        assert stats.lookup_hits == 1
        assert stats.fallbacks == 1
        assert stats.resolved == 2

    def test_empty_list(self, enrichment_config, empty_catalog, recording_sleep):
        service = EnrichmentService(
            config=enrichment_config,
            catalog=empty_catalog,
            resolver=StubResolver(),
            sleep=recording_sleep
        )

        result = asyncio.run(service.enrich(RawPackingList(categories=[])))

        assert result.categories == []

    def test_creates_own_client_when_no_resolver(self, empty_catalog, recording_sleep, monkeypatch):
        """Without an injected resolver, each run opens its own HTTP client."""
        html = '<div data-asin="B07S829LBX" data-index="1"></div>'
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=html))
        real_client = httpx.AsyncClient

        monkeypatch.setattr(
            "services.enrichment_service.httpx.AsyncClient",
            lambda **kwargs: real_client(transport=transport, **kwargs)
        )
        config = EnrichmentConfig(partner_tag=PARTNER_TAG)
        service = EnrichmentService(config=config, catalog=empty_catalog, sleep=recording_sleep)

        result = asyncio.run(service.enrich(single_item_list(RawRecommendation(name="Anker PowerCore"))))

        assert "/dp/B07S829LBX/" in all_recommendations(result)[0].affiliate_link
