"""
Enrichment pipeline configuration and run statistics.
"""

from pydantic import ConfigDict, Field

from models.base import BaseSchema


class EnrichmentConfig(BaseSchema):
    """
    Tunables for one enrichment run.

    Bounds the outbound request rate to the lookup service:
    at most batch_size lookups in flight, and a fixed pause
    between consecutive batches.
    """

    model_config = ConfigDict(frozen=True)

    batch_size: int = Field(default=3, ge=1, description="Concurrent lookups per batch")
    inter_batch_delay_ms: int = Field(default=500, ge=0, description="Pause between batches (ms)")
    lookup_timeout_ms: int = Field(default=5000, gt=0, description="Timeout per ASIN lookup (ms)")
    partner_tag: str = Field(default="trippacker-20", min_length=1, description="Amazon Associates tag")
    use_catalog: bool = Field(default=True, description="Check the static catalog first")
    live_lookup: bool = Field(default=True, description="Search Amazon for uncatalogued products")

    @property
    def inter_batch_delay_seconds(self) -> float:
        return self.inter_batch_delay_ms / 1000

    @property
    def lookup_timeout_seconds(self) -> float:
        return self.lookup_timeout_ms / 1000


class EnrichmentStats(BaseSchema):
    """How each recommendation in a run got its link."""

    total: int = 0
    catalog_hits: int = 0
    lookup_hits: int = 0
    fallbacks: int = 0
    errors: int = 0

    @property
    def resolved(self) -> int:
        """Recommendations that got a direct product link."""
        return self.catalog_hits + self.lookup_hits
