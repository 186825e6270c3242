"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional

from models.enrichment import EnrichmentConfig


class Settings(BaseSettings):
    """
    Application settings.
    
    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """
    
    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )
    
    # ===================
    # LLM (RECOMMENDATION SOURCE)
    # ===================
    anthropic_api_key: Optional[str] = Field(
        None,
        description="Anthropic API key used to generate packing lists"
    )
    llm_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model used to generate packing lists"
    )
    llm_max_tokens: int = Field(
        default=4096,
        ge=256,
        le=16384,
        description="Maximum tokens in the generated packing list"
    )
    llm_temperature: float = Field(
        default=0.7,
        ge=0,
        le=1,
        description="Sampling temperature for packing list generation"
    )
    
    # ===================
    # AMAZON AFFILIATE
    # ===================
    amazon_affiliate_id: str = Field(
        default="trippacker-20",
        min_length=1,
        description="Amazon Associates partner tag appended to every link"
    )
    
    # ===================
    # ENRICHMENT PIPELINE
    # ===================
    enrichment_batch_size: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Concurrent ASIN lookups per batch"
    )
    enrichment_inter_batch_delay_ms: int = Field(
        default=500,
        ge=0,
        le=60000,
        description="Pause between lookup batches (ms)"
    )
    asin_lookup_timeout_ms: int = Field(
        default=5000,
        ge=100,
        le=60000,
        description="Hard timeout for a single ASIN lookup (ms)"
    )
    catalog_enabled: bool = Field(
        default=True,
        description="Use the static product catalog before live lookup"
    )
    live_lookup_enabled: bool = Field(
        default=True,
        description="Search Amazon for ASINs of uncatalogued products"
    )
    
    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Origins allowed to call the API (JSON list in env)"
    )
    
    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"
    
    @property
    def llm_configured(self) -> bool:
        """Check if the LLM API key is set."""
        return bool(self.anthropic_api_key)

    def enrichment_config(self) -> EnrichmentConfig:
        """Build the pipeline configuration from these settings."""
        return EnrichmentConfig(
            batch_size=self.enrichment_batch_size,
            inter_batch_delay_ms=self.enrichment_inter_batch_delay_ms,
            lookup_timeout_ms=self.asin_lookup_timeout_ms,
            partner_tag=self.amazon_affiliate_id,
            use_catalog=self.catalog_enabled,
            live_lookup=self.live_lookup_enabled,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    
    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.
    
    Returns:
        Settings: Application settings
        
    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
