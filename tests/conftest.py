"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest

from models.enrichment import EnrichmentConfig
from services.catalog_service import CatalogService
from tests.fakes import PARTNER_TAG, RecordingSleep


# ===================
# FIXTURES
# ===================

@pytest.fixture
def enrichment_config() -> EnrichmentConfig:
    """Pipeline config with the production defaults and a test tag."""
    return EnrichmentConfig(
        batch_size=3,
        inter_batch_delay_ms=500,
        lookup_timeout_ms=5000,
        partner_tag=PARTNER_TAG
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def empty_catalog() -> CatalogService:
    return CatalogService(entries={})


@pytest.fixture
def sample_llm_response() -> str:
    """Model output in the expected JSON shape."""
    return """{
  "categories": [
    {
      "name": "Electronics",
      "items": [
        {
          "name": "Portable Charger",
          "description": "Keep your phone charged on long days out",
          "recommendations": [
            {"name": "Anker PowerCore 10000mAh", "description": "Compact power bank", "productKey": "anker powercore"},
            {"name": "Belkin BoostCharge 20K", "description": "Higher capacity", "productKey": null}
          ]
        }
      ]
    },
    {
      "name": "Comfort",
      "items": [
        {
          "name": "Travel Pillow",
          "description": "For the long flight",
          "recommendations": [
            {"name": "Trtl Pillow Plus", "description": "Scientifically proven neck support"}
          ]
        }
      ]
    }
  ]
}"""


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.
    
    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/health")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app
    
    return TestClient(app)
