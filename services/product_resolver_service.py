"""
Product resolver — find the ASIN for a product name.

Searches amazon.com for the name and scrapes the first ASIN out of the
results page. The page is not a typed API: markup changes often, so the
body is scanned by an ordered list of extractor strategies, most
specific first. The first strategy that yields a valid ASIN wins.

Failures never propagate. Timeouts, non-200 responses, network errors
and pages without a usable ASIN all resolve to None, and the caller
falls back to a search link.
"""

import asyncio
import re
from typing import Callable, Optional
import httpx
import structlog

from services.affiliate_link_service import (
    AMAZON_BASE_URL,
    encode_query,
    is_valid_asin,
)

logger = structlog.get_logger(__name__)


# Amazon serves a captcha page to clients that don't look like a browser
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Cache-Control": "max-age=0",
}

DEFAULT_TIMEOUT_SECONDS = 5.0


# ===================
# EXTRACTOR STRATEGIES
# ===================

Extractor = Callable[[str], Optional[str]]

_FIRST_RANKED_PATTERNS = [
    re.compile(r'data-asin="([A-Z0-9]{10})"[^>]*?data-index="1"'),
    re.compile(r'data-index="1"[^>]*?data-asin="([A-Z0-9]{10})"'),
]
_SEARCH_RESULT_PATTERNS = [
    re.compile(r'data-asin="([A-Z0-9]{10})"[^>]*?data-component-type="s-search-result"'),
    re.compile(r'data-component-type="s-search-result"[^>]*?data-asin="([A-Z0-9]{10})"'),
]
_PRODUCT_PATH_PATTERNS = [
    re.compile(r'/(?:dp|gp/product)/([A-Z0-9]{10})(?=[/?"&#\s]|$)'),
]
_JSON_ASIN_PATTERNS = [
    re.compile(r'"asin"\s*:\s*"([A-Z0-9]{10})"'),
]
_DATA_ASIN_PATTERNS = [
    re.compile(r'data-asin="([A-Z0-9]{10})"'),
]


def _first_asin(patterns: list[re.Pattern[str]], body: str) -> Optional[str]:
    for pattern in patterns:
        for match in pattern.finditer(body):
            candidate = match.group(1)
            if is_valid_asin(candidate):
                return candidate
    return None


def extract_first_ranked(body: str) -> Optional[str]:
    """Result tagged as the first ranked item (data-index="1")."""
    return _first_asin(_FIRST_RANKED_PATTERNS, body)


def extract_search_result(body: str) -> Optional[str]:
    """First element tagged as a search result component."""
    return _first_asin(_SEARCH_RESULT_PATTERNS, body)


def extract_product_path(body: str) -> Optional[str]:
    """First /dp/ or /gp/product/ link."""
    return _first_asin(_PRODUCT_PATH_PATTERNS, body)


def extract_json_asin(body: str) -> Optional[str]:
    """First "asin": "..." property in embedded JSON."""
    return _first_asin(_JSON_ASIN_PATTERNS, body)


def extract_any_data_asin(body: str) -> Optional[str]:
    """First non-empty data-asin attribute anywhere."""
    return _first_asin(_DATA_ASIN_PATTERNS, body)


# Order matters: earlier strategies target higher-confidence markup
EXTRACTORS: list[tuple[str, Extractor]] = [
    ("first_ranked", extract_first_ranked),
    ("search_result", extract_search_result),
    ("product_path", extract_product_path),
    ("json_asin", extract_json_asin),
    ("data_asin", extract_any_data_asin),
]


def extract_asin(
    body: str,
    extractors: Optional[list[tuple[str, Extractor]]] = None
) -> Optional[str]:
    """
    Run extractor strategies in order over a search results page.

    Args:
        body: Response body (HTML or JSON text)
        extractors: Strategies to try; defaults to EXTRACTORS

    Returns:
        First valid ASIN found, or None
    """
    if not body:
        return None

    for strategy, extractor in (extractors or EXTRACTORS):
        asin = extractor(body)
        if asin:
            logger.debug("asin_extracted", strategy=strategy, asin=asin)
            return asin
    return None


# ===================
# RESOLVER
# ===================

def build_search_url(name: str, base_url: str = AMAZON_BASE_URL) -> str:
    """Amazon search URL for a product name (no affiliate tag)."""
    return f"{base_url}/s?k={encode_query(name)}"


class ProductResolver:
    """
    Resolve product names to ASINs via Amazon search.

    The HTTP client is owned by the caller so one connection pool can
    be shared by every lookup in an enrichment run.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        base_url: str = AMAZON_BASE_URL,
        extractors: Optional[list[tuple[str, Extractor]]] = None,
    ):
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url
        self.extractors = extractors or EXTRACTORS

    async def _fetch(self, url: str) -> httpx.Response:
        return await self.client.get(
            url,
            headers=BROWSER_HEADERS,
            timeout=self.timeout_seconds,
            follow_redirects=True,
        )

    async def resolve(self, name: str) -> Optional[str]:
        """
        Find the ASIN of the top search result for a product name.

        Args:
            name: Product name as written by the recommendation source

        Returns:
            ASIN, or None when not found, timed out or failed
        """
        name = (name or "").strip()
        if not name:
            return None

        url = build_search_url(name, self.base_url)

        try:
            response = await asyncio.wait_for(
                self._fetch(url),
                timeout=self.timeout_seconds
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning(
                "asin_lookup_timeout",
                product=name[:80],
                timeout_seconds=self.timeout_seconds
            )
            return None
        except httpx.HTTPError as e:
            logger.warning(
                "asin_lookup_failed",
                product=name[:80],
                error=str(e),
                error_type=type(e).__name__
            )
            return None
        except Exception as e:
            logger.error(
                "asin_lookup_unexpected_error",
                product=name[:80],
                error=str(e),
                error_type=type(e).__name__
            )
            return None

        if response.status_code != 200:
            logger.warning(
                "asin_lookup_bad_status",
                product=name[:80],
                status=response.status_code
            )
            return None

        try:
            asin = extract_asin(response.text, self.extractors)
        except Exception as e:
            logger.error(
                "asin_extraction_failed",
                product=name[:80],
                error=str(e),
                error_type=type(e).__name__
            )
            return None

        if asin:
            logger.info("asin_resolved", product=name[:80], asin=asin)
        else:
            logger.info("asin_not_found", product=name[:80])
        return asin
