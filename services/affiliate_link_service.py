"""
Amazon affiliate link builder.

Pure functions, no network access. Every recommendation ends up with
one of two link shapes:
    - product page: https://www.amazon.com/dp/{ASIN}/ref=nosim?tag={tag}
    - search page:  https://www.amazon.com/s?k={name}&tag={tag}
"""

import re
from typing import Optional
from urllib.parse import quote

AMAZON_BASE_URL = "https://www.amazon.com"

# Characters encodeURIComponent leaves alone
URI_COMPONENT_SAFE = "-_.!~*'()"

ASIN_PATTERN = re.compile(r"^[A-Z0-9]{10}$")

PRODUCT_LINK_PATTERN = re.compile(
    r"^https://www\.amazon\.com/dp/[A-Z0-9]{10}/ref=nosim\?tag=[^&\s]+$"
)
SEARCH_LINK_PATTERN = re.compile(
    r"^https://www\.amazon\.com/s\?k=[^&\s]+&tag=[^&\s]+$"
)


def is_valid_asin(value: Optional[str]) -> bool:
    """True if value is a 10-character uppercase alphanumeric ASIN."""
    return bool(value) and bool(ASIN_PATTERN.match(value))


def encode_query(value: str) -> str:
    """Percent-encode like JavaScript encodeURIComponent (space -> %20)."""
    return quote(value, safe=URI_COMPONENT_SAFE)


def build_product_link(asin: str, partner_tag: str) -> str:
    """Canonical product page link for an ASIN."""
    return f"{AMAZON_BASE_URL}/dp/{asin}/ref=nosim?tag={encode_query(partner_tag)}"


def build_search_link(name: str, partner_tag: str) -> str:
    """Search results link for a product name (fallback path)."""
    return f"{AMAZON_BASE_URL}/s?k={encode_query(name)}&tag={encode_query(partner_tag)}"


def build_affiliate_link(asin: Optional[str], name: str, partner_tag: str) -> str:
    """
    Build the purchase link for a recommendation.

    Args:
        asin: Resolved ASIN, or None if the product was not found
        name: Product name, used for the search fallback
        partner_tag: Amazon Associates tag

    Returns:
        Product link when asin is a valid ASIN, search link otherwise.
        Never raises for string inputs.
    """
    if is_valid_asin(asin):
        return build_product_link(asin, partner_tag)
    return build_search_link(name, partner_tag)


def is_affiliate_link(url: str) -> bool:
    """True if url matches either the product or the search link shape."""
    return bool(PRODUCT_LINK_PATTERN.match(url) or SEARCH_LINK_PATTERN.match(url))
