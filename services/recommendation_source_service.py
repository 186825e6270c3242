"""
Recommendation source — ask the LLM for a packing list.

Builds the prompt from trip parameters and returns the model's raw
text. Parsing and validation happen in parsers.packing_list_parser.
"""

from typing import Optional
import anthropic
import structlog

from config import settings
from exceptions import RecommendationSourceError
from models.packing import TripRequest

logger = structlog.get_logger(__name__)


SYSTEM_PROMPT = """You are a travel packing expert who creates detailed, personalized packing lists with specific product recommendations. Focus on practical, well-reviewed items from reputable brands available on Amazon.

IMPORTANT: Return ONLY valid JSON, no markdown, no explanation, no code blocks."""

RESPONSE_FORMAT = """{
  "categories": [
    {
      "name": "Category Name",
      "items": [
        {
          "name": "Item Name",
          "description": "Brief description of why this item is important",
          "recommendations": [
            {
              "name": "Specific Product Name (include brand)",
              "description": "Brief product description with key features",
              "productKey": "key from the known products list, or null"
            }
          ]
        }
      ]
    }
  ]
}"""


def build_packing_prompt(trip: TripRequest, catalog_keys: Optional[list[str]] = None) -> str:
    """
    Build the user prompt for a trip.

    Args:
        trip: Trip parameters
        catalog_keys: Known product keys the model may reference

    Returns:
        Prompt text
    """
    lines = [
        f"Generate a detailed packing list for a {trip.duration_days}-day trip to "
        f"{trip.location} from {trip.start_date.isoformat()} to {trip.end_date.isoformat()}.",
    ]
    if trip.activities:
        lines.append(f"The planned activities include: {trip.activities}.")
    if trip.gender:
        lines.append(f"The traveler's gender is {trip.gender}; suggest clothing accordingly.")
    if trip.price_range:
        lines.append(f"Keep product recommendations within this price range: {trip.price_range}.")

    lines.extend([
        "",
        "Please provide specific product recommendations that would be available on Amazon.com. "
        "Focus on practical, highly-rated items that travelers would actually need.",
    ])

    if catalog_keys:
        lines.extend([
            "",
            "Known products (set productKey to one of these exact keys when recommending that product):",
            ", ".join(catalog_keys),
        ])

    lines.extend([
        "",
        "Please provide a structured response in the following JSON format:",
        RESPONSE_FORMAT,
        "",
        "Focus on essential items and popular brands available on Amazon. Be specific with product "
        "names and include well-known brands. Consider weather, activities, and practical needs. "
        "Prioritize items with good reviews and reliable brands.",
    ])
    return "\n".join(lines)


class RecommendationSourceService:
    """Generate packing list text with the Anthropic Messages API."""

    def __init__(
        self,
        client: Optional[anthropic.AsyncAnthropic] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ):
        self._client = client
        self.model = model or settings.llm_model
        self.max_tokens = max_tokens or settings.llm_max_tokens
        self.temperature = settings.llm_temperature if temperature is None else temperature

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            if not settings.llm_configured:
                raise RecommendationSourceError(
                    "ANTHROPIC_API_KEY is not set",
                    code="LLM_NOT_CONFIGURED"
                )
            self._client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
        return self._client

    async def generate(self, trip: TripRequest, catalog_keys: Optional[list[str]] = None) -> str:
        """
        Ask the model for a packing list.

        Args:
            trip: Trip parameters
            catalog_keys: Known product keys to offer the model

        Returns:
            Raw response text (expected to be JSON)

        Raises:
            RecommendationSourceError: If the API call fails or returns no text
        """
        prompt = build_packing_prompt(trip, catalog_keys)

        logger.info(
            "packing_list_generation_started",
            location=trip.location,
            duration_days=trip.duration_days,
            model=self.model
        )

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            logger.error("llm_api_error", error=str(e), error_type=type(e).__name__)
            raise RecommendationSourceError(f"LLM API error: {e}")

        text = "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            logger.error("llm_empty_response", stop_reason=getattr(response, "stop_reason", None))
            raise RecommendationSourceError("LLM returned an empty response")

        logger.debug("llm_response_received", response_length=len(text))
        return text


# Singleton instance
_recommendation_source_service: Optional[RecommendationSourceService] = None


def get_recommendation_source_service() -> RecommendationSourceService:
    """Get or create RecommendationSourceService instance."""
    global _recommendation_source_service
    if _recommendation_source_service is None:
        _recommendation_source_service = RecommendationSourceService()
    return _recommendation_source_service
