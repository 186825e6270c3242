"""
Packing list parser for recommendation source (LLM) output.

Turns free-form model text into a validated RawPackingList. The model
is asked for bare JSON but sometimes wraps it in a code fence or adds
a sentence around it; both are tolerated. Anything that still doesn't
match the schema is reported as errors, never raised.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional
import structlog

from pydantic import ValidationError as PydanticValidationError

from models.packing import RawPackingList

logger = structlog.get_logger(__name__)


@dataclass
class ParseError:
    """Single validation error from parsing."""
    location: str
    error: str


@dataclass
class PackingListParseResult:
    """Result of parsing model output: a packing list or errors."""
    packing_list: Optional[RawPackingList] = None
    errors: list[ParseError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if a packing list was parsed without errors."""
        return self.packing_list is not None and len(self.errors) == 0

    def errors_to_dicts(self) -> list[dict]:
        return [{"location": e.location, "error": e.error} for e in self.errors]


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```)."""
    text = text.strip()
    if not text.startswith("```"):
        return text
    text = text[3:]
    for lang in ("json", "JSON"):
        if text.startswith(lang):
            text = text[len(lang):]
            break
    text = text.lstrip("\n")
    return text.rsplit("```", 1)[0].strip()


def extract_json_object(text: str) -> Optional[Any]:
    """
    Parse JSON from model text.

    Tries the whole text first, then the outermost {...} block.

    Returns:
        Parsed JSON value, or None if nothing parses
    """
    text = strip_code_fence(text or "")
    if not text:
        return None

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None

    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError:
        return None


def validate_packing_list(data: Any) -> PackingListParseResult:
    """Validate parsed JSON against the RawPackingList schema."""
    if not isinstance(data, dict):
        return PackingListParseResult(errors=[
            ParseError(location="$", error=f"Expected a JSON object, got {type(data).__name__}")
        ])

    if "categories" not in data:
        return PackingListParseResult(errors=[
            ParseError(location="categories", error="Field required")
        ])

    try:
        packing_list = RawPackingList.model_validate(data)
    except PydanticValidationError as e:
        return PackingListParseResult(errors=[
            ParseError(
                location=".".join(str(part) for part in err["loc"]) or "$",
                error=err["msg"]
            )
            for err in e.errors()
        ])

    return PackingListParseResult(packing_list=packing_list)


def parse_packing_list(text: str) -> PackingListParseResult:
    """
    Parse and validate recommendation source output.

    Args:
        text: Raw model response text

    Returns:
        PackingListParseResult with either packing_list or errors
    """
    data = extract_json_object(text)
    if data is None:
        logger.warning("packing_list_not_json", preview=(text or "")[:200])
        return PackingListParseResult(errors=[
            ParseError(location="$", error="Response is not valid JSON")
        ])

    result = validate_packing_list(data)
    if result.success:
        logger.info(
            "packing_list_parsed",
            categories=len(result.packing_list.categories),
            recommendations=result.packing_list.recommendation_count
        )
    else:
        logger.warning("packing_list_invalid", errors=result.errors_to_dicts()[:10])
    return result
