"""
Packing list API routes.

Generates a packing list for a trip and attaches Amazon affiliate
links to every product recommendation.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.packing import PackingList, RawPackingList, TripRequest
from services.packing_list_service import get_packing_list_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Packing Lists"])

GENERATION_FAILED_MESSAGE = "Failed to generate packing list"
ENRICHMENT_FAILED_MESSAGE = "Failed to enrich packing list"


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception, message: str) -> JSONResponse:
    """
    Convert exception to an opaque 500 response.

    The cause is logged; the client only sees a generic message.
    """
    if isinstance(e, AppError):
        logger.error(
            "packing_list_request_failed",
            code=e.code,
            error=e.message,
            details=e.details
        )
    else:
        logger.error("unexpected_error", error=str(e), type=type(e).__name__)

    return JSONResponse(
        status_code=500,
        content={"error": message}
    )


# ===================
# ROUTES
# ===================

@router.post("/api/packing-lists", response_model=PackingList)
async def generate_packing_list(trip: TripRequest):
    """
    Generate a packing list for a trip.

    Asks the language model for categorized product recommendations,
    then resolves each product to an Amazon link (product page when
    the ASIN is found, search page otherwise).
    """
    try:
        service = get_packing_list_service()
        return await service.generate(trip)

    except Exception as e:
        return handle_error(e, GENERATION_FAILED_MESSAGE)


@router.post("/api/generate-packing-list", response_model=PackingList, include_in_schema=False)
async def generate_packing_list_legacy(trip: TripRequest):
    """Path used by the TripPacker web form."""
    return await generate_packing_list(trip)


@router.post("/api/packing-lists/enrich", response_model=PackingList)
async def enrich_packing_list(packing_list: RawPackingList):
    """
    Attach affiliate links to an existing packing list.

    Skips the language model; useful when the list comes from
    somewhere else or needs its links refreshed.
    """
    try:
        service = get_packing_list_service()
        return await service.enrich(packing_list)

    except Exception as e:
        return handle_error(e, ENRICHMENT_FAILED_MESSAGE)
