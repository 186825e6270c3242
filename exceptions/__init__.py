"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    ExternalServiceError,

    # Packing lists
    RecommendationSourceError,
    PackingListParseError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "ExternalServiceError",

    # Packing lists
    "RecommendationSourceError",
    "PackingListParseError",
]
