"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.packing_lists import router as packing_lists_router

__all__ = [
    "packing_lists_router",
]
