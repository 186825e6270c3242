"""
Parsers for recommendation source output.
"""

from parsers.packing_list_parser import (
    parse_packing_list,
    PackingListParseResult,
    ParseError,
)

__all__ = [
    "parse_packing_list",
    "PackingListParseResult",
    "ParseError",
]
