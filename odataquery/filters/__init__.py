"""
Filter requests for the odataquery package.

This module provides the operator table, the FilterRequest model with its
query-string and JSON forms, literal formatting and the fluent FilterBuilder.
"""

from .models import (
    Operation,
    FilterRequest,
    QUERY_KEYS,
    FILTER_REQUEST_SCHEMA,
    parse_filter_request_json,
)
from .literals import (
    format_literal,
    format_datetime,
    parse_literal,
)
from .builder import FilterBuilder

__all__ = [
    "Operation",
    "FilterRequest",
    "QUERY_KEYS",
    "FILTER_REQUEST_SCHEMA",
    "parse_filter_request_json",
    "format_literal",
    "format_datetime",
    "parse_literal",
    "FilterBuilder",
]
