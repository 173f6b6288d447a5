"""
HATEOAS links and response envelopes for the odataquery package.
"""

from .models import LinkNames, Link, Count, ODataResponse
from .service import (
    link_to_first_page,
    link_to_previous_page,
    link_to_next_page,
    link_to_last_page,
    pagination_links,
)
from .response import ResponseBuilder

__all__ = [
    "LinkNames",
    "Link",
    "Count",
    "ODataResponse",
    "link_to_first_page",
    "link_to_previous_page",
    "link_to_next_page",
    "link_to_last_page",
    "pagination_links",
    "ResponseBuilder",
]
