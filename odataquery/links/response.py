from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional

from .models import Count, Link, LinkNames
from .service import pagination_links


class ResponseBuilder:
    """
    Accumulates the response envelope returned by the API:

        ResponseBuilder().with_data(rows).with_count(len(rows), total).build()
        -> {"data": [...], "count": {"response": 2, "total": 9}}

    ``links`` is only emitted when at least one link was added; None entries
    (pages that do not exist) are dropped.
    """

    def __init__(self):
        self._response: Dict[str, Any] = {}
        self._links: List[Optional[Link]] = []

    def _add(self, key: str, value: Any) -> "ResponseBuilder":
        if key in self._response:
            raise KeyError(f"Response already has '{key}'")
        self._response[key] = value
        return self

    def with_data(self, data: Any) -> "ResponseBuilder":
        return self._add("data", data)

    def with_count(self, response_count: int, total_count: int) -> "ResponseBuilder":
        return self._add("count", Count(response=response_count, total=total_count).model_dump())

    def with_link_to_self(self, url: str, method: str = "GET") -> "ResponseBuilder":
        self._links.append(Link(relation=LinkNames.SELF, url=url, type=method))
        return self

    def with_links_for_pagination(
        self,
        url: str,
        method: str,
        skip: Optional[int],
        take: Optional[int],
        total_count: Optional[int],
    ) -> "ResponseBuilder":
        self._links.extend(pagination_links(url, skip, take, total_count, method))
        return self

    def with_link(self, link: Optional[Link]) -> "ResponseBuilder":
        self._links.append(link)
        return self

    def with_links(self, links: Iterable[Optional[Link]]) -> "ResponseBuilder":
        self._links.extend(links)
        return self

    def with_property(self, key: str, value: Any) -> "ResponseBuilder":
        return self._add(key, value)

    def build(self) -> Dict[str, Any]:
        response = dict(self._response)
        if self._links:
            response["links"] = [link.model_dump(by_alias=True) for link in self._links if link is not None]
        return response
