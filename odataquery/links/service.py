from __future__ import annotations
from typing import List, Optional

from .models import Link, LinkNames


def _replace_skip(url: str, skip: Optional[int], new_skip: int) -> str:
    if skip is None:
        return url
    return url.replace(f"$skip={skip}", f"$skip={new_skip}")


def link_to_first_page(url: str, skip: Optional[int], method: str = "GET") -> Link:
    return Link(relation=LinkNames.FIRST_PAGE, url=_replace_skip(url, skip, 0), type=method)


def link_to_previous_page(url: str, skip: Optional[int], take: Optional[int], method: str = "GET") -> Optional[Link]:
    if skip is None or take is None:
        return None
    return Link(
        relation=LinkNames.PREVIOUS_PAGE,
        url=_replace_skip(url, skip, max(0, skip - take)),
        type=method,
    )


def link_to_next_page(url: str, skip: Optional[int], take: Optional[int], method: str = "GET") -> Optional[Link]:
    if take is None:
        return None
    href = f"{url}$skip={take}" if skip is None else _replace_skip(url, skip, skip + take)
    return Link(relation=LinkNames.NEXT_PAGE, url=href, type=method)


def link_to_last_page(
    url: str,
    skip: Optional[int],
    take: Optional[int],
    total: int,
    method: str = "GET",
) -> Optional[Link]:
    """The last-page skip is ``total // take``, kept as the wire contract."""
    if take is None or take < 1:
        return None
    last = total // take
    href = f"{url}$skip={last}" if skip is None else _replace_skip(url, skip, last)
    return Link(relation=LinkNames.LAST_PAGE, url=href, type=method)


def pagination_links(
    url: str,
    skip: Optional[int],
    take: Optional[int],
    total: Optional[int],
    method: str = "GET",
) -> List[Optional[Link]]:
    """first, prev, next and last, in that order. Absent links are None."""
    return [
        link_to_first_page(url, skip, method),
        link_to_previous_page(url, skip, take, method),
        link_to_next_page(url, skip, take, method),
        link_to_last_page(url, skip, take, total or 0, method),
    ]
