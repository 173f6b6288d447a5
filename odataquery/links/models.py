from __future__ import annotations
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LinkNames:
    """Relation names for HATEOAS links."""
    SELF = "self"
    BASE = "base"
    NEXT_PAGE = "next"
    PREVIOUS_PAGE = "prev"
    FIRST_PAGE = "first"
    LAST_PAGE = "last"


class Link(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    relation: str = Field(alias="rel")
    url: str = Field(alias="href")
    type: str = "GET"


class Count(BaseModel):
    response: int
    total: int


class ODataResponse(BaseModel):
    """Serializable form of the envelope ResponseBuilder produces."""
    model_config = ConfigDict(populate_by_name=True)

    data: List[Any] = Field(default_factory=list)
    count: Optional[Count] = None
    links: Optional[List[Link]] = None


__all__ = ["LinkNames", "Link", "Count", "ODataResponse"]
