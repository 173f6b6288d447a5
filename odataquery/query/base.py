from __future__ import annotations
import asyncio
import dataclasses
from typing import Any, Optional, Union

from ..fields import type_name
from .compiler import compile_filter
from .expressions import Lambda, and_also
from .includes import expand_includes, include_path
from .models import BaseQuery
from .ordering import OrderFn, compile_ordering


class BaseQueryBuilder:
    """
    Fluent builder for the per-entity BaseQuery. Like FilterBuilder, each call
    returns a new builder; the query it wraps is never modified.
    """
    __slots__ = ("_query",)

    def __init__(self, entity_type: Any, query: Optional[BaseQuery] = None):
        self._query = query or BaseQuery(entity_type)

    @property
    def entity_type(self) -> Any:
        return self._query.entity_type

    def _with(self, **changes: Any) -> "BaseQueryBuilder":
        return BaseQueryBuilder(self.entity_type, dataclasses.replace(self._query, **changes))

    def where(self, predicate: Union[Lambda, str]) -> "BaseQueryBuilder":
        """Add a base constraint; repeated calls are conjoined."""
        if isinstance(predicate, str):
            predicate = compile_filter(predicate, self.entity_type)
        return self._with(filter=and_also(self._query.filter, predicate))

    def default_order_by(self, order: Union[OrderFn, str]) -> "BaseQueryBuilder":
        if isinstance(order, str):
            order = compile_ordering(order, None, self.entity_type)
        return self._with(default_order=order)

    def include(self, *fields: Any) -> "BaseQueryBuilder":
        names = ",".join(str(include_path(self.entity_type, f)) for f in fields)
        return self._with(include=expand_includes(names, self.entity_type, self._query.include))

    def with_max_take(self, max_take: int) -> "BaseQueryBuilder":
        if max_take < 0:
            raise ValueError("max_take must be >= 0")
        return self._with(max_take=max_take)

    def with_cancellation(self, event: asyncio.Event) -> "BaseQueryBuilder":
        return self._with(cancellation=event)

    def build(self) -> BaseQuery:
        return self._query

    def __repr__(self) -> str:
        return f"BaseQueryBuilder({type_name(self.entity_type)})"
