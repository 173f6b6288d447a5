from __future__ import annotations
import logging
from typing import Any, Callable, List, Optional

from ..fields import type_name
from ..filters.models import FilterRequest
from ..validation import _assert_ordering_allowed, _cap_take
from .compiler import compile_filter
from .expressions import and_also
from .includes import expand_includes
from .models import BaseQuery, CompiledQuery, ReadOnlyRepository
from .ordering import compile_ordering

log = logging.getLogger("odataquery.service")


class ODataQueryService:
    """
    Turns a FilterRequest plus the entity's BaseQuery into a CompiledQuery and
    hands it to the repository.
    """

    def __init__(self, repository: ReadOnlyRepository):
        self.repository = repository

    def compile(
        self,
        request: FilterRequest,
        entity_type: Any,
        base: Optional[BaseQuery] = None,
        select: Optional[Callable[[Any], Any]] = None,
    ) -> CompiledQuery:
        base = base or BaseQuery(entity_type)
        _assert_ordering_allowed(request, base.default_order)

        predicate = and_also(base.filter, compile_filter(request.filter, entity_type))
        includes = expand_includes(request.expand, entity_type, base.include)
        order = compile_ordering(request.order_by, request.then_by, entity_type, base.default_order)
        take = _cap_take(request.take, base.max_take)

        query = CompiledQuery(
            entity_type=entity_type,
            predicate=predicate,
            order=order,
            includes=includes,
            skip=request.skip,
            take=take,
            select=select,
            cancellation=base.cancellation,
        )
        log.debug(
            "Compiled %s query: filter=%s includes=%s skip=%s take=%s",
            type_name(entity_type),
            predicate,
            ",".join(str(i) for i in includes),
            query.skip,
            query.take,
        )
        return query

    async def get_entities(
        self,
        request: FilterRequest,
        entity_type: Any,
        base: Optional[BaseQuery] = None,
        select: Optional[Callable[[Any], Any]] = None,
    ) -> List[Any]:
        query = self.compile(request, entity_type, base, select)
        return await self.repository.get_all(query)

    async def get_total_count(
        self,
        request: FilterRequest,
        entity_type: Any,
        base: Optional[BaseQuery] = None,
    ) -> int:
        """Rows matching the combined predicate, ignoring paging."""
        base = base or BaseQuery(entity_type)
        predicate = and_also(base.filter, compile_filter(request.filter, entity_type))
        return await self.repository.get_count(entity_type, predicate, base.cancellation)
