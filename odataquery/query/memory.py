from __future__ import annotations
import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .expressions import Lambda
from .models import CompiledQuery


def _check_cancelled(cancellation: Optional[asyncio.Event]) -> None:
    if cancellation is not None and cancellation.is_set():
        raise asyncio.CancelledError()


class InMemoryRepository:
    """
    ReadOnlyRepository over lists of records held in memory, keyed by type.
    Applies filter, order, skip, take and select in that order.
    """

    def __init__(self, data: Optional[Mapping[Any, Iterable[Any]]] = None):
        self._data: Dict[Any, List[Any]] = {k: list(v) for k, v in (data or {}).items()}

    def add(self, entity_type: Any, *rows: Any) -> None:
        self._data.setdefault(entity_type, []).extend(rows)

    def rows(self, entity_type: Any) -> List[Any]:
        return list(self._data.get(entity_type, []))

    async def get_all(self, query: CompiledQuery) -> List[Any]:
        _check_cancelled(query.cancellation)
        rows = self.rows(query.entity_type)
        if query.predicate is not None:
            rows = [row for row in rows if query.predicate(row)]
        if query.order is not None:
            rows = list(query.order(rows))
        if query.skip:
            rows = rows[query.skip:]
        if query.take is not None:
            rows = rows[: query.take]
        if query.select is not None:
            rows = [query.select(row) for row in rows]
        return rows

    async def get_count(
        self,
        entity_type: Any,
        predicate: Optional[Lambda],
        cancellation: Optional[asyncio.Event] = None,
    ) -> int:
        _check_cancelled(cancellation)
        rows = self.rows(entity_type)
        if predicate is None:
            return len(rows)
        return sum(1 for row in rows if predicate(row))
