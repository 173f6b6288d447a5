from __future__ import annotations
import asyncio
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol, Tuple, runtime_checkable

from .expressions import Lambda
from .includes import IncludePath
from .ordering import OrderFn


@dataclass(frozen=True)
class BaseQuery:
    """
    Constraints that apply to every request for one entity type: a filter the
    caller cannot widen, a fallback ordering, always-loaded includes and a
    page-size cap.
    """
    entity_type: Any
    filter: Optional[Lambda] = None
    default_order: Optional[OrderFn] = None
    include: Tuple[IncludePath, ...] = ()
    max_take: Optional[int] = None
    cancellation: Optional[asyncio.Event] = None


@dataclass(frozen=True)
class CompiledQuery:
    entity_type: Any
    predicate: Optional[Lambda] = None
    order: Optional[OrderFn] = None
    includes: Tuple[IncludePath, ...] = ()
    skip: Optional[int] = None
    take: Optional[int] = None
    select: Optional[Callable[[Any], Any]] = None
    cancellation: Optional[asyncio.Event] = None


@runtime_checkable
class ReadOnlyRepository(Protocol):
    async def get_all(self, query: CompiledQuery) -> List[Any]:
        ...

    async def get_count(
        self,
        entity_type: Any,
        predicate: Optional[Lambda],
        cancellation: Optional[asyncio.Event] = None,
    ) -> int:
        ...
