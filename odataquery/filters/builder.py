from __future__ import annotations
from typing import Any, Optional, Union

from ..fields import field_name
from .literals import format_literal
from .models import FilterRequest, Operation

_RAW = object()


class FilterBuilder:
    """
    Fluent builder for a FilterRequest.

    Every call returns a new builder around a new frozen request, so partially
    built filters can be shared or branched without affecting one another:

        base = FilterBuilder().where(fields.EmployeeId, Operation.EQUALS, 5)
        page = base.order_by(fields.StartTime).take(20)
        base.build().take  # None
    """
    __slots__ = ("_request",)

    def __init__(self, request: Optional[FilterRequest] = None):
        self._request = request or FilterRequest()

    def _with(self, **changes: Any) -> "FilterBuilder":
        return FilterBuilder(self._request.model_copy(update=changes))

    @staticmethod
    def _clause(field: Any, operation: Any, value: Any) -> str:
        if operation is _RAW:
            if isinstance(field, str):
                return field
            raise TypeError("An operation and a value are required with a field reference")
        name = field_name(field)
        op = Operation(operation)
        literal = format_literal(value)
        if op is Operation.CONTAINS:
            return f"{op.token}({name}, {literal})"
        return f"{name} {op.token} {literal}"

    # -- filter ------------------------------------------------------------

    def where(self, field: Any, operation: Union[Operation, str] = _RAW, value: Any = None) -> "FilterBuilder":
        """
        Set the filter to one clause, replacing any existing filter.
        ``where(fields.Id, Operation.EQUALS, 7)`` or ``where("Id eq 7")``.
        """
        return self._with(filter=f"({self._clause(field, operation, value)})")

    def or_where(self, field: Any, operation: Union[Operation, str] = _RAW, value: Any = None) -> "FilterBuilder":
        return self._append("or", self._clause(field, operation, value))

    def and_where(self, field: Any, operation: Union[Operation, str] = _RAW, value: Any = None) -> "FilterBuilder":
        return self._append("and", self._clause(field, operation, value))

    def _append(self, joiner: str, clause: str) -> "FilterBuilder":
        current = self._request.filter
        if not current or not current.strip():
            return self._with(filter=f"({clause})")
        return self._with(filter=f"{current} {joiner} ({clause})")

    def where_between(self, field: Any, lower: Any, upper: Any) -> "FilterBuilder":
        """Inclusive range; replaces any existing filter."""
        low = self._clause(field, Operation.GREATER_THAN_OR_EQUAL_TO, lower)
        high = self._clause(field, Operation.LESS_THAN_OR_EQUAL_TO, upper)
        return self._with(filter=f"({low} and {high})")

    def where_exclusive_between(self, field: Any, lower: Any, upper: Any) -> "FilterBuilder":
        """Exclusive range; replaces any existing filter."""
        low = self._clause(field, Operation.GREATER_THAN, lower)
        high = self._clause(field, Operation.LESS_THAN, upper)
        return self._with(filter=f"({low} and {high})")

    def where_id_is(self, entity_id: Any) -> "FilterBuilder":
        return self._with(filter=f"Id eq {format_literal(entity_id)}")

    # -- ordering ----------------------------------------------------------

    def order_by(self, field: Any, descending: bool = False) -> "FilterBuilder":
        name = field_name(field, allow_names=True)
        if descending:
            name += " desc"
        return self._with(order_by=name)

    def then_by(self, field: Any, descending: bool = False) -> "FilterBuilder":
        name = field_name(field, allow_names=True)
        if descending:
            name += " desc"
        current = self._request.then_by
        return self._with(then_by=name if current is None else f"{current},{name}")

    # -- expand / paging / flags --------------------------------------------

    def include(self, field: Any) -> "FilterBuilder":
        name = field_name(field, allow_names=True, separator="/")
        current = self._request.expand
        return self._with(expand=name if not current or not current.strip() else f"{current},{name}")

    def take(self, take: int) -> "FilterBuilder":
        if take < 0:
            raise ValueError("take must be >= 0")
        return self._with(take=take)

    def skip(self, skip: int) -> "FilterBuilder":
        if skip < 0:
            raise ValueError("skip must be >= 0")
        return self._with(skip=skip)

    def with_count(self) -> "FilterBuilder":
        return self._with(count=True)

    def with_links(self) -> "FilterBuilder":
        return self._with(links=True)

    # -- output ------------------------------------------------------------

    def build(self) -> FilterRequest:
        return self._request

    def build_query_string(self) -> str:
        return self._request.to_query_string()

    def __repr__(self) -> str:
        return f"FilterBuilder({self.build_query_string()!r})"
