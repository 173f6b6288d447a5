from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Tuple

from ..errors import FilterParseError
from ..fields import read_member, resolve_path, type_name

log = logging.getLogger("odataquery.ordering")

OrderFn = Callable[[Iterable[Any]], List[Any]]


@dataclass(frozen=True)
class SortKey:
    path: Tuple[str, ...]
    descending: bool = False

    def value(self, entity: Any) -> Any:
        current = entity
        for name in self.path:
            current = read_member(current, name)
        return current

    def sort_value(self, entity: Any) -> Tuple[bool, Any]:
        # None sorts before every value when ascending
        value = self.value(entity)
        if isinstance(value, Enum):
            value = value.value
        return (value is not None, value)

    def __str__(self) -> str:
        name = ".".join(self.path)
        return f"{name} desc" if self.descending else name


@dataclass(frozen=True)
class Ordering:
    """A chain of sort keys; calling it sorts rows into a new list."""
    keys: Tuple[SortKey, ...]

    def __call__(self, rows: Iterable[Any]) -> List[Any]:
        result = list(rows)
        # stable sorts applied from the last key to the first
        for key in reversed(self.keys):
            result.sort(key=key.sort_value, reverse=key.descending)
        return result

    def then(self, other: "Ordering") -> "Ordering":
        return Ordering(self.keys + other.keys)

    def __str__(self) -> str:
        return ", ".join(str(k) for k in self.keys)


def parse_ordering(text: str, entity_type: Any) -> Optional[Ordering]:
    """
    Parse ``Field[.Sub] [asc|desc], ...`` into an Ordering. Unknown members
    raise InvalidPropertyError.
    """
    keys: List[SortKey] = []
    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        parts = item.split()
        direction = parts[1].lower() if len(parts) > 1 else "asc"
        if len(parts) > 2 or direction not in ("asc", "desc"):
            raise FilterParseError(f"Invalid ordering '{item}'", token=item)
        field = parts[0]
        path = tuple(field.replace("/", ".").split("."))
        resolve_path(entity_type, path, raw=field)
        keys.append(SortKey(path, direction == "desc"))
    return Ordering(tuple(keys)) if keys else None


def compile_ordering(
    order_by: Optional[str],
    then_by: Optional[str],
    entity_type: Any,
    default: Optional[OrderFn] = None,
) -> Optional[OrderFn]:
    """
    Build the ordering for a request. Without ``$orderBy`` the default is
    returned as is; ``thenBy`` keys are chained after the ``$orderBy`` keys.
    """
    if not order_by or not order_by.strip():
        return default
    ordering = parse_ordering(order_by, entity_type)
    if ordering is None:
        return default
    if then_by and then_by.strip():
        secondary = parse_ordering(then_by, entity_type)
        if secondary is not None:
            ordering = ordering.then(secondary)
    log.debug("Compiled ordering for %s: %s", type_name(entity_type), ordering)
    return ordering
