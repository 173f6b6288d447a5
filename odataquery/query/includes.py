from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from ..errors import InvalidPropertyError
from ..fields import element_type, field_path, read_member, resolve_member, type_name

log = logging.getLogger("odataquery.includes")


@dataclass(frozen=True)
class IncludePath:
    """A related member to load with each row: ``Employee`` or ``Tags/Owner``."""
    path: Tuple[str, ...]
    result_type: Any = Any

    def resolve(self, entity: Any) -> Any:
        """Walk the path on a loaded row; a collection parent yields a list."""
        parent = read_member(entity, self.path[0])
        if len(self.path) == 1 or parent is None:
            return parent
        if isinstance(parent, (list, tuple, set, frozenset)):
            return [read_member(item, self.path[1]) for item in parent]
        return read_member(parent, self.path[1])

    def __str__(self) -> str:
        return "/".join(self.path)


def include_path(entity_type: Any, field: Any) -> IncludePath:
    """
    Resolve a field reference or ``Parent/Child`` name to an IncludePath.
    Only one level of nesting is supported.
    """
    path = field_path(field, allow_names=True)
    raw = "/".join(path)
    entity = type_name(entity_type)
    if len(path) > 2 or not all(path):
        raise InvalidPropertyError(raw, entity)
    try:
        tp = resolve_member(entity_type, path[0])
        if len(path) == 2:
            owner = element_type(tp) or tp
            tp = resolve_member(owner, path[1])
    except LookupError:
        raise InvalidPropertyError(raw, entity) from None
    return IncludePath(path, tp)


def expand_includes(
    expand: Optional[str],
    entity_type: Any,
    base_includes: Iterable[IncludePath] = (),
) -> Tuple[IncludePath, ...]:
    """
    Base includes followed by the comma-separated ``$expand`` paths, skipping
    any path already present. The base collection is never modified.
    """
    result: List[IncludePath] = list(base_includes)
    if not expand or not expand.strip():
        return tuple(result)
    seen = {inc.path for inc in result}
    for raw in expand.split(","):
        raw = raw.strip()
        if not raw:
            continue
        inc = include_path(entity_type, raw)
        if inc.path in seen:
            log.warning("Skipping duplicate include %s on %s", inc, type_name(entity_type))
            continue
        seen.add(inc.path)
        result.append(inc)
    return tuple(result)
