from __future__ import annotations
import dataclasses
import datetime as dt
import typing as t
from collections import abc
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

from ..errors import InvalidPropertyError, UnsupportedFieldExpression

# Types that never expose addressable members.
SCALAR_TYPES = (str, int, float, bool, Decimal, dt.datetime, dt.date, dt.time, bytes)
_COLLECTION_ORIGINS = (list, tuple, set, frozenset)


# ---------------------------------------------------------------------------
# Type inspection
# ---------------------------------------------------------------------------

def unwrap_optional(tp: Any) -> Any:
    """Optional[X] / X | None -> X. Other unions are left alone."""
    args = t.get_args(tp)
    if args and type(None) in args:
        rest = [a for a in args if a is not type(None)]
        if len(rest) == 1:
            return rest[0]
    return tp


def element_type(tp: Any) -> Optional[Any]:
    """
    Return the element type of a collection annotation, None when `tp` is not
    a collection. Bare `list` gives Any.
    """
    tp = unwrap_optional(tp)
    if tp in _COLLECTION_ORIGINS:
        return Any
    origin = t.get_origin(tp)
    if origin is None:
        return None
    if origin in _COLLECTION_ORIGINS or (
        isinstance(origin, type)
        and issubclass(origin, abc.Collection)
        and not issubclass(origin, (str, bytes, abc.Mapping))
    ):
        args = [a for a in t.get_args(tp) if a is not Ellipsis]
        return args[0] if args else Any
    return None


def is_scalar(tp: Any) -> bool:
    tp = unwrap_optional(tp)
    return isinstance(tp, type) and issubclass(tp, SCALAR_TYPES + (Enum,))


@lru_cache(maxsize=None)
def entity_fields(entity_type: Any) -> Dict[str, Any]:
    """
    Map of addressable member name -> annotated type for a record class.
    Supports pydantic models, dataclasses and plain annotated classes.
    """
    model_fields = getattr(entity_type, "model_fields", None)
    if isinstance(model_fields, dict):
        return {name: f.annotation for name, f in model_fields.items()}
    if dataclasses.is_dataclass(entity_type):
        hints = t.get_type_hints(entity_type)
        return {f.name: hints.get(f.name, Any) for f in dataclasses.fields(entity_type)}
    try:
        hints = t.get_type_hints(entity_type)
    except TypeError:
        return {}
    return {
        name: tp
        for name, tp in hints.items()
        if not name.startswith("_") and t.get_origin(tp) is not t.ClassVar
    }


def type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or str(tp)


def resolve_member(owner_type: Any, name: str) -> Any:
    """
    Type of member `name` on `owner_type`.
    Unknown owners (Any, dicts, unannotated classes) accept any member and
    yield Any. Raises LookupError when the member cannot exist.
    """
    owner_type = unwrap_optional(owner_type)
    if owner_type is Any or owner_type is None:
        return Any
    if is_scalar(owner_type) or element_type(owner_type) is not None:
        raise LookupError(name)
    fields = entity_fields(owner_type) if isinstance(owner_type, type) else {}
    if not fields:
        return Any
    if name not in fields:
        raise LookupError(name)
    return fields[name]


def resolve_path(entity_type: Any, path: Tuple[str, ...], *, raw: Optional[str] = None) -> Any:
    """Walk a member path, raising InvalidPropertyError on the first bad segment."""
    current = entity_type
    for name in path:
        if not name:
            raise InvalidPropertyError(raw or ".".join(path), type_name(entity_type))
        try:
            current = resolve_member(current, name)
        except LookupError:
            raise InvalidPropertyError(raw or ".".join(path), type_name(entity_type)) from None
    return current


def read_member(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name)


# ---------------------------------------------------------------------------
# Field references
# ---------------------------------------------------------------------------

class FieldRef:
    """
    A typed reference to a member of a record class, e.g. ``fields.Comment``
    or ``fields.Employee.Name``. Resolved to a stable name, never evaluated.
    """
    __slots__ = ("owner", "path", "field_type")

    def __init__(self, owner: Any, path: Tuple[str, ...], field_type: Any):
        self.owner = owner
        self.path = path
        self.field_type = field_type

    @property
    def name(self) -> str:
        return ".".join(self.path)

    def __getattr__(self, name: str) -> "FieldRef":
        if name.startswith("_"):
            raise AttributeError(name)
        target = element_type(self.field_type) or self.field_type
        path = self.path + (name,)
        try:
            tp = resolve_member(target, name)
        except LookupError:
            raise InvalidPropertyError(".".join(path), type_name(self.owner)) from None
        return FieldRef(self.owner, path, tp)

    def cast(self, target_type: Any) -> "Cast":
        return Cast(self, target_type)

    def __repr__(self) -> str:
        return f"FieldRef({type_name(self.owner)}.{self.name})"


@dataclasses.dataclass(frozen=True)
class Cast:
    """A boxing/widening conversion wrapped around a field reference."""
    operand: Any
    target_type: Any = object


class Fields:
    """Namespace of FieldRefs for one record class."""

    def __init__(self, entity_type: Any):
        self._entity_type = entity_type

    def __getattr__(self, name: str) -> FieldRef:
        if name.startswith("_"):
            raise AttributeError(name)
        members = entity_fields(self._entity_type)
        if name not in members:
            raise InvalidPropertyError(name, type_name(self._entity_type))
        return FieldRef(self._entity_type, (name,), members[name])

    def __iter__(self):
        return (getattr(self, name) for name in entity_fields(self._entity_type))

    def __dir__(self):
        return list(entity_fields(self._entity_type))

    def __repr__(self) -> str:
        return f"Fields({type_name(self._entity_type)})"


def fields_of(entity_type: Any) -> Fields:
    return Fields(entity_type)


def field_path(expression: Any, *, allow_names: bool = False) -> Tuple[str, ...]:
    """
    Resolve a field expression to its member path.
    Accepts a FieldRef, a Cast around one (unwrapped recursively) and, where
    `allow_names` is set, a plain dotted or slashed member name.
    """
    if isinstance(expression, FieldRef):
        return expression.path
    if isinstance(expression, Cast):
        return field_path(expression.operand, allow_names=allow_names)
    if allow_names and isinstance(expression, str) and expression.strip():
        return tuple(expression.strip().replace("/", ".").split("."))
    raise UnsupportedFieldExpression(expression)


def field_name(expression: Any, *, allow_names: bool = False, separator: str = ".") -> str:
    return separator.join(field_path(expression, allow_names=allow_names))
