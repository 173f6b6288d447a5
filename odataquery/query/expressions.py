"""
Expression trees for compiled predicates.

A compiled filter is a Lambda over one Parameter. Trees are immutable; a
Lambda is called with an entity and evaluates its body against a scope that
maps Parameter objects (by identity) to values. Transformers rebuild trees,
which is how two predicates are rebound to one shared parameter before being
conjoined.
"""
from __future__ import annotations
import dataclasses
import datetime as dt
import json
import operator
from enum import Enum
from typing import Any, Callable, Dict, Optional

from ..fields import read_member
from ..filters.models import Operation

Scope = Dict["Parameter", Any]

_SYMBOLS = {
    Operation.EQUALS: "==",
    Operation.NOT_EQUAL_TO: "!=",
    Operation.GREATER_THAN: ">",
    Operation.LESS_THAN: "<",
    Operation.GREATER_THAN_OR_EQUAL_TO: ">=",
    Operation.LESS_THAN_OR_EQUAL_TO: "<=",
}

_ORDERING: Dict[Operation, Callable[[Any, Any], bool]] = {
    Operation.GREATER_THAN: operator.gt,
    Operation.LESS_THAN: operator.lt,
    Operation.GREATER_THAN_OR_EQUAL_TO: operator.ge,
    Operation.LESS_THAN_OR_EQUAL_TO: operator.le,
}


class Expression:
    result_type: Any = Any

    def evaluate(self, scope: Scope) -> Any:
        raise NotImplementedError

    def accept(self, visitor: "ExpressionVisitor") -> Any:
        return visitor.visit(self)


@dataclasses.dataclass(eq=False)
class Parameter(Expression):
    name: str
    result_type: Any = Any

    def evaluate(self, scope: Scope) -> Any:
        return scope[self]

    def __str__(self) -> str:
        return self.name


@dataclasses.dataclass(frozen=True)
class Constant(Expression):
    value: Any
    result_type: Any = Any

    def evaluate(self, scope: Scope) -> Any:
        return self.value

    def __str__(self) -> str:
        return render_constant(self.value)


@dataclasses.dataclass(frozen=True)
class Member(Expression):
    target: Expression
    name: str
    result_type: Any = Any

    def evaluate(self, scope: Scope) -> Any:
        return read_member(self.target.evaluate(scope), self.name)

    def __str__(self) -> str:
        return f"{self.target}.{self.name}"


@dataclasses.dataclass(frozen=True)
class Comparison(Expression):
    operation: Operation
    left: Expression
    right: Expression
    result_type: Any = bool

    def evaluate(self, scope: Scope) -> bool:
        return compare(self.operation, self.left.evaluate(scope), self.right.evaluate(scope))

    def __str__(self) -> str:
        return f"({self.left} {_SYMBOLS[self.operation]} {self.right})"


@dataclasses.dataclass(frozen=True)
class Logical(Expression):
    operator: str  # "and" | "or"
    left: Expression
    right: Expression
    result_type: Any = bool

    def evaluate(self, scope: Scope) -> bool:
        if self.operator == "and":
            return bool(self.left.evaluate(scope)) and bool(self.right.evaluate(scope))
        return bool(self.left.evaluate(scope)) or bool(self.right.evaluate(scope))

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclasses.dataclass(frozen=True)
class Contains(Expression):
    target: Expression
    argument: Expression
    result_type: Any = bool

    def evaluate(self, scope: Scope) -> bool:
        container = self.target.evaluate(scope)
        if container is None:
            return False
        item = self.argument.evaluate(scope)
        if isinstance(container, str):
            return item is not None and str(item) in container
        return item in container

    def __str__(self) -> str:
        return f"{self.target}.Contains({self.argument})"


@dataclasses.dataclass(frozen=True)
class Lambda(Expression):
    parameter: Parameter
    body: Expression
    result_type: Any = bool

    def evaluate(self, scope: Scope) -> "Lambda":
        return self

    def apply(self, value: Any, scope: Optional[Scope] = None) -> Any:
        inner = dict(scope or {})
        inner[self.parameter] = value
        return self.body.evaluate(inner)

    def __call__(self, entity: Any) -> bool:
        return bool(self.apply(entity))

    def __str__(self) -> str:
        return f"{self.parameter} => {self.body}"


@dataclasses.dataclass(frozen=True)
class Quantifier(Expression):
    kind: str  # "any" | "all"
    source: Expression
    predicate: Optional[Lambda] = None
    result_type: Any = bool

    def evaluate(self, scope: Scope) -> bool:
        items = self.source.evaluate(scope) or ()
        if self.predicate is None:
            return any(True for _ in items)
        test = (bool(self.predicate.apply(item, scope)) for item in items)
        return any(test) if self.kind == "any" else all(test)

    def __str__(self) -> str:
        inner = "" if self.predicate is None else str(self.predicate)
        return f"{self.source}.{self.kind}({inner})"


Predicate = Lambda


# ---------------------------------------------------------------------------
# Evaluation helpers
# ---------------------------------------------------------------------------

def render_constant(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, dt.datetime):
        return (
            f"DateTime({value.year}, {value.month}, {value.day}, "
            f"{value.hour}, {value.minute}, {value.second})"
        )
    return str(value)


def _align(left: Any, right: Any):
    """Bring two operands to comparable shapes (enums, dates, timezones)."""
    if isinstance(left, Enum) and not isinstance(right, Enum):
        left = left.value
    if isinstance(right, Enum) and not isinstance(left, Enum):
        right = right.value
    if isinstance(left, dt.date) and not isinstance(left, dt.datetime) and isinstance(right, dt.datetime):
        left = dt.datetime.combine(left, dt.time())
    if isinstance(right, dt.date) and not isinstance(right, dt.datetime) and isinstance(left, dt.datetime):
        right = dt.datetime.combine(right, dt.time())
    if isinstance(left, dt.datetime) and isinstance(right, dt.datetime):
        if (left.tzinfo is None) != (right.tzinfo is None):
            if left.tzinfo is None:
                left = left.replace(tzinfo=dt.timezone.utc)
            else:
                right = right.replace(tzinfo=dt.timezone.utc)
    return left, right


def compare(op: Operation, left: Any, right: Any) -> bool:
    left, right = _align(left, right)
    if op is Operation.EQUALS:
        return left == right
    if op is Operation.NOT_EQUAL_TO:
        return left != right
    if left is None or right is None:
        return False
    return _ORDERING[op](left, right)


# ---------------------------------------------------------------------------
# Visitors
# ---------------------------------------------------------------------------

class ExpressionVisitor:
    """Dispatches to visit_<ClassName>, falling back to generic_visit."""

    def visit(self, node: Expression) -> Any:
        method = getattr(self, "visit_" + node.__class__.__name__, self.generic_visit)
        return method(node)

    def generic_visit(self, node: Expression) -> Any:
        for f in dataclasses.fields(node):
            child = getattr(node, f.name)
            if isinstance(child, Expression):
                self.visit(child)
        return node


class ExpressionTransformer(ExpressionVisitor):
    """Rebuilds nodes whose children changed; untouched subtrees are shared."""

    def generic_visit(self, node: Expression) -> Expression:
        if isinstance(node, Parameter):
            return node
        changes = {}
        for f in dataclasses.fields(node):
            child = getattr(node, f.name)
            if isinstance(child, Expression):
                new = self.visit(child)
                if new is not child:
                    changes[f.name] = new
        return dataclasses.replace(node, **changes) if changes else node


class ParameterReplacer(ExpressionTransformer):
    def __init__(self, source: Parameter, target: Parameter):
        self.source = source
        self.target = target

    def visit_Parameter(self, node: Parameter) -> Parameter:
        return self.target if node is self.source else node


def and_also(left: Optional[Lambda], right: Optional[Lambda]) -> Optional[Lambda]:
    """
    Conjoin two predicates. Both bodies are rebound to one new shared
    parameter before being joined with "and"; a missing side yields the other.
    """
    if left is None:
        return right
    if right is None:
        return left
    parameter = Parameter("entity", left.parameter.result_type)
    left_body = ParameterReplacer(left.parameter, parameter).visit(left.body)
    right_body = ParameterReplacer(right.parameter, parameter).visit(right.body)
    return Lambda(parameter, Logical("and", left_body, right_body))


def parameters_of(node: Expression) -> set:
    """Every Parameter object referenced anywhere in `node`."""
    found = set()

    class _Collector(ExpressionVisitor):
        def visit_Parameter(self, p: Parameter) -> Parameter:
            found.add(p)
            return p

    _Collector().visit(node)
    return found
