from __future__ import annotations
import datetime as dt
import logging
from decimal import Decimal
from typing import Any, List, Optional

from ..errors import FilterParseError, InvalidPropertyError
from ..fields import element_type, resolve_member, type_name, unwrap_optional
from ..filters.models import Operation
from .expressions import (
    Comparison,
    Constant,
    Contains,
    Expression,
    Lambda,
    Logical,
    Member,
    Parameter,
    Quantifier,
)
from .lexer import (
    ARROW,
    COMMA,
    DATETIME,
    DOT,
    IDENT,
    LPAREN,
    NUMBER,
    OP,
    RPAREN,
    STRING,
    Token,
    significant,
    tokenize,
)
from .rewrite import rewrite

log = logging.getLogger("odataquery.compiler")

ROOT_PARAMETER = "entity"

_WORD_OPERATORS = frozenset(op.token for op in Operation if op is not Operation.CONTAINS)
_SYMBOL_OPERATORS = {
    "==": Operation.EQUALS,
    "!=": Operation.NOT_EQUAL_TO,
    ">": Operation.GREATER_THAN,
    "<": Operation.LESS_THAN,
    ">=": Operation.GREATER_THAN_OR_EQUAL_TO,
    "<=": Operation.LESS_THAN_OR_EQUAL_TO,
}

_NULL_TYPE = type(None)


def _category(tp: Any) -> Optional[str]:
    """Comparison family of a static type; None when anything goes."""
    tp = unwrap_optional(tp)
    if not isinstance(tp, type) or tp is _NULL_TYPE:
        return None
    if issubclass(tp, bool):
        return "bool"
    if issubclass(tp, str):
        return "str"
    if issubclass(tp, (int, float, Decimal)):
        return "number"
    if issubclass(tp, (dt.date, dt.time)):
        return "temporal"
    return None


def _is_boolean(expr: Expression) -> bool:
    tp = unwrap_optional(expr.result_type)
    return tp is Any or tp is bool


class _Parser:
    """
    Recursive-descent parser over the rewritten filter text.

        expr     := and_expr ("or" and_expr)*
        and_expr := cmp ("and" cmp)*
        cmp      := operand [op operand]
        operand  := literal | "(" expr ")" | DateTime(...) | path
    """

    def __init__(self, text: str, entity_type: Any):
        self.text = text
        self.tokens: List[Token] = significant(tokenize(text))
        self.index = 0
        self.entity_type = entity_type
        self.root = Parameter(ROOT_PARAMETER, entity_type)
        self.scopes: List[Parameter] = []

    # -- token helpers -----------------------------------------------------

    def peek(self, offset: int = 0) -> Optional[Token]:
        i = self.index + offset
        return self.tokens[i] if i < len(self.tokens) else None

    def advance(self) -> Token:
        tok = self.peek()
        if tok is None:
            raise self.error("Unexpected end of filter")
        self.index += 1
        return tok

    def expect(self, kind: str, what: str) -> Token:
        tok = self.peek()
        if tok is None or tok.kind != kind:
            raise self.error(f"Expected {what}", tok)
        self.index += 1
        return tok

    def error(self, message: str, tok: Optional[Token] = None) -> FilterParseError:
        if tok is None:
            return FilterParseError(message, token=None, position=len(self.text))
        return FilterParseError(f"{message} at '{tok.text}' (position {tok.pos})", token=tok.text, position=tok.pos)

    # -- grammar -----------------------------------------------------------

    def parse(self) -> Lambda:
        body = self.parse_or()
        tok = self.peek()
        if tok is not None:
            raise self.error("Unexpected token", tok)
        if not _is_boolean(body):
            raise FilterParseError("Filter must be a boolean expression", token=self.text, position=0)
        return Lambda(self.root, body)

    def parse_or(self) -> Expression:
        left = self.parse_and()
        while self.peek() is not None and self.peek().is_word("or"):
            tok = self.advance()
            right = self.parse_and()
            self._require_boolean(left, right, tok)
            left = Logical("or", left, right)
        return left

    def parse_and(self) -> Expression:
        left = self.parse_comparison()
        while self.peek() is not None and self.peek().is_word("and"):
            tok = self.advance()
            right = self.parse_comparison()
            self._require_boolean(left, right, tok)
            left = Logical("and", left, right)
        return left

    def parse_comparison(self) -> Expression:
        left = self.parse_operand()
        tok = self.peek()
        op = self._operator(tok)
        if op is None:
            return left
        self.advance()
        right = self.parse_operand()
        lc, rc = _category(left.result_type), _category(right.result_type)
        if lc and rc and lc != rc:
            raise self.error(
                f"Cannot compare {type_name(left.result_type)} with {type_name(right.result_type)}", tok
            )
        return Comparison(op, left, right)

    def parse_operand(self) -> Expression:
        tok = self.peek()
        if tok is None:
            raise self.error("Unexpected end of filter")
        if tok.kind == LPAREN:
            self.advance()
            inner = self.parse_or()
            self.expect(RPAREN, "')'")
            return inner
        if tok.kind == STRING:
            self.advance()
            return Constant(tok.value, str)
        if tok.kind == NUMBER:
            self.advance()
            return Constant(tok.value, type(tok.value))
        if tok.kind == DATETIME:
            raise self.error("Invalid date literal", tok)
        if tok.kind == IDENT:
            if tok.is_word("true", "false"):
                self.advance()
                return Constant(tok.text.lower() == "true", bool)
            if tok.is_word("null"):
                self.advance()
                return Constant(None, _NULL_TYPE)
            nxt = self.peek(1)
            if tok.text == "DateTime" and nxt is not None and nxt.kind == LPAREN:
                return self.parse_datetime()
            return self.parse_path()
        raise self.error("Unexpected token", tok)

    def parse_datetime(self) -> Constant:
        head = self.advance()
        self.expect(LPAREN, "'('")
        parts: List[int] = []
        while True:
            num = self.expect(NUMBER, "a number")
            if not isinstance(num.value, int):
                raise self.error("Invalid date literal", num)
            parts.append(num.value)
            tok = self.advance()
            if tok.kind == RPAREN:
                break
            if tok.kind != COMMA:
                raise self.error("Expected ',' or ')'", tok)
        if not 3 <= len(parts) <= 6:
            raise self.error("DateTime takes 3 to 6 arguments", head)
        try:
            return Constant(dt.datetime(*parts), dt.datetime)
        except ValueError as e:
            raise self.error(f"Invalid date literal ({e})", head) from e

    def parse_path(self) -> Expression:
        first = self.advance()
        expr = self._scoped(first.text)
        if expr is None:
            nxt = self.peek()
            if first.text == ROOT_PARAMETER and nxt is not None and nxt.kind == DOT:
                expr = self.root
            else:
                expr = self._member(self.root, first)

        while self.peek() is not None and self.peek().kind == DOT:
            self.advance()
            name = self.expect(IDENT, "a member name")
            call = self.peek()
            if call is not None and call.kind == LPAREN:
                if name.text.lower() == "contains":
                    return self.parse_contains(expr, name)
                if name.is_word("any", "all"):
                    return self.parse_quantifier(expr, name)
                raise self.error("Unsupported function", name)
            expr = self._member(expr, name)
        return expr

    def parse_contains(self, target: Expression, name: Token) -> Contains:
        tp = unwrap_optional(target.result_type)
        if tp is not Any and _category(tp) != "str" and element_type(tp) is None:
            raise self.error(f"Contains is not supported on {type_name(tp)}", name)
        self.expect(LPAREN, "'('")
        argument = self.parse_or()
        self.expect(RPAREN, "')'")
        return Contains(target, argument)

    def parse_quantifier(self, source: Expression, name: Token) -> Quantifier:
        kind = name.text.lower()
        tp = unwrap_optional(source.result_type)
        item_type = element_type(tp)
        if item_type is None:
            if tp is not Any:
                raise self.error(f"{kind} requires a collection, not {type_name(tp)}", name)
            item_type = Any
        self.expect(LPAREN, "'('")
        tok = self.peek()
        if tok is not None and tok.kind == RPAREN:
            self.advance()
            if kind == "all":
                raise self.error("all requires a predicate", name)
            return Quantifier(kind, source, None)

        variable = self.expect(IDENT, "a lambda parameter")
        self.expect(ARROW, "'=>'")
        parameter = Parameter(variable.text, item_type)
        self.scopes.append(parameter)
        try:
            body = self.parse_or()
        finally:
            self.scopes.pop()
        closing = self.expect(RPAREN, "')'")
        if not _is_boolean(body):
            raise self.error(f"{kind} predicate must be boolean", closing)
        return Quantifier(kind, source, Lambda(parameter, body))

    # -- helpers -----------------------------------------------------------

    def _scoped(self, name: str) -> Optional[Parameter]:
        for parameter in reversed(self.scopes):
            if parameter.name == name:
                return parameter
        return None

    def _member(self, target: Expression, tok: Token) -> Member:
        owner = target.result_type
        try:
            tp = resolve_member(owner, tok.text)
        except LookupError:
            err = InvalidPropertyError(tok.text, type_name(unwrap_optional(owner)))
            err.position = tok.pos
            err.details["position"] = tok.pos
            raise err from None
        return Member(target, tok.text, tp)

    def _operator(self, tok: Optional[Token]) -> Optional[Operation]:
        if tok is None:
            return None
        if tok.kind == OP:
            return _SYMBOL_OPERATORS[tok.text]
        if tok.kind == IDENT and tok.text.lower() in _WORD_OPERATORS:
            return Operation.from_token(tok.text)
        return None

    def _require_boolean(self, left: Expression, right: Expression, tok: Token) -> None:
        if not (_is_boolean(left) and _is_boolean(right)):
            raise self.error(f"Operands of '{tok.text}' must be boolean", tok)


def parse_predicate(text: str, entity_type: Any) -> Lambda:
    """Parse already-rewritten filter text into a predicate over `entity_type`."""
    return _Parser(text, entity_type).parse()


def compile_filter(filter_text: Optional[str], entity_type: Any) -> Optional[Lambda]:
    """
    Compile an OData filter string into a callable predicate.
    Empty or blank input yields None.
    """
    if not filter_text or not filter_text.strip():
        return None
    rewritten = rewrite(filter_text)
    predicate = parse_predicate(rewritten, entity_type)
    log.debug("Compiled filter %r for %s: %s", filter_text, type_name(entity_type), predicate)
    return predicate
