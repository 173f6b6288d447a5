from __future__ import annotations
import datetime as dt
from enum import Enum
from typing import Any

from ..errors import FilterParseError
from ..query.lexer import DATETIME, IDENT, LPAREN, NUMBER, RPAREN, COMMA, STRING, significant, tokenize
from ..query.rewrite import parse_timestamp


def format_datetime(value: dt.datetime) -> str:
    """
    Round-trip timestamp: YYYY-MM-DDThh:mm:ss.fffffff, plus Z or an offset
    when the value is timezone-aware.
    """
    text = value.strftime("%Y-%m-%dT%H:%M:%S") + f".{value.microsecond * 10:07d}"
    offset = value.utcoffset()
    if offset is None:
        return text
    if not offset:
        return text + "Z"
    total = int(offset.total_seconds()) // 60
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def format_literal(value: Any) -> str:
    """Render a typed value as a filter-string literal."""
    if isinstance(value, Enum):
        value = value.value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    if isinstance(value, dt.datetime):
        return format_datetime(value)
    if isinstance(value, dt.date):
        return format_datetime(dt.datetime.combine(value, dt.time()))
    return str(value)


def parse_literal(text: str) -> Any:
    """
    Inverse of format_literal: quoted strings (either quote style), numbers,
    true/false/null, ISO timestamps and DateTime(...) calls.
    """
    tokens = significant(tokenize(text.strip()))
    if not tokens:
        raise FilterParseError("Empty literal", token=text)
    head = tokens[0]
    if len(tokens) == 1:
        if head.kind in (STRING, NUMBER):
            return head.value
        if head.kind == DATETIME:
            try:
                return parse_timestamp(head.value)
            except ValueError:
                raise FilterParseError(f"Invalid date literal '{head.text}'", head.text, head.pos) from None
        if head.is_word("true", "false"):
            return head.text.lower() == "true"
        if head.is_word("null"):
            return None
    if head.kind == IDENT and head.text == "DateTime" and len(tokens) > 2 and tokens[1].kind == LPAREN:
        args = [tok for tok in tokens[2:] if tok.kind != COMMA]
        if args and args[-1].kind == RPAREN and all(tok.kind == NUMBER for tok in args[:-1]):
            try:
                return dt.datetime(*(int(tok.value) for tok in args[:-1]))
            except (TypeError, ValueError) as e:
                raise FilterParseError(f"Invalid date literal '{text}': {e}", token=text) from e
    raise FilterParseError(f"Not a literal: '{text}'", token=text)
