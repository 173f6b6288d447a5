from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from .lexer import (
    COLON,
    DATETIME,
    DOT,
    IDENT,
    LPAREN,
    RPAREN,
    COMMA,
    SLASH,
    STRING,
    WS,
    Token,
    quote,
    tokenize,
)

log = logging.getLogger("odataquery.rewrite")

LAMBDA_PARAMETER = "x"
_QUANTIFIERS = ("any", "all")


# ---------------------------------------------------------------------------
# String literals
# ---------------------------------------------------------------------------

def normalize_strings(filter_text: str) -> str:
    """
    Re-emit every single-quoted literal as a double-quoted one.
    ``contains(Text, 'don''')`` -> ``contains(Text, "don'")``
    """
    out: List[str] = []
    for tok in tokenize(filter_text):
        if tok.kind == STRING and tok.text.startswith("'"):
            out.append(quote(tok.value))
        else:
            out.append(tok.text)
    return "".join(out)


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------

def parse_timestamp(match) -> datetime:
    """
    Build a naive UTC datetime from a DATETIME token match. Sub-second
    precision is kept here; the converter drops it.
    """
    value = datetime.strptime(match.group("main"), "%Y-%m-%dT%H:%M:%S")
    frac = match.group("frac")
    if frac:
        value = value.replace(microsecond=int(frac.ljust(7, "0")[:6]))
    tz = match.group("tz")
    if tz and tz != "Z":
        sign = 1 if tz[0] == "+" else -1
        hours, minutes = int(tz[1:3]), int(tz[4:6])
        offset = timezone(sign * timedelta(hours=hours, minutes=minutes))
        value = value.replace(tzinfo=offset).astimezone(timezone.utc).replace(tzinfo=None)
    return value


def datetime_call(value: datetime) -> str:
    return (
        f"DateTime({value.year:04d}, {value.month:02d}, {value.day:02d}, "
        f"{value.hour:02d}, {value.minute:02d}, {value.second:02d})"
    )


def convert_datetimes(filter_text: str) -> str:
    """
    Replace ISO-8601 timestamp tokens with ``DateTime(y, m, d, h, mi, s)``
    calls, adjusted to UTC. Tokens with an impossible calendar value are left
    as they are.
    """
    out: List[str] = []
    for tok in tokenize(filter_text):
        if tok.kind == DATETIME:
            try:
                out.append(datetime_call(parse_timestamp(tok.value)))
                continue
            except ValueError:
                log.debug("Leaving invalid timestamp %r unconverted", tok.text)
        out.append(tok.text)
    return "".join(out)


# ---------------------------------------------------------------------------
# contains / any / all
# ---------------------------------------------------------------------------

def _next_significant(tokens: List[Token], index: int) -> int:
    while index < len(tokens) and tokens[index].kind == WS:
        index += 1
    return index


def _kind_at(tokens: List[Token], index: int) -> Optional[str]:
    return tokens[index].kind if index < len(tokens) else None


def _read_path(tokens: List[Token], index: int) -> Tuple[List[str], int]:
    """Read IDENT ((/|.) IDENT)* starting at `index`."""
    parts: List[str] = []
    if _kind_at(tokens, index) != IDENT:
        return parts, index
    parts.append(tokens[index].text)
    index += 1
    while _kind_at(tokens, index) in (SLASH, DOT) and _kind_at(tokens, index + 1) == IDENT:
        if _is_quantifier(tokens, index):
            break
        parts.append(tokens[index + 1].text)
        index += 2
    return parts, index


def _is_quantifier(tokens: List[Token], index: int) -> bool:
    """`index` points at a slash opening ``/any(`` or ``/all(``."""
    return (
        _kind_at(tokens, index) == SLASH
        and _kind_at(tokens, index + 1) == IDENT
        and tokens[index + 1].is_word(*_QUANTIFIERS)
        and _kind_at(tokens, index + 2) == LPAREN
    )


def _match_contains(tokens: List[Token], index: int, bound: List[Tuple[str, int]]):
    """``contains(Field,`` starting at `index`; returns (replacement, next index)."""
    i = _next_significant(tokens, index + 2)
    parts, i = _read_path(tokens, i)
    if not parts:
        return None
    i = _next_significant(tokens, i)
    if _kind_at(tokens, i) != COMMA:
        return None
    i = _next_significant(tokens, i + 1)
    if bound and parts[0] == bound[-1][0] and len(parts) > 1:
        parts[0] = LAMBDA_PARAMETER
    return f"{'.'.join(parts)}.Contains(", i


def _match_quantifier(tokens: List[Token], index: int):
    """
    ``/any(`` at `index`. Returns (replacement, next index, bound name) or
    None when the bound variable does not match on both sides of the colon.
    """
    keyword = tokens[index + 1].text.lower()
    i = _next_significant(tokens, index + 3)
    if _kind_at(tokens, i) == RPAREN:
        return f".{keyword}()", i + 1, None
    if _kind_at(tokens, i) != IDENT:
        return None
    name = tokens[i].text
    j = _next_significant(tokens, i + 1)
    if _kind_at(tokens, j) != COLON:
        return None
    j = _next_significant(tokens, j + 1)
    if _kind_at(tokens, j) != IDENT or tokens[j].text != name or _kind_at(tokens, j + 1) != SLASH:
        return None
    return f".{keyword}({LAMBDA_PARAMETER} => {LAMBDA_PARAMETER}.", j + 2, name


def rewrite_functions(filter_text: str) -> str:
    """
    Rewrite OData function and lambda syntax into method-call syntax:
      contains(Field, "v")          -> Field.Contains("v")
      Tags/any(t:t/Name eq "a")     -> Tags.any(x => x.Name eq "a")
      Tags/any()                    -> Tags.any()
      Employee/Name                 -> Employee.Name
    """
    tokens = tokenize(filter_text)
    out: List[str] = []
    bound: List[Tuple[str, int]] = []  # (variable, paren depth of its body)
    depth = 0
    prev_kind: Optional[str] = None
    i = 0
    while i < len(tokens):
        tok = tokens[i]

        if tok.is_word("contains") and _kind_at(tokens, i + 1) == LPAREN:
            match = _match_contains(tokens, i, bound)
            if match:
                replacement, i = match
                out.append(replacement)
                depth += 1
                prev_kind = LPAREN
                continue

        if _is_quantifier(tokens, i):
            match = _match_quantifier(tokens, i)
            if match:
                replacement, i, name = match
                out.append(replacement)
                if name is None:
                    prev_kind = RPAREN
                else:
                    depth += 1
                    bound.append((name, depth))
                    prev_kind = DOT
                continue
            log.debug("Quantifier at %d does not bind a matching variable", tok.pos)

        if (
            tok.kind == IDENT
            and bound
            and tok.text == bound[-1][0]
            and prev_kind != DOT
            and _kind_at(tokens, i + 1) == SLASH
            and _kind_at(tokens, i + 2) == IDENT
        ):
            out.append(f"{LAMBDA_PARAMETER}.")
            i += 2
            prev_kind = DOT
            continue

        if (
            tok.kind == SLASH
            and prev_kind in (IDENT, RPAREN)
            and _kind_at(tokens, i + 1) == IDENT
            and not _is_quantifier(tokens, i)
        ):
            out.append(".")
            i += 1
            prev_kind = DOT
            continue

        if tok.kind == LPAREN:
            depth += 1
        elif tok.kind == RPAREN:
            if bound and bound[-1][1] == depth:
                bound.pop()
            depth -= 1

        out.append(tok.text)
        if tok.kind != WS:
            prev_kind = tok.kind
        i += 1
    return "".join(out)


def rewrite(filter_text: str) -> str:
    """Run every rewriting stage in pipeline order."""
    return rewrite_functions(convert_datetimes(normalize_strings(filter_text)))
