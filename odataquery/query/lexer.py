from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any, List, Optional

from ..errors import FilterParseError

# ---------------------------------------------------------------------------
# Token kinds
# ---------------------------------------------------------------------------

WS = "WS"
STRING = "STRING"
DATETIME = "DATETIME"
NUMBER = "NUMBER"
IDENT = "IDENT"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
COMMA = "COMMA"
DOT = "DOT"
SLASH = "SLASH"
COLON = "COLON"
ARROW = "ARROW"
OP = "OP"
UNKNOWN = "UNKNOWN"

_WS_RE = re.compile(r"\s+")
_DATETIME_RE = re.compile(
    r"(?P<main>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d{1,7}))?"
    r"(?P<tz>Z|[+-]\d{2}:\d{2})?"
    r"(?![\w.:])"
)
_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Longest first.
_PUNCT = [
    ("=>", ARROW),
    ("==", OP),
    ("!=", OP),
    (">=", OP),
    ("<=", OP),
    (">", OP),
    ("<", OP),
    ("(", LPAREN),
    (")", RPAREN),
    (",", COMMA),
    (".", DOT),
    ("/", SLASH),
    (":", COLON),
]

# Characters that may sit right before an opening single quote.
_OPEN_BOUNDARY = ",("
# Characters that may sit right after a closing single quote.
_CLOSE_BOUNDARY = ",)"


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int
    value: Any = None

    @property
    def end(self) -> int:
        return self.pos + len(self.text)

    def is_word(self, *words: str) -> bool:
        return self.kind == IDENT and self.text.lower() in words


def _closes(text: str, j: int) -> bool:
    """True when the quote at `j` terminates a single-quoted literal."""
    nxt = text[j + 1] if j + 1 < len(text) else ""
    return nxt == "" or nxt.isspace() or nxt in _CLOSE_BOUNDARY


def _scan_single_quoted(text: str, start: int) -> Token:
    """
    Scan an OData literal starting at the quote at `start`.
      - ''          -> escaped apostrophe
      - ' + end/ws/,/)  -> terminator
      - any other ' -> embedded apostrophe
    """
    buf: List[str] = []
    j = start + 1
    n = len(text)
    while j < n:
        c = text[j]
        if c == "'":
            if j + 1 < n and text[j + 1] == "'":
                buf.append("'")
                j += 2
                continue
            if _closes(text, j):
                return Token(STRING, text[start : j + 1], start, "".join(buf))
        buf.append(c)
        j += 1
    raise FilterParseError("Unterminated string literal", token=text[start:], position=start)


def _scan_double_quoted(text: str, start: int) -> Token:
    buf: List[str] = []
    j = start + 1
    n = len(text)
    while j < n:
        c = text[j]
        if c == "\\" and j + 1 < n:
            buf.append(text[j + 1])
            j += 2
            continue
        if c == '"':
            return Token(STRING, text[start : j + 1], start, "".join(buf))
        buf.append(c)
        j += 1
    raise FilterParseError("Unterminated string literal", token=text[start:], position=start)


def _number(text: str) -> Any:
    if any(ch in text for ch in ".eE"):
        return float(text)
    return int(text)


def tokenize(text: str) -> List[Token]:
    """
    Split a filter string into tokens. Whitespace is kept as WS tokens so
    that ``"".join(t.text for t in tokenize(s)) == s`` for every input.
    Characters the grammar has no use for come back as UNKNOWN tokens; only an
    unterminated string literal raises.
    """
    tokens: List[Token] = []
    pos = 0
    n = len(text)
    while pos < n:
        ch = text[pos]

        if ch == "'":
            prev = text[pos - 1] if pos else ""
            if pos == 0 or prev.isspace() or prev in _OPEN_BOUNDARY:
                tok = _scan_single_quoted(text, pos)
            else:
                tok = Token(UNKNOWN, ch, pos)
            tokens.append(tok)
            pos = tok.end
            continue

        if ch == '"':
            tok = _scan_double_quoted(text, pos)
            tokens.append(tok)
            pos = tok.end
            continue

        m = _WS_RE.match(text, pos)
        if m:
            tokens.append(Token(WS, m.group(), pos))
            pos = m.end()
            continue

        m = _DATETIME_RE.match(text, pos)
        if m:
            tokens.append(Token(DATETIME, m.group(), pos, m))
            pos = m.end()
            continue

        m = _NUMBER_RE.match(text, pos)
        if m:
            tokens.append(Token(NUMBER, m.group(), pos, _number(m.group())))
            pos = m.end()
            continue

        m = _IDENT_RE.match(text, pos)
        if m:
            tokens.append(Token(IDENT, m.group(), pos))
            pos = m.end()
            continue

        for lit, kind in _PUNCT:
            if text.startswith(lit, pos):
                tokens.append(Token(kind, lit, pos))
                pos += len(lit)
                break
        else:
            tokens.append(Token(UNKNOWN, ch, pos))
            pos += 1
    return tokens


def render(tokens: List[Token]) -> str:
    return "".join(tok.text for tok in tokens)


def quote(value: str) -> str:
    """Render a double-quoted literal with backslash escapes."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def significant(tokens: List[Token]) -> List[Token]:
    return [tok for tok in tokens if tok.kind != WS]


def peek_kind(tokens: List[Token], index: int) -> Optional[str]:
    return tokens[index].kind if 0 <= index < len(tokens) else None
