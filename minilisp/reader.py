"""Reader: turns source text into expressions."""

from __future__ import annotations

import re
import string
from typing import Any, Iterator

from .data import LispSyntaxError, Pair, Symbol, make_list

_WHITESPACE = " \t\n"
_DELIMITERS = "(); \t\n"
_PREFIXES = "()'`"
_INTEGER = re.compile(r"[\v\f\r]*[+-]?[0-9]+")
_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)
_QUOTE_FORMS = {
    "'": "QUOTE",
    "`": "QUASIQUOTE",
    ",": "UNQUOTE",
    ",@": "UNQUOTE-SPLICING",
}


class _EndOfInput(LispSyntaxError):
    """No token is left in the input."""


def lex(text: str, pos: int = 0) -> tuple[int, int]:
    """Find the next token at or after ``pos`` and return its (start, end)."""
    length = len(text)
    while True:
        while pos < length and text[pos] in _WHITESPACE:
            pos += 1
        if pos >= length:
            raise _EndOfInput("unexpected end of input")
        ch = text[pos]
        if ch in _PREFIXES:
            return pos, pos + 1
        if ch == ",":
            return pos, pos + (2 if text.startswith("@", pos + 1) else 1)
        if ch == ";":
            newline = text.find("\n", pos)
            if newline < 0:
                raise _EndOfInput("unterminated comment")
            pos = newline
            continue
        end = pos
        while end < length and text[end] not in _DELIMITERS:
            end += 1
        return pos, end


def parse_simple(token: str) -> Any:
    """Parse an atom token: an integer, NIL or an upper-cased symbol."""
    if _INTEGER.fullmatch(token):
        return int(token)
    name = token.translate(_UPPER)
    if name == "NIL":
        return None
    return Symbol(name)


def _read_list(text: str, pos: int) -> tuple[Any, int]:
    head: Pair | None = None
    tail: Pair | None = None
    while True:
        start, end = lex(text, pos)
        token = text[start:end]
        if token == ")":
            return head, end
        if token == ".":
            if tail is None:
                raise LispSyntaxError("dot at start of list")
            item, pos = read_expr(text, end)
            tail.cdr = item
            start, end = lex(text, pos)
            if text[start] != ")":
                raise LispSyntaxError("expected ')' after dotted tail")
            return head, end
        item, pos = read_expr(text, start)
        cell = Pair(item, None)
        if tail is None:
            head = cell
        else:
            tail.cdr = cell
        tail = cell


def read_expr(text: str, pos: int = 0) -> tuple[Any, int]:
    """Read one expression starting at ``pos``; return it and the end offset."""
    start, end = lex(text, pos)
    token = text[start:end]
    if token == "(":
        return _read_list(text, end)
    if token == ")":
        raise LispSyntaxError("unexpected ')'")
    form = _QUOTE_FORMS.get(token)
    if form is not None:
        inner, end = read_expr(text, end)
        return make_list(Symbol(form), inner), end
    return parse_simple(token), end


def read_all(text: str) -> Iterator[Any]:
    """Yield every expression in ``text`` until no token remains."""
    pos = 0
    while True:
        try:
            lex(text, pos)
        except _EndOfInput:
            return
        expr, pos = read_expr(text, pos)
        yield expr