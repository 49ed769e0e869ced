"""Printer: renders expressions as text."""

from __future__ import annotations

import sys
from typing import Any, TextIO

from .data import Builtin, Closure, Macro, Pair, Symbol


def format_expr(atom: Any) -> str:
    """Return the printed representation of an expression."""
    if atom is None:
        return "NIL"
    if isinstance(atom, Pair):
        items = [format_expr(atom.car)]
        rest = atom.cdr
        while rest is not None:
            if isinstance(rest, Pair):
                items.append(format_expr(rest.car))
                rest = rest.cdr
            else:
                items.append(".")
                items.append(format_expr(rest))
                break
        return "(" + " ".join(items) + ")"
    if isinstance(atom, Symbol):
        return atom.name
    if isinstance(atom, int):
        return str(atom)
    if isinstance(atom, Builtin):
        return f"#<BUILTIN:{id(atom.fn):#x}>"
    if isinstance(atom, Closure):
        return f"#<CLOSURE:{id(atom):#x}>"
    if isinstance(atom, Macro):
        return f"#<MACRO:{id(atom):#x}>"
    raise TypeError(f"cannot print {atom!r}")


def print_expr(atom: Any, file: TextIO | None = None) -> None:
    """Write an expression to ``file`` (standard output by default), no newline."""
    (file if file is not None else sys.stdout).write(format_expr(atom))