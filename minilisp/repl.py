"""Interactive read-eval-print loop and source file loading."""

from __future__ import annotations

import argparse
import sys
from typing import Iterator, TextIO

from .builtins import (
    builtin_add,
    builtin_car,
    builtin_cdr,
    builtin_cons,
    builtin_divide,
    builtin_eq,
    builtin_less,
    builtin_multiply,
    builtin_numeq,
    builtin_pairp,
    builtin_procp,
    builtin_subtract,
)
from .data import (
    ArgsError,
    Builtin,
    LispError,
    LispSyntaxError,
    LispTypeError,
    Symbol,
    UnboundError,
)
from .evaluator import Environment, eval_expr
from .printer import format_expr
from .reader import read_expr

LIBRARY_FILE = "library.lisp"
PROMPT = "> "

_BUILTINS = (
    ("CAR", builtin_car),
    ("CDR", builtin_cdr),
    ("CONS", builtin_cons),
    ("+", builtin_add),
    ("-", builtin_subtract),
    ("*", builtin_multiply),
    ("/", builtin_divide),
    ("=", builtin_numeq),
    ("<", builtin_less),
    ("EQ?", builtin_eq),
    ("PAIR?", builtin_pairp),
    ("PROCEDURE?", builtin_procp),
)

_MESSAGES = {
    LispSyntaxError: "Syntax error",
    UnboundError: "Symbol not bound",
    ArgsError: "Wrong number of arguments",
    LispTypeError: "Wrong type",
}


def create_global_environment() -> Environment:
    """Return a new top-level environment holding the primitives and T."""
    env = Environment()
    for name, fn in _BUILTINS:
        env.define(Symbol(name), Builtin(fn, name))
    env.define(Symbol("T"), Symbol("T"))
    return env


def load_file(env: Environment, path, out: TextIO | None = None) -> None:
    """Evaluate every expression in a file, writing each result or error to ``out``.

    A missing file is skipped; reading stops at the first malformed expression.
    """
    out = sys.stdout if out is None else out
    out.write(f"Reading {path}...\n")
    try:
        with open(path, encoding="utf-8") as handle:
            text = handle.read()
    except OSError:
        return
    pos = 0
    while True:
        try:
            expr, pos = read_expr(text, pos)
        except LispSyntaxError:
            return
        try:
            result = eval_expr(expr, env)
        except LispError:
            out.write("Error in expression:\n\t" + format_expr(expr) + "\n")
        else:
            out.write(format_expr(result) + "\n")


def error_message(error: LispError) -> str:
    """Return the message shown to the user for an interpreter error."""
    for cls in type(error).__mro__:
        message = _MESSAGES.get(cls)
        if message is not None:
            return message
    return str(error)


def _read_lines(prompt: str) -> Iterator[str]:
    while True:
        try:
            yield input(prompt)
        except EOFError:
            return


def main(argv: list[str] | None = None) -> int:
    """Load the library file, then read, evaluate and print lines until end of input."""
    parser = argparse.ArgumentParser(
        prog="minilisp", description="A small Lisp interpreter."
    )
    parser.parse_args(argv)

    if sys.stdin.isatty():
        try:
            import readline  # noqa: F401  enables line editing for input()
        except ImportError:
            pass

    env = create_global_environment()
    load_file(env, LIBRARY_FILE)

    for line in _read_lines(PROMPT):
        try:
            expr, _ = read_expr(line)
            result = eval_expr(expr, env)
        except LispError as error:
            print(error_message(error))
        else:
            print(format_expr(result))
    return 0