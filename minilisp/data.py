"""Core data model: errors, symbols, pairs, procedures and list helpers.

The empty list (NIL) is represented by ``None`` and integers by ``int``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator


class LispError(Exception):
    """Base class for every error the interpreter reports."""


class LispSyntaxError(LispError):
    """Malformed input or an improper list where a proper one is required."""


class UnboundError(LispError):
    """A symbol has no binding in the environment."""


class ArgsError(LispError):
    """A form or procedure received the wrong number of arguments."""


class LispTypeError(LispError):
    """A value of the wrong type was supplied."""


_SYMBOLS: dict[str, "Symbol"] = {}


class Symbol:
    """An interned symbol: equal names always give the same object."""

    __slots__ = ("name",)

    name: str

    def __new__(cls, name: str) -> "Symbol":
        symbol = _SYMBOLS.get(name)
        if symbol is None:
            symbol = super().__new__(cls)
            symbol.name = name
            _SYMBOLS[name] = symbol
        return symbol

    def __repr__(self) -> str:
        return f"Symbol({self.name!r})"

    def __str__(self) -> str:
        return self.name


def intern(name: str) -> Symbol:
    """Return the unique symbol with the given name."""
    return Symbol(name)


@dataclass(eq=False)
class Pair:
    """A mutable cons cell."""

    car: Any
    cdr: Any


@dataclass(frozen=True, eq=False)
class Builtin:
    """A primitive procedure implemented in Python."""

    fn: Callable[[Any], Any]
    name: str = ""

    def __call__(self, args: Any) -> Any:
        return self.fn(args)


@dataclass(eq=False)
class _Procedure:
    env: Any = field(repr=False)
    params: Any
    body: Any


class Closure(_Procedure):
    """A user-defined procedure: captured environment, parameters and body."""


class Macro(_Procedure):
    """A user-defined macro; its arguments are passed unevaluated."""


def cons(car: Any, cdr: Any) -> Pair:
    """Allocate a new pair."""
    return Pair(car, cdr)


def is_list(expr: Any) -> bool:
    """Return True if ``expr`` is NIL or a chain of pairs ending in NIL."""
    while expr is not None:
        if not isinstance(expr, Pair):
            return False
        expr = expr.cdr
    return True


def iter_list(lst: Any) -> Iterator[Any]:
    """Yield the elements of a proper list; raise on an improper tail."""
    while lst is not None:
        if not isinstance(lst, Pair):
            raise LispSyntaxError("improper list")
        yield lst.car
        lst = lst.cdr


def _from_iterable(items: Iterable[Any]) -> Pair | None:
    head: Pair | None = None
    tail: Pair | None = None
    for item in items:
        cell = Pair(item, None)
        if tail is None:
            head = cell
        else:
            tail.cdr = cell
        tail = cell
    return head


def make_list(*args: Any) -> Pair | None:
    """Build a proper list from the given values."""
    return _from_iterable(args)


def copy_list(lst: Any) -> Pair | None:
    """Return a fresh list holding the same elements."""
    return _from_iterable(iter_list(lst))


def list_reverse(lst: Any) -> Pair | None:
    """Reverse a list in place, reusing its pairs, and return the new head."""
    tail = None
    while lst is not None:
        following = lst.cdr
        lst.cdr = tail
        tail = lst
        lst = following
    return tail