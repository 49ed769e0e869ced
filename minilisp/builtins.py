"""Primitive procedures. Each takes a Lisp argument list and returns a value."""

from __future__ import annotations

from typing import Any

from .data import ArgsError, Builtin, Closure, LispTypeError, Pair, Symbol

_T = Symbol("T")


def _unpack(args: Any, count: int) -> list[Any]:
    values: list[Any] = []
    while args is not None:
        if not isinstance(args, Pair) or len(values) == count:
            raise ArgsError(f"expected {count} argument(s)")
        values.append(args.car)
        args = args.cdr
    if len(values) != count:
        raise ArgsError(f"expected {count} argument(s)")
    return values


def _integers(args: Any) -> tuple[int, int]:
    a, b = _unpack(args, 2)
    if not (isinstance(a, int) and isinstance(b, int)):
        raise LispTypeError("expected integers")
    return a, b


def _truth(flag: bool) -> Symbol | None:
    return _T if flag else None


def builtin_car(args: Any) -> Any:
    """First element of a pair; NIL for NIL."""
    (value,) = _unpack(args, 1)
    if value is None:
        return None
    if not isinstance(value, Pair):
        raise LispTypeError("CAR of a non-pair")
    return value.car


def builtin_cdr(args: Any) -> Any:
    """Rest of a pair; NIL for NIL."""
    (value,) = _unpack(args, 1)
    if value is None:
        return None
    if not isinstance(value, Pair):
        raise LispTypeError("CDR of a non-pair")
    return value.cdr


def builtin_cons(args: Any) -> Pair:
    """A new pair of the two arguments."""
    first, second = _unpack(args, 2)
    return Pair(first, second)


def builtin_eq(args: Any) -> Symbol | None:
    """T if both arguments are the same object or equal integers."""
    a, b = _unpack(args, 2)
    if type(a) is not type(b):
        return None
    if isinstance(a, Builtin):
        return _truth(a.fn is b.fn)
    if isinstance(a, int):
        return _truth(a == b)
    return _truth(a is b)


def builtin_pairp(args: Any) -> Symbol | None:
    """T if the argument is a pair."""
    (value,) = _unpack(args, 1)
    return _truth(isinstance(value, Pair))


def builtin_procp(args: Any) -> Symbol | None:
    """T if the argument is a builtin or a closure."""
    (value,) = _unpack(args, 1)
    return _truth(isinstance(value, (Builtin, Closure)))


def builtin_add(args: Any) -> int:
    a, b = _integers(args)
    return a + b


def builtin_subtract(args: Any) -> int:
    a, b = _integers(args)
    return a - b


def builtin_multiply(args: Any) -> int:
    a, b = _integers(args)
    return a * b


def builtin_divide(args: Any) -> int:
    """Integer division truncating toward zero."""
    a, b = _integers(args)
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


def builtin_numeq(args: Any) -> Symbol | None:
    a, b = _integers(args)
    return _truth(a == b)


def builtin_less(args: Any) -> Symbol | None:
    a, b = _integers(args)
    return _truth(a < b)