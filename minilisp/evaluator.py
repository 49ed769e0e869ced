"""Evaluator: environments and an explicit-stack evaluation loop.

Procedure calls are driven by a chain of frames rather than Python
recursion, so tail calls run in constant space and deep non-tail
recursion is limited only by memory.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .data import (
    ArgsError,
    Builtin,
    Closure,
    LispSyntaxError,
    LispTypeError,
    Macro,
    Pair,
    Symbol,
    UnboundError,
    is_list,
    iter_list,
    list_reverse,
    make_list,
)

_QUOTE = Symbol("QUOTE")
_DEFINE = Symbol("DEFINE")
_LAMBDA = Symbol("LAMBDA")
_IF = Symbol("IF")
_DEFMACRO = Symbol("DEFMACRO")
_APPLY = Symbol("APPLY")
_SET = Symbol("SET!")


class Environment:
    """A table of bindings with an optional enclosing environment."""

    __slots__ = ("parent", "bindings")

    def __init__(self, parent: Environment | None = None) -> None:
        self.parent = parent
        self.bindings: dict[Symbol, Any] = {}

    def define(self, symbol: Symbol, value: Any) -> None:
        """Bind ``symbol`` in this environment, replacing any binding here."""
        self.bindings[symbol] = value

    def _owner(self, symbol: Symbol) -> Environment:
        env: Environment | None = self
        while env is not None:
            if symbol in env.bindings:
                return env
            env = env.parent
        raise UnboundError(f"symbol not bound: {symbol}")

    def get(self, symbol: Symbol) -> Any:
        """Return the value bound to ``symbol`` here or in an enclosing environment."""
        return self._owner(symbol).bindings[symbol]

    def set(self, symbol: Symbol, value: Any) -> None:
        """Change the nearest existing binding of ``symbol``."""
        self._owner(symbol).bindings[symbol] = value


def _make_procedure(kind: type, env: Environment, args: Any, body: Any) -> Any:
    if not is_list(body):
        raise LispSyntaxError("procedure body is not a list")
    params = args
    while params is not None:
        if isinstance(params, Symbol):
            break
        if not isinstance(params, Pair) or not isinstance(params.car, Symbol):
            raise LispTypeError("parameter names must be symbols")
        params = params.cdr
    return kind(env, args, body)


def make_closure(env: Environment, args: Any, body: Any) -> Closure:
    """Create a closure, checking that the body is a list and the parameters symbols."""
    return _make_procedure(Closure, env, args, body)


def _length(lst: Any) -> int:
    return sum(1 for _ in iter_list(lst))


@dataclass(eq=False)
class _Frame:
    parent: _Frame | None
    env: Environment
    tail: Any = None
    op: Any = None
    args: Any = None
    body: Any = None


class _Machine:
    """State of one evaluation: the current expression, environment and stack."""

    def __init__(self, expr: Any, env: Environment) -> None:
        self.expr = expr
        self.env = env
        self.stack: _Frame | None = None
        self.result: Any = None

    def run(self) -> Any:
        while True:
            if not self._step():
                continue
            if self.stack is None:
                return self.result
            self._return()

    def _push(self, tail: Any = None, op: Any = None, args: Any = None) -> None:
        self.stack = _Frame(self.stack, self.env, tail, op, args)

    # Evaluation of a single expression. Returns True when a value was
    # produced, False when a frame was pushed and a new expression set.

    def _step(self) -> bool:
        expr = self.expr
        if isinstance(expr, Symbol):
            self.result = self.env.get(expr)
            return True
        if not isinstance(expr, Pair):
            self.result = expr
            return True
        if not is_list(expr):
            raise LispSyntaxError("cannot evaluate an improper list")
        op, args = expr.car, expr.cdr
        if isinstance(op, Builtin):
            self.result = op(args)
            return True
        if isinstance(op, Symbol):
            form = self._SPECIAL_FORMS.get(op)
            if form is not None:
                return form(self, op, args)
        self._push(tail=args)
        self.expr = op
        return False

    def _form_quote(self, op: Symbol, args: Any) -> bool:
        if _length(args) != 1:
            raise ArgsError("QUOTE takes one argument")
        self.result = args.car
        return True

    def _form_define(self, op: Symbol, args: Any) -> bool:
        count = _length(args)
        if count < 2:
            raise ArgsError("DEFINE needs a name and a value")
        target = args.car
        if isinstance(target, Pair):
            name = target.car
            if not isinstance(name, Symbol):
                raise LispTypeError("procedure name must be a symbol")
            self.env.define(name, make_closure(self.env, target.cdr, args.cdr))
            self.result = name
            return True
        if isinstance(target, Symbol):
            if count != 2:
                raise ArgsError("DEFINE of a variable takes one value")
            self._push(op=op, args=target)
            self.expr = args.cdr.car
            return False
        raise LispTypeError("DEFINE needs a symbol or a list")

    def _form_lambda(self, op: Symbol, args: Any) -> bool:
        if _length(args) < 2:
            raise ArgsError("LAMBDA needs parameters and a body")
        self.result = make_closure(self.env, args.car, args.cdr)
        return True

    def _form_if(self, op: Symbol, args: Any) -> bool:
        if _length(args) != 3:
            raise ArgsError("IF takes three arguments")
        self._push(tail=args.cdr, op=op)
        self.expr = args.car
        return False

    def _form_defmacro(self, op: Symbol, args: Any) -> bool:
        if _length(args) < 2:
            raise ArgsError("DEFMACRO needs a signature and a body")
        head = args.car
        if not isinstance(head, Pair):
            raise LispSyntaxError("DEFMACRO signature must be a list")
        name = head.car
        if not isinstance(name, Symbol):
            raise LispTypeError("macro name must be a symbol")
        macro = _make_procedure(Macro, self.env, head.cdr, args.cdr)
        self.env.define(name, macro)
        self.result = name
        return True

    def _form_apply(self, op: Symbol, args: Any) -> bool:
        if _length(args) != 2:
            raise ArgsError("APPLY takes two arguments")
        self._push(tail=args.cdr, op=op)
        self.expr = args.car
        return False

    def _form_set(self, op: Symbol, args: Any) -> bool:
        if _length(args) != 2:
            raise ArgsError("SET! takes two arguments")
        if not isinstance(args.car, Symbol):
            raise LispTypeError("SET! needs a symbol")
        self._push(op=op, args=args.car)
        self.expr = args.cdr.car
        return False

    _SPECIAL_FORMS = {
        _QUOTE: _form_quote,
        _DEFINE: _form_define,
        _LAMBDA: _form_lambda,
        _IF: _form_if,
        _DEFMACRO: _form_defmacro,
        _APPLY: _form_apply,
        _SET: _form_set,
    }

    # Frame handling once a value is available.

    def _exec(self) -> None:
        frame = self.stack
        self.env = frame.env
        body = frame.body
        self.expr = body.car
        if body.cdr is None:
            self.stack = frame.parent
        else:
            frame.body = body.cdr

    def _bind(self) -> None:
        frame = self.stack
        if frame.body is not None:
            self._exec()
            return
        proc = frame.op
        args = frame.args
        env = Environment(proc.env)
        frame.env = self.env = env
        frame.body = proc.body
        names = proc.params
        while names is not None:
            if isinstance(names, Symbol):
                env.define(names, args)
                args = None
                break
            if args is None:
                raise ArgsError("too few arguments")
            env.define(names.car, args.car)
            names = names.cdr
            args = args.cdr
        if args is not None:
            raise ArgsError("too many arguments")
        frame.args = None
        self._exec()

    def _apply(self) -> None:
        frame = self.stack
        op, args = frame.op, frame.args
        if args is not None:
            args = frame.args = list_reverse(args)
        if op is _APPLY:
            frame = self.stack = _Frame(frame.parent, self.env)
            op = args.car
            args = args.cdr.car
            if not is_list(args):
                raise LispSyntaxError("APPLY needs a proper argument list")
            frame.op = op
            frame.args = args
        if isinstance(op, Builtin):
            self.stack = frame.parent
            self.expr = Pair(op, args)
            return
        if not isinstance(op, Closure):
            raise LispTypeError("not a procedure")
        self._bind()

    def _return(self) -> None:
        frame = self.stack
        self.env = frame.env
        if frame.body is not None:
            # Still running a procedure body; the value is discarded.
            self._apply()
            return
        op = frame.op
        if op is None:
            op = frame.op = self.result
            if isinstance(op, Macro):
                self._push(op=Closure(op.env, op.params, op.body), args=frame.tail)
                self._bind()
                return
        elif op is _DEFINE:
            symbol = frame.args
            self.env.define(symbol, self.result)
            self.stack = frame.parent
            self.expr = make_list(_QUOTE, symbol)
            return
        elif op is _SET:
            symbol = frame.args
            self.stack = frame.parent
            self.expr = make_list(_QUOTE, symbol)
            self.env.set(symbol, self.result)
            return
        elif op is _IF:
            branches = frame.tail
            self.expr = branches.cdr.car if self.result is None else branches.car
            self.stack = frame.parent
            return
        elif isinstance(op, Macro):
            # The expansion is evaluated in place of the macro call.
            self.expr = self.result
            self.stack = frame.parent
            return
        else:
            frame.args = Pair(self.result, frame.args)

        if frame.tail is None:
            self._apply()
            return
        self.expr = frame.tail.car
        frame.tail = frame.tail.cdr


def eval_expr(expr: Any, env: Environment) -> Any:
    """Evaluate ``expr`` in ``env`` and return its value."""
    return _Machine(expr, env).run()