# minilisp

A small Lisp interpreter. It has integers, symbols, pairs, closures with
rest parameters, macros, `apply`, `set!` and proper tail calls. Procedure
calls run on an explicit stack of frames, so deep tail recursion does not
exhaust Python's call stack.

## Installing

```
pip install .
```

## The interactive prompt

```
minilisp
```

At startup the interpreter prints `Reading library.lisp...` and loads
`library.lisp` from the current directory. If the file is missing, nothing
more happens; otherwise it prints the result of each expression in the file
(or `Error in expression:` followed by the expression), stopping at the
first expression it cannot read. Then it shows a `> ` prompt. Each line is
read as one expression, evaluated, and its value is printed. End the
session with end-of-file (Ctrl-D).

```
> (define (square x) (* x x))
SQUARE
> (square 7)
49
> (defmacro (ignore x) (cons 'quote (cons x nil)))
IGNORE
> (ignore foo)
FOO
> (car '(1 2 3))
1
> (undefined-thing)
Symbol not bound
```

Symbols are folded to upper case. `nil` is the empty list and false. `t` is true.

### Special forms

`quote`, `define`, `lambda`, `if`, `defmacro`, `apply`, `set!`

`(define name value)` binds a variable; `(define (name params...) body...)`
defines a procedure. A parameter list ending in a dotted symbol, such as
`(a . rest)`, collects the remaining arguments.

### Built-in procedures

`car`, `cdr`, `cons`, `+`, `-`, `*`, `/`, `=`, `<`, `eq?`, `pair?`,
`procedure?`

The arithmetic procedures and the comparisons each take exactly two
integers. `/` truncates toward zero.

The reader accepts `'x`, `` `x ``, `,x` and `,@x` as shorthand for `quote`,
`quasiquote`, `unquote` and `unquote-splicing`. Comments run from `;` to the
end of the line.

Errors are reported as one of `Syntax error`, `Symbol not bound`,
`Wrong number of arguments` or `Wrong type`.

## Using it from Python

```python
from minilisp.reader import read_expr
from minilisp.evaluator import eval_expr
from minilisp.printer import format_expr
from minilisp.repl import create_global_environment

env = create_global_environment()
expr, _ = read_expr("(+ 1 (* 2 3))", 0)
print(format_expr(eval_expr(expr, env)))  # 7
```

- `minilisp.reader`: `read_expr(text, pos)` returns an expression and the
  offset after it; `read_all(text)` yields every expression in a string;
  `lex` and `parse_simple` expose the tokenizer.
- `minilisp.evaluator`: `Environment` with `define`, `get` and `set`;
  `eval_expr(expr, env)`; `make_closure(env, args, body)`.
- `minilisp.printer`: `format_expr(atom)` returns the printed form;
  `print_expr(atom, file)` writes it without a newline.
- `minilisp.data`: `Symbol` (interned), `Pair`, `Builtin`, `Closure`,
  `Macro`, and list helpers `cons`, `make_list`, `iter_list`, `is_list`,
  `copy_list`, `list_reverse`. NIL is `None` and integers are `int`.
- `minilisp.builtins`: the primitive procedures, each taking a Lisp
  argument list.
- `minilisp.repl`: `create_global_environment()`,
  `load_file(env, path, out)`, `error_message(error)` and `main(argv)`.

Evaluation problems are raised as subclasses of `minilisp.data.LispError`:
`LispSyntaxError`, `UnboundError`, `ArgsError` and `LispTypeError`.

## What it does not do

- There are no strings, floating-point numbers or characters.
- `quasiquote`, `unquote` and `unquote-splicing` are only produced by the
  reader; the evaluator has no such forms, so they work only if defined
  as macros (for example in `library.lisp`).
- Dividing by zero is not an interpreter error: it raises Python's
  `ZeroDivisionError`, which ends the interactive session.
- The prompt takes one expression per line; an expression cannot span
  several lines.