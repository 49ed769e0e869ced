import math

import pytest

from minilisp.builtins import (
    builtin_add,
    builtin_car,
    builtin_cdr,
    builtin_cons,
    builtin_eq,
    builtin_less,
    builtin_multiply,
    builtin_numeq,
    builtin_subtract,
)
from minilisp.data import (
    ArgsError,
    Builtin,
    Closure,
    LispSyntaxError,
    LispTypeError,
    Symbol,
    UnboundError,
    cons,
    iter_list,
    make_list,
)
from minilisp.evaluator import Environment, eval_expr, make_closure
from minilisp.printer import format_expr
from minilisp.reader import read_all

T = Symbol("T")


def make_env():
    env = Environment()
    for name, fn in [
        ("CAR", builtin_car),
        ("CDR", builtin_cdr),
        ("CONS", builtin_cons),
        ("+", builtin_add),
        ("-", builtin_subtract),
        ("*", builtin_multiply),
        ("=", builtin_numeq),
        ("<", builtin_less),
        ("EQ?", builtin_eq),
    ]:
        env.define(Symbol(name), Builtin(fn, name))
    env.define(T, T)
    return env


def run(source, env=None):
    env = make_env() if env is None else env
    result = None
    for expr in read_all(source):
        result = eval_expr(expr, env)
    return result


def test_environment_define_and_get():
    env = Environment()
    env.define(Symbol("A"), 5)
    assert env.get(Symbol("A")) == 5


def test_environment_lookup_reaches_parent_and_child_shadows():
    parent = Environment()
    parent.define(Symbol("A"), 1)
    child = Environment(parent)
    assert child.get(Symbol("A")) == 1
    child.define(Symbol("A"), 2)
    assert child.get(Symbol("A")) == 2
    assert parent.get(Symbol("A")) == 1


def test_environment_set_updates_enclosing_binding():
    parent = Environment()
    parent.define(Symbol("A"), 1)
    child = Environment(parent)
    child.set(Symbol("A"), 9)
    assert parent.get(Symbol("A")) == 9
    assert Symbol("A") not in child.bindings


def test_environment_unbound_errors():
    env = Environment(Environment())
    with pytest.raises(UnboundError):
        env.get(Symbol("MISSING"))
    with pytest.raises(UnboundError):
        env.set(Symbol("MISSING"), 1)


def test_make_closure_keeps_parts():
    env = Environment()
    params = make_list(Symbol("A"))
    body = make_list(Symbol("A"))
    closure = make_closure(env, params, body)
    assert isinstance(closure, Closure)
    assert closure.env is env
    assert closure.params is params
    assert closure.body is body


def test_make_closure_rejects_bad_body_and_params():
    env = Environment()
    with pytest.raises(LispSyntaxError):
        make_closure(env, None, 5)
    with pytest.raises(LispTypeError):
        make_closure(env, make_list(1), make_list(1))


def test_self_evaluating_values():
    env = make_env()
    assert eval_expr(7, env) == 7
    assert eval_expr(None, env) is None


def test_quote_returns_argument_unevaluated():
    data = make_list(1, 2)
    assert eval_expr(make_list(Symbol("QUOTE"), data), make_env()) is data


def test_quote_argument_count():
    with pytest.raises(ArgsError):
        run("(quote 1 2)")
    with pytest.raises(ArgsError):
        run("(quote)")


def test_define_variable_returns_symbol_and_binds():
    env = make_env()
    assert run("(define x 10)", env) is Symbol("X")
    assert env.get(Symbol("X")) == 10


def test_define_function():
    assert run("(define (id x) x) (id 99)") == 99


def test_define_errors():
    with pytest.raises(ArgsError):
        run("(define x)")
    with pytest.raises(ArgsError):
        run("(define x 1 2)")
    with pytest.raises(LispTypeError):
        run("(define 5 1)")
    with pytest.raises(LispTypeError):
        run("(define (5 a) a)")


def test_internal_define_is_local():
    env = make_env()
    assert run("(define (f) (define y 3) y) (f)", env) == 3
    with pytest.raises(UnboundError):
        run("y", env)


def test_lambda_application():
    assert run("((lambda (x y) y) 1 2)") == 2


def test_variadic_parameters():
    assert format_expr(run("((lambda args args) 1 2 3)")) == "(1 2 3)"
    assert format_expr(run("((lambda (a . rest) rest) 1 2 3)")) == "(2 3)"


def test_closure_captures_environment():
    source = "(define (pairer a) (lambda (b) (cons a b))) ((pairer 1) 2)"
    assert format_expr(run(source)) == "(1 . 2)"


def test_lambda_argument_count():
    with pytest.raises(ArgsError):
        run("(lambda (x))")
    with pytest.raises(ArgsError):
        run("((lambda (x) x))")
    with pytest.raises(ArgsError):
        run("((lambda (x) x) 1 2)")


@pytest.mark.parametrize(
    "source, expected",
    [("(if t 1 2)", 1), ("(if nil 1 2)", 2), ("(if 0 1 2)", 1)],
)
def test_if_chooses_branch(source, expected):
    assert run(source) == expected


def test_if_argument_count():
    with pytest.raises(ArgsError):
        run("(if t 1)")
    with pytest.raises(ArgsError):
        run("(if t 1 2 3)")


def test_set_updates_binding():
    env = make_env()
    assert run("(define x 1) (set! x 2)", env) is Symbol("X")
    assert env.get(Symbol("X")) == 2


def test_set_errors():
    with pytest.raises(UnboundError):
        run("(set! nowhere 1)")
    with pytest.raises(LispTypeError):
        run("(set! 5 1)")
    with pytest.raises(ArgsError):
        run("(set! x)")


def test_apply_builtin_and_closure():
    assert format_expr(run("(apply cons '(1 2))")) == "(1 . 2)"
    assert run("(apply (lambda (a b) b) '(5 6))") == 6


def test_apply_errors():
    with pytest.raises(LispSyntaxError):
        run("(apply cons 5)")
    with pytest.raises(ArgsError):
        run("(apply cons)")


def test_macro_expansion_does_not_evaluate_arguments():
    env = make_env()
    assert run("(defmacro (my-quote x) (cons 'quote (cons x nil)))", env) is Symbol(
        "MY-QUOTE"
    )
    assert format_expr(run("(my-quote (a b))", env)) == "(A B)"
    assert run("(my-quote undefined-sym)", env) is Symbol("UNDEFINED-SYM")


def test_defmacro_errors():
    with pytest.raises(LispSyntaxError):
        run("(defmacro m 1)")
    with pytest.raises(LispTypeError):
        run("(defmacro (5 x) x)")
    with pytest.raises(ArgsError):
        run("(defmacro (m x))")


def test_builtin_receives_evaluated_arguments():
    assert run("(car '(1 2))") == 1


def test_calling_non_procedure_is_type_error():
    with pytest.raises(LispTypeError):
        run("(1 2)")


def test_improper_expression_is_syntax_error():
    with pytest.raises(LispSyntaxError):
        eval_expr(cons(Symbol("F"), 5), make_env())


def test_unbound_symbol():
    with pytest.raises(UnboundError):
        run("nothing-here")


def test_non_tail_recursion_matches_factorial():
    source = "(define (fact n) (if (= n 0) 1 (* n (fact (- n 1))))) (fact 10)"
    assert run(source) == math.factorial(10)


def test_deep_recursion_uses_no_python_stack():
    source = (
        "(define (build n) (if (= n 0) nil (cons n (build (- n 1))))) (build 5000)"
    )
    assert len(list(iter_list(run(source)))) == 5000


def test_tail_calls_run_in_constant_space():
    source = "(define (loop n) (if (= n 0) 'done (loop (- n 1)))) (loop 20000)"
    assert run(source) is Symbol("DONE")