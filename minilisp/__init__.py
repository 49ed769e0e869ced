"""A small Lisp interpreter with closures, macros, tail calls and a prompt."""

__version__ = "0.1.0"