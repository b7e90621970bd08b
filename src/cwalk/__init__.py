"""
cwalk - Tree-Walking Interpreter for a C Subset
===============================================

This package executes C programs that have already been parsed into an
abstract syntax tree. It does not lex or parse C text; a front end (or
a JSON document, see cwalk.interp.loader) supplies the tree.

Main Components
---------------
- **interp**: the execution engine
    Scopes, typed variables (scalars, multi-dimensional arrays,
    pointers), expression reduction and the statement executor

- **cli**: command-line tools
    cwrun runs a JSON AST document and prints the returned value

Quick Start
-----------
Run a program built in Python:
    >>> from cwalk import run_program
    >>> from cwalk.interp.ast import ReturnStatement, Expression, Constant, Operator, BinaryOperator
    >>> expr = Expression([Constant(2), Operator(BinaryOperator.ADD),
    ...                    Constant(3), Operator(BinaryOperator.MULTIPLY), Constant(4)])
    >>> run_program([ReturnStatement(expr)]).value
    14

Or use the command-line tool:
    $ cwrun program.json
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from cwalk.errors import CWalkError, SourceLocation
from cwalk.interp import (
    Interpreter,
    InterpreterOptions,
    RunResult,
    run_program,
    run_file,
    load_program,
    load_file,
    InterpError,
)

__all__ = [
    "__version__",
    "CWalkError",
    "SourceLocation",
    "Interpreter",
    "InterpreterOptions",
    "RunResult",
    "run_program",
    "run_file",
    "load_program",
    "load_file",
    "InterpError",
]
