"""
cwalk Execution Engine
======================

This package implements a tree-walking interpreter for a subset of C.

Components, leaf first:

- types: base types and the DataType record
- variable: runtime storage (scalars, arrays, pointers as handles)
- array_init: brace initializer flattening for multi-dimensional arrays
- scopes: the global scope, nested local scopes and the pointer slot table
- evaluator: two-phase reduction of flat expression element lists
- executor: statements, returning Completion records
- interpreter: the public facade

Language Subset
---------------
Supported:
- Data types: char, short, int, long, unsigned variants, double, pointers,
  multi-dimensional arrays, typedef aliases
- Operators: arithmetic, relational, logical, bitwise, all assignment
  forms, ++/--, address-of, dereference, conditional
- Control flow: blocks, if/else, while, do-while, for, switch/case,
  break, continue, return

Not supported:
- Function definitions and calls
- struct, union, enum
- Preprocessing

Usage
-----
>>> from cwalk.interp import run_program, load_program
>>> statements = load_program([{"kind": "Return", "value": [6, "*", 7]}])
>>> run_program(statements).value
42
"""

from cwalk.interp.interpreter import (
    Interpreter,
    InterpreterOptions,
    RunResult,
    run_program,
    run_file,
)
from cwalk.interp.loader import load_program, load_file, ASTLoader
from cwalk.interp.executor import StatementExecutor, Completion, Signal
from cwalk.interp.evaluator import ExpressionEvaluator
from cwalk.interp.scopes import Scopes, Scope, ScopeTag
from cwalk.interp.variable import Variable, PointerRef
from cwalk.interp.array_init import ArrayInitializer, expand_initializer
from cwalk.interp.types import BaseType, DataType, make_type
from cwalk.interp.errors import (
    InterpError,
    CNameError,
    UndeclaredIdentifierError,
    DuplicateDeclarationError,
    CTypeError,
    UninitializedVariableError,
    CPointerError,
    NullPointerError,
    DanglingPointerError,
    InvalidLValueError,
    ArrayBoundsError,
    DimensionMismatchError,
    CArithmeticError,
    DivisionByZeroError,
    InvalidBreakContinueError,
    ExpressionShapeError,
    UnsupportedFeatureError,
    ASTFormatError,
)

__all__ = [
    # Main API
    "Interpreter",
    "InterpreterOptions",
    "RunResult",
    "run_program",
    "run_file",
    "load_program",
    "load_file",
    "ASTLoader",
    # Components
    "StatementExecutor",
    "Completion",
    "Signal",
    "ExpressionEvaluator",
    "Scopes",
    "Scope",
    "ScopeTag",
    "Variable",
    "PointerRef",
    "ArrayInitializer",
    "expand_initializer",
    "BaseType",
    "DataType",
    "make_type",
    # Errors
    "InterpError",
    "CNameError",
    "UndeclaredIdentifierError",
    "DuplicateDeclarationError",
    "CTypeError",
    "UninitializedVariableError",
    "CPointerError",
    "NullPointerError",
    "DanglingPointerError",
    "InvalidLValueError",
    "ArrayBoundsError",
    "DimensionMismatchError",
    "CArithmeticError",
    "DivisionByZeroError",
    "InvalidBreakContinueError",
    "ExpressionShapeError",
    "UnsupportedFeatureError",
    "ASTFormatError",
]
