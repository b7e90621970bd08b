"""
cwalk Interpreter Main Module
=============================

This module provides the main interface to the execution engine. It
wires the components together:

    Statements → StatementExecutor → ExpressionEvaluator → Scopes / Variables

Usage
-----
Command line:
    $ cwrun program.json

Programmatic:
    >>> from cwalk.interp import run_program
    >>> from cwalk.interp.ast import ReturnStatement, Expression, Constant
    >>> run_program([ReturnStatement(Expression([Constant(42)]))]).value
    42

Program Model
-------------
A program is a list of top-level statements executed in the global
scope. Declarations at the top level become globals. A top-level
'return' ends the program and its value is the program's result.

Error Handling
--------------
The first error stops the run. Errors are raised to the caller as
InterpError subclasses; the interpreter never prints or exits.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from cwalk.interp.evaluator import ExpressionEvaluator
from cwalk.interp.executor import StatementExecutor, Signal
from cwalk.interp.loader import load_file
from cwalk.interp.scopes import Scopes
from cwalk.interp.variable import Variable


logger = logging.getLogger(__name__)


@dataclass
class InterpreterOptions:
    """
    Interpreter configuration options.

    Attributes:
        check_uninitialized: Fail when a never-assigned scalar is read.
                             When False such reads yield 0.
        trace_statements: Log each executed statement at DEBUG level
        filename: Name used for the program in log messages
    """
    check_uninitialized: bool = True
    trace_statements: bool = False
    filename: str = "<ast>"


@dataclass
class RunResult:
    """
    Result of running a program.

    Attributes:
        return_value: Value of the top-level 'return', if any
        completed: True if execution reached the end of the program,
                   False if a top-level 'return' ended it
        statements_executed: Number of statements run, nested ones included
    """
    return_value: Optional[Variable] = None
    completed: bool = True
    statements_executed: int = 0

    @property
    def value(self):
        """The returned number (or pointer value), None if nothing was returned."""
        if self.return_value is None:
            return None
        return self.return_value.value


class Interpreter:
    """
    Tree-walking interpreter for the evaluable C subset.

    Each call to run() starts from a fresh global scope.

    Example:
        interpreter = Interpreter()
        result = interpreter.run(statements)
        print(result.value)

    Attributes:
        options: Interpreter configuration options
        scopes: Symbol table of the most recent run
    """

    def __init__(self, options: Optional[InterpreterOptions] = None):
        """
        Initialize the interpreter.

        Args:
            options: Interpreter configuration (uses defaults if None)
        """
        self.options = options or InterpreterOptions()
        self.scopes = Scopes()

    def run(self, statements: list) -> RunResult:
        """
        Execute a program.

        Args:
            statements: Top-level statement nodes

        Returns:
            RunResult describing how the program ended

        Raises:
            InterpError: On the first program error
        """
        self.scopes = Scopes()
        evaluator = ExpressionEvaluator(
            self.scopes, check_uninitialized=self.options.check_uninitialized
        )
        executor = StatementExecutor(
            self.scopes, evaluator, trace=self.options.trace_statements
        )

        logger.info(f"Running {self.options.filename} ({len(statements)} statements)")
        completion = executor.execute_all(statements)

        result = RunResult(statements_executed=executor.statements_executed)
        if completion.signal is Signal.RETURN:
            result.return_value = completion.value
            result.completed = False

        logger.info(
            f"Finished {self.options.filename}: "
            f"{result.statements_executed} statements, returned {result.value}"
        )
        return result

    def run_file(self, filepath: Union[str, Path]) -> RunResult:
        """
        Load a JSON AST document and execute it.

        Raises:
            ASTFormatError: If the document is malformed
            FileNotFoundError: If the file does not exist
        """
        statements = load_file(filepath)
        return self.run(statements)


# =============================================================================
# Convenience Functions
# =============================================================================

def run_program(statements: list, options: Optional[InterpreterOptions] = None) -> RunResult:
    """
    Run a list of top-level statements.

    This is the primary high-level interface to the engine.
    """
    return Interpreter(options).run(statements)


def run_file(
    filepath: Union[str, Path],
    options: Optional[InterpreterOptions] = None,
) -> RunResult:
    """
    Run a JSON AST document.

    Args:
        filepath: Path to the document
        options: Interpreter configuration

    Returns:
        RunResult of the program
    """
    options = options or InterpreterOptions(filename=str(filepath))
    return Interpreter(options).run_file(filepath)
