"""
cwalk Error Hierarchy
=====================

This module defines the root of the exception hierarchy for cwalk.
All exceptions raised by the package inherit from CWalkError, allowing
callers to catch every interpreter-related failure with a single except
clause if desired.

Exception Hierarchy
-------------------
CWalkError (base)
└── InterpError (execution engine, see cwalk.interp.errors)
    ├── CNameError
    ├── CTypeError
    ├── InvalidLValueError
    ├── ArrayBoundsError
    ├── CArithmeticError
    ├── InvalidBreakContinueError
    ├── ExpressionShapeError
    ├── UnsupportedFeatureError
    └── ASTFormatError

Design Philosophy
-----------------
Each exception can carry source location information (filename, line,
column) when the AST node that triggered it has one. Error messages
follow this format:
    filename:line:column: error: description
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class CWalkError(Exception):
    """
    Base exception for all cwalk errors.

        try:
            run_file("program.json")
        except CWalkError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    The parser that produced the AST attaches these to nodes; the engine
    only forwards them into error messages.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"
