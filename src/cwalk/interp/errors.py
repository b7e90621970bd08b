"""
Execution Engine Error Hierarchy
================================

This module defines the exception hierarchy for the cwalk execution
engine. All exceptions inherit from InterpError, which itself inherits
from the base CWalkError for consistent error handling across the package.

Every error is fatal to the current run: the engine never recovers
locally, it raises and lets the caller (the CLI, or an embedding
application) decide how to report it.

Exception Hierarchy
-------------------
InterpError (base for all engine errors)
├── CNameError - identifier resolution errors
│   ├── UndeclaredIdentifierError - use of an undeclared name
│   └── DuplicateDeclarationError - name declared twice in one scope
├── CTypeError - operand and assignment type errors
│   ├── UninitializedVariableError - read of a never-assigned scalar
│   └── CPointerError - invalid pointer use
│       ├── NullPointerError - dereference of NULL
│       └── DanglingPointerError - target's scope was popped
├── InvalidLValueError - operation needs a named variable
├── ArrayBoundsError - index out of bound
│   └── DimensionMismatchError - wrong number of indexes
├── CArithmeticError
│   └── DivisionByZeroError - '/' or '%' by zero
├── InvalidBreakContinueError - break/continue outside loop/switch
├── ExpressionShapeError - malformed element list (internal)
├── UnsupportedFeatureError - construct outside the evaluable subset
└── ASTFormatError - malformed AST document

Error Message Format
--------------------
    program.c:5:12: error: undeclared identifier 'cout'
    hint: did you mean 'count'?
"""

from typing import Optional, List

from cwalk.errors import CWalkError, SourceLocation


# =============================================================================
# Base Engine Exception
# =============================================================================

class InterpError(CWalkError):
    """
    Base exception for all execution engine errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        kind: Short error category name, used by callers for reporting
    """

    kind = "error"
    is_internal = False

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location and hint.

            program.c:5:12: error: array index 3 out of bound
            hint: 'a' is declared as int[3]
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def attach_location(self, location: Optional[SourceLocation]) -> "InterpError":
        """
        Set the location if the raising code did not know it.

        Errors raised deep in the value model carry no location; the
        executor attaches the location of the statement being run.
        """
        if self.location is None and location is not None:
            self.location = location
            self.args = (self._format_message(),)
        return self


# =============================================================================
# Name Errors
# =============================================================================

class CNameError(InterpError):
    """Identifier resolution error."""
    kind = "name"


class UndeclaredIdentifierError(CNameError):
    """
    Reference to an undeclared identifier.

    The scopes suggest similarly-named visible identifiers when this
    error occurs, helping to catch typos.
    """

    def __init__(
        self,
        identifier: str,
        location: Optional[SourceLocation] = None,
        similar_identifiers: Optional[List[str]] = None,
    ):
        self.identifier = identifier
        self.similar_identifiers = similar_identifiers or []

        hint = None
        if self.similar_identifiers:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_identifiers[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"'{identifier}' undeclared",
            location=location,
            hint=hint,
        )


class DuplicateDeclarationError(CNameError):
    """Identifier declared more than once in the same scope."""

    def __init__(
        self,
        identifier: str,
        location: Optional[SourceLocation] = None,
    ):
        self.identifier = identifier
        super().__init__(
            f"redeclaration of '{identifier}'",
            location=location,
        )


# =============================================================================
# Type Errors
# =============================================================================

class CTypeError(InterpError):
    """
    Type mismatch or type-related error.

    Raised when:
        - An arithmetic, relational or bitwise operand is not a number
        - A non-pointer is dereferenced
        - An assignment mixes incompatible types
        - A compound assignment targets a non-numeric lvalue
    """
    kind = "type"

    def __init__(
        self,
        message: str,
        expected_type: Optional[str] = None,
        actual_type: Optional[str] = None,
        location: Optional[SourceLocation] = None,
    ):
        self.expected_type = expected_type
        self.actual_type = actual_type

        hint = None
        if expected_type and actual_type:
            hint = f"expected '{expected_type}', got '{actual_type}'"

        super().__init__(message, location=location, hint=hint)


class UninitializedVariableError(CTypeError):
    """A scalar variable was read before anything was assigned to it."""

    def __init__(self, identifier: Optional[str], location: Optional[SourceLocation] = None):
        self.identifier = identifier
        what = f"'{identifier}'" if identifier else "value"
        super().__init__(f"{what} is used uninitialized", location=location)


class CPointerError(CTypeError):
    """Invalid use of a pointer value."""
    pass


class NullPointerError(CPointerError):
    """Dereference of a NULL pointer."""

    def __init__(self, location: Optional[SourceLocation] = None):
        super().__init__("dereference of a NULL pointer", location=location)


class DanglingPointerError(CPointerError):
    """Dereference of a pointer whose target went out of scope."""

    def __init__(self, location: Optional[SourceLocation] = None):
        super().__init__(
            "dereference of a pointer to a variable that is out of scope",
            location=location,
        )


# =============================================================================
# Lvalue Errors
# =============================================================================

class InvalidLValueError(InterpError):
    """
    Operation requiring an addressable, named variable applied to a
    temporary.

    Examples of invalid lvalues:
        - &42
        - (a + b)++
        - 3 = x
    """
    kind = "lvalue"

    def __init__(
        self,
        message: str = "lvalue required",
        location: Optional[SourceLocation] = None,
    ):
        super().__init__(
            message,
            location=location,
            hint="the operand must be a variable, array element or dereferenced pointer",
        )


# =============================================================================
# Bounds Errors
# =============================================================================

class ArrayBoundsError(InterpError):
    """Array index greater than or equal to the declared dimension."""
    kind = "bounds"


class DimensionMismatchError(ArrayBoundsError):
    """Number of indexes does not match the number of array dimensions."""
    pass


# =============================================================================
# Arithmetic Errors
# =============================================================================

class CArithmeticError(InterpError):
    """Arithmetic failure while reducing an expression."""
    kind = "arithmetic"


class DivisionByZeroError(CArithmeticError):
    """Division or modulus by zero."""

    def __init__(self, location: Optional[SourceLocation] = None):
        super().__init__("division by zero", location=location)


# =============================================================================
# Control Flow Errors
# =============================================================================

class InvalidBreakContinueError(InterpError):
    """
    break or continue outside of an eligible construct.

    'continue' needs an enclosing for/while/do-while; 'break' also
    accepts an enclosing switch.
    """
    kind = "control-flow"

    def __init__(self, keyword: str, location: Optional[SourceLocation] = None):
        self.keyword = keyword
        context = "a loop" if keyword == "continue" else "loop or switch"
        super().__init__(
            f"{keyword} statement not within {context}",
            location=location,
        )


# =============================================================================
# Internal Consistency Errors
# =============================================================================

class ExpressionShapeError(InterpError):
    """
    Malformed expression element list.

    Raised when the reducer meets a stack it cannot collapse or an
    operator it does not know. This points at a defect in the upstream
    parser, not at the user's program, and is reported as an internal
    error by the CLI.
    """
    kind = "internal"
    is_internal = True


class UnsupportedFeatureError(InterpError):
    """
    Construct outside the evaluable subset.

    Examples:
        - function calls
        - struct/union/enum declarations
    """
    kind = "unsupported"

    def __init__(
        self,
        feature: str,
        location: Optional[SourceLocation] = None,
        alternative: Optional[str] = None,
    ):
        self.feature = feature
        super().__init__(
            f"unsupported feature: {feature}",
            location=location,
            hint=alternative,
        )


class ASTFormatError(InterpError):
    """The AST document handed to the loader is malformed."""
    kind = "format"
