"""
Execution Engine AST Definitions
================================

This module defines the AST node types the execution engine consumes.
The tree is produced by an external parser (or by the JSON loader, see
cwalk.interp.loader); the engine never parses text.

Node Hierarchy
--------------
ASTNode (base)
├── Expression elements
│   ├── Expression - one flat element list, linked to the next comma operand
│   ├── Identifier - variable reference with optional index expressions
│   ├── Constant - numeric literal
│   ├── Operator - binary operator between two operands
│   ├── UnaryExpression - &, *, -, +, !, ~, ++ and -- forms
│   ├── AssignmentExpression - =, +=, -=, ...
│   ├── TernaryExpression - condition ? a : b
│   ├── CallExpression - function call (rejected by the engine)
│   └── InitializerList - { ... } aggregate initializer
└── Statements
    ├── Declaration - variable declaration
    ├── TypedefDeclaration - type alias
    ├── ExpressionStatement - expression as statement
    ├── BlockStatement - compound statement { ... }
    ├── IfStatement - if/else statement
    ├── WhileStatement - while loop
    ├── DoWhileStatement - do-while loop
    ├── ForStatement - for loop
    ├── SwitchStatement - switch statement
    ├── CaseClause - case/default in switch
    ├── ContinueStatement - continue statement
    ├── BreakStatement - break statement
    └── ReturnStatement - return statement

Flat Element Lists
------------------
An Expression does not nest binary operations. The parser hands over
the operands and operators in source order, and the evaluator applies
precedence itself:

    2 + 3 * 4  ->  Expression([Constant(2), Operator(ADD), Constant(3),
                               Operator(MULTIPLY), Constant(4)])

A parenthesised sub-expression is an Expression used as an element.

Design Notes
------------
- All nodes are dataclasses; every field has a default so nodes can be
  built positionally or by keyword
- Each node may carry its source location for error reporting
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from cwalk.errors import SourceLocation
from cwalk.interp.types import BaseType, DataType, TYPE_INT


# =============================================================================
# AST Node Base Class
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all AST nodes.

    Subclasses declare their own fields followed by an optional
    ``location`` used for error reporting.
    """

    def __repr__(self) -> str:
        """Default representation showing node type."""
        location = getattr(self, "location", None)
        if location is None:
            return self.__class__.__name__
        return f"{self.__class__.__name__}@{location.line}:{location.column}"


# =============================================================================
# Operators
# =============================================================================

class BinaryOperator(Enum):
    """Binary operator tokens, valued by their source spelling."""
    # Arithmetic
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"
    ADD = "+"
    SUBTRACT = "-"

    # Shifts
    LEFT_SHIFT = "<<"
    RIGHT_SHIFT = ">>"

    # Comparison
    LESS = "<"
    GREATER = ">"
    LESS_EQ = "<="
    GREATER_EQ = ">="
    EQUAL = "=="
    NOT_EQUAL = "!="

    # Bitwise
    BITWISE_AND = "&"
    BITWISE_XOR = "^"
    BITWISE_OR = "|"

    # Logical
    LOGICAL_AND = "&&"
    LOGICAL_OR = "||"

    # Conditional, only valid inside a TernaryExpression
    QUESTION = "?"
    COLON = ":"

    def __str__(self) -> str:
        return self.value


class UnaryOperator(Enum):
    """Unary operator types."""
    NEGATE = "-"
    POSITIVE = "+"
    LOGICAL_NOT = "!"
    BITWISE_NOT = "~"
    DEREFERENCE = "*"
    ADDRESS_OF = "&"
    PRE_INCREMENT = "++x"
    PRE_DECREMENT = "--x"
    POST_INCREMENT = "x++"
    POST_DECREMENT = "x--"

    @property
    def is_increment(self) -> bool:
        """Return True for the four ++/-- forms."""
        return self in (
            UnaryOperator.PRE_INCREMENT,
            UnaryOperator.PRE_DECREMENT,
            UnaryOperator.POST_INCREMENT,
            UnaryOperator.POST_DECREMENT,
        )

    def __str__(self) -> str:
        return self.value.replace("x", "")


class AssignmentOperator(Enum):
    """Assignment operator types."""
    ASSIGN = "="
    ADD_ASSIGN = "+="
    SUB_ASSIGN = "-="
    MUL_ASSIGN = "*="
    DIV_ASSIGN = "/="
    MOD_ASSIGN = "%="
    AND_ASSIGN = "&="
    OR_ASSIGN = "|="
    XOR_ASSIGN = "^="
    LSHIFT_ASSIGN = "<<="
    RSHIFT_ASSIGN = ">>="

    @property
    def binary(self) -> Optional[BinaryOperator]:
        """The binary operator a compound assignment applies, None for '='."""
        if self is AssignmentOperator.ASSIGN:
            return None
        return BinaryOperator(self.value[:-1])

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class Expression(ASTNode):
    """
    One comma operand: a flat list of operand and operator elements.

    Attributes:
        elements: Operands and Operators in source order
        next: The expression after the next comma, if any
    """
    elements: list = field(default_factory=list)
    next: Optional["Expression"] = None
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class Identifier(ASTNode):
    """
    Variable reference, optionally indexed (a, a[i], a[i][j + 1]).

    Attributes:
        name: Variable name
        indexes: One Expression per subscript, outer to inner
    """
    name: str = ""
    indexes: list[Expression] = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class Constant(ASTNode):
    """
    Numeric literal.

    Attributes:
        value: The number
        base_type: Literal type; None lets the engine infer int or double
    """
    value: Union[int, float] = 0
    base_type: Optional[BaseType] = None
    location: Optional[SourceLocation] = field(default=None, compare=False)

    @property
    def data_type(self) -> DataType:
        if self.base_type is not None:
            return DataType(self.base_type)
        if isinstance(self.value, float):
            return DataType(BaseType.FP)
        return TYPE_INT


@dataclass
class Operator(ASTNode):
    """Binary operator element."""
    operator: BinaryOperator = BinaryOperator.ADD
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class UnaryExpression(ASTNode):
    """
    Unary operation (-x, !x, &a[1], *p, ++i, i--).

    Attributes:
        operator: The unary operator
        operand: An element (Identifier, Constant, Expression, ...)
    """
    operator: UnaryOperator = UnaryOperator.NEGATE
    operand: ASTNode = None
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class AssignmentExpression(ASTNode):
    """
    Assignment (target op value).

    Attributes:
        operator: The assignment operator
        target: Identifier, or a dereference of one (*p = v)
        value: The right-hand side
    """
    operator: AssignmentOperator = AssignmentOperator.ASSIGN
    target: ASTNode = None
    value: Expression = None
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class TernaryExpression(ASTNode):
    """Conditional expression (condition ? then_expr : else_expr)."""
    condition: Expression = None
    then_expr: Expression = None
    else_expr: Expression = None
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class CallExpression(ASTNode):
    """Function call expression."""
    function_name: str = ""
    arguments: list[Expression] = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class InitializerList(ASTNode):
    """
    Brace initializer for arrays.

    Attributes:
        values: Expressions and nested InitializerLists, in source order
    """
    values: list = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False)


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class Declaration(ASTNode):
    """
    Variable declaration (int a[2][3] = {...};).

    Attributes:
        data_type: Declared type without array dimensions
        name: Variable name
        dimensions: One Expression per array dimension
        initializer: Expression, InitializerList, or None
    """
    data_type: DataType = TYPE_INT
    name: str = ""
    dimensions: list[Expression] = field(default_factory=list)
    initializer: Optional[Union[Expression, InitializerList]] = None
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class TypedefDeclaration(ASTNode):
    """Type alias (typedef unsigned char byte;)."""
    name: str = ""
    data_type: DataType = TYPE_INT
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class ExpressionStatement(ASTNode):
    """Expression used as a statement (x = 5;)."""
    expression: Optional[Expression] = None
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class BlockStatement(ASTNode):
    """Compound statement { ... }."""
    statements: list[ASTNode] = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class IfStatement(ASTNode):
    """
    If statement; else-if chains nest in else_branch.

    Attributes:
        condition: The test expression
        then_branch: Statement run when the test is non-zero
        else_branch: Statement run otherwise, if any
    """
    condition: Expression = None
    then_branch: ASTNode = None
    else_branch: Optional[ASTNode] = None
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class WhileStatement(ASTNode):
    """While loop."""
    condition: Expression = None
    body: ASTNode = None
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class DoWhileStatement(ASTNode):
    """Do-while loop; the body runs before the first test."""
    body: ASTNode = None
    condition: Expression = None
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class ForStatement(ASTNode):
    """
    For loop.

    Attributes:
        initializer: Declaration, list of Declarations, Expression, or None
        condition: Loop test; None means always true
        update: Step expression run after each iteration
        body: Loop body
    """
    initializer: Optional[Union[Declaration, list, Expression]] = None
    condition: Optional[Expression] = None
    update: Optional[Expression] = None
    body: ASTNode = None
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class CaseClause(ASTNode):
    """
    Case or default label in a switch, with the statements that follow it.

    Several labels sharing one body are written as clauses with empty
    statement lists; execution falls through them.
    """
    value: Optional[Expression] = None
    statements: list[ASTNode] = field(default_factory=list)
    is_default: bool = False
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class SwitchStatement(ASTNode):
    """Switch statement."""
    expression: Expression = None
    cases: list[CaseClause] = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class ContinueStatement(ASTNode):
    """Continue statement."""
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class BreakStatement(ASTNode):
    """Break statement."""
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass
class ReturnStatement(ASTNode):
    """Return statement; value is None for a bare 'return;'."""
    value: Optional[Expression] = None
    location: Optional[SourceLocation] = field(default=None, compare=False)


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Dispatches on the node's class name. Subclasses define visit_* methods
    for the node types they handle; anything else reaches generic_visit().

    Usage:
        class Counter(ASTVisitor):
            def visit_BlockStatement(self, node):
                return sum(self.visit(s) for s in node.statements)

            def generic_visit(self, node):
                return 1
    """

    def visit(self, node: ASTNode):
        """Visit a node by dispatching to the matching visit_* method."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode):
        """Handle a node type with no visit_* method."""
        raise NotImplementedError(f"no visitor for {node.__class__.__name__}")
