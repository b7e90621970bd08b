"""
Statement Executor
==================

This module walks statement nodes and runs them. Every statement returns
a Completion telling its caller how it finished:

| Signal   | Produced by  | Consumed by                         |
|----------|--------------|-------------------------------------|
| NORMAL   | everything   | -                                   |
| CONTINUE | continue     | the nearest for/while/do-while      |
| BREAK    | break        | the nearest loop or switch          |
| RETURN   | return       | nobody; it ends the program         |

Blocks and if-statements pass any non-NORMAL completion straight up.
Loops consume CONTINUE and BREAK. A switch consumes BREAK only; a
CONTINUE inside a switch ends the switch and reaches the loop around it.

Scopes
------
Blocks, loops and switches each run inside their own scope, popped on
every exit path. Loop scopes are what make 'continue' and 'break' legal.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from cwalk.interp.array_init import ArrayInitializer
from cwalk.interp.ast import (
    ASTNode,
    ASTVisitor,
    BinaryOperator,
    Declaration,
    Expression,
    InitializerList,
    TypedefDeclaration,
    ExpressionStatement,
    BlockStatement,
    IfStatement,
    WhileStatement,
    DoWhileStatement,
    ForStatement,
    SwitchStatement,
    ContinueStatement,
    BreakStatement,
    ReturnStatement,
)
from cwalk.interp.errors import (
    InterpError,
    CTypeError,
    DuplicateDeclarationError,
    InvalidBreakContinueError,
    UnsupportedFeatureError,
)
from cwalk.interp.evaluator import ExpressionEvaluator
from cwalk.interp.scopes import Scopes, ScopeTag, LOOP_TAGS, BREAKABLE_TAGS
from cwalk.interp.types import BaseType, DataType
from cwalk.interp.variable import Variable


logger = logging.getLogger(__name__)


# =============================================================================
# Completion Records
# =============================================================================

class Signal(Enum):
    """How a statement finished."""
    NORMAL = auto()
    CONTINUE = auto()
    BREAK = auto()
    RETURN = auto()


@dataclass(frozen=True)
class Completion:
    """
    Result of executing a statement.

    Attributes:
        signal: How the statement finished
        value: The returned value for RETURN (None for a bare 'return;')
    """
    signal: Signal = Signal.NORMAL
    value: Optional[Variable] = None

    @property
    def is_abrupt(self) -> bool:
        """Return True for anything other than NORMAL."""
        return self.signal is not Signal.NORMAL


NORMAL = Completion()
CONTINUE = Completion(Signal.CONTINUE)
BREAK = Completion(Signal.BREAK)


# =============================================================================
# Executor
# =============================================================================

class StatementExecutor(ASTVisitor):
    """
    Runs statement nodes against a set of scopes.

    Args:
        scopes: The symbol table shared with the evaluator
        evaluator: Expression evaluator bound to the same scopes
        trace: Log every statement at DEBUG level

    Attributes:
        statements_executed: Number of statements run so far
    """

    def __init__(self, scopes: Scopes, evaluator: ExpressionEvaluator, trace: bool = False):
        self.scopes = scopes
        self.evaluator = evaluator
        self.trace = trace
        self.statements_executed = 0

    def execute(self, node: ASTNode) -> Completion:
        """
        Execute one statement.

        Errors raised without a location get the statement's location.
        """
        self.statements_executed += 1
        if self.trace:
            location = getattr(node, "location", None)
            where = f" at {location}" if location is not None else ""
            logger.debug(f"Execute {node.__class__.__name__}{where}")
        try:
            return self.visit(node)
        except InterpError as e:
            raise e.attach_location(getattr(node, "location", None))

    def execute_all(self, statements: list) -> Completion:
        """Execute statements in order, stopping at the first abrupt one."""
        for statement in statements:
            completion = self.execute(statement)
            if completion.is_abrupt:
                return completion
        return NORMAL

    def generic_visit(self, node: ASTNode) -> Completion:
        raise UnsupportedFeatureError(
            f"statement kind '{node.__class__.__name__}'",
            location=getattr(node, "location", None),
        )

    # =========================================================================
    # Declarations
    # =========================================================================

    def visit_Declaration(self, node: Declaration) -> Completion:
        name = node.name
        if self.scopes.declared_in_current(name):
            raise DuplicateDeclarationError(name, location=node.location)

        data_type = self._declared_type(node)
        variable = Variable.declare(data_type)

        initializer = node.initializer
        if isinstance(initializer, InitializerList):
            if not data_type.is_array:
                raise CTypeError(
                    f"variable '{name}' is NOT of array type",
                    location=node.location,
                )
            values = self._initializer_values(initializer)
            flat = ArrayInitializer(data_type.array_dimensions, values).expand()
            variable.init_array_values(flat)
        elif initializer is not None:
            if data_type.is_array:
                raise CTypeError(
                    f"invalid initializer for array '{name}'",
                    location=node.location,
                )
            variable.assign((), self.evaluator.evaluate(initializer))

        self.scopes.add_ident(name, variable)
        where = "global" if self.scopes.in_global_scope() else f"depth {self.scopes.depth}"
        logger.debug(f"Declare {data_type} {name} ({where})")
        return NORMAL

    def _declared_type(self, node: Declaration) -> DataType:
        """Resolve typedef names and evaluate the array dimensions."""
        data_type = node.data_type
        inner_dimensions = data_type.array_dimensions

        if data_type.is_custom:
            if data_type.base_type in (BaseType.STRUCT, BaseType.UNION, BaseType.ENUM):
                raise UnsupportedFeatureError(
                    f"{data_type.base_type} variables",
                    location=node.location,
                )
            alias = self.scopes.find_type(data_type.custom_type_name)
            if alias is None:
                raise CTypeError(
                    f"unknown type name '{data_type.custom_type_name}'",
                    location=node.location,
                )
            inner_dimensions += alias.array_dimensions
            data_type = DataType(
                alias.base_type,
                alias.pointer_depth + data_type.pointer_depth,
                (),
                alias.custom_type_name,
            )

        if data_type.base_type is BaseType.VOID and not data_type.is_pointer:
            raise CTypeError(f"variable '{node.name}' declared void", location=node.location)
        if not data_type.is_pointer and not data_type.base_type.is_numeric:
            raise UnsupportedFeatureError(
                f"variables of type '{data_type}'", location=node.location
            )

        dimensions = []
        for expression in node.dimensions:
            size = self.evaluator.evaluate_int(expression)
            if size <= 0:
                raise CTypeError(
                    f"size of array '{node.name}' is not positive",
                    location=node.location,
                )
            dimensions.append(size)

        return data_type.with_dimensions(tuple(dimensions) + inner_dimensions)

    def _initializer_values(self, initializer: InitializerList) -> list:
        """Evaluate an initializer list into nested lists of values."""
        values = []
        for item in initializer.values:
            if isinstance(item, InitializerList):
                values.append(self._initializer_values(item))
            else:
                values.append(self.evaluator.evaluate(item))
        return values

    def visit_TypedefDeclaration(self, node: TypedefDeclaration) -> Completion:
        if node.data_type.base_type in (BaseType.STRUCT, BaseType.UNION, BaseType.ENUM):
            raise UnsupportedFeatureError(
                f"typedef of {node.data_type.base_type}", location=node.location
            )
        data_type = node.data_type
        if data_type.is_custom:
            alias = self.scopes.find_type(data_type.custom_type_name)
            if alias is None:
                raise CTypeError(
                    f"unknown type name '{data_type.custom_type_name}'",
                    location=node.location,
                )
            data_type = DataType(
                alias.base_type,
                alias.pointer_depth + data_type.pointer_depth,
                data_type.array_dimensions + alias.array_dimensions,
                alias.custom_type_name,
            )
        self.scopes.add_type(node.name, data_type)
        logger.debug(f"Typedef {node.name} = {data_type}")
        return NORMAL

    # =========================================================================
    # Simple Statements
    # =========================================================================

    def visit_ExpressionStatement(self, node: ExpressionStatement) -> Completion:
        if node.expression is not None:
            self.evaluator.evaluate(node.expression)
        return NORMAL

    def visit_BlockStatement(self, node: BlockStatement) -> Completion:
        with self.scopes.scope(ScopeTag.BLOCK):
            return self.execute_all(node.statements)

    def visit_IfStatement(self, node: IfStatement) -> Completion:
        if self.evaluator.evaluate_boolean(node.condition):
            return self.execute(node.then_branch)
        if node.else_branch is not None:
            return self.execute(node.else_branch)
        return NORMAL

    def visit_ContinueStatement(self, node: ContinueStatement) -> Completion:
        if not self.scopes.has_any_scope(*LOOP_TAGS):
            raise InvalidBreakContinueError("continue", location=node.location)
        return CONTINUE

    def visit_BreakStatement(self, node: BreakStatement) -> Completion:
        if not self.scopes.has_any_scope(*BREAKABLE_TAGS):
            raise InvalidBreakContinueError("break", location=node.location)
        return BREAK

    def visit_ReturnStatement(self, node: ReturnStatement) -> Completion:
        value = None
        if node.value is not None:
            value = self.evaluator.evaluate(node.value)
        logger.debug(f"Return {value!r}")
        return Completion(Signal.RETURN, value)

    # =========================================================================
    # Loops
    # =========================================================================

    def visit_WhileStatement(self, node: WhileStatement) -> Completion:
        with self.scopes.scope(ScopeTag.WHILE):
            while self.evaluator.evaluate_boolean(node.condition):
                completion = self.execute(node.body)
                if completion.signal is Signal.BREAK:
                    break
                if completion.signal is Signal.RETURN:
                    return completion
        return NORMAL

    def visit_DoWhileStatement(self, node: DoWhileStatement) -> Completion:
        with self.scopes.scope(ScopeTag.DO_WHILE):
            while True:
                completion = self.execute(node.body)
                if completion.signal is Signal.BREAK:
                    break
                if completion.signal is Signal.RETURN:
                    return completion
                if not self.evaluator.evaluate_boolean(node.condition):
                    break
        return NORMAL

    def visit_ForStatement(self, node: ForStatement) -> Completion:
        with self.scopes.scope(ScopeTag.FOR):
            self._for_initializer(node.initializer)
            while node.condition is None or self.evaluator.evaluate_boolean(node.condition):
                completion = self.execute(node.body)
                if completion.signal is Signal.BREAK:
                    break
                if completion.signal is Signal.RETURN:
                    return completion
                if node.update is not None:
                    self.evaluator.evaluate(node.update)
        return NORMAL

    def _for_initializer(self, initializer) -> None:
        if initializer is None:
            return
        if isinstance(initializer, Expression):
            self.evaluator.evaluate(initializer)
        elif isinstance(initializer, list):
            for declaration in initializer:
                self.execute(declaration)
        else:
            self.execute(initializer)

    # =========================================================================
    # Switch
    # =========================================================================

    def visit_SwitchStatement(self, node: SwitchStatement) -> Completion:
        """
        Run a switch.

        Case values are evaluated in order until one matches; execution
        starts at the matching clause (or the default clause when none
        matches) and falls through the following clauses.
        """
        value = self.evaluator.evaluate(node.expression)

        with self.scopes.scope(ScopeTag.SWITCH):
            start = None
            for index, clause in enumerate(node.cases):
                if clause.is_default:
                    continue
                if self._case_matches(value, clause):
                    start = index
                    break

            if start is None:
                start = next(
                    (i for i, clause in enumerate(node.cases) if clause.is_default),
                    None,
                )
                if start is None:
                    return NORMAL

            for clause in node.cases[start:]:
                completion = self.execute_all(clause.statements)
                if completion.signal is Signal.BREAK:
                    return NORMAL
                if completion.is_abrupt:
                    return completion

        return NORMAL

    def _case_matches(self, value, clause) -> bool:
        """Compare a case label with the controlling value using C '=='."""
        case_value = self.evaluator.evaluate(clause.value)
        result = self.evaluator.eval_binary_operator(
            value, BinaryOperator.EQUAL, case_value, clause.location
        )
        return bool(result.value)
