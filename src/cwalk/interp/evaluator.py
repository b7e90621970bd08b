"""
Expression Evaluation Engine
============================

This module reduces an Expression (a chain of flat element lists, one
per comma operand) to a single runtime value.

Evaluation of one element list runs in two phases:

1. Classification (expression_map)
   The list must alternate operand, operator, operand, ... Each operand
   is classified:
   - identifiers resolve through the scopes to a VariableRef;
   - constants become numeric temporaries;
   - address-of, dereference, unary minus/plus, logical-not and
     bitwise-not are evaluated immediately when their operand has no
     side effects;
   - everything else (increments, parenthesised sub-expressions,
     conditionals, calls, unary forms over those) is deferred and only
     evaluated when the reducer pops it, so a short-circuited operand
     never runs its side effects.

2. Reduction (expression_reduce)
   Operators carry a rank (lower binds tighter):

   3   *  /  %
   4   +  -
   5   <<  >>
   6   <  >  <=  >=
   7   ==  !=
   8   &
   9   ^
   10  |
   11  &&
   12  ||
   13  ?  :

   Before an operator is pushed, every stacked operator binding at
   least as tightly is reduced, which gives left-associative precedence
   without building a tree. A '||' first reduces its whole left side;
   if that is non-zero the list evaluates to 1 and nothing to the right
   is touched. '&&' does not short-circuit.

Value Rules
-----------
- Integer arithmetic results are typed unsigned long and are not
  wrapped; only storing into a variable truncates to its width.
- Any floating point operand makes the operation floating point.
- Comparison and logical operators yield 0 or 1.
- Integer '/' truncates toward zero and '%' takes the dividend's sign.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Union

from cwalk.interp.ast import (
    ASTNode,
    Expression,
    Identifier,
    Constant,
    Operator,
    UnaryExpression,
    AssignmentExpression,
    TernaryExpression,
    CallExpression,
    BinaryOperator,
    UnaryOperator,
    AssignmentOperator,
)
from cwalk.interp.errors import (
    InterpError,
    UndeclaredIdentifierError,
    CTypeError,
    CPointerError,
    CArithmeticError,
    DivisionByZeroError,
    InvalidLValueError,
    UninitializedVariableError,
    ExpressionShapeError,
    UnsupportedFeatureError,
)
from cwalk.interp.scopes import Scopes
from cwalk.interp.types import INTEGER_WIDTHS, TYPE_WIDE, TYPE_FP
from cwalk.interp.variable import Variable, PointerRef


logger = logging.getLogger(__name__)


# =============================================================================
# Operator Ranks
# =============================================================================

RANKS = {
    BinaryOperator.MULTIPLY: 3,
    BinaryOperator.DIVIDE: 3,
    BinaryOperator.MODULO: 3,
    BinaryOperator.ADD: 4,
    BinaryOperator.SUBTRACT: 4,
    BinaryOperator.LEFT_SHIFT: 5,
    BinaryOperator.RIGHT_SHIFT: 5,
    BinaryOperator.LESS: 6,
    BinaryOperator.GREATER: 6,
    BinaryOperator.LESS_EQ: 6,
    BinaryOperator.GREATER_EQ: 6,
    BinaryOperator.EQUAL: 7,
    BinaryOperator.NOT_EQUAL: 7,
    BinaryOperator.BITWISE_AND: 8,
    BinaryOperator.BITWISE_XOR: 9,
    BinaryOperator.BITWISE_OR: 10,
    BinaryOperator.LOGICAL_AND: 11,
    BinaryOperator.LOGICAL_OR: 12,
    BinaryOperator.QUESTION: 13,
    BinaryOperator.COLON: 13,
}

# Sentinel rank for the final reduction
FINAL_RANK = math.inf

_COMPARISONS = {
    BinaryOperator.LESS: lambda a, b: a < b,
    BinaryOperator.GREATER: lambda a, b: a > b,
    BinaryOperator.LESS_EQ: lambda a, b: a <= b,
    BinaryOperator.GREATER_EQ: lambda a, b: a >= b,
    BinaryOperator.EQUAL: lambda a, b: a == b,
    BinaryOperator.NOT_EQUAL: lambda a, b: a != b,
}

# Operators that reject floating point operands
_INTEGER_ONLY = (
    BinaryOperator.MODULO,
    BinaryOperator.LEFT_SHIFT,
    BinaryOperator.RIGHT_SHIFT,
    BinaryOperator.BITWISE_AND,
    BinaryOperator.BITWISE_XOR,
    BinaryOperator.BITWISE_OR,
)

# Shift counts must be below the width of the widest integer type
MAX_SHIFT = INTEGER_WIDTHS[TYPE_WIDE.base_type]

# Unary forms evaluated during classification when their operand is pure
_EAGER_UNARY = (
    UnaryOperator.ADDRESS_OF,
    UnaryOperator.DEREFERENCE,
    UnaryOperator.NEGATE,
    UnaryOperator.POSITIVE,
    UnaryOperator.LOGICAL_NOT,
    UnaryOperator.BITWISE_NOT,
)


@dataclass
class VariableRef:
    """
    A classified identifier operand: the variable and its evaluated indexes.

    The value is only read when the reducer uses the operand.
    """
    variable: Variable
    indexes: list[int] = field(default_factory=list)
    location: Optional[object] = None


Operand = Union[Variable, VariableRef, ASTNode]


def is_pure(node) -> bool:
    """
    Return True if evaluating ``node`` cannot have side effects.

    Identifiers (with pure indexes), constants, operators and the eager
    unary forms over pure operands are pure. Increments, assignments,
    conditionals and calls are not.
    """
    if isinstance(node, (Constant, Operator)):
        return True
    if isinstance(node, Identifier):
        return all(is_pure(index) for index in node.indexes)
    if isinstance(node, Expression):
        return (
            all(is_pure(element) for element in node.elements)
            and (node.next is None or is_pure(node.next))
        )
    if isinstance(node, UnaryExpression):
        return node.operator in _EAGER_UNARY and is_pure(node.operand)
    return False


def _wide(value: int) -> Variable:
    return Variable(TYPE_WIDE, None, value)


def _boolean(flag: bool) -> Variable:
    return _wide(1 if flag else 0)


def _int_divide(a: int, b: int) -> int:
    """Integer division truncating toward zero, as C does."""
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


# =============================================================================
# Evaluator
# =============================================================================

class ExpressionEvaluator:
    """
    Evaluates Expression nodes against a set of scopes.

    Args:
        scopes: Symbol table used to resolve identifiers and pointers
        check_uninitialized: Raise UninitializedVariableError when a
                             never-assigned scalar is read (otherwise it
                             reads as 0)

    Example:
        evaluator = ExpressionEvaluator(scopes)
        result = evaluator.evaluate(expression)
        result.value
    """

    def __init__(self, scopes: Scopes, check_uninitialized: bool = True):
        self.scopes = scopes
        self.check_uninitialized = check_uninitialized

    # =========================================================================
    # Public Interface
    # =========================================================================

    def evaluate(self, expression: Expression) -> Variable:
        """
        Evaluate a comma chain left to right, returning the last value.
        """
        result = None
        node = expression
        while node is not None:
            result = self._evaluate_elements(node)
            node = node.next
        if result is None:
            raise ExpressionShapeError("expected expression")
        return result

    def evaluate_int(self, expression: Expression) -> int:
        """Evaluate to a Python int (for array dimensions and indexes)."""
        result = self.evaluate(expression)
        if not result.is_numeric_type():
            raise CTypeError(
                "not a numeric expression",
                actual_type=result.type_name(),
                expected_type="int",
                location=expression.location,
            )
        return int(self._number(result, location=expression.location))

    def evaluate_boolean(self, expression: Expression) -> bool:
        """Evaluate a condition."""
        return self._truthy(self.evaluate(expression), expression.location)

    # =========================================================================
    # Element Lists
    # =========================================================================

    def _evaluate_elements(self, expression: Expression) -> Variable:
        elements = expression.elements
        if len(elements) == 1 and isinstance(elements[0], AssignmentExpression):
            return self.eval_assignment(elements[0])
        return self.expression_reduce(self.expression_map(elements))

    def expression_map(self, elements: list) -> list:
        """
        Classify an element list into operands and operators.

        Raises:
            ExpressionShapeError: If operands and operators do not alternate
        """
        if not elements:
            raise ExpressionShapeError("expected expression")

        items = []
        for position, element in enumerate(elements):
            expecting_operand = position % 2 == 0
            if isinstance(element, Operator):
                if expecting_operand:
                    raise ExpressionShapeError(
                        f"unexpected operator '{element.operator}'",
                        location=element.location,
                    )
                if element.operator not in RANKS:
                    raise ExpressionShapeError(
                        f"unknown operator '{element.operator}'",
                        location=element.location,
                    )
                items.append(element)
            else:
                if not expecting_operand:
                    raise ExpressionShapeError(
                        "expected operator",
                        location=getattr(element, "location", None),
                    )
                items.append(self._classify(element))

        if isinstance(items[-1], Operator):
            raise ExpressionShapeError(
                "expected expression", location=items[-1].location
            )
        return items

    def _classify(self, element) -> Operand:
        if isinstance(element, Constant):
            return Variable(element.data_type, None, element.value)
        if isinstance(element, Identifier) and is_pure(element):
            return self._resolve_identifier(element)
        if (
            isinstance(element, UnaryExpression)
            and element.operator in _EAGER_UNARY
            and is_pure(element.operand)
        ):
            return self.eval_unary(element)
        # Deferred until the reducer pops it
        return element

    def _resolve_identifier(self, node: Identifier) -> VariableRef:
        variable = self.scopes.find_ident(node.name)
        if variable is None:
            raise UndeclaredIdentifierError(
                node.name,
                location=node.location,
                similar_identifiers=self.scopes.similar_names(node.name),
            )
        indexes = [self.evaluate_int(index) for index in node.indexes]
        return VariableRef(variable, indexes, node.location)

    # =========================================================================
    # Reduction
    # =========================================================================

    def expression_reduce(self, items: list) -> Variable:
        """
        Reduce classified items to a single value.

        Raises:
            ExpressionShapeError: If the stack does not collapse to one operand
        """
        stack: list = []

        for item in items:
            if not isinstance(item, Operator):
                stack.append(item)
                continue

            rank = RANKS[item.operator]
            self.reduce_stack(stack, rank)

            if item.operator is BinaryOperator.LOGICAL_OR:
                left = self.eval_unary_operator(stack[-1])
                stack[-1] = left
                if self._truthy(left, item.location):
                    logger.debug("'||' short-circuit: right operand skipped")
                    return left

            stack.append(item)

        self.reduce_stack(stack, FINAL_RANK)
        if len(stack) != 1:
            raise ExpressionShapeError("invalid expression")
        return self.eval_unary_operator(stack[0])

    def reduce_stack(self, stack: list, rank: float) -> None:
        """Collapse stacked operators whose rank is <= ``rank``."""
        while (
            len(stack) >= 3
            and isinstance(stack[-2], Operator)
            and RANKS[stack[-2].operator] <= rank
        ):
            right = stack.pop()
            operator = stack.pop()
            left = stack.pop()
            if operator.operator in (BinaryOperator.QUESTION, BinaryOperator.COLON):
                raise ExpressionShapeError(
                    f"unexpected operator '{operator.operator}'",
                    location=operator.location,
                )
            left_value = self.eval_unary_operator(left)
            right_value = self.eval_unary_operator(right)
            stack.append(
                self.eval_binary_operator(
                    left_value, operator.operator, right_value, operator.location
                )
            )

    # =========================================================================
    # Operands
    # =========================================================================

    def eval_unary_operator(self, operand: Operand) -> Variable:
        """
        Turn a stack operand into a value, running deferred forms now.
        """
        if isinstance(operand, Variable):
            return operand
        if isinstance(operand, VariableRef):
            return self._load(operand)
        if isinstance(operand, Identifier):
            return self._load(self._resolve_identifier(operand))
        if isinstance(operand, UnaryExpression):
            return self.eval_unary(operand)
        if isinstance(operand, Expression):
            return self.evaluate(operand)
        if isinstance(operand, TernaryExpression):
            return self.eval_ternary(operand)
        if isinstance(operand, AssignmentExpression):
            return self.eval_assignment(operand)
        if isinstance(operand, CallExpression):
            raise UnsupportedFeatureError(
                f"call to function '{operand.function_name}'",
                location=operand.location,
                alternative="function calls are not evaluated by this engine",
            )
        raise ExpressionShapeError(
            f"unexpected element {operand.__class__.__name__}",
            location=getattr(operand, "location", None),
        )

    def _load(self, ref: VariableRef) -> Variable:
        """Read an identifier operand into a temporary."""
        value = ref.variable.create_element_variable(ref.indexes)
        if (
            self.check_uninitialized
            and value.is_numeric_type()
            and value.value is None
        ):
            raise UninitializedVariableError(ref.variable.name, location=ref.location)
        return value

    def _number(self, variable: Variable, operator=None, location=None):
        """
        Return the number held by an operand.

        Raises:
            CTypeError: If the operand is not numeric
        """
        if not variable.is_numeric_type():
            what = f"binary '{operator}'" if operator is not None else "expression"
            raise CTypeError(
                f"invalid operand to {what}",
                expected_type="arithmetic type",
                actual_type=variable.type_name(),
                location=location,
            )
        value = variable.get_numeric_value()
        if value is None:
            if self.check_uninitialized:
                raise UninitializedVariableError(variable.name, location=location)
            return 0
        return value

    def _truthy(self, variable: Variable, location=None) -> bool:
        if variable.is_ptr_type():
            return variable.value is not None
        if not variable.is_numeric_type():
            raise CTypeError(
                "expression can NOT be evaluated to boolean",
                actual_type=variable.type_name(),
                location=location,
            )
        return self._number(variable, location=location) != 0

    def _decay(self, variable: Variable) -> Variable:
        """Convert an array operand into a pointer to its first element."""
        if not variable.is_array_type():
            return variable
        if variable.handle is None:
            raise InvalidLValueError("array value has no storage to point into")
        ref = PointerRef(variable.handle, (0,) * variable.data_type.rank)
        return Variable(variable.data_type.pointer_to(), None, ref)

    # =========================================================================
    # Unary Forms
    # =========================================================================

    def eval_unary(self, node: UnaryExpression) -> Variable:
        """Evaluate a unary expression."""
        operator = node.operator

        if operator.is_increment:
            return self.eval_self_op(node)

        if operator is UnaryOperator.ADDRESS_OF:
            variable, indexes = self.resolve_lvalue(
                node.operand, "lvalue required as unary '&' operand"
            )
            if variable.is_array_type() and not indexes:
                return self._decay(variable)
            return variable.create_element_ref_variable(indexes)

        if operator is UnaryOperator.DEREFERENCE:
            pointer = self._decay(self.eval_unary_operator(node.operand))
            target, _, value = self._dereference(pointer, node.location)
            if (
                self.check_uninitialized
                and value.is_numeric_type()
                and value.value is None
            ):
                raise UninitializedVariableError(target.name, location=node.location)
            return value

        value = self.eval_unary_operator(node.operand)

        if operator is UnaryOperator.LOGICAL_NOT:
            return _boolean(not self._truthy(value, node.location))

        n = self._number(value, location=node.location)
        result_type = TYPE_FP if isinstance(n, float) else TYPE_WIDE

        if operator is UnaryOperator.NEGATE:
            return Variable(result_type, None, -n)
        if operator is UnaryOperator.POSITIVE:
            return Variable(result_type, None, n)
        if operator is UnaryOperator.BITWISE_NOT:
            if isinstance(n, float):
                raise CTypeError(
                    "wrong type argument to bit-complement",
                    actual_type=value.type_name(),
                    location=node.location,
                )
            return _wide(~n)

        raise ExpressionShapeError(f"unknown unary operator '{operator}'", location=node.location)

    def _dereference(self, pointer: Variable, location=None):
        """
        Follow a pointer value.

        Returns:
            Tuple of (target variable, normalised indexes, element temporary)
        """
        if not pointer.is_ptr_type():
            raise CTypeError(
                "invalid type argument of unary '*'",
                actual_type=pointer.type_name(),
                location=location,
            )
        try:
            target = self.scopes.resolve(pointer.value)
        except InterpError as e:
            raise e.attach_location(location)
        indexes, value = target.element_at_flat_path(pointer.value.path)
        return target, indexes, value

    def resolve_lvalue(self, node, message: str = "lvalue required"):
        """
        Resolve an assignable operand to (variable, indexes).

        Accepts identifiers, dereferenced pointers and parenthesised forms
        of either.

        Raises:
            InvalidLValueError: If ``node`` does not designate storage
        """
        if isinstance(node, Expression) and len(node.elements) == 1 and node.next is None:
            return self.resolve_lvalue(node.elements[0], message)

        if isinstance(node, Identifier):
            ref = self._resolve_identifier(node)
            return ref.variable, ref.indexes

        if isinstance(node, UnaryExpression) and node.operator is UnaryOperator.DEREFERENCE:
            pointer = self._decay(self.eval_unary_operator(node.operand))
            target, indexes, _ = self._dereference(pointer, node.location)
            return target, indexes

        raise InvalidLValueError(message, location=getattr(node, "location", None))

    def eval_self_op(self, node: UnaryExpression) -> Variable:
        """
        Evaluate ++x, --x, x++ and x--.

        Prefix forms mutate then snapshot; postfix forms snapshot then
        mutate. Pointers move by one element.
        """
        operator = node.operator
        variable, indexes = self.resolve_lvalue(
            node.operand, "lvalue required as increment operand"
        )
        if variable.is_array_type() and not indexes:
            raise InvalidLValueError(
                "lvalue required as increment operand", location=node.location
            )

        delta = 1 if operator in (UnaryOperator.PRE_INCREMENT, UnaryOperator.POST_INCREMENT) else -1
        is_prefix = operator in (UnaryOperator.PRE_INCREMENT, UnaryOperator.PRE_DECREMENT)
        element_type = variable.data_type.element_type()

        if element_type.is_pointer:
            if is_prefix:
                return variable.advance_pointer(indexes, delta)
            before = variable.create_element_variable(indexes)
            variable.advance_pointer(indexes, delta)
            return before

        if not element_type.is_numeric:
            raise CTypeError(
                f"wrong type argument to {'increment' if delta > 0 else 'decrement'}",
                actual_type=str(element_type),
                location=node.location,
            )

        current = variable.get_value(indexes)
        if current is None and self.check_uninitialized:
            raise UninitializedVariableError(variable.name, location=node.location)

        if is_prefix:
            variable.set_value(delta, indexes, is_increment=True)
            return variable.create_element_variable(indexes)
        before = variable.create_element_variable(indexes)
        variable.set_value(delta, indexes, is_increment=True)
        return before

    def eval_ternary(self, node: TernaryExpression) -> Variable:
        """Evaluate the condition, then only the chosen branch."""
        if self.evaluate_boolean(node.condition):
            return self.evaluate(node.then_expr)
        return self.evaluate(node.else_expr)

    # =========================================================================
    # Binary Operators
    # =========================================================================

    def eval_binary_operator(
        self,
        left: Variable,
        operator: BinaryOperator,
        right: Variable,
        location=None,
    ) -> Variable:
        """Apply a binary operator to two evaluated operands."""
        if operator is BinaryOperator.LOGICAL_AND:
            return _boolean(self._truthy(left, location) and self._truthy(right, location))
        if operator is BinaryOperator.LOGICAL_OR:
            return _boolean(self._truthy(left, location) or self._truthy(right, location))

        left = self._decay(left)
        right = self._decay(right)
        if left.is_ptr_type() or right.is_ptr_type():
            return self._pointer_operator(left, operator, right, location)

        a = self._number(left, operator, location)
        b = self._number(right, operator, location)
        return self.arithmetic(operator, a, b, location)

    def arithmetic(self, operator: BinaryOperator, a, b, location=None) -> Variable:
        """
        Compute ``a operator b`` on plain numbers.

        Raises:
            DivisionByZeroError: For '/' or '%' by zero
            CTypeError: For integer-only operators on floating point values
        """
        is_float = isinstance(a, float) or isinstance(b, float)

        if operator in _COMPARISONS:
            return _boolean(_COMPARISONS[operator](a, b))

        if is_float and operator in _INTEGER_ONLY:
            raise CTypeError(
                f"invalid operands to binary '{operator}'",
                actual_type="double",
                location=location,
            )

        if operator in (BinaryOperator.DIVIDE, BinaryOperator.MODULO) and b == 0:
            raise DivisionByZeroError(location=location)

        if operator is BinaryOperator.ADD:
            result = a + b
        elif operator is BinaryOperator.SUBTRACT:
            result = a - b
        elif operator is BinaryOperator.MULTIPLY:
            result = a * b
        elif operator is BinaryOperator.DIVIDE:
            result = a / b if is_float else _int_divide(a, b)
        elif operator is BinaryOperator.MODULO:
            result = a - b * _int_divide(a, b)
        elif operator in (BinaryOperator.LEFT_SHIFT, BinaryOperator.RIGHT_SHIFT):
            if b < 0:
                raise CArithmeticError(f"negative shift count {b}", location=location)
            if b >= MAX_SHIFT:
                raise CArithmeticError(f"shift count {b} >= width of type", location=location)
            result = a << b if operator is BinaryOperator.LEFT_SHIFT else a >> b
        elif operator is BinaryOperator.BITWISE_AND:
            result = a & b
        elif operator is BinaryOperator.BITWISE_XOR:
            result = a ^ b
        elif operator is BinaryOperator.BITWISE_OR:
            result = a | b
        else:
            raise ExpressionShapeError(f"unknown operator '{operator}'", location=location)

        if is_float:
            return Variable(TYPE_FP, None, float(result))
        return _wide(result)

    def _pointer_operator(
        self,
        left: Variable,
        operator: BinaryOperator,
        right: Variable,
        location=None,
    ) -> Variable:
        """
        Pointer forms of binary operators.

        Supported: pointer +/- integer, integer + pointer, and equality
        between pointers or against the constant 0 (NULL).
        """
        if operator in (BinaryOperator.EQUAL, BinaryOperator.NOT_EQUAL):
            a = self._pointer_or_null(left, operator, location)
            b = self._pointer_or_null(right, operator, location)
            return _boolean((a == b) == (operator is BinaryOperator.EQUAL))

        if operator is BinaryOperator.ADD and right.is_ptr_type() and not left.is_ptr_type():
            left, right = right, left

        if (
            operator in (BinaryOperator.ADD, BinaryOperator.SUBTRACT)
            and left.is_ptr_type()
            and right.is_numeric_type()
        ):
            n = self._number(right, operator, location)
            if isinstance(n, float):
                raise CTypeError(
                    f"invalid operands to binary '{operator}'",
                    actual_type="double",
                    location=location,
                )
            if left.value is None:
                raise CPointerError("arithmetic on a NULL pointer", location=location)
            step = n if operator is BinaryOperator.ADD else -n
            return Variable(left.data_type, None, left.value.advanced(step))

        raise CTypeError(
            f"invalid operands to binary '{operator}'",
            expected_type=left.type_name(),
            actual_type=right.type_name(),
            location=location,
        )

    def _pointer_or_null(self, variable: Variable, operator, location) -> Optional[PointerRef]:
        if variable.is_ptr_type():
            return variable.value
        if variable.is_numeric_type() and self._number(variable, operator, location) == 0:
            return None
        raise CTypeError(
            f"comparison between pointer and {variable.type_name()}",
            location=location,
        )

    # =========================================================================
    # Assignment
    # =========================================================================

    def eval_assignment(self, node: AssignmentExpression) -> Variable:
        """
        Evaluate '=' and the compound assignment operators.

        Compound forms need an integer-valued numeric right-hand side.
        '+=' and '-=' on a pointer move it by that many elements.
        """
        variable, indexes = self.resolve_lvalue(
            node.target, "lvalue required as left operand of assignment"
        )
        rhs = self.evaluate(node.value)

        try:
            if node.operator is AssignmentOperator.ASSIGN:
                return variable.assign(indexes, rhs)
            return self._compound_assign(variable, indexes, node.operator, rhs, node.location)
        except InterpError as e:
            raise e.attach_location(node.location)

    def _compound_assign(
        self,
        variable: Variable,
        indexes: list[int],
        operator: AssignmentOperator,
        rhs: Variable,
        location=None,
    ) -> Variable:
        if not rhs.is_numeric_type():
            raise CTypeError(
                f"invalid right operand to '{operator}'",
                expected_type="integer",
                actual_type=rhs.type_name(),
                location=location,
            )
        n = self._number(rhs, location=location)
        if isinstance(n, float):
            if not n.is_integer():
                raise CTypeError(
                    f"'{operator}' requires an integer right operand",
                    actual_type=rhs.type_name(),
                    location=location,
                )
            n = int(n)

        target_type = variable.data_type.element_type() if indexes else variable.data_type

        if target_type.is_pointer and not target_type.is_array:
            if operator is AssignmentOperator.ADD_ASSIGN:
                return variable.advance_pointer(indexes, n)
            if operator is AssignmentOperator.SUB_ASSIGN:
                return variable.advance_pointer(indexes, -n)

        if not target_type.is_numeric:
            raise CTypeError(
                f"invalid operands to '{operator}'",
                expected_type="arithmetic type",
                actual_type=str(target_type),
                location=location,
            )

        current = variable.get_value(indexes)
        if current is None:
            if self.check_uninitialized:
                raise UninitializedVariableError(variable.name, location=location)
            current = 0

        result = self.arithmetic(operator.binary, current, n, location)
        return variable.assign_constant(indexes, result.value)
