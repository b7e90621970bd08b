"""
Statement Executor Test Suite
=============================

End-to-end tests running small programs through run_program():
declarations and initializers, scoping, loops, switch, control-flow
signals, pointers, typedefs and error reporting.
"""

import pytest

from cwalk.errors import SourceLocation
from cwalk.interp import Interpreter, InterpreterOptions, run_program
from cwalk.interp.ast import (
    AssignmentExpression,
    AssignmentOperator,
    BinaryOperator,
    BlockStatement,
    BreakStatement,
    CaseClause,
    Constant,
    ContinueStatement,
    Declaration,
    DoWhileStatement,
    Expression,
    ExpressionStatement,
    ForStatement,
    Identifier,
    IfStatement,
    InitializerList,
    Operator,
    ReturnStatement,
    SwitchStatement,
    TypedefDeclaration,
    UnaryExpression,
    UnaryOperator,
    WhileStatement,
)
from cwalk.interp.errors import (
    ArrayBoundsError,
    CTypeError,
    DanglingPointerError,
    DimensionMismatchError,
    DuplicateDeclarationError,
    InvalidBreakContinueError,
    UndeclaredIdentifierError,
    UninitializedVariableError,
    UnsupportedFeatureError,
)
from cwalk.interp.types import (
    BaseType,
    DataType,
    TYPE_CHAR,
    TYPE_INT,
    TYPE_INT_PTR,
    make_type,
)


# =============================================================================
# Program Builders
# =============================================================================

_SPELLINGS = {op.value for op in BinaryOperator}


def element(item):
    if isinstance(item, (int, float)):
        return Constant(item)
    if isinstance(item, str):
        if item in _SPELLINGS:
            return Operator(BinaryOperator(item))
        return Identifier(item)
    return item


def E(*items) -> Expression:
    return Expression([element(item) for item in items])


def at(name, *indexes) -> Identifier:
    return Identifier(name, [E(index) for index in indexes])


def unary(op, operand) -> UnaryExpression:
    return UnaryExpression(UnaryOperator(op), element(operand))


def assign(target, *value, op="=") -> AssignmentExpression:
    if isinstance(target, str):
        target = Identifier(target)
    return AssignmentExpression(AssignmentOperator(op), target, E(*value))


def braces(*values) -> InitializerList:
    return InitializerList([
        braces(*value) if isinstance(value, list) else E(value) for value in values
    ])


def decl(name, *init, data_type=TYPE_INT, dims=()) -> Declaration:
    if len(init) == 1 and isinstance(init[0], InitializerList):
        initializer = init[0]
    elif init:
        initializer = E(*init)
    else:
        initializer = None
    return Declaration(data_type, name, [E(d) for d in dims], initializer)


def stmt(*items) -> ExpressionStatement:
    return ExpressionStatement(E(*items))


def set_(target, *value, op="=") -> ExpressionStatement:
    return ExpressionStatement(E(assign(target, *value, op=op)))


def ret(*items) -> ReturnStatement:
    return ReturnStatement(E(*items) if items else None)


def block(*statements) -> BlockStatement:
    return BlockStatement(list(statements))


def case(value, *statements) -> CaseClause:
    return CaseClause(E(value), list(statements))


def default(*statements) -> CaseClause:
    return CaseClause(None, list(statements), is_default=True)


def run(*statements, **options):
    return run_program(list(statements), InterpreterOptions(**options))


# =============================================================================
# Program Results
# =============================================================================

class TestRunResult:
    """Tests for how a run reports its outcome."""

    def test_return_value(self):
        """A top-level return ends the program with its value."""
        result = run(ret(2, "+", 3, "*", 4))
        assert result.value == 14
        assert not result.completed

    def test_no_return(self):
        """Falling off the end completes without a value."""
        result = run(decl("x", 1))
        assert result.completed
        assert result.value is None
        assert result.return_value is None

    def test_bare_return(self):
        """'return;' stops without a value."""
        result = run(ret(), ret(5))
        assert not result.completed
        assert result.value is None

    def test_statements_after_return_skipped(self):
        """Nothing runs after a return."""
        result = run(decl("x", 1), ret("x"), set_("x", 2))
        assert result.value == 1
        assert result.statements_executed == 2

    def test_statements_counted(self):
        """Nested statements are counted."""
        result = run(decl("x", 0), block(set_("x", 1), set_("x", 2)), ret("x"))
        assert result.statements_executed == 5

    def test_fresh_globals_per_run(self):
        """Each run starts from an empty global scope."""
        interpreter = Interpreter()
        program = [decl("x", 3), ret("x")]
        assert interpreter.run(program).value == 3
        assert interpreter.run(program).value == 3


# =============================================================================
# Declarations and Scoping
# =============================================================================

class TestDeclarations:
    """Tests for variable declarations."""

    def test_initializer_truncates(self):
        """Initial values are stored at the declared width."""
        assert run(decl("c", 300, data_type=TYPE_CHAR), ret("c")).value == 44

    def test_duplicate(self):
        """Redeclaring a name in the same scope fails."""
        with pytest.raises(DuplicateDeclarationError, match="redeclaration of 'x'"):
            run(decl("x", 1), decl("x", 2))

    def test_shadowing(self):
        """Inner declarations hide outer ones without touching them."""
        result = run(
            decl("x", 5),
            decl("y", 0),
            block(decl("x", 7), set_("y", "x")),
            ret("x", "+", "y"),
        )
        assert result.value == 12

    def test_initializer_sees_outer_binding(self):
        """A declaration's initializer runs before the name is bound."""
        result = run(decl("x", 1), block(decl("x", "x", "+", 1), ret("x")))
        assert result.value == 2

    def test_block_scope_ends(self):
        """Block locals are gone after the block."""
        with pytest.raises(UndeclaredIdentifierError):
            run(block(decl("t", 1)), ret("t"))

    def test_uninitialized_read(self):
        """Reading a declared but unassigned variable fails."""
        with pytest.raises(UninitializedVariableError):
            run(decl("x"), ret("x", "+", 1))

    def test_uninitialized_allowed(self):
        """The check can be switched off."""
        result = run(decl("x"), ret("x", "+", 1), check_uninitialized=False)
        assert result.value == 1

    def test_void_variable(self):
        """Variables cannot be void."""
        with pytest.raises(CTypeError, match="declared void"):
            run(decl("v", data_type=make_type("void")))

    def test_struct_variable(self):
        """Struct variables are outside the evaluable subset."""
        point = DataType(BaseType.STRUCT, custom_type_name="point")
        with pytest.raises(UnsupportedFeatureError):
            run(decl("p", data_type=point))

    def test_unknown_type_name(self):
        """Typedef names must be declared first."""
        byte = DataType(BaseType.TYPEDEF, custom_type_name="byte")
        with pytest.raises(CTypeError, match="unknown type name 'byte'"):
            run(decl("b", data_type=byte))


class TestArrays:
    """Tests for array declarations and initializers."""

    def test_nested_initializer(self):
        """int a[2][3] = {{1, 2}, 3, 4, 5, 6};"""
        program = [decl("a", braces([1, 2], 3, 4, 5, 6), dims=(2, 3))]
        assert run(*program, ret(at("a", 0, 1))).value == 2
        assert run(*program, ret(at("a", 0, 2))).value == 0
        assert run(*program, ret(at("a", 1, 0))).value == 3
        assert run(*program, ret(at("a", 1, 2))).value == 5

    def test_partial_initializer_zero_fills(self):
        """Unreached elements are zero."""
        result = run(decl("a", braces(1), dims=(3,)), ret(at("a", 2)))
        assert result.value == 0

    def test_uninitialised_array_element(self):
        """Arrays without an initializer have unassigned elements."""
        with pytest.raises(UninitializedVariableError):
            run(decl("a", dims=(2,)), ret(at("a", 0)))

    def test_dimension_expression(self):
        """Dimensions are evaluated at declaration time."""
        result = run(
            decl("n", 2),
            Declaration(TYPE_INT, "a", [E("n", "+", 1)]),
            set_(at("a", 2), 9),
            ret(at("a", 2)),
        )
        assert result.value == 9

    def test_non_positive_dimension(self):
        """Dimensions must be positive."""
        with pytest.raises(CTypeError, match="not positive"):
            run(decl("a", dims=(0,)))

    def test_braces_on_scalar(self):
        """Brace initializers need an array."""
        with pytest.raises(CTypeError, match="is NOT of array type"):
            run(decl("x", braces(1)))

    def test_scalar_initializer_on_array(self):
        """Arrays need a brace initializer."""
        with pytest.raises(CTypeError, match="invalid initializer"):
            run(decl("a", 1, dims=(2,)))

    def test_out_of_bound(self):
        """Indexes past the dimension fail."""
        with pytest.raises(ArrayBoundsError):
            run(decl("a", braces(1, 2), dims=(2,)), ret(at("a", 2)))

    def test_wrong_rank(self):
        """Index counts must match the array rank."""
        with pytest.raises(DimensionMismatchError):
            run(decl("a", braces(1, 2), dims=(2, 1)), ret(at("a", 1)))


class TestTypedefs:
    """Tests for type aliases."""

    def test_alias_width(self):
        """typedef unsigned char byte; byte b = 300; -> 44"""
        byte = DataType(BaseType.TYPEDEF, custom_type_name="byte")
        result = run(
            TypedefDeclaration("byte", make_type("unsigned char")),
            decl("b", 300, data_type=byte),
            ret("b"),
        )
        assert result.value == 44

    def test_pointer_alias(self):
        """A pointer typedef declares pointers."""
        intp = DataType(BaseType.TYPEDEF, custom_type_name="intp")
        result = run(
            TypedefDeclaration("intp", TYPE_INT_PTR),
            decl("x", 8),
            decl("p", unary("&", "x"), data_type=intp),
            ret(unary("*", "p")),
        )
        assert result.value == 8

    def test_array_alias(self):
        """typedef int row[3]; row m[2]; gives int[2][3]."""
        row = DataType(BaseType.TYPEDEF, custom_type_name="row")
        result = run(
            TypedefDeclaration("row", make_type("int", dimensions=[3])),
            decl("m", braces(1, 2, 3, 4, 5, 6), data_type=row, dims=(2,)),
            ret(at("m", 1, 2)),
        )
        assert result.value == 6

    def test_alias_scoped(self):
        """Typedefs in a block are not visible after it."""
        byte = DataType(BaseType.TYPEDEF, custom_type_name="byte")
        with pytest.raises(CTypeError):
            run(
                block(TypedefDeclaration("byte", make_type("unsigned char"))),
                decl("b", data_type=byte),
            )


# =============================================================================
# Control Flow
# =============================================================================

class TestConditionals:
    """Tests for if/else."""

    def test_if_else(self):
        """The condition picks the branch."""
        def program(n):
            return [
                decl("r", 0),
                IfStatement(E(n, ">", 2), set_("r", 1), set_("r", 2)),
                ret("r"),
            ]

        assert run(*program(5)).value == 1
        assert run(*program(1)).value == 2

    def test_if_without_else(self):
        """A false condition without else does nothing."""
        result = run(decl("r", 0), IfStatement(E(0), set_("r", 1)), ret("r"))
        assert result.value == 0


class TestLoops:
    """Tests for while, do-while and for."""

    def test_while(self):
        """Sum 0..4 with a while loop."""
        result = run(
            decl("i", 0),
            decl("s", 0),
            WhileStatement(E("i", "<", 5), block(
                set_("s", "i", op="+="),
                stmt(unary("x++", "i")),
            )),
            ret("s"),
        )
        assert result.value == 10

    def test_do_while_runs_once(self):
        """The body runs before the first test."""
        result = run(
            decl("n", 0),
            DoWhileStatement(block(stmt(unary("x++", "n"))), E(0)),
            ret("n"),
        )
        assert result.value == 1

    def test_for_with_declaration(self):
        """for (int i = 0; i < 4; i++) s += i;"""
        result = run(
            decl("s", 0),
            ForStatement(
                decl("i", 0),
                E("i", "<", 4),
                E(unary("x++", "i")),
                set_("s", "i", op="+="),
            ),
            ret("s"),
        )
        assert result.value == 6

    def test_for_variable_scoped(self):
        """The loop variable is gone after the loop."""
        with pytest.raises(UndeclaredIdentifierError):
            run(
                ForStatement(decl("i", 0), E("i", "<", 1), E(unary("x++", "i")), block()),
                ret("i"),
            )

    def test_for_without_condition(self):
        """for (;;) loops until break."""
        result = run(
            decl("i", 0),
            ForStatement(None, None, None, block(
                stmt(unary("x++", "i")),
                IfStatement(E("i", "==", 3), BreakStatement()),
            )),
            ret("i"),
        )
        assert result.value == 3

    def test_for_expression_initializer(self):
        """for (i = 10; i > 7; i--) counts down."""
        result = run(
            decl("i"),
            decl("n", 0),
            ForStatement(
                E(assign("i", 10)),
                E("i", ">", 7),
                E(unary("x--", "i")),
                stmt(unary("x++", "n")),
            ),
            ret("n", "*", 100, "+", "i"),
        )
        assert result.value == 307

    def test_continue_runs_update(self):
        """'continue' in a for loop still runs the step."""
        result = run(
            decl("s", 0),
            ForStatement(decl("i", 0), E("i", "<", 5), E(unary("x++", "i")), block(
                IfStatement(E("i", "%", 2), ContinueStatement()),
                set_("s", "i", op="+="),
            )),
            ret("s"),
        )
        assert result.value == 6

    def test_break_leaves_innermost_loop(self):
        """'break' ends only the loop that contains it."""
        inner = WhileStatement(E(1), block(stmt(unary("x++", "n")), BreakStatement()))
        result = run(
            decl("n", 0),
            ForStatement(decl("i", 0), E("i", "<", 3), E(unary("x++", "i")), inner),
            ret("n"),
        )
        assert result.value == 3

    def test_return_from_nested_if(self):
        """A return deep inside a loop ends the program."""
        result = run(
            decl("i", 0),
            WhileStatement(E(1), block(
                stmt(unary("x++", "i")),
                IfStatement(E("i", "==", 2), block(ret("i"))),
            )),
            ret(99),
        )
        assert result.value == 2

    def test_return_from_doubly_nested_if_in_for(self):
        """A return two ifs deep in a for skips its siblings and the loop's rest."""
        result = run(
            decl("s", 0),
            ForStatement(decl("i", 0), E("i", "<", 10), E(unary("x++", "i")), block(
                IfStatement(E("i", ">", 2), block(
                    IfStatement(E("i", "==", 4), block(
                        ret("s", "*", 100, "+", "i"),
                        set_("s", 1000, op="+="),
                    )),
                    set_("s", 1, op="+="),
                )),
                set_("s", 10, op="+="),
            )),
            ret(99),
        )
        assert result.value == 4104


class TestSwitch:
    """Tests for switch statements."""

    def switch(self, value, *clauses):
        return [
            decl("r", 0),
            SwitchStatement(E(value), list(clauses)),
            ret("r"),
        ]

    def test_fallthrough(self):
        """Execution falls through until a break."""
        program = self.switch(
            2,
            case(1, set_("r", 1, op="+=")),
            case(2, set_("r", 2, op="+=")),
            case(3, set_("r", 3, op="+="), BreakStatement()),
            case(4, set_("r", 4, op="+=")),
        )
        assert run(*program).value == 5

    def test_default(self):
        """Unmatched values start at default."""
        program = self.switch(
            9,
            case(1, set_("r", 1), BreakStatement()),
            default(set_("r", 7)),
        )
        assert run(*program).value == 7

    def test_default_falls_through(self):
        """A default in the middle falls into the following clauses."""
        program = self.switch(
            9,
            case(1, set_("r", 1, op="+=")),
            default(set_("r", 2, op="+=")),
            case(3, set_("r", 3, op="+=")),
        )
        assert run(*program).value == 5

    def test_no_match(self):
        """Without a match or default nothing runs."""
        assert run(*self.switch(5, case(1, set_("r", 1)))).value == 0

    def test_shared_labels(self):
        """case 1: case 2: share a body."""
        program = self.switch(
            1,
            case(1),
            case(2, set_("r", 20), BreakStatement()),
            default(set_("r", 30)),
        )
        assert run(*program).value == 20

    def test_case_values_evaluated_lazily(self):
        """Case values after the match are not evaluated."""
        result = run(
            decl("x", 0),
            SwitchStatement(E(1), [
                case(1, BreakStatement()),
                CaseClause(E(assign("x", 5)), []),
            ]),
            ret("x"),
        )
        assert result.value == 0

    def test_continue_in_switch_in_loop(self):
        """'continue' inside a switch continues the enclosing loop."""
        switch = SwitchStatement(E("i"), [
            case(1, ContinueStatement()),
            default(set_("s", 10, op="+=")),
        ])
        result = run(
            decl("s", 0),
            ForStatement(decl("i", 0), E("i", "<", 4), E(unary("x++", "i")), block(
                switch,
                set_("s", 1, op="+="),
            )),
            ret("s"),
        )
        assert result.value == 33

    def test_return_in_switch(self):
        """A return inside a switch ends the program."""
        program = self.switch(1, case(1, ret(42)))
        assert run(*program).value == 42

    def test_non_integral_value_does_not_match(self):
        """switch (2.5) compares with ==, so case 2 does not match."""
        program = self.switch(
            2.5,
            case(2, set_("r", 1), BreakStatement()),
        )
        assert run(*program).value == 0

    def test_non_integral_value_uses_default(self):
        """An unmatched double controlling value starts at default."""
        program = self.switch(
            2.5,
            case(2, set_("r", 1), BreakStatement()),
            default(set_("r", 7)),
        )
        assert run(*program).value == 7

    def test_double_value_matches_equal_case(self):
        """switch (2.0) matches case 2."""
        program = self.switch(
            2.0,
            case(1, set_("r", 1), BreakStatement()),
            case(2, set_("r", 2), BreakStatement()),
        )
        assert run(*program).value == 2


class TestBreakContinue:
    """Tests for break/continue placement."""

    def test_break_outside_loop(self):
        """'break' needs a loop or switch."""
        with pytest.raises(InvalidBreakContinueError, match="break statement not within"):
            run(BreakStatement())

    def test_continue_outside_loop(self):
        """'continue' needs a loop."""
        with pytest.raises(InvalidBreakContinueError):
            run(block(ContinueStatement()))

    def test_continue_in_switch_only(self):
        """A switch alone does not allow 'continue'."""
        with pytest.raises(InvalidBreakContinueError, match="continue"):
            run(SwitchStatement(E(1), [case(1, ContinueStatement())]))

    def test_scopes_unwound_after_error(self):
        """Scopes are popped when an error escapes a loop."""
        interpreter = Interpreter()
        program = [
            WhileStatement(E(1), block(block(ret("missing")))),
        ]
        with pytest.raises(UndeclaredIdentifierError):
            interpreter.run(program)
        assert interpreter.scopes.depth == 0


# =============================================================================
# Pointers and Widths
# =============================================================================

class TestPrograms:
    """Small whole programs."""

    def test_pointer_walk(self):
        """Writes through a moving pointer land in the array."""
        result = run(
            decl("a", braces(1, 2, 3), dims=(3,)),
            decl("p", "a", data_type=TYPE_INT_PTR),
            set_(unary("*", "p"), 10),
            stmt(unary("x++", "p")),
            set_(unary("*", "p"), 4),
            set_("p", "p", "+", 1),
            set_(unary("*", "p"), 23),
            ret(at("a", 0), "*", 1000, "+", at("a", 1), "*", 100, "+", at("a", 2)),
        )
        assert result.value == 10423

    def test_dangling_pointer(self):
        """A pointer to a block local dangles after the block."""
        with pytest.raises(DanglingPointerError):
            run(
                decl("p", data_type=TYPE_INT_PTR),
                block(decl("x", 1), set_("p", unary("&", "x"))),
                ret(unary("*", "p")),
            )

    def test_char_wraps(self):
        """char c = 127; c++; -> -128"""
        result = run(
            decl("c", 127, data_type=TYPE_CHAR),
            stmt(unary("x++", "c")),
            ret("c"),
        )
        assert result.value == -128

    def test_unsupported_statement(self):
        """Statement kinds the executor does not know are rejected."""
        with pytest.raises(UnsupportedFeatureError):
            run(case(1))


class TestErrorLocations:
    """Tests for location information in error messages."""

    def test_statement_location_attached(self):
        """Errors without a location get the statement's location."""
        location = SourceLocation("prog.c", 3, 5)
        with pytest.raises(UninitializedVariableError) as info:
            run(decl("x"), ReturnStatement(E("x"), location=location))
        assert info.value.location == location
        assert str(info.value).startswith("prog.c:3:5: error:")

    def test_innermost_location_wins(self):
        """A location set closer to the error is kept."""
        inner = SourceLocation("prog.c", 4, 9)
        outer = SourceLocation("prog.c", 2, 1)
        failing = ReturnStatement(E("x"), location=inner)
        with pytest.raises(UninitializedVariableError) as info:
            run(decl("x"), BlockStatement([failing], location=outer))
        assert info.value.location == inner
