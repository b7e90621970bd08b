"""
Type Model Test Suite
=====================

Tests for BaseType, DataType and the integer width conversions used when
values are stored into variables.
"""

import pytest

from cwalk.interp.types import (
    BaseType,
    DataType,
    TYPE_INT,
    TYPE_CHAR,
    TYPE_FP,
    TYPE_WIDE,
    TYPE_ULONG,
    make_type,
    parse_base_type,
    truncate_to_type,
)


# =============================================================================
# Base Types
# =============================================================================

class TestBaseType:
    """Tests for the BaseType enumeration."""

    def test_display_names(self):
        """Each base type prints as its C spelling."""
        assert str(BaseType.UNSIGNED_INT) == "unsigned int"
        assert str(BaseType.FP) == "double"
        assert str(BaseType.GOTO_LABEL) == "goto label"

    def test_integer_classification(self):
        """Only the eight integer types are integers."""
        assert BaseType.CHAR.is_integer
        assert BaseType.UNSIGNED_LONG.is_integer
        assert not BaseType.FP.is_integer
        assert not BaseType.STRUCT.is_integer

    def test_numeric_includes_floating_point(self):
        """Floating point is numeric but not integer."""
        assert BaseType.FP.is_numeric
        assert not BaseType.VOID.is_numeric

    def test_unsigned(self):
        """Unsigned variants are flagged."""
        assert BaseType.UNSIGNED_CHAR.is_unsigned
        assert not BaseType.CHAR.is_unsigned

    def test_wide_type_is_unsigned_long(self):
        """Integer operation results use unsigned long."""
        assert TYPE_WIDE == TYPE_ULONG


class TestParseBaseType:
    """Tests for type keyword parsing."""

    @pytest.mark.parametrize("spelling,expected", [
        ("int", BaseType.INT),
        ("unsigned", BaseType.UNSIGNED_INT),
        ("unsigned char", BaseType.UNSIGNED_CHAR),
        ("Long  int", BaseType.LONG),
        ("float", BaseType.FP),
        ("double", BaseType.FP),
    ])
    def test_spellings(self, spelling, expected):
        """Keyword sequences map to base types."""
        assert parse_base_type(spelling) == expected

    def test_base_type_passthrough(self):
        """A BaseType is returned unchanged."""
        assert parse_base_type(BaseType.SHORT) is BaseType.SHORT

    def test_unknown_spelling(self):
        """Unknown spellings raise ValueError."""
        with pytest.raises(ValueError, match="unknown type specifier"):
            parse_base_type("bool")


# =============================================================================
# DataType
# =============================================================================

class TestDataType:
    """Tests for DataType construction and helpers."""

    def test_scalar(self):
        """No dimensions means scalar."""
        assert TYPE_INT.is_scalar
        assert not TYPE_INT.is_array
        assert TYPE_INT.rank == 0

    def test_dimensions_stored_as_tuple(self):
        """Dimension lists are normalised to tuples."""
        t = DataType(BaseType.INT, 0, [2, 3])
        assert t.array_dimensions == (2, 3)
        assert t.is_array
        assert t.rank == 2

    def test_invalid_dimensions(self):
        """Dimensions must be positive."""
        with pytest.raises(ValueError):
            DataType(BaseType.INT, 0, (0,))

    def test_negative_pointer_depth(self):
        """Pointer depth cannot be negative."""
        with pytest.raises(ValueError):
            DataType(BaseType.INT, -1)

    def test_element_and_inner_types(self):
        """Indexing peels dimensions outer first."""
        t = make_type("int", dimensions=[2, 3])
        assert t.inner_type() == make_type("int", dimensions=[3])
        assert t.element_type() == TYPE_INT

    def test_pointer_to_array_decays(self):
        """A pointer to an array element drops the dimensions."""
        t = make_type("char", dimensions=[4])
        assert t.pointer_to() == DataType(BaseType.CHAR, 1)

    def test_dereference(self):
        """Dereferencing removes one level of indirection."""
        assert make_type("int", 2).dereference() == make_type("int", 1)
        with pytest.raises(ValueError):
            TYPE_INT.dereference()

    def test_numeric_predicates(self):
        """Pointers, arrays and typedef references are not numeric."""
        assert TYPE_INT.is_numeric
        assert TYPE_FP.is_float
        assert not make_type("int", 1).is_numeric
        assert not make_type("int", dimensions=[2]).is_numeric
        assert not DataType(BaseType.TYPEDEF, custom_type_name="byte").is_numeric

    @pytest.mark.parametrize("data_type,text", [
        (TYPE_INT, "int"),
        (make_type("unsigned char", 1), "unsigned char *"),
        (make_type("int", 1, [4]), "int *[4]"),
        (make_type("int", 0, [2, 3]), "int[2][3]"),
        (DataType(BaseType.TYPEDEF, custom_type_name="byte"), "byte"),
        (DataType(BaseType.STRUCT, 1, custom_type_name="point"), "struct point *"),
    ])
    def test_str(self, data_type, text):
        """Types print as C declarations."""
        assert str(data_type) == text


# =============================================================================
# Width Truncation
# =============================================================================

class TestTruncation:
    """Tests for storing numbers into typed cells."""

    @pytest.mark.parametrize("value,base_type,expected", [
        (300, BaseType.CHAR, 44),
        (127, BaseType.CHAR, 127),
        (128, BaseType.CHAR, -128),
        (-1, BaseType.UNSIGNED_CHAR, 255),
        (70000, BaseType.SHORT, 4464),
        (2 ** 31, BaseType.INT, -(2 ** 31)),
        (2 ** 32, BaseType.UNSIGNED_INT, 0),
        (-1, BaseType.UNSIGNED_LONG, 2 ** 64 - 1),
        (3.9, BaseType.INT, 3),
        (-3.9, BaseType.INT, -3),
    ])
    def test_integer_wrap(self, value, base_type, expected):
        """Integers wrap to their width."""
        assert truncate_to_type(value, base_type) == expected

    def test_float_storage(self):
        """Floating point cells hold floats."""
        result = truncate_to_type(5, BaseType.FP)
        assert result == 5.0
        assert isinstance(result, float)

    def test_non_numeric_type(self):
        """Only numeric types can hold numbers."""
        with pytest.raises(ValueError):
            truncate_to_type(1, BaseType.STRUCT)

    def test_char_constant(self):
        """The char predefined type is 8-bit signed."""
        assert truncate_to_type(255, TYPE_CHAR.base_type) == -1
