"""
cwalk Type System
=================

This module implements the type model of the execution engine. It
defines the base types the interpreter knows about and the DataType
record that combines a base type with pointer depth and array shape.

Supported Types
---------------
- char, short, int, long and their unsigned variants
- floating point (stored as a Python float)
- Pointers to any type (int *, char **, ...)
- Multi-dimensional arrays of any of the above

The remaining base types (function, macro, struct, union, enum, goto
label, typedef, identifier) exist so the parser can describe every
declaration it sees; the engine rejects the ones it cannot evaluate.

Type Representation
-------------------
Types are represented as DataType objects with the following attributes:
- base_type: The fundamental type (INT, CHAR, FP, ...)
- pointer_depth: Number of indirection levels (**)
- array_dimensions: Declared dimensions, outer to inner (empty = scalar)
- custom_type_name: Name for struct/union/typedef references

Pointer depth and array dimensions are independent axes: "int *a[3]"
is DataType(INT, 1, (3,)), an array of three int pointers.

Integer Widths
--------------
| Type           | Bits | Assignment wraps to          |
|----------------|------|------------------------------|
| char           | 8    | -128 .. 127                  |
| short          | 16   | -32768 .. 32767              |
| int            | 32   | -2**31 .. 2**31-1            |
| long           | 64   | -2**63 .. 2**63-1            |
| unsigned X     | same | 0 .. 2**bits-1               |
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


# =============================================================================
# Base Type Enumeration
# =============================================================================

class BaseType(Enum):
    """
    Fundamental C data types.

    The value of each member is its canonical display name.
    """
    VOID = "void"
    INT = "int"
    SHORT = "short"
    CHAR = "char"
    LONG = "long"
    UNSIGNED_INT = "unsigned int"
    UNSIGNED_SHORT = "unsigned short"
    UNSIGNED_CHAR = "unsigned char"
    UNSIGNED_LONG = "unsigned long"
    FP = "double"
    FUNCTION = "function"
    MACRO = "macro"
    POINTER = "pointer"
    ARRAY = "array"
    STRUCT = "struct"
    UNION = "union"
    ENUM = "enum"
    GOTO_LABEL = "goto label"
    TYPEDEF = "typedef"
    IDENTIFIER = "identifier"

    def __str__(self) -> str:
        """Return the C type name."""
        return self.value

    @property
    def is_integer(self) -> bool:
        """Return True for the eight integer types."""
        return self in INTEGER_WIDTHS

    @property
    def is_numeric(self) -> bool:
        """Return True for integer and floating point types."""
        return self.is_integer or self is BaseType.FP

    @property
    def is_unsigned(self) -> bool:
        """Return True for the unsigned integer types."""
        return self in (
            BaseType.UNSIGNED_INT,
            BaseType.UNSIGNED_SHORT,
            BaseType.UNSIGNED_CHAR,
            BaseType.UNSIGNED_LONG,
        )


INTEGER_WIDTHS = {
    BaseType.CHAR: 8,
    BaseType.UNSIGNED_CHAR: 8,
    BaseType.SHORT: 16,
    BaseType.UNSIGNED_SHORT: 16,
    BaseType.INT: 32,
    BaseType.UNSIGNED_INT: 32,
    BaseType.LONG: 64,
    BaseType.UNSIGNED_LONG: 64,
}

# Keyword spellings accepted by parse_base_type()
_BASE_TYPE_NAMES = {
    "void": BaseType.VOID,
    "int": BaseType.INT,
    "signed": BaseType.INT,
    "signed int": BaseType.INT,
    "short": BaseType.SHORT,
    "short int": BaseType.SHORT,
    "char": BaseType.CHAR,
    "signed char": BaseType.CHAR,
    "long": BaseType.LONG,
    "long int": BaseType.LONG,
    "unsigned": BaseType.UNSIGNED_INT,
    "unsigned int": BaseType.UNSIGNED_INT,
    "unsigned short": BaseType.UNSIGNED_SHORT,
    "unsigned char": BaseType.UNSIGNED_CHAR,
    "unsigned long": BaseType.UNSIGNED_LONG,
    "float": BaseType.FP,
    "double": BaseType.FP,
    "struct": BaseType.STRUCT,
    "union": BaseType.UNION,
    "enum": BaseType.ENUM,
    "typedef": BaseType.TYPEDEF,
}


# =============================================================================
# Type Representation
# =============================================================================

@dataclass(frozen=True)
class DataType:
    """
    Represents the declared type of a variable.

    Attributes:
        base_type: The fundamental type
        pointer_depth: Number of indirection levels (e.g., ** = 2)
        array_dimensions: Array shape, outer to inner (empty tuple = scalar)
        custom_type_name: For struct/union/typedef types, the referenced name

    Examples:
        - int               : DataType(INT)
        - unsigned char *   : DataType(UNSIGNED_CHAR, 1)
        - int a[2][3]       : DataType(INT, 0, (2, 3))
        - int *p[4]         : DataType(INT, 1, (4,))
        - myint x           : DataType(TYPEDEF, custom_type_name="myint")
    """
    base_type: BaseType
    pointer_depth: int = 0
    array_dimensions: tuple[int, ...] = ()
    custom_type_name: Optional[str] = None

    def __post_init__(self):
        """Validate type consistency."""
        if self.pointer_depth < 0:
            raise ValueError("pointer depth cannot be negative")
        # Accept lists from callers but always store a tuple
        if not isinstance(self.array_dimensions, tuple):
            object.__setattr__(self, "array_dimensions", tuple(self.array_dimensions))
        for dim in self.array_dimensions:
            if dim <= 0:
                raise ValueError(f"array dimension must be positive, got {dim}")

    @property
    def is_array(self) -> bool:
        """Return True if this type has array dimensions."""
        return len(self.array_dimensions) > 0

    @property
    def is_scalar(self) -> bool:
        """Return True if this type has no array dimensions."""
        return not self.is_array

    @property
    def is_pointer(self) -> bool:
        """Return True if a (non-array) value of this type is a pointer."""
        return self.pointer_depth > 0

    @property
    def is_custom(self) -> bool:
        """Return True for struct/union/typedef references."""
        return self.custom_type_name is not None

    @property
    def is_numeric(self) -> bool:
        """
        Return True if a value of this type is a plain number.

        Arrays, pointers and custom types are not numeric.
        """
        return (
            not self.is_array
            and not self.is_pointer
            and not self.is_custom
            and self.base_type.is_numeric
        )

    @property
    def is_float(self) -> bool:
        """Return True if this is a floating point scalar."""
        return self.is_numeric and self.base_type is BaseType.FP

    @property
    def rank(self) -> int:
        """Return the number of array dimensions."""
        return len(self.array_dimensions)

    def element_type(self) -> "DataType":
        """
        Return the type of one fully-indexed element.

        For int a[2][3], returns int. For non-arrays, returns self.
        """
        if not self.is_array:
            return self
        return DataType(self.base_type, self.pointer_depth, (), self.custom_type_name)

    def inner_type(self) -> "DataType":
        """
        Return the type after indexing the outermost dimension.

        For int a[2][3], returns int[3].
        """
        return DataType(
            self.base_type,
            self.pointer_depth,
            self.array_dimensions[1:],
            self.custom_type_name,
        )

    def pointer_to(self) -> "DataType":
        """
        Return a pointer type to one element of this type.

        For int, returns int*. For int*, returns int**. Arrays yield a
        pointer to their element type (array decay).
        """
        return DataType(self.base_type, self.pointer_depth + 1, (), self.custom_type_name)

    def dereference(self) -> "DataType":
        """
        Return the type when this pointer is dereferenced.

        Raises:
            ValueError: If this is not a pointer type
        """
        if not self.is_pointer or self.is_array:
            raise ValueError(f"cannot dereference non-pointer type {self}")
        return DataType(self.base_type, self.pointer_depth - 1, (), self.custom_type_name)

    def with_dimensions(self, dimensions) -> "DataType":
        """Return a copy of this type with the given array dimensions."""
        return DataType(self.base_type, self.pointer_depth, tuple(dimensions), self.custom_type_name)

    def __str__(self) -> str:
        """Return the C type string representation."""
        if self.custom_type_name is not None:
            if self.base_type in (BaseType.STRUCT, BaseType.UNION, BaseType.ENUM):
                result = f"{self.base_type} {self.custom_type_name}"
            else:
                result = self.custom_type_name
        else:
            result = str(self.base_type)

        if self.pointer_depth:
            result += " " + "*" * self.pointer_depth

        for dim in self.array_dimensions:
            result += f"[{dim}]"

        return result


# =============================================================================
# Predefined Types (for convenience)
# =============================================================================

TYPE_VOID = DataType(BaseType.VOID)
TYPE_CHAR = DataType(BaseType.CHAR)
TYPE_UCHAR = DataType(BaseType.UNSIGNED_CHAR)
TYPE_SHORT = DataType(BaseType.SHORT)
TYPE_INT = DataType(BaseType.INT)
TYPE_UINT = DataType(BaseType.UNSIGNED_INT)
TYPE_LONG = DataType(BaseType.LONG)
TYPE_ULONG = DataType(BaseType.UNSIGNED_LONG)
TYPE_FP = DataType(BaseType.FP)

# Result type of every integer binary operation
TYPE_WIDE = TYPE_ULONG

TYPE_INT_PTR = DataType(BaseType.INT, 1)


# =============================================================================
# Type Utilities
# =============================================================================

def parse_base_type(name: Union[str, BaseType]) -> BaseType:
    """
    Parse a type keyword sequence into a BaseType.

    Args:
        name: Keywords like "unsigned char", "int", "double", or a BaseType

    Returns:
        The matching BaseType

    Raises:
        ValueError: If the spelling is not recognised

    Examples:
        "int"            -> INT
        "unsigned"       -> UNSIGNED_INT
        "unsigned char"  -> UNSIGNED_CHAR
        "float"          -> FP
    """
    if isinstance(name, BaseType):
        return name
    key = " ".join(name.lower().split())
    try:
        return _BASE_TYPE_NAMES[key]
    except KeyError:
        raise ValueError(f"unknown type specifier: {name}") from None


def make_type(
    base: Union[str, BaseType],
    pointer_depth: int = 0,
    dimensions=(),
    custom_type_name: Optional[str] = None,
) -> DataType:
    """
    Create a DataType from components.

    Examples:
        make_type("int")                 -> int
        make_type("char", 1)             -> char *
        make_type(BaseType.INT, 0, [2])  -> int[2]
    """
    return DataType(parse_base_type(base), pointer_depth, tuple(dimensions), custom_type_name)


def truncate_to_type(value: Union[int, float], base_type: BaseType) -> Union[int, float]:
    """
    Convert a number to the representation stored in a variable.

    Integer types wrap to their width (two's complement for signed
    types); floating point values are converted to float. Floats stored
    into integer variables are truncated toward zero first.

    Examples:
        truncate_to_type(300, CHAR)           -> 44
        truncate_to_type(-1, UNSIGNED_CHAR)   -> 255
        truncate_to_type(3.9, INT)            -> 3
    """
    if base_type is BaseType.FP:
        return float(value)

    width = INTEGER_WIDTHS.get(base_type)
    if width is None:
        raise ValueError(f"'{base_type}' is not a numeric type")

    n = int(value)
    mask = (1 << width) - 1
    n &= mask
    if not base_type.is_unsigned and n >> (width - 1):
        n -= 1 << width
    return n
