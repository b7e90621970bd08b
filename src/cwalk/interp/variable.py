"""
Variable and Value Model
========================

This module implements the runtime storage of the interpreter. Every
value the engine handles, named or temporary, is a Variable.

Storage Shapes
--------------
A Variable's ``value`` holds one of:

- a number (int or float) for numeric scalars, or None while the
  variable has never been assigned;
- a list of element Variables for arrays, one per outer index, each
  carrying the remaining inner dimensions;
- a PointerRef (or None for NULL) for pointers.

Pointers
--------
A pointer never holds the Variable it points to. It stores a PointerRef:
the handle of the target's slot in the scope table plus the index path
into the target. Dereferencing resolves the handle through Scopes, so a
pointer whose target has gone out of scope is detected instead of
silently keeping the storage alive.

Lvalues
-------
Only named variables registered in a scope (and therefore holding a
handle) can be assigned, incremented or have their address taken.
Temporaries created by create_element_variable() have no name.
"""

from dataclasses import dataclass
from typing import Optional, Union

from cwalk.interp.types import DataType, BaseType, truncate_to_type
from cwalk.interp.errors import (
    CTypeError,
    CPointerError,
    InvalidLValueError,
    ArrayBoundsError,
    DimensionMismatchError,
)

Number = Union[int, float]


# =============================================================================
# Pointer Representation
# =============================================================================

@dataclass(frozen=True)
class PointerRef:
    """
    Non-owning reference from a pointer to the element it addresses.

    Attributes:
        handle: Slot handle of the target Variable (see Scopes.resolve)
        path: Index path into the target; empty for scalar targets
    """
    handle: int
    path: tuple[int, ...] = ()

    def advanced(self, n: int) -> "PointerRef":
        """
        Return the reference moved by ``n`` elements.

        Only the innermost index moves; it may leave its row, the
        position is normalised against the target's shape on dereference.
        """
        if n == 0:
            return self
        if not self.path:
            raise CPointerError(
                "pointer arithmetic on a pointer that does not point into an array"
            )
        return PointerRef(self.handle, self.path[:-1] + (self.path[-1] + n,))

    def __str__(self) -> str:
        indexes = "".join(f"[{i}]" for i in self.path)
        return f"&<{self.handle}>{indexes}"


# =============================================================================
# Variable
# =============================================================================

class Variable:
    """
    A typed storage cell: scalar, array or pointer.

    Attributes:
        data_type: The declared type
        name: Variable name, None for temporaries
        value: The storage (see module docstring)
        handle: Slot handle assigned by Scopes.add_ident(), None otherwise

    Example:
        a = Variable.declare(make_type("int", dimensions=[3]), "a")
        a.set_value(7, [1])
        a.get_value([1])   # 7
    """

    def __init__(self, data_type: DataType, name: Optional[str] = None, value=None):
        self.data_type = data_type
        self.name = name
        self.value = value
        self.handle: Optional[int] = None

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def declare(cls, data_type: DataType, name: Optional[str] = None) -> "Variable":
        """
        Create a variable with default storage for its type.

        Arrays get their full element tree with uninitialised cells;
        scalars and pointers start as None.
        """
        variable = cls(data_type, name)
        if data_type.is_array:
            inner = data_type.inner_type()
            variable.value = [
                cls.declare(inner) for _ in range(data_type.array_dimensions[0])
            ]
        return variable

    @classmethod
    def numeric(cls, base_type: BaseType, value: Number) -> "Variable":
        """Create a temporary numeric scalar."""
        return cls(DataType(base_type), None, value)

    # =========================================================================
    # Type Queries
    # =========================================================================

    @property
    def is_lvalue(self) -> bool:
        """Return True for named variables."""
        return self.name is not None

    def is_ptr_type(self) -> bool:
        return self.data_type.is_pointer and not self.data_type.is_array

    def is_array_type(self) -> bool:
        return self.data_type.is_array

    def is_numeric_type(self) -> bool:
        return self.data_type.is_numeric

    def get_numeric_value(self) -> Optional[Number]:
        """
        Return the number held by a numeric scalar.

        Returns None for arrays, pointers and custom types, and for
        numeric scalars that were never assigned. Callers tell the two
        cases apart with is_numeric_type().
        """
        if not self.is_numeric_type():
            return None
        return self.value

    def type_name(self) -> str:
        return str(self.data_type)

    def _display_name(self) -> str:
        return f"'{self.name}'" if self.name else "expression"

    # =========================================================================
    # Element Access
    # =========================================================================

    def check_access_indexes(self, indexes) -> None:
        """
        Validate an index list against the declared dimensions.

        Raises:
            DimensionMismatchError: Wrong number of indexes
            ArrayBoundsError: An index is negative or >= its dimension
        """
        dims = self.data_type.array_dimensions
        if len(dims) != len(indexes):
            if not dims:
                raise DimensionMismatchError(f"{self._display_name()} is not an array")
            if not indexes:
                raise DimensionMismatchError("must specify indexes to access array elements")
            raise DimensionMismatchError(
                "unmatched index dimension",
                hint=f"{self._display_name()} has type {self.data_type}",
            )

        for index, dim in zip(indexes, dims):
            if index < 0 or index >= dim:
                raise ArrayBoundsError(
                    f"array index {index} out of bound",
                    hint=f"{self._display_name()} has type {self.data_type}",
                )

    def _cell(self, indexes) -> "Variable":
        """Return the scalar element Variable addressed by ``indexes``."""
        self.check_access_indexes(indexes)
        cell = self
        for index in indexes:
            cell = cell.value[index]
        return cell

    def get_value(self, indexes=()):
        """Read the addressed cell's raw storage."""
        return self._cell(indexes).value

    def set_value(self, value, indexes=(), is_increment: bool = False) -> None:
        """
        Write the addressed cell.

        Args:
            value: New value (or the amount to add when is_increment)
            indexes: Element path, empty for scalars
            is_increment: Add ``value`` to the current value instead of
                          overwriting it

        Numeric cells are kept in their declared representation
        (integer wrap-around, float for FP).
        """
        cell = self._cell(indexes)
        if is_increment:
            value = (cell.value or 0) + value
        if value is not None and cell.data_type.is_numeric:
            value = truncate_to_type(value, cell.data_type.base_type)
        cell.value = value

    def create_element_variable(self, indexes=()) -> "Variable":
        """
        Return a temporary holding the addressed element.

        Scalars and pointers are snapshotted; later writes to the receiver
        do not show through. With empty indexes an array yields a
        temporary sharing the array's storage and handle, so that it can
        still decay to a pointer.
        """
        if not indexes and self.is_array_type():
            alias = Variable(self.data_type, None, self.value)
            alias.handle = self.handle
            return alias

        cell = self._cell(indexes)
        return Variable(cell.data_type, None, cell.value)

    def create_element_ref_variable(self, indexes=()) -> "Variable":
        """
        Return a temporary pointer to the addressed element (address-of).

        Raises:
            InvalidLValueError: If the receiver is a temporary
        """
        if self.handle is None:
            raise InvalidLValueError("lvalue required as unary '&' operand")
        self.check_access_indexes(indexes)
        ref = PointerRef(self.handle, tuple(indexes))
        return Variable(self.data_type.pointer_to(), None, ref)

    def element_at_flat_path(self, path) -> tuple[list[int], "Variable"]:
        """
        Normalise a pointer path against this variable's shape.

        Pointer arithmetic only moves the innermost index, so a path such
        as (0, 4) into an int[2][3] is re-read in row-major order as (1, 1).

        Returns:
            Tuple of (normalised indexes, element temporary)
        """
        dims = self.data_type.array_dimensions
        if len(path) != len(dims):
            raise DimensionMismatchError("unmatched index dimension")
        if not dims:
            return [], self.create_element_variable(())

        flat = 0
        for index, dim in zip(path, dims):
            flat = flat * dim + index
        total = 1
        for dim in dims:
            total *= dim
        if flat < 0 or flat >= total:
            raise ArrayBoundsError(
                "pointer dereference out of bound",
                hint=f"{self._display_name()} has type {self.data_type}",
            )

        indexes = []
        for dim in reversed(dims):
            indexes.insert(0, flat % dim)
            flat //= dim
        return indexes, self.create_element_variable(indexes)

    # =========================================================================
    # Initialisation
    # =========================================================================

    def init_array_values(self, flat_values: list) -> None:
        """
        Fill every element from a flat row-major list of values.

        Each entry is a Variable assigned to its cell with the usual
        assignment rules. None entries (slots the initializer did not
        reach) become zero, or NULL for pointer elements, as for a
        partially initialised C aggregate.
        """
        element = self.data_type.element_type()
        zero = None if element.is_pointer else truncate_to_type(0, element.base_type)
        for cell, value in zip(self._iter_cells(), flat_values):
            if value is None:
                cell.value = zero
            else:
                cell.assign((), value)

    def _iter_cells(self):
        """Yield scalar element Variables in row-major order."""
        if not self.is_array_type():
            yield self
            return
        for child in self.value:
            yield from child._iter_cells()

    # =========================================================================
    # Assignment
    # =========================================================================

    def assign(self, indexes, rhs: "Variable") -> "Variable":
        """
        Generic '=' assignment of ``rhs`` into the addressed element.

        Returns:
            A temporary holding the stored value (the value of the
            assignment expression)

        Raises:
            CTypeError: If the types cannot be assigned
        """
        target = self._cell(indexes) if indexes else self

        if target.is_array_type():
            raise CTypeError(
                f"assignment to expression with array type '{target.data_type}'"
            )

        if target.is_ptr_type():
            return self.assign_to_ptr(indexes, rhs)

        if rhs.is_numeric_type():
            return self.assign_constant(indexes, rhs.value)

        if rhs.is_array_type():
            raise CTypeError(f"cannot assign an array to {target.type_name()}")
        if rhs.is_ptr_type():
            raise CTypeError(f"cannot assign a pointer to {target.type_name()}")

        raise CTypeError(
            "incompatible types in assignment",
            expected_type=target.type_name(),
            actual_type=rhs.type_name(),
        )

    def assign_constant(self, indexes, n: Optional[Number]) -> "Variable":
        """Store a number, converting it to the element's representation."""
        target = self._cell(indexes) if indexes else self
        if not target.is_numeric_type():
            raise CTypeError(
                "incompatible types in assignment",
                expected_type=target.type_name(),
                actual_type="number",
            )
        self.set_value(n, indexes)
        return self.create_element_variable(indexes)

    def assign_to_ptr(self, indexes, rhs: "Variable") -> "Variable":
        """
        Store a pointer value.

        Accepts another pointer of the same type, an array whose elements
        have the pointed-to type (the pointer then addresses element 0),
        or the integer constant 0 (NULL). ``void *`` on either side is
        compatible with any pointer.
        """
        target = self._cell(indexes) if indexes else self
        target_type = target.data_type

        if rhs.is_numeric_type():
            if rhs.value == 0 and not rhs.data_type.is_float:
                self.set_value(None, indexes)
                return self.create_element_variable(indexes)
            raise CTypeError(
                "assignment makes pointer from integer without a cast",
                expected_type=target.type_name(),
                actual_type=rhs.type_name(),
            )

        if rhs.is_array_type():
            source_type = rhs.data_type.pointer_to()
        elif rhs.is_ptr_type():
            source_type = rhs.data_type
        else:
            raise CTypeError(
                "incompatible pointer type",
                expected_type=target.type_name(),
                actual_type=rhs.type_name(),
            )

        if not _pointers_compatible(target_type, source_type):
            raise CTypeError(
                "incompatible pointer type",
                expected_type=str(target_type),
                actual_type=str(source_type),
            )

        if rhs.is_array_type():
            if rhs.handle is None:
                raise InvalidLValueError("array value has no storage to point into")
            ref = PointerRef(rhs.handle, (0,) * rhs.data_type.rank)
        else:
            ref = rhs.value

        self.set_value(ref, indexes)
        return self.create_element_variable(indexes)

    def advance_pointer(self, indexes, n: int) -> "Variable":
        """
        Pointer arithmetic: move the addressed pointer by ``n`` elements.

        Raises:
            NullPointerError-like CPointerError: If the pointer is NULL
        """
        ref = self.get_value(indexes)
        if ref is None:
            raise CPointerError("arithmetic on a NULL pointer")
        self.set_value(ref.advanced(n), indexes)
        return self.create_element_variable(indexes)

    def __repr__(self) -> str:
        name = self.name if self.name is not None else "<tmp>"
        if self.is_array_type():
            shown = f"[{len(self.value)} x {self.data_type.inner_type()}]"
        else:
            shown = repr(self.value) if not isinstance(self.value, PointerRef) else str(self.value)
        return f"Variable({self.data_type} {name} = {shown})"


def _pointers_compatible(target: DataType, source: DataType) -> bool:
    """Check pointer assignment compatibility (void * matches anything)."""
    if target == source:
        return True
    if target.pointer_depth == 1 and target.base_type is BaseType.VOID and not target.is_custom:
        return source.is_pointer
    if source.pointer_depth == 1 and source.base_type is BaseType.VOID and not source.is_custom:
        return target.is_pointer
    return (
        target.base_type == source.base_type
        and target.pointer_depth == source.pointer_depth
        and target.custom_type_name == source.custom_type_name
    )
