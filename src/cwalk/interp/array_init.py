"""
Array Initializer Expansion
===========================

This module flattens a C brace initializer for a multi-dimensional array
into a row-major list of exactly product(dimensions) slots.

C lets programmers omit inner braces ("brace elision") and lets nested
braces appear for any complete sub-array. The expander reproduces that:

    int a[2][3] = {{1, 2}, 3, 4, 5, 6};
        -> [1, 2, None, 3, 4, 5]

Expansion Points
----------------
For dimensions [d0, d1, ..., dn] the expansion points are the products
of the inner dimensions: [d1*...*dn, d2*...*dn, ..., dn]. A nested
sub-list is only expanded when the current flat position is a multiple
of one of these; it then fills exactly one complete sub-array of the
matching level. A nested sub-list found anywhere else degrades to its
first scalar element.

Slots with no initializer are left as None; the caller decides what
"no value" means (zero, for C aggregates).
"""

from typing import Any, Optional


# =============================================================================
# Shape Utilities
# =============================================================================

def product(dimensions) -> int:
    """
    Return the number of elements in an array of the given shape.

    Returns 0 if any dimension is 0, and 1 for an empty shape.
    """
    result = 1
    for n in dimensions:
        if n == 0:
            return 0
        result *= n
    return result


def expansion_points(dimensions) -> list[int]:
    """
    Return the inner-dimension products for a shape, outermost first.

    Examples:
        [2, 3]     -> [3]
        [2, 3, 4]  -> [12, 4]
        [5]        -> []
    """
    points = []
    result = 1
    for dim in reversed(list(dimensions)[1:]):
        result *= dim
        points.insert(0, result)
    return points


def access_indexes_from_position(pos: int, dimensions) -> list[int]:
    """
    Convert a flat row-major position into per-dimension indexes.

    Examples:
        access_indexes_from_position(4, [2, 3])      -> [1, 1]
        access_indexes_from_position(13, [2, 3, 4])  -> [1, 0, 1]
    """
    indexes = []
    for point in expansion_points(dimensions):
        indexes.append(pos // point)
        pos %= point
    indexes.append(pos)
    return indexes


def _copy_nested(values: list) -> list:
    """Copy the list structure of an initializer, sharing the leaves."""
    return [_copy_nested(v) if isinstance(v, list) else v for v in values]


def _first_element(values: Any) -> Any:
    """Return the first scalar of a (possibly nested) list."""
    while isinstance(values, list):
        if not values:
            return None
        values = values[0]
    return values


# =============================================================================
# Expander
# =============================================================================

class ArrayInitializer:
    """
    Expands a nested initializer list against declared array dimensions.

    The initializer is copied on construction and the copy is consumed
    left to right, so the same AST can be executed again (for example
    a declaration inside a loop body).

    Example:
        init = ArrayInitializer([2, 3], [[1, 2], 3, 4, 5, 6])
        init.expand()   # [1, 2, None, 3, 4, 5]

    Attributes:
        dimensions: Declared array dimensions, outer to inner
        values: The flat result, default-filled with None
    """

    def __init__(self, dimensions, init_values: list):
        self.dimensions = list(dimensions)
        self._init_values = _copy_nested(init_values)
        self.values: list[Optional[Any]] = [None] * product(self.dimensions)

    def expand(self) -> list:
        """Run the expansion and return the flat list of slots."""
        self._expand(0, self.dimensions, self._init_values)
        return self.values

    def _expand(self, start: int, dimensions: list[int], init_values: list) -> None:
        """
        Fill the sub-range starting at ``start`` that spans ``dimensions``.

        Consumes elements from ``init_values`` until either the sub-range
        is full or the input runs out.
        """
        points = expansion_points(dimensions)
        span = product(dimensions)
        pos = 0

        while pos < span and init_values:
            elem = init_values.pop(0)

            if isinstance(elem, list):
                level = self._expansion_level(pos, points)
                if level is not None:
                    sub_dimensions = dimensions[level + 1:]
                    self._expand(start + pos, sub_dimensions, elem)
                    pos += product(sub_dimensions)
                else:
                    # Off a sub-array boundary: brace elision keeps the head
                    self.values[start + pos] = _first_element(elem)
                    pos += 1
            else:
                self.values[start + pos] = elem
                pos += 1

    @staticmethod
    def _expansion_level(pos: int, points: list[int]) -> Optional[int]:
        """Return the outermost level whose sub-array starts at pos."""
        for level, point in enumerate(points):
            if pos % point == 0:
                return level
        return None


def expand_initializer(dimensions, init_values: list) -> list:
    """
    Convenience function: flatten ``init_values`` for ``dimensions``.

    Example:
        >>> expand_initializer([2, 3], [[1, 2], 3, 4, 5, 6])
        [1, 2, None, 3, 4, 5]
    """
    return ArrayInitializer(dimensions, init_values).expand()
