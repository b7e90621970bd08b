"""
Array Initializer Test Suite
============================

Tests for flattening nested brace initializers against declared array
dimensions, including brace elision and multi-level expansion points.
"""

import pytest

from cwalk.interp.array_init import (
    ArrayInitializer,
    access_indexes_from_position,
    expand_initializer,
    expansion_points,
    product,
)


N = None


class TestShapeUtilities:
    """Tests for the shape helper functions."""

    def test_product(self):
        """Product of dimensions, 0 if any is 0."""
        assert product([2, 3, 4]) == 24
        assert product([2, 0]) == 0
        assert product([]) == 1

    @pytest.mark.parametrize("dims,points", [
        ([5], []),
        ([2, 3], [3]),
        ([2, 3, 4], [12, 4]),
    ])
    def test_expansion_points(self, dims, points):
        """Expansion points are inner-dimension products, outer first."""
        assert expansion_points(dims) == points

    @pytest.mark.parametrize("pos,dims,indexes", [
        (0, [3], [0]),
        (4, [2, 3], [1, 1]),
        (13, [2, 3, 4], [1, 0, 1]),
        (23, [2, 3, 4], [1, 2, 3]),
    ])
    def test_access_indexes(self, pos, dims, indexes):
        """Flat positions convert to row-major indexes."""
        assert access_indexes_from_position(pos, dims) == indexes


class TestExpansion:
    """Tests for ArrayInitializer.expand()."""

    def test_flat_initializer(self):
        """A flat list fills slots in order."""
        assert expand_initializer([2, 2], [1, 2, 3, 4]) == [1, 2, 3, 4]

    def test_partial_initializer(self):
        """Unreached slots stay None."""
        assert expand_initializer([4], [1, 2]) == [1, 2, N, N]

    def test_surplus_values_ignored(self):
        """Expansion stops once every slot is filled."""
        assert expand_initializer([3], [1, 2, 3, 4, 5]) == [1, 2, 3]

    def test_nested_row(self):
        """A nested list at a row boundary fills exactly one row."""
        result = expand_initializer([2, 3], [[1, 2], 3, 4, 5, 6])
        assert result == [1, 2, N, 3, 4, 5]

    def test_all_rows_braced(self):
        """Fully braced rows each start on a boundary."""
        result = expand_initializer([2, 3], [[1], [4, 5]])
        assert result == [1, N, N, 4, 5, N]

    def test_brace_elision_off_boundary(self):
        """A nested list off a boundary contributes its first element."""
        result = expand_initializer([2, 3], [1, [2, 3], 4])
        assert result == [1, 2, 4, N, N, N]

    def test_three_dimensions(self):
        """Nested lists recurse through several expansion levels."""
        result = expand_initializer([2, 3, 4], [[[1, 2], 10, 20], 3, 4, 5, 6, 7, 8, 9])
        assert len(result) == 24
        assert result[:12] == [1, 2, N, N, 10, 20, N, N, N, N, N, N]
        assert result[12:19] == [3, 4, 5, 6, 7, 8, 9]
        assert result[19:] == [N] * 5

    def test_inner_level_boundary(self):
        """A nested list on an inner boundary fills one inner row only."""
        result = expand_initializer([2, 2, 2], [1, 2, [3, 4], [5, 6, 7]])
        assert result == [1, 2, 3, 4, 5, 6, 7, N]

    def test_input_not_consumed(self):
        """The caller's initializer survives expansion unchanged."""
        values = [[1, 2], 3]
        ArrayInitializer([2, 3], values).expand()
        assert values == [[1, 2], 3]

    def test_values_are_opaque(self):
        """Slots hold whatever objects the initializer contains."""
        a, b = object(), object()
        assert expand_initializer([2], [a, b]) == [a, b]
