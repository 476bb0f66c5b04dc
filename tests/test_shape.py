# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Shape/stride arithmetic: flat lengths, strides, capacity and index resolution."""
import numpy as np
import pytest

from tensorspan import shape
from tensorspan.errors import CapacityError, IndexOutOfRangeError, ShapeMismatchError


class TestFlatLength:

    def test_product_of_lengths(self):
        assert shape.compute_flat_length([2, 3, 4]) == 24

    def test_empty_shape_has_no_elements(self):
        assert shape.compute_flat_length([]) == 0

    def test_zero_length_dimension(self):
        assert shape.compute_flat_length([3, 0, 5]) == 0


class TestStrides:

    def test_canonical_strides_are_row_major(self):
        assert shape.compute_canonical_strides([2, 3, 4]) == (12, 4, 1)

    def test_canonical_strides_of_rank_zero(self):
        assert shape.compute_canonical_strides([]) == ()

    def test_flat_index_is_dot_product(self):
        assert shape.compute_flat_index([12, 4, 1], [1, 2, 3]) == 23

    def test_flat_index_rank_mismatch(self):
        with pytest.raises(ShapeMismatchError, match="Index count 2 does not match rank 3"):
            shape.compute_flat_index([12, 4, 1], [1, 2])

    def test_is_dense(self):
        assert shape.is_dense([2, 3], [3, 1])
        assert not shape.is_dense([2, 3], [1, 2])
        assert not shape.is_dense([2, 3], [0, 1])
        assert shape.is_dense([], [])

    def test_has_any_dense_dimensions(self):
        assert shape.has_any_dense_dimensions([2, 3], [6, 1])
        assert not shape.has_any_dense_dimensions([2, 3], [1, 2])
        assert not shape.has_any_dense_dimensions([], [])


class TestCapacity:

    def test_reach_is_order_independent(self):
        assert shape.max_reachable_offset([3, 2], [1, 3]) == 5
        assert shape.max_reachable_offset([2, 3], [3, 1]) == 5

    def test_reach_of_empty_dimension(self):
        assert shape.max_reachable_offset([2, 0], [1, 1]) == -1

    def test_broadcast_strides_need_one_slot(self):
        assert shape.required_capacity([4, 5], [0, 0]) == 20
        assert shape.max_reachable_offset([4, 5], [0, 0]) == 0

    def test_rank_zero_requires_nothing(self):
        assert shape.required_capacity([], []) == 0

    def test_sparse_strides_need_the_reach(self):
        assert shape.required_capacity([2, 2], [10, 1]) == 12

    def test_validate_capacity_reports_sizes(self):
        with pytest.raises(CapacityError) as info:
            shape.validate_capacity(5, [2, 3], [3, 1])
        assert info.value.required == 6
        assert info.value.available == 5

    def test_validate_reach_ignores_repeated_elements(self):
        shape.validate_reach(1, [1, 3, 4], [0, 0, 0])
        shape.validate_reach(0, [2, 0], [1, 1])
        shape.validate_reach(0, [], [])
        with pytest.raises(CapacityError) as info:
            shape.validate_reach(5, [2, 2], [4, 1])
        assert info.value.required == 6

    def test_validate_lengths_defaults_to_canonical(self):
        assert shape.validate_lengths_and_strides([2, 3], None) == ((2, 3), (3, 1))

    @pytest.mark.parametrize("lengths, strides", [
        ([-1, 2], None),
        ([2, 2], [1, -1]),
    ])
    def test_negative_values_rejected(self, lengths, strides):
        with pytest.raises(ValueError):
            shape.validate_lengths_and_strides(lengths, strides)

    def test_stride_count_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            shape.validate_lengths_and_strides([2, 2], [1])


class TestIndexResolution:

    def test_from_end_index(self):
        assert shape.resolve_index(-1, 4) == 3

    @pytest.mark.parametrize("index", [4, -5])
    def test_out_of_range(self, index):
        with pytest.raises(IndexOutOfRangeError):
            shape.resolve_index(index, 4)

    def test_end_allowed_for_starts(self):
        assert shape.resolve_index(4, 4, allow_end=True) == 4

    def test_normalize_dimension(self):
        assert shape.normalize_dimension(-1, 3) == 2
        assert shape.normalize_dimension(3, 3, allow_end=True) == 3
        with pytest.raises(IndexOutOfRangeError):
            shape.normalize_dimension(3, 3)

    def test_resolve_range(self):
        assert shape.resolve_range(slice(1, 3), 4) == (1, 2)
        assert shape.resolve_range(range(0, 4), 4) == (0, 4)
        assert shape.resolve_range(slice(None, -1), 4) == (0, 3)

    def test_resolve_range_rejects_steps_and_overruns(self):
        with pytest.raises(ValueError):
            shape.resolve_range(slice(0, 4, 2), 4)
        with pytest.raises(IndexOutOfRangeError):
            shape.resolve_range(slice(0, 5), 4)
        with pytest.raises(IndexOutOfRangeError):
            shape.resolve_range(slice(3, 1), 4)


class TestIndexWalk:

    def test_unravel_indices_row_major(self):
        rows, cols = shape.unravel_indices((2, 3))
        np.testing.assert_array_equal(rows, [0, 0, 0, 1, 1, 1])
        np.testing.assert_array_equal(cols, [0, 1, 2, 0, 1, 2])

    def test_logical_offsets_of_transposed_layout(self):
        np.testing.assert_array_equal(
            shape.logical_offsets((3, 2), (1, 3)), [0, 3, 1, 4, 2, 5],
        )

    def test_logical_offsets_with_zero_stride(self):
        np.testing.assert_array_equal(
            shape.logical_offsets((2, 3), (0, 1)), [0, 1, 2, 0, 1, 2],
        )

    def test_as_lengths_forms(self):
        assert shape.as_lengths(3) == (3,)
        assert shape.as_lengths((2, 3)) == (2, 3)
        assert shape.as_lengths(((2, 3),)) == (2, 3)


LAYOUTS = [(1,), (7,), (2, 3), (3, 1, 4), (1, 1, 1), (2, 0, 3), (0,), (4, 3, 2)]


class TestLayoutProperties:

    @pytest.mark.parametrize("lengths", LAYOUTS, ids=str)
    def test_flat_index_is_a_bijection_onto_the_buffer(self, lengths):
        strides = shape.compute_canonical_strides(lengths)
        offsets = [shape.compute_flat_index(strides, idx) for idx in np.ndindex(*lengths)]
        assert len(set(offsets)) == len(offsets)
        assert sorted(offsets) == list(range(shape.compute_flat_length(lengths)))

    @pytest.mark.parametrize("lengths", LAYOUTS + [()], ids=str)
    def test_canonical_strides_are_dense(self, lengths):
        assert shape.is_dense(lengths, shape.compute_canonical_strides(lengths))

    @pytest.mark.parametrize("lengths, strides", [
        ((2, 3), (1, 2)),
        ((3, 1, 4), (1, 12, 3)),
        ((2, 2), (0, 1)),
    ], ids=str)
    def test_logical_offsets_match_flat_index(self, lengths, strides):
        expected = [shape.compute_flat_index(strides, idx) for idx in np.ndindex(*lengths)]
        np.testing.assert_array_equal(shape.logical_offsets(lengths, strides), expected)
