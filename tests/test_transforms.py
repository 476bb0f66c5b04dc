# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Reshape, squeeze, permute, reverse, concatenate, stack and split."""
import numpy as np
import pytest

import tensorspan as ts
from tensorspan import ReadOnlyTensorSpan, TensorSpan
from tensorspan.errors import ShapeMismatchError


# ──────────────────────── Reinterpretations ───────────────────────────

class TestReshape:

    def test_dense_reshape_shares_buffer(self, grid):
        out = ts.reshape(grid, [3, 2])
        assert out.tolist() == [[1, 2], [3, 4], [5, 6]]
        assert out.shares_buffer_with(grid)
        out[0, 0] = 100
        assert grid[0, 0] == 100

    def test_inferred_dimension(self, grid):
        assert ts.reshape(grid, [-1, 2]).shape == (3, 2)
        assert ts.reshape(grid, [-1]).shape == (6,)

    def test_two_inferred_dimensions_rejected(self, grid):
        with pytest.raises(ValueError):
            ts.reshape(grid, [-1, -1])

    def test_element_count_mismatch(self, grid):
        with pytest.raises(ShapeMismatchError):
            ts.reshape(grid, [4, 2])

    def test_non_dense_input_is_copied(self, square):
        part = square.slice(1, 1)
        flat = ts.reshape(part, [9])
        assert flat.tolist() == [5.0, 6.0, 7.0, 9.0, 10.0, 11.0, 13.0, 14.0, 15.0]
        assert not flat.shares_buffer_with(square)

    def test_keeps_span_kind(self, grid):
        assert isinstance(ts.reshape(grid.as_tensor_span(), [6]), TensorSpan)
        read_only = ts.reshape(grid.as_read_only_tensor_span(), [6])
        assert type(read_only) is ReadOnlyTensorSpan

    def test_reshape_into(self, grid):
        dest = ts.zeros(3, 2, dtype=ts.int64)
        ts.reshape_into(grid, dest)
        assert dest.tolist() == [[1, 2], [3, 4], [5, 6]]
        with pytest.raises(ShapeMismatchError):
            ts.reshape_into(grid, ts.zeros(5, dtype=ts.int64))


class TestSqueeze:

    def test_drops_all_unit_dimensions(self):
        t = ts.create([1, 2, 3], lengths=[1, 3, 1])
        out = ts.squeeze(t)
        assert out.shape == (3,)
        assert out.tolist() == [1, 2, 3]
        assert out.shares_buffer_with(t)

    def test_all_unit_dimensions_keep_rank_one(self):
        assert ts.squeeze(ts.zeros(1, 1)).shape == (1,)

    def test_squeeze_dimension(self):
        t = ts.zeros(2, 1, 3)
        assert ts.squeeze_dimension(t, 1).shape == (2, 3)
        assert ts.squeeze_dimension(t, -2).shape == (2, 3)

    def test_squeeze_dimension_requires_unit_length(self):
        with pytest.raises(ShapeMismatchError):
            ts.squeeze_dimension(ts.zeros(2, 3), 0)

    def test_unsqueeze(self, grid):
        assert ts.unsqueeze(grid, 0).shape == (1, 2, 3)
        assert ts.unsqueeze(grid, 1).shape == (2, 1, 3)
        assert ts.unsqueeze(grid, 2).shape == (2, 3, 1)
        assert ts.unsqueeze(grid, 1).tolist() == [[[1, 2, 3]], [[4, 5, 6]]]

    def test_unsqueeze_past_end(self, grid):
        with pytest.raises(IndexError):
            ts.unsqueeze(grid, 4)


class TestZeroStrideViews:

    def test_unsqueeze_and_squeeze_of_sliced_repeating_view(self):
        t = ts.create_from_shape_and_strides([3, 4], [0, 0], dtype=ts.int32)
        t[0, 0] = 5
        view = t.as_read_only_tensor_span().slice(1, 1)
        grown = ts.unsqueeze(view, 0)
        assert grown.shape == (1, 2, 3)
        assert grown.tolist() == [[[5, 5, 5], [5, 5, 5]]]
        assert ts.squeeze(grown).shape == (2, 3)
        assert ts.squeeze_dimension(grown, 0).tolist() == [[5, 5, 5], [5, 5, 5]]

    def test_tensor_slice_of_repeated_row(self):
        t = ts.create_from_shape_and_strides([2, 5], [10, 0], dtype=ts.int64)
        t[1, 0] = 7
        row = t.slice(1, 0)
        assert ts.unsqueeze(row, 1).tolist() == [[[7, 7, 7, 7, 7]]]
        assert ts.squeeze_dimension(row, 0).tolist() == [7, 7, 7, 7, 7]


# ──────────────────────── Remapped copies ─────────────────────────────

class TestPermute:

    def test_swap_two_dimensions(self, grid):
        out = ts.permute_dimensions(grid, [1, 0])
        assert out.shape == (3, 2)
        assert out.as_read_only_tensor_span().ravel().tolist() == [1, 4, 2, 5, 3, 6]
        assert not out.shares_buffer_with(grid)

    def test_default_order_reverses_dimensions(self):
        t = ts.zeros(2, 3, 4)
        assert ts.permute_dimensions(t).shape == (4, 3, 2)

    def test_three_dimensional_order(self):
        t = ts.arange(24).reshape(2, 3, 4)
        out = ts.permute_dimensions(t, [2, 0, 1])
        assert out.shape == (4, 2, 3)
        assert out[3, 1, 2] == t[1, 2, 3]

    def test_invalid_order(self, grid):
        with pytest.raises(ValueError):
            ts.permute_dimensions(grid, [0, 0])
        with pytest.raises(ShapeMismatchError):
            ts.permute_dimensions(grid, [0])

    def test_permute_into(self, grid):
        dest = ts.zeros(3, 2, dtype=ts.int64)
        ts.permute_dimensions_into(grid, [1, 0], dest)
        assert dest.tolist() == [[1, 4], [2, 5], [3, 6]]
        with pytest.raises(ShapeMismatchError):
            ts.permute_dimensions_into(grid, [1, 0], ts.zeros(2, 3, dtype=ts.int64))

    def test_transpose(self, grid):
        assert ts.transpose(grid).tolist() == [[1, 4], [2, 5], [3, 6]]
        line = ts.tensor([1, 2, 3])
        assert ts.transpose(line) is line


class TestReverse:

    def test_reverse_every_dimension(self, grid):
        assert ts.reverse(grid).tolist() == [[6, 5, 4], [3, 2, 1]]

    def test_reverse_one_dimension(self, grid):
        assert ts.reverse_dimension(grid, 0).tolist() == [[4, 5, 6], [1, 2, 3]]
        assert ts.reverse_dimension(grid, -1).tolist() == [[3, 2, 1], [6, 5, 4]]

    def test_reverse_into(self, grid):
        dest = ts.zeros(2, 3, dtype=ts.int64)
        ts.reverse_into(grid, dest, dimension=1)
        assert dest.tolist() == [[3, 2, 1], [6, 5, 4]]

    def test_reverse_of_strided_view(self, square):
        column = square.as_read_only_tensor_span().slice_along_dimension(1, 0)
        assert ts.reverse(column).tolist() == [12.0, 8.0, 4.0, 0.0]


class TestConcatenate:

    def test_leading_dimension(self, grid):
        out = ts.concatenate([grid, grid * 10])
        assert out.shape == (4, 3)
        assert out.tolist()[2] == [10, 20, 30]

    def test_other_dimension(self, grid):
        extra = ts.create([7, 8], lengths=[2, 1])
        out = ts.concatenate_on_dimension([grid, extra], 1)
        assert out.tolist() == [[1, 2, 3, 7], [4, 5, 6, 8]]

    def test_mismatched_lengths(self, grid):
        with pytest.raises(ShapeMismatchError):
            ts.concatenate_on_dimension([grid, ts.zeros(3, 3, dtype=ts.int64)], 1)

    def test_mismatched_dtypes(self, grid):
        with pytest.raises(TypeError):
            ts.concatenate([grid, ts.zeros(1, 3, dtype=ts.float32)])

    def test_empty_input(self):
        with pytest.raises(ValueError):
            ts.concatenate([])

    def test_concatenate_into(self):
        a, b = ts.tensor([1, 2]), ts.tensor([3])
        dest = ts.zeros(3, dtype=ts.int64)
        ts.concatenate_into([a, b], dest)
        assert dest.tolist() == [1, 2, 3]


class TestStackAndSplit:

    def test_stack_new_leading_dimension(self):
        out = ts.stack([ts.tensor([1, 2]), ts.tensor([3, 4])])
        assert out.tolist() == [[1, 2], [3, 4]]

    def test_stack_along_trailing_dimension(self):
        out = ts.stack_along_dimension([ts.tensor([1, 2]), ts.tensor([3, 4])], 1)
        assert out.tolist() == [[1, 3], [2, 4]]

    def test_stack_requires_equal_shapes(self):
        with pytest.raises(ShapeMismatchError):
            ts.stack([ts.tensor([1, 2]), ts.tensor([1, 2, 3])])

    def test_stack_into(self):
        dest = ts.zeros(2, 2, dtype=ts.int64)
        ts.stack_into([ts.tensor([1, 2]), ts.tensor([3, 4])], dest)
        assert dest.tolist() == [[1, 2], [3, 4]]

    def test_split_along_columns(self, grid):
        parts = ts.split(grid, 3, 1)
        assert [p.tolist() for p in parts] == [[[1], [4]], [[2], [5]], [[3], [6]]]
        assert not any(p.shares_buffer_with(grid) for p in parts)

    def test_split_rows(self, grid):
        top, bottom = ts.split(grid, 2)
        assert top.tolist() == [[1, 2, 3]]
        assert bottom.tolist() == [[4, 5, 6]]

    def test_split_requires_divisible_length(self, grid):
        with pytest.raises(ValueError):
            ts.split(grid, 4, 1)
        with pytest.raises(ValueError):
            ts.split(grid, 0)

    def test_split_then_concatenate_restores(self, square):
        parts = ts.split(square, 2, 1)
        assert ts.concatenate_on_dimension(parts, 1).tolist() == square.tolist()


# ──────────────────────── Round trips ─────────────────────────────────

SHAPES = [(1,), (6,), (2, 3), (3, 1, 4), (1, 1, 1), (2, 0, 3), (4, 3, 2)]


def _numbered(lengths):
    values = np.arange(int(np.prod(lengths)), dtype=np.int64)
    return ts.create(values, lengths=list(lengths))


@pytest.mark.parametrize("lengths", SHAPES, ids=str)
class TestRoundTrips:

    def test_reshape_round_trip(self, lengths):
        t = _numbered(lengths)
        flat = ts.reshape(t, [-1])
        back = ts.reshape(flat, list(lengths))
        assert back.shape == lengths
        assert back.tolist() == t.tolist()
        twisted = ts.reshape(ts.reshape(t, list(lengths[::-1])), list(lengths))
        assert twisted.tolist() == t.tolist()

    def test_permute_then_inverse_is_identity(self, lengths):
        t = _numbered(lengths)
        order = list(range(1, len(lengths))) + [0]
        inverse = [order.index(d) for d in range(len(lengths))]
        moved = ts.permute_dimensions(t, order)
        assert moved.shape == tuple(lengths[o] for o in order)
        assert ts.permute_dimensions(moved, inverse).tolist() == t.tolist()

    def test_reverse_twice_is_identity(self, lengths):
        t = _numbered(lengths)
        assert ts.reverse(ts.reverse(t)).tolist() == t.tolist()
        last = len(lengths) - 1
        once = ts.reverse_dimension(t, last)
        assert ts.reverse_dimension(once, last).tolist() == t.tolist()

    def test_split_then_concatenate_is_identity(self, lengths):
        t = _numbered(lengths)
        for dimension, length in enumerate(lengths):
            if length == 0:
                continue
            parts = ts.split(t, length, dimension)
            assert len(parts) == length
            joined = ts.concatenate_on_dimension(parts, dimension)
            assert joined.tolist() == t.tolist()
