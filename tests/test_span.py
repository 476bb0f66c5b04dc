# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Strided views: construction, element access, slicing, bulk copies."""
import array
import ctypes

import numpy as np
import pytest

import tensorspan as ts
from tensorspan import ReadOnlyTensorSpan, TensorSpan, remap_copy
from tensorspan.errors import (
    CapacityError,
    IndexOutOfRangeError,
    InvalidOperationError,
    ShapeMismatchError,
)


# ──────────────────────── Construction ────────────────────────────────

class TestConstruction:

    def test_default_layout_is_rank_one(self, buffer):
        span = TensorSpan(buffer)
        assert span.lengths == (12,)
        assert span.strides == (1,)
        assert span.is_dense

    def test_explicit_lengths_get_canonical_strides(self, buffer):
        span = TensorSpan(buffer, [3, 4])
        assert span.strides == (4, 1)
        assert span.rank == 2
        assert span.flattened_length == 12

    def test_start_offset(self, buffer):
        span = ReadOnlyTensorSpan(buffer, [2, 2], start=8)
        assert span.tolist() == [[8.0, 9.0], [10.0, 11.0]]

    def test_buffer_too_short(self, buffer):
        with pytest.raises(CapacityError):
            TensorSpan(buffer, [4, 4])

    def test_reach_beyond_buffer(self, buffer):
        with pytest.raises(CapacityError):
            TensorSpan(buffer, [2, 2], [11, 1])

    def test_zero_stride_layout(self):
        span = ReadOnlyTensorSpan(np.arange(6.0), [2, 3], [0, 1])
        assert span.tolist() == [[0.0, 1.0, 2.0], [0.0, 1.0, 2.0]]
        assert not span.is_dense

    def test_mutable_span_over_read_only_memory(self):
        frozen = np.arange(4.0)
        frozen.flags.writeable = False
        with pytest.raises(InvalidOperationError):
            TensorSpan(frozen)
        assert ReadOnlyTensorSpan(frozen).tolist() == [0.0, 1.0, 2.0, 3.0]

    def test_mutable_span_requires_shared_memory(self):
        data = [1.0, 2.0]
        with pytest.raises(TypeError, match="list"):
            TensorSpan(data, [2])
        assert ReadOnlyTensorSpan(data, [2]).tolist() == [1.0, 2.0]
        raw = bytearray(4)
        span = TensorSpan(raw, [2, 2])
        span[1, 0] = 7
        assert raw[2] == 7

    def test_read_only_window_is_not_writeable(self, buffer):
        span = ReadOnlyTensorSpan(buffer)
        with pytest.raises(TypeError):
            span[0] = 1.0
        assert not span.ravel().flags.writeable

    def test_multidimensional_ndarray_is_flattened(self):
        arr = np.arange(6, dtype=np.int32).reshape(2, 3)
        span = TensorSpan(arr, [3, 2])
        span[0, 1] = 100
        assert arr[0, 1] == 100

    def test_from_buffer_shares_memory(self):
        raw = array.array('d', [1.0, 2.0, 3.0, 4.0])
        span = TensorSpan.from_buffer(raw, ts.float64, [2, 2])
        span[1, 1] = 40.0
        assert raw[3] == 40.0

    def test_from_pointer(self):
        backing = (ctypes.c_double * 6)(*range(6))
        span = TensorSpan.from_pointer(ctypes.addressof(backing), 6, ts.float64, [2, 3])
        assert span[1, 2] == 5.0
        span[0, 0] = -1.0
        assert backing[0] == -1.0

    def test_from_pointer_rejects_null(self):
        with pytest.raises(ValueError):
            ReadOnlyTensorSpan.from_pointer(0, 4, ts.float32)


# ──────────────────────── Element access ──────────────────────────────

class TestElementAccess:

    def test_read_and_write(self, buffer):
        span = TensorSpan(buffer, [3, 4])
        assert span[2, 1] == 9.0
        span[2, 1] = -9.0
        assert buffer[9] == -9.0

    def test_negative_indices_count_from_end(self, buffer):
        span = TensorSpan(buffer, [3, 4])
        assert span[-1, -1] == 11.0

    def test_index_count_mismatch(self, buffer):
        span = TensorSpan(buffer, [3, 4])
        with pytest.raises(ShapeMismatchError):
            span[1]

    def test_out_of_range(self, buffer):
        span = TensorSpan(buffer, [3, 4])
        with pytest.raises(IndexOutOfRangeError):
            span[3, 0]

    def test_item_of_single_element_view(self, buffer):
        assert TensorSpan(buffer, [1, 1], start=5).item() == 5.0
        with pytest.raises(ValueError):
            TensorSpan(buffer, [2]).item()


# ──────────────────────── Slicing ─────────────────────────────────────

class TestSlicing:

    def test_slice_from_start_indices(self, square):
        view = square.as_read_only_tensor_span().slice(1, 1)
        assert view.lengths == (3, 3)
        assert view[0, 0] == square[1, 1]

    def test_slice_from_ranges(self, square):
        view = square.as_read_only_tensor_span().slice(slice(1, 3), range(0, 2))
        assert view.tolist() == [[4.0, 5.0], [8.0, 9.0]]

    def test_getitem_with_slices(self, square):
        view = square.as_read_only_tensor_span()[1:3, 2:]
        assert view.tolist() == [[6.0, 7.0], [10.0, 11.0]]

    def test_getitem_mixed_int_and_slice_drops_dimension(self, square):
        row = square.as_read_only_tensor_span()[2, :]
        assert row.lengths == (4,)
        assert row.tolist() == [8.0, 9.0, 10.0, 11.0]

    def test_slice_writes_through(self, square):
        view = square.as_tensor_span()[0:2, 0:2]
        view.fill(-1.0)
        assert square.tolist()[0] == [-1.0, -1.0, 2.0, 3.0]
        assert square[2, 2] == 10.0

    def test_slice_is_not_dense(self, square):
        view = square.as_read_only_tensor_span().slice(1, 1)
        assert not view.is_dense
        assert view.has_any_dense_dimensions

    def test_slice_along_dimension(self, square):
        column = square.as_read_only_tensor_span().slice_along_dimension(1, 2)
        assert column.tolist() == [2.0, 6.0, 10.0, 14.0]
        assert column.strides == (4,)

    def test_slice_along_dimension_of_rank_one(self):
        span = ReadOnlyTensorSpan(np.array([7, 8, 9]))
        scalar = span.slice_along_dimension(0, 1)
        assert scalar.rank == 0
        assert scalar.item() == 8

    def test_ravel_gathers_non_dense_view(self, square):
        view = square.as_read_only_tensor_span().slice(slice(0, 2), slice(0, 2))
        assert view.ravel().tolist() == [0.0, 1.0, 4.0, 5.0]

    def test_dimension_span_is_reenumerable(self, grid):
        rows = grid.as_read_only_tensor_span().get_dimension_span(0)
        assert len(rows) == 2
        first = [r.tolist() for r in rows]
        second = [r.tolist() for r in rows]
        assert first == second == [[1, 2, 3], [4, 5, 6]]
        assert rows[1].tolist() == [4, 5, 6]


# ──────────────────────── Bulk operations ─────────────────────────────

class TestBulk:

    def test_iteration_is_logical_order(self):
        span = ReadOnlyTensorSpan(np.arange(6), [3, 2], [1, 3])
        assert list(span) == [0, 3, 1, 4, 2, 5]

    def test_copy_to(self, grid):
        dest = ts.zeros(6, dtype=ts.int64)
        grid.as_read_only_tensor_span().copy_to(dest.as_tensor_span())
        assert dest.tolist() == [1, 2, 3, 4, 5, 6]

    def test_copy_to_short_destination(self, grid):
        dest = ts.zeros(5, dtype=ts.int64).as_tensor_span()
        assert not grid.as_read_only_tensor_span().try_copy_to(dest)
        with pytest.raises(CapacityError):
            grid.as_read_only_tensor_span().copy_to(dest)
        assert dest.tolist() == [0, 0, 0, 0, 0]

    def test_flatten_to_ndarray(self):
        span = ReadOnlyTensorSpan(np.arange(6), [3, 2], [1, 3])
        out = np.zeros(8, dtype=np.int64)
        span.flatten_to(out)
        assert out.tolist() == [0, 3, 1, 4, 2, 5, 0, 0]

    def test_fill_only_touches_addressable_elements(self, buffer):
        span = TensorSpan(buffer, [2, 2], [6, 1])
        span.fill(0.0)
        assert buffer.tolist() == [0.0, 0.0, 2.0, 3.0, 4.0, 5.0,
                                   0.0, 0.0, 8.0, 9.0, 10.0, 11.0]

    def test_clear(self, buffer):
        span = TensorSpan(buffer, [3], start=2)
        span.clear()
        assert buffer[:6].tolist() == [0.0, 1.0, 0.0, 0.0, 0.0, 5.0]

    def test_get_span_of_dense_run(self, square):
        run = square.as_tensor_span().get_span([1, 0], 6)
        assert run.tolist() == [4.0, 5.0, 6.0, 7.0, 8.0, 9.0]
        run[0] = 100.0
        assert square[1, 0] == 100.0

    def test_get_span_within_row_of_non_dense_view(self, square):
        view = square.as_tensor_span().slice(1, 1)
        assert view.get_span([0, 0], 3).tolist() == [5.0, 6.0, 7.0]
        with pytest.raises(InvalidOperationError):
            view.get_span([0, 0], 4)
        assert view.try_get_span([0, 0], 4) is None

    def test_get_span_with_negative_start_index(self, square):
        view = square.as_tensor_span().slice(1, 1)
        assert view.get_span([0, -2], 2).tolist() == [6.0, 7.0]
        assert view.get_span([-1, -3], 3).tolist() == [13.0, 14.0, 15.0]
        with pytest.raises(InvalidOperationError):
            view.get_span([0, -2], 3)

    def test_flat_span_requires_density(self, square):
        assert square.as_tensor_span().flat_span().shape == (16,)
        with pytest.raises(InvalidOperationError):
            square.as_tensor_span().slice(1, 1).flat_span()

    def test_assign(self, buffer):
        span = TensorSpan(buffer, [2, 2])
        span.assign([[9, 8], [7, 6]])
        assert buffer[:4].tolist() == [9.0, 8.0, 7.0, 6.0]
        with pytest.raises(ShapeMismatchError):
            span.assign([1, 2, 3])


# ──────────────────────── Equality & display ──────────────────────────

class TestEqualityAndDisplay:

    def test_equality_is_aliasing(self, buffer):
        a = ReadOnlyTensorSpan(buffer, [2, 3])
        b = ReadOnlyTensorSpan(buffer, [2, 3])
        c = ReadOnlyTensorSpan(buffer.copy(), [2, 3])
        d = ReadOnlyTensorSpan(buffer, [3, 2])
        assert a == b
        assert a != c
        assert a != d

    def test_views_are_unhashable(self, buffer):
        with pytest.raises(TypeError):
            hash(ReadOnlyTensorSpan(buffer))

    def test_repr_header(self):
        span = TensorSpan(np.zeros(6, dtype=np.float32), [2, 3])
        text = repr(span)
        assert text.startswith("TensorSpan<float32>[2, 3]")

    def test_to_string_crops(self, square):
        text = square.as_read_only_tensor_span().to_string([1, 2])
        assert text.splitlines()[1] == "[[0., 1.]]"


# ──────────────────────── remap_copy ──────────────────────────────────

class TestRemapCopy:

    def test_identity_requires_same_shape(self, grid):
        dest = ts.zeros(3, 2, dtype=ts.int64)
        with pytest.raises(ShapeMismatchError):
            remap_copy(grid.as_read_only_tensor_span(), dest.as_tensor_span())

    def test_index_map_transposes(self, grid):
        dest = ts.zeros(3, 2, dtype=ts.int64)
        remap_copy(grid.as_read_only_tensor_span(), dest.as_tensor_span(),
                   lambda idx: (idx[1], idx[0]))
        assert dest.tolist() == [[1, 4], [2, 5], [3, 6]]

    def test_overlapping_source_and_destination(self):
        data = np.arange(5, dtype=np.int64)
        src = ReadOnlyTensorSpan(data, [4])
        dst = TensorSpan(data, [4], start=1)
        remap_copy(src, dst)
        assert data.tolist() == [0, 0, 1, 2, 3]

    def test_rank_zero_source_fills(self):
        dest = ts.zeros(2, 2, dtype=ts.int64)
        scalar = ReadOnlyTensorSpan(np.array([7]), [1]).slice_along_dimension(0, 0)
        remap_copy(scalar, dest.as_tensor_span(), lambda idx: ())
        assert dest.tolist() == [[7, 7], [7, 7]]
