# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Per-dtype numeric capability tables."""
import math

import numpy as np
import pytest

import tensorspan as ts
from tensorspan.errors import UnsupportedElementWidthError
from tensorspan.scalar import (
    BoolOps,
    ComplexOps,
    FloatingOps,
    SignedIntegerOps,
    UnsignedIntegerOps,
    bit_view_dtype,
    scalar_ops,
    signed_bit_view_dtype,
)


class TestDispatch:

    @pytest.mark.parametrize("dt, expected", [
        (np.float32, FloatingOps),
        (np.float16, FloatingOps),
        (np.int8, SignedIntegerOps),
        (np.uint64, UnsignedIntegerOps),
        (np.complex64, ComplexOps),
        (np.bool_, BoolOps),
    ])
    def test_category(self, dt, expected):
        assert isinstance(scalar_ops(dt), expected)

    def test_accepts_library_dtype_and_arrays(self, grid):
        assert scalar_ops(ts.int16).dtype == np.int16
        assert scalar_ops(np.zeros(2, dtype=np.uint8)).dtype == np.uint8
        assert scalar_ops(grid).dtype == np.int64

    def test_tables_are_cached(self):
        assert scalar_ops(np.float64) is scalar_ops(np.dtype('float64'))


class TestConstants:

    def test_zero_one_and_pi(self):
        ops = scalar_ops(np.float32)
        assert ops.zero == 0.0
        assert ops.one.dtype == np.float32
        assert ops.pi == np.float32(math.pi)
        assert scalar_ops(np.int32).pi == 3

    def test_limits(self):
        assert scalar_ops(np.int8).min_value == -128
        assert scalar_ops(np.uint16).max_value == 65535
        assert scalar_ops(np.float32).max_value == np.finfo(np.float32).max
        with pytest.raises(TypeError):
            scalar_ops(np.complex128).max_value

    def test_bit_width(self):
        assert scalar_ops(np.int16).bit_width == 16
        assert scalar_ops(np.float64).itemsize == 8

    def test_cast_scalar_is_c_style(self):
        assert scalar_ops(np.uint8).cast_scalar(300) == 44
        assert scalar_ops(np.int32).cast_scalar(2.9) == 2


class TestCategoryRules:

    def test_integer_math_evaluates_in_float64(self):
        out = scalar_ops(np.int32).sqrt(np.array([4, 9], dtype=np.int32))
        assert out.dtype == np.float64

    def test_unsigned_copy_sign_rejects_negative(self):
        ops = scalar_ops(np.uint8)
        assert ops.copy_sign(np.array([3], dtype=np.uint8), 1).tolist() == [3]
        with pytest.raises(OverflowError):
            ops.copy_sign(np.array([3], dtype=np.uint8), -1)

    def test_complex_has_no_ordering(self):
        ops = scalar_ops(np.complex128)
        with pytest.raises(TypeError):
            ops.less_than(1j, 2j)
        with pytest.raises(TypeError):
            ops.floor(np.array([1j]))
        assert ops.add(1j, 1).imag == 1.0

    def test_bool_supports_comparison_only(self):
        ops = scalar_ops(np.bool_)
        assert bool(ops.equals(True, True))
        with pytest.raises(TypeError):
            ops.multiply(True, False)
        with pytest.raises(TypeError):
            ops.exp(np.array([True]))

    def test_magnitude_tie_prefers_positive_for_maximum(self):
        ops = scalar_ops(np.float64)
        assert ops.maximum_magnitude(-2.0, 2.0) == 2.0
        assert ops.minimum_magnitude(2.0, -2.0) == -2.0

    def test_magnitude_number_ignores_nan(self):
        ops = scalar_ops(np.float64)
        assert ops.maximum_magnitude_number(math.nan, -3.0) == -3.0
        assert math.isnan(ops.maximum_magnitude(math.nan, -3.0))


class TestBitViews:

    @pytest.mark.parametrize("itemsize, unsigned, signed", [
        (1, np.uint8, np.int8),
        (2, np.uint16, np.int16),
        (4, np.uint32, np.int32),
        (8, np.uint64, np.int64),
    ])
    def test_same_width_views(self, itemsize, unsigned, signed):
        assert bit_view_dtype(itemsize) == unsigned
        assert signed_bit_view_dtype(itemsize) == signed

    def test_unsupported_width_names_operation(self):
        with pytest.raises(UnsupportedElementWidthError, match="pop_count"):
            bit_view_dtype(16, 'pop_count')
