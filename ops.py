# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""ops: numeric operations over tensors and views.

Each operation flattens its inputs in logical order (dense inputs are not
copied), runs the matching kernel from :mod:`tensorspan.primitives` and
returns a new :class:`~tensorspan.tensor.Tensor`, or writes into
``destination`` when one is given. Binary and ternary operations
broadcast their operands first; a destination must already have the
result shape. Reductions return Python scalars.
"""
from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from . import primitives as _k
from .broadcast import (
    broadcast,
    broadcast_shapes,
    broadcast_to,
    can_broadcast_to,
    get_broadcast_shape,
    try_broadcast_to,
)
from .errors import ShapeMismatchError
from .shape import compute_canonical_strides
from .span import ReadOnlyTensorSpan, remap_copy
from .tensor import Tensor, as_mutable_span, as_read_only_span
from .transforms import (
    concatenate,
    concatenate_into,
    concatenate_on_dimension,
    permute_dimensions,
    permute_dimensions_into,
    reshape,
    reshape_into,
    reverse,
    reverse_dimension,
    reverse_into,
    split,
    squeeze,
    squeeze_dimension,
    stack,
    stack_along_dimension,
    stack_into,
    transpose,
    unsqueeze,
)

logger = logging.getLogger(__name__)


# ──────────────────────── Operand handling ────────────────────────────

def _prepare(x):
    """A rank >= 1 view of ``x``, or the scalar a rank-0 input holds.

    An empty rank-0 input holds no scalar and becomes an empty rank-1 view.
    """
    if isinstance(x, (Tensor, ReadOnlyTensorSpan)):
        span = as_read_only_span(x)
        if span.rank:
            return span
        if span.is_empty:
            return ReadOnlyTensorSpan._wrap(span._window[:0], (0,), (1,))
        return span._element(())
    if np.ndim(x) == 0:
        return x
    return as_read_only_span(x)


def _lengths_of(operand) -> tuple[int, ...]:
    return operand.lengths if isinstance(operand, ReadOnlyTensorSpan) else ()


def _flat(operand, lengths: tuple[int, ...]):
    """Logical-order flat data of ``operand`` broadcast to ``lengths``."""
    if not isinstance(operand, ReadOnlyTensorSpan):
        if not lengths:
            return np.asarray([operand])
        return operand
    if operand.lengths != lengths:
        return broadcast(operand, lengths).as_read_only_tensor_span().ravel()
    return operand.ravel()


def _deliver(flat: np.ndarray, lengths: tuple[int, ...], destination):
    """Wrap ``flat`` as a tensor of ``lengths`` or copy it into ``destination``."""
    if destination is None:
        return Tensor._wrap(flat, 0, lengths, compute_canonical_strides(lengths))
    dst = as_mutable_span(destination)
    if dst.lengths != lengths:
        raise ShapeMismatchError(
            f"Destination shape {list(dst.lengths)} does not match result shape {list(lengths)}."
        )
    if dst.rank == 0:
        dst[()] = flat[0]
    else:
        remap_copy(ReadOnlyTensorSpan(flat, lengths), dst)
    return destination


def _broadcast_flats(operands: Sequence) -> tuple[list, tuple[int, ...]]:
    """Flat data of ``operands`` broadcast to their common shape."""
    prepared = [_prepare(x) for x in operands]
    lengths = broadcast_shapes(*(_lengths_of(p) for p in prepared))
    return [_flat(p, lengths) for p in prepared], lengths


def _elementwise(kernel, operands: Sequence, destination=None, **kwargs):
    """Broadcast ``operands``, run ``kernel`` over their flat data, deliver."""
    flats, lengths = _broadcast_flats(operands)
    return _deliver(kernel(*flats, **kwargs), lengths, destination)


def _unary(kernel, x, destination=None, **kwargs):
    return _elementwise(kernel, (x,), destination, **kwargs)


def _flat_input(x) -> np.ndarray:
    operand = _prepare(x)
    if isinstance(operand, ReadOnlyTensorSpan):
        return operand.ravel()
    return np.asarray([operand])


def _python(value):
    return value.item() if isinstance(value, np.generic) else value


# ──────────────────────── Arithmetic ──────────────────────────────────

def add(x, y, destination=None):
    return _elementwise(_k.add, (x, y), destination)


def subtract(x, y, destination=None):
    return _elementwise(_k.subtract, (x, y), destination)


def multiply(x, y, destination=None):
    return _elementwise(_k.multiply, (x, y), destination)


def divide(x, y, destination=None):
    """Elementwise division; integer tensors truncate toward zero."""
    return _elementwise(_k.divide, (x, y), destination)


def remainder(x, y, destination=None):
    return _elementwise(_k.remainder, (x, y), destination)


def ieee_remainder(x, y, destination=None):
    return _elementwise(_k.ieee_remainder, (x, y), destination)


def copy_sign(x, sign, destination=None):
    return _elementwise(_k.copy_sign, (x, sign), destination)


def hypot(x, y, destination=None):
    return _elementwise(_k.hypot, (x, y), destination)


def atan2(y, x, destination=None):
    return _elementwise(_k.atan2, (y, x), destination)


def atan2_pi(y, x, destination=None):
    return _elementwise(_k.atan2_pi, (y, x), destination)


def pow(x, y, destination=None):
    return _elementwise(_k.pow, (x, y), destination)


def fused_multiply_add(x, y, addend, destination=None):
    return _elementwise(_k.fused_multiply_add, (x, y, addend), destination)


def multiply_add(x, y, addend, destination=None):
    return _elementwise(_k.multiply_add, (x, y, addend), destination)


def add_multiply(x, y, multiplier, destination=None):
    return _elementwise(_k.add_multiply, (x, y, multiplier), destination)


def scale_b(x, n, destination=None):
    return _elementwise(_k.scale_b, (x, n), destination)


def negate(x, destination=None):
    return _unary(_k.negate, x, destination)


def abs(x, destination=None):
    return _unary(_k.abs, x, destination)


def reciprocal(x, destination=None):
    return _unary(_k.reciprocal, x, destination)


def reciprocal_sqrt(x, destination=None):
    return _unary(_k.reciprocal_sqrt, x, destination)


def square(x, destination=None):
    return _unary(_k.square, x, destination)


# ──────────────────────── Transcendental ──────────────────────────────

def exp(x, destination=None):
    return _unary(_k.exp, x, destination)


def exp2(x, destination=None):
    return _unary(_k.exp2, x, destination)


def exp10(x, destination=None):
    return _unary(_k.exp10, x, destination)


def exp_m1(x, destination=None):
    return _unary(_k.exp_m1, x, destination)


def exp2_m1(x, destination=None):
    return _unary(_k.exp2_m1, x, destination)


def exp10_m1(x, destination=None):
    return _unary(_k.exp10_m1, x, destination)


def log(x, destination=None):
    return _unary(_k.log, x, destination)


def log2(x, destination=None):
    return _unary(_k.log2, x, destination)


def log10(x, destination=None):
    return _unary(_k.log10, x, destination)


def log_p1(x, destination=None):
    return _unary(_k.log_p1, x, destination)


def log2_p1(x, destination=None):
    return _unary(_k.log2_p1, x, destination)


def log10_p1(x, destination=None):
    return _unary(_k.log10_p1, x, destination)


def log_base(x, base, destination=None):
    return _elementwise(_k.log_base, (x, base), destination)


def sqrt(x, destination=None):
    return _unary(_k.sqrt, x, destination)


def cbrt(x, destination=None):
    return _unary(_k.cbrt, x, destination)


def root_n(x, n: int, destination=None):
    return _unary(_k.root_n, x, destination, n=n)


def sin(x, destination=None):
    return _unary(_k.sin, x, destination)


def cos(x, destination=None):
    return _unary(_k.cos, x, destination)


def tan(x, destination=None):
    return _unary(_k.tan, x, destination)


def asin(x, destination=None):
    return _unary(_k.asin, x, destination)


def acos(x, destination=None):
    return _unary(_k.acos, x, destination)


def atan(x, destination=None):
    return _unary(_k.atan, x, destination)


def sin_cos(x) -> tuple[Tensor, Tensor]:
    """``(sin(x), cos(x))`` as two new tensors."""
    return sin(x), cos(x)


def sin_pi(x, destination=None):
    return _unary(_k.sin_pi, x, destination)


def cos_pi(x, destination=None):
    return _unary(_k.cos_pi, x, destination)


def tan_pi(x, destination=None):
    return _unary(_k.tan_pi, x, destination)


def asin_pi(x, destination=None):
    return _unary(_k.asin_pi, x, destination)


def acos_pi(x, destination=None):
    return _unary(_k.acos_pi, x, destination)


def atan_pi(x, destination=None):
    return _unary(_k.atan_pi, x, destination)


def sinh(x, destination=None):
    return _unary(_k.sinh, x, destination)


def cosh(x, destination=None):
    return _unary(_k.cosh, x, destination)


def tanh(x, destination=None):
    return _unary(_k.tanh, x, destination)


def asinh(x, destination=None):
    return _unary(_k.asinh, x, destination)


def acosh(x, destination=None):
    return _unary(_k.acosh, x, destination)


def atanh(x, destination=None):
    return _unary(_k.atanh, x, destination)


def floor(x, destination=None):
    return _unary(_k.floor, x, destination)


def ceiling(x, destination=None):
    return _unary(_k.ceiling, x, destination)


def round(x, digits: int = 0, destination=None):
    return _unary(_k.round, x, destination, digits=digits)


def truncate(x, destination=None):
    return _unary(_k.truncate, x, destination)


def degrees_to_radians(x, destination=None):
    return _unary(_k.degrees_to_radians, x, destination)


def radians_to_degrees(x, destination=None):
    return _unary(_k.radians_to_degrees, x, destination)


def ilogb(x, destination=None):
    """Binary exponents as an ``int32`` tensor."""
    return _unary(_k.ilogb, x, destination)


# ──────────────────────── Reductions ──────────────────────────────────

def sum(x):
    return _python(_k.sum(_flat_input(x)))


def product(x):
    return _python(_k.product(_flat_input(x)))


def sum_of_magnitudes(x):
    return _python(_k.sum_of_magnitudes(_flat_input(x)))


def sum_of_squares(x):
    return _python(_k.sum_of_squares(_flat_input(x)))


def norm(x):
    return _python(_k.norm(_flat_input(x)))


def average(x):
    return _python(_k.average(_flat_input(x)))


def _pair(x, y) -> tuple[np.ndarray, np.ndarray]:
    """Flat data of two inputs that must have the same shape."""
    a, b = _prepare(x), _prepare(y)
    if _lengths_of(a) != _lengths_of(b):
        raise ShapeMismatchError(
            f"Shape {list(_lengths_of(a))} does not match {list(_lengths_of(b))}."
        )
    return _flat_input(a), _flat_input(b)


def dot(x, y):
    return _python(_k.dot(*_pair(x, y)))


def distance(x, y):
    return _python(_k.distance(*_pair(x, y)))


def distance_squared(x, y):
    return _python(_k.distance_squared(*_pair(x, y)))


def cosine_similarity(x, y):
    return _python(_k.cosine_similarity(*_pair(x, y)))


# ──────────────────────── Extrema ─────────────────────────────────────

def max(x):
    """Largest element; NaN propagates."""
    return _python(_k.max(_flat_input(x)))


def min(x):
    """Smallest element; NaN propagates."""
    return _python(_k.min(_flat_input(x)))


def max_magnitude(x):
    return _python(_k.max_magnitude(_flat_input(x)))


def min_magnitude(x):
    return _python(_k.min_magnitude(_flat_input(x)))


def max_number(x):
    return _python(_k.max_number(_flat_input(x)))


def min_number(x):
    return _python(_k.min_number(_flat_input(x)))


def max_magnitude_number(x):
    return _python(_k.max_magnitude_number(_flat_input(x)))


def min_magnitude_number(x):
    return _python(_k.min_magnitude_number(_flat_input(x)))


def index_of_max(x) -> int:
    """Flat logical index of the first largest element."""
    return _k.index_of_max(_flat_input(x))


def index_of_min(x) -> int:
    return _k.index_of_min(_flat_input(x))


def index_of_max_magnitude(x) -> int:
    return _k.index_of_max_magnitude(_flat_input(x))


def index_of_min_magnitude(x) -> int:
    return _k.index_of_min_magnitude(_flat_input(x))


def maximum(x, y, destination=None):
    return _elementwise(_k.maximum, (x, y), destination)


def minimum(x, y, destination=None):
    return _elementwise(_k.minimum, (x, y), destination)


def maximum_number(x, y, destination=None):
    return _elementwise(_k.maximum_number, (x, y), destination)


def minimum_number(x, y, destination=None):
    return _elementwise(_k.minimum_number, (x, y), destination)


def maximum_magnitude(x, y, destination=None):
    return _elementwise(_k.maximum_magnitude, (x, y), destination)


def minimum_magnitude(x, y, destination=None):
    return _elementwise(_k.minimum_magnitude, (x, y), destination)


def maximum_magnitude_number(x, y, destination=None):
    return _elementwise(_k.maximum_magnitude_number, (x, y), destination)


def minimum_magnitude_number(x, y, destination=None):
    return _elementwise(_k.minimum_magnitude_number, (x, y), destination)


def clamp(x, min_value, max_value, destination=None):
    return _elementwise(_k.clamp, (x, min_value, max_value), destination)


# ──────────────────────── Activations ─────────────────────────────────

def sigmoid(x, destination=None):
    return _unary(_k.sigmoid, x, destination)


def softmax(x, destination=None):
    """Softmax over every element of ``x`` taken together."""
    return _unary(_k.softmax, x, destination)


# ──────────────────────── Comparisons ─────────────────────────────────

def equals(x, y, destination=None):
    return _elementwise(_k.equals, (x, y), destination)


def greater_than(x, y, destination=None):
    return _elementwise(_k.greater_than, (x, y), destination)


def greater_than_or_equal(x, y, destination=None):
    return _elementwise(_k.greater_than_or_equal, (x, y), destination)


def less_than(x, y, destination=None):
    return _elementwise(_k.less_than, (x, y), destination)


def less_than_or_equal(x, y, destination=None):
    return _elementwise(_k.less_than_or_equal, (x, y), destination)


def equals_all(x, y) -> bool:
    return _k.equals_all(*_broadcast_flats((x, y))[0])


def equals_any(x, y) -> bool:
    return _k.equals_any(*_broadcast_flats((x, y))[0])


def greater_than_all(x, y) -> bool:
    return _k.greater_than_all(*_broadcast_flats((x, y))[0])


def greater_than_any(x, y) -> bool:
    return _k.greater_than_any(*_broadcast_flats((x, y))[0])


def greater_than_or_equal_all(x, y) -> bool:
    return _k.greater_than_or_equal_all(*_broadcast_flats((x, y))[0])


def greater_than_or_equal_any(x, y) -> bool:
    return _k.greater_than_or_equal_any(*_broadcast_flats((x, y))[0])


def less_than_all(x, y) -> bool:
    return _k.less_than_all(*_broadcast_flats((x, y))[0])


def less_than_any(x, y) -> bool:
    return _k.less_than_any(*_broadcast_flats((x, y))[0])


def less_than_or_equal_all(x, y) -> bool:
    return _k.less_than_or_equal_all(*_broadcast_flats((x, y))[0])


def less_than_or_equal_any(x, y) -> bool:
    return _k.less_than_or_equal_any(*_broadcast_flats((x, y))[0])


def is_nan(x, destination=None):
    return _unary(_k.is_nan, x, destination)


def is_finite(x, destination=None):
    return _unary(_k.is_finite, x, destination)


# ──────────────────────── Bitwise ─────────────────────────────────────

def bitwise_and(x, y, destination=None):
    return _elementwise(_k.bitwise_and, (x, y), destination)


def bitwise_or(x, y, destination=None):
    return _elementwise(_k.bitwise_or, (x, y), destination)


def xor(x, y, destination=None):
    return _elementwise(_k.xor, (x, y), destination)


def ones_complement(x, destination=None):
    return _unary(_k.ones_complement, x, destination)


def shift_left(x, shift_amount: int, destination=None):
    return _unary(_k.shift_left, x, destination, shift_amount=shift_amount)


def shift_right_arithmetic(x, shift_amount: int, destination=None):
    return _unary(_k.shift_right_arithmetic, x, destination, shift_amount=shift_amount)


def shift_right_logical(x, shift_amount: int, destination=None):
    return _unary(_k.shift_right_logical, x, destination, shift_amount=shift_amount)


def pop_count(x, destination=None):
    return _unary(_k.pop_count, x, destination)


def leading_zero_count(x, destination=None):
    return _unary(_k.leading_zero_count, x, destination)


def trailing_zero_count(x, destination=None):
    return _unary(_k.trailing_zero_count, x, destination)


# ──────────────────────── Conversion ──────────────────────────────────

def _conversion(kernel, x, dtype, destination):
    if dtype is None:
        if destination is None:
            raise TypeError("Either dtype or destination is required")
        dtype = as_mutable_span(destination).dtype
    return _unary(kernel, x, destination, dtype=dtype)


def convert_checked(x, dtype=None, destination=None):
    """Convert element type, raising ``OverflowError`` on unrepresentable values."""
    return _conversion(_k.convert_checked, x, dtype, destination)


def convert_saturating(x, dtype=None, destination=None):
    """Convert element type, clamping out-of-range values."""
    return _conversion(_k.convert_saturating, x, dtype, destination)


def convert_truncating(x, dtype=None, destination=None):
    """Convert element type with C cast semantics."""
    return _conversion(_k.convert_truncating, x, dtype, destination)


# ──────────────────────── Random fills ────────────────────────────────

def _fill(kernel, destination, *args) -> None:
    dst = as_mutable_span(destination)
    n = dst.flattened_length
    samples = kernel(np.empty(n, dtype=dst.dtype.to_numpy()), *args)
    logger.debug("Filling %s with %d random samples", dst.lengths, n)
    if n:
        remap_copy(ReadOnlyTensorSpan(samples, dst.lengths), dst)


def fill_uniform_distribution(destination, low=0.0, high=1.0) -> None:
    """Fill a tensor or view with uniform samples from ``[low, high)``."""
    _fill(_k.fill_uniform_distribution, destination, low, high)


def fill_gaussian_normal_distribution(destination, mean=0.0, std=1.0) -> None:
    """Fill a tensor or view with normally distributed samples."""
    _fill(_k.fill_gaussian_normal_distribution, destination, mean, std)


__all__ = [
    # broadcast
    'broadcast', 'broadcast_shapes', 'broadcast_to', 'can_broadcast_to',
    'get_broadcast_shape', 'try_broadcast_to',
    # transforms
    'concatenate', 'concatenate_into', 'concatenate_on_dimension',
    'permute_dimensions', 'permute_dimensions_into', 'reshape', 'reshape_into',
    'reverse', 'reverse_dimension', 'reverse_into', 'split', 'squeeze',
    'squeeze_dimension', 'stack', 'stack_along_dimension', 'stack_into',
    'transpose', 'unsqueeze',
    # arithmetic
    'add', 'subtract', 'multiply', 'divide', 'remainder', 'ieee_remainder',
    'copy_sign', 'hypot', 'atan2', 'atan2_pi', 'pow', 'fused_multiply_add',
    'multiply_add', 'add_multiply', 'scale_b', 'negate', 'abs', 'reciprocal',
    'reciprocal_sqrt', 'square',
    # transcendental
    'exp', 'exp2', 'exp10', 'exp_m1', 'exp2_m1', 'exp10_m1', 'log', 'log2',
    'log10', 'log_p1', 'log2_p1', 'log10_p1', 'log_base', 'sqrt', 'cbrt',
    'root_n', 'sin', 'cos', 'tan', 'asin', 'acos', 'atan', 'sin_cos',
    'sin_pi', 'cos_pi', 'tan_pi', 'asin_pi', 'acos_pi', 'atan_pi', 'sinh',
    'cosh', 'tanh', 'asinh', 'acosh', 'atanh', 'floor', 'ceiling', 'round',
    'truncate', 'degrees_to_radians', 'radians_to_degrees', 'ilogb',
    # reductions
    'sum', 'product', 'sum_of_magnitudes', 'sum_of_squares', 'norm',
    'average', 'dot', 'distance', 'distance_squared', 'cosine_similarity',
    # extrema
    'max', 'min', 'max_magnitude', 'min_magnitude', 'max_number',
    'min_number', 'max_magnitude_number', 'min_magnitude_number',
    'index_of_max', 'index_of_min', 'index_of_max_magnitude',
    'index_of_min_magnitude', 'maximum', 'minimum', 'maximum_number',
    'minimum_number', 'maximum_magnitude', 'minimum_magnitude',
    'maximum_magnitude_number', 'minimum_magnitude_number', 'clamp',
    # activations
    'sigmoid', 'softmax',
    # comparisons
    'equals', 'equals_all', 'equals_any', 'greater_than', 'greater_than_all',
    'greater_than_any', 'greater_than_or_equal', 'greater_than_or_equal_all',
    'greater_than_or_equal_any', 'less_than', 'less_than_all',
    'less_than_any', 'less_than_or_equal', 'less_than_or_equal_all',
    'less_than_or_equal_any', 'is_nan', 'is_finite',
    # bitwise
    'bitwise_and', 'bitwise_or', 'xor', 'ones_complement', 'shift_left',
    'shift_right_arithmetic', 'shift_right_logical', 'pop_count',
    'leading_zero_count', 'trailing_zero_count',
    # conversion
    'convert_checked', 'convert_saturating', 'convert_truncating',
    # random
    'fill_uniform_distribution', 'fill_gaussian_normal_distribution',
]
