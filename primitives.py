# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""primitives: shape-unaware numeric kernels over flat sequences.

Every kernel reads one or more flat sequences (ndarray, list,
``array.array`` ...) and writes a flat result. Element arithmetic is
routed through the :class:`~tensorspan.scalar.ScalarOps` table of the
first sequence operand, and results are stored in that operand's dtype
(comparisons and the ``is_*`` predicates produce ``bool``).

Output convention: every elementwise kernel takes ``destination=None``.
Without one a new array is allocated and returned; with one the first
``n`` slots are written and the destination is returned. Operands and
the destination are validated before anything is written:

* sequence operands of different lengths raise ``ShapeMismatchError``;
* a destination shorter than the input raises ``CapacityError``.

Results are computed into a temporary and then stored, so a destination
may alias one of the inputs.
"""
from __future__ import annotations

import math

import numpy as np

from . import config as _config
from .dtype import resolve_dtype
from .errors import CapacityError, ShapeMismatchError
from .scalar import bit_view_dtype, scalar_ops, signed_bit_view_dtype


# ──────────────────────── Operand plumbing ────────────────────────────

def _is_scalar(value) -> bool:
    return np.ndim(value) == 0


def _as_array(x) -> np.ndarray:
    """1-D ndarray over a flat sequence; ndarrays are not copied."""
    arr = np.asarray(x)
    if arr.ndim != 1:
        if arr.ndim == 0:
            raise TypeError("Expected a sequence, got a scalar")
        arr = arr.reshape(-1)
    return arr


def _check_length(expected: int, other: np.ndarray) -> None:
    if other.shape[0] != expected:
        raise ShapeMismatchError(
            f"Span lengths must match: {expected} != {other.shape[0]}."
        )


def _check_destination(destination, n: int) -> None:
    if destination is not None and len(destination) < n:
        raise CapacityError(
            "Destination is too short.", required=n, available=len(destination),
        )


def _store(result, destination, n: int, dtype):
    with np.errstate(all='ignore'):
        if destination is None:
            out = np.empty(n, dtype=dtype)
            out[...] = result
            return out
        if isinstance(destination, np.ndarray):
            destination[:n] = result
        else:
            values = np.broadcast_to(np.asarray(result).astype(dtype), (n,))
            destination[:n] = values.tolist()
    return destination


def _operands(*values):
    """Resolve a mix of sequences and scalars.

    Returns ``(operands, n, ops, dtype)``: sequences become 1-D arrays,
    scalars are cast to the element type of the first sequence, whose
    length ``n`` every other sequence must share.
    """
    first = next((v for v in values if not _is_scalar(v)), None)
    if first is None:
        raise TypeError("At least one operand must be a sequence")
    first = _as_array(first)
    n = first.shape[0]
    ops = scalar_ops(first.dtype)
    resolved = []
    for v in values:
        if _is_scalar(v):
            resolved.append(ops.cast_scalar(v))
        else:
            arr = _as_array(v)
            _check_length(n, arr)
            resolved.append(arr)
    return resolved, n, ops, first.dtype


def _unary_kernel(name: str, doc: str):
    def kernel(x, destination=None):
        x = _as_array(x)
        n = x.shape[0]
        _check_destination(destination, n)
        return _store(getattr(scalar_ops(x.dtype), name)(x), destination, n, x.dtype)
    kernel.__name__ = kernel.__qualname__ = name
    kernel.__doc__ = doc
    return kernel


def _binary_kernel(name: str, doc: str):
    def kernel(x, y, destination=None):
        (x, y), n, ops, dt = _operands(x, y)
        _check_destination(destination, n)
        return _store(getattr(ops, name)(x, y), destination, n, dt)
    kernel.__name__ = kernel.__qualname__ = name
    kernel.__doc__ = doc
    return kernel


# ──────────────────────── Arithmetic ──────────────────────────────────

add = _binary_kernel('add', "Elementwise ``x + y``.")
subtract = _binary_kernel('subtract', "Elementwise ``x - y``.")
multiply = _binary_kernel('multiply', "Elementwise ``x * y``.")
divide = _binary_kernel(
    'divide',
    "Elementwise ``x / y``; integers truncate toward zero and reject a zero divisor.",
)
remainder = _binary_kernel(
    'remainder', "Elementwise remainder whose sign follows the dividend.",
)
ieee_remainder = _binary_kernel(
    'ieee_remainder', "``x - y * round_half_even(x / y)``, elementwise.",
)
copy_sign = _binary_kernel('copy_sign', "Magnitude of ``x`` with the sign of ``y``.")
hypot = _binary_kernel('hypot', "Elementwise ``sqrt(x*x + y*y)`` without overflow.")
atan2 = _binary_kernel('atan2', "Elementwise ``atan2(y, x)`` with ``y`` first.")
atan2_pi = _binary_kernel('atan2_pi', "``atan2(y, x) / pi``, elementwise.")
pow = _binary_kernel('pow', "Elementwise ``x ** y``.")

negate = _unary_kernel('negate', "Elementwise ``-x``.")
abs = _unary_kernel('abs', "Elementwise absolute value.")
reciprocal = _unary_kernel('reciprocal', "Elementwise ``1 / x``.")
reciprocal_sqrt = _unary_kernel('reciprocal_sqrt', "Elementwise ``1 / sqrt(x)``.")
square = _unary_kernel('square', "Elementwise ``x * x``.")


def fused_multiply_add(x, y, addend, destination=None):
    """Elementwise ``x * y + addend``; any operand after ``x`` may be a scalar."""
    (x, y, addend), n, ops, dt = _operands(x, y, addend)
    _check_destination(destination, n)
    return _store(ops.fused_multiply_add(x, y, addend), destination, n, dt)


def multiply_add(x, y, addend, destination=None):
    return fused_multiply_add(x, y, addend, destination)


def add_multiply(x, y, multiplier, destination=None):
    """Elementwise ``(x + y) * multiplier``."""
    (x, y, multiplier), n, ops, dt = _operands(x, y, multiplier)
    _check_destination(destination, n)
    return _store(ops.multiply(ops.add(x, y), multiplier), destination, n, dt)


def scale_b(x, n, destination=None):
    """Elementwise ``x * 2**n``; either operand may be a scalar."""
    if _is_scalar(x):
        if _is_scalar(n):
            raise TypeError("At least one operand must be a sequence")
        x = np.full(_as_array(n).shape[0], x, dtype=np.result_type(x))
    x = _as_array(x)
    count = x.shape[0]
    if not _is_scalar(n):
        n = _as_array(n)
        _check_length(count, n)
    _check_destination(destination, count)
    return _store(scalar_ops(x.dtype).scale_b(x, n), destination, count, x.dtype)


# ──────────────────────── Transcendental ──────────────────────────────

exp = _unary_kernel('exp', "Elementwise ``e ** x``.")
exp2 = _unary_kernel('exp2', "Elementwise ``2 ** x``.")
exp10 = _unary_kernel('exp10', "Elementwise ``10 ** x``.")
exp_m1 = _unary_kernel('exp_m1', "Elementwise ``e ** x - 1``.")
exp2_m1 = _unary_kernel('exp2_m1', "Elementwise ``2 ** x - 1``.")
exp10_m1 = _unary_kernel('exp10_m1', "Elementwise ``10 ** x - 1``.")
log = _unary_kernel('log', "Elementwise natural logarithm.")
log2 = _unary_kernel('log2', "Elementwise base-2 logarithm.")
log10 = _unary_kernel('log10', "Elementwise base-10 logarithm.")
log_p1 = _unary_kernel('log_p1', "Elementwise ``log(x + 1)``.")
log2_p1 = _unary_kernel('log2_p1', "Elementwise ``log2(x + 1)``.")
log10_p1 = _unary_kernel('log10_p1', "Elementwise ``log10(x + 1)``.")
sqrt = _unary_kernel('sqrt', "Elementwise square root.")
cbrt = _unary_kernel('cbrt', "Elementwise cube root.")
sin = _unary_kernel('sin', "Elementwise sine.")
cos = _unary_kernel('cos', "Elementwise cosine.")
tan = _unary_kernel('tan', "Elementwise tangent.")
asin = _unary_kernel('asin', "Elementwise arcsine.")
acos = _unary_kernel('acos', "Elementwise arccosine.")
atan = _unary_kernel('atan', "Elementwise arctangent.")
sin_pi = _unary_kernel('sin_pi', "Elementwise ``sin(pi * x)``, exact at multiples of 1/2.")
cos_pi = _unary_kernel('cos_pi', "Elementwise ``cos(pi * x)``, exact at multiples of 1/2.")
tan_pi = _unary_kernel('tan_pi', "Elementwise ``tan(pi * x)``.")
asin_pi = _unary_kernel('asin_pi', "Elementwise ``asin(x) / pi``.")
acos_pi = _unary_kernel('acos_pi', "Elementwise ``acos(x) / pi``.")
atan_pi = _unary_kernel('atan_pi', "Elementwise ``atan(x) / pi``.")
sinh = _unary_kernel('sinh', "Elementwise hyperbolic sine.")
cosh = _unary_kernel('cosh', "Elementwise hyperbolic cosine.")
tanh = _unary_kernel('tanh', "Elementwise hyperbolic tangent.")
asinh = _unary_kernel('asinh', "Elementwise inverse hyperbolic sine.")
acosh = _unary_kernel('acosh', "Elementwise inverse hyperbolic cosine.")
atanh = _unary_kernel('atanh', "Elementwise inverse hyperbolic tangent.")
floor = _unary_kernel('floor', "Round toward negative infinity.")
ceiling = _unary_kernel('ceiling', "Round toward positive infinity.")
truncate = _unary_kernel('truncate', "Round toward zero.")
degrees_to_radians = _unary_kernel('degrees_to_radians', "Convert degrees to radians.")
radians_to_degrees = _unary_kernel('radians_to_degrees', "Convert radians to degrees.")


def log_base(x, base, destination=None):
    """Logarithm of ``x`` in ``base`` (scalar or per-element)."""
    (x, base), n, ops, dt = _operands(x, base)
    _check_destination(destination, n)
    return _store(ops.log_base(x, base), destination, n, dt)


def root_n(x, n: int, destination=None):
    """Elementwise ``n``-th root; odd roots of negatives stay real."""
    x = _as_array(x)
    count = x.shape[0]
    _check_destination(destination, count)
    return _store(scalar_ops(x.dtype).root_n(x, int(n)), destination, count, x.dtype)


def round(x, digits: int = 0, destination=None):
    """Round half to even at ``digits`` decimal places."""
    x = _as_array(x)
    n = x.shape[0]
    _check_destination(destination, n)
    return _store(scalar_ops(x.dtype).round(x, int(digits)), destination, n, x.dtype)


def sin_cos(x, sin_destination=None, cos_destination=None):
    """Sine and cosine in one pass; returns ``(sin, cos)``."""
    x = _as_array(x)
    n = x.shape[0]
    _check_destination(sin_destination, n)
    _check_destination(cos_destination, n)
    ops = scalar_ops(x.dtype)
    s, c = ops.sin(x), ops.cos(x)
    return (_store(s, sin_destination, n, x.dtype),
            _store(c, cos_destination, n, x.dtype))


def ilogb(x, destination=None):
    """Unbiased binary exponent of each element, as ``int32``.

    Zero maps to ``int32.min``; NaN and infinities map to ``int32.max``.
    """
    x = _as_array(x)
    n = x.shape[0]
    _check_destination(destination, n)
    return _store(scalar_ops(x.dtype).ilogb(x), destination, n, np.int32)


# ──────────────────────── Reductions ──────────────────────────────────

def _require_non_empty(x: np.ndarray) -> None:
    if x.shape[0] == 0:
        raise ValueError("Span must not be empty.")


def _reduce_sum(ops, values):
    with np.errstate(all='ignore'):
        return ops.cast_scalar(np.sum(values, dtype=ops.dtype))


def sum(x):
    """Sum of the elements; ``0`` for an empty input."""
    x = _as_array(x)
    return _reduce_sum(scalar_ops(x.dtype), x)


def product(x):
    """Product of the elements; an empty input yields ``0``."""
    x = _as_array(x)
    ops = scalar_ops(x.dtype)
    if x.shape[0] == 0:
        return ops.zero
    with np.errstate(all='ignore'):
        return ops.cast_scalar(np.prod(x, dtype=ops.dtype))


def sum_of_magnitudes(x):
    x = _as_array(x)
    ops = scalar_ops(x.dtype)
    return _reduce_sum(ops, ops.abs(x))


def sum_of_squares(x):
    x = _as_array(x)
    ops = scalar_ops(x.dtype)
    return _reduce_sum(ops, ops.square(x))


def norm(x):
    """Euclidean norm, ``sqrt(sum_of_squares(x))``."""
    x = _as_array(x)
    ops = scalar_ops(x.dtype)
    return ops.cast_scalar(ops.sqrt(sum_of_squares(x)))


def average(x):
    """Arithmetic mean; raises ``ValueError`` on an empty input."""
    x = _as_array(x)
    _require_non_empty(x)
    ops = scalar_ops(x.dtype)
    total, count = sum(x), x.shape[0]
    if ops.kind in ('signed', 'unsigned'):
        wide = np.int64 if ops.kind == 'signed' else np.uint64
        return ops.cast_scalar(ops.divide(np.asarray(total, dtype=wide),
                                          np.asarray(count, dtype=wide)))
    return ops.cast_scalar(ops.divide(total, count))


def dot(x, y):
    """Sum of the pairwise products."""
    (x, y), _, ops, _ = _operands(_as_array(x), _as_array(y))
    return _reduce_sum(ops, ops.multiply(x, y))


def distance_squared(x, y):
    (x, y), _, ops, _ = _operands(_as_array(x), _as_array(y))
    return _reduce_sum(ops, ops.square(ops.subtract(x, y)))


def distance(x, y):
    """Euclidean distance between two points."""
    x = _as_array(x)
    ops = scalar_ops(x.dtype)
    return ops.cast_scalar(ops.sqrt(distance_squared(x, y)))


def cosine_similarity(x, y):
    """``dot(x, y) / (norm(x) * norm(y))``.

    Integer inputs are evaluated in float64 and return a float64.
    """
    x, y = _as_array(x), _as_array(y)
    _check_length(x.shape[0], y)
    _require_non_empty(x)
    if x.dtype.kind in 'iub':
        x, y = x.astype(np.float64), y.astype(np.float64)
    ops = scalar_ops(x.dtype)
    with np.errstate(all='ignore'):
        denominator = ops.multiply(ops.sqrt(sum_of_squares(x)), ops.sqrt(sum_of_squares(y)))
        return ops.cast_scalar(ops.divide(dot(x, y), denominator))


# ──────────────────────── Extrema ─────────────────────────────────────

def _first_nan(ops, x: np.ndarray):
    nan = ops.is_nan(x)
    if nan.any():
        return int(np.argmax(nan))
    return None


def _index_of(x: np.ndarray, magnitude: bool, largest: bool) -> int:
    _require_non_empty(x)
    ops = scalar_ops(x.dtype)
    hit = _first_nan(ops, x)
    if hit is not None:
        return hit
    keys = ops.magnitude(x) if magnitude else x
    if largest:
        if not magnitude and ops.kind == 'complex':
            raise TypeError(f"{x.dtype} values are not ordered")
        return int(np.argmax(keys))
    if not magnitude and ops.kind == 'complex':
        raise TypeError(f"{x.dtype} values are not ordered")
    return int(np.argmin(keys))


def index_of_max(x) -> int:
    """Index of the first largest element; a NaN wins at its first position."""
    return _index_of(_as_array(x), magnitude=False, largest=True)


def index_of_min(x) -> int:
    return _index_of(_as_array(x), magnitude=False, largest=False)


def index_of_max_magnitude(x) -> int:
    return _index_of(_as_array(x), magnitude=True, largest=True)


def index_of_min_magnitude(x) -> int:
    return _index_of(_as_array(x), magnitude=True, largest=False)


def max(x):
    """Largest element; NaN propagates."""
    x = _as_array(x)
    return x[index_of_max(x)]


def min(x):
    """Smallest element; NaN propagates."""
    x = _as_array(x)
    return x[index_of_min(x)]


def max_magnitude(x):
    x = _as_array(x)
    return x[index_of_max_magnitude(x)]


def min_magnitude(x):
    x = _as_array(x)
    return x[index_of_min_magnitude(x)]


def _without_nan(x: np.ndarray) -> np.ndarray:
    """Non-NaN elements; an all-NaN input is returned as is."""
    _require_non_empty(x)
    keep = ~scalar_ops(x.dtype).is_nan(x)
    if not keep.any():
        return x
    return x[keep]


def max_number(x):
    """Largest element, ignoring NaN unless every element is NaN."""
    return max(_without_nan(_as_array(x)))


def min_number(x):
    return min(_without_nan(_as_array(x)))


def max_magnitude_number(x):
    return max_magnitude(_without_nan(_as_array(x)))


def min_magnitude_number(x):
    return min_magnitude(_without_nan(_as_array(x)))


maximum = _binary_kernel('maximum', "Elementwise larger value; NaN propagates.")
minimum = _binary_kernel('minimum', "Elementwise smaller value; NaN propagates.")
maximum_number = _binary_kernel('maximum_number', "Elementwise larger value, ignoring NaN.")
minimum_number = _binary_kernel('minimum_number', "Elementwise smaller value, ignoring NaN.")
maximum_magnitude = _binary_kernel(
    'maximum_magnitude', "Elementwise value with the larger magnitude.",
)
minimum_magnitude = _binary_kernel(
    'minimum_magnitude', "Elementwise value with the smaller magnitude.",
)
maximum_magnitude_number = _binary_kernel(
    'maximum_magnitude_number', "Larger magnitude, ignoring NaN.",
)
minimum_magnitude_number = _binary_kernel(
    'minimum_magnitude_number', "Smaller magnitude, ignoring NaN.",
)


def clamp(x, min_value, max_value, destination=None):
    """Limit each element to ``[min_value, max_value]``.

    Bounds are scalars or per-element sequences; a lower bound above its
    upper bound raises ``ValueError``.
    """
    (x, lo, hi), n, ops, dt = _operands(x, min_value, max_value)
    if np.any(ops.greater_than(lo, hi)):
        raise ValueError("min_value must not exceed max_value")
    _check_destination(destination, n)
    return _store(ops.minimum(ops.maximum(x, lo), hi), destination, n, dt)


# ──────────────────────── Activations ─────────────────────────────────

def sigmoid(x, destination=None):
    """Elementwise ``1 / (1 + exp(-x))``."""
    x = _as_array(x)
    n = x.shape[0]
    _check_destination(destination, n)
    ops = scalar_ops(x.dtype)
    result = ops.reciprocal(ops.add(ops.one, ops.exp(ops.negate(x))))
    return _store(result, destination, n, x.dtype)


def softmax(x, destination=None):
    """``exp(x - max(x)) / sum(exp(x - max(x)))``; an empty input is a no-op."""
    x = _as_array(x)
    n = x.shape[0]
    _check_destination(destination, n)
    if n == 0:
        return _store(x, destination, 0, x.dtype)
    ops = scalar_ops(x.dtype)
    shifted = ops.exp(ops.subtract(x, max(x)))
    with np.errstate(all='ignore'):
        total = np.sum(shifted)
    return _store(ops.divide(shifted, total), destination, n, x.dtype)


# ──────────────────────── Comparisons ─────────────────────────────────

def _comparison(name: str, doc: str):
    def kernel(x, y, destination=None):
        (x, y), n, ops, _ = _operands(x, y)
        _check_destination(destination, n)
        return _store(getattr(ops, name)(x, y), destination, n, np.bool_)

    def all_kernel(x, y) -> bool:
        (x, y), _, ops, _ = _operands(x, y)
        return bool(np.all(getattr(ops, name)(x, y)))

    def any_kernel(x, y) -> bool:
        (x, y), _, ops, _ = _operands(x, y)
        return bool(np.any(getattr(ops, name)(x, y)))

    for fn, suffix, summary in (
        (kernel, '', doc),
        (all_kernel, '_all', f"True when every pair satisfies ``{name}``."),
        (any_kernel, '_any', f"True when any pair satisfies ``{name}``."),
    ):
        fn.__name__ = fn.__qualname__ = name + suffix
        fn.__doc__ = summary
    return kernel, all_kernel, any_kernel


equals, equals_all, equals_any = _comparison(
    'equals', "Elementwise ``x == y`` as ``bool``.")
greater_than, greater_than_all, greater_than_any = _comparison(
    'greater_than', "Elementwise ``x > y`` as ``bool``.")
greater_than_or_equal, greater_than_or_equal_all, greater_than_or_equal_any = _comparison(
    'greater_than_or_equal', "Elementwise ``x >= y`` as ``bool``.")
less_than, less_than_all, less_than_any = _comparison(
    'less_than', "Elementwise ``x < y`` as ``bool``.")
less_than_or_equal, less_than_or_equal_all, less_than_or_equal_any = _comparison(
    'less_than_or_equal', "Elementwise ``x <= y`` as ``bool``.")


def is_nan(x, destination=None):
    x = _as_array(x)
    n = x.shape[0]
    _check_destination(destination, n)
    return _store(scalar_ops(x.dtype).is_nan(x), destination, n, np.bool_)


def is_finite(x, destination=None):
    x = _as_array(x)
    n = x.shape[0]
    _check_destination(destination, n)
    return _store(scalar_ops(x.dtype).is_finite(x), destination, n, np.bool_)


# ──────────────────────── Bitwise ─────────────────────────────────────
#
# Elements are reinterpreted as same-width unsigned integers, so the
# kernels act on the raw bits of any 1/2/4/8-byte element type.

_POPCOUNT = np.array([bin(i).count('1') for i in range(256)], dtype=np.uint8)


def _bits(x: np.ndarray, operation: str) -> np.ndarray:
    return np.ascontiguousarray(x).view(bit_view_dtype(x.dtype.itemsize, operation))


def _scalar_bits(value, dt: np.dtype, operation: str):
    arr = np.asarray(scalar_ops(dt).cast_scalar(value), dtype=dt).reshape(1)
    return _bits(arr, operation)[0]


def _from_bits(bits: np.ndarray, dt: np.dtype) -> np.ndarray:
    if dt == np.bool_:
        bits = bits & np.uint8(1)
    return bits.view(dt)


def _bitwise(ufunc, name: str, doc: str):
    def kernel(x, y, destination=None):
        (x, y), n, _, dt = _operands(x, y)
        xb = _bits(x, name)
        yb = _scalar_bits(y, dt, name) if _is_scalar(y) else _bits(np.asarray(y, dtype=dt), name)
        _check_destination(destination, n)
        return _store(_from_bits(ufunc(xb, yb), dt), destination, n, dt)
    kernel.__name__ = kernel.__qualname__ = name
    kernel.__doc__ = doc
    return kernel


bitwise_and = _bitwise(np.bitwise_and, 'bitwise_and', "Raw-bit ``x & y``.")
bitwise_or = _bitwise(np.bitwise_or, 'bitwise_or', "Raw-bit ``x | y``.")
xor = _bitwise(np.bitwise_xor, 'xor', "Raw-bit ``x ^ y``.")


def ones_complement(x, destination=None):
    """Raw-bit ``~x``."""
    x = _as_array(x)
    n = x.shape[0]
    bits = _bits(x, 'ones_complement')
    _check_destination(destination, n)
    return _store(_from_bits(np.invert(bits), x.dtype), destination, n, x.dtype)


def _shift(x, shift_amount: int, operation: str, signed: bool, left: bool, destination):
    x = _as_array(x)
    n = x.shape[0]
    bits = _bits(x, operation)
    width = bits.dtype.itemsize * 8
    if signed:
        bits = bits.view(signed_bit_view_dtype(x.dtype.itemsize, operation))
    amount = bits.dtype.type(int(shift_amount) % width)
    _check_destination(destination, n)
    shifted = np.left_shift(bits, amount) if left else np.right_shift(bits, amount)
    unsigned = shifted.view(bit_view_dtype(x.dtype.itemsize, operation))
    return _store(_from_bits(unsigned, x.dtype), destination, n, x.dtype)


def shift_left(x, shift_amount: int, destination=None):
    """Shift the raw bits left; the amount is taken modulo the bit width."""
    return _shift(x, shift_amount, 'shift_left', False, True, destination)


def shift_right_arithmetic(x, shift_amount: int, destination=None):
    """Shift the raw bits right, replicating the sign bit."""
    return _shift(x, shift_amount, 'shift_right_arithmetic', True, False, destination)


def shift_right_logical(x, shift_amount: int, destination=None):
    """Shift the raw bits right, filling with zeros."""
    return _shift(x, shift_amount, 'shift_right_logical', False, False, destination)


def _count_dtype(dt: np.dtype) -> np.dtype:
    if dt.kind in 'iu':
        return dt
    return bit_view_dtype(dt.itemsize)


def _leading_zeros(bits: np.ndarray) -> np.ndarray:
    """Count leading zero bits by binary search over halves of the word."""
    ut = bits.dtype.type
    width = bits.dtype.itemsize * 8
    v = bits.copy()
    count = np.zeros(v.shape, dtype=np.int64)
    step = width // 2
    while step:
        empty = (v >> ut(width - step)) == 0
        count += np.where(empty, step, 0)
        v = np.where(empty, v << ut(step), v).astype(bits.dtype)
        step //= 2
    count += ((v >> ut(width - 1)) == 0).astype(np.int64)
    return count


def pop_count(x, destination=None):
    """Number of set bits in each element."""
    x = _as_array(x)
    n = x.shape[0]
    bits = _bits(x, 'pop_count')
    _check_destination(destination, n)
    per_byte = _POPCOUNT[bits.view(np.uint8).reshape(n, x.dtype.itemsize)]
    counts = per_byte.sum(axis=1, dtype=np.int64)
    return _store(counts, destination, n, _count_dtype(x.dtype))


def leading_zero_count(x, destination=None):
    """Number of zero bits above the highest set bit; the bit width for zero."""
    x = _as_array(x)
    n = x.shape[0]
    bits = _bits(x, 'leading_zero_count')
    _check_destination(destination, n)
    return _store(_leading_zeros(bits), destination, n, _count_dtype(x.dtype))


def trailing_zero_count(x, destination=None):
    """Number of zero bits below the lowest set bit; the bit width for zero."""
    x = _as_array(x)
    n = x.shape[0]
    bits = _bits(x, 'trailing_zero_count')
    _check_destination(destination, n)
    width = bits.dtype.itemsize * 8
    ut = bits.dtype.type
    with np.errstate(all='ignore'):
        lowest = bits & (np.invert(bits) + ut(1))
    counts = np.where(bits == 0, width, (width - 1) - _leading_zeros(lowest))
    return _store(counts, destination, n, _count_dtype(x.dtype))


# ──────────────────────── Conversion ──────────────────────────────────

def _conversion_target(dtype, destination) -> np.dtype:
    if dtype is not None:
        return resolve_dtype(dtype)
    if isinstance(destination, np.ndarray):
        return destination.dtype
    raise TypeError("A target dtype is required when the destination is not an ndarray")


def _real_source(x: np.ndarray, target: np.dtype, checked: bool) -> np.ndarray:
    """Drop the imaginary part when converting complex to a real type."""
    if x.dtype.kind != 'c' or target.kind == 'c':
        return x
    if checked and np.any(x.imag != 0):
        raise OverflowError(f"Complex values with an imaginary part cannot convert to {target}")
    return x.real


def _float_to_int_bounds(target: np.dtype) -> tuple[float, float]:
    """Inclusive lower and exclusive upper float bound of an integer type."""
    info = np.iinfo(target)
    return float(info.min), float(info.max) + 1.0


def convert_checked(x, dtype=None, destination=None):
    """Convert to ``dtype``, raising ``OverflowError`` on any unrepresentable value."""
    target = _conversion_target(dtype, destination)
    x = _real_source(_as_array(x), target, checked=True)
    n = x.shape[0]
    _check_destination(destination, n)
    if target.kind in 'iu' and n:
        if x.dtype.kind == 'f':
            if not np.all(np.isfinite(x)):
                raise OverflowError(f"NaN or infinity cannot convert to {target}")
            lo, hi = _float_to_int_bounds(target)
            t = np.trunc(x)
            if np.any(t < lo) or np.any(t >= hi):
                raise OverflowError(f"Value out of range for {target}")
        elif x.dtype.kind in 'iu':
            info = np.iinfo(target)
            if int(x.min()) < info.min or int(x.max()) > info.max:
                raise OverflowError(f"Value out of range for {target}")
    elif target.kind == 'f' and x.dtype.kind in 'fiu' and n:
        with np.errstate(all='ignore'):
            converted = x.astype(target)
        if np.any(np.isinf(converted) & np.isfinite(x)):
            raise OverflowError(f"Value out of range for {target}")
    with np.errstate(all='ignore'):
        return _store(x.astype(target), destination, n, target)


def convert_saturating(x, dtype=None, destination=None):
    """Convert to ``dtype``, clamping to its range; NaN becomes zero."""
    target = _conversion_target(dtype, destination)
    x = _real_source(_as_array(x), target, checked=False)
    n = x.shape[0]
    _check_destination(destination, n)
    with np.errstate(all='ignore'):
        if target.kind in 'iu' and x.dtype.kind == 'f':
            info = np.iinfo(target)
            lo, hi = _float_to_int_bounds(target)
            t = np.where(np.isnan(x), 0.0, np.trunc(x.astype(np.float64)))
            below_hi = np.nextafter(hi, 0.0)
            result = np.clip(t, lo, below_hi).astype(target)
            result[t >= hi] = info.max
            result[t < lo] = info.min
        elif target.kind in 'iu' and x.dtype.kind in 'iub':
            info = np.iinfo(target)
            result = x.astype(target)
            if x.dtype.kind != 'b':
                result[x > info.max] = info.max
                result[x < info.min] = info.min
        elif target.kind == 'f' and x.dtype.kind in 'fiu':
            result = x.astype(target)
            overflow = np.isinf(result) & np.isfinite(x)
            limit = np.finfo(target).max
            result[overflow] = np.where(x[overflow] < 0, -limit, limit)
        else:
            result = x.astype(target)
    return _store(result, destination, n, target)


def convert_truncating(x, dtype=None, destination=None):
    """C-style conversion: floats truncate toward zero and integers wrap."""
    target = _conversion_target(dtype, destination)
    x = _real_source(_as_array(x), target, checked=False)
    n = x.shape[0]
    _check_destination(destination, n)
    with np.errstate(all='ignore'):
        if target.kind in 'iu' and x.dtype.kind == 'f':
            modulus = 2.0 ** (target.itemsize * 8)
            t = np.trunc(x.astype(np.float64))
            t = np.where(np.isfinite(t), t, 0.0)
            wrapped = np.fmod(t, modulus)
            wrapped = np.where(wrapped < 0, wrapped + modulus, wrapped)
            result = wrapped.astype(np.uint64).astype(target)
        else:
            result = x.astype(target)
    return _store(result, destination, n, target)


# ──────────────────────── Random fills ────────────────────────────────

def fill_uniform_distribution(destination, low=0.0, high=1.0):
    """Fill ``destination`` with samples from ``U[low, high)``."""
    n = len(destination)
    samples = _config.get_rng().uniform(low, high, n)
    dt = destination.dtype if isinstance(destination, np.ndarray) else np.float64
    return _store(samples, destination, n, dt)


def fill_gaussian_normal_distribution(destination, mean=0.0, std=1.0):
    """Fill ``destination`` with normal samples drawn by the Box-Muller transform."""
    n = len(destination)
    rng = _config.get_rng()
    u1 = 1.0 - rng.random(n)
    u2 = rng.random(n)
    z = np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * math.pi * u2)
    dt = destination.dtype if isinstance(destination, np.ndarray) else np.float64
    return _store(mean + std * z, destination, n, dt)


__all__ = sorted(
    name for name, value in list(globals().items())
    if callable(value) and not name.startswith('_')
    and getattr(value, '__module__', None) == __name__
)
