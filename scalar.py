# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Per-element-type numeric capability tables.

Every kernel in :mod:`tensorspan.primitives` routes element arithmetic
through a :class:`ScalarOps` table resolved once per dtype by
:func:`scalar_ops`. The tables form a closed family, one per element
category:

* :class:`FloatingOps`: IEEE float16/32/64, NaN-aware.
* :class:`SignedIntegerOps` and :class:`UnsignedIntegerOps`: integer
  division and remainder truncate toward zero and reject a zero divisor;
  transcendental functions evaluate in float64 and are cast back.
* :class:`ComplexOps`: arithmetic and transcendental functions only;
  ordering raises ``TypeError``.
* :class:`BoolOps`: comparisons only.

Methods accept numpy arrays or numpy scalars and return numpy values;
the caller is responsible for storing results in the element dtype.
"""
from __future__ import annotations

import functools
import math

import numpy as np

from .dtype import dtype as Dtype, resolve_dtype
from .errors import UnsupportedElementWidthError

_LN2 = math.log(2.0)
_LN10 = math.log(10.0)
_INT32_MIN = np.iinfo(np.int32).min
_INT32_MAX = np.iinfo(np.int32).max


def _quiet(fn):
    """Evaluate with floating-point warnings suppressed (IEEE semantics)."""
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        with np.errstate(all='ignore'):
            return fn(*args, **kwargs)
    return wrapper


class ScalarOps:
    """Numeric capability table for one element type."""

    kind = 'generic'

    def __init__(self, np_dtype: np.dtype):
        self.dtype = np.dtype(np_dtype)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.dtype})"

    # ------------------------------------------------------------------ #
    #  Constants & conversion                                            #
    # ------------------------------------------------------------------ #

    @property
    def zero(self):
        return self.dtype.type(0)

    @property
    def one(self):
        return self.dtype.type(1)

    @property
    def default(self):
        """Value a cleared element takes."""
        return self.zero

    @property
    def pi(self):
        return self.cast_scalar(math.pi)

    @property
    def min_value(self):
        raise TypeError(f"{self.dtype} has no finite minimum")

    @property
    def max_value(self):
        raise TypeError(f"{self.dtype} has no finite maximum")

    @property
    def itemsize(self) -> int:
        return self.dtype.itemsize

    @property
    def bit_width(self) -> int:
        return self.dtype.itemsize * 8

    @_quiet
    def cast(self, values) -> np.ndarray:
        """Convert ``values`` to an array of this element type (C-style cast)."""
        return np.asarray(values).astype(self.dtype, copy=False)

    def cast_scalar(self, value):
        """Convert one Python/numpy scalar to this element type."""
        return self.cast(value)[()]

    # ------------------------------------------------------------------ #
    #  Arithmetic                                                        #
    # ------------------------------------------------------------------ #

    @_quiet
    def add(self, x, y):
        return np.add(x, y)

    @_quiet
    def subtract(self, x, y):
        return np.subtract(x, y)

    @_quiet
    def multiply(self, x, y):
        return np.multiply(x, y)

    @_quiet
    def divide(self, x, y):
        return np.true_divide(x, y)

    @_quiet
    def remainder(self, x, y):
        # Sign follows the dividend, like C's fmod.
        return np.fmod(x, y)

    @_quiet
    def ieee_remainder(self, x, y):
        return np.subtract(x, np.multiply(y, np.rint(np.true_divide(x, y))))

    @_quiet
    def negate(self, x):
        return np.negative(x)

    @_quiet
    def abs(self, x):
        return np.abs(x)

    def magnitude(self, x):
        """Absolute value used by the *magnitude* comparisons."""
        return self.abs(x)

    @_quiet
    def reciprocal(self, x):
        return self.divide(self.one, x)

    @_quiet
    def square(self, x):
        return np.multiply(x, x)

    @_quiet
    def fused_multiply_add(self, x, y, addend):
        return np.add(np.multiply(x, y), addend)

    @_quiet
    def copy_sign(self, x, sign):
        return np.copysign(x, sign)

    @_quiet
    def hypot(self, x, y):
        return np.hypot(x, y)

    @_quiet
    def scale_b(self, x, n):
        return np.ldexp(x, np.asarray(n, dtype=np.int32))

    # ------------------------------------------------------------------ #
    #  Comparisons                                                       #
    # ------------------------------------------------------------------ #

    def equals(self, x, y):
        return np.equal(x, y)

    def less_than(self, x, y):
        return np.less(x, y)

    def less_than_or_equal(self, x, y):
        return np.less_equal(x, y)

    def greater_than(self, x, y):
        return np.greater(x, y)

    def greater_than_or_equal(self, x, y):
        return np.greater_equal(x, y)

    def is_nan(self, x):
        return np.zeros(np.shape(x), dtype=np.bool_)

    def is_finite(self, x):
        return np.ones(np.shape(x), dtype=np.bool_)

    def is_negative(self, x):
        return np.less(x, 0)

    @_quiet
    def maximum(self, x, y):
        return np.maximum(x, y)

    @_quiet
    def minimum(self, x, y):
        return np.minimum(x, y)

    @_quiet
    def maximum_number(self, x, y):
        return np.fmax(x, y)

    @_quiet
    def minimum_number(self, x, y):
        return np.fmin(x, y)

    @_quiet
    def maximum_magnitude(self, x, y):
        ax, ay = self.magnitude(x), self.magnitude(y)
        pick_x = (ax > ay) | self.is_nan(ax) | ((ax == ay) & ~self.is_negative(x))
        return np.where(pick_x, x, y)

    @_quiet
    def minimum_magnitude(self, x, y):
        ax, ay = self.magnitude(x), self.magnitude(y)
        pick_x = (ax < ay) | self.is_nan(ax) | ((ax == ay) & self.is_negative(x))
        return np.where(pick_x, x, y)

    def maximum_magnitude_number(self, x, y):
        return self.maximum_magnitude(x, y)

    def minimum_magnitude_number(self, x, y):
        return self.minimum_magnitude(x, y)

    # ------------------------------------------------------------------ #
    #  Transcendental & rounding                                         #
    # ------------------------------------------------------------------ #

    def _math(self, fn, *args):
        """Apply a real-valued math function; overridden per category."""
        with np.errstate(all='ignore'):
            return fn(*args)

    def exp(self, x):
        return self._math(np.exp, x)

    def exp2(self, x):
        return self._math(np.exp2, x)

    def exp10(self, x):
        return self._math(lambda v: np.power(10.0, v), x)

    def exp_m1(self, x):
        return self._math(np.expm1, x)

    def exp2_m1(self, x):
        return self._math(lambda v: np.expm1(np.multiply(v, _LN2)), x)

    def exp10_m1(self, x):
        return self._math(lambda v: np.expm1(np.multiply(v, _LN10)), x)

    def log(self, x):
        return self._math(np.log, x)

    def log2(self, x):
        return self._math(np.log2, x)

    def log10(self, x):
        return self._math(np.log10, x)

    def log_p1(self, x):
        return self._math(np.log1p, x)

    def log2_p1(self, x):
        return self._math(lambda v: np.log1p(v) / _LN2, x)

    def log10_p1(self, x):
        return self._math(lambda v: np.log1p(v) / _LN10, x)

    def log_base(self, x, base):
        return self._math(lambda v, b: np.log(v) / np.log(b), x, base)

    def pow(self, x, y):
        return self._math(np.power, x, y)

    def sqrt(self, x):
        return self._math(np.sqrt, x)

    def reciprocal_sqrt(self, x):
        return self._math(lambda v: 1.0 / np.sqrt(v), x)

    def cbrt(self, x):
        return self._math(np.cbrt, x)

    def root_n(self, x, n: int):
        if n == 0:
            raise ValueError("root_n: n must be non-zero")

        def _root(v):
            magnitude = np.power(np.abs(v), 1.0 / n)
            if n % 2:
                return np.where(v < 0, -magnitude, magnitude)
            return np.where(v < 0, np.nan, magnitude)
        return self._math(_root, x)

    def sin(self, x):
        return self._math(np.sin, x)

    def cos(self, x):
        return self._math(np.cos, x)

    def tan(self, x):
        return self._math(np.tan, x)

    def asin(self, x):
        return self._math(np.arcsin, x)

    def acos(self, x):
        return self._math(np.arccos, x)

    def atan(self, x):
        return self._math(np.arctan, x)

    def atan2(self, y, x):
        return self._math(np.arctan2, y, x)

    def sinh(self, x):
        return self._math(np.sinh, x)

    def cosh(self, x):
        return self._math(np.cosh, x)

    def tanh(self, x):
        return self._math(np.tanh, x)

    def asinh(self, x):
        return self._math(np.arcsinh, x)

    def acosh(self, x):
        return self._math(np.arccosh, x)

    def atanh(self, x):
        return self._math(np.arctanh, x)

    def sin_pi(self, x):
        return self._math(_sin_pi, x)

    def cos_pi(self, x):
        return self._math(_cos_pi, x)

    def tan_pi(self, x):
        return self._math(lambda v: _sin_pi(v) / _cos_pi(v), x)

    def asin_pi(self, x):
        return self._math(lambda v: np.arcsin(v) / np.pi, x)

    def acos_pi(self, x):
        return self._math(lambda v: np.arccos(v) / np.pi, x)

    def atan_pi(self, x):
        return self._math(lambda v: np.arctan(v) / np.pi, x)

    def atan2_pi(self, y, x):
        return self._math(lambda a, b: np.arctan2(a, b) / np.pi, y, x)

    def degrees_to_radians(self, x):
        return self._math(np.deg2rad, x)

    def radians_to_degrees(self, x):
        return self._math(np.rad2deg, x)

    def floor(self, x):
        return self._math(np.floor, x)

    def ceiling(self, x):
        return self._math(np.ceil, x)

    def truncate(self, x):
        return self._math(np.trunc, x)

    def round(self, x, digits: int = 0):
        # numpy rounds half to even, matching the default midpoint mode.
        return self._math(lambda v: np.round(v, digits), x)

    def ilogb(self, x):
        raise NotImplementedError


class FloatingOps(ScalarOps):
    """IEEE binary floating point."""

    kind = 'floating'

    @property
    def min_value(self):
        return np.finfo(self.dtype).min

    @property
    def max_value(self):
        return np.finfo(self.dtype).max

    @property
    def epsilon(self):
        return np.finfo(self.dtype).eps

    def is_nan(self, x):
        return np.isnan(x)

    def is_finite(self, x):
        return np.isfinite(x)

    def is_negative(self, x):
        return np.signbit(x)

    @_quiet
    def maximum_magnitude_number(self, x, y):
        x_nan, y_nan = np.isnan(x), np.isnan(y)
        return np.where(x_nan, y, np.where(y_nan, x, self.maximum_magnitude(x, y)))

    @_quiet
    def minimum_magnitude_number(self, x, y):
        x_nan, y_nan = np.isnan(x), np.isnan(y)
        return np.where(x_nan, y, np.where(y_nan, x, self.minimum_magnitude(x, y)))

    @_quiet
    def ilogb(self, x):
        x = np.asarray(x)
        _, exponent = np.frexp(x)
        out = (exponent.astype(np.int64) - 1)
        out = np.where(x == 0, _INT32_MIN, out)
        out = np.where(~np.isfinite(x), _INT32_MAX, out)
        return out.astype(np.int32)


class _IntegerOps(ScalarOps):
    """Shared integer behavior: truncating division, float64 math."""

    @property
    def min_value(self):
        return np.iinfo(self.dtype).min

    @property
    def max_value(self):
        return np.iinfo(self.dtype).max

    def _math(self, fn, *args):
        with np.errstate(all='ignore'):
            promoted = [np.asarray(a, dtype=np.float64) for a in args]
            return fn(*promoted)

    @staticmethod
    def _check_divisor(y):
        if np.any(np.asarray(y) == 0):
            raise ZeroDivisionError("Integer division by zero")

    @_quiet
    def divide(self, x, y):
        self._check_divisor(y)
        x, y = np.asarray(x), np.asarray(y)
        quotient = np.floor_divide(x, y)
        # floor -> truncate toward zero
        adjust = (np.remainder(x, y) != 0) & ((x < 0) != (y < 0))
        return quotient + adjust.astype(quotient.dtype)

    @_quiet
    def remainder(self, x, y):
        self._check_divisor(y)
        return np.fmod(x, y)

    @_quiet
    def ieee_remainder(self, x, y):
        self._check_divisor(y)
        xf, yf = np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)
        return xf - yf * np.rint(xf / yf)

    def reciprocal(self, x):
        return self.divide(self.one, x)

    @_quiet
    def copy_sign(self, x, sign):
        return np.where(np.asarray(sign) < 0, -np.abs(x), np.abs(x))

    def hypot(self, x, y):
        return self._math(np.hypot, x, y)

    @_quiet
    def scale_b(self, x, n):
        return np.multiply(x, np.power(2.0, np.asarray(n, dtype=np.float64)))

    # Rounding is the identity on integers.
    def floor(self, x):
        return np.asarray(x)

    def ceiling(self, x):
        return np.asarray(x)

    def truncate(self, x):
        return np.asarray(x)

    def round(self, x, digits: int = 0):
        if digits >= 0:
            return np.asarray(x)
        return self._math(lambda v: np.round(v, digits), x)

    @_quiet
    def ilogb(self, x):
        x = np.asarray(x)
        magnitude = np.abs(x.astype(np.float64))
        out = np.floor(np.log2(np.where(magnitude == 0, 1.0, magnitude)))
        return np.where(magnitude == 0, _INT32_MIN, out).astype(np.int32)


class SignedIntegerOps(_IntegerOps):
    kind = 'signed'


class UnsignedIntegerOps(_IntegerOps):
    kind = 'unsigned'

    def is_negative(self, x):
        return np.zeros(np.shape(x), dtype=np.bool_)

    def abs(self, x):
        return np.asarray(x)

    @_quiet
    def divide(self, x, y):
        self._check_divisor(y)
        return np.floor_divide(x, y)

    @_quiet
    def negate(self, x):
        # Two's complement wrap-around.
        return np.subtract(self.zero, np.asarray(x, dtype=self.dtype))

    def copy_sign(self, x, sign):
        if np.any(np.asarray(sign) < 0):
            raise OverflowError(f"copy_sign: {self.dtype} cannot hold a negative value")
        return np.asarray(x)


class ComplexOps(ScalarOps):
    """Complex arithmetic; complex numbers have no ordering."""

    kind = 'complex'

    @property
    def pi(self):
        return self.dtype.type(math.pi)

    def is_nan(self, x):
        return np.isnan(x)

    def is_finite(self, x):
        return np.isfinite(x)

    def magnitude(self, x):
        return np.abs(x)

    def _unordered(self, *args):
        raise TypeError(f"{self.dtype} values are not ordered")

    less_than = less_than_or_equal = _unordered
    greater_than = greater_than_or_equal = _unordered
    maximum = minimum = maximum_number = minimum_number = _unordered
    floor = ceiling = truncate = _unordered
    copy_sign = hypot = cbrt = atan2 = atan2_pi = _unordered

    def is_negative(self, x):
        raise TypeError(f"{self.dtype} values have no sign")

    @_quiet
    def maximum_magnitude(self, x, y):
        return np.where(np.abs(x) >= np.abs(y), x, y)

    @_quiet
    def minimum_magnitude(self, x, y):
        return np.where(np.abs(x) <= np.abs(y), x, y)

    def round(self, x, digits: int = 0):
        return np.round(x, digits)

    def sin_pi(self, x):
        return self._math(lambda v: np.sin(np.pi * v), x)

    def cos_pi(self, x):
        return self._math(lambda v: np.cos(np.pi * v), x)

    def tan_pi(self, x):
        return self._math(lambda v: np.tan(np.pi * v), x)

    def ilogb(self, x):
        raise TypeError("ilogb is not defined for complex values")


class BoolOps(ScalarOps):
    """Booleans support comparison and raw-bit kernels only."""

    kind = 'bool'

    @property
    def pi(self):
        raise TypeError("bool has no pi")

    def _math(self, fn, *args):
        raise TypeError("bool does not support numeric math functions")

    def _no_arithmetic(self, *args):
        raise TypeError("bool does not support arithmetic")

    add = subtract = multiply = divide = remainder = ieee_remainder = _no_arithmetic
    negate = reciprocal = square = fused_multiply_add = _no_arithmetic
    copy_sign = hypot = scale_b = ilogb = _no_arithmetic

    def abs(self, x):
        return np.asarray(x)


# ──────────────────────── Dispatch ────────────────────────────────────

_CATEGORY = {
    'f': FloatingOps,
    'i': SignedIntegerOps,
    'u': UnsignedIntegerOps,
    'c': ComplexOps,
    'b': BoolOps,
}


@functools.lru_cache(maxsize=None)
def _ops_for(np_dtype: np.dtype) -> ScalarOps:
    return _CATEGORY[np_dtype.kind](np_dtype)


def scalar_ops(dt) -> ScalarOps:
    """Return the capability table for a dtype, an array, or anything with ``.dtype``."""
    if isinstance(dt, Dtype):
        return _ops_for(dt.to_numpy())
    if hasattr(dt, 'dtype') and not isinstance(dt, (type, np.dtype)):
        dt = dt.dtype
        if isinstance(dt, Dtype):
            return _ops_for(dt.to_numpy())
    return _ops_for(resolve_dtype(dt))


_BIT_VIEWS = {1: np.uint8, 2: np.uint16, 4: np.uint32, 8: np.uint64}
_SIGNED_BIT_VIEWS = {1: np.int8, 2: np.int16, 4: np.int32, 8: np.int64}


def bit_view_dtype(itemsize: int, operation: str | None = None) -> np.dtype:
    """Unsigned integer dtype with the same width as ``itemsize`` bytes."""
    try:
        return np.dtype(_BIT_VIEWS[itemsize])
    except KeyError:
        raise UnsupportedElementWidthError(itemsize, operation) from None


def signed_bit_view_dtype(itemsize: int, operation: str | None = None) -> np.dtype:
    """Signed integer dtype with the same width as ``itemsize`` bytes."""
    try:
        return np.dtype(_SIGNED_BIT_VIEWS[itemsize])
    except KeyError:
        raise UnsupportedElementWidthError(itemsize, operation) from None


# ──────────────────────── ×π helpers ──────────────────────────────────

def _sin_pi(v):
    r = np.remainder(v, 2.0)
    out = np.sin(np.pi * r)
    out = np.where((r == 0.0) | (r == 1.0), 0.0, out)
    out = np.where(r == 0.5, 1.0, out)
    return np.where(r == 1.5, -1.0, out)


def _cos_pi(v):
    r = np.remainder(v, 2.0)
    out = np.cos(np.pi * r)
    out = np.where((r == 0.5) | (r == 1.5), 0.0, out)
    out = np.where(r == 0.0, 1.0, out)
    return np.where(r == 1.0, -1.0, out)


__all__ = [
    'ScalarOps', 'FloatingOps', 'SignedIntegerOps', 'UnsignedIntegerOps',
    'ComplexOps', 'BoolOps', 'scalar_ops', 'bit_view_dtype',
    'signed_bit_view_dtype',
]
