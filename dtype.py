# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Element type definitions and their numeric capabilities."""
from __future__ import annotations

import enum
import numpy as np


class dtype(enum.Enum):
    """Element types a tensor or span may hold."""
    float16 = "float16"
    float32 = "float32"
    float64 = "float64"
    int8 = "int8"
    int16 = "int16"
    int32 = "int32"
    int64 = "int64"
    uint8 = "uint8"
    uint16 = "uint16"
    uint32 = "uint32"
    uint64 = "uint64"
    bool = "bool"
    complex64 = "complex64"
    complex128 = "complex128"

    def to_numpy(self) -> np.dtype:
        """Convert to numpy dtype."""
        return np.dtype(_TO_NUMPY[self])

    @staticmethod
    def from_numpy(np_dtype) -> 'dtype':
        """Convert a numpy dtype (or anything numpy accepts as one)."""
        key = np.dtype(np_dtype)
        try:
            return _FROM_NUMPY[key]
        except KeyError:
            raise TypeError(f"Unsupported element type: {key}") from None

    # ------------------------------------------------------------------ #
    #  Capabilities                                                      #
    # ------------------------------------------------------------------ #

    @property
    def itemsize(self) -> int:
        return self.to_numpy().itemsize

    @property
    def bit_width(self) -> int:
        return self.itemsize * 8

    @property
    def is_floating_point(self) -> bool:
        return self in (dtype.float16, dtype.float32, dtype.float64)

    @property
    def is_complex(self) -> bool:
        return self in (dtype.complex64, dtype.complex128)

    @property
    def is_integer(self) -> bool:
        return self.to_numpy().kind in 'iu'

    @property
    def is_signed(self) -> bool:
        return self.to_numpy().kind in 'ifc'

    def __repr__(self) -> str:
        return f"tensorspan.{self.name}"

    def __str__(self) -> str:
        return self.name


_TO_NUMPY = {
    dtype.float16: np.float16,
    dtype.float32: np.float32,
    dtype.float64: np.float64,
    dtype.int8: np.int8,
    dtype.int16: np.int16,
    dtype.int32: np.int32,
    dtype.int64: np.int64,
    dtype.uint8: np.uint8,
    dtype.uint16: np.uint16,
    dtype.uint32: np.uint32,
    dtype.uint64: np.uint64,
    dtype.bool: np.bool_,
    dtype.complex64: np.complex64,
    dtype.complex128: np.complex128,
}

_FROM_NUMPY = {np.dtype(v): k for k, v in _TO_NUMPY.items()}


def resolve_dtype(dt, default=None) -> np.dtype | None:
    """Normalize a :class:`dtype`, numpy dtype, string or type to ``np.dtype``.

    ``None`` resolves to ``default`` (which is resolved the same way).
    Element types outside the supported set raise ``TypeError``.
    """
    if dt is None:
        if default is None:
            return None
        dt = default
    if isinstance(dt, dtype):
        return dt.to_numpy()
    resolved = np.dtype(dt)
    if resolved not in _FROM_NUMPY:
        raise TypeError(f"Unsupported element type: {resolved}")
    return resolved


# Convenience aliases (tensorspan.float32, tensorspan.long, etc.)
float16 = dtype.float16
float32 = dtype.float32
float64 = dtype.float64
half = dtype.float16
double = dtype.float64
int8 = dtype.int8
int16 = dtype.int16
int32 = dtype.int32
int64 = dtype.int64
long = dtype.int64
uint8 = dtype.uint8
uint16 = dtype.uint16
uint32 = dtype.uint32
uint64 = dtype.uint64
complex64 = dtype.complex64
complex128 = dtype.complex128
bool = dtype.bool
