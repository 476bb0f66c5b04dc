# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Exception types raised by tensorspan.

Every error derives from :class:`TensorError` and also from the builtin
exception callers would naturally expect (``ValueError``, ``IndexError``,
...), so ``except ValueError`` keeps working around tensor code.
"""
from __future__ import annotations

from typing import Sequence


class TensorError(Exception):
    """Base class for all tensorspan errors."""


class ShapeMismatchError(TensorError, ValueError):
    """Index or range count differs from the rank, or operand shapes differ."""


class CapacityError(TensorError, ValueError):
    """Backing storage is smaller than the declared shape requires."""

    def __init__(self, message: str, required: int | None = None,
                 available: int | None = None):
        super().__init__(message)
        self.required = required
        self.available = available


class BroadcastError(TensorError, ValueError):
    """Two shapes are not broadcast-compatible at ``dimension``."""

    def __init__(self, dimension: int, left: int, right: int,
                 shapes: tuple[Sequence[int], Sequence[int]] | None = None):
        message = (
            f"Shapes are not broadcast-compatible at dimension {dimension}: "
            f"{left} vs {right}"
        )
        if shapes is not None:
            message += f" (shapes {list(shapes[0])} and {list(shapes[1])})"
        super().__init__(message)
        self.dimension = dimension
        self.left = left
        self.right = right

    def __reduce__(self):
        return (BroadcastError, (self.dimension, self.left, self.right))


class IndexOutOfRangeError(TensorError, IndexError):
    """A slice, element or dimension index lies outside its valid window."""


class UnsupportedElementWidthError(TensorError, TypeError):
    """A raw-bit kernel was given an element type of unsupported width."""

    def __init__(self, itemsize: int, operation: str | None = None):
        what = f"{operation}: " if operation else ""
        super().__init__(
            f"{what}element width of {itemsize} bytes is not supported; "
            f"expected 1, 2, 4 or 8"
        )
        self.itemsize = itemsize

    def __reduce__(self):
        return (UnsupportedElementWidthError, (self.itemsize,))


class InvalidOperationError(TensorError, RuntimeError):
    """The operation requires a dense (contiguous) view and got a strided one."""


__all__ = [
    'TensorError',
    'ShapeMismatchError',
    'CapacityError',
    'BroadcastError',
    'IndexOutOfRangeError',
    'UnsupportedElementWidthError',
    'InvalidOperationError',
]
