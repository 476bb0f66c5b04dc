# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Shape/stride model: pure functions over lengths and strides.

A *shape* (``lengths``) is a tuple of non-negative element counts, one per
dimension. *Strides* give, per dimension, how many backing slots to skip
to move one step along it. Canonical strides are row-major: the last
dimension has stride 1.

By convention the flattened length of an empty shape is ``0``, not ``1``:
a rank-0 view is an *empty* view unless it was produced by slicing a
rank-1 view down to a single element.

The vectorized helpers at the bottom (:func:`unravel_indices`,
:func:`flat_offsets`) implement the "flat position → multi-index → backing
offset" walk that every copy-based transform relies on.
"""
from __future__ import annotations

import operator
from functools import reduce
from typing import Sequence

import numpy as np

from .errors import (
    CapacityError,
    IndexOutOfRangeError,
    ShapeMismatchError,
)


def as_lengths(size) -> tuple[int, ...]:
    """Normalize ``size`` (int, sequence, ndarray, or ``(tuple,)``) to a tuple of ints."""
    if isinstance(size, (int, np.integer)):
        return (int(size),)
    if len(size) == 1 and isinstance(size[0], (tuple, list)):
        size = size[0]
    return tuple(int(s) for s in size)


# ──────────────────────── Core model ──────────────────────────────────

def compute_flat_length(lengths: Sequence[int]) -> int:
    """Product of ``lengths``; ``0`` for an empty shape."""
    if len(lengths) == 0:
        return 0
    return reduce(operator.mul, (int(n) for n in lengths), 1)


def compute_canonical_strides(lengths: Sequence[int]) -> tuple[int, ...]:
    """Row-major strides, built right to left from a running product."""
    strides = [0] * len(lengths)
    stride = 1
    for i in range(len(lengths) - 1, -1, -1):
        strides[i] = stride
        stride *= int(lengths[i])
    return tuple(strides)


def compute_flat_index(strides: Sequence[int], indices: Sequence[int]) -> int:
    """Dot product of ``indices`` and ``strides``."""
    if len(indices) != len(strides):
        raise ShapeMismatchError(
            f"Index count {len(indices)} does not match rank {len(strides)}."
        )
    flat = 0
    for idx, stride in zip(indices, strides):
        flat += int(idx) * int(stride)
    return flat


def is_dense(lengths: Sequence[int], strides: Sequence[int]) -> bool:
    """True when ``strides`` are exactly the canonical strides of ``lengths``."""
    expected = 1
    for i in range(len(lengths) - 1, -1, -1):
        if int(strides[i]) != expected:
            return False
        expected *= int(lengths[i])
    return True


def has_any_dense_dimensions(lengths: Sequence[int], strides: Sequence[int]) -> bool:
    """True when the innermost dimension is unit-stride."""
    return len(lengths) > 0 and int(strides[-1]) == 1


def max_reachable_offset(lengths: Sequence[int], strides: Sequence[int]) -> int:
    """Largest backing offset any valid multi-index can reach.

    Independent of dimension order, so it is exact for permuted strides.
    Returns ``-1`` when some dimension is empty (no element is reachable).
    """
    reach = 0
    for length, stride in zip(lengths, strides):
        if length == 0:
            return -1
        reach += (int(length) - 1) * int(stride)
    return reach


def required_capacity(lengths: Sequence[int], strides: Sequence[int]) -> int:
    """Backing slots a view of this layout needs, per the construction rule.

    At least the flattened length, and at least enough to cover the
    furthest reachable element.
    """
    if len(lengths) == 0:
        return 0
    return max(compute_flat_length(lengths), max_reachable_offset(lengths, strides) + 1)


def validate_lengths_and_strides(
    lengths: Sequence[int], strides: Sequence[int] | None
) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Check and normalize a lengths/strides pair (strides default to canonical)."""
    lengths = tuple(int(n) for n in lengths)
    for dim, n in enumerate(lengths):
        if n < 0:
            raise ValueError(f"Length of dimension {dim} must be non-negative, got {n}")
    if strides is None:
        return lengths, compute_canonical_strides(lengths)
    strides = tuple(int(s) for s in strides)
    if len(strides) != len(lengths):
        raise ShapeMismatchError(
            f"Stride count {len(strides)} does not match rank {len(lengths)}."
        )
    for dim, s in enumerate(strides):
        if s < 0:
            raise ValueError(f"Stride of dimension {dim} must be non-negative, got {s}")
    return lengths, strides


def validate_capacity(available: int, lengths: Sequence[int],
                      strides: Sequence[int]) -> None:
    required = required_capacity(lengths, strides)
    if available < required:
        raise CapacityError(
            f"Backing storage of length {available} is too small for shape "
            f"{list(lengths)} with strides {list(strides)} (needs {required}).",
            required=required, available=available,
        )


def validate_reach(available: int, lengths: Sequence[int],
                   strides: Sequence[int]) -> None:
    """Check that every reachable element lies within ``available`` slots.

    Used when re-describing an existing window, which may be shorter than
    the flattened length once zero strides repeat elements.
    """
    required = max_reachable_offset(lengths, strides) + 1 if lengths else 0
    if available < required:
        raise CapacityError(
            f"Backing storage of length {available} cannot reach offset "
            f"{required - 1} of shape {list(lengths)} with strides {list(strides)}.",
            required=required, available=available,
        )


# ──────────────────────── Index resolution ────────────────────────────

def normalize_dimension(dim: int, rank: int, allow_end: bool = False) -> int:
    """Resolve a possibly-negative dimension number against ``rank``.

    With ``allow_end`` the position ``rank`` itself is valid (insertion points).
    """
    upper = rank + 1 if allow_end else rank
    resolved = dim + upper if dim < 0 else dim
    if not 0 <= resolved < upper:
        raise IndexOutOfRangeError(
            f"Dimension {dim} is out of range for rank {rank}."
        )
    return resolved


def resolve_index(index: int, length: int, allow_end: bool = False) -> int:
    """Resolve a from-end (negative) index and bounds-check it."""
    index = operator.index(index)
    resolved = index + length if index < 0 else index
    upper = length + 1 if allow_end else length
    if not 0 <= resolved < upper:
        raise IndexOutOfRangeError(
            f"Index {index} is out of range for dimension of length {length}."
        )
    return resolved


def resolve_range(rng, length: int) -> tuple[int, int]:
    """Turn a half-open range (``slice`` or ``range``) into ``(offset, length)``.

    Negative bounds count from the end. Unlike list slicing, bounds outside
    ``[0, length]`` are an error rather than silently clamped.
    """
    if isinstance(rng, range):
        if rng.step != 1:
            raise ValueError(f"Only unit-step ranges are supported, got step {rng.step}")
        start, stop = rng.start, rng.stop
    elif isinstance(rng, slice):
        if rng.step not in (None, 1):
            raise ValueError(f"Only unit-step slices are supported, got step {rng.step}")
        start = 0 if rng.start is None else rng.start
        stop = length if rng.stop is None else rng.stop
    else:
        raise TypeError(f"Expected a slice or range, got {type(rng).__name__}")
    start = resolve_index(start, length, allow_end=True)
    stop = resolve_index(stop, length, allow_end=True)
    if stop < start:
        raise IndexOutOfRangeError(
            f"Range {start}:{stop} is reversed for dimension of length {length}."
        )
    return start, stop - start


# ──────────────────────── Vectorized index walk ───────────────────────

def unravel_indices(lengths: Sequence[int]) -> tuple[np.ndarray, ...]:
    """Per-dimension index arrays for every multi-index, in row-major order.

    ``unravel_indices((2, 3))`` gives ``(array([0,0,0,1,1,1]), array([0,1,2,0,1,2]))``.
    """
    count = compute_flat_length(lengths)
    if count == 0:
        return tuple(np.zeros(0, dtype=np.intp) for _ in lengths)
    return np.unravel_index(np.arange(count, dtype=np.intp), tuple(lengths))


def flat_offsets(index_arrays: Sequence[np.ndarray], strides: Sequence[int],
                 start: int = 0) -> np.ndarray:
    """Backing offsets ``start + Σ idx[d] * strides[d]`` for index arrays."""
    if len(index_arrays) != len(strides):
        raise ShapeMismatchError(
            f"Index count {len(index_arrays)} does not match rank {len(strides)}."
        )
    if len(index_arrays) == 0:
        return np.zeros(0, dtype=np.intp)
    offsets = np.full(len(index_arrays[0]), start, dtype=np.intp)
    for idx, stride in zip(index_arrays, strides):
        if stride:
            offsets += np.asarray(idx, dtype=np.intp) * stride
    return offsets


def logical_offsets(lengths: Sequence[int], strides: Sequence[int],
                    start: int = 0) -> np.ndarray:
    """Backing offsets of every element of a layout, in multi-index order."""
    if is_dense(lengths, strides):
        return np.arange(start, start + compute_flat_length(lengths), dtype=np.intp)
    return flat_offsets(unravel_indices(lengths), strides, start)


__all__ = [
    'as_lengths',
    'compute_flat_length', 'compute_canonical_strides', 'compute_flat_index',
    'is_dense', 'has_any_dense_dimensions', 'max_reachable_offset',
    'required_capacity', 'validate_lengths_and_strides', 'validate_capacity',
    'validate_reach',
    'normalize_dimension', 'resolve_index', 'resolve_range',
    'unravel_indices', 'flat_offsets', 'logical_offsets',
]
