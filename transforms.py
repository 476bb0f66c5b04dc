# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Shape transform engine.

Two kinds of transform live here:

* **Reinterpretations** (``reshape`` of a dense input, ``squeeze``,
  ``unsqueeze``) build a new lengths/strides pair over the *same* buffer
  and return the same kind of object they were given (tensor, mutable
  span or read-only span).
* **Remapped copies** (``permute_dimensions``, ``reverse``,
  ``concatenate``, ``stack``, ``split``) allocate a fresh dense tensor and
  fill it through :func:`~tensorspan.span.remap_copy`, each supplying only
  the destination → source multi-index mapping. All of them except
  ``split`` have an ``*_into`` variant writing into a caller-provided
  destination.
"""
from __future__ import annotations

import logging
from typing import Sequence

from .errors import ShapeMismatchError
from .shape import (
    as_lengths,
    compute_canonical_strides,
    compute_flat_length,
    normalize_dimension,
    validate_reach,
)
from .span import ReadOnlyTensorSpan, TensorSpan, remap_copy
from .tensor import (
    Tensor,
    as_mutable_span,
    as_read_only_span,
    create_from_shape_uninitialized,
)

logger = logging.getLogger(__name__)


# ──────────────────────── Helpers ─────────────────────────────────────

def _coerce(x):
    if isinstance(x, (Tensor, ReadOnlyTensorSpan)):
        return x
    return Tensor(x)


def _reinterpret(x, lengths: tuple[int, ...], strides: tuple[int, ...]):
    """Same buffer, new layout, same kind of object as ``x``."""
    if isinstance(x, Tensor):
        validate_reach(x._buffer.shape[0] - x._start, lengths, strides)
        return Tensor._wrap(x._buffer, x._start, lengths, strides)
    validate_reach(x._window.shape[0], lengths, strides)
    return type(x)._wrap(x._window, lengths, strides, x.is_pinned)


def _densify(x):
    """Dense equivalent of ``x``, keeping its kind; copies only when needed."""
    if x.is_dense:
        return x
    if isinstance(x, Tensor):
        return x.to_dense_tensor()
    logger.debug("Densifying span of shape %s with strides %s", x.lengths, x.strides)
    out = create_from_shape_uninitialized(x.lengths, x.dtype)
    remap_copy(x, out.as_tensor_span())
    if isinstance(x, TensorSpan):
        return out.as_tensor_span()
    return out.as_read_only_tensor_span()


def _allocate_like(source: ReadOnlyTensorSpan, lengths: Sequence[int]) -> Tensor:
    return create_from_shape_uninitialized(tuple(lengths), source.dtype)


def _require_shape(destination: TensorSpan, lengths: Sequence[int]) -> None:
    if destination.lengths != tuple(lengths):
        raise ShapeMismatchError(
            f"Destination shape {list(destination.lengths)} does not match "
            f"the required shape {list(lengths)}."
        )


def _infer_lengths(lengths: Sequence[int], total: int) -> tuple[int, ...]:
    lengths = list(as_lengths(lengths))
    unknown = [i for i, n in enumerate(lengths) if n == -1]
    if len(unknown) > 1:
        raise ValueError("Only one dimension can be inferred (-1)")
    if unknown:
        known = 1
        for i, n in enumerate(lengths):
            if i != unknown[0]:
                known *= n
        if known == 0 or total % known:
            raise ShapeMismatchError(
                f"Cannot infer a dimension reshaping {total} elements into {lengths}."
            )
        lengths[unknown[0]] = total // known
    return tuple(lengths)


# ──────────────────────── Reinterpretations ───────────────────────────

def reshape(x, lengths: Sequence[int]):
    """View ``x`` under ``lengths`` (one entry may be ``-1``).

    A dense input shares its buffer with the result; a non-dense input is
    densified first, so the result is a fresh copy.
    """
    x = _coerce(x)
    total = x.flattened_length
    new_lengths = _infer_lengths(lengths, total)
    if compute_flat_length(new_lengths) != total:
        raise ShapeMismatchError(
            f"Cannot reshape shape {list(x.lengths)} ({total} elements) "
            f"into {list(new_lengths)}."
        )
    x = _densify(x)
    return _reinterpret(x, new_lengths, compute_canonical_strides(new_lengths))


def reshape_into(x, destination) -> None:
    """Copy ``x`` in logical order into a destination of equal element count."""
    src = as_read_only_span(x)
    dst = as_mutable_span(destination)
    if src.flattened_length != dst.flattened_length:
        raise ShapeMismatchError(
            f"Cannot reshape {src.flattened_length} elements into "
            f"{dst.flattened_length}."
        )
    src.copy_to(dst)


def squeeze(x):
    """Drop every length-1 dimension (never below rank 1)."""
    x = _coerce(x)
    if x.rank == 0:
        return x
    keep = [d for d, n in enumerate(x.lengths) if n != 1]
    if not keep:
        return _reinterpret(x, (1,), (1,))
    return _reinterpret(x, tuple(x.lengths[d] for d in keep),
                        tuple(x.strides[d] for d in keep))


def squeeze_dimension(x, dimension: int):
    """Drop one dimension, which must have length 1."""
    x = _coerce(x)
    dimension = normalize_dimension(dimension, x.rank)
    if x.lengths[dimension] != 1:
        raise ShapeMismatchError(
            f"Cannot squeeze dimension {dimension} of length {x.lengths[dimension]}."
        )
    if x.rank == 1:
        return _reinterpret(x, (1,), (1,))
    lengths = x.lengths[:dimension] + x.lengths[dimension + 1:]
    strides = x.strides[:dimension] + x.strides[dimension + 1:]
    return _reinterpret(x, lengths, strides)


def unsqueeze(x, dimension: int):
    """Insert a length-1 dimension at ``dimension`` (``0 <= dimension <= rank``)."""
    x = _coerce(x)
    dimension = normalize_dimension(dimension, x.rank, allow_end=True)
    if dimension < x.rank:
        stride = x.lengths[dimension] * x.strides[dimension]
    else:
        stride = 1
    lengths = x.lengths[:dimension] + (1,) + x.lengths[dimension:]
    strides = x.strides[:dimension] + (stride,) + x.strides[dimension:]
    return _reinterpret(x, lengths, strides)


# ──────────────────────── Permute / transpose ─────────────────────────

def _validate_order(order: Sequence[int] | None, rank: int) -> tuple[int, ...]:
    if order is None:
        return tuple(range(rank - 1, -1, -1))
    order = tuple(int(o) for o in order)
    if len(order) != rank:
        raise ShapeMismatchError(
            f"Permutation of length {len(order)} does not match rank {rank}."
        )
    if sorted(order) != list(range(rank)):
        raise ValueError(f"{list(order)} is not a permutation of range({rank})")
    return order


def _permute_map(order: tuple[int, ...]):
    def index_map(dst_index):
        src_index = [None] * len(order)
        for d, o in enumerate(order):
            src_index[o] = dst_index[d]
        return src_index
    return index_map


def permute_dimensions(x, order: Sequence[int] | None = None) -> Tensor:
    """Copy with dimensions reordered: result dimension ``d`` is source ``order[d]``.

    ``order=None`` reverses the dimensions.
    """
    src = as_read_only_span(x)
    order = _validate_order(order, src.rank)
    out = _allocate_like(src, [src.lengths[o] for o in order])
    remap_copy(src, out.as_tensor_span(), _permute_map(order))
    return out


def permute_dimensions_into(x, order: Sequence[int] | None, destination) -> None:
    src = as_read_only_span(x)
    dst = as_mutable_span(destination)
    order = _validate_order(order, src.rank)
    _require_shape(dst, [src.lengths[o] for o in order])
    remap_copy(src, dst, _permute_map(order))


def transpose(x):
    """Swap the last two dimensions; rank < 2 inputs are returned unchanged."""
    x = _coerce(x)
    if x.rank < 2:
        return x
    order = list(range(x.rank))
    order[-2], order[-1] = order[-1], order[-2]
    return permute_dimensions(x, order)


# ──────────────────────── Reverse ─────────────────────────────────────

def _reverse_map(lengths: tuple[int, ...], dims: Sequence[int]):
    dims = set(dims)

    def index_map(dst_index):
        return [
            (lengths[d] - 1 - idx) if d in dims else idx
            for d, idx in enumerate(dst_index)
        ]
    return index_map


def reverse(x) -> Tensor:
    """Copy with every dimension reflected."""
    src = as_read_only_span(x)
    out = _allocate_like(src, src.lengths)
    remap_copy(src, out.as_tensor_span(), _reverse_map(src.lengths, range(src.rank)))
    return out


def reverse_dimension(x, dimension: int) -> Tensor:
    """Copy with only ``dimension`` reflected."""
    src = as_read_only_span(x)
    dimension = normalize_dimension(dimension, src.rank)
    out = _allocate_like(src, src.lengths)
    remap_copy(src, out.as_tensor_span(), _reverse_map(src.lengths, [dimension]))
    return out


def reverse_into(x, destination, dimension: int | None = None) -> None:
    src = as_read_only_span(x)
    dst = as_mutable_span(destination)
    _require_shape(dst, src.lengths)
    dims = range(src.rank) if dimension is None else [normalize_dimension(dimension, src.rank)]
    remap_copy(src, dst, _reverse_map(src.lengths, dims))


# ──────────────────────── Concatenate / stack / split ─────────────────

def _concat_plan(tensors, dimension: int):
    spans = [as_read_only_span(t) for t in tensors]
    if not spans:
        raise ValueError("Must provide at least one tensor to concatenate")
    first = spans[0]
    if first.rank == 0:
        raise ValueError("Cannot concatenate rank-0 tensors")
    dimension = normalize_dimension(dimension, first.rank)
    total = 0
    for i, s in enumerate(spans):
        if s.rank != first.rank:
            raise ShapeMismatchError(
                f"Tensor {i} has rank {s.rank}; expected {first.rank}."
            )
        if s.dtype != first.dtype:
            raise TypeError(f"Tensor {i} has dtype {s.dtype}; expected {first.dtype}")
        for d in range(first.rank):
            if d != dimension and s.lengths[d] != first.lengths[d]:
                raise ShapeMismatchError(
                    f"Tensor {i} has length {s.lengths[d]} in dimension {d}; "
                    f"expected {first.lengths[d]}."
                )
        total += s.lengths[dimension]
    lengths = first.lengths[:dimension] + (total,) + first.lengths[dimension + 1:]
    return spans, dimension, lengths


def _concat_copy(spans, dimension: int, dst: TensorSpan) -> None:
    offset = 0
    for s in spans:
        n = s.lengths[dimension]
        window = dst.slice(*[
            slice(offset, offset + n) if d == dimension else slice(None)
            for d in range(dst.rank)
        ])
        remap_copy(s, window)
        offset += n


def concatenate_on_dimension(tensors: Sequence, dimension: int = 0) -> Tensor:
    """Join tensors that agree on every dimension except ``dimension``."""
    spans, dimension, lengths = _concat_plan(tensors, dimension)
    out = _allocate_like(spans[0], lengths)
    _concat_copy(spans, dimension, out.as_tensor_span())
    return out


def concatenate(tensors: Sequence) -> Tensor:
    """Join tensors along the leading dimension."""
    return concatenate_on_dimension(tensors, 0)


def concatenate_into(tensors: Sequence, destination, dimension: int = 0) -> None:
    spans, dimension, lengths = _concat_plan(tensors, dimension)
    dst = as_mutable_span(destination)
    _require_shape(dst, lengths)
    _concat_copy(spans, dimension, dst)


def _stack_plan(tensors, dimension: int):
    spans = [as_read_only_span(t) for t in tensors]
    if not spans:
        raise ValueError("Must provide at least one tensor to stack")
    first = spans[0]
    for i, s in enumerate(spans[1:], start=1):
        if s.lengths != first.lengths:
            raise ShapeMismatchError(
                f"Tensor {i} has shape {list(s.lengths)}; expected {list(first.lengths)}."
            )
        if s.dtype != first.dtype:
            raise TypeError(f"Tensor {i} has dtype {s.dtype}; expected {first.dtype}")
    dimension = normalize_dimension(dimension, first.rank, allow_end=True)
    lengths = first.lengths[:dimension] + (len(spans),) + first.lengths[dimension:]
    return spans, dimension, lengths


def _stack_copy(spans, dimension: int, dst: TensorSpan) -> None:
    for i, s in enumerate(spans):
        layer = dst.slice_along_dimension(dimension, i)
        if s.rank == 0:
            layer[()] = s._element(())
        else:
            remap_copy(s, layer)


def stack_along_dimension(tensors: Sequence, dimension: int = 0) -> Tensor:
    """Stack same-shaped tensors as layers of a new dimension at ``dimension``."""
    spans, dimension, lengths = _stack_plan(tensors, dimension)
    out = _allocate_like(spans[0], lengths)
    _stack_copy(spans, dimension, out.as_tensor_span())
    return out


def stack(tensors: Sequence) -> Tensor:
    """Stack same-shaped tensors along a new leading dimension."""
    return stack_along_dimension(tensors, 0)


def stack_into(tensors: Sequence, destination, dimension: int = 0) -> None:
    spans, dimension, lengths = _stack_plan(tensors, dimension)
    dst = as_mutable_span(destination)
    _require_shape(dst, lengths)
    _stack_copy(spans, dimension, dst)


def split(x, count: int, dimension: int = 0) -> list[Tensor]:
    """Cut ``x`` into ``count`` equal tensors along ``dimension``."""
    src = as_read_only_span(x)
    dimension = normalize_dimension(dimension, src.rank)
    if count <= 0:
        raise ValueError(f"count must be positive, got {count}")
    length = src.lengths[dimension]
    if length % count:
        raise ValueError(
            f"Dimension {dimension} of length {length} is not divisible by {count}."
        )
    size = length // count
    parts = []
    for i in range(count):
        view = src.slice(*[
            slice(i * size, (i + 1) * size) if d == dimension else slice(None)
            for d in range(src.rank)
        ])
        part = _allocate_like(src, view.lengths)
        remap_copy(view, part.as_tensor_span())
        parts.append(part)
    return parts


__all__ = [
    'reshape', 'reshape_into', 'squeeze', 'squeeze_dimension', 'unsqueeze',
    'permute_dimensions', 'permute_dimensions_into', 'transpose',
    'reverse', 'reverse_dimension', 'reverse_into',
    'concatenate', 'concatenate_on_dimension', 'concatenate_into',
    'stack', 'stack_along_dimension', 'stack_into', 'split',
]
