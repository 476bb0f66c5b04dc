# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Broadcast engine.

Shapes are aligned at their trailing dimensions; a missing leading
dimension counts as length 1. A dimension pair ``(a, b)`` is compatible
when ``a == b`` or either side is 1, and the result takes ``max(a, b)``.

Materializing a broadcast copies through :func:`~tensorspan.span.remap_copy`
with the *wrap* rule: a source dimension of length 1 is always read at
index 0, every other source dimension reads the (right-aligned)
destination index unchanged.
"""
from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from .errors import BroadcastError
from .span import remap_copy
from .tensor import (
    as_mutable_span,
    as_read_only_span,
    create_from_shape_uninitialized,
)
from .shape import as_lengths

logger = logging.getLogger(__name__)


def get_broadcast_shape(left: Sequence[int], right: Sequence[int]) -> tuple[int, ...]:
    """Common shape of ``left`` and ``right``.

    Raises :class:`BroadcastError` naming the first incompatible dimension,
    counted in the coordinates of the result (leading dimension = 0).
    """
    left, right = tuple(left), tuple(right)
    rank = len(left) if len(left) > len(right) else len(right)
    result = [0] * rank
    for dim in range(rank):
        a = _aligned(left, dim, rank)
        b = _aligned(right, dim, rank)
        if a != b and a != 1 and b != 1:
            raise BroadcastError(dim, a, b, (left, right))
        result[dim] = a if a > b else b
    return tuple(result)


def broadcast_shapes(*shapes: Sequence[int]) -> tuple[int, ...]:
    """Fold :func:`get_broadcast_shape` over any number of shapes."""
    if not shapes:
        return ()
    result = tuple(shapes[0])
    for shape in shapes[1:]:
        result = get_broadcast_shape(result, shape)
    return result


def _aligned(shape: tuple[int, ...], dim: int, rank: int) -> int:
    i = dim - (rank - len(shape))
    return shape[i] if i >= 0 else 1


def can_broadcast_to(source: Sequence[int], target: Sequence[int]) -> bool:
    """One-directional check: can ``source`` expand to exactly ``target``?"""
    source, target = tuple(source), tuple(target)
    if len(source) > len(target):
        return False
    offset = len(target) - len(source)
    for i, n in enumerate(source):
        if n != 1 and n != target[i + offset]:
            return False
    return True


def _check_broadcast_to(source: Sequence[int], target: Sequence[int]) -> None:
    source, target = tuple(source), tuple(target)
    if len(source) > len(target):
        dim = len(source) - len(target) - 1
        raise BroadcastError(dim, source[dim], 1, (source, target))
    offset = len(target) - len(source)
    for i, n in enumerate(source):
        if n != 1 and n != target[i + offset]:
            raise BroadcastError(i + offset, n, target[i + offset], (source, target))


def wrap_index_map(source_lengths: Sequence[int], target_rank: int):
    """Index map for :func:`remap_copy` implementing the wrap rule."""
    source_lengths = tuple(source_lengths)
    offset = target_rank - len(source_lengths)

    def index_map(dst_index):
        src_index = []
        for d, n in enumerate(source_lengths):
            if n == 1:
                src_index.append(np.zeros_like(dst_index[d + offset]))
            else:
                src_index.append(dst_index[d + offset])
        return src_index
    return index_map


def broadcast(x, lengths: Sequence[int]) -> Tensor:
    """New dense tensor of shape ``lengths`` holding ``x`` broadcast into it."""
    source = as_read_only_span(x)
    lengths = as_lengths(lengths)
    _check_broadcast_to(source.lengths, lengths)
    out = create_from_shape_uninitialized(lengths, source.dtype)
    logger.debug("Broadcasting %s -> %s", source.lengths, lengths)
    remap_copy(source, out.as_tensor_span(), wrap_index_map(source.lengths, len(lengths)))
    return out


def broadcast_to(source, destination) -> None:
    """Broadcast ``source`` into an existing mutable ``destination``."""
    src = as_read_only_span(source)
    dst = as_mutable_span(destination)
    _check_broadcast_to(src.lengths, dst.lengths)
    remap_copy(src, dst, wrap_index_map(src.lengths, dst.rank))


def try_broadcast_to(source, destination) -> bool:
    """:func:`broadcast_to` returning ``False`` instead of raising on a shape conflict."""
    src = as_read_only_span(source)
    dst = as_mutable_span(destination)
    if not can_broadcast_to(src.lengths, dst.lengths):
        return False
    remap_copy(src, dst, wrap_index_map(src.lengths, dst.rank))
    return True


__all__ = [
    'get_broadcast_shape', 'broadcast_shapes', 'can_broadcast_to',
    'wrap_index_map', 'broadcast', 'broadcast_to', 'try_broadcast_to',
]
