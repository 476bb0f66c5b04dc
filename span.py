# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Strided views over a shared flat buffer.

A view is a 1-D numpy *window* (a basic slice of the backing buffer, so
it aliases the same memory) plus a ``lengths``/``strides`` pair. Views
never own storage: the backing ``ndarray`` stays alive for as long as any
view, tensor or pin handle references it.

:class:`ReadOnlyTensorSpan` hands out values only; its window is a
non-writeable numpy view. :class:`TensorSpan` adds element assignment and
bulk writes. Element access is by index into the shared buffer, never by
reference.

Element order for iteration, copying and flattening is always logical
(row-major multi-index) order, regardless of the stride layout.
"""
from __future__ import annotations

import ctypes
import logging
from typing import Any, Callable, Iterator, Sequence

import numpy as np

from . import config as _config
from .dtype import dtype as Dtype, resolve_dtype
from .errors import (
    CapacityError,
    IndexOutOfRangeError,
    InvalidOperationError,
    ShapeMismatchError,
)
from .scalar import scalar_ops
from .shape import (
    compute_flat_index,
    compute_flat_length,
    flat_offsets,
    has_any_dense_dimensions,
    is_dense,
    logical_offsets,
    max_reachable_offset,
    normalize_dimension,
    resolve_index,
    resolve_range,
    unravel_indices,
    validate_capacity,
    validate_lengths_and_strides,
)

logger = logging.getLogger(__name__)


def _as_window(buffer: Any, start: int, dt=None) -> np.ndarray:
    """Return a 1-D ndarray aliasing ``buffer`` from element ``start`` on."""
    if isinstance(buffer, ReadOnlyTensorSpan):
        raise TypeError("Use slice()/as_read_only() to derive a view from a view")
    if isinstance(buffer, np.ndarray):
        arr = buffer
        if dt is not None and arr.dtype != resolve_dtype(dt):
            raise TypeError(f"Buffer dtype {arr.dtype} does not match {resolve_dtype(dt)}")
    elif isinstance(buffer, (bytes, bytearray, memoryview)):
        arr = np.frombuffer(buffer, dtype=resolve_dtype(dt, np.uint8))
    else:
        # array.array and other buffer exporters share memory; plain
        # sequences are converted (and therefore copied).
        arr = np.asarray(buffer, dtype=resolve_dtype(dt))
    if arr.ndim != 1:
        if not arr.flags.c_contiguous:
            raise ValueError("A multi-dimensional buffer must be C-contiguous")
        arr = arr.reshape(-1)
    resolve_dtype(arr.dtype)
    if not 0 <= start <= arr.shape[0]:
        raise CapacityError(
            f"Start offset {start} lies outside a buffer of length {arr.shape[0]}.",
            required=start, available=arr.shape[0],
        )
    return arr[start:]


def _exports_buffer(obj) -> bool:
    try:
        memoryview(obj)
    except TypeError:
        return False
    return True


def _readonly(window: np.ndarray) -> np.ndarray:
    if not window.flags.writeable:
        return window
    view = window.view()
    view.flags.writeable = False
    return view


class ReadOnlyTensorSpan:
    """Read-only N-dimensional view over a borrowed flat buffer.

    ``ReadOnlyTensorSpan(buffer)`` views a 1-D buffer as rank 1;
    ``ReadOnlyTensorSpan(buffer, lengths, strides, start)`` applies an
    explicit layout (strides default to row-major). The buffer must hold
    at least the flattened length and every reachable element.
    """

    __slots__ = ('_window', '_lengths', '_strides', '_pinned')

    # ------------------------------------------------------------------ #
    #  Construction                                                      #
    # ------------------------------------------------------------------ #

    def __init__(
        self,
        buffer: Any,
        lengths: Sequence[int] | None = None,
        strides: Sequence[int] | None = None,
        start: int = 0,
    ):
        window = _as_window(buffer, start)
        self._init_layout(window, lengths, strides)
        self._window = _readonly(self._window)

    def _init_layout(self, window: np.ndarray, lengths, strides) -> None:
        if lengths is None:
            if strides is not None:
                raise ValueError("strides given without lengths")
            lengths = (window.shape[0],)
        lengths, strides = validate_lengths_and_strides(lengths, strides)
        validate_capacity(window.shape[0], lengths, strides)
        self._window = window
        self._lengths = lengths
        self._strides = strides
        self._pinned = False

    @classmethod
    def _wrap(cls, window: np.ndarray, lengths: tuple[int, ...],
              strides: tuple[int, ...], pinned: bool = False):
        """Build a view from an already-validated layout (no checks)."""
        s = cls.__new__(cls)
        s._window = window if cls is not ReadOnlyTensorSpan else _readonly(window)
        s._lengths = lengths
        s._strides = strides
        s._pinned = pinned
        return s

    @classmethod
    def from_buffer(cls, obj: Any, dtype=None, lengths: Sequence[int] | None = None,
                    strides: Sequence[int] | None = None, start: int = 0):
        """View any buffer-protocol object (bytearray, array.array, mmap, ...)."""
        arr = np.frombuffer(obj, dtype=resolve_dtype(dtype, _config.default_numpy_dtype()))
        return cls(arr, lengths, strides, start)

    @classmethod
    def from_pointer(cls, address, count: int, dtype=None,
                     lengths: Sequence[int] | None = None,
                     strides: Sequence[int] | None = None):
        """View ``count`` elements of raw memory at ``address`` (interop path).

        ``address`` is an int or a ctypes pointer/``c_void_p``. The caller
        guarantees the memory stays valid for the lifetime of the view.
        """
        dt = resolve_dtype(dtype, _config.default_numpy_dtype())
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        if not isinstance(address, int):
            address = ctypes.cast(address, ctypes.c_void_p).value
        if not address and count:
            raise ValueError("Null pointer with non-zero count")
        nbytes = count * dt.itemsize
        raw = (ctypes.c_char * nbytes).from_address(address) if nbytes else bytearray()
        arr = np.frombuffer(raw, dtype=dt, count=count)
        return cls(arr, lengths, strides)

    # ------------------------------------------------------------------ #
    #  Properties                                                        #
    # ------------------------------------------------------------------ #

    @property
    def lengths(self) -> tuple[int, ...]:
        return self._lengths

    @property
    def shape(self) -> tuple[int, ...]:
        return self._lengths

    @property
    def strides(self) -> tuple[int, ...]:
        return self._strides

    @property
    def rank(self) -> int:
        return len(self._lengths)

    @property
    def ndim(self) -> int:
        return len(self._lengths)

    @property
    def flattened_length(self) -> int:
        return compute_flat_length(self._lengths)

    @property
    def is_dense(self) -> bool:
        return is_dense(self._lengths, self._strides)

    @property
    def is_empty(self) -> bool:
        return self.flattened_length == 0

    @property
    def has_any_dense_dimensions(self) -> bool:
        return has_any_dense_dimensions(self._lengths, self._strides)

    @property
    def is_pinned(self) -> bool:
        return self._pinned

    @property
    def dtype(self) -> Dtype:
        return Dtype.from_numpy(self._window.dtype)

    @property
    def itemsize(self) -> int:
        return self._window.dtype.itemsize

    def _address(self) -> int:
        return self._window.__array_interface__['data'][0]

    # ------------------------------------------------------------------ #
    #  Element access                                                    #
    # ------------------------------------------------------------------ #

    def _flat_index(self, indices: Sequence[int]) -> int:
        if len(indices) != self.rank:
            raise ShapeMismatchError(
                f"Index count {len(indices)} does not match rank {self.rank}."
            )
        resolved = [resolve_index(i, n) for i, n in zip(indices, self._lengths)]
        return compute_flat_index(self._strides, resolved)

    def _element(self, indices: Sequence[int]):
        if self.rank == 0:
            if indices:
                raise ShapeMismatchError(
                    f"Index count {len(indices)} does not match rank 0."
                )
            if self._window.shape[0] == 0:
                raise IndexOutOfRangeError("Empty view has no element to read.")
            return self._window[0]
        return self._window[self._flat_index(indices)]

    @staticmethod
    def _split_key(key) -> tuple[tuple, bool]:
        """Normalize an indexing key; returns (items, is_element_access)."""
        if not isinstance(key, tuple):
            key = (key,)
        if all(isinstance(k, (int, np.integer)) for k in key):
            return key, True
        return key, False

    def __getitem__(self, key):
        items, is_element = self._split_key(key)
        if is_element:
            return self._element(items)
        return self._view_for_key(items)

    def _view_for_key(self, items: tuple):
        """Mixed int/slice keys: slice first, then drop the int dimensions."""
        if len(items) != self.rank:
            raise ShapeMismatchError(
                f"Index count {len(items)} does not match rank {self.rank}."
            )
        ranges = []
        dropped = []
        for dim, k in enumerate(items):
            if isinstance(k, (slice, range)):
                ranges.append(k)
            elif isinstance(k, (int, np.integer)):
                i = resolve_index(k, self._lengths[dim])
                ranges.append(slice(i, i + 1))
                dropped.append(dim)
            else:
                raise TypeError(f"Invalid index type: {type(k).__name__}")
        view = self.slice(*ranges)
        for dim in reversed(dropped):
            view = view.slice_along_dimension(dim, 0)
        return view

    def item(self):
        """Python scalar of a rank-0 view or any single-element view."""
        if self.rank == 0:
            return self._element(()).item()
        if self.flattened_length != 1:
            raise ValueError(
                f"only single-element views can be converted to a scalar, "
                f"got shape {list(self._lengths)}"
            )
        return self._window[self._offsets()[0]].item()

    def __len__(self) -> int:
        if self.rank == 0:
            raise TypeError("len() of a rank-0 view")
        return self._lengths[0]

    # ------------------------------------------------------------------ #
    #  Slicing                                                           #
    # ------------------------------------------------------------------ #

    def _subview(self, offset: int, lengths: tuple[int, ...], strides: tuple[int, ...]):
        # Keep exactly the reachable extent of the backing window.
        extent = max_reachable_offset(lengths, strides) + 1
        window = self._window[offset:offset + max(extent, 0)]
        return type(self)._wrap(window, lengths, strides, self._pinned)

    def slice(self, *args):
        """Slice by start indices or by one half-open range per dimension.

        ``view.slice(1, 1)`` / ``view.slice([1, 1])`` drop leading elements;
        ``view.slice(slice(0, 2), range(1, 3))`` selects windows.
        """
        items = args[0] if len(args) == 1 and isinstance(args[0], (list, tuple)) else args
        items = tuple(items)
        if all(isinstance(i, (int, np.integer)) for i in items):
            return self._slice_from_starts(items)
        if all(isinstance(i, (slice, range)) for i in items):
            return self._slice_from_ranges(items)
        raise TypeError("slice() takes either all start indices or all ranges")

    def _slice_from_starts(self, starts: Sequence[int]):
        if len(starts) != self.rank:
            raise ShapeMismatchError(
                f"Index count {len(starts)} does not match rank {self.rank}."
            )
        resolved = [resolve_index(s, n, allow_end=True)
                    for s, n in zip(starts, self._lengths)]
        lengths = tuple(n - s for n, s in zip(self._lengths, resolved))
        return self._subview(compute_flat_index(self._strides, resolved),
                             lengths, self._strides)

    def _slice_from_ranges(self, ranges: Sequence):
        if len(ranges) != self.rank:
            raise ShapeMismatchError(
                f"Range count {len(ranges)} does not match rank {self.rank}."
            )
        bounds = [resolve_range(r, n) for r, n in zip(ranges, self._lengths)]
        offset = compute_flat_index(self._strides, [b[0] for b in bounds])
        return self._subview(offset, tuple(b[1] for b in bounds), self._strides)

    def slice_along_dimension(self, dimension: int, index: int):
        """Fix ``dimension`` at ``index``; the result has rank - 1.

        A rank-1 view yields a rank-0 view wrapping exactly one element.
        """
        dimension = normalize_dimension(dimension, self.rank)
        index = resolve_index(index, self._lengths[dimension])
        offset = index * self._strides[dimension]
        if self.rank == 1:
            return type(self)._wrap(self._window[offset:offset + 1], (), (), self._pinned)
        lengths = self._lengths[:dimension] + self._lengths[dimension + 1:]
        strides = self._strides[:dimension] + self._strides[dimension + 1:]
        return self._subview(offset, lengths, strides)

    def get_dimension_span(self, dimension: int) -> 'TensorDimensionSpan':
        """Lazy sequence of the sub-views along ``dimension``."""
        return TensorDimensionSpan(self, dimension)

    def as_read_only(self) -> 'ReadOnlyTensorSpan':
        return ReadOnlyTensorSpan._wrap(self._window, self._lengths, self._strides,
                                        self._pinned)

    # ------------------------------------------------------------------ #
    #  Bulk reads                                                        #
    # ------------------------------------------------------------------ #

    def _offsets(self) -> np.ndarray:
        """Window offsets of every element, in logical order."""
        return logical_offsets(self._lengths, self._strides)

    def ravel(self) -> np.ndarray:
        """Elements in logical order as a 1-D array.

        Dense views return a read-only view of the backing memory; other
        layouts are gathered into a fresh array.
        """
        n = self.flattened_length
        if self.is_dense:
            return _readonly(self._window[:n])
        logger.debug("Gathering %d elements from non-dense layout %s/%s",
                     n, self._lengths, self._strides)
        return self._window[self._offsets()]

    def to_numpy(self) -> np.ndarray:
        """Copy of the elements as an ndarray of shape ``lengths``."""
        if self.rank == 0:
            if self._window.shape[0] == 0:
                return np.empty((0,), dtype=self._window.dtype)
            return self._window[:1].reshape(()).copy()
        return np.array(self.ravel()).reshape(self._lengths)

    def __array__(self, dtype=None, copy=None):
        arr = self.to_numpy()
        return arr if dtype is None else arr.astype(dtype)

    def tolist(self):
        return self.to_numpy().tolist()

    def __iter__(self) -> Iterator:
        window = self._window
        for offset in self._offsets():
            yield window[offset]

    def copy_to(self, destination: 'TensorSpan') -> None:
        """Copy every element, in logical order, into ``destination``.

        The destination must hold at least as many elements; extra
        destination elements are left untouched.
        """
        if not self.try_copy_to(destination):
            raise CapacityError(
                "Destination is too short.",
                required=self.flattened_length,
                available=destination.flattened_length,
            )

    def try_copy_to(self, destination: 'TensorSpan') -> bool:
        if not isinstance(destination, TensorSpan):
            raise TypeError("copy_to requires a mutable TensorSpan destination")
        n = self.flattened_length
        if destination.flattened_length < n:
            return False
        values = np.array(self.ravel())
        destination._window[destination._offsets()[:n]] = values
        return True

    def flatten_to(self, destination) -> None:
        """Write the elements, in logical order, into a flat mutable buffer."""
        if not self.try_flatten_to(destination):
            raise CapacityError(
                "Destination is too short.",
                required=self.flattened_length, available=len(destination),
            )

    def try_flatten_to(self, destination) -> bool:
        if isinstance(destination, ReadOnlyTensorSpan):
            if not isinstance(destination, TensorSpan):
                raise TypeError("flatten_to requires a mutable destination")
            return self.try_copy_to(destination)
        n = self.flattened_length
        if len(destination) < n:
            return False
        destination[:n] = np.array(self.ravel())
        return True

    def _flat_run(self, start_indices: Sequence[int], length: int) -> tuple[int, int]:
        """Validate a contiguous run of ``length`` elements from ``start_indices``."""
        flat = self._flat_index(start_indices)
        if length < 0:
            raise ValueError(f"length must be non-negative, got {length}")
        if not self.is_dense:
            last = resolve_index(start_indices[-1], self._lengths[-1])
            contiguous = (self.has_any_dense_dimensions
                          and last + length <= self._lengths[-1])
            if not contiguous:
                raise InvalidOperationError(
                    "Cannot take a flat span across a non-dense layout."
                )
        if flat + length > self._window.shape[0]:
            raise IndexOutOfRangeError(
                f"Span of {length} elements at offset {flat} exceeds the view."
            )
        return flat, length

    def get_span(self, start_indices: Sequence[int], length: int) -> np.ndarray:
        """Flat read-only view of ``length`` contiguous elements."""
        flat, length = self._flat_run(start_indices, length)
        return _readonly(self._window[flat:flat + length])

    def try_get_span(self, start_indices: Sequence[int], length: int) -> np.ndarray | None:
        """Like :meth:`get_span` but returns ``None`` for a run outside the view."""
        try:
            return self.get_span(start_indices, length)
        except (IndexOutOfRangeError, InvalidOperationError):
            return None

    # ------------------------------------------------------------------ #
    #  Equality & display                                                #
    # ------------------------------------------------------------------ #

    def __eq__(self, other) -> bool:
        if not isinstance(other, ReadOnlyTensorSpan):
            return NotImplemented
        return self._address() == other._address() and self._lengths == other._lengths

    def __ne__(self, other) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    __hash__ = None  # type: ignore[assignment]

    def _header(self) -> str:
        dims = ', '.join(str(n) for n in self._lengths)
        return f"{type(self).__name__}<{self._window.dtype.name}>[{dims}]"

    def to_string(self, maximum_lengths: Sequence[int] | None = None) -> str:
        """Header plus the element values, optionally cropped per dimension."""
        return _render(self._header(), self.to_numpy(), maximum_lengths)

    def __repr__(self) -> str:
        return self.to_string()

    def __str__(self) -> str:
        return self.to_string()


class TensorSpan(ReadOnlyTensorSpan):
    """Mutable N-dimensional view over a borrowed flat buffer."""

    __slots__ = ()

    def __init__(
        self,
        buffer: Any,
        lengths: Sequence[int] | None = None,
        strides: Sequence[int] | None = None,
        start: int = 0,
    ):
        if not isinstance(buffer, np.ndarray) and not _exports_buffer(buffer):
            raise TypeError(
                f"A mutable view needs an ndarray or a writable buffer, "
                f"got {type(buffer).__name__}"
            )
        window = _as_window(buffer, start)
        if not window.flags.writeable:
            raise InvalidOperationError("Cannot create a mutable view over read-only memory.")
        self._init_layout(window, lengths, strides)

    def __setitem__(self, key, value) -> None:
        items, is_element = self._split_key(key)
        if is_element:
            if self.rank == 0:
                if items:
                    raise ShapeMismatchError(
                        f"Index count {len(items)} does not match rank 0."
                    )
                if self._window.shape[0] == 0:
                    raise IndexOutOfRangeError("Empty view has no element to write.")
                self._window[0] = value
                return
            self._window[self._flat_index(items)] = value
            return
        self._view_for_key(items).assign(value)

    def assign(self, values) -> None:
        """Write a scalar or an array-like of matching size, in logical order."""
        arr = np.asarray(values)
        n = self.flattened_length
        if arr.size == 1:
            self.fill(arr.reshape(-1)[0])
            return
        if arr.size != n:
            raise ShapeMismatchError(
                f"Cannot assign {arr.size} values to a view of {n} elements."
            )
        self._window[self._offsets()] = arr.reshape(-1)

    def fill(self, value) -> None:
        """Set every addressable element to ``value``."""
        if self.rank == 0:
            if self._window.shape[0]:
                self._window[0] = value
            return
        if self.is_dense:
            self._window[:self.flattened_length] = value
        else:
            self._window[self._offsets()] = value

    def clear(self) -> None:
        """Reset every addressable element to the element type's default."""
        self.fill(scalar_ops(self._window.dtype).default)

    def flat_span(self) -> np.ndarray:
        """Writable flat view of a dense layout (aliases the buffer)."""
        if not self.is_dense:
            raise InvalidOperationError(
                "Cannot get a mutable flat span from a non-dense view."
            )
        return self._window[:self.flattened_length]

    def get_span(self, start_indices: Sequence[int], length: int) -> np.ndarray:
        """Writable flat view of ``length`` contiguous elements."""
        flat, length = self._flat_run(start_indices, length)
        return self._window[flat:flat + length]


class TensorDimensionSpan:
    """Sub-views along one dimension of a view; iterable any number of times."""

    __slots__ = ('_span', '_dimension')

    def __init__(self, span: ReadOnlyTensorSpan, dimension: int):
        self._dimension = normalize_dimension(dimension, span.rank)
        self._span = span

    @property
    def dimension(self) -> int:
        return self._dimension

    def __len__(self) -> int:
        return self._span.lengths[self._dimension]

    def __getitem__(self, index: int):
        return self._span.slice_along_dimension(self._dimension, index)

    def __iter__(self):
        for i in range(len(self)):
            yield self._span.slice_along_dimension(self._dimension, i)

    def __repr__(self) -> str:
        return (f"TensorDimensionSpan(dimension={self._dimension}, "
                f"length={len(self)}, of={self._span._header()})")


# ====================================================================
# Shared index-remapping copy
# ====================================================================

def remap_copy(
    source: ReadOnlyTensorSpan,
    destination: TensorSpan,
    index_map: Callable[[tuple[np.ndarray, ...]], Sequence[np.ndarray]] | None = None,
) -> None:
    """Copy ``source`` into ``destination`` through a multi-index mapping.

    Every destination element, visited in logical order, is unravelled to
    its multi-index; ``index_map`` turns the destination index arrays into
    source index arrays (identity when omitted, in which case both views
    must share a shape). Values are gathered before any write, so the
    source and destination may overlap.
    """
    dst_index = unravel_indices(destination.lengths)
    if index_map is None:
        if source.lengths != destination.lengths:
            raise ShapeMismatchError(
                f"Shape {list(source.lengths)} does not match {list(destination.lengths)}."
            )
        src_index = dst_index
    else:
        src_index = tuple(index_map(dst_index))
    count = destination.flattened_length
    if count == 0:
        return
    logger.debug("remap_copy: %s -> %s (%d elements)",
                 source.lengths, destination.lengths, count)
    dst_offsets = flat_offsets(dst_index, destination.strides)
    if source.rank == 0:
        # A scalar view feeds every destination element.
        values = source._element(())
    else:
        values = source._window[flat_offsets(src_index, source.strides)]
    destination._window[dst_offsets] = values


def _render(header: str, data: np.ndarray, maximum_lengths=None) -> str:
    opts = _config.get_print_options()
    if maximum_lengths is not None and data.ndim:
        if len(maximum_lengths) != data.ndim:
            raise ShapeMismatchError(
                f"Expected {data.ndim} maximum lengths, got {len(maximum_lengths)}."
            )
        data = data[tuple(slice(0, int(m)) for m in maximum_lengths)]
    body = np.array2string(data, separator=', ', threshold=opts['threshold'],
                           edgeitems=opts['edgeitems'])
    return f"{header}\n{body}"


__all__ = ['ReadOnlyTensorSpan', 'TensorSpan', 'TensorDimensionSpan', 'remap_copy']
