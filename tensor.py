# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Owning tensor: a flat numpy buffer plus a strided layout.

A :class:`Tensor` owns one 1-D ``ndarray`` and describes the elements it
covers with a start offset, ``lengths`` and ``strides``. Views and
aliasing slices share that ``ndarray``: two tensors produced by slicing
reference the *same* buffer, whose lifetime is governed by Python
reference counting. Nothing is ever copied unless an operation documents
that it densifies.
"""
from __future__ import annotations

import ctypes
import logging
import weakref
from typing import Any, Sequence

import numpy as np

from . import config as _config
from .dtype import dtype as Dtype, resolve_dtype
from .errors import InvalidOperationError
from .shape import (
    as_lengths,
    compute_flat_length,
    has_any_dense_dimensions,
    is_dense,
    required_capacity,
    validate_capacity,
    validate_lengths_and_strides,
)
from .span import (
    ReadOnlyTensorSpan,
    TensorDimensionSpan,
    TensorSpan,
    _render,
    remap_copy,
)

logger = logging.getLogger(__name__)


class MemoryHandle:
    """Pin guard exposing a stable raw address of a tensor's first element.

    Holding the handle keeps the backing buffer alive. :meth:`release` is
    idempotent; the owning tensor also releases its handle when it is
    garbage collected. Usable as a context manager.
    """

    __slots__ = ('_buffer', '_address', '_released', '_finalizer', '__weakref__')

    def __init__(self, buffer: np.ndarray, start: int):
        self._buffer = buffer
        self._address = buffer.ctypes.data + start * buffer.dtype.itemsize
        self._released = False
        self._finalizer = None
        logger.debug("Pinned buffer at 0x%x (%d elements)", self._address, buffer.shape[0])

    @property
    def address(self) -> int:
        if self._released:
            raise InvalidOperationError("Memory handle has been released.")
        return self._address

    @property
    def pointer(self) -> ctypes.c_void_p:
        return ctypes.c_void_p(self.address)

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._buffer = None
        if self._finalizer is not None:
            self._finalizer.detach()
            self._finalizer = None
        logger.debug("Released pin at 0x%x", self._address)

    def __enter__(self) -> 'MemoryHandle':
        return self

    def __exit__(self, *args) -> None:
        self.release()

    def __repr__(self) -> str:
        state = 'released' if self._released else f'address=0x{self._address:x}'
        return f"MemoryHandle({state})"


class Tensor:
    """N-dimensional tensor that owns its storage.

    ``Tensor(data)`` copies ``data`` (any array-like, span or tensor) into
    a fresh buffer and keeps its shape. Explicit ``lengths``/``strides``
    reinterpret the copied flat data under another layout.
    """

    __slots__ = (
        '_buffer', '_start', '_lengths', '_strides',
        '_pin', '_pin_finalizer', '__weakref__',
    )

    # ------------------------------------------------------------------ #
    #  Construction                                                      #
    # ------------------------------------------------------------------ #

    def __init__(
        self,
        data: Any,
        dtype: Dtype | np.dtype | None = None,
        lengths: Sequence[int] | None = None,
        strides: Sequence[int] | None = None,
        pinned: bool = False,
    ):
        source_lengths = None
        if isinstance(data, (Tensor, ReadOnlyTensorSpan)):
            arr = data.to_numpy()
            source_lengths = data.lengths
            if dtype is not None:
                arr = arr.astype(_resolve_dtype(dtype))
        else:
            arr = np.array(data, dtype=_resolve_dtype(dtype), copy=True)
        resolve_dtype(arr.dtype)
        if lengths is None:
            if strides is not None:
                raise ValueError("strides given without lengths")
            lengths = arr.shape if source_lengths is None else source_lengths
        lengths, strides = validate_lengths_and_strides(lengths, strides)
        buffer = np.ascontiguousarray(arr).reshape(-1)
        validate_capacity(buffer.shape[0], lengths, strides)
        self._buffer: np.ndarray = buffer
        self._start: int = 0
        self._lengths: tuple[int, ...] = lengths
        self._strides: tuple[int, ...] = strides
        self._pin: MemoryHandle | None = None
        self._pin_finalizer = None
        if pinned:
            self.pin()

    @staticmethod
    def _wrap(buffer: np.ndarray, start: int, lengths: tuple[int, ...],
              strides: tuple[int, ...]) -> 'Tensor':
        t = Tensor.__new__(Tensor)
        t._buffer = buffer
        t._start = start
        t._lengths = lengths
        t._strides = strides
        t._pin = None
        t._pin_finalizer = None
        return t

    def _from_view(self, view: ReadOnlyTensorSpan) -> 'Tensor':
        """Aliasing tensor over the same buffer as ``view``."""
        base = self._buffer.ctypes.data
        start = (view._address() - base) // self._buffer.dtype.itemsize
        return Tensor._wrap(self._buffer, start, view.lengths, view.strides)

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
    def start(self) -> int:
        """Offset of the first element within the backing buffer."""
        return self._start

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
    def dtype(self) -> Dtype:
        return Dtype.from_numpy(self._buffer.dtype)

    @property
    def T(self) -> 'Tensor':
        from .transforms import transpose
        return transpose(self)

    def size(self, dim: int | None = None):
        if dim is not None:
            return self._lengths[dim]
        return self._lengths

    def dim(self) -> int:
        return self.rank

    def numel(self) -> int:
        return self.flattened_length

    def shares_buffer_with(self, other: 'Tensor') -> bool:
        return isinstance(other, Tensor) and other._buffer is self._buffer

    # ------------------------------------------------------------------ #
    #  Views                                                             #
    # ------------------------------------------------------------------ #

    def as_tensor_span(self, *start_or_ranges) -> TensorSpan:
        """Mutable view of the tensor (or of a slice of it); no copy."""
        span = TensorSpan._wrap(self._buffer[self._start:], self._lengths,
                                self._strides, self.is_pinned)
        return span.slice(*start_or_ranges) if start_or_ranges else span

    def as_read_only_tensor_span(self, *start_or_ranges) -> ReadOnlyTensorSpan:
        """Read-only view of the tensor (or of a slice of it); no copy."""
        return self.as_tensor_span(*start_or_ranges).as_read_only()

    def slice(self, *start_or_ranges) -> 'Tensor':
        """Aliasing slice: the result shares this tensor's buffer."""
        return self._from_view(self.as_tensor_span().slice(*start_or_ranges))

    def slice_along_dimension(self, dimension: int, index: int) -> 'Tensor':
        view = self.as_tensor_span().slice_along_dimension(dimension, index)
        return self._from_view(view)

    def get_dimension_span(self, dimension: int) -> TensorDimensionSpan:
        return self.as_tensor_span().get_dimension_span(dimension)

    def __getitem__(self, key):
        items, is_element = ReadOnlyTensorSpan._split_key(key)
        span = self.as_tensor_span()
        if is_element:
            return span[items]
        return self._from_view(span._view_for_key(items))

    def __setitem__(self, key, value) -> None:
        if isinstance(value, Tensor):
            value = value.to_numpy()
        self.as_tensor_span()[key] = value

    def to_dense_tensor(self) -> 'Tensor':
        """``self`` when already dense, else a dense copy."""
        if self.is_dense:
            return self
        logger.debug("Densifying tensor of shape %s with strides %s",
                     self._lengths, self._strides)
        out = create_from_shape_uninitialized(self._lengths, self._buffer.dtype)
        remap_copy(self.as_read_only_tensor_span(), out.as_tensor_span())
        return out

    def copy(self) -> 'Tensor':
        """Dense deep copy with its own buffer."""
        return Tensor(self)

    # ------------------------------------------------------------------ #
    #  Pinning                                                           #
    # ------------------------------------------------------------------ #

    @property
    def is_pinned(self) -> bool:
        return self._pin is not None and not self._pin.released

    def pin(self) -> MemoryHandle:
        """Pin the buffer and return its handle; repeated calls reuse it."""
        if self.is_pinned:
            return self._pin
        if self._pin_finalizer is not None:
            self._pin_finalizer.detach()
        handle = MemoryHandle(self._buffer, self._start)
        self._pin = handle
        self._pin_finalizer = handle._finalizer = weakref.finalize(self, handle.release)
        return handle

    def unpin(self) -> None:
        if self._pin is None:
            return
        self._pin.release()
        if self._pin_finalizer is not None:
            self._pin_finalizer.detach()
        self._pin = None
        self._pin_finalizer = None

    def data_ptr(self) -> int:
        return self._buffer.ctypes.data + self._start * self._buffer.dtype.itemsize

    # ------------------------------------------------------------------ #
    #  Bulk access                                                       #
    # ------------------------------------------------------------------ #

    def fill(self, value) -> None:
        self.as_tensor_span().fill(value)

    def clear(self) -> None:
        self.as_tensor_span().clear()

    def copy_to(self, destination) -> None:
        self.as_read_only_tensor_span().copy_to(_as_destination(destination))

    def try_copy_to(self, destination) -> bool:
        return self.as_read_only_tensor_span().try_copy_to(_as_destination(destination))

    def flatten_to(self, destination) -> None:
        if isinstance(destination, Tensor):
            destination = destination.as_tensor_span()
        self.as_read_only_tensor_span().flatten_to(destination)

    def try_flatten_to(self, destination) -> bool:
        if isinstance(destination, Tensor):
            destination = destination.as_tensor_span()
        return self.as_read_only_tensor_span().try_flatten_to(destination)

    def get_span(self, start_indices: Sequence[int], length: int) -> np.ndarray:
        return self.as_tensor_span().get_span(start_indices, length)

    def try_get_span(self, start_indices: Sequence[int], length: int) -> np.ndarray | None:
        return self.as_tensor_span().try_get_span(start_indices, length)

    def to_numpy(self) -> np.ndarray:
        return self.as_read_only_tensor_span().to_numpy()

    numpy = to_numpy

    def __array__(self, dtype=None, copy=None):
        arr = self.to_numpy()
        return arr if dtype is None else arr.astype(dtype)

    def tolist(self):
        return self.to_numpy().tolist()

    def item(self):
        return self.as_read_only_tensor_span().item()

    def __iter__(self):
        return iter(self.as_read_only_tensor_span())

    def __len__(self) -> int:
        if self.rank == 0:
            raise TypeError("len() of a rank-0 tensor")
        return self._lengths[0]

    def __bool__(self) -> bool:
        return bool(self.item())

    def __int__(self) -> int:
        return int(self.item())

    def __float__(self) -> float:
        return float(self.item())

    # ------------------------------------------------------------------ #
    #  Equality & display                                                #
    # ------------------------------------------------------------------ #

    def __eq__(self, other) -> bool:
        """Aliasing equality: same first element address and same shape."""
        if not isinstance(other, Tensor):
            return NotImplemented
        return self.data_ptr() == other.data_ptr() and self._lengths == other._lengths

    def __ne__(self, other) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    __hash__ = None  # type: ignore[assignment]

    def to_string(self, maximum_lengths: Sequence[int] | None = None) -> str:
        dims = ', '.join(str(n) for n in self._lengths)
        header = f"Tensor<{self._buffer.dtype.name}>[{dims}]"
        return _render(header, self.to_numpy(), maximum_lengths)

    def __repr__(self) -> str:
        return self.to_string()

    # ------------------------------------------------------------------ #
    #  Arithmetic operators                                              #
    # ------------------------------------------------------------------ #

    def __add__(self, other):
        from .ops import add
        return add(self, other)

    def __radd__(self, other):
        from .ops import add
        return add(other, self)

    def __sub__(self, other):
        from .ops import subtract
        return subtract(self, other)

    def __rsub__(self, other):
        from .ops import subtract
        return subtract(other, self)

    def __mul__(self, other):
        from .ops import multiply
        return multiply(self, other)

    def __rmul__(self, other):
        from .ops import multiply
        return multiply(other, self)

    def __truediv__(self, other):
        from .ops import divide
        return divide(self, other)

    def __rtruediv__(self, other):
        from .ops import divide
        return divide(other, self)

    def __mod__(self, other):
        from .ops import remainder
        return remainder(self, other)

    def __pow__(self, other):
        from .ops import pow
        return pow(self, other)

    def __neg__(self):
        from .ops import negate
        return negate(self)

    def __abs__(self):
        from .ops import abs
        return abs(self)

    # Bitwise
    def __and__(self, other):
        from .ops import bitwise_and
        return bitwise_and(self, other)

    def __or__(self, other):
        from .ops import bitwise_or
        return bitwise_or(self, other)

    def __xor__(self, other):
        from .ops import xor
        return xor(self, other)

    def __invert__(self):
        from .ops import ones_complement
        return ones_complement(self)

    def __lshift__(self, amount: int):
        from .ops import shift_left
        return shift_left(self, amount)

    def __rshift__(self, amount: int):
        from .ops import shift_right_arithmetic
        return shift_right_arithmetic(self, amount)

    # Ordering comparisons (elementwise); == stays aliasing equality.
    def __lt__(self, other):
        from .ops import less_than
        return less_than(self, other)

    def __le__(self, other):
        from .ops import less_than_or_equal
        return less_than_or_equal(self, other)

    def __gt__(self, other):
        from .ops import greater_than
        return greater_than(self, other)

    def __ge__(self, other):
        from .ops import greater_than_or_equal
        return greater_than_or_equal(self, other)

    # ---- Shape methods ----

    def reshape(self, *lengths) -> 'Tensor':
        from .transforms import reshape
        return reshape(self, as_lengths(lengths))

    def squeeze(self, dim: int | None = None) -> 'Tensor':
        from .transforms import squeeze, squeeze_dimension
        return squeeze(self) if dim is None else squeeze_dimension(self, dim)

    def unsqueeze(self, dim: int) -> 'Tensor':
        from .transforms import unsqueeze
        return unsqueeze(self, dim)

    def permute(self, *order) -> 'Tensor':
        from .transforms import permute_dimensions
        return permute_dimensions(self, as_lengths(order))

    def reverse(self, dim: int | None = None) -> 'Tensor':
        from .transforms import reverse, reverse_dimension
        return reverse(self) if dim is None else reverse_dimension(self, dim)

    def broadcast_to(self, *lengths) -> 'Tensor':
        from .broadcast import broadcast
        return broadcast(self, as_lengths(lengths))

    # ---- Reduction methods ----

    def sum(self):
        from .ops import sum
        return sum(self)

    def product(self):
        from .ops import product
        return product(self)

    def average(self):
        from .ops import average
        return average(self)

    def norm(self):
        from .ops import norm
        return norm(self)

    def max(self):
        from .ops import max
        return max(self)

    def min(self):
        from .ops import min
        return min(self)


def _as_destination(destination) -> TensorSpan:
    if isinstance(destination, Tensor):
        return destination.as_tensor_span()
    return destination


def as_read_only_span(x) -> ReadOnlyTensorSpan:
    """View ``x`` (tensor, span, ndarray or array-like) read-only.

    Tensors, spans and contiguous ndarrays are viewed without copying;
    anything else is first copied into a new tensor.
    """
    if isinstance(x, Tensor):
        return x.as_read_only_tensor_span()
    if isinstance(x, ReadOnlyTensorSpan):
        return x
    if isinstance(x, np.ndarray) and x.flags.c_contiguous:
        return ReadOnlyTensorSpan(x.reshape(-1), x.shape)
    return Tensor(x).as_read_only_tensor_span()


def as_mutable_span(x) -> TensorSpan:
    """Mutable view of ``x``; raises ``TypeError`` for read-only inputs."""
    if isinstance(x, Tensor):
        return x.as_tensor_span()
    if isinstance(x, TensorSpan):
        return x
    if isinstance(x, ReadOnlyTensorSpan):
        raise TypeError("A read-only view cannot be used as a destination")
    if isinstance(x, np.ndarray):
        if not x.flags.c_contiguous:
            raise ValueError("An ndarray destination must be C-contiguous")
        return TensorSpan(x.reshape(-1), x.shape)
    raise TypeError(f"Cannot write into {type(x).__name__}")


# ====================================================================
# Module-level factory functions
# ====================================================================

def _resolve_dtype(dtype) -> np.dtype | None:
    return resolve_dtype(dtype)


def _default_dtype(dtype) -> np.dtype:
    return resolve_dtype(dtype, _config.default_numpy_dtype())


def _allocate(lengths, strides, dtype, init, pinned: bool) -> Tensor:
    lengths, strides = validate_lengths_and_strides(as_lengths(lengths), strides)
    capacity = required_capacity(lengths, strides)
    dt = _default_dtype(dtype)
    if init is None:
        buffer = np.empty(capacity, dtype=dt)
    else:
        buffer = np.full(capacity, init, dtype=dt)
    t = Tensor._wrap(buffer, 0, lengths, strides)
    if pinned:
        t.pin()
    return t


def tensor(data, dtype=None) -> Tensor:
    return Tensor(data, dtype=dtype)


def create(values, lengths: Sequence[int] | None = None,
           strides: Sequence[int] | None = None, dtype=None,
           pinned: bool = False) -> Tensor:
    """Copy ``values`` into a new tensor, optionally under an explicit layout."""
    if lengths is not None and not isinstance(values, (Tensor, ReadOnlyTensorSpan)):
        values = np.asarray(values).reshape(-1)
    return Tensor(values, dtype=dtype, lengths=lengths, strides=strides, pinned=pinned)


def create_from_shape(lengths: Sequence[int], dtype=None,
                      strides: Sequence[int] | None = None,
                      pinned: bool = False) -> Tensor:
    """Zero-initialized tensor; ``strides`` may describe an overlapping layout."""
    return _allocate(lengths, strides, dtype, 0, pinned)


def create_from_shape_uninitialized(lengths: Sequence[int], dtype=None,
                                    strides: Sequence[int] | None = None,
                                    pinned: bool = False) -> Tensor:
    """Tensor whose element values are unspecified until written."""
    return _allocate(lengths, strides, dtype, None, pinned)


def create_from_shape_and_strides(lengths: Sequence[int], strides: Sequence[int],
                                  dtype=None, pinned: bool = False,
                                  uninitialized: bool = False) -> Tensor:
    """Tensor under an explicit, possibly overlapping, layout.

    The buffer holds ``max(flattened length, reach + 1)`` slots.
    """
    return _allocate(lengths, strides, dtype, None if uninitialized else 0, pinned)


def empty_tensor(dtype=None) -> Tensor:
    """The rank-0 tensor with no elements."""
    return Tensor._wrap(np.empty(0, dtype=_default_dtype(dtype)), 0, (), ())


def zeros(*size, dtype=None) -> Tensor:
    return _allocate(as_lengths(size), None, dtype, 0, False)


def zeros_like(input: Tensor, dtype=None) -> Tensor:
    return zeros(input.shape, dtype=dtype or input.dtype)


def ones(*size, dtype=None) -> Tensor:
    return _allocate(as_lengths(size), None, dtype, 1, False)


def ones_like(input: Tensor, dtype=None) -> Tensor:
    return ones(input.shape, dtype=dtype or input.dtype)


def full(size, fill_value, dtype=None) -> Tensor:
    return _allocate(as_lengths(size), None, dtype, fill_value, False)


def full_like(input: Tensor, fill_value, dtype=None) -> Tensor:
    return full(input.shape, fill_value, dtype=dtype or input.dtype)


def empty(*size, dtype=None) -> Tensor:
    return _allocate(as_lengths(size), None, dtype, None, False)


def empty_like(input: Tensor, dtype=None) -> Tensor:
    return empty(input.shape, dtype=dtype or input.dtype)


def arange(*args, dtype=None) -> Tensor:
    arr = np.arange(*args)
    if dtype is not None:
        arr = arr.astype(_resolve_dtype(dtype))
    return Tensor._wrap(arr, 0, (arr.shape[0],), (1,))


def linspace(start, end, steps: int, dtype=None) -> Tensor:
    arr = np.linspace(start, end, steps, dtype=_default_dtype(dtype))
    return Tensor._wrap(arr, 0, (arr.shape[0],), (1,))


__all__ = [
    'Tensor', 'MemoryHandle', 'as_read_only_span', 'as_mutable_span',
    'tensor', 'create', 'create_from_shape', 'create_from_shape_uninitialized',
    'create_from_shape_and_strides', 'empty_tensor', 'zeros', 'zeros_like',
    'ones', 'ones_like', 'full', 'full_like', 'empty', 'empty_like',
    'arange', 'linspace',
]
