# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""
Tensorspan: N-dimensional strided views, owning tensors and flat kernels.

NumPy 1-D arrays are the backing store. Views describe any layout over
them with per-dimension lengths and strides (zero strides included), the
owning :class:`Tensor` adds pinning and densification, and
:mod:`tensorspan.ops` provides broadcasting numeric operations on top of
the shape-unaware kernels in :mod:`tensorspan.primitives`.

Usage::

    import tensorspan as ts
    from tensorspan import ops

    t = ts.create([1, 2, 3, 4, 5, 6], lengths=[2, 3])
    ops.sum(t)                                # 21
    ts.permute_dimensions(t, [1, 0]).tolist() # [[1, 4], [2, 5], [3, 6]]
    view = t.as_read_only_tensor_span()[:, 1:]
"""
from __future__ import annotations

__version__ = "0.1.0"
__author__ = "Pictofeed, LLC"

# ── Core tensor class & factory functions ──
from .tensor import (
    Tensor,
    MemoryHandle,
    tensor,
    create, create_from_shape, create_from_shape_uninitialized,
    create_from_shape_and_strides,
    empty_tensor,
    zeros, zeros_like,
    ones, ones_like,
    full, full_like,
    empty, empty_like,
    arange, linspace,
    as_read_only_span, as_mutable_span,
)

# ── Views ──
from .span import (
    ReadOnlyTensorSpan,
    TensorSpan,
    TensorDimensionSpan,
    remap_copy,
)

# ── Dtype constants ──
from .dtype import (
    dtype,
    float16, float32, float64, half, double,
    int8, int16, int32, int64, long,
    uint8, uint16, uint32, uint64,
    complex64, complex128,
)
# exported under the builtin's name, as ts.bool
from .dtype import bool as bool

# ── Errors ──
from .errors import (
    TensorError,
    ShapeMismatchError,
    CapacityError,
    BroadcastError,
    IndexOutOfRangeError,
    UnsupportedElementWidthError,
    InvalidOperationError,
)

# ── Configuration ──
from .config import (
    get_default_dtype, set_default_dtype, default_dtype,
    get_print_options, set_print_options, print_options,
    manual_seed,
)

# ── Broadcasting & shape transforms ──
from .broadcast import (
    get_broadcast_shape, broadcast_shapes, can_broadcast_to,
    broadcast, broadcast_to, try_broadcast_to,
)
from .transforms import (
    reshape, reshape_into,
    squeeze, squeeze_dimension, unsqueeze,
    permute_dimensions, permute_dimensions_into, transpose,
    reverse, reverse_dimension, reverse_into,
    concatenate, concatenate_on_dimension, concatenate_into,
    stack, stack_along_dimension, stack_into,
    split,
)

# ── Sub-modules ──
from . import ops
from . import primitives
from . import scalar
from . import shape
from . import utils

__all__ = [
    "__version__",
    "__author__",

    # Tensor
    'Tensor', 'MemoryHandle', 'tensor', 'create', 'create_from_shape',
    'create_from_shape_uninitialized', 'create_from_shape_and_strides', 'empty_tensor',
    'zeros', 'zeros_like', 'ones', 'ones_like', 'full', 'full_like',
    'empty', 'empty_like', 'arange', 'linspace',
    'as_read_only_span', 'as_mutable_span',
    # Views
    'ReadOnlyTensorSpan', 'TensorSpan', 'TensorDimensionSpan', 'remap_copy',
    # Dtypes
    'dtype', 'float16', 'float32', 'float64', 'half', 'double',
    'int8', 'int16', 'int32', 'int64', 'long',
    'uint8', 'uint16', 'uint32', 'uint64', 'complex64', 'complex128', 'bool',
    # Errors
    'TensorError', 'ShapeMismatchError', 'CapacityError', 'BroadcastError',
    'IndexOutOfRangeError', 'UnsupportedElementWidthError',
    'InvalidOperationError',
    # Configuration
    'get_default_dtype', 'set_default_dtype', 'default_dtype',
    'get_print_options', 'set_print_options', 'print_options', 'manual_seed',
    # Broadcasting
    'get_broadcast_shape', 'broadcast_shapes', 'can_broadcast_to',
    'broadcast', 'broadcast_to', 'try_broadcast_to',
    # Shape transforms
    'reshape', 'reshape_into', 'squeeze', 'squeeze_dimension', 'unsqueeze',
    'permute_dimensions', 'permute_dimensions_into', 'transpose',
    'reverse', 'reverse_dimension', 'reverse_into',
    'concatenate', 'concatenate_on_dimension', 'concatenate_into',
    'stack', 'stack_along_dimension', 'stack_into', 'split',
    # Sub-modules
    'ops', 'primitives', 'scalar', 'shape', 'utils',
]
