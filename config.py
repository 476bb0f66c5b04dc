# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Process-wide settings: default element type, print options, RNG seed.

Settings live in module globals. Each has a getter/setter pair and, where it is
useful to scope a change, a context manager that doubles as a decorator.

Environment variables read at import time:
    TENSORSPAN_DEFAULT_DTYPE    default element type (e.g. "float64")
    TENSORSPAN_PRINT_THRESHOLD  element count above which reprs summarize
    TENSORSPAN_LOG_LEVEL        consumed by :func:`tensorspan.utils.logging.setup_logging`
"""
from __future__ import annotations

import functools
import os

import numpy as np

from .dtype import dtype as Dtype, resolve_dtype


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


# ──────────────────────── Default element type ────────────────────────

_default_dtype: np.dtype = resolve_dtype(
    os.environ.get('TENSORSPAN_DEFAULT_DTYPE') or None, np.float32
)


def get_default_dtype() -> Dtype:
    return Dtype.from_numpy(_default_dtype)


def set_default_dtype(dt) -> None:
    global _default_dtype
    _default_dtype = resolve_dtype(dt)


def default_numpy_dtype() -> np.dtype:
    return _default_dtype


class default_dtype:
    """Context manager / decorator that temporarily changes the default dtype."""

    def __init__(self, dt):
        self._dtype = resolve_dtype(dt)

    def __enter__(self):
        self._prev = _default_dtype
        set_default_dtype(self._dtype)
        return self

    def __exit__(self, *args):
        set_default_dtype(self._prev)

    def __call__(self, fn):
        @functools.wraps(fn)
        def wrapper(*a, **kw):
            with self:
                return fn(*a, **kw)
        return wrapper


# ──────────────────────── Print options ───────────────────────────────

_print_threshold: int = _env_int('TENSORSPAN_PRINT_THRESHOLD', 1000)
_print_edgeitems: int = 3


def get_print_options() -> dict:
    return {'threshold': _print_threshold, 'edgeitems': _print_edgeitems}


def set_print_options(threshold: int | None = None,
                      edgeitems: int | None = None) -> None:
    global _print_threshold, _print_edgeitems
    if threshold is not None:
        if threshold < 0:
            raise ValueError(f"threshold must be non-negative, got {threshold}")
        _print_threshold = threshold
    if edgeitems is not None:
        if edgeitems < 1:
            raise ValueError(f"edgeitems must be positive, got {edgeitems}")
        _print_edgeitems = edgeitems


class print_options:
    """Context manager that scopes :func:`set_print_options`."""

    def __init__(self, threshold: int | None = None,
                 edgeitems: int | None = None):
        self._threshold = threshold
        self._edgeitems = edgeitems

    def __enter__(self):
        self._prev = get_print_options()
        set_print_options(self._threshold, self._edgeitems)
        return self

    def __exit__(self, *args):
        set_print_options(**self._prev)


# ──────────────────────── Random state ────────────────────────────────

_rng: np.random.Generator = np.random.default_rng()


def manual_seed(seed: int) -> None:
    """Reseed the generator used by the random fill kernels."""
    global _rng
    _rng = np.random.default_rng(seed)


def get_rng() -> np.random.Generator:
    return _rng


__all__ = [
    'get_default_dtype', 'set_default_dtype', 'default_dtype',
    'get_print_options', 'set_print_options', 'print_options',
    'manual_seed', 'get_rng',
]
