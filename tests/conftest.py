# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Shared fixtures for the tensorspan test suite."""
import numpy as np
import pytest

import tensorspan as ts
from tensorspan import config


@pytest.fixture(autouse=True)
def _isolated_settings():
    """Restore process-wide settings and reseed the RNG around every test."""
    dtype = config.default_numpy_dtype()
    options = config.get_print_options()
    config.manual_seed(42)
    np.random.seed(42)
    yield
    config.set_default_dtype(dtype)
    config.set_print_options(**options)


@pytest.fixture
def grid():
    """The 2x3 tensor [[1, 2, 3], [4, 5, 6]] as int64."""
    return ts.create([1, 2, 3, 4, 5, 6], lengths=[2, 3], dtype=ts.int64)


@pytest.fixture
def square():
    """A 4x4 float64 tensor holding 0..15 in row-major order."""
    return ts.create(np.arange(16, dtype=np.float64), lengths=[4, 4])


@pytest.fixture
def buffer():
    """A writable flat float64 buffer holding 0..11."""
    return np.arange(12, dtype=np.float64)
