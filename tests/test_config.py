# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Settings, environment variables, logging setup and element types."""
import importlib
import logging

import numpy as np
import pytest

import tensorspan as ts
from tensorspan import config
from tensorspan.dtype import resolve_dtype
from tensorspan.utils import setup_logging
from tensorspan.utils.logging import _resolve_level


# ──────────────────────── Settings ────────────────────────────────────

class TestDefaultDtype:

    def test_setter_and_getter(self):
        ts.set_default_dtype(ts.int32)
        assert ts.get_default_dtype() == ts.int32
        assert ts.ones(2).dtype == ts.int32

    def test_context_manager_restores(self):
        before = ts.get_default_dtype()
        with ts.default_dtype('float64'):
            assert ts.get_default_dtype() == ts.float64
        assert ts.get_default_dtype() == before

    def test_decorator(self):
        @ts.default_dtype(ts.int16)
        def build():
            return ts.zeros(3)
        assert build().dtype == ts.int16

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            ts.set_default_dtype('U8')


class TestEnvironment:

    def test_env_int(self, monkeypatch):
        monkeypatch.setenv('TENSORSPAN_TEST_INT', '25')
        assert config._env_int('TENSORSPAN_TEST_INT', 3) == 25
        monkeypatch.setenv('TENSORSPAN_TEST_INT', ' ')
        assert config._env_int('TENSORSPAN_TEST_INT', 3) == 3
        monkeypatch.setenv('TENSORSPAN_TEST_INT', 'many')
        with pytest.raises(ValueError, match='TENSORSPAN_TEST_INT'):
            config._env_int('TENSORSPAN_TEST_INT', 3)

    def test_variables_read_at_import(self, monkeypatch):
        monkeypatch.setenv('TENSORSPAN_DEFAULT_DTYPE', 'float64')
        monkeypatch.setenv('TENSORSPAN_PRINT_THRESHOLD', '12')
        try:
            importlib.reload(config)
            assert config.get_default_dtype() == ts.float64
            assert config.get_print_options()['threshold'] == 12
        finally:
            monkeypatch.delenv('TENSORSPAN_DEFAULT_DTYPE')
            monkeypatch.delenv('TENSORSPAN_PRINT_THRESHOLD')
            importlib.reload(config)


class TestPrintOptions:

    def test_validation(self):
        with pytest.raises(ValueError):
            ts.set_print_options(threshold=-1)
        with pytest.raises(ValueError):
            ts.set_print_options(edgeitems=0)

    def test_partial_update(self):
        ts.set_print_options(threshold=5)
        options = ts.get_print_options()
        assert options['threshold'] == 5
        assert options['edgeitems'] == 3


class TestSeed:

    def test_manual_seed_replaces_generator(self):
        ts.manual_seed(1)
        first = config.get_rng().random()
        ts.manual_seed(1)
        assert config.get_rng().random() == first


# ──────────────────────── Logging ─────────────────────────────────────

class TestLogging:

    @pytest.fixture(autouse=True)
    def _reset_logger(self):
        logger = logging.getLogger('tensorspan')
        level = logger.level
        yield
        logger.setLevel(level)

    def test_resolve_level(self, monkeypatch):
        assert _resolve_level('debug') == logging.DEBUG
        assert _resolve_level(logging.INFO) == logging.INFO
        monkeypatch.setenv('TENSORSPAN_LOG_LEVEL', 'ERROR')
        assert _resolve_level(None) == logging.ERROR
        monkeypatch.delenv('TENSORSPAN_LOG_LEVEL')
        assert _resolve_level(None) == logging.WARNING

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            _resolve_level('chatty')

    def test_setup_sets_package_level(self):
        setup_logging('INFO')
        assert logging.getLogger('tensorspan').level == logging.INFO

    def test_library_emits_debug_records(self, caplog):
        with caplog.at_level(logging.DEBUG, logger='tensorspan'):
            ts.broadcast(ts.tensor([1, 2]), [2, 2])
        assert any('Broadcasting' in r.getMessage() for r in caplog.records)


# ──────────────────────── Element types ───────────────────────────────

class TestDtype:

    def test_round_trip_with_numpy(self):
        for member in ts.dtype:
            assert ts.dtype.from_numpy(member.to_numpy()) is member

    def test_aliases(self):
        assert ts.long is ts.int64
        assert ts.double is ts.float64
        assert ts.half is ts.float16

    def test_capabilities(self):
        assert ts.uint16.bit_width == 16
        assert ts.float32.is_floating_point
        assert ts.complex64.is_complex
        assert ts.int8.is_integer and ts.int8.is_signed
        assert not ts.uint8.is_signed
        assert not ts.bool.is_integer

    def test_display(self):
        assert repr(ts.float32) == 'tensorspan.float32'
        assert str(ts.int64) == 'int64'

    def test_resolve(self):
        assert resolve_dtype('float64') == np.float64
        assert resolve_dtype(ts.uint8) == np.uint8
        assert resolve_dtype(None) is None
        assert resolve_dtype(None, ts.int16) == np.int16
        with pytest.raises(TypeError):
            resolve_dtype(np.dtype('U4'))
        with pytest.raises(TypeError):
            ts.dtype.from_numpy(np.dtype('datetime64[s]'))
