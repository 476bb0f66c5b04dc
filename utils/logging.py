# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""tensorspan.utils.logging: Logging setup for applications and tests.

The library itself only emits records through module-level loggers
(``logging.getLogger(__name__)``) and never configures handlers on import.
Call :func:`setup_logging` from an application entry point to see them.
"""
from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _resolve_level(level) -> int:
    if level is None:
        level = os.environ.get('TENSORSPAN_LOG_LEVEL', 'WARNING')
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(level=None) -> None:
    """Configure the root logger.

    Uses ``level`` if given, else ``TENSORSPAN_LOG_LEVEL``, else WARNING.
    Records are formatted as "timestamp - logger name - level - message"
    and written to stdout.
    """
    logging.basicConfig(
        level=_resolve_level(level),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    logging.getLogger('tensorspan').setLevel(_resolve_level(level))


__all__ = ['setup_logging', 'LOG_FORMAT']
