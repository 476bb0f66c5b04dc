# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""tensorspan.utils: Utility modules."""
from __future__ import annotations

from . import logging
from .logging import setup_logging

__all__ = ['logging', 'setup_logging']
