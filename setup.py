# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Tensorspan — Strided Tensor Views and Kernels                       ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""
Tensorspan build configuration.

Pure Python on top of NumPy; there are no compiled extensions. The
repository root is the ``tensorspan`` package itself.

Build
-----
    pip install -e .                          # editable install
    pip install -e .[dev]                     # with the test toolchain
    python -m build                           # wheel / sdist

Runtime environment variables:
    TENSORSPAN_DEFAULT_DTYPE: element type used when none is given
    TENSORSPAN_PRINT_THRESHOLD: element count above which output is summarized
    TENSORSPAN_LOG_LEVEL: level used by ``tensorspan.utils.setup_logging``
"""
import os

from setuptools import setup

# ── Package metadata ──
try:
    with open(os.path.join(os.path.dirname(__file__), 'README.md'), 'r',
              encoding='utf-8') as fh:
        long_description = fh.read()
except FileNotFoundError:
    long_description = ''

setup(
    name='tensorspan',
    version='0.1.0',
    author='Pictofeed, LLC',
    author_email='engineering@pictofeed.io',
    description=(
        'N-dimensional strided tensor views, owning tensors and '
        'flat numeric kernels over NumPy buffers'
    ),
    long_description=long_description,
    long_description_content_type='text/markdown',
    url='https://github.com/pictofeed/tensorspan',
    license='Proprietary',

    package_dir={
        'tensorspan': '.',
        'tensorspan.utils': 'utils',
    },
    packages=[
        'tensorspan',
        'tensorspan.utils',
    ],

    python_requires='>=3.10',
    install_requires=[
        'numpy>=1.24',
    ],
    extras_require={
        'dev': [
            'pytest>=7.0',
            'pytest-benchmark',
        ],
        'test': [
            'pytest>=7.0',
            'pytest-benchmark',
        ],
    },

    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'License :: Other/Proprietary License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Scientific/Engineering :: Mathematics',
    ],
    zip_safe=False,
)
