"""
conftest.py
===========
Session-level pytest configuration for the test suite.

Custom marks
------------
large_scale
    Applied to round-trip tests over trees with hundreds of leaves.  The
    string-rewriting decoder is cubic in the number of leaves, so these take
    noticeably longer than the rest of the suite.  Deselect with
    ``-m 'not large_scale'``.

Warning filters
---------------
NumbaPerformanceWarning messages are filtered out during tests. They are
about compilation choices, not correctness.
"""

import warnings

from numba.core.errors import NumbaPerformanceWarning


def pytest_configure(config):
    """
    Configure pytest before test collection begins.

    This runs before any test modules are imported, which is important for
    catching warnings from numba kernel compilation.
    """
    config.addinivalue_line(
        "markers",
        "large_scale: round trips over trees with hundreds of leaves "
        "(deselect with -m 'not large_scale')",
    )

    warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)


def pytest_unconfigure(config):
    """Restore default warning behavior."""
    warnings.resetwarnings()
