"""
_logging.py
===========
Logging functions for phylo2vec.

All functions in this module have NO side effects except logging. They take
computed data as parameters and format/emit log messages.

This separation ensures:
- Logging can be easily disabled/mocked in tests
- Computation is separate from presentation
- The codec itself never logs on failure paths; errors propagate to the
  caller untouched
"""

import logging
from typing import Dict, List


logger = logging.getLogger(__name__)


# ============================================================================ #
# System and Backend Logging (called at module import time)
# ============================================================================ #


def log_optimization_status(numba_available: bool) -> None:
    """
    Log Python and numba versions at INFO level.

    Called once at import time of the ancestry module.

    Parameters
    ----------
    numba_available : bool
        Whether numba was successfully imported.
    """
    import platform

    logger.info(
        f"System: {platform.machine()} ({platform.system()}), "
        f"Python {platform.python_version()}"
    )

    if numba_available:
        import numba

        logger.info(f"Numba {numba.__version__} loaded successfully")
        logger.info(f"Numba threads configured: {numba.config.NUMBA_NUM_THREADS}")
    else:
        logger.info("Numba not importable; ancestry will use the numpy backend")


def install_numba_warning_filter(numba_available: bool) -> None:
    """
    Capture NumbaPerformanceWarning and route it through our logger.

    numba issues performance warnings via Python's warnings module. This
    filter intercepts them and logs them at WARNING level so they appear in
    the same stream as other phylo2vec diagnostics.

    Parameters
    ----------
    numba_available : bool
        Whether numba was successfully imported.
    """
    import warnings

    if not numba_available:
        return

    from numba.core.errors import NumbaPerformanceWarning

    original_showwarning = warnings.showwarning

    def custom_showwarning(message, category, filename, lineno, file=None, line=None):
        """Custom showwarning that routes NumbaPerformanceWarning to logger."""
        if issubclass(category, NumbaPerformanceWarning):
            logger.warning(f"Numba performance issue: {message}")
            logger.warning(f"  at {filename}:{lineno}")
            return
        original_showwarning(message, category, filename, lineno, file, line)

    warnings.showwarning = custom_showwarning


def log_backend_availability(backends_available: List[str]) -> None:
    """
    Log which ancestry backends are available.

    Parameters
    ----------
    backends_available : List[str]
        List of available backends (e.g., ['python', 'numba'])
    """
    logger.info(f"Available backends: {', '.join(backends_available)}")

    if "numba" in backends_available:
        logger.info("  numba: LLVM-compiled ancestry kernel (numba.njit)")
    if "python" in backends_available:
        logger.info("  python: numpy reference implementation")

    logger.info(f"Default backend='best' will use: {backends_available[-1]}")


# ============================================================================ #
# Per-call Logging (encode path)
# ============================================================================ #


def log_backend_fallback(message: str, resolved_backend: str) -> None:
    """Warn that a requested backend was unavailable."""
    logger.warning("%s; falling back to %r", message, resolved_backend)


def log_kernel_compilation(kernel_key: str) -> None:
    """Announce the first call of a JIT kernel, which triggers compilation."""
    logger.info(f"  Compiling {kernel_key} kernel (cached for future calls)")


def log_ancestry_built(n_leaves: int, backend: str) -> None:
    """
    Log a completed ancestry construction at DEBUG level.

    Parameters
    ----------
    n_leaves : int
        Number of leaves of the encoded tree.
    backend : str
        Backend that ran the merge loop.
    """
    logger.debug(
        "get_ancestry: %d leaves, %d merges (backend=%r)",
        n_leaves,
        n_leaves - 1,
        backend,
    )


def log_newick_assembled(n_merges: int, n_chars: int) -> None:
    """Log the size of an assembled Newick string at DEBUG level."""
    logger.debug("build_newick: %d merges -> %d characters", n_merges, n_chars)


# ============================================================================ #
# Per-call Logging (decode path)
# ============================================================================ #


def log_normalization(n_parent: int, n_branch: int) -> None:
    """
    Log how many annotations were stripped from a Newick string.

    Parameters
    ----------
    n_parent : int
        Internal-node labels removed.
    n_branch : int
        Branch-length annotations removed.
    """
    if n_parent or n_branch:
        logger.debug(
            "process_newick: removed %d internal-node labels, %d branch lengths",
            n_parent,
            n_branch,
        )


def log_taxon_mapping(mapping: Dict[int, str]) -> None:
    """
    Log the integerization of taxon names at INFO level.

    Parameters
    ----------
    mapping : Dict[int, str]
        Integer label -> original taxon name.
    """
    if not mapping:
        return

    n_mapped = len(mapping)
    if n_mapped <= 5:
        pairs = ", ".join(f"{taxon}->{label}" for label, taxon in mapping.items())
        logger.info("Integerized %d taxon labels: %s", n_mapped, pairs)
    else:
        logger.info("Integerized %d taxon labels", n_mapped)


def log_vector_decoded(num_leaves: int) -> None:
    """Log a completed decode at DEBUG level."""
    logger.debug(
        "newick2v: %d leaves, %d cherries collapsed", num_leaves, max(num_leaves - 1, 0)
    )
