"""
_backend.py
===========
Backend detection and selection for the ancestry builder.

Two backends compute identical results:

  'python'  numpy reference implementation (always available, easy to debug)
  'numba'   JIT-compiled kernel from _cpu_kernels.py

Functions in this module have NO side effects - they only query system state.
Logging is done by the calling code, not here.
"""

from typing import List, Optional, Tuple


# ============================================================================ #
# Backend Detection (No Side Effects)
# ============================================================================ #


def check_numba_available() -> bool:
    """
    Check if numba can be imported.

    Returns
    -------
    bool
        True if numba can be imported, False otherwise.
    """
    try:
        import numba  # noqa: F401

        return True
    except ImportError:
        return False


def get_available_backends() -> List[str]:
    """
    Get list of available execution backends.

    Returns
    -------
    list[str]
        List of available backends in preference order (last is best).
        Always includes 'python'; includes 'numba' when the compiled kernel
        module imports.

    Examples
    --------
    >>> get_available_backends()
    ['python', 'numba']
    """
    backends = ["python"]

    kernels_ok, _ = import_cpu_kernels()
    if kernels_ok:
        backends.append("numba")

    return backends


def get_best_backend() -> str:
    """
    Get the most optimized available backend.

    Returns
    -------
    str
        'numba' if available, otherwise 'python'.
    """
    return get_available_backends()[-1]


def resolve_backend(backend: str) -> str:
    """
    Resolve a backend specification to an actual backend.

    Parameters
    ----------
    backend : str
        'best' or the name of a specific backend.

    Returns
    -------
    str
        Resolved backend name.

    Raises
    ------
    ValueError
        If requested backend is not available.

    Examples
    --------
    >>> resolve_backend('best')
    'numba'

    >>> resolve_backend('python')
    'python'

    >>> resolve_backend('cuda')
    Traceback (most recent call last):
        ...
    ValueError: Backend 'cuda' not available. Available backends: python, numba
    """
    if backend == "best":
        return get_best_backend()

    available = get_available_backends()
    if backend not in available:
        raise ValueError(
            f"Backend '{backend}' not available. "
            f"Available backends: {', '.join(available)}"
        )

    return backend


# ============================================================================ #
# Kernel Import Helpers
# ============================================================================ #


def import_cpu_kernels() -> Tuple[bool, Optional[object]]:
    """
    Try to import the compiled ancestry kernel from _cpu_kernels.

    Returns
    -------
    tuple
        (success, ancestry_kernel)
        - success: Whether import succeeded
        - ancestry_kernel: _ancestry_njit function or None
    """
    try:
        from phylo2vec._cpu_kernels import _ancestry_njit

        return (True, _ancestry_njit)
    except ImportError:
        return (False, None)


def get_backend_info() -> dict:
    """
    Get comprehensive backend information.

    Returns
    -------
    dict
        Dictionary with keys:
        - 'numba_available': bool
        - 'backends': list[str]
        - 'best_backend': str
        - 'cpu_kernels_available': bool

    Examples
    --------
    >>> info = get_backend_info()
    >>> info['best_backend']
    'numba'
    """
    cpu_kernels_ok, _ = import_cpu_kernels()

    return {
        "numba_available": check_numba_available(),
        "backends": get_available_backends(),
        "best_backend": get_best_backend(),
        "cpu_kernels_available": cpu_kernels_ok,
    }
