"""
_ancestry.py
============
Conversion of a Phylo2Vec vector into an ordered list of merge triples.

Public API
----------
  init_view_matrix(k)
      The initial k x (k+1) view table.
  get_ancestry(v, backend='best')
      k x 3 array of (parent, child, child) rows, root merge first.

Algorithm
---------
No tree object is built.  Leaves are grafted in increasing index order and
the bookkeeping is done entirely with index arrays:

  view      : int64[k, k+1]  Cell (row, col) holds the highest label visible
                             from row ``row`` through column ``col``.
  last_row  : int64[k+1]     Current representative label of each column.
  processed : bool[k]        Rows already merged.

At each of the k steps the largest unprocessed row ``n`` with
``v[n] <= max(view[n])`` is merged with the column ``m`` holding ``v[n]``;
the new internal node receives ``max(last_row) + 1``.  This selection rule is
a tie-break with no freedom: relaxing it yields a different topology.

Node-ID conventions:
  Leaves   : 0 … k
  Internal : k+1 … 2k   (creation order; the root is 2k)

Backends
--------
'python'  ``_ancestry_python`` below, vectorised over rows with numpy.
'numba'   ``_cpu_kernels._ancestry_njit``, an explicit-loop njit kernel.
"""

import logging

import numpy as np

from phylo2vec._errors import AncestryConstructionError
from phylo2vec._vector import as_vector, check_v
from phylo2vec._backend import (
    check_numba_available,
    get_available_backends,
    get_best_backend,
    import_cpu_kernels,
    resolve_backend,
)
from phylo2vec._context import get_backend_override
from phylo2vec._logging import (
    install_numba_warning_filter,
    log_ancestry_built,
    log_backend_availability,
    log_backend_fallback,
    log_kernel_compilation,
    log_optimization_status,
)


logger = logging.getLogger(__name__)

_NUMBA_AVAILABLE = check_numba_available()
_cpu_import_ok, _ancestry_njit = import_cpu_kernels()

# Must match the ANCESTRY_* codes of _cpu_kernels
ANCESTRY_OK = 0
ANCESTRY_NO_ROW = -1
ANCESTRY_NO_COL = -2

# Track first calls to kernels for compilation logging
_kernel_first_call = {"numba-ancestry": True}

log_optimization_status(_NUMBA_AVAILABLE)
log_backend_availability(get_available_backends())
install_numba_warning_filter(_NUMBA_AVAILABLE)


def init_view_matrix(k: int) -> np.ndarray:
    """
    Initialise the view table used by ``get_ancestry``.

    Equivalent to ``np.tril([np.arange(k+1)] * k)``:

        0 0 0 0 0 ...
        0 1 0 0 0 ...
        0 1 2 0 0 ...
        0 1 2 3 0 ...

    Parameters
    ----------
    k : int
        Number of leaves minus one.

    Returns
    -------
    np.ndarray[int64, (k, k+1)]
    """
    return np.tril(np.tile(np.arange(k + 1, dtype=np.int64), (k, 1)))


def _ancestry_python(v: np.ndarray, ancestry: np.ndarray) -> int:
    """
    **Private.**  Reference implementation of the merge loop.

    Same contract as ``_cpu_kernels._ancestry_njit``: fills *ancestry* with
    raw ``(last_row[m], last_row[n+1], new_label)`` rows and returns a
    status code.
    """
    k = v.shape[0]
    view = init_view_matrix(k)
    last_row = np.arange(k + 1, dtype=np.int64)
    processed = np.zeros(k, dtype=bool)

    for step in range(k):
        candidates = np.flatnonzero(~processed & (v <= view.max(axis=1)))
        if candidates.size == 0:
            return ANCESTRY_NO_ROW
        n = int(candidates[-1])

        matches = np.flatnonzero(view[n, :k] == v[n])
        if matches.size == 0:
            return ANCESTRY_NO_COL
        m = int(matches[0])

        new_label = int(last_row.max()) + 1
        ancestry[step] = (last_row[m], last_row[n + 1], new_label)

        view[n:, m] = view[n:].max(axis=1) + 1
        last_row[m] = new_label
        processed[n] = True

    return ANCESTRY_OK


def _select_backend(backend: str) -> str:
    """
    **Private.**  Apply the ``use_backend`` override, then resolve *backend*,
    falling back to the best available one with a warning.
    """
    backend_override = get_backend_override()
    if backend_override is not None:
        backend = backend_override

    try:
        return resolve_backend(backend)
    except ValueError as e:
        resolved = get_best_backend()
        log_backend_fallback(str(e), resolved)
        return resolved


def get_ancestry(v, backend: str = "best") -> np.ndarray:
    """
    Get the ancestry of every internal node of the tree encoded by *v*.

    Parameters
    ----------
    v : sequence of int
        Phylo2Vec vector of length k (k + 1 leaves).  Validated with
        ``check_v`` before use.
    backend : str, default 'best'
        'python', 'numba' or 'best'.  A ``use_backend`` block overrides it.

    Returns
    -------
    np.ndarray[int64, (k, 3)]
        Column 0 is the parent, columns 1 and 2 the children.  Row 0 is the
        root merge and row k-1 the leaf-most merge.

    Raises
    ------
    InvalidVectorError
        If *v* violates ``0 <= v[i] <= 2i``.
    AncestryConstructionError
        If the merge loop finds no qualifying row or column.

    Examples
    --------
    >>> get_ancestry([0, 1, 4]).tolist()
    [[6, 3, 5], [5, 4, 0], [4, 2, 1]]
    """
    check_v(v)
    v = np.ascontiguousarray(as_vector(v))
    k = v.shape[0]

    resolved_backend = _select_backend(backend)

    raw = np.zeros((k, 3), dtype=np.int64)

    if resolved_backend == "numba":
        if _kernel_first_call["numba-ancestry"]:
            log_kernel_compilation("numba-ancestry")
            _kernel_first_call["numba-ancestry"] = False
        status = _ancestry_njit(v, raw)
    elif resolved_backend == "python":
        status = _ancestry_python(v, raw)
    else:
        raise RuntimeError(f"Internal error: unhandled backend {resolved_backend!r}")

    if status == ANCESTRY_NO_ROW:
        raise AncestryConstructionError(
            f"No unprocessed row of the view table can be merged "
            f"(vector of length {k}); the vector does not describe a binary tree."
        )
    if status == ANCESTRY_NO_COL:
        raise AncestryConstructionError(
            f"Selected row has no column matching its value "
            f"(vector of length {k}); the vector does not describe a binary tree."
        )

    log_ancestry_built(k + 1, resolved_backend)

    # Flip rows and columns so that we get:
    # row 0: root merge, column 0: parent, columns 1-2: children
    return np.ascontiguousarray(np.flip(raw))
