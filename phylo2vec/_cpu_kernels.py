"""
_cpu_kernels.py
===============
CPU-compiled ancestry kernel using Numba.

This module contains ONLY numba-accelerated code and should not import other
project modules to avoid import-time complications.

Exported Functions
------------------
_ancestry_njit : njit function
    Builds the raw (unflipped) ancestry array of a Phylo2Vec vector.

Status codes
------------
Numba kernels cannot raise the project's exception classes, so failures are
reported through the return value and turned into exceptions by the Python
wrapper in ``_ancestry.py``:

    ANCESTRY_OK        0   success
    ANCESTRY_NO_ROW   -1   no unprocessed row satisfies the selection rule
    ANCESTRY_NO_COL   -2   the selected row has no column equal to v[row]

Notes
-----
- cache=True persists compiled binary to disk for faster subsequent runs
- The merge loop is inherently sequential (each step depends on the view
  table left by the previous one), so no prange is used
"""

import numpy as np
from numba import njit


ANCESTRY_OK = 0
ANCESTRY_NO_ROW = -1
ANCESTRY_NO_COL = -2


@njit(cache=True)
def _ancestry_njit(v, ancestry):
    """
    Fill *ancestry* with one raw merge triple per step.

    Parameters
    ----------
    v        : int64[k]
        Validated Phylo2Vec vector.
    ancestry : int64[k, 3]
        Output.  Row ``step`` receives ``(last_row[m], last_row[n+1],
        new_label)`` for the merge performed at that step.

    Returns
    -------
    int
        One of the ANCESTRY_* status codes.

    Notes
    -----
    ``row_max[i]`` tracks ``max(view[i])`` incrementally: the initial view
    row ``i`` is ``0..i`` followed by zeros, and every update sets one cell
    of the row to its current maximum plus one.
    """
    k = v.shape[0]

    view = np.zeros((k, k + 1), dtype=np.int64)
    row_max = np.empty(k, dtype=np.int64)
    for i in range(k):
        for j in range(i + 1):
            view[i, j] = j
        row_max[i] = i

    last_row = np.arange(k + 1)
    processed = np.zeros(k, dtype=np.bool_)

    for step in range(k):
        # Largest unprocessed row whose value is visible in its view row
        n = -1
        for row in range(k - 1, -1, -1):
            if not processed[row] and v[row] <= row_max[row]:
                n = row
                break
        if n == -1:
            return ANCESTRY_NO_ROW

        m = -1
        for col in range(k):
            if view[n, col] == v[n]:
                m = col
                break
        if m == -1:
            return ANCESTRY_NO_COL

        new_label = last_row[0]
        for j in range(1, k + 1):
            if last_row[j] > new_label:
                new_label = last_row[j]
        new_label += 1

        ancestry[step, 0] = last_row[m]
        ancestry[step, 1] = last_row[n + 1]
        ancestry[step, 2] = new_label

        for i in range(n, k):
            row_max[i] += 1
            view[i, m] = row_max[i]

        last_row[m] = new_label
        processed[n] = True

    return ANCESTRY_OK
