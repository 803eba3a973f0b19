"""
tests/test_ancestry.py
======================
Pytest test suite for the ancestry builder.

Reference vectors
-----------------
Hand-traced through the merge loop (raw triples are
(last_row[m], last_row[n+1], new_label); the returned array is that list
flipped on both axes):

  [0, 1, 4]   raw (1,2,4) (0,4,5) (5,3,6)  ->  [[6,3,5], [5,4,0], [4,2,1]]
  [0]         raw (0,1,2)                  ->  [[2,1,0]]
  [0, 1]      raw (1,2,3) (0,3,4)          ->  [[4,3,0], [3,2,1]]
  [0, 2]      raw (0,1,3) (3,2,4)          ->  [[4,2,3], [3,1,0]]
  [0, 0, 0]   raw (0,3,4) (4,2,5) (5,1,6)  ->  [[6,1,5], [5,2,4], [4,3,0]]
"""

import numpy as np
import pytest

import phylo2vec._ancestry as ancestry_module
from phylo2vec._ancestry import (
    ANCESTRY_NO_COL,
    ANCESTRY_NO_ROW,
    ANCESTRY_OK,
    _ancestry_python,
    get_ancestry,
    init_view_matrix,
)
from phylo2vec._errors import AncestryConstructionError, InvalidVectorError
from phylo2vec._vector import sample


BACKENDS = ["python", "numba"]

REFERENCE = [
    ([0, 1, 4], [[6, 3, 5], [5, 4, 0], [4, 2, 1]]),
    ([0], [[2, 1, 0]]),
    ([0, 1], [[4, 3, 0], [3, 2, 1]]),
    ([0, 2], [[4, 2, 3], [3, 1, 0]]),
    ([0, 0, 0], [[6, 1, 5], [5, 2, 4], [4, 3, 0]]),
]


# ======================================================================== #
# View table                                                                #
# ======================================================================== #


class TestInitViewMatrix:
    def test_small(self):
        expected = [
            [0, 0, 0, 0],
            [0, 1, 0, 0],
            [0, 1, 2, 0],
        ]
        assert init_view_matrix(3).tolist() == expected

    def test_shape(self):
        assert init_view_matrix(7).shape == (7, 8)

    def test_lower_triangular_arange(self):
        view = init_view_matrix(6)
        for row in range(6):
            for col in range(7):
                assert view[row, col] == (col if row >= col else 0)

    def test_empty(self):
        assert init_view_matrix(0).shape == (0, 1)


# ======================================================================== #
# get_ancestry                                                              #
# ======================================================================== #


class TestGetAncestry:
    @pytest.mark.parametrize("backend", BACKENDS)
    @pytest.mark.parametrize("v, expected", REFERENCE)
    def test_reference_vectors(self, v, expected, backend):
        assert get_ancestry(v, backend=backend).tolist() == expected

    @pytest.mark.parametrize("backend", BACKENDS)
    def test_empty_vector(self, backend):
        anc = get_ancestry([], backend=backend)
        assert anc.shape == (0, 3)

    @pytest.mark.parametrize("backend", BACKENDS)
    def test_invalid_vector_raises(self, backend):
        with pytest.raises(InvalidVectorError):
            get_ancestry([0, 1, 5], backend=backend)

    @pytest.mark.parametrize("k", [1, 2, 5, 20, 64])
    def test_label_conventions(self, k):
        """Leaves are 0..k, internal nodes k+1..2k, each used exactly once."""
        v = sample(k, rng=np.random.default_rng(k))
        anc = get_ancestry(v)

        assert anc.shape == (k, 3)
        # Parents are created in increasing order, so the root comes first
        np.testing.assert_array_equal(anc[:, 0], np.arange(2 * k, k, -1))
        # Every node except the root is a child exactly once
        children = np.sort(anc[:, 1:].ravel())
        np.testing.assert_array_equal(children, np.arange(2 * k))
        # A parent is always newer than both its children
        assert np.all(anc[:, 0] > anc[:, 1])
        assert np.all(anc[:, 0] > anc[:, 2])

    def test_returns_contiguous_int64(self):
        anc = get_ancestry([0, 1, 4])
        assert anc.dtype == np.int64
        assert anc.flags["C_CONTIGUOUS"]

    def test_accepts_numpy_input_without_mutation(self):
        v = np.array([0, 1, 4], dtype=np.int32)
        get_ancestry(v)
        assert v.tolist() == [0, 1, 4]


# ======================================================================== #
# Failure paths of the merge loop                                           #
# ======================================================================== #


class TestAncestryConstructionErrors:
    """
    A vector that passes check_v always produces a full ancestry, so these
    tests bypass validation to reach the merge-loop failure codes.
    """

    def test_reference_reports_no_row(self):
        # v[1] = 5 can never become visible in row 1
        raw = np.zeros((2, 3), dtype=np.int64)
        assert _ancestry_python(np.array([0, 5]), raw) == ANCESTRY_NO_ROW

    def test_reference_reports_ok(self):
        raw = np.zeros((3, 3), dtype=np.int64)
        assert _ancestry_python(np.array([0, 1, 4]), raw) == ANCESTRY_OK
        assert raw.tolist() == [[1, 2, 4], [0, 4, 5], [5, 3, 6]]

    @pytest.mark.parametrize("backend", BACKENDS)
    def test_no_row_raises(self, backend, monkeypatch):
        monkeypatch.setattr(ancestry_module, "check_v", lambda v: None)
        with pytest.raises(AncestryConstructionError, match="No unprocessed row"):
            get_ancestry([0, 5], backend=backend)

    def test_no_column_raises(self, monkeypatch):
        monkeypatch.setattr(
            ancestry_module, "_ancestry_python", lambda v, raw: ANCESTRY_NO_COL
        )
        with pytest.raises(AncestryConstructionError, match="no column"):
            get_ancestry([0, 1], backend="python")
