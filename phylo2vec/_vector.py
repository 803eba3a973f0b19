"""
_vector.py
==========
Validation and uniform sampling of Phylo2Vec vectors.

A vector ``v`` of length ``k`` describes a rooted binary topology over
``k + 1`` leaves.  Element ``v[i]`` says where leaf ``i + 1`` is grafted
onto the partial tree built from leaves ``0..i``, so it can take ``2i + 1``
distinct values:

    0 <= v[i] <= 2 * i        (hence v[0] == 0)

Every vector satisfying this bound encodes exactly one topology, which makes
uniform sampling trivial: draw each element independently.
"""

from typing import Optional

import numpy as np

from phylo2vec._errors import InvalidVectorError


# Shared generator, created once per process.  ``seed()`` replaces it.
_rng = np.random.default_rng()


def seed(value: Optional[int] = None) -> None:
    """
    Re-create the generator shared by ``sample``.

    Parameters
    ----------
    value : int or None
        Seed passed to ``numpy.random.default_rng``.  None draws fresh
        entropy from the OS.

    Examples
    --------
    >>> seed(42)
    >>> a = sample(10)
    >>> seed(42)
    >>> b = sample(10)
    >>> bool((a == b).all())
    True
    """
    global _rng
    _rng = np.random.default_rng(value)


def sample(k: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """
    Sample a uniformly random Phylo2Vec vector for ``k + 1`` leaves.

    Parameters
    ----------
    k : int
        Vector length (number of leaves minus one).  ``k = 0`` gives the
        empty vector of the single-leaf tree.
    rng : numpy.random.Generator, optional
        Generator to draw from instead of the shared one.

    Returns
    -------
    np.ndarray[int64, k]
        Element ``i`` is uniform on ``[0, 2i]``.

    Raises
    ------
    ValueError
        If *k* is negative.
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}.")
    if rng is None:
        rng = _rng
    highs = 2 * np.arange(k, dtype=np.int64)
    return rng.integers(0, highs, endpoint=True, dtype=np.int64)


def as_vector(v) -> np.ndarray:
    """
    Coerce *v* to a 1-D int64 array without validating the element bounds.

    Raises
    ------
    InvalidVectorError
        If *v* is not a 1-D sequence of integers.
    """
    arr = np.asarray(v)
    if arr.ndim != 1:
        raise InvalidVectorError(
            f"A Phylo2Vec vector must be 1-D, got an array of shape {arr.shape}."
        )
    if arr.size == 0:
        return np.zeros(0, dtype=np.int64)
    if not np.issubdtype(arr.dtype, np.integer):
        raise InvalidVectorError(
            f"A Phylo2Vec vector must contain integers, got dtype {arr.dtype}."
        )
    return arr.astype(np.int64, copy=False)


def check_v(v) -> None:
    """
    Check that *v* is a valid Phylo2Vec vector, i.e. ``0 <= v[i] <= 2i``.

    The check reports the first (lowest-index) offending element.  *v* is
    never modified.

    Raises
    ------
    InvalidVectorError
        If *v* is not a 1-D integer sequence or any element is out of bounds.

    Examples
    --------
    >>> check_v([0, 1, 4])
    >>> check_v([0, 3])
    Traceback (most recent call last):
        ...
    phylo2vec._errors.InvalidVectorError: Invalid value at index 1: v[1] should be in [0, 2], found 3.
    """
    arr = as_vector(v)
    upper = 2 * np.arange(arr.shape[0], dtype=np.int64)
    bad = np.flatnonzero((arr < 0) | (arr > upper))
    if bad.size > 0:
        i = int(bad[0])
        value = int(arr[i])
        raise InvalidVectorError(
            f"Invalid value at index {i}: v[{i}] should be in [0, {2 * i}], "
            f"found {value}.",
            index=i,
            value=value,
        )
