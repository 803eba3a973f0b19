"""
_decode.py
==========
Conversion of a Newick string back into a Phylo2Vec vector.

Public API
----------
  newick2v(newick, num_leaves=None)               -> Newick2VResult
  newick2v_with_mapping(newick, num_leaves=None)  -> Newick2VResult
  to_vector(newick, num_leaves)                   -> np.ndarray

Algorithm
---------
The tree is never parsed into nodes.  Instead the working string is reduced
one cherry at a time: at each of the ``num_leaves - 1`` iterations the
innermost resolvable pair "(a,b)" is located, its position in ``v`` is
written, and the pair is rewritten in place as a single fresh label.

Per-call state (all discarded on return):

  labels    : list[int]   Label currently standing in for each leaf position.
                          Fused positions receive max(labels) + 1, so labels
                          only grow and never collide with a leaf.
  processed : list[bool]  Positions already fused into an ancestor.
  vmin      : list[int]   Offset correcting the index of positions to the
                          right of a fused leaf.

Leaf positions are scanned right to left; the first one whose sister is a
plain integer wins.  This order is what makes the result the inverse of
``to_newick``.
"""

import logging
from typing import Dict, List, NamedTuple, Optional, Tuple

import numpy as np

from phylo2vec._errors import DECODE_HINT, NewickDecodeError
from phylo2vec._logging import log_vector_decoded
from phylo2vec._newick import (
    get_leaf_labels,
    get_num_leaves_from_newick,
    integerize_child_nodes,
    process_newick,
)
from phylo2vec._utils import is_integer_token


logger = logging.getLogger(__name__)


class Newick2VResult(NamedTuple):
    """
    Result of ``newick2v`` / ``newick2v_with_mapping``.

    v          : np.ndarray[int64, num_leaves]   v[0] is the placeholder 0;
                                                  v[1:] is the vector that
                                                  ``to_newick`` accepts.
    num_leaves : int
    mapping    : Dict[int, str]                   integer label -> taxon name
                                                  (empty for integer leaves).
    """

    v: np.ndarray
    num_leaves: int
    mapping: Dict[int, str]


# ======================================================================== #
# Reduction steps                                                           #
# ======================================================================== #


def find_left_leaf(
    newick: str, labels: List[int], processed: List[bool], num_leaves: int
) -> Tuple[int, int]:
    """
    Find the innermost cherry, scanning leaf positions from the right.

    Parameters
    ----------
    newick     : str          Working Newick string.
    labels     : list[int]    Current label of each leaf position.
    processed  : list[bool]   Whether each position has been fused.
    num_leaves : int

    Returns
    -------
    (int, int)
        The sister's label (the "left leaf") and the scan offset ``i`` at
        which the cherry was found; the resolved position is
        ``num_leaves - i - 1``.

    Raises
    ------
    NewickDecodeError
        If no unprocessed position has a plain-integer sister.
    """
    for i in range(num_leaves):
        pos = num_leaves - i - 1
        if processed[pos]:
            continue

        label = str(labels[pos])
        left_sep = f"({label},"
        right_sep = f",{label})"

        if left_sep in newick:
            # label is the first member of a pair: sister runs up to ')'
            sister = newick.rpartition(left_sep)[2].partition(")")[0]
        elif right_sep in newick:
            # label is the second member: sister starts after the last '('
            sister = newick.partition(right_sep)[0].rpartition("(")[2]
        else:
            continue

        if is_integer_token(sister):
            return int(sister), i

    raise NewickDecodeError(f"No cherry left to collapse in '{newick}'. {DECODE_HINT}")


def update_vmin(
    vmin: List[int], right_leaf: int, num_leaves: int, processed: List[bool]
) -> None:
    """
    Shift the correction offsets of unprocessed positions right of
    *right_leaf*.  Modifies *vmin* in place.
    """
    for n in range(right_leaf + 1, num_leaves):
        if not processed[n]:
            if vmin[n] == 0:
                vmin[n] = n
            else:
                vmin[n] += 1


def update_newick(
    newick: str, left_leaf_ind: int, left_leaf: int, right_leaf: int, labels: List[int]
) -> str:
    """
    Collapse the cherry formed by *left_leaf* and the label at *right_leaf*
    into the new label of *left_leaf_ind*.

    Raises
    ------
    NewickDecodeError
        If the cherry is not present in either order.
    """
    right_label = labels[right_leaf]
    new_label = str(labels[left_leaf_ind])

    for old in (f"({left_leaf},{right_label})", f"({right_label},{left_leaf})"):
        if old in newick:
            return newick.replace(old, new_label, 1)

    raise NewickDecodeError(
        f"Cherry ({left_leaf},{right_label}) not found in '{newick}'. {DECODE_HINT}"
    )


def to_vector(newick: str, num_leaves: int) -> np.ndarray:
    """
    Reduce a normalized integer-leaf Newick string to its Phylo2Vec vector.

    Parameters
    ----------
    newick : str
        Newick string without internal-node labels or branch lengths whose
        leaves are exactly the integers ``0..num_leaves-1``.
    num_leaves : int

    Returns
    -------
    np.ndarray[int64, num_leaves]
        Element 0 is always 0.

    Raises
    ------
    NewickDecodeError
        If the string cannot be reduced (unrooted, non-binary, or
        non-integer leaves).
    """
    v = np.zeros(num_leaves, dtype=np.int64)
    processed = [False] * num_leaves
    vmin = [0] * num_leaves
    labels = list(range(num_leaves))

    for _ in range(num_leaves - 1):
        left_leaf, idx = find_left_leaf(newick, labels, processed, num_leaves)

        try:
            left_leaf_ind = labels.index(left_leaf)
        except ValueError:
            raise NewickDecodeError(
                f"Leaf {left_leaf} is not one of 0..{num_leaves - 1}. {DECODE_HINT}"
            ) from None

        right_leaf = num_leaves - idx - 1

        update_vmin(vmin, right_leaf, num_leaves, processed)

        labels[left_leaf_ind] = max(labels) + 1

        v[right_leaf] = left_leaf_ind if vmin[right_leaf] == 0 else vmin[right_leaf]

        processed[right_leaf] = True

        newick = update_newick(newick, left_leaf_ind, left_leaf, right_leaf, labels)

    return v


# ======================================================================== #
# Wrappers                                                                  #
# ======================================================================== #


def _resolve_num_leaves(newick: str, num_leaves: Optional[int]) -> int:
    """
    **Private.**  Count the leaves of a normalized string, checking a
    caller-supplied count against it.
    """
    counted = get_num_leaves_from_newick(newick)
    if num_leaves is None or num_leaves == -1:
        return counted
    if num_leaves != counted:
        raise NewickDecodeError(
            f"num_leaves={num_leaves} but the Newick string has {counted} leaves."
        )
    return num_leaves


def _check_integer_leaves(newick: str, num_leaves: int) -> None:
    """
    **Private.**  Require the leaves to be exactly the integers
    ``0..num_leaves-1``.
    """
    leaves = get_leaf_labels(newick)
    non_integer = [leaf for leaf in leaves if not is_integer_token(leaf)]
    if non_integer:
        shown = ", ".join(repr(leaf) for leaf in non_integer[:3])
        raise NewickDecodeError(f"Non-integer leaves ({shown}). {DECODE_HINT}")

    if sorted(int(leaf) for leaf in leaves) != list(range(num_leaves)):
        raise NewickDecodeError(
            f"Leaf labels must be the integers 0..{num_leaves - 1}, each exactly "
            f"once. {DECODE_HINT}"
        )


def newick2v(newick: str, num_leaves: Optional[int] = None) -> Newick2VResult:
    """
    Convert a Newick string with integer leaves to its Phylo2Vec vector.

    Wrapper of ``process_newick`` + ``get_num_leaves_from_newick`` (when
    *num_leaves* is not given) + ``to_vector``.

    Parameters
    ----------
    newick : str
        Newick string; internal-node labels and branch lengths are allowed
        and stripped.
    num_leaves : int, optional
        Number of leaves.  None (or -1) counts them from the string; a value
        that disagrees with the string is an error.

    Returns
    -------
    Newick2VResult
        ``mapping`` is empty.

    Raises
    ------
    NewickDecodeError

    Examples
    --------
    >>> newick2v('(((2,1)4,0)5,3)6;', 4).v.tolist()
    [0, 0, 1, 4]
    """
    newick = process_newick(newick)
    num_leaves = _resolve_num_leaves(newick, num_leaves)
    _check_integer_leaves(newick, num_leaves)

    v = to_vector(newick, num_leaves)
    log_vector_decoded(num_leaves)
    return Newick2VResult(v, num_leaves, {})


def newick2v_with_mapping(
    newick: str, num_leaves: Optional[int] = None
) -> Newick2VResult:
    """
    Convert a Newick string whose leaves are taxon names to a Phylo2Vec
    vector.

    Same as ``newick2v`` with ``integerize_child_nodes`` applied after
    normalization.

    Returns
    -------
    Newick2VResult
        ``mapping`` maps each synthetic integer label to its taxon name.

    Examples
    --------
    >>> res = newick2v_with_mapping('((A:1,B:1):1,C:2);')
    >>> res.v.tolist(), res.num_leaves, res.mapping
    ([0, 0, 2], 3, {0: 'A', 1: 'B', 2: 'C'})
    """
    newick = process_newick(newick)
    num_leaves = _resolve_num_leaves(newick, num_leaves)
    newick, mapping = integerize_child_nodes(newick)
    _check_integer_leaves(newick, num_leaves)

    v = to_vector(newick, num_leaves)
    log_vector_decoded(num_leaves)
    return Newick2VResult(v, num_leaves, mapping)
