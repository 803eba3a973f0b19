"""
_newick.py
==========
Newick assembly (ancestry -> text) and Newick normalization (text -> text
ready for decoding).

Public API
----------
  build_newick(ancestry)              ancestry array -> Newick string
  to_newick(v, backend='best')        vector -> Newick string

  remove_parent_annotations(newick)   "(((2,1)4,0)5,3)6;" -> "(((2,1),0),3);"
  remove_branch_length_annotations(newick)
                                      "((2:0.02,1:0.01),0:0.4);" -> "((2,1),0);"
  process_newick(newick)              whitespace + ';' + both removals
  integerize_child_nodes(newick)      taxon names -> integers (+ mapping)
  get_num_leaves_from_newick(newick)  commas + 1
  get_leaf_labels(newick)             leaf tokens, left to right

Grammar
-------
    tree    := subtree ";"
    subtree := leaf | "(" subtree "," subtree ")" [label] [":" length]

Leaf tokens are the runs of characters that directly follow "(" or ","
(or start the string).  Internal-node labels follow ")" and are therefore
never mistaken for leaves.
"""

import itertools
import logging
import re
from typing import Dict, List, Tuple

import numpy as np

from phylo2vec._ancestry import get_ancestry
from phylo2vec._errors import NewickAssemblyError, NewickDecodeError
from phylo2vec._logging import (
    log_newick_assembled,
    log_normalization,
    log_taxon_mapping,
)
from phylo2vec._utils import format_newick, is_integer_token


logger = logging.getLogger(__name__)

_PARENT_ANNOTATION = re.compile(r"\)[0-9]+(?:\.[0-9]+)?")
_BRANCH_LENGTH = re.compile(r":[-+]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?")
_DELIMITER_SPACE = re.compile(r"\s*([(),:;])\s*")
_LEAF_TOKEN = re.compile(r"(?:^|(?<=[(,]))[^(),:;]+")


# ======================================================================== #
# Assembly                                                                  #
# ======================================================================== #


def build_newick(ancestry) -> str:
    """
    Build a Newick string from an ancestry array.

    The rows are consumed from the last (leaf-most merge) to the first (root
    merge).  Each live subtree is kept as a text fragment keyed by its
    current representative label, which is always the last token of the
    fragment:

      both children live      "(" + frag1 + "," + frag2 + ")" + parent
      only child 1 live       "(" + frag1 + "," + child2 + ")" + parent
      only child 2 live       "(" + frag2 + "," + child1 + ")" + parent
      neither live            "(" + child1 + "," + child2 + ")" + parent

    Parameters
    ----------
    ancestry : array-like of shape (k, 3)
        Output of ``get_ancestry``: (parent, child, child) rows, root first.

    Returns
    -------
    str
        Newick string with internal-node labels, terminated by ';'.
        An empty ancestry (single-leaf tree) gives ``'0;'``.

    Raises
    ------
    NewickAssemblyError
        If the rows do not collapse into exactly one fragment.

    Examples
    --------
    >>> build_newick([[6, 3, 5], [5, 4, 0], [4, 2, 1]])
    '(((2,1)4,0)5,3)6;'
    """
    arr = np.asarray(ancestry, dtype=np.int64)
    if arr.size == 0:
        return "0;"
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise NewickAssemblyError(
            f"Ancestry must have shape (k, 3), got {arr.shape}."
        )

    fragments: Dict[int, str] = {}

    for parent, child1, child2 in arr[::-1].tolist():
        if parent in fragments:
            raise NewickAssemblyError(
                f"Parent label {parent} already labels a subtree; "
                f"the ancestry rows are inconsistent."
            )

        sub1 = fragments.pop(child1, None)
        sub2 = fragments.pop(child2, None)

        if sub1 is not None and sub2 is not None:
            fragments[parent] = f"({sub1},{sub2}){parent}"
        elif sub1 is not None:
            fragments[parent] = f"({sub1},{child2}){parent}"
        elif sub2 is not None:
            fragments[parent] = f"({sub2},{child1}){parent}"
        else:
            fragments[parent] = f"({child1},{child2}){parent}"

    if len(fragments) != 1:
        raise NewickAssemblyError(
            f"Ancestry left {len(fragments)} disconnected subtrees "
            f"(roots {sorted(fragments)}); expected a single root."
        )

    (newick,) = fragments.values()
    newick += ";"

    log_newick_assembled(arr.shape[0], len(newick))
    return newick


def to_newick(v, backend: str = "best") -> str:
    """
    Convert a Phylo2Vec vector to a Newick string.

    Wrapper of ``get_ancestry`` and ``build_newick``.

    Examples
    --------
    >>> to_newick([0, 1, 4])
    '(((2,1)4,0)5,3)6;'
    >>> to_newick([0])
    '(1,0)2;'
    >>> to_newick([])
    '0;'
    """
    return build_newick(get_ancestry(v, backend=backend))


# ======================================================================== #
# Normalization                                                             #
# ======================================================================== #


def remove_parent_annotations(newick: str) -> str:
    """
    Remove the integer (or decimal support) label following each ')'.

    >>> remove_parent_annotations('(((2,1)4,0)5,3)6;')
    '(((2,1),0),3);'
    """
    return _PARENT_ANNOTATION.sub(")", newick)


def remove_branch_length_annotations(newick: str) -> str:
    """
    Remove every ':' <number> branch-length annotation.

    >>> remove_branch_length_annotations('(((2:0.02,1:0.01),0:0.041),3:1.42);')
    '(((2,1),0),3);'
    """
    return _BRANCH_LENGTH.sub("", newick)


def process_newick(newick: str) -> str:
    """
    Normalize a Newick string for decoding.

    Removes whitespace around delimiters, guarantees the trailing ';', then
    strips internal-node labels and branch lengths.  Idempotent.

    >>> process_newick(' ((A:1, B:2)0.9:0.5, C:3) ')
    '((A,B),C);'
    """
    newick = format_newick(_DELIMITER_SPACE.sub(r"\1", newick))
    newick, n_parent = _PARENT_ANNOTATION.subn(")", newick)
    newick, n_branch = _BRANCH_LENGTH.subn("", newick)
    log_normalization(n_parent, n_branch)
    return newick


def get_leaf_labels(newick: str) -> List[str]:
    """
    Return the leaf tokens of *newick* in left-to-right order.

    >>> get_leaf_labels('(((2,1),0),3);')
    ['2', '1', '0', '3']
    """
    return _LEAF_TOKEN.findall(newick)


def get_num_leaves_from_newick(newick: str) -> int:
    """
    Number of leaves of a binary tree: one more than the number of commas.

    >>> get_num_leaves_from_newick('(((2,1),0),3);')
    4
    """
    return newick.count(",") + 1


def integerize_child_nodes(newick: str) -> Tuple[str, Dict[int, str]]:
    """
    Replace non-numeric leaf names by integers.

    Leaves are visited in order of first appearance.  Numeric leaves keep
    their value; every other leaf receives the smallest non-negative integer
    not already used by a numeric leaf.

    Parameters
    ----------
    newick : str
        Newick string (normally already passed through ``process_newick``).

    Returns
    -------
    (str, Dict[int, str])
        The rewritten string and the mapping integer label -> original name.
        The mapping is empty when every leaf is already numeric.

    Raises
    ------
    NewickDecodeError
        If a taxon name appears on more than one leaf.

    Examples
    --------
    >>> integerize_child_nodes('((tip_b,tip_a),tip_c);')
    ('((0,1),2);', {0: 'tip_b', 1: 'tip_a', 2: 'tip_c'})

    >>> integerize_child_nodes('((0,B),2);')
    ('((0,1),2);', {1: 'B'})
    """
    tokens = get_leaf_labels(newick)
    taken = {int(token) for token in tokens if is_integer_token(token)}
    free_labels = (i for i in itertools.count() if i not in taken)

    assigned: Dict[str, int] = {}
    mapping: Dict[int, str] = {}
    for token in tokens:
        if is_integer_token(token):
            continue
        if token in assigned:
            raise NewickDecodeError(f"Duplicate leaf name '{token}' in Newick string.")
        label = next(free_labels)
        assigned[token] = label
        mapping[label] = token

    def _relabel(match):
        token = match.group(0)
        return str(assigned[token]) if token in assigned else token

    log_taxon_mapping(mapping)
    return _LEAF_TOKEN.sub(_relabel, newick), mapping
