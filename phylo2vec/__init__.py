"""
phylo2vec
=========

Compact integer-vector encoding of rooted binary tree topologies, and
conversion between that vector and Newick text.

A vector ``v`` of length ``k`` with ``0 <= v[i] <= 2i`` encodes exactly one
rooted, fully binary topology over the leaves ``0..k``.

Encoding
--------
sample : Uniformly random valid vector
check_v : Validate a vector
get_ancestry : Vector -> (parent, child, child) merge triples
build_newick : Merge triples -> Newick string
to_newick : Vector -> Newick string

Decoding
--------
process_newick : Strip whitespace, internal-node labels, branch lengths
integerize_child_nodes : Replace taxon names by integers
newick2v : Newick string -> vector
newick2v_with_mapping : Newick string with taxon names -> vector + mapping

Context Managers
----------------
quiet : Suppress logging during operations
suppress_logger : Suppress specific logger
suppress_warnings : Suppress specific warnings
use_backend : Force specific ancestry backend
silent_benchmark : Combine quiet + backend selection + warning suppression

Examples
--------
>>> from phylo2vec import to_newick, newick2v
>>> to_newick([0, 1, 4])
'(((2,1)4,0)5,3)6;'
>>> newick2v('(((2,1)4,0)5,3)6;').v[1:].tolist()
[0, 1, 4]

With taxon names:

>>> from phylo2vec import newick2v_with_mapping
>>> res = newick2v_with_mapping('((human:0.1,chimp:0.1):0.3,gorilla:0.4);')
>>> res.mapping
{0: 'human', 1: 'chimp', 2: 'gorilla'}
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Errors
from ._errors import (
    Phylo2VecError,
    InvalidVectorError,
    AncestryConstructionError,
    NewickAssemblyError,
    NewickDecodeError,
)

# Encoding
from ._vector import sample, seed, check_v
from ._ancestry import get_ancestry, init_view_matrix
from ._newick import (
    build_newick,
    to_newick,
    remove_parent_annotations,
    remove_branch_length_annotations,
    process_newick,
    integerize_child_nodes,
    get_num_leaves_from_newick,
    get_leaf_labels,
)

# Decoding
from ._decode import Newick2VResult, to_vector, newick2v, newick2v_with_mapping

# Context managers (user-facing utilities)
from ._context import (
    suppress_logger,
    quiet,
    suppress_warnings,
    use_backend,
    silent_benchmark,
)

# Backend information (useful for checking capabilities)
from ._backend import (
    get_available_backends,
    get_backend_info,
    check_numba_available,
)

# Public API
__all__ = [
    # Errors
    "Phylo2VecError",
    "InvalidVectorError",
    "AncestryConstructionError",
    "NewickAssemblyError",
    "NewickDecodeError",
    # Encoding
    "sample",
    "seed",
    "check_v",
    "get_ancestry",
    "init_view_matrix",
    "build_newick",
    "to_newick",
    # Normalization
    "remove_parent_annotations",
    "remove_branch_length_annotations",
    "process_newick",
    "integerize_child_nodes",
    "get_num_leaves_from_newick",
    "get_leaf_labels",
    # Decoding
    "Newick2VResult",
    "to_vector",
    "newick2v",
    "newick2v_with_mapping",
    # Context managers
    "suppress_logger",
    "quiet",
    "suppress_warnings",
    "use_backend",
    "silent_benchmark",
    # Backend information
    "get_available_backends",
    "get_backend_info",
    "check_numba_available",
    # Version info
    "__version__",
]
