"""
_errors.py
==========
Exception hierarchy for phylo2vec.

Every codec failure derives from ``Phylo2VecError``, which is itself a
``ValueError`` so callers that only guard against bad input values keep
working.  Errors are raised synchronously and never retried: the codec is
deterministic, so a retry reproduces the same failure.
"""


class Phylo2VecError(ValueError):
    """Base class for all phylo2vec codec errors."""


class InvalidVectorError(Phylo2VecError):
    """
    A Phylo2Vec vector violates ``0 <= v[i] <= 2 * i``.

    Attributes
    ----------
    index : int or None
        Position of the first offending element (None when the input is not
        a 1-D integer sequence at all).
    value : int or None
        The offending value.
    """

    def __init__(self, message: str, index=None, value=None):
        super().__init__(message)
        self.index = index
        self.value = value


class AncestryConstructionError(Phylo2VecError):
    """No row or column of the view table satisfies the merge selection rule."""


class NewickAssemblyError(Phylo2VecError):
    """Ancestry triples did not collapse into a single Newick fragment."""


class NewickDecodeError(Phylo2VecError):
    """A Newick string could not be reduced to a Phylo2Vec vector."""


DECODE_HINT = (
    "Are the leaves labeled with the integers 0..n-1 (use "
    "newick2v_with_mapping for taxon names)? Otherwise the tree might be "
    "unrooted or non-binary."
)
