"""
_utils.py
=========
General-purpose string helpers for phylo2vec.

These are standalone functions that don't depend on the codec and could be
useful in multiple contexts.
"""

import re


_INTEGER_TOKEN = re.compile(r"[0-9]+")


def is_integer_token(token: str) -> bool:
    """
    Return True if *token* is a non-empty run of ASCII digits.

    ``str.isdigit`` is not used because it also accepts non-ASCII digits
    (e.g. superscripts) that ``int()`` rejects.

    Examples
    --------
    >>> is_integer_token('42')
    True

    >>> is_integer_token('tip_1')
    False

    >>> is_integer_token('(2,1')
    False

    >>> is_integer_token('')
    False
    """
    return _INTEGER_TOKEN.fullmatch(token) is not None


def format_newick(newick: str) -> str:
    """
    Format a NEWICK string for consistent representation.

    Ensures the NEWICK string:
    - Ends with a semicolon
    - Has no leading/trailing whitespace

    Parameters
    ----------
    newick : str
        NEWICK string to format.

    Returns
    -------
    str
        Formatted NEWICK string.

    Examples
    --------
    >>> format_newick('(((2,1),0),3)')
    '(((2,1),0),3);'

    >>> format_newick('  ((0,1),2);  ')
    '((0,1),2);'

    >>> format_newick('((0,1),2);')
    '((0,1),2);'
    """
    newick = newick.strip()
    if not newick.endswith(";"):
        newick += ";"
    return newick
