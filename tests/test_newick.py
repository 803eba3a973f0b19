"""
tests/test_newick.py
====================
Pytest test suite for Newick assembly and normalization.

Reference strings
-----------------
  [0, 1, 4]  ->  (((2,1)4,0)5,3)6;     (documented example)
  [0]        ->  (1,0)2;
  [0, 1]     ->  ((2,1)3,0)4;
  [0, 2]     ->  ((1,0)3,2)4;
  [0, 0, 0]  ->  (((3,0)4,2)5,1)6;
  []         ->  0;                    (single leaf, no merge)
"""

import numpy as np
import pytest

from phylo2vec._errors import NewickAssemblyError, NewickDecodeError
from phylo2vec._newick import (
    build_newick,
    get_leaf_labels,
    get_num_leaves_from_newick,
    integerize_child_nodes,
    process_newick,
    remove_branch_length_annotations,
    remove_parent_annotations,
    to_newick,
)
from phylo2vec._utils import format_newick, is_integer_token
from phylo2vec._vector import sample


REFERENCE = [
    ([0, 1, 4], "(((2,1)4,0)5,3)6;"),
    ([0], "(1,0)2;"),
    ([0, 1], "((2,1)3,0)4;"),
    ([0, 2], "((1,0)3,2)4;"),
    ([0, 0, 0], "(((3,0)4,2)5,1)6;"),
    ([], "0;"),
]


# ======================================================================== #
# Assembly                                                                  #
# ======================================================================== #


class TestBuildNewick:
    def test_documented_example(self):
        assert build_newick([[6, 3, 5], [5, 4, 0], [4, 2, 1]]) == "(((2,1)4,0)5,3)6;"

    def test_both_children_are_subtrees(self):
        # ((0,1)4,(2,3)5)6
        assert build_newick([[6, 4, 5], [5, 2, 3], [4, 0, 1]]) == "((0,1)4,(2,3)5)6;"

    def test_second_child_is_subtree(self):
        assert build_newick([[4, 2, 3], [3, 1, 0]]) == "((1,0)3,2)4;"

    def test_empty_ancestry_is_single_leaf(self):
        assert build_newick(np.zeros((0, 3), dtype=np.int64)) == "0;"
        assert build_newick([]) == "0;"

    def test_disconnected_subtrees_raise(self):
        with pytest.raises(NewickAssemblyError, match="2 disconnected subtrees"):
            build_newick([[5, 2, 3], [4, 0, 1]])

    def test_reused_parent_raises(self):
        with pytest.raises(NewickAssemblyError, match="inconsistent"):
            build_newick([[4, 2, 3], [4, 0, 1]])

    def test_bad_shape_raises(self):
        with pytest.raises(NewickAssemblyError):
            build_newick([[1, 2]])


class TestToNewick:
    @pytest.mark.parametrize("backend", ["python", "numba"])
    @pytest.mark.parametrize("v, expected", REFERENCE)
    def test_reference_vectors(self, v, expected, backend):
        assert to_newick(v, backend=backend) == expected

    @pytest.mark.parametrize("k", [1, 3, 10, 40])
    def test_leaves_are_exactly_zero_to_k(self, k):
        v = sample(k, rng=np.random.default_rng(k))
        nw = process_newick(to_newick(v))
        leaves = sorted(int(leaf) for leaf in get_leaf_labels(nw))
        assert leaves == list(range(k + 1))

    @pytest.mark.parametrize("k", [1, 2, 8, 33, 100])
    def test_leaf_count(self, k):
        v = sample(k, rng=np.random.default_rng(100 + k))
        nw = process_newick(to_newick(v))
        assert get_num_leaves_from_newick(nw) == k + 1

    def test_balanced_parentheses(self):
        nw = to_newick(sample(60, rng=np.random.default_rng(3)))
        assert nw.count("(") == nw.count(")") == 60
        assert nw.count(",") == 60
        assert nw.endswith(";")


# ======================================================================== #
# Normalization                                                             #
# ======================================================================== #


class TestRemoveAnnotations:
    def test_parent_annotations(self):
        assert remove_parent_annotations("(((2,1)4,0)5,3)6;") == "(((2,1),0),3);"

    def test_parent_support_values(self):
        assert remove_parent_annotations("((0,1)0.95,2)1;") == "((0,1),2);"

    def test_parent_annotations_keep_leaf_labels(self):
        assert remove_parent_annotations("((10,11),12);") == "((10,11),12);"

    def test_branch_lengths(self):
        nw = "(((2:0.02,1:0.01):0.5,0:0.041),3:1.42);"
        assert remove_branch_length_annotations(nw) == "(((2,1),0),3);"

    @pytest.mark.parametrize("length", ["1", "0.5", ".5", "1e-3", "2.5E+02", "-0.1"])
    def test_branch_length_formats(self, length):
        assert remove_branch_length_annotations(f"(A:{length},B:1);") == "(A,B);"

    @pytest.mark.parametrize(
        "nw",
        [
            "(((2,1)4,0)5,3)6;",
            "((A:0.1,B:0.2)0.95:0.5,(C:0.3,D:0.4)0.87:0.6);",
            "(0:1,1:2)2:0;",
            "((0,1),2);",
        ],
    )
    def test_idempotent(self, nw):
        once = remove_parent_annotations(nw)
        assert remove_parent_annotations(once) == once
        once = remove_branch_length_annotations(nw)
        assert remove_branch_length_annotations(once) == once
        once = process_newick(nw)
        assert process_newick(once) == once


class TestProcessNewick:
    def test_full_cleanup(self):
        nw = "((A:0.1,B:0.2)0.95:0.5,(C:0.3,D:0.4)0.87:0.6);"
        assert process_newick(nw) == "((A,B),(C,D));"

    def test_whitespace_and_semicolon(self):
        assert process_newick("  ( (0, 1) ,2 )\n") == "((0,1),2);"

    def test_generated_newick(self):
        assert process_newick("(((2,1)4,0)5,3)6;") == "(((2,1),0),3);"


class TestLeafHelpers:
    def test_get_leaf_labels_order(self):
        assert get_leaf_labels("((tip_2,tip_0),(tip_1,x));") == [
            "tip_2",
            "tip_0",
            "tip_1",
            "x",
        ]

    def test_get_leaf_labels_ignores_internal_names(self):
        assert get_leaf_labels("((A,B)AB,C)root;") == ["A", "B", "C"]

    def test_get_leaf_labels_single_leaf(self):
        assert get_leaf_labels("0;") == ["0"]

    def test_num_leaves(self):
        assert get_num_leaves_from_newick("(((2,1),0),3);") == 4
        assert get_num_leaves_from_newick("0;") == 1

    def test_is_integer_token(self):
        assert is_integer_token("17")
        assert not is_integer_token("")
        assert not is_integer_token("1.5")
        assert not is_integer_token("²")

    def test_format_newick(self):
        assert format_newick(" (0,1) ") == "(0,1);"


# ======================================================================== #
# Taxon integerization                                                      #
# ======================================================================== #


class TestIntegerizeChildNodes:
    def test_first_appearance_order(self):
        nw, mapping = integerize_child_nodes("((tip_b,tip_a),tip_c);")
        assert nw == "((0,1),2);"
        assert mapping == {0: "tip_b", 1: "tip_a", 2: "tip_c"}

    def test_numeric_leaves_are_kept(self):
        nw, mapping = integerize_child_nodes("((0,B),2);")
        assert nw == "((0,1),2);"
        assert mapping == {1: "B"}

    def test_numeric_leaf_after_taxon(self):
        # "A" must not take 0, which belongs to a later numeric leaf
        nw, mapping = integerize_child_nodes("(A,(0,C));")
        assert nw == "(1,(0,2));"
        assert mapping == {1: "A", 2: "C"}

    def test_all_numeric_gives_empty_mapping(self):
        nw, mapping = integerize_child_nodes("(((2,1),0),3);")
        assert nw == "(((2,1),0),3);"
        assert mapping == {}

    def test_internal_labels_untouched(self):
        nw, mapping = integerize_child_nodes("((A,B)AB,C);")
        assert nw == "((0,1)AB,2);"
        assert mapping == {0: "A", 1: "B", 2: "C"}

    def test_names_containing_other_names(self):
        nw, mapping = integerize_child_nodes("((A,AA),(AAA,A_1));")
        assert nw == "((0,1),(2,3));"
        assert mapping == {0: "A", 1: "AA", 2: "AAA", 3: "A_1"}

    def test_duplicate_taxon_raises(self):
        with pytest.raises(NewickDecodeError, match="Duplicate leaf name 'A'"):
            integerize_child_nodes("((A,B),A);")
