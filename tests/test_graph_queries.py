"""
Tests for the graph query layer.

Tests cover:
1. roots / children / parents over a flat snapshot
2. Stable sibling ordering
3. Ancestor and descendant traversal on multi-parent graphs
4. Termination on snapshots that are already cyclic
5. Strict parent graph construction (dangling / duplicate ids)
"""

import networkx as nx
import pytest

from lineage.core.exceptions import DanglingParentError, DuplicateMemberError
from lineage.core.graph_queries import (
    ancestors,
    build_parent_graph,
    children,
    count_by_generation,
    descendants,
    index_members,
    parents,
    roots,
)
from lineage.models.member import Member


def make(member_id, *parent_ids, **kwargs):
    return Member(id=member_id, parent_ids=list(parent_ids), **kwargs)


@pytest.fixture
def diamond():
    """A -> B, A -> C, B + C -> D, D -> E."""
    return [
        make("A"),
        make("B", "A", sibling_order=2),
        make("C", "A", sibling_order=1),
        make("D", "B", "C"),
        make("E", "D"),
    ]


@pytest.fixture
def cyclic():
    """Corrupt snapshot: X -> Y -> Z -> X."""
    return [
        make("X", "Z"),
        make("Y", "X"),
        make("Z", "Y"),
    ]


def ids(members):
    return [m.id for m in members]


class TestRootsChildrenParents:
    """Test the one-step queries."""

    def test_roots_in_input_order(self):
        """Test roots are members without parents, in input order."""
        members = [make("R2"), make("c", "R2"), make("R1")]
        assert ids(roots(members)) == ["R2", "R1"]

    def test_children_sorted_by_sibling_order(self, diamond):
        """Test children are ordered by sibling_order."""
        assert ids(children(diamond, "A")) == ["C", "B"]

    def test_children_ties_keep_input_order(self):
        """Test equal sibling_order keeps the input order (stable sort)."""
        members = [
            make("P"),
            make("k3", "P", sibling_order=1),
            make("k1", "P", sibling_order=0),
            make("k2", "P", sibling_order=1),
        ]
        assert ids(children(members, "P")) == ["k1", "k3", "k2"]

    def test_children_of_leaf_is_empty(self, diamond):
        """Test a leaf has no children."""
        assert children(diamond, "E") == []

    def test_parents_follow_parent_ids_order(self):
        """Test parents are returned in parent_ids order, not input order."""
        members = [make("P1"), make("P2"), make("k", "P2", "P1")]
        assert ids(parents(members, members[2])) == ["P2", "P1"]

    def test_parents_skip_dangling_ids(self):
        """Test unresolved parent ids are skipped by the tolerant query."""
        members = [make("P1"), make("k", "ghost", "P1")]
        assert ids(parents(members, members[1])) == ["P1"]


class TestTraversal:
    """Test ancestor/descendant traversal."""

    def test_ancestors_breadth_first(self, diamond):
        """Test ancestors are de-duplicated in discovery order."""
        assert ids(ancestors(diamond, "E")) == ["D", "B", "C", "A"]

    def test_ancestors_of_root_is_empty(self, diamond):
        """Test a root has no ancestors."""
        assert ancestors(diamond, "A") == []

    def test_ancestors_of_unknown_member(self, diamond):
        """Test an unknown id has no ancestors."""
        assert ancestors(diamond, "nobody") == []

    def test_descendants_breadth_first(self, diamond):
        """Test descendants are de-duplicated in discovery order."""
        assert ids(descendants(diamond, "A")) == ["B", "C", "D", "E"]

    def test_descendants_via_second_parent(self, diamond):
        """Test a member reached through its second parent is a descendant."""
        assert ids(descendants(diamond, "C")) == ["D", "E"]

    def test_descendants_of_leaf_is_empty(self, diamond):
        """Test a leaf has no descendants."""
        assert descendants(diamond, "E") == []

    def test_traversal_terminates_on_cycle(self, cyclic):
        """Test traversals terminate on an already-cyclic snapshot."""
        assert ids(ancestors(cyclic, "X")) == ["Z", "Y"]
        assert ids(descendants(cyclic, "X")) == ["Y", "Z"]

    def test_self_parent_not_reported(self):
        """Test a self-parent loop does not list the member as its own relative."""
        members = [make("S", "S")]
        assert ancestors(members, "S") == []
        assert descendants(members, "S") == []


class TestParentGraph:
    """Test strict graph construction."""

    def test_graph_edges_parent_to_child(self, diamond):
        """Test one edge per parent, pointing parent -> child."""
        graph = build_parent_graph(diamond)
        assert isinstance(graph, nx.DiGraph)
        assert set(graph.edges()) == {
            ("A", "B"), ("A", "C"), ("B", "D"), ("C", "D"), ("D", "E"),
        }
        assert list(graph.nodes) == ["A", "B", "C", "D", "E"]
        assert graph.nodes["D"]["member"].id == "D"

    def test_dangling_parent_fails_loudly(self):
        """Test a dangling parent id raises DanglingParentError."""
        members = [make("A"), make("B", "ghost")]
        with pytest.raises(DanglingParentError) as exc_info:
            build_parent_graph(members)
        assert exc_info.value.member_id == "B"
        assert exc_info.value.parent_id == "ghost"
        assert "ghost" in str(exc_info.value)

    def test_duplicate_ids_rejected(self):
        """Test duplicate member ids raise DuplicateMemberError."""
        with pytest.raises(DuplicateMemberError) as exc_info:
            index_members([make("A"), make("A")])
        assert exc_info.value.member_id == "A"


class TestCountByGeneration:
    """Test generation histogram."""

    def test_counts_sorted_by_generation(self):
        """Test counts are keyed and sorted by stored generation."""
        members = [
            make("a", generation=2),
            make("b", generation=1),
            make("c", generation=2),
        ]
        assert count_by_generation(members) == {1: 1, 2: 2}
        assert list(count_by_generation(members)) == [1, 2]
