"""
Tests for the grandalf-backed layout engine.

Tests cover:
- Registry default and interface
- Rows follow the input ranks, including roots below rank 0
- Disconnected components packed left to right
- Separation and determinism on a larger random graph
"""

import random

import networkx as nx
import pytest

from lineage.core.exceptions import LayoutError
from lineage.layout.engines import DEFAULT_ENGINE, ENGINES, LayoutEngine, get_engine
from lineage.layout.engines.grandalf_engine import (
    GRANDALF_LAYOUT_OPTIONS,
    GrandalfLayoutEngine,
)


def ranked(nodes, edges):
    """Build a ranked DiGraph from {id: (rank, order)} and edge pairs."""
    graph = nx.DiGraph()
    for node_id, (rank, order) in nodes.items():
        graph.add_node(node_id, rank=rank, order=order)
    graph.add_edges_from(edges)
    return graph


def random_ranked(count, seed):
    """Ranked DAG where every node hangs under one or two earlier nodes."""
    rng = random.Random(seed)
    nodes = {}
    edges = []
    for i in range(count):
        node_id = f"n{i}"
        parents = []
        if i and rng.random() > 0.15:
            parents.append(f"n{rng.randrange(i)}")
            if rng.random() < 0.3:
                extra = f"n{rng.randrange(i)}"
                if extra not in parents:
                    parents.append(extra)
        rank = max((nodes[p][0] + 1 for p in parents), default=0)
        nodes[node_id] = (rank, i)
        edges.extend((p, node_id) for p in parents)
    return ranked(nodes, edges)


@pytest.fixture
def engine():
    return GrandalfLayoutEngine()


class TestRegistry:
    """Test registration and interface."""

    def test_default_engine(self):
        """Test grandalf is the registry default."""
        assert DEFAULT_ENGINE == "grandalf"
        assert get_engine(DEFAULT_ENGINE) is GrandalfLayoutEngine
        assert set(ENGINES) == {"grandalf", "layered"}

    def test_interface(self, engine):
        """Test the engine implements the LayoutEngine interface."""
        assert isinstance(engine, LayoutEngine)
        assert engine.name == "grandalf"
        assert engine.supports_crossing_minimization is True

    def test_options_recorded(self, engine):
        """Test the layout carries the merged option set."""
        layout = engine.layout(ranked({"A": (0, 0)}, []), {"nodesep": 80})
        assert layout.algorithm == "grandalf"
        assert layout.layout_options["nodesep"] == 80
        assert layout.layout_options["ordering_rounds"] == GRANDALF_LAYOUT_OPTIONS["ordering_rounds"]


class TestRows:
    """Test rows come from the input ranks."""

    def test_chain_top_to_bottom(self, engine):
        """Test a two-member chain is stacked one rank apart from the margin."""
        layout = engine.layout(ranked({"A": (0, 0), "B": (1, 0)}, [("A", "B")]))

        assert layout.positions["A"].y == 40.0
        assert layout.positions["B"].y == 260.0
        assert min(p.x for p in layout.positions.values()) == 40.0
        assert list(layout.edges) == ["edge-A-B"]

    def test_root_below_rank_zero(self, engine):
        """Test a root placed at rank 1 keeps its rank and long edges bend."""
        layout = engine.layout(ranked({"A": (1, 0), "B": (3, 0)}, [("A", "B")]))

        assert layout.positions["A"].y == 260.0
        assert layout.positions["B"].y == 700.0
        assert layout.ranks == {"A": 1, "B": 3}
        bends = layout.edges["edge-A-B"].sections[0].bendPoints
        assert len(bends) == 1
        assert bends[0][1] == 530.0

    def test_left_to_right(self, engine):
        """Test LR puts ranks on the x axis."""
        layout = engine.layout(
            ranked({"A": (0, 0), "B": (1, 0)}, [("A", "B")]),
            {"rankdir": "LR"},
        )

        assert layout.positions["A"].x == 40.0
        assert layout.positions["B"].x == 360.0

    def test_cycle_raises_layout_error(self, engine):
        """Test a cyclic graph raises LayoutError before reaching grandalf."""
        graph = ranked({"A": (0, 0), "B": (1, 0)}, [("A", "B"), ("B", "A")])
        with pytest.raises(LayoutError, match="cyclic"):
            engine.layout(graph)


class TestComponents:
    """Test forests."""

    def test_components_packed_in_insertion_order(self, engine):
        """Test separate trees sit side by side without overlap."""
        graph = ranked(
            {"R1": (0, 0), "K1": (1, 0), "R2": (0, 1), "K2": (1, 0)},
            [("R1", "K1"), ("R2", "K2")],
        )
        layout = engine.layout(graph)

        assert layout.positions["R1"].x < layout.positions["R2"].x
        assert layout.positions["K1"].x < layout.positions["K2"].x
        assert layout.positions["R2"].x - layout.positions["R1"].x >= 260.0 - 0.01

    def test_isolated_members(self, engine):
        """Test members without edges are each placed once."""
        layout = engine.layout(ranked({"A": (0, 0), "B": (0, 1), "C": (0, 2)}, []))
        xs = [layout.positions[n].x for n in "ABC"]
        assert xs == sorted(xs)
        assert len(set(xs)) == 3


class TestRandomGraph:
    """Test a larger graph with multi-parent members."""

    @pytest.fixture(scope="class")
    def graph(self):
        return random_ranked(150, seed=5)

    def test_rows_follow_ranks(self, graph):
        """Test each rank owns exactly one row, in rank order."""
        layout = GrandalfLayoutEngine().layout(graph)
        rows = {}
        for node, pos in layout.positions.items():
            rows.setdefault(layout.ranks[node], set()).add(pos.y)
        assert all(len(ys) == 1 for ys in rows.values())
        ordered = [rows[r].pop() for r in sorted(rows)]
        assert ordered == sorted(ordered)
        assert len(set(ordered)) == len(ordered)

    def test_cards_do_not_overlap(self, graph):
        """Test cards in the same row keep their width apart."""
        layout = GrandalfLayoutEngine().layout(graph)
        rows = {}
        for pos in layout.positions.values():
            rows.setdefault(pos.y, []).append(pos.x)
        for xs in rows.values():
            xs.sort()
            for left, right in zip(xs, xs[1:]):
                assert right - left >= 200.0 - 0.01

    def test_repeatable(self, graph):
        """Test two runs give identical coordinates and etag."""
        first = GrandalfLayoutEngine().layout(graph)
        second = GrandalfLayoutEngine().layout(graph)
        assert first.positions == second.positions
        assert first.edges == second.edges
        assert first.etag == second.etag
