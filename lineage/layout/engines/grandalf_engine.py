"""grandalf-backed layered layout engine.

grandalf's ``SugiyamaLayout`` orders every rank and proposes in-rank
coordinates. The shared layered pipeline keeps the rest: ranks come from
generations, separations are enforced, margins and edge routing are
applied the same way as in the hand-rolled engine.

grandalf ranks vertices by longest path from the roots. Every edge handed
to it spans exactly one rank (long edges are already split into dummy
chains) and roots below rank 0 are lifted with spacer vertices, so its
layering reproduces the input ranks. The result is checked against them
before any coordinate is used.
"""

import logging
from typing import Any, Dict, Hashable, List, Tuple

import networkx as nx
from grandalf.graphs import Edge, Graph, Vertex
from grandalf.layouts import SugiyamaLayout

from lineage.core.exceptions import LayoutError
from lineage.layout.engines.layered import (
    LAYERED_LAYOUT_OPTIONS,
    LayeredLayoutEngine,
    place,
    separations,
)

logger = logging.getLogger(__name__)

GRANDALF_LAYOUT_OPTIONS: Dict[str, Any] = {
    **LAYERED_LAYOUT_OPTIONS,
    # SugiyamaLayout.draw(N): ordering rounds before coordinate assignment
    "ordering_rounds": 1.5,
}

SPACER_TAG = "__spacer__"


class _VertexView:
    """Minimal view object required by grandalf's SugiyamaLayout."""

    def __init__(self, w: float, h: float) -> None:
        self.w = w
        self.h = h
        # xy is set by the layout engine (center coordinates)
        self.xy = (0.0, 0.0)


def _check_rows(component: List[Vertex], ranks: Dict[Hashable, int]) -> None:
    """grandalf rows must match the input ranks one to one."""
    rows: Dict[int, set] = {}
    for v in component:
        if v.data in ranks:
            rows.setdefault(ranks[v.data], set()).add(v.view.xy[1])

    ys = []
    for rank in sorted(rows):
        if len(rows[rank]) != 1:
            raise LayoutError(f"grandalf split rank {rank} over several rows")
        ys.append(rows[rank].pop())
    if any(lower <= upper for upper, lower in zip(ys, ys[1:])):
        raise LayoutError("grandalf rows do not follow the input ranks")


class GrandalfLayoutEngine(LayeredLayoutEngine):
    """Sugiyama layout delegated to grandalf."""

    default_options = GRANDALF_LAYOUT_OPTIONS

    @property
    def name(self) -> str:
        return "grandalf"

    def _arrange(
        self,
        graph: nx.DiGraph,
        aug: nx.DiGraph,
        ranks: Dict[Hashable, int],
        chains: Dict[Tuple[str, str], List[Hashable]],
        rank_count: int,
        extent,
        opts: Dict[str, Any],
    ) -> Dict[Hashable, float]:
        dummy_width = float(opts["edgesep"])

        vertices: Dict[Hashable, Vertex] = {}
        for node in aug.nodes:
            width, height = extent(node)
            v = Vertex(node)
            v.view = _VertexView(max(width, dummy_width), max(height, 1.0))
            vertices[node] = v

        edges = [Edge(vertices[s], vertices[t]) for s, t in aug.edges()]

        # Spacer chains lift roots that do not sit on rank 0
        spacers: List[Vertex] = []
        for node in aug.nodes:
            if aug.in_degree(node) or not ranks[node]:
                continue
            below = vertices[node]
            for step in range(ranks[node]):
                spacer = Vertex((SPACER_TAG, node, step))
                spacer.view = _VertexView(dummy_width, 1.0)
                spacers.append(spacer)
                edges.append(Edge(spacer, below))
                below = spacer

        g = Graph(list(vertices.values()) + spacers, edges)

        insertion = {node: i for i, node in enumerate(aug.nodes)}
        components = sorted(
            ((core, list(core.sV)) for core in g.C),
            key=lambda pair: min(insertion[v.data] for v in pair[1] if v.data in insertion),
        )

        # Lay out each component, then pack components left to right
        desired: Dict[Hashable, float] = {}
        cursor = 0.0
        for core, comp in components:
            if len(comp) > 1:
                sug = SugiyamaLayout(core)
                sug.xspace = float(opts["nodesep"])
                sug.yspace = float(opts["ranksep"])
                sug.init_all()
                sug.draw(N=float(opts["ordering_rounds"]))
            _check_rows(comp, ranks)

            placed = [v for v in comp if v.data in ranks]
            left = min(v.view.xy[0] - extent(v.data)[0] / 2 for v in placed)
            right = max(v.view.xy[0] + extent(v.data)[0] / 2 for v in placed)
            shift = cursor - left
            for v in placed:
                desired[v.data] = v.view.xy[0] + shift
            cursor = right + shift + float(opts["nodesep"])

        layers: List[List[Hashable]] = [[] for _ in range(rank_count)]
        for node in sorted(desired, key=lambda n: (desired[n], insertion[n])):
            layers[ranks[node]].append(node)

        centers: Dict[Hashable, float] = {}
        for layer in layers:
            values = place([desired[n] for n in layer], separations(layer, extent, opts))
            centers.update(zip(layer, values))

        logger.debug(f"grandalf laid out {len(components)} component(s)")
        return centers


__all__ = ["GRANDALF_LAYOUT_OPTIONS", "GrandalfLayoutEngine"]
