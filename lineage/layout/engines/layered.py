"""Layered (Sugiyama-style) layout engine.

Phases:
  1. Rank check (ranks come from generations, edges must point down)
  2. Dummy node insertion for edges that skip ranks
  3. Initial in-rank ordering from a depth-first walk of the roots
  4. Crossing minimization (barycenter sweeps, best ordering kept)
  5. Coordinate assignment (minimal-displacement placement per rank)
  6. Edge routing through dummy points

Every step is deterministic: inputs are walked in insertion order and all
sorts are stable, so the same graph always yields the same coordinates.
"""

import logging
from bisect import bisect_right, insort
from typing import Any, Dict, Hashable, List, Optional, Tuple

import networkx as nx

from lineage.core.exceptions import LayoutError
from lineage.layout.engines.base import LayoutEngine, edge_id
from lineage.models.layout_metadata import EdgeRoute, EdgeSection, LayoutMetadata, NodePosition

logger = logging.getLogger(__name__)

# Lineage drawing preset
LAYERED_LAYOUT_OPTIONS: Dict[str, Any] = {
    # Orientation: TB (generations as rows) or LR (generations as columns)
    "rankdir": "TB",
    # Spacing
    "nodesep": 60.0,
    "edgesep": 10.0,
    "ranksep": 120.0,
    "marginx": 40.0,
    "marginy": 40.0,
    # Member card size
    "node_width": 200.0,
    "node_height": 100.0,
    # Iteration budgets
    "crossing_passes": 24,
    "alignment_passes": 4,
}

DUMMY_TAG = "__dummy__"


def is_dummy(node: Hashable) -> bool:
    return isinstance(node, tuple) and node[0] == DUMMY_TAG


# ─── Dummy node insertion ───────────────────────────────────────────────────


def _insert_dummies(
    graph: nx.DiGraph, ranks: Dict[Hashable, int]
) -> Tuple[nx.DiGraph, Dict[Tuple[str, str], List[Hashable]]]:
    """Split every rank-skipping edge into a chain of unit-span edges.

    Returns:
        (augmented graph, chains keyed by original edge)
    """
    aug = nx.DiGraph()
    aug.add_nodes_from(graph.nodes)

    chains: Dict[Tuple[str, str], List[Hashable]] = {}
    for index, (source, target) in enumerate(graph.edges()):
        span = ranks[target] - ranks[source]
        chain: List[Hashable] = []
        previous: Hashable = source
        for step in range(1, span):
            dummy = (DUMMY_TAG, index, step)
            ranks[dummy] = ranks[source] + step
            aug.add_edge(previous, dummy)
            chain.append(dummy)
            previous = dummy
        aug.add_edge(previous, target)
        chains[(source, target)] = chain

    return aug, chains


# ─── Initial ordering ───────────────────────────────────────────────────────


def _preorder(graph: nx.DiGraph) -> Dict[Hashable, int]:
    """Depth-first pre-order of the original graph.

    Roots are taken in insertion order and children by their ``order``
    attribute, so a plain tree starts out already crossing-free.
    """
    index: Dict[Hashable, int] = {}

    def order_key(node):
        return graph.nodes[node].get("order", 0)

    for root in [n for n in graph.nodes if graph.in_degree(n) == 0]:
        stack = [root]
        while stack:
            node = stack.pop()
            if node in index:
                continue
            index[node] = len(index)
            kids = sorted(graph.successors(node), key=order_key)
            stack.extend(reversed(kids))

    return index


def _initial_ordering(
    graph: nx.DiGraph,
    aug: nx.DiGraph,
    ranks: Dict[Hashable, int],
    chains: Dict[Tuple[str, str], List[Hashable]],
    rank_count: int,
) -> List[List[Hashable]]:
    pre = _preorder(graph)
    key: Dict[Hashable, Tuple[int, int, int]] = {n: (pre[n], 0, 0) for n in graph.nodes}
    for (source, target), chain in chains.items():
        for step, dummy in enumerate(chain):
            key[dummy] = (pre[target], 1, step)

    layers: List[List[Hashable]] = [[] for _ in range(rank_count)]
    for node in aug.nodes:
        layers[ranks[node]].append(node)
    for layer in layers:
        layer.sort(key=lambda n: key[n])
    return layers


# ─── Crossing minimization ──────────────────────────────────────────────────


def _count_layer_crossings(
    upper: List[Hashable], lower: List[Hashable], aug: nx.DiGraph
) -> int:
    lower_pos = {node: i for i, node in enumerate(lower)}
    edges = []
    for i, node in enumerate(upper):
        for succ in aug.successors(node):
            if succ in lower_pos:
                edges.append((i, lower_pos[succ]))
    edges.sort()

    # Count pairs (a, b) with a before b in the upper layer but after it below
    crossings = 0
    seen: List[int] = []
    for _, target_pos in edges:
        crossings += len(seen) - bisect_right(seen, target_pos)
        insort(seen, target_pos)
    return crossings


def count_crossings(layers: List[List[Hashable]], aug: nx.DiGraph) -> int:
    """Total edge crossings between adjacent layers."""
    return sum(
        _count_layer_crossings(layers[i], layers[i + 1], aug)
        for i in range(len(layers) - 1)
    )


def _barycenter_sort(
    layer: List[Hashable], neighbours_of, reference: List[Hashable]
) -> None:
    ref_pos = {node: float(i) for i, node in enumerate(reference)}
    keys: Dict[Hashable, float] = {}
    for i, node in enumerate(layer):
        positions = [ref_pos[nb] for nb in neighbours_of(node) if nb in ref_pos]
        # Nodes without neighbours in the reference layer hold their slot
        keys[node] = sum(positions) / len(positions) if positions else float(i)
    layer.sort(key=lambda n: keys[n])


def minimize_crossings(
    layers: List[List[Hashable]], aug: nx.DiGraph, passes: int
) -> List[List[Hashable]]:
    """Barycenter sweeps, keeping the ordering with the fewest crossings."""
    best = [list(layer) for layer in layers]
    best_count = count_crossings(best, aug)
    current = [list(layer) for layer in layers]

    for _ in range(passes):
        if best_count == 0:
            break
        for i in range(1, len(current)):
            _barycenter_sort(current[i], aug.predecessors, current[i - 1])
        for i in range(len(current) - 2, -1, -1):
            _barycenter_sort(current[i], aug.successors, current[i + 1])

        count = count_crossings(current, aug)
        if count >= best_count:
            break
        best_count = count
        best = [list(layer) for layer in current]

    logger.debug(f"Crossing minimization settled at {best_count} crossing(s)")
    return best


# ─── Coordinate assignment ──────────────────────────────────────────────────


def _pool_adjacent(values: List[float]) -> List[float]:
    """Closest non-decreasing sequence (least squares, pool-adjacent-violators)."""
    blocks: List[List[float]] = []  # [sum, count]
    for value in values:
        blocks.append([value, 1.0])
        while len(blocks) > 1 and (
            blocks[-2][0] / blocks[-2][1] > blocks[-1][0] / blocks[-1][1]
        ):
            total, count = blocks.pop()
            blocks[-1][0] += total
            blocks[-1][1] += count

    result: List[float] = []
    for total, count in blocks:
        result.extend([total / count] * int(count))
    return result


def place(desired: List[float], gaps: List[float]) -> List[float]:
    """Positions closest to ``desired`` keeping each gap >= its separation."""
    offsets = [0.0]
    for sep in gaps:
        offsets.append(offsets[-1] + sep)
    shifted = [d - o for d, o in zip(desired, offsets)]
    return [z + o for z, o in zip(_pool_adjacent(shifted), offsets)]


def separations(layer: List[Hashable], extent, opts: Dict[str, Any]) -> List[float]:
    """Minimum center-to-center gap between each pair of rank neighbours."""
    seps = []
    for left, right in zip(layer, layer[1:]):
        gap = opts["edgesep"] if is_dummy(left) or is_dummy(right) else opts["nodesep"]
        seps.append((extent(left)[0] + extent(right)[0]) / 2 + float(gap))
    return seps


class LayeredLayoutEngine(LayoutEngine):
    """Hand-rolled Sugiyama layout for ranked lineage graphs."""

    default_options: Dict[str, Any] = LAYERED_LAYOUT_OPTIONS

    @property
    def name(self) -> str:
        return "layered"

    @property
    def supports_crossing_minimization(self) -> bool:
        return True

    def layout(
        self,
        graph: nx.DiGraph,
        options: Optional[Dict[str, Any]] = None,
    ) -> LayoutMetadata:
        """Compute a layered layout.

        Args:
            graph: Ranked DiGraph (node attrs ``rank``, optional ``order``,
                ``width``, ``height``; edge attr ``id``)
            options: Overrides merged over ``default_options``

        Returns:
            LayoutMetadata with top-left positions and edge routes

        Raises:
            LayoutError: If the graph is cyclic or ranks are inconsistent
            ValueError: If an option is invalid
        """
        opts = {**self.default_options, **(options or {})}
        if opts["rankdir"] not in ("TB", "LR"):
            raise ValueError(f"rankdir must be 'TB' or 'LR', got '{opts['rankdir']}'")
        node_size = (float(opts["node_width"]), float(opts["node_height"]))

        if graph.number_of_nodes() == 0:
            return LayoutMetadata(algorithm=self.name, layout_options=opts, node_size=node_size)

        ranks = self._read_ranks(graph)
        rank_count = max(ranks.values()) + 1

        aug, chains = _insert_dummies(graph, ranks)

        horizontal = opts["rankdir"] == "TB"

        def extent(node) -> Tuple[float, float]:
            """(in-rank extent, rank-axis extent) of a node."""
            if is_dummy(node):
                return 0.0, 0.0
            attrs = graph.nodes[node]
            width = float(attrs.get("width", node_size[0]))
            height = float(attrs.get("height", node_size[1]))
            return (width, height) if horizontal else (height, width)

        centers = self._arrange(graph, aug, ranks, chains, rank_count, extent, opts)

        rank_extent = max(extent(n)[1] for n in graph.nodes)
        rank_margin = float(opts["marginy"] if horizontal else opts["marginx"])
        inrank_margin = float(opts["marginx"] if horizontal else opts["marginy"])
        rank_step = rank_extent + float(opts["ranksep"])

        # Shift so the leftmost (topmost) card edge sits on the margin
        min_edge = min(centers[n] - extent(n)[0] / 2 for n in centers)
        shift = inrank_margin - min_edge

        def inrank_center(node) -> float:
            return centers[node] + shift

        def rank_start(node) -> float:
            return rank_margin + ranks[node] * rank_step

        def point(inrank: float, along: float) -> Tuple[float, float]:
            if horizontal:
                return (round(inrank, 2), round(along, 2))
            return (round(along, 2), round(inrank, 2))

        positions: Dict[str, NodePosition] = {}
        for node in graph.nodes:
            x, y = point(inrank_center(node) - extent(node)[0] / 2, rank_start(node))
            positions[node] = NodePosition(x=x, y=y)

        edges: Dict[str, EdgeRoute] = {}
        for source, target, attrs in graph.edges(data=True):
            route_id = attrs.get("id") or edge_id(source, target)
            if route_id in edges:
                raise LayoutError(
                    f"Edge id '{route_id}' is used by both {edges[route_id].source} -> "
                    f"{edges[route_id].target} and {source} -> {target}"
                )
            start = point(inrank_center(source), rank_start(source) + extent(source)[1])
            end = point(inrank_center(target), rank_start(target))
            bends = [
                point(inrank_center(d), rank_start(d) + rank_extent / 2)
                for d in chains[(source, target)]
            ]
            edges[route_id] = EdgeRoute(
                source=source,
                target=target,
                sections=[EdgeSection(startPoint=start, endPoint=end, bendPoints=bends)],
            )

        logger.debug(
            f"{self.name} layout placed {graph.number_of_nodes()} nodes "
            f"({aug.number_of_nodes() - graph.number_of_nodes()} dummies) in {rank_count} ranks"
        )

        return LayoutMetadata(
            algorithm=self.name,
            layout_options=opts,
            positions=positions,
            edges=edges,
            ranks={n: ranks[n] for n in graph.nodes},
            node_size=node_size,
        )

    def _read_ranks(self, graph: nx.DiGraph) -> Dict[Hashable, int]:
        if not nx.is_directed_acyclic_graph(graph):
            cycle = [edge[0] for edge in nx.find_cycle(graph)]
            raise LayoutError(f"Cannot lay out a cyclic graph: {cycle}")

        ranks: Dict[Hashable, int] = {}
        for node, attrs in graph.nodes(data=True):
            rank = attrs.get("rank")
            if not isinstance(rank, int) or rank < 0:
                raise LayoutError(f"Node {node} has no valid rank (got {rank!r})")
            ranks[node] = rank

        for source, target in graph.edges():
            if ranks[target] <= ranks[source]:
                raise LayoutError(
                    f"Edge {source} -> {target} does not point to a deeper rank "
                    f"({ranks[source]} -> {ranks[target]})"
                )
        return ranks

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
        """Order every rank and return in-rank centers of all augmented nodes.

        Subclasses replace this phase; ranks, margins and routing stay shared.
        """
        layers = _initial_ordering(graph, aug, ranks, chains, rank_count)
        layers = minimize_crossings(layers, aug, int(opts["crossing_passes"]))
        return self._assign_centers(layers, aug, extent, opts)

    def _assign_centers(
        self,
        layers: List[List[Hashable]],
        aug: nx.DiGraph,
        extent,
        opts: Dict[str, Any],
    ) -> Dict[Hashable, float]:
        """In-rank center coordinate of every node, before margins."""
        layer_seps = [separations(layer, extent, opts) for layer in layers]

        # Start packed from zero, then pull ranks towards their neighbours
        centers: Dict[Hashable, float] = {}
        for layer, seps in zip(layers, layer_seps):
            position = 0.0
            for i, node in enumerate(layer):
                if i:
                    position += seps[i - 1]
                centers[node] = position

        def align(index: int, neighbours_of) -> None:
            layer = layers[index]
            desired = []
            for node in layer:
                anchors = [centers[nb] for nb in neighbours_of(node)]
                desired.append(sum(anchors) / len(anchors) if anchors else centers[node])
            for node, value in zip(layer, place(desired, layer_seps[index])):
                centers[node] = value

        for _ in range(int(opts["alignment_passes"])):
            for i in range(1, len(layers)):
                align(i, aug.predecessors)
            for i in range(len(layers) - 2, -1, -1):
                align(i, aug.successors)

        return centers


__all__ = [
    "DUMMY_TAG",
    "LAYERED_LAYOUT_OPTIONS",
    "LayeredLayoutEngine",
    "count_crossings",
    "is_dummy",
    "minimize_crossings",
    "place",
    "separations",
]
