"""Lineage layout builder.

Turns a member snapshot into a rendering-ready ``LineageLayout``:

1. Resolve generations from parent_ids (stored values are ignored)
2. Build the ranked parent -> child graph, one edge per parent of a
   multi-parent member, rank = generation - ROOT_GENERATION
3. Delegate positioning to a ``LayoutEngine``
4. Annotate members with resolved generation and color, and derive
   generation bands from the actual positions

There is no incremental mode; every structural change re-runs the whole
pipeline on the full snapshot.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from lineage.config.settings import get_layout_defaults
from lineage.core.exceptions import DataIntegrityCycleError, LayoutError
from lineage.core.generation import resolve_generations
from lineage.core.graph_queries import build_parent_graph
from lineage.layout.engines import DEFAULT_ENGINE, get_engine
from lineage.layout.engines.base import LayoutEngine, edge_id
from lineage.models.layout_metadata import (
    GenerationBand,
    LayoutMetadata,
    LineageEdge,
    LineageLayout,
    PositionedMember,
)
from lineage.models.member import ROOT_GENERATION, Member
from lineage.visualization.colors import GenerationPalette

logger = logging.getLogger(__name__)


def generation_label(generation: int) -> str:
    return f"Generation {generation}"


def _bands(
    members: List[Member],
    metadata: LayoutMetadata,
    direction: str,
    palette: GenerationPalette,
) -> List[GenerationBand]:
    by_generation: Dict[int, List[Member]] = {}
    for member in members:
        by_generation.setdefault(member.generation, []).append(member)

    bands = []
    for generation in sorted(by_generation):
        first = metadata.positions[by_generation[generation][0].id]
        bands.append(GenerationBand(
            generation=generation,
            offset=first.y if direction == "TB" else first.x,
            label=generation_label(generation),
            color=palette.color_for(generation),
            count=len(by_generation[generation]),
        ))
    return bands


def build_layout(
    members: Sequence[Member],
    engine: Optional[LayoutEngine] = None,
    options: Optional[Dict[str, Any]] = None,
    palette: Optional[GenerationPalette] = None,
) -> LineageLayout:
    """Lay out a full member snapshot.

    Args:
        members: Full snapshot
        engine: Layout engine (the registry default if None)
        options: Engine options, merged over environment defaults
        palette: Color cache to use (a fresh palette if None)

    Returns:
        LineageLayout with positioned members, edges and generation bands

    Raises:
        DuplicateMemberError: If two members share an id
        DanglingParentError: If a parent id does not resolve
        LayoutError: If the parent graph is cyclic or the engine fails
    """
    engine = engine or get_engine(DEFAULT_ENGINE)()
    palette = palette or GenerationPalette()
    merged_options = {**get_layout_defaults(), **(options or {})}

    graph = build_parent_graph(members)
    try:
        generations = resolve_generations(members)
    except DataIntegrityCycleError as e:
        raise LayoutError(f"Cannot lay out lineage: {e}") from e

    for member in members:
        attrs = graph.nodes[member.id]
        attrs["rank"] = generations[member.id] - ROOT_GENERATION
        attrs["order"] = member.sibling_order
    for parent_id, child_id in graph.edges():
        graph.edges[parent_id, child_id]["id"] = edge_id(parent_id, child_id)

    metadata = engine.layout(graph, merged_options)
    direction = metadata.layout_options.get("rankdir", "TB")

    annotated = [m.with_generation(generations[m.id]) for m in members]
    nodes = [
        PositionedMember(
            member=member,
            position=metadata.positions[member.id],
            rank=metadata.ranks.get(member.id, member.generation - ROOT_GENERATION),
            color=palette.color_for(member.generation),
        )
        for member in annotated
    ]

    edges = [
        LineageEdge(id=eid, source=route.source, target=route.target, route=route)
        for eid, route in metadata.edges.items()
    ]

    logger.info(
        f"Laid out {len(nodes)} members and {len(edges)} edges with {engine.name} "
        f"(etag {metadata.etag[:8]})"
    )

    return LineageLayout(
        direction=direction,
        nodes=nodes,
        edges=edges,
        bands=_bands(annotated, metadata, direction, palette),
        metadata=metadata,
    )


__all__ = ["build_layout", "edge_id", "generation_label"]
