"""Generation resolver.

A member's generation is ``ROOT_GENERATION`` when it has no parents,
otherwise one more than the deepest of its parents. Using the deepest
parent (not the shallowest) keeps ``generation(child) > generation(parent)``
true for every parent of a multi-parent member at once.

The same rule is used at creation time (``default_generation``) and after
structural edits (``resolve_generations`` / ``recompute_subtree``), so the
two paths can never drift apart.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Sequence

import networkx as nx

from lineage.core.exceptions import DanglingParentError, DataIntegrityCycleError
from lineage.core.graph_queries import build_parent_graph, descendants, index_members
from lineage.models.member import ROOT_GENERATION, Member

logger = logging.getLogger(__name__)


def _topological_order(graph: nx.DiGraph) -> List[str]:
    """Topological order of the parent graph, roots first.

    Raises:
        DataIntegrityCycleError: If the graph is cyclic
    """
    try:
        return list(nx.topological_sort(graph))
    except nx.NetworkXUnfeasible:
        cycle = [edge[0] for edge in nx.find_cycle(graph)]
        logger.error(f"Generation pass aborted, parent graph has a cycle: {cycle}")
        raise DataIntegrityCycleError(cycle) from None


def resolve_generations(members: Sequence[Member]) -> Dict[str, int]:
    """Compute every member's generation from scratch.

    Stored ``generation`` values are ignored; only ``parent_ids`` matter.

    Args:
        members: Full snapshot

    Returns:
        Dictionary of member_id -> generation, in snapshot order

    Raises:
        DanglingParentError: If a parent id does not resolve
        DataIntegrityCycleError: If the parent graph is cyclic
    """
    graph = build_parent_graph(members)
    resolved: Dict[str, int] = {}

    for member_id in _topological_order(graph):
        parent_generations = [resolved[p] for p in graph.predecessors(member_id)]
        if parent_generations:
            resolved[member_id] = max(parent_generations) + 1
        else:
            resolved[member_id] = ROOT_GENERATION

    logger.debug(f"Resolved generations for {len(resolved)} members")
    return {m.id: resolved[m.id] for m in members}


def default_generation(members: Sequence[Member], parent_ids: Iterable[str]) -> int:
    """Generation for a member about to be created under ``parent_ids``.

    Parent generations are taken from a fresh resolution of the snapshot,
    not from the stored values, so a stale snapshot cannot skew the result.

    Raises:
        DanglingParentError: If a parent id does not resolve
    """
    parent_ids = list(parent_ids)
    if not parent_ids:
        return ROOT_GENERATION

    resolved = resolve_generations(members)
    for parent_id in parent_ids:
        if parent_id not in resolved:
            raise DanglingParentError("<new member>", parent_id)
    return max(resolved[p] for p in parent_ids) + 1


def recompute_subtree(members: Sequence[Member], member_id: str) -> Dict[str, int]:
    """Resolved generations for ``member_id`` and every descendant.

    Descendants are included even when their own parent_ids are unchanged,
    because an ancestor's depth may have moved.

    Raises:
        KeyError: If ``member_id`` is not in the snapshot
    """
    index = index_members(members)
    if member_id not in index:
        raise KeyError(f"Member '{member_id}' not found in snapshot")

    resolved = resolve_generations(members)
    affected = [member_id] + [d.id for d in descendants(members, member_id)]
    return {mid: resolved[mid] for mid in affected}


def generation_changes(members: Sequence[Member]) -> Dict[str, int]:
    """Members whose stored generation disagrees with the resolved one."""
    resolved = resolve_generations(members)
    return {
        m.id: resolved[m.id] for m in members if m.generation != resolved[m.id]
    }


def apply_generations(
    members: Sequence[Member], generations: Mapping[str, int]
) -> List[Member]:
    """Return copies of ``members`` carrying the given generations.

    Members missing from ``generations`` are returned unchanged.
    """
    return [
        m.with_generation(generations[m.id]) if m.id in generations else m
        for m in members
    ]


__all__ = [
    "ROOT_GENERATION",
    "resolve_generations",
    "default_generation",
    "recompute_subtree",
    "generation_changes",
    "apply_generations",
]
