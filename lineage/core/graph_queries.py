"""Structural queries over a flat member snapshot.

Every function takes the full snapshot and derives adjacency on the fly;
nothing is cached between calls. Traversals keep a visited set seeded with
the start id, so they terminate even when the snapshot is already cyclic
(callers may query before validating).
"""

import logging
from collections import deque
from typing import Dict, Iterable, List, Sequence

import networkx as nx

from lineage.core.exceptions import DanglingParentError, DuplicateMemberError
from lineage.models.member import Member

logger = logging.getLogger(__name__)


def index_members(members: Iterable[Member]) -> Dict[str, Member]:
    """Index a snapshot by member id.

    Raises:
        DuplicateMemberError: If two members share an id
    """
    index: Dict[str, Member] = {}
    for member in members:
        if member.id in index:
            raise DuplicateMemberError(member.id)
        index[member.id] = member
    return index


def _children_map(members: Sequence[Member]) -> Dict[str, List[Member]]:
    """Map parent id -> children in input order."""
    mapping: Dict[str, List[Member]] = {}
    for member in members:
        for parent_id in member.parent_ids:
            mapping.setdefault(parent_id, []).append(member)
    return mapping


def roots(members: Sequence[Member]) -> List[Member]:
    """Members without parents, in input order."""
    return [m for m in members if not m.parent_ids]


def children(members: Sequence[Member], member_id: str) -> List[Member]:
    """Members listing ``member_id`` as a parent, ordered by sibling_order.

    ``sorted`` is stable, so ties keep input order.
    """
    found = [m for m in members if member_id in m.parent_ids]
    return sorted(found, key=lambda m: m.sibling_order)


def parents(members: Sequence[Member], member: Member) -> List[Member]:
    """Resolved parents of ``member`` in ``parent_ids`` order.

    Ids that do not resolve are skipped here; use ``build_parent_graph`` for
    the strict variant.
    """
    by_id = {m.id: m for m in members}
    return [by_id[pid] for pid in member.parent_ids if pid in by_id]


def ancestors(members: Sequence[Member], member_id: str) -> List[Member]:
    """Breadth-first walk up through parent_ids.

    Returns:
        De-duplicated ancestors in discovery order, never including the
        start member itself
    """
    by_id = {m.id: m for m in members}
    start = by_id.get(member_id)
    if start is None:
        return []

    visited = {member_id}
    found: List[Member] = []
    queue = deque([start])
    while queue:
        current = queue.popleft()
        for parent_id in current.parent_ids:
            if parent_id in visited or parent_id not in by_id:
                continue
            visited.add(parent_id)
            parent = by_id[parent_id]
            found.append(parent)
            queue.append(parent)
    return found


def descendants(members: Sequence[Member], member_id: str) -> List[Member]:
    """Breadth-first walk down through "who lists me as a parent".

    Returns:
        De-duplicated descendants in discovery order, never including the
        start member itself
    """
    child_map = _children_map(members)

    visited = {member_id}
    found: List[Member] = []
    queue = deque([member_id])
    while queue:
        current_id = queue.popleft()
        for child in child_map.get(current_id, []):
            if child.id in visited:
                continue
            visited.add(child.id)
            found.append(child)
            queue.append(child.id)
    return found


def build_parent_graph(members: Sequence[Member]) -> nx.DiGraph:
    """Build a parent -> child DiGraph from a snapshot.

    Nodes and edges are inserted in input order so downstream networkx
    traversals are deterministic. Node attribute ``member`` holds the Member.

    Raises:
        DuplicateMemberError: If two members share an id
        DanglingParentError: If a parent id does not resolve
    """
    index = index_members(members)

    graph = nx.DiGraph()
    for member in members:
        graph.add_node(member.id, member=member)

    for member in members:
        for parent_id in member.parent_ids:
            if parent_id not in index:
                logger.error(
                    f"Member {member.id} references unknown parent {parent_id}"
                )
                raise DanglingParentError(member.id, parent_id)
            graph.add_edge(parent_id, member.id)

    return graph


def count_by_generation(members: Iterable[Member]) -> Dict[int, int]:
    """Count members per stored generation, sorted by generation."""
    counts: Dict[int, int] = {}
    for member in members:
        counts[member.generation] = counts.get(member.generation, 0) + 1
    return dict(sorted(counts.items()))


__all__ = [
    "index_members",
    "roots",
    "children",
    "parents",
    "ancestors",
    "descendants",
    "build_parent_graph",
    "count_by_generation",
]
