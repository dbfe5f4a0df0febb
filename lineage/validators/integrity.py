"""Snapshot integrity audit.

Unlike the resolver and the layout, which stop at the first broken
invariant, the audit walks the whole snapshot and reports every problem it
can find so the external store can repair drift in one pass.
"""

import logging
from typing import Any, Dict, List, Sequence

import networkx as nx

from lineage.core.generation import resolve_generations
from lineage.models.member import Member
from lineage.utils.response import create_issue, validation_response

logger = logging.getLogger(__name__)


def check_integrity(members: Sequence[Member]) -> Dict[str, Any]:
    """Audit a snapshot against the structural invariants.

    Issue codes:
        DUPLICATE_ID: two members share an id (error)
        DANGLING_PARENT: a parent id does not resolve (error)
        SELF_PARENT: a member lists itself as a parent (error)
        CYCLE: the parent graph has a cycle (error)
        GENERATION_DRIFT: stored generation differs from resolved (warning)

    Returns:
        validation_response envelope with issues and metrics
    """
    issues: List[Dict[str, Any]] = []

    by_id: Dict[str, Member] = {}
    for member in members:
        if member.id in by_id:
            issues.append(create_issue(
                "error",
                f"Member id '{member.id}' appears more than once",
                member_id=member.id,
                code="DUPLICATE_ID",
            ))
            continue
        by_id[member.id] = member

    graph = nx.DiGraph()
    graph.add_nodes_from(by_id)
    for member in by_id.values():
        for parent_id in member.parent_ids:
            if parent_id == member.id:
                issues.append(create_issue(
                    "error",
                    f"Member '{member.id}' lists itself as a parent",
                    member_id=member.id,
                    code="SELF_PARENT",
                ))
            elif parent_id not in by_id:
                issues.append(create_issue(
                    "error",
                    f"Member '{member.id}' references unknown parent '{parent_id}'",
                    member_id=member.id,
                    code="DANGLING_PARENT",
                    details={"parent_id": parent_id},
                ))
            else:
                graph.add_edge(parent_id, member.id)

    cycles = 0
    for component in nx.strongly_connected_components(graph):
        if len(component) < 2:
            continue
        cycles += 1
        ordered = [mid for mid in by_id if mid in component]
        issues.append(create_issue(
            "error",
            f"Members {ordered} form a cycle",
            member_id=ordered[0],
            code="CYCLE",
            details={"members": ordered},
        ))

    has_errors = any(issue["severity"] == "error" for issue in issues)
    if not has_errors:
        resolved = resolve_generations(list(by_id.values()))
        for member in by_id.values():
            if member.generation != resolved[member.id]:
                issues.append(create_issue(
                    "warning",
                    f"Member '{member.id}' stores generation {member.generation}, "
                    f"resolved generation is {resolved[member.id]}",
                    member_id=member.id,
                    code="GENERATION_DRIFT",
                    details={"stored": member.generation, "resolved": resolved[member.id]},
                ))

    if issues:
        logger.info(f"Integrity audit found {len(issues)} issue(s) in {len(by_id)} members")

    return validation_response(
        issues,
        metrics={
            "members": len(by_id),
            "edges": graph.number_of_edges(),
            "cycles": cycles,
        },
    )


__all__ = ["check_integrity"]
