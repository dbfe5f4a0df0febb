"""
Core Layer - graph queries, generation resolution and structural edits.

Modules:
- graph_queries: roots, children, parents, ancestors, descendants
- generation: generation (depth) resolution under the deepest-parent rule
- edits: pure snapshot transforms for attach, move and unlink
- exceptions: integrity errors raised on malformed snapshots
"""

from .exceptions import (
    DanglingParentError,
    DataIntegrityCycleError,
    DuplicateMemberError,
    LayoutError,
)
from .graph_queries import (
    ancestors,
    build_parent_graph,
    children,
    count_by_generation,
    descendants,
    index_members,
    parents,
    roots,
)
from .generation import (
    ROOT_GENERATION,
    apply_generations,
    default_generation,
    generation_changes,
    recompute_subtree,
    resolve_generations,
)

__all__ = [
    # Errors
    'DanglingParentError',
    'DataIntegrityCycleError',
    'DuplicateMemberError',
    'LayoutError',
    # Queries
    'ancestors',
    'build_parent_graph',
    'children',
    'count_by_generation',
    'descendants',
    'index_members',
    'parents',
    'roots',
    # Generations
    'ROOT_GENERATION',
    'apply_generations',
    'default_generation',
    'generation_changes',
    'recompute_subtree',
    'resolve_generations',
]
