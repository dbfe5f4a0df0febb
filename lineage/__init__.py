"""Lineage graph engine.

Structural queries, edit validation, generation resolution, layered layout
and generation colors for multi-parent mentor/mentee lineages.
"""

from lineage.core.edits import (
    EditResult,
    add_parent,
    move_member,
    remove_parent,
    unlink_member,
)
from lineage.core.exceptions import (
    DanglingParentError,
    DataIntegrityCycleError,
    DuplicateMemberError,
    LayoutError,
)
from lineage.core.generation import (
    apply_generations,
    default_generation,
    generation_changes,
    recompute_subtree,
    resolve_generations,
)
from lineage.core.graph_queries import (
    ancestors,
    children,
    count_by_generation,
    descendants,
    parents,
    roots,
)
from lineage.engine import LineageEngine
from lineage.layout.builder import build_layout
from lineage.models.layout_metadata import LineageLayout
from lineage.models.member import ROOT_GENERATION, Member, MemberStatus
from lineage.validators.integrity import check_integrity
from lineage.validators.move_validator import (
    MoveErrorKind,
    MoveValidation,
    validate_add_parent,
    validate_move,
    validate_new_member,
    validate_reparent,
)
from lineage.visualization.colors import GenerationPalette

__version__ = "0.1.0"

__all__ = [
    "ROOT_GENERATION",
    "Member",
    "MemberStatus",
    "LineageEngine",
    "LineageLayout",
    "GenerationPalette",
    # Queries
    "roots",
    "children",
    "parents",
    "ancestors",
    "descendants",
    "count_by_generation",
    # Validation
    "MoveErrorKind",
    "MoveValidation",
    "validate_move",
    "validate_add_parent",
    "validate_new_member",
    "validate_reparent",
    "check_integrity",
    # Generations
    "resolve_generations",
    "default_generation",
    "recompute_subtree",
    "generation_changes",
    "apply_generations",
    # Edits
    "EditResult",
    "add_parent",
    "move_member",
    "remove_parent",
    "unlink_member",
    # Layout
    "build_layout",
    # Errors
    "DanglingParentError",
    "DataIntegrityCycleError",
    "DuplicateMemberError",
    "LayoutError",
]
