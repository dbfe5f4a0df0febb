"""Pure structural edits over a member snapshot.

Each edit validates the request, builds the edited snapshot, and
re-resolves generations for the edited member's whole subtree. The input
snapshot is never mutated; the caller persists ``EditResult.members``.

Operations:
    add_parent     - attach under one more parent (multi-parent)
    move_member    - replace all parents with a single new parent
    remove_parent  - drop one parent edge
    unlink_member  - drop every parent edge, turning the member into a root
"""

import logging
from typing import Dict, List, Sequence

from pydantic import BaseModel, Field

from lineage.core.generation import apply_generations, recompute_subtree
from lineage.models.member import Member
from lineage.validators.move_validator import (
    MoveErrorKind,
    MoveValidation,
    validate_move,
    validate_reparent,
)

logger = logging.getLogger(__name__)


class EditResult(BaseModel):
    """Outcome of a structural edit.

    Attributes:
        validation: Accept/reject decision
        members: Edited snapshot (the untouched input when rejected)
        changed_generations: member_id -> new generation, only for members
            whose generation actually moved
    """

    validation: MoveValidation
    members: List[Member] = Field(default_factory=list)
    changed_generations: Dict[str, int] = Field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return self.validation.valid


def _replace_parents(
    members: Sequence[Member], member_id: str, parent_ids: List[str]
) -> List[Member]:
    return [
        m.with_parents(parent_ids) if m.id == member_id else m for m in members
    ]


def _settle(
    members: List[Member], member_id: str, validation: MoveValidation
) -> EditResult:
    """Re-resolve the edited subtree and package the result."""
    subtree = recompute_subtree(members, member_id)
    stored = {m.id: m.generation for m in members}
    changed = {mid: g for mid, g in subtree.items() if stored[mid] != g}

    if changed:
        logger.debug(f"Edit on {member_id} moved {len(changed)} generation(s)")

    return EditResult(
        validation=validation,
        members=apply_generations(members, subtree),
        changed_generations=changed,
    )


def _find(members: Sequence[Member], member_id: str):
    for member in members:
        if member.id == member_id:
            return member
    return None


def add_parent(members: Sequence[Member], member_id: str, parent_id: str) -> EditResult:
    """Attach ``member_id`` under ``parent_id``, keeping existing parents."""
    validation = validate_move(members, member_id, parent_id)
    if not validation.valid:
        return EditResult(validation=validation, members=list(members))

    member = _find(members, member_id)
    edited = _replace_parents(members, member_id, member.parent_ids + [parent_id])
    return _settle(edited, member_id, validation)


def move_member(
    members: Sequence[Member], member_id: str, new_parent_id: str
) -> EditResult:
    """Detach ``member_id`` from all parents and attach it under ``new_parent_id``."""
    validation = validate_reparent(members, member_id, new_parent_id)
    if not validation.valid:
        return EditResult(validation=validation, members=list(members))

    edited = _replace_parents(members, member_id, [new_parent_id])
    return _settle(edited, member_id, validation)


def remove_parent(
    members: Sequence[Member], member_id: str, parent_id: str
) -> EditResult:
    """Drop the ``parent_id`` -> ``member_id`` edge.

    Removing an edge cannot introduce a cycle, so only existence is checked.
    """
    member = _find(members, member_id)
    if member is None or _find(members, parent_id) is None:
        missing = member_id if member is None else parent_id
        validation = MoveValidation.reject(
            MoveErrorKind.NOT_FOUND, f"Member '{missing}' not found"
        )
        return EditResult(validation=validation, members=list(members))

    if parent_id not in member.parent_ids:
        validation = MoveValidation.reject(
            MoveErrorKind.NOT_LINKED,
            f"'{member.display_name}' is not a child of '{parent_id}'",
        )
        return EditResult(validation=validation, members=list(members))

    remaining = [p for p in member.parent_ids if p != parent_id]
    edited = _replace_parents(members, member_id, remaining)
    return _settle(edited, member_id, MoveValidation.accept())


def unlink_member(members: Sequence[Member], member_id: str) -> EditResult:
    """Turn ``member_id`` into a root.

    Unlinking a member that is already a root is a valid no-op (apart from
    repairing any generation drift in its subtree).
    """
    member = _find(members, member_id)
    if member is None:
        validation = MoveValidation.reject(
            MoveErrorKind.NOT_FOUND, f"Member '{member_id}' not found"
        )
        return EditResult(validation=validation, members=list(members))

    edited = _replace_parents(members, member_id, [])
    return _settle(edited, member_id, MoveValidation.accept())


__all__ = [
    "EditResult",
    "add_parent",
    "move_member",
    "remove_parent",
    "unlink_member",
]
