"""Validation of proposed structural edits.

Validation is kept apart from mutation so the same check gates both a
drag-and-drop reconnection in the editor and a bulk import path. Every
rejection is returned as a ``MoveValidation``; nothing here raises for a
rejected edit.
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Sequence

from pydantic import BaseModel, Field

from lineage.config.settings import is_enabled
from lineage.core.graph_queries import descendants
from lineage.models.member import Member
from lineage.utils.response import error_response, success_response

logger = logging.getLogger(__name__)


class MoveErrorKind(str, Enum):
    """Why a proposed edge was rejected."""

    SELF_REFERENCE = "SelfReference"
    NOT_FOUND = "NotFound"
    CROSS_TREE = "CrossTree"
    ALREADY_LINKED = "AlreadyLinked"
    WOULD_CREATE_CYCLE = "WouldCreateCycle"
    NOT_LINKED = "NotLinked"


class MoveValidation(BaseModel):
    """Outcome of validating a proposed parent <-> child edge."""

    valid: bool = Field(..., description="True if the edit may be applied")
    reason: Optional[MoveErrorKind] = Field(
        default=None, description="Failure classification (None when valid)"
    )
    message: str = Field(default="", description="Human-readable explanation")

    @classmethod
    def accept(cls) -> "MoveValidation":
        return cls(valid=True)

    @classmethod
    def reject(cls, reason: MoveErrorKind, message: str) -> "MoveValidation":
        logger.warning(f"Edit rejected ({reason.value}): {message}")
        return cls(valid=False, reason=reason, message=message)

    def __bool__(self) -> bool:
        return self.valid

    def to_response(self) -> Dict[str, Any]:
        """Render as an ok/error envelope for the editor."""
        if self.valid:
            return success_response({"valid": True})
        return error_response(self.message, code=self.reason.value)


def _label(member: Member) -> str:
    return f"'{member.display_name}'"


def _validate_edge(
    members: Sequence[Member],
    moving_id: str,
    new_parent_id: str,
    replace_parents: bool,
) -> MoveValidation:
    if moving_id == new_parent_id:
        return MoveValidation.reject(
            MoveErrorKind.SELF_REFERENCE, "A member cannot be its own parent"
        )

    by_id = {m.id: m for m in members}
    moving = by_id.get(moving_id)
    new_parent = by_id.get(new_parent_id)
    if moving is None or new_parent is None:
        missing = moving_id if moving is None else new_parent_id
        return MoveValidation.reject(
            MoveErrorKind.NOT_FOUND, f"Member '{missing}' not found"
        )

    if (
        is_enabled("check_tree_scope")
        and moving.tree_id is not None
        and new_parent.tree_id is not None
        and moving.tree_id != new_parent.tree_id
    ):
        return MoveValidation.reject(
            MoveErrorKind.CROSS_TREE,
            f"{_label(moving)} and {_label(new_parent)} belong to different trees",
        )

    if replace_parents:
        already_linked = moving.parent_ids == [new_parent_id]
    else:
        already_linked = new_parent_id in moving.parent_ids
    if already_linked:
        return MoveValidation.reject(
            MoveErrorKind.ALREADY_LINKED,
            f"{_label(moving)} is already a child of {_label(new_parent)}",
        )

    descendant_ids = {d.id for d in descendants(members, moving_id)}
    if new_parent_id in descendant_ids:
        return MoveValidation.reject(
            MoveErrorKind.WOULD_CREATE_CYCLE,
            f"{_label(new_parent)} is already a descendant of {_label(moving)}; "
            f"attaching would create a cycle",
        )

    return MoveValidation.accept()


def validate_move(
    members: Sequence[Member], moving_id: str, new_parent_id: str
) -> MoveValidation:
    """Decide whether ``moving_id`` may be attached under ``new_parent_id``.

    Checks run in order and stop at the first failure:
    self-reference, existence, tree scope, already linked, cycle.

    Args:
        members: Full snapshot
        moving_id: Member that would gain the parent
        new_parent_id: Proposed parent

    Returns:
        MoveValidation (valid, or rejected with a MoveErrorKind)
    """
    return _validate_edge(members, moving_id, new_parent_id, replace_parents=False)


# Attach vocabulary used by the editor's "add parent" action
validate_add_parent = validate_move


def validate_reparent(
    members: Sequence[Member], moving_id: str, new_parent_id: str
) -> MoveValidation:
    """Decide whether ``moving_id`` may be moved to sit under ``new_parent_id`` only.

    Same checks as ``validate_move``, except that the member is only
    AlreadyLinked when ``new_parent_id`` is already its sole parent. A
    member with parents [A, B] may be moved to A; the move drops B.
    """
    return _validate_edge(members, moving_id, new_parent_id, replace_parents=True)


def validate_new_member(
    members: Sequence[Member],
    parent_ids: Iterable[str],
    tree_id: Optional[str] = None,
) -> MoveValidation:
    """Gate the creation/import path for a member that does not exist yet.

    A new member has no descendants, so it cannot close a cycle; only the
    parent list itself needs checking. Without an explicit ``tree_id`` the
    first parent that carries one sets the scope for the rest.
    """
    by_id = {m.id: m for m in members}
    seen = set()
    for parent_id in parent_ids:
        if parent_id in seen:
            return MoveValidation.reject(
                MoveErrorKind.ALREADY_LINKED, f"Parent '{parent_id}' is listed twice"
            )
        seen.add(parent_id)

        parent = by_id.get(parent_id)
        if parent is None:
            return MoveValidation.reject(
                MoveErrorKind.NOT_FOUND, f"Parent '{parent_id}' not found"
            )
        if (
            is_enabled("check_tree_scope")
            and tree_id is not None
            and parent.tree_id is not None
            and parent.tree_id != tree_id
        ):
            return MoveValidation.reject(
                MoveErrorKind.CROSS_TREE,
                f"Parent {_label(parent)} belongs to a different tree",
            )
        if tree_id is None:
            tree_id = parent.tree_id

    return MoveValidation.accept()


__all__ = [
    "MoveErrorKind",
    "MoveValidation",
    "validate_move",
    "validate_add_parent",
    "validate_new_member",
    "validate_reparent",
]
