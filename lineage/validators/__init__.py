"""Edit validation and snapshot audits."""

from lineage.validators.integrity import check_integrity
from lineage.validators.move_validator import (
    MoveErrorKind,
    MoveValidation,
    validate_add_parent,
    validate_move,
    validate_new_member,
    validate_reparent,
)

__all__ = [
    "check_integrity",
    "MoveErrorKind",
    "MoveValidation",
    "validate_add_parent",
    "validate_move",
    "validate_new_member",
    "validate_reparent",
]
