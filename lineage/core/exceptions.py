"""Exceptions raised by the lineage core.

Validator rejections are not exceptions (see ``MoveValidation``). The
classes here signal malformed snapshots that the external store has to
repair, so they fail loudly and name the offending ids.
"""

from typing import List, Sequence


class DuplicateMemberError(ValueError):
    """Raised when a snapshot contains the same member id more than once."""

    def __init__(self, member_id: str):
        self.member_id = member_id
        super().__init__(f"Duplicate member id in snapshot: '{member_id}'")


class DanglingParentError(ValueError):
    """Raised when a parent id does not resolve to a member in the snapshot."""

    def __init__(self, member_id: str, parent_id: str):
        self.member_id = member_id
        self.parent_id = parent_id
        super().__init__(
            f"Member '{member_id}' references unknown parent '{parent_id}'"
        )


class DataIntegrityCycleError(RuntimeError):
    """Raised when the parent graph of a snapshot contains a cycle.

    Validator-gated edits cannot produce this; seeing it means the
    acyclicity invariant was broken upstream.
    """

    def __init__(self, cycle: Sequence[str]):
        self.cycle: List[str] = list(cycle)
        path = " -> ".join(self.cycle + self.cycle[:1])
        super().__init__(f"Parent graph contains a cycle: {path}")


class LayoutError(RuntimeError):
    """Raised when a snapshot cannot be laid out."""
