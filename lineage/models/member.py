"""Member schema for lineage snapshots.

A member is one person in the lineage. The structural fields are ``id``,
``parent_ids``, ``generation`` and ``sibling_order``; everything else is
descriptive payload that the engine carries but never interprets.

Members are frozen. Derivations (resolved generations, edits) return new
copies through ``with_parents`` / ``with_generation``.
"""

from enum import Enum
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Generation assigned to roots. 0 is the "unassigned" sentinel.
ROOT_GENERATION = 1


class MemberStatus(str, Enum):
    """Study status of a member."""

    STUDYING = "studying"
    GRADUATED = "graduated"
    RETIRED = "retired"


class Member(BaseModel):
    """One node of the lineage graph.

    Attributes:
        id: Opaque unique identifier, stable for the member's lifetime
        parent_ids: Ordered parent ids (empty means root)
        generation: Depth of the member, strictly greater than every parent's
        sibling_order: Rendering order among children of a shared parent
        tree_id: Lineage tree the member belongs to
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str = Field(..., min_length=1, description="Unique member identifier")
    parent_ids: List[str] = Field(
        default_factory=list, description="Parent member ids in insertion order"
    )
    generation: int = Field(
        default=ROOT_GENERATION, ge=0, description="Generation (depth) number"
    )
    sibling_order: int = Field(
        default=0, description="Order among siblings, rendering only"
    )
    tree_id: Optional[str] = Field(default=None, description="Owning lineage tree")

    # Descriptive payload
    nickname: str = Field(default="", description="Display nickname")
    first_name: str = Field(default="", description="Given name")
    last_name: str = Field(default="", description="Family name")
    student_id: str = Field(default="", description="Student identifier")
    photo_url: str = Field(default="", description="Avatar image URL")
    status: MemberStatus = Field(
        default=MemberStatus.STUDYING, description="Study status"
    )
    contact: Dict[str, str] = Field(
        default_factory=dict, description="Contact channels (phone, email, ...)"
    )

    @field_validator("parent_ids")
    @classmethod
    def validate_unique_parents(cls, v: List[str]) -> List[str]:
        """Reject parent lists that name the same parent twice."""
        seen = set()
        for parent_id in v:
            if parent_id in seen:
                raise ValueError(f"Duplicate parent id '{parent_id}'")
            seen.add(parent_id)
        return v

    @property
    def is_root(self) -> bool:
        return not self.parent_ids

    @property
    def display_name(self) -> str:
        if self.nickname:
            return self.nickname
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.id

    def with_parents(self, parent_ids: Sequence[str]) -> "Member":
        """Return a copy attached under ``parent_ids``.

        The copy is re-validated, so a repeated parent id raises ValidationError.
        """
        return type(self).model_validate({**self.model_dump(), "parent_ids": list(parent_ids)})

    def with_generation(self, generation: int) -> "Member":
        """Return a copy carrying ``generation``."""
        if generation == self.generation:
            return self
        return self.model_copy(update={"generation": generation})


__all__ = [
    "ROOT_GENERATION",
    "MemberStatus",
    "Member",
]
