"""Pydantic schemas for members and layouts."""

from lineage.models.member import ROOT_GENERATION, Member, MemberStatus
from lineage.models.layout_metadata import (
    BoundingBox,
    EdgeRoute,
    EdgeSection,
    GenerationBand,
    LayoutMetadata,
    LineageEdge,
    LineageLayout,
    NodePosition,
    PositionedMember,
)

__all__ = [
    "ROOT_GENERATION",
    "Member",
    "MemberStatus",
    "BoundingBox",
    "EdgeRoute",
    "EdgeSection",
    "GenerationBand",
    "LayoutMetadata",
    "LineageEdge",
    "LineageLayout",
    "NodePosition",
    "PositionedMember",
]
