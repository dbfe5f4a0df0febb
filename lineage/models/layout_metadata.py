"""Layout metadata for rendering a lineage snapshot.

This module provides schemas for layout output including:
- Node positions (x, y coordinates, top-left of the member card)
- Edge routing (sections with bend points through skipped ranks)
- Positioned members annotated with resolved generation and color
- Generation bands (one row or column per generation)

Layouts carry an etag computed from canonical content so two layouts of
the same snapshot can be compared without walking every coordinate.
"""

import hashlib
import json
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

from lineage.models.member import Member


class NodePosition(BaseModel):
    """Position of a single node in 2D layout space.

    Attributes:
        x: Horizontal coordinate
        y: Vertical coordinate
    """

    x: float = Field(..., description="Horizontal coordinate")
    y: float = Field(..., description="Vertical coordinate")

    @classmethod
    def from_list(cls, pos: List[float]) -> "NodePosition":
        """Create NodePosition from [x, y] list.

        Raises:
            ValueError: If pos doesn't have exactly 2 elements
        """
        if len(pos) != 2:
            raise ValueError(f"Position must be [x, y], got {len(pos)} elements")
        return cls(x=pos[0], y=pos[1])

    def to_list(self) -> List[float]:
        return [self.x, self.y]


class BoundingBox(BaseModel):
    """Bounding box for the drawn area.

    Attributes:
        min_x: Minimum x coordinate
        max_x: Maximum x coordinate
        min_y: Minimum y coordinate
        max_y: Maximum y coordinate
    """

    min_x: float = Field(..., description="Minimum x coordinate")
    max_x: float = Field(..., description="Maximum x coordinate")
    min_y: float = Field(..., description="Minimum y coordinate")
    max_y: float = Field(..., description="Maximum y coordinate")

    @property
    def width(self) -> float:
        """Computed width of bounding box."""
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        """Computed height of bounding box."""
        return self.max_y - self.min_y

    @classmethod
    def from_positions(
        cls,
        positions: Dict[str, NodePosition],
        node_width: float = 0.0,
        node_height: float = 0.0,
    ) -> "BoundingBox":
        """Compute bounding box from top-left node positions.

        Args:
            positions: Dictionary of node_id -> NodePosition
            node_width: Card width added to the right edge
            node_height: Card height added to the bottom edge

        Raises:
            ValueError: If positions is empty
        """
        if not positions:
            raise ValueError("Cannot compute bounding box from empty positions")

        x_coords = [pos.x for pos in positions.values()]
        y_coords = [pos.y for pos in positions.values()]

        return cls(
            min_x=min(x_coords),
            max_x=max(x_coords) + node_width,
            min_y=min(y_coords),
            max_y=max(y_coords) + node_height,
        )


class EdgeSection(BaseModel):
    """A segment of an edge route.

    Each section has a start point, end point, and bend points where the
    edge passes through ranks it skips.
    """

    startPoint: Tuple[float, float] = Field(..., description="Start point (x, y)")
    endPoint: Tuple[float, float] = Field(..., description="End point (x, y)")
    bendPoints: List[Tuple[float, float]] = Field(
        default_factory=list, description="Bend points through skipped ranks"
    )

    def get_all_points(self) -> List[Tuple[float, float]]:
        """Get all points in order: start -> bends -> end."""
        return [self.startPoint] + self.bendPoints + [self.endPoint]


class EdgeRoute(BaseModel):
    """Routing data for one parent -> child edge."""

    source: str = Field(..., description="Parent member id")
    target: str = Field(..., description="Child member id")
    sections: List[EdgeSection] = Field(
        default_factory=list, description="Edge sections (segments)"
    )

    def get_all_points(self) -> List[Tuple[float, float]]:
        """Get all points from all sections in order."""
        points: List[Tuple[float, float]] = []
        for section in self.sections:
            section_points = section.get_all_points()
            # Avoid duplicate points at section boundaries
            if points and section_points and points[-1] == section_points[0]:
                section_points = section_points[1:]
            points.extend(section_points)
        return points


class LayoutMetadata(BaseModel):
    """Raw engine output: positions and edge routes keyed by id.

    Attributes:
        algorithm: Layout algorithm used (e.g., 'layered')
        layout_options: Options the engine ran with
        positions: Dictionary of node_id -> NodePosition (top-left corner)
        edges: Dictionary of edge_id -> EdgeRoute
        ranks: Dictionary of node_id -> rank index
        node_size: Card (width, height) used for every member
        bounding_box: Overall bounding box (auto-computed)
        etag: SHA-256 of canonical content
    """

    algorithm: str = Field(..., description="Layout algorithm used")
    layout_options: Dict[str, Any] = Field(
        default_factory=dict, description="Engine options used for this layout"
    )
    positions: Dict[str, NodePosition] = Field(
        default_factory=dict, description="Node positions keyed by node id"
    )
    edges: Dict[str, EdgeRoute] = Field(
        default_factory=dict, description="Edge routing keyed by edge id"
    )
    ranks: Dict[str, int] = Field(
        default_factory=dict, description="Rank index keyed by node id"
    )
    node_size: Tuple[float, float] = Field(
        default=(200.0, 100.0), description="Card (width, height)"
    )
    bounding_box: Optional[BoundingBox] = Field(
        default=None, description="Overall bounding box (auto-computed if not provided)"
    )
    etag: Optional[str] = Field(
        default=None, description="SHA-256 hash of canonical content"
    )

    def model_post_init(self, __context) -> None:
        """Compute bounding box and etag if not provided."""
        if self.bounding_box is None and self.positions:
            object.__setattr__(
                self,
                "bounding_box",
                BoundingBox.from_positions(self.positions, *self.node_size),
            )

        if self.etag is None:
            object.__setattr__(self, "etag", self.compute_etag())

    def compute_etag(self) -> str:
        """Compute SHA-256 etag from canonical content.

        Returns:
            64-character hex string (SHA-256 hash)
        """
        canonical = {
            "algorithm": self.algorithm,
            "edges": {k: v.model_dump() for k, v in sorted(self.edges.items())},
            "layout_options": dict(sorted(self.layout_options.items())),
            "node_size": list(self.node_size),
            "positions": {k: v.model_dump() for k, v in sorted(self.positions.items())},
            "ranks": dict(sorted(self.ranks.items())),
        }

        canonical_json = json.dumps(canonical, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical_json.encode()).hexdigest()


class PositionedMember(BaseModel):
    """A member annotated for rendering."""

    member: Member = Field(..., description="Member with resolved generation")
    position: NodePosition = Field(..., description="Top-left corner of the card")
    rank: int = Field(..., description="Rank index (generation - root generation)")
    color: str = Field(..., description="Generation color as #rrggbb")

    @property
    def id(self) -> str:
        return self.member.id

    @property
    def generation(self) -> int:
        return self.member.generation


class LineageEdge(BaseModel):
    """A resolved parent -> child edge ready for drawing."""

    id: str = Field(..., description="Edge id, edge-{parent}-{child} with hyphens escaped in ids")
    source: str = Field(..., description="Parent member id")
    target: str = Field(..., description="Child member id")
    route: EdgeRoute = Field(..., description="Routed points")


class GenerationBand(BaseModel):
    """A row (TB) or column (LR) holding one generation."""

    generation: int
    offset: float = Field(..., description="y (TB) or x (LR) of the band")
    label: str
    color: str
    count: int = Field(..., ge=0, description="Members in this generation")


class LineageLayout(BaseModel):
    """Rendering-ready layout of a lineage snapshot."""

    direction: Literal["TB", "LR"] = Field(default="TB")
    nodes: List[PositionedMember] = Field(default_factory=list)
    edges: List[LineageEdge] = Field(default_factory=list)
    bands: List[GenerationBand] = Field(default_factory=list)
    metadata: LayoutMetadata

    @property
    def etag(self) -> Optional[str]:
        return self.metadata.etag

    def position_of(self, member_id: str) -> NodePosition:
        """Look up a member's position.

        Raises:
            KeyError: If the member was not part of the layout
        """
        try:
            return self.metadata.positions[member_id]
        except KeyError:
            raise KeyError(f"Member '{member_id}' is not in this layout") from None

    def to_dict(self) -> Dict[str, Any]:
        """Export to dict with deterministic key ordering."""
        data = self.model_dump(mode="json")
        return dict(sorted(data.items()))


__all__ = [
    "NodePosition",
    "BoundingBox",
    "EdgeSection",
    "EdgeRoute",
    "LayoutMetadata",
    "PositionedMember",
    "LineageEdge",
    "GenerationBand",
    "LineageLayout",
]
