"""Lineage engine facade.

Bundles the stateless core operations with the one piece of state the
core is allowed to keep: the generation color cache. The facade never holds
members; every call takes the full snapshot.

Usage:
    from lineage import LineageEngine

    engine = LineageEngine()
    check = engine.validate_move(members, "m-7", "m-2")
    if check.valid:
        result = engine.add_parent(members, "m-7", "m-2")
        layout = engine.layout(result.members)
"""

import logging
from typing import Any, Dict, Optional, Sequence

from lineage.core import edits
from lineage.core.generation import resolve_generations
from lineage.layout.builder import build_layout
from lineage.layout.engines import DEFAULT_ENGINE, get_engine
from lineage.layout.engines.base import LayoutEngine
from lineage.models.layout_metadata import LineageLayout
from lineage.models.member import Member
from lineage.validators.integrity import check_integrity
from lineage.validators.move_validator import MoveValidation, validate_move
from lineage.visualization.colors import GenerationPalette

logger = logging.getLogger(__name__)


class LineageEngine:
    """Entry point used by the editor and the renderer."""

    def __init__(
        self,
        layout_engine: Optional[LayoutEngine] = None,
        palette: Optional[GenerationPalette] = None,
        layout_options: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the facade.

        Args:
            layout_engine: Engine instance (the registry default if None)
            palette: Color cache shared by every layout this facade builds
            layout_options: Options applied to every layout call
        """
        self.layout_engine = layout_engine or get_engine(DEFAULT_ENGINE)()
        self.palette = palette or GenerationPalette()
        self.layout_options = dict(layout_options or {})

    def validate_move(
        self, members: Sequence[Member], moving_id: str, new_parent_id: str
    ) -> MoveValidation:
        return validate_move(members, moving_id, new_parent_id)

    def resolve_generations(self, members: Sequence[Member]) -> Dict[str, int]:
        return resolve_generations(members)

    def check_integrity(self, members: Sequence[Member]) -> Dict[str, Any]:
        return check_integrity(members)

    def color_for(self, generation: int) -> str:
        return self.palette.color_for(generation)

    def layout(
        self, members: Sequence[Member], options: Optional[Dict[str, Any]] = None
    ) -> LineageLayout:
        """Lay out a snapshot with this facade's engine and palette."""
        merged = {**self.layout_options, **(options or {})}
        return build_layout(
            members, engine=self.layout_engine, options=merged, palette=self.palette
        )

    # Structural edits

    def add_parent(self, members: Sequence[Member], member_id: str, parent_id: str) -> edits.EditResult:
        return edits.add_parent(members, member_id, parent_id)

    def move_member(self, members: Sequence[Member], member_id: str, new_parent_id: str) -> edits.EditResult:
        return edits.move_member(members, member_id, new_parent_id)

    def remove_parent(self, members: Sequence[Member], member_id: str, parent_id: str) -> edits.EditResult:
        return edits.remove_parent(members, member_id, parent_id)

    def unlink_member(self, members: Sequence[Member], member_id: str) -> edits.EditResult:
        return edits.unlink_member(members, member_id)
