"""Base layout engine protocol.

Defines the narrow interface the lineage layout delegates to, so the
layered-drawing algorithm can be swapped without touching callers.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import networkx as nx

from lineage.models.layout_metadata import LayoutMetadata


def _escape_id(member_id: str) -> str:
    return member_id.replace("%", "%25").replace("-", "%2D")


def edge_id(parent_id: str, child_id: str) -> str:
    """Stable id of the parent -> child edge.

    Hyphens inside member ids are percent-escaped so the id stays unique per
    pair: ("a-b", "c") -> "edge-a%2Db-c", ("a", "b-c") -> "edge-a-b%2Dc".
    """
    return f"edge-{_escape_id(str(parent_id))}-{_escape_id(str(child_id))}"


class LayoutEngine(ABC):
    """Abstract base class for layout engines.

    Engines receive a ranked parent -> child DiGraph. Every node carries:
        rank: Non-negative layer index; edges must go to a higher rank
        order: Sibling order hint used to seed in-rank ordering
        width / height: Card size (optional, engine defaults otherwise)

    Edge attribute ``id`` names the route in the returned metadata.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name (e.g., 'layered')."""
        ...

    @property
    @abstractmethod
    def supports_crossing_minimization(self) -> bool:
        """Whether the engine reorders nodes within a rank to reduce crossings."""
        ...

    @abstractmethod
    def layout(
        self,
        graph: nx.DiGraph,
        options: Optional[Dict[str, Any]] = None,
    ) -> LayoutMetadata:
        """Compute a layout for a ranked graph.

        Args:
            graph: Ranked DiGraph (see class docstring)
            options: Engine-specific layout options

        Returns:
            LayoutMetadata with positions and edge routes

        Raises:
            LayoutError: If the graph is cyclic or ranks are inconsistent
        """
        ...

    def is_available(self) -> bool:
        """Check if the engine can be used in this environment."""
        return True
