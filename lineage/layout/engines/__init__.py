"""Layout engines registry.

Available engines:
- grandalf: Sugiyama layout delegated to grandalf (default)
- layered: hand-rolled Sugiyama layout (ranks, crossing minimization)
"""

from lineage.layout.engines.base import LayoutEngine, edge_id
from lineage.layout.engines.grandalf_engine import GRANDALF_LAYOUT_OPTIONS, GrandalfLayoutEngine
from lineage.layout.engines.layered import LAYERED_LAYOUT_OPTIONS, LayeredLayoutEngine

# Engine registry
ENGINES = {
    "grandalf": GrandalfLayoutEngine,
    "layered": LayeredLayoutEngine,
}

DEFAULT_ENGINE = "grandalf"


def get_engine(name: str) -> type:
    """Get layout engine class by name.

    Args:
        name: Engine name ('grandalf' or 'layered')

    Returns:
        Layout engine class

    Raises:
        ValueError: If engine not found
    """
    if name not in ENGINES:
        raise ValueError(f"Unknown layout engine: {name}. Available: {list(ENGINES.keys())}")
    return ENGINES[name]


__all__ = [
    "LayoutEngine",
    "GrandalfLayoutEngine",
    "LayeredLayoutEngine",
    "GRANDALF_LAYOUT_OPTIONS",
    "LAYERED_LAYOUT_OPTIONS",
    "DEFAULT_ENGINE",
    "ENGINES",
    "edge_id",
    "get_engine",
]
