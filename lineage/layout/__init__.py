"""Layout module for positioning lineage snapshots.

This module provides:
- Layout engine abstraction (LayoutEngine)
- grandalf-backed Sugiyama engine (the default)
- Layered (Sugiyama-style) engine with crossing minimization
- build_layout, which ranks members by generation and annotates the result

Ranks are generations, so rows (TB) or columns (LR) strictly increase with
generation. The engine sits behind a narrow interface and can be swapped.
"""

from lineage.layout.builder import build_layout, edge_id
from lineage.layout.engines.base import LayoutEngine
from lineage.layout.engines.grandalf_engine import GRANDALF_LAYOUT_OPTIONS, GrandalfLayoutEngine
from lineage.layout.engines.layered import LAYERED_LAYOUT_OPTIONS, LayeredLayoutEngine

__all__ = [
    "build_layout",
    "edge_id",
    "LayoutEngine",
    "GrandalfLayoutEngine",
    "LayeredLayoutEngine",
    "GRANDALF_LAYOUT_OPTIONS",
    "LAYERED_LAYOUT_OPTIONS",
]
