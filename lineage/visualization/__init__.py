"""Rendering annotations (generation colors)."""

from lineage.visualization.colors import (
    GOLDEN_ANGLE,
    NEUTRAL_COLOR,
    GenerationPalette,
    hsl_to_hex,
    hue_for,
)

__all__ = [
    "GOLDEN_ANGLE",
    "NEUTRAL_COLOR",
    "GenerationPalette",
    "hsl_to_hex",
    "hue_for",
]
