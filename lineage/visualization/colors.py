"""Generation colors.

Each generation gets a hue rotated by the golden angle from the previous
one. Successive golden-angle steps never land on the same hue and stay
spread around the circle however many generations a lineage grows.
Generation 0 and below (the unassigned sentinel) are drawn in gray.
"""

import colorsys
import logging
import threading
from typing import Dict, List

logger = logging.getLogger(__name__)

GOLDEN_ANGLE = 137.50776405003785  # 360 * (2 - phi), degrees
BASE_HUE = 217.0  # generation 1 starts at blue
SATURATION = 0.65
LIGHTNESS = 0.50
NEUTRAL_COLOR = "#6b7280"


def hue_for(generation: int) -> float:
    """Hue in degrees [0, 360) for a positive generation."""
    return (BASE_HUE + (generation - 1) * GOLDEN_ANGLE) % 360.0


def hsl_to_hex(hue: float, saturation: float, lightness: float) -> str:
    """Convert HSL (hue in degrees, s/l in [0, 1]) to ``#rrggbb``."""
    r, g, b = colorsys.hls_to_rgb(hue / 360.0, lightness, saturation)
    return "#{:02x}{:02x}{:02x}".format(
        int(round(r * 255)), int(round(g * 255)), int(round(b * 255))
    )


class GenerationPalette:
    """Memoized generation -> color mapping.

    The cache is append-only and keyed by generation. It lives as long as
    the palette object, or until ``reset()``. Writes are guarded by a lock
    so concurrent first lookups of the same generation cannot corrupt the
    map; they compute the same value anyway.
    """

    def __init__(
        self,
        saturation: float = SATURATION,
        lightness: float = LIGHTNESS,
        neutral_color: str = NEUTRAL_COLOR,
    ):
        if not (0.0 <= saturation <= 1.0 and 0.0 <= lightness <= 1.0):
            raise ValueError(
                f"saturation and lightness must be in [0, 1], "
                f"got {saturation}, {lightness}"
            )
        self._saturation = saturation
        self._lightness = lightness
        self._neutral_color = neutral_color
        self._cache: Dict[int, str] = {}
        self._lock = threading.Lock()

    def color_for(self, generation: int) -> str:
        """Color for ``generation`` as ``#rrggbb``."""
        if generation <= 0:
            return self._neutral_color

        with self._lock:
            color = self._cache.get(generation)
            if color is None:
                color = hsl_to_hex(hue_for(generation), self._saturation, self._lightness)
                self._cache[generation] = color
        return color

    def cached_generations(self) -> List[int]:
        with self._lock:
            return sorted(self._cache)

    def reset(self) -> None:
        """Drop every memoized color."""
        with self._lock:
            logger.debug(f"Clearing {len(self._cache)} cached generation colors")
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


__all__ = [
    "GOLDEN_ANGLE",
    "NEUTRAL_COLOR",
    "GenerationPalette",
    "hue_for",
    "hsl_to_hex",
]
