"""Common type aliases, enumerations and naming constants.

Identifiers for layers, directions, frames, states and color variants are all
plain integers; the aliases below only document intent at call sites.
"""

import sys
from enum import StrEnum
from typing import Tuple

LayerID = int
DirectionID = int
FrameID = int
StateID = int
ColorID = int

RGBA = Tuple[int, int, int, int]
RGB = Tuple[int, int, int]


class SizeClass(StrEnum):
    """Visualization size classes, valued by their metadata size key."""

    ICON = "1"
    SMALL = "32"
    LARGE = "64"


NO_COLOR: ColorID = -1
"""Color variant sentinel meaning "render without recolor"."""

ICON_MARKER = "_icon_"
SHADOW_MARKER = "_sd_"
SMALL_SIZE_TOKEN = "32"

LAYER_Z_WEIGHT = 1000
SHADOW_STACKING_KEY = -sys.maxsize - 1

TRANSPARENT: RGBA = (0, 0, 0, 0)


def attribute_size(size_class: SizeClass, icon: bool) -> SizeClass:
    """Size class under which layer attributes and colors are declared."""
    return SizeClass.ICON if icon else size_class
