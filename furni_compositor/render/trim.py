"""Content bounds and trimming.

A raster's bounding box covers every pixel that differs from the transparent
sentinel. A fully transparent raster degenerates to a 1x1 box at the origin.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import numpy as np
from PIL import Image

from furni_compositor.types import RGBA, TRANSPARENT


@dataclass(frozen=True)
class BoundingBox:
    """Integer rectangle over a raster.

    Attributes:
        left: Leftmost column.
        top: Topmost row.
        width: Number of columns (at least 1).
        height: Number of rows (at least 1).
    """

    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        """Exclusive right edge."""
        return self.left + self.width

    @property
    def bottom(self) -> int:
        """Exclusive bottom edge."""
        return self.top + self.height

    @property
    def crop_box(self) -> Tuple[int, int, int, int]:
        """``(left, upper, right, lower)`` as expected by ``Image.crop``."""
        return (self.left, self.top, self.right, self.bottom)

    def union(self, other: "BoundingBox") -> "BoundingBox":
        left = min(self.left, other.left)
        top = min(self.top, other.top)
        return BoundingBox(
            left=left,
            top=top,
            width=max(self.right, other.right) - left,
            height=max(self.bottom, other.bottom) - top,
        )


EMPTY_BOX = BoundingBox(0, 0, 1, 1)


def union_all(boxes: Iterable[BoundingBox]) -> Optional[BoundingBox]:
    result: Optional[BoundingBox] = None
    for box in boxes:
        result = box if result is None else result.union(box)
    return result


def _content_box(image: Image.Image, sentinel: RGBA) -> Optional[BoundingBox]:
    arr = np.asarray(image.convert("RGBA"))
    content = np.any(arr != np.array(sentinel, dtype=arr.dtype), axis=-1)
    rows = np.flatnonzero(content.any(axis=1))
    if rows.size == 0:
        return None
    cols = np.flatnonzero(content.any(axis=0))
    top, bottom = int(rows[0]), int(rows[-1])
    left, right = int(cols[0]), int(cols[-1])
    return BoundingBox(left, top, right - left + 1, bottom - top + 1)


def find_bounding_box(image: Image.Image, sentinel: RGBA = TRANSPARENT) -> BoundingBox:
    """Tight box around every pixel not equal to ``sentinel``."""
    box = _content_box(image, sentinel)
    return EMPTY_BOX if box is None else box


def trim(
    image: Image.Image, sentinel: RGBA = TRANSPARENT
) -> Tuple[Image.Image, BoundingBox]:
    """Crop ``image`` to its content; returns the crop and the box used.

    A raster without content yields a new transparent 1x1 image and
    ``BoundingBox(0, 0, 1, 1)``.
    """
    box = _content_box(image, sentinel)
    if box is None:
        return Image.new("RGBA", (1, 1), TRANSPARENT), EMPTY_BOX
    return image.crop(box.crop_box), box
