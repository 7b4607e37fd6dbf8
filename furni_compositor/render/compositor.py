"""Compositing a build queue onto a canvas.

Each fragment is placed relative to the canvas center using its anchor
(mirrored anchors use ``width - x``), tinted toward white by its flat alpha,
then tinted by the item's color variant, faded if it is a shadow, and finally
blended either additively or with ordinary alpha-over.
"""

import logging
from typing import Optional, Sequence, Tuple

from PIL import Image

from furni_compositor.catalog.colors import ColorTable
from furni_compositor.catalog.fragment import FragmentRecord
from furni_compositor.config import RenderConfiguration, RenderSettings
from furni_compositor.images import ImageCache
from furni_compositor.types import NO_COLOR, attribute_size
from furni_compositor.utils.image import (
    WHITE,
    FloatArray,
    composite,
    new_canvas,
    scale_opacity,
    tint,
    to_float_rgba,
    to_image,
)

logger = logging.getLogger(__name__)


def draw_position(
    fragment: FragmentRecord, source_width: int, origin: Tuple[int, int]
) -> Tuple[int, int]:
    origin_x, origin_y = origin
    anchor_x = source_width - fragment.x if fragment.flip_h else fragment.x
    return origin_x - anchor_x, origin_y - fragment.y


def prepare_fragment(
    fragment: FragmentRecord,
    source: Image.Image,
    config: RenderConfiguration,
    colors: ColorTable,
    settings: RenderSettings,
) -> FloatArray:
    """Tinted, faded copy of a fragment's image ready for compositing."""
    arr = to_float_rgba(source)
    if fragment.alpha is not None:
        arr = tint(arr, WHITE, fragment.alpha)
    if config.color_id != NO_COLOR:
        color = colors.tint_for(
            attribute_size(config.size_class, config.icon),
            config.color_id,
            fragment.layer,
        )
        if color is not None:
            arr = tint(arr, color, 255)
    if fragment.shadow:
        arr = scale_opacity(arr, settings.shadow_opacity)
    return arr


def render_frame(
    queue: Sequence[FragmentRecord],
    config: RenderConfiguration,
    images: ImageCache,
    colors: ColorTable,
    settings: RenderSettings = RenderSettings(),
) -> Optional[Image.Image]:
    """
    Draw ``queue`` in order onto a fresh transparent canvas.

    Returns ``None`` for an empty queue. Fragments without a decoded image are
    skipped. The returned image has the full canvas size; trimming is up to the
    caller.
    """
    if not queue:
        return None

    canvas = new_canvas(settings.canvas_width, settings.canvas_height)
    origin = settings.origin
    for fragment in queue:
        source = images.get(fragment.name)
        if source is None:
            logger.debug("Missing image for %r, skipping", fragment.name)
            continue
        arr = prepare_fragment(fragment, source, config, colors, settings)
        additive = fragment.ink is not None and fragment.ink in settings.additive_inks
        composite(canvas, arr, draw_position(fragment, source.width, origin), additive)

    return to_image(canvas)
