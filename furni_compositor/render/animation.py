"""Animation assembly.

The richest (longest) state in the timeline drives the animation. Every frame
is rendered on a full-size canvas, and all frames are cropped to the union of
their content boxes so the sequence does not jitter.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from PIL import Image

from furni_compositor.catalog.catalog import AssetCatalog
from furni_compositor.catalog.colors import ColorTable
from furni_compositor.catalog.timeline import AnimationTimeline, SelectedAnimation
from furni_compositor.config import RenderConfiguration, RenderSettings
from furni_compositor.errors import InsufficientFramesError
from furni_compositor.images import ImageCache
from furni_compositor.render.build_queue import assemble_build_queue
from furni_compositor.render.compositor import render_frame
from furni_compositor.render.trim import BoundingBox, find_bounding_box, union_all

logger = logging.getLogger(__name__)

LOOP_FOREVER = 0
DISPOSAL_RESTORE_TO_BACKGROUND = 2


@dataclass(frozen=True)
class AnimationSequence:
    """Aligned, cropped animation frames.

    Attributes:
        frames: Cropped frames, all of identical size.
        delay: Per-frame delay in GIF units (1/100 s).
        box: Crop window on the full canvas, shared by every frame.
        animation_id: State the sequence was rendered from.
        layer: Layer that declared the driving sequence.
        loop: Loop count, 0 meaning forever.
        disposal: GIF disposal method between frames.
    """

    frames: Tuple[Image.Image, ...]
    delay: int
    box: BoundingBox
    animation_id: int
    layer: int
    loop: int = LOOP_FOREVER
    disposal: int = DISPOSAL_RESTORE_TO_BACKGROUND

    @property
    def size(self) -> Tuple[int, int]:
        return self.box.width, self.box.height

    @property
    def duration_ms(self) -> int:
        return self.delay * 10

    def __len__(self) -> int:
        return len(self.frames)

    def gif_save_params(self) -> Dict[str, Any]:
        """Keyword arguments for ``frames[0].save(fp, format="GIF", **params)``."""
        return {
            "save_all": True,
            "append_images": list(self.frames[1:]),
            "duration": self.duration_ms,
            "loop": self.loop,
            "disposal": self.disposal,
        }


def select_animation(timeline: AnimationTimeline) -> Optional[SelectedAnimation]:
    """Richest state, or ``None`` if no state has more than one frame."""
    best = timeline.richest()
    if best is None or len(best.state) <= 1:
        return None
    return best


def render_timeline_frames(
    catalog: AssetCatalog,
    timeline: AnimationTimeline,
    images: ImageCache,
    colors: ColorTable,
    config: RenderConfiguration,
    selected: SelectedAnimation,
    settings: RenderSettings = RenderSettings(),
) -> List[Optional[Image.Image]]:
    """Untrimmed full-canvas render of every timeline index, ``None`` where empty."""
    frames: List[Optional[Image.Image]] = []
    for index in range(len(selected.state)):
        frame_config = config.at_frame(selected.state_id, index)
        queue = assemble_build_queue(catalog, timeline, frame_config)
        frames.append(render_frame(queue, frame_config, images, colors, settings))
    return frames


def build_animation(
    catalog: AssetCatalog,
    timeline: AnimationTimeline,
    images: ImageCache,
    colors: ColorTable,
    config: RenderConfiguration,
    settings: RenderSettings = RenderSettings(),
) -> Optional[AnimationSequence]:
    """
    Render the item's richest animation as an aligned looping sequence.

    Returns ``None`` when the item has no animation with more than one frame.

    Raises:
        InsufficientFramesError: If fewer than two frames render to an image.
    """
    selected = select_animation(timeline)
    if selected is None:
        logger.info("[%s] No usable animation sequence", catalog.sprite)
        return None

    rendered = render_timeline_frames(
        catalog, timeline, images, colors, config, selected, settings
    )
    full_frames = [frame for frame in rendered if frame is not None]
    if len(full_frames) < 2:
        raise InsufficientFramesError(selected.state_id, len(full_frames))

    box = union_all(find_bounding_box(frame) for frame in full_frames)
    assert box is not None
    cropped = tuple(frame.crop(box.crop_box) for frame in full_frames)
    del full_frames, rendered

    delay = settings.frame_delay(selected.state.frame_repeat)
    logger.info(
        "[%s] Animation %d: %d frame(s), layer %d, delay %d",
        catalog.sprite,
        selected.state_id,
        len(cropped),
        selected.layer,
        delay,
    )
    return AnimationSequence(
        frames=cropped,
        delay=delay,
        box=box,
        animation_id=selected.state_id,
        layer=selected.layer,
    )
