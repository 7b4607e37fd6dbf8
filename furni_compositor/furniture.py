"""Per-item rendering facade.

A :class:`Furniture` bundles everything needed to render one item: the asset
catalog, the color table, one animation timeline per size class, the decoded
image cache and the render settings. All of it is immutable, so a single
instance can serve any number of (direction x color x shadow) renders, in any
order or concurrently::

    furniture = load_furniture("chair", data, images)
    result = furniture.render_static(RenderConfiguration(direction=2))
    animation = furniture.render_animation(RenderConfiguration(direction=2))
"""

import logging
from dataclasses import dataclass, replace
from typing import FrozenSet, List, Optional, Tuple

from PIL import Image
from pyrsistent import pmap
from pyrsistent.typing import PMap

from furni_compositor.catalog.catalog import AssetCatalog
from furni_compositor.catalog.colors import ColorTable
from furni_compositor.catalog.fragment import FragmentRecord
from furni_compositor.catalog.timeline import AnimationTimeline
from furni_compositor.config import RenderConfiguration, RenderSettings
from furni_compositor.errors import InsufficientFramesError
from furni_compositor.images import ImageCache
from furni_compositor.render.animation import (
    AnimationSequence,
    build_animation,
    render_timeline_frames,
    select_animation,
)
from furni_compositor.render.build_queue import assemble_build_queue
from furni_compositor.render.compositor import render_frame
from furni_compositor.render.trim import BoundingBox, trim
from furni_compositor.types import ColorID, SizeClass

logger = logging.getLogger(__name__)

EMPTY_TIMELINE = AnimationTimeline()


@dataclass(frozen=True)
class RenderResult:
    """A rendered view and where it sits relative to the item's draw origin.

    Attributes:
        image: Rendered (normally trimmed) image.
        box: Area of the canvas the image was cut from.
        offset: ``(box.left - origin_x, box.top - origin_y)``; adding it to
            the on-screen origin positions the image like the untrimmed canvas.
    """

    image: Image.Image
    box: BoundingBox
    offset: Tuple[int, int]


@dataclass(frozen=True)
class Furniture:
    catalog: AssetCatalog
    colors: ColorTable = ColorTable()
    timelines: PMap[SizeClass, AnimationTimeline] = pmap()
    images: ImageCache = ImageCache()
    settings: RenderSettings = RenderSettings()

    @property
    def sprite(self) -> str:
        return self.catalog.sprite

    def timeline_for(self, size_class: SizeClass) -> AnimationTimeline:
        return self.timelines.get(size_class, EMPTY_TIMELINE)

    def list_available_color_variants(
        self, size_class: SizeClass = SizeClass.LARGE
    ) -> FrozenSet[ColorID]:
        return self.colors.color_ids(size_class)

    def _result(self, canvas: Image.Image) -> RenderResult:
        origin_x, origin_y = self.settings.origin
        if self.settings.crop:
            image, box = trim(canvas)
        else:
            image, box = canvas, BoundingBox(0, 0, canvas.width, canvas.height)
        return RenderResult(image, box, (box.left - origin_x, box.top - origin_y))

    def clamp_state(self, config: RenderConfiguration) -> RenderConfiguration:
        """Replace an out-of-range static state with state 0."""
        max_states = self.timeline_for(config.size_class).max_states
        if config.animation_id is None and not 0 <= config.state_id < max_states:
            logger.debug(
                "[%s] State %d out of range (%d), using 0",
                self.sprite,
                config.state_id,
                max_states,
            )
            return replace(config, state_id=0)
        return config

    def build_queue(self, config: RenderConfiguration) -> Tuple[FragmentRecord, ...]:
        return assemble_build_queue(
            self.catalog, self.timeline_for(config.size_class), config
        )

    def render_canvas(self, config: RenderConfiguration) -> Optional[Image.Image]:
        """Full-size, untrimmed render; ``None`` when nothing is drawn."""
        queue = self.build_queue(config)
        return render_frame(queue, config, self.images, self.colors, self.settings)

    def render_static(self, config: RenderConfiguration) -> Optional[RenderResult]:
        canvas = self.render_canvas(self.clamp_state(config))
        if canvas is None:
            return None
        return self._result(canvas)

    def render_animation(
        self, config: RenderConfiguration
    ) -> Optional[AnimationSequence]:
        """Aligned looping sequence of the richest animation, if any.

        Items without a multi-frame animation, or whose animation renders
        fewer than two frames, yield ``None``.
        """
        try:
            return build_animation(
                self.catalog,
                self.timeline_for(config.size_class),
                self.images,
                self.colors,
                config,
                self.settings,
            )
        except InsufficientFramesError as exc:
            logger.warning("[%s] %s", self.sprite, exc)
            return None

    def render_animation_frames(self, config: RenderConfiguration) -> List[RenderResult]:
        """Every frame of the richest animation, each trimmed on its own."""
        timeline = self.timeline_for(config.size_class)
        selected = select_animation(timeline)
        if selected is None:
            return []
        frames = render_timeline_frames(
            self.catalog,
            timeline,
            self.images,
            self.colors,
            config,
            selected,
            self.settings,
        )
        return [self._result(frame) for frame in frames if frame is not None]
