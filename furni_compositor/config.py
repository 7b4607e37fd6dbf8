"""Render configuration values.

Two frozen dataclasses drive every render:

* :class:`RenderSettings` holds item-independent knobs (canvas size, shadow
  opacity, which ink hints blend additively, animation timing). A single
  instance is normally shared by every item in a run.
* :class:`RenderConfiguration` describes *one* requested view (size class,
  direction, color variant, shadows, icon mode, state or animation frame). It
  is passed explicitly to each render call; derived views are produced with
  :func:`dataclasses.replace` so the catalog never carries per-render state.
"""

from dataclasses import dataclass, replace
from typing import FrozenSet, Optional, Tuple

from furni_compositor.types import (
    NO_COLOR,
    ColorID,
    DirectionID,
    SizeClass,
    StateID,
)


DEFAULT_CANVAS_SIZE = 500
DEFAULT_SHADOW_OPACITY = 0.4
DEFAULT_ADDITIVE_INKS: FrozenSet[str] = frozenset({"ADD", "33"})
DEFAULT_FRAME_DELAY_FACTOR = 4.16
DEFAULT_FRAME_REPEAT = 4
DEFAULT_DIRECTIONS: Tuple[DirectionID, ...] = (0, 2, 4, 6)
DEFAULT_ANIMATION_DIRECTION: DirectionID = 2


@dataclass(frozen=True)
class RenderSettings:
    """Item-independent rendering parameters.

    Attributes:
        canvas_width: Width of the scratch canvas every frame is drawn on.
        canvas_height: Height of the scratch canvas.
        shadow_opacity: Opacity multiplier applied to shadow fragments.
        additive_inks: Ink hints that select additive blending.
        frame_delay_factor: Multiplier turning a frame-repeat hint into a
            GIF frame delay (centiseconds).
        default_frame_repeat: Frame-repeat used when a state declares none.
        crop: Whether static renders are trimmed to their content.
    """

    canvas_width: int = DEFAULT_CANVAS_SIZE
    canvas_height: int = DEFAULT_CANVAS_SIZE
    shadow_opacity: float = DEFAULT_SHADOW_OPACITY
    additive_inks: FrozenSet[str] = DEFAULT_ADDITIVE_INKS
    frame_delay_factor: float = DEFAULT_FRAME_DELAY_FACTOR
    default_frame_repeat: int = DEFAULT_FRAME_REPEAT
    crop: bool = True

    def __post_init__(self) -> None:
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise ValueError(
                f"Canvas size must be positive, got {self.canvas_width}x{self.canvas_height}"
            )
        if not 0.0 <= self.shadow_opacity <= 1.0:
            raise ValueError(f"Shadow opacity out of range: {self.shadow_opacity}")

    @property
    def origin(self) -> Tuple[int, int]:
        """Draw origin: the center of the canvas."""
        return self.canvas_width // 2, self.canvas_height // 2

    def frame_delay(self, frame_repeat: Optional[int]) -> int:
        repeat = (
            frame_repeat
            if frame_repeat is not None and frame_repeat > 0
            else self.default_frame_repeat
        )
        return int(round(repeat * self.frame_delay_factor))


@dataclass(frozen=True)
class RenderConfiguration:
    """A single requested view of an item.

    Attributes:
        size_class: Small or large visualization.
        direction: Facing to render.
        color_id: Color variant, or ``NO_COLOR`` to skip recoloring.
        shadows: Draw shadow fragments (and keep ignore-mouse layers).
        icon: Draw the icon fragment subset instead of the regular one.
        state_id: Static render state; also the fallback pose for layers that
            do not take part in ``animation_id``.
        animation_id: Animation being played, ``None`` for static renders.
        timeline_index: Position inside the animation timeline.
    """

    size_class: SizeClass = SizeClass.LARGE
    direction: DirectionID = 0
    color_id: ColorID = NO_COLOR
    shadows: bool = True
    icon: bool = False
    state_id: StateID = 0
    animation_id: Optional[StateID] = None
    timeline_index: int = 0

    def __post_init__(self) -> None:
        if self.timeline_index < 0:
            raise ValueError(f"Negative timeline index: {self.timeline_index}")

    @property
    def requested_id(self) -> StateID:
        """State or animation id whose sequence drives frame selection."""
        return self.state_id if self.animation_id is None else self.animation_id

    def at_frame(self, animation_id: StateID, timeline_index: int) -> "RenderConfiguration":
        return replace(self, animation_id=animation_id, timeline_index=timeline_index)

    def as_icon(self) -> "RenderConfiguration":
        """Icon view: direction 0, no shadows, static pose."""
        return replace(
            self,
            icon=True,
            direction=0,
            shadows=False,
            animation_id=None,
            timeline_index=0,
        )
