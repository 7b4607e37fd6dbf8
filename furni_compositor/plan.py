"""Standard render permutations for one item.

For every color variant (or "no recolor" when the item declares none):

* a static view per direction (0, 2, 4, 6), with and without shadows;
* the direction-2 animation, with and without shadows;
* one icon.

Each permutation is rendered independently: an error in one is logged and
that view is left out, the others still render.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Sequence, Tuple

from furni_compositor.config import (
    DEFAULT_ANIMATION_DIRECTION,
    DEFAULT_DIRECTIONS,
    RenderConfiguration,
)
from furni_compositor.furniture import Furniture, RenderResult
from furni_compositor.render.animation import AnimationSequence
from furni_compositor.types import NO_COLOR, ColorID, DirectionID, SizeClass

logger = logging.getLogger(__name__)

STATIC = "static"
ANIMATION = "animation"
ICON = "icon"


@dataclass(frozen=True)
class PlannedView:
    name: str
    kind: str
    config: RenderConfiguration


@dataclass
class RenderPlanResult:
    """Rendered views keyed by view name.

    Attributes:
        static: Static and icon renders.
        animations: Animation sequences.
        failed: Names of views whose render raised.
    """

    static: Dict[str, RenderResult] = field(default_factory=dict)
    animations: Dict[str, AnimationSequence] = field(default_factory=dict)
    failed: List[str] = field(default_factory=list)

    @property
    def offsets(self) -> Dict[str, Tuple[int, int]]:
        """View name -> offset of every static render."""
        return {name: result.offset for name, result in self.static.items()}


def view_name(
    sprite: str, stem: str, color_id: ColorID, shadows: bool = True
) -> str:
    name = f"{sprite}_{stem}"
    if color_id != NO_COLOR:
        name += f"_{color_id}"
    if not shadows:
        name += "_no_sd"
    return name


def plan_views(
    sprite: str,
    color_ids: Sequence[ColorID],
    size_class: SizeClass = SizeClass.LARGE,
    directions: Sequence[DirectionID] = DEFAULT_DIRECTIONS,
    animation_direction: DirectionID = DEFAULT_ANIMATION_DIRECTION,
) -> Iterator[PlannedView]:
    for color_id in list(color_ids) or [NO_COLOR]:
        for shadows in (True, False):
            for direction in directions:
                yield PlannedView(
                    view_name(sprite, f"dir_{direction}", color_id, shadows),
                    STATIC,
                    RenderConfiguration(
                        size_class=size_class,
                        direction=direction,
                        color_id=color_id,
                        shadows=shadows,
                    ),
                )
            yield PlannedView(
                view_name(sprite, "animation", color_id, shadows),
                ANIMATION,
                RenderConfiguration(
                    size_class=size_class,
                    direction=animation_direction,
                    color_id=color_id,
                    shadows=shadows,
                ),
            )
        yield PlannedView(
            view_name(sprite, "icon", color_id),
            ICON,
            RenderConfiguration(size_class=size_class, color_id=color_id).as_icon(),
        )


def render_plan(
    furniture: Furniture,
    size_class: SizeClass = SizeClass.LARGE,
    directions: Sequence[DirectionID] = DEFAULT_DIRECTIONS,
) -> RenderPlanResult:
    result = RenderPlanResult()
    color_ids = sorted(furniture.list_available_color_variants(size_class))
    for view in plan_views(furniture.sprite, color_ids, size_class, directions):
        try:
            if view.kind == ANIMATION:
                sequence = furniture.render_animation(view.config)
                if sequence is not None:
                    result.animations[view.name] = sequence
            else:
                rendered = furniture.render_static(view.config)
                if rendered is not None:
                    result.static[view.name] = rendered
        except Exception:
            logger.exception("[%s] View %s failed", furniture.sprite, view.name)
            result.failed.append(view.name)
    logger.info(
        "[%s] Rendered %d static view(s), %d animation(s), %d failure(s)",
        furniture.sprite,
        len(result.static),
        len(result.animations),
        len(result.failed),
    )
    return result

