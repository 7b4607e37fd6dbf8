"""Frame selection for a layer at a point on the animation timeline."""

from typing import Optional

from furni_compositor.catalog.timeline import AnimationState, AnimationTimeline
from furni_compositor.types import FrameID, LayerID, StateID


def _non_empty(state: Optional[AnimationState]) -> Optional[AnimationState]:
    if state is None or len(state.frames) == 0:
        return None
    return state


def resolve_frame(
    timeline: AnimationTimeline,
    layer: LayerID,
    requested_id: StateID,
    fallback_state_id: StateID,
    timeline_index: int = 0,
) -> FrameID:
    """
    Frame id a layer shows for ``requested_id`` at ``timeline_index``.

    Order of precedence:
    1. the requested animation, looping its own sequence (``index mod len``);
    2. the first frame of the fallback state (static pose);
    3. frame 0.
    """
    requested = _non_empty(timeline.get(layer, requested_id))
    if requested is not None:
        return requested.frames[timeline_index % len(requested.frames)]
    fallback = _non_empty(timeline.get(layer, fallback_state_id))
    if fallback is not None:
        return fallback.frames[0]
    return 0
