"""Build queue assembly: which fragments to draw for one frame, and in what order."""

from typing import List, Tuple

from furni_compositor.catalog.catalog import AssetCatalog
from furni_compositor.catalog.fragment import FragmentRecord
from furni_compositor.catalog.timeline import AnimationTimeline
from furni_compositor.config import RenderConfiguration
from furni_compositor.render.frame_selector import resolve_frame


def assemble_build_queue(
    catalog: AssetCatalog,
    timeline: AnimationTimeline,
    config: RenderConfiguration,
) -> Tuple[FragmentRecord, ...]:
    """
    Z-ordered draw list for ``config``.

    Layers are visited in ascending order and contribute their fragments at the
    frame chosen by :func:`resolve_frame`. Shadow fragments are not frame
    indexed: with shadows enabled all of them are appended. Without shadows,
    ignore-mouse layers are dropped as well. The final sort is stable, so equal
    stacking keys keep ascending layer order.

    An empty tuple means there is nothing to draw.
    """
    candidates = catalog.candidates(config.size_class, config.direction, config.icon)
    if not candidates:
        return ()

    queue: List[FragmentRecord] = []
    for layer in range(catalog.highest_layer):
        frame = resolve_frame(
            timeline,
            layer,
            config.requested_id,
            config.state_id,
            config.timeline_index,
        )
        for fragment in candidates:
            if fragment.layer != layer or fragment.frame != frame or fragment.shadow:
                continue
            if not config.shadows and fragment.ignore_mouse:
                continue
            queue.append(fragment)

    if config.shadows:
        queue.extend(fragment for fragment in candidates if fragment.shadow)

    return tuple(sorted(queue, key=lambda fragment: fragment.stacking_key))
