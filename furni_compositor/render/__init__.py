"""Rendering pipeline.

Frame selection -> build queue -> compositing -> trimming / animation assembly.
Every function here is pure with respect to the catalog: configuration is
passed explicitly and every render allocates its own canvas.
"""

from .animation import AnimationSequence, build_animation, select_animation
from .build_queue import assemble_build_queue
from .compositor import render_frame
from .frame_selector import resolve_frame
from .trim import BoundingBox, find_bounding_box, trim

__all__ = [
    "AnimationSequence",
    "BoundingBox",
    "assemble_build_queue",
    "build_animation",
    "find_bounding_box",
    "render_frame",
    "resolve_frame",
    "select_animation",
    "trim",
]
