"""furni_compositor
=================

Composite renderer for sprite-layered furniture items.

An item is described by many small directional image fragments. This package
decides which fragment goes on which layer for a requested view, orders them
back to front, composites them with the item's tint / blend rules, trims the
result and assembles looping animations whose frames share one crop window.

Typical use::

    from furni_compositor import RenderConfiguration, load_furniture

    furniture = load_furniture("chair", furni_document, images)
    view = furniture.render_static(RenderConfiguration(direction=2, color_id=1))
    animation = furniture.render_animation(RenderConfiguration(direction=2))

Everything built for an item is immutable; render requests carry their own
:class:`RenderConfiguration`.
"""

from .config import RenderConfiguration, RenderSettings
from .errors import (
    FragmentNameError,
    FurniRenderError,
    InsufficientFramesError,
    MissingMetadataError,
)
from .furniture import Furniture, RenderResult
from .images import ImageCache
from .loader import load_furniture
from .plan import render_plan
from .render.animation import AnimationSequence
from .render.trim import BoundingBox
from .types import NO_COLOR, SizeClass

__all__ = [
    "AnimationSequence",
    "BoundingBox",
    "FragmentNameError",
    "Furniture",
    "FurniRenderError",
    "ImageCache",
    "InsufficientFramesError",
    "MissingMetadataError",
    "NO_COLOR",
    "RenderConfiguration",
    "RenderResult",
    "RenderSettings",
    "SizeClass",
    "load_furniture",
    "render_plan",
]
