"""Fragment descriptors and records.

``FragmentDescriptor`` is the authoring-time input (what the asset manifest
says about one image). ``FragmentRecord`` is the decoded, attribute-resolved
form stored in the :class:`~furni_compositor.catalog.catalog.AssetCatalog`.
Both are frozen value objects.
"""

from dataclasses import dataclass
from typing import Optional

from furni_compositor.types import DirectionID, FrameID, LayerID, SizeClass


@dataclass(frozen=True)
class FragmentDescriptor:
    """One asset entry as declared upstream.

    Attributes:
        name: Image identifier (``<sprite>_<size>_<layer>_<direction>_<frame>``).
        x: Anchor offset from the draw origin along the x axis.
        y: Anchor offset from the draw origin along the y axis.
        flip_h: Image is drawn mirrored horizontally.
        source: Identifier of the image this one is derived from, if any.
    """

    name: str
    x: int = 0
    y: int = 0
    flip_h: bool = False
    source: Optional[str] = None


@dataclass(frozen=True)
class LayerAttributes:
    """Per-layer rendering metadata.

    Attributes:
        z: Declared stacking depth, ``None`` when the layer declares none.
        ink: Blend hint (e.g. ``"ADD"``), ``None`` for normal blending.
        alpha: Flat alpha 0-255, ``None`` for no flat alpha.
        ignore_mouse: Layer is skipped for interaction and for shadowless renders.
    """

    z: Optional[int] = None
    ink: Optional[str] = None
    alpha: Optional[int] = None
    ignore_mouse: bool = False


DEFAULT_LAYER_ATTRIBUTES = LayerAttributes()


@dataclass(frozen=True)
class DecodedName:
    size_class: SizeClass
    layer: LayerID
    direction: DirectionID
    frame: FrameID
    icon: bool
    shadow: bool


@dataclass(frozen=True)
class FragmentRecord:
    """Decoded fragment with its cached rendering attributes.

    Attributes:
        name: Image identifier, also the image cache key.
        x: Anchor x offset.
        y: Anchor y offset.
        size_class: Small or large.
        layer: Layer index (``'A'`` -> 0).
        direction: Facing id, 0 for icon fragments.
        frame: Frame id within the direction, 0 for icon fragments.
        flip_h: Drawn mirrored.
        shadow: Shadow fragment.
        icon: Icon-variant fragment.
        attributes: Resolved layer attributes.
        stacking_key: Draw order key, lower draws first.
        source: Identifier the image is derived from, if any.
    """

    name: str
    x: int
    y: int
    size_class: SizeClass
    layer: LayerID
    direction: DirectionID
    frame: FrameID
    flip_h: bool
    shadow: bool
    icon: bool
    attributes: LayerAttributes
    stacking_key: int
    source: Optional[str] = None

    @property
    def ink(self) -> Optional[str]:
        return self.attributes.ink

    @property
    def alpha(self) -> Optional[int]:
        return self.attributes.alpha

    @property
    def ignore_mouse(self) -> bool:
        return self.attributes.ignore_mouse
