"""Build a :class:`~furni_compositor.furniture.Furniture` from structured data.

The input is the already-decoded furniture document (the JSON shape produced
by upstream extraction), not markup text::

    {
        "assets": {"chair_64_a_2_0": {"x": 32, "y": 60, "flipH": false,
                                      "source": "chair_64_a_0_0"}, ...},
        "visualization": {
            "64": {
                "layers": {"1": {"z": 5, "ink": "ADD", "alpha": 128,
                                 "ignoreMouse": true}},
                "directions": {"2": {"layers": {"0": {"z": 1}}}},
                "colors": {"1": [{"layerId": 0, "color": "FFCC00"}]},
                "animations": {"1": {"layers": {"0": {"frameRepeat": 2,
                                                      "frames": [0, 1, 2]}}}},
            },
            "32": {...},
            "1": {...},
        },
    }

Mutable dict stores are filled first and frozen into persistent maps at the
end. Malformed individual entries are logged and skipped; a document without
assets or visualization data raises :class:`MissingMetadataError`.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from PIL import Image
from pyrsistent import pmap
from pyrsistent.typing import PMap

from furni_compositor.catalog.attributes import LayerAttributeTables
from furni_compositor.catalog.catalog import build_catalog
from furni_compositor.catalog.colors import ColorKey, ColorTable, normalize_color_code
from furni_compositor.catalog.fragment import FragmentDescriptor, LayerAttributes
from furni_compositor.catalog.timeline import AnimationState, AnimationTimeline
from furni_compositor.config import RenderSettings
from furni_compositor.errors import MissingMetadataError
from furni_compositor.furniture import Furniture
from furni_compositor.images import ImageCache
from furni_compositor.types import DirectionID, LayerID, SizeClass, StateID

logger = logging.getLogger(__name__)

ImageSource = Union[ImageCache, Mapping[str, Image.Image], Mapping[str, bytes]]

_SIZE_KEYS = {size_class.value for size_class in SizeClass}


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"expected an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"expected an integer, got {value!r}")
        return int(value)
    return int(value)


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else _as_int(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def _entries(section: Any) -> Iterable[Tuple[str, Any]]:
    """Iterate ``(key, entry)`` over a dict, or over a list of ``{"id": ...}`` dicts."""
    if isinstance(section, Mapping):
        return ((str(key), value) for key, value in section.items())
    if isinstance(section, list):
        return (
            (str(entry.get("id", idx)), entry)
            for idx, entry in enumerate(section)
            if isinstance(entry, Mapping)
        )
    return ()


# --- Assets ---


def read_fragment_descriptor(key: str, entry: Mapping[str, Any]) -> FragmentDescriptor:
    name = entry.get("name") or key
    if not name:
        raise ValueError("asset without a name")
    source = entry.get("source") or None
    if source is not None and not isinstance(source, str):
        raise ValueError(f"asset source must be a name, got {source!r}")
    return FragmentDescriptor(
        name=str(name),
        x=_as_int(entry.get("x", 0)),
        y=_as_int(entry.get("y", 0)),
        flip_h=_as_bool(entry.get("flipH", False)),
        source=source,
    )


def read_fragment_descriptors(
    assets: Any, sprite: str = ""
) -> List[FragmentDescriptor]:
    descriptors: List[FragmentDescriptor] = []
    for key, entry in _entries(assets):
        try:
            descriptors.append(read_fragment_descriptor(key, entry))
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("[%s] Skipping asset entry %r: %s", sprite, key, exc)
    return descriptors


# --- Visualization ---


def visualizations_by_size(visualization: Any) -> Dict[SizeClass, Mapping[str, Any]]:
    """Per-size visualization sections, keyed by :class:`SizeClass`.

    Accepts both ``{"64": {...}}`` and ``{"visualizations": [{"size": 64, ...}]}``.
    """
    out: Dict[SizeClass, Mapping[str, Any]] = {}
    if not isinstance(visualization, Mapping):
        return out
    listed = visualization.get("visualizations")
    if isinstance(listed, list):
        for entry in listed:
            if isinstance(entry, Mapping) and str(entry.get("size")) in _SIZE_KEYS:
                out.setdefault(SizeClass(str(entry["size"])), entry)
    for size_class in SizeClass:
        section = visualization.get(size_class.value)
        if isinstance(section, Mapping):
            out.setdefault(size_class, section)
    return out


def read_layer_attributes(entry: Mapping[str, Any]) -> LayerAttributes:
    ink = entry.get("ink")
    return LayerAttributes(
        z=_optional_int(entry.get("z")),
        ink=str(ink) if ink is not None else None,
        alpha=_optional_int(entry.get("alpha")),
        ignore_mouse=_as_bool(entry.get("ignoreMouse", False)),
    )


def read_attribute_tables(
    visualizations: Mapping[SizeClass, Mapping[str, Any]], sprite: str = ""
) -> LayerAttributeTables:
    layers: Dict[Tuple[SizeClass, LayerID], LayerAttributes] = {}
    directions: Dict[Tuple[SizeClass, DirectionID, LayerID], LayerAttributes] = {}
    for size_class, section in visualizations.items():
        for layer_key, entry in _entries(section.get("layers")):
            try:
                layers[(size_class, _as_int(layer_key))] = read_layer_attributes(entry)
            except (TypeError, ValueError, AttributeError) as exc:
                logger.warning(
                    "[%s] Skipping layer %s/%s: %s", sprite, size_class, layer_key, exc
                )
        for direction_key, direction in _entries(section.get("directions")):
            if not isinstance(direction, Mapping):
                continue
            for layer_key, entry in _entries(direction.get("layers")):
                try:
                    key = (size_class, _as_int(direction_key), _as_int(layer_key))
                    directions[key] = read_layer_attributes(entry)
                except (TypeError, ValueError, AttributeError) as exc:
                    logger.warning(
                        "[%s] Skipping direction layer %s/%s/%s: %s",
                        sprite,
                        size_class,
                        direction_key,
                        layer_key,
                        exc,
                    )
    return LayerAttributeTables(layers=pmap(layers), directions=pmap(directions))


def _color_layers(color_entry: Any) -> Iterable[Tuple[Any, Any]]:
    """``(layer id, color)`` pairs from either supported color entry shape."""
    if isinstance(color_entry, list):
        for layer in color_entry:
            if isinstance(layer, Mapping):
                yield layer.get("layerId"), layer.get("color")
    elif isinstance(color_entry, Mapping):
        for layer_key, layer in _entries(color_entry.get("layers")):
            if isinstance(layer, Mapping):
                yield layer.get("id", layer_key), layer.get("color")


def read_color_table(
    visualizations: Mapping[SizeClass, Mapping[str, Any]], sprite: str = ""
) -> ColorTable:
    entries: Dict[ColorKey, str] = {}
    for size_class, section in visualizations.items():
        for color_key, color_entry in _entries(section.get("colors")):
            try:
                color_id = _as_int(color_key)
            except (TypeError, ValueError) as exc:
                logger.warning("[%s] Skipping color %r: %s", sprite, color_key, exc)
                continue
            for layer_id, color in _color_layers(color_entry):
                code = normalize_color_code(color)
                if code is None:
                    logger.warning(
                        "[%s] Color %s has no usable value for layer %r",
                        sprite,
                        color_id,
                        layer_id,
                    )
                    continue
                try:
                    entries[(size_class, color_id, _as_int(layer_id))] = code
                except (TypeError, ValueError) as exc:
                    logger.warning(
                        "[%s] Skipping color %s layer %r: %s",
                        sprite,
                        color_id,
                        layer_id,
                        exc,
                    )
    return ColorTable(entries=pmap(entries))


def _frame_id(frame: Any) -> int:
    if isinstance(frame, Mapping):
        return _as_int(frame["id"])
    return _as_int(frame)


def read_animation_state(entry: Mapping[str, Any]) -> AnimationState:
    frames = entry.get("frames")
    if frames is None:
        # sequence-of-sequences form: first sequence wins
        sequences = entry.get("frameSequence") or entry.get("sequences") or []
        frames = sequences[0].get("frames", []) if sequences else []
    return AnimationState(
        frames=tuple(_frame_id(frame) for frame in frames),
        frame_repeat=_optional_int(entry.get("frameRepeat")),
        loop_count=_optional_int(entry.get("loopCount")),
    )


def read_timeline(section: Mapping[str, Any], sprite: str = "") -> AnimationTimeline:
    layers: Dict[LayerID, Dict[StateID, AnimationState]] = {}
    for animation_key, animation in _entries(section.get("animations")):
        if not isinstance(animation, Mapping):
            continue
        try:
            animation_id = _as_int(animation.get("id", animation_key))
        except (TypeError, ValueError) as exc:
            logger.warning("[%s] Skipping animation %r: %s", sprite, animation_key, exc)
            continue
        for layer_key, entry in _entries(animation.get("layers")):
            try:
                layer_id = _as_int(entry.get("id", layer_key))
                state = read_animation_state(entry)
            except (TypeError, ValueError, KeyError, AttributeError, IndexError) as exc:
                logger.warning(
                    "[%s] Skipping animation %s layer %r: %s",
                    sprite,
                    animation_id,
                    layer_key,
                    exc,
                )
                continue
            layers.setdefault(layer_id, {}).setdefault(animation_id, state)
    return AnimationTimeline(
        layers=pmap({layer: pmap(states) for layer, states in layers.items()})
    )


def read_timelines(
    visualizations: Mapping[SizeClass, Mapping[str, Any]], sprite: str = ""
) -> PMap[SizeClass, AnimationTimeline]:
    return pmap(
        {
            size_class: read_timeline(section, sprite)
            for size_class, section in visualizations.items()
        }
    )


# --- Images ---


def to_image_cache(images: ImageSource, sprite: str) -> ImageCache:
    if isinstance(images, ImageCache):
        return images
    if any(isinstance(value, (bytes, bytearray)) for value in images.values()):
        return ImageCache.from_bytes(
            {name: bytes(value) for name, value in images.items()}, sprite=sprite
        )
    return ImageCache.from_images(images, sprite=sprite)  # type: ignore[arg-type]


def load_furniture(
    sprite: str,
    data: Mapping[str, Any],
    images: ImageSource,
    settings: RenderSettings = RenderSettings(),
) -> Furniture:
    """
    Build an immutable :class:`Furniture` from a decoded furniture document.

    Raises:
        MissingMetadataError: If the document has no assets or no visualization
            data for any size class.
    """
    assets = data.get("assets")
    if not assets:
        raise MissingMetadataError(f"[{sprite}] No asset data")
    visualizations = visualizations_by_size(data.get("visualization"))
    if not visualizations:
        raise MissingMetadataError(f"[{sprite}] No visualization data")

    descriptors = read_fragment_descriptors(assets, sprite)
    catalog = build_catalog(
        sprite, descriptors, read_attribute_tables(visualizations, sprite)
    )
    cache = to_image_cache(images, sprite).with_derived(descriptors)
    logger.info(
        "[%s] Loaded %d fragment(s), %d image(s), sizes %s",
        sprite,
        len(catalog),
        len(cache),
        ",".join(sorted(size.value for size in visualizations)),
    )
    return Furniture(
        catalog=catalog,
        colors=read_color_table(visualizations, sprite),
        timelines=read_timelines(visualizations, sprite),
        images=cache,
        settings=settings,
    )
