"""Immutable per-item data: fragments, layer attributes, colors, timelines."""

from .attributes import LayerAttributeTables, resolve_layer_attributes
from .catalog import AssetCatalog, build_catalog, build_fragment
from .colors import ColorTable, parse_hex_color
from .fragment import FragmentDescriptor, FragmentRecord, LayerAttributes
from .naming import decode_fragment_name
from .timeline import AnimationState, AnimationTimeline, SelectedAnimation

__all__ = [
    "AnimationState",
    "AnimationTimeline",
    "AssetCatalog",
    "ColorTable",
    "FragmentDescriptor",
    "FragmentRecord",
    "LayerAttributeTables",
    "LayerAttributes",
    "SelectedAnimation",
    "build_catalog",
    "build_fragment",
    "decode_fragment_name",
    "parse_hex_color",
    "resolve_layer_attributes",
]
