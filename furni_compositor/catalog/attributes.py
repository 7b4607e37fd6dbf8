"""Layer attribute tables and resolution rules.

Layer attributes are declared per size class, either for a layer in general or
for a layer within a specific direction. Resolution walks an ordered list of
lookup rules and takes the first hit, falling back to
:data:`~furni_compositor.catalog.fragment.DEFAULT_LAYER_ATTRIBUTES`::

    resolve_layer_attributes(tables, SizeClass.LARGE, direction=2, layer=1)

New fallback tiers are added by extending the rule list, not by editing the
resolver.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from pyrsistent import pmap
from pyrsistent.typing import PMap

from furni_compositor.catalog.fragment import (
    DEFAULT_LAYER_ATTRIBUTES,
    LayerAttributes,
)
from furni_compositor.types import (
    LAYER_Z_WEIGHT,
    SHADOW_STACKING_KEY,
    DirectionID,
    LayerID,
    SizeClass,
)


@dataclass(frozen=True)
class LayerAttributeTables:
    """Declared layer attributes.

    Attributes:
        layers: ``(size, layer) -> attributes`` for direction-independent layers.
        directions: ``(size, direction, layer) -> attributes`` overrides.
    """

    layers: PMap[Tuple[SizeClass, LayerID], LayerAttributes] = pmap()
    directions: PMap[Tuple[SizeClass, DirectionID, LayerID], LayerAttributes] = pmap()


AttributeRule = Callable[
    [LayerAttributeTables, SizeClass, DirectionID, LayerID], Optional[LayerAttributes]
]


def general_layer_rule(
    tables: LayerAttributeTables,
    size_class: SizeClass,
    direction: DirectionID,
    layer: LayerID,
) -> Optional[LayerAttributes]:
    return tables.layers.get((size_class, layer))


def direction_layer_rule(
    tables: LayerAttributeTables,
    size_class: SizeClass,
    direction: DirectionID,
    layer: LayerID,
) -> Optional[LayerAttributes]:
    return tables.directions.get((size_class, direction, layer))


DEFAULT_ATTRIBUTE_RULES: List[AttributeRule] = [
    general_layer_rule,
    direction_layer_rule,
]


def resolve_layer_attributes(
    tables: LayerAttributeTables,
    size_class: SizeClass,
    direction: DirectionID,
    layer: LayerID,
    rules: Sequence[AttributeRule] = DEFAULT_ATTRIBUTE_RULES,
) -> LayerAttributes:
    for rule in rules:
        attributes = rule(tables, size_class, direction, layer)
        if attributes is not None:
            return attributes
    return DEFAULT_LAYER_ATTRIBUTES


def stacking_key(attributes: LayerAttributes, layer: LayerID, shadow: bool) -> int:
    """Draw-order key: declared z dominates, layer index breaks ties.

    Shadows take the minimum key so they are always drawn first.
    """
    if shadow:
        return SHADOW_STACKING_KEY
    z = attributes.z if attributes.z is not None else 0
    return z * LAYER_Z_WEIGHT + layer
