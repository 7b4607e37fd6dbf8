"""Per-item asset catalog.

The catalog is built once from the upstream fragment descriptors and the layer
attribute tables, and is read-only afterwards. Fragments whose identifier cannot
be decoded are logged and left out; they never abort the build.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from pyrsistent import pmap
from pyrsistent.typing import PMap

from furni_compositor.catalog.attributes import (
    DEFAULT_ATTRIBUTE_RULES,
    AttributeRule,
    LayerAttributeTables,
    resolve_layer_attributes,
    stacking_key,
)
from furni_compositor.catalog.fragment import FragmentDescriptor, FragmentRecord
from furni_compositor.catalog.naming import decode_fragment_name
from furni_compositor.errors import FragmentNameError
from furni_compositor.types import DirectionID, SizeClass, attribute_size

logger = logging.getLogger(__name__)

ViewKey = Tuple[SizeClass, DirectionID, bool]


@dataclass(frozen=True)
class AssetCatalog:
    """Immutable fragment collection for one item.

    Attributes:
        sprite: Item name, the prefix of every image identifier.
        fragments: Accepted fragments in declaration order.
        highest_layer: ``max(layer) + 1`` over accepted fragments, 0 if none.
        views: Fragments grouped by ``(size class, direction, icon)``.
    """

    sprite: str
    fragments: Tuple[FragmentRecord, ...] = ()
    highest_layer: int = 0
    views: PMap[ViewKey, Tuple[FragmentRecord, ...]] = pmap()

    def candidates(
        self, size_class: SizeClass, direction: DirectionID, icon: bool
    ) -> Tuple[FragmentRecord, ...]:
        return self.views.get((size_class, direction, icon), ())

    @property
    def directions(self) -> Tuple[DirectionID, ...]:
        return tuple(sorted({fragment.direction for fragment in self.fragments}))

    def __len__(self) -> int:
        return len(self.fragments)


def build_fragment(
    descriptor: FragmentDescriptor,
    sprite: str,
    tables: LayerAttributeTables,
    rules: Sequence[AttributeRule] = DEFAULT_ATTRIBUTE_RULES,
) -> FragmentRecord:
    """Decode one descriptor and attach its resolved layer attributes.

    Raises:
        FragmentNameError: If the identifier cannot be decoded.
    """
    decoded = decode_fragment_name(descriptor.name, sprite)
    attributes = resolve_layer_attributes(
        tables,
        attribute_size(decoded.size_class, decoded.icon),
        decoded.direction,
        decoded.layer,
        rules,
    )
    return FragmentRecord(
        name=descriptor.name,
        x=descriptor.x,
        y=descriptor.y,
        size_class=decoded.size_class,
        layer=decoded.layer,
        direction=decoded.direction,
        frame=decoded.frame,
        flip_h=descriptor.flip_h,
        shadow=decoded.shadow,
        icon=decoded.icon,
        attributes=attributes,
        stacking_key=stacking_key(attributes, decoded.layer, decoded.shadow),
        source=descriptor.source,
    )


def build_catalog(
    sprite: str,
    descriptors: Iterable[FragmentDescriptor],
    tables: LayerAttributeTables = LayerAttributeTables(),
    rules: Sequence[AttributeRule] = DEFAULT_ATTRIBUTE_RULES,
) -> AssetCatalog:
    fragments: List[FragmentRecord] = []
    for descriptor in descriptors:
        try:
            fragments.append(build_fragment(descriptor, sprite, tables, rules))
        except FragmentNameError as exc:
            logger.warning("[%s] Skipping asset: %s", sprite, exc)

    views: Dict[ViewKey, List[FragmentRecord]] = {}
    for fragment in fragments:
        key = (fragment.size_class, fragment.direction, fragment.icon)
        views.setdefault(key, []).append(fragment)

    highest_layer = max((f.layer for f in fragments), default=-1) + 1
    logger.debug(
        "[%s] Catalog built: %d fragment(s), %d layer(s)",
        sprite,
        len(fragments),
        highest_layer,
    )
    return AssetCatalog(
        sprite=sprite,
        fragments=tuple(fragments),
        highest_layer=highest_layer,
        views=pmap({key: tuple(value) for key, value in views.items()}),
    )
