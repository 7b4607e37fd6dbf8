"""Color variant table.

Colors are looked up at render time rather than baked into fragment records,
so a single catalog serves every color variant of an item.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet, Optional, Tuple

from pyrsistent import pmap
from pyrsistent.typing import PMap

from furni_compositor.types import RGB, ColorID, LayerID, SizeClass

logger = logging.getLogger(__name__)

ColorKey = Tuple[SizeClass, ColorID, LayerID]


@lru_cache(maxsize=1024)
def parse_hex_color(code: str) -> Optional[RGB]:
    """Parse ``RRGGBB`` / ``#RRGGBB`` (or the ``RGB`` shorthand) into a tuple.

    Returns ``None`` for anything else.
    """
    value = code.strip().removeprefix("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        return None
    try:
        return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
    except ValueError:
        return None


def normalize_color_code(color: object) -> Optional[str]:
    """Coerce an upstream color value to an ``RRGGBB`` string.

    Integers are formatted as 24-bit hex; strings are kept with any leading
    ``#`` or ``0x`` stripped.
    """
    if isinstance(color, bool):
        return None
    if isinstance(color, int):
        return f"{color & 0xFFFFFF:06X}"
    if isinstance(color, str):
        code = color.strip()
        if code.lower().startswith("0x"):
            code = code[2:]
        return code.removeprefix("#").upper() or None
    return None


@dataclass(frozen=True)
class ColorTable:
    """Immutable ``(size, color, layer) -> hex`` lookup."""

    entries: PMap[ColorKey, str] = pmap()

    def lookup(
        self, size_class: SizeClass, color_id: ColorID, layer: LayerID
    ) -> Optional[str]:
        return self.entries.get((size_class, color_id, layer))

    def tint_for(
        self, size_class: SizeClass, color_id: ColorID, layer: LayerID
    ) -> Optional[RGB]:
        """Parsed tint for a layer, ``None`` on a miss or an unparseable code."""
        code = self.lookup(size_class, color_id, layer)
        if code is None:
            return None
        rgb = parse_hex_color(code)
        if rgb is None:
            logger.debug(
                "Ignoring unparseable color %r for size=%s color=%s layer=%s",
                code,
                size_class,
                color_id,
                layer,
            )
        return rgb

    def color_ids(self, size_class: SizeClass) -> FrozenSet[ColorID]:
        return frozenset(
            color_id for (size, color_id, _layer) in self.entries if size == size_class
        )
