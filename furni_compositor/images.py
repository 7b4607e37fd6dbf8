"""Decoded-image provider.

:class:`ImageCache` maps image identifiers to decoded RGBA images. It is built
once per item, before any render, and never mutated afterwards, so concurrent
renders may read it freely. Keys are case-insensitive, and a lookup also tries
the identifier without the item's name prefix (extracted image files are
usually stored without it).
"""

import io
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional

from PIL import Image, ImageOps, UnidentifiedImageError
from pyrsistent import pmap
from pyrsistent.typing import PMap

from furni_compositor.catalog.fragment import FragmentDescriptor
from furni_compositor.catalog.naming import strip_sprite_prefix

logger = logging.getLogger(__name__)


def _key(name: str) -> str:
    return name.lower()


def decode_image(data: bytes) -> Image.Image:
    """Decode encoded image bytes (PNG, ...) to a fully loaded RGBA image."""
    with Image.open(io.BytesIO(data)) as image:
        image.load()
        return image.convert("RGBA")


@dataclass(frozen=True)
class ImageCache:
    """Immutable, case-insensitive ``identifier -> RGBA image`` map."""

    sprite: str = ""
    images: PMap[str, Image.Image] = pmap()

    @classmethod
    def from_images(
        cls, images: Mapping[str, Image.Image], sprite: str = ""
    ) -> "ImageCache":
        converted = {
            _key(name): image if image.mode == "RGBA" else image.convert("RGBA")
            for name, image in images.items()
        }
        return cls(sprite=sprite, images=pmap(converted))

    @classmethod
    def from_bytes(cls, blobs: Mapping[str, bytes], sprite: str = "") -> "ImageCache":
        """Decode every blob; undecodable ones are logged and left out."""
        decoded: Dict[str, Image.Image] = {}
        for name, data in blobs.items():
            try:
                decoded[name] = decode_image(data)
            except (UnidentifiedImageError, OSError, ValueError) as exc:
                logger.warning("[%s] Cannot decode image %r: %s", sprite, name, exc)
        return cls.from_images(decoded, sprite=sprite)

    def get(self, name: str) -> Optional[Image.Image]:
        image = self.images.get(_key(name))
        if image is None and self.sprite:
            image = self.images.get(_key(strip_sprite_prefix(name, self.sprite)))
        return image

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __len__(self) -> int:
        return len(self.images)

    def with_derived(self, descriptors: Iterable[FragmentDescriptor]) -> "ImageCache":
        """Materialize images that are declared as derived from another image.

        A descriptor with a ``source`` and no image of its own reuses the
        source image, mirrored horizontally when the descriptor is flipped.
        Existing images are never replaced. Descriptors are processed in
        order, so a source may itself be an image derived earlier in the pass.
        """
        derived: Dict[str, Image.Image] = {}
        for descriptor in descriptors:
            if not descriptor.source or descriptor.name in self:
                continue
            source = derived.get(_key(descriptor.source))
            if source is None:
                source = self.get(descriptor.source)
            if source is None:
                logger.debug(
                    "[%s] Source %r of %r not found",
                    self.sprite,
                    descriptor.source,
                    descriptor.name,
                )
                continue
            derived[_key(descriptor.name)] = (
                ImageOps.mirror(source) if descriptor.flip_h else source
            )
        if not derived:
            return self
        return ImageCache(sprite=self.sprite, images=self.images.update(derived))
