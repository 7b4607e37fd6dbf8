"""Exception hierarchy.

Every error raised by the package derives from :class:`FurniRenderError`,
itself a ``ValueError`` so callers that only guard against bad input keep
working. Only :class:`MissingMetadataError` is fatal for an item; the others
describe a single unit (fragment, configuration) that the caller may skip.
"""


class FurniRenderError(ValueError):
    """Base class for furniture rendering errors."""


class FragmentNameError(FurniRenderError):
    """An image identifier does not follow the fragment naming convention."""

    def __init__(self, name: str, reason: str):
        super().__init__(f"Cannot decode fragment name {name!r}: {reason}")
        self.name = name
        self.reason = reason


class MissingMetadataError(FurniRenderError):
    """Required upstream metadata (assets or visualization) is absent."""


class InsufficientFramesError(FurniRenderError):
    """Fewer than two animation frames rendered to a usable image."""

    def __init__(self, animation_id: int, rendered: int):
        super().__init__(
            f"Animation {animation_id} produced {rendered} renderable frame(s); "
            "at least 2 are required"
        )
        self.animation_id = animation_id
        self.rendered = rendered
