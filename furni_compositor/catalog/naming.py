"""Fragment identifier decoding.

Image identifiers follow ``<sprite>_<size>_<layer>_<direction>_<frame>``:

* ``size`` is ``32`` for the small visualization, anything else is large;
* ``layer`` is a letter, ``a`` being layer 0;
* icon images (``<sprite>_icon_<layer>``) are always direction 0, frame 0;
* shadow images carry ``_sd_`` in their name.
"""

from furni_compositor.catalog.fragment import DecodedName
from furni_compositor.errors import FragmentNameError
from furni_compositor.types import (
    ICON_MARKER,
    SHADOW_MARKER,
    SMALL_SIZE_TOKEN,
    SizeClass,
)


def strip_sprite_prefix(name: str, sprite: str) -> str:
    return name.removeprefix(f"{sprite}_")


def is_icon_name(name: str) -> bool:
    return ICON_MARKER in name


def is_shadow_name(name: str) -> bool:
    return SHADOW_MARKER in name


def decode_layer_token(token: str) -> int:
    """Map a layer letter to its index (``"A"`` -> 0, ``"b"`` -> 1)."""
    if not token:
        raise ValueError("empty layer token")
    layer = ord(token[0].upper()) - ord("A")
    if layer < 0:
        raise ValueError(f"layer token {token!r} does not start with a letter")
    return layer


def decode_fragment_name(name: str, sprite: str) -> DecodedName:
    """Decode size, layer, direction and frame from an image identifier.

    Raises:
        FragmentNameError: If the identifier has too few tokens or a token
            cannot be parsed.
    """
    tokens = strip_sprite_prefix(name, sprite).split("_")
    icon = is_icon_name(name)
    required = 2 if icon else 4
    if len(tokens) < required:
        raise FragmentNameError(
            name, f"expected at least {required} tokens, got {len(tokens)}"
        )

    size_class = SizeClass.SMALL if tokens[0] == SMALL_SIZE_TOKEN else SizeClass.LARGE
    try:
        layer = decode_layer_token(tokens[1])
        direction = 0 if icon else int(tokens[2])
        frame = 0 if icon else int(tokens[3])
    except ValueError as exc:
        raise FragmentNameError(name, str(exc)) from exc

    return DecodedName(
        size_class=size_class,
        layer=layer,
        direction=direction,
        frame=frame,
        icon=icon,
        shadow=is_shadow_name(name),
    )
