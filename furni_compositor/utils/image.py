import numpy as np
import numpy.typing as npt
from PIL import Image
from typing import Optional, Tuple

from furni_compositor.types import RGB

# Type aliases for clarity
FloatArray = npt.NDArray[np.float32]
UInt8Array = npt.NDArray[np.uint8]
BoolArray = npt.NDArray[np.bool_]

_EPSILON = np.float32(1e-6)
WHITE: RGB = (255, 255, 255)


def to_float_rgba(image: Image.Image) -> FloatArray:
    """RGBA image -> float32 array (H, W, 4) with channels in [0, 1]."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return np.asarray(image, dtype=np.float32) / np.float32(255.0)


def to_image(arr: FloatArray) -> Image.Image:
    """Float RGBA array in [0, 1] -> RGBA image, rounding to nearest."""
    out: UInt8Array = np.clip(np.rint(arr * 255.0), 0, 255).astype(np.uint8)
    return Image.fromarray(out)


def new_canvas(width: int, height: int) -> FloatArray:
    return np.zeros((height, width, 4), dtype=np.float32)


def tint(arr: FloatArray, color: RGB, alpha: int = 255) -> FloatArray:
    """
    Multiply the color channels of visible pixels by ``color`` and scale their
    alpha by ``alpha / 255``. Fully transparent pixels are left untouched.
    """
    out = arr.copy()
    visible: BoolArray = out[..., 3] > 0
    factors = np.array(color, dtype=np.float32) / np.float32(255.0)
    out[..., :3][visible] *= factors
    out[..., 3][visible] *= np.float32(alpha / 255.0)
    return out


def scale_opacity(arr: FloatArray, opacity: float) -> FloatArray:
    out = arr.copy()
    out[..., 3] *= np.float32(opacity)
    return out


def _clip_region(
    canvas_shape: Tuple[int, ...], src_shape: Tuple[int, ...], x: int, y: int
) -> Optional[Tuple[slice, slice, slice, slice]]:
    """
    Intersect a source placed at (x, y) with the canvas. Returns
    (canvas_rows, canvas_cols, src_rows, src_cols) or None when nothing overlaps.
    """
    ch, cw = canvas_shape[0], canvas_shape[1]
    sh, sw = src_shape[0], src_shape[1]
    x0, y0 = max(x, 0), max(y, 0)
    x1, y1 = min(x + sw, cw), min(y + sh, ch)
    if x0 >= x1 or y0 >= y1:
        return None
    return (
        slice(y0, y1),
        slice(x0, x1),
        slice(y0 - y, y1 - y),
        slice(x0 - x, x1 - x),
    )


def composite(
    canvas: FloatArray, src: FloatArray, position: Tuple[int, int], additive: bool = False
) -> None:
    """
    Source-over composite ``src`` onto ``canvas`` (in place) at ``position``.

    Both arrays hold straight (non-premultiplied) RGBA. With ``additive`` the
    overlapping region uses the clamped sum of backdrop and source colors as
    the blend color, otherwise the source color:

        color = (Cb * (Ab - Ab*As) + Cs * (As - Ab*As) + B * Ab*As) / alpha
        alpha = Ab + As - Ab*As

    Regions outside the canvas are clipped.
    """
    x, y = position
    region = _clip_region(canvas.shape, src.shape, x, y)
    if region is None:
        return
    rows, cols, src_rows, src_cols = region

    dst = canvas[rows, cols]
    s = src[src_rows, src_cols]

    ab = dst[..., 3:4]
    as_ = s[..., 3:4]
    both = ab * as_
    dst_w = ab - both
    src_w = as_ - both
    alpha = dst_w + as_

    cb = dst[..., :3]
    cs = s[..., :3]
    blend = np.minimum(cb + cs, np.float32(1.0)) if additive else cs

    color = cb * dst_w + cs * src_w + blend * both
    color = color / np.maximum(alpha, _EPSILON)

    canvas[rows, cols, :3] = color
    canvas[rows, cols, 3:4] = alpha
