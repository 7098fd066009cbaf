"""
Square thumbnail rendering: fit an image inside a fixed canvas with transparent padding.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from io import BytesIO
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError

TRANSPARENT = (0, 0, 0, 0)
SIXTEEN_BIT_MODES = ("I;16", "I;16B", "I;16L", "I;16N", "I")


@dataclass(frozen=True)
class CanvasSpec:
    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"canvas dimensions must be positive, got {self.width}x{self.height}")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def fitted_size(src_w: int, src_h: int, target: CanvasSpec) -> Tuple[int, int]:
    """Largest size with the source aspect ratio that fits inside the target."""
    ratio = min(target.width / src_w, target.height / src_h)
    new_w = min(max(_round_half_up(src_w * ratio), 1), target.width)
    new_h = min(max(_round_half_up(src_h * ratio), 1), target.height)
    return new_w, new_h


def centering_offsets(new_w: int, new_h: int, target: CanvasSpec) -> Tuple[int, int]:
    # Odd leftover pixel goes to the right/bottom edge.
    return (target.width - new_w) // 2, (target.height - new_h) // 2


def fit(image: Image.Image, target: CanvasSpec) -> Image.Image:
    """
    Resize `image` to fit within `target` keeping its aspect ratio, then center it
    on a fully transparent RGBA canvas of exactly target.width x target.height.
    """
    source = image if image.mode == "RGBA" else image.convert("RGBA")
    new_w, new_h = fitted_size(source.width, source.height, target)
    if (new_w, new_h) != source.size:
        source = source.resize((new_w, new_h), Image.Resampling.LANCZOS)

    canvas = Image.new("RGBA", (target.width, target.height), TRANSPARENT)
    canvas.alpha_composite(source, dest=centering_offsets(new_w, new_h, target))
    return canvas


def _to_rgba8(im: Image.Image) -> Image.Image:
    # convert() clips 16-bit samples instead of scaling them.
    if im.mode in SIXTEEN_BIT_MODES:
        im = im.convert("I").point(lambda v: v * (1 / 257) + 0.5).convert("L")
    return im.convert("RGBA")


def decode_image(data: bytes) -> Image.Image:
    """Decode the first frame of `data` as an RGBA image."""
    try:
        im = Image.open(BytesIO(data))
        im.load()
        return _to_rgba8(im)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
        raise DecodeError(f"cannot decode image: {exc}") from exc


def encode_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, "PNG")
    return buffer.getvalue()


def render_square(data: bytes, target: CanvasSpec) -> bytes:
    """Decode, fit and PNG-encode. Blocking; run it in a worker thread."""
    return encode_png(fit(decode_image(data), target))
