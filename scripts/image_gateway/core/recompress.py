"""Local recompression engine.

Re-encodes an image at its native resolution. PNG input stays PNG; every other
input type is written as baseline JPEG at the requested quality. Nothing here
touches the network or the filesystem.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field

from PIL import Image, UnidentifiedImageError

from .errors import InvalidInputError
from .utils import normalize_format


MIN_QUALITY = 1
MAX_QUALITY = 100


@dataclass(frozen=True)
class RecompressedImage:
    image_bytes: bytes = field(repr=False)
    byte_size: int
    mime_type: str
    width: int
    height: int


def validate_quality(quality: object) -> int:
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidInputError(f"Quality must be an integer between {MIN_QUALITY} and {MAX_QUALITY}.")
    if quality < MIN_QUALITY or quality > MAX_QUALITY:
        raise InvalidInputError(
            f"Quality {quality} is out of range; expected {MIN_QUALITY}-{MAX_QUALITY}."
        )
    return quality


def _decode(image_bytes: bytes) -> Image.Image:
    if not image_bytes:
        raise InvalidInputError("Image data is empty.")
    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise InvalidInputError(f"Could not decode image: {exc}") from exc
    return image


def _flatten_for_jpeg(image: Image.Image) -> Image.Image:
    if image.mode in {"RGB", "L", "CMYK"}:
        return image
    if image.mode in {"RGBA", "LA"} or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (0, 0, 0))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return image.convert("RGB")


def recompress(image_bytes: bytes, mime_type: str, quality: int) -> RecompressedImage:
    quality = validate_quality(quality)
    image = _decode(image_bytes)
    width, height = image.size

    buffer = io.BytesIO()
    try:
        if normalize_format(mime_type) == "png":
            # PNG is lossless; quality has no effect on it.
            image.save(buffer, format="PNG", optimize=True)
            out_mime = "image/png"
        else:
            # Transparent pixels come out black, as with a canvas JPEG export.
            _flatten_for_jpeg(image).save(buffer, format="JPEG", quality=quality, progressive=False)
            out_mime = "image/jpeg"
    except (OSError, ValueError) as exc:
        raise InvalidInputError(f"Could not re-encode image: {exc}") from exc

    data = buffer.getvalue()
    return RecompressedImage(
        image_bytes=data,
        byte_size=len(data),
        mime_type=out_mime,
        width=width,
        height=height,
    )
