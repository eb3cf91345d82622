"""Shrink oversized photos before they touch the network."""

from __future__ import annotations

import io
import logging
from dataclasses import replace
from pathlib import Path

from PIL import Image

from cityfix_client.models import LocalImage

logger = logging.getLogger(__name__)

SHRINK_THRESHOLD_BYTES = 5 * 1024 * 1024

_QUALITY_STEPS = (85, 75, 65, 55)


def _encode_jpeg(img: Image.Image, max_width: int, quality: int) -> bytes:
    w, h = img.size
    if w > max_width:
        img = img.resize((max_width, max(1, int(h * (max_width / w)))), Image.LANCZOS)
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=quality, optimize=True)
    return buffer.getvalue()


def compress_image(data: bytes, max_bytes: int, max_width: int) -> bytes:
    """Re-encode *data* as JPEG until it fits in *max_bytes*.

    Aspect ratio is preserved. Each round lowers quality, then halves the
    width limit once the quality steps are exhausted.
    """
    img = Image.open(io.BytesIO(data))
    img = img.convert("RGB")

    width = max_width
    while True:
        for quality in _QUALITY_STEPS:
            encoded = _encode_jpeg(img, width, quality)
            if len(encoded) <= max_bytes:
                return encoded
        if width <= 64:
            return encoded
        width //= 2


def prepare_image(
    image: LocalImage,
    max_bytes: int = SHRINK_THRESHOLD_BYTES,
    max_width: int = 1600,
) -> LocalImage:
    """Return *image* unchanged if it is small enough, else a shrunk JPEG copy."""
    if len(image.data) <= max_bytes:
        return image

    shrunk = compress_image(image.data, max_bytes, max_width)
    logger.info("Shrunk %s from %d to %d bytes", image.uri, len(image.data), len(shrunk))
    return replace(
        image,
        data=shrunk,
        filename=f"{Path(image.filename).stem}.jpg",
        content_type="image/jpeg",
    )
