from __future__ import annotations

from io import BytesIO

import numpy as np
from PIL import Image, UnidentifiedImageError

from twstock_chart.errors import EncodingError
from twstock_chart.raster.canvas import PixelCanvas


def encode_png(canvas: PixelCanvas | np.ndarray) -> bytes:
    pixels = canvas.pixels if isinstance(canvas, PixelCanvas) else canvas
    if pixels.ndim != 3 or pixels.shape[2] != 4 or pixels.dtype != np.uint8:
        raise EncodingError(f"expected an (h, w, 4) uint8 buffer, got {pixels.shape} {pixels.dtype}")
    buf = BytesIO()
    try:
        Image.fromarray(np.ascontiguousarray(pixels)).save(buf, format="PNG")
    except (OSError, ValueError, MemoryError) as exc:
        raise EncodingError(f"PNG encoding failed: {exc}") from exc
    return buf.getvalue()


def decode_png(data: bytes) -> np.ndarray:
    try:
        with Image.open(BytesIO(data)) as image:
            return np.asarray(image.convert("RGBA"), dtype=np.uint8).copy()
    except (OSError, UnidentifiedImageError) as exc:
        raise EncodingError(f"PNG decoding failed: {exc}") from exc
