from __future__ import annotations

from functools import lru_cache

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from twstock_chart.config import RGBA
from twstock_chart.raster.canvas import PixelCanvas


PillowFont = ImageFont.FreeTypeFont | ImageFont.ImageFont


def draw_text(canvas: PixelCanvas, x: int, y: int, text: str, color: RGBA, font: PillowFont) -> None:
    """Draw `text` with its ink box's top-left corner at (x, y)."""
    if not text:
        return
    mask = _render_mask(text=text, font=font)
    _blend_mask(canvas.pixels, int(x), int(y), mask, color)


def text_size(text: str, font: PillowFont) -> tuple[int, int]:
    if not text:
        return (0, 1)
    left, top, right, bottom = font.getbbox(text)
    return (max(0, int(right - left)), max(1, int(bottom - top)))


def _blend_mask(dst: np.ndarray, x: int, y: int, mask: np.ndarray, color: RGBA) -> None:
    h, w = mask.shape
    if h <= 0 or w <= 0:
        return

    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(dst.shape[1], x + w)
    y1 = min(dst.shape[0], y + h)
    if x1 <= x0 or y1 <= y0:
        return

    sx0 = x0 - x
    sy0 = y0 - y
    cov = mask[sy0 : sy0 + (y1 - y0), sx0 : sx0 + (x1 - x0)].astype(np.float32) / 255.0
    src_alpha = (color[3] / 255.0) * cov
    if not np.any(src_alpha > 0):
        return

    patch = dst[y0:y1, x0:x1]
    src_rgb = np.asarray(color[:3], dtype=np.float32).reshape(1, 1, 3)
    dst_rgb = patch[:, :, :3].astype(np.float32)
    out_rgb = src_rgb * src_alpha[:, :, None] + dst_rgb * (1.0 - src_alpha[:, :, None])
    patch[:, :, :3] = np.clip(np.rint(out_rgb), 0, 255).astype(np.uint8)
    patch[:, :, 3] = 255


@lru_cache(maxsize=256)
def _render_mask(text: str, font: PillowFont) -> np.ndarray:
    left, top, right, bottom = font.getbbox(text)
    width = max(1, int(right - left))
    height = max(1, int(bottom - top))
    image = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(image)
    draw.text((-left, -top), text, fill=255, font=font)
    return np.asarray(image, dtype=np.uint8)
