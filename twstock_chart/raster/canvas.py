from __future__ import annotations

import numpy as np

from twstock_chart.config import RGBA


class PixelCanvas:
    """Fixed-size RGBA buffer. Every write outside the canvas is dropped."""

    def __init__(self, width: int, height: int, background: RGBA = (255, 255, 255, 255)) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("canvas width/height must be > 0")
        self.width = int(width)
        self.height = int(height)
        self.pixels = np.zeros((self.height, self.width, 4), dtype=np.uint8)
        self.pixels[:, :] = np.asarray(background, dtype=np.uint8)

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def set_pixel(self, x: int, y: int, color: RGBA) -> None:
        if x < 0 or x >= self.width or y < 0 or y >= self.height:
            return
        if color[3] == 255:
            self.pixels[y, x] = color
            return
        a = color[3] / 255.0
        inv = 1.0 - a
        current = self.pixels[y, x, :3].astype(np.float32)
        self.pixels[y, x, 0:3] = (np.asarray(color[0:3], dtype=np.float32) * a + current * inv).astype(np.uint8)
        self.pixels[y, x, 3] = 255

    def fill_rect(self, x: int, y: int, width: int, height: int, color: RGBA) -> None:
        if width <= 0 or height <= 0:
            return
        x0 = max(0, int(x))
        y0 = max(0, int(y))
        x1 = min(self.width, int(x) + int(width))
        y1 = min(self.height, int(y) + int(height))
        if x1 <= x0 or y1 <= y0:
            return
        patch = self.pixels[y0:y1, x0:x1]
        if color[3] == 255:
            patch[:, :] = np.asarray(color, dtype=np.uint8)
            return
        a = color[3] / 255.0
        inv = 1.0 - a
        patch[:, :, :3] = (np.asarray(color[0:3], dtype=np.float32) * a + patch[:, :, :3].astype(np.float32) * inv).astype(np.uint8)
        patch[:, :, 3] = 255

    def fill_circle(self, cx: int, cy: int, radius: int, color: RGBA) -> None:
        r = max(0, int(radius))
        r2 = r * r
        for dy in range(-r, r + 1):
            for dx in range(-r, r + 1):
                if dx * dx + dy * dy <= r2:
                    self.set_pixel(cx + dx, cy + dy, color)

    def copy_pixels(self) -> np.ndarray:
        return self.pixels.copy()
