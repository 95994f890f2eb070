from __future__ import annotations

from collections.abc import Iterator, Sequence

from twstock_chart.config import RGBA
from twstock_chart.raster.canvas import PixelCanvas


DASH_ON_PX = 5
DASH_PERIOD_PX = 10


def line_points(x0: int, y0: int, x1: int, y1: int) -> Iterator[tuple[int, int]]:
    """Integer Bresenham walk from (x0, y0) to (x1, y1), both ends included.

    Both directions between the same endpoints cover the same pixels.
    """
    x0, y0, x1, y1 = int(x0), int(y0), int(x1), int(y1)
    if (x1, y1) < (x0, y0):
        yield from reversed(list(_bresenham(x1, y1, x0, y0)))
        return
    yield from _bresenham(x0, y0, x1, y1)


def _bresenham(x0: int, y0: int, x1: int, y1: int) -> Iterator[tuple[int, int]]:
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    while True:
        yield x0, y0
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def draw_line(canvas: PixelCanvas, x0: int, y0: int, x1: int, y1: int, color: RGBA) -> None:
    for x, y in line_points(x0, y0, x1, y1):
        canvas.set_pixel(x, y, color)


def draw_dashed_line(canvas: PixelCanvas, x0: int, y0: int, x1: int, y1: int, color: RGBA) -> None:
    for step, (x, y) in enumerate(line_points(x0, y0, x1, y1)):
        if step % DASH_PERIOD_PX < DASH_ON_PX:
            canvas.set_pixel(x, y, color)


def draw_thick_line(
    canvas: PixelCanvas,
    x0: int,
    y0: int,
    x1: int,
    y1: int,
    thickness: int,
    color: RGBA,
) -> None:
    width = max(1, int(thickness))
    mostly_horizontal = abs(x1 - x0) > abs(y1 - y0)
    for t in range(-(width // 2), width - width // 2):
        if mostly_horizontal:
            draw_line(canvas, x0, y0 + t, x1, y1 + t, color)
        else:
            draw_line(canvas, x0 + t, y0, x1 + t, y1, color)


def draw_polyline(
    canvas: PixelCanvas,
    xs: Sequence[int],
    ys: Sequence[int],
    color: RGBA,
    thickness: int = 1,
) -> None:
    if len(xs) != len(ys):
        raise ValueError("xs and ys length mismatch")
    for i in range(1, len(xs)):
        if thickness <= 1:
            draw_line(canvas, xs[i - 1], ys[i - 1], xs[i], ys[i], color)
        else:
            draw_thick_line(canvas, xs[i - 1], ys[i - 1], xs[i], ys[i], thickness, color)
