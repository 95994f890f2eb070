from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from twstock_chart.config import RGBA, ChartPalette
from twstock_chart.fonts import ResolvedFont
from twstock_chart.raster import PixelCanvas, draw_line, draw_text, text_size
from twstock_chart.scales import Domain, grid_values, value_to_pixel_y


TICK_FONT_PX = 14.0
VALUE_ROW_FONT_PX = 12.0
LABEL_GAP_PX = 8


@dataclass(frozen=True)
class PlotArea:
    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    @classmethod
    def inset(cls, canvas_w: int, canvas_h: int, *, left: int, top: int, right: int, bottom: int) -> "PlotArea":
        return cls(
            left=left,
            top=top,
            width=max(1, canvas_w - left - right),
            height=max(1, canvas_h - top - bottom),
        )

    def y_for(self, value: float, domain: Domain) -> int:
        return value_to_pixel_y(value, domain.min, domain.max, self.top, self.height)

    def clamp_y(self, y: int) -> int:
        return max(self.top, min(self.bottom, y))


@dataclass(frozen=True)
class AxisScale:
    domain: Domain
    formatter: Callable[[float], str]
    caption: str = ""


class AxisRenderer:
    """Axis lines, gridlines and thinned tick labels for one plot area."""

    def __init__(
        self,
        canvas: PixelCanvas,
        font: ResolvedFont,
        palette: ChartPalette,
        *,
        grid_color: RGBA | None = None,
        divisions: int = 5,
    ) -> None:
        self.canvas = canvas
        self.font = font
        self.palette = palette
        self.grid_color = palette.grid if grid_color is None else grid_color
        self.divisions = divisions

    def draw_frame(self, area: PlotArea, *, dual: bool = False) -> None:
        axis = self.palette.axis
        draw_line(self.canvas, area.left, area.top, area.left, area.bottom, axis)
        draw_line(self.canvas, area.left, area.bottom, area.right, area.bottom, axis)
        if dual:
            draw_line(self.canvas, area.right, area.top, area.right, area.bottom, axis)

    def draw_y_axes(self, area: PlotArea, left: AxisScale, right: AxisScale | None = None, *, show_grid: bool = True) -> None:
        font = self.font.at(TICK_FONT_PX)
        left_values = grid_values(left.domain, self.divisions)
        right_values = grid_values(right.domain, self.divisions) if right is not None else None
        for i, value in enumerate(left_values):
            y = area.top + area.height * i // self.divisions
            if show_grid and 0 < i < self.divisions:
                draw_line(self.canvas, area.left, y, area.right, y, self.grid_color)
            label = left.formatter(value)
            w, h = text_size(label, font)
            draw_text(self.canvas, area.left - LABEL_GAP_PX - w, y - h // 2, label, self.palette.text, font)
            if right is not None and right_values is not None:
                rlabel = right.formatter(right_values[i])
                _, rh = text_size(rlabel, font)
                draw_text(self.canvas, area.right + LABEL_GAP_PX + 2, y - rh // 2, rlabel, self.palette.text, font)

    def draw_x_labels(
        self,
        area: PlotArea,
        xs: Sequence[int],
        labels: Sequence[str],
        visible: Sequence[int],
        *,
        show_grid: bool = True,
    ) -> None:
        font = self.font.at(TICK_FONT_PX)
        last = len(xs) - 1
        for i in visible:
            x = xs[i]
            if show_grid and 0 < i < last:
                draw_line(self.canvas, x, area.top, x, area.bottom, self.grid_color)
            w, _ = text_size(labels[i], font)
            draw_text(self.canvas, x - w // 2, area.bottom + 10, labels[i], self.palette.label, font)

    def draw_value_row(
        self,
        area: PlotArea,
        xs: Sequence[int],
        values: Sequence[float],
        visible: Sequence[int],
        formatter: Callable[[float], str],
    ) -> None:
        font = self.font.at(VALUE_ROW_FONT_PX)
        for i in visible:
            text = formatter(values[i])
            color = self.palette.fall if values[i] < 0 else self.palette.rise
            w, _ = text_size(text, font)
            draw_text(self.canvas, xs[i] - w // 2, area.bottom + 32, text, color, font)

    def draw_captions(
        self,
        area: PlotArea,
        *,
        x_caption: str,
        left: AxisScale,
        right: AxisScale | None = None,
        x_caption_gap: int = 50,
    ) -> None:
        font = self.font.at(TICK_FONT_PX)
        color = self.palette.label
        draw_text(self.canvas, area.right + x_caption_gap, area.bottom + 10, x_caption, color, font)
        if left.caption:
            _, h = text_size(left.caption, font)
            draw_text(self.canvas, area.left - 50, area.top - 10 - h, left.caption, color, font)
        if right is not None and right.caption:
            _, h = text_size(right.caption, font)
            draw_text(self.canvas, area.right + 20, area.top - 10 - h, right.caption, color, font)
