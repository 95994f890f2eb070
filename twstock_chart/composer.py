from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from twstock_chart.axis import AxisRenderer, AxisScale, PlotArea
from twstock_chart.config import RGBA, BarChart, ChartConfig, ChartPalette, ComboChart, LineChart
from twstock_chart.fonts import GlyphSource, ResolvedFont
from twstock_chart.raster import PixelCanvas, draw_dashed_line, draw_polyline, draw_text, draw_thick_line, text_size
from twstock_chart.scales import (
    THOUSANDS_PER_HUNDRED_MILLION,
    Domain,
    compute_domain,
    compute_revenue_domain,
    format_hundred_million,
    format_percent,
    format_revenue_axis,
    index_to_pixel_x,
    visible_label_indices,
)
from twstock_chart.series import PerformanceSeries, RevenuePoint, RevenueSeries, performance_values, revenue_columns


TITLE_FONT_PX = 18.0
LEGEND_FONT_PX = 14.0
HIGHLIGHT_FONT_PX = 16.0
ANNOTATION_FONT_PX = 14.0
YOY_FONT_PX = 16.0
HEADER_FONT_PX = 16.0
LEGEND_BOTTOM_OFFSET = 60
HEADER_RIGHT_OFFSET = 300


@dataclass(frozen=True)
class ChartLayout:
    area: PlotArea
    left_domain: Domain
    right_domain: Domain | None
    xs: tuple[int, ...]
    label_indices: tuple[int, ...]
    zero_line_y: int | None


@dataclass(frozen=True)
class ComposedChart:
    canvas: PixelCanvas
    layout: ChartLayout
    font: ResolvedFont


@dataclass(frozen=True)
class _LegendEntry:
    label: str
    color: RGBA
    style: str  # "swatch" | "line" | "line+marker"


class ChartComposer:
    """Draws performance and revenue charts onto a fresh canvas per call."""

    def __init__(self, glyphs: GlyphSource, palette: ChartPalette | None = None) -> None:
        self.glyphs = glyphs
        self.palette = ChartPalette.default() if palette is None else palette

    def compose_performance(self, series: PerformanceSeries, config: ChartConfig) -> ComposedChart:
        kind = config.kind
        if isinstance(kind, ComboChart):
            raise ValueError("performance charts support LineChart or BarChart only")
        values = performance_values(series)
        labels = [point.period_label for point in series]

        width, height = config.resolved_size()
        canvas = PixelCanvas(width, height, self.palette.background)
        font = self.glyphs.resolve(config.font_candidates)
        area = PlotArea.inset(width, height, left=120, top=100, right=180, bottom=140)
        axes = AxisRenderer(canvas, font, self.palette)

        if isinstance(kind, BarChart):
            domain = compute_domain([*values, 0.0])
            xs = _slot_centers(len(values), area)
        else:
            domain = compute_domain(values)
            xs = [index_to_pixel_x(i, len(values), area.left, area.width) for i in range(len(values))]
        visible = visible_label_indices(len(values), config.max_x_labels)
        scale = AxisScale(domain=domain, formatter=lambda v: format_percent(v, 1), caption="Performance (%)")

        self._draw_title(canvas, font, config.title)
        axes.draw_frame(area)
        axes.draw_y_axes(area, scale, show_grid=config.show_grid)
        axes.draw_x_labels(area, xs, labels, visible, show_grid=config.show_grid)
        axes.draw_value_row(area, xs, values, visible, lambda v: format_percent(v, 2))

        zero_y = None
        if domain.straddles_zero():
            zero_y = area.y_for(0.0, domain)
            draw_dashed_line(canvas, area.left, zero_y, area.right, zero_y, self.palette.zero_line)

        if isinstance(kind, LineChart):
            self._draw_performance_line(canvas, font, area, domain, xs, values, kind)
            legend = [_LegendEntry("累計績效", self.palette.rise, "line")]
        elif isinstance(kind, BarChart):
            self._draw_performance_bars(canvas, area, domain, xs, values, kind)
            legend = [
                _LegendEntry("正報酬", self.palette.rise, "swatch"),
                _LegendEntry("負報酬", self.palette.fall, "swatch"),
            ]
        else:
            raise ValueError(f"unsupported chart kind: {kind!r}")

        axes.draw_captions(area, x_caption="Time", left=scale)
        value_font = font.at(12.0)
        draw_text(canvas, area.right + 50, area.bottom + 32, "累計績效", self.palette.label, value_font)
        if config.show_legend:
            self._draw_legend(canvas, font, area.left, height - LEGEND_BOTTOM_OFFSET, legend)

        layout = ChartLayout(
            area=area,
            left_domain=domain,
            right_domain=None,
            xs=tuple(xs),
            label_indices=tuple(visible),
            zero_line_y=zero_y,
        )
        return ComposedChart(canvas=canvas, layout=layout, font=font)

    def compose_revenue(
        self,
        series: RevenueSeries,
        config: ChartConfig,
        *,
        stock_name: str,
        symbol: str | None = None,
    ) -> ComposedChart:
        kind = config.kind
        if not isinstance(kind, ComboChart):
            raise ValueError("revenue charts are rendered as ComboChart")
        revenue, yoy = revenue_columns(series)
        labels = [point.period_label for point in series]

        width, height = config.resolved_size()
        canvas = PixelCanvas(width, height, self.palette.combo_background)
        font = self.glyphs.resolve(config.font_candidates)
        area = PlotArea.inset(width, height, left=120, top=120, right=220, bottom=130)
        axes = AxisRenderer(canvas, font, self.palette, grid_color=self.palette.combo_grid)

        revenue_domain = compute_revenue_domain(revenue, flat_margin=float(THOUSANDS_PER_HUNDRED_MILLION))
        yoy_domain = compute_domain(yoy, flat_margin=10.0)
        xs = _slot_centers(len(series), area)
        visible = visible_label_indices(len(series), config.max_x_labels)
        left = AxisScale(domain=revenue_domain, formatter=format_revenue_axis, caption="營收 (億)")
        right = AxisScale(domain=yoy_domain, formatter=lambda v: format_percent(v, 0), caption="YoY (%)")

        self._draw_title(canvas, font, config.title)
        self._draw_revenue_header(canvas, font, series[-1], stock_name, symbol)
        axes.draw_frame(area, dual=True)
        axes.draw_y_axes(area, left, right, show_grid=config.show_grid)
        axes.draw_x_labels(area, xs, labels, visible, show_grid=config.show_grid)

        self._draw_revenue_bars(canvas, font, area, revenue_domain, xs, revenue, kind)

        zero_y = None
        if yoy_domain.straddles_zero():
            zero_y = area.y_for(0.0, yoy_domain)
            draw_dashed_line(canvas, area.left, zero_y, area.right, zero_y, self.palette.zero_line)
        self._draw_yoy_line(canvas, font, area, yoy_domain, xs, yoy, kind)

        axes.draw_captions(area, x_caption="Time", left=left, right=right, x_caption_gap=80)
        if config.show_legend:
            legend = [
                _LegendEntry("營收", self.palette.revenue_bar, "swatch"),
                _LegendEntry("YoY", self.palette.yoy_line, "line+marker"),
            ]
            self._draw_legend(canvas, font, area.left, height - LEGEND_BOTTOM_OFFSET, legend)

        layout = ChartLayout(
            area=area,
            left_domain=revenue_domain,
            right_domain=yoy_domain,
            xs=tuple(xs),
            label_indices=tuple(visible),
            zero_line_y=zero_y,
        )
        return ComposedChart(canvas=canvas, layout=layout, font=font)

    def _draw_title(self, canvas: PixelCanvas, font: ResolvedFont, title: str | None) -> None:
        if not title:
            return
        title_font = font.at(TITLE_FONT_PX)
        w, h = text_size(title, title_font)
        baseline = canvas.height * 8 // 100
        draw_text(canvas, (canvas.width - w) // 2, max(0, baseline - h), title, self.palette.text, title_font)

    def _draw_performance_line(
        self,
        canvas: PixelCanvas,
        font: ResolvedFont,
        area: PlotArea,
        domain: Domain,
        xs: Sequence[int],
        values: Sequence[float],
        kind: LineChart,
    ) -> None:
        ys = [area.y_for(v, domain) for v in values]
        draw_polyline(canvas, xs, ys, self.palette.rise, thickness=kind.line_thickness)

        hi = max(range(len(values)), key=values.__getitem__)
        lo = min(range(len(values)), key=values.__getitem__)
        label_font = font.at(HIGHLIGHT_FONT_PX)
        hi_text = f"最高: {values[hi]:.2f}%"
        w, h = text_size(hi_text, label_font)
        canvas.fill_circle(xs[hi], ys[hi], 4, self.palette.rise)
        draw_text(canvas, xs[hi] - w // 2, ys[hi] - 12 - h, hi_text, self.palette.rise, label_font)
        lo_text = f"最低: {values[lo]:.2f}%"
        w, _ = text_size(lo_text, label_font)
        canvas.fill_circle(xs[lo], ys[lo], 4, self.palette.fall)
        draw_text(canvas, xs[lo] - w // 2, ys[lo] + 12, lo_text, self.palette.fall, label_font)

    def _draw_performance_bars(
        self,
        canvas: PixelCanvas,
        area: PlotArea,
        domain: Domain,
        xs: Sequence[int],
        values: Sequence[float],
        kind: BarChart,
    ) -> None:
        bar_w = _bar_width(len(values), area, kind.bar_fill_ratio)
        baseline = area.clamp_y(area.y_for(0.0, domain))
        for x, value in zip(xs, values, strict=True):
            y = area.clamp_y(area.y_for(value, domain))
            if value >= 0:
                canvas.fill_rect(x - bar_w // 2, y, bar_w, baseline - y, self.palette.rise)
            else:
                canvas.fill_rect(x - bar_w // 2, baseline, bar_w, y - baseline, self.palette.fall)

    def _draw_revenue_bars(
        self,
        canvas: PixelCanvas,
        font: ResolvedFont,
        area: PlotArea,
        domain: Domain,
        xs: Sequence[int],
        revenue: Sequence[float],
        kind: ComboChart,
    ) -> None:
        bar_w = _bar_width(len(revenue), area, kind.bar_fill_ratio)
        baseline = area.clamp_y(area.y_for(0.0, domain))
        text_font = font.at(ANNOTATION_FONT_PX)
        for x, value in zip(xs, revenue, strict=True):
            y = area.clamp_y(area.y_for(value, domain))
            if value >= 0:
                canvas.fill_rect(x - bar_w // 2, y, bar_w, baseline - y, self.palette.revenue_bar)
            else:
                canvas.fill_rect(x - bar_w // 2, baseline, bar_w, y - baseline, self.palette.revenue_bar)
            if value <= 0:
                continue
            text = format_hundred_million(value)
            w, h = text_size(text, text_font)
            text_bottom = max(y - 5, area.top + 15)
            draw_text(canvas, x - w // 2, text_bottom - h, text, self.palette.text, text_font)

    def _draw_yoy_line(
        self,
        canvas: PixelCanvas,
        font: ResolvedFont,
        area: PlotArea,
        domain: Domain,
        xs: Sequence[int],
        yoy: Sequence[float],
        kind: ComboChart,
    ) -> None:
        ys = [area.y_for(v, domain) for v in yoy]
        draw_polyline(canvas, xs, ys, self.palette.yoy_line, thickness=kind.line_thickness)
        text_font = font.at(YOY_FONT_PX)
        for x, y, value in zip(xs, ys, yoy, strict=True):
            canvas.fill_circle(x, y, kind.marker_radius, self.palette.yoy_line)
            text = format_percent(value, 1)
            w, h = text_size(text, text_font)
            if y - 15 < area.top + 15:
                top = y + kind.marker_radius + 8
            else:
                top = y - 15 - h
            draw_text(canvas, x - w // 2, top, text, self.palette.yoy_text, text_font)

    def _draw_revenue_header(
        self,
        canvas: PixelCanvas,
        font: ResolvedFont,
        latest: RevenuePoint,
        stock_name: str,
        symbol: str | None,
    ) -> None:
        header_font = font.at(HEADER_FONT_PX)
        x = max(0, canvas.width - HEADER_RIGHT_OFFSET)
        stock_text = f"{stock_name} ({symbol})" if symbol else stock_name
        draw_text(canvas, x, 12, stock_text, self.palette.text, header_font)
        revenue_text = f"{latest.period_label} 營收: {format_hundred_million(latest.latest_revenue)}億"
        draw_text(canvas, x, 42, revenue_text, self.palette.text, header_font)
        draw_text(canvas, x, 72, f"YoY: {latest.latest_yoy:.2f}%", self.palette.yoy_text, header_font)

    def _draw_legend(
        self,
        canvas: PixelCanvas,
        font: ResolvedFont,
        x: int,
        y: int,
        entries: Sequence[_LegendEntry],
    ) -> None:
        legend_font = font.at(LEGEND_FONT_PX)
        cursor = x
        mid = y + 7
        for entry in entries:
            if entry.style == "swatch":
                canvas.fill_rect(cursor, y, 15, 15, entry.color)
                sample_w = 15
            else:
                draw_thick_line(canvas, cursor, mid, cursor + 30, mid, 4, entry.color)
                if entry.style == "line+marker":
                    canvas.fill_circle(cursor + 15, mid, 5, entry.color)
                sample_w = 30
            w, h = text_size(entry.label, legend_font)
            draw_text(canvas, cursor + sample_w + 10, mid - h // 2, entry.label, self.palette.label, legend_font)
            cursor += sample_w + 10 + w + 30


def _slot_width(count: int, area: PlotArea) -> float:
    return area.width / max(1, count)


def _slot_centers(count: int, area: PlotArea) -> list[int]:
    inset = int(_slot_width(count, area) / 2)
    return [index_to_pixel_x(i, count, area.left + inset, area.width - 2 * inset) for i in range(count)]


def _bar_width(count: int, area: PlotArea, ratio: float) -> int:
    return max(1, int(_slot_width(count, area) * ratio))
