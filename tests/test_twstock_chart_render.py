from __future__ import annotations

import unittest

import numpy as np

from twstock_chart import (
    BarChart,
    ChartComposer,
    ChartConfig,
    ChartPalette,
    ComboChart,
    EmptySeriesError,
    EncodingError,
    GlyphSource,
    InvalidDataError,
    LineChart,
    PerformancePoint,
    RevenuePoint,
    decode_png,
    encode_png,
    render_performance_chart,
    render_revenue_chart,
    revenue_chart_title,
)
from twstock_chart.config import DEFAULT_PERFORMANCE_TITLE
from twstock_chart.raster import PixelCanvas


PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _performance(values: list[str]) -> list[PerformancePoint]:
    out = []
    for i, value in enumerate(values):
        period = f"{2020 + i // 12}/{i % 12 + 1:02d}"
        out.append(PerformancePoint(period=period, period_label=period, performance_percent=value))
    return out


def _revenue(revenue: list[int], yoy: list[float]) -> list[RevenuePoint]:
    out = []
    for i, (rv, growth) in enumerate(zip(revenue, yoy)):
        period = f"2024/{i % 12 + 1:02d}"
        out.append(
            RevenuePoint(
                period=period,
                period_label=period,
                monthly_revenue=rv,
                yoy_growth_percent=growth,
                stock_price=100.0 + i,
                latest_revenue=revenue[-1],
                latest_yoy=yoy[-1],
            )
        )
    return out


class PerformanceChartTests(unittest.TestCase):
    def setUp(self) -> None:
        self.glyphs = GlyphSource(strategies=())
        self.palette = ChartPalette.default()
        self.composer = ChartComposer(self.glyphs, self.palette)

    def test_render_returns_png_with_requested_size(self) -> None:
        series = _performance(["+3.00%", "-1.50%", "+0.25%"])
        for kind in (LineChart(), BarChart()):
            config = ChartConfig(title="台積電 (2330) 績效表現", width=800, height=450, kind=kind)
            data = render_performance_chart(series, config, glyph_source=self.glyphs)
            self.assertTrue(data.startswith(PNG_SIGNATURE))
            self.assertEqual(decode_png(data).shape, (450, 800, 4))

    def test_default_size_for_single_axis_charts(self) -> None:
        data = render_performance_chart(_performance(["+1.00%"]), glyph_source=self.glyphs)
        self.assertEqual(decode_png(data).shape, (600, 1200, 4))

    def test_line_chart_draws_dashed_zero_line_when_domain_straddles_zero(self) -> None:
        series = _performance(["+3.00%", "-1.50%"])
        chart = self.composer.compose_performance(series, ChartConfig(kind=LineChart()))
        zero_y = chart.layout.zero_line_y
        self.assertIsNotNone(zero_y)
        area = chart.layout.area
        self.assertTrue(area.top < zero_y < area.bottom)
        self.assertEqual(tuple(chart.canvas.pixels[zero_y, area.left + 2]), self.palette.zero_line)
        self.assertEqual(tuple(chart.canvas.pixels[zero_y, area.left + 7]), self.palette.background)

    def test_line_chart_without_negative_values_has_no_zero_line(self) -> None:
        chart = self.composer.compose_performance(_performance(["+1.00%", "+4.00%"]), ChartConfig())
        self.assertIsNone(chart.layout.zero_line_y)

    def test_line_chart_connects_points(self) -> None:
        chart = self.composer.compose_performance(_performance(["+1.00%", "+4.00%", "+2.00%"]), ChartConfig())
        layout = chart.layout
        mid_x = (layout.xs[0] + layout.xs[1]) // 2
        column = chart.canvas.pixels[layout.area.top : layout.area.bottom, mid_x]
        hits = np.all(column == np.asarray(self.palette.rise, dtype=np.uint8), axis=1)
        self.assertGreaterEqual(int(hits.sum()), 3)

    def test_bar_chart_grows_from_zero_baseline(self) -> None:
        series = _performance(["+3.00%", "-1.50%"])
        chart = self.composer.compose_performance(series, ChartConfig(kind=BarChart(), show_legend=False))
        layout = chart.layout
        baseline = layout.area.y_for(0.0, layout.left_domain)
        pixels = chart.canvas.pixels
        self.assertEqual(tuple(pixels[baseline - 3, layout.xs[0]]), self.palette.rise)
        self.assertEqual(tuple(pixels[baseline + 3, layout.xs[1]]), self.palette.fall)
        self.assertNotEqual(tuple(pixels[baseline + 3, layout.xs[0]]), self.palette.rise)
        self.assertNotEqual(tuple(pixels[baseline - 3, layout.xs[1]]), self.palette.fall)

    def test_single_point_series_renders(self) -> None:
        chart = self.composer.compose_performance(_performance(["+2.00%"]), ChartConfig())
        self.assertEqual(chart.layout.xs, (chart.layout.area.left,))
        self.assertEqual(chart.layout.label_indices, (0,))

    def test_dense_series_thins_labels(self) -> None:
        values = [f"{np.sin(i / 5.0) * 10:+.2f}%" for i in range(60)]
        chart = self.composer.compose_performance(_performance(values), ChartConfig())
        indices = chart.layout.label_indices
        self.assertLessEqual(len(indices), 10)
        self.assertEqual(indices[0], 0)
        self.assertEqual(indices[-1], 59)

        few = self.composer.compose_performance(_performance(["+1%", "+2%", "+3%", "+4%", "+5%"]), ChartConfig())
        self.assertEqual(few.layout.label_indices, (0, 1, 2, 3, 4))

    def test_extreme_values_stay_on_canvas(self) -> None:
        series = _performance(["+1e12%", "-1e12%", "+0.00%"])
        data = render_performance_chart(series, ChartConfig(width=300, height=200), glyph_source=self.glyphs)
        self.assertEqual(decode_png(data).shape, (200, 300, 4))

    def test_flat_series_at_large_magnitude_renders(self) -> None:
        series = _performance(["+1e17%", "+1e17%"])
        chart = self.composer.compose_performance(series, ChartConfig(width=300, height=200))
        domain = chart.layout.left_domain
        self.assertLess(domain.min, 1e17)
        self.assertGreater(domain.max, 1e17)
        data = render_performance_chart(series, ChartConfig(width=300, height=200), glyph_source=self.glyphs)
        self.assertEqual(decode_png(data).shape, (200, 300, 4))

    def test_range_wider_than_float64_raises_invalid_data(self) -> None:
        series = _performance(["+1e308%", "-1e308%"])
        for kind in (LineChart(), BarChart()):
            with self.assertRaises(InvalidDataError):
                render_performance_chart(series, ChartConfig(kind=kind), glyph_source=self.glyphs)

    def test_size_only_config_keeps_performance_title(self) -> None:
        series = _performance(["+3.00%", "-1.50%"])
        sized = render_performance_chart(series, ChartConfig(width=640, height=360), glyph_source=self.glyphs)
        titled = render_performance_chart(
            series, ChartConfig(title=DEFAULT_PERFORMANCE_TITLE, width=640, height=360), glyph_source=self.glyphs
        )
        self.assertEqual(sized, titled)

    def test_empty_series_raises(self) -> None:
        with self.assertRaises(EmptySeriesError):
            render_performance_chart([], glyph_source=self.glyphs)

    def test_invalid_percentage_raises(self) -> None:
        with self.assertRaises(InvalidDataError):
            render_performance_chart(_performance(["+1.00%", "abc%"]), glyph_source=self.glyphs)

    def test_combo_kind_is_rejected_for_performance(self) -> None:
        with self.assertRaises(ValueError):
            render_performance_chart(_performance(["+1%"]), ChartConfig(kind=ComboChart()), glyph_source=self.glyphs)

    def test_rendering_is_deterministic(self) -> None:
        series = _performance(["+3.00%", "-1.50%", "+7.75%", "+2.00%"])
        first = render_performance_chart(series, glyph_source=self.glyphs)
        second = render_performance_chart(series, glyph_source=self.glyphs)
        self.assertEqual(first, second)


class RevenueChartTests(unittest.TestCase):
    def setUp(self) -> None:
        self.glyphs = GlyphSource(strategies=())
        self.palette = ChartPalette.default()
        self.composer = ChartComposer(self.glyphs, self.palette)

    def test_revenue_chart_defaults_to_combo_size(self) -> None:
        series = _revenue([180_000_000, 200_000_000, 236_000_000], [10.5, -3.2, 25.0])
        data = render_revenue_chart(series, "台積電", symbol="2330", glyph_source=self.glyphs)
        self.assertEqual(decode_png(data).shape, (700, 1400, 4))

    def test_non_combo_config_is_rendered_as_combo(self) -> None:
        series = _revenue([100, 200], [1.0, 2.0])
        config = ChartConfig(title="x", width=900, height=500, kind=LineChart())
        data = render_revenue_chart(series, "Demo", config=config, glyph_source=self.glyphs)
        self.assertEqual(decode_png(data).shape, (500, 900, 4))

    def test_dual_scales_are_independent(self) -> None:
        series = _revenue([100_000, 300_000, 200_000], [-20.0, 40.0, 5.0])
        chart = self.composer.compose_revenue(series, ChartConfig(kind=ComboChart()), stock_name="Demo", symbol="0000")
        layout = chart.layout
        self.assertEqual(layout.left_domain.min, 0.0)
        self.assertIsNotNone(layout.right_domain)
        assert layout.right_domain is not None
        self.assertLess(layout.right_domain.min, -20.0)
        self.assertIsNotNone(layout.zero_line_y)

    def test_bars_and_markers_share_slot_centers(self) -> None:
        series = _revenue([100_000, 300_000, 200_000], [10.0, 20.0, 15.0])
        chart = self.composer.compose_revenue(
            series, ChartConfig(kind=ComboChart(), show_legend=False), stock_name="Demo"
        )
        layout = chart.layout
        slot = layout.area.width / 3
        for i, x in enumerate(layout.xs):
            self.assertAlmostEqual(x, layout.area.left + slot * (i + 0.5), delta=1.5)
        baseline = layout.area.y_for(0.0, layout.left_domain)
        self.assertEqual(baseline, layout.area.bottom)
        self.assertEqual(tuple(chart.canvas.pixels[baseline - 2, layout.xs[1] - 10]), self.palette.revenue_bar)
        assert layout.right_domain is not None
        marker_y = layout.area.y_for(20.0, layout.right_domain)
        self.assertEqual(tuple(chart.canvas.pixels[marker_y, layout.xs[1]]), self.palette.yoy_line)

    def test_all_zero_revenue_renders(self) -> None:
        series = _revenue([0, 0, 0], [0.0, 0.0, 0.0])
        chart = self.composer.compose_revenue(series, ChartConfig(kind=ComboChart()), stock_name="Demo")
        self.assertEqual(chart.layout.left_domain.min, 0.0)
        self.assertGreater(chart.layout.left_domain.max, 0.0)
        data = render_revenue_chart(series, "Demo", glyph_source=self.glyphs)
        self.assertTrue(data.startswith(PNG_SIGNATURE))

    def test_negative_revenue_is_drawn_below_baseline(self) -> None:
        series = _revenue([-50_000, 200_000], [1.0, 2.0])
        chart = self.composer.compose_revenue(
            series, ChartConfig(kind=ComboChart(), show_legend=False), stock_name="Demo"
        )
        layout = chart.layout
        baseline = layout.area.y_for(0.0, layout.left_domain)
        self.assertLess(baseline, layout.area.bottom)
        self.assertEqual(tuple(chart.canvas.pixels[baseline + 2, layout.xs[0] - 10]), self.palette.revenue_bar)

    def test_size_only_config_uses_revenue_title(self) -> None:
        series = _revenue([100_000, 200_000], [1.0, 2.0])
        sized = render_revenue_chart(
            series, "Demo", symbol="0050", config=ChartConfig(width=900, height=500), glyph_source=self.glyphs
        )
        titled = render_revenue_chart(
            series,
            "Demo",
            symbol="0050",
            config=ChartConfig(title=revenue_chart_title("Demo", "0050"), width=900, height=500),
            glyph_source=self.glyphs,
        )
        untitled = render_revenue_chart(
            series, "Demo", symbol="0050", config=ChartConfig(title="", width=900, height=500), glyph_source=self.glyphs
        )
        self.assertEqual(sized, titled)
        self.assertNotEqual(sized, untitled)

    def test_empty_revenue_series_raises(self) -> None:
        with self.assertRaises(EmptySeriesError):
            render_revenue_chart([], "Demo", glyph_source=self.glyphs)

    def test_thirteen_months_thin_labels(self) -> None:
        series = _revenue([100_000 + i * 1_000 for i in range(13)], [float(i) for i in range(13)])
        chart = self.composer.compose_revenue(series, ChartConfig(kind=ComboChart()), stock_name="Demo")
        indices = chart.layout.label_indices
        self.assertLessEqual(len(indices), 10)
        self.assertEqual((indices[0], indices[-1]), (0, 12))


class PngCodecTests(unittest.TestCase):
    def test_round_trip_is_lossless(self) -> None:
        canvas = PixelCanvas(37, 23, background=(245, 245, 245, 255))
        rng = np.random.default_rng(3)
        canvas.pixels[:, :, :3] = rng.integers(0, 256, size=(23, 37, 3), dtype=np.uint8)
        self.assertTrue(np.array_equal(decode_png(encode_png(canvas)), canvas.pixels))

    def test_rendered_chart_round_trip(self) -> None:
        composer = ChartComposer(GlyphSource(strategies=()))
        chart = composer.compose_performance(_performance(["+3.00%", "-1.50%"]), ChartConfig(width=400, height=300))
        self.assertTrue(np.array_equal(decode_png(encode_png(chart.canvas)), chart.canvas.pixels))

    def test_encoding_rejects_bad_buffers(self) -> None:
        with self.assertRaises(EncodingError):
            encode_png(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_decoding_garbage_raises(self) -> None:
        with self.assertRaises(EncodingError):
            decode_png(b"not a png")


if __name__ == "__main__":
    unittest.main()
