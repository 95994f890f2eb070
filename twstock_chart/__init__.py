from twstock_chart.api import (
    performance_chart_title,
    render_performance_chart,
    render_revenue_chart,
    revenue_chart_title,
)
from twstock_chart.composer import ChartComposer, ChartLayout, ComposedChart
from twstock_chart.config import BarChart, ChartConfig, ChartKind, ChartPalette, ComboChart, LineChart
from twstock_chart.errors import ChartError, EmptySeriesError, EncodingError, InvalidDataError
from twstock_chart.fonts import GlyphSource, ResolvedFont, default_glyph_source
from twstock_chart.png import decode_png, encode_png
from twstock_chart.series import PerformancePoint, RevenuePoint, build_revenue_series

__all__ = [
    "BarChart",
    "ChartComposer",
    "ChartConfig",
    "ChartError",
    "ChartKind",
    "ChartLayout",
    "ChartPalette",
    "ComboChart",
    "ComposedChart",
    "EmptySeriesError",
    "EncodingError",
    "GlyphSource",
    "InvalidDataError",
    "LineChart",
    "PerformancePoint",
    "ResolvedFont",
    "RevenuePoint",
    "build_revenue_series",
    "decode_png",
    "default_glyph_source",
    "encode_png",
    "performance_chart_title",
    "render_performance_chart",
    "render_revenue_chart",
    "revenue_chart_title",
]
