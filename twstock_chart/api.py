from __future__ import annotations

from dataclasses import replace
import logging

from twstock_chart.composer import ChartComposer, ComposedChart
from twstock_chart.config import DEFAULT_PERFORMANCE_TITLE, ChartConfig, ChartPalette, ComboChart
from twstock_chart.fonts import GlyphSource, default_glyph_source
from twstock_chart.png import encode_png
from twstock_chart.series import PerformanceSeries, RevenueSeries


LOGGER = logging.getLogger(__name__)


def performance_chart_title(stock_name: str, symbol: str) -> str:
    return f"{stock_name} ({symbol}) 績效表現"


def revenue_chart_title(stock_name: str, symbol: str | None = None) -> str:
    if symbol:
        return f"{stock_name} ({symbol}) 月營收"
    return f"{stock_name} 月營收"


def render_performance_chart(
    series: PerformanceSeries,
    config: ChartConfig | None = None,
    *,
    glyph_source: GlyphSource | None = None,
    palette: ChartPalette | None = None,
) -> bytes:
    """Render cumulative performance as a line or bar chart and return PNG bytes.

    Raises `EmptySeriesError` for an empty series, `InvalidDataError` when a
    percentage fails to parse and `EncodingError` if PNG serialization fails.
    """
    config = ChartConfig() if config is None else config
    if isinstance(config.kind, ComboChart):
        raise ValueError("performance charts support LineChart or BarChart only")
    if config.title is None:
        config = replace(config, title=DEFAULT_PERFORMANCE_TITLE)
    composer = ChartComposer(glyph_source or default_glyph_source(), palette)
    chart = composer.compose_performance(series, config)
    _log_render(chart, type(config.kind).__name__, len(series))
    return encode_png(chart.canvas)


def render_revenue_chart(
    series: RevenueSeries,
    stock_name: str,
    *,
    symbol: str | None = None,
    config: ChartConfig | None = None,
    glyph_source: GlyphSource | None = None,
    palette: ChartPalette | None = None,
) -> bytes:
    """Render monthly revenue bars with a YoY growth line on a second y-axis."""
    config = ChartConfig(kind=ComboChart()) if config is None else config
    if not isinstance(config.kind, ComboChart):
        config = replace(config, kind=ComboChart())
    if config.title is None:
        config = replace(config, title=revenue_chart_title(stock_name, symbol))
    composer = ChartComposer(glyph_source or default_glyph_source(), palette)
    chart = composer.compose_revenue(series, config, stock_name=stock_name, symbol=symbol)
    _log_render(chart, "ComboChart", len(series))
    return encode_png(chart.canvas)


def _log_render(chart: ComposedChart, kind: str, points: int) -> None:
    if chart.font.is_fallback:
        LOGGER.warning("no configured font could be loaded; using the embedded default font")
    LOGGER.debug(
        "rendered %s: %dx%d, %d points, %d x labels",
        kind,
        chart.canvas.width,
        chart.canvas.height,
        points,
        len(chart.layout.label_indices),
    )
