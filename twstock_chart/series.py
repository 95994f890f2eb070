from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
import math

from twstock_chart.errors import EmptySeriesError, InvalidDataError


@dataclass(frozen=True)
class PerformancePoint:
    period: str
    period_label: str
    performance_percent: str


@dataclass(frozen=True)
class RevenuePoint:
    period: str
    period_label: str
    monthly_revenue: int
    yoy_growth_percent: float
    stock_price: float = 0.0
    latest_revenue: int = 0
    latest_yoy: float = 0.0


PerformanceSeries = Sequence[PerformancePoint]
RevenueSeries = Sequence[RevenuePoint]


def parse_percent(text: str) -> float:
    """Parse a signed percentage string such as ``"+3.25%"``."""
    raw = text.strip()
    if raw.endswith("%"):
        raw = raw[:-1].strip()
    try:
        value = float(raw)
    except ValueError as exc:
        raise InvalidDataError(f"invalid performance value: {text!r}") from exc
    if not math.isfinite(value):
        raise InvalidDataError(f"performance value is not finite: {text!r}")
    return value


def performance_values(series: PerformanceSeries) -> list[float]:
    if len(series) == 0:
        raise EmptySeriesError("no performance data to render")
    return [parse_percent(point.performance_percent) for point in series]


def revenue_columns(series: RevenueSeries) -> tuple[list[float], list[float]]:
    if len(series) == 0:
        raise EmptySeriesError("no revenue data to render")
    revenue: list[float] = []
    yoy: list[float] = []
    for i, point in enumerate(series):
        try:
            rv = float(point.monthly_revenue)
            gv = float(point.yoy_growth_percent)
        except (TypeError, ValueError) as exc:
            raise InvalidDataError(f"revenue point {i} ({point.period}) is not numeric") from exc
        if not math.isfinite(rv) or not math.isfinite(gv):
            raise InvalidDataError(f"revenue point {i} ({point.period}) is not finite")
        revenue.append(rv)
        yoy.append(gv)
    return revenue, yoy


def format_period(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y/%m")


def build_revenue_series(
    timestamps: Sequence[int],
    monthly_revenue: Sequence[int],
    yoy: Sequence[float],
    stock_prices: Sequence[float] | None = None,
) -> list[RevenuePoint]:
    """Zip the column arrays of a monthly revenue report into chart points.

    Every point carries the latest revenue and YoY so the chart header can be
    drawn from any element.
    """
    n = len(timestamps)
    if len(monthly_revenue) != n or len(yoy) != n:
        raise InvalidDataError(
            f"revenue column length mismatch: time={n} revenue={len(monthly_revenue)} yoy={len(yoy)}"
        )
    if stock_prices is None:
        stock_prices = [0.0] * n
    elif len(stock_prices) != n:
        raise InvalidDataError(f"stock price column length mismatch: {len(stock_prices)} != {n}")
    if n == 0:
        return []

    latest_revenue = int(monthly_revenue[-1])
    latest_yoy = float(yoy[-1])
    out: list[RevenuePoint] = []
    for ts, revenue, growth, price in zip(timestamps, monthly_revenue, yoy, stock_prices, strict=True):
        period = format_period(int(ts))
        out.append(
            RevenuePoint(
                period=period,
                period_label=period,
                monthly_revenue=int(revenue),
                yoy_growth_percent=float(growth),
                stock_price=float(price),
                latest_revenue=latest_revenue,
                latest_yoy=latest_yoy,
            )
        )
    return out
