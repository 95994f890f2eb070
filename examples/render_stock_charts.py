from __future__ import annotations

import argparse
from datetime import datetime
import logging
import math
from pathlib import Path
import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from twstock_chart import (
    BarChart,
    ChartConfig,
    LineChart,
    PerformancePoint,
    build_revenue_series,
    performance_chart_title,
    render_performance_chart,
    render_revenue_chart,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render sample stock performance and revenue charts.")
    parser.add_argument("--out-dir", default="chart_output")
    parser.add_argument("--name", default="台積電")
    parser.add_argument("--symbol", default="2330")
    parser.add_argument("--months", type=int, default=24)
    parser.add_argument("--font", action="append", default=[], help="font path or family name; repeatable")
    parser.add_argument("--no-grid", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args()


def _sample_performance(months: int) -> list[PerformancePoint]:
    points = []
    for i in range(months):
        period = f"{2023 + i // 12}/{i % 12 + 1:02d}"
        value = 12.0 * math.sin(i / 4.0) + 0.8 * i - 5.0
        points.append(PerformancePoint(period=period, period_label=period, performance_percent=f"{value:+.2f}%"))
    return points


def _sample_revenue(months: int):
    timestamps = [int(datetime(2023 + i // 12, i % 12 + 1, 15).timestamp()) for i in range(months)]
    revenue = [int(18_000_000 + 2_500_000 * math.sin(i / 3.0) + 350_000 * i) for i in range(months)]
    yoy = [round(18.0 * math.cos(i / 5.0) + 4.0, 2) for i in range(months)]
    prices = [round(520.0 + 9.5 * i, 1) for i in range(months)]
    return build_revenue_series(timestamps, revenue, yoy, prices)


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    months = max(1, args.months)
    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    extra = {"font_candidates": tuple(args.font)} if args.font else {}
    title = performance_chart_title(args.name, args.symbol)
    performance = _sample_performance(months)
    outputs = {
        "performance_line.png": render_performance_chart(
            performance, ChartConfig(title=title, kind=LineChart(), show_grid=not args.no_grid, **extra)
        ),
        "performance_bar.png": render_performance_chart(
            performance, ChartConfig(title=title, kind=BarChart(), show_grid=not args.no_grid, **extra)
        ),
        "revenue_combo.png": render_revenue_chart(
            _sample_revenue(months),
            args.name,
            symbol=args.symbol,
            config=ChartConfig(title=f"{args.name} ({args.symbol}) 月營收", show_grid=not args.no_grid, **extra),
        ),
    }
    for name, data in outputs.items():
        path = out_dir / name
        path.write_bytes(data)
        print(path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
