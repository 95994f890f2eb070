from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import math

import numpy as np

from twstock_chart.errors import EmptySeriesError, InvalidDataError


# 億 = 100,000,000 NT$; revenue figures arrive in thousands of NT$.
THOUSANDS_PER_HUNDRED_MILLION = 100_000
RELATIVE_MARGIN = 1e-9


@dataclass(frozen=True)
class Domain:
    min: float
    max: float

    @property
    def span(self) -> float:
        return self.max - self.min

    def straddles_zero(self) -> bool:
        return self.min < 0.0 < self.max


def _finite_bounds(values: Sequence[float]) -> tuple[float, float]:
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        raise EmptySeriesError("cannot compute a domain for an empty series")
    if not np.all(np.isfinite(arr)):
        raise ValueError("domain values must be finite")
    return float(np.min(arr)), float(np.max(arr))


def _padded(lower: float, upper: float, pad: float, flat_margin: float, *, pad_lower: bool = True) -> Domain:
    if pad == 0.0:
        pad = flat_margin
    lo = lower - pad if pad_lower else lower
    hi = upper + pad
    # At large magnitudes the pad can vanish in float64 rounding.
    if pad_lower and lo == lower:
        lo = lower - max(flat_margin, abs(lower) * RELATIVE_MARGIN)
    if hi == upper:
        hi = upper + max(flat_margin, abs(upper) * RELATIVE_MARGIN)
    if not math.isfinite(hi - lo):
        raise InvalidDataError(f"value range [{lower:g}, {upper:g}] is too wide to plot")
    return Domain(min=lo, max=hi)


def compute_domain(values: Sequence[float], padding_ratio: float = 0.1, flat_margin: float = 1.0) -> Domain:
    vmin, vmax = _finite_bounds(values)
    return _padded(vmin, vmax, (vmax - vmin) * padding_ratio, flat_margin)


def compute_revenue_domain(values: Sequence[float], padding_ratio: float = 0.1, flat_margin: float = 1.0) -> Domain:
    """Domain for bar series that grow from a true zero baseline."""
    vmin, vmax = _finite_bounds(values)
    if vmin >= 0.0:
        lower = 0.0
    else:
        lower = vmin - (max(vmax, 0.0) - vmin) * padding_ratio
    top = max(vmax, 0.0)
    return _padded(lower, top, (top - lower) * padding_ratio, flat_margin, pad_lower=False)


def value_to_pixel_y(value: float, domain_min: float, domain_max: float, pixel_top: int, pixel_height: int) -> int:
    span = domain_max - domain_min
    if not span > 0.0:
        raise ValueError("domain_max must be > domain_min")
    offset = (value - domain_min) / span * pixel_height
    return int(pixel_top + pixel_height - int(round(offset)))


def index_to_pixel_x(i: int, n: int, pixel_left: int, pixel_width: int) -> int:
    if n <= 1:
        return int(pixel_left)
    return int(pixel_left + (pixel_width * i) // (n - 1))


def grid_values(domain: Domain, divisions: int = 5) -> list[float]:
    """Gridline values from the top of the plot (domain max) down to the bottom."""
    if divisions <= 0:
        raise ValueError("divisions must be > 0")
    return [domain.max - domain.span * i / divisions for i in range(divisions + 1)]


def label_stride(count: int, max_labels: int = 10) -> int:
    if max_labels < 2:
        raise ValueError("max_labels must be >= 2")
    if count <= max_labels:
        return 1
    return math.ceil((count - 1) / (max_labels - 1))


def visible_label_indices(count: int, max_labels: int = 10) -> list[int]:
    """Indices of x labels to draw for a series of `count` points.

    Multiples of the stride are kept and the last point is always shown; when
    it sits closer than half a stride to the previous label, that label yields.
    """
    if count <= 0:
        return []
    stride = label_stride(count, max_labels)
    last = count - 1
    indices = list(range(0, count, stride))
    if indices[-1] != last:
        if len(indices) > 1 and last - indices[-1] < stride / 2:
            indices.pop()
        indices.append(last)
    return indices


def format_percent(value: float, decimals: int = 1) -> str:
    text = f"{value:.{decimals}f}%"
    if text.startswith("-") and float(text[1:-1]) == 0.0:
        text = text[1:]
    return text


def format_hundred_million(thousands: float) -> str:
    return f"{thousands / THOUSANDS_PER_HUNDRED_MILLION:.0f}"


def format_revenue_axis(thousands: float) -> str:
    return f"{format_hundred_million(thousands)}億"
