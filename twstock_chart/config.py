from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias


RGBA = tuple[int, int, int, int]

DEFAULT_PERFORMANCE_TITLE = "股票績效表現"

DEFAULT_FONT_CANDIDATES: tuple[str, ...] = (
    "Noto Sans TC Bold",
    "Noto Sans CJK TC Bold",
    "Noto Sans TC",
    "Noto Sans CJK TC",
)


@dataclass(frozen=True)
class LineChart:
    line_thickness: int = 3


@dataclass(frozen=True)
class BarChart:
    bar_fill_ratio: float = 0.8


@dataclass(frozen=True)
class ComboChart:
    bar_fill_ratio: float = 0.8
    line_thickness: int = 4
    marker_radius: int = 5


ChartKind: TypeAlias = LineChart | BarChart | ComboChart

SINGLE_AXIS_SIZE = (1200, 600)
COMBO_SIZE = (1400, 700)


@dataclass(frozen=True)
class ChartPalette:
    background: RGBA = (255, 255, 255, 255)
    combo_background: RGBA = (245, 245, 245, 255)
    text: RGBA = (15, 15, 15, 255)
    label: RGBA = (0, 0, 0, 255)
    axis: RGBA = (15, 15, 15, 255)
    grid: RGBA = (200, 200, 200, 255)
    combo_grid: RGBA = (0, 0, 0, 255)
    zero_line: RGBA = (100, 100, 100, 255)
    # Taiwan market convention: gains are red, losses are green.
    rise: RGBA = (180, 100, 100, 255)
    fall: RGBA = (100, 150, 120, 255)
    revenue_bar: RGBA = (100, 150, 120, 255)
    yoy_line: RGBA = (180, 100, 100, 255)
    yoy_text: RGBA = (180, 30, 40, 255)

    @classmethod
    def default(cls) -> "ChartPalette":
        return cls()


@dataclass(frozen=True)
class ChartConfig:
    title: str | None = None
    width: int | None = None
    height: int | None = None
    show_grid: bool = True
    show_legend: bool = True
    kind: ChartKind = field(default_factory=LineChart)
    font_candidates: tuple[str, ...] = DEFAULT_FONT_CANDIDATES
    max_x_labels: int = 10

    def __post_init__(self) -> None:
        if not isinstance(self.kind, (LineChart, BarChart, ComboChart)):
            raise ValueError(f"unsupported chart kind: {self.kind!r}")
        if self.width is not None and self.width <= 0:
            raise ValueError("width must be > 0")
        if self.height is not None and self.height <= 0:
            raise ValueError("height must be > 0")
        if self.max_x_labels < 2:
            raise ValueError("max_x_labels must be >= 2")
        object.__setattr__(self, "font_candidates", tuple(self.font_candidates))

    def resolved_size(self) -> tuple[int, int]:
        default_w, default_h = COMBO_SIZE if isinstance(self.kind, ComboChart) else SINGLE_AXIS_SIZE
        width = self.width if self.width is not None else default_w
        height = self.height if self.height is not None else default_h
        return (width, height)
