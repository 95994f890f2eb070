from .canvas import PixelCanvas
from .draw_lines import draw_dashed_line, draw_line, draw_polyline, draw_thick_line, line_points
from .draw_text import draw_text, text_size

__all__ = [
    "PixelCanvas",
    "draw_dashed_line",
    "draw_line",
    "draw_polyline",
    "draw_text",
    "draw_thick_line",
    "line_points",
    "text_size",
]
