"""Text placement inside a field box, in document space.

Both the generated PDF and the raster preview place text through these
functions; only the width measurement differs between them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Tuple

from formlayer.geometry import Geometry
from formlayer.style import EffectiveStyle
from formlayer.textfit import DEFAULT_CURVE, FitCurve, fit_font_size

TEXT_INSET = 2.0
WRAP_INSET = 4.0
LINE_HEIGHT = 1.15
CHECK_FILL = 0.8

# Width of a string in document units at the size being laid out.
Measure = Callable[[str], float]


@dataclass(frozen=True, slots=True)
class PlacedLine:
    text: str
    x: float
    y: float  # baseline


def wrap_lines(text: str, max_width: float, measure: Measure) -> List[str]:
    """Greedy wrap on spaces only; explicit line breaks always start a new line.

    A single word wider than ``max_width`` keeps its own line unbroken.
    """
    lines: List[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split(" "):
            candidate = f"{current} {word}" if current else word
            if not current or measure(candidate) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
    return lines


def _aligned_x(geometry: Geometry, line: str, align: str, measure: Measure) -> float:
    if align == "center":
        return geometry.x + (geometry.width - measure(line)) / 2
    if align == "right":
        return geometry.x + geometry.width - measure(line) - TEXT_INSET
    return geometry.x + TEXT_INSET


def place_text(
    geometry: Geometry,
    text: str,
    font_size: float,
    style: EffectiveStyle,
    multiline: bool,
    measure: Measure,
) -> List[PlacedLine]:
    """Baseline positions for every line of ``text``, offsets applied last."""
    if multiline:
        lines = wrap_lines(text, geometry.width - WRAP_INSET, measure)
        first_baseline = geometry.y + geometry.height - font_size - TEXT_INSET
    else:
        lines = [text.replace("\n", " ")]
        first_baseline = geometry.y + (geometry.height - font_size) / 2 + TEXT_INSET

    placed = []
    for i, line in enumerate(lines):
        x = _aligned_x(geometry, line, style.align, measure) + style.x_offset
        y = first_baseline - i * font_size * LINE_HEIGHT + style.y_offset
        placed.append(PlacedLine(line, x, y))
    return placed


def check_mark_size(geometry: Geometry) -> float:
    return geometry.height * CHECK_FILL


def check_mark_origin(geometry: Geometry, glyph_width: float, size: float) -> Tuple[float, float]:
    """``(x, baseline)`` for a check glyph of ``size`` centred in the box."""
    x = geometry.x + (geometry.width - glyph_width) / 2
    y = geometry.y + (geometry.height - size) / 2
    return x, y


def font_size_for(
    style: EffectiveStyle,
    text: str,
    geometry: Geometry,
    multiline: bool,
    curve: FitCurve = DEFAULT_CURVE,
) -> float:
    """An explicit style size wins; otherwise ask the fit heuristic."""
    if style.font_size is not None:
        return style.font_size
    return fit_font_size(text, geometry.width, geometry.height, multiline, curve)
