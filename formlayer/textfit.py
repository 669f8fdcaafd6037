"""Pick a font size that fits a value inside a field box."""
from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from typing import Mapping


@dataclass(frozen=True, slots=True)
class FitCurve:
    """Tuning constants for :func:`fit_font_size`.

    The defaults were tuned against one document family; profiles for other
    documents override individual values.
    """

    empty_size: float = 10.0
    avg_char_width: float = 5.0
    multiline_fill: float = 0.85
    multiline_min: float = 6.0
    multiline_max: float = 11.0
    tiny_length: int = 3
    tiny_fill: float = 0.65
    tiny_max: float = 20.0
    short_length: int = 6
    short_fill: float = 0.55
    short_max: float = 16.0
    long_height_fill: float = 0.6
    long_width_factor: float = 1.6
    long_min: float = 7.0
    long_max: float = 14.0

    @classmethod
    def from_dict(cls, data: Mapping[str, float]) -> "FitCurve":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"unknown fit curve constants: {sorted(unknown)}")
        return replace(cls(), **data)


DEFAULT_CURVE = FitCurve()


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def fit_font_size(
    text: str,
    width: float,
    height: float,
    multiline: bool,
    curve: FitCurve = DEFAULT_CURVE,
) -> float:
    if not text:
        return curve.empty_size

    length = len(text)
    if multiline:
        literal_lines = len(text.split("\n"))
        chars_per_line = width / curve.avg_char_width
        estimated_lines = math.ceil(length / chars_per_line) if chars_per_line > 0 else length
        total_lines = max(literal_lines, estimated_lines)
        return _clamp(height / total_lines * curve.multiline_fill, curve.multiline_min, curve.multiline_max)

    if length <= curve.tiny_length:
        return min(height * curve.tiny_fill, curve.tiny_max)
    if length <= curve.short_length:
        return min(height * curve.short_fill, curve.short_max)
    by_height = height * curve.long_height_fill
    by_width = width / length * curve.long_width_factor
    return _clamp(min(by_height, by_width), curve.long_min, curve.long_max)
