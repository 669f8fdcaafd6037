"""Document space (bottom-left origin, points) to display space (top-left, pixels)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

AUTO_FIT_GUTTER = 64
AUTO_FIT_MIN_CONTAINER = 100
MIN_ZOOM_PERCENT = 10
MAX_ZOOM_PERCENT = 300


@dataclass(frozen=True, slots=True)
class Geometry:
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_rect(cls, rect: Sequence[float]) -> "Geometry":
        """Build from a PDF ``[x0, y0, x1, y1]`` rectangle in either corner order."""
        x0, y0, x1, y1 = (float(v) for v in rect)
        return cls(x=min(x0, x1), y=min(y0, y1), width=abs(x1 - x0), height=abs(y1 - y0))


@dataclass(frozen=True, slots=True)
class DisplayRect:
    left: float
    top: float
    width: float
    height: float

    def as_box(self) -> tuple[float, float, float, float]:
        """Return ``(x0, y0, x1, y1)`` as Pillow expects."""
        return (self.left, self.top, self.left + self.width, self.top + self.height)


def to_display(geometry: Geometry, page_height: float, scale: float) -> DisplayRect:
    return DisplayRect(
        left=geometry.x * scale,
        top=(page_height - geometry.y - geometry.height) * scale,
        width=geometry.width * scale,
        height=geometry.height * scale,
    )


def fit_scale(container_width: float, page_width: float) -> Optional[float]:
    """Scale that fits a page into a container, or None when the container is too narrow."""
    if container_width <= AUTO_FIT_MIN_CONTAINER or page_width <= 0:
        return None
    return (container_width - AUTO_FIT_GUTTER) / page_width


def zoom_scale(percent: float) -> float:
    return min(MAX_ZOOM_PERCENT, max(MIN_ZOOM_PERCENT, percent)) / 100
