"""Render PDF pages to Pillow images, one page at a time with progress."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Sequence

from pdf2image import convert_from_bytes
from PIL import Image

from formlayer.config import DEFAULT_RENDER_SCALE
from formlayer.fields import PageGeometry
from formlayer.logger import get_logger

LOGGER = get_logger(__name__)

POINTS_PER_INCH = 72


@dataclass(frozen=True, slots=True)
class Progress:
    page: int
    total: int
    percent: int


@dataclass(slots=True)
class PageRaster:
    """A rendered page plus its native (scale 1) size in points."""

    image: Image.Image
    width: float
    height: float


ProgressCallback = Callable[[Progress], None]


class Rasterizer(Protocol):
    def render_page(self, data: bytes, page_number: int) -> Image.Image:
        ...


class Pdf2ImageRasterizer:
    """Poppler-backed renderer; ``render_scale`` 1.0 means one pixel per point."""

    def __init__(self, render_scale: float = DEFAULT_RENDER_SCALE) -> None:
        self.render_scale = render_scale

    def render_page(self, data: bytes, page_number: int) -> Image.Image:
        images = convert_from_bytes(
            data,
            dpi=POINTS_PER_INCH * self.render_scale,
            first_page=page_number,
            last_page=page_number,
        )
        if not images:
            raise ValueError(f"poppler returned no image for page {page_number}")
        return images[0]


def rasterize_pages(
    data: bytes,
    pages: Sequence[PageGeometry],
    rasterizer: Rasterizer,
    progress: Optional[ProgressCallback] = None,
    should_continue: Callable[[], bool] = lambda: True,
) -> Optional[List[PageRaster]]:
    """Render every page; returns None if ``should_continue`` turns false midway."""
    total = len(pages)
    rasters: List[PageRaster] = []
    for page_number, geometry in enumerate(pages, 1):
        if progress:
            progress(Progress(page_number, total, round((page_number - 0.5) / total * 100)))
        image = rasterizer.render_page(data, page_number)
        if not should_continue():
            LOGGER.info("Page caching superseded after page %d/%d", page_number, total)
            return None
        rasters.append(PageRaster(image=image, width=geometry.width, height=geometry.height))
    if progress:
        progress(Progress(total, total, 100))
    LOGGER.info("Cached %d page(s)", total)
    return rasters
