"""Positioned, editable overlay elements for the live preview.

``render_overlay`` describes what a presentation layer should show on top of
each cached page; ``compose_preview`` paints the same description onto the
page raster with Pillow.
"""
from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from PIL import Image, ImageDraw, ImageFont

from formlayer.fields import FieldDescriptor, FieldKind, FieldRegistry
from formlayer.geometry import DisplayRect, Geometry, to_display
from formlayer.images import ImageStore
from formlayer.layout import LINE_HEIGHT, CHECK_FILL, font_size_for, place_text
from formlayer.raster import PageRaster
from formlayer.records import ValueRecord, is_checked, text_value
from formlayer.style import EffectiveStyle, StyleCascade


def _px(value: float) -> str:
    return f"{value:g}px"


@dataclass(frozen=True, slots=True)
class TextOverlay:
    name: str
    label: str
    rect: DisplayRect
    geometry: Geometry
    value: Optional[str]
    font_size: float  # document units, before scaling
    scale: float
    style: EffectiveStyle
    multiline: bool

    @property
    def display_rect(self) -> DisplayRect:
        """The box after style offsets, which move the element but not the field."""
        return DisplayRect(
            left=self.rect.left + self.style.x_offset * self.scale,
            top=self.rect.top - self.style.y_offset * self.scale,
            width=self.rect.width,
            height=self.rect.height,
        )

    def css(self) -> Dict[str, str]:
        box = self.display_rect
        css = {
            "left": _px(box.left),
            "top": _px(box.top),
            "width": _px(box.width),
            "height": _px(box.height),
            "font-size": _px(self.font_size * self.scale),
            "line-height": str(LINE_HEIGHT) if self.multiline else "1",
            "white-space": "pre-wrap" if self.multiline else "nowrap",
            "text-align": self.style.align,
            "color": self.style.color,
        }
        if self.style.bold:
            css["font-weight"] = "bold"
        if self.style.italic:
            css["font-style"] = "italic"
        if not self.multiline and self.style.align == "center":
            css.update({"display": "flex", "align-items": "center", "justify-content": "center"})
        return css


@dataclass(frozen=True, slots=True)
class CheckboxOverlay:
    name: str
    label: str
    rect: DisplayRect
    checked: bool

    def css(self) -> Dict[str, str]:
        return {
            "left": _px(self.rect.left),
            "top": _px(self.rect.top),
            "width": _px(self.rect.width),
            "height": _px(self.rect.height),
            "font-size": _px(self.rect.height * CHECK_FILL),
        }


@dataclass(frozen=True, slots=True)
class ImageOverlay:
    name: str
    label: str
    rect: DisplayRect
    image: Optional[bytes]
    hint: str = ""


@dataclass(frozen=True, slots=True)
class DebugBox:
    name: str
    rect: DisplayRect
    is_checkbox: bool


OverlayElement = Union[TextOverlay, CheckboxOverlay, ImageOverlay, DebugBox]


@dataclass(slots=True)
class OverlayPage:
    index: int
    width: float
    height: float
    scale: float
    raster: Optional[PageRaster] = None
    elements: List[OverlayElement] = field(default_factory=list)

    def element(self, name: str) -> Optional[OverlayElement]:
        for element in self.elements:
            if not isinstance(element, DebugBox) and element.name == name:
                return element
        return None


def _field_element(
    descriptor: FieldDescriptor,
    registry: FieldRegistry,
    record: ValueRecord,
    images: ImageStore,
    cascade: StyleCascade,
    scale: float,
) -> Optional[OverlayElement]:
    profile = registry.profile
    page_height = registry.pages[descriptor.page_index].height
    rect = to_display(descriptor.geometry, page_height, scale)
    label = profile.display_name(descriptor.name)
    value = record.values.get(descriptor.name)

    if descriptor.kind is FieldKind.IMAGE:
        return ImageOverlay(
            descriptor.name, label, rect, images.get(descriptor.name), profile.image_hints.get(descriptor.name, "")
        )
    if descriptor.kind is FieldKind.CHECKBOX:
        return CheckboxOverlay(descriptor.name, label, rect, is_checked(value))

    text = text_value(value)
    if value is not None and text is None:
        return None
    style = cascade.resolve(descriptor.name)
    size = font_size_for(style, text or label, descriptor.geometry, descriptor.is_multiline, profile.fit_curve)
    return TextOverlay(
        name=descriptor.name,
        label=label,
        rect=rect,
        geometry=descriptor.geometry,
        value=text or None,
        font_size=size,
        scale=scale,
        style=style,
        multiline=descriptor.is_multiline,
    )


def render_page(
    registry: FieldRegistry,
    page_index: int,
    record: ValueRecord,
    images: ImageStore,
    scale: float,
    raster: Optional[PageRaster] = None,
    debug: bool = False,
) -> OverlayPage:
    page = registry.pages[page_index]
    cascade = StyleCascade(registry.profile.style_defaults, record.styles)
    result = OverlayPage(page_index, page.width * scale, page.height * scale, scale, raster)
    descriptors = registry.on_page(page_index)
    for descriptor in descriptors:
        element = _field_element(descriptor, registry, record, images, cascade, scale)
        if element is not None:
            result.elements.append(element)
    if debug:
        for descriptor in descriptors:
            rect = to_display(descriptor.geometry, page.height, scale)
            result.elements.append(DebugBox(descriptor.name, rect, descriptor.kind is FieldKind.CHECKBOX))
    return result


def render_overlay(
    registry: FieldRegistry,
    record: ValueRecord,
    images: ImageStore,
    scale: float,
    rasters: Sequence[PageRaster] = (),
    debug: bool = False,
) -> List[OverlayPage]:
    """One overlay page per document page."""
    return [
        render_page(registry, i, record, images, scale, rasters[i] if i < len(rasters) else None, debug)
        for i in range(registry.page_count)
    ]


def _preview_font(size: float):
    return ImageFont.load_default(size=max(size, 1.0))


def _draw_text_element(draw: ImageDraw.ImageDraw, element: TextOverlay, page: OverlayPage, page_height: float) -> None:
    scale = page.scale
    font = _preview_font(element.font_size * scale)
    lines = place_text(
        element.geometry,
        element.value or "",
        element.font_size,
        element.style,
        element.multiline,
        lambda s: draw.textlength(s, font=font) / scale,
    )
    for line in lines:
        xy = (line.x * scale, (page_height - line.y) * scale)
        draw.text(xy, line.text, fill=element.style.color, font=font, anchor="ls")


def _draw_check(draw: ImageDraw.ImageDraw, rect: DisplayRect) -> None:
    x0, y0, x1, y1 = rect.as_box()
    w, h = x1 - x0, y1 - y0
    points = [(x0 + w * 0.2, y0 + h * 0.55), (x0 + w * 0.42, y0 + h * 0.78), (x0 + w * 0.82, y0 + h * 0.25)]
    draw.line(points, fill="black", width=max(1, round(h * 0.12)))


def compose_preview(page: OverlayPage) -> Image.Image:
    """Paint an overlay page onto its raster (or a blank page) at display scale."""
    size = (max(1, round(page.width)), max(1, round(page.height)))
    if page.raster is not None:
        img = page.raster.image.convert("RGBA").resize(size)
    else:
        img = Image.new("RGBA", size, "white")
    draw = ImageDraw.Draw(img)
    page_height = page.height / page.scale

    for element in page.elements:
        if isinstance(element, ImageOverlay):
            box = tuple(round(v) for v in element.rect.as_box())
            if element.image is not None:
                with Image.open(io.BytesIO(element.image)) as attached:
                    fitted = attached.convert("RGBA").resize((max(1, box[2] - box[0]), max(1, box[3] - box[1])))
                img.alpha_composite(fitted, dest=(box[0], box[1]))
            else:
                draw.rectangle(box, outline="purple", width=1)
        elif isinstance(element, CheckboxOverlay):
            if element.checked:
                _draw_check(draw, element.rect)
        elif isinstance(element, TextOverlay):
            if element.value:
                _draw_text_element(draw, element, page, page_height)
        elif isinstance(element, DebugBox):
            draw.rectangle(element.rect.as_box(), outline="blue" if element.is_checkbox else "red", width=1)
    return img
