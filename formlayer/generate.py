"""Burn values into the PDF as vector content, then flatten the form away."""
from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from pypdf.generic import ContentStream, DictionaryObject, FloatObject, IndirectObject, NameObject, StreamObject
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from formlayer.errors import GenerationError
from formlayer.fields import FieldDescriptor, FieldKind, FieldRegistry
from formlayer.geometry import Geometry
from formlayer.images import ImageStore
from formlayer.layout import check_mark_origin, check_mark_size, font_size_for, place_text
from formlayer.logger import get_logger
from formlayer.records import ValueRecord, is_checked, text_value
from formlayer.style import StyleCascade, hex_to_rgb

LOGGER = get_logger(__name__)

FONTS = {
    (False, False): "Helvetica",
    (True, False): "Helvetica-Bold",
    (False, True): "Helvetica-Oblique",
    (True, True): "Helvetica-BoldOblique",
}
CHECK_MARK = "✔"
CHECK_FONT = "ZapfDingbats"
FALLBACK_MARK = "X"
FALLBACK_FONT = "Helvetica"
FALLBACK_RAISE = 2.0
# Standard Type 1 fonts are written with WinAnsiEncoding.
TEXT_ENCODING = "cp1252"
HIDDEN_FLAG = 2
STAMP_PREFIX = "/FlatWidget"


@dataclass(slots=True)
class GenerationReport:
    data: bytes
    drawn: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)


class _PageCanvases:
    """One reportlab canvas per page that actually receives drawing."""

    def __init__(self, registry: FieldRegistry) -> None:
        self._registry = registry
        self._canvases: Dict[int, Tuple[io.BytesIO, canvas.Canvas]] = {}

    def __getitem__(self, page_index: int) -> canvas.Canvas:
        if page_index not in self._canvases:
            page = self._registry.pages[page_index]
            buffer = io.BytesIO()
            self._canvases[page_index] = (buffer, canvas.Canvas(buffer, pagesize=(page.width, page.height)))
        return self._canvases[page_index][1]

    def finish(self) -> Dict[int, bytes]:
        result = {}
        for page_index, (buffer, c) in self._canvases.items():
            c.save()
            result[page_index] = buffer.getvalue()
        return result


def check_glyph(size: float) -> Tuple[str, str, float, float]:
    """``(glyph, font, width, raise)``; falls back to Helvetica X if the check mark cannot be encoded."""
    try:
        width = pdfmetrics.stringWidth(CHECK_MARK, CHECK_FONT, size)
    except (KeyError, ValueError) as exc:
        LOGGER.debug("Check mark unavailable in %s: %s", CHECK_FONT, exc)
        return FALLBACK_MARK, FALLBACK_FONT, pdfmetrics.stringWidth(FALLBACK_MARK, FALLBACK_FONT, size), FALLBACK_RAISE
    return CHECK_MARK, CHECK_FONT, width, 0.0


def _draw_image(c: canvas.Canvas, descriptor: FieldDescriptor, png: bytes) -> None:
    g = descriptor.geometry
    c.drawImage(ImageReader(io.BytesIO(png)), g.x, g.y, width=g.width, height=g.height, mask="auto")


def _draw_checkbox(c: canvas.Canvas, descriptor: FieldDescriptor) -> None:
    size = check_mark_size(descriptor.geometry)
    glyph, font, width, lift = check_glyph(size)
    x, y = check_mark_origin(descriptor.geometry, width, size)
    c.setFillColorRGB(0, 0, 0)
    c.setFont(font, size)
    c.drawString(x, y + lift, glyph)


def _draw_text(
    c: canvas.Canvas,
    descriptor: FieldDescriptor,
    text: str,
    cascade: StyleCascade,
    registry: FieldRegistry,
) -> None:
    style = cascade.resolve(descriptor.name)
    font = FONTS[(style.bold, style.italic)]
    try:
        text.encode(TEXT_ENCODING)
    except UnicodeEncodeError as exc:
        bad = text[exc.start:exc.end]
        raise GenerationError(f"{font} cannot encode {bad!r}") from exc
    size = font_size_for(style, text, descriptor.geometry, descriptor.is_multiline, registry.profile.fit_curve)
    lines = place_text(
        descriptor.geometry,
        text,
        size,
        style,
        descriptor.is_multiline,
        lambda s: pdfmetrics.stringWidth(s, font, size),
    )
    c.setFillColorRGB(*hex_to_rgb(style.color))
    c.setFont(font, size)
    for line in lines:
        c.drawString(line.x, line.y, line.text)


def generate_document(
    document_bytes: bytes,
    registry: FieldRegistry,
    record: ValueRecord,
    images: ImageStore,
) -> GenerationReport:
    """Draw attachments and values onto ``document_bytes`` and return the flattened PDF.

    A field that fails to draw is logged and listed in the report; the rest of
    the document is still produced.
    """
    cascade = StyleCascade(registry.profile.style_defaults, record.styles)
    canvases = _PageCanvases(registry)
    report = GenerationReport(data=b"")

    for name, png in images.items():
        descriptor = registry.get(name)
        if descriptor is None:
            continue
        if descriptor.kind is not FieldKind.IMAGE:
            LOGGER.warning("Ignoring image attached to non-image field '%s'", name)
            continue
        try:
            _draw_image(canvases[descriptor.page_index], descriptor, png)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            LOGGER.error("Failed to embed image for '%s': %s", name, exc)
            report.failed[name] = str(exc)
            continue
        report.drawn.append(name)

    for name, value in record.values.items():
        descriptor = registry.get(name)
        if descriptor is None or descriptor.kind is FieldKind.IMAGE:
            continue
        try:
            if descriptor.kind is FieldKind.CHECKBOX:
                if not is_checked(value):
                    continue
                _draw_checkbox(canvases[descriptor.page_index], descriptor)
            else:
                text = text_value(value)
                if not text:
                    continue
                _draw_text(canvases[descriptor.page_index], descriptor, text, cascade, registry)
        except (GenerationError, OSError, ValueError, KeyError, TypeError) as exc:
            LOGGER.error("Failed to draw '%s': %s", name, exc)
            report.failed[name] = str(exc)
            continue
        report.drawn.append(name)

    try:
        writer = PdfWriter(clone_from=PdfReader(io.BytesIO(document_bytes)))
        flatten_form(writer)
        for page_index, overlay in canvases.finish().items():
            writer.pages[page_index].merge_page(PdfReader(io.BytesIO(overlay)).pages[0])
        out = io.BytesIO()
        writer.write(out)
    except (PyPdfError, OSError, ValueError, KeyError) as exc:
        raise GenerationError(f"could not write the final document: {exc}") from exc

    report.data = out.getvalue()
    LOGGER.info("Generated document: %d field(s) drawn, %d failed", len(report.drawn), len(report.failed))
    return report


def _normal_appearance(annotation: DictionaryObject):
    """Reference to the widget's normal appearance stream, honouring /AS for state dictionaries."""
    appearances = annotation.get("/AP")
    if appearances is None:
        return None
    appearances = appearances.get_object()
    if "/N" not in appearances:
        return None
    normal = appearances.raw_get("/N")
    resolved = normal.get_object()
    if not isinstance(resolved, StreamObject):
        state = annotation.get("/AS")
        if state is None or state not in resolved:
            return None
        normal = resolved.raw_get(state)
    return normal


def appearance_matrix(stream: StreamObject, rect) -> Optional[List[float]]:
    """``cm`` operands mapping the appearance's transformed /BBox onto the widget /Rect."""
    x0, y0, x1, y1 = (float(v) for v in stream["/BBox"])
    a, b, c, d, e, f = (float(v) for v in stream.get("/Matrix", (1, 0, 0, 1, 0, 0)))
    corners = [(a * x + c * y + e, b * x + d * y + f) for x in (x0, x1) for y in (y0, y1)]
    xs = [p[0] for p in corners]
    ys = [p[1] for p in corners]
    box_width, box_height = max(xs) - min(xs), max(ys) - min(ys)
    if box_width == 0 or box_height == 0:
        return None
    target = Geometry.from_rect(rect)
    sx, sy = target.width / box_width, target.height / box_height
    return [sx, 0.0, 0.0, sy, target.x - min(xs) * sx, target.y - min(ys) * sy]


def _page_xobjects(page) -> DictionaryObject:
    resources = page.get("/Resources")
    if resources is None:
        resources = DictionaryObject()
        page[NameObject("/Resources")] = resources
    resources = resources.get_object()
    xobjects = resources.get("/XObject")
    if xobjects is None:
        xobjects = DictionaryObject()
        resources[NameObject("/XObject")] = xobjects
    return xobjects.get_object()


def stamp_widget_appearances(writer: PdfWriter) -> int:
    """Draw every visible widget's normal appearance into its page content."""
    stamped = 0
    for page in writer.pages:
        annots = page.get("/Annots")
        if annots is None:
            continue
        operations = []
        xobjects = None
        for ref in annots.get_object():
            annotation = ref.get_object()
            if annotation.get("/Subtype") != "/Widget" or int(annotation.get("/F", 0)) & HIDDEN_FLAG:
                continue
            try:
                appearance = _normal_appearance(annotation)
                if not isinstance(appearance, IndirectObject):
                    continue
                matrix = appearance_matrix(appearance.get_object(), annotation["/Rect"])
            except (KeyError, TypeError, ValueError) as exc:
                LOGGER.debug("Widget appearance not stamped: %s", exc)
                continue
            if matrix is None:
                continue
            stream = appearance.get_object()
            if "/Subtype" not in stream:
                stream[NameObject("/Subtype")] = NameObject("/Form")
            if xobjects is None:
                xobjects = _page_xobjects(page)
            index = 0
            while NameObject(f"{STAMP_PREFIX}{index}") in xobjects:
                index += 1
            name = NameObject(f"{STAMP_PREFIX}{index}")
            xobjects[name] = appearance
            operations += [
                ([], b"q"),
                ([FloatObject(v) for v in matrix], b"cm"),
                ([name], b"Do"),
                ([], b"Q"),
            ]
            stamped += 1
        if not operations:
            continue
        content = page.get_contents()
        if content is None:
            content = ContentStream(None, writer)
            content.operations = operations
        else:
            content.operations = [([], b"q")] + content.operations + [([], b"Q")] + operations
        page.replace_contents(content)
    return stamped


def flatten_form(writer: PdfWriter) -> None:
    """Burn widget appearances into the pages, then drop the widgets and the AcroForm."""
    stamped = stamp_widget_appearances(writer)
    LOGGER.debug("Stamped %d widget appearance(s)", stamped)
    writer.remove_annotations(subtypes="/Widget")
    if "/AcroForm" in writer.root_object:
        del writer.root_object["/AcroForm"]
