"""Field registry: one descriptor per named form field of a loaded PDF."""
from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from formlayer.errors import DocumentLoadError, FieldReadError
from formlayer.geometry import Geometry
from formlayer.logger import get_logger
from formlayer.pages import detect_field_pages, resolve_page
from formlayer.profile import DocumentProfile

LOGGER = get_logger(__name__)

MULTILINE_HEIGHT = 25


class FieldKind(str, Enum):
    TEXT = "Text"
    CHECKBOX = "Checkbox"
    IMAGE = "Image"


@dataclass(frozen=True, slots=True)
class PageGeometry:
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    name: str
    geometry: Geometry
    page_index: int
    kind: FieldKind

    @property
    def is_multiline(self) -> bool:
        return self.geometry.height > MULTILINE_HEIGHT


class FieldRegistry:
    """Immutable ``name -> FieldDescriptor`` table plus page geometry."""

    def __init__(
        self,
        descriptors: Mapping[str, FieldDescriptor],
        pages: Sequence[PageGeometry],
        profile: Optional[DocumentProfile] = None,
    ) -> None:
        self._descriptors = dict(descriptors)
        self._pages = tuple(pages)
        self.profile = profile or DocumentProfile()

    def __getitem__(self, name: str) -> FieldDescriptor:
        return self._descriptors[name]

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __iter__(self) -> Iterator[str]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def get(self, name: str) -> Optional[FieldDescriptor]:
        return self._descriptors.get(name)

    @property
    def pages(self) -> Tuple[PageGeometry, ...]:
        return self._pages

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def on_page(self, page_index: int) -> List[FieldDescriptor]:
        return [d for d in self._descriptors.values() if d.page_index == page_index]

    def sorted_names(self) -> List[str]:
        """Names in field-list order: profile priority, then display name."""
        return sorted(self._descriptors, key=self.profile.sort_key)

    def to_csv(self) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["Field ID", "Type", "Description"])
        for name in sorted(self._descriptors):
            writer.writerow([name, self._descriptors[name].kind.value, self.profile.display_name(name)])
        return buffer.getvalue()

    def to_records(self) -> List[Dict[str, Any]]:
        """JSON-ready field list, ordered top-to-bottom, left-to-right per page."""
        result = []
        for d in self._descriptors.values():
            result.append({
                "field_id": d.name,
                "type": d.kind.value.lower(),
                "page": d.page_index + 1,
                "rect": [d.geometry.x, d.geometry.y, d.geometry.width, d.geometry.height],
                "multiline": d.is_multiline,
                "description": self.profile.display_name(d.name),
            })

        def sort_key(f):
            x, y, _, h = f["rect"]
            return (f["page"], -(y + h), x)

        result.sort(key=sort_key)
        return result


def open_document(data: bytes) -> PdfReader:
    """Parse PDF bytes, raising DocumentLoadError on anything unreadable."""
    try:
        reader = PdfReader(io.BytesIO(data))
        page_count = len(reader.pages)
    except (PyPdfError, IndexError, KeyError, TypeError, ValueError) as exc:
        raise DocumentLoadError(f"not a readable PDF: {exc}") from exc
    if page_count == 0:
        raise DocumentLoadError("PDF has no pages")
    return reader


def page_geometries(reader: PdfReader) -> List[PageGeometry]:
    return [
        PageGeometry(width=float(page.mediabox.width), height=float(page.mediabox.height))
        for page in reader.pages
    ]


def iter_terminal_fields(
    field_refs: Sequence[Any], parent_name: Optional[str] = None
) -> Iterator[Tuple[Optional[str], Any, List[Any]]]:
    """Yield ``(full_name, field, widgets)`` for every terminal field in an AcroForm tree.

    Kids carrying a /T are child fields; kids without one are widgets of the
    current field. A merged field/widget is its own single widget.
    """
    for ref in field_refs:
        node = ref.get_object()
        partial = node.get("/T")
        if partial is None:
            name = parent_name
        elif parent_name:
            name = f"{parent_name}.{partial}"
        else:
            name = str(partial)
        kids_obj = node.get("/Kids")
        kids = [kid.get_object() for kid in kids_obj.get_object()] if kids_obj is not None else []
        child_fields = [kid for kid in kids if "/T" in kid]
        if child_fields:
            yield from iter_terminal_fields(child_fields, name)
            continue
        widgets = kids if kids else ([node] if "/Rect" in node else [])
        yield name, node, widgets


def _inherited(node: Any, key: str) -> Any:
    while node is not None:
        node = node.get_object()
        if key in node:
            return node[key]
        node = node.get("/Parent")
    return None


def _field_kind(name: str, node: Any, profile: DocumentProfile) -> FieldKind:
    if name in profile.image_fields:
        return FieldKind.IMAGE
    if _inherited(node, "/FT") == "/Btn":
        return FieldKind.CHECKBOX
    return FieldKind.TEXT


def _describe(
    name: Optional[str],
    node: Any,
    widgets: List[Any],
    page_index: int,
    profile: DocumentProfile,
) -> Optional[FieldDescriptor]:
    if not name:
        raise FieldReadError("<unnamed>", "field has no /T name")
    if not widgets:
        return None
    rect = widgets[0].get("/Rect")
    if rect is None:
        raise FieldReadError(name, "first widget has no /Rect")
    try:
        rect = rect.get_object()
        if len(rect) != 4:
            raise ValueError(f"expected 4 coordinates, got {len(rect)}")
        geometry = Geometry.from_rect(rect)
    except (TypeError, ValueError) as exc:
        raise FieldReadError(name, f"bad /Rect: {exc}") from exc
    return FieldDescriptor(
        name=name,
        geometry=geometry,
        page_index=page_index,
        kind=_field_kind(name, node, profile),
    )


def _walk_fields(field_refs: Sequence[Any]) -> Iterator[Tuple[Optional[str], Any, List[Any]]]:
    """Walk each top-level field on its own; a malformed subtree is logged and skipped."""
    for ref in field_refs:
        try:
            entries = list(iter_terminal_fields([ref]))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            LOGGER.warning("Skipping %s", FieldReadError(_partial_name(ref), f"unreadable field tree: {exc}"))
            continue
        yield from entries


def _partial_name(ref: Any) -> str:
    try:
        return str(ref.get_object().get("/T", "<unnamed>"))
    except (AttributeError, KeyError, TypeError, ValueError):
        return "<unreadable>"


def build_registry(reader: PdfReader, profile: DocumentProfile) -> FieldRegistry:
    """Read every AcroForm field of ``reader``; malformed fields are logged and skipped."""
    pages = page_geometries(reader)
    detected = detect_field_pages(reader.pages)

    acroform = reader.trailer["/Root"].get("/AcroForm")
    field_refs = acroform.get_object().get("/Fields", None) if acroform is not None else None
    field_refs = field_refs.get_object() if field_refs is not None else []
    if not isinstance(field_refs, list):
        LOGGER.warning("AcroForm /Fields is not an array; no fields read")
        field_refs = []

    descriptors: Dict[str, FieldDescriptor] = {}
    for name, node, widgets in _walk_fields(field_refs):
        page_index = resolve_page(name, detected, profile.page_overrides, len(pages)) if name else 0
        try:
            descriptor = _describe(name, node, widgets, page_index, profile)
        except FieldReadError as exc:
            LOGGER.warning("Skipping %s", exc)
            continue
        if descriptor is None:
            LOGGER.debug("Field '%s' has no widgets; skipped", name)
            continue
        if descriptor.name in descriptors:
            LOGGER.warning("Duplicate field name '%s'; keeping the first", descriptor.name)
            continue
        descriptors[descriptor.name] = descriptor

    LOGGER.info("Registry built: %d field(s) on %d page(s)", len(descriptors), len(pages))
    return FieldRegistry(descriptors, pages, profile)
