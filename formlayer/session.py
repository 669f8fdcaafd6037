"""The session object a hosting application owns for one form being edited.

All mutable state lives here: the document bytes, the field registry, the
cached page rasters, the textual value record, image attachments, the display
scale and the in-flight guards. Every core operation goes through a session
instead of module-level globals.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from formlayer.config import DEFAULT_RENDER_SCALE, Settings
from formlayer.errors import FormLayerError, ImageAttachmentError, OperationInProgress
from formlayer.fields import FieldKind, FieldRegistry, build_registry, open_document
from formlayer.generate import GenerationReport, generate_document
from formlayer.geometry import fit_scale, zoom_scale
from formlayer.images import ImageStore
from formlayer.logger import get_logger
from formlayer.overlay import OverlayPage, render_overlay
from formlayer.profile import DocumentProfile, load_profile
from formlayer.raster import PageRaster, Pdf2ImageRasterizer, ProgressCallback, Rasterizer, rasterize_pages
from formlayer.records import (
    ValueRecord,
    add_blank,
    apply_checkbox,
    apply_text_edit,
    dump_record,
    is_checked,
    parse_record,
    record_from_values,
)
from formlayer.style import EffectiveStyle, StyleCascade, set_override, toggle_override

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Change:
    """Notification sent to subscribers after a state change.

    ``rerender`` tells the presentation layer whether the overlay must be
    rebuilt; text edits leave it False so an element being edited keeps focus.
    """

    kind: str
    field: Optional[str] = None
    rerender: bool = True


Listener = Callable[[Change], None]


class FormSession:
    def __init__(
        self,
        profile: Optional[DocumentProfile] = None,
        rasterizer: Optional[Rasterizer] = None,
        record_text: str = "{}",
        render_scale: float = DEFAULT_RENDER_SCALE,
    ) -> None:
        self.profile = profile or load_profile()
        self.rasterizer = rasterizer or Pdf2ImageRasterizer(render_scale)
        self.images = ImageStore()
        self.document_bytes: Optional[bytes] = None
        self.registry: Optional[FieldRegistry] = None
        self.rasters: List[PageRaster] = []
        self.scale = 1.0
        self.auto_fit = True
        self.debug = False
        self.selected: Optional[str] = None
        self.last_overlay: Optional[List[OverlayPage]] = None
        self.last_report: Optional[GenerationReport] = None
        self._record_text = record_text
        self._load_token = 0
        self._caching = False
        self._generating = False
        self._listeners: List[Listener] = []

    @classmethod
    def from_settings(cls, settings: Settings, rasterizer: Optional[Rasterizer] = None) -> "FormSession":
        return cls(
            profile=load_profile(settings.profile_path),
            rasterizer=rasterizer,
            render_scale=settings.render_scale,
        )

    # -- notifications -----------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _emit(self, kind: str, field_name: Optional[str] = None, rerender: bool = True) -> None:
        change = Change(kind, field_name, rerender)
        for listener in list(self._listeners):
            listener(change)

    @contextmanager
    def _exclusive(self, flag: str, what: str) -> Iterator[None]:
        if getattr(self, flag):
            raise OperationInProgress(f"{what} already in progress")
        setattr(self, flag, True)
        try:
            yield
        finally:
            setattr(self, flag, False)

    # -- document ----------------------------------------------------------

    def rebuild_registry(self, data: bytes) -> FieldRegistry:
        """Parse ``data`` and install its registry; a failed load leaves the session as it was."""
        reader = open_document(data)
        registry = build_registry(reader, self.profile)
        self.document_bytes = data
        self.registry = registry
        self.rasters = []
        self.last_overlay = None
        self._load_token += 1
        self._emit("document")
        return registry

    def cache_pages(self, progress: Optional[ProgressCallback] = None) -> List[PageRaster]:
        """Rasterize every page of the current document.

        If a newer document is loaded while this runs (from a progress
        callback, say), the stale pages are dropped and the pass restarts on
        the new document.
        """
        with self._exclusive("_caching", "page caching"):
            while True:
                if self.registry is None or self.document_bytes is None:
                    raise FormLayerError("no document loaded")
                token = self._load_token
                rasters = rasterize_pages(
                    self.document_bytes,
                    self.registry.pages,
                    self.rasterizer,
                    progress,
                    should_continue=lambda: self._load_token == token,
                )
                if rasters is not None and self._load_token == token:
                    break
                LOGGER.info("Document replaced during page caching; restarting")
            self.rasters = rasters
        self._emit("pages")
        return rasters

    def load(self, data: bytes, progress: Optional[ProgressCallback] = None) -> FieldRegistry:
        registry = self.rebuild_registry(data)
        if not self._caching:
            self.cache_pages(progress)
        return registry

    def _require_registry(self) -> FieldRegistry:
        if self.registry is None:
            raise FormLayerError("no document loaded")
        return self.registry

    # -- value record ------------------------------------------------------

    @property
    def record_text(self) -> str:
        return self._record_text

    def replace_record(self, text: str) -> None:
        """Store editor text as-is; it is validated whenever it is read."""
        self._record_text = text
        self._emit("record")

    def values(self) -> ValueRecord:
        return parse_record(self._record_text)

    def export_record(self) -> str:
        return dump_record(self.values())

    def import_record(self, text: str) -> ValueRecord:
        record = parse_record(text)
        self._record_text = dump_record(record)
        self._emit("record")
        return record

    def load_sample_values(self) -> None:
        self.replace_record(record_from_values(self.profile.sample_values))

    def _write(self, record: ValueRecord) -> None:
        self._record_text = dump_record(record)

    def add_field(self, field_name: str) -> bool:
        record = self.values()
        added = add_blank(record.values, field_name)
        if added:
            self._write(record)
            self._emit("record", field_name, rerender=False)
        return added

    # -- interaction -------------------------------------------------------

    def select(self, field_name: Optional[str]) -> None:
        self.selected = field_name
        self._emit("selected", field_name, rerender=False)

    def edit_text(self, field_name: str, raw: str) -> None:
        record = self.values()
        apply_text_edit(record.values, field_name, raw)
        self._write(record)
        self._emit("edited", field_name, rerender=False)

    def toggle_checkbox(self, field_name: str, checked: Optional[bool] = None) -> bool:
        record = self.values()
        if checked is None:
            checked = not is_checked(record.values.get(field_name))
        apply_checkbox(record.values, field_name, checked)
        self._write(record)
        self._emit("toggled", field_name)
        return checked

    def attach_image(self, field_name: str, data: bytes) -> None:
        if self.registry is not None:
            descriptor = self.registry.get(field_name)
            is_image = descriptor is not None and descriptor.kind is FieldKind.IMAGE
        else:
            is_image = field_name in self.profile.image_fields
        if not is_image:
            raise ImageAttachmentError(f"'{field_name}' is not an image field")
        self.images.attach(field_name, data)
        self._emit("image", field_name)

    def cascade(self, record: Optional[ValueRecord] = None) -> StyleCascade:
        record = record or self.values()
        return StyleCascade(self.profile.style_defaults, record.styles)

    def current_style(self, field_name: Optional[str] = None) -> Optional[EffectiveStyle]:
        field_name = field_name or self.selected
        if field_name is None:
            return None
        return self.cascade().resolve(field_name)

    def apply_style(self, prop: str, value, field_name: Optional[str] = None) -> None:
        field_name = field_name or self.selected
        if field_name is None:
            raise FormLayerError("no field selected")
        record = self.values()
        set_override(record.styles, field_name, prop, value)
        self._write(record)
        self._emit("style", field_name)

    def toggle_style(self, prop: str, field_name: Optional[str] = None) -> None:
        field_name = field_name or self.selected
        if field_name is None:
            raise FormLayerError("no field selected")
        record = self.values()
        toggle_override(record.styles, self.cascade(record), field_name, prop)
        self._write(record)
        self._emit("style", field_name)

    # -- scale -------------------------------------------------------------

    def set_zoom(self, percent: float) -> float:
        self.auto_fit = False
        self.scale = zoom_scale(percent)
        self._emit("scale")
        return self.scale

    def fit_to_width(self, container_width: float) -> float:
        """Recompute the auto-fit scale; narrow containers keep the current one."""
        self.auto_fit = True
        registry = self._require_registry()
        scale = fit_scale(container_width, registry.pages[0].width)
        if scale is not None:
            self.scale = scale
        self._emit("scale")
        return self.scale

    def toggle_debug(self) -> bool:
        self.debug = not self.debug
        self._emit("debug")
        return self.debug

    # -- rendering ---------------------------------------------------------

    def render_overlay(self) -> List[OverlayPage]:
        """Re-render every page; a bad record raises and leaves the last overlay in place."""
        registry = self._require_registry()
        record = self.values()
        pages = render_overlay(registry, record, self.images, self.scale, self.rasters, self.debug)
        self.last_overlay = pages
        return pages

    def generate(self) -> bytes:
        """Produce the final flattened PDF; earlier output survives any failure."""
        with self._exclusive("_generating", "generation"):
            registry = self._require_registry()
            record = self.values()
            report = generate_document(self.document_bytes, registry, record, self.images)
            self.last_report = report
        return report.data

    @property
    def last_output(self) -> Optional[bytes]:
        return self.last_report.data if self.last_report else None

    def field_list_csv(self) -> str:
        return self._require_registry().to_csv()
