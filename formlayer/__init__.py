"""Lay out values, styles and images on the fields of a PDF form.

The same field geometry feeds two renderers: an editable overlay positioned
over page rasters, and a generator that burns the values into a flattened PDF.
"""
from formlayer.errors import (
    DocumentLoadError,
    FieldReadError,
    FormLayerError,
    GenerationError,
    ImageAttachmentError,
    OperationInProgress,
    ValueRecordParseError,
)
from formlayer.fields import FieldDescriptor, FieldKind, FieldRegistry, PageGeometry, build_registry, open_document
from formlayer.generate import GenerationReport, generate_document
from formlayer.geometry import DisplayRect, Geometry, to_display
from formlayer.overlay import OverlayPage, compose_preview, render_overlay
from formlayer.profile import DocumentProfile, load_profile
from formlayer.records import ValueRecord, dump_record, parse_record
from formlayer.session import Change, FormSession
from formlayer.style import EffectiveStyle, StyleCascade
from formlayer.textfit import FitCurve, fit_font_size

__all__ = [
    "Change",
    "DisplayRect",
    "DocumentLoadError",
    "DocumentProfile",
    "EffectiveStyle",
    "FieldDescriptor",
    "FieldKind",
    "FieldReadError",
    "FieldRegistry",
    "FitCurve",
    "FormLayerError",
    "FormSession",
    "GenerationError",
    "GenerationReport",
    "Geometry",
    "ImageAttachmentError",
    "OperationInProgress",
    "OverlayPage",
    "PageGeometry",
    "StyleCascade",
    "ValueRecord",
    "ValueRecordParseError",
    "build_registry",
    "compose_preview",
    "dump_record",
    "fit_font_size",
    "generate_document",
    "load_profile",
    "open_document",
    "parse_record",
    "render_overlay",
    "to_display",
]
