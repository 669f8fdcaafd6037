"""Decide which page each form field belongs to."""
from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

from formlayer.logger import get_logger

LOGGER = get_logger(__name__)


def full_field_id(annotation: Any) -> Optional[str]:
    """Walk the /Parent chain to build a dotted field ID."""
    parts = []
    node = annotation.get_object() if annotation is not None else None
    while node:
        name = node.get("/T")
        if name:
            parts.append(str(name))
        parent = node.get("/Parent")
        node = parent.get_object() if parent is not None else None
    return ".".join(reversed(parts)) if parts else None


def detect_field_pages(pages: Iterable[Any]) -> Dict[str, int]:
    """Map field name to the first page whose /Annots mention it.

    Later pages never overwrite an earlier assignment.
    """
    detected: Dict[str, int] = {}
    for page_index, page in enumerate(pages):
        annots = page.get("/Annots")
        try:
            refs = list(annots.get_object()) if annots is not None else []
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            LOGGER.warning("Unreadable /Annots on page %d: %s", page_index, exc)
            continue
        for ref in refs:
            try:
                fid = full_field_id(ref)
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                LOGGER.debug("Unreadable annotation on page %d: %s", page_index, exc)
                continue
            if fid and fid not in detected:
                detected[fid] = page_index
    LOGGER.debug("Detected pages for %d annotated fields", len(detected))
    return detected


def resolve_page(
    field_name: str,
    detected: Mapping[str, int],
    overrides: Mapping[str, int],
    page_count: int,
) -> int:
    """Override table first, then detection, then page 0."""
    if field_name in overrides:
        index = overrides[field_name]
        if 0 <= index < page_count:
            return index
        LOGGER.warning(
            "Ignoring page override %d for '%s': document has %d page(s)", index, field_name, page_count
        )
    return detected.get(field_name, 0)
