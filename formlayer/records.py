"""Textual value record: a JSON object of field values plus ``_styles`` overrides."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from formlayer.errors import ValueRecordParseError

STYLES_KEY = "_styles"
INDENT = 4

_SCALARS = (str, bool, int, float)


@dataclass(slots=True)
class ValueRecord:
    values: Dict[str, Any] = field(default_factory=dict)
    styles: Dict[str, Dict[str, Any]] = field(default_factory=dict)


def parse_record(text: str) -> ValueRecord:
    """Parse the textual record, refusing anything but a flat object of scalars."""
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise ValueRecordParseError(f"value record is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueRecordParseError("value record must be a JSON object")

    styles = data.pop(STYLES_KEY, None)
    if styles is None:
        styles = {}
    if not isinstance(styles, dict) or not all(isinstance(v, dict) for v in styles.values()):
        raise ValueRecordParseError(f"'{STYLES_KEY}' must map field names to objects")
    for name, value in data.items():
        if value is not None and not isinstance(value, _SCALARS):
            raise ValueRecordParseError(f"value for '{name}' must be a string or boolean")
    return ValueRecord(values=data, styles=styles)


def dump_record(record: ValueRecord) -> str:
    data: Dict[str, Any] = dict(record.values)
    if record.styles:
        data[STYLES_KEY] = record.styles
    return json.dumps(data, indent=INDENT, ensure_ascii=False)


def record_from_values(values: Mapping[str, Any]) -> str:
    return dump_record(ValueRecord(values=dict(values)))


def text_value(value: Any) -> Optional[str]:
    """Text to show for a text field, or None when there is nothing to draw."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value)
    if text in ("true", "false"):
        return None
    return text


def is_checked(value: Any) -> bool:
    return value is True or value == "true"


def apply_text_edit(values: Dict[str, Any], field_name: str, raw: str) -> bool:
    """Store an edited text value; returns False when the edit removed the field.

    Line breaks and surrounding whitespace are kept; the trimmed text only
    decides whether the field is deleted.
    """
    if raw.strip() == "":
        values.pop(field_name, None)
        return False
    values[field_name] = raw
    return True


def apply_checkbox(values: Dict[str, Any], field_name: str, checked: bool) -> None:
    if checked:
        values[field_name] = True
    else:
        values.pop(field_name, None)


def add_blank(values: Dict[str, Any], field_name: str) -> bool:
    if field_name in values:
        return False
    values[field_name] = ""
    return True
