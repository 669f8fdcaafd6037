"""Per-field style resolution: built-in defaults, then user overrides."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, MutableMapping, Optional

from formlayer.logger import get_logger

LOGGER = get_logger(__name__)

ALIGNMENTS = ("left", "center", "right")
DEFAULT_COLOR = "#000000"

# Record key -> EffectiveStyle attribute.
STYLE_PROPERTIES = {
    "fontSize": "font_size",
    "align": "align",
    "color": "color",
    "bold": "bold",
    "italic": "italic",
    "xOffset": "x_offset",
    "yOffset": "y_offset",
}
TOGGLE_PROPERTIES = ("bold", "italic")

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


@dataclass(frozen=True, slots=True)
class EffectiveStyle:
    """Fully resolved style for one field.

    ``font_size`` stays ``None`` when neither tier sets it; renderers then ask
    the text-fit heuristic.
    """

    font_size: Optional[float] = None
    align: str = "left"
    color: str = DEFAULT_COLOR
    bold: bool = False
    italic: bool = False
    x_offset: float = 0.0
    y_offset: float = 0.0


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ValueError(f"expected a boolean, got {value!r}")


def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got {value!r}")
    return float(value)


def coerce_property(prop: str, value: Any) -> Any:
    """Validate one override value given by its record key; raise ValueError if unusable."""
    if prop == "fontSize":
        size = _to_number(value)
        if size <= 0:
            raise ValueError(f"font size must be positive, got {value!r}")
        return size
    if prop in ("xOffset", "yOffset"):
        return _to_number(value)
    if prop == "align":
        if value not in ALIGNMENTS:
            raise ValueError(f"align must be one of {ALIGNMENTS}, got {value!r}")
        return value
    if prop == "color":
        if not isinstance(value, str) or not _HEX_COLOR.match(value):
            raise ValueError(f"color must be #rrggbb, got {value!r}")
        return value.lower()
    if prop in TOGGLE_PROPERTIES:
        return _to_bool(value)
    raise ValueError(f"unknown style property {prop!r}")


def hex_to_rgb(color: str) -> tuple[float, float, float]:
    """``#rrggbb`` to channel floats in ``[0, 1]``."""
    return tuple(int(color[i:i + 2], 16) / 255 for i in (1, 3, 5))  # type: ignore[return-value]


class StyleCascade:
    """Merge built-in per-field defaults with user overrides, one property at a time."""

    def __init__(
        self,
        defaults: Mapping[str, Mapping[str, Any]],
        overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> None:
        self._defaults = defaults
        self._overrides = overrides if overrides is not None else {}

    def resolve(self, field_name: str) -> EffectiveStyle:
        merged: Dict[str, Any] = {}
        for tier in (self._defaults.get(field_name), self._overrides.get(field_name)):
            if not tier:
                continue
            for prop, value in tier.items():
                if prop not in STYLE_PROPERTIES or value is None or value == "":
                    continue
                try:
                    merged[STYLE_PROPERTIES[prop]] = coerce_property(prop, value)
                except (TypeError, ValueError) as exc:
                    LOGGER.warning("Ignoring style %s for '%s': %s", prop, field_name, exc)
        return EffectiveStyle(**merged)


def set_override(
    overrides: MutableMapping[str, Dict[str, Any]],
    field_name: str,
    prop: str,
    value: Any,
) -> None:
    """Set or clear one user override property in place.

    ``None`` or ``""`` clears the property; a field left with no properties
    loses its entry entirely.
    """
    if prop not in STYLE_PROPERTIES:
        raise ValueError(f"unknown style property {prop!r}")
    if value is None or value == "":
        entry = overrides.get(field_name)
        if entry is None:
            return
        entry.pop(prop, None)
        if not entry:
            del overrides[field_name]
        return
    overrides.setdefault(field_name, {})[prop] = coerce_property(prop, value)


def toggle_override(
    overrides: MutableMapping[str, Dict[str, Any]],
    cascade: StyleCascade,
    field_name: str,
    prop: str,
) -> None:
    """Flip bold/italic relative to what the field currently resolves to."""
    if prop not in TOGGLE_PROPERTIES:
        raise ValueError(f"{prop!r} is not a toggle property")
    current = getattr(cascade.resolve(field_name), STYLE_PROPERTIES[prop])
    user_value = overrides.get(field_name, {}).get(prop)
    if current and user_value:
        set_override(overrides, field_name, prop, None)
        if getattr(cascade.resolve(field_name), STYLE_PROPERTIES[prop]):
            # a built-in default still turns it on
            set_override(overrides, field_name, prop, False)
    else:
        set_override(overrides, field_name, prop, not current)
