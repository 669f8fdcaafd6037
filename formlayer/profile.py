"""Per-document-family configuration data.

A profile holds everything that is tied to one specific form rather than to
the layout engine: which fields take images, the page override table for
fields the annotation walk gets wrong, hand-tuned style defaults, friendly
display names, field list ordering, sample values, and the text-fit curve.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping, Optional, Pattern, Tuple, Union

from formlayer.textfit import DEFAULT_CURVE, FitCurve

DEFAULT_PROFILE = "5e_character_sheet.json"
DEFAULT_SORT_PRIORITY = 80


@dataclass(frozen=True, slots=True)
class SortRule:
    priority: int
    names: FrozenSet[str] = frozenset()
    pattern: Optional[Pattern[str]] = None

    def matches(self, name: str) -> bool:
        if name in self.names:
            return True
        return bool(self.pattern and self.pattern.search(name))


@dataclass(slots=True)
class DocumentProfile:
    name: str = "generic"
    image_fields: FrozenSet[str] = frozenset()
    page_overrides: Dict[str, int] = field(default_factory=dict)
    style_defaults: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    display_names: Dict[str, str] = field(default_factory=dict)
    image_hints: Dict[str, str] = field(default_factory=dict)
    sort_rules: Tuple[SortRule, ...] = ()
    sample_values: Dict[str, Any] = field(default_factory=dict)
    fit_curve: FitCurve = DEFAULT_CURVE

    def display_name(self, field_name: str) -> str:
        return self.display_names.get(field_name, field_name)

    def sort_priority(self, field_name: str) -> int:
        for rule in self.sort_rules:
            if rule.matches(field_name):
                return rule.priority
        return DEFAULT_SORT_PRIORITY

    def sort_key(self, field_name: str) -> Tuple[int, str]:
        return (self.sort_priority(field_name), self.display_name(field_name).casefold())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocumentProfile":
        overrides = data.get("page_overrides", {})
        for name, index in overrides.items():
            if not isinstance(index, int) or isinstance(index, bool) or index < 0:
                raise ValueError(f"page override for '{name}' must be a non-negative integer")
        return cls(
            name=data.get("name", "generic"),
            image_fields=frozenset(data.get("image_fields", ())),
            page_overrides=dict(overrides),
            style_defaults={k: dict(v) for k, v in data.get("style_defaults", {}).items()},
            display_names=dict(data.get("display_names", {})),
            image_hints=dict(data.get("image_hints", {})),
            sort_rules=tuple(_parse_sort_rule(rule) for rule in data.get("sort_rules", ())),
            sample_values=dict(data.get("sample_values", {})),
            fit_curve=FitCurve.from_dict(data.get("fit_curve", {})),
        )


def _parse_sort_rule(rule: Mapping[str, Any]) -> SortRule:
    pattern = rule.get("pattern")
    return SortRule(
        priority=int(rule["priority"]),
        names=frozenset(rule.get("names", ())),
        pattern=re.compile(pattern) if pattern else None,
    )


def load_profile(path: Optional[Union[str, Path]] = None) -> DocumentProfile:
    """Load a profile from a JSON file, or the bundled default when ``path`` is None."""
    if path is None:
        text = resources.files("formlayer.profiles").joinpath(DEFAULT_PROFILE).read_text(encoding="utf-8")
    else:
        text = Path(path).read_text(encoding="utf-8")
    return DocumentProfile.from_dict(json.loads(text))
