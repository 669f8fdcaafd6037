"""Environment-driven settings."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_RENDER_SCALE = 1.5


def _get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    if value is None:
        return default
    value = value.strip()
    return value or default


def _get_float(key: str, default: float) -> float:
    value = _get_env(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"Environment variable {key} must be a number") from exc


@dataclass(slots=True)
class Settings:
    profile_path: Optional[str] = None
    render_scale: float = DEFAULT_RENDER_SCALE
    log_level: str = "INFO"


def load_settings() -> Settings:
    render_scale = _get_float("FORMLAYER_RENDER_SCALE", DEFAULT_RENDER_SCALE)
    if render_scale <= 0:
        raise ValueError("FORMLAYER_RENDER_SCALE must be positive")
    return Settings(
        profile_path=_get_env("FORMLAYER_PROFILE"),
        render_scale=render_scale,
        log_level=_get_env("FORMLAYER_LOG_LEVEL", "INFO"),
    )
