"""Command-line entry points."""
from __future__ import annotations

from formlayer.config import Settings, load_settings
from formlayer.logger import configure_logging


def script_settings() -> Settings:
    settings = load_settings()
    configure_logging(settings.log_level)
    return settings


def read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()
