"""Image attachments for image-kind fields, always stored as PNG."""
from __future__ import annotations

import io
from typing import Dict, Iterator, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from formlayer.errors import ImageAttachmentError
from formlayer.logger import get_logger

LOGGER = get_logger(__name__)


def normalize_image(data: bytes) -> bytes:
    """Re-encode any Pillow-readable image as PNG."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if img.mode not in ("RGB", "RGBA", "L", "LA"):
                img = img.convert("RGBA")
            out = io.BytesIO()
            img.save(out, format="PNG")
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ImageAttachmentError(f"unreadable image: {exc}") from exc
    return out.getvalue()


class ImageStore:
    """Attachments keyed by field name; they survive re-renders and document loads."""

    def __init__(self) -> None:
        self._images: Dict[str, bytes] = {}

    def attach(self, field_name: str, data: bytes) -> bytes:
        png = normalize_image(data)
        self._images[field_name] = png
        LOGGER.info("Image attached for '%s' (%d bytes as PNG)", field_name, len(png))
        return png

    def remove(self, field_name: str) -> None:
        self._images.pop(field_name, None)

    def get(self, field_name: str) -> Optional[bytes]:
        return self._images.get(field_name)

    def __contains__(self, field_name: object) -> bool:
        return field_name in self._images

    def __len__(self) -> int:
        return len(self._images)

    def items(self) -> Iterator[Tuple[str, bytes]]:
        return iter(list(self._images.items()))
