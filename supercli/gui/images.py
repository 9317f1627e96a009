"""Image helpers for attaching screenshots to a prompt."""

from __future__ import annotations

import io

from loguru import logger
from PIL import Image, ImageGrab


def to_png(data: bytes) -> bytes:
    """Re-encode any Pillow-readable image as PNG.

    Raises ``OSError`` (``PIL.UnidentifiedImageError``) for non-image data.
    """
    with Image.open(io.BytesIO(data)) as img:
        if img.mode not in ("RGB", "RGBA", "L", "LA", "P"):
            img = img.convert("RGBA")
        out = io.BytesIO()
        img.save(out, format="PNG")
    return out.getvalue()


def grab_clipboard_png() -> bytes | None:
    """Return the clipboard image as PNG bytes, or None when there is none."""
    try:
        grabbed = ImageGrab.grabclipboard()
    except (OSError, NotImplementedError) as exc:
        logger.debug(f"[images] clipboard grab unavailable: {exc}")
        return None
    if not isinstance(grabbed, Image.Image):
        return None
    out = io.BytesIO()
    grabbed.save(out, format="PNG")
    return out.getvalue()
