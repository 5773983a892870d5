"""Application icon artwork shared by the tray and the packaging script."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw


logger = logging.getLogger("urdutranslator.icon")


GREEN = (76, 175, 80, 255)
WHITE = (255, 255, 255, 255)


def draw_fallback_icon(size: int = 64) -> Image.Image:
    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    margin = size // 8
    bar = max(1, size // 10)
    draw.ellipse((margin, margin, size - margin, size - margin), fill=GREEN)
    draw.rectangle((size // 2 - bar, size // 4, size // 2 + bar, size - size // 4), fill=WHITE)
    draw.rectangle((size // 4, size // 2 - bar, size - size // 4, size // 2 + bar), fill=WHITE)
    return image


def load_icon(path: Optional[Path], size: int = 64) -> Image.Image:
    """Load ``path`` as a square RGBA icon, drawing the fallback if it is unusable."""

    if path is not None and path.exists():
        try:
            with Image.open(path) as icon:
                return icon.convert("RGBA").resize((size, size))
        except OSError as exc:
            logger.warning("Failed to load icon %s: %s", path, exc)
    return draw_fallback_icon(size)
