"""Low resolution terminal previews."""

from __future__ import annotations

import os
import sys
from io import BytesIO
from typing import TextIO

from PIL import Image

from .utils import ansi_dim

_UPPER_HALF = "▀"
_RESET = "\x1b[0m"


def supports_truecolor(stream: TextIO) -> bool:
    if not getattr(stream, "isatty", lambda: False)():
        return False
    # TERM=*-256color only promises the indexed palette, not 24-bit colour.
    colorterm = os.getenv("COLORTERM", "").lower()
    term = os.getenv("TERM", "").lower()
    return colorterm in {"truecolor", "24bit"} or "kitty" in term


def image_to_ansi(png_bytes: bytes, width: int = 40, height: int = 20) -> str:
    """Render an image as rows of half-block cells (two pixels per cell)."""
    with Image.open(BytesIO(png_bytes)) as image:
        rgba = image.convert("RGBA")
    background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
    background.alpha_composite(rgba)
    rgb = background.convert("RGB")
    rgb.thumbnail((width, height * 2))
    cols, rows = rgb.size
    pixels = rgb.load()
    lines: list[str] = []
    for y in range(0, rows, 2):
        cells: list[str] = []
        for x in range(cols):
            top = pixels[x, y]
            bottom = pixels[x, y + 1] if y + 1 < rows else (0, 0, 0)
            cells.append(
                f"\x1b[38;2;{top[0]};{top[1]};{top[2]}m"
                f"\x1b[48;2;{bottom[0]};{bottom[1]};{bottom[2]}m{_UPPER_HALF}"
            )
        lines.append("".join(cells) + _RESET)
    return "\n".join(lines)


def render_preview(png_bytes: bytes, stream: TextIO | None = None, width: int = 40, height: int = 20) -> bool:
    out = stream or sys.stdout
    if not supports_truecolor(out):
        return False
    art = image_to_ansi(png_bytes, width=width, height=height)
    out.write(f"\n{ansi_dim('[Low resolution preview]')}\n{art}\n")
    out.flush()
    return True
