"""SVG persistence and raster conversion."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .utils import timestamp


@dataclass(frozen=True)
class SaveResult:
    svg_path: Path
    filename_with_timestamp: str


def save_svg(
    svg: str,
    base_filename: str,
    directory: Path | None = None,
    now: datetime | None = None,
) -> SaveResult:
    """Write ``<timestamp>-<base>.svg`` and return its path and stem.

    Earlier versions are never overwritten; a clash within the same second
    gets a numeric suffix.
    """
    base_dir = directory or Path.cwd()
    base_dir.mkdir(parents=True, exist_ok=True)
    stem = f"{timestamp(now)}-{base_filename}"
    svg_path = base_dir / f"{stem}.svg"
    suffix = 2
    while svg_path.exists():
        candidate = f"{stem}-{suffix}"
        svg_path = base_dir / f"{candidate}.svg"
        suffix += 1
    svg_path.write_text(svg, encoding="utf-8")
    return SaveResult(svg_path=svg_path.resolve(), filename_with_timestamp=svg_path.stem)


def svg_to_png(svg: str, width: int | None = None) -> bytes:
    import cairosvg  # needs the native cairo library, so load on first use

    return cairosvg.svg2png(bytestring=svg.encode("utf-8"), output_width=width)
