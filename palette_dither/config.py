"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


class ConfigurationError(ValueError):
    """A precondition of a dithering pass does not hold.

    Raised for an empty or malformed palette, an unknown palette name, or a
    pixel buffer whose length disagrees with its declared geometry.  Always
    raised before any pixel is touched.
    """


@dataclass(frozen=True)
class DitherConfig:
    """All tuneable parameters for a dithering run.

    Attributes:
        palette_name:    Preset palette (see palette.PALETTES).
        colors:          Comma-separated hex colours; overrides palette_name.
        dither:          Floyd-Steinberg error diffusion (False = nearest colour only).
        keep_alpha:      Pass an alpha channel through to the output.
        pixel_upscale:   Each pixel becomes n x n in the saved image.
        output_format:   Image format for batch output files.
        save_comparison: Write a side-by-side Original | Dithered grid in batch mode.
        input_dir:       Folder to scan for source images.
        output_dir:      Folder for results.
    """

    # Palette
    palette_name: str = "default"
    colors: str | None = None

    # Processing
    dither: bool = True
    keep_alpha: bool = True

    # Output
    pixel_upscale: int = 1
    output_format: str = "png"
    save_comparison: bool = False

    # Paths
    input_dir: Path = field(default_factory=lambda: Path("images"))
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".jfif"}
    )
