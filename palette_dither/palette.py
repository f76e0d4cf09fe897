"""Fixed output palettes and the nearest-colour matcher."""

from __future__ import annotations

import re
from collections.abc import Sequence

import numpy as np

from palette_dither.config import ConfigurationError

# Named presets: name -> ordered RGB triples.  Order is the tie-break order.
PALETTES: dict[str, list[tuple[int, int, int]]] = {
    "default": [
        (0, 0, 0),        # black
        (255, 255, 255),  # white
        (255, 0, 0),      # red
        (0, 255, 0),      # green
        (0, 0, 255),      # blue
        (255, 255, 0),    # yellow
        (0, 255, 255),    # cyan
        (255, 0, 255),    # magenta
    ],
    "bw": [(0, 0, 0), (255, 255, 255)],
    "cga": [(0, 0, 0), (85, 255, 255), (255, 85, 255), (255, 255, 255)],
    "epaper6": [
        (0, 0, 0),
        (255, 255, 255),
        (255, 255, 0),
        (255, 0, 0),
        (0, 0, 255),
        (0, 255, 0),
    ],
    "gameboy": [(15, 56, 15), (48, 98, 48), (139, 172, 15), (155, 188, 15)],
}


def validate_palette(colors: Sequence[Sequence[int]] | np.ndarray) -> np.ndarray:
    """Normalise *colors* into a read-only (K, 3) uint8 palette.

    Raises:
        ConfigurationError: if the palette is empty, not made of RGB
            triples, holds non-integer or out-of-range values, or repeats
            a colour.
    """
    try:
        raw = np.asarray(colors)
    except ValueError as exc:
        msg = f"Palette is not a rectangular list of RGB triples: {exc}"
        raise ConfigurationError(msg) from exc

    if raw.size == 0:
        msg = "Palette is empty: at least one colour is required"
        raise ConfigurationError(msg)

    if raw.dtype == np.uint8 and raw.ndim == 2 and raw.shape[1] == 3 \
            and not raw.flags.writeable:
        arr = raw
    else:
        if raw.ndim != 2 or raw.shape[1] != 3:
            msg = f"Palette must have shape (K, 3), got {raw.shape}"
            raise ConfigurationError(msg)
        if raw.dtype.kind not in "iu":
            if raw.dtype.kind != "f" or not np.all(np.mod(raw, 1) == 0):
                msg = "Palette channels must be integers"
                raise ConfigurationError(msg)
        if raw.min() < 0 or raw.max() > 255:
            msg = (
                f"Palette channels must lie in [0, 255], "
                f"got range [{raw.min()}, {raw.max()}]"
            )
            raise ConfigurationError(msg)

        arr = raw.astype(np.uint8)
        arr.flags.writeable = False

    unique = np.unique(arr, axis=0)
    if len(unique) != len(arr):
        msg = f"Palette contains duplicate colours ({len(arr) - len(unique)} repeated)"
        raise ConfigurationError(msg)
    return arr


def get_palette(name: str) -> np.ndarray:
    """Return the preset palette called *name*."""
    colors = PALETTES.get(name)
    if colors is None:
        available = ", ".join(sorted(PALETTES))
        msg = f"Unknown palette '{name}'. Available: {available}"
        raise ConfigurationError(msg)
    return validate_palette(colors)


_HEX_RE = re.compile(r"#?([0-9a-fA-F]{6})")


def _hex_to_rgb(hex_str: str) -> tuple[int, int, int]:
    """Parse '#RRGGBB' to an (r, g, b) tuple."""
    match = _HEX_RE.fullmatch(hex_str.strip())
    if match is None:
        msg = f"Malformed hex colour '{hex_str}', expected '#RRGGBB'"
        raise ConfigurationError(msg)
    h = match.group(1)
    return tuple(int(h[i : i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]


def parse_hex_palette(text: str) -> np.ndarray:
    """Build a palette from a comma-separated hex list like ``"#000000,#ffffff"``."""
    parts = [p for p in (s.strip() for s in text.split(",")) if p]
    return validate_palette([_hex_to_rgb(p) for p in parts])


def closest_palette_color(
    r: float,
    g: float,
    b: float,
    palette: Sequence[Sequence[int]] | np.ndarray,
) -> tuple[int, int, int]:
    """Return the palette entry nearest to (r, g, b) in RGB space.

    Channels may lie outside [0, 255] after error diffusion; they are
    compared unclamped in float64.  Squared distance orders entries the
    same way Euclidean distance does.  On an exact tie the entry that
    comes first in *palette* wins.

    Raises:
        ConfigurationError: if *palette* is empty or malformed.
    """
    pal = validate_palette(palette)
    idx = nearest_index(np.array([r, g, b], dtype=np.float64), pal.astype(np.float64))
    return tuple(int(c) for c in pal[idx])  # type: ignore[return-value]


def nearest_index(color: np.ndarray, palette: np.ndarray) -> int:
    """Index of the closest row of a float64 (K, 3) *palette* to *color*.

    No validation; callers pass an already-validated palette.
    """
    diff = palette - color
    # argmin returns the first minimum, which is the tie-break rule
    return int(np.argmin(np.sum(diff ** 2, axis=1)))
