"""Floyd-Steinberg error-diffusion dithering onto a fixed palette.

Pixels are visited row-major, top to bottom and left to right.  Each pixel
is replaced by its nearest palette colour, and the quantisation error
(``old - new`` per RGB channel) is pushed into the four neighbours that
have not been visited yet::

            [*]  7
        3    5   1        (/16)

The error is written straight into the working buffer, so a pixel's value
when it is reached already carries every contribution from pixels above
and to its left.  Intermediate values are float64 and never clamped; they
may drift below 0 or above 255 until the pixel itself is quantised.
Error aimed outside the image is dropped.

Alpha, when present, is neither quantised nor diffused.
"""

from __future__ import annotations

import logging
import time
from collections.abc import MutableSequence, Sequence
from typing import TypeAlias

import numpy as np

from palette_dither.config import ConfigurationError
from palette_dither.palette import nearest_index, validate_palette

logger = logging.getLogger(__name__)

# (dx, dy, weight); the weights sum to exactly 1
FLOYD_STEINBERG_KERNEL: tuple[tuple[int, int, float], ...] = (
    (1, 0, 7 / 16),
    (-1, 1, 3 / 16),
    (0, 1, 5 / 16),
    (1, 1, 1 / 16),
)

PixelBuffer: TypeAlias = "np.ndarray | bytearray | MutableSequence[int]"


def diffusion_targets(
    x: int, y: int, width: int, height: int,
) -> list[tuple[int, int, float]]:
    """Kernel entries of pixel (x, y) that land inside the image."""
    return [
        (dx, dy, weight)
        for dx, dy, weight in FLOYD_STEINBERG_KERNEL
        if 0 <= x + dx < width and 0 <= y + dy < height
    ]


def _floyd_steinberg(rgb: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """Run the scan over an (H, W, 3) float64 working array.

    *rgb* is mutated: visited pixels hold their palette colour, the
    rest hold speculative error-adjusted values.

    Returns:
        (H, W) int array of chosen palette indices.
    """
    h, w = rgb.shape[:2]
    pal = palette.astype(np.float64)
    indices = np.zeros((h, w), dtype=np.intp)

    for y in range(h):
        for x in range(w):
            old = rgb[y, x].copy()
            idx = nearest_index(old, pal)
            indices[y, x] = idx
            rgb[y, x] = pal[idx]

            error = old - pal[idx]
            for dx, dy, weight in diffusion_targets(x, y, w, h):
                rgb[y + dy, x + dx] += error * weight

    return indices


def _check_dimensions(width: object, height: object, channels: object) -> None:
    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            msg = f"{name} must be an integer, got {value!r}"
            raise ConfigurationError(msg)
        if value < 0:
            msg = f"{name} must be non-negative, got {value}"
            raise ConfigurationError(msg)
    if isinstance(channels, bool) or not isinstance(channels, (int, np.integer)) \
            or channels not in (3, 4):
        msg = f"channels must be 3 (RGB) or 4 (RGBA), got {channels!r}"
        raise ConfigurationError(msg)


def apply_floyd_steinberg(
    buffer: PixelBuffer,
    width: int,
    height: int,
    channels: int,
    palette: Sequence[Sequence[int]] | np.ndarray,
) -> PixelBuffer:
    """Dither a flat, row-major pixel buffer in place.

    Pixel (x, y) occupies ``buffer[(y * width + x) * channels:][:channels]``.

    Args:
        buffer:   numpy array, ``bytearray`` or list of samples.
        width:    Image width in pixels.
        height:   Image height in pixels.
        channels: 3 (RGB) or 4 (RGBA; alpha passes through).
        palette:  Ordered RGB triples; earlier entries win ties.

    Returns:
        *buffer* itself, now holding only palette colours.

    Raises:
        ConfigurationError: before anything is written, if the palette is
            invalid or ``len(buffer) != width * height * channels``.
    """
    pal = validate_palette(palette)
    _check_dimensions(width, height, channels)

    size = buffer.size if isinstance(buffer, np.ndarray) else len(buffer)
    expected = width * height * channels
    if size != expected:
        msg = (
            f"Buffer holds {size} samples but {width}x{height} pixels "
            f"with {channels} channels need {expected}"
        )
        raise ConfigurationError(msg)

    if isinstance(buffer, bytearray):
        samples = np.frombuffer(buffer, dtype=np.uint8)
    else:
        samples = np.asarray(buffer)
    merged = samples.reshape(height, width, channels).copy()

    t0 = time.perf_counter()
    indices = _floyd_steinberg(merged[..., :3].astype(np.float64), pal)
    merged[..., :3] = pal[indices]
    logger.debug(
        "Dithered %dx%d buffer onto %d colours (%.3f s)",
        width, height, len(pal), time.perf_counter() - t0,
    )

    if isinstance(buffer, np.ndarray):
        buffer[...] = merged.reshape(buffer.shape)
    elif isinstance(buffer, bytearray):
        buffer[:] = merged.astype(np.uint8).tobytes()
    else:
        buffer[:] = merged.reshape(-1).tolist()
    return buffer


def dither_image(
    image: np.ndarray,
    palette: Sequence[Sequence[int]] | np.ndarray,
) -> np.ndarray:
    """Dither an (H, W, 3) or (H, W, 4) uint8 image onto *palette*.

    Returns:
        New array with the same shape and dtype; *image* is left untouched.
    """
    pal = validate_palette(palette)
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        msg = f"Image must have shape (H, W, 3) or (H, W, 4), got {image.shape}"
        raise ConfigurationError(msg)

    h, w = image.shape[:2]
    logger.debug("Floyd-Steinberg: %dx%d image, %d palette colours", w, h, len(pal))
    t0 = time.perf_counter()

    result = image.copy()
    indices = _floyd_steinberg(image[..., :3].astype(np.float64), pal)
    result[..., :3] = pal[indices]

    logger.debug("Dithering done  (%.2f s)", time.perf_counter() - t0)
    return result
