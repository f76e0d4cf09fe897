"""
Palette Dither
==============

Reduce a full-colour image to a small fixed palette while keeping the
impression of smooth gradients, using Floyd-Steinberg error diffusion.

- **Palette matcher**: nearest palette colour in RGB, first entry wins ties.
- **Dithering engine**: single forward row-major pass, error written
  straight into not-yet-visited pixels.
"""

__version__ = "1.0.0"

from palette_dither.color_utils import mean_color_error, quantize_nearest
from palette_dither.config import ConfigurationError, DitherConfig
from palette_dither.dithering import (
    FLOYD_STEINBERG_KERNEL,
    apply_floyd_steinberg,
    diffusion_targets,
    dither_image,
)
from palette_dither.image_io import load_image, make_comparison_grid, save_image
from palette_dither.palette import (
    PALETTES,
    closest_palette_color,
    get_palette,
    parse_hex_palette,
    validate_palette,
)

__all__ = [
    "FLOYD_STEINBERG_KERNEL",
    "PALETTES",
    "ConfigurationError",
    "DitherConfig",
    "apply_floyd_steinberg",
    "closest_palette_color",
    "diffusion_targets",
    "dither_image",
    "get_palette",
    "load_image",
    "make_comparison_grid",
    "mean_color_error",
    "parse_hex_palette",
    "quantize_nearest",
    "save_image",
    "validate_palette",
]
