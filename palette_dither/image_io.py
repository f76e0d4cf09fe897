"""Image loading, saving, and comparison-grid generation."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont


def load_image(path: str | Path, keep_alpha: bool = True) -> np.ndarray:
    """Decode an image into a pixel array.

    Images with transparency become RGBA when *keep_alpha* is set;
    everything else is converted to RGB.

    Returns:
        (H, W, 3) or (H, W, 4) uint8 array.
    """
    with Image.open(path) as img:
        has_alpha = img.mode in ("RGBA", "LA", "PA") or (
            img.mode == "P" and "transparency" in img.info
        )
        mode = "RGBA" if keep_alpha and has_alpha else "RGB"
        return np.array(img.convert(mode), dtype=np.uint8)


def _save_format(path: str | Path) -> str | None:
    """Let Pillow pick from the suffix; fall back to PNG when it can't."""
    if Path(path).suffix.lower() in Image.registered_extensions():
        return None
    return "PNG"


def save_image(
    array: np.ndarray,
    path: str | Path,
    pixel_upscale: int = 1,
) -> None:
    """Save an (H, W, 3|4) array, nearest-neighbour upscaled by *pixel_upscale*."""
    # JPEG has no alpha channel
    if Path(path).suffix.lower() in (".jpg", ".jpeg", ".jfif"):
        array = array[..., :3]
    img = Image.fromarray(array.astype(np.uint8))
    if pixel_upscale > 1:
        h, w = array.shape[:2]
        img = img.resize((w * pixel_upscale, h * pixel_upscale), Image.NEAREST)
    img.save(path, format=_save_format(path))


def _palette_strip(palette: np.ndarray, width: int, height: int) -> Image.Image:
    """Vertical swatch column, one band per palette colour."""
    k = len(palette)
    rows = np.repeat(np.arange(k), max(1, height // k))[:height]
    rows = np.pad(rows, (0, height - len(rows)), mode="edge")
    strip = palette[rows][:, np.newaxis, :].repeat(width, axis=1)
    return Image.fromarray(strip.astype(np.uint8))


def make_comparison_grid(
    original: np.ndarray,
    dithered: np.ndarray,
    palette: np.ndarray,
    output_path: str | Path,
    pixel_upscale: int = 1,
) -> None:
    """Create a 3-panel comparison: Original | Palette | Dithered.

    Both image panels are upscaled by *pixel_upscale*; the palette panel
    is a swatch column of the same height.
    """
    h, w = original.shape[:2]
    panel_w = max(1, w * pixel_upscale)
    panel_h = max(1, h * pixel_upscale)
    swatch_w = max(24, panel_w // 8)
    label_height = 36

    original_img = Image.fromarray(original[..., :3]).resize(
        (panel_w, panel_h), Image.NEAREST,
    )
    dithered_img = Image.fromarray(dithered[..., :3]).resize(
        (panel_w, panel_h), Image.NEAREST,
    )
    palette_img = _palette_strip(palette, swatch_w, panel_h)

    panels = [original_img, palette_img, dithered_img]
    labels = ["Original", f"{len(palette)} colours", "Dithered"]

    gap = 8
    total_w = sum(p.width for p in panels) + (len(panels) - 1) * gap
    total_h = panel_h + label_height

    canvas = Image.new("RGB", (total_w, total_h), (30, 30, 30))
    draw = ImageDraw.Draw(canvas)

    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 18,
        )
    except OSError:
        font = ImageFont.load_default()

    x = 0
    for panel, label in zip(panels, labels, strict=False):
        canvas.paste(panel, (x, label_height))

        bbox = draw.textbbox((0, 0), label, font=font)
        text_w = bbox[2] - bbox[0]
        tx = x + (panel.width - text_w) // 2
        draw.text((tx, 6), label, fill=(220, 220, 220), font=font)
        x += panel.width + gap

    canvas.save(output_path, format=_save_format(output_path))
