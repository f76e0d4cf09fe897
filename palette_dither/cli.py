"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import NoReturn

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from palette_dither.color_utils import mean_color_error, quantize_nearest
from palette_dither.config import ConfigurationError, DitherConfig
from palette_dither.dithering import dither_image
from palette_dither.image_io import load_image, make_comparison_grid, save_image
from palette_dither.palette import PALETTES, get_palette, parse_hex_palette

app = typer.Typer(
    name="palette-dither",
    help="Reduce images to a fixed colour palette with Floyd-Steinberg dithering.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()
logger = logging.getLogger("palette_dither")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _collect_images(folder: Path, extensions: frozenset[str]) -> list[Path]:
    if not folder.exists():
        return []
    return sorted(
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in extensions
    )


def _resolve_palette(palette_name: str, colors: str | None) -> np.ndarray:
    if colors:
        return parse_hex_palette(colors)
    return get_palette(palette_name)


def _process(image: np.ndarray, palette: np.ndarray, dither: bool) -> np.ndarray:
    if dither:
        return dither_image(image, palette)
    return quantize_nearest(image, palette)


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


# Defaults come from DitherConfig - single source of truth
_DEFAULTS = DitherConfig()


# -- single-image command ----------------------------------------------

@app.command()
def single(
    input_path: Path = typer.Argument(..., help="Image to dither"),
    output_path: Path = typer.Argument(..., help="Where to write the result"),
    palette_name: str = typer.Option(
        _DEFAULTS.palette_name, "--palette", "-p", help="Preset palette name",
    ),
    colors: str | None = typer.Option(
        _DEFAULTS.colors, "--colors", "-c",
        help="Comma-separated hex colours, e.g. '#000000,#FFFFFF' (overrides --palette)",
    ),
    dither: bool = typer.Option(
        _DEFAULTS.dither, "--dither/--no-dither", help="Floyd-Steinberg error diffusion",
    ),
    keep_alpha: bool = typer.Option(
        _DEFAULTS.keep_alpha, "--keep-alpha/--drop-alpha", help="Pass alpha through",
    ),
    upscale: int = typer.Option(
        _DEFAULTS.pixel_upscale, "--upscale", "-u", help="Pixel upscale factor",
    ),
    comparison: Path | None = typer.Option(
        None, "--comparison", help="Also write an Original | Dithered grid here",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Dither INPUT_PATH onto a fixed palette and save it to OUTPUT_PATH."""
    _setup_logging(verbose)

    if not input_path.is_file():
        _fail(f'Input file "{input_path}" does not exist.')

    try:
        palette = _resolve_palette(palette_name, colors)
    except ConfigurationError as exc:
        _fail(str(exc))

    try:
        img = load_image(input_path, keep_alpha=keep_alpha)
    except OSError as exc:
        _fail(f"Cannot read {input_path}: {exc}")

    h, w = img.shape[:2]
    logger.info("Input: %dx%d, %d channels, %d palette colours", w, h, img.shape[2], len(palette))

    t0 = time.perf_counter()
    result = _process(img, palette, dither)
    elapsed = time.perf_counter() - t0

    output_path.parent.mkdir(parents=True, exist_ok=True)
    save_image(result, output_path, upscale)
    if comparison is not None:
        comparison.parent.mkdir(parents=True, exist_ok=True)
        make_comparison_grid(img, result, palette, comparison, upscale)

    err = mean_color_error(img, result)
    console.print(
        f"[green]✓[/green] Saved to {output_path}  "
        f"[dim]{w}x{h} px  error={err:.1f}  time={elapsed:.1f}s[/dim]"
    )


# -- batch command -----------------------------------------------------

@app.command()
def batch(
    input_dir: Path = typer.Option(
        _DEFAULTS.input_dir, "--input", "-i", help="Folder with source images",
    ),
    output_dir: Path = typer.Option(
        _DEFAULTS.output_dir, "--output", "-o", help="Results folder",
    ),
    palette_name: str = typer.Option(
        _DEFAULTS.palette_name, "--palette", "-p", help="Preset palette name",
    ),
    colors: str | None = typer.Option(
        _DEFAULTS.colors, "--colors", "-c", help="Comma-separated hex colours",
    ),
    dither: bool = typer.Option(
        _DEFAULTS.dither, "--dither/--no-dither", help="Floyd-Steinberg error diffusion",
    ),
    keep_alpha: bool = typer.Option(
        _DEFAULTS.keep_alpha, "--keep-alpha/--drop-alpha", help="Pass alpha through",
    ),
    upscale: int = typer.Option(
        _DEFAULTS.pixel_upscale, "--upscale", "-u", help="Pixel upscale factor",
    ),
    save_comparison: bool = typer.Option(
        _DEFAULTS.save_comparison, "--comparison/--no-comparison",
        help="Write an Original | Dithered grid per image",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Dither every image in INPUT_DIR and write results to OUTPUT_DIR."""
    _setup_logging(verbose)

    cfg = DitherConfig(
        palette_name=palette_name,
        colors=colors,
        dither=dither,
        keep_alpha=keep_alpha,
        pixel_upscale=upscale,
        save_comparison=save_comparison,
        input_dir=input_dir,
        output_dir=output_dir,
    )

    # Validate the palette before touching the filesystem
    try:
        palette = _resolve_palette(cfg.palette_name, cfg.colors)
    except ConfigurationError as exc:
        _fail(str(exc))

    images = _collect_images(input_dir, cfg.SUPPORTED_EXTENSIONS)
    if not images:
        console.print(f"\n[yellow]No images found in {input_dir}/[/yellow]")
        console.print("Place .jpg / .png / ... files there and re-run.\n")
        raise typer.Exit(0)

    output_dir.mkdir(parents=True, exist_ok=True)

    console.print(Panel.fit(
        f"[bold]PALETTE DITHER[/bold]\n"
        f"Palette: {cfg.colors or cfg.palette_name} ({len(palette)} colours)\n"
        f"Dithering: {cfg.dither}  |  Images: {len(images)}",
        border_style="cyan",
    ))

    failed = 0
    for idx, img_path in enumerate(images, 1):
        stem = img_path.stem
        console.rule(f"[bold cyan][{idx}/{len(images)}] {img_path.name}[/bold cyan]")
        t_total = time.perf_counter()

        try:
            img = load_image(img_path, keep_alpha=cfg.keep_alpha)
        except OSError as exc:
            logger.error("Skipping %s: %s", img_path.name, exc)
            failed += 1
            continue

        h, w = img.shape[:2]
        logger.info("Input: %dx%d, %d channels", w, h, img.shape[2])

        result = _process(img, palette, cfg.dither)

        out_path = output_dir / f"{stem}_dithered.{cfg.output_format}"
        save_image(result, out_path, cfg.pixel_upscale)

        if cfg.save_comparison:
            comp_path = output_dir / f"{stem}_comparison.{cfg.output_format}"
            make_comparison_grid(img, result, palette, comp_path, cfg.pixel_upscale)

        err = mean_color_error(img, result)
        elapsed = time.perf_counter() - t_total
        console.print(
            f"  [green]✓[/green] {out_path.name}  "
            f"[dim]{w}x{h} px  error={err:.1f}  time={elapsed:.1f}s[/dim]"
        )

    if failed:
        console.print(f"[yellow]{failed} image(s) could not be read[/yellow]")
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"[bold green]ALL DONE[/bold green] - results in [bold]{output_dir}/[/bold]",
        border_style="green",
    ))


# -- palette listing ---------------------------------------------------

@app.command()
def palettes() -> None:
    """List the preset palettes."""
    table = Table(title="Preset palettes")
    table.add_column("Name", style="bold", no_wrap=True)
    table.add_column("Colours", justify="right", no_wrap=True)
    table.add_column("RGB")
    for name, colors in PALETTES.items():
        swatches = " ".join(
            f"[on #{r:02x}{g:02x}{b:02x}]  [/] #{r:02x}{g:02x}{b:02x}"
            for r, g, b in colors
        )
        table.add_row(name, str(len(colors)), swatches)
    console.print(table)


if __name__ == "__main__":
    app()
