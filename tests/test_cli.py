"""Command-line tests via Typer's CliRunner."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image
from typer.testing import CliRunner

from palette_dither.cli import app
from palette_dither.palette import PALETTES

runner = CliRunner()


@pytest.fixture
def src_image(tmp_path: Path) -> Path:
    rng = np.random.default_rng(11)
    p = tmp_path / "src.png"
    Image.fromarray(rng.integers(0, 256, (6, 8, 3), dtype=np.uint8)).save(p)
    return p


def _colours(path: Path) -> set[tuple[int, ...]]:
    with Image.open(path) as img:
        arr = np.array(img.convert("RGB"))
    return {tuple(int(v) for v in p) for p in arr.reshape(-1, 3)}


class TestSingle:
    def test_default_palette(self, tmp_path: Path, src_image: Path) -> None:
        out = tmp_path / "out" / "dithered.png"
        result = runner.invoke(app, ["single", str(src_image), str(out)])
        assert result.exit_code == 0, result.output
        assert out.exists()
        assert _colours(out).issubset(set(PALETTES["default"]))

    def test_hex_colours_and_upscale(self, tmp_path: Path, src_image: Path) -> None:
        out = tmp_path / "bw.png"
        result = runner.invoke(
            app,
            ["single", str(src_image), str(out), "--colors", "#000000,#ffffff", "-u", "2"],
        )
        assert result.exit_code == 0, result.output
        assert _colours(out).issubset({(0, 0, 0), (255, 255, 255)})
        with Image.open(out) as img:
            assert img.size == (16, 12)

    def test_no_dither_with_comparison(self, tmp_path: Path, src_image: Path) -> None:
        out = tmp_path / "flat.png"
        cmp_path = tmp_path / "cmp.png"
        result = runner.invoke(
            app,
            ["single", str(src_image), str(out), "--no-dither", "--comparison", str(cmp_path)],
        )
        assert result.exit_code == 0, result.output
        assert out.exists()
        assert cmp_path.exists()

    def test_output_without_extension(self, tmp_path: Path, src_image: Path) -> None:
        out = tmp_path / "out"
        cmp_path = tmp_path / "cmp"
        result = runner.invoke(
            app, ["single", str(src_image), str(out), "--comparison", str(cmp_path)],
        )
        assert result.exit_code == 0, result.output
        with Image.open(out) as img:
            assert img.format == "PNG"
        with Image.open(cmp_path) as img:
            assert img.format == "PNG"
        assert _colours(out).issubset(set(PALETTES["default"]))

    def test_missing_input(self, tmp_path: Path) -> None:
        out = tmp_path / "never.png"
        result = runner.invoke(app, ["single", str(tmp_path / "missing.png"), str(out)])
        assert result.exit_code == 1
        assert "exist" in result.output
        assert not out.exists()

    def test_unknown_palette(self, tmp_path: Path, src_image: Path) -> None:
        out = tmp_path / "never.png"
        result = runner.invoke(
            app, ["single", str(src_image), str(out), "--palette", "nope"],
        )
        assert result.exit_code == 1
        assert "Unknown" in result.output
        assert not out.exists()

    def test_malformed_colours(self, tmp_path: Path, src_image: Path) -> None:
        out = tmp_path / "never.png"
        result = runner.invoke(
            app, ["single", str(src_image), str(out), "--colors", "#zzzzzz"],
        )
        assert result.exit_code == 1
        assert not out.exists()

    def test_unreadable_input(self, tmp_path: Path) -> None:
        bogus = tmp_path / "bogus.png"
        bogus.write_text("not an image")
        out = tmp_path / "never.png"
        result = runner.invoke(app, ["single", str(bogus), str(out)])
        assert result.exit_code == 1
        assert not out.exists()


class TestBatch:
    def test_processes_folder(self, tmp_path: Path) -> None:
        in_dir = tmp_path / "images"
        out_dir = tmp_path / "output"
        in_dir.mkdir()
        rng = np.random.default_rng(3)
        for name in ("a.png", "b.jpg"):
            Image.fromarray(rng.integers(0, 256, (4, 5, 3), dtype=np.uint8)).save(in_dir / name)
        (in_dir / "notes.txt").write_text("ignored")

        result = runner.invoke(
            app,
            ["batch", "-i", str(in_dir), "-o", str(out_dir), "-p", "bw", "--comparison"],
        )
        assert result.exit_code == 0, result.output
        assert (out_dir / "a_dithered.png").exists()
        assert (out_dir / "b_dithered.png").exists()
        assert (out_dir / "a_comparison.png").exists()
        assert _colours(out_dir / "a_dithered.png").issubset({(0, 0, 0), (255, 255, 255)})

    def test_empty_folder(self, tmp_path: Path) -> None:
        result = runner.invoke(
            app, ["batch", "-i", str(tmp_path / "none"), "-o", str(tmp_path / "out")],
        )
        assert result.exit_code == 0
        assert "No images" in result.output

    def test_bad_palette_writes_nothing(self, tmp_path: Path) -> None:
        out_dir = tmp_path / "out"
        result = runner.invoke(
            app, ["batch", "-i", str(tmp_path), "-o", str(out_dir), "-p", "nope"],
        )
        assert result.exit_code == 1
        assert not out_dir.exists()


def test_palettes_listing() -> None:
    result = runner.invoke(app, ["palettes"])
    assert result.exit_code == 0
    for name in PALETTES:
        assert name in result.output
