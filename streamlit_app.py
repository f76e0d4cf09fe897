"""
Palette Dither - interactive preview

Run with:
    streamlit run streamlit_app.py
"""

from __future__ import annotations

import io
import time

import numpy as np
import streamlit as st
from PIL import Image

from palette_dither.color_utils import mean_color_error, quantize_nearest
from palette_dither.config import ConfigurationError, DitherConfig
from palette_dither.dithering import dither_image
from palette_dither.palette import PALETTES, get_palette, parse_hex_palette

# -- Page config -------------------------------------------------------
st.set_page_config(
    page_title="Palette Dither",
    page_icon=None,
    layout="wide",
    initial_sidebar_state="collapsed",
)

_DEFAULTS = DitherConfig()


# -- Helpers -----------------------------------------------------------

def _swatch_html(palette: np.ndarray) -> str:
    cells = "".join(
        f'<span style="display:inline-block;width:22px;height:22px;'
        f'margin-right:4px;border:1px solid #ccc;'
        f'background:#{r:02x}{g:02x}{b:02x}"></span>'
        for r, g, b in palette
    )
    return f"<div>{cells}</div>"


def _to_png(array: np.ndarray, upscale: int) -> bytes:
    img = Image.fromarray(array)
    if upscale > 1:
        img = img.resize((img.width * upscale, img.height * upscale), Image.NEAREST)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


# -- Title -------------------------------------------------------------
st.title("Palette Dither")
st.caption(
    "Reduce an image to a handful of fixed colours. Floyd-Steinberg error "
    "diffusion spreads each pixel's rounding error onto its neighbours so "
    "gradients survive the reduction."
)

# -- Controls ----------------------------------------------------------
ctrl1, ctrl2, ctrl3 = st.columns(3)
with ctrl1:
    names = list(PALETTES)
    palette_name = st.selectbox(
        "Palette", names, index=names.index(_DEFAULTS.palette_name),
    )
    colors = st.text_input("Custom hex colours (overrides preset)", "")
with ctrl2:
    max_side = st.slider("Max side (px)", 16, 512, 160)
    upscale = st.slider("Upscale", 1, 8, 2)
with ctrl3:
    dither = st.toggle("Floyd-Steinberg dithering", value=_DEFAULTS.dither)
    keep_alpha = st.toggle("Keep alpha", value=_DEFAULTS.keep_alpha)

try:
    palette = parse_hex_palette(colors) if colors.strip() else get_palette(palette_name)
except ConfigurationError as exc:
    st.error(str(exc))
    st.stop()

st.markdown(_swatch_html(palette), unsafe_allow_html=True)
st.markdown("---")

# -- Upload ------------------------------------------------------------
uploaded = st.file_uploader(
    "Select image", type=["jpg", "jpeg", "png", "webp", "bmp", "jfif"],
)

if uploaded is not None:
    original = Image.open(io.BytesIO(uploaded.getvalue()))
    mode = "RGBA" if keep_alpha and original.mode in ("RGBA", "LA", "PA") else "RGB"
    original = original.convert(mode)
    original.thumbnail((max_side, max_side), Image.LANCZOS)
    source = np.array(original, dtype=np.uint8)
    h, w = source.shape[:2]

    with st.spinner("Dithering ..."):
        t0 = time.perf_counter()
        result = dither_image(source, palette) if dither else quantize_nearest(source, palette)
        elapsed = time.perf_counter() - t0

    col1, col2 = st.columns(2)
    with col1:
        st.image(_to_png(source, upscale), caption="Original", use_container_width=True)
    with col2:
        png = _to_png(result, upscale)
        st.image(png, caption="Dithered", use_container_width=True)

    m1, m2, m3 = st.columns(3)
    m1.metric("Resolution", f"{w} × {h}")
    m2.metric("Time", f"{elapsed:.1f} s")
    m3.metric("Avg Error", f"{mean_color_error(source, result):.1f}")

    st.download_button(
        "Download PNG",
        data=png,
        file_name="dithered.png",
        mime="image/png",
        use_container_width=True,
    )
