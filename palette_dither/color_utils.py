"""Vectorised RGB distance helpers."""

from __future__ import annotations

import numpy as np


def squared_distances(
    colors: np.ndarray,
    palette: np.ndarray,
    chunk_size: int = 4096,
) -> np.ndarray:
    """Pairwise squared Euclidean RGB distance between colours and palette.

    Args:
        colors:  (N, 3) RGB, any numeric dtype.
        palette: (K, 3) uint8 RGB.
        chunk_size: Rows computed per batch (controls peak RAM).

    Returns:
        (N, K) float64 distance matrix.
    """
    c = colors.astype(np.float64)
    p = palette.astype(np.float64)

    n = len(c)
    dist = np.empty((n, len(p)), dtype=np.float64)
    for i in range(0, n, chunk_size):
        j = min(i + chunk_size, n)
        diff = c[i:j, np.newaxis, :] - p[np.newaxis, :, :]
        dist[i:j] = np.sum(diff ** 2, axis=2)
    return dist


def quantize_nearest(image: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """Map every pixel to its closest palette colour, without diffusion.

    Args:
        image:   (H, W, 3) or (H, W, 4) uint8.  Alpha is copied unchanged.
        palette: (K, 3) uint8, already validated.

    Returns:
        New array with the same shape and dtype as *image*.
    """
    h, w = image.shape[:2]
    result = image.copy()
    if h * w == 0:
        return result
    flat = image[..., :3].reshape(-1, 3)
    idx = np.argmin(squared_distances(flat, palette), axis=1)
    result[..., :3] = palette[idx].reshape(h, w, 3)
    return result


def mean_color_error(original: np.ndarray, quantized: np.ndarray) -> float:
    """Mean per-pixel Euclidean RGB distance between two images."""
    o = original[..., :3].reshape(-1, 3).astype(np.float64)
    q = quantized[..., :3].reshape(-1, 3).astype(np.float64)
    if len(o) == 0:
        return 0.0
    return float(np.mean(np.sqrt(np.sum((o - q) ** 2, axis=1))))
