"""Preparing images for display: colour order, fitted scaling and centring."""

from __future__ import annotations

import numpy as np
from PIL import Image

DEFAULT_MARGIN = 0.95


def to_rgb(img: np.ndarray) -> np.ndarray:
    """Convert a grey, BGR or BGRA image to a three-channel RGB image."""
    arr = np.asarray(img)
    if arr.size == 0:
        raise ValueError("image is empty")
    if arr.ndim == 2:
        return np.repeat(arr[..., np.newaxis], 3, axis=2)
    if arr.ndim != 3:
        raise ValueError(f"unsupported image shape {arr.shape}")
    channels = arr.shape[2]
    if channels == 1:
        return np.repeat(arr, 3, axis=2)
    if channels in (3, 4):
        return np.ascontiguousarray(arr[..., 2::-1])
    raise ValueError(f"unsupported channel count {channels}")


def fit_scale(
    image_size: tuple[int, int],
    panel_size: tuple[int, int],
    margin: float = DEFAULT_MARGIN,
) -> float | None:
    """Scale that fits an image of (width, height) in a panel, keeping its ratio.

    Returns None when the panel has no area.
    """
    image_w, image_h = image_size
    panel_w, panel_h = panel_size
    if image_w <= 0 or image_h <= 0:
        raise ValueError("image has no area")
    if panel_w <= 0 or panel_h <= 0:
        return None
    return min(panel_w / image_w, panel_h / image_h) * margin


def resize_to_fit(img: np.ndarray, panel_size: tuple[int, int]) -> np.ndarray | None:
    """RGB copy of the image scaled to fit the panel with a small margin.

    Returns None when the panel has no area.
    """
    rgb = to_rgb(img)
    height, width = rgb.shape[:2]
    scale = fit_scale((width, height), panel_size)
    if scale is None:
        return None
    new_size = (max(1, round(width * scale)), max(1, round(height * scale)))
    resized = Image.fromarray(rgb.astype(np.uint8)).resize(new_size, Image.Resampling.BILINEAR)
    return np.asarray(resized)


def center_offset(content_size: tuple[int, int], panel_size: tuple[int, int]) -> tuple[int, int]:
    """Top-left position that centres content of (width, height) in the panel."""

    def half(delta: int) -> int:
        # truncate toward zero, so oversized content is pinned at the origin
        return int(delta / 2)

    return (
        half(panel_size[0] - content_size[0]),
        half(panel_size[1] - content_size[1]),
    )