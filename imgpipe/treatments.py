"""Image treatments applied to BGR images stored as numpy arrays."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

import numpy as np
from scipy import ndimage

logger = logging.getLogger(__name__)

_BLUR_KSIZE = 15
_CANNY_LOW = 50
_CANNY_HIGH = 150
_THRESHOLD = 128

_TAN_22_5 = 0.4142135623730951
_TAN_67_5 = 2.414213562373095


def _gaussian_kernel(ksize: int, sigma: float = 0.0) -> np.ndarray:
    """Normalised 1-D Gaussian kernel; sigma is derived from ksize when not positive."""
    if sigma <= 0:
        sigma = 0.3 * ((ksize - 1) * 0.5 - 1) + 0.8
    offsets = np.arange(ksize, dtype=np.float64) - (ksize - 1) / 2
    kernel = np.exp(-(offsets**2) / (2 * sigma * sigma))
    return kernel / kernel.sum()


def _restore_dtype(values: np.ndarray, dtype: np.dtype) -> np.ndarray:
    if np.issubdtype(dtype, np.integer):
        info = np.iinfo(dtype)
        return np.clip(np.rint(values), info.min, info.max).astype(dtype)
    return values.astype(dtype)


def _gray(img: np.ndarray) -> np.ndarray:
    """Luma of a BGR or BGRA image, rounded the way integer colour conversion does."""
    if img.ndim != 3 or img.shape[2] not in (3, 4):
        raise ValueError(f"expected a BGR or BGRA image, got shape {img.shape}")
    b = img[..., 0].astype(np.int64)
    g = img[..., 1].astype(np.int64)
    r = img[..., 2].astype(np.int64)
    if np.issubdtype(img.dtype, np.integer):
        luma = (b * 1868 + g * 9617 + r * 4899 + 8192) >> 14
        return luma.astype(img.dtype)
    return (0.114 * img[..., 0] + 0.587 * img[..., 1] + 0.299 * img[..., 2]).astype(img.dtype)


def _to_bgr(gray: np.ndarray) -> np.ndarray:
    return np.repeat(gray[..., np.newaxis], 3, axis=2)


def _require_image(img: np.ndarray) -> np.ndarray:
    arr = np.asarray(img)
    if arr.size == 0:
        raise ValueError("image is empty")
    return arr


def gaussian_blur(img: np.ndarray) -> np.ndarray:
    """Blur with a 15x15 Gaussian kernel, sigma derived from the kernel size."""
    arr = _require_image(img)
    kernel = _gaussian_kernel(_BLUR_KSIZE)
    out = arr.astype(np.float64)
    for axis in (0, 1):
        out = ndimage.correlate1d(out, kernel, axis=axis, mode="mirror")
    return _restore_dtype(out, arr.dtype)


def canny_edges(img: np.ndarray, low: float = _CANNY_LOW, high: float = _CANNY_HIGH) -> np.ndarray:
    """Canny edge map of the image, returned as a three-channel 0/255 image."""
    arr = _require_image(img)
    gray = _gray(arr).astype(np.int64)
    gx = ndimage.sobel(gray, axis=1, mode="mirror")
    gy = ndimage.sobel(gray, axis=0, mode="mirror")
    ax, ay = np.abs(gx), np.abs(gy)
    mag = ax + ay

    height, width = mag.shape
    padded = np.pad(mag, 1)

    def neighbour(dy: int, dx: int) -> np.ndarray:
        return padded[1 + dy : 1 + dy + height, 1 + dx : 1 + dx + width]

    horizontal = ay <= ax * _TAN_22_5
    vertical = ~horizontal & (ay > ax * _TAN_67_5)
    diagonal = ~horizontal & ~vertical
    same_sign = (gx * gy) > 0

    keep = horizontal & (mag > neighbour(0, -1)) & (mag >= neighbour(0, 1))
    keep |= vertical & (mag > neighbour(-1, 0)) & (mag >= neighbour(1, 0))
    keep |= diagonal & same_sign & (mag > neighbour(-1, -1)) & (mag >= neighbour(1, 1))
    keep |= diagonal & ~same_sign & (mag > neighbour(-1, 1)) & (mag >= neighbour(1, -1))

    candidates = keep & (mag > low)
    strong = keep & (mag > high)
    labels, _ = ndimage.label(candidates, structure=np.ones((3, 3), dtype=bool))
    strong_labels = np.unique(labels[strong])
    edges = np.isin(labels, strong_labels[strong_labels > 0])

    return _to_bgr(np.where(edges, 255, 0).astype(np.uint8))


def to_grayscale(img: np.ndarray) -> np.ndarray:
    """Grey-level version of the image, kept as three identical channels."""
    return _to_bgr(_gray(_require_image(img)))


def rotate_90_clockwise(img: np.ndarray) -> np.ndarray:
    """Rotate the image a quarter turn clockwise."""
    return np.ascontiguousarray(np.rot90(_require_image(img), k=-1))


def mirror_horizontal(img: np.ndarray) -> np.ndarray:
    """Flip the image left to right."""
    return np.ascontiguousarray(_require_image(img)[:, ::-1])


def threshold(img: np.ndarray, value: float = _THRESHOLD) -> np.ndarray:
    """Binary threshold of the grey levels: above value becomes 255, the rest 0."""
    gray = _gray(_require_image(img))
    return _to_bgr(np.where(gray > value, 255, 0).astype(np.uint8))


def negative(img: np.ndarray) -> np.ndarray:
    """Bitwise inversion of every channel."""
    arr = _require_image(img)
    if np.issubdtype(arr.dtype, np.integer) or arr.dtype == np.bool_:
        return np.invert(arr)
    raise ValueError(f"cannot invert an image of type {arr.dtype}")


class Treatment(str, Enum):
    """The treatments offered, named as they appear to the user."""

    GAUSSIAN_BLUR = "Flou Gaussien"
    CANNY = "Détection de Contours (Canny)"
    GRAYSCALE = "Niveaux de Gris"
    ROTATE_90 = "Rotation 90°"
    MIRROR = "Miroir Horizontal"
    THRESHOLD = "Seuillage"
    NEGATIVE = "Négatif"

    def apply(self, img: np.ndarray) -> np.ndarray:
        """Return a new image with this treatment applied."""
        return _OPERATIONS[self](img)


_OPERATIONS: dict[Treatment, Callable[[np.ndarray], np.ndarray]] = {
    Treatment.GAUSSIAN_BLUR: gaussian_blur,
    Treatment.CANNY: canny_edges,
    Treatment.GRAYSCALE: to_grayscale,
    Treatment.ROTATE_90: rotate_90_clockwise,
    Treatment.MIRROR: mirror_horizontal,
    Treatment.THRESHOLD: threshold,
    Treatment.NEGATIVE: negative,
}


def available_treatments() -> list[str]:
    """Names of every treatment, in display order."""
    return [treatment.value for treatment in Treatment]


def is_known(name: str) -> bool:
    """Whether name is one of the available treatments."""
    return name in Treatment._value2member_map_


def apply_treatment(name: str, img: np.ndarray) -> np.ndarray:
    """Apply the named treatment.

    An empty image, an unknown name or a treatment that cannot handle the
    image leaves it unchanged; the last case is logged as an error.
    """
    arr = np.asarray(img)
    if arr.size == 0 or not is_known(name):
        return arr.copy()
    try:
        return Treatment(name).apply(arr)
    except ValueError as exc:
        logger.error("Erreur de traitement: %s", exc)
        return arr.copy()