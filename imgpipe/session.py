"""Editing session: a source image, its treatment pipeline and every intermediate stage."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import imageio.v3 as iio
import numpy as np

from .display import to_rgb
from .pipeline import ParsedPipeline, Pipeline, load_pipeline

NO_IMAGE_MESSAGE = "Veuillez d'abord charger une image ou une vidéo!"


class SessionError(Exception):
    """Raised when a session action cannot be carried out."""


def _rgb_to_bgr(image: np.ndarray) -> np.ndarray:
    arr = np.asarray(image)
    if arr.ndim == 2:
        return np.repeat(arr[..., np.newaxis], 3, axis=2)
    if arr.ndim == 3 and arr.shape[2] == 1:
        return np.repeat(arr, 3, axis=2)
    if arr.ndim == 3 and arr.shape[2] in (3, 4):
        return np.ascontiguousarray(arr[..., 2::-1])
    raise ValueError(f"unsupported image shape {arr.shape}")


class Session:
    """Holds the original image and recomputes every pipeline stage after each change."""

    def __init__(self, pipeline: Pipeline | None = None) -> None:
        self.pipeline = pipeline if pipeline is not None else Pipeline()
        self.original: np.ndarray | None = None
        self.stages: list[np.ndarray] = []

    @property
    def final_image(self) -> np.ndarray | None:
        """The image after the whole pipeline, or None without an image."""
        return self.stages[-1] if self.stages else None

    @property
    def labels(self) -> list[str]:
        """Labels of the stages shown, empty when no image is loaded."""
        return self.pipeline.labels if self.original is not None else []

    def _recalculate(self) -> None:
        self.stages = [] if self.original is None else self.pipeline.run(self.original)

    def set_original(self, image: np.ndarray | None) -> None:
        """Use image (BGR) as the source and recompute the stages."""
        arr = None if image is None else np.asarray(image)
        self.original = None if arr is None or arr.size == 0 else arr.copy()
        self._recalculate()

    def load_image(self, path: str | Path) -> None:
        """Read an image file and make it the source."""
        try:
            image = _rgb_to_bgr(iio.imread(Path(path)))
        except Exception as exc:
            raise SessionError("Impossible de charger l'image!") from exc
        if image.size == 0:
            raise SessionError("Impossible de charger l'image!")
        self.set_original(image)

    def drop_treatment(self, name: str) -> None:
        """Append a treatment to the pipeline; an image must be loaded."""
        if self.original is None:
            raise SessionError(NO_IMAGE_MESSAGE)
        self.pipeline.append(name)
        self._recalculate()

    def remove_checked(self, indices) -> int:
        """Remove the checked stages (display indices) and return how many were checked."""
        removed = self.pipeline.remove_indices(indices)
        self._recalculate()
        return removed

    def clear_pipeline(self) -> None:
        """Remove every treatment from the pipeline."""
        self.pipeline.clear()
        self._recalculate()

    def save_image(self, path: str | Path) -> None:
        """Write the final image; the format follows the file extension."""
        final = self.final_image
        if final is None:
            raise SessionError("Aucune image à sauvegarder!")
        try:
            iio.imwrite(Path(path), to_rgb(final).astype(np.uint8))
        except Exception as exc:
            raise SessionError("Erreur lors de la sauvegarde!") from exc

    def save_pipeline(self, path: str | Path, now: datetime | None = None) -> None:
        """Write the pipeline file."""
        self.pipeline.save(path, now)

    def load_pipeline(self, path: str | Path) -> ParsedPipeline:
        """Replace the pipeline with the treatments read from path."""
        parsed = load_pipeline(path)
        if self.original is None:
            raise SessionError(NO_IMAGE_MESSAGE)
        self.pipeline.replace(parsed.steps)
        self._recalculate()
        return parsed

    def stage_at(self, index: int) -> np.ndarray:
        """A copy of the stage at index: 0 is the original, then one per treatment."""
        if not 0 <= index < len(self.stages):
            raise IndexError(f"stage {index} out of range")
        return self.stages[index].copy()


class DropTarget:
    """Receives treatment names dropped onto the image area."""

    def __init__(self, session: Session | None) -> None:
        self.session = session

    def on_drop_text(self, x: int, y: int, data: str) -> bool:
        """Apply the dropped treatment; False when no session is attached."""
        if self.session is None:
            return False
        self.session.drop_treatment(data)
        return True