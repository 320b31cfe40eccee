"""Video clips: loading frames, playback timing and writing processed videos."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sized
from dataclasses import dataclass, field
from pathlib import Path

import imageio.v3 as iio
import numpy as np

from .display import to_rgb
from .pipeline import Pipeline, PipelineError

DEFAULT_FPS = 30.0

ProgressCallback = Callable[[int, "int | None"], "bool | None"]

_FRAME_DURATION_FORMATS = {".gif", ".png", ".apng", ".webp"}


def _to_bgr(frame: np.ndarray) -> np.ndarray:
    arr = np.asarray(frame)
    if arr.ndim == 2:
        return np.repeat(arr[..., np.newaxis], 3, axis=2)
    if arr.ndim == 3 and arr.shape[2] == 1:
        return np.repeat(arr, 3, axis=2)
    if arr.ndim == 3 and arr.shape[2] in (3, 4):
        return np.ascontiguousarray(arr[..., 2::-1])
    raise ValueError(f"unsupported frame shape {arr.shape}")


def _read_fps(path: Path) -> float:
    try:
        meta = iio.immeta(path)
    except Exception:
        return DEFAULT_FPS
    fps = meta.get("fps")
    if isinstance(fps, (int, float)) and fps > 0:
        return float(fps)
    duration = meta.get("duration")
    if isinstance(duration, (int, float)) and duration > 0:
        return 1000.0 / duration
    return DEFAULT_FPS


@dataclass
class VideoClip:
    """The frames of a video, in BGR order, with their frame rate."""

    frames: list[np.ndarray]
    fps: float = DEFAULT_FPS
    path: Path | None = field(default=None)

    def __post_init__(self) -> None:
        if self.fps <= 0:
            self.fps = DEFAULT_FPS

    def __len__(self) -> int:
        return len(self.frames)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self.frames)

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @classmethod
    def load(cls, path: str | Path) -> VideoClip:
        """Read every frame of the video at path."""
        source = Path(path)
        try:
            frames = [_to_bgr(frame) for frame in iio.imiter(source)]
        except Exception as exc:
            raise OSError(f"Impossible de charger la vidéo! ({source})") from exc
        if not frames:
            raise OSError(f"Impossible de charger la vidéo! ({source})")
        return cls(frames, _read_fps(source), source)

    def frame_at(self, index: int) -> np.ndarray:
        """A copy of the frame at index."""
        if not 0 <= index < len(self.frames):
            raise IndexError(f"frame {index} out of range 0..{len(self.frames) - 1}")
        return self.frames[index].copy()


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of writing a processed video."""

    frames_written: int
    total_frames: int

    @property
    def completed(self) -> bool:
        return self.frames_written == self.total_frames

    @property
    def message(self) -> str:
        if self.completed:
            return f"Vidéo sauvegardée avec succès!\n{self.frames_written} frames traitées"
        return (
            "Traitement interrompu:\n"
            f"{self.frames_written}/{self.total_frames} frames traitées"
        )


def format_time(seconds: int) -> str:
    """Seconds as MM:SS."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


def time_label(current_frame: int, total_frames: int, fps: float) -> str:
    """Position label "current / total" for a video."""
    if total_frames == 0 or fps <= 0:
        return "00:00 / 00:00"
    return f"{format_time(int(current_frame / fps))} / {format_time(int(total_frames / fps))}"


def playback_interval(fps: float) -> int:
    """Timer interval in milliseconds for playing at fps, at least 1."""
    return max(1, int(1000.0 / fps))


def process_frames(
    frames: Iterable[np.ndarray],
    pipeline: Pipeline,
    progress: ProgressCallback | None = None,
) -> Iterator[np.ndarray]:
    """Yield each frame with the pipeline applied.

    After each frame, progress(done, total) is called; returning False stops
    the processing.
    """
    total = len(frames) if isinstance(frames, Sized) else None
    for done, frame in enumerate(frames, start=1):
        yield pipeline.apply(frame)
        if progress is not None and progress(done, total) is False:
            return


def process_video(
    src: VideoClip | str | Path,
    dst: str | Path,
    pipeline: Pipeline,
    progress: ProgressCallback | None = None,
) -> ProcessResult:
    """Apply the pipeline to every frame of src and write the result to dst."""
    if len(pipeline) == 0:
        raise PipelineError("Le pipeline est vide!\nAjoutez au moins un traitement.")
    clip = src if isinstance(src, VideoClip) else VideoClip.load(src)
    if clip.frame_count == 0:
        raise ValueError("Erreur de lecture de la première frame!")

    processed = [to_rgb(frame) for frame in process_frames(clip.frames, pipeline, progress)]

    target = Path(dst)
    if target.suffix.lower() in _FRAME_DURATION_FORMATS:
        options: dict[str, float | int] = {"duration": 1000.0 / clip.fps, "loop": 0}
    else:
        options = {"fps": clip.fps}
    try:
        iio.imwrite(target, processed, **options)
    except Exception as exc:
        raise OSError(f"Impossible de créer le fichier vidéo! ({target})") from exc
    return ProcessResult(len(processed), clip.frame_count)