"""Ordered chains of named treatments and the text file format that stores them."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import numpy as np

from .treatments import apply_treatment, is_known

logger = logging.getLogger(__name__)

ORIGINAL_LABEL = "Original"
HEADER_TITLE = "# Pipeline de Traitements d'Images"


class PipelineError(Exception):
    """Raised when a pipeline operation cannot be carried out."""


@dataclass(frozen=True)
class ParsedPipeline:
    """Treatments read from a pipeline file, with the names that were not recognised."""

    steps: tuple[str, ...]
    unknown: tuple[str, ...] = ()


@dataclass
class Pipeline:
    """An ordered list of treatment names applied one after another."""

    steps: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[str]:
        return iter(self.steps)

    @property
    def labels(self) -> list[str]:
        """Stage labels as displayed: the original image first, then each step."""
        return [ORIGINAL_LABEL, *self.steps]

    def append(self, name: str) -> None:
        """Add a treatment at the end of the chain."""
        self.steps.append(name)

    def remove_indices(self, indices: Iterable[int]) -> int:
        """Remove the stages at the given display indices and return how many were checked.

        Index 0 is the original image and cannot be removed; indices past the
        end are ignored.
        """
        checked = sorted(set(indices), reverse=True)
        if not checked:
            raise PipelineError("Veuillez cocher au moins un traitement à supprimer.")
        if 0 in checked:
            raise PipelineError("L'étape 'Original' ne peut pas être supprimée.")
        for index in checked:
            position = index - 1
            if 0 <= position < len(self.steps):
                del self.steps[position]
        return len(checked)

    def clear(self) -> None:
        """Remove every treatment."""
        if not self.steps:
            raise PipelineError("Le pipeline est déjà vide.")
        self.steps.clear()

    def replace(self, names: Iterable[str]) -> None:
        """Replace the whole chain with the given treatment names."""
        self.steps = list(names)

    def run(self, image: np.ndarray) -> list[np.ndarray]:
        """Every stage of the chain: the original image, then the result of each step.

        An empty image gives no stages.
        """
        arr = np.asarray(image)
        if arr.size == 0:
            return []
        stages = [arr.copy()]
        current = arr
        for step in self.steps:
            current = apply_treatment(step, current)
            stages.append(current)
        return stages

    def apply(self, image: np.ndarray) -> np.ndarray:
        """The image after the whole chain has been applied."""
        stages = self.run(image)
        if not stages:
            return np.asarray(image).copy()
        return stages[-1]

    def dump(self, now: datetime | None = None) -> str:
        """Text of the pipeline file, with a commented header."""
        if not self.steps:
            raise PipelineError("Le pipeline est vide. Rien à sauvegarder.")
        stamp = (now or datetime.now()).strftime("%Y-%m-%dT%H:%M:%S")
        header = (
            f"{HEADER_TITLE}\n"
            f"# Créé le {stamp}\n"
            f"# Nombre de traitements: {len(self.steps)}\n\n"
        )
        return header + "".join(f"{step}\n" for step in self.steps)

    def save(self, path: str | Path, now: datetime | None = None) -> None:
        """Write the pipeline file to path."""
        text = self.dump(now)
        try:
            Path(path).write_text(text, encoding="utf-8")
        except OSError as exc:
            raise PipelineError("Impossible de créer le fichier!") from exc


def parse_pipeline(text: str) -> ParsedPipeline:
    """Read treatment names from pipeline file text.

    Blank lines and lines starting with '#' are skipped; unknown names are
    logged and set aside.
    """
    steps: list[str] = []
    unknown: list[str] = []
    for line in text.splitlines():
        if not line or line.startswith("#"):
            continue
        if is_known(line):
            steps.append(line)
        else:
            logger.warning("Traitement inconnu ignoré: %s", line)
            unknown.append(line)
    return ParsedPipeline(tuple(steps), tuple(unknown))


def load_pipeline(path: str | Path) -> ParsedPipeline:
    """Read a pipeline file; it must name at least one known treatment."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise PipelineError("Impossible d'ouvrir le fichier!") from exc
    parsed = parse_pipeline(text)
    if not parsed.steps:
        raise PipelineError("Aucun traitement valide trouvé dans le fichier!")
    return parsed