# cardscan/match/templates.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Tuple
import logging
import cv2
import numpy as np

from cardscan.core.contracts import TemplateEntry
from cardscan.core.errors import TemplateLoadError
from cardscan.io.ingest import load_grayscale

log = logging.getLogger(__name__)

# Declaration order is the matcher's tie-break order
RANK_NAMES: Tuple[str, ...] = (
    "Ace", "Two", "Three", "Four", "Five", "Six", "Seven",
    "Eight", "Nine", "Ten", "Jack", "Queen", "King",
)
SUIT_NAMES: Tuple[str, ...] = ("Hearts", "Clubs", "Spades", "Diamonds")

DEFAULT_RANK_SIZE = (30, 45)  # width, height


def _entry(label: str, img: np.ndarray) -> TemplateEntry:
    img = np.asarray(img)
    if img.ndim != 2 or img.size == 0 or img.dtype != np.uint8:
        raise TemplateLoadError(
            f"Template '{label}' must be a non-empty single-channel uint8 image, "
            f"got shape {img.shape} dtype {img.dtype}"
        )
    out = np.ascontiguousarray(img).copy()
    out.setflags(write=False)
    return TemplateEntry(label, out)


@dataclass(frozen=True)
class TemplateSet:
    """Labeled reference glyphs. Read-only; safe to share between threads."""
    ranks: Tuple[TemplateEntry, ...]
    suits: Tuple[TemplateEntry, ...]

    @classmethod
    def from_images(cls, ranks: Iterable[Tuple[str, np.ndarray]], suits: Iterable[Tuple[str, np.ndarray]]) -> "TemplateSet":
        """
        Build from (label, gray image) pairs, keeping the given order.
        Raises TemplateLoadError for an empty, multi-channel or non-uint8 image.
        """
        return cls(
            ranks=tuple(_entry(label, img) for label, img in ranks),
            suits=tuple(_entry(label, img) for label, img in suits),
        )

    @property
    def rank_labels(self) -> Tuple[str, ...]:
        return tuple(e.label for e in self.ranks)

    @property
    def suit_labels(self) -> Tuple[str, ...]:
        return tuple(e.label for e in self.suits)


def _read(folder: Path, name: str, ext: str) -> np.ndarray:
    path = folder / f"{name}.{ext}"
    try:
        return load_grayscale(path)
    except FileNotFoundError as e:
        raise TemplateLoadError(f"Template '{name}' missing or unreadable: {path}") from e


def load_template_set(
    folder: str | Path,
    ext: str = "png",
    rank_size: Tuple[int, int] = DEFAULT_RANK_SIZE,
) -> TemplateSet:
    """
    Load <folder>/<Name>.<ext> for all 13 ranks and 4 suits as grayscale.

    Rank images are resized to rank_size (width, height); suit images keep their
    native size. Any missing file fails the whole load.
    """
    folder = Path(folder)
    ext = ext.lstrip(".")
    ranks = [(name, cv2.resize(_read(folder, name, ext), tuple(rank_size))) for name in RANK_NAMES]
    suits = [(name, _read(folder, name, ext)) for name in SUIT_NAMES]
    log.info("loaded %d rank and %d suit templates from %s", len(ranks), len(suits), folder)
    return TemplateSet.from_images(ranks, suits)
