"""
Core contracts and simple data types shared across stages.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import cv2
import numpy as np

# Canonical card frame (width x height)
CANONICAL_W = 250
CANONICAL_H = 350

# Frame-level diagnostic images, in pipeline order
STAGE_TITLES: Tuple[str, ...] = (
    "Source",
    "Blurred",
    "Equalized",
    "Edges",
    "Contours",
    "Rectangle Contours",
    "Output",
)

# Per-card diagnostic images, in pipeline order
CARD_STAGE_TITLES: Tuple[str, ...] = (
    "Warped",
    "Rank",
    "Rank Threshold",
    "Rank Dilated",
    "Rank Contours",
    "Rank Bounded",
    "Rank Final",
    "Suit",
    "Suit Threshold",
    "Suit Dilated",
    "Suit Eroded",
    "Suit Contours",
    "Suit Bounded",
    "Suit Final",
)


@dataclass(frozen=True)
class Quad:
    """
    A contour reduced to exactly four corners, in approxPolyDP order.

    pts: np.ndarray with shape (4, 2), dtype int32
    """
    pts: np.ndarray

    def __post_init__(self):
        pts = np.array(self.pts, dtype=np.int32).reshape(4, 2)
        pts.setflags(write=False)
        object.__setattr__(self, "pts", pts)

    @property
    def centroid(self) -> np.ndarray:
        """Arithmetic mean of the four corners (float32, shape (2,))."""
        return self.pts.astype(np.float32).mean(axis=0)

    @property
    def area(self) -> float:
        return float(cv2.contourArea(self.pts))

    def as_contour(self) -> np.ndarray:
        """Shape (4, 1, 2) int32, ready for cv2.drawContours."""
        return self.pts.reshape(4, 1, 2).copy()


@dataclass(frozen=True)
class TemplateEntry:
    label: str
    image: np.ndarray


@dataclass
class RectifiedCard:
    canonical: np.ndarray
    midpoint: Tuple[float, float]
    quad: Quad


@dataclass
class DetectedCard:
    canonical: np.ndarray
    midpoint: Tuple[float, float]
    quad: Quad
    rank_guess: str
    suit_guess: str
    rank_score: Optional[int] = None
    suit_score: Optional[int] = None
    diagnostics: Dict[str, np.ndarray] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return f"{self.rank_guess} of {self.suit_guess}"


@dataclass
class FrameResult:
    cards: List[DetectedCard] = field(default_factory=list)
    diagnostics: Dict[str, np.ndarray] = field(default_factory=dict)

    def stage(self, name: str) -> np.ndarray:
        """Frame-level diagnostic image by stage title (KeyError if not captured)."""
        return self.diagnostics[name]

    def card_stage(self, index: int, name: str) -> np.ndarray:
        return self.cards[index].diagnostics[name]
