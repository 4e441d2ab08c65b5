# cardscan/roi/glyph.py
"""
Glyph isolation for the rank and suit corner boxes.

Both paths: Otsu threshold -> invert (glyph white) -> dilate (suit: dilate +
erode with the same cross element) -> largest contour -> crop to its bounding
rect -> invert back so the glyph is dark on light, like the templates.

When no contour with positive area exists the result is a "no glyph" crop:
  - rank: a blank (all-white) image the size of the rank box
  - suit: the whole cleaned mask, inverted
Both are valid inputs for the matcher.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging
import cv2
import numpy as np

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GlyphParams:
    name: str
    kernel: Tuple[int, int]
    close: bool            # erode after dilating
    blank_on_empty: bool   # no contour -> blank box instead of the whole mask


RANK_GLYPH = GlyphParams(name="Rank", kernel=(4, 4), close=False, blank_on_empty=True)
# 1x1 closing for clipped club/spade stems
SUIT_GLYPH = GlyphParams(name="Suit", kernel=(1, 1), close=True, blank_on_empty=False)


@dataclass
class GlyphOut:
    glyph: np.ndarray
    found: bool
    bbox: Optional[Tuple[int, int, int, int]]  # x, y, w, h inside the region
    stages: Dict[str, np.ndarray] = field(default_factory=dict)


def largest_contour(contours: List[np.ndarray]) -> Optional[np.ndarray]:
    """Contour with the biggest area; zero-area contours never win."""
    best, best_area = None, 0.0
    for c in contours:
        area = cv2.contourArea(c)
        if area > best_area:
            best_area = area
            best = c
    return best


def isolate_glyph(region: np.ndarray, params: GlyphParams, *, capture: bool = True) -> GlyphOut:
    if region.ndim != 2 or region.size == 0:
        raise ValueError(f"{params.name} region must be a non-empty single-channel image, got shape {region.shape}")
    stages: Dict[str, np.ndarray] = {}
    n = params.name
    if capture:
        stages[n] = region.copy()

    _, thresholded = cv2.threshold(region, 0, 255, cv2.THRESH_BINARY | cv2.THRESH_OTSU)
    if capture:
        stages[f"{n} Threshold"] = thresholded.copy()
    mask = cv2.bitwise_not(thresholded)

    element = cv2.getStructuringElement(cv2.MORPH_CROSS, params.kernel)
    mask = cv2.dilate(mask, element)
    if capture:
        stages[f"{n} Dilated"] = cv2.bitwise_not(mask)
    if params.close:
        mask = cv2.erode(mask, element)
        if capture:
            stages[f"{n} Eroded"] = cv2.bitwise_not(mask)

    contours, _ = cv2.findContours(mask, cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE)
    if capture:
        overlay = cv2.cvtColor(cv2.bitwise_not(mask), cv2.COLOR_GRAY2BGR)
        if contours:
            cv2.drawContours(overlay, contours, -1, (255, 0, 0), 1)
        stages[f"{n} Contours"] = overlay

    best = largest_contour(list(contours))
    if best is not None:
        x, y, w, h = cv2.boundingRect(best)
        bounded = mask[y:y + h, x:x + w].copy()
        bbox = (x, y, w, h)
    else:
        log.debug("%s: no glyph contour found", n)
        bounded = np.zeros_like(region) if params.blank_on_empty else mask.copy()
        bbox = None

    glyph = cv2.bitwise_not(bounded)
    if capture:
        stages[f"{n} Bounded"] = glyph.copy()
        stages[f"{n} Final"] = glyph.copy()
    return GlyphOut(glyph=glyph, found=best is not None, bbox=bbox, stages=stages)


def isolate_rank(region: np.ndarray, *, capture: bool = True) -> GlyphOut:
    return isolate_glyph(region, RANK_GLYPH, capture=capture)


def isolate_suit(region: np.ndarray, *, capture: bool = True) -> GlyphOut:
    return isolate_glyph(region, SUIT_GLYPH, capture=capture)
