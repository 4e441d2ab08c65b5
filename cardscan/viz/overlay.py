# cardscan/viz/overlay.py
from __future__ import annotations
from typing import Iterable, List
import cv2
import numpy as np

from cardscan.core.contracts import DetectedCard, Quad

_RED = (0, 0, 255)
_BLUE = (255, 0, 0)


def _base(source: np.ndarray) -> np.ndarray:
    return cv2.cvtColor(source, cv2.COLOR_GRAY2BGR) if source.ndim == 2 else source.copy()


def draw_contours(source: np.ndarray, contours: List[np.ndarray]) -> np.ndarray:
    """Every raw contour, thick red."""
    vis = _base(source)
    if contours:
        cv2.drawContours(vis, contours, -1, _RED, 4)
    return vis


def draw_quads(source: np.ndarray, quads: Iterable[Quad]) -> np.ndarray:
    vis = _base(source)
    polys = [q.as_contour() for q in quads]
    if polys:
        cv2.drawContours(vis, polys, -1, _RED, 2)
    return vis


def draw_guesses(source: np.ndarray, cards: Iterable[DetectedCard]) -> np.ndarray:
    """Accepted quads plus rank (large) and suit (small, one line lower) centred on each card."""
    cards = list(cards)
    vis = draw_quads(source, [c.quad for c in cards])
    font = cv2.FONT_HERSHEY_COMPLEX
    for c in cards:
        mx, my = c.midpoint
        (rw, rh), _ = cv2.getTextSize(c.rank_guess, font, 1.0, 2)
        (sw, sh), _ = cv2.getTextSize(c.suit_guess, font, 0.75, 2)
        cv2.putText(vis, c.rank_guess, (int(mx - rw / 2), int(my + rh / 2)), font, 1.0, _BLUE, 2)
        cv2.putText(vis, c.suit_guess, (int(mx - sw / 2), int(my + sh / 2) + 24), font, 0.75, _BLUE, 2)
    return vis
