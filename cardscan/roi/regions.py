from __future__ import annotations
from dataclasses import dataclass
import cv2, numpy as np

from cardscan.core.contracts import CANONICAL_H, CANONICAL_W

# Corner index boxes in the canonical frame, (x, y, w, h)
RANK_BOX = (0, 0, 35, 55)
SUIT_BOX = (0, 55, 35, 45)

@dataclass
class RoiOut:
    name: str
    xywh_px: tuple[int,int,int,int]
    crop: np.ndarray

def _check_canonical(img: np.ndarray):
    h,w = img.shape[:2]
    if (h,w) != (CANONICAL_H, CANONICAL_W):
        raise ValueError(f"Canonical card image must be {CANONICAL_W}x{CANONICAL_H}, got {w}x{h}")

def _crop(img, xywh):
    x,y,w,h = xywh
    return img[y:y+h, x:x+w].copy()

def extract_rank_roi(canonical: np.ndarray) -> RoiOut:
    _check_canonical(canonical)
    return RoiOut(name="Rank", xywh_px=RANK_BOX, crop=_crop(canonical, RANK_BOX))

def extract_suit_roi(canonical: np.ndarray) -> RoiOut:
    _check_canonical(canonical)
    return RoiOut(name="Suit", xywh_px=SUIT_BOX, crop=_crop(canonical, SUIT_BOX))

def draw_roi_boxes(canonical: np.ndarray) -> np.ndarray:
    """Color copy of the card with the rank box (blue) and suit box (green) drawn on."""
    vis = cv2.cvtColor(canonical, cv2.COLOR_GRAY2BGR) if canonical.ndim == 2 else canonical.copy()
    for (x,y,w,h), color in ((RANK_BOX, (255,0,0)), (SUIT_BOX, (0,255,0))):
        cv2.rectangle(vis, (x,y), (x+w-1,y+h-1), color, 1)
    return vis
