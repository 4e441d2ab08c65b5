# cardscan/geometry/rectify.py
from __future__ import annotations
from typing import Callable, Dict, Iterable, List, Optional
import logging
import cv2
import numpy as np

from cardscan.core.contracts import CANONICAL_H, CANONICAL_W, Quad, RectifiedCard

log = logging.getLogger(__name__)

# Quad filter: polygon tolerance as a fraction of the perimeter, and minimum area (px^2)
APPROX_EPSILON_FRAC = 0.01
MIN_QUAD_AREA = 5000.0

# Destination corners in role order TL, BL, BR, TR
_TARGET_PTS = np.array([[0, 0],
                        [0, CANONICAL_H - 1],
                        [CANONICAL_W - 1, CANONICAL_H - 1],
                        [CANONICAL_W - 1, 0]], dtype=np.float32)

CornerStrategy = Callable[[np.ndarray, np.ndarray], np.ndarray]


def centroid_offset_roles(pts: np.ndarray, centroid: np.ndarray) -> np.ndarray:
    """
    Assign TL, BL, BR, TR roles from the offset (centroid - point).

    (+x, +y) -> TL, (-x, +y) -> TR, (+x, -y) -> BL, anything else -> BR.
    Assumes a roughly axis-aligned quad: near 45 degrees two corners can claim
    the same role, in which case the later one wins and the unclaimed role
    stays at (0, 0).
    """
    src = np.zeros((4, 2), dtype=np.float32)
    for p in np.asarray(pts, dtype=np.float32).reshape(4, 2):
        dx, dy = centroid - p
        if dx > 0 and dy > 0:
            src[0] = p
        elif dx < 0 and dy > 0:
            src[3] = p
        elif dx > 0 and dy < 0:
            src[1] = p
        else:
            src[2] = p
    return src


def clockwise_sort_roles(pts: np.ndarray, centroid: np.ndarray) -> np.ndarray:
    """Sort by y, then split top/bottom and sort by x. Rotation-tolerant alternative."""
    p = np.asarray(pts, dtype=np.float32).reshape(4, 2)
    idx = np.argsort(p[:, 1], kind="stable")
    top = p[idx[:2]][np.argsort(p[idx[:2], 0], kind="stable")]
    bot = p[idx[2:]][np.argsort(p[idx[2:], 0], kind="stable")]
    tl, tr = top
    bl, br = bot
    return np.array([tl, bl, br, tr], dtype=np.float32)


CORNER_STRATEGIES: Dict[str, CornerStrategy] = {
    "centroid": centroid_offset_roles,
    "clockwise": clockwise_sort_roles,
}


def approximate_quad(
    contour: np.ndarray,
    *,
    epsilon_frac: float = APPROX_EPSILON_FRAC,
    min_area: float = MIN_QUAD_AREA,
) -> Optional[Quad]:
    """
    Reduce a contour to a 4-point polygon (Douglas-Peucker, epsilon relative to
    the closed perimeter). Returns None unless it has exactly 4 points and an
    area of at least min_area.
    """
    peri = cv2.arcLength(contour, True)
    approx = cv2.approxPolyDP(contour, epsilon_frac * peri, True)
    if len(approx) != 4:
        return None
    area = cv2.contourArea(approx)
    if area < min_area:
        log.debug("quad rejected: area=%.1f < %.1f", area, min_area)
        return None
    return Quad(approx.reshape(4, 2))


def warp_card(gray: np.ndarray, quad: Quad, strategy: str | CornerStrategy = "centroid") -> np.ndarray:
    """
    Perspective-warp the quad into the canonical 250x350 card frame.

    Args:
        gray: single-channel source image.
        quad: detected card outline.
        strategy: name in CORNER_STRATEGIES or a callable (pts, centroid) -> TL, BL, BR, TR.

    Returns:
        uint8 image of shape (350, 250).
    """
    assign = CORNER_STRATEGIES[strategy] if isinstance(strategy, str) else strategy
    src = assign(quad.pts, quad.centroid)
    M = cv2.getPerspectiveTransform(np.asarray(src, dtype=np.float32), _TARGET_PTS)
    return cv2.warpPerspective(gray, M, (CANONICAL_W, CANONICAL_H), flags=cv2.INTER_LINEAR)


def rectify_contours(
    gray: np.ndarray,
    contours: Iterable[np.ndarray],
    *,
    strategy: str | CornerStrategy = "centroid",
) -> List[RectifiedCard]:
    """Filter contours to card-like quads and warp each one, keeping contour order."""
    cards: List[RectifiedCard] = []
    for i, c in enumerate(contours):
        quad = approximate_quad(c)
        if quad is None:
            continue
        mid = quad.centroid
        canonical = warp_card(gray, quad, strategy)
        cards.append(RectifiedCard(canonical=canonical, midpoint=(float(mid[0]), float(mid[1])), quad=quad))
        log.debug("contour %d -> card %d, quad=%s", i, len(cards) - 1, quad.pts.tolist())
    return cards
