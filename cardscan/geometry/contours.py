# cardscan/geometry/contours.py
from __future__ import annotations
from typing import List
import cv2
import numpy as np

from cardscan.core.config import ContourParams


def find_edge_contours(edges: np.ndarray, params: ContourParams | None = None) -> List[np.ndarray]:
    """
    Trace contours on a binary edge map.

    Order is whatever cv2.findContours discovers (usually bottom-to-top); it is
    kept as-is so card indices are stable for a given frame.
    """
    params = params or ContourParams()
    params.validate()
    cnts, _ = cv2.findContours(edges, params.mode, params.method)
    return list(cnts)
