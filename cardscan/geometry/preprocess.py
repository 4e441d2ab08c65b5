# cardscan/geometry/preprocess.py
from __future__ import annotations
from dataclasses import dataclass
import cv2
import numpy as np

from cardscan.core.config import CannyParams, GaussianParams
from cardscan.core.errors import InvalidFrameError


@dataclass
class PreprocessOut:
    gray: np.ndarray
    blurred: np.ndarray
    equalized: np.ndarray  # diagnostic only, nothing downstream reads it
    edges: np.ndarray


def to_gray(image: np.ndarray) -> np.ndarray:
    """
    Return a single-channel uint8 copy of a BGR, BGRA or grayscale frame.
    Raises InvalidFrameError for anything else (including zero-size frames).
    """
    if not isinstance(image, np.ndarray):
        raise InvalidFrameError(f"Frame must be a numpy array, got {type(image).__name__}")
    if image.size == 0 or image.ndim not in (2, 3) or min(image.shape[:2]) == 0:
        raise InvalidFrameError(f"Frame has unusable shape {image.shape}")
    if image.dtype != np.uint8:
        raise InvalidFrameError(f"Frame must be uint8, got {image.dtype}")

    if image.ndim == 2:
        return image.copy()
    channels = image.shape[2]
    if channels == 1:
        return image[:, :, 0].copy()
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    raise InvalidFrameError(f"Frame has unsupported channel count {channels}")


def preprocess(gray: np.ndarray, gaussian: GaussianParams, canny: CannyParams) -> PreprocessOut:
    """
    Blur -> (equalize, for display) -> Canny.

    The edge map is computed from the blurred image, not the equalized one.
    """
    gaussian.validate()
    canny.validate()
    if gray.ndim != 2:
        raise InvalidFrameError(f"preprocess() expects a single-channel image, got shape {gray.shape}")

    k = gaussian.kernel_size
    blurred = cv2.GaussianBlur(gray, (k, k), gaussian.sigma)
    equalized = cv2.equalizeHist(blurred)
    edges = cv2.Canny(blurred, canny.low, canny.high)
    return PreprocessOut(gray=gray, blurred=blurred, equalized=equalized, edges=edges)
