"""
Image file helpers. Frames come back BGR, templates grayscale, as OpenCV reads them.
"""

from __future__ import annotations
from pathlib import Path
import cv2
import numpy as np


def _imread(path: str | Path, flags: int) -> np.ndarray:
    img = cv2.imread(str(path), flags)
    if img is None or img.size == 0:
        raise FileNotFoundError(f"Could not read image at: {path}")
    return img


def load_image(path: str | Path) -> np.ndarray:
    """Frame from disk as BGR. Raises FileNotFoundError if missing, unreadable or empty."""
    return _imread(path, cv2.IMREAD_COLOR)


def load_grayscale(path: str | Path) -> np.ndarray:
    return _imread(path, cv2.IMREAD_GRAYSCALE)


def save_image(path: str | Path, img: np.ndarray) -> Path:
    """Write an image, creating parent folders. Raises OSError if OpenCV refuses."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(p), img):
        raise OSError(f"Could not write image to: {p}")
    return p
