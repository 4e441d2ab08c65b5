from __future__ import annotations

import cv2
import numpy as np
import pytest

from cardscan.core.config import CannyParams, ContourParams, GaussianParams
from cardscan.core.errors import ConfigError, InvalidFrameError
from cardscan.geometry.contours import find_edge_contours
from cardscan.geometry.preprocess import preprocess, to_gray


def _rect_frame(w: int = 320, h: int = 240) -> np.ndarray:
    frame = np.zeros((h, w), np.uint8)
    cv2.rectangle(frame, (80, 60), (239, 179), 255, -1)
    return frame


# ---------- to_gray ---------- #

def test_to_gray_from_bgr():
    bgr = np.zeros((20, 30, 3), np.uint8)
    bgr[:, :, 1] = 200
    g = to_gray(bgr)
    assert g.shape == (20, 30)
    assert g.dtype == np.uint8
    assert 0 < int(g[0, 0]) < 200


def test_to_gray_copies_instead_of_aliasing():
    src = _rect_frame()
    g = to_gray(src)
    g[:] = 7
    assert src.max() == 255


@pytest.mark.parametrize("bad", [
    np.zeros((0, 0), np.uint8),
    np.zeros((10, 0, 3), np.uint8),
    np.zeros((10, 10), np.float32),
    np.zeros((10, 10, 2), np.uint8),
    np.zeros((2, 2, 2, 2), np.uint8),
])
def test_to_gray_rejects_malformed(bad):
    with pytest.raises(InvalidFrameError):
        to_gray(bad)


# ---------- preprocess ---------- #

def test_preprocess_outputs():
    src = _rect_frame()
    before = src.copy()
    out = preprocess(src, GaussianParams(5, 0), CannyParams(50, 150))
    for img in (out.blurred, out.equalized, out.edges):
        assert img.shape == src.shape
        assert img.dtype == np.uint8
    assert set(np.unique(out.edges)) <= {0, 255}
    assert out.edges.any()
    np.testing.assert_array_equal(src, before)


def test_preprocess_rejects_even_kernel():
    with pytest.raises(ConfigError):
        preprocess(_rect_frame(), GaussianParams(4, 0), CannyParams(50, 150))


def test_edges_come_from_blurred_not_equalized():
    src = _rect_frame()
    g, c = GaussianParams(3, 0), CannyParams(50, 150)
    out = preprocess(src, g, c)
    expected = cv2.Canny(cv2.GaussianBlur(src, (3, 3), 0), 50, 150)
    np.testing.assert_array_equal(out.edges, expected)


# ---------- contours ---------- #

def test_external_contours_on_rectangle():
    out = preprocess(_rect_frame(), GaussianParams(3, 0), CannyParams(50, 150))
    cnts = find_edge_contours(out.edges)
    assert len(cnts) == 1
    x, y, w, h = cv2.boundingRect(cnts[0])
    assert abs(x - 80) <= 2 and abs(y - 60) <= 2
    assert abs(w - 160) <= 4 and abs(h - 120) <= 4


def test_no_contours_on_blank_edges():
    assert find_edge_contours(np.zeros((50, 50), np.uint8)) == []


def test_list_mode_finds_inner_contours_too():
    out = preprocess(_rect_frame(), GaussianParams(3, 0), CannyParams(50, 150))
    external = find_edge_contours(out.edges, ContourParams("external", "simple"))
    listed = find_edge_contours(out.edges, ContourParams("list", "simple"))
    assert len(listed) >= len(external)
