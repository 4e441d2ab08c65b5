from __future__ import annotations

import numpy as np
import pytest

from cardscan.core.contracts import TemplateEntry
from cardscan.core.errors import EmptyTemplateSetError
from cardscan.match.matcher import diff_score, match_glyph


def _entry(label: str, value: int, shape=(45, 30)) -> TemplateEntry:
    return TemplateEntry(label, np.full(shape, value, np.uint8))


def test_score_is_sum_over_255():
    glyph = np.zeros((10, 10), np.uint8)
    assert diff_score(glyph, np.full((45, 30), 255, np.uint8)) == 100
    assert diff_score(glyph, np.zeros((45, 30), np.uint8)) == 0


def test_score_truncates():
    glyph = np.zeros((1, 2), np.uint8)
    # 2 * 200 / 255 = 1.57
    assert diff_score(glyph, np.full((5, 5), 200, np.uint8)) == 1


def test_template_is_resized_to_glyph():
    glyph = np.zeros((45, 30), np.uint8)
    # a 10x10 template scaled up to 30x45 stays constant
    assert diff_score(glyph, np.full((10, 10), 51, np.uint8)) == 45 * 30 * 51 // 255
    assert glyph.shape == (45, 30)


def test_picks_lowest_score():
    glyph = np.full((20, 12), 250, np.uint8)
    entries = [_entry("Ace", 0), _entry("Two", 255), _entry("Three", 128)]
    res = match_glyph(glyph, entries)
    assert res.label == "Two"
    assert res.score == diff_score(glyph, entries[1].image)
    assert [lbl for lbl, _ in res.scores] == ["Ace", "Two", "Three"]


def test_tie_goes_to_earliest_template():
    glyph = np.full((20, 12), 255, np.uint8)
    a, b = _entry("Hearts", 255), _entry("Clubs", 255)
    assert match_glyph(glyph, [a, b]).label == "Hearts"
    assert match_glyph(glyph, [b, a]).label == "Clubs"


def test_repeated_calls_are_identical():
    rng = np.random.default_rng(3)
    glyph = rng.integers(0, 256, size=(40, 27), dtype=np.uint8)
    entries = [TemplateEntry(str(i), rng.integers(0, 256, size=(45, 30), dtype=np.uint8)) for i in range(13)]
    first = match_glyph(glyph, entries)
    for _ in range(3):
        assert match_glyph(glyph, entries) == first


def test_garbage_glyph_still_gets_a_label():
    glyph = np.random.default_rng(0).integers(0, 256, size=(5, 5), dtype=np.uint8)
    assert match_glyph(glyph, [_entry("King", 0)]).label == "King"


def test_empty_template_set_fails_loudly():
    with pytest.raises(EmptyTemplateSetError):
        match_glyph(np.zeros((5, 5), np.uint8), [])
    with pytest.raises(ValueError):
        match_glyph(np.zeros((5, 5), np.uint8), ())


def test_zero_size_glyph_rejected():
    with pytest.raises(ValueError):
        match_glyph(np.zeros((0, 0), np.uint8), [_entry("Ace", 0)])
