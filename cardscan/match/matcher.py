# cardscan/match/matcher.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, Tuple
import sys
import cv2
import numpy as np

from cardscan.core.contracts import TemplateEntry
from cardscan.core.errors import EmptyTemplateSetError


@dataclass(frozen=True)
class MatchResult:
    label: str
    score: int
    scores: Tuple[Tuple[str, int], ...] = ()


def diff_score(glyph: np.ndarray, template: np.ndarray) -> int:
    """
    Summed absolute difference / 255, truncated to int. Lower is better.
    The template is resized to the glyph, never the other way round.
    """
    h, w = glyph.shape[:2]
    tem = cv2.resize(template, (w, h))
    diff = cv2.absdiff(glyph, tem)
    return int(float(diff.sum(dtype=np.float64)) / 255)


def match_glyph(glyph: np.ndarray, entries: Sequence[TemplateEntry]) -> MatchResult:
    """
    Nearest template by diff_score. Ties go to the earliest entry, so the
    iteration order of `entries` is part of the result.
    """
    if not entries:
        raise EmptyTemplateSetError("Cannot classify a glyph against an empty template set")
    if glyph.size == 0:
        raise ValueError("Cannot classify a zero-size glyph")

    best_label, best = "", sys.maxsize
    scores = []
    for e in entries:
        s = diff_score(glyph, e.image)
        scores.append((e.label, s))
        if s < best:
            best = s
            best_label = e.label
    return MatchResult(label=best_label, score=best, scores=tuple(scores))
