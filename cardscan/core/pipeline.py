"""
Frame-level orchestration: one frame in, one FrameResult out.

    preprocess -> contours -> rectify -> per card: ROIs -> glyphs -> match

Nothing is kept between calls. The TemplateSet is passed in and only read.
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Optional
import logging
import numpy as np

from cardscan.core.config import PipelineConfig
from cardscan.core.contracts import DetectedCard, FrameResult, RectifiedCard
from cardscan.geometry.contours import find_edge_contours
from cardscan.geometry.preprocess import preprocess, to_gray
from cardscan.geometry.rectify import rectify_contours
from cardscan.match.matcher import MatchResult, match_glyph
from cardscan.match.templates import TemplateSet
from cardscan.roi.glyph import isolate_rank, isolate_suit
from cardscan.roi.regions import draw_roi_boxes, extract_rank_roi, extract_suit_roi
from cardscan.viz.overlay import draw_contours, draw_guesses, draw_quads

log = logging.getLogger(__name__)


@dataclass
class CardReading:
    rank: MatchResult
    suit: MatchResult
    stages: Dict[str, np.ndarray] = field(default_factory=dict)


def classify_card(canonical: np.ndarray, templates: TemplateSet, *, capture: bool = True) -> CardReading:
    """Rank and suit guesses for one canonical (250x350) card image."""
    rank_roi = extract_rank_roi(canonical)
    suit_roi = extract_suit_roi(canonical)
    rank = isolate_rank(rank_roi.crop, capture=capture)
    suit = isolate_suit(suit_roi.crop, capture=capture)

    stages: Dict[str, np.ndarray] = {}
    if capture:
        stages["Warped"] = draw_roi_boxes(canonical)
        stages.update(rank.stages)
        stages.update(suit.stages)

    return CardReading(
        rank=match_glyph(rank.glyph, templates.ranks),
        suit=match_glyph(suit.glyph, templates.suits),
        stages=stages,
    )


def process_frame(
    image: np.ndarray,
    templates: TemplateSet,
    cfg: Optional[PipelineConfig] = None,
) -> FrameResult:
    """
    Detect and classify every card in a BGR or grayscale frame.

    Raises ConfigError for a bad config and InvalidFrameError for an unusable
    frame; both before any stage runs.
    """
    cfg = (cfg or PipelineConfig()).validate()
    gray = to_gray(image)
    capture = cfg.capture_diagnostics

    pre = preprocess(gray, cfg.gaussian, cfg.canny)
    contours = find_edge_contours(pre.edges, cfg.contours)
    rectified = rectify_contours(gray, contours, strategy=cfg.corner_strategy)
    log.debug("frame %dx%d: %d contours, %d cards", gray.shape[1], gray.shape[0], len(contours), len(rectified))

    def _classify(rc: RectifiedCard) -> CardReading:
        return classify_card(rc.canonical, templates, capture=capture)

    if cfg.workers > 1 and len(rectified) > 1:
        # map() yields in submission order, so readings line up with rectified
        with ThreadPoolExecutor(max_workers=min(cfg.workers, len(rectified))) as pool:
            readings = list(pool.map(_classify, rectified))
    else:
        readings = [_classify(rc) for rc in rectified]

    cards = []
    for i, (rc, rd) in enumerate(zip(rectified, readings)):
        cards.append(DetectedCard(
            canonical=rc.canonical,
            midpoint=rc.midpoint,
            quad=rc.quad,
            rank_guess=rd.rank.label,
            suit_guess=rd.suit.label,
            rank_score=rd.rank.score,
            suit_score=rd.suit.score,
            diagnostics=rd.stages,
        ))
        log.debug("card %d: %s (rank=%d, suit=%d)", i, cards[-1].label, rd.rank.score, rd.suit.score)

    result = FrameResult(cards=cards)
    if capture:
        color = image if image.ndim == 3 and image.shape[2] == 3 else gray
        result.diagnostics = {
            "Source": gray,
            "Blurred": pre.blurred,
            "Equalized": pre.equalized,
            "Edges": pre.edges,
            "Contours": draw_contours(color, contours),
            "Rectangle Contours": draw_quads(color, [c.quad for c in cards]),
            "Output": draw_guesses(color, cards),
        }
    return result
