from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from cardscan.core.config import (
    CannyParams,
    GaussianParams,
    PipelineConfig,
    build_config,
    load_config,
    template_params,
)
from cardscan.core.errors import ConfigError
from cardscan.core.pipeline import process_frame
from cardscan.match.templates import TemplateSet


def test_defaults_match_reference_viewer():
    cfg = build_config()
    assert cfg.gaussian == GaussianParams(kernel_size=3, sigma=0.0)
    assert cfg.canny == CannyParams(low=0, high=255)
    assert cfg.contours.retrieval == "external"
    assert cfg.contours.approximation == "simple"
    assert cfg.capture_diagnostics is True
    assert cfg.workers == 1
    assert cfg.corner_strategy == "centroid"


def test_partial_override_keeps_other_defaults():
    cfg = build_config({"gaussian": {"kernel_size": 7}, "canny": {"high": 120}})
    assert cfg.gaussian.kernel_size == 7
    assert cfg.gaussian.sigma == 0.0
    assert cfg.canny.low == 0
    assert cfg.canny.high == 120


@pytest.mark.parametrize("k", [0, -3, 2, 4, 3.0, True])
def test_bad_kernel_size_rejected(k):
    with pytest.raises(ConfigError):
        build_config({"gaussian": {"kernel_size": k}})


@pytest.mark.parametrize("override", [
    {"contours": {"retrieval": "sideways"}},
    {"contours": {"approximation": "lossy"}},
    {"workers": 0},
    {"corner_strategy": "angle-magic"},
    {"canny": {"low": -1}},
])
def test_invalid_settings_rejected(override):
    with pytest.raises(ConfigError):
        build_config(override)


def test_config_error_is_value_error():
    with pytest.raises(ValueError):
        GaussianParams(kernel_size=8).validate()


def test_load_config_from_yaml(tmp_path):
    p = tmp_path / "pipeline.yaml"
    p.write_text(
        "gaussian:\n  kernel_size: 5\n  sigma: 1.5\n"
        "contours:\n  retrieval: LIST\n"
        "workers: 3\n"
    )
    cfg = load_config(p)
    assert cfg.gaussian.kernel_size == 5
    assert cfg.gaussian.sigma == 1.5
    assert cfg.contours.retrieval == "list"
    assert cfg.workers == 3


def test_repo_config_file_is_valid():
    cfg = load_config(Path(__file__).resolve().parents[1] / "config" / "pipeline.yaml")
    assert cfg == build_config()


def test_template_params():
    tp = template_params({"templates": {"folder": "deck", "ext": ".jpg"}})
    assert tp.folder == "deck"
    assert tp.ext == "jpg"
    assert tp.rank_size == (30, 45)
    with pytest.raises(ConfigError):
        template_params({"templates": {"rank_size": [0, 45]}})


def test_config_checked_before_frame():
    # an unusable frame AND a bad config: the config error wins
    bad = PipelineConfig(gaussian=GaussianParams(kernel_size=4))
    empty = TemplateSet.from_images([], [])
    with pytest.raises(ConfigError):
        process_frame(np.zeros((0, 0), np.uint8), empty, bad)
