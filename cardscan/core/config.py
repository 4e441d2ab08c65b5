# cardscan/core/config.py
"""
Pipeline configuration: nested dict defaults, optional YAML overrides and a
validated, frozen PipelineConfig that the pipeline consumes per call.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple
import cv2
import yaml

from cardscan.core.errors import ConfigError
from cardscan.geometry.rectify import CORNER_STRATEGIES

# Defaults match the tuned values of the reference viewer
_DEFAULT_CFG: Dict = {
    "gaussian": {"kernel_size": 3, "sigma": 0.0},
    "canny": {"low": 0, "high": 255},
    "contours": {"retrieval": "external", "approximation": "simple"},
    "capture_diagnostics": True,
    "workers": 1,
    "corner_strategy": "centroid",
    "templates": {"folder": "assets/template_images", "ext": "png", "rank_size": (30, 45)},
}

RETRIEVAL_MODES: Dict[str, int] = {
    "external": cv2.RETR_EXTERNAL,
    "list": cv2.RETR_LIST,
    "ccomp": cv2.RETR_CCOMP,
    "tree": cv2.RETR_TREE,
}

APPROX_MODES: Dict[str, int] = {
    "none": cv2.CHAIN_APPROX_NONE,
    "simple": cv2.CHAIN_APPROX_SIMPLE,
    "tc89_l1": cv2.CHAIN_APPROX_TC89_L1,
    "tc89_kcos": cv2.CHAIN_APPROX_TC89_KCOS,
}


@dataclass(frozen=True)
class GaussianParams:
    kernel_size: int = 3
    sigma: float = 0.0

    def validate(self) -> None:
        k = self.kernel_size
        if isinstance(k, bool) or not isinstance(k, int):
            raise ConfigError(f"Gaussian kernel size must be an int, got {k!r}")
        if k < 1:
            raise ConfigError(f"Gaussian kernel size must be >= 1, got {k}")
        if k % 2 == 0:
            raise ConfigError(f"Gaussian kernel size must be odd, got {k}")
        if self.sigma < 0:
            raise ConfigError(f"Gaussian sigma must be >= 0, got {self.sigma}")


@dataclass(frozen=True)
class CannyParams:
    low: float = 0
    high: float = 255

    def validate(self) -> None:
        if self.low < 0 or self.high < 0:
            raise ConfigError(f"Canny thresholds must be >= 0, got low={self.low}, high={self.high}")


@dataclass(frozen=True)
class ContourParams:
    retrieval: str = "external"
    approximation: str = "simple"

    @property
    def mode(self) -> int:
        return RETRIEVAL_MODES[self.retrieval]

    @property
    def method(self) -> int:
        return APPROX_MODES[self.approximation]

    def validate(self) -> None:
        if self.retrieval not in RETRIEVAL_MODES:
            raise ConfigError(f"Unknown contour retrieval mode {self.retrieval!r} "
                              f"(expected one of {sorted(RETRIEVAL_MODES)})")
        if self.approximation not in APPROX_MODES:
            raise ConfigError(f"Unknown contour approximation mode {self.approximation!r} "
                              f"(expected one of {sorted(APPROX_MODES)})")


@dataclass(frozen=True)
class PipelineConfig:
    gaussian: GaussianParams = field(default_factory=GaussianParams)
    canny: CannyParams = field(default_factory=CannyParams)
    contours: ContourParams = field(default_factory=ContourParams)
    capture_diagnostics: bool = True
    workers: int = 1
    corner_strategy: str = "centroid"

    def validate(self) -> "PipelineConfig":
        self.gaussian.validate()
        self.canny.validate()
        self.contours.validate()
        if isinstance(self.workers, bool) or not isinstance(self.workers, int) or self.workers < 1:
            raise ConfigError(f"workers must be an int >= 1, got {self.workers!r}")
        if self.corner_strategy not in CORNER_STRATEGIES:
            raise ConfigError(f"Unknown corner strategy {self.corner_strategy!r} "
                              f"(expected one of {sorted(CORNER_STRATEGIES)})")
        return self


@dataclass(frozen=True)
class TemplateParams:
    folder: str
    ext: str = "png"
    rank_size: Tuple[int, int] = (30, 45)


def _merge_cfg(cfg: Optional[Dict]) -> Dict:
    merged = {k: (dict(v) if isinstance(v, dict) else v) for k, v in _DEFAULT_CFG.items()}
    if not cfg:
        return merged
    for k, v in cfg.items():
        if isinstance(v, dict) and k in merged and isinstance(merged[k], dict):
            merged[k] = {**merged[k], **v}
        else:
            merged[k] = v
    return merged


def build_config(cfg: Optional[Dict] = None) -> PipelineConfig:
    """
    Turn a (partial) nested dict into a validated PipelineConfig.
    Missing keys fall back to _DEFAULT_CFG. Raises ConfigError.
    """
    m = _merge_cfg(cfg)
    try:
        g, c, k = m["gaussian"], m["canny"], m["contours"]
        out = PipelineConfig(
            gaussian=GaussianParams(kernel_size=g["kernel_size"], sigma=float(g["sigma"])),
            canny=CannyParams(low=float(c["low"]), high=float(c["high"])),
            contours=ContourParams(retrieval=str(k["retrieval"]).lower(),
                                   approximation=str(k["approximation"]).lower()),
            capture_diagnostics=bool(m["capture_diagnostics"]),
            workers=m["workers"],
            corner_strategy=str(m["corner_strategy"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Malformed pipeline config: {e}") from e
    return out.validate()


def template_params(cfg: Optional[Dict] = None) -> TemplateParams:
    t = _merge_cfg(cfg)["templates"]
    try:
        w, h = (int(v) for v in t["rank_size"])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"templates.rank_size must be [width, height], got {t.get('rank_size')!r}") from e
    if w < 1 or h < 1:
        raise ConfigError(f"templates.rank_size must be positive, got {(w, h)}")
    return TemplateParams(folder=str(t["folder"]), ext=str(t["ext"]).lstrip("."), rank_size=(w, h))


def load_yaml(path: str | Path) -> Dict:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at top level")
    return data


def load_config(path: str | Path) -> PipelineConfig:
    """Read a YAML config file and build a validated PipelineConfig."""
    return build_config(load_yaml(path))
