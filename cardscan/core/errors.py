"""
Exception types raised by the card scanning pipeline.

Degenerate quads and empty glyphs are not errors; they are skipped or
reported as normal results.
"""

from __future__ import annotations


class CardScanError(Exception):
    """Base class for every error raised by cardscan."""


class ConfigError(CardScanError, ValueError):
    """Invalid pipeline configuration (rejected before any stage runs)."""


class TemplateLoadError(CardScanError):
    """A required template image is missing or unreadable."""


class EmptyTemplateSetError(CardScanError, ValueError):
    """Classification was attempted against zero templates."""


class InvalidFrameError(CardScanError, ValueError):
    """The input frame is malformed (wrong dtype/shape or zero-size)."""
