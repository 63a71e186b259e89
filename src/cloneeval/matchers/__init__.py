"""Clone-matching strategies."""

from .base import (
    CloneMatcher,
    ToolDetections,
    MATCHERS,
    register_matcher,
    unregister_matcher,
    available_matchers,
    parse_matcher_spec,
    load,
    load_spec,
)
from .coverage import CoverageMatcher

__all__ = [
    "CloneMatcher",
    "ToolDetections",
    "CoverageMatcher",
    "MATCHERS",
    "register_matcher",
    "unregister_matcher",
    "available_matchers",
    "parse_matcher_spec",
    "load",
    "load_spec",
]
