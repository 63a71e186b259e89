"""Recall evaluation engine."""

from .decision_cache import DecisionCache
from .engine import ToolEvaluator

__all__ = ["DecisionCache", "ToolEvaluator"]
