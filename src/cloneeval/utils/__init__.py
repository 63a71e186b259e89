"""Utility helpers for cloneeval."""

from .logging_setup import setup_logging

__all__ = ["setup_logging"]
