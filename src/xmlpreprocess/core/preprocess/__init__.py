"""Preprocessing engine: the per-file transformer pipeline and session runner."""
from __future__ import annotations

from .engine import Preprocessor

__all__ = ["Preprocessor"]
